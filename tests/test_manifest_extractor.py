"""Tests for manifest extraction from watch-page markup (core layer).

Pure functions only — markup is built by the conftest helpers.
"""

from __future__ import annotations

import pytest

from yt_resolve.core.manifest_extractor import (
    extract_manifest,
    extract_player_url,
    parse_manifest,
    to_int,
)
from yt_resolve.exceptions import ManifestMalformed, ManifestNotFound, ResolutionError

ORIGIN = "https://www.youtube.com"


# ---------------------------------------------------------------------------
# extract_manifest
# ---------------------------------------------------------------------------

class TestExtractManifest:
    def test_details_are_parsed(self, watch_page, player_response) -> None:
        manifest = extract_manifest(watch_page(player_response()))

        details = manifest.details
        assert details.video_id == "abc123"
        assert details.title == "Test Video"
        assert details.author == "Test Channel"
        assert details.keywords == ("alpha", "beta")
        assert details.view_count == 1234
        assert details.length_seconds == 212
        assert details.thumbnail_url == "https://i.example/abc123.jpg"
        assert manifest.playability_status == "OK"

    def test_title_containing_terminator_is_kept_whole(self, watch_page, player_response) -> None:
        page = watch_page(player_response(title="a};b {x} \"q\""))
        manifest = extract_manifest(page)
        assert manifest.details.title == 'a};b {x} "q"'

    def test_missing_marker_raises_not_found(self) -> None:
        with pytest.raises(ManifestNotFound):
            extract_manifest("<html><body>consent required</body></html>")

    def test_invalid_json_raises_malformed(self, watch_page) -> None:
        page = watch_page("{'single': 'quotes'}")
        with pytest.raises(ManifestMalformed, match="parse"):
            extract_manifest(page)

    def test_unbalanced_object_raises_malformed(self) -> None:
        page = "<script>var ytInitialPlayerResponse = {\"a\": {\"b\": 1};"
        with pytest.raises(ManifestMalformed, match="complete"):
            extract_manifest(page)

    def test_non_object_value_raises_malformed(self) -> None:
        with pytest.raises(ManifestMalformed):
            extract_manifest("var ytInitialPlayerResponse = [1, 2];")

    def test_errors_are_resolution_errors(self) -> None:
        assert issubclass(ManifestNotFound, ResolutionError)
        assert issubclass(ManifestMalformed, ResolutionError)

    def test_progressive_and_adaptive_order(self, watch_page, player_response) -> None:
        response = player_response(
            formats=[{"itag": 18, "url": "https://r.example/18"}],
            adaptive=[
                {"itag": 137, "url": "https://r.example/137"},
                {"itag": 140, "url": "https://r.example/140"},
            ],
        )
        manifest = extract_manifest(watch_page(response))

        assert [d.itag for d in manifest.progressive] == [18]
        assert [d.itag for d in manifest.adaptive] == [137, 140]
        assert [d.itag for d in manifest.descriptors] == [18, 137, 140]


# ---------------------------------------------------------------------------
# parse_manifest
# ---------------------------------------------------------------------------

class TestParseManifest:
    def test_empty_object_gives_empty_manifest(self) -> None:
        manifest = parse_manifest({})
        assert manifest.progressive == ()
        assert manifest.adaptive == ()
        assert manifest.details.title == ""
        assert manifest.details.keywords == ()

    def test_descriptor_fields(self) -> None:
        manifest = parse_manifest(
            {
                "streamingData": {
                    "formats": [
                        {
                            "itag": 18,
                            "url": "https://r.example/18",
                            "mimeType": 'video/mp4; codecs="avc1.42001E"',
                            "quality": "medium",
                            "height": 360,
                            "width": 640,
                            "bitrate": "503000",
                        }
                    ]
                }
            }
        )
        (desc,) = manifest.progressive
        assert desc.itag == 18
        assert desc.url == "https://r.example/18"
        assert desc.signature_cipher == ""
        assert desc.mime_type.startswith("video/mp4")
        assert desc.quality == "medium"
        assert (desc.height, desc.width, desc.bitrate) == (360, 640, 503000)

    def test_signature_cipher_is_kept_when_url_missing(self) -> None:
        manifest = parse_manifest(
            {"streamingData": {"adaptiveFormats": [{"itag": 251, "signatureCipher": "s=x&url=y"}]}}
        )
        (desc,) = manifest.adaptive
        assert desc.url == ""
        assert desc.signature_cipher == "s=x&url=y"

    def test_legacy_cipher_key_is_accepted(self) -> None:
        manifest = parse_manifest(
            {"streamingData": {"formats": [{"itag": 22, "cipher": "s=x&url=y"}]}}
        )
        assert manifest.progressive[0].signature_cipher == "s=x&url=y"

    def test_url_wins_over_cipher(self) -> None:
        manifest = parse_manifest(
            {"streamingData": {"formats": [{"itag": 22, "url": "u", "signatureCipher": "c"}]}}
        )
        assert manifest.progressive[0].signature_cipher == ""

    def test_non_dict_entries_are_skipped(self) -> None:
        manifest = parse_manifest(
            {"streamingData": {"formats": ["junk", None, {"itag": 18, "url": "u"}]}}
        )
        assert [d.itag for d in manifest.progressive] == [18]

    def test_playability_reason(self) -> None:
        manifest = parse_manifest(
            {"playabilityStatus": {"status": "LOGIN_REQUIRED", "reason": "Sign in"}}
        )
        assert manifest.playability_status == "LOGIN_REQUIRED"
        assert manifest.playability_reason == "Sign in"


class TestToInt:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("42", 42), (7, 7), (None, 0), ("n/a", 0), (True, 0), ([], 0)],
    )
    def test_conversion(self, value: object, expected: int) -> None:
        assert to_int(value) == expected


# ---------------------------------------------------------------------------
# extract_player_url
# ---------------------------------------------------------------------------

class TestExtractPlayerUrl:
    def test_escaped_path_is_unescaped_and_prefixed(
        self, watch_page, player_response, player_url
    ) -> None:
        page = watch_page(player_response())
        assert extract_player_url(page, ORIGIN) == player_url

    def test_plain_path(self) -> None:
        page = '"jsUrl":"/s/player/xyz/base.js"'
        assert extract_player_url(page, ORIGIN + "/") == ORIGIN + "/s/player/xyz/base.js"

    def test_missing_path_returns_none(self, watch_page, player_response) -> None:
        page = watch_page(player_response(), player_path=None)
        assert extract_player_url(page, ORIGIN) is None

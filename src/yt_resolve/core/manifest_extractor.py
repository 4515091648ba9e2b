"""Extract the embedded player manifest from watch-page markup.

The watch page assigns the player response to a global::

    <script>var ytInitialPlayerResponse = {...};var meta = ...</script>

The object is cut out with the same string-aware brace scanner used for
script fragments — a non-greedy ``{.+?};`` regex stops early as soon as
any title or description contains ``};``.

Guarantees
----------
* Pure functions of their input text — no I/O.
* Informational numeric fields never raise; bad values become ``0``.
"""

from __future__ import annotations

import json
import re
from typing import Any

from yt_resolve.core.fragment_extractor import scan_balanced
from yt_resolve.core.models import Manifest, RawStreamDescriptor, VideoDetails
from yt_resolve.exceptions import (
    FragmentExtractionFailed,
    ManifestMalformed,
    ManifestNotFound,
)

_MARKER_RE = re.compile(r"var\s+ytInitialPlayerResponse\s*=\s*")
_PLAYER_PATH_RE = re.compile(r'"jsUrl"\s*:\s*"(\\?/s\\?/player\\?/[^"]+)"')


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_manifest(markup: str) -> Manifest:
    """Locate and deserialize the player manifest embedded in *markup*.

    Raises
    ------
    ManifestNotFound
        If the page has no ``ytInitialPlayerResponse`` assignment.
    ManifestMalformed
        If the assigned value is not a balanced, valid JSON object.
    """
    marker = _MARKER_RE.search(markup)
    if marker is None:
        raise ManifestNotFound(
            "Could not find the player manifest in the page.",
            hint="The page layout may have changed, or a consent page was served.",
        )

    start = marker.end()
    try:
        end = scan_balanced(markup, start)
    except FragmentExtractionFailed as exc:
        raise ManifestMalformed(f"Player manifest is not a complete object: {exc}") from exc

    try:
        data: Any = json.loads(markup[start:end + 1])
    except json.JSONDecodeError as exc:
        raise ManifestMalformed(f"Failed to parse player manifest: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestMalformed("Player manifest is not a JSON object.")

    return parse_manifest(data)


def extract_player_url(markup: str, origin: str) -> str | None:
    """Return the absolute player script URL, or ``None`` if the page has none."""
    m = _PLAYER_PATH_RE.search(markup)
    if m is None:
        return None
    return origin.rstrip("/") + m.group(1).replace("\\/", "/")


# ---------------------------------------------------------------------------
# Raw-dict → domain-model parsers (pure)
# ---------------------------------------------------------------------------

def parse_manifest(data: dict[str, Any]) -> Manifest:
    """Convert a decoded player response into a :class:`Manifest`."""
    streaming = _as_dict(data.get("streamingData"))
    playability = _as_dict(data.get("playabilityStatus"))
    return Manifest(
        details=_parse_details(_as_dict(data.get("videoDetails"))),
        progressive=_parse_descriptors(streaming.get("formats")),
        adaptive=_parse_descriptors(streaming.get("adaptiveFormats")),
        playability_status=str(playability.get("status") or ""),
        playability_reason=str(playability.get("reason") or ""),
    )


def _parse_details(raw: dict[str, Any]) -> VideoDetails:
    thumbnails = _as_dict(raw.get("thumbnail")).get("thumbnails")
    thumbnail_url = ""
    if isinstance(thumbnails, list) and thumbnails and isinstance(thumbnails[0], dict):
        thumbnail_url = str(thumbnails[0].get("url") or "")

    keywords = raw.get("keywords")
    return VideoDetails(
        video_id=str(raw.get("videoId") or ""),
        title=str(raw.get("title") or ""),
        author=str(raw.get("author") or ""),
        keywords=tuple(str(k) for k in keywords) if isinstance(keywords, list) else (),
        view_count=to_int(raw.get("viewCount")),
        length_seconds=to_int(raw.get("lengthSeconds")),
        thumbnail_url=thumbnail_url,
    )


def _parse_descriptors(raw: object) -> tuple[RawStreamDescriptor, ...]:
    if not isinstance(raw, list):
        return ()
    # Each element is expected to be a dict; skip malformed entries.
    return tuple(_parse_descriptor(entry) for entry in raw if isinstance(entry, dict))


def _parse_descriptor(raw: dict[str, Any]) -> RawStreamDescriptor:
    url = str(raw.get("url") or "")
    cipher = "" if url else str(raw.get("signatureCipher") or raw.get("cipher") or "")
    return RawStreamDescriptor(
        itag=to_int(raw.get("itag")),
        url=url,
        signature_cipher=cipher,
        mime_type=str(raw.get("mimeType") or ""),
        quality=str(raw.get("quality") or ""),
        height=to_int(raw.get("height")),
        width=to_int(raw.get("width")),
        bitrate=to_int(raw.get("bitrate")),
    )


def to_int(value: object) -> int:
    """Convert a manifest number (often a decimal string) or return ``0``."""
    if isinstance(value, bool) or value is None:
        return 0
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return 0


def _as_dict(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}

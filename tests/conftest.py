"""Shared pytest fixtures and configuration for the yt-resolve test suite.

Guidelines
----------
* No internet access in any test — httpx is mocked with respx.
* Player scripts and watch pages are small synthetic documents.
* Core tests must be pure — no side effects.
* Tests must not depend on OS state.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest

PLAYER_PATH = "/s/player/abc123ef/player_ias.vflset/en_US/base.js"

# Descrambles "abcdefgh" into "efgdcba": reverse, drop one, swap 0<->2.
PLAYER_SCRIPT = (
    "var _yt_player={};(function(g){var window=this;\n"
    'var Hq={rv:function(a){a.reverse()},sp:function(a,b){a.splice(0,b)},'
    "sw:function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c}};\n"
    'Xy=function(a){a=a.split("");Hq.rv(a);Hq.sp(a,1);Hq.sw(a,2);return a.join("")};\n'
    'g.Kl=function(a){return a?"}{":"{"};\n'
    "})(_yt_player);\n"
)


@pytest.fixture
def player_script() -> str:
    return PLAYER_SCRIPT


def make_player_response(
    *,
    formats: list[dict[str, Any]] | None = None,
    adaptive: list[dict[str, Any]] | None = None,
    title: str = "Test Video",
    playability: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a minimal ``ytInitialPlayerResponse`` object."""
    data: dict[str, Any] = {
        "playabilityStatus": playability or {"status": "OK"},
        "videoDetails": {
            "videoId": "abc123",
            "title": title,
            "author": "Test Channel",
            "keywords": ["alpha", "beta"],
            "viewCount": "1234",
            "lengthSeconds": "212",
            "thumbnail": {"thumbnails": [{"url": "https://i.example/abc123.jpg"}]},
        },
        "streamingData": {
            "formats": formats if formats is not None else [],
            "adaptiveFormats": adaptive if adaptive is not None else [],
        },
    }
    return data


def make_watch_page(
    response: dict[str, Any] | str,
    *,
    player_path: str | None = PLAYER_PATH,
) -> str:
    """Embed *response* in watch-page markup the way the provider does."""
    body = response if isinstance(response, str) else json.dumps(response)
    parts = [
        "<!DOCTYPE html><html><head><title>watch</title></head><body>",
        f"<script>var ytInitialPlayerResponse = {body};var meta = document.createElement('meta');</script>",
    ]
    if player_path is not None:
        escaped = player_path.replace("/", "\\/")
        parts.append(f'<script>ytcfg.set({{"jsUrl":"{escaped}","hl":"en"}});</script>')
    parts.append("</body></html>")
    return "".join(parts)


@pytest.fixture
def watch_page() -> Callable[..., str]:
    return make_watch_page


@pytest.fixture
def player_response() -> Callable[..., dict[str, Any]]:
    return make_player_response


@pytest.fixture
def player_url() -> str:
    return "https://www.youtube.com" + PLAYER_PATH

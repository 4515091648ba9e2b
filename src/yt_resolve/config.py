"""Runtime configuration for yt-resolve.

Defaults live here as module constants; the CLI layer overrides them
from command-line flags by building a :class:`ResolverConfig`.  Nothing
in this module is mutated at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_USER_AGENT: str = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
"""Browser user-agent sent with every request."""

DEFAULT_REFERER: str = "https://www.youtube.com/"

WATCH_URL: str = "https://www.youtube.com/watch?v="
"""Prefix of the watch page; the video id is appended."""

PLAYER_ORIGIN: str = "https://www.youtube.com"
"""Origin prepended to the relative player script path."""

DEFAULT_TIMEOUT: float = 15.0
"""Per-request network timeout in seconds."""

DEFAULT_EXTENSION_TABLE: tuple[tuple[str, str], ...] = (
    ("3gp", "3gp"),
    ("mp4", "mp4"),
    ("flv", "flv"),
    ("webm", "webm"),
    ("avi", "avi"),
)
"""Ordered ``(mime substring, extension)`` pairs; the first match wins."""

FALLBACK_EXTENSION: str = "avi"


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """Immutable settings shared by the fetcher, resolver and downloader."""

    user_agent: str = DEFAULT_USER_AGENT
    referer: str = DEFAULT_REFERER
    timeout: float = DEFAULT_TIMEOUT
    watch_url: str = WATCH_URL
    player_origin: str = PLAYER_ORIGIN
    extension_table: tuple[tuple[str, str], ...] = field(
        default=DEFAULT_EXTENSION_TABLE,
    )
    fallback_extension: str = FALLBACK_EXTENSION

    def headers(self) -> dict[str, str]:
        """Return the request header profile."""
        return {
            "User-Agent": self.user_agent,
            "Referer": self.referer,
        }

    def watch_page_url(self, video_id: str) -> str:
        return f"{self.watch_url}{video_id}"

"""yt-resolve — turn a video id into directly fetchable stream URLs.

Extracts the player manifest embedded in the watch page and, for
ciphered streams, runs the player's own signature descrambler in an
isolated script sandbox.

Usage::

    import yt_resolve

    metadata = yt_resolve.resolve("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
    fmt = yt_resolve.lookup_by_tag(metadata, 18)
"""

from __future__ import annotations

from yt_resolve.config import ResolverConfig
from yt_resolve.core.models import ResolvedFormat, VideoMetadata
from yt_resolve.core.resolution_service import lookup_by_tag
from yt_resolve.exceptions import (
    DescramblingError,
    FetchError,
    FormatNotFound,
    InvalidVideoIdError,
    ManifestMalformed,
    ManifestNotFound,
    NoUsableFormats,
    ResolutionError,
    YtResolveError,
)
from yt_resolve.version import __version__


def resolve(video_id_or_url: str, *, config: ResolverConfig | None = None) -> VideoMetadata:
    """Resolve *video_id_or_url* with the default httpx fetcher and yt-dlp sandbox."""
    from yt_resolve.core.resolution_service import ResolutionService
    from yt_resolve.infra.http_fetcher import HttpxPageFetcher
    from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

    with HttpxPageFetcher(config) as fetcher:
        service = ResolutionService(fetcher, JsInterpreterSandbox, config)
        return service.resolve(video_id_or_url)


__all__: list[str] = [
    "DescramblingError",
    "FetchError",
    "FormatNotFound",
    "InvalidVideoIdError",
    "ManifestMalformed",
    "ManifestNotFound",
    "NoUsableFormats",
    "ResolutionError",
    "ResolvedFormat",
    "ResolverConfig",
    "VideoMetadata",
    "YtResolveError",
    "__version__",
    "lookup_by_tag",
    "resolve",
]

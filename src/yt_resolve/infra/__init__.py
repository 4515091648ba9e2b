"""Infrastructure layer — external system integration.

This layer wraps all interaction with the network (httpx), the script
interpreter and downloader (yt-dlp) and the filesystem.  Every raw
third-party exception must be caught here and re-raised as a
:class:`~yt_resolve.exceptions.YtResolveError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from yt_resolve.infra.direct_download_provider import DirectDownloadProvider
from yt_resolve.infra.http_fetcher import HttpxPageFetcher
from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox
from yt_resolve.infra.ytdlp_download_provider import YtDlpDownloadProvider

__all__: list[str] = [
    "DirectDownloadProvider",
    "HttpxPageFetcher",
    "JsInterpreterSandbox",
    "YtDlpDownloadProvider",
]

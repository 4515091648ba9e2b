"""Core download service — picks a download path for a resolved format.

Two :class:`~yt_resolve.core.protocols.DownloadProvider` backends are
injected at construction time:

* *direct* streams the resolved URL as-is;
* *delegated* (optional) hands the watch page and itag to yt-dlp.

The delegated path is tried first when requested, and always for
formats whose signature is unresolved; if it fails, the direct path is
the fallback.

Guarantees
----------
* Pure orchestration — no I/O of its own.
* Only :class:`~yt_resolve.exceptions.YtResolveError` subclasses escape.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from yt_resolve.config import ResolverConfig
from yt_resolve.core.models import ResolvedFormat, VideoMetadata
from yt_resolve.core.protocols import DownloadProvider
from yt_resolve.exceptions import DownloadFailedError, YtResolveError

log = structlog.get_logger(__name__)


class DownloadService:
    """Stateless service that drives the download of one format.

    Parameters
    ----------
    direct:
        Backend that downloads a media URL verbatim.
    delegated:
        Optional backend that resolves and downloads by itag itself.
    config:
        Used to build the watch-page URL handed to *delegated*.
    """

    def __init__(
        self,
        direct: DownloadProvider,
        delegated: DownloadProvider | None = None,
        config: ResolverConfig | None = None,
    ) -> None:
        self._direct: DownloadProvider = direct
        self._delegated: DownloadProvider | None = delegated
        self._config: ResolverConfig = config or ResolverConfig()

    @staticmethod
    def default_filename(metadata: VideoMetadata, fmt: ResolvedFormat) -> str:
        """``<video id>.<extension>``"""
        return f"{metadata.id}.{fmt.extension}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def download(
        self,
        metadata: VideoMetadata,
        fmt: ResolvedFormat,
        destination: str | None = None,
        *,
        resume: bool = False,
        use_ytdlp: bool = True,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> str:
        """Download *fmt* and return the written filename.

        Raises
        ------
        DownloadFailedError
            When every attempted backend fails.
        """
        filename = destination or self.default_filename(metadata, fmt)

        if self._delegated is not None and (use_ytdlp or not fmt.is_usable):
            try:
                self._delegated.download(
                    self._config.watch_page_url(metadata.id),
                    filename,
                    format_spec=str(fmt.itag),
                    resume=resume,
                    progress_callback=progress_callback,
                )
                return filename
            except Exception as exc:
                log.warning(
                    "delegated_download_failed",
                    itag=fmt.itag,
                    error=str(exc),
                    fallback="direct",
                )

        try:
            self._direct.download(
                fmt.url,
                filename,
                resume=resume,
                progress_callback=progress_callback,
            )
        except YtResolveError:
            # Already one of ours — propagate unchanged.
            raise
        except Exception as exc:
            raise DownloadFailedError(
                f"Unexpected download error: {exc}",
            ) from exc
        return filename

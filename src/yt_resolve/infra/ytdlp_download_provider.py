"""yt-dlp backed implementation of :class:`~yt_resolve.core.protocols.DownloadProvider`.

Used for streams whose signature could not be descrambled locally, and
by default as the first download attempt: yt-dlp carries its own,
frequently updated descrambler.  All yt-dlp exceptions are caught here
and re-raised as :class:`~yt_resolve.exceptions.DownloadFailedError`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from yt_resolve.exceptions import DownloadFailedError, EnvironmentError


class YtDlpDownloadProvider:
    """Concrete :class:`DownloadProvider` backed by the yt-dlp Python API.

    *url* is the watch-page URL and *format_spec* the itag to fetch.
    """

    @staticmethod
    def _build_opts(
        destination: str,
        format_spec: str | None,
        *,
        resume: bool = False,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> dict[str, Any]:
        """Return yt-dlp options writing exactly *destination*."""
        hooks: list[Callable[[dict[str, Any]], None]] = []
        if progress_callback is not None:
            hooks.append(progress_callback)

        return {
            "format": format_spec or "best",
            "outtmpl": destination,
            "quiet": True,
            "no_warnings": True,
            "no_color": True,
            "continuedl": resume,
            "progress_hooks": hooks,
        }

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def download(
        self,
        url: str,
        destination: str,
        *,
        format_spec: str | None = None,
        resume: bool = False,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        """Download *url* with yt-dlp.

        Raises
        ------
        EnvironmentError
            If yt-dlp is not installed.
        DownloadFailedError
            For any yt-dlp error during the download.
        """
        opts = self._build_opts(
            destination,
            format_spec,
            resume=resume,
            progress_callback=progress_callback,
        )

        try:
            import yt_dlp
            import yt_dlp.utils
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "yt-dlp is not installed. Install with: pip install yt-dlp",
            ) from exc

        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                ydl.download([url])
        except yt_dlp.utils.DownloadError as exc:
            raise DownloadFailedError(
                str(exc),
                hint="Check the URL, your network, or try a different itag.",
            ) from exc
        except Exception as exc:
            raise DownloadFailedError(
                f"Unexpected yt-dlp download error: {exc}",
            ) from exc

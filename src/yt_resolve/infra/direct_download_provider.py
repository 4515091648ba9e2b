"""httpx streaming implementation of :class:`~yt_resolve.core.protocols.DownloadProvider`.

Downloads a resolved stream URL verbatim.  Progress is reported with the
same dict shape as yt-dlp progress hooks (``status``,
``downloaded_bytes``, ``total_bytes``, ``filename``) so one progress
renderer serves both download paths.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import structlog

from yt_resolve.config import ResolverConfig
from yt_resolve.exceptions import DownloadFailedError

log = structlog.get_logger(__name__)

_CHUNK_SIZE = 64 * 1024


class DirectDownloadProvider:
    """Concrete :class:`DownloadProvider` streaming over :class:`httpx.Client`.

    ``format_spec`` is ignored: the URL already identifies the stream.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        *,
        client: httpx.Client | None = None,
        chunk_size: int = _CHUNK_SIZE,
    ) -> None:
        self._config = config or ResolverConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers=self._config.headers(),
            timeout=self._config.timeout,
            follow_redirects=True,
        )
        self._chunk_size = chunk_size

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

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
        """Stream *url* into *destination*.

        Raises
        ------
        DownloadFailedError
            On HTTP 403, a missing ``Content-Length``, any other bad
            status, a transport error or a filesystem error.
        """
        path = Path(destination)
        offset = path.stat().st_size if resume and path.exists() else 0

        try:
            total = self._probe_length(url)
            if offset and offset >= total:
                log.info("download_already_complete", filename=str(path))
                _report(progress_callback, "finished", path, offset, total)
                return
            downloaded = self._stream(url, path, offset, total, progress_callback)
        except httpx.HTTPError as exc:
            raise DownloadFailedError(
                f"Download request failed: {exc}",
                hint="Check your network connection and retry.",
            ) from exc
        except OSError as exc:
            raise DownloadFailedError(f"Cannot write {path}: {exc}") from exc

        _report(progress_callback, "finished", path, downloaded, total)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _probe_length(self, url: str) -> int:
        resp = self._client.head(url, headers=self._config.headers())
        if resp.status_code == 403:
            raise DownloadFailedError(
                "Video forbidden (HTTP 403).",
                hint=(
                    "The stream URL lacks a valid signature or has expired. "
                    "Resolve again, or retry with --use-ytdlp."
                ),
            )
        if resp.status_code >= 400:
            raise DownloadFailedError(f"HEAD {url} failed: status {resp.status_code}")

        size = resp.headers.get("Content-Length")
        if not size or not size.isdigit():
            raise DownloadFailedError("Missing content length.")
        return int(size)

    def _stream(
        self,
        url: str,
        path: Path,
        offset: int,
        total: int,
        progress_callback: Callable[[dict[str, Any]], None] | None,
    ) -> int:
        headers = self._config.headers()
        if offset:
            headers["Range"] = f"bytes={offset}-"

        with self._client.stream("GET", url, headers=headers) as resp:
            if resp.status_code not in (200, 206):
                raise DownloadFailedError(f"GET {url} failed: status {resp.status_code}")
            if offset and resp.status_code == 200:
                # Server ignored the range; start over.
                log.info("range_not_supported", filename=str(path))
                offset = 0

            downloaded = offset
            with path.open("ab" if offset else "wb") as out:
                for chunk in resp.iter_bytes(self._chunk_size):
                    out.write(chunk)
                    downloaded += len(chunk)
                    _report(progress_callback, "downloading", path, downloaded, total)
        return downloaded


def _report(
    callback: Callable[[dict[str, Any]], None] | None,
    status: str,
    path: Path,
    downloaded: int,
    total: int,
) -> None:
    if callback is None:
        return
    callback(
        {
            "status": status,
            "downloaded_bytes": downloaded,
            "total_bytes": total,
            "filename": str(path),
        }
    )

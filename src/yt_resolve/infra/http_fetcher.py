"""httpx backed implementation of :class:`~yt_resolve.core.protocols.PageFetcher`.

Every request carries the browser header profile from
:class:`~yt_resolve.config.ResolverConfig`.  httpx exceptions and
non-200 responses are re-raised as :class:`~yt_resolve.exceptions.FetchError`
so nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

import httpx
import structlog

from yt_resolve.config import ResolverConfig
from yt_resolve.exceptions import FetchError

log = structlog.get_logger(__name__)


class HttpxPageFetcher:
    """Concrete :class:`PageFetcher` using a synchronous :class:`httpx.Client`.

    Usage::

        with HttpxPageFetcher() as fetcher:
            html = fetcher.fetch_text("https://www.youtube.com/watch?v=...")

    A caller-supplied *client* is used as-is and never closed here.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config or ResolverConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers=self._config.headers(),
            timeout=self._config.timeout,
            follow_redirects=True,
        )

    def __enter__(self) -> HttpxPageFetcher:
        return self

    def __exit__(self, *_args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def fetch_text(self, url: str) -> str:
        """GET *url* and return its decoded body.

        Raises
        ------
        FetchError
            On transport errors and on any status other than 200.
        """
        try:
            resp = self._client.get(url, headers=self._config.headers())
        except httpx.HTTPError as exc:
            log.warning("fetch_failed", url=url, error=str(exc))
            raise FetchError(
                f"Request to {url} failed: {exc}",
                hint="Check your network connection and retry.",
            ) from exc

        if resp.status_code != 200:
            log.warning("fetch_bad_status", url=url, status=resp.status_code)
            raise FetchError(
                f"Fetching {url} failed: status {resp.status_code}",
                status_code=resp.status_code,
                hint=_status_hint(resp.status_code),
            )

        log.debug("fetched", url=url, size=len(resp.content))
        return resp.text


def _status_hint(status: int) -> str | None:
    if status == 403:
        return "The provider refused the request; it may be blocking this client."
    if status == 429:
        return "Too many requests; wait a while before retrying."
    return None

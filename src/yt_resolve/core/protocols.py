"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol


class PageFetcher(Protocol):
    """Contract for the HTTP collaborator that retrieves pages and scripts."""

    def fetch_text(self, url: str) -> str:
        """Return the decoded body of *url*.

        Raises
        ------
        FetchError
            On transport failure or any non-200 status (403 included).
        """
        ...  # pragma: no cover


class ScriptSandbox(Protocol):
    """Narrow capability interface over an isolated script engine.

    The engine only ever evaluates small, self-contained definitions and
    calls one function with one string argument.  It must not expose
    network, filesystem or any other host capability.
    """

    def evaluate(self, source: str) -> None:
        """Load *source* (one definition) into this sandbox.

        Raises
        ------
        SandboxLoadError
            If the source does not parse or execute in isolation.
        """
        ...  # pragma: no cover

    def call(self, function_name: str, argument: str) -> object:
        """Invoke *function_name* with *argument* and return its result.

        Raises
        ------
        SandboxInvocationError
            If the call itself throws.
        """
        ...  # pragma: no cover


SandboxFactory = Callable[[], ScriptSandbox]
"""Creates a fresh, disconnected sandbox for every descrambling attempt."""


class DownloadProvider(Protocol):
    """Contract for download backends.

    Implementations wrap the actual transfer mechanics (a direct HTTP
    stream or yt-dlp) and must map all backend-specific exceptions to
    :class:`~yt_resolve.exceptions.YtResolveError` subclasses.
    """

    def download(
        self,
        url: str,
        destination: str,
        *,
        format_spec: str | None = None,
        resume: bool = False,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        """Transfer *url* into *destination*.

        Parameters
        ----------
        url:
            A media URL (direct download) or the watch-page URL (yt-dlp).
        destination:
            Output filename.
        format_spec:
            Backend-specific stream selector (the itag for yt-dlp).
            Ignored by backends that download *url* verbatim.
        resume:
            Append to an existing partial file instead of truncating it.
        progress_callback:
            Optional callable invoked with yt-dlp–shaped progress dicts.

        Raises
        ------
        DownloadFailedError
            When the download fails for any reason.
        """
        ...  # pragma: no cover

"""Custom exception hierarchy for yt-resolve.

All exceptions that cross layer boundaries must inherit from
:class:`YtResolveError`.  Raw third-party exceptions (httpx, yt-dlp)
must NEVER propagate beyond the infrastructure layer — they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
YtResolveError
├── InvalidVideoIdError
├── ResolutionError
│   ├── FetchError
│   ├── ManifestNotFound
│   ├── ManifestMalformed
│   ├── DescramblingError
│   │   ├── DescramblerNotFound
│   │   ├── FragmentExtractionFailed
│   │   ├── SandboxLoadError
│   │   └── SandboxInvocationError
│   └── NoUsableFormats
├── FormatNotFound
├── FormatSelectionError
├── DownloadFailedError
└── EnvironmentError

Descrambling errors are *per stream*: the URL resolver absorbs them and
marks the affected format as unresolved.  Everything else under
:class:`ResolutionError` is fatal for the resolution that raised it.
"""

from __future__ import annotations


class YtResolveError(Exception):
    """Base exception for all yt-resolve errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Input validation ------------------------------------------------------

class InvalidVideoIdError(YtResolveError):
    """Raised when no video identifier can be derived from the input."""


# --- Resolution ------------------------------------------------------------

class ResolutionError(YtResolveError):
    """Base class for failures of the resolve pipeline."""


class FetchError(ResolutionError):
    """Raised when a page or script fetch fails (network or HTTP status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code: int | None = status_code
        """HTTP status of the failed response, ``None`` for transport errors."""


class ManifestNotFound(ResolutionError):
    """Raised when the page carries no embedded player manifest."""


class ManifestMalformed(ResolutionError):
    """Raised when the embedded manifest is not valid structured data."""


class NoUsableFormats(ResolutionError):
    """Raised when not a single stream descriptor yields a URL."""


# --- Signature descrambling ------------------------------------------------

class DescramblingError(ResolutionError):
    """Base class for failures local to one signature descrambling attempt."""


class DescramblerNotFound(DescramblingError):
    """Raised when no known matcher finds the descrambling function."""


class FragmentExtractionFailed(DescramblingError):
    """Raised when a definition cannot be cut out of the player script."""


class SandboxLoadError(DescramblingError):
    """Raised when a fragment fails to load in the script sandbox."""


class SandboxInvocationError(DescramblingError):
    """Raised when calling the descrambler throws or returns a non-string."""


# --- Format handling -------------------------------------------------------

class FormatNotFound(YtResolveError):
    """Raised when no resolved format carries the requested itag."""


class FormatSelectionError(YtResolveError):
    """Raised when the user does not pick a format."""


# --- Download --------------------------------------------------------------

class DownloadFailedError(YtResolveError):
    """Raised when the download process terminates with an error."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(YtResolveError):
    """Raised when a required runtime dependency is not available."""


def append_upgrade_suggestion(hint: str) -> str:
    """Append upgrade guidance to an existing hint text.

    The player script changes shape between provider releases, so most
    descrambling problems are fixed by a newer release.  The suggestion is
    appended only once and preserves the original hint verbatim.
    """
    marker = "Also try updating:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    pip install --upgrade yt-resolve yt-dlp",
        )
    )

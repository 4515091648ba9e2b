"""Domain models for yt-resolve.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  The resolve pipeline is a pure transform
from page bytes to these structures; nothing is shared or mutated after
construction.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Manifest (as parsed from the watch page)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RawStreamDescriptor:
    """One stream entry exactly as the manifest describes it.

    At most one of :attr:`url` and :attr:`signature_cipher` is non-empty.
    """

    itag: int
    """Stream identifier, unique within one manifest."""

    url: str
    """Direct playback URL, or ``""`` when the stream is ciphered."""

    signature_cipher: str
    """URL-encoded ``url``/``s``/``sp`` parameter string, or ``""``."""

    mime_type: str
    """MIME-type-like string (e.g. ``video/mp4; codecs="avc1.42001E"``)."""

    quality: str = ""
    """Explicit quality label, or ``""`` when absent."""

    height: int = 0
    """Vertical resolution in pixels, ``0`` when unknown."""

    width: int = 0

    bitrate: int = 0


@dataclass(frozen=True, slots=True)
class VideoDetails:
    """Informational metadata block of the manifest."""

    video_id: str
    title: str
    author: str
    keywords: tuple[str, ...]
    view_count: int
    length_seconds: int
    thumbnail_url: str


@dataclass(frozen=True, slots=True)
class Manifest:
    """Typed view of the embedded player response."""

    details: VideoDetails
    progressive: tuple[RawStreamDescriptor, ...]
    adaptive: tuple[RawStreamDescriptor, ...]
    playability_status: str = ""
    """``playabilityStatus.status`` (``"OK"``, ``"ERROR"``, ...), if present."""

    playability_reason: str = ""

    @property
    def descriptors(self) -> Iterator[RawStreamDescriptor]:
        """Yield progressive descriptors first, then adaptive ones."""
        yield from self.progressive
        yield from self.adaptive


# ---------------------------------------------------------------------------
# Resolution results
# ---------------------------------------------------------------------------

class SignatureState(enum.Enum):
    """How the URL of a :class:`ResolvedFormat` was obtained."""

    DIRECT = "direct"
    """No signature was required; the URL came straight from the manifest."""

    DECIPHERED = "deciphered"
    """The scrambled signature was recovered and appended."""

    UNRESOLVED = "unresolved"
    """Descrambling failed; the URL lacks its signature and will be refused."""


@dataclass(frozen=True, slots=True)
class ResolvedFormat:
    """A stream with a request-ready URL."""

    itag: int

    url: str
    """Absolute URL — never empty."""

    mime_type: str

    quality: str
    """Explicit label, ``"{height}p"``, or ``"unknown"``."""

    extension: str
    """Container extension chosen from the configured extension table."""

    signature_state: SignatureState = SignatureState.DIRECT

    @property
    def is_usable(self) -> bool:
        """``False`` when the URL is known to lack its signature."""
        return self.signature_state is not SignatureState.UNRESOLVED


@dataclass(frozen=True, slots=True)
class VideoMetadata:
    """Top-level result of one resolution.

    A successfully returned instance always carries at least one format.
    """

    id: str
    title: str
    author: str
    keywords: str
    """Keyword list rendered as a single descriptive string."""

    view_count: int
    length_seconds: int
    thumbnail_url: str
    formats: tuple[ResolvedFormat, ...]
    """Progressive formats first, then adaptive, manifest order within each."""

    def __len__(self) -> int:
        return len(self.formats)


# ---------------------------------------------------------------------------
# Descrambling (transient)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CipherRecipe:
    """Everything needed to run the descrambler of one player script.

    Built from a single script bundle and never reused for another one —
    the provider rotates bundles and their function names.
    """

    function_name: str
    helper_name: str | None
    function_source: str
    helper_source: str = ""

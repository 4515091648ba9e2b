"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* Script execution only through the injected sandbox protocol.
"""

from yt_resolve.core.download_service import DownloadService
from yt_resolve.core.models import (
    CipherRecipe,
    Manifest,
    RawStreamDescriptor,
    ResolvedFormat,
    SignatureState,
    VideoDetails,
    VideoMetadata,
)
from yt_resolve.core.protocols import (
    DownloadProvider,
    PageFetcher,
    SandboxFactory,
    ScriptSandbox,
)
from yt_resolve.core.resolution_service import (
    ResolutionService,
    lookup_by_tag,
    normalize_video_id,
)
from yt_resolve.core.url_resolver import UrlResolver

__all__: list[str] = [
    "CipherRecipe",
    "DownloadProvider",
    "DownloadService",
    "Manifest",
    "PageFetcher",
    "RawStreamDescriptor",
    "ResolutionService",
    "ResolvedFormat",
    "SandboxFactory",
    "ScriptSandbox",
    "SignatureState",
    "UrlResolver",
    "VideoDetails",
    "VideoMetadata",
    "lookup_by_tag",
    "normalize_video_id",
]

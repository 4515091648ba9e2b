"""Core resolution service — from a video id to typed, resolved formats.

This is the central service consumed by the CLI layer and by library
callers.  Network access and script execution are injected as a
:class:`~yt_resolve.core.protocols.PageFetcher` and a
:class:`~yt_resolve.core.protocols.SandboxFactory`, keeping the core free
of any external-system imports.

Pipeline
--------
1. Normalize the input to a bare video id.
2. Fetch the watch page and extract the manifest (fatal on failure).
3. Fetch the player script once (best-effort; absence disables
   descrambling for this resolution only).
4. Resolve every descriptor, progressive first, dropping URL-less ones.
5. Fail with :class:`NoUsableFormats` if nothing survived.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import structlog

from yt_resolve.config import ResolverConfig
from yt_resolve.core.manifest_extractor import extract_manifest, extract_player_url
from yt_resolve.core.models import Manifest, ResolvedFormat, VideoMetadata
from yt_resolve.core.protocols import PageFetcher, SandboxFactory
from yt_resolve.core.url_resolver import UrlResolver
from yt_resolve.exceptions import (
    FetchError,
    FormatNotFound,
    InvalidVideoIdError,
    NoUsableFormats,
    append_upgrade_suggestion,
)

log = structlog.get_logger(__name__)

_SHORT_LINK_HOSTS = frozenset({"youtu.be", "www.youtu.be"})


# ---------------------------------------------------------------------------
# Input normalization
# ---------------------------------------------------------------------------

def normalize_video_id(video_id_or_url: str) -> str:
    """Return the bare video id for an id, a watch URL or a short link.

    Raises
    ------
    InvalidVideoIdError
        If the input is empty or a URL carries no id.
    """
    stripped = video_id_or_url.strip()
    if not stripped:
        raise InvalidVideoIdError("Video id or URL must not be empty.")

    if "://" not in stripped and "/" not in stripped:
        return stripped

    parsed = urlparse(stripped if "://" in stripped else f"https://{stripped}")
    if parsed.hostname in _SHORT_LINK_HOSTS:
        candidate = parsed.path.strip("/").split("/", 1)[0]
    else:
        candidate = parse_qs(parsed.query).get("v", [""])[0]

    if not candidate:
        raise InvalidVideoIdError(
            f"No video id found in {stripped!r}.",
            hint="Pass a bare id or a URL like https://www.youtube.com/watch?v=<id>",
        )
    return candidate


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def lookup_by_tag(metadata: VideoMetadata, tag: int) -> ResolvedFormat:
    """Return the format of *metadata* whose itag is *tag*.

    Raises
    ------
    FormatNotFound
        If no format carries *tag*.
    """
    for fmt in metadata.formats:
        if fmt.itag == tag:
            return fmt
    available = ", ".join(str(fmt.itag) for fmt in metadata.formats)
    raise FormatNotFound(
        f"Unknown itag: {tag}",
        hint=f"Available itags: {available}",
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ResolutionService:
    """Stateless service that resolves videos into :class:`VideoMetadata`.

    Parameters
    ----------
    fetcher:
        Any object satisfying the :class:`PageFetcher` protocol.
    sandbox_factory:
        Creates a fresh :class:`ScriptSandbox` per descrambling attempt.
    config:
        URL templates and the extension table.

    Each :meth:`resolve` call allocates its own :class:`UrlResolver`, so
    one service may resolve several videos concurrently.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        sandbox_factory: SandboxFactory,
        config: ResolverConfig | None = None,
    ) -> None:
        self._fetcher: PageFetcher = fetcher
        self._sandbox_factory: SandboxFactory = sandbox_factory
        self._config: ResolverConfig = config or ResolverConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, video_id_or_url: str) -> VideoMetadata:
        """Resolve a video id or watch URL.

        Raises
        ------
        InvalidVideoIdError
            If no id can be derived from the input.
        FetchError
            If the watch page cannot be fetched.
        ManifestNotFound, ManifestMalformed
            If the page carries no usable manifest.
        NoUsableFormats
            If not a single stream yields a URL.
        """
        video_id = normalize_video_id(video_id_or_url)
        log.info("resolve_started", video_id=video_id)

        markup = self._fetcher.fetch_text(self._config.watch_page_url(video_id))
        manifest = extract_manifest(markup)

        resolver = UrlResolver(
            self._load_player_script(markup),
            self._sandbox_factory,
            extension_table=self._config.extension_table,
            fallback_extension=self._config.fallback_extension,
        )
        formats = tuple(
            fmt
            for fmt in map(resolver.resolve, manifest.descriptors)
            if fmt is not None
        )

        if not formats:
            raise NoUsableFormats(
                f"No formats available for video {video_id}.",
                hint=self._no_formats_hint(manifest),
            )

        log.info(
            "resolve_finished",
            video_id=video_id,
            formats=len(formats),
            unresolved=sum(1 for fmt in formats if not fmt.is_usable),
        )
        return self._build_metadata(video_id, manifest, formats)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load_player_script(self, markup: str) -> str | None:
        """Fetch the player script, or return ``None`` to skip descrambling."""
        player_url = extract_player_url(markup, self._config.player_origin)
        if player_url is None:
            log.warning("player_url_not_found")
            return None
        try:
            return self._fetcher.fetch_text(player_url)
        except FetchError as exc:
            log.warning(
                "player_script_unavailable",
                url=player_url,
                status=exc.status_code,
                error=str(exc),
            )
            return None

    @staticmethod
    def _no_formats_hint(manifest: Manifest) -> str:
        if manifest.playability_reason:
            return f"The provider reports: {manifest.playability_reason}"
        return append_upgrade_suggestion(
            "The video may be private, live, or region-restricted.",
        )

    @staticmethod
    def _build_metadata(
        video_id: str,
        manifest: Manifest,
        formats: tuple[ResolvedFormat, ...],
    ) -> VideoMetadata:
        details = manifest.details
        return VideoMetadata(
            id=video_id,
            title=details.title,
            author=details.author,
            keywords=", ".join(details.keywords),
            view_count=details.view_count,
            length_seconds=details.length_seconds,
            thumbnail_url=details.thumbnail_url,
            formats=formats,
        )

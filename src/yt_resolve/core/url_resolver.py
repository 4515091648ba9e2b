"""Turn raw stream descriptors into request-ready formats.

A descriptor either carries a direct ``url`` or a ``signatureCipher``
query string such as::

    url=https%3A%2F%2Fr1.example%2Fvideoplayback%3F...&s=AOq0QJ8w...&sp=sig

When ``s`` is present the URL is only valid once the descrambled
signature is appended under the ``sp`` parameter name.  Descrambling is
best-effort: any failure leaves the stream with its undecrypted base URL
and :attr:`SignatureState.UNRESOLVED` rather than aborting the manifest.
"""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import parse_qs, quote_plus

import structlog

from yt_resolve.config import DEFAULT_EXTENSION_TABLE, FALLBACK_EXTENSION
from yt_resolve.core.fragment_extractor import build_recipe
from yt_resolve.core.models import (
    CipherRecipe,
    RawStreamDescriptor,
    ResolvedFormat,
    SignatureState,
)
from yt_resolve.core.protocols import SandboxFactory
from yt_resolve.core.sandbox_runner import run_recipe
from yt_resolve.exceptions import DescramblingError

log = structlog.get_logger(__name__)

DEFAULT_SIGNATURE_PARAM = "signature"


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def quality_label(descriptor: RawStreamDescriptor) -> str:
    """Explicit quality, else ``"{height}p"``, else ``"unknown"``."""
    if descriptor.quality:
        return descriptor.quality
    if descriptor.height > 0:
        return f"{descriptor.height}p"
    return "unknown"


def classify_extension(
    mime_type: str,
    table: Sequence[tuple[str, str]] = DEFAULT_EXTENSION_TABLE,
    fallback: str = FALLBACK_EXTENSION,
) -> str:
    """Map *mime_type* to an extension; the first matching table row wins."""
    for tag, extension in table:
        if tag in mime_type:
            return extension
    return fallback


def append_signature(base_url: str, param: str, signature: str) -> str:
    """Append ``param=signature`` (query-escaped) to *base_url*."""
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{param}={quote_plus(signature)}"


def parse_cipher(cipher: str) -> dict[str, str]:
    """Decode a signature-cipher string into its first value per key."""
    return {key: values[0] for key, values in parse_qs(cipher).items() if values}


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class UrlResolver:
    """Resolves the descriptors of one manifest against one player script.

    Parameters
    ----------
    script:
        Player script text, or ``None`` when it could not be obtained —
        ciphered streams then keep their base URL.
    sandbox_factory:
        Creates an isolated script sandbox per descrambling attempt.
    extension_table, fallback_extension:
        Container classification, see :func:`classify_extension`.

    The descrambler is located once per resolver (i.e. per script
    bundle); fragment execution repeats for every stream.
    """

    def __init__(
        self,
        script: str | None,
        sandbox_factory: SandboxFactory,
        *,
        extension_table: Sequence[tuple[str, str]] = DEFAULT_EXTENSION_TABLE,
        fallback_extension: str = FALLBACK_EXTENSION,
    ) -> None:
        self._script = script
        self._sandbox_factory = sandbox_factory
        self._extension_table = tuple(extension_table)
        self._fallback_extension = fallback_extension
        self._recipe: CipherRecipe | None = None
        self._recipe_error: DescramblingError | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, descriptor: RawStreamDescriptor) -> ResolvedFormat | None:
        """Return a :class:`ResolvedFormat`, or ``None`` if there is no URL at all."""
        url = descriptor.url
        state = SignatureState.DIRECT

        if not url and descriptor.signature_cipher:
            url, state = self._resolve_cipher(descriptor)

        if not url:
            log.debug("format_skipped", itag=descriptor.itag, reason="no url")
            return None

        return ResolvedFormat(
            itag=descriptor.itag,
            url=url,
            mime_type=descriptor.mime_type,
            quality=quality_label(descriptor),
            extension=classify_extension(
                descriptor.mime_type,
                self._extension_table,
                self._fallback_extension,
            ),
            signature_state=state,
        )

    def decipher(self, signature: str) -> str:
        """Run the player's descrambler on *signature*.

        Raises
        ------
        DescramblingError
            Any subclass — the player script is missing, the descrambler
            cannot be found or extracted, or the sandbox fails.
        """
        recipe = self._get_recipe()
        return run_recipe(recipe, signature, self._sandbox_factory)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_cipher(
        self,
        descriptor: RawStreamDescriptor,
    ) -> tuple[str, SignatureState]:
        params = parse_cipher(descriptor.signature_cipher)
        base_url = params.get("url", "")
        signature = params.get("s", "")

        if not base_url or not signature:
            return base_url, SignatureState.DIRECT

        try:
            plain = self.decipher(signature)
        except DescramblingError as exc:
            log.warning(
                "signature_unresolved",
                itag=descriptor.itag,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return base_url, SignatureState.UNRESOLVED

        param = params.get("sp") or DEFAULT_SIGNATURE_PARAM
        return append_signature(base_url, param, plain), SignatureState.DECIPHERED

    def _get_recipe(self) -> CipherRecipe:
        if self._recipe is not None:
            return self._recipe
        # A script that failed once fails the same way for every stream.
        if self._recipe_error is not None:
            raise self._recipe_error
        if self._script is None:
            self._recipe_error = DescramblingError("No player script available.")
            raise self._recipe_error

        try:
            self._recipe = build_recipe(self._script)
        except DescramblingError as exc:
            self._recipe_error = exc
            raise
        return self._recipe

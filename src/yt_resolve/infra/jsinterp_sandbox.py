"""yt-dlp backed implementation of :class:`~yt_resolve.core.protocols.ScriptSandbox`.

``yt_dlp.jsinterp.JSInterpreter`` is a small pure-Python interpreter for
the subset of JavaScript used by player descramblers.  It has no access
to the network, the filesystem or the host process; it can only
compute on strings, numbers and arrays, which is exactly the capability
the descrambler needs.

This module is the **only** place in the codebase that imports the
interpreter.  All of its exceptions are re-raised as
:class:`~yt_resolve.exceptions.SandboxLoadError` or
:class:`~yt_resolve.exceptions.SandboxInvocationError`.
"""

from __future__ import annotations

import re
from typing import Any

from yt_resolve.exceptions import (
    EnvironmentError,
    SandboxInvocationError,
    SandboxLoadError,
)

# ``var Xy=function(a){...};`` or ``var Hq={...};`` (``var`` optional).
_DECLARATION_RE = re.compile(
    r"\s*(?:var\s+)?(?P<name>[a-zA-Z_$][\w$]*)\s*=\s*(?P<kind>function\b|\{)"
)


def _load_interpreter_class() -> type[Any]:
    """Return ``yt_dlp.jsinterp.JSInterpreter`` or raise ``EnvironmentError``."""
    try:
        from yt_dlp.jsinterp import JSInterpreter
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "yt-dlp is not installed. Install with: pip install yt-dlp",
        ) from exc
    return JSInterpreter


class JsInterpreterSandbox:
    """One isolated script context; create a new instance per attempt.

    The class itself satisfies
    :data:`~yt_resolve.core.protocols.SandboxFactory`::

        run_recipe(recipe, signature, JsInterpreterSandbox)
    """

    def __init__(self) -> None:
        self._interpreter_class = _load_interpreter_class()
        self._sources: list[str] = []
        self._interpreter: Any = None

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def evaluate(self, source: str) -> None:
        """Load one declaration and verify it parses on its own terms.

        Objects are fully materialised; functions are parsed up to their
        body, which runs on :meth:`call`.
        """
        m = _DECLARATION_RE.match(source)
        if m is None:
            raise SandboxLoadError("Fragment is not a variable declaration.")

        code = "\n".join((*self._sources, source))
        try:
            interpreter = self._interpreter_class(code)
            if m.group("kind") == "{":
                interpreter.extract_object(m.group("name"))
            else:
                interpreter.extract_function(m.group("name"))
        except Exception as exc:
            raise SandboxLoadError(
                f"Failed to load {m.group('name')}: {exc}",
            ) from exc

        self._sources.append(source)
        self._interpreter = interpreter

    def call(self, function_name: str, argument: str) -> object:
        """Call *function_name* with *argument* bound as a JS string."""
        if self._interpreter is None:
            raise SandboxInvocationError("Nothing has been loaded into the sandbox.")
        try:
            return self._interpreter.call_function(function_name, argument)
        except Exception as exc:
            raise SandboxInvocationError(
                f"{function_name}() raised: {exc}",
            ) from exc

"""Run an extracted descrambler recipe inside a fresh script sandbox.

The engine behind :class:`~yt_resolve.core.protocols.ScriptSandbox` is
injected as a factory, so this module never imports a script engine.
Every call creates its own sandbox: no state survives between
descrambling attempts.
"""

from __future__ import annotations

from yt_resolve.core.models import CipherRecipe
from yt_resolve.core.protocols import SandboxFactory
from yt_resolve.exceptions import (
    DescramblingError,
    SandboxInvocationError,
    SandboxLoadError,
    YtResolveError,
)


def run_recipe(
    recipe: CipherRecipe,
    signature: str,
    sandbox_factory: SandboxFactory,
) -> str:
    """Descramble *signature* with *recipe* and return the true signature.

    The helper object (if any) is loaded before the function that uses it.

    Raises
    ------
    SandboxLoadError
        If the sandbox cannot be created, or a fragment fails to load in
        isolation.
    SandboxInvocationError
        If the call throws or returns anything but a string.
    """
    try:
        sandbox = sandbox_factory()
    except DescramblingError:
        raise
    except Exception as exc:
        hint = exc.hint if isinstance(exc, YtResolveError) else None
        raise SandboxLoadError(
            f"Could not create the script sandbox: {exc}",
            hint=hint,
        ) from exc

    sources = [recipe.helper_source, recipe.function_source]
    for source in filter(None, sources):
        try:
            sandbox.evaluate(source)
        except DescramblingError:
            raise
        except Exception as exc:
            raise SandboxLoadError(f"Failed to load script fragment: {exc}") from exc

    try:
        result = sandbox.call(recipe.function_name, signature)
    except DescramblingError:
        raise
    except Exception as exc:
        raise SandboxInvocationError(
            f"Calling {recipe.function_name} failed: {exc}",
        ) from exc

    if not isinstance(result, str):
        raise SandboxInvocationError(
            f"{recipe.function_name} returned {type(result).__name__}, expected a string.",
        )
    return result

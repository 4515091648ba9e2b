"""CLI console helpers with optional Rich support.

Optional UI dependencies are imported lazily so bootstrap paths
(``--help``, ``--version``, ``doctor``) keep working when Rich is not
installed.  All user-facing output goes to stderr; stdout is reserved
for machine-readable output (``--print-url``).
"""

from __future__ import annotations

import re
import sys
from typing import Any

from yt_resolve.exceptions import EnvironmentError, YtResolveError

_MARKUP_RE = re.compile(r"\[/?[a-z ]+\]")


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console instance targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


def strip_markup(text: str) -> str:
    """Drop simple Rich markup tags such as ``[bold red]`` / ``[/bold red]``."""
    return _MARKUP_RE.sub("", text)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with a plain-text fallback."""

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain stderr print."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(
                *(strip_markup(o) if isinstance(o, str) else o for o in objects),
                file=sys.stderr,
            )
            return
        rich_console.print(*objects)

    def print_error(self, exc: YtResolveError) -> None:
        """Render a typed error and its hint."""
        self.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            self.print(f"[yellow]Hint:[/yellow] {exc.hint}")


console = _ConsoleProxy()

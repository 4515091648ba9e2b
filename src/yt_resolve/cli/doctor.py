"""``yt-resolve doctor`` — environment diagnostics command.

Checks that the interpreter and the libraries the resolver depends on
(yt-dlp for its script interpreter, httpx for fetching) are present,
and renders the result as a Rich table, or as plain text when Rich
itself is missing.
"""

from __future__ import annotations

import importlib
import platform
import sys

from yt_resolve.cli import exit_codes
from yt_resolve.cli.console import console
from yt_resolve.version import __version__

Check = tuple[str, str, str]

_OK = "[green]OK[/green]"
_FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = _OK if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _ytdlp_version_check() -> Check:
    """Return (label, value, status) for the yt-dlp version row."""
    try:
        from yt_dlp.version import __version__ as ydl_ver

        return "yt-dlp", ydl_ver, _OK
    except ImportError:
        pass

    # yt-dlp installed but version submodule unavailable.
    try:
        import yt_dlp  # noqa: F401

        return "yt-dlp", "unknown", _OK
    except ImportError:
        return "yt-dlp", "NOT INSTALLED", _FAIL


def _interpreter_check() -> Check:
    """Return (label, value, status) for the script interpreter row."""
    try:
        module = importlib.import_module("yt_dlp.jsinterp")
    except ImportError:
        return "sandbox", "yt_dlp.jsinterp missing", _FAIL
    if not hasattr(module, "JSInterpreter"):
        return "sandbox", "JSInterpreter missing", _FAIL
    return "sandbox", "yt_dlp.jsinterp", _OK


def _httpx_check() -> Check:
    """Return (label, value, status) for the httpx row."""
    try:
        import httpx
    except ImportError:
        return "httpx", "NOT INSTALLED", _FAIL
    return "httpx", getattr(httpx, "__version__", "unknown"), _OK


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, _OK


def collect_checks() -> list[Check]:
    """Run every diagnostic collector, in display order."""
    return [
        ("yt-resolve", __version__, _OK),
        _python_version_check(),
        _ytdlp_version_check(),
        _interpreter_check(),
        _httpx_check(),
        _os_check(),
    ]


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    if "FAIL" in status:
        return "FAIL"
    if "OK" in status:
        return "OK"
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\nyt-resolve doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<32} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all checks pass,
        :data:`exit_codes.GENERAL_ERROR` if any check fails.
    """
    checks = collect_checks()
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
        print("Some checks failed." if has_failure else "All checks passed.", file=sys.stderr)
        return exit_codes.GENERAL_ERROR if has_failure else exit_codes.SUCCESS

    table = Table(
        title="yt-resolve doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        console.print("[dim]Install the missing pieces with: pip install --upgrade yt-resolve[/dim]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS

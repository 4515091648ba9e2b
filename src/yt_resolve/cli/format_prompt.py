"""Format listing and interactive format selection for the CLI layer.

* :func:`display_formats` renders the resolved formats as a Rich table.
* :func:`prompt_format_selection` lets the user pick one with
  questionary arrow keys and returns its itag.

Display only — resolution and downloading happen elsewhere.
"""

from __future__ import annotations

from typing import Any

from yt_resolve.cli.console import console
from yt_resolve.core.models import ResolvedFormat, SignatureState, VideoMetadata
from yt_resolve.exceptions import EnvironmentError, FormatSelectionError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for format rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms, no I/O)
# ---------------------------------------------------------------------------

_STATE_MARKUP: dict[SignatureState, str] = {
    SignatureState.DIRECT: "[green]direct[/green]",
    SignatureState.DECIPHERED: "[cyan]deciphered[/cyan]",
    SignatureState.UNRESOLVED: "[red]unresolved[/red]",
}


def _format_length(seconds: int) -> str:
    """Render a duration as ``"1h 02m 03s"``, ``"4m 05s"`` or ``"Unknown"``."""
    if seconds <= 0:
        return "Unknown"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    return f"{minutes}m {secs:02d}s"


def _format_views(count: int) -> str:
    return f"{count:,}"


def _media_type(mime_type: str) -> str:
    """``video/mp4; codecs="..."`` → ``video/mp4``."""
    return mime_type.split(";", 1)[0].strip() or "unknown"


def _build_choice_label(index: int, fmt: ResolvedFormat) -> str:
    """Build the single-line label shown in the questionary selector.

    Format: ``"  1.  itag 18    360p       video/mp4    mp4"``
    """
    label = (
        f"  {index + 1}.  itag {fmt.itag:<5} {fmt.quality:<10} "
        f"{_media_type(fmt.mime_type):<12} {fmt.extension}"
    )
    if not fmt.is_usable:
        label += "   (signature unresolved)"
    return label


# ---------------------------------------------------------------------------
# Rich table display
# ---------------------------------------------------------------------------

def display_formats(metadata: VideoMetadata) -> None:
    """Print the video summary and a table of its resolved formats."""
    table_class = _import_rich_table()

    console.print()
    console.print(f"[bold cyan]Video:[/bold cyan]  {metadata.id}")
    console.print(f"[bold cyan]Title:[/bold cyan]  {metadata.title}")
    console.print(f"[bold cyan]Author:[/bold cyan] {metadata.author}")
    console.print(f"[bold cyan]Length:[/bold cyan] {_format_length(metadata.length_seconds)}")
    console.print(f"[bold cyan]Views:[/bold cyan]  {_format_views(metadata.view_count)}")
    console.print()

    table = table_class(
        title="Available Formats",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("itag", justify="right", min_width=5)
    table.add_column("Quality", justify="left", min_width=8)
    table.add_column("Type", justify="left", min_width=10)
    table.add_column("Ext", justify="left", min_width=5)
    table.add_column("Signature", justify="left", min_width=10)

    for i, fmt in enumerate(metadata.formats, start=1):
        table.add_row(
            str(i),
            str(fmt.itag),
            fmt.quality,
            _media_type(fmt.mime_type),
            fmt.extension,
            _STATE_MARKUP[fmt.signature_state],
        )

    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Public prompt function
# ---------------------------------------------------------------------------

def prompt_format_selection(metadata: VideoMetadata) -> int:
    """Prompt the user to pick one of *metadata*'s formats.

    The format table is expected to be on screen already
    (see :func:`display_formats`).

    Returns
    -------
    int
        The itag of the chosen format.

    Raises
    ------
    KeyboardInterrupt
        If the user presses Ctrl+C during selection.
    FormatSelectionError
        If the user cancels the prompt (Esc / None return).
    """
    questionary = _import_questionary()

    choices = [
        questionary.Choice(
            title=_build_choice_label(i, fmt),
            value=fmt.itag,
        )
        for i, fmt in enumerate(metadata.formats)
    ]

    selected: int | None = questionary.select(
        "Select format to download:",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()  # Returns None on Ctrl+C / Esc

    if selected is None:
        raise FormatSelectionError(
            "No format selected.",
            hint="Use arrow keys to pick a format, or pass --itag.",
        )

    return selected

"""Rich progress bar fed by download progress dicts.

Both download backends report progress in the yt-dlp hook format, a
dict with ``status`` plus byte counters, so a single
:class:`RichProgressHook` renders the direct stream and the delegated
yt-dlp download alike.  Bars are keyed by the reported ``filename``;
both backends write the same destination, so a delegated download that
falls back to the direct path keeps updating the bar it started.
"""

from __future__ import annotations

from typing import Any

from yt_resolve.cli.console import get_rich_console
from yt_resolve.exceptions import EnvironmentError

ProgressEvent = dict[str, Any]


def _new_progress() -> Any:
    """Build the Rich ``Progress`` display, or raise ``EnvironmentError``."""
    try:
        from rich import progress as rp
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc

    return rp.Progress(
        rp.SpinnerColumn(),
        rp.TextColumn("[bold blue]{task.description}"),
        rp.BarColumn(),
        rp.DownloadColumn(),
        rp.TransferSpeedColumn(),
        rp.TimeRemainingColumn(),
        console=get_rich_console(),
    )


class RichProgressHook:
    """Progress callback rendering one bar per downloaded file.

    Usage::

        with RichProgressHook("itag 18") as hook:
            download_service.download(metadata, fmt, progress_callback=hook)

    Events received while the display is not running are dropped.
    """

    def __init__(self, description: str | None = None) -> None:
        self._progress: Any = _new_progress()
        self._description = description
        self._tasks: dict[str, int] = {}
        self._task_id: int | None = None
        self._running = False

    def __enter__(self) -> RichProgressHook:
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.stop()

    def start(self) -> None:
        if not self._running:
            self._progress.start()
            self._running = True

    def stop(self) -> None:
        """Stop the display; safe to call repeatedly."""
        if self._running:
            self._progress.stop()
            self._running = False

    def __call__(self, event: ProgressEvent) -> None:
        if not self._running:
            return
        handler = self._HANDLERS.get(event.get("status", ""))
        if handler is not None:
            handler(self, event)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_downloading(self, event: ProgressEvent) -> None:
        filename = event.get("filename") or "download"
        total = _safe_int(event.get("total_bytes") or event.get("total_bytes_estimate"))
        done = _safe_int(event.get("downloaded_bytes")) or 0

        task_id = self._tasks.get(filename)
        if task_id is None:
            label = self._description or _display_name(filename)
            task_id = self._progress.add_task(label, total=total)
            self._tasks[filename] = task_id
        self._task_id = task_id

        fields: dict[str, Any] = {"completed": done}
        if total is not None:
            fields["total"] = total
        self._progress.update(task_id, **fields)

    def _on_finished(self, _event: ProgressEvent) -> None:
        if self._task_id is None:
            return
        total = self._progress.tasks[self._task_id].total
        if total is not None:
            self._progress.update(self._task_id, completed=total)

    def _on_error(self, _event: ProgressEvent) -> None:
        if self._task_id is not None:
            self._progress.update(self._task_id, description="[red]failed")

    _HANDLERS = {
        "downloading": _on_downloading,
        "finished": _on_finished,
        "error": _on_error,
    }


# ---------------------------------------------------------------------------
# Utility
# ---------------------------------------------------------------------------

def _display_name(filename: str) -> str:
    """Base name of *filename*, shortened to 50 characters."""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    return name if len(name) <= 50 else name[:47] + "..."


def _safe_int(value: object) -> int | None:
    """Coerce a byte counter to ``int``; ``None`` when it is missing or bogus."""
    if value is None or not isinstance(value, (int, float, str, bytes, bytearray)):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None

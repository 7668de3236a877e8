"""User-facing progress feedback for the CLI host.

- Progress bar only when scanning more than 100 files on a TTY
- Single line status updates, no spam
- structlog console output is suppressed while a bar is live

Usage::

    from vaultseek.core.progress import progress, status

    for path in progress(paths, desc="Scanning"):
        scan(path)

    status("Loaded 12 entries", style="success")
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterable, Iterator, Sized
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

_PROGRESS_THRESHOLD = 100

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "info": "  ",
}

_suppress_console_logs = threading.local()


def is_console_suppressed() -> bool:
    """Check if console logging is currently suppressed."""
    return getattr(_suppress_console_logs, "active", False)


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Suppress structlog console output; file handlers still receive logs."""
    _suppress_console_logs.active = True
    try:
        yield
    finally:
        _suppress_console_logs.active = False


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from vaultseek.core.logging import get_logger

    return get_logger("progress")


def _is_tty() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def status(message: str, *, style: str = "info") -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    _console.print(f"{prefix}{message}", highlight=False)
    _get_logger().debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return "1 file" / "3 files" style counts."""
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def progress[T](
    iterable: Iterable[T],
    *,
    desc: str | None = None,
) -> Iterator[T]:
    """Wrap a sized iterable with a progress bar if TTY and >100 items."""
    total = len(iterable) if isinstance(iterable, Sized) else None

    show_bar = _is_tty() and total is not None and total > _PROGRESS_THRESHOLD

    if show_bar:
        with (
            suppress_console_logs(),
            Progress(
                TextColumn("    {task.description}:"),
                BarColumn(bar_width=25, style="cyan", complete_style="cyan"),
                TaskProgressColumn(),
                TextColumn("{task.completed}/{task.total} files"),
                console=_console,
                transient=True,
            ) as pbar,
        ):
            task_id = pbar.add_task(desc or "Processing", total=total)
            for item in iterable:
                yield item
                pbar.advance(task_id)
    else:
        log = _get_logger()
        if desc and total:
            log.debug("progress_start", desc=desc, total=total)
        for item in iterable:
            yield item
        if desc and total:
            log.debug("progress_done", desc=desc, total=total)

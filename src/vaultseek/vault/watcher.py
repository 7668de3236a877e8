"""Vault watcher - turns filesystem changes into index notifications.

Design:
- watchfiles ``awatch`` over the vault root
- Sliding-window debounce: changes are buffered until the vault has been
  quiet for ``debounce_window`` (capped at ``max_debounce_wait``)
- Each flushed batch is applied inside one updater barrier, so the
  matcher is re-indexed once per burst instead of once per file
- A delete and an add of the same file name in one batch is a rename
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

import structlog
from watchfiles import Change, awatch

from vaultseek.search.models import PRIMARY_FILE_TYPE, file_type_for_extension
from vaultseek.search.updater import (
    Create,
    Delete,
    IncrementalIndexUpdater,
    IndexEvent,
    Modify,
    Rename,
    ResolveUnresolved,
)
from vaultseek.vault.scanner import SKIPPED_DIRS, VaultScanner

logger = structlog.get_logger()

DEBOUNCE_WINDOW_SEC = 0.3
MAX_DEBOUNCE_WAIT_SEC = 2.0


def _merge_change(previous: Change | None, new: Change) -> Change | None:
    """Coalesce two changes to one path; None means the path is a no-op."""
    if previous is None:
        return new
    if previous == Change.added and new == Change.deleted:
        return None
    if previous == Change.added:
        return Change.added
    if previous == Change.deleted and new == Change.added:
        return Change.modified
    return new


def _is_primary(rel_path: str) -> bool:
    return file_type_for_extension(PurePosixPath(rel_path).suffix) == PRIMARY_FILE_TYPE


def build_events(changes: dict[str, Change], scanner: VaultScanner) -> list[IndexEvent]:
    """Translate coalesced per-path changes into updater notifications."""
    added = sorted(p for p, c in changes.items() if c == Change.added)
    deleted = sorted(p for p, c in changes.items() if c == Change.deleted)
    modified = sorted(p for p, c in changes.items() if c == Change.modified)

    events: list[IndexEvent] = []
    unmatched_added = list(added)
    for old_path in deleted:
        name = PurePosixPath(old_path).name
        new_path = next((p for p in unmatched_added if PurePosixPath(p).name == name), None)
        scanner.forget(old_path)
        if new_path is None:
            events.append(Delete(old_path))
            continue
        unmatched_added.remove(new_path)
        events.append(Rename(old_path, scanner.entry_for(new_path)))

    events.extend(Create(scanner.entry_for(p)) for p in unmatched_added)
    events.extend(Modify(scanner.entry_for(p)) for p in modified)

    if any(_is_primary(p) for p in changes):
        events.append(ResolveUnresolved())
    return events


@dataclass
class VaultWatcher:
    """Async vault watcher with sliding-window debouncing."""

    root: Path
    scanner: VaultScanner
    updater: IncrementalIndexUpdater
    debounce_window: float = DEBOUNCE_WINDOW_SEC
    max_debounce_wait: float = MAX_DEBOUNCE_WAIT_SEC

    _watch_task: asyncio.Task[None] | None = field(default=None, init=False)
    _debounce_task: asyncio.Task[None] | None = field(default=None, init=False)
    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _pending: dict[str, Change] = field(default_factory=dict, init=False)
    _last_change_time: float = field(default=0.0, init=False)
    _first_change_time: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    async def start(self) -> None:
        if self._watch_task is not None:
            return
        self._stop_event.clear()
        self._watch_task = asyncio.create_task(self._watch_loop())
        self._debounce_task = asyncio.create_task(self._debounce_flush_loop())
        logger.info(
            "vault_watcher_started", root=str(self.root), debounce_window=self.debounce_window
        )

    async def stop(self) -> None:
        self._stop_event.set()
        for task in (self._debounce_task, self._watch_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError, asyncio.TimeoutError):
                    await asyncio.wait_for(task, timeout=2.0)
        self._debounce_task = None
        self._watch_task = None

        if self._pending:
            self.flush()
        logger.info("vault_watcher_stopped")

    def _relative(self, path_str: str) -> str | None:
        try:
            rel = Path(path_str).resolve().relative_to(self.root)
        except ValueError:
            return None
        if any(part.startswith(".") or part in SKIPPED_DIRS for part in rel.parts):
            return None
        return rel.as_posix()

    def queue_change(self, change: Change, path_str: str) -> None:
        """Buffer one raw change for debounced delivery."""
        rel_path = self._relative(path_str)
        if rel_path is None:
            return
        if change != Change.deleted and (self.root / rel_path).is_dir():
            return

        now = time.monotonic()
        if not self._pending:
            self._first_change_time = now
        merged = _merge_change(self._pending.get(rel_path), change)
        if merged is None:
            self._pending.pop(rel_path, None)
        else:
            self._pending[rel_path] = merged
        self._last_change_time = now
        logger.debug("path_queued", path=rel_path, change_type=change.name)

    def _should_flush(self) -> bool:
        if not self._pending:
            return False
        now = time.monotonic()
        return (
            now - self._last_change_time >= self.debounce_window
            or now - self._first_change_time >= self.max_debounce_wait
        )

    def flush(self) -> int:
        """Apply buffered changes as one updater batch. Returns event count."""
        if not self._pending:
            return 0
        changes, self._pending = self._pending, {}
        self._first_change_time = 0.0
        self._last_change_time = 0.0

        events = build_events(changes, self.scanner)
        with self.updater.barrier():
            for event in events:
                self.updater.apply(event)
        logger.info("vault_changes_applied", paths=len(changes), events=len(events))
        return len(events)

    async def _debounce_flush_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(0.1)
                if self._should_flush():
                    self.flush()
        except asyncio.CancelledError:
            pass

    async def _watch_loop(self) -> None:
        try:
            async for changes in awatch(
                self.root,
                stop_event=self._stop_event,
                ignore_permission_denied=True,
            ):
                for change, path_str in changes:
                    self.queue_change(change, path_str)
        except asyncio.CancelledError:
            pass

"""Incremental index maintenance.

Keeps the EntryCatalog consistent with create/delete/rename/modify and
"links resolved" notifications without rescanning the vault. Each
notification that changes the catalog triggers exactly one re-index.
Inside ``barrier()`` (the host's metadata cache has not settled yet)
notifications queue up and are applied as one batch with a single
re-index when the barrier is released.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from vaultseek.core.errors import InternalError
from vaultseek.search.catalog import EntryCatalog
from vaultseek.search.models import SearchEntry, UnresolvedReference

_default_log = structlog.get_logger(__name__)


class EntrySource(Protocol):
    """Host collaborator that enumerates entries."""

    def search_entries(self, include_unresolved: bool) -> Sequence[SearchEntry]:
        """Full catalog rebuild source."""
        ...

    def unresolved_entries(self) -> Sequence[UnresolvedReference]:
        """Current set of unresolved link targets."""
        ...


# ===================================================================
# Notifications
# ===================================================================


@dataclass(frozen=True, slots=True)
class Create:
    entry: SearchEntry


@dataclass(frozen=True, slots=True)
class Delete:
    path: str


@dataclass(frozen=True, slots=True)
class Rename:
    old_path: str
    entry: SearchEntry


@dataclass(frozen=True, slots=True)
class Modify:
    entry: SearchEntry


@dataclass(frozen=True, slots=True)
class ResolveUnresolved:
    pass


IndexEvent = Create | Delete | Rename | Modify | ResolveUnresolved


class IncrementalIndexUpdater:
    """Applies notifications to the catalog and re-indexes once per change set."""

    def __init__(
        self,
        catalog: EntryCatalog,
        reindex: Callable[[], None],
        source: EntrySource | None = None,
        *,
        include_unresolved: bool = True,
        logger: Any = None,
    ) -> None:
        self._catalog = catalog
        self._reindex = reindex
        self._source = source
        self._include_unresolved = include_unresolved
        self._log = logger or _default_log
        self._barrier_depth = 0
        self._pending: list[IndexEvent] = []

    @property
    def pending(self) -> tuple[IndexEvent, ...]:
        return tuple(self._pending)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def notify_create(self, entry: SearchEntry) -> bool:
        return self.apply(Create(entry))

    def notify_delete(self, path: str) -> bool:
        return self.apply(Delete(path))

    def notify_rename(self, old_path: str, entry: SearchEntry) -> bool:
        return self.apply(Rename(old_path, entry))

    def notify_modify(self, entry: SearchEntry) -> bool:
        return self.apply(Modify(entry))

    def notify_resolve_unresolved(self) -> bool:
        return self.apply(ResolveUnresolved())

    def apply(self, event: IndexEvent) -> bool:
        """Apply one notification. Returns True if the catalog changed.

        While a barrier is held the event is queued and False is returned.
        """
        if self._barrier_depth:
            self._pending.append(event)
            return False
        changed = self._mutate(event)
        if changed:
            self._reindex()
        return changed

    def apply_batch(self, events: Iterable[IndexEvent]) -> int:
        """Apply events in order with at most one re-index. Returns change count."""
        changed = sum(1 for event in events if self._mutate(event))
        if changed:
            self._reindex()
        return changed

    @contextmanager
    def barrier(self) -> Iterator[None]:
        """Queue notifications until the outermost barrier exits, then flush."""
        self._barrier_depth += 1
        try:
            yield
        finally:
            self._barrier_depth -= 1
            if not self._barrier_depth:
                self.settle()

    def settle(self) -> int:
        """Flush queued notifications as one batch."""
        events, self._pending = self._pending, []
        if not events:
            return 0
        changed = self.apply_batch(events)
        self._log.debug("updater.settled", events=len(events), changed=changed)
        return changed

    # ------------------------------------------------------------------
    # Catalog mutation
    # ------------------------------------------------------------------

    def _mutate(self, event: IndexEvent) -> bool:
        match event:
            case Create(entry=entry):
                changed = self._create(entry)
            case Delete(path=path):
                changed = self._catalog.remove_by_path(path) is not None
            case Rename(old_path=old_path, entry=entry):
                if old_path in self._catalog:
                    self._catalog.replace_path(old_path, entry)
                    changed = True
                else:
                    changed = self._create(entry)
            case Modify(entry=entry):
                if entry.path in self._catalog:
                    self._catalog.upsert(entry)
                    changed = True
                else:
                    changed = self._catalog.add(entry)
            case ResolveUnresolved():
                changed = self._resolve_unresolved()
            case _:
                raise InternalError.unexpected("unknown index event", event=repr(event))
        self._log.debug("updater.applied", event=type(event).__name__, changed=changed)
        return changed

    def _create(self, entry: SearchEntry) -> bool:
        existing = self._catalog.find_by_path(entry.path)
        if existing is None:
            return self._catalog.add(entry)
        if existing.is_unresolved and not entry.is_unresolved:
            # The link target now exists: the placeholder is replaced wholesale
            self._catalog.upsert(entry)
            return True
        return False

    def _resolve_unresolved(self) -> bool:
        if not self._include_unresolved or self._source is None:
            return False
        return self._catalog.add_many(self._source.unresolved_entries()) > 0

"""EntryCatalog - the single-writer store of searchable entries.

Entries are keyed by path and kept in insertion order. Readers get an
immutable snapshot tuple, so a query never observes a half-applied
mutation. Every mutation marks the catalog dirty; the owner re-indexes
the matcher once per batch and then calls ``mark_clean``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType

import structlog

from vaultseek.core.errors import CatalogError
from vaultseek.search.models import SearchEntry

log = structlog.get_logger(__name__)


def _validate(entry: SearchEntry) -> None:
    if not entry.path:
        raise CatalogError.invalid_entry(entry.name or "<unnamed>", "path must not be empty")


def _first_by_path(entries: Iterable[SearchEntry]) -> dict[str, SearchEntry]:
    """Path-keyed entries in order; later duplicates of a path are dropped."""
    by_path: dict[str, SearchEntry] = {}
    for entry in entries:
        _validate(entry)
        by_path.setdefault(entry.path, entry)
    return by_path


class EntryCatalog:
    """Mutable set of entries with unique paths.

    Writes are serialized by a lock and publish a fresh snapshot (an
    ordered tuple plus a path index); every read goes through the last
    published snapshot without locking.
    """

    def __init__(self, entries: Iterable[SearchEntry] = ()) -> None:
        self._lock = threading.Lock()
        self._entries = _first_by_path(entries)
        self._snapshot: tuple[SearchEntry, ...] = ()
        self._by_path: Mapping[str, SearchEntry] = MappingProxyType({})
        self._freeze()
        self._version = 0
        self._dirty = bool(self._entries)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def all(self) -> tuple[SearchEntry, ...]:
        return self._snapshot

    def find_by_path(self, path: str) -> SearchEntry | None:
        return self._by_path.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def __len__(self) -> int:
        return len(self._snapshot)

    @property
    def version(self) -> int:
        """Incremented once per mutating call that changed the catalog."""
        return self._version

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_clean(self) -> None:
        self._dirty = False

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, entry: SearchEntry) -> None:
        """Insert, or replace in place when the path already exists."""
        _validate(entry)
        with self._lock:
            self._entries[entry.path] = entry
            self._publish()

    def add(self, entry: SearchEntry) -> bool:
        """Append ``entry`` unless its path exists. Returns True if added."""
        _validate(entry)
        with self._lock:
            if entry.path in self._entries:
                return False
            self._entries[entry.path] = entry
            self._publish()
            return True

    def add_many(self, entries: Iterable[SearchEntry]) -> int:
        """Append every entry whose path is new, publishing once."""
        added = 0
        with self._lock:
            for entry in entries:
                _validate(entry)
                if entry.path not in self._entries:
                    self._entries[entry.path] = entry
                    added += 1
            if added:
                self._publish()
        return added

    def remove_by_path(self, path: str) -> SearchEntry | None:
        """Remove and return the entry at ``path``; None if absent."""
        with self._lock:
            removed = self._entries.pop(path, None)
            if removed is not None:
                self._publish()
            return removed

    def replace_path(self, old_path: str, entry: SearchEntry) -> SearchEntry | None:
        """Remove ``old_path`` and append ``entry`` as one published step.

        Returns the removed entry, or None when ``old_path`` was absent.
        """
        _validate(entry)
        with self._lock:
            removed = self._entries.pop(old_path, None)
            self._entries.pop(entry.path, None)
            self._entries[entry.path] = entry
            self._publish()
            return removed

    def reset(self, entries: Iterable[SearchEntry]) -> None:
        """Replace the whole catalog; later duplicates of a path are dropped."""
        fresh = _first_by_path(entries)
        with self._lock:
            self._entries = fresh
            self._publish()
        log.debug("catalog.reset", entries=len(fresh))

    def _freeze(self) -> None:
        self._snapshot = tuple(self._entries.values())
        self._by_path = MappingProxyType(dict(self._entries))

    def _publish(self) -> None:
        self._freeze()
        self._version += 1
        self._dirty = True

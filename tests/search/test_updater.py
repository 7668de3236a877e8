"""Tests for IncrementalIndexUpdater."""

from collections.abc import Sequence

import pytest

from vaultseek.core.errors import InternalError
from vaultseek.search.catalog import EntryCatalog
from vaultseek.search.models import SearchEntry, StandardFile, UnresolvedReference
from vaultseek.search.updater import (
    Create,
    Delete,
    IncrementalIndexUpdater,
    Modify,
    Rename,
    ResolveUnresolved,
)


class FakeSource:
    def __init__(self, unresolved: Sequence[str] = ()) -> None:
        self.unresolved = [UnresolvedReference.from_link_target(t) for t in unresolved]

    def search_entries(self, include_unresolved: bool) -> list[SearchEntry]:
        return list(self.unresolved) if include_unresolved else []

    def unresolved_entries(self) -> list[UnresolvedReference]:
        return self.unresolved


class Reindex:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


@pytest.fixture
def reindex() -> Reindex:
    return Reindex()


@pytest.fixture
def catalog() -> EntryCatalog:
    return EntryCatalog([StandardFile.from_path("a.md"), StandardFile.from_path("b.md")])


@pytest.fixture
def updater(catalog: EntryCatalog, reindex: Reindex) -> IncrementalIndexUpdater:
    return IncrementalIndexUpdater(catalog, reindex, FakeSource(["Someday"]))


class TestCreateDelete:
    def test_create_then_delete_restores_catalog(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        before = catalog.all()

        assert updater.notify_create(StandardFile.from_path("c.md")) is True
        assert updater.notify_delete("c.md") is True

        assert catalog.all() == before
        assert reindex.calls == 2

    def test_duplicate_create_is_noop(
        self, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        assert updater.notify_create(StandardFile.from_path("a.md")) is False
        assert reindex.calls == 0

    def test_delete_unknown_is_noop(
        self, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        assert updater.notify_delete("nope.md") is False
        assert reindex.calls == 0

    def test_create_replaces_unresolved_placeholder(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater
    ) -> None:
        """Once a link target exists, its real entry replaces the placeholder."""
        catalog.add(UnresolvedReference.from_link_target("Later"))
        real = StandardFile.from_path("Later.md", aliases=("soon",))

        assert updater.notify_create(real) is True

        assert catalog.find_by_path("Later.md") == real


class TestRename:
    def test_rename_is_atomic(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        snapshots = []
        updater._reindex = lambda: snapshots.append(catalog.all())  # noqa: SLF001

        assert updater.notify_rename("a.md", StandardFile.from_path("dir/a2.md")) is True

        assert "a.md" not in catalog
        assert "dir/a2.md" in catalog
        assert len(catalog) == 2
        # Exactly one re-index, and it never saw both or neither path
        assert len(snapshots) == 1
        paths = {e.path for e in snapshots[0]}
        assert "a.md" not in paths and "dir/a2.md" in paths

    def test_rename_unknown_old_path_creates(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater
    ) -> None:
        assert updater.notify_rename("ghost.md", StandardFile.from_path("new.md")) is True
        assert "new.md" in catalog
        assert len(catalog) == 3


class TestModify:
    def test_modify_replaces_in_place(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        updated = StandardFile.from_path("a.md", headings=("Fresh",))

        assert updater.notify_modify(updated) is True

        assert [e.path for e in catalog.all()] == ["a.md", "b.md"]
        assert catalog.find_by_path("a.md") == updated
        assert reindex.calls == 1

    def test_modify_absent_path_adds(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater
    ) -> None:
        assert updater.notify_modify(StandardFile.from_path("z.md")) is True
        assert "z.md" in catalog


class TestResolveUnresolved:
    def test_adds_new_unresolved_entries(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        assert updater.notify_resolve_unresolved() is True
        assert "Someday.md" in catalog

        # Second pass finds nothing new
        assert updater.notify_resolve_unresolved() is False
        assert reindex.calls == 1

    def test_disabled_when_unresolved_excluded(
        self, catalog: EntryCatalog, reindex: Reindex
    ) -> None:
        updater = IncrementalIndexUpdater(
            catalog, reindex, FakeSource(["Someday"]), include_unresolved=False
        )

        assert updater.notify_resolve_unresolved() is False
        assert "Someday.md" not in catalog

    def test_without_source_is_noop(self, catalog: EntryCatalog, reindex: Reindex) -> None:
        assert IncrementalIndexUpdater(catalog, reindex).notify_resolve_unresolved() is False


class TestBatching:
    def test_apply_batch_reindexes_once(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        changed = updater.apply_batch(
            [
                Create(StandardFile.from_path("c.md")),
                Delete("a.md"),
                Rename("b.md", StandardFile.from_path("b2.md")),
                Modify(StandardFile.from_path("c.md", headings=("H",))),
                ResolveUnresolved(),
            ]
        )

        assert changed == 5
        assert reindex.calls == 1
        assert [e.path for e in catalog.all()] == ["c.md", "b2.md", "Someday.md"]

    def test_batch_without_changes_does_not_reindex(
        self, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        assert updater.apply_batch([Delete("missing.md")]) == 0
        assert reindex.calls == 0

    def test_barrier_queues_until_outermost_exit(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater, reindex: Reindex
    ) -> None:
        with updater.barrier():
            assert updater.notify_create(StandardFile.from_path("c.md")) is False
            with updater.barrier():
                updater.notify_delete("a.md")
            assert len(updater.pending) == 2
            assert "c.md" not in catalog
            assert reindex.calls == 0

        assert updater.pending == ()
        assert "c.md" in catalog
        assert "a.md" not in catalog
        assert reindex.calls == 1

    def test_barrier_flushes_even_on_error(
        self, catalog: EntryCatalog, updater: IncrementalIndexUpdater
    ) -> None:
        with pytest.raises(RuntimeError), updater.barrier():
            updater.notify_create(StandardFile.from_path("c.md"))
            raise RuntimeError("host failed")

        assert "c.md" in catalog


class TestUnknownEvent:
    def test_raises_internal_error(self, updater: IncrementalIndexUpdater) -> None:
        with pytest.raises(InternalError):
            updater.apply(object())  # type: ignore[arg-type]

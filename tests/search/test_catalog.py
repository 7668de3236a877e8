"""Tests for EntryCatalog."""

import threading

import pytest

from vaultseek.core.errors import CatalogError
from vaultseek.search.catalog import EntryCatalog
from vaultseek.search.models import StandardFile, UnresolvedReference


def _note(path: str, **kwargs: object) -> StandardFile:
    return StandardFile.from_path(path, **kwargs)  # type: ignore[arg-type]


class TestReads:
    def test_initial_entries_keep_order(self) -> None:
        catalog = EntryCatalog([_note("b.md"), _note("a.md")])

        assert [e.path for e in catalog.all()] == ["b.md", "a.md"]
        assert len(catalog) == 2
        assert "a.md" in catalog
        assert catalog.find_by_path("missing.md") is None

    def test_snapshot_unaffected_by_later_writes(self) -> None:
        """A reader's snapshot never observes a later mutation."""
        catalog = EntryCatalog([_note("a.md")])
        snapshot = catalog.all()

        catalog.add(_note("b.md"))
        catalog.remove_by_path("a.md")

        assert [e.path for e in snapshot] == ["a.md"]
        assert [e.path for e in catalog.all()] == ["b.md"]


    def test_lookups_see_only_published_writes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Path lookups agree with all() even if a write is never published."""
        catalog = EntryCatalog([_note("a.md")])
        monkeypatch.setattr(catalog, "_publish", lambda: None)

        catalog.add(_note("b.md"))

        assert [e.path for e in catalog.all()] == ["a.md"]
        assert "b.md" not in catalog
        assert catalog.find_by_path("b.md") is None

    def test_initial_duplicates_keep_first(self) -> None:
        catalog = EntryCatalog([_note("a.md"), _note("a.md", aliases=("dup",))])

        assert len(catalog) == 1
        assert catalog.find_by_path("a.md").aliases == ()  # type: ignore[union-attr]


class TestWrites:
    def test_add_rejects_duplicate_path(self) -> None:
        catalog = EntryCatalog()

        assert catalog.add(_note("a.md")) is True
        assert catalog.add(_note("a.md", aliases=("x",))) is False
        assert len(catalog) == 1
        assert catalog.find_by_path("a.md").aliases == ()  # type: ignore[union-attr]

    def test_add_then_remove_restores_contents(self) -> None:
        catalog = EntryCatalog([_note("a.md")])
        before = catalog.all()

        catalog.add(_note("b.md"))
        removed = catalog.remove_by_path("b.md")

        assert removed is not None and removed.path == "b.md"
        assert catalog.all() == before

    def test_remove_unknown_is_noop(self) -> None:
        catalog = EntryCatalog([_note("a.md")])
        version = catalog.version

        assert catalog.remove_by_path("zzz.md") is None
        assert catalog.version == version

    def test_upsert_replaces_in_place(self) -> None:
        catalog = EntryCatalog([_note("a.md"), _note("b.md")])

        catalog.upsert(_note("a.md", headings=("New",)))

        assert [e.path for e in catalog.all()] == ["a.md", "b.md"]
        assert catalog.find_by_path("a.md").headings == ("New",)  # type: ignore[union-attr]

    def test_replace_path_is_single_publish(self) -> None:
        """Rename removes the old path and adds the new one in one version step."""
        catalog = EntryCatalog([_note("old.md"), _note("other.md")])
        version = catalog.version

        removed = catalog.replace_path("old.md", _note("dir/new.md"))

        assert removed is not None and removed.path == "old.md"
        assert catalog.version == version + 1
        assert "old.md" not in catalog
        assert [e.path for e in catalog.all()] == ["other.md", "dir/new.md"]

    def test_add_many_counts_new_paths(self) -> None:
        catalog = EntryCatalog([_note("a.md")])

        added = catalog.add_many(
            [UnresolvedReference.from_link_target("a"), UnresolvedReference.from_link_target("b")]
        )

        assert added == 1
        assert "b.md" in catalog

    def test_reset_drops_later_duplicates(self) -> None:
        catalog = EntryCatalog([_note("x.md")])

        catalog.reset([_note("a.md"), _note("a.md", aliases=("dup",))])

        assert [e.path for e in catalog.all()] == ["a.md"]
        assert catalog.find_by_path("a.md").aliases == ()  # type: ignore[union-attr]

    def test_empty_path_rejected(self) -> None:
        catalog = EntryCatalog()
        bad = StandardFile(name="", basename="", path="")

        with pytest.raises(CatalogError):
            catalog.add(bad)


class TestDirtyTracking:
    def test_mutation_marks_dirty_until_clean(self) -> None:
        catalog = EntryCatalog()
        assert catalog.dirty is False

        catalog.add(_note("a.md"))
        assert catalog.dirty is True

        catalog.mark_clean()
        assert catalog.dirty is False


class TestConcurrentWriters:
    def test_parallel_adds_are_serialized(self) -> None:
        catalog = EntryCatalog()

        def writer(prefix: str) -> None:
            for i in range(200):
                catalog.add(_note(f"{prefix}/{i}.md"))

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(catalog) == 800
        assert len({e.path for e in catalog.all()}) == 800

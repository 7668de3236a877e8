"""Active-subset filtering by file type or extension."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from vaultseek.core.errors import CatalogError
from vaultseek.search.models import EXTENSION_TYPES, PRIMARY_FILE_TYPE, FileType, SearchEntry


@dataclass(frozen=True, slots=True)
class FilterKey:
    """A parsed filter: exactly one of ``extension`` / ``file_type`` is set."""

    extension: str | None = None
    file_type: FileType | None = None

    def matches(self, entry: SearchEntry) -> bool:
        if self.extension is not None:
            return entry.extension.lower() == self.extension
        return entry.file_type == self.file_type

    @property
    def is_primary(self) -> bool:
        """True for filters that select the primary document type."""
        if self.extension is not None:
            return EXTENSION_TYPES.get(self.extension) == PRIMARY_FILE_TYPE
        return self.file_type == PRIMARY_FILE_TYPE


def parse_filter_key(key: str, additional_extensions: Iterable[str] = ()) -> FilterKey:
    """Extensions win over file types ("pdf" filters by extension).

    Raises:
        CatalogError: key is neither a known extension nor a file type.
    """
    normalized = key.strip().lower().lstrip(".")
    if normalized in EXTENSION_TYPES or normalized in set(additional_extensions):
        return FilterKey(extension=normalized)
    try:
        return FilterKey(file_type=FileType(normalized))
    except ValueError:
        raise CatalogError.invalid_filter(key) from None


def with_extensions(entries: Iterable[SearchEntry], extensions: Sequence[str]) -> list[SearchEntry]:
    if not extensions:
        return []
    wanted = {ext.lower() for ext in extensions}
    return [e for e in entries if e.extension and e.extension.lower() in wanted]


def base_entries(
    entries: Sequence[SearchEntry],
    *,
    markdown_only: bool,
    additional_extensions: Sequence[str] = (),
) -> list[SearchEntry]:
    """The searchable set before any explicit filter.

    In markdown-only mode this is every primary-type entry followed by the
    entries carrying one of the additional extensions.
    """
    if not markdown_only:
        return list(entries)
    primary = [e for e in entries if e.file_type == PRIMARY_FILE_TYPE]
    seen = {e.path for e in primary}
    extra = [e for e in with_extensions(entries, additional_extensions) if e.path not in seen]
    return primary + extra


def apply_filter(
    entries: Sequence[SearchEntry],
    key: FilterKey,
    *,
    markdown_only: bool = False,
    additional_extensions: Sequence[str] = (),
) -> list[SearchEntry]:
    """Narrow ``entries`` to ``key``.

    Filtering to the primary type in markdown-only mode keeps the
    additional-extension entries too.
    """
    filtered = [e for e in entries if key.matches(e)]
    if markdown_only and key.is_primary and additional_extensions:
        seen = {e.path for e in filtered}
        filtered += [
            e for e in with_extensions(entries, additional_extensions) if e.path not in seen
        ]
    return filtered

"""Vault scanner - builds search entries from a directory of notes.

Markdown notes contribute front matter (``aliases``/``alias``, ``title``),
ATX headings and wiki links. Link targets that do not exist become
unresolved references. Other files become plain entries typed by
extension.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

import structlog
import yaml

from vaultseek.core.errors import CatalogError
from vaultseek.core.progress import progress
from vaultseek.search.models import (
    PRIMARY_FILE_TYPE,
    SearchEntry,
    StandardFile,
    UnresolvedReference,
    file_type_for_extension,
)

log = structlog.get_logger(__name__)

# Directories never scanned, beyond any dot-directory
SKIPPED_DIRS: frozenset[str] = frozenset({"node_modules", "__pycache__"})

FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(?P<text>.+?)(?:[ \t]+#+)?[ \t]*$")
FENCE_PATTERN = re.compile(r"^[ \t]*(```|~~~)")
# [[target]], [[target|label]], [[target#heading]], [[target^block]]
WIKILINK_PATTERN = re.compile(r"\[\[(?P<target>[^\]|#^]*)(?:[#^][^\]|]*)?(?:\|[^\]]*)?\]\]")


@dataclass
class NoteMetadata:
    aliases: tuple[str, ...] = ()
    title: str | None = None
    headings: tuple[str, ...] = ()
    links: set[str] = field(default_factory=set)


def _coerce_aliases(value: Any) -> tuple[str, ...]:
    """Front matter aliases may be a list or a comma separated string."""
    if value is None:
        return ()
    if isinstance(value, str):
        items: list[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        items = [value]
    return tuple(str(item).strip() for item in items if item is not None and str(item).strip())


def _parse_frontmatter(block: str, path: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        log.warning("scanner.bad_frontmatter", path=path, error=str(e))
        return {}
    return data if isinstance(data, dict) else {}


def parse_note(text: str, path: str = "") -> NoteMetadata:
    """Extract aliases, title, headings and wiki-link targets from a note."""
    meta = NoteMetadata()
    body = text
    if match := FRONTMATTER_PATTERN.match(text):
        front = _parse_frontmatter(match.group(1), path)
        meta.aliases = _coerce_aliases(front.get("aliases")) + _coerce_aliases(front.get("alias"))
        title = front.get("title")
        if title is not None and str(title).strip():
            meta.title = str(title).strip()
        body = text[match.end() :]

    headings: list[str] = []
    in_fence = False
    for line in body.splitlines():
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        if heading := HEADING_PATTERN.match(line):
            headings.append(heading.group("text").strip())
    meta.headings = tuple(headings)

    targets = (m.group("target").strip() for m in WIKILINK_PATTERN.finditer(body))
    meta.links = {target for target in targets if target}
    return meta


class VaultScanner:
    """Entry source over a vault directory."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()
        if not self.root.is_dir():
            raise CatalogError.vault_not_found(str(root))
        # note path -> link targets found in it
        self._links: dict[str, set[str]] = {}
        self._known: set[str] = set()

    def iter_paths(self) -> list[str]:
        """Vault-relative POSIX paths of every scannable file, sorted."""
        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in SKIPPED_DIRS
            )
            for name in filenames:
                if name.startswith("."):
                    continue
                found.append((Path(dirpath) / name).relative_to(self.root).as_posix())
        return sorted(found)

    def entry_for(self, rel_path: str) -> StandardFile:
        """Build the entry for one file, re-reading markdown metadata."""
        extension = PurePosixPath(rel_path).suffix.lstrip(".")
        self._known.add(rel_path)
        if file_type_for_extension(extension) != PRIMARY_FILE_TYPE:
            return StandardFile.from_path(rel_path)

        try:
            text = (self.root / rel_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.warning("scanner.unreadable", path=rel_path, error=str(e))
            self._links.pop(rel_path, None)
            return StandardFile.from_path(rel_path)

        meta = parse_note(text, rel_path)
        self._links[rel_path] = meta.links
        return StandardFile.from_path(
            rel_path, aliases=meta.aliases, title=meta.title, headings=meta.headings
        )

    def forget(self, rel_path: str) -> None:
        """Drop a deleted file's links and existence."""
        self._links.pop(rel_path, None)
        self._known.discard(rel_path)

    def scan(self) -> list[StandardFile]:
        self._links.clear()
        self._known.clear()
        paths = self.iter_paths()
        entries = [self.entry_for(p) for p in progress(paths, desc="Scanning vault")]
        log.info("scanner.scanned", root=str(self.root), entries=len(entries))
        return entries

    def _resolves(self, target: str, basenames: set[str]) -> bool:
        candidate = target if PurePosixPath(target).suffix else f"{target}.md"
        if candidate in self._known or target in self._known:
            return True
        # Bare names resolve against any note with that basename
        return "/" not in target and PurePosixPath(target).stem.lower() in basenames

    def unresolved_entries(self) -> list[UnresolvedReference]:
        basenames = {PurePosixPath(p).stem.lower() for p in self._known}
        targets = sorted(
            {t for links in self._links.values() for t in links if not self._resolves(t, basenames)}
        )
        return [UnresolvedReference.from_link_target(t) for t in targets]

    def search_entries(self, include_unresolved: bool) -> list[SearchEntry]:
        entries: list[SearchEntry] = list(self.scan())
        if include_unresolved:
            entries.extend(self.unresolved_entries())
        return entries

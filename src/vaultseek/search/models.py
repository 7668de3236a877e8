"""Search domain models: entries, match spans, candidates, analyses.

No I/O. Entries are a tagged union over three frozen dataclasses so the
classifier can pattern-match exhaustively instead of probing optional
attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from pathlib import PurePosixPath
from urllib.parse import urlparse

from vaultseek.core.errors import CatalogError

# ===================================================================
# Enums
# ===================================================================


class FileType(StrEnum):
    """Category tag for an entry. ``markdown`` is the primary document type."""

    markdown = "markdown"
    image = "image"
    audio = "audio"
    video = "video"
    pdf = "pdf"
    other = "other"


PRIMARY_FILE_TYPE = FileType.markdown

EXTENSION_TYPES: dict[str, FileType] = {
    "md": FileType.markdown,
    "png": FileType.image,
    "jpg": FileType.image,
    "jpeg": FileType.image,
    "gif": FileType.image,
    "bmp": FileType.image,
    "svg": FileType.image,
    "webp": FileType.image,
    "mp3": FileType.audio,
    "wav": FileType.audio,
    "m4a": FileType.audio,
    "ogg": FileType.audio,
    "flac": FileType.audio,
    "webm": FileType.video,
    "mp4": FileType.video,
    "ogv": FileType.video,
    "mov": FileType.video,
    "mkv": FileType.video,
    "pdf": FileType.pdf,
}


def file_type_for_extension(extension: str) -> FileType:
    return EXTENSION_TYPES.get(extension.lower().lstrip("."), FileType.other)


class FieldKey(StrEnum):
    """Searchable entry fields."""

    basename = "basename"
    aliases = "aliases"
    title = "title"
    headings = "headings"


class EntryKind(StrEnum):
    standard = "standard"
    unresolved = "unresolved"
    web = "web"


# ===================================================================
# Entries
# ===================================================================


def _split_path(path: str) -> tuple[str, str, str]:
    """Return (name, basename, extension) for a vault-relative path."""
    pure = PurePosixPath(path)
    return pure.name, pure.stem, pure.suffix.lstrip(".")


@dataclass(frozen=True, slots=True)
class StandardFile:
    """A concrete file, or a would-create placeholder when ``is_created`` is False."""

    name: str
    basename: str
    path: str
    extension: str = ""
    file_type: FileType = FileType.other
    aliases: tuple[str, ...] = ()
    title: str | None = None
    headings: tuple[str, ...] = ()
    is_created: bool = True

    kind = EntryKind.standard

    @classmethod
    def from_path(
        cls,
        path: str,
        *,
        aliases: tuple[str, ...] = (),
        title: str | None = None,
        headings: tuple[str, ...] = (),
        is_created: bool = True,
    ) -> StandardFile:
        name, basename, extension = _split_path(path)
        file_type = file_type_for_extension(extension)
        if file_type != PRIMARY_FILE_TYPE:
            # Only the primary document type carries aliases, title and headings
            aliases, title, headings = (), None, ()
        return cls(
            name=name,
            basename=basename,
            path=path,
            extension=extension,
            file_type=file_type,
            aliases=tuple(aliases),
            title=title,
            headings=tuple(headings),
            is_created=is_created,
        )

    @property
    def is_unresolved(self) -> bool:
        return False

    @property
    def is_web_url(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class UnresolvedReference:
    """A link target referenced by other notes that does not exist yet."""

    name: str
    basename: str
    path: str
    extension: str = "md"
    file_type: FileType = FileType.markdown

    kind = EntryKind.unresolved

    @classmethod
    def from_link_target(cls, target: str) -> UnresolvedReference:
        path = target if PurePosixPath(target).suffix else f"{target}.md"
        name, basename, extension = _split_path(path)
        return cls(
            name=name,
            basename=basename,
            path=path,
            extension=extension,
            file_type=file_type_for_extension(extension),
        )

    @property
    def is_created(self) -> bool:
        return False

    @property
    def is_unresolved(self) -> bool:
        return True

    @property
    def is_web_url(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class WebLink:
    """A navigable external location. Its path is the URL itself."""

    name: str
    basename: str
    path: str
    url: str

    kind = EntryKind.web

    @classmethod
    def from_url(cls, url: str) -> WebLink:
        """Web entry for an absolute http(s) URL.

        Raises:
            CatalogError: ``url`` is not an http(s) URL with a host.
        """
        url = url.strip()
        if not is_valid_url(url):
            raise CatalogError.invalid_entry(url, "not an http(s) URL")
        return cls(name=url, basename=url, path=url, url=url)

    @property
    def extension(self) -> str:
        return ""

    @property
    def file_type(self) -> FileType:
        return FileType.other

    @property
    def is_created(self) -> bool:
        return True

    @property
    def is_unresolved(self) -> bool:
        return False

    @property
    def is_web_url(self) -> bool:
        return True


SearchEntry = StandardFile | UnresolvedReference | WebLink


def field_values(entry: SearchEntry, key: FieldKey) -> tuple[str, ...]:
    """Values of ``key`` actually present on ``entry`` (empty when absent)."""
    if key == FieldKey.basename:
        return (entry.basename,) if entry.basename else ()
    match entry:
        case StandardFile(aliases=aliases, title=title, headings=headings):
            if key == FieldKey.aliases:
                return aliases
            if key == FieldKey.title:
                return (title,) if title else ()
            return headings
        case UnresolvedReference() | WebLink():
            return ()


def is_valid_url(text: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    parsed = urlparse(text.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# ===================================================================
# Matches and candidates
# ===================================================================


@dataclass(frozen=True, slots=True)
class MatchSpan:
    """Matched character ranges within one field value.

    ``indices`` are inclusive ``(start, end)`` pairs, ascending by start.
    """

    key: FieldKey
    value: str
    indices: tuple[tuple[int, int], ...] = ()

    @property
    def first_start(self) -> int | None:
        return self.indices[0][0] if self.indices else None

    @property
    def longest_run(self) -> int:
        return max((max(end - start + 1, 0) for start, end in self.indices), default=0)

    @property
    def matched_length(self) -> int:
        return sum(max(end - start + 1, 0) for start, end in self.indices)


@dataclass(frozen=True, slots=True)
class RawCandidate:
    """One fuzzy matcher hit. ``score`` is the matcher's: lower is better."""

    entry: SearchEntry
    score: float
    matches: tuple[MatchSpan, ...] = ()
    ref_index: int = 0

    def spans_for(self, key: FieldKey) -> list[MatchSpan]:
        return [m for m in self.matches if m.key == key]


@dataclass(frozen=True, slots=True)
class RankFactors:
    """Weighted ranker factors; ``total`` is the aggregate rank score."""

    field_priority: float = 0.0
    match_ratio: float = 0.0
    position: float = 0.0
    match_count: float = 0.0

    @property
    def total(self) -> float:
        return self.field_priority + self.match_ratio + self.position + self.match_count


@dataclass(frozen=True, slots=True)
class RankedCandidate:
    """A raw candidate plus its aggregate rank score (higher is better)."""

    raw: RawCandidate
    rank_score: float
    factors: RankFactors = field(default_factory=RankFactors)

    @property
    def entry(self) -> SearchEntry:
        return self.raw.entry

    @property
    def matches(self) -> tuple[MatchSpan, ...]:
        return self.raw.matches


# ===================================================================
# Match analysis
# ===================================================================


class MatchIntent(IntEnum):
    """What selecting a candidate means. Lower value is higher priority."""

    EXACT_FILE = 1
    FILE_ALIAS = 2
    FILE_PARTIAL = 3
    TITLE_MATCH = 4
    HEADING_CONTENT = 5

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


class DisplayKind(StrEnum):
    heading = "heading"
    alias = "alias"
    title = "title"
    file = "file"


@dataclass(frozen=True, slots=True)
class DisplayInfo:
    kind: DisplayKind
    text: str


@dataclass(frozen=True, slots=True)
class MatchAnalysis:
    """Intent classification for one candidate. Recomputed per selection."""

    intent: MatchIntent
    confidence: float
    display: DisplayInfo
    jump_to_heading: bool = False
    matched_heading: str | None = None

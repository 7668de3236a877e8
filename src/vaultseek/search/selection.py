"""Selection resolution - what the host should do with a chosen candidate.

The engine never opens or creates anything itself; it returns a
``SelectionTarget`` and the host performs the navigation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from difflib import SequenceMatcher
from enum import StrEnum

from vaultseek.search.models import (
    DisplayInfo,
    DisplayKind,
    FieldKey,
    MatchAnalysis,
    RankedCandidate,
    RawCandidate,
    SearchEntry,
    StandardFile,
    WebLink,
    field_values,
)


class SelectionAction(StrEnum):
    open_file = "open_file"
    jump_to_heading = "jump_to_heading"
    open_url = "open_url"
    create_file = "create_file"


@dataclass(frozen=True, slots=True)
class SelectionTarget:
    action: SelectionAction
    path: str
    link: str | None = None
    url: str | None = None


def best_display_name(candidate: RankedCandidate | RawCandidate, query: str) -> str:
    """Best of basename and aliases for ``query``; basename on ties.

    Heading matches always display the basename.
    """
    raw = candidate.raw if isinstance(candidate, RankedCandidate) else candidate
    entry = raw.entry
    if raw.spans_for(FieldKey.headings):
        return entry.basename
    aliases = field_values(entry, FieldKey.aliases)
    if not aliases:
        return entry.basename

    needle = query.strip().lower()
    best, best_ratio = entry.basename, SequenceMatcher(None, needle, entry.basename.lower()).ratio()
    for alias in aliases:
        ratio = SequenceMatcher(None, needle, alias.lower()).ratio()
        if ratio > best_ratio:
            best, best_ratio = alias, ratio
    return best


def finalize_display(
    analysis: MatchAnalysis,
    jump_to_heading: bool,
    candidate: RankedCandidate | RawCandidate,
    query: str,
) -> MatchAnalysis:
    """Record the jump decision and pick what the suggestion shows.

    A heading is only shown when selection will jump to it; alias and
    title matches keep their own text; everything else shows a name.
    """
    if jump_to_heading and analysis.matched_heading:
        display = DisplayInfo(DisplayKind.heading, analysis.matched_heading)
    elif analysis.display.kind in (DisplayKind.alias, DisplayKind.title):
        display = analysis.display
    else:
        display = DisplayInfo(DisplayKind.file, best_display_name(candidate, query))
    return replace(analysis, jump_to_heading=jump_to_heading, display=display)


def resolve_selection(entry: SearchEntry, analysis: MatchAnalysis) -> SelectionTarget:
    if analysis.jump_to_heading and analysis.matched_heading:
        return SelectionTarget(
            action=SelectionAction.jump_to_heading,
            path=entry.path,
            link=f"{entry.path}#{analysis.matched_heading}",
        )
    if isinstance(entry, WebLink):
        return SelectionTarget(action=SelectionAction.open_url, path=entry.path, url=entry.url)
    if entry.is_created:
        return SelectionTarget(action=SelectionAction.open_file, path=entry.path)
    return SelectionTarget(action=SelectionAction.create_file, path=entry.path)


def creation_placeholder(query: str) -> StandardFile | None:
    """A would-create markdown entry named after the query."""
    name = query.strip()
    if not name:
        return None
    return StandardFile.from_path(f"{name}.md", is_created=False)

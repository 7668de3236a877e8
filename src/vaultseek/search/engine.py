"""VaultSearch - the search-as-you-type facade the host talks to.

Per keystroke::

    query -> matcher.search -> ranker.rank -> ranked suggestions

Per selection::

    classifier.classify -> policy.decide -> display + SelectionTarget

Per external change::

    notify_* -> updater -> catalog mutation -> one matcher re-index
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from vaultseek.config.models import VaultSeekConfig
from vaultseek.core.logging import set_query_id
from vaultseek.search.catalog import EntryCatalog
from vaultseek.search.classifier import MatchIntentClassifier
from vaultseek.search.filters import FilterKey, apply_filter, base_entries, parse_filter_key
from vaultseek.search.matcher import FuzzyMatchEngine, FuzzyMatcher
from vaultseek.search.models import (
    MatchAnalysis,
    RankedCandidate,
    RawCandidate,
    SearchEntry,
)
from vaultseek.search.policy import HeadingJumpPolicy, HeadingJumpStrategy
from vaultseek.search.ranker import RelevanceRanker
from vaultseek.search.selection import (
    SelectionTarget,
    creation_placeholder,
    finalize_display,
    resolve_selection,
)
from vaultseek.search.updater import EntrySource, IncrementalIndexUpdater

_default_log = structlog.get_logger(__name__)


class VaultSearch:
    """Owns the catalog and wires matcher, ranker, classifier and policy."""

    def __init__(
        self,
        config: VaultSeekConfig | None = None,
        *,
        source: EntrySource | None = None,
        matcher: FuzzyMatcher | None = None,
        logger: Any = None,
    ) -> None:
        self.config = config or VaultSeekConfig()
        self._log = logger or _default_log
        self._source = source
        search = self.config.search

        self.catalog = EntryCatalog()
        self.matcher: FuzzyMatcher = matcher or FuzzyMatchEngine(
            self.config.field_weights,
            self.config.matcher,
            search_title=search.search_title,
            search_headings=search.search_headings,
        )
        self.ranker = RelevanceRanker(self.config.ranking, logger=self._log)
        self.classifier = MatchIntentClassifier(logger=self._log)
        self.policy = HeadingJumpPolicy(enabled=self.config.heading_jump.auto_jump_to_heading)
        self.strategy = HeadingJumpStrategy(self.config.heading_jump.strategy)
        self.updater = IncrementalIndexUpdater(
            self.catalog,
            self.reindex,
            source,
            include_unresolved=search.include_unresolved,
            logger=self._log,
        )
        self._extensions = search.extension_list()
        self._active_filter: FilterKey | None = None

    # ------------------------------------------------------------------
    # Catalog state
    # ------------------------------------------------------------------

    def load(self, entries: Sequence[SearchEntry] | None = None) -> int:
        """Replace the catalog (from ``source`` when not given); one re-index."""
        if entries is None:
            entries = (
                self._source.search_entries(self.config.search.include_unresolved)
                if self._source is not None
                else ()
            )
        self.catalog.reset(entries)
        self.reindex()
        self._log.info("search.loaded", entries=len(self.catalog))
        return len(self.catalog)

    def reindex(self) -> None:
        """Hand the matcher the active subset of the current catalog snapshot."""
        self.matcher.set_collection(self.active_entries())
        self.catalog.mark_clean()

    def active_entries(self) -> list[SearchEntry]:
        search = self.config.search
        entries = self.catalog.all()
        if self._active_filter is not None:
            return apply_filter(
                entries,
                self._active_filter,
                markdown_only=search.markdown_only,
                additional_extensions=self._extensions,
            )
        return base_entries(
            entries,
            markdown_only=search.markdown_only,
            additional_extensions=self._extensions,
        )

    @property
    def active_filter(self) -> FilterKey | None:
        return self._active_filter

    def apply_filter(self, key: str) -> FilterKey:
        """Narrow the searchable subset to a file type or extension.

        Raises:
            CatalogError: Unknown filter key.
        """
        self._active_filter = parse_filter_key(key, self._extensions)
        self.reindex()
        return self._active_filter

    def clear_filter(self) -> None:
        self._active_filter = None
        self.reindex()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_suggestions(self, query: str) -> list[RankedCandidate]:
        query = query.strip()
        if not query:
            return []
        set_query_id()
        if self.catalog.dirty:
            self.reindex()
        raw = self.matcher.search(query, self.config.search.max_results)
        return self.ranker.rank(raw, query)

    def creation_suggestion(self, query: str) -> RankedCandidate | None:
        """Would-create placeholder offered when a query has no suggestions.

        Only offered when unfiltered or filtered to the primary document type.
        """
        if self._active_filter is not None and not self._active_filter.is_primary:
            return None
        entry = creation_placeholder(query)
        if entry is None:
            return None
        return RankedCandidate(raw=RawCandidate(entry=entry, score=0.0), rank_score=0.0)

    def classify_selection(
        self, candidate: RankedCandidate | RawCandidate, query: str
    ) -> MatchAnalysis:
        analysis = self.classifier.classify(candidate, query)
        jump = self.policy.decide(analysis, query, self.strategy)
        return finalize_display(analysis, jump, candidate, query)

    def resolve_selection(
        self, candidate: RankedCandidate | RawCandidate, query: str
    ) -> tuple[MatchAnalysis, SelectionTarget]:
        analysis = self.classify_selection(candidate, query)
        target = resolve_selection(candidate.entry, analysis)
        self._log.debug("search.selected", path=candidate.entry.path, action=target.action.value)
        return analysis, target

    # ------------------------------------------------------------------
    # Mutation entry points
    # ------------------------------------------------------------------

    def notify_create(self, entry: SearchEntry) -> bool:
        return self.updater.notify_create(entry)

    def notify_delete(self, path: str) -> bool:
        return self.updater.notify_delete(path)

    def notify_rename(self, old_path: str, entry: SearchEntry) -> bool:
        return self.updater.notify_rename(old_path, entry)

    def notify_modify(self, entry: SearchEntry) -> bool:
        return self.updater.notify_modify(entry)

    def notify_resolve_unresolved(self) -> bool:
        return self.updater.notify_resolve_unresolved()

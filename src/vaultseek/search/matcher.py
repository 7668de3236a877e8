"""Fuzzy match engine - the raw candidate source behind the ranker.

The ranker and classifier only depend on the ``FuzzyMatcher`` protocol.
``FuzzyMatchEngine`` is the default implementation: per-field approximate
matching with ``difflib.SequenceMatcher`` and a weighted, length-normed
product score where lower is better.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from difflib import SequenceMatcher
from typing import Protocol

import structlog

from vaultseek.config.models import FieldWeightsConfig, MatcherConfig
from vaultseek.search.models import (
    FieldKey,
    MatchSpan,
    RawCandidate,
    SearchEntry,
    field_values,
)

log = structlog.get_logger(__name__)

EPSILON = sys.float_info.epsilon


class FuzzyMatcher(Protocol):
    """Approximate matcher over a collection of entries."""

    def set_collection(self, entries: Sequence[SearchEntry]) -> None:
        """Replace the searchable collection (the re-index call)."""
        ...

    def search(self, query: str, limit: int | None = None) -> list[RawCandidate]:
        """Return raw candidates, best first."""
        ...


def _match_value(
    query: str,
    value: str,
    *,
    threshold: float,
    min_match_char_length: int,
) -> tuple[float, tuple[tuple[int, int], ...]] | None:
    """Match a lowercased query against one field value.

    Returns (score, inclusive index pairs) or None when the value does not
    match. Score is the fraction of query characters left unmatched.
    """
    haystack = value.lower()
    if not haystack or not query:
        return None

    pos = haystack.find(query)
    if pos >= 0:
        return 0.0, ((pos, pos + len(query) - 1),)

    # Query characters absent from the value are a lower bound on errors
    missing = sum(1 for ch in query if ch not in haystack)
    if missing / len(query) > threshold:
        return None

    blocks = [
        b
        for b in SequenceMatcher(None, query, haystack, autojunk=False).get_matching_blocks()
        if b.size
    ]
    matched = sum(b.size for b in blocks)
    if matched < min_match_char_length:
        return None
    score = (len(query) - matched) / len(query)
    if score > threshold:
        return None

    indices = tuple(
        (b.b, b.b + b.size - 1) for b in blocks if b.size >= min_match_char_length
    )
    if not indices:
        return None
    return score, indices


def _field_norm(value: str, field_norm_weight: float) -> float:
    tokens = len(value.split()) or 1
    return round(1 / tokens ** (0.5 * field_norm_weight), 3)


class FuzzyMatchEngine:
    """Default ``FuzzyMatcher`` over basename, aliases, title and headings."""

    def __init__(
        self,
        weights: FieldWeightsConfig | None = None,
        config: MatcherConfig | None = None,
        *,
        search_title: bool = True,
        search_headings: bool = True,
    ) -> None:
        weights = weights or FieldWeightsConfig()
        self._config = config or MatcherConfig()

        raw_keys: list[tuple[FieldKey, float]] = [
            (FieldKey.basename, weights.basename),
            (FieldKey.aliases, weights.aliases),
        ]
        if search_title:
            raw_keys.append((FieldKey.title, weights.title))
        if search_headings:
            raw_keys.append((FieldKey.headings, weights.headings))
        total = sum(w for _, w in raw_keys)
        self._keys = [(key, w / total) for key, w in raw_keys]

        self._collection: tuple[SearchEntry, ...] = ()
        self.rebuild_count = 0

    @property
    def keys(self) -> list[FieldKey]:
        return [key for key, _ in self._keys]

    @property
    def collection(self) -> tuple[SearchEntry, ...]:
        return self._collection

    def set_collection(self, entries: Sequence[SearchEntry]) -> None:
        self._collection = tuple(entries)
        self.rebuild_count += 1
        log.debug("matcher.reindexed", entries=len(self._collection), rebuilds=self.rebuild_count)

    def search(self, query: str, limit: int | None = None) -> list[RawCandidate]:
        needle = query.strip().lower()
        if not needle:
            return []

        threshold = self._config.threshold
        min_len = self._config.min_match_char_length
        norm_weight = self._config.field_norm_weight

        results: list[RawCandidate] = []
        for ref_index, entry in enumerate(self._collection):
            spans: list[MatchSpan] = []
            total = 1.0
            for key, weight in self._keys:
                for value in field_values(entry, key):
                    hit = _match_value(
                        needle, value, threshold=threshold, min_match_char_length=min_len
                    )
                    if hit is None:
                        continue
                    score, indices = hit
                    spans.append(MatchSpan(key=key, value=value, indices=indices))
                    total *= max(score, EPSILON) ** (weight * _field_norm(value, norm_weight))
            if spans:
                results.append(
                    RawCandidate(
                        entry=entry, score=total, matches=tuple(spans), ref_index=ref_index
                    )
                )

        results.sort(key=lambda c: (c.score, c.ref_index))
        if limit is not None:
            results = results[:limit]
        return results

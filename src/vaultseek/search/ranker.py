"""Relevance ranking - re-orders raw matcher candidates for display.

The matcher's single score conflates field importance with match shape.
The ranker scores every candidate on four additive factors:

- field priority of its best span (basename/aliases > headings > title)
- match ratio: matched characters / field length for that span
- position: ``1 - start / field length`` for that span
- match count: number of matching spans across all fields

Highest aggregate first; ties keep the matcher's order. Pure: no state
is kept between calls, so a superseded query's result can be dropped.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from vaultseek.config.models import RankingConfig
from vaultseek.search.models import MatchSpan, RankedCandidate, RankFactors, RawCandidate

_default_log = structlog.get_logger(__name__)


def _clipped_length(start: int, end: int, field_length: int) -> int:
    start = max(start, 0)
    end = min(end, field_length - 1)
    return max(end - start + 1, 0)


def span_ratio_and_position(span: MatchSpan) -> tuple[float, float]:
    """Unweighted (match ratio, position) for one span; zeros when degenerate."""
    field_length = len(span.value)
    if field_length == 0 or not span.indices:
        return 0.0, 0.0
    matched = sum(_clipped_length(s, e, field_length) for s, e in span.indices)
    ratio = min(matched / field_length, 1.0)
    start = min(max(span.indices[0][0], 0), field_length)
    position = 1.0 - start / field_length
    return ratio, position


class RelevanceRanker:
    """Multi-factor re-ranking of raw candidates."""

    def __init__(self, config: RankingConfig | None = None, *, logger: Any = None) -> None:
        self._config = config or RankingConfig()
        self._priorities = self._config.field_priorities()
        self._log = logger or _default_log

    def factors(self, candidate: RawCandidate) -> RankFactors:
        """Weighted factors for one candidate; all zero when it has no spans."""
        cfg = self._config
        if not candidate.matches:
            return RankFactors()

        best = (0.0, 0.0, 0.0)
        best_partial = float("-inf")
        for span in candidate.matches:
            priority = self._priorities.get(span.key, 0.0)
            ratio, position = span_ratio_and_position(span)
            partial = (
                cfg.field_priority_weight * priority
                + cfg.match_ratio_weight * ratio
                + cfg.position_weight * position
            )
            if partial > best_partial:
                best_partial = partial
                best = (priority, ratio, position)

        priority, ratio, position = best
        span_count = len(candidate.matches)
        return RankFactors(
            field_priority=cfg.field_priority_weight * priority,
            match_ratio=cfg.match_ratio_weight * ratio,
            position=cfg.position_weight * position,
            match_count=cfg.match_count_weight * span_count,
        )

    def rank(self, candidates: Sequence[RawCandidate], query: str) -> list[RankedCandidate]:
        """Order candidates by aggregate score, stable on input order."""
        if not query.strip() or not candidates:
            return []

        scored: list[tuple[float, int, RawCandidate, RankFactors]] = []
        for index, candidate in enumerate(candidates):
            factors = self.factors(candidate)
            scored.append((factors.total, index, candidate, factors))
        scored.sort(key=lambda item: (-item[0], item[1]))
        ranked = [
            RankedCandidate(raw=candidate, rank_score=total, factors=factors)
            for total, _, candidate, factors in scored
        ]

        self._log.debug(
            "ranker.ranked",
            query=query,
            candidates=len(ranked),
            top=ranked[0].entry.path,
            top_score=round(ranked[0].rank_score, 4),
        )
        return ranked

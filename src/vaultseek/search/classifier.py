"""Match intent classification - what selecting a candidate means.

A priority cascade, first applicable rule wins:

1. exact-file: basename equals the query (case-insensitive, trimmed)
2. file-alias: an alias matched; an exact alias beats any computed confidence
3. file-partial: the basename matched, but not exactly
4. title-match: the title matched with confidence above 0.6
5. heading-content: a heading matched
6. fallback: file-partial with confidence 0.3

File and alias hits dominate title and heading hits regardless of raw
score. Spans whose value is not actually present on the entry are
ignored and the cascade falls through.
"""

from __future__ import annotations

from typing import Any

import structlog

from vaultseek.search.confidence import match_confidence
from vaultseek.search.models import (
    DisplayInfo,
    DisplayKind,
    FieldKey,
    MatchAnalysis,
    MatchIntent,
    MatchSpan,
    RankedCandidate,
    RawCandidate,
    SearchEntry,
    field_values,
)

_default_log = structlog.get_logger(__name__)

TITLE_ACCEPT_THRESHOLD = 0.6
FALLBACK_CONFIDENCE = 0.3


def _present_spans(entry: SearchEntry, spans: tuple[MatchSpan, ...]) -> list[MatchSpan]:
    return [span for span in spans if span.value in field_values(entry, span.key)]


def _best_span(spans: list[MatchSpan], query: str) -> tuple[MatchSpan, float]:
    """Highest-confidence span; the earliest wins ties."""
    best = spans[0]
    best_confidence = match_confidence(best, query)
    for span in spans[1:]:
        confidence = match_confidence(span, query)
        if confidence > best_confidence:
            best, best_confidence = span, confidence
    return best, best_confidence


class MatchIntentClassifier:
    """Classifies one candidate against the query that produced it."""

    def __init__(self, *, logger: Any = None) -> None:
        self._log = logger or _default_log

    def classify(self, candidate: RankedCandidate | RawCandidate, query: str) -> MatchAnalysis:
        raw = candidate.raw if isinstance(candidate, RankedCandidate) else candidate
        analysis = self._cascade(raw, query.strip().lower())
        self._log.debug(
            "classifier.classified",
            query=query,
            path=raw.entry.path,
            matched=[span.key.value for span in raw.matches],
            intent=analysis.intent.label,
            confidence=round(analysis.confidence, 4),
        )
        return analysis

    def _cascade(self, raw: RawCandidate, needle: str) -> MatchAnalysis:
        entry = raw.entry
        spans = _present_spans(entry, raw.matches)
        by_key: dict[FieldKey, list[MatchSpan]] = {}
        for span in spans:
            by_key.setdefault(span.key, []).append(span)

        if needle and entry.basename.strip().lower() == needle:
            return MatchAnalysis(
                intent=MatchIntent.EXACT_FILE,
                confidence=1.0,
                display=DisplayInfo(DisplayKind.file, entry.basename),
            )

        if alias_spans := by_key.get(FieldKey.aliases):
            return self._alias_analysis(alias_spans, needle)

        if basename_spans := by_key.get(FieldKey.basename):
            span, confidence = _best_span(basename_spans, needle)
            return MatchAnalysis(
                intent=MatchIntent.FILE_PARTIAL,
                confidence=confidence,
                display=DisplayInfo(DisplayKind.file, span.value),
            )

        if title_spans := by_key.get(FieldKey.title):
            span, confidence = _best_span(title_spans, needle)
            if confidence > TITLE_ACCEPT_THRESHOLD:
                return MatchAnalysis(
                    intent=MatchIntent.TITLE_MATCH,
                    confidence=confidence,
                    display=DisplayInfo(DisplayKind.title, span.value),
                )

        if heading_spans := by_key.get(FieldKey.headings):
            span, confidence = _best_span(heading_spans, needle)
            return MatchAnalysis(
                intent=MatchIntent.HEADING_CONTENT,
                confidence=confidence,
                matched_heading=span.value,
                display=DisplayInfo(DisplayKind.heading, span.value),
            )

        return MatchAnalysis(
            intent=MatchIntent.FILE_PARTIAL,
            confidence=FALLBACK_CONFIDENCE,
            display=DisplayInfo(DisplayKind.file, entry.basename),
        )

    def _alias_analysis(self, alias_spans: list[MatchSpan], needle: str) -> MatchAnalysis:
        for span in alias_spans:
            if span.value.strip().lower() == needle:
                return MatchAnalysis(
                    intent=MatchIntent.FILE_ALIAS,
                    confidence=1.0,
                    display=DisplayInfo(DisplayKind.alias, span.value),
                )
        span, confidence = _best_span(alias_spans, needle)
        return MatchAnalysis(
            intent=MatchIntent.FILE_ALIAS,
            confidence=confidence,
            display=DisplayInfo(DisplayKind.alias, span.value),
        )

"""Match confidence scoring.

    confidence = length_ratio * position_weight * similarity

- length_ratio: longest contiguous matched run / query length, capped at 1
- position_weight: 1.0 when the first matched range starts at index 0, else 0.7
- similarity: (max_len - levenshtein) / max_len over the lowercased
  field value and query

Heading-jump thresholds are calibrated against this exact formula, so the
constants here are load-bearing.
"""

from __future__ import annotations

from vaultseek.search.models import MatchSpan

OFFSET_POSITION_WEIGHT = 0.7


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance over code points (insert, delete, substitute)."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalized edit-distance similarity in [0, 1]; 0 when both are empty."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return (longest - levenshtein(a, b)) / longest


def match_confidence(span: MatchSpan, query: str) -> float:
    """Confidence that ``span`` evidences the query, in [0, 1].

    Division by zero (empty value, empty query) yields 0, not an error.
    """
    value = span.value.lower()
    needle = query.strip().lower()
    if not value or not needle or not span.indices:
        return 0.0
    if value == needle:
        return 1.0

    length_ratio = min(span.longest_run / len(needle), 1.0)
    position_weight = 1.0 if span.indices[0][0] == 0 else OFFSET_POSITION_WEIGHT
    return length_ratio * position_weight * similarity(value, needle)

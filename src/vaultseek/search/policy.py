"""Heading jump policy - open the entry, or jump to the matched heading."""

from __future__ import annotations

from enum import StrEnum

from vaultseek.search.models import MatchAnalysis, MatchIntent


class HeadingJumpStrategy(StrEnum):
    never = "never"
    always = "always"
    smart = "smart"


# (max query length, confidence threshold). Short queries produce many
# incidental heading hits, so they need their own tier.
_SMART_THRESHOLDS: tuple[tuple[int, float], ...] = (
    (3, 0.05),
    (6, 0.08),
)
_SMART_LONG_THRESHOLD = 0.15


def smart_threshold(query: str) -> float:
    """Confidence a heading match must exceed under the smart strategy."""
    length = len(query.strip())
    for max_length, threshold in _SMART_THRESHOLDS:
        if length <= max_length:
            return threshold
    return _SMART_LONG_THRESHOLD


class HeadingJumpPolicy:
    """Decides heading navigation; ``enabled=False`` behaves as ``never``."""

    def __init__(self, *, enabled: bool = True) -> None:
        self.enabled = enabled

    def decide(
        self,
        analysis: MatchAnalysis,
        query: str,
        strategy: HeadingJumpStrategy | str = HeadingJumpStrategy.smart,
    ) -> bool:
        strategy = HeadingJumpStrategy(strategy)
        if not self.enabled or strategy == HeadingJumpStrategy.never:
            return False
        if analysis.intent != MatchIntent.HEADING_CONTENT:
            return False
        if strategy == HeadingJumpStrategy.always:
            return True
        return analysis.confidence > smart_threshold(query)

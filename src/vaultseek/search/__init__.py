"""Search module - in-memory relevance engine for search-as-you-type.

Public API is ``VaultSearch`` in ``vaultseek.search.engine``; the
components it wires together are importable individually.
"""

from vaultseek.search.catalog import EntryCatalog
from vaultseek.search.classifier import MatchIntentClassifier
from vaultseek.search.engine import VaultSearch
from vaultseek.search.matcher import FuzzyMatchEngine, FuzzyMatcher
from vaultseek.search.models import (
    DisplayInfo,
    DisplayKind,
    FieldKey,
    FileType,
    MatchAnalysis,
    MatchIntent,
    MatchSpan,
    RankedCandidate,
    RankFactors,
    RawCandidate,
    SearchEntry,
    StandardFile,
    UnresolvedReference,
    WebLink,
)
from vaultseek.search.policy import HeadingJumpPolicy, HeadingJumpStrategy
from vaultseek.search.ranker import RelevanceRanker
from vaultseek.search.selection import SelectionAction, SelectionTarget
from vaultseek.search.updater import EntrySource, IncrementalIndexUpdater

__all__ = [
    # Facade
    "VaultSearch",
    # Components
    "EntryCatalog",
    "FuzzyMatcher",
    "FuzzyMatchEngine",
    "RelevanceRanker",
    "MatchIntentClassifier",
    "HeadingJumpPolicy",
    "HeadingJumpStrategy",
    "IncrementalIndexUpdater",
    "EntrySource",
    # Entries
    "SearchEntry",
    "StandardFile",
    "UnresolvedReference",
    "WebLink",
    "FileType",
    "FieldKey",
    # Results
    "MatchSpan",
    "RawCandidate",
    "RankedCandidate",
    "RankFactors",
    "MatchAnalysis",
    "MatchIntent",
    "DisplayInfo",
    "DisplayKind",
    "SelectionAction",
    "SelectionTarget",
]

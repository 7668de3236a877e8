"""Config module exports."""

from vaultseek.config.loader import load_config
from vaultseek.config.models import (
    FieldWeightsConfig,
    HeadingJumpConfig,
    LoggingConfig,
    MatcherConfig,
    RankingConfig,
    SearchConfig,
    VaultSeekConfig,
)

__all__ = [
    "load_config",
    "VaultSeekConfig",
    "FieldWeightsConfig",
    "HeadingJumpConfig",
    "LoggingConfig",
    "MatcherConfig",
    "RankingConfig",
    "SearchConfig",
]

"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (VAULTSEEK__SECTION__KEY)
3. Vault YAML (<vault>/.vaultseek/config.yaml)
4. Global YAML (~/.config/vaultseek/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    VAULTSEEK__<SECTION>__<KEY>=<VALUE>

Examples:
    VAULTSEEK__LOGGING__LEVEL=DEBUG
    VAULTSEEK__SEARCH__MAX_RESULTS=20
    VAULTSEEK__HEADING_JUMP__STRATEGY=never
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
HeadingJumpStrategyName = Literal["never", "always", "smart"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        VAULTSEEK__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every ranked query.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class FieldWeightsConfig(BaseModel):
    """Fuzzy matcher key weights.

    Env vars:
        VAULTSEEK__FIELD_WEIGHTS__BASENAME, ..._ALIASES, ..._TITLE, ..._HEADINGS
    """

    basename: float = Field(default=10.0, gt=0)
    aliases: float = Field(default=8.0, gt=0)
    title: float = Field(default=2.5, gt=0)
    headings: float = Field(default=1.0, gt=0)


class MatcherConfig(BaseModel):
    """Default fuzzy matcher tuning.

    Env vars:
        VAULTSEEK__MATCHER__THRESHOLD: Max error ratio for a field to match
        VAULTSEEK__MATCHER__FIELD_NORM_WEIGHT: Field-length norm exponent
    """

    threshold: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Max fraction of query characters that may go unmatched. "
        "0 requires every query character to match.",
    )
    field_norm_weight: float = Field(
        default=0.5,
        ge=0.0,
        description="How strongly long field values are penalised in the raw score.",
    )
    min_match_char_length: int = Field(default=1, ge=1)


class RankingConfig(BaseModel):
    """Relevance ranker factor weights and per-field priorities.

    Literal constants are tunable defaults; only the field priority
    ordering basename/aliases > headings > title is enforced.
    """

    field_priority_weight: float = Field(default=4.0, ge=0.0)
    match_ratio_weight: float = Field(default=2.0, ge=0.0)
    position_weight: float = Field(default=1.0, ge=0.0)
    match_count_weight: float = Field(default=0.05, ge=0.0)

    basename_priority: float = Field(default=1.0, ge=0.0)
    aliases_priority: float = Field(default=0.9, ge=0.0)
    headings_priority: float = Field(default=0.5, ge=0.0)
    title_priority: float = Field(default=0.4, ge=0.0)

    @model_validator(mode="after")
    def validate_priority_order(self) -> "RankingConfig":
        if min(self.basename_priority, self.aliases_priority) <= self.headings_priority:
            raise ValueError("basename and aliases priorities must exceed headings priority")
        if self.headings_priority <= self.title_priority:
            raise ValueError("headings priority must exceed title priority")
        return self

    def field_priorities(self) -> dict[str, float]:
        return {
            "basename": self.basename_priority,
            "aliases": self.aliases_priority,
            "headings": self.headings_priority,
            "title": self.title_priority,
        }


class SearchConfig(BaseModel):
    """Search behaviour.

    Env vars:
        VAULTSEEK__SEARCH__MAX_RESULTS: Max suggestions per query
        VAULTSEEK__SEARCH__MARKDOWN_ONLY: Only search markdown (+ additional extensions)
        VAULTSEEK__SEARCH__ADDITIONAL_EXTENSIONS: Comma-separated, e.g. "pdf, canvas"
    """

    max_results: int = Field(default=8, ge=1)
    search_title: bool = True
    search_headings: bool = True
    include_unresolved: bool = Field(
        default=True,
        description="Offer link targets that do not exist yet as suggestions.",
    )
    markdown_only: bool = False
    additional_extensions: str = ""

    def extension_list(self) -> list[str]:
        """Parse additional_extensions into lowercase extensions without dots."""
        return [
            ext.strip().lower().lstrip(".")
            for ext in self.additional_extensions.split(",")
            if ext.strip().lstrip(".")
        ]


class HeadingJumpConfig(BaseModel):
    """Heading jump behaviour.

    Env vars:
        VAULTSEEK__HEADING_JUMP__AUTO_JUMP_TO_HEADING: Master switch
        VAULTSEEK__HEADING_JUMP__STRATEGY: never | always | smart
    """

    auto_jump_to_heading: bool = True
    strategy: HeadingJumpStrategyName = "smart"


class VaultSeekConfig(BaseModel):
    """Root configuration for vaultseek."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    field_weights: FieldWeightsConfig = Field(default_factory=FieldWeightsConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    heading_jump: HeadingJumpConfig = Field(default_factory=HeadingJumpConfig)

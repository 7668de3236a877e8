"""Core module exports."""

from vaultseek.core.errors import (
    CatalogError,
    ConfigError,
    ErrorCode,
    InternalError,
    VaultSeekError,
)
from vaultseek.core.logging import (
    clear_query_id,
    configure_logging,
    get_logger,
    get_query_id,
    set_query_id,
)
from vaultseek.core.progress import pluralize, progress, status

__all__ = [
    # Errors
    "VaultSeekError",
    "ConfigError",
    "CatalogError",
    "ErrorCode",
    "InternalError",
    # Logging
    "clear_query_id",
    "configure_logging",
    "get_logger",
    "get_query_id",
    "set_query_id",
    # Progress
    "pluralize",
    "progress",
    "status",
]

"""vaultseek error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Catalog / index
- 9xxx: Internal

Conditions that are part of normal search-as-you-type flow (empty query,
no candidates, duplicate create, rename of an unknown path) are never
errors and never raise.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Catalog (3xxx)
    CATALOG_INVALID_ENTRY = 3001
    CATALOG_INVALID_FILTER = 3002
    CATALOG_VAULT_NOT_FOUND = 3003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class VaultSeekError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(VaultSeekError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class CatalogError(VaultSeekError):
    """Entry catalog and vault errors."""

    @classmethod
    def invalid_entry(cls, path: str, reason: str) -> "CatalogError":
        return cls(
            code=ErrorCode.CATALOG_INVALID_ENTRY,
            message=f"Invalid search entry '{path}': {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_filter(cls, key: str) -> "CatalogError":
        return cls(
            code=ErrorCode.CATALOG_INVALID_FILTER,
            message=f"Unknown file type or extension filter: {key}",
            details={"filter": key},
        )

    @classmethod
    def vault_not_found(cls, path: str) -> "CatalogError":
        return cls(
            code=ErrorCode.CATALOG_VAULT_NOT_FOUND,
            message=f"Vault directory not found: {path}",
            details={"path": path},
        )


class InternalError(VaultSeekError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )

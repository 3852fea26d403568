"""impactlens error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Analysis
- 9xxx: Internal

Local, recoverable failures (a VCS read, an unreadable file during a scan)
never raise; they are absorbed by the component that hit them and surfaced as
a reason string or status field. These errors are for misuse and for
conditions the caller must act on.
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

    # Analysis (3xxx)
    ANALYSIS_FILE_NOT_FOUND = 3001
    ANALYSIS_INVALID_MODE = 3002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class ImpactLensError(Exception):
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


class ConfigError(ImpactLensError):
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


class AnalysisError(ImpactLensError):
    """Errors the caller of an analysis must handle."""

    @classmethod
    def file_not_found(cls, path: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_FILE_NOT_FOUND,
            message=f"No buffer supplied and file is unreadable: {path}",
            details={"path": path},
        )

    @classmethod
    def invalid_mode(cls, mode: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_INVALID_MODE,
            message=f"Unknown baseline mode: {mode!r} (expected 'local' or 'pr')",
            details={"mode": mode},
        )


class InternalError(ImpactLensError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )

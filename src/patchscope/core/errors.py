"""patchscope error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Project input (missing files, plugin list)
- 4xxx: Syntax
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Project input (3xxx)
    FILE_NOT_FOUND = 3001
    FILE_UNREADABLE = 3002
    PLUGIN_CONFIG_INVALID = 3003

    # Syntax (4xxx)
    PARSE_FAILED = 4001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class PatchScopeError(Exception):
    """Base error with structured context for reports."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'FILE_NOT_FOUND')."""
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


class ConfigError(PatchScopeError):
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


class ProjectError(PatchScopeError):
    """Errors reading the game project. Always fatal for the run."""

    @classmethod
    def file_not_found(cls, path: str) -> "ProjectError":
        return cls(
            code=ErrorCode.FILE_NOT_FOUND,
            message=f"File not found: {path}",
            details={"path": path},
        )

    @classmethod
    def file_unreadable(cls, path: str, reason: str) -> "ProjectError":
        return cls(
            code=ErrorCode.FILE_UNREADABLE,
            message=f"Cannot read {path}: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def plugin_config_invalid(cls, path: str, reason: str) -> "ProjectError":
        return cls(
            code=ErrorCode.PLUGIN_CONFIG_INVALID,
            message=f"Invalid plugin list in {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class ParseError(PatchScopeError):
    """Source text that does not parse cleanly."""

    @classmethod
    def malformed(cls, name: str, line: int, column: int) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_FAILED,
            message=f"Syntax error in {name} at line {line}, column {column}",
            details={"file": name, "line": line, "column": column},
        )


class InternalError(PatchScopeError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )

"""Core module exports."""

from patchscope.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    ParseError,
    PatchScopeError,
    ProjectError,
)
from patchscope.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from patchscope.core.progress import spinner, status

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "ParseError",
    "PatchScopeError",
    "ProjectError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "spinner",
    "status",
]

"""Config module exports."""

from patchscope.config.loader import PatchScopeSettings, load_config
from patchscope.config.models import (
    AnalysisConfig,
    EngineConfig,
    LoggingConfig,
    LogOutputConfig,
    PatchScopeConfig,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "EngineConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "PatchScopeConfig",
    "PatchScopeSettings",
]

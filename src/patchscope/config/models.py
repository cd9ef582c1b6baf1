"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (PATCHSCOPE__SECTION__KEY)
3. Project YAML (<project>/.patchscope/config.yaml)
4. Global YAML (~/.config/patchscope/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    PATCHSCOPE__<SECTION>__<KEY>=<VALUE>

Examples:
    PATCHSCOPE__LOGGING__LEVEL=DEBUG
    PATCHSCOPE__ENGINE__PLUGINS_DIR=js/plugins
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

MV_CORE_LIBRARIES = [
    "rpg_core.js",
    "rpg_managers.js",
    "rpg_objects.js",
    "rpg_scenes.js",
    "rpg_sprites.js",
    "rpg_windows.js",
]
MZ_CORE_LIBRARIES = [
    "rmmz_core.js",
    "rmmz_managers.js",
    "rmmz_objects.js",
    "rmmz_scenes.js",
    "rmmz_sprites.js",
    "rmmz_windows.js",
]


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
        PATCHSCOPE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. INFO logs one event per analysis phase.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class EngineConfig(BaseModel):
    """Game project layout.

    Env vars:
        PATCHSCOPE__ENGINE__PLUGINS_DIR: Plugin directory relative to the project
        PATCHSCOPE__ENGINE__PLUGIN_CONFIG: Plugin list script relative to the project
    """

    mv_core_libraries: list[str] = Field(
        default_factory=lambda: list(MV_CORE_LIBRARIES),
        description="Core class files for MV projects, in load order.",
    )
    mz_core_libraries: list[str] = Field(
        default_factory=lambda: list(MZ_CORE_LIBRARIES),
        description="Core class files for MZ projects, in load order.",
    )
    mz_marker: str = Field(
        default="js/rmmz_core.js",
        description="File whose presence marks an MZ project.",
    )
    core_dir: str = Field(default="js", description="Directory holding the core libraries.")
    plugins_dir: str = Field(default="js/plugins", description="Directory holding plugins.")
    plugin_config: str = Field(
        default="js/plugins.js",
        description="Script declaring the $plugins list. Decoded, never executed.",
    )
    plugin_config_variable: str = Field(default="$plugins")


class AnalysisConfig(BaseModel):
    """Edit history tuning.

    Env vars:
        PATCHSCOPE__ANALYSIS__RESERVED_CLASS_NAMES: JSON list of skipped class names
    """

    reserved_class_names: list[str] = Field(
        default_factory=lambda: ["$", "_"],
        description="Bootstrap aliases (jQuery, lodash) never treated as engine classes.",
    )
    function_literal_kinds: list[str] = Field(
        default_factory=lambda: ["function_expression", "function"],
        description="Node kinds accepted as the right side of a method assignment. "
        "'function' covers grammars older than tree-sitter-javascript 0.21.",
    )

    @field_validator("function_literal_kinds")
    @classmethod
    def validate_kinds(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one function literal kind is required")
        return v


class PatchScopeConfig(BaseModel):
    """Root configuration for patchscope."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (PATCHSCOPE__SECTION__KEY)
3. Project config (<project>/.patchscope/config.yaml)
4. Global config (~/.config/patchscope/config.yaml)
5. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from patchscope.config.models import (
    AnalysisConfig,
    EngineConfig,
    LoggingConfig,
    PatchScopeConfig,
)
from patchscope.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/patchscope/config.yaml").expanduser()
PROJECT_CONFIG_NAME = Path(".patchscope") / "config.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with an instance-based YAML source."""

    class PatchScopeSettings(BaseSettings):
        """Root config. Env vars: PATCHSCOPE__LOGGING__LEVEL, PATCHSCOPE__ENGINE__PLUGINS_DIR, etc."""

        model_config = SettingsConfigDict(
            env_prefix="PATCHSCOPE__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        engine: EngineConfig = EngineConfig()
        analysis: AnalysisConfig = AnalysisConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return PatchScopeSettings


PatchScopeSettings = _make_settings_class({})


def load_config(project_root: Path | None = None, **kwargs: Any) -> PatchScopeConfig:
    """Load configuration for a game project.

    Args:
        project_root: Game project directory. Its .patchscope/config.yaml is
            layered over the global config when present.
        **kwargs: Section overrides, e.g. ``logging={"level": "DEBUG"}``.

    Raises:
        ConfigError: On unparseable YAML or values that fail validation.
    """
    yaml_config = _load_yaml(GLOBAL_CONFIG_PATH)
    if project_root is not None:
        yaml_config = _deep_merge(yaml_config, _load_yaml(project_root / PROJECT_CONFIG_NAME))

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        first = e.errors()[0]
        field_path = ".".join(str(part) for part in first["loc"])
        raise ConfigError.invalid_value(field_path, first.get("input"), first["msg"]) from e

    return PatchScopeConfig.model_validate(settings.model_dump())

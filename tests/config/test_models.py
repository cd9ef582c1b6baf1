"""Tests for config/models.py."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from patchscope.config.models import (
    MV_CORE_LIBRARIES,
    MZ_CORE_LIBRARIES,
    AnalysisConfig,
    EngineConfig,
    LogOutputConfig,
    PatchScopeConfig,
)


class TestLogOutputConfig:
    """Log output destination validation."""

    @pytest.mark.parametrize("destination", ["stderr", "stdout"])
    def test_given_stream_destination_when_validated_then_kept(self, destination: str) -> None:
        assert LogOutputConfig(destination=destination).destination == destination

    def test_given_relative_file_when_validated_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/patchscope.log")


class TestEngineConfig:
    """Engine layout defaults."""

    def test_given_defaults_when_created_then_six_core_libraries_each(self) -> None:
        config = EngineConfig()

        assert config.mv_core_libraries == MV_CORE_LIBRARIES
        assert config.mz_core_libraries == MZ_CORE_LIBRARIES
        assert len(config.mv_core_libraries) == len(config.mz_core_libraries) == 6
        assert config.plugin_config_variable == "$plugins"

    def test_given_two_configs_when_mutated_then_lists_not_shared(self) -> None:
        first = EngineConfig()
        first.mv_core_libraries.append("extra.js")

        assert EngineConfig().mv_core_libraries == MV_CORE_LIBRARIES


class TestAnalysisConfig:
    """Analysis tuning validation."""

    def test_given_empty_function_kinds_when_validated_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AnalysisConfig(function_literal_kinds=[])


class TestPatchScopeConfig:
    """Root config."""

    def test_given_nested_dict_when_validated_then_sections_built(self) -> None:
        config = PatchScopeConfig.model_validate(
            {"logging": {"level": "DEBUG"}, "analysis": {"reserved_class_names": ["$"]}}
        )

        assert config.logging.level == "DEBUG"
        assert config.analysis.reserved_class_names == ["$"]
        assert config.engine == EngineConfig()

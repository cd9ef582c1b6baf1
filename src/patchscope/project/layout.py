"""Game project layout: engine version, core libraries, plugin paths."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from patchscope.config.models import EngineConfig


class EngineVersion(str, Enum):
    MV = "mv"
    MZ = "mz"


@dataclass(frozen=True)
class ProjectLayout:
    """Where a project keeps the files the analysis reads."""

    root: Path
    version: EngineVersion
    engine: EngineConfig

    @classmethod
    def detect(cls, root: Path, engine: EngineConfig | None = None) -> ProjectLayout:
        """MZ when the MZ marker file exists, MV otherwise."""
        engine = engine or EngineConfig()
        version = EngineVersion.MZ if (root / engine.mz_marker).exists() else EngineVersion.MV
        return cls(root=root, version=version, engine=engine)

    @property
    def core_libraries(self) -> list[str]:
        if self.version is EngineVersion.MZ:
            return list(self.engine.mz_core_libraries)
        return list(self.engine.mv_core_libraries)

    @property
    def core_paths(self) -> list[Path]:
        """Core library files in load order."""
        return [self.root / self.engine.core_dir / name for name in self.core_libraries]

    @property
    def plugin_config_path(self) -> Path:
        return self.root / self.engine.plugin_config

    def plugin_path(self, name: str) -> Path:
        return self.root / self.engine.plugins_dir / f"{name}.js"

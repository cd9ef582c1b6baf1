"""Tests for project/layout.py and project/loader.py."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from patchscope.analysis.models import ConflictKind
from patchscope.config.models import MV_CORE_LIBRARIES, MZ_CORE_LIBRARIES, EngineConfig
from patchscope.core.errors import ErrorCode, ParseError, ProjectError
from patchscope.project.layout import EngineVersion, ProjectLayout
from patchscope.project.loader import find_conflicts, list_scripts, load_sources, read_file
from patchscope.syntax.tree import FileOrigin

MakeProject = Callable[..., Path]

OVERWRITE_A = "Scene_Map.prototype.update = function() { this.updateA(); };"
OVERWRITE_B = "Scene_Map.prototype.update = function() { this.updateB(); };"
PATCH = (
    "var _update = Scene_Map.prototype.update;\n"
    "Scene_Map.prototype.update = function() { _update.call(this); };"
)


class TestProjectLayout:
    """Engine version detection and paths."""

    def test_given_mz_marker_when_detected_then_mz(self, make_project: MakeProject) -> None:
        root = make_project(mz=True)

        layout = ProjectLayout.detect(root)

        assert layout.version is EngineVersion.MZ
        assert [p.name for p in layout.core_paths] == MZ_CORE_LIBRARIES

    def test_given_no_marker_when_detected_then_mv(self, make_project: MakeProject) -> None:
        root = make_project()

        layout = ProjectLayout.detect(root)

        assert layout.version is EngineVersion.MV
        assert [p.name for p in layout.core_paths] == MV_CORE_LIBRARIES
        assert layout.plugin_path("A") == root / "js" / "plugins" / "A.js"

    def test_given_custom_engine_config_when_detected_then_paths_follow(self, tmp_path: Path) -> None:
        engine = EngineConfig(core_dir="www/js", plugins_dir="www/js/plugins")

        layout = ProjectLayout.detect(tmp_path, engine)

        assert layout.core_paths[0] == tmp_path / "www" / "js" / "rpg_core.js"
        assert layout.plugin_path("A") == tmp_path / "www" / "js" / "plugins" / "A.js"


class TestLoadSources:
    """Reading and parsing scripts in load order."""

    def test_given_project_when_listed_then_core_then_enabled_plugins(
        self, make_project: MakeProject
    ) -> None:
        root = make_project({"B": "", "Off": "", "A": ""}, disabled=("Off",))

        scripts = list_scripts(ProjectLayout.detect(root))

        names = [(path.name, origin) for path, origin in scripts]
        assert names[: len(MV_CORE_LIBRARIES)] == [(n, FileOrigin.CORE) for n in MV_CORE_LIBRARIES]
        assert names[len(MV_CORE_LIBRARIES) :] == [
            ("B.js", FileOrigin.PLUGIN),
            ("A.js", FileOrigin.PLUGIN),
        ]

    def test_given_custom_reader_when_loaded_then_used_for_every_file(
        self, make_project: MakeProject
    ) -> None:
        root = make_project({"A": "var a;"})
        seen: list[str] = []

        def reader(path: Path) -> bytes:
            seen.append(path.name)
            return path.read_bytes()

        sources = load_sources(ProjectLayout.detect(root), reader)

        assert seen[0] == "plugins.js"
        assert [s.name for s in sources] == [*MV_CORE_LIBRARIES, "A.js"]

    def test_given_missing_plugin_when_loaded_then_file_not_found(
        self, make_project: MakeProject
    ) -> None:
        """A missing plugin is fatal; nothing is analyzed."""
        root = make_project({"Ghost": ""}, write_plugin_files=False)

        with pytest.raises(ProjectError) as exc_info:
            load_sources(ProjectLayout.detect(root))

        assert exc_info.value.code == ErrorCode.FILE_NOT_FOUND
        assert exc_info.value.details["path"].endswith("Ghost.js")

    def test_given_unreadable_file_when_read_then_file_unreadable(self, tmp_path: Path) -> None:
        def reader(path: Path) -> bytes:
            raise PermissionError(13, "Permission denied", str(path))

        with pytest.raises(ProjectError) as exc_info:
            read_file(tmp_path / "rpg_core.js", reader)

        assert exc_info.value.code == ErrorCode.FILE_UNREADABLE
        assert exc_info.value.retryable is True

    def test_given_malformed_plugin_when_loaded_then_parse_error(
        self, make_project: MakeProject
    ) -> None:
        root = make_project({"Broken": "Scene_Map.prototype.update = function( {"})

        with pytest.raises(ParseError):
            load_sources(ProjectLayout.detect(root))


class TestFindConflicts:
    """Whole-project analysis."""

    def test_given_two_overwrites_when_analyzed_then_replace_conflict(
        self, make_project: MakeProject
    ) -> None:
        root = make_project({"A": OVERWRITE_A, "B": OVERWRITE_B})

        analysis = find_conflicts(root)

        [conflict] = analysis.conflicts
        assert conflict.kind is ConflictKind.REPLACE
        assert (conflict.earlier.file, conflict.later.file) == ("A.js", "B.js")

    def test_given_core_method_patched_then_replaced_when_analyzed_then_patch_goes_last(
        self, make_project: MakeProject
    ) -> None:
        root = make_project(
            {"Patch": PATCH, "Replace": OVERWRITE_B},
            core={"rpg_scenes.js": "Scene_Map.prototype.update = function() {};"},
        )

        analysis = find_conflicts(root)

        kinds = [(c.kind, c.earlier.file, c.later.file) for c in analysis.conflicts]
        assert kinds == [(ConflictKind.REPLACE, "Patch.js", "Replace.js")]
        assert analysis.suggest_order() == [["Replace.js"], ["Patch.js"]]

    def test_given_disabled_plugin_when_analyzed_then_excluded(
        self, make_project: MakeProject
    ) -> None:
        root = make_project({"A": OVERWRITE_A, "B": OVERWRITE_B}, disabled=("B",))

        analysis = find_conflicts(root)

        assert analysis.conflicts == ()
        assert analysis.plugin_files == ["A.js"]

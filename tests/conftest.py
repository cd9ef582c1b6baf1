"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import json
import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local patchscope package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of patchscope modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("patchscope"):
        del sys.modules[module_name]

from patchscope.config.models import MV_CORE_LIBRARIES, MZ_CORE_LIBRARIES  # noqa: E402
from patchscope.syntax.parser import JavaScriptParser  # noqa: E402
from patchscope.syntax.tree import FileOrigin, SourceFile  # noqa: E402

ParseJs = Callable[..., SourceFile]
MakeProject = Callable[..., Path]


@pytest.fixture(autouse=True)
def _isolate_global_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Never read the developer's ~/.config/patchscope/config.yaml."""
    missing = tmp_path_factory.mktemp("global-config") / "config.yaml"
    monkeypatch.setattr("patchscope.config.loader.GLOBAL_CONFIG_PATH", missing)
    for key in [k for k in os.environ if k.startswith("PATCHSCOPE__")]:
        monkeypatch.delenv(key)


@pytest.fixture
def parse_js() -> ParseJs:
    """Parse a JavaScript snippet into a SourceFile."""

    def _parse(code: str, name: str = "test.js", origin: FileOrigin = FileOrigin.PLUGIN) -> SourceFile:
        return JavaScriptParser.get().parse(name, code.encode("utf-8"), origin)

    return _parse


@pytest.fixture
def make_project(tmp_path: Path) -> MakeProject:
    """Build a game project on disk.

    ``plugins`` maps plugin name to source; every listed plugin is enabled
    unless named in ``disabled``. ``core`` maps core library file names to
    source; missing core files are written empty.
    """

    def _make(
        plugins: dict[str, str] | None = None,
        *,
        core: dict[str, str] | None = None,
        disabled: tuple[str, ...] = (),
        mz: bool = False,
        write_plugin_files: bool = True,
    ) -> Path:
        root = tmp_path / "project"
        js = root / "js"
        (js / "plugins").mkdir(parents=True, exist_ok=True)

        core = core or {}
        for name in MZ_CORE_LIBRARIES if mz else MV_CORE_LIBRARIES:
            (js / name).write_text(core.get(name, ""))

        plugins = plugins or {}
        entries = [
            {"name": name, "status": name not in disabled, "description": "", "parameters": {}}
            for name in plugins
        ]
        lines = ",\n".join(json.dumps(entry) for entry in entries)
        (js / "plugins.js").write_text(
            "// Generated by RPG Maker.\n// Do not edit this file directly.\nvar $plugins =\n[\n"
            + lines
            + "\n];\n"
        )
        if write_plugin_files:
            for name, source in plugins.items():
                (js / "plugins" / f"{name}.js").write_text(source)
        return root

    return _make

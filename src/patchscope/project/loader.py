"""Load a game project's scripts in engine load order and analyze them."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from patchscope.analysis.pipeline import Analysis, analyze
from patchscope.config.loader import load_config
from patchscope.config.models import PatchScopeConfig
from patchscope.core.errors import ProjectError
from patchscope.core.logging import get_logger, set_run_id
from patchscope.project.layout import ProjectLayout
from patchscope.project.plugins_config import enabled_plugins, read_plugin_config
from patchscope.syntax.parser import JavaScriptParser
from patchscope.syntax.tree import FileOrigin, SourceFile

log = get_logger("project.loader")

Reader = Callable[[Path], bytes]


def read_file(path: Path, reader: Reader | None = None) -> bytes:
    """Read ``path``; any failure is a fatal ``ProjectError``."""
    read = reader or Path.read_bytes
    try:
        return read(path)
    except FileNotFoundError as e:
        raise ProjectError.file_not_found(str(path)) from e
    except OSError as e:
        raise ProjectError.file_unreadable(str(path), e.strerror or str(e)) from e


def list_scripts(layout: ProjectLayout, reader: Reader | None = None) -> list[tuple[Path, FileOrigin]]:
    """Core libraries, then enabled plugins, in load order."""
    scripts = [(path, FileOrigin.CORE) for path in layout.core_paths]
    entries = read_plugin_config(
        layout.plugin_config_path.name,
        read_file(layout.plugin_config_path, reader),
        layout.engine.plugin_config_variable,
    )
    scripts.extend((layout.plugin_path(name), FileOrigin.PLUGIN) for name in enabled_plugins(entries))
    return scripts


def load_sources(
    layout: ProjectLayout,
    reader: Reader | None = None,
) -> list[SourceFile]:
    """Read and parse every script. Nothing is returned if any file fails.

    Files are named by basename, which is what the order output lists.
    """
    parser = JavaScriptParser.get()
    sources = []
    for path, origin in list_scripts(layout, reader):
        sources.append(parser.parse(path.name, read_file(path, reader), origin))
    log.info(
        "files_loaded",
        version=layout.version.value,
        core=sum(1 for s in sources if s.origin is FileOrigin.CORE),
        plugins=sum(1 for s in sources if s.origin is FileOrigin.PLUGIN),
    )
    return sources


def find_conflicts(
    project_path: Path,
    config: PatchScopeConfig | None = None,
    reader: Reader | None = None,
) -> Analysis:
    """Analyze the project at ``project_path``.

    Raises:
        ProjectError: A core library, plugin or the plugin list is missing,
            unreadable or invalid.
        ParseError: A script does not parse.
    """
    config = config or load_config(project_path)
    set_run_id()
    layout = ProjectLayout.detect(project_path, config.engine)
    return analyze(load_sources(layout, reader), config.analysis)

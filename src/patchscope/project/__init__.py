"""Game project input: layout, plugin list, script loading."""

from patchscope.project.layout import EngineVersion, ProjectLayout
from patchscope.project.loader import (
    Reader,
    find_conflicts,
    list_scripts,
    load_sources,
    read_file,
)
from patchscope.project.plugins_config import PluginEntry, enabled_plugins, read_plugin_config

__all__ = [
    "EngineVersion",
    "PluginEntry",
    "ProjectLayout",
    "Reader",
    "enabled_plugins",
    "find_conflicts",
    "list_scripts",
    "load_sources",
    "read_file",
    "read_plugin_config",
]

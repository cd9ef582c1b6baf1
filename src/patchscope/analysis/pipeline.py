"""Analysis pipeline: parsed files in, conflicts and load order out."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from patchscope.analysis.conflicts import enumerate_conflicts
from patchscope.analysis.history import build_history
from patchscope.analysis.inheritance import resolve_inheritance
from patchscope.analysis.models import Conflict, EditHistory, InheritanceMap
from patchscope.analysis.order import OrderPlan, plan_order, synthesize_order
from patchscope.config.models import AnalysisConfig
from patchscope.core.logging import get_logger
from patchscope.syntax.tree import FileOrigin, SourceFile

log = get_logger("analysis.pipeline")


@dataclass(frozen=True)
class Analysis:
    """Result of one run over a fixed, ordered file set.

    Histories and conflicts never change after construction. Only the
    ``ignored`` flags on edits do, so the order methods can be called again
    after every toggle.
    """

    files: tuple[SourceFile, ...]
    inheritance: InheritanceMap
    history: EditHistory
    conflicts: tuple[Conflict, ...]

    @property
    def plugin_files(self) -> list[str]:
        return [f.name for f in self.files if f.origin is FileOrigin.PLUGIN]

    @property
    def active_conflicts(self) -> list[Conflict]:
        return [c for c in self.conflicts if not c.ignored]

    def suggest_order(self) -> list[list[str]]:
        """Grouped load order over the plugin files."""
        groups = synthesize_order(self.conflicts, self.plugin_files)
        log.info("order_synthesized", groups=len(groups))
        return groups

    def plan_order(self) -> OrderPlan:
        """Grouped load order plus any cycles and broken constraints."""
        plan = plan_order(self.conflicts, self.plugin_files)
        log.info(
            "order_synthesized",
            groups=len(plan.groups),
            cycles=len(plan.cycles),
            violations=len(plan.violations),
        )
        return plan

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": [f.name for f in self.files],
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


def analyze(
    files: Sequence[SourceFile],
    config: AnalysisConfig | None = None,
) -> Analysis:
    """Run inheritance, history and conflict phases over ``files``.

    ``files`` must already be in load order: core libraries, then enabled
    plugins. Inheritance is resolved over every file before any history is
    built.
    """
    inheritance = resolve_inheritance(files)
    log.info("inheritance_resolved", classes=len(inheritance))

    history = build_history(files, inheritance, config)
    log.info("history_built", slots=len(history.methods), edits=history.edit_count)

    conflicts = enumerate_conflicts(history)
    log.info(
        "conflicts_found",
        total=len(conflicts),
        active=sum(1 for c in conflicts if not c.ignored),
    )
    return Analysis(
        files=tuple(files),
        inheritance=inheritance,
        history=history,
        conflicts=tuple(conflicts),
    )

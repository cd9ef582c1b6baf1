"""Conflict analysis: inheritance, edit histories, conflicts, load order."""

from patchscope.analysis.conflicts import enumerate_conflicts
from patchscope.analysis.history import HistoryBuilder, build_history, classify_patch
from patchscope.analysis.inheritance import resolve_inheritance
from patchscope.analysis.models import (
    AliasRecord,
    Conflict,
    ConflictKind,
    Edit,
    EditHistory,
    InheritanceMap,
    MethodKey,
    PatchStyle,
)
from patchscope.analysis.order import (
    OrderNode,
    OrderPlan,
    build_graph,
    detect_cycles,
    find_violations,
    plan_order,
    reachable,
    synthesize_order,
)
from patchscope.analysis.pipeline import Analysis, analyze

__all__ = [
    # Model
    "AliasRecord",
    "Conflict",
    "ConflictKind",
    "Edit",
    "EditHistory",
    "InheritanceMap",
    "MethodKey",
    "PatchStyle",
    # Phases
    "HistoryBuilder",
    "build_history",
    "classify_patch",
    "enumerate_conflicts",
    "resolve_inheritance",
    # Order
    "OrderNode",
    "OrderPlan",
    "build_graph",
    "detect_cycles",
    "find_violations",
    "plan_order",
    "reachable",
    "synthesize_order",
    # Pipeline
    "Analysis",
    "analyze",
]

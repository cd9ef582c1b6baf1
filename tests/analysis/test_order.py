"""Tests for analysis/order.py."""

from __future__ import annotations

import pytest

from patchscope.analysis.models import Conflict, ConflictKind, Edit, PatchStyle
from patchscope.analysis.order import (
    build_graph,
    detect_cycles,
    find_violations,
    plan_order,
    reachable,
    synthesize_order,
)
from patchscope.syntax.tree import Position, Span

_SPAN = Span(Position(1, 0, 0), Position(1, 0, 0))


def _edit(file: str, style: PatchStyle = PatchStyle.PATCHING, method: str = "update") -> Edit:
    return Edit(
        file=file,
        span=_SPAN,
        style=style,
        class_name="Scene_Map",
        method_name=method,
        is_static=False,
        display_name=f"Scene_Map.prototype.{method}",
        target_span=_SPAN,
        alias_count=0,
        changed=True,
    )


def _conflict(earlier: str, later: str, kind: ConflictKind = ConflictKind.OUTDATED) -> Conflict:
    """An active conflict between an edit in ``earlier`` and one in ``later``."""
    return Conflict(kind, _edit(earlier), _edit(later, PatchStyle.OVERWRITE))


class TestSynthesizeOrder:
    """Grouped load order."""

    def test_given_no_files_when_synthesized_then_empty(self) -> None:
        assert synthesize_order([]) == []

    def test_given_no_conflicts_when_synthesized_then_one_group_of_known_files(self) -> None:
        """Known files with no constraints share one group, in the given order."""
        assert synthesize_order([], ["A.js", "B.js", "C.js"]) == [["A.js", "B.js", "C.js"]]

    def test_given_one_conflict_when_synthesized_then_two_groups(self) -> None:
        """The later (replacing) file moves ahead of the earlier one."""
        # Given
        conflicts = [_conflict("A.js", "B.js")]

        # When
        groups = synthesize_order(conflicts)

        # Then
        assert groups == [["B.js"], ["A.js"]]

    def test_given_ignored_conflict_when_synthesized_then_not_a_constraint(self) -> None:
        conflict = _conflict("A.js", "B.js")
        conflict.toggle_ignored()

        assert synthesize_order([conflict], ["A.js", "B.js"]) == [["A.js", "B.js"]]

    def test_given_default_ignored_replace_when_synthesized_then_skipped(self) -> None:
        """Full replacement of a full replacement is ignored unless toggled on."""
        conflict = Conflict(
            ConflictKind.REPLACE,
            _edit("A.js", PatchStyle.OVERWRITE),
            _edit("B.js", PatchStyle.OVERRIDE),
        )

        assert synthesize_order([conflict], ["A.js", "B.js"]) == [["A.js", "B.js"]]
        conflict.toggle_ignored()
        assert synthesize_order([conflict], ["A.js", "B.js"]) == [["B.js"], ["A.js"]]

    def test_given_chain_when_synthesized_then_one_group_per_step(self) -> None:
        """A before B before C as edits means C, then B, then A."""
        conflicts = [_conflict("A.js", "B.js"), _conflict("B.js", "C.js")]

        assert synthesize_order(conflicts) == [["C.js"], ["B.js"], ["A.js"]]

    def test_given_unrelated_files_when_synthesized_then_grouped_together(self) -> None:
        conflicts = [_conflict("A.js", "B.js")]

        groups = synthesize_order(conflicts, ["A.js", "B.js", "C.js"])

        assert groups == [["B.js"], ["C.js", "A.js"]]

    def test_given_same_input_when_synthesized_twice_then_identical(self) -> None:
        conflicts = [
            _conflict("A.js", "D.js"),
            _conflict("B.js", "D.js"),
            _conflict("C.js", "A.js"),
        ]

        first = synthesize_order(conflicts, ["A.js", "B.js", "C.js", "D.js"])
        second = synthesize_order(conflicts, ["A.js", "B.js", "C.js", "D.js"])

        assert first == second
        assert sorted(f for group in first for f in group) == ["A.js", "B.js", "C.js", "D.js"]


class TestReachable:
    """Worklist reachability over ahead edges."""

    def test_given_chain_when_reachable_then_transitive(self) -> None:
        graph = build_graph([_conflict("A.js", "B.js"), _conflict("B.js", "C.js")])

        assert reachable(graph, "A.js") == ["B.js", "C.js"]
        assert reachable(graph, "C.js") == []
        assert graph["A.js"].ahead_count == 2

    def test_given_cycle_when_reachable_then_terminates_and_includes_start(self) -> None:
        graph = build_graph([_conflict("A.js", "B.js"), _conflict("B.js", "A.js")])

        assert reachable(graph, "A.js") == ["B.js", "A.js"]


class TestPlanOrder:
    """Cycle and violation reporting."""

    def test_given_acyclic_conflicts_when_planned_then_consistent(self) -> None:
        plan = plan_order([_conflict("A.js", "B.js")], ["A.js", "B.js"])

        assert plan.groups == [["B.js"], ["A.js"]]
        assert plan.consistent is True

    def test_given_cycle_when_planned_then_reported(self) -> None:
        """Grouping still returns every file; the cycle is reported alongside."""
        # Given
        conflicts = [
            _conflict("A.js", "B.js"),
            _conflict("B.js", "C.js"),
            _conflict("C.js", "A.js"),
            _conflict("D.js", "A.js"),
        ]

        # When
        plan = plan_order(conflicts)

        # Then
        assert plan.cycles == [["A.js", "B.js", "C.js"]]
        assert plan.violations
        assert sorted(f for group in plan.groups for f in group) == ["A.js", "B.js", "C.js", "D.js"]
        assert plan.to_dict()["cycles"] == [["A.js", "B.js", "C.js"]]

    def test_given_self_conflict_when_planned_then_not_a_cycle(self) -> None:
        """Two edits in one file constrain nothing between files."""
        plan = plan_order([_conflict("A.js", "A.js")])

        assert plan.cycles == []
        assert plan.violations == []


class TestDetectCyclesAndViolations:
    """Lower-level helpers."""

    @pytest.mark.parametrize(
        ("pairs", "expected"),
        [
            ([], []),
            ([("A", "B")], []),
            ([("A", "B"), ("B", "A")], [["A", "B"]]),
            ([("A", "B"), ("B", "A"), ("C", "D"), ("D", "C")], [["A", "B"], ["C", "D"]]),
        ],
    )
    def test_given_graph_when_detect_cycles_then_components(
        self, pairs: list[tuple[str, str]], expected: list[list[str]]
    ) -> None:
        graph = build_graph([_conflict(a, b) for a, b in pairs])

        assert sorted(detect_cycles(graph)) == expected

    def test_given_wrong_order_when_find_violations_then_both_ends_flagged(self) -> None:
        graph = build_graph([_conflict("A.js", "B.js")])

        assert find_violations(graph, [["A.js"], ["B.js"]]) == ["A.js", "B.js"]
        assert find_violations(graph, [["B.js"], ["A.js"]]) == []

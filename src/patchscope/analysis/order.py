"""Suggested load order from active conflicts.

Every active conflict ``(earlier edit in A, later edit in B)`` says B should
load ahead of A, so that A's edit is the one that survives. Files are ranked
by how many files must (transitively) load ahead of them and then packed,
last to first, into groups with no ordering requirement inside a group.

This is a heuristic linearization. It does not reject cyclic constraints;
``plan_order`` reports them next to the groups instead.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from patchscope.analysis.models import Conflict


@dataclass
class OrderNode:
    """Constraints on one file.

    ``ahead``: files that should load before this one.
    ``behind``: files that should load after this one.
    """

    ahead: set[str] = field(default_factory=set)
    behind: set[str] = field(default_factory=set)
    all_ahead: list[str] = field(default_factory=list)

    @property
    def ahead_count(self) -> int:
        return len(self.all_ahead)


OrderGraph = dict[str, OrderNode]


def build_graph(conflicts: Iterable[Conflict], known_files: Iterable[str] = ()) -> OrderGraph:
    """Precedence graph over file names from unignored conflicts.

    Known files come first, in the given order, then files in order of first
    appearance. Transitive ``all_ahead`` lists are filled in.
    """
    graph: OrderGraph = {name: OrderNode() for name in known_files}
    for conflict in conflicts:
        if conflict.ignored:
            continue
        earlier, later = conflict.earlier.file, conflict.later.file
        graph.setdefault(earlier, OrderNode()).ahead.add(later)
        graph.setdefault(later, OrderNode()).behind.add(earlier)

    for name, node in graph.items():
        node.all_ahead = reachable(graph, name)
    return graph


def reachable(graph: Mapping[str, OrderNode], start: str) -> list[str]:
    """Files reachable from ``start`` over ``ahead`` edges, in discovery order.

    ``start`` itself is included only when it lies on a cycle.
    """
    seen: set[str] = set()
    found: list[str] = []
    stack = [iter(sorted(graph[start].ahead))]
    while stack:
        name = next(stack[-1], None)
        if name is None:
            stack.pop()
            continue
        if name in seen:
            continue
        seen.add(name)
        found.append(name)
        stack.append(iter(sorted(graph[name].ahead)))
    return found


def group_files(graph: Mapping[str, OrderNode]) -> list[list[str]]:
    """Pack the ranked files into load-order groups."""
    ranked = sorted(graph, key=lambda name: graph[name].ahead_count)

    groups: list[list[str]] = []
    for name in reversed(ranked):
        node = graph[name]
        leading = groups[0] if groups else None
        if leading is not None and node.behind.isdisjoint(leading):
            leading.insert(0, name)
        else:
            groups.insert(0, [name])
    return groups


def synthesize_order(
    conflicts: Iterable[Conflict],
    known_files: Iterable[str] = (),
) -> list[list[str]]:
    """Suggested load order as groups; earlier groups load first.

    Returns one group holding every known file when nothing is active, and
    an empty list when there are no files at all.
    """
    return group_files(build_graph(conflicts, known_files))


def detect_cycles(graph: Mapping[str, OrderNode]) -> list[list[str]]:
    """Strongly connected file sets of more than one file (iterative Tarjan)."""
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    component_stack: list[str] = []
    cycles: list[list[str]] = []
    counter = 0

    for root in graph:
        if root in index:
            continue
        work: list[tuple[str, Any]] = [(root, None)]
        while work:
            name, successors = work[-1]
            if successors is None:
                index[name] = lowlink[name] = counter
                counter += 1
                component_stack.append(name)
                on_stack.add(name)
                successors = iter(sorted(graph[name].ahead))
                work[-1] = (name, successors)

            descended = False
            for succ in successors:
                if succ not in index:
                    work.append((succ, None))
                    descended = True
                    break
                if succ in on_stack:
                    lowlink[name] = min(lowlink[name], index[succ])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[name])
            if lowlink[name] == index[name]:
                component: list[str] = []
                while True:
                    member = component_stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == name:
                        break
                if len(component) > 1:
                    cycles.append(sorted(component))
    return cycles


def find_violations(graph: Mapping[str, OrderNode], groups: Sequence[Sequence[str]]) -> list[str]:
    """Files whose constraints the flattened group order breaks."""
    order = [name for group in groups for name in group]
    position = {name: i for i, name in enumerate(order)}
    violations = []
    for i, name in enumerate(order):
        node = graph[name]
        if any(position[other] < i for other in node.behind if other != name) or any(
            position[other] > i for other in node.ahead if other != name
        ):
            violations.append(name)
    return violations


@dataclass(frozen=True)
class OrderPlan:
    """Groups plus whatever the grouping could not honor."""

    groups: list[list[str]]
    cycles: list[list[str]]
    violations: list[str]

    @property
    def consistent(self) -> bool:
        return not self.cycles and not self.violations

    def to_dict(self) -> dict[str, Any]:
        return {
            "groups": self.groups,
            "cycles": self.cycles,
            "violations": self.violations,
            "consistent": self.consistent,
        }


def plan_order(conflicts: Iterable[Conflict], known_files: Iterable[str] = ()) -> OrderPlan:
    graph = build_graph(conflicts, known_files)
    groups = group_files(graph)
    return OrderPlan(
        groups=groups,
        cycles=detect_cycles(graph),
        violations=find_violations(graph, groups),
    )

"""Structural matching over syntax trees.

Two uses:

- Shape recognition: a ``Template`` compiled from a JavaScript snippet in
  which identifiers spelled ``foo``, ``bar``, ``baz``, ``qux`` or ``quux``
  (any case) are metavariables matching any candidate subtree.
- Exact equality: ``same_structure(a, b)`` compares two pieces of real code
  with no metavariables at all.

Metavariables are recorded as a node-id set when the template is compiled.
Real code that happens to use the vocabulary names is therefore never
treated as a wildcard; only template nodes can be.
"""

from __future__ import annotations

from collections.abc import Set
from dataclasses import dataclass
from functools import lru_cache

from patchscope.syntax.parser import JavaScriptParser
from patchscope.syntax.tree import SourceFile, SyntaxNode

WILDCARD_NAMES = frozenset({"foo", "bar", "baz", "qux", "quux"})

_METAVARIABLE_KINDS = frozenset(
    {"identifier", "property_identifier", "shorthand_property_identifier"}
)


def matches(
    pattern: SyntaxNode,
    candidate: SyntaxNode,
    metavariables: Set[int] = frozenset(),
) -> bool:
    """Return True if ``candidate`` has the shape of ``pattern``.

    Kinds, leaf text and scalar fields must be equal; sequence fields must
    agree in length before their items are compared. A pattern node whose id
    is in ``metavariables`` matches any candidate value. Stops at the first
    mismatch.
    """
    stack: list[tuple[object, object]] = [(pattern, candidate)]
    while stack:
        left, right = stack.pop()
        if isinstance(left, SyntaxNode):
            if left.node_id in metavariables:
                continue
            if not isinstance(right, SyntaxNode):
                return False
            if left.kind != right.kind or left.text != right.text:
                return False
            if len(left.fields) != len(right.fields):
                return False
            right_fields = dict(right.fields)
            for name, value in left.fields:
                if name not in right_fields:
                    return False
                stack.append((value, right_fields[name]))
        elif isinstance(left, tuple):
            if not isinstance(right, tuple) or len(left) != len(right):
                return False
            stack.extend(zip(left, right, strict=True))
        elif left != right:
            return False
    return True


def same_structure(first: SyntaxNode, second: SyntaxNode) -> bool:
    """Exact structural equality, ignoring positions and comments."""
    return matches(first, second)


@dataclass(frozen=True, eq=False)
class Template:
    """A compiled code shape with metavariables."""

    source: str
    root: SyntaxNode
    metavariables: frozenset[int]

    def match(self, candidate: SyntaxNode) -> bool:
        return matches(self.root, candidate, self.metavariables)

    @classmethod
    def compile(cls, source: str, kind: str) -> Template:
        """Compile ``source`` and keep its first node of ``kind``.

        Raises:
            ValueError: If the snippet contains no node of ``kind``.
        """
        return _compile(source, kind)


@lru_cache(maxsize=64)
def _compile(source: str, kind: str) -> Template:
    parsed: SourceFile = JavaScriptParser.get().parse_fragment(source)
    nodes = parsed.root.find_all(kind)
    if not nodes:
        raise ValueError(f"Template {source!r} has no {kind} node")
    root = nodes[0]
    metavariables = frozenset(
        node.node_id
        for node in root.walk()
        if node.kind in _METAVARIABLE_KINDS
        and node.text is not None
        and node.text.lower() in WILDCARD_NAMES
    )
    return Template(source=source, root=root, metavariables=metavariables)

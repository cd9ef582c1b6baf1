"""Class -> superclass map from prototype-linking idioms.

Recognized, in document order within each file and files in load order:

    Foo.prototype = Object.create(Bar.prototype);
    class Foo extends Bar {}
    Object.setPrototypeOf(Foo.prototype, Bar.prototype);

A later link for the same class replaces the earlier one. Cycles are kept
as-is; lookups that walk the map guard against them.
"""

from __future__ import annotations

from collections.abc import Iterable

from patchscope.analysis.models import InheritanceMap
from patchscope.core.logging import get_logger
from patchscope.syntax.matcher import Template
from patchscope.syntax.tree import SourceFile, SyntaxNode

log = get_logger("analysis.inheritance")

_CREATE_TEMPLATE = "Foo.prototype = Object.create(Bar.prototype)"
_SET_PROTOTYPE_TEMPLATE = "Object.setPrototypeOf(Foo.prototype, Bar.prototype)"


def resolve_inheritance(files: Iterable[SourceFile]) -> InheritanceMap:
    """Build the inheritance map over every file (core first, then plugins)."""
    created = Template.compile(_CREATE_TEMPLATE, "assignment_expression")
    set_prototype = Template.compile(_SET_PROTOTYPE_TEMPLATE, "call_expression")

    inheritance: InheritanceMap = {}
    for source in files:
        for node in source.root.walk():
            link: tuple[str, str] | None = None
            if node.kind == "assignment_expression" and created.match(node):
                link = _created_link(source, node)
            elif node.kind == "class_declaration":
                link = _class_link(source, node)
            elif node.kind == "call_expression" and set_prototype.match(node):
                link = _set_prototype_link(source, node)
            if link is not None:
                child, parent = link
                inheritance[child] = parent

    log.debug("inheritance_links", count=len(inheritance))
    return inheritance


def _prototype_owner(node: SyntaxNode | None) -> SyntaxNode | None:
    """``Foo`` in ``Foo.prototype``."""
    if node is None or node.kind != "member_expression":
        return None
    return node.child("object")


def _created_link(source: SourceFile, node: SyntaxNode) -> tuple[str, str] | None:
    child = _prototype_owner(node.child("left"))
    call = node.child("right")
    arguments = call.child("arguments") if call is not None else None
    if child is None or arguments is None or not arguments.children:
        return None
    parent = _prototype_owner(arguments.children[0])
    if parent is None:
        return None
    return source.raw(child), source.raw(parent)


def _class_link(source: SourceFile, node: SyntaxNode) -> tuple[str, str] | None:
    name = node.child("name")
    heritage = next((c for c in node.children if c.kind == "class_heritage"), None)
    if name is None or heritage is None:
        return None
    # class_heritage wraps the superclass expression (plus `implements` in TS grammars)
    superclass = next(heritage.child_nodes(), None)
    if superclass is None:
        return None
    return source.raw(name), source.raw(superclass)


def _set_prototype_link(source: SourceFile, node: SyntaxNode) -> tuple[str, str] | None:
    arguments = node.child("arguments")
    if arguments is None or len(arguments.children) != 2:
        return None
    child = _prototype_owner(arguments.children[0])
    parent = _prototype_owner(arguments.children[1])
    if child is None or parent is None:
        return None
    return source.raw(child), source.raw(parent)

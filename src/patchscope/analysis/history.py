"""Edit history builder.

Scans files in load order for method assignments such as::

    Game_Actor.prototype.gainHp = function(value) { ... };
    DataManager.loadDatabase = function() { ... };

Each one becomes an ``Edit`` appended to the history of its
(class, method, static) slot. The function body decides the patch style:

- ``override``: calls ``Ancestor.prototype.<same method>.call/apply``
- ``mixing``: an ancestor call mixed with other ``.call``/``.apply`` calls,
  or a patch through an alias produced by a call
  (``var f = PluginManager.alias(...)``)
- ``patching``: calls a captured copy (``_Game_Actor_gainHp.call(this)``)
- ``overwrite``: no ``.call``/``.apply`` at all

A patching edit on a class that has no history of its own yet is registered
as an alias against the nearest ancestor that does (its "real owner"), so a
later replacement of that ancestor method can be reported as outdating it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from patchscope.analysis.models import (
    AliasRecord,
    Edit,
    EditHistory,
    InheritanceMap,
    MethodKey,
    PatchStyle,
)
from patchscope.config.models import AnalysisConfig
from patchscope.core.logging import get_logger
from patchscope.syntax.matcher import Template, same_structure
from patchscope.syntax.tree import SourceFile, SyntaxNode

log = get_logger("analysis.history")

_PROTOTYPE_TEMPLATE = "Foo.prototype.bar = baz"
_STATIC_TEMPLATE = "Foo.bar = baz"

_DELEGATING_METHODS = frozenset({"call", "apply"})
_DECLARATION_KINDS = ("variable_declaration", "lexical_declaration")


@dataclass
class _FileContext:
    """Per-file lookups used while classifying edits."""

    source: SourceFile
    declarators: list[SyntaxNode] = field(default_factory=list)
    assignments: list[SyntaxNode] = field(default_factory=list)

    @classmethod
    def scan(cls, source: SourceFile) -> _FileContext:
        context = cls(source)
        for node in source.root.walk():
            if node.kind in _DECLARATION_KINDS:
                context.declarators.extend(
                    c for c in node.children if c.kind == "variable_declarator"
                )
            elif node.kind == "assignment_expression":
                context.assignments.append(node)
        return context


class HistoryBuilder:
    """Accumulates method histories across files, one left-to-right pass.

    Usage::

        builder = HistoryBuilder(inheritance)
        for source in files:
            builder.add_file(source)
        history = builder.build()

    The inheritance map must be final before the first ``add_file``.
    """

    def __init__(
        self,
        inheritance: InheritanceMap,
        config: AnalysisConfig | None = None,
    ) -> None:
        config = config or AnalysisConfig()
        self._inheritance = inheritance
        self._reserved = frozenset(config.reserved_class_names)
        self._function_kinds = frozenset(config.function_literal_kinds)
        self._templates = (
            Template.compile(_PROTOTYPE_TEMPLATE, "assignment_expression"),
            Template.compile(_STATIC_TEMPLATE, "assignment_expression"),
        )
        self._methods: dict[MethodKey, list[Edit]] = {}
        self._aliases: dict[MethodKey, list[AliasRecord]] = {}
        self._latest: dict[MethodKey, SyntaxNode] = {}
        self._built = False

    def add_file(self, source: SourceFile) -> int:
        """Record every method assignment in ``source``; returns how many."""
        if self._built:
            raise RuntimeError("history already built")
        context = _FileContext.scan(source)
        recorded = 0
        for node in context.assignments:
            if self._record(context, node):
                recorded += 1
        log.debug("file_scanned", file=source.name, edits=recorded)
        return recorded

    def build(self) -> EditHistory:
        """Freeze the histories. The builder cannot be used afterwards."""
        self._built = True
        return EditHistory(
            methods={key: tuple(edits) for key, edits in self._methods.items()},
            aliases={key: tuple(records) for key, records in self._aliases.items()},
        )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _record(self, context: _FileContext, node: SyntaxNode) -> bool:
        source = context.source
        target = node.child("left")
        value = node.child("right")
        if target is None or value is None or value.kind not in self._function_kinds:
            return False
        if not any(template.match(node) for template in self._templates):
            return False

        slot = _method_slot(source, target)
        if slot is None or slot[0] in self._reserved:
            return False
        class_name, is_static = slot
        method_name = source.raw(target.child("property"))  # type: ignore[arg-type]
        key = MethodKey(class_name, method_name, is_static)

        style = _classify(context, node, method_name)
        previous = self._latest.get(key)
        owner = self._real_owner(key) if style is PatchStyle.PATCHING else None

        edit = Edit(
            file=source.name,
            span=source.span(node),
            style=style,
            class_name=class_name,
            method_name=method_name,
            is_static=is_static,
            display_name=source.raw(target),
            target_span=source.span(target),
            alias_count=len(self._aliases.get(key, ())),
            changed=previous is not None and not same_structure(previous, node),
            owner=owner,
        )
        self._latest[key] = node
        history = self._methods.setdefault(key, [])
        history.append(edit)

        if owner is not None and owner != class_name:
            self._aliases.setdefault(key.on(owner), []).append(
                AliasRecord(subclass=class_name, index=len(history) - 1)
            )
        return True

    def _real_owner(self, key: MethodKey) -> str | None:
        """Nearest class, starting at ``key``'s own, that already has a history."""
        seen: set[str] = set()
        current: str | None = key.class_name
        while current is not None and current not in seen:
            if self._methods.get(key.on(current)):
                return current
            seen.add(current)
            current = self._inheritance.get(current)
        return None


def _method_slot(source: SourceFile, target: SyntaxNode) -> tuple[str, bool] | None:
    """(class name, is_static) for ``Foo.prototype.bar`` or ``Foo.bar``."""
    holder = target.child("object")
    if holder is None:
        return None
    if holder.kind == "member_expression" and _property_name(holder) == "prototype":
        owner = holder.child("object")
        if owner is None or not _is_class_reference(owner):
            return None
        return source.raw(owner), False
    if not _is_class_reference(holder):
        return None
    return source.raw(holder), True


def _is_class_reference(node: SyntaxNode) -> bool:
    """Identifier or dotted identifier chain (``Foo``, ``Imported.Foo``)."""
    while node.kind == "member_expression":
        if _property_name(node) == "prototype":
            return False
        inner = node.child("object")
        if inner is None:
            return False
        node = inner
    return node.kind == "identifier"


def _property_name(member: SyntaxNode) -> str | None:
    prop = member.child("property")
    return prop.text if prop is not None else None


# ----------------------------------------------------------------------
# Classification
# ----------------------------------------------------------------------


def classify_patch(source: SourceFile, assignment: SyntaxNode, method_name: str) -> PatchStyle:
    """Decide the patch style of one method assignment in ``source``."""
    return _classify(_FileContext.scan(source), assignment, method_name)


def _classify(context: _FileContext, assignment: SyntaxNode, method_name: str) -> PatchStyle:
    """Style from every ``.call``/``.apply`` in the body.

    An ancestor call anywhere wins: override on its own, mixing next to any
    other delegating call. Otherwise an alias produced by a call makes it
    mixing, a plain captured alias patching.
    """
    function = assignment.child("right")
    body = function.child("body") if function is not None else None
    if body is None:
        return PatchStyle.OVERWRITE

    delegations = [node for node in body.walk() if _is_delegating_call(node)]
    if not delegations:
        return PatchStyle.OVERWRITE

    ancestor_calls = [d for d in delegations if _is_ancestor_call(d, method_name)]
    if ancestor_calls:
        if len(ancestor_calls) < len(delegations):
            return PatchStyle.MIXING
        return PatchStyle.OVERRIDE

    edit_start = context.source.start(assignment)
    if any(_is_indirect_alias(context, d, edit_start) for d in delegations):
        return PatchStyle.MIXING
    return PatchStyle.PATCHING


def _is_delegating_call(node: SyntaxNode) -> bool:
    """``<expr>.call(...)`` or ``<expr>.apply(...)``."""
    if node.kind != "call_expression":
        return False
    callee = node.child("function")
    return (
        callee is not None
        and callee.kind == "member_expression"
        and _property_name(callee) in _DELEGATING_METHODS
    )


def _delegate(call: SyntaxNode) -> SyntaxNode | None:
    """``<expr>`` in ``<expr>.call(...)``."""
    callee = call.child("function")
    return callee.child("object") if callee is not None else None


def _is_ancestor_call(call: SyntaxNode, method_name: str) -> bool:
    """``Something.prototype.<method_name>.call/apply(...)``."""
    if not _is_delegating_call(call):
        return False
    delegate = _delegate(call)
    if delegate is None or delegate.kind != "member_expression":
        return False
    if _property_name(delegate) != method_name:
        return False
    holder = delegate.child("object")
    return holder is not None and any(
        node.kind == "member_expression" and _property_name(node) == "prototype"
        for node in holder.walk()
    )


def _is_indirect_alias(context: _FileContext, call: SyntaxNode, before: int) -> bool:
    """True if the delegate was produced by a call rather than captured directly."""
    delegate = _delegate(call)
    if delegate is None:
        return False
    source = context.source

    if delegate.kind == "identifier":
        declarator = _last_before(
            source,
            (d for d in context.declarators if _binds(d, delegate)),
            before,
        )
        initializer = declarator.child("value") if declarator is not None else None
        return initializer is not None and initializer.kind == "call_expression"

    if delegate.kind == "member_expression":
        assignment = _last_before(
            source,
            (
                a
                for a in context.assignments
                if (left := a.child("left")) is not None and same_structure(delegate, left)
            ),
            before,
        )
        value = assignment.child("right") if assignment is not None else None
        return value is not None and value.kind == "call_expression"

    return False


def _binds(declarator: SyntaxNode, identifier: SyntaxNode) -> bool:
    name = declarator.child("name")
    return name is not None and same_structure(name, identifier)


def _last_before(
    source: SourceFile, nodes: Iterable[SyntaxNode], before: int
) -> SyntaxNode | None:
    last: SyntaxNode | None = None
    for node in nodes:
        if source.start(node) < before:
            last = node
    return last


def build_history(
    files: Sequence[SourceFile],
    inheritance: InheritanceMap,
    config: AnalysisConfig | None = None,
) -> EditHistory:
    """Run one ``HistoryBuilder`` over ``files`` in order."""
    builder = HistoryBuilder(inheritance, config)
    for source in files:
        builder.add_file(source)
    return builder.build()

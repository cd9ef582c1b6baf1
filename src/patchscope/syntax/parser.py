"""Tree-sitter JavaScript parsing into immutable syntax trees.

The tree-sitter tree is converted once into ``SyntaxNode`` objects plus a
companion ``NodeTable``; nothing downstream touches tree-sitter objects.

Usage::

    parser = JavaScriptParser.get()
    source = parser.parse("MyPlugin.js", content)
    for node in source.root.find_all("assignment_expression"):
        print(source.raw(node))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import tree_sitter
import tree_sitter_javascript

from patchscope.core.errors import ParseError
from patchscope.core.logging import get_logger
from patchscope.syntax.tree import (
    CHILDREN,
    TOKENS,
    FieldValue,
    FileOrigin,
    NodeInfo,
    SourceFile,
    SyntaxNode,
)

log = get_logger("syntax.parser")

# Extras that carry no structure. acorn drops them too.
_SKIPPED_KINDS = frozenset({"comment", "html_comment"})

_Location = tuple[int, int, tuple[int, int], tuple[int, int]]


@dataclass
class _Frame:
    """Conversion state for one tree-sitter node still being visited."""

    ts_node: Any
    node_id: int
    field_name: str | None
    children: list[Any]
    index: int = 0
    entries: list[tuple[str | None, SyntaxNode | str]] = field(default_factory=list)


class JavaScriptParser:
    """Parses JavaScript source with tree-sitter-javascript.

    One instance caches the grammar; use ``JavaScriptParser.get()`` for the
    shared instance. Not thread-safe: the underlying tree-sitter parser is
    stateful.
    """

    _instance: JavaScriptParser | None = None

    def __init__(self) -> None:
        self._language = tree_sitter.Language(tree_sitter_javascript.language())
        self._parser = tree_sitter.Parser()
        self._parser.language = self._language

    @classmethod
    def get(cls) -> JavaScriptParser:
        """Return the shared parser instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def parse(
        self,
        name: str,
        content: bytes,
        origin: FileOrigin = FileOrigin.PLUGIN,
    ) -> SourceFile:
        """Parse ``content`` into a SourceFile.

        Raises:
            ParseError: If tree-sitter reports any error or missing node.
                No partial tree is ever returned.
        """
        tree = self._parser.parse(content)
        if tree.root_node.has_error:
            row, column = _first_error_point(tree.root_node)
            raise ParseError.malformed(name, row + 1, column)

        root, locations = _convert(tree.root_node, content)
        table = _build_table(root, locations)
        log.debug("file_parsed", file=name, nodes=len(table))
        return SourceFile(
            name=name,
            source=content,
            root=root,
            table=MappingProxyType(table),
            origin=origin,
        )

    def parse_fragment(self, code: str) -> SourceFile:
        """Parse a standalone snippet (templates, tests)."""
        return self.parse("<fragment>", code.encode("utf-8"))


def _first_error_point(root: Any) -> tuple[int, int]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0], node.start_point[1]
        stack.extend(reversed(node.children))
    return root.start_point[0], root.start_point[1]


def _convert(ts_root: Any, source: bytes) -> tuple[SyntaxNode, dict[int, _Location]]:
    """Post-order conversion with an explicit stack; ids are assigned pre-order."""
    locations: dict[int, _Location] = {}
    next_id = 0

    def open_frame(ts_node: Any, field_name: str | None) -> _Frame:
        nonlocal next_id
        frame = _Frame(ts_node, next_id, field_name, list(ts_node.children))
        locations[next_id] = (
            ts_node.start_byte,
            ts_node.end_byte,
            (ts_node.start_point[0], ts_node.start_point[1]),
            (ts_node.end_point[0], ts_node.end_point[1]),
        )
        next_id += 1
        return frame

    stack = [open_frame(ts_root, None)]
    root: SyntaxNode | None = None

    while stack:
        frame = stack[-1]
        if frame.index < len(frame.children):
            i = frame.index
            frame.index += 1
            child = frame.children[i]
            if child.type in _SKIPPED_KINDS:
                continue
            field_name = frame.ts_node.field_name_for_child(i)
            if child.is_named:
                stack.append(open_frame(child, field_name))
            elif field_name is not None:
                # Anonymous node types are the token itself, e.g. "+=" or "typeof"
                frame.entries.append((field_name, child.type))
            elif child.type[:1].isalpha():
                frame.entries.append((None, child.type))
            continue

        stack.pop()
        node = _finish(frame, source)
        if stack:
            stack[-1].entries.append((frame.field_name, node))
        else:
            root = node

    assert root is not None
    return root, locations


def _finish(frame: _Frame, source: bytes) -> SyntaxNode:
    ts_node = frame.ts_node
    if not any(isinstance(value, SyntaxNode) for _, value in frame.entries):
        text = source[ts_node.start_byte : ts_node.end_byte].decode("utf-8", errors="replace")
        return SyntaxNode(node_id=frame.node_id, kind=ts_node.type, text=text)

    grouped: dict[str, list[SyntaxNode | str]] = {}
    for name, value in frame.entries:
        if name is None:
            name = CHILDREN if isinstance(value, SyntaxNode) else TOKENS
        grouped.setdefault(name, []).append(value)

    fields: list[tuple[str, FieldValue]] = []
    for name, values in grouped.items():
        if name in (CHILDREN, TOKENS) or len(values) > 1:
            fields.append((name, tuple(values)))  # type: ignore[arg-type]
        else:
            fields.append((name, values[0]))
    return SyntaxNode(node_id=frame.node_id, kind=ts_node.type, fields=tuple(fields))


def _build_table(root: SyntaxNode, locations: dict[int, _Location]) -> dict[int, NodeInfo]:
    table: dict[int, NodeInfo] = {}
    stack: list[tuple[SyntaxNode, SyntaxNode | None]] = [(root, None)]
    while stack:
        node, parent = stack.pop()
        start_byte, end_byte, start_point, end_point = locations[node.node_id]
        table[node.node_id] = NodeInfo(parent, start_byte, end_byte, start_point, end_point)
        stack.extend((child, node) for child in node.child_nodes())
    return table

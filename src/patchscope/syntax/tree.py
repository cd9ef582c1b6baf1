"""Immutable syntax tree and its companion node table.

The tree carries only structure: a node kind, leaf text, and named fields.
Everything positional (parent links, byte ranges, line/column points) lives in
a read-only ``NodeTable`` keyed by ``node_id`` and built once at parse time,
so structural comparison never has to skip location metadata.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

FieldValue = Union["SyntaxNode", tuple["SyntaxNode", ...], str, tuple[str, ...]]

CHILDREN = "children"
TOKENS = "tokens"


@dataclass(frozen=True, slots=True, eq=False)
class SyntaxNode:
    """A named syntax node.

    Fields keep grammar order. Unfielded named children are stored under
    ``children`` and unfielded keyword tokens under ``tokens``. Leaves
    (nodes without named children) carry their source text instead.

    Identity, not structure, defines equality; use the matcher for
    structural comparison.
    """

    node_id: int
    kind: str
    text: str | None = None
    fields: tuple[tuple[str, FieldValue], ...] = ()

    def field(self, name: str) -> FieldValue | None:
        for key, value in self.fields:
            if key == name:
                return value
        return None

    def child(self, name: str) -> SyntaxNode | None:
        """Single node stored under ``name``, or None."""
        value = self.field(name)
        return value if isinstance(value, SyntaxNode) else None

    @property
    def children(self) -> tuple[SyntaxNode, ...]:
        value = self.field(CHILDREN)
        return value if isinstance(value, tuple) else ()  # type: ignore[return-value]

    def child_nodes(self) -> Iterator[SyntaxNode]:
        """Direct child nodes in grammar order."""
        for _, value in self.fields:
            if isinstance(value, SyntaxNode):
                yield value
            elif isinstance(value, tuple):
                for item in value:
                    if isinstance(item, SyntaxNode):
                        yield item

    def walk(self) -> Iterator[SyntaxNode]:
        """Pre-order traversal including this node (document order)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.child_nodes())))

    def find_all(self, *kinds: str) -> list[SyntaxNode]:
        wanted = set(kinds)
        return [node for node in self.walk() if node.kind in wanted]


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """Location data for one node."""

    parent: SyntaxNode | None
    start_byte: int
    end_byte: int
    start_point: tuple[int, int]  # (row, byte column), 0-based
    end_point: tuple[int, int]


NodeTable = Mapping[int, NodeInfo]


@dataclass(frozen=True, slots=True)
class Position:
    line: int  # 1-based
    column: int  # 0-based, characters
    offset: int  # characters from start of file


@dataclass(frozen=True, slots=True)
class Span:
    start: Position
    end: Position

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            "start": {
                "line": self.start.line,
                "column": self.start.column,
                "offset": self.start.offset,
            },
            "end": {"line": self.end.line, "column": self.end.column, "offset": self.end.offset},
        }


class FileOrigin(str, Enum):
    CORE = "core"
    PLUGIN = "plugin"


@dataclass(frozen=True, eq=False)
class SourceFile:
    """A parsed file. Immutable once produced."""

    name: str
    source: bytes
    root: SyntaxNode
    table: NodeTable = field(repr=False)
    origin: FileOrigin = FileOrigin.PLUGIN

    def info(self, node: SyntaxNode) -> NodeInfo:
        return self.table[node.node_id]

    def parent(self, node: SyntaxNode) -> SyntaxNode | None:
        return self.table[node.node_id].parent

    def start(self, node: SyntaxNode) -> int:
        """Start byte; orders nodes within this file."""
        return self.table[node.node_id].start_byte

    def raw(self, node: SyntaxNode) -> str:
        """Exact source text of ``node``."""
        info = self.table[node.node_id]
        return self.source[info.start_byte : info.end_byte].decode("utf-8", errors="replace")

    def span(self, node: SyntaxNode) -> Span:
        info = self.table[node.node_id]
        return Span(
            start=self._position(info.start_byte, info.start_point),
            end=self._position(info.end_byte, info.end_point),
        )

    def _position(self, byte_offset: int, point: tuple[int, int]) -> Position:
        row, byte_column = point
        line_start = byte_offset - byte_column
        column = len(self.source[line_start:byte_offset].decode("utf-8", errors="replace"))
        offset = len(self.source[:byte_offset].decode("utf-8", errors="replace"))
        return Position(line=row + 1, column=column, offset=offset)

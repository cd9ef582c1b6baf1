"""Syntax trees, tree-sitter parsing and structural matching."""

from patchscope.syntax.matcher import WILDCARD_NAMES, Template, matches, same_structure
from patchscope.syntax.parser import JavaScriptParser
from patchscope.syntax.tree import (
    FileOrigin,
    NodeInfo,
    NodeTable,
    Position,
    SourceFile,
    Span,
    SyntaxNode,
)

__all__ = [
    "FileOrigin",
    "JavaScriptParser",
    "NodeInfo",
    "NodeTable",
    "Position",
    "SourceFile",
    "Span",
    "SyntaxNode",
    "Template",
    "WILDCARD_NAMES",
    "matches",
    "same_structure",
]

"""Decode the editor-generated plugin list without executing it.

``js/plugins.js`` is a script of the form::

    var $plugins =
    [
    {"name":"MyPlugin","status":true,"description":"...","parameters":{}}
    ];

The script is parsed with tree-sitter and the literal bound to ``$plugins``
is decoded as data. Anything that is not a plain literal (calls, variables,
template substitutions) is rejected.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, TypeAdapter, ValidationError

from patchscope.core.errors import ParseError, ProjectError
from patchscope.core.logging import get_logger
from patchscope.syntax.parser import JavaScriptParser
from patchscope.syntax.tree import SourceFile, SyntaxNode

log = get_logger("project.plugins_config")

_ESCAPE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")
_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    "\n": "",
    "\r": "",
    "\r\n": "",
    "\u2028": "",
    "\u2029": "",
}
_KEYWORD_VALUES: dict[str, Any] = {"true": True, "false": False, "null": None, "undefined": None}


class PluginEntry(BaseModel):
    """One entry of the plugin list."""

    model_config = ConfigDict(extra="ignore")

    name: str
    status: StrictBool
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


_ENTRIES = TypeAdapter(list[PluginEntry])


class _InvalidLiteral(Exception):
    def __init__(self, node: SyntaxNode, reason: str) -> None:
        super().__init__(reason)
        self.node = node


def read_plugin_config(name: str, content: bytes, variable: str = "$plugins") -> list[PluginEntry]:
    """Decode and validate every entry of the plugin list in ``content``.

    Raises:
        ProjectError: If the script does not parse, does not bind
            ``variable`` to a literal, or an entry fails validation.
    """
    try:
        source = JavaScriptParser.get().parse(name, content)
    except ParseError as e:
        raise ProjectError.plugin_config_invalid(name, e.message) from e

    node = _find_binding(source, variable)
    if node is None:
        raise ProjectError.plugin_config_invalid(name, f"no {variable} declaration")

    try:
        data = decode_literal(source, node)
    except _InvalidLiteral as e:
        line = source.span(e.node).start.line
        raise ProjectError.plugin_config_invalid(name, f"line {line}: {e}") from e

    try:
        entries = _ENTRIES.validate_python(data)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first["loc"])
        raise ProjectError.plugin_config_invalid(name, f"{where}: {first['msg']}") from e

    log.debug("plugin_config_read", file=name, entries=len(entries))
    return entries


def enabled_plugins(entries: list[PluginEntry]) -> list[str]:
    """Names of enabled plugins, in list order."""
    return [entry.name for entry in entries if entry.status]


def _find_binding(source: SourceFile, variable: str) -> SyntaxNode | None:
    """Value last bound to ``variable`` by a declaration or a plain assignment."""
    value: SyntaxNode | None = None
    for node in source.root.walk():
        if node.kind == "variable_declarator":
            target, bound = node.child("name"), node.child("value")
        elif node.kind == "assignment_expression":
            target, bound = node.child("left"), node.child("right")
        else:
            continue
        if target is not None and target.kind == "identifier" and target.text == variable:
            if bound is not None:
                value = bound
    return value


def decode_literal(source: SourceFile, node: SyntaxNode) -> Any:
    """Python value of a JSON-like JavaScript literal."""
    kind = node.kind
    if kind == "parenthesized_expression":
        inner = next(node.child_nodes(), None)
        if inner is None:
            raise _InvalidLiteral(node, "empty parentheses")
        return decode_literal(source, inner)
    if kind == "array":
        return [decode_literal(source, item) for item in node.children]
    if kind == "object":
        result: dict[str, Any] = {}
        for member in node.children:
            if member.kind != "pair":
                raise _InvalidLiteral(member, f"unsupported object member {member.kind}")
            key, value = member.child("key"), member.child("value")
            if key is None or value is None:
                raise _InvalidLiteral(member, "incomplete pair")
            result[_decode_key(source, key)] = decode_literal(source, value)
        return result
    if kind == "string":
        return decode_string(source.raw(node))
    if kind == "template_string":
        if any(child.kind == "template_substitution" for child in node.children):
            raise _InvalidLiteral(node, "template substitution")
        return source.raw(node)[1:-1]
    if kind == "number":
        return _number(source, node)
    if kind == "unary_expression" and node.field("operator") in ("-", "+"):
        argument = node.child("argument")
        if argument is None or argument.kind != "number":
            raise _InvalidLiteral(node, "unary operator on non-number")
        number = _number(source, argument)
        return -number if node.field("operator") == "-" else number
    if kind in _KEYWORD_VALUES:
        return _KEYWORD_VALUES[kind]
    raise _InvalidLiteral(node, f"unsupported expression {kind}")


def _decode_key(source: SourceFile, key: SyntaxNode) -> str:
    if key.kind == "string":
        return decode_string(source.raw(key))
    if key.kind == "number":
        return str(_number(source, key))
    if key.kind == "property_identifier":
        return source.raw(key)
    raise _InvalidLiteral(key, f"unsupported key {key.kind}")


def decode_string(raw: str) -> str:
    """Decode a quoted JavaScript string literal, escapes included."""
    decoded = _ESCAPE.sub(_unescape, raw[1:-1])
    # \uXXXX pairs may spell a surrogate pair
    return decoded.encode("utf-16", "surrogatepass").decode("utf-16")


def _unescape(match: re.Match[str]) -> str:
    escape = match.group(1)
    if escape in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[escape]
    if escape.startswith("u{"):
        return chr(int(escape[2:-1], 16))
    if escape.startswith("u") and len(escape) == 5:
        return chr(int(escape[1:], 16))
    if escape.startswith("x") and len(escape) == 3:
        return chr(int(escape[1:], 16))
    return escape


def decode_number(raw: str) -> int | float:
    text = raw.replace("_", "")
    lowered = text.lower()
    if lowered.startswith(("0x", "0o", "0b")):
        return int(text, 0)
    if re.fullmatch(r"\d+", text):
        return int(text)
    return float(text)


def _number(source: SourceFile, node: SyntaxNode) -> int | float:
    try:
        return decode_number(source.raw(node))
    except ValueError as e:
        raise _InvalidLiteral(node, f"unsupported number {source.raw(node)}") from e

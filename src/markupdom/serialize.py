"""Markup serialization for markupdom nodes."""

from __future__ import annotations

# ruff: noqa: PERF401

from typing import Any

from .constants import DEFAULT_INDENT, DEFAULT_NEWLINE, NodeKind


def serialize_attribute(attr: Any) -> str:
    if attr.value is None:
        return str(attr.name)
    quote: str = attr.quote
    return f"{attr.name}={quote}{attr.value}{quote}"


def serialize_start_tag(name: str, attrs: list[Any] | None, closed: bool = False) -> str:
    parts: list[str] = ["<", name]
    for attr in attrs or []:
        parts.extend([" ", serialize_attribute(attr)])
    parts.append("/>" if closed else ">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def to_markup(
    node: Any,
    pretty: bool = False,
    indent: str = DEFAULT_INDENT,
    newline: str = DEFAULT_NEWLINE,
    level_ref: int = 0,
) -> str:
    """Convert node to a markup string.

    Without ``pretty`` this reproduces the source of a well-formed document.
    With ``pretty`` each child sits on its own line, indented by ``indent``
    repeated ``level + level_ref + 1`` times, and elements that have children
    put their closing tag on a line of its own. Text is never reflowed and the
    raw content of special elements is always emitted verbatim.
    """
    kind: str = node.kind

    if kind == NodeKind.TEXT:
        return str(node.data)

    if kind == NodeKind.COMMENT:
        return f"<!--{node.data}-->"

    if kind == NodeKind.PROCESSING_INSTRUCTION:
        return f"<?{node.name}{node.content}?>"

    if kind == NodeKind.DECLARATION:
        return f"<!{node.name}{node.content}>"

    if kind == NodeKind.DOCUMENT:
        return _children_to_markup(node, pretty, indent, newline, level_ref)

    name: str = node.name
    if node.closed:
        return serialize_start_tag(name, node.attrs, closed=True)

    open_tag = serialize_start_tag(name, node.attrs)
    if kind == NodeKind.SPECIAL:
        return f"{open_tag}{node.content or ''}{serialize_end_tag(name)}"

    if not pretty or not node.children:
        return f"{open_tag}{_children_to_markup(node, pretty, indent, newline, level_ref)}{serialize_end_tag(name)}"

    # Render with child indentation
    closing_prefix = indent * (node.level + level_ref)
    inner = _children_to_markup(node, pretty, indent, newline, level_ref)
    return f"{open_tag}{newline}{inner}{newline}{closing_prefix}{serialize_end_tag(name)}"


def _children_to_markup(node: Any, pretty: bool, indent: str, newline: str, level_ref: int) -> str:
    """Helper to join the markup of a node's children."""
    children: list[Any] = node.children or []
    if not pretty:
        return "".join(to_markup(child, pretty, indent, newline, level_ref) for child in children)

    prefix = indent * (node.level + level_ref + 1)
    parts: list[str] = []
    for child in children:
        parts.append(prefix + to_markup(child, pretty, indent, newline, level_ref))
    return newline.join(parts)


def to_test_format(node: Any, indent: int = 0) -> str:
    """Dump a subtree as one line per node, for tests and debugging.

    Uses '| ' prefixes and two-space indentation per level. Attributes are
    listed in source order under their element with their original quoting;
    the raw content of a special element is shown as ``#raw "..."``.
    """
    if node.kind == NodeKind.DOCUMENT:
        return "\n".join(_node_to_test_format(child, 0) for child in node.children or [])
    return _node_to_test_format(node, indent)


def _node_to_test_format(node: Any, indent: int) -> str:
    """Helper to convert a node to test format."""
    padding = " " * indent
    kind: str = node.kind

    if kind == NodeKind.TEXT:
        return f'| {padding}"{node.data}"'

    if kind in {NodeKind.COMMENT, NodeKind.PROCESSING_INSTRUCTION, NodeKind.DECLARATION}:
        return f"| {padding}{to_markup(node)}"

    line = f"| {padding}<{node.name}/>" if node.closed else f"| {padding}<{node.name}>"
    sections: list[str] = [line]
    for attr in node.attrs:
        sections.append(f"| {padding}  {serialize_attribute(attr)}")

    if kind == NodeKind.SPECIAL:
        if node.content is not None:
            sections.append(f'| {padding}  #raw "{node.content}"')
        return "\n".join(sections)

    for child in node.children:
        sections.append(_node_to_test_format(child, indent + 2))
    return "\n".join(sections)

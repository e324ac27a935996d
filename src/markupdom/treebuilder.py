from __future__ import annotations

from typing import Any

from .constants import NodeKind
from .errors import generate_error_message
from .node import (
    CommentNode,
    DeclarationNode,
    ElementNode,
    Node,
    ProcessingInstructionNode,
    SpecialNode,
    TextNode,
)
from .tokenizer import TokenizerOpts
from .tokens import CommentToken, DeclarationToken, ParseError, ProcessingInstructionToken, Tag


class TreeBuilder:
    """Token sink that grows a tree below a synthetic document root.

    ``context`` is the node new children are appended to. A start tag that
    is neither closed nor raw-content descends into the new element; an end
    tag ascends only when it names the current context, and is dropped
    otherwise.
    """

    __slots__ = ("collect_errors", "context", "document", "errors", "opts", "tokenizer")

    collect_errors: bool
    context: Node
    document: Node
    errors: list[ParseError]
    opts: TokenizerOpts
    tokenizer: Any | None

    def __init__(self, opts: TokenizerOpts | None = None, collect_errors: bool = False) -> None:
        self.opts = opts or TokenizerOpts()
        self.collect_errors = collect_errors
        self.errors = []
        self.tokenizer = None  # Set by parser after tokenizer is created
        self.document = Node()
        self.context = self.document

    def _parse_error(self, code: str, tag_name: str | None = None) -> None:
        if not self.collect_errors:
            return
        # Use the position of the last emitted token (set by tokenizer before emit)
        line = None
        column = None
        source = None
        if self.tokenizer is not None:
            line, column = self.tokenizer.location(self.tokenizer.last_token_pos)
            source = self.tokenizer.buffer
        message = generate_error_message(code, tag_name)
        self.errors.append(ParseError(code, line=line, column=column, message=message, source=source))

    def _append(self, node: Node) -> None:
        # The parser owns every node it creates, so skip add_child's checks
        node.parent = self.context
        children = self.context.children
        assert children is not None
        children.append(node)

    def process_token(self, token: Any) -> None:
        token_type = type(token)
        if token_type is Tag:
            if token.kind == Tag.START:
                self._insert_element(token)
            else:
                self._close_element(token)
        elif token_type is CommentToken:
            self._append(CommentNode(token.data))
        elif token_type is ProcessingInstructionToken:
            self._append(ProcessingInstructionNode(token.name, token.content))
        elif token_type is DeclarationToken:
            self._append(DeclarationNode(token.name, token.content))
        else:
            raise TypeError(f"Unexpected token {token!r}")

    def process_characters(self, data: str) -> None:
        if data:
            self._append(TextNode(data))

    def _insert_element(self, tag: Tag) -> None:
        name = tag.name
        if self.opts.is_raw_text(name):
            content = None if tag.self_closing else (tag.raw_content or "")
            self._append(SpecialNode(name, tag.attrs, content))
            return

        closed = tag.self_closing or self.opts.is_void(name)
        element = ElementNode(name, tag.attrs, closed)
        self._append(element)
        if not closed:
            self.context = element

    def _close_element(self, tag: Tag) -> None:
        current = self.context
        if (
            current.kind == NodeKind.ELEMENT
            and current.parent is not None
            and not current.closed  # type: ignore[attr-defined]
            and self.opts.names_equal(tag.name, current.name)
        ):
            self.context = current.parent
            return
        self._parse_error("unexpected-end-tag", tag.name)

    def finish(self) -> Node:
        return self.document

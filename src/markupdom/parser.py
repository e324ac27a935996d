"""Document façade: build trees from strings or files, or wrap existing ones."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .constants import DEFAULT_INDENT, DEFAULT_NEWLINE
from .node import ElementNode, Node
from .tokenizer import Tokenizer, TokenizerOpts
from .treebuilder import TreeBuilder

if TYPE_CHECKING:
    import os

    from .tokens import ParseError


class Document:
    """A parsed (or synthesized) document.

    ``document`` is the synthetic root node; its children are the top-level
    nodes of the source. Building never raises: malformed input leaves a
    partial tree, and with ``collect_errors=True`` the reasons are listed in
    ``errors``.
    """

    __slots__ = ("document", "errors", "xmlmode")

    document: Node
    errors: list[ParseError]
    xmlmode: bool

    def __init__(
        self,
        source: str | None = None,
        *,
        xmlmode: bool = False,
        collect_errors: bool = False,
        tokenizer_opts: TokenizerOpts | None = None,
        root: Node | None = None,
    ) -> None:
        if root is not None:
            self.document = root
            self.errors = []
            self.xmlmode = bool(xmlmode)
            return

        opts = tokenizer_opts or TokenizerOpts(xmlmode=xmlmode)
        self.xmlmode = opts.xmlmode

        tree_builder = TreeBuilder(opts, collect_errors=collect_errors)
        tokenizer = Tokenizer(tree_builder, opts, collect_errors=collect_errors)
        # Link tokenizer to tree_builder for position info
        tree_builder.tokenizer = tokenizer

        tokenizer.run(source or "")
        self.document = tree_builder.finish()

        # Merge errors from both tokenizer and tree builder
        self.errors = tokenizer.errors + tree_builder.errors

    def search(self, selector: str) -> list[ElementNode]:
        """Query the document using a CSS selector. Delegates to document.search()."""
        return self.document.search(selector)

    def to_string(
        self,
        pretty: bool = False,
        indent: str = DEFAULT_INDENT,
        newline: str = DEFAULT_NEWLINE,
        level_ref: int = 0,
    ) -> str:
        return self.document.to_string(pretty=pretty, indent=indent, newline=newline, level_ref=level_ref)

    def __str__(self) -> str:
        return self.document.to_string()

    def __repr__(self) -> str:
        return f"<Document xmlmode={self.xmlmode} children={len(self.document.children or [])}>"


def build(source: str, xmlmode: bool = False) -> Node:
    """Parse ``source`` and return just the root node."""
    return Document(source, xmlmode=xmlmode).document


def from_string(source: str, xmlmode: bool = False, collect_errors: bool = False) -> Document:
    return Document(source, xmlmode=xmlmode, collect_errors=collect_errors)


def from_file(
    path: str | os.PathLike[str],
    encoding: str | None = None,
    xmlmode: bool = False,
    collect_errors: bool = False,
) -> Document:
    """Read ``path`` as text (platform default encoding unless ``encoding`` is given) and parse it."""
    source = Path(path).read_text(encoding=encoding)
    return from_string(source, xmlmode=xmlmode, collect_errors=collect_errors)


def create_empty() -> Document:
    """A document whose root has no children."""
    return Document(root=Node())


def create_element(name: str) -> ElementNode:
    """A detached, open element with no attributes."""
    return ElementNode(name)


def create(root: Node) -> Document:
    """Wrap an already built node as a document."""
    return Document(root=root)

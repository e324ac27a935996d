from .node import (
    Attribute,
    CommentNode,
    DeclarationNode,
    ElementNode,
    Node,
    ProcessingInstructionNode,
    SpecialNode,
    TextNode,
)
from .parser import Document, create, create_element, create_empty, from_file, from_string
from .selector import query
from .serialize import to_markup, to_test_format
from .tokenizer import TokenizerOpts
from .tokens import ParseError

__all__ = [
    "Attribute",
    "CommentNode",
    "DeclarationNode",
    "Document",
    "ElementNode",
    "Node",
    "ParseError",
    "ProcessingInstructionNode",
    "SpecialNode",
    "TextNode",
    "TokenizerOpts",
    "create",
    "create_element",
    "create_empty",
    "from_file",
    "from_string",
    "query",
    "to_markup",
    "to_test_format",
]

from __future__ import annotations

# Tags that never have content in HTML mode; they are closed on open.
VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "br",
        "hr",
        "img",
        "input",
        "param",
        "meta",
        "link",
        "area",
    }
)

# Tags whose content is kept verbatim in HTML mode.
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"style", "script"})

WHITESPACE: str = " \t\n\r"

# Punctuation allowed inside tag and attribute names besides ASCII letters and digits.
WORD_PUNCTUATION: str = "_-:."

# Characters that end a name. Anything else outside ASCII letters/digits is
# treated as part of a name.
NAME_TERMINATORS: frozenset[str] = frozenset(" \t\n\r\f=<>!/?\"'()[]{}")

BRACKET_PAIRS: dict[str, str] = {"<": ">", "(": ")", "[": "]", "{": "}"}

DEFAULT_INDENT: str = "  "
DEFAULT_NEWLINE: str = "\n"


class NodeKind:
    """Discriminator stored on every node class as ``kind``."""

    DOCUMENT: str = "document"
    TEXT: str = "text"
    COMMENT: str = "comment"
    PROCESSING_INSTRUCTION: str = "processing-instruction"
    DECLARATION: str = "declaration"
    ELEMENT: str = "element"
    SPECIAL: str = "special"

"""Human-readable messages for the problems recorded while building a tree.

Building never raises. When error collection is enabled, each problem is
stored as a :class:`~markupdom.tokens.ParseError` whose message comes from
here.
"""

from __future__ import annotations


def generate_error_message(code: str, tag_name: str | None = None) -> str:
    """Generate human-readable error message from error code.

    Args:
        code: The error code string (kebab-case format)
        tag_name: Optional tag name to include in the message for context

    Returns:
        Human-readable error message string
    """
    messages = {
        # Truncation: the builder stops at the first of these
        "eof-before-tag-name": "Unexpected end of input right after <",
        "eof-in-tag": f"Unexpected end of input inside <{tag_name}> tag (missing > or unclosed quote)",
        "eof-in-end-tag": "Unexpected end of input inside end tag (missing >)",
        "eof-in-comment": "Unexpected end of input in comment (missing -->)",
        "eof-in-processing-instruction": "Unexpected end of input in processing instruction (missing ?>)",
        "eof-in-declaration": "Unexpected end of input in declaration (missing >)",
        "eof-in-raw-text": f"Missing </{tag_name}> closing tag for raw content",
        # Recoverable: the offending token is dropped and building continues
        "unexpected-end-tag": f"Unexpected </{tag_name}> end tag ignored",
    }

    # Return message or fall back to the code itself if not found
    return messages.get(code, code)

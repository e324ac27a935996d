"""Low-level string scanning shared by the tokenizer, tree builder and selector engine.

All searches work on a ``[start, end)`` window of ``source`` and return an
index into ``source`` (or ``-1`` when nothing is found), so callers can keep
slicing the original document without copying it.

Two search modes exist:

- plain: skips over quoted substrings (``'...'`` / ``"..."``) so a target
  character inside a string literal is never matched.
- ``has_stack``: additionally tracks balanced ``<>``, ``()``, ``[]`` and
  ``{}`` pairs and only matches at nesting depth zero. Declarations and
  processing instructions use this so ``<!DOCTYPE x [<!ENTITY y "z">]>`` ends
  at the final ``>``.
"""

from __future__ import annotations

from .constants import BRACKET_PAIRS, NAME_TERMINATORS, WHITESPACE, WORD_PUNCTUATION

_ASCII_LOWER_TABLE = str.maketrans({chr(code): chr(code + 32) for code in range(65, 91)})
_CLOSING_BRACKETS = frozenset(BRACKET_PAIRS.values())

# Characters that can never start a quote or bracket; the scanner steps over them directly.
_PLAIN_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789" + WHITESPACE + "=" + WORD_PUNCTUATION)


def ascii_lower(text: str) -> str:
    """Lowercase ASCII letters only; other characters are left untouched."""
    return text.translate(_ASCII_LOWER_TABLE)


def char_equal(a: str, b: str, ignore_case: bool = False) -> bool:
    if ignore_case:
        return a.translate(_ASCII_LOWER_TABLE) == b.translate(_ASCII_LOWER_TABLE)
    return a == b


def str_equal(a: str | None, b: str | None, ignore_case: bool = False) -> bool:
    """Compare two strings; ``None`` is never equal to anything."""
    if a is None or b is None:
        return False
    if ignore_case:
        return a.translate(_ASCII_LOWER_TABLE) == b.translate(_ASCII_LOWER_TABLE)
    return a == b


def is_word_char(ch: str) -> bool:
    """Return True if ``ch`` may appear in a tag or attribute name.

    ASCII letters, digits and ``_-:.`` are word characters, whitespace and
    markup punctuation are not, and anything unknown (non-ASCII included)
    counts as a word character.
    """
    if ch.isascii() and ch.isalnum():
        return True
    if ch in WORD_PUNCTUATION:
        return True
    return ch not in NAME_TERMINATORS


def search_next_char(source: str, start: int, end: int) -> int:
    """Index of the first non-whitespace character in the window, or -1."""
    if start < 0:
        return -1
    end = min(end, len(source))
    for i in range(start, end):
        if source[i] not in WHITESPACE:
            return i
    return -1


def search_word_end(source: str, start: int, end: int) -> int:
    """Index just past the word run starting at ``start``; ``end`` if it runs to the window end."""
    if start < 0:
        return end
    stop = min(end, len(source))
    for i in range(start, stop):
        if not is_word_char(source[i]):
            return i
    return end


def search_match_char(
    source: str,
    start: int,
    end: int,
    target: str,
    ignore_case: bool = False,
    has_stack: bool = False,
) -> int:
    """Find ``target`` in the window, skipping quoted strings (and nested brackets with ``has_stack``).

    Returns -1 when the target is missing, when a quote is left open, or (with
    ``has_stack``) when an unbalanced closing bracket is met first.
    """
    stack: list[str] = []
    end = min(end, len(source))
    index = start
    while index < end:
        ch = source[index]
        if char_equal(target, ch, ignore_case) and not stack:
            return index
        if ch in _PLAIN_CHARS:
            index += 1
            continue
        if ch == '"' or ch == "'":
            match = source.find(ch, index + 1, end)
            if match < 0:
                break
            index = match + 1
            continue
        if has_stack:
            if ch in BRACKET_PAIRS:
                stack.append(ch)
                index += 1
                continue
            if ch in _CLOSING_BRACKETS:
                if not stack or BRACKET_PAIRS[stack[-1]] != ch:
                    break
                stack.pop()
                index += 1
                continue
        index += 1
    return -1


def search_match_str(
    source: str,
    start: int,
    end: int,
    target: str,
    ignore_case: bool = False,
    has_stack: bool = False,
) -> int:
    """Multi-character version of :func:`search_match_char`; returns the index of the first character."""
    if not source or not target:
        return -1
    last_start = min(end, len(source)) - len(target) + 1
    first = target[0]
    rest = target[1:]
    index = search_match_char(source, start, last_start, first, ignore_case, has_stack)
    while index >= 0:
        candidate = source[index + 1 : index + len(target)]
        if str_equal(candidate, rest, ignore_case):
            return index
        index = search_match_char(source, index + 1, last_start, first, ignore_case, has_stack)
    return -1

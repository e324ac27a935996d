# CSS selector evaluation for markupdom
# Supports the subset of CSS selectors listed in SelectorEngine.search

from __future__ import annotations

import logging
from typing import Any

from .constants import NodeKind
from .scanner import ascii_lower, str_equal

logger = logging.getLogger(__name__)

_ELEMENT_KINDS = frozenset({NodeKind.ELEMENT, NodeKind.SPECIAL})

# Characters that split selector words. Whitespace splits but is not kept.
SELECTOR_DELIMITERS: str = " \t\r\n#.*:^$|>+~=[]"
_SELECTOR_WHITESPACE: str = " \t\r\n"

# Steps that take the following token as their operand.
_OPERAND_STEPS = frozenset("#.>+~:")

_ATTRIBUTE_OPERATORS = frozenset("~^$*|")


def _is_element(node: Any) -> bool:
    return node.kind in _ELEMENT_KINDS


class SelectorTokenizer:
    """Splits a CSS selector string into a flat list of words and one-character operators.

    ``div > p.note`` becomes ``["div", ">", "p", ".", "note"]``. Quoted
    strings become a single word without their quotes, and a parenthesised
    run stays glued to the word before it (``nth-child(2)``).
    """

    __slots__ = ("length", "pos", "selector")

    selector: str
    pos: int
    length: int

    def __init__(self, selector: str) -> None:
        self.selector = selector
        self.pos = 0
        self.length = len(selector)

    def _find_closing_paren(self) -> int:
        depth = 0
        for i in range(self.pos, self.length):
            ch = self.selector[i]
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return i
        return -1

    def tokenize(self) -> list[str]:
        words: list[str] = []
        buffer: list[str] = []
        selector = self.selector

        def flush() -> None:
            if buffer:
                words.append("".join(buffer))
                buffer.clear()

        while self.pos < self.length:
            ch = selector[self.pos]

            if ch.isascii() and ch.isalnum():
                buffer.append(ch)
                self.pos += 1
                continue

            if ch == '"' or ch == "'":
                end = selector.find(ch, self.pos + 1)
                if end < 0:
                    logger.debug("Unterminated string in selector %r at %d", selector, self.pos)
                    break
                flush()
                words.append(selector[self.pos + 1 : end])
                self.pos = end + 1
                continue

            if ch == "(":
                end = self._find_closing_paren()
                if end < 0:
                    logger.debug("Unterminated ( in selector %r at %d", selector, self.pos)
                    break
                buffer.append(selector[self.pos : end + 1])
                self.pos = end + 1
                continue

            if ch in SELECTOR_DELIMITERS:
                flush()
                if ch not in _SELECTOR_WHITESPACE:
                    words.append(ch)
            else:
                buffer.append(ch)
            self.pos += 1

        flush()
        return words


class SelectorEngine:
    """Applies a tokenized selector step by step to a working set of nodes.

    Each step maps the current context (initially the node being searched)
    to a new list of elements, which becomes the context of the next step:

    - ``E`` / ``*``: descendants named ``E`` (any element for ``*``)
    - ``#id``, ``.class``: context nodes and their descendants with that id / class
    - ``> E``, ``+ E``, ``~ E``: children, next sibling, following siblings named ``E``
    - ``:pseudo``: context nodes and their descendants matching the pseudo-class
    - ``[attr]``, ``[attr=v]``, ``[attr~=v]``, ``[attr^=v]``, ``[attr$=v]``,
      ``[attr*=v]``, ``[attr|=v]``: context nodes and their descendants
      passing the attribute test

    There is no compound grouping: ``a#x`` is two steps. Element and
    attribute names compare ignoring ASCII case, attribute values exactly.
    """

    __slots__ = ()

    def search(self, root: Any, words: list[str]) -> list[Any]:
        context: list[Any] = [root]
        result: list[Any] = []
        index = 0
        count = len(words)
        while index < count:
            word = words[index]
            if word in _OPERAND_STEPS:
                if index + 1 >= count:
                    logger.debug("Selector step %r has no operand", word)
                    return []
                result = self._apply_step(context, word, words[index + 1])
                index += 2
            elif word == "[":
                try:
                    end = words.index("]", index + 1)
                except ValueError:
                    logger.debug("Unclosed [ in selector words %r", words)
                    break
                result = self._filter_by_attribute(context, words[index + 1 : end])
                index = end + 1
            else:
                result = self._descendants_by_tag_name(context, word)
                index += 1
            context = result
        return result

    def _apply_step(self, context: list[Any], operator: str, operand: str) -> list[Any]:
        if operator == "#":
            return self._scan(context, lambda el: str_equal(operand, el.get_attr_value("id"), True))
        if operator == ".":
            return self._scan(context, lambda el: el.has_class(operand))
        if operator == ">":
            return self._children_by_tag_name(context, operand)
        if operator == "+":
            return self._following_siblings_by_tag_name(context, operand, immediate=True)
        if operator == "~":
            return self._following_siblings_by_tag_name(context, operand, immediate=False)
        return self._filter_by_pseudo_class(context, operand)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _scan(self, context: list[Any], predicate: Any) -> list[Any]:
        """Context elements and their descendants that satisfy ``predicate``, deduplicated."""
        results: list[Any] = []
        seen: set[int] = set()
        for node in context:
            if _is_element(node) and predicate(node):
                _add_unique(results, seen, node)
            for element in node.get_elements_by_filter(predicate):
                _add_unique(results, seen, element)
        return results

    def _descendants_by_tag_name(self, context: list[Any], tag_name: str) -> list[Any]:
        results: list[Any] = []
        seen: set[int] = set()
        for node in context:
            for element in node.get_elements_by_tag_name(tag_name):
                _add_unique(results, seen, element)
        return results

    def _children_by_tag_name(self, context: list[Any], tag_name: str) -> list[Any]:
        results: list[Any] = []
        seen: set[int] = set()
        for node in context:
            for element in node.child_elements():
                if _name_matches(element, tag_name):
                    _add_unique(results, seen, element)
        return results

    def _following_siblings_by_tag_name(self, context: list[Any], tag_name: str, immediate: bool) -> list[Any]:
        results: list[Any] = []
        seen: set[int] = set()
        for node in context:
            parent = node.parent
            if parent is None:
                continue
            siblings = parent.children
            start = parent.index_of_child(node)
            for sibling in siblings[start + 1 :]:
                if not _is_element(sibling):
                    continue
                if _name_matches(sibling, tag_name):
                    _add_unique(results, seen, sibling)
                if immediate:
                    break
        return results

    def _filter_by_attribute(self, context: list[Any], parts: list[str]) -> list[Any]:
        """Apply ``[name]``, ``[name = value]`` or ``[name op = value]`` given the words between the brackets."""
        if len(parts) == 1:
            name = parts[0]
            return self._scan(context, lambda el: el.get_attr(name) is not None)
        if len(parts) == 3 and parts[1] == "=":
            name, operator, expected = parts[0], "=", parts[2]
        elif len(parts) == 4 and parts[1] in _ATTRIBUTE_OPERATORS and parts[2] == "=":
            name, operator, expected = parts[0], parts[1], parts[3]
        else:
            logger.debug("Unsupported attribute selector [%s]", " ".join(parts))
            return []
        return self._scan(context, lambda el: _attribute_matches(el.get_attr_value(name), operator, expected))

    def _filter_by_pseudo_class(self, context: list[Any], pseudo: str) -> list[Any]:
        pseudo = ascii_lower(pseudo)
        arg: str | None = None
        paren = pseudo.find("(")
        if paren >= 0:
            close = pseudo.rfind(")")
            arg = pseudo[paren + 1 : close] if close > paren else pseudo[paren + 1 :]
            pseudo = pseudo[:paren]

        if pseudo == "root":
            results: list[Any] = []
            seen: set[int] = set()
            for element in self._scan(context, lambda el: True):
                while element.parent is not None and _is_element(element.parent):
                    element = element.parent
                _add_unique(results, seen, element)
            return results

        if pseudo == "empty":
            return self._scan(context, lambda el: not el.children)

        if pseudo in {"nth-child", "nth-last-child", "nth-of-type", "nth-last-of-type"}:
            index = _parse_index(arg)
            if index is None:
                return []
            of_type = pseudo.endswith("of-type")
            from_end = pseudo.startswith("nth-last")
            return self._scan(context, lambda el: _is_nth_sibling(el, index, of_type, from_end))

        position_tests = {
            "first-child": (False, 0, False),
            "last-child": (False, 0, True),
            "first-of-type": (True, 0, False),
            "last-of-type": (True, 0, True),
        }
        if pseudo in position_tests:
            of_type, index, from_end = position_tests[pseudo]
            return self._scan(context, lambda el: _is_nth_sibling(el, index, of_type, from_end))

        if pseudo == "only-child":
            return self._scan(context, lambda el: _sibling_count(el, of_type=False) == 1)

        if pseudo == "only-of-type":
            return self._scan(context, lambda el: _sibling_count(el, of_type=True) == 1)

        # Unknown pseudo-class - don't match
        logger.debug("Unsupported pseudo-class :%s", pseudo)
        return []


def _add_unique(results: list[Any], seen: set[int], node: Any) -> None:
    key = id(node)
    if key not in seen:
        seen.add(key)
        results.append(node)


def _name_matches(element: Any, tag_name: str) -> bool:
    return tag_name == "*" or str_equal(tag_name, element.name, True)


def _attribute_matches(actual: str | None, operator: str, expected: str) -> bool:
    """Compare an attribute value (case-sensitive) using a CSS attribute operator."""
    if actual is None:
        return False

    if operator == "=":
        return actual == expected

    if operator == "~":
        # Space-separated word match
        return expected in actual.split()

    if operator == "^":
        return actual.startswith(expected)

    if operator == "$":
        return actual.endswith(expected)

    if operator == "*":
        return expected in actual

    # "|": the dash-separated parts of expected are a prefix of those of actual
    have = actual.split("-")
    want = expected.split("-")
    return len(want) <= len(have) and have[: len(want)] == want


def _parse_index(arg: str | None) -> int | None:
    """Parse the argument of an nth-* pseudo-class: a plain integer counted from zero."""
    if arg is None:
        return None
    text = arg.strip()
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not digits or not digits.isascii() or not digits.isdigit():
        return None
    return int(text)


def _siblings(element: Any, of_type: bool) -> list[Any]:
    parent = element.parent
    if parent is None:
        return []
    return parent.child_elements(element.name if of_type else None)


def _is_nth_sibling(element: Any, index: int, of_type: bool, from_end: bool) -> bool:
    """True if ``element`` sits at zero-based ``index`` among its element siblings."""
    siblings = _siblings(element, of_type)
    if index < 0 or index >= len(siblings):
        return False
    if from_end:
        index = len(siblings) - 1 - index
    return siblings[index] is element


def _sibling_count(element: Any, of_type: bool) -> int:
    if element.parent is None:
        return 0
    return len(_siblings(element, of_type))


def tokenize_selector(selector_string: str) -> list[str]:
    """Split a CSS selector string into the words the engine consumes."""
    return SelectorTokenizer(selector_string).tokenize()


# Global engine instance
_engine: SelectorEngine = SelectorEngine()


def query(root: Any, selector_string: str | None) -> list[Any]:
    """
    Query the tree starting from root, returning all matching elements.

    Args:
        root: The node to search from
        selector_string: A CSS selector string

    Returns:
        A list of matching elements; empty for an empty or malformed selector.
    """
    if not selector_string:
        return []
    return _engine.search(root, tokenize_selector(selector_string))

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .node import Attribute


class Tag:
    __slots__ = ("attrs", "kind", "name", "raw_content", "self_closing")

    START: Literal[0] = 0
    END: Literal[1] = 1

    kind: int
    name: str
    attrs: list[Attribute]
    self_closing: bool
    raw_content: str | None

    def __init__(
        self,
        kind: int,
        name: str,
        attrs: list[Attribute] | None = None,
        self_closing: bool = False,
        raw_content: str | None = None,
    ) -> None:
        self.kind = kind
        self.name = name
        self.attrs = attrs if attrs is not None else []
        self.self_closing = bool(self_closing)
        # Set only for raw-content start tags that found their closing tag.
        self.raw_content = raw_content

    def __repr__(self) -> str:
        kind = "START" if self.kind == Tag.START else "END"
        return f"Tag({kind}, {self.name!r})"


class CommentToken:
    __slots__ = ("data",)

    data: str

    def __init__(self, data: str) -> None:
        self.data = data


class ProcessingInstructionToken:
    """``<?name content?>``; ``content`` keeps its leading whitespace."""

    __slots__ = ("content", "name")

    name: str
    content: str

    def __init__(self, name: str, content: str) -> None:
        self.name = name
        self.content = content


class DeclarationToken:
    """``<!name content>``, e.g. a doctype."""

    __slots__ = ("content", "name")

    name: str
    content: str

    def __init__(self, name: str, content: str) -> None:
        self.name = name
        self.content = content


class ParseError:
    """A recorded (never raised) problem found while building a tree."""

    __slots__ = ("_source", "code", "column", "line", "message")

    code: str
    line: int | None
    column: int | None
    message: str
    _source: str | None

    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(
        self,
        code: str,
        line: int | None = None,
        column: int | None = None,
        message: str | None = None,
        source: str | None = None,
    ) -> None:
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code
        self._source = source

    def __repr__(self) -> str:
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"ParseError({self.code!r})"

    def __str__(self) -> str:
        location = f"({self.line},{self.column}): " if self.line is not None and self.column is not None else ""
        if self.message != self.code:
            return f"{location}{self.code} - {self.message}"
        return f"{location}{self.code}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.code == other.code and self.line == other.line and self.column == other.column

    def as_exception(self) -> SyntaxError:
        """Build a SyntaxError pointing at the offending line, for display purposes.

        The error is returned, not raised; the tree builder itself never raises.
        """
        exc = SyntaxError(self.message)
        exc.msg = self.message
        if self.line is None or self.column is None or not self._source:
            return exc

        lines = self._source.split("\n")
        if self.line < 1 or self.line > len(lines):
            return exc

        exc.filename = "<markup>"
        exc.lineno = self.line
        exc.offset = self.column
        exc.text = lines[self.line - 1]
        exc.end_lineno = self.line
        exc.end_offset = len(exc.text) + 1
        return exc

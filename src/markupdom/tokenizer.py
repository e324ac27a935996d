import logging
from bisect import bisect_right

from .constants import RAW_TEXT_ELEMENTS, VOID_ELEMENTS, WHITESPACE
from .errors import generate_error_message
from .node import Attribute
from .scanner import (
    ascii_lower,
    search_match_char,
    search_match_str,
    search_next_char,
    search_word_end,
    str_equal,
)
from .tokens import (
    CommentToken,
    DeclarationToken,
    ParseError,
    ProcessingInstructionToken,
    Tag,
)

logger = logging.getLogger(__name__)

_QUOTES = "'\""
_UNQUOTED_VALUE_TERMINATORS = WHITESPACE + ">"


class TokenizerOpts:
    """Dialect switches shared by the tokenizer and the tree builder.

    In XML mode names compare case-sensitively and neither the void list nor
    the raw-content list applies.
    """

    __slots__ = ("raw_text_elements", "void_elements", "xmlmode")

    def __init__(self, xmlmode=False, void_elements=None, raw_text_elements=None):
        self.xmlmode = bool(xmlmode)
        if void_elements is None:
            self.void_elements = VOID_ELEMENTS
        else:
            self.void_elements = frozenset(ascii_lower(name) for name in void_elements)
        if raw_text_elements is None:
            self.raw_text_elements = RAW_TEXT_ELEMENTS
        else:
            self.raw_text_elements = frozenset(ascii_lower(name) for name in raw_text_elements)

    def is_void(self, name):
        return not self.xmlmode and ascii_lower(name) in self.void_elements

    def is_raw_text(self, name):
        return not self.xmlmode and ascii_lower(name) in self.raw_text_elements

    def names_equal(self, a, b):
        return str_equal(a, b, not self.xmlmode)


class Tokenizer:
    """Single forward pass over a document, emitting tokens to a tree-builder sink.

    Text between constructs is buffered and flushed as one characters call
    right before the next token. Any construct that cannot be terminated
    (missing ``>``, ``-->``, ``?>``, closing quote, or raw-content end tag)
    ends the pass; everything before it has already been emitted.
    """

    __slots__ = (
        "_newline_positions",
        "buffer",
        "collect_errors",
        "errors",
        "last_token_pos",
        "length",
        "opts",
        "pos",
        "sink",
        "text_buffer",
    )

    def __init__(self, sink, opts=None, collect_errors=False):
        self.sink = sink
        self.opts = opts or TokenizerOpts()
        self.collect_errors = collect_errors
        self.errors = []

        self.buffer = ""
        self.length = 0
        self.pos = 0
        self.last_token_pos = 0
        self.text_buffer = []
        self._newline_positions = None

    def initialize(self, source):
        self.buffer = source or ""
        self.length = len(self.buffer)
        self.pos = 0
        self.last_token_pos = 0
        self.errors = []
        self.text_buffer.clear()

        # Pre-compute newline positions for O(log n) line lookups
        if self.collect_errors:
            self._newline_positions = []
            pos = -1
            buffer = self.buffer
            while True:
                pos = buffer.find("\n", pos + 1)
                if pos == -1:
                    break
                self._newline_positions.append(pos)
        else:
            self._newline_positions = None

    def location(self, pos):
        """Return the 1-based (line, column) of a buffer offset, or (None, None) without error collection."""
        if self._newline_positions is None:
            return None, None
        newlines_before = bisect_right(self._newline_positions, pos - 1)
        line = newlines_before + 1
        if newlines_before == 0:
            column = pos + 1
        else:
            column = pos - self._newline_positions[newlines_before - 1]
        return line, column

    def step(self):
        """Consume one text run and the construct after it. Returns True when the pass is over."""
        buffer = self.buffer
        length = self.length
        pos = self.pos
        if pos >= length:
            return True

        tag_start = buffer.find("<", pos)
        if tag_start == -1:
            self._append_text(buffer[pos:])
            self.pos = length
            return True

        if tag_start > pos:
            self._append_text(buffer[pos:tag_start])
        self.pos = tag_start

        if tag_start + 1 >= length:
            return self._stop("eof-before-tag-name", tag_start)

        nc = buffer[tag_start + 1]
        if nc == "?":
            return self._consume_processing_instruction(tag_start)
        if nc == "!":
            if buffer.startswith("--", tag_start + 2):
                return self._consume_comment(tag_start)
            return self._consume_declaration(tag_start)
        if nc == "/":
            return self._consume_end_tag(tag_start)
        return self._consume_start_tag(tag_start)

    def run(self, source):
        self.initialize(source)
        while True:
            if self.step():
                break
        self._flush_text()

    # ---------------------
    # Helper methods
    # ---------------------

    def _append_text(self, text):
        if text:
            self.text_buffer.append(text)

    def _flush_text(self):
        if not self.text_buffer:
            return

        # Optimization: Avoid join for single chunk
        if len(self.text_buffer) == 1:
            data = self.text_buffer[0]
        else:
            data = "".join(self.text_buffer)
        self.text_buffer.clear()
        self.sink.process_characters(data)

    def _emit_token(self, token, start):
        self._flush_text()
        self.last_token_pos = start
        self.sink.process_token(token)

    def _emit_error(self, code, pos, tag_name=None):
        if not self.collect_errors:
            return
        line, column = self.location(pos)
        message = generate_error_message(code, tag_name)
        self.errors.append(ParseError(code, line=line, column=column, message=message, source=self.buffer))

    def _stop(self, code, pos, tag_name=None):
        logger.debug("Stopped building at offset %d: %s", pos, code)
        self._emit_error(code, pos, tag_name)
        self.pos = self.length
        return True

    # ---------------------
    # Constructs
    # ---------------------

    def _consume_processing_instruction(self, tag_start):
        buffer = self.buffer
        length = self.length
        name_end = search_word_end(buffer, tag_start + 2, length)
        if name_end >= length:
            return self._stop("eof-in-processing-instruction", tag_start)
        end = search_match_str(buffer, name_end, length, "?>", not self.opts.xmlmode, has_stack=True)
        if end < 0:
            return self._stop("eof-in-processing-instruction", tag_start)
        token = ProcessingInstructionToken(buffer[tag_start + 2 : name_end], buffer[name_end:end])
        self._emit_token(token, tag_start)
        self.pos = end + 2
        return False

    def _consume_comment(self, tag_start):
        end = self.buffer.find("-->", tag_start + 4)
        if end < 0:
            return self._stop("eof-in-comment", tag_start)
        self._emit_token(CommentToken(self.buffer[tag_start + 4 : end]), tag_start)
        self.pos = end + 3
        return False

    def _consume_declaration(self, tag_start):
        buffer = self.buffer
        length = self.length
        name_end = search_word_end(buffer, tag_start + 2, length)
        if name_end >= length:
            return self._stop("eof-in-declaration", tag_start)
        end = search_match_char(buffer, name_end, length, ">", not self.opts.xmlmode, has_stack=True)
        if end < 0:
            return self._stop("eof-in-declaration", tag_start)
        token = DeclarationToken(buffer[tag_start + 2 : name_end], buffer[name_end:end])
        self._emit_token(token, tag_start)
        self.pos = end + 1
        return False

    def _consume_end_tag(self, tag_start):
        buffer = self.buffer
        end = search_match_char(buffer, tag_start + 2, self.length, ">", not self.opts.xmlmode)
        if end < 0:
            return self._stop("eof-in-end-tag", tag_start)
        name = buffer[tag_start + 2 : end].strip()
        self._emit_token(Tag(Tag.END, name), tag_start)
        self.pos = end + 1
        return False

    def _consume_start_tag(self, tag_start):
        buffer = self.buffer
        length = self.length
        opts = self.opts
        name_end = search_word_end(buffer, tag_start + 1, length)
        name = buffer[tag_start + 1 : name_end]
        if name_end >= length:
            return self._stop("eof-in-tag", tag_start, name)

        if not name:
            # "<" not followed by a name is plain text
            self._append_text("<")
            self.pos = tag_start + 1
            return False

        tag_end = search_match_char(buffer, name_end, length, ">", not opts.xmlmode)
        if tag_end < 0:
            return self._stop("eof-in-tag", tag_start, name)

        # Quoted values are balanced here, so a trailing "/" is outside any quote
        attrs_end = tag_end
        self_closing = False
        last = tag_end - 1
        while last >= name_end and buffer[last] in WHITESPACE:
            last -= 1
        if last >= name_end and buffer[last] == "/":
            self_closing = True
            attrs_end = last
        if opts.is_void(name):
            self_closing = True

        attrs = self._parse_attributes(name_end, attrs_end)

        if opts.is_raw_text(name) and not self_closing:
            return self._consume_raw_content(tag_start, tag_end, name, attrs)

        self._emit_token(Tag(Tag.START, name, attrs, self_closing), tag_start)
        self.pos = tag_end + 1
        return False

    def _consume_raw_content(self, tag_start, tag_end, name, attrs):
        buffer = self.buffer
        length = self.length
        ignore_case = not self.opts.xmlmode
        content_start = tag_end + 1
        search = content_start
        while True:
            # Quoted strings are skipped, so "</script>" inside a literal is not the end
            close_start = search_match_str(buffer, search, length, "</", ignore_case)
            if close_start < 0:
                break
            close_end = search_match_char(buffer, close_start + 2, length, ">", ignore_case)
            if close_end < 0:
                break
            if self.opts.names_equal(name, buffer[close_start + 2 : close_end].strip()):
                content = buffer[content_start:close_start]
                self._emit_token(Tag(Tag.START, name, attrs, raw_content=content), tag_start)
                self.pos = close_end + 1
                return False
            search = close_end + 1
        return self._stop("eof-in-raw-text", tag_start, name)

    def _parse_attributes(self, start, end):
        """Read ``name``, ``name=value``, ``name='value'`` and ``name="value"`` pairs from ``[start, end)``."""
        buffer = self.buffer
        attrs = []
        index = start
        while index < end:
            name_start = search_next_char(buffer, index, end)
            if name_start < 0:
                break
            name_end = search_word_end(buffer, name_start, end)
            if name_end == name_start:
                # Not a name character; skip it
                index = name_start + 1
                continue
            name = buffer[name_start:name_end]

            equals = search_next_char(buffer, name_end, end)
            if equals < 0 or buffer[equals] != "=":
                attrs.append(Attribute(name, None, Attribute.NONE_QUOTE))
                if equals < 0:
                    break
                index = equals
                continue

            value_start = search_next_char(buffer, equals + 1, end)
            if value_start < 0:
                attrs.append(Attribute(name, None, Attribute.NONE_QUOTE))
                break

            quote = buffer[value_start]
            if quote in _QUOTES:
                value_end = buffer.find(quote, value_start + 1, end)
                if value_end < 0:
                    attrs.append(Attribute(name, buffer[value_start + 1 : end], quote))
                    break
                attrs.append(Attribute(name, buffer[value_start + 1 : value_end], quote))
                index = value_end + 1
                continue

            value_end = value_start
            while value_end < end and buffer[value_end] not in _UNQUOTED_VALUE_TERMINATORS:
                value_end += 1
            attrs.append(Attribute(name, buffer[value_start:value_end], Attribute.NONE_QUOTE))
            index = value_end
        return attrs

"""
Unit tests for the markup tokenizer, using a sink that records what it is fed.
"""

import pytest

from markupdom.node import Attribute
from markupdom.tokenizer import Tokenizer, TokenizerOpts
from markupdom.tokens import CommentToken, DeclarationToken, ProcessingInstructionToken, Tag


class RecordingSink:
    def __init__(self):
        self.events = []

    def process_token(self, token):
        self.events.append(token)

    def process_characters(self, data):
        self.events.append(("text", data))


def tokenize(source, xmlmode=False, collect_errors=False):
    sink = RecordingSink()
    tokenizer = Tokenizer(sink, TokenizerOpts(xmlmode=xmlmode), collect_errors=collect_errors)
    tokenizer.run(source)
    return sink.events, tokenizer.errors


def attr_tuples(attrs):
    return [(a.name, a.value, a.quote) for a in attrs]


class TestTokenizerOpts:
    def test_html_defaults(self):
        opts = TokenizerOpts()
        assert opts.is_void("BR")
        assert opts.is_raw_text("Script")
        assert opts.names_equal("DIV", "div")

    def test_xml_ignores_lists(self):
        opts = TokenizerOpts(xmlmode=True)
        assert not opts.is_void("br")
        assert not opts.is_raw_text("script")
        assert not opts.names_equal("DIV", "div")

    def test_custom_sets(self):
        opts = TokenizerOpts(void_elements=["Foo"], raw_text_elements=["pre"])
        assert opts.is_void("FOO")
        assert not opts.is_void("br")
        assert opts.is_raw_text("PRE")
        assert not opts.is_raw_text("script")


class TestText:
    def test_plain_text(self):
        events, _ = tokenize("hello")
        assert events == [("text", "hello")]

    def test_empty_input(self):
        events, errors = tokenize("", collect_errors=True)
        assert events == []
        assert errors == []

    def test_lt_without_name_is_text(self):
        events, _ = tokenize("a < b")
        assert events == [("text", "a < b")]

    def test_text_around_tag(self):
        events, _ = tokenize("x<b>y")
        assert events[0] == ("text", "x")
        assert isinstance(events[1], Tag)
        assert events[2] == ("text", "y")

    def test_lone_lt_at_end(self):
        events, errors = tokenize("ab<", collect_errors=True)
        assert events == [("text", "ab")]
        assert [e.code for e in errors] == ["eof-before-tag-name"]


class TestStartTags:
    def test_attribute_forms(self):
        events, _ = tokenize("<a href=\"x\" k=v t='y' flag>")
        (tag,) = events
        assert tag.kind == Tag.START
        assert tag.name == "a"
        assert attr_tuples(tag.attrs) == [
            ("href", "x", '"'),
            ("k", "v", Attribute.NONE_QUOTE),
            ("t", "y", "'"),
            ("flag", None, Attribute.NONE_QUOTE),
        ]

    def test_valueless_last_attribute(self):
        events, _ = tokenize("<a href>")
        assert attr_tuples(events[0].attrs) == [("href", None, Attribute.NONE_QUOTE)]

    def test_spaces_around_equals(self):
        events, _ = tokenize('<a k = "v">')
        assert attr_tuples(events[0].attrs) == [("k", "v", '"')]

    def test_quoted_value_keeps_gt(self):
        events, _ = tokenize('<a title="1 > 0">x')
        assert attr_tuples(events[0].attrs) == [("title", "1 > 0", '"')]
        assert events[1] == ("text", "x")

    def test_stray_characters_are_skipped(self):
        events, _ = tokenize('<a ="x" b>')
        assert events[0].attrs[-1].name == "b"

    @pytest.mark.parametrize("source", ["<a/>", "<a />", "<a k=v/>", '<a k="v" / >'])
    def test_self_closing(self, source):
        events, _ = tokenize(source)
        assert events[0].self_closing

    def test_slash_inside_value_is_not_self_closing(self):
        events, _ = tokenize('<a href="x/">')
        assert not events[0].self_closing
        assert events[0].attrs[0].value == "x/"

    def test_only_trailing_slash_self_closes(self):
        events, _ = tokenize('<a / href="x">y')
        assert not events[0].self_closing
        assert attr_tuples(events[0].attrs) == [("href", "x", '"')]
        events, _ = tokenize("<a href=/x>")
        assert not events[0].self_closing
        assert attr_tuples(events[0].attrs) == [("href", "/x", Attribute.NONE_QUOTE)]

    def test_unquoted_value_before_self_close(self):
        events, _ = tokenize("<a k=v/>")
        assert attr_tuples(events[0].attrs) == [("k", "v", Attribute.NONE_QUOTE)]

    def test_void_in_html_mode(self):
        events, _ = tokenize("<BR>")
        assert events[0].self_closing

    def test_void_in_xml_mode(self):
        events, _ = tokenize("<br>", xmlmode=True)
        assert not events[0].self_closing


class TestEndTags:
    def test_end_tag(self):
        events, _ = tokenize("</div>")
        assert events[0].kind == Tag.END
        assert events[0].name == "div"

    def test_name_is_trimmed(self):
        events, _ = tokenize("</ a >")
        assert events[0].name == "a"

    def test_unterminated(self):
        events, errors = tokenize("x</a", collect_errors=True)
        assert events == [("text", "x")]
        assert [e.code for e in errors] == ["eof-in-end-tag"]


class TestRawContent:
    def test_script_body_is_kept(self):
        events, _ = tokenize("<script>if (a<b) {}</script>")
        (tag,) = events
        assert tag.name == "script"
        assert tag.raw_content == "if (a<b) {}"

    def test_closing_tag_case_and_spacing(self):
        events, _ = tokenize("<SCRIPT>x</script >y")
        assert events[0].raw_content == "x"
        assert events[1] == ("text", "y")

    def test_other_end_tags_stay_inside(self):
        events, _ = tokenize("<style>a</b>c</style>")
        assert events[0].raw_content == "a</b>c"

    @pytest.mark.parametrize("body", ['var s = "</script>";', "var s = '</script>';", "f('a', \"b\")"])
    def test_quoted_end_tag_stays_inside(self, body):
        events, _ = tokenize(f"<script>{body}</script>x")
        assert events[0].raw_content == body
        assert events[1] == ("text", "x")

    def test_open_quote_hides_end(self):
        events, errors = tokenize("<script>it's</script>", collect_errors=True)
        assert events == []
        assert [e.code for e in errors] == ["eof-in-raw-text"]

    def test_empty_body(self):
        events, _ = tokenize("<script></script>")
        assert events[0].raw_content == ""

    def test_self_closed_raw_tag(self):
        events, _ = tokenize('<script src="x.js"/>')
        assert events[0].self_closing
        assert events[0].raw_content is None

    def test_missing_end(self):
        events, errors = tokenize("<script>x", collect_errors=True)
        assert events == []
        assert [e.code for e in errors] == ["eof-in-raw-text"]

    def test_xml_mode_parses_script(self):
        events, _ = tokenize("<script>x</script>", xmlmode=True)
        assert [type(e) for e in events] == [Tag, tuple, Tag]


class TestOtherConstructs:
    def test_comment(self):
        events, _ = tokenize("<!-- hi -->")
        assert isinstance(events[0], CommentToken)
        assert events[0].data == " hi "

    def test_empty_comment(self):
        events, _ = tokenize("<!---->")
        assert events[0].data == ""

    def test_processing_instruction(self):
        events, _ = tokenize('<?xml version="1.0"?>')
        (token,) = events
        assert isinstance(token, ProcessingInstructionToken)
        assert token.name == "xml"
        assert token.content == ' version="1.0"'

    def test_processing_instruction_with_quoted_end(self):
        events, _ = tokenize('<?php echo "?>"; ?>')
        assert events[0].content == ' echo "?>"; '

    def test_declaration(self):
        events, _ = tokenize("<!DOCTYPE html>")
        (token,) = events
        assert isinstance(token, DeclarationToken)
        assert token.name == "DOCTYPE"
        assert token.content == " html"

    def test_declaration_with_internal_subset(self):
        events, _ = tokenize('<!DOCTYPE x [<!ENTITY y "z">]>t')
        assert events[0].content == ' x [<!ENTITY y "z">]'
        assert events[1] == ("text", "t")


class TestTruncation:
    @pytest.mark.parametrize(
        ("source", "code"),
        [
            ("<!-- foo", "eof-in-comment"),
            ("<?xml", "eof-in-processing-instruction"),
            ("<?xml x", "eof-in-processing-instruction"),
            ("<!DOCTYPE", "eof-in-declaration"),
            ("<!DOCTYPE html", "eof-in-declaration"),
            ("<div", "eof-in-tag"),
            ('<a href="x>', "eof-in-tag"),
        ],
    )
    def test_stops_with_error(self, source, code):
        events, errors = tokenize("ok" + source, collect_errors=True)
        assert events[0] == ("text", "ok")
        assert [e.code for e in errors] == [code]

    def test_errors_not_collected_by_default(self):
        events, errors = tokenize("<!-- foo")
        assert events == []
        assert errors == []

    def test_error_location(self):
        _, errors = tokenize("a\nb<!--", collect_errors=True)
        (error,) = errors
        assert error.line == 2
        assert error.column == 2

    def test_error_message_includes_tag(self):
        _, errors = tokenize("<script>x", collect_errors=True)
        assert "</script>" in errors[0].message

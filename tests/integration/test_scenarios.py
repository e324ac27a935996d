"""
End-to-end tests: parse a document, then query it with a selector.
"""

import pytest

from markupdom import ElementNode, SpecialNode, TextNode, from_string


class TestScenarios:
    def test_tag_then_id(self):
        found = from_string('<r><a id="x">1</a><a id="y">2</a></r>').search("a#y")
        assert len(found) == 1
        assert isinstance(found[0], ElementNode)
        assert found[0].inner() == "2"

    def test_class(self):
        found = from_string('<r><p class="a b">1</p><p class="b">2</p></r>').search(".a")
        assert [e.inner() for e in found] == ["1"]

    def test_nth_of_type(self):
        doc = from_string("<r><a/><b/><a/></r>")
        found = doc.search("a:nth-of-type(1)")
        r = doc.document.child(0)
        assert found == [r.child(2)]

    def test_last_child(self):
        found = from_string("<ul><li>1</li><li>2</li><li>3</li></ul>").search("li:last-child")
        assert [e.inner() for e in found] == ["3"]

    def test_attribute_prefix(self):
        found = from_string('<r><a href="/x">1</a><a href="/xyz">2</a></r>').search('a[href^="/x"]')
        assert [e.inner() for e in found] == ["1", "2"]

    def test_script_raw_content(self):
        found = from_string("<html><head><script>x<y</script></head></html>").search("script")
        assert len(found) == 1
        assert isinstance(found[0], SpecialNode)
        assert found[0].content == "x<y"


class TestBoundaries:
    def test_unterminated_comment(self):
        doc = from_string("a<!-- foo")
        assert [type(c) for c in doc.document.children] == [TextNode]

    def test_attribute_without_value(self):
        (attr,) = from_string("<a href>").document.child(0).attrs
        assert attr.name == "href"
        assert attr.value is None
        assert attr.quote == ""

    def test_unquoted_value(self):
        (attr,) = from_string("<a k=v>").document.child(0).attrs
        assert (attr.value, attr.quote) == ("v", "")

    def test_mismatched_end_tag(self):
        doc = from_string("<a><b></c>x")
        b = doc.document.child(0).child(0)
        assert b.name == "b"
        assert b.inner() == "x"

    def test_void_tag_html(self):
        br = from_string("<br>x").document.child(0)
        assert br.closed
        assert br.children == []
        assert from_string("<br>x").document.child(1).data == "x"

    def test_void_tag_xml(self):
        br = from_string("<br>x<i/>", xmlmode=True).document.child(0)
        assert not br.closed
        assert [c.name for c in br.children] == ["#text", "i"]

    def test_script_html(self):
        script = from_string("<script>if (a<b) {}</script>").document.child(0)
        assert isinstance(script, SpecialNode)
        assert script.content == "if (a<b) {}"

    def test_script_with_quoted_end_tag(self):
        source = '<script>var s = "</script>";</script><p>x</p>'
        doc = from_string(source)
        script, p = doc.document.children
        assert script.content == 'var s = "</script>";'
        assert p.inner() == "x"
        assert str(doc) == source

    def test_script_xml(self):
        script = from_string("<script>if (a<b) {}</script>", xmlmode=True).document.child(0)
        assert not isinstance(script, SpecialNode)
        assert script.child(0).data == "if (a"
        assert script.child(1).name == "b"

    @pytest.mark.parametrize(
        "source",
        [
            "<a",
            '<a href="x',
            "<!DOCTYPE [",
            "<?pi",
            "<script>no end",
            "</",
            "<",
            "<a><b><c>",
            "<<<>>>",
            "<a b=>",
            "<a '>",
        ],
    )
    def test_never_raises(self, source):
        doc = from_string(source, collect_errors=True)
        for node in doc.document.iter_descendants():
            assert node in node.parent.children

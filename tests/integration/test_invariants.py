"""
Properties that hold for every parsed tree, checked over a small corpus.
"""

import pytest

from markupdom import ElementNode, from_string

WELL_FORMED = [
    "",
    "plain text",
    '<?xml version="1.0"?><feed><entry id="1"><title>A</title></entry><entry id="2"/></feed>',
    "<!DOCTYPE html><html><head><title>t</title></head><body><p class='x y'>1</p><p>2</p></body></html>",
    '<!DOCTYPE note [<!ELEMENT note (#PCDATA)> <!ATTLIST note id CDATA "x>">]><note>n</note>',
    "<r><!-- c --><a k=v flag>1<b/>2</a><a/></r>",
    "<ul>\n  <li>1</li>\n  <li class=\"last\">2</li>\n</ul>\n",
]

MALFORMED = [
    "<a><b></c></a>",
    "<p>unclosed <b>bold",
    "a < b > c",
    "<div id=main><span></div></span>",
    "<r><a/><a><a></a></r>",
    "<!-- never closed",
]

# Well-formed only when script and style bodies are raw content
RAW_CONTENT = [
    "<script>var s = '</b>';</script><p>x</p>",
    '<script>var s = "</script>";</script><p>x</p>',
    '<style>p > a { content: "</style>" }</style>',
]

ALL = WELL_FORMED + MALFORMED + RAW_CONTENT


def _elements(root):
    return [node for node in root.iter_descendants() if isinstance(node, ElementNode)]


class TestTreeShape:
    @pytest.mark.parametrize("source", ALL)
    @pytest.mark.parametrize("xmlmode", [False, True])
    def test_parent_links(self, source, xmlmode):
        root = from_string(source, xmlmode=xmlmode).document
        assert root.parent is None
        for node in root.iter_descendants():
            siblings = node.parent.children
            assert sum(1 for sibling in siblings if sibling is node) == 1
            assert siblings[node.parent.index_of_child(node)] is node

    @pytest.mark.parametrize("source", WELL_FORMED)
    def test_round_trip(self, source):
        assert str(from_string(source, xmlmode=True)) == source

    @pytest.mark.parametrize("source", RAW_CONTENT)
    def test_round_trip_raw_content(self, source):
        assert str(from_string(source)) == source


class TestSearchLaws:
    @pytest.mark.parametrize("source", ALL)
    def test_universal_is_document_order(self, source):
        root = from_string(source).document
        found = root.search("*")
        assert found == _elements(root)
        assert len({id(e) for e in found}) == len(found)

    @pytest.mark.parametrize("source", ALL)
    def test_empty_intersection(self, source):
        root = from_string(source).document
        for name in {e.name for e in _elements(root)}:
            empty = {id(e) for e in root.search(":empty")}
            named = [e for e in root.search(name)]
            expected = [e for e in _elements(root) if e.name.lower() == name.lower() and not e.children]
            assert [e for e in named if id(e) in empty] == expected

    @pytest.mark.parametrize("source", ALL)
    def test_get_element_by_id(self, source):
        root = from_string(source).document
        for element in _elements(root):
            element_id = element.get_attr_value("id")
            if element_id is None:
                continue
            found = root.get_element_by_id(element_id.upper())
            expected = [e for e in _elements(root) if (e.get_attr_value("id") or "").lower() == element_id.lower()]
            assert found == expected

    @pytest.mark.parametrize("source", ALL)
    def test_nth_child_positions(self, source):
        root = from_string(source).document
        for element in _elements(root):
            parent = element.parent
            k = parent.child_elements().index(element)
            assert element in parent.search(f":nth-child({k})")

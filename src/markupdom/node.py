from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import DEFAULT_INDENT, DEFAULT_NEWLINE, NodeKind
from .scanner import str_equal
from .selector import query
from .serialize import serialize_attribute, to_markup

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    NodeFilter = Callable[["Node"], bool]
    ElementFilter = Callable[["ElementNode"], bool]


class Attribute:
    """A single ``name="value"`` pair as written in the source.

    ``quote`` is the quote character used around the value: ``'"'``, ``"'"``
    or :attr:`NONE_QUOTE` for unquoted values. A ``value`` of ``None`` means
    the attribute was written without ``=`` and serializes as its bare name.
    """

    __slots__ = ("name", "quote", "value")

    NONE_QUOTE: str = ""
    DEFAULT_QUOTE: str = '"'

    name: str
    value: str | None
    quote: str

    def __init__(self, name: str, value: str | None = None, quote: str = DEFAULT_QUOTE) -> None:
        self.name = name
        self.value = value
        self.quote = quote

    def __str__(self) -> str:
        return serialize_attribute(self)

    def __repr__(self) -> str:
        return f"Attribute({self.name!r}, {self.value!r}, quote={self.quote!r})"


class Node:
    """Base of every node and, used directly, the synthetic document root.

    The root has no markup of its own; its string form is the concatenation
    of its children.
    """

    __slots__ = ("children", "parent")

    kind: str = NodeKind.DOCUMENT
    name: str = "#document"

    parent: Node | None
    children: list[Node] | None

    def __init__(self) -> None:
        self.parent = None
        self.children = []

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def level(self) -> int:
        """Number of ancestors above this node."""
        level = 0
        node = self.parent
        while node is not None:
            level += 1
            node = node.parent
        return level

    def child_elements(self, tag_name: str | None = None) -> list[ElementNode]:
        """Element children in document order, optionally only those named ``tag_name`` (exact match)."""
        if not self.children:
            return []
        return [
            child
            for child in self.children
            if isinstance(child, ElementNode) and (tag_name is None or child.name == tag_name)
        ]

    def child(self, index: int) -> Node | None:
        if self.children and 0 <= index < len(self.children):
            return self.children[index]
        return None

    def child_element(self, index: int) -> ElementNode | None:
        if index < 0:
            return None
        elements = self.child_elements()
        return elements[index] if index < len(elements) else None

    def index_of_child(self, child: Node | None) -> int:
        if self.children and child is not None:
            for i, node in enumerate(self.children):
                if node is child:
                    return i
        return -1

    def index_of_child_element(self, element: ElementNode | None) -> int:
        if self.children and element is not None:
            for i, node in enumerate(self.child_elements()):
                if node is element:
                    return i
        return -1

    def has_child_nodes(self) -> bool:
        """Return True if this node has children."""
        return bool(self.children)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_parent(self, new_parent: Node | None) -> Node | None:
        """Move this node under ``new_parent`` (appended last), or detach it when ``None``.

        Returns:
            The previous parent, or None.
        """
        old_parent = self.parent
        if new_parent is not None:
            new_parent.add_child(self)
        elif old_parent is not None:
            old_parent.remove_child(self)
        return old_parent

    def add_child(self, child: Node, index: int | None = None) -> Node:
        """
        Insert ``child`` at ``index`` (appending when ``index`` is None or out of range).

        The child is first detached from its current parent.

        Returns:
            This node, so calls can be chained.

        Raises:
            ValueError: If this node cannot have children, or if ``child`` is
                this node or one of its ancestors.
        """
        if self.children is None:
            raise ValueError(f"Node {self.name} cannot have children")
        ancestor: Node | None = self
        while ancestor is not None:
            if ancestor is child:
                raise ValueError("A node cannot become a child of itself or of its own descendant")
            ancestor = ancestor.parent

        if child.parent is not None:
            child.parent.remove_child(child)
        if index is None or index < 0 or index > len(self.children):
            self.children.append(child)
        else:
            self.children.insert(index, child)
        child.parent = self
        return self

    def remove_child(self, child: Node | None) -> bool:
        """Remove ``child`` (matched by identity). Returns False if it is not a child of this node."""
        index = self.index_of_child(child)
        if index < 0:
            return False
        assert self.children is not None and child is not None
        del self.children[index]
        child.parent = None
        return True

    # ------------------------------------------------------------------
    # Inner markup
    # ------------------------------------------------------------------

    def inner(self) -> str:
        """Concatenated markup of the children."""
        if not self.children:
            return ""
        return "".join(child.to_string() for child in self.children)

    def set_inner(self, document: str, xmlmode: bool = False) -> bool:
        """
        Replace the children with the nodes parsed from ``document``.

        Returns:
            False (leaving the children untouched) when parsing produced no nodes.

        Raises:
            ValueError: If this node cannot have children.
        """
        if self.children is None:
            raise ValueError(f"Node {self.name} cannot have children")
        # Imported here: the parser builds nodes from this module.
        from .parser import build

        root = build(document, xmlmode=xmlmode)
        assert root.children is not None
        if not root.children:
            return False
        for old in self.children:
            old.parent = None
        for child in root.children:
            child.parent = self
        self.children = root.children
        root.children = []
        return True

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_string(
        self,
        pretty: bool = False,
        indent: str = DEFAULT_INDENT,
        newline: str = DEFAULT_NEWLINE,
        level_ref: int = 0,
    ) -> str:
        """Serialize this node (and its subtree) to markup.

        With ``pretty`` every child goes on its own line, indented by
        ``indent`` repeated ``level + level_ref + 1`` times.
        """
        return to_markup(self, pretty=pretty, indent=indent, newline=newline, level_ref=level_ref)

    def __str__(self) -> str:
        return self.to_string()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def iter_descendants(self) -> Iterator[Node]:
        """Yield every descendant in depth-first pre-order (document order)."""
        if not self.children:
            return
        stack: list[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    def get_nodes_by_filter(self, predicate: NodeFilter) -> list[Node]:
        return [node for node in self.iter_descendants() if predicate(node)]

    def get_child_nodes_by_filter(self, predicate: NodeFilter) -> list[Node]:
        return [node for node in self.children or [] if predicate(node)]

    def get_elements_by_filter(self, predicate: ElementFilter) -> list[ElementNode]:
        return [node for node in self.iter_descendants() if isinstance(node, ElementNode) and predicate(node)]

    def get_child_elements_by_filter(self, predicate: ElementFilter) -> list[ElementNode]:
        return [node for node in self.child_elements() if predicate(node)]

    def get_element_by_id(self, element_id: str) -> list[ElementNode]:
        """Descendant elements whose ``id`` equals ``element_id`` ignoring ASCII case.

        Returns a list because nothing stops a document from reusing an id.
        """
        return self.get_elements_by_filter(lambda node: str_equal(element_id, node.get_attr_value("id"), True))

    def get_elements_by_class_name(self, class_name: str) -> list[ElementNode]:
        return self.get_elements_by_filter(lambda node: node.has_class(class_name))

    def get_elements_by_tag_name(self, tag_name: str, xmlmode: bool = False) -> list[ElementNode]:
        """Descendant elements named ``tag_name`` (``*`` for all); case-sensitive only in XML mode."""
        if tag_name == "*":
            return self.get_elements_by_filter(lambda node: True)
        return self.get_elements_by_filter(lambda node: str_equal(tag_name, node.name, not xmlmode))

    def get_elements_by_attr(self, attr_name: str, attr_value: str, xmlmode: bool = False) -> list[ElementNode]:
        """Descendant elements whose ``attr_name`` attribute equals ``attr_value`` exactly."""
        return self.get_elements_by_filter(
            lambda node: str_equal(attr_value, node.get_attr_value(attr_name, not xmlmode))
        )

    def search(self, selector: str) -> list[ElementNode]:
        """
        Query this subtree using a CSS selector.

        Args:
            selector: A CSS selector string

        Returns:
            The matching elements in order of first appearance. Malformed
            selectors give empty or partial results rather than errors.
        """
        return query(self, selector)


class TextNode(Node):
    __slots__ = ("data",)

    kind: str = NodeKind.TEXT
    name: str = "#text"

    data: str

    def __init__(self, data: str) -> None:
        self.parent = None
        self.children = None
        self.data = data


class CommentNode(Node):
    __slots__ = ("data",)

    kind: str = NodeKind.COMMENT
    name: str = "#comment"

    data: str

    def __init__(self, data: str) -> None:
        self.parent = None
        self.children = None
        self.data = data


class ProcessingInstructionNode(Node):
    """``<?name content?>``. ``content`` keeps the whitespace that followed the name."""

    __slots__ = ("content", "name")

    kind: str = NodeKind.PROCESSING_INSTRUCTION

    content: str

    def __init__(self, name: str = "", content: str = "") -> None:
        self.parent = None
        self.children = None
        self.name = name
        self.content = content


class DeclarationNode(Node):
    """``<!name content>``, such as a doctype."""

    __slots__ = ("content", "name")

    kind: str = NodeKind.DECLARATION

    content: str

    def __init__(self, name: str, content: str = "") -> None:
        self.parent = None
        self.children = None
        self.name = name
        self.content = content


class ElementNode(Node):
    __slots__ = ("attrs", "closed", "name")

    kind: str = NodeKind.ELEMENT

    attrs: list[Attribute]
    closed: bool
    children: list[Node]

    def __init__(self, name: str, attrs: list[Attribute] | None = None, closed: bool = False) -> None:
        self.parent = None
        self.children = []
        self.name = name
        self.attrs = attrs if attrs is not None else []
        self.closed = closed

    def get_attr(self, name: str, ignore_case: bool = True) -> Attribute | None:
        for attr in self.attrs:
            if str_equal(attr.name, name, ignore_case):
                return attr
        return None

    def get_attr_value(self, name: str, ignore_case: bool = True) -> str | None:
        attr = self.get_attr(name, ignore_case)
        return None if attr is None else attr.value

    def set_attr(self, name: str, value: str | None, ignore_case: bool = True) -> bool:
        """
        Set an attribute value, keeping its position and quote if it already exists.

        Returns:
            True if a new attribute was appended, False if an existing one was updated.
        """
        attr = self.get_attr(name, ignore_case)
        if attr is not None:
            attr.value = value
            return False
        self.attrs.append(Attribute(name, value))
        return True

    def has_class(self, class_name: str) -> bool:
        """True if the whitespace-separated ``class`` attribute lists ``class_name`` (ASCII case ignored)."""
        classes = self.get_attr_value("class")
        if not classes:
            return False
        return any(str_equal(class_name, item, True) for item in classes.split())


class SpecialNode(ElementNode):
    """A raw-content element (``script``/``style`` in HTML mode).

    Its body is never parsed; ``content`` holds it verbatim. The element is
    ``closed`` exactly when ``content`` is None.
    """

    __slots__ = ("content",)

    kind: str = NodeKind.SPECIAL

    content: str | None

    def __init__(self, name: str, attrs: list[Attribute] | None = None, content: str | None = None) -> None:
        self.content = content
        super().__init__(name, attrs, closed=content is None)

    @property  # type: ignore[override]
    def closed(self) -> bool:
        return self.content is None

    @closed.setter
    def closed(self, value: bool) -> None:
        if value:
            self.content = None
        elif self.content is None:
            self.content = ""

    def inner(self) -> str:
        """The raw content, since the body of a special element is never parsed."""
        return self.content or ""

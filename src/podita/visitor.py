"""Tree Visitor and Transformer for Podita.

Provides a base visitor class with match-based dispatch and an immutable
transform function for rewriting frozen documents.

Example, collecting all section titles:

    class SectionCollector(BaseVisitor[None]):
        def __init__(self) -> None:
            self.titles: list[str] = []

        def visit_section(self, node: Section) -> None:
            self.titles.append(node.title)

    collector = SectionCollector()
    collector.visit(doc)

Example, dropping index markers:

    def drop_markers(node: Node) -> Node | None:
        if isinstance(node, IndexMarker):
            return None
        return node

    new_doc = transform(doc, drop_markers)

Thread Safety:
    Visitors are NOT shared across threads by default (they may accumulate
    mutable state). Create a new visitor per thread. The transform function
    is pure and safe to call from any thread.

"""

import dataclasses
from collections.abc import Callable
from typing import Generic, TypeVar

from podita.nodes import (
    AnchorTag,
    Bold,
    CodeListing,
    CodeSpan,
    CrossReference,
    CrossRefTag,
    Document,
    Footnote,
    IndexMarker,
    IndexTag,
    Italic,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Section,
    Sidebar,
    Text,
)


T = TypeVar("T")


class BaseVisitor(Generic[T]):
    """Base tree visitor with match-based dispatch.

    Subclass and override ``visit_*`` methods for node types you care about.
    Unhandled node types fall through to ``visit_default``. Children are
    walked automatically after the ``visit_*`` call; for sections, sidebars
    and definition items the title spans are walked before the body.

    Type parameter ``T`` is the return type of visit methods (use ``None``
    for side-effect-only visitors).

    """

    def visit(self, node: Node) -> T:
        """Dispatch to the appropriate ``visit_*`` method.

        Walks children automatically after the visit method returns.

        """
        result = self._dispatch(node)
        self._walk_children(node)
        return result

    def visit_default(self, node: Node) -> T:
        """Called for node types without a specific ``visit_*`` method.

        Override this for catch-all behavior. Default returns None
        (suitable for ``BaseVisitor[None]``).

        """
        return None  # type: ignore[return-value]

    # -- Block visitors --------------------------------------------------------

    def visit_document(self, node: Document) -> T:
        return self.visit_default(node)

    def visit_section(self, node: Section) -> T:
        return self.visit_default(node)

    def visit_paragraph(self, node: Paragraph) -> T:
        return self.visit_default(node)

    def visit_code_listing(self, node: CodeListing) -> T:
        return self.visit_default(node)

    def visit_sidebar(self, node: Sidebar) -> T:
        return self.visit_default(node)

    def visit_index_marker(self, node: IndexMarker) -> T:
        return self.visit_default(node)

    def visit_cross_reference(self, node: CrossReference) -> T:
        return self.visit_default(node)

    def visit_list(self, node: List) -> T:
        return self.visit_default(node)

    def visit_list_item(self, node: ListItem) -> T:
        return self.visit_default(node)

    # -- Inline visitors -------------------------------------------------------

    def visit_text(self, node: Text) -> T:
        return self.visit_default(node)

    def visit_bold(self, node: Bold) -> T:
        return self.visit_default(node)

    def visit_italic(self, node: Italic) -> T:
        return self.visit_default(node)

    def visit_code_span(self, node: CodeSpan) -> T:
        return self.visit_default(node)

    def visit_index_tag(self, node: IndexTag) -> T:
        return self.visit_default(node)

    def visit_anchor_tag(self, node: AnchorTag) -> T:
        return self.visit_default(node)

    def visit_cross_ref_tag(self, node: CrossRefTag) -> T:
        return self.visit_default(node)

    def visit_link(self, node: Link) -> T:
        return self.visit_default(node)

    def visit_footnote(self, node: Footnote) -> T:
        return self.visit_default(node)

    # -- Internal dispatch -----------------------------------------------------

    def _dispatch(self, node: Node) -> T:
        """Match-based dispatch to visit_* methods."""
        match node:
            case Document():
                return self.visit_document(node)
            case Section():
                return self.visit_section(node)
            case Paragraph():
                return self.visit_paragraph(node)
            case CodeListing():
                return self.visit_code_listing(node)
            case Sidebar():
                return self.visit_sidebar(node)
            case IndexMarker():
                return self.visit_index_marker(node)
            case CrossReference():
                return self.visit_cross_reference(node)
            case List():
                return self.visit_list(node)
            case ListItem():
                return self.visit_list_item(node)
            case Text():
                return self.visit_text(node)
            case Bold():
                return self.visit_bold(node)
            case Italic():
                return self.visit_italic(node)
            case CodeSpan():
                return self.visit_code_span(node)
            case IndexTag():
                return self.visit_index_tag(node)
            case AnchorTag():
                return self.visit_anchor_tag(node)
            case CrossRefTag():
                return self.visit_cross_ref_tag(node)
            case Link():
                return self.visit_link(node)
            case Footnote():
                return self.visit_footnote(node)
            case _:
                return self.visit_default(node)

    def _walk_children(self, node: Node) -> None:
        """Recursively visit child nodes."""
        match node:
            case Section(title_children=titles, children=children) | Sidebar(
                title_children=titles, children=children
            ):
                for child in (*titles, *children):
                    self.visit(child)
            case ListItem(label_children=labels, children=children):
                for child in (*labels, *children):
                    self.visit(child)
            case List(items=items):
                for item in items:
                    self.visit(item)
            case (
                Document(children=children)
                | Paragraph(children=children)
                | CodeListing(title_children=children)
                | Bold(children=children)
                | Italic(children=children)
                | Link(children=children)
                | Footnote(children=children)
            ):
                for child in children:
                    self.visit(child)
            case _:
                pass  # Leaf nodes: no children


# Child-bearing fields per node type, walked by transform()
_CHILD_FIELDS: dict[type, tuple[str, ...]] = {
    Document: ("children",),
    Section: ("title_children", "children"),
    Sidebar: ("title_children", "children"),
    CodeListing: ("title_children",),
    Paragraph: ("children",),
    List: ("items",),
    ListItem: ("label_children", "children"),
    Bold: ("children",),
    Italic: ("children",),
    Link: ("children",),
    Footnote: ("children",),
}


def transform(doc: Document, fn: Callable[[Node], Node | None]) -> Document:
    """Apply a function to every node in the tree, returning a new tree.

    The function ``fn`` is called bottom-up: children are transformed first,
    then the parent is transformed with its new children. This ensures ``fn``
    always receives nodes with already-transformed children.

    Return ``None`` from ``fn`` to remove a node from the tree. The root
    Document cannot be removed; returning None for it raises TypeError.

    Since all nodes are frozen dataclasses, this produces a new immutable tree.
    The original tree is untouched.

    Args:
        doc: The document to transform.
        fn: Function that receives a node and returns a (possibly new) node,
            or None to remove the node from the tree.

    Returns:
        A new Document with the transformation applied.

    """
    result = _transform_node(doc, fn)
    if result is None or not isinstance(result, Document):
        msg = "transform fn must return a Document for the root (cannot remove root)"
        raise TypeError(msg)
    return result


def _transform_node(node: Node, fn: Callable[[Node], Node | None]) -> Node | None:
    """Transform a single node bottom-up: children first, then self."""
    transformed = _transform_children(node, fn)
    return fn(transformed)


def _transform_children(node: Node, fn: Callable[[Node], Node | None]) -> Node:
    """Produce a new node with children transformed; filter out None (removed) nodes."""
    changes: dict[str, tuple[Node, ...]] = {}
    for name in _CHILD_FIELDS.get(type(node), ()):
        children = getattr(node, name)
        new_children = tuple(
            result for c in children if (result := _transform_node(c, fn)) is not None
        )
        if new_children != children:
            changes[name] = new_children
    if changes:
        return dataclasses.replace(node, **changes)  # type: ignore[type-var]
    return node

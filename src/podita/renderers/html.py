"""HTML renderer using StringBuilder pattern.

Renders a resolved Document to HTML in a single walk.

Thread Safety:
All per-render state is encapsulated in RenderContext, created fresh for each
render() call. Multiple threads can safely share a single HtmlRenderer instance
and call render() concurrently without synchronization.

Anchors:
Every declared anchor becomes an HTML id equal to its name. A section or
sidebar takes its first anchor as its own id; further anchors, and anchors
declared inside paragraphs, are emitted as empty ``<a id>`` elements.
Sections without anchors get a unique slug of their title.
"""

import dataclasses
import html
from dataclasses import dataclass, field
from pathlib import PurePath

from podita.config import RenderConfig
from podita.errors import RenderError, UnsupportedBlockError
from podita.nodes import (
    AnchorTag,
    Block,
    Bold,
    CodeListing,
    CodeSpan,
    CrossReference,
    CrossRefTag,
    Document,
    Footnote,
    IndexMarker,
    IndexTag,
    Inline,
    Italic,
    Link,
    List,
    ListItem,
    Paragraph,
    Section,
    Sidebar,
    Text,
)
from podita.stringbuilder import StringBuilder
from podita.utils.logger import get_logger
from podita.utils.text import flatten_text, unique_slug

logger = get_logger(__name__)

_ITALIC_TAGS = {"I": "em", "F": "em", "R": "var"}

# Suffix of the page rendered from each source file
PAGE_SUFFIX = ".html"


def html_escape(s: str) -> str:
    """Escape HTML special characters.

    Escapes <, >, &, " but not single quotes.
    """
    return html.escape(s, quote=False).replace('"', "&quot;")


def _trim_edges(spans: tuple[Inline, ...]) -> tuple[Inline, ...]:
    """Strip outer whitespace from a title, looking past invisible tags.

    ``=head1 Intro Z<intro>`` renders as ``<h1>Intro</h1>``.
    """
    visible = [i for i, span in enumerate(spans) if not isinstance(span, (AnchorTag, IndexTag))]
    if not visible:
        return spans
    trimmed = list(spans)
    first, last = visible[0], visible[-1]
    if isinstance(trimmed[last], Text):
        trimmed[last] = dataclasses.replace(trimmed[last], content=trimmed[last].content.rstrip())
    if isinstance(trimmed[first], Text):
        trimmed[first] = dataclasses.replace(trimmed[first], content=trimmed[first].content.lstrip())
    return tuple(trimmed)


@dataclass(slots=True)
class RenderContext:
    """Per-render mutable state.

    Created fresh for each render, ensuring thread safety when sharing
    HtmlRenderer instances across threads.
    """

    seen_ids: set[str] = field(default_factory=set)
    emitted_anchors: set[str] = field(default_factory=set)


class HtmlRenderer:
    """Render a resolved Document to HTML.

    Usage:
        >>> from podita import parse, resolve
        >>> doc = resolve(parse("=head1 Hello\\n\\nB<World>\\n")).document
        >>> print(HtmlRenderer().render(doc), end="")
        <section id="hello">
        <h1>Hello</h1>
        <p><strong>World</strong></p>
        </section>

    Thread Safety:
        Multiple threads can safely share a single HtmlRenderer instance.
    """

    __slots__ = ("_config",)

    name = "html"

    def __init__(self, config: RenderConfig | None = None) -> None:
        self._config = config or RenderConfig(format="html")

    def render(self, node: Document) -> str:
        """Render document to an HTML string.

        Raises:
            RenderError: If the document has not been resolved
            UnsupportedBlockError: If the tree holds a node type with no template
        """
        if not node.resolved:
            msg = "HtmlRenderer needs a resolved Document; call resolve() first"
            raise RenderError(msg)

        # Anchor names are reserved so generated slugs never shadow them
        ctx = RenderContext(seen_ids=set(node.anchors))
        sb = StringBuilder()
        for child in node.children:
            self._render_block(child, sb, ctx)
        logger.debug("rendered %d top-level blocks to html", len(node.children))
        return sb.build()

    # =========================================================================
    # Block rendering
    # =========================================================================

    def _render_block(self, block: Block, sb: StringBuilder, ctx: RenderContext) -> None:
        match block:
            case Section():
                self._render_section(block, sb, ctx)
            case Paragraph():
                sb.append("<p>")
                self._render_inlines(block.children, sb, ctx)
                sb.append("</p>\n")
            case CodeListing():
                self._render_listing(block, sb, ctx)
            case Sidebar():
                self._render_sidebar(block, sb, ctx)
            case IndexMarker():
                self._render_index_marker(block, sb, ctx)
            case CrossReference():
                sb.append('<p class="xref">')
                self._render_xref(block, sb)
                sb.append("</p>\n")
            case List():
                self._render_list(block, sb, ctx)
            case _:
                raise UnsupportedBlockError(type(block).__name__, self.name)

    def _render_section(self, section: Section, sb: StringBuilder, ctx: RenderContext) -> None:
        level = min(max(section.level + self._config.heading_offset, 1), 6)
        if section.anchors:
            section_id = section.anchors[0]
        else:
            section_id = unique_slug(flatten_text(section.title_children), ctx.seen_ids)
        ctx.emitted_anchors.add(section_id)

        sb.append(f'<section id="{html_escape(section_id)}">\n<h{level}>')
        self._render_extra_anchors(section.anchors[1:], sb, ctx)
        self._render_inlines(_trim_edges(section.title_children), sb, ctx)
        sb.append(f"</h{level}>\n")
        for child in section.children:
            self._render_block(child, sb, ctx)
        sb.append("</section>\n")

    def _render_listing(
        self, listing: CodeListing, sb: StringBuilder, ctx: RenderContext
    ) -> None:
        if listing.title:
            sb.append('<figure class="listing">\n<figcaption>')
            self._render_inlines(_trim_edges(listing.title_children), sb, ctx)
            sb.append("</figcaption>\n")
        sb.append(f'<pre class="code-listing {html_escape(listing.kind)}"><code>')
        sb.append(html_escape(listing.code))
        sb.append("</code></pre>\n")
        if listing.title:
            sb.append("</figure>\n")

    def _render_sidebar(self, sidebar: Sidebar, sb: StringBuilder, ctx: RenderContext) -> None:
        id_attr = ""
        if sidebar.anchors:
            ctx.emitted_anchors.add(sidebar.anchors[0])
            id_attr = f' id="{html_escape(sidebar.anchors[0])}"'
        sb.append(f'<aside class="sidebar {html_escape(sidebar.kind)}"{id_attr}>\n')
        if sidebar.title_children or sidebar.anchors[1:]:
            sb.append('<p class="title">')
            self._render_extra_anchors(sidebar.anchors[1:], sb, ctx)
            self._render_inlines(_trim_edges(sidebar.title_children), sb, ctx)
            sb.append("</p>\n")
        for child in sidebar.children:
            self._render_block(child, sb, ctx)
        sb.append("</aside>\n")

    def _render_index_marker(
        self, marker: IndexMarker, sb: StringBuilder, ctx: RenderContext
    ) -> None:
        for term in marker.terms:
            sb.append(f'<span class="index" data-term="{html_escape(term)}"></span>\n')
        for name in marker.anchors:
            if name not in ctx.emitted_anchors:
                ctx.emitted_anchors.add(name)
                sb.append(f'<a id="{html_escape(name)}"></a>\n')

    def _render_list(self, lst: List, sb: StringBuilder, ctx: RenderContext) -> None:
        if lst.kind == "definition":
            sb.append("<dl>\n")
            for item in lst.items:
                sb.append("<dt>")
                self._render_inlines(_trim_edges(item.label_children), sb, ctx)
                sb.append("</dt>\n<dd>\n")
                self._render_item_body(item, sb, ctx)
                sb.append("</dd>\n")
            sb.append("</dl>\n")
            return

        tag = "ol" if lst.kind == "number" else "ul"
        sb.append(f"<{tag}>\n")
        for item in lst.items:
            sb.append("<li>\n")
            self._render_item_body(item, sb, ctx)
            sb.append("</li>\n")
        sb.append(f"</{tag}>\n")

    def _render_item_body(self, item: ListItem, sb: StringBuilder, ctx: RenderContext) -> None:
        for child in item.children:
            self._render_block(child, sb, ctx)

    # =========================================================================
    # Inline rendering
    # =========================================================================

    def _render_inlines(
        self, children: tuple[Inline, ...], sb: StringBuilder, ctx: RenderContext
    ) -> None:
        for child in children:
            self._render_inline(child, sb, ctx)

    def _render_inline(self, node: Inline, sb: StringBuilder, ctx: RenderContext) -> None:
        match node:
            case Text(content=content):
                sb.append(html_escape(content))
            case Bold(children=children):
                sb.append("<strong>")
                self._render_inlines(children, sb, ctx)
                sb.append("</strong>")
            case Italic(children=children, code=code):
                tag = _ITALIC_TAGS[code]
                class_attr = ' class="file"' if code == "F" else ""
                sb.append(f"<{tag}{class_attr}>")
                self._render_inlines(children, sb, ctx)
                sb.append(f"</{tag}>")
            case CodeSpan(code=code):
                sb.append(f"<code>{html_escape(code)}</code>")
            case IndexTag(term=term):
                sb.append(f'<span class="index" data-term="{html_escape(term)}"></span>')
            case AnchorTag(name=name):
                self._render_extra_anchors((name,), sb, ctx)
            case CrossRefTag():
                self._render_xref(node, sb)
            case Link(url=url, children=children):
                sb.append(f'<a href="{html_escape(url)}">')
                if children:
                    self._render_inlines(children, sb, ctx)
                else:
                    sb.append(html_escape(url))
                sb.append("</a>")
            case Footnote(children=children):
                sb.append('<span class="footnote">')
                self._render_inlines(children, sb, ctx)
                sb.append("</span>")
            case _:
                raise UnsupportedBlockError(type(node).__name__, self.name)

    def _render_extra_anchors(
        self, names: tuple[str, ...], sb: StringBuilder, ctx: RenderContext
    ) -> None:
        """Emit ``<a id>`` for anchors not already used as an element id."""
        for name in names:
            if name in ctx.emitted_anchors:
                continue
            ctx.emitted_anchors.add(name)
            sb.append(f'<a id="{html_escape(name)}"></a>')

    @staticmethod
    def _render_xref(ref: CrossReference | CrossRefTag, sb: StringBuilder) -> None:
        text = html_escape(ref.label or ref.title or ref.target)
        if ref.resolved:
            href = f"#{ref.target}"
            if ref.target_file:
                href = PurePath(ref.target_file).with_suffix(PAGE_SUFFIX).name + href
            sb.append(f'<a class="xref" href="{html_escape(href)}">{text}</a>')
        else:
            sb.append(
                f'<span class="xref unresolved" data-target="{html_escape(ref.target)}">'
                f"[{text}]</span>"
            )

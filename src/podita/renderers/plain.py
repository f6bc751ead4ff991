"""Plain renderer: normalized PseudoPod markup.

Writes a Document back out as markup with one canonical spelling per
construct: every directive and paragraph is followed by a blank line,
``=head0`` becomes ``=head1``, list items use ``*`` or ``N.`` markers, and
verbatim blocks keep their indentation. Parsing the output yields a tree
equivalent to the input (ignoring source locations) as long as no heading
offset is applied.

Raw markup is written from the ``text``/``title``/``label`` fields, so an
unresolved Document renders just as well as a resolved one.

Thread Safety:
Stateless apart from the frozen RenderConfig and the active ParseConfig,
which it reads to pick a form that parses back; safe to share.

"""

from podita.config import RenderConfig, get_parse_config
from podita.errors import UnsupportedBlockError
from podita.nodes import (
    Block,
    CodeListing,
    CrossReference,
    Document,
    IndexMarker,
    List,
    ListItem,
    Paragraph,
    Section,
    Sidebar,
)
from podita.stringbuilder import StringBuilder
from podita.utils.logger import get_logger

logger = get_logger(__name__)

_MAX_LEVEL = 4


class PlainRenderer:
    """Render a Document as normalized markup.

    Usage:
        >>> from podita import parse
        >>> print(PlainRenderer().render(parse("=head0 Old\\nText.\\n")), end="")
        =head1 Old
        <BLANKLINE>
        Text.
    """

    __slots__ = ("_config",)

    name = "plain"

    def __init__(self, config: RenderConfig | None = None) -> None:
        self._config = config or RenderConfig(format="plain")

    def render(self, node: Document) -> str:
        """Render document to markup.

        Raises:
            UnsupportedBlockError: If the tree holds a node type with no template
        """
        sb = StringBuilder()
        for child in node.children:
            self._render_block(child, sb)
        logger.debug("rendered %d top-level blocks to plain markup", len(node.children))
        return sb.build()

    def _render_block(self, block: Block, sb: StringBuilder) -> None:
        sb.separate()
        match block:
            case Section():
                level = min(max(block.level + self._config.heading_offset, 1), _MAX_LEVEL)
                self._directive(sb, f"head{level}", block.title)
                for child in block.children:
                    self._render_block(child, sb)
            case Paragraph(text=text) | IndexMarker(text=text) | CrossReference(text=text):
                sb.append_line(text)
            case CodeListing():
                self._render_listing(block, sb)
            case Sidebar():
                self._render_sidebar(block, sb)
            case List():
                self._render_list(block, sb)
            case _:
                raise UnsupportedBlockError(type(block).__name__, self.name)

    def _render_listing(self, listing: CodeListing, sb: StringBuilder) -> None:
        code = listing.code
        if code and not code.endswith("\n"):
            code += "\n"
        if listing.kind == "verbatim" and not listing.title and _is_indented(code):
            sb.append(code)
            return
        self._directive(sb, "begin", listing.kind, listing.title, blank=False)
        sb.append(code)
        sb.append_line(f"=end {listing.kind}")

    def _render_sidebar(self, sidebar: Sidebar, sb: StringBuilder) -> None:
        # A single untitled text block round-trips through =for, which keeps
        # its anchors on the enclosing section. Kinds whose =for form is
        # dropped on parse keep the =begin form.
        if (
            not sidebar.title
            and sidebar.kind not in get_parse_config().ignored_for_kinds
            and not sidebar.anchors
            and len(sidebar.children) == 1
            and isinstance(sidebar.children[0], (Paragraph, IndexMarker, CrossReference))
        ):
            self._directive(sb, "for", sidebar.kind, sidebar.children[0].text, blank=False)
            return
        self._directive(sb, "begin", sidebar.kind, sidebar.title)
        for child in sidebar.children:
            self._render_block(child, sb)
        sb.separate()
        self._directive(sb, "end", sidebar.kind)

    def _render_list(self, lst: List, sb: StringBuilder) -> None:
        self._directive(sb, "over", str(lst.indent))
        for number, item in enumerate(lst.items, start=1):
            sb.separate()
            # Unlabeled leading content stays before any =item so the list
            # keeps its definition kind
            implicit = number == 1 and lst.kind == "definition" and not item.label
            if not (implicit and item.children):
                self._directive(sb, "item", self._item_marker(lst, item, number))
            for child in item.children:
                self._render_block(child, sb)
        sb.separate()
        self._directive(sb, "back")

    @staticmethod
    def _item_marker(lst: List, item: ListItem, number: int) -> str:
        if item.label:
            return item.label
        if lst.kind == "number":
            return f"{number}."
        return "*"

    @staticmethod
    def _directive(
        sb: StringBuilder, name: str, *arguments: str | None, blank: bool = True
    ) -> None:
        line = " ".join([f"={name}", *(a for a in arguments if a)])
        sb.append_line(line)
        if blank:
            sb.append_line()


def _is_indented(code: str) -> bool:
    """True if ``code`` reads back as one verbatim paragraph."""
    lines = code.split("\n")[:-1]
    if not lines or not lines[0].strip():
        return False
    return all(not line or line[0] in " \t" for line in lines) and not lines[-1] == ""

"""
Podita: PseudoPod chapter parser and renderer.

Parses book chapters written in PseudoPod markup (``=headN`` headings,
``=begin``/``=end`` regions, ``Z<>`` anchors, ``X<>`` index tags, ``L<>``
cross references) into a typed, immutable tree, resolves cross references
against the chapter's anchor table, and renders HTML or normalized markup.
Zero runtime dependencies.

Quick Start:
    >>> from podita import parse, resolve, render
    >>> doc = parse("=head1 Hello\\n\\nB<World>\\n")
    >>> result = resolve(doc)
    >>> print(render(result.document))
    <section id="hello">
    <h1>Hello</h1>
    <p><strong>World</strong></p>
    </section>

    >>> # Or use the high-level Podita class
    >>> from podita import Podita
    >>> pod = Podita()
    >>> html = pod("=head1 Hello\\n\\nB<World>\\n")

Several chapters at once, with cross-chapter references:
    >>> from podita import process_many
    >>> results = process_many([ch1, ch2], shared_anchors=True, max_workers=4)

"""

from collections.abc import Mapping, Sequence

from podita.anchors import AnchorTable, AnchorTarget
from podita.config import (
    ParseConfig,
    RenderConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from podita.errors import (
    DeprecatedDirectiveError,
    DuplicateAnchorError,
    LexError,
    ParseError,
    PoditaError,
    RecoverableError,
    RenderError,
    StructureError,
    UnknownDirectiveError,
    UnknownEntityError,
    UnresolvedReferenceError,
    UnsupportedBlockError,
)
from podita.lexer import InlineLexer, Lexer
from podita.location import SourceLocation
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
from podita.parser import Parser
from podita.pipeline import RenderResult, parse, process, process_many, render
from podita.renderers import HtmlRenderer, PlainRenderer
from podita.renderers.protocol import DocumentRenderer
from podita.resolver import ResolveResult, resolve
from podita.serialization import equivalent, from_dict, from_json, to_dict, to_json
from podita.tokens import Token, TokenType
from podita.visitor import BaseVisitor, transform

__version__ = "0.1.0"


class Podita:
    """High-level processor combining parser, resolver and renderer.

    Usage:
        >>> pod = Podita(render_config=RenderConfig(heading_offset=1))
        >>> pod("=head1 Hello\\n")
        '<section id="hello">\\n<h2>Hello</h2>\\n</section>\\n'

        >>> # Access the tree and diagnostics
        >>> result = pod.process("=head1 A\\n\\nL<missing>\\n")
        >>> result.diagnostics[0].target
        'missing'

    Thread Safety:
        Holds only frozen configuration. Parse configuration is applied per
        call through a ContextVar, so one instance can serve many threads.
    """

    __slots__ = ("_config", "_render_config", "_external_anchors")

    def __init__(
        self,
        *,
        config: ParseConfig | None = None,
        render_config: RenderConfig | None = None,
        external_anchors: Mapping[str, AnchorTarget] | None = None,
    ) -> None:
        """Initialize processor.

        Args:
            config: Parse configuration (defaults to ParseConfig())
            render_config: Render configuration (defaults to HTML)
            external_anchors: Anchors from other chapters, consulted for
                references a chapter does not declare itself
        """
        self._config = config or ParseConfig()
        self._render_config = render_config or RenderConfig()
        self._external_anchors = external_anchors

    def __call__(self, source: str) -> str:
        """Parse, resolve and render in one call, returning the output."""
        output = self.process(source).output
        assert output is not None
        return output

    def parse(self, source: str, *, source_file: str | None = None) -> Document:
        return parse(source, source_file=source_file, config=self._config)

    def process(self, source: str, *, source_file: str | None = None) -> RenderResult:
        return process(
            source,
            source_file=source_file,
            config=self._config,
            render_config=self._render_config,
            external_anchors=self._external_anchors,
        )

    def process_many(
        self,
        sources: Sequence[str],
        *,
        source_files: Sequence[str | None] | None = None,
        shared_anchors: bool = False,
        max_workers: int | None = None,
    ) -> list[RenderResult]:
        """Process several documents in parallel; see ``podita.process_many``."""
        return process_many(
            sources,
            source_files=source_files,
            config=self._config,
            render_config=self._render_config,
            shared_anchors=shared_anchors,
            max_workers=max_workers,
        )


__all__ = [  # noqa: RUF022 grouped by category
    # Version
    "__version__",
    # Core API
    "parse",
    "resolve",
    "render",
    "process",
    "process_many",
    "ResolveResult",
    "RenderResult",
    # Block nodes
    "Block",
    "Document",
    "Section",
    "Paragraph",
    "CodeListing",
    "Sidebar",
    "IndexMarker",
    "CrossReference",
    "List",
    "ListItem",
    # Inline nodes
    "Inline",
    "Text",
    "Bold",
    "Italic",
    "CodeSpan",
    "IndexTag",
    "AnchorTag",
    "CrossRefTag",
    "Link",
    "Footnote",
    # Anchors
    "AnchorTable",
    "AnchorTarget",
    # Errors
    "PoditaError",
    "ParseError",
    "LexError",
    "StructureError",
    "DuplicateAnchorError",
    "RecoverableError",
    "UnresolvedReferenceError",
    "UnknownDirectiveError",
    "DeprecatedDirectiveError",
    "UnknownEntityError",
    "RenderError",
    "UnsupportedBlockError",
    # Parser components
    "Lexer",
    "InlineLexer",
    "Parser",
    # Renderers
    "HtmlRenderer",
    "PlainRenderer",
    "DocumentRenderer",
    # Visitor + Transform
    "BaseVisitor",
    "transform",
    # Serialization
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    "equivalent",
    # Configuration (ContextVar-based)
    "ParseConfig",
    "RenderConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
    # Location
    "SourceLocation",
    # Tokens
    "Token",
    "TokenType",
    # High-level
    "Podita",
]

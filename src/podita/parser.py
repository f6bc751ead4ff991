"""Stack-based block parser producing a typed Document.

Consumes the token stream from Lexer and builds the block tree. Sections
are opened by headings and closed implicitly by the next heading of the
same or shallower level; directive regions are closed by their explicit
closers. Anchors declared with ``Z<>`` are collected into the document's
AnchorTable while the tree is built.

Architecture:
The parser uses a mixin-based design for separation of concerns:
- `TokenNavigationMixin`: Token stream traversal
- `BlockParsingMixin`: Directive handlers, paragraphs, listings

Thread Safety:
- Parser produces an immutable Document (frozen dataclasses)
- Configuration is read from ContextVar (thread-local)
- Safe to share the Document across threads

"""

from __future__ import annotations

from podita.anchors import AnchorTable
from podita.config import ParseConfig, get_parse_config
from podita.errors import RecoverableError, StructureError
from podita.lexer import Lexer
from podita.location import SourceLocation
from podita.nodes import Document
from podita.parsing import (
    BlockParsingMixin,
    FrameStack,
    FrameType,
    ParserState,
    TokenNavigationMixin,
)
from podita.tokens import Token
from podita.utils.logger import get_logger

logger = get_logger(__name__)


class Parser(
    TokenNavigationMixin,
    BlockParsingMixin,
):
    """Block parser for POD-style chapters.

    Usage:
            >>> parser = Parser("=head1 Hello\\n\\nWorld.\\n")
            >>> doc = parser.parse()
            >>> doc.children[0].title
            'Hello'

    Thread Safety:
        Parser instances are single-use and not thread-safe. Create one per
        parse operation. Configuration is read from ContextVar (thread-local).
        The resulting Document is immutable and thread-safe.

    """

    __slots__ = (
        "_source",
        "_tokens",
        "_pos",
        "_current",
        "_source_file",
        "_frames",
        "_anchors",
        "_diagnostics",
        "_in_listing",
    )

    def __init__(
        self,
        source: str,
        source_file: str | None = None,
    ) -> None:
        """Initialize parser with source text.

        Configuration is read from ContextVar, not passed as parameters.
        Use set_parse_config() or parse_config_context() before creating
        a Parser if you need non-default configuration.

        Args:
            source: Markup source text
            source_file: Optional source file path for error messages

        """
        self._source = source
        self._source_file = source_file
        self._tokens: list[Token] = []
        self._pos = 0
        self._current: Token | None = None
        self._frames = FrameStack(self._document_location())
        self._anchors = AnchorTable()
        self._diagnostics: list[RecoverableError] = []
        self._in_listing = False

    @property
    def _config(self) -> ParseConfig:
        """Get current parse configuration (thread-local)."""
        return get_parse_config()

    @property
    def state(self) -> ParserState:
        """Current block parser state, derived from the frame stack."""
        if self._in_listing:
            return ParserState.IN_CODE_LISTING
        return self._frames.state()

    def parse(self) -> Document:
        """Parse source into a Document.

        Returns:
            Document with a frozen AnchorTable and any parse diagnostics

        Raises:
            LexError: Unterminated inline format code
            StructureError: Mismatched or unclosed directive regions
            DuplicateAnchorError: Same ``Z<>`` name declared twice

        """
        lexer = Lexer(self._source, self._source_file, code_kinds=self._config.code_kinds)
        self._tokens = list(lexer.tokenize())
        self._pos = 0
        self._current = self._tokens[0] if self._tokens else None
        logger.debug("%s: %d tokens", self._source_file or "<string>", len(self._tokens))

        while not self._at_end():
            self._parse_block()

        self._finish()

        document = Document(
            location=self._document_location(),
            children=tuple(self._frames.root.children),
            anchors=self._anchors.freeze(),
            diagnostics=tuple(self._diagnostics),
        )
        logger.debug(
            "%s: %d top-level blocks, %d anchors, %d diagnostics",
            self._source_file or "<string>",
            len(document.children),
            len(document.anchors),
            len(document.diagnostics),
        )
        return document

    def _finish(self) -> None:
        """Close open sections at end of input.

        Sections close implicitly; any directive frame still open is an
        error pointing at its opener.
        """
        while self._frames.depth:
            top = self._frames.top
            # Items end with their list; the unclosed =over is reported
            if top.frame_type not in (FrameType.SECTION, FrameType.ITEM):
                raise StructureError.at(
                    top.location,
                    f"{top.opener} opened at line {top.location.lineno} is never closed",
                )
            self._frames.close_top()

    def _document_location(self) -> SourceLocation:
        return SourceLocation(
            lineno=1,
            col_offset=1,
            offset=0,
            end_offset=len(self._source),
            source_file=self._source_file,
        )

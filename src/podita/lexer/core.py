"""Line-oriented state-machine lexer.

Uses the window approach: find the end of the current line, classify it,
commit the position. Every step advances, so tokenizing is O(n) and cannot
loop.

Thread Safety:
Lexer state is instance-local. Use one Lexer per thread; ``tokenize()``
restarts from the top of the source on every call.

"""

from __future__ import annotations

from collections.abc import Iterator

from podita.config import get_parse_config
from podita.lexer.directives import DirectiveClassifierMixin
from podita.lexer.modes import LexerMode, ParagraphKind
from podita.tokens import Token, TokenType
from podita.utils.logger import get_logger

logger = get_logger(__name__)


class Lexer(DirectiveClassifierMixin):
    """Tokenize markup source into block-level tokens, one per line.

    Directive recognition takes priority at the start of a line. Inside a
    code-kind region only the matching ``=end`` line is recognized.

    Usage:
            >>> for token in Lexer("=head1 Title\\n\\nHello world.\\n").tokenize():
            ...     print(token)
        Token(HEADING, =head1 'Title', 1)
        Token(BLANK_LINE, '', 2)
        Token(PARAGRAPH_LINE, 'Hello world.', 3)
        Token(EOF, '', 4)

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_source_file",
        "_code_kinds",
        "_pos",
        "_lineno",
        "_mode",
        "_paragraph",
        "_listing_kind",
    )

    def __init__(
        self,
        source: str,
        source_file: str | None = None,
        code_kinds: frozenset[str] | None = None,
    ) -> None:
        """Initialize lexer with source text.

        Args:
            source: Markup source text
            source_file: Optional source file path for error messages
            code_kinds: Region kinds whose body is literal; defaults to the
                active ParseConfig
        """
        self._source = source
        self._source_len = len(source)
        self._source_file = source_file
        self._code_kinds = code_kinds if code_kinds is not None else get_parse_config().code_kinds
        self._reset()

    def _reset(self) -> None:
        self._pos = 0
        self._lineno = 1
        self._mode = LexerMode.BLOCK
        self._paragraph = ParagraphKind.NONE
        self._listing_kind = ""

    @property
    def mode(self) -> LexerMode:
        return self._mode

    def tokenize(self) -> Iterator[Token]:
        """Tokenize source into a token stream.

        Yields:
            Token objects one at a time, ending with exactly one EOF

        """
        self._reset()
        source_len = self._source_len
        while self._pos < source_len:
            line_start = self._pos
            line_end = self._find_line_end()
            line = self._source[line_start:line_end].rstrip("\r")
            if self._mode == LexerMode.LISTING:
                token = self._scan_listing_line(line, line_start, line_end)
            else:
                token = self._scan_block_line(line, line_start, line_end)
            self._commit_to(line_end)
            yield token

        if self._mode == LexerMode.LISTING:
            logger.debug("EOF inside '%s' listing at line %d", self._listing_kind, self._lineno)
        yield Token(
            type=TokenType.EOF,
            value="",
            lineno=self._lineno,
            offset=self._pos,
            end_offset=self._pos,
            source_file=self._source_file,
        )

    # =========================================================================
    # Mode scanners
    # =========================================================================

    def _scan_block_line(self, line: str, line_start: int, line_end: int) -> Token:
        if not line or line.isspace():
            self._paragraph = ParagraphKind.NONE
            return self._make_token(TokenType.BLANK_LINE, "", line_start, line_end)

        if self._is_directive_line(line):
            self._paragraph = ParagraphKind.NONE
            token = self._classify_directive(line, line_start, line_end)
            if token.type == TokenType.BEGIN:
                kind = self._region_kind(token.value)
                if kind in self._code_kinds:
                    self._mode = LexerMode.LISTING
                    self._listing_kind = kind
            return token

        if self._paragraph == ParagraphKind.NONE and line[0] in " \t":
            self._paragraph = ParagraphKind.VERBATIM
        elif self._paragraph == ParagraphKind.NONE:
            self._paragraph = ParagraphKind.TEXT

        if self._paragraph == ParagraphKind.VERBATIM:
            return self._make_token(TokenType.VERBATIM_LINE, line, line_start, line_end)
        return self._make_token(TokenType.PARAGRAPH_LINE, line, line_start, line_end)

    def _scan_listing_line(self, line: str, line_start: int, line_end: int) -> Token:
        if self._is_directive_line(line):
            name, argument = self._split_directive(line)
            if name == "end" and argument.split() == [self._listing_kind]:
                self._mode = LexerMode.BLOCK
                self._listing_kind = ""
                return self._make_token(TokenType.END, argument, line_start, line_end, name=name)
        return self._make_token(TokenType.LISTING_LINE, line, line_start, line_end)

    # =========================================================================
    # Window navigation helpers
    # =========================================================================

    def _find_line_end(self) -> int:
        """Position of the next newline, or end of source."""
        idx = self._source.find("\n", self._pos)
        return idx if idx != -1 else self._source_len

    def _commit_to(self, line_end: int) -> None:
        """Advance past line_end, consuming the newline if present."""
        self._pos = line_end
        if self._pos < self._source_len and self._source[self._pos] == "\n":
            self._pos += 1
            self._lineno += 1

    def _make_token(
        self,
        token_type: TokenType,
        value: str,
        line_start: int,
        line_end: int,
        *,
        name: str = "",
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            lineno=self._lineno,
            offset=line_start,
            end_offset=line_end,
            name=name,
            source_file=self._source_file,
        )

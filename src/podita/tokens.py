"""Token definitions for the Podita lexers.

Two token families exist:

- ``Token``/``TokenType``: block-level, one token per source line, produced
  by ``podita.lexer.Lexer``.
- ``InlineToken``/``InlineTokenType``: format codes inside paragraph text,
  produced by ``podita.lexer.InlineLexer``.

Thread Safety:
Tokens are frozen (immutable) and safe to share across threads.

"""

from dataclasses import dataclass
from enum import Enum, auto

from podita.location import SourceLocation


class TokenType(Enum):
    """Block-level token types."""

    # Document structure
    EOF = auto()
    BLANK_LINE = auto()

    # Directives (line-initial "=name")
    HEADING = auto()  # =head1 .. =head4, =head0
    BEGIN = auto()  # =begin kind [title]
    END = auto()  # =end kind
    FOR = auto()  # =for kind [text]
    OVER = auto()  # =over [indent]
    ITEM = auto()  # =item [marker]
    BACK = auto()  # =back
    COMMAND = auto()  # =pod, =cut, =encoding, unknown

    # Content
    PARAGRAPH_LINE = auto()
    VERBATIM_LINE = auto()  # indented paragraph
    LISTING_LINE = auto()  # literal line inside a code region


DIRECTIVE_TOKENS = frozenset(
    {
        TokenType.HEADING,
        TokenType.BEGIN,
        TokenType.END,
        TokenType.FOR,
        TokenType.OVER,
        TokenType.ITEM,
        TokenType.BACK,
        TokenType.COMMAND,
    }
)


@dataclass(frozen=True, slots=True)
class Token:
    """A block-level token.

    Attributes:
        type: The token type
        value: Line content. For directives, the text after the directive
            name (the argument); for content lines, the line without its
            trailing newline.
        name: Directive name without the leading ``=`` (empty for content)
        lineno: Line number (1-indexed)
        offset: Absolute offset of the line start in the source
        end_offset: Absolute offset of the line end (before the newline)
        source_file: Optional source file path

    """

    type: TokenType
    value: str
    lineno: int
    offset: int
    end_offset: int
    name: str = ""
    source_file: str | None = None

    @property
    def location(self) -> SourceLocation:
        """Source location of the start of the line."""
        return SourceLocation(
            lineno=self.lineno,
            col_offset=1,
            offset=self.offset,
            end_offset=self.end_offset,
            source_file=self.source_file,
        )

    def __repr__(self) -> str:
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        name = f"={self.name} " if self.name else ""
        return f"Token({self.type.name}, {name}{val!r}, {self.lineno})"


class InlineTokenType(Enum):
    """Inline token types."""

    TEXT = auto()
    FORMAT_OPEN = auto()  # B<  or  C<<<
    FORMAT_CLOSE = auto()  # >  or  >>>


@dataclass(frozen=True, slots=True)
class InlineToken:
    """A token inside paragraph text.

    Attributes:
        type: The inline token type
        value: Literal text for TEXT; the format code letter for
            FORMAT_OPEN/FORMAT_CLOSE
        offset: Offset into the text being scanned
        brackets: Number of angle brackets of the delimiter (1 for ``C<>``)

    """

    type: InlineTokenType
    value: str
    offset: int
    brackets: int = 0

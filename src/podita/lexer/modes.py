"""Lexer operating modes and directive name tables."""

from __future__ import annotations

from enum import Enum, auto


class LexerMode(Enum):
    """Lexer operating modes.

    - BLOCK: Between blocks, recognizing directives and paragraph lines
    - LISTING: Inside a code-kind ``=begin`` region; every line is literal
      until the matching ``=end``

    """

    BLOCK = auto()
    LISTING = auto()


class ParagraphKind(Enum):
    """Kind of the paragraph the lexer is currently inside."""

    NONE = auto()  # at a paragraph boundary
    TEXT = auto()
    VERBATIM = auto()


# Heading directive names and the level each maps to. head0 is the legacy
# chapter-title heading and is reported as deprecated by the parser.
HEADING_LEVELS: dict[str, int] = {
    "head0": 1,
    "head1": 1,
    "head2": 2,
    "head3": 3,
    "head4": 4,
}

# Directives that are accepted and carry no content of their own.
PASSIVE_COMMANDS = frozenset({"pod", "cut", "encoding"})

# Inline format codes recognized inside paragraph text.
FORMAT_CODES = frozenset("BICLEFSXZUNR")

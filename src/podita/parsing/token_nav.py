"""Token navigation utilities for the Podita parser."""

from __future__ import annotations

from typing import TYPE_CHECKING

from podita.location import SourceLocation
from podita.tokens import Token, TokenType

if TYPE_CHECKING:
    from collections.abc import Sequence


class TokenNavigationMixin:
    """Mixin providing token stream navigation methods.

    Required Host Attributes:
        - _tokens: Sequence[Token]
        - _pos: int
        - _current: Token | None
        - _source: str

    """

    _tokens: Sequence[Token]
    _pos: int
    _current: Token | None
    _source: str

    def _at_end(self) -> bool:
        """Check if at end of token stream."""
        return self._current is None or self._current.type == TokenType.EOF

    def _advance(self) -> Token | None:
        """Advance to next token and return it."""
        self._pos += 1
        if self._pos < len(self._tokens):
            self._current = self._tokens[self._pos]
        else:
            self._current = None
        return self._current

    def _peek(self, offset: int = 1) -> Token | None:
        """Peek at token at offset from current position."""
        pos = self._pos + offset
        if pos < len(self._tokens):
            return self._tokens[pos]
        return None

    def _check(self, *types: TokenType) -> bool:
        return self._current is not None and self._current.type in types

    def _argument_location(self, token: Token, tail: str | None = None) -> SourceLocation:
        """Location of a directive's argument within its line.

        With ``tail``, the location of that trailing part of the argument
        (the title after a region kind, the text after an item marker).
        Falls back to the line start when the directive has no argument.
        """
        line = self._source[token.offset : token.end_offset]
        column = line.find(token.value, len(token.name) + 1) if token.value else -1
        if column < 0:
            return token.location
        if tail:
            column += max(token.value.rfind(tail), 0)
        return SourceLocation(
            lineno=token.lineno,
            col_offset=column + 1,
            offset=token.offset + column,
            end_offset=token.end_offset,
            source_file=token.source_file,
        )

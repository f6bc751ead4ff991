"""Inline format-code lexer.

Scans paragraph text for format codes: a single capital letter from
``FORMAT_CODES`` followed by ``<``. Two delimiter styles are recognized:

- single bracket: ``C<$x>``; the first ``>`` not claimed by a nested code
  closes it
- multi bracket: ``C<< $a <=> $b >>``; the opening brackets must be
  followed by whitespace and the code is closed only by whitespace plus the
  same number of ``>``. The padding whitespace is not part of the content.

A ``>`` with no open code is plain text. Format codes never cross paragraph
boundaries, so the end of the scanned text is the end of input: any code
still open there raises LexError.

Thread Safety:
Stateless apart from the text being scanned; ``tokenize()`` can be called
any number of times.

"""

from __future__ import annotations

from collections.abc import Iterator

from podita.errors import LexError
from podita.lexer.modes import FORMAT_CODES
from podita.location import SourceLocation
from podita.tokens import InlineToken, InlineTokenType


class InlineLexer:
    """Tokenize text into TEXT / FORMAT_OPEN / FORMAT_CLOSE tokens.

    Usage:
            >>> [t.value for t in InlineLexer("a B<b> c").tokenize()]
            ['a ', 'B', 'b', 'B', ' c']

    """

    __slots__ = ("_text", "_location")

    def __init__(self, text: str, location: SourceLocation | None = None) -> None:
        """Initialize with the text to scan.

        Args:
            text: Paragraph text (may span several lines)
            location: Where ``text`` starts in the source, for error messages
        """
        self._text = text
        self._location = location or SourceLocation(lineno=1, col_offset=1)

    def tokenize(self) -> Iterator[InlineToken]:
        """Yield inline tokens.

        Raises:
            LexError: If a format code is still open at the end of the text
        """
        text = self._text
        text_len = len(text)
        pos = 0
        text_start = 0
        # (code, bracket count, offset of the code letter)
        stack: list[tuple[str, int, int]] = []

        while pos < text_len:
            char = text[pos]

            if char in FORMAT_CODES and pos + 1 < text_len and text[pos + 1] == "<":
                bracket_end = pos + 1
                while bracket_end < text_len and text[bracket_end] == "<":
                    bracket_end += 1
                count = bracket_end - pos - 1
                if count > 1 and (bracket_end >= text_len or not text[bracket_end].isspace()):
                    # C<<x> reads as C< followed by the text "<x"
                    count = 1
                    bracket_end = pos + 2

                if text_start < pos:
                    yield InlineToken(InlineTokenType.TEXT, text[text_start:pos], text_start)
                yield InlineToken(InlineTokenType.FORMAT_OPEN, char, pos, count)
                stack.append((char, count, pos))

                pos = bracket_end
                if count > 1:
                    while pos < text_len and text[pos].isspace():
                        pos += 1
                text_start = pos
                continue

            if char == ">" and stack:
                code, count, _ = stack[-1]
                if count == 1:
                    if text_start < pos:
                        yield InlineToken(InlineTokenType.TEXT, text[text_start:pos], text_start)
                    yield InlineToken(InlineTokenType.FORMAT_CLOSE, code, pos, 1)
                    stack.pop()
                    pos += 1
                    text_start = pos
                    continue
                if text.startswith(">" * count, pos) and text[pos - 1].isspace():
                    content_end = pos
                    while content_end > text_start and text[content_end - 1].isspace():
                        content_end -= 1
                    if text_start < content_end:
                        yield InlineToken(
                            InlineTokenType.TEXT, text[text_start:content_end], text_start
                        )
                    yield InlineToken(InlineTokenType.FORMAT_CLOSE, code, pos, count)
                    stack.pop()
                    pos += count
                    text_start = pos
                    continue

            pos += 1

        if stack:
            code, count, offset = stack[-1]
            raise LexError.at(
                self._location.advanced(text, offset),
                f"unterminated format code {code}{'<' * count}",
            )

        if text_start < text_len:
            yield InlineToken(InlineTokenType.TEXT, text[text_start:], text_start)

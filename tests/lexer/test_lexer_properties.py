"""Property-based tests for lexer invariants using Hypothesis.

These tests verify that certain properties always hold regardless
of the input, helping catch edge cases that example-based tests miss.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from podita.errors import LexError
from podita.lexer import InlineLexer, Lexer
from podita.tokens import InlineTokenType, TokenType

pod_chars = st.text(alphabet="=abcdehilnoprstvgBCILXZ<> \t\n", max_size=300)


class TestBlockLexerInvariants:
    """Invariants of the block token stream."""

    @given(st.text(max_size=1000))
    @settings(max_examples=200)
    def test_always_ends_with_eof(self, source: str) -> None:
        """Every tokenization must end with exactly one EOF token."""
        tokens = list(Lexer(source).tokenize())

        assert tokens[-1].type == TokenType.EOF
        assert sum(1 for t in tokens if t.type == TokenType.EOF) == 1

    @given(pod_chars)
    @settings(max_examples=200)
    def test_line_numbers_strictly_increase(self, source: str) -> None:
        """One token per line, in order."""
        tokens = list(Lexer(source).tokenize())
        line_numbers = [t.lineno for t in tokens[:-1]]
        assert line_numbers == list(range(1, len(line_numbers) + 1))

    @given(pod_chars)
    @settings(max_examples=200)
    def test_offsets_within_source(self, source: str) -> None:
        for token in Lexer(source).tokenize():
            assert 0 <= token.offset <= token.end_offset <= len(source)
            assert token.location.col_offset >= 1

    @given(pod_chars)
    @settings(max_examples=100)
    def test_tokenize_is_restartable(self, source: str) -> None:
        lexer = Lexer(source)
        assert list(lexer.tokenize()) == list(lexer.tokenize())


class TestInlineLexerInvariants:
    """Invariants of the inline token stream."""

    @given(st.text(alphabet="abc BIC<> ", max_size=200))
    @settings(max_examples=300)
    def test_opens_and_closes_balance(self, text: str) -> None:
        """Either the codes balance or the lexer raises LexError."""
        try:
            tokens = list(InlineLexer(text).tokenize())
        except LexError:
            return
        depth = 0
        for token in tokens:
            if token.type == InlineTokenType.FORMAT_OPEN:
                depth += 1
            elif token.type == InlineTokenType.FORMAT_CLOSE:
                depth -= 1
            assert depth >= 0
        assert depth == 0

    @given(st.text(alphabet="abc xyz.,;!?>", max_size=200))
    @settings(max_examples=100)
    def test_text_without_codes_is_one_token(self, text: str) -> None:
        tokens = list(InlineLexer(text).tokenize())
        if text:
            assert len(tokens) == 1
            assert tokens[0].value == text
        else:
            assert tokens == []

    @pytest.mark.parametrize("code", list("BICLEFSXZUNR"))
    def test_every_format_code_is_recognized(self, code: str) -> None:
        tokens = list(InlineLexer(f"{code}<x>").tokenize())
        assert [t.type for t in tokens] == [
            InlineTokenType.FORMAT_OPEN,
            InlineTokenType.TEXT,
            InlineTokenType.FORMAT_CLOSE,
        ]
        assert tokens[0].value == code

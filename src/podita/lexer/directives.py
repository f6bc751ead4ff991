"""Directive line classifier mixin."""

from podita.lexer.modes import HEADING_LEVELS
from podita.tokens import Token, TokenType

_DIRECTIVE_TYPES: dict[str, TokenType] = {
    "begin": TokenType.BEGIN,
    "end": TokenType.END,
    "for": TokenType.FOR,
    "over": TokenType.OVER,
    "item": TokenType.ITEM,
    "back": TokenType.BACK,
}


class DirectiveClassifierMixin:
    """Mixin providing directive line classification.

    A directive is a line starting with ``=`` immediately followed by a
    letter. Everything after the directive name is its argument.
    """

    def _make_token(
        self,
        token_type: TokenType,
        value: str,
        line_start: int,
        line_end: int,
        *,
        name: str = "",
    ) -> Token:
        """Create token for the current line. Implemented by Lexer."""
        raise NotImplementedError

    @staticmethod
    def _is_directive_line(line: str) -> bool:
        return len(line) > 1 and line[0] == "=" and line[1].isalpha()

    @staticmethod
    def _split_directive(line: str) -> tuple[str, str]:
        """Split ``=name argument`` into (name, argument)."""
        body = line[1:]
        for i, char in enumerate(body):
            if char.isspace():
                return body[:i], body[i:].strip()
        return body, ""

    def _classify_directive(self, line: str, line_start: int, line_end: int) -> Token:
        """Classify a directive line.

        Args:
            line: The full line, starting with ``=``
            line_start: Offset of the line in the source
            line_end: Offset of the line end

        Returns:
            Directive token; unknown names become COMMAND tokens and are
            judged by the parser.
        """
        name, argument = self._split_directive(line)
        if name in HEADING_LEVELS:
            token_type = TokenType.HEADING
        else:
            token_type = _DIRECTIVE_TYPES.get(name, TokenType.COMMAND)
        return self._make_token(token_type, argument, line_start, line_end, name=name)

    @staticmethod
    def _region_kind(argument: str) -> str:
        """First word of a ``=begin``/``=end``/``=for`` argument."""
        parts = argument.split(None, 1)
        return parts[0] if parts else ""

"""Tokenizer for the Podita markup parser.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer, InlineLexer, LexerMode
├── core.py              # Lexer: block-level tokens, one per line
├── directives.py        # Directive line classifier mixin
├── inline.py            # InlineLexer: format codes inside paragraph text
└── modes.py             # LexerMode enum, directive tables, format codes

Usage:
    >>> from podita.lexer import Lexer
    >>> for token in Lexer("=head1 Title\\n\\nHello world.\\n").tokenize():
    ...     print(token)
Token(HEADING, =head1 'Title', 1)
Token(BLANK_LINE, '', 2)
Token(PARAGRAPH_LINE, 'Hello world.', 3)
Token(EOF, '', 4)

"""

from podita.lexer.core import Lexer
from podita.lexer.inline import InlineLexer
from podita.lexer.modes import FORMAT_CODES, LexerMode

__all__ = ["FORMAT_CODES", "InlineLexer", "Lexer", "LexerMode"]

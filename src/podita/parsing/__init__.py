"""Parsing subsystem for the Podita markup parser.

Provides the pieces the Parser is assembled from:
- `TokenNavigationMixin`: Token stream traversal
- `BlockParsingMixin`: Directive handlers and paragraph classification
- `FrameStack`: Open containers while the block tree is built
- `parse_inline`: Format codes to typed inline spans

Example:
    >>> from podita.parsing import BlockParsingMixin, TokenNavigationMixin
    >>> class Parser(TokenNavigationMixin, BlockParsingMixin):
    ...     pass

"""

from podita.parsing.blocks import BlockParsingMixin
from podita.parsing.frames import Frame, FrameStack, FrameType, ParserState
from podita.parsing.inline import decode_entity, parse_inline
from podita.parsing.token_nav import TokenNavigationMixin

__all__ = [
    "BlockParsingMixin",
    "Frame",
    "FrameStack",
    "FrameType",
    "ParserState",
    "TokenNavigationMixin",
    "decode_entity",
    "parse_inline",
]

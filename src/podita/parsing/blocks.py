"""Block-level parsing for the Podita parser.

Each directive token has a handler. Handlers push or pop frames on the
FrameStack and attach finished blocks to the innermost open container.

Thread Safety:
All state lives on the host Parser instance (one per parse).

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from podita.anchors import AnchorTarget
from podita.errors import (
    DeprecatedDirectiveError,
    StructureError,
    UnknownDirectiveError,
)
from podita.lexer.modes import HEADING_LEVELS, PASSIVE_COMMANDS
from podita.nodes import (
    AnchorTag,
    Block,
    CodeListing,
    CrossReference,
    CrossRefTag,
    IndexMarker,
    IndexTag,
    Paragraph,
    Sidebar,
)
from podita.parsing.frames import Frame, FrameStack, FrameType
from podita.parsing.inline import is_blank, iter_spans, parse_inline
from podita.tokens import TokenType
from podita.utils.text import flatten_text

if TYPE_CHECKING:
    from podita.anchors import AnchorTable
    from podita.config import ParseConfig
    from podita.errors import RecoverableError
    from podita.location import SourceLocation
    from podita.tokens import Token

_NUMBER_ITEM_RE = re.compile(r"^(\d+)\.?(?:\s+|$)")


class BlockParsingMixin:
    """Mixin for block-level parsing.

    Required Host Attributes:
        - _current: Token | None
        - _frames: FrameStack
        - _anchors: AnchorTable
        - _diagnostics: list[RecoverableError]
        - _in_listing: bool
        - _config: ParseConfig

    Required Host Methods:
        - _at_end() -> bool
        - _advance() -> Token | None
        - _peek(offset) -> Token | None
        - _check(*types) -> bool
        - _argument_location(token) -> SourceLocation
    """

    _current: Token | None
    _frames: FrameStack
    _anchors: AnchorTable
    _diagnostics: list[RecoverableError]
    _in_listing: bool

    @property
    def _config(self) -> ParseConfig:
        raise NotImplementedError

    def _parse_block(self) -> None:
        """Consume one block's worth of tokens."""
        token = self._current
        assert token is not None
        match token.type:
            case TokenType.BLANK_LINE:
                self._advance()
            case TokenType.HEADING:
                self._parse_heading(token)
            case TokenType.BEGIN:
                self._parse_begin(token)
            case TokenType.END:
                self._parse_end(token)
            case TokenType.FOR:
                self._parse_for(token)
            case TokenType.OVER:
                self._parse_over(token)
            case TokenType.ITEM:
                self._parse_item(token)
            case TokenType.BACK:
                self._parse_back(token)
            case TokenType.COMMAND:
                self._parse_command(token)
            case TokenType.PARAGRAPH_LINE:
                self._parse_paragraph()
            case TokenType.VERBATIM_LINE:
                self._parse_verbatim()
            case _:
                raise StructureError.at(token.location, f"unexpected {token.type.name} token")

    # =========================================================================
    # Headings
    # =========================================================================

    def _parse_heading(self, token: Token) -> None:
        """``=headN Title``: close deeper or equal sections, open a new one."""
        level = HEADING_LEVELS[token.name]
        if token.name == "head0":
            self._diagnostics.append(
                DeprecatedDirectiveError.at(
                    token.location,
                    "=head0 is deprecated; use =head1",
                    directive="head0",
                    replacement="head1",
                )
            )
        if self._frames.in_list():
            opener = self._frames.innermost(FrameType.LIST)
            assert opener is not None
            raise StructureError.at(
                token.location,
                f"=head{level} inside =over opened at line {opener.location.lineno}",
            )

        while self._frames.top.frame_type == FrameType.SECTION and self._frames.top.level >= level:
            self._frames.close_top()

        frame = self._frames.push(
            Frame(
                FrameType.SECTION,
                token.location,
                level=level,
                title=token.value,
                title_location=self._argument_location(token) if token.value else None,
            )
        )
        self._declare_title_anchors(frame)
        self._advance()

    def _declare_title_anchors(self, frame: Frame) -> None:
        """Declare ``Z<>`` tags written in a heading or region title."""
        if not frame.title:
            return
        spans = parse_inline(frame.title, frame.title_location or frame.location)
        title = flatten_text(spans).strip() or None
        node_type = "Section" if frame.frame_type == FrameType.SECTION else "Sidebar"
        for span in iter_spans(spans):
            if isinstance(span, AnchorTag):
                self._declare(span.name, node_type, title, span.location)
                frame.anchors.append(span.name)

    # =========================================================================
    # =begin / =end regions
    # =========================================================================

    def _parse_begin(self, token: Token) -> None:
        kind, title = self._split_region(token)
        title_location = self._argument_location(token, title) if title else None
        if kind in self._config.code_kinds:
            self._parse_listing(token, kind, title, title_location)
            return
        frame = self._frames.push(
            Frame(
                FrameType.REGION,
                token.location,
                kind=kind,
                title=title,
                title_location=title_location,
            )
        )
        self._declare_title_anchors(frame)
        self._advance()

    def _parse_listing(
        self,
        token: Token,
        kind: str,
        title: str | None,
        title_location: SourceLocation | None,
    ) -> None:
        """Collect a code region's literal body up to its ``=end``."""
        self._in_listing = True
        lines: list[str] = []
        self._advance()
        while self._check(TokenType.LISTING_LINE):
            assert self._current is not None
            lines.append(self._current.value + "\n")
            self._advance()

        if not self._check(TokenType.END):
            raise StructureError.at(
                token.location,
                f"=begin {kind} opened at line {token.lineno} is never closed",
            )
        self._in_listing = False
        self._frames.attach(
            CodeListing(
                location=token.location,
                code="".join(lines),
                kind=kind,
                title=title,
                title_location=title_location,
            )
        )
        self._advance()

    def _parse_end(self, token: Token) -> None:
        kind = token.value.split(None, 1)[0] if token.value else ""
        opener = self._frames.innermost_non_section()
        if opener.frame_type == FrameType.DOCUMENT:
            raise StructureError.at(token.location, f"=end {kind} without matching =begin")
        if opener.frame_type != FrameType.REGION:
            raise StructureError.at(
                token.location,
                f"=end {kind} does not close {opener.opener} opened at line "
                f"{opener.location.lineno}; expected =back",
            )
        if opener.kind != kind:
            raise StructureError.at(
                token.location,
                f"=end {kind} does not match =begin {opener.kind} opened at line "
                f"{opener.location.lineno}",
            )
        while self._frames.top is not opener:
            self._frames.close_top()
        self._frames.close_top()
        self._advance()

    def _parse_for(self, token: Token) -> None:
        """``=for KIND text``: a one-paragraph region."""
        kind, first_line = self._split_region(token)
        lines = [first_line] if first_line else []
        text_location = self._argument_location(token, first_line) if first_line else None
        self._advance()
        while self._check(TokenType.PARAGRAPH_LINE, TokenType.VERBATIM_LINE):
            assert self._current is not None
            if text_location is None:
                text_location = self._current.location
            lines.append(self._current.value)
            self._advance()

        if kind in self._config.ignored_for_kinds:
            return
        if kind in self._config.code_kinds:
            code = "".join(line + "\n" for line in lines)
            self._frames.attach(CodeListing(location=token.location, code=code, kind=kind))
            return
        children: tuple[Block, ...] = ()
        if lines:
            assert text_location is not None
            children = (self._make_text_block("\n".join(lines), text_location),)
        self._frames.attach(Sidebar(location=token.location, kind=kind, children=children))

    def _split_region(self, token: Token) -> tuple[str, str | None]:
        parts = token.value.split(None, 1)
        if not parts:
            raise StructureError.at(token.location, f"={token.name} requires a kind")
        title = parts[1].strip() if len(parts) > 1 else None
        return parts[0], title or None

    # =========================================================================
    # =over / =item / =back lists
    # =========================================================================

    def _parse_over(self, token: Token) -> None:
        indent = 4
        if token.value:
            try:
                indent = int(float(token.value.split()[0]))
            except (ValueError, OverflowError):
                indent = 4
        self._frames.push(Frame(FrameType.LIST, token.location, indent=indent))
        self._advance()

    def _parse_item(self, token: Token) -> None:
        if self._frames.top.frame_type == FrameType.ITEM:
            self._frames.close_top()
        top = self._frames.top
        if top.frame_type != FrameType.LIST:
            raise StructureError.at(token.location, "=item outside =over")

        kind, label, rest = self._classify_item(token.value)
        if not top.kind:
            top.kind = kind
        label_location = self._argument_location(token) if label else None
        self._frames.push(
            Frame(FrameType.ITEM, token.location, title=label, title_location=label_location)
        )
        if rest:
            self._frames.attach(self._make_text_block(rest, self._argument_location(token, rest)))
        self._advance()

    @staticmethod
    def _classify_item(argument: str) -> tuple[str, str | None, str]:
        """Return (list kind, definition label, inline item text)."""
        if not argument or argument == "*":
            return "bullet", None, ""
        if argument.startswith("*") and argument[1].isspace():
            return "bullet", None, argument[1:].strip()
        match = _NUMBER_ITEM_RE.match(argument)
        if match:
            return "number", None, argument[match.end() :].strip()
        return "definition", argument, ""

    def _parse_back(self, token: Token) -> None:
        if self._frames.top.frame_type == FrameType.ITEM:
            self._frames.close_top()
        top = self._frames.top
        if top.frame_type != FrameType.LIST:
            opener = self._frames.innermost_non_section()
            if opener.frame_type == FrameType.REGION:
                raise StructureError.at(
                    token.location,
                    f"=back does not match =begin {opener.kind} opened at line "
                    f"{opener.location.lineno}",
                )
            raise StructureError.at(token.location, "=back without matching =over")
        self._frames.close_top()
        self._advance()

    # =========================================================================
    # Other commands
    # =========================================================================

    def _parse_command(self, token: Token) -> None:
        if token.name not in PASSIVE_COMMANDS:
            message = f"unknown directive ={token.name}"
            if self._config.strict_directives:
                raise StructureError.at(token.location, message)
            self._diagnostics.append(
                UnknownDirectiveError.at(token.location, message, directive=token.name)
            )
        self._advance()

    # =========================================================================
    # Paragraphs
    # =========================================================================

    def _parse_paragraph(self) -> None:
        first = self._current
        assert first is not None
        lines: list[str] = []
        while self._check(TokenType.PARAGRAPH_LINE):
            assert self._current is not None
            lines.append(self._current.value)
            self._advance()
        self._frames.attach(self._make_text_block("\n".join(lines), first.location))

    def _parse_verbatim(self) -> None:
        """Indented paragraphs; runs separated only by blank lines merge."""
        first = self._current
        assert first is not None
        lines: list[str] = []
        while True:
            while self._check(TokenType.VERBATIM_LINE):
                assert self._current is not None
                lines.append(self._current.value)
                self._advance()
            blanks = 0
            while (peeked := self._peek(blanks)) is not None and peeked.type == TokenType.BLANK_LINE:
                blanks += 1
            if blanks == 0 or peeked is None or peeked.type != TokenType.VERBATIM_LINE:
                break
            lines.extend([""] * blanks)
            for _ in range(blanks):
                self._advance()
        code = "".join(line + "\n" for line in lines)
        self._frames.attach(CodeListing(location=first.location, code=code, kind="verbatim"))

    def _make_text_block(self, text: str, location: SourceLocation) -> Block:
        """Classify paragraph text and declare the anchors it holds.

        Raises:
            LexError: If the text has an unterminated format code
        """
        spans = parse_inline(text, location)
        visible = [span for span in spans if not is_blank(span)]
        anchor_tags = [span for span in iter_spans(spans) if isinstance(span, AnchorTag)]

        if visible and all(isinstance(span, (IndexTag, AnchorTag)) for span in visible):
            container = self._frames.nearest_container()
            for tag in anchor_tags:
                if container is not None:
                    node_type = "Section" if container.frame_type == FrameType.SECTION else "Sidebar"
                    title = self._frame_title(container, tag.location)
                    self._declare(tag.name, node_type, title, tag.location)
                    container.anchors.append(tag.name)
                else:
                    self._declare(tag.name, "IndexMarker", None, tag.location)
            return IndexMarker(
                location=location,
                text=text,
                terms=tuple(span.term for span in visible if isinstance(span, IndexTag)),
                anchors=tuple(tag.name for tag in anchor_tags),
            )

        if len(visible) == 1 and isinstance(visible[0], CrossRefTag):
            ref = visible[0]
            return CrossReference(location=location, text=text, target=ref.target, label=ref.label)

        for tag in anchor_tags:
            self._declare(tag.name, "Paragraph", None, tag.location)
        return Paragraph(location=location, text=text)

    @staticmethod
    def _frame_title(frame: Frame, location: SourceLocation) -> str | None:
        if not frame.title:
            return None
        return flatten_text(parse_inline(frame.title, location)).strip() or None

    def _declare(
        self, name: str, node_type: str, title: str | None, location: SourceLocation
    ) -> None:
        self._anchors.declare(
            AnchorTarget(name=name, node_type=node_type, title=title, location=location)
        )

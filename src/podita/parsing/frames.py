"""Frame stack for block parsing.

The block parser keeps one frame per open container. Directive tokens push
frames, matching closers pop them, and content attaches to the top frame.
Closing a frame freezes it into its immutable node and attaches that node to
the frame below.

Invariant: frames[0] is always the DOCUMENT frame.

Usage:
    stack = FrameStack(location)
    stack.push(Frame(FrameType.SECTION, location, level=1, title="Intro"))
    stack.attach(paragraph)
    stack.close_top()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from podita.location import SourceLocation
from podita.nodes import Block, List, ListItem, Section, Sidebar


class FrameType(Enum):
    """Kinds of open containers."""

    DOCUMENT = auto()
    SECTION = auto()  # =headN
    REGION = auto()  # =begin KIND (non-code)
    LIST = auto()  # =over
    ITEM = auto()  # =item


# Frames opened by a directive that needs an explicit closer
DIRECTIVE_FRAMES = frozenset({FrameType.REGION, FrameType.LIST, FrameType.ITEM})


class ParserState(Enum):
    """Block parser states, derived from the top of the frame stack.

    - OUTSIDE: only the document frame is open (initial and terminal)
    - IN_SECTION: innermost container is a section
    - IN_DIRECTIVE_BLOCK: innermost container is a =begin region or a list
    - IN_CODE_LISTING: collecting the literal body of a code region

    """

    OUTSIDE = auto()
    IN_SECTION = auto()
    IN_DIRECTIVE_BLOCK = auto()
    IN_CODE_LISTING = auto()


@dataclass(slots=True)
class Frame:
    """A mutable, open container.

    Attributes:
        frame_type: What kind of container this is
        location: Location of the opening directive
        children: Blocks attached so far
        level: Heading level (SECTION)
        kind: Region kind (REGION) or list kind (LIST)
        title: Heading text (SECTION), region title (REGION), or item
            label (ITEM)
        title_location: Where the title or label starts on its directive
            line
        anchors: Anchor names that target this container
        items: Closed list items (LIST)
        indent: ``=over`` indent (LIST)

    """

    frame_type: FrameType
    location: SourceLocation
    children: list[Block] = field(default_factory=list)
    level: int = 0
    kind: str = ""
    title: str | None = None
    title_location: SourceLocation | None = None
    anchors: list[str] = field(default_factory=list)
    items: list[ListItem] = field(default_factory=list)
    indent: int = 4

    @property
    def opener(self) -> str:
        """The directive that opened this frame, for error messages."""
        match self.frame_type:
            case FrameType.SECTION:
                return f"=head{self.level}"
            case FrameType.REGION:
                return f"=begin {self.kind}"
            case FrameType.LIST:
                return "=over"
            case FrameType.ITEM:
                return "=item"
        return "document"

    def to_node(self) -> Block:
        """Freeze the frame into its node."""
        match self.frame_type:
            case FrameType.SECTION:
                return Section(
                    location=self.location,
                    level=self.level,  # type: ignore[arg-type]
                    title=self.title or "",
                    children=tuple(self.children),
                    anchors=tuple(self.anchors),
                    title_location=self.title_location,
                )
            case FrameType.REGION:
                return Sidebar(
                    location=self.location,
                    kind=self.kind,
                    children=tuple(self.children),
                    title=self.title,
                    anchors=tuple(self.anchors),
                    title_location=self.title_location,
                )
            case FrameType.LIST:
                return List(
                    location=self.location,
                    items=tuple(self.items),
                    kind=self.kind or "bullet",  # type: ignore[arg-type]
                    indent=self.indent,
                )
            case FrameType.ITEM:
                return ListItem(
                    location=self.location,
                    children=tuple(self.children),
                    label=self.title,
                    label_location=self.title_location,
                )
        msg = "the document frame is not closed through to_node()"
        raise TypeError(msg)


class FrameStack:
    """Stack of open frames, innermost last."""

    __slots__ = ("_frames",)

    def __init__(self, location: SourceLocation) -> None:
        self._frames: list[Frame] = [Frame(FrameType.DOCUMENT, location)]

    @property
    def top(self) -> Frame:
        return self._frames[-1]

    @property
    def root(self) -> Frame:
        return self._frames[0]

    @property
    def depth(self) -> int:
        """Number of open frames besides the document."""
        return len(self._frames) - 1

    def push(self, frame: Frame) -> Frame:
        self._frames.append(frame)
        return frame

    def attach(self, block: Block) -> None:
        """Attach a block to the innermost container.

        Content placed directly inside ``=over`` before any ``=item`` goes
        into an implicit item.
        """
        top = self.top
        if top.frame_type == FrameType.LIST:
            top = self.push(Frame(FrameType.ITEM, block.location))
        top.children.append(block)

    def close_top(self) -> Block:
        """Pop the innermost frame and attach its node to the new top."""
        if len(self._frames) == 1:
            msg = "cannot close the document frame"
            raise IndexError(msg)
        frame = self._frames.pop()
        node = frame.to_node()
        if isinstance(node, ListItem):
            self.top.items.append(node)
        else:
            self.attach(node)
        return node

    def innermost_non_section(self) -> Frame:
        """First frame below any open sections (a directive frame or the document)."""
        for frame in reversed(self._frames):
            if frame.frame_type != FrameType.SECTION:
                return frame
        return self._frames[0]

    def innermost(self, frame_type: FrameType) -> Frame | None:
        for frame in reversed(self._frames):
            if frame.frame_type == frame_type:
                return frame
        return None

    def nearest_container(self) -> Frame | None:
        """Innermost section or region, skipping list frames."""
        for frame in reversed(self._frames):
            if frame.frame_type in (FrameType.SECTION, FrameType.REGION):
                return frame
        return None

    def in_list(self) -> bool:
        """True if the innermost non-section frame is a list or item."""
        frame = self.innermost_non_section()
        return frame.frame_type in (FrameType.LIST, FrameType.ITEM)

    def state(self) -> ParserState:
        frame_type = self.top.frame_type
        if frame_type in DIRECTIVE_FRAMES:
            return ParserState.IN_DIRECTIVE_BLOCK
        if frame_type == FrameType.SECTION:
            return ParserState.IN_SECTION
        return ParserState.OUTSIDE

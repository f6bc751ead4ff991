"""Typed tree nodes for Podita.

All nodes are frozen dataclasses with slots, so a parsed Document can be
shared across threads and compared structurally.

Node Hierarchy:
Node (base)
├── Block (structural content)
│   ├── Document
│   ├── Section
│   ├── Paragraph
│   ├── CodeListing
│   ├── Sidebar
│   ├── IndexMarker
│   ├── CrossReference
│   ├── List
│   └── ListItem
└── Inline (spans inside text-bearing blocks)
    ├── Text
    ├── Bold
    ├── Italic
    ├── CodeSpan
    ├── IndexTag
    ├── CrossRefTag
    ├── AnchorTag
    ├── Link
    └── Footnote

Text-bearing blocks keep their raw markup (``text``/``title``/``label``)
next to the resolved inline children. The parser fills in the raw markup;
the resolver fills in the children. Titles and labels written on a
directive line also record where the argument starts
(``title_location``/``label_location``) so inline diagnostics point at
the right column.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from podita.anchors import AnchorTable
from podita.errors import RecoverableError
from podita.location import SourceLocation


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all tree nodes."""

    location: SourceLocation


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Plain text run."""

    content: str


@dataclass(frozen=True, slots=True)
class Bold(Node):
    """``B<text>``"""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Italic(Node):
    """``I<text>``, also used for ``F<file>`` and ``R<replaceable>``.

    ``code`` records which format code produced the span.
    """

    children: tuple[Inline, ...]
    code: Literal["I", "F", "R"] = "I"


@dataclass(frozen=True, slots=True)
class CodeSpan(Node):
    """``C<code>``, flattened to a literal string."""

    code: str


@dataclass(frozen=True, slots=True)
class IndexTag(Node):
    """``X<term>``: index entry, invisible in running text."""

    term: str


@dataclass(frozen=True, slots=True)
class AnchorTag(Node):
    """``Z<name>``: anchor declaration, invisible in running text."""

    name: str


@dataclass(frozen=True, slots=True)
class CrossRefTag(Node):
    """``L<target>`` or ``L<label|target>`` pointing at a document anchor.

    ``resolved``, ``title`` and ``target_file`` are filled in by the
    resolver. ``title`` is the heading text of the target when it is a
    section or sidebar; ``target_file`` names the source file of a target
    declared in another document.
    """

    target: str
    label: str | None = None
    resolved: bool = False
    title: str | None = None
    target_file: str | None = None


@dataclass(frozen=True, slots=True)
class Link(Node):
    """External hyperlink: ``U<url>``, ``L<http://...>`` or ``L<text|url>``."""

    url: str
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True, slots=True)
class Footnote(Node):
    """``N<note text>``"""

    children: tuple[Inline, ...]


Inline: TypeAlias = (
    Text | Bold | Italic | CodeSpan | IndexTag | AnchorTag | CrossRefTag | Link | Footnote
)


# =============================================================================
# Block Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Paragraph(Node):
    """Ordinary text paragraph.

    Markup: lines of text separated from other blocks by blank lines.
    HTML: <p>text</p>

    """

    text: str
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True, slots=True)
class CodeListing(Node):
    """Literal code, never touched by inline resolution.

    Markup: ``=begin programlisting`` ... ``=end programlisting``, or an
    indented (verbatim) paragraph, which gets ``kind="verbatim"``.
    HTML: <pre><code>code</code></pre>

    """

    code: str
    kind: str = "verbatim"
    title: str | None = None
    title_children: tuple[Inline, ...] = ()
    title_location: SourceLocation | None = None


@dataclass(frozen=True, slots=True)
class IndexMarker(Node):
    """Paragraph holding nothing but ``X<>`` and ``Z<>`` tags."""

    text: str
    terms: tuple[str, ...] = ()
    anchors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CrossReference(Node):
    """Paragraph made of a single ``L<>`` tag (a pointer to another chapter)."""

    text: str
    target: str
    label: str | None = None
    resolved: bool = False
    title: str | None = None
    target_file: str | None = None


@dataclass(frozen=True, slots=True)
class ListItem(Node):
    """``=item`` entry.

    ``label`` is the raw term of a definition list item; bullet and number
    items have no label.
    """

    children: tuple[Block, ...]
    label: str | None = None
    label_children: tuple[Inline, ...] = ()
    label_location: SourceLocation | None = None


@dataclass(frozen=True, slots=True)
class List(Node):
    """``=over`` ... ``=back`` region."""

    items: tuple[ListItem, ...]
    kind: Literal["bullet", "number", "definition"] = "bullet"
    indent: int = 4


@dataclass(frozen=True, slots=True)
class Sidebar(Node):
    """Non-code ``=begin KIND`` region (sidebar, tip, note, epigraph...)."""

    kind: str
    children: tuple[Block, ...]
    title: str | None = None
    title_children: tuple[Inline, ...] = ()
    anchors: tuple[str, ...] = ()
    title_location: SourceLocation | None = None


@dataclass(frozen=True, slots=True)
class Section(Node):
    """Heading plus everything up to the next heading of the same or a
    shallower level.

    Markup: ``=head2 Title``
    HTML: <section><h2>Title</h2>...</section>

    """

    level: Literal[1, 2, 3, 4]
    title: str
    children: tuple[Block, ...]
    title_children: tuple[Inline, ...] = ()
    anchors: tuple[str, ...] = ()
    title_location: SourceLocation | None = None


@dataclass(frozen=True, slots=True)
class Document(Node):
    """Root node: top-level blocks plus the document's anchor table.

    ``diagnostics`` holds recoverable issues found while parsing.
    ``resolved`` is set once inline spans and cross references have been
    resolved.
    """

    children: tuple[Block, ...]
    anchors: AnchorTable = field(default_factory=AnchorTable)
    diagnostics: tuple[RecoverableError, ...] = field(default=(), compare=False)
    resolved: bool = False


Block: TypeAlias = (
    Document
    | Section
    | Paragraph
    | CodeListing
    | Sidebar
    | IndexMarker
    | CrossReference
    | List
    | ListItem
)

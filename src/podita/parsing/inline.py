"""Inline span building.

Turns the InlineLexer token stream into a tuple of typed inline nodes.
Used twice in the pipeline: by the block parser, which only needs to know
which anchors and tags a paragraph holds, and by the resolver, which keeps
the spans and resolves cross references.

Thread Safety:
All functions are pure apart from appending to a caller-owned
diagnostics list.

"""

from __future__ import annotations

import html
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from podita.errors import RecoverableError, UnknownEntityError
from podita.lexer.inline import InlineLexer
from podita.location import SourceLocation
from podita.nodes import (
    AnchorTag,
    Bold,
    CodeSpan,
    CrossRefTag,
    Footnote,
    IndexTag,
    Inline,
    Italic,
    Link,
    Text,
)
from podita.tokens import InlineTokenType
from podita.utils.text import flatten_text

_URL_RE = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.-]*://|mailto:)")

# POD escapes that are not HTML entity names
_POD_ENTITIES: dict[str, str] = {
    "lt": "<",
    "gt": ">",
    "verbar": "|",
    "sol": "/",
}

NBSP = "\u00a0"


@dataclass(slots=True)
class _Frame:
    code: str
    offset: int
    children: list[Inline] = field(default_factory=list)


def decode_entity(name: str) -> str | None:
    """Decode the body of an ``E<...>`` escape.

    Accepts the POD names (lt, gt, verbar, sol), decimal, octal (leading 0)
    and hex (leading 0x) code points, and HTML entity names.

    Examples:
        >>> decode_entity("lt"), decode_entity("0x41"), decode_entity("eacute")
        ('<', 'A', 'é')
        >>> decode_entity("nosuch") is None
        True
    """
    if name in _POD_ENTITIES:
        return _POD_ENTITIES[name]
    try:
        if name[:2] in ("0x", "0X"):
            code_point = int(name[2:], 16)
        elif len(name) > 1 and name[0] == "0" and name.isdigit():
            code_point = int(name, 8)
        elif name.isdigit():
            code_point = int(name)
        else:
            decoded = html.unescape(f"&{name};")
            return None if decoded == f"&{name};" else decoded
        return chr(code_point)
    except (ValueError, OverflowError):
        return None


def parse_inline(
    text: str,
    location: SourceLocation,
    diagnostics: list[RecoverableError] | None = None,
) -> tuple[Inline, ...]:
    """Parse paragraph text into inline spans.

    Cross-reference tags come back unresolved.

    Args:
        text: Raw paragraph or title text
        location: Where ``text`` starts in the source
        diagnostics: Receives UnknownEntityError for undecodable ``E<>``

    Raises:
        LexError: If a format code is unterminated
    """
    root = _Frame(code="", offset=0)
    stack = [root]

    for token in InlineLexer(text, location).tokenize():
        if token.type == InlineTokenType.TEXT:
            stack[-1].children.append(
                Text(location=location.advanced(text, token.offset), content=token.value)
            )
        elif token.type == InlineTokenType.FORMAT_OPEN:
            stack.append(_Frame(code=token.value, offset=token.offset))
        else:
            frame = stack.pop()
            span_location = location.advanced(text, frame.offset)
            stack[-1].children.extend(_build_span(frame, span_location, diagnostics))

    return _merge_text(root.children)


def _build_span(
    frame: _Frame,
    location: SourceLocation,
    diagnostics: list[RecoverableError] | None,
) -> list[Inline]:
    """Build the node(s) for a closed format code."""
    children = _merge_text(frame.children)
    match frame.code:
        case "B":
            return [Bold(location=location, children=children)]
        case "I" | "F" | "R":
            return [Italic(location=location, children=children, code=frame.code)]
        case "C":
            return [CodeSpan(location=location, code=flatten_text(children))]
        case "X":
            return [IndexTag(location=location, term=flatten_text(children).strip())]
        case "Z":
            return [AnchorTag(location=location, name=flatten_text(children).strip())]
        case "N":
            return [Footnote(location=location, children=children)]
        case "U":
            return [Link(location=location, url=flatten_text(children).strip())]
        case "S":
            return [
                Text(location=c.location, content=c.content.replace(" ", NBSP))
                if isinstance(c, Text)
                else c
                for c in children
            ]
        case "E":
            name = flatten_text(children).strip()
            decoded = decode_entity(name)
            if decoded is None:
                if diagnostics is not None:
                    diagnostics.append(
                        UnknownEntityError.at(location, f"unknown entity E<{name}>", entity=name)
                    )
                decoded = f"E<{name}>"
            return [Text(location=location, content=decoded)]
        case "L":
            return [_build_link(flatten_text(children), location)]
    msg = f"unhandled format code {frame.code!r}"
    raise AssertionError(msg)


def _build_link(content: str, location: SourceLocation) -> Inline:
    """``L<target>``, ``L<label|target>``; URLs become external Links."""
    label: str | None = None
    target = content.strip()
    if "|" in content:
        raw_label, target = content.split("|", 1)
        label = raw_label.strip() or None
        target = target.strip()
    if _URL_RE.match(target):
        link_children: tuple[Inline, ...] = ()
        if label:
            link_children = (Text(location=location, content=label),)
        return Link(location=location, url=target, children=link_children)
    return CrossRefTag(location=location, target=target, label=label)


def _merge_text(nodes: list[Inline]) -> tuple[Inline, ...]:
    """Coalesce adjacent Text nodes."""
    merged: list[Inline] = []
    for node in nodes:
        if isinstance(node, Text) and merged and isinstance(merged[-1], Text):
            previous = merged[-1]
            merged[-1] = Text(location=previous.location, content=previous.content + node.content)
        else:
            merged.append(node)
    return tuple(merged)


def iter_spans(spans: tuple[Inline, ...]) -> Iterator[Inline]:
    """Depth-first walk over spans and their nested children."""
    for span in spans:
        yield span
        children = getattr(span, "children", None)
        if children:
            yield from iter_spans(children)


def is_blank(span: Inline) -> bool:
    return isinstance(span, Text) and not span.content.strip()

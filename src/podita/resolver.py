"""Inline resolution: raw block text to resolved inline spans.

The block parser keeps text-bearing blocks as raw markup. The resolver
re-tokenizes that markup into typed spans and resolves every cross
reference against the document's AnchorTable, then against an optional
external table shared by several documents.

Unresolvable references never abort resolution. Each one becomes an
UnresolvedReferenceError in the returned diagnostics and the tag is left
with ``resolved=False`` for the renderer to flag.

Example:
    >>> from podita.parser import Parser
    >>> doc = Parser("=head1 A Z<a>\\n\\nSee L<a>.\\n").parse()
    >>> result = resolve(doc)
    >>> result.diagnostics
    ()

Thread Safety:
    resolve() is pure: it reads a frozen Document and returns a new one.

"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass

from podita.anchors import AnchorTarget
from podita.errors import RecoverableError, UnresolvedReferenceError
from podita.location import SourceLocation
from podita.nodes import (
    Bold,
    CodeListing,
    CrossReference,
    CrossRefTag,
    Document,
    Footnote,
    Inline,
    Italic,
    Link,
    ListItem,
    Node,
    Paragraph,
    Section,
    Sidebar,
)
from podita.parsing.inline import parse_inline
from podita.utils.logger import get_logger
from podita.visitor import transform

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ResolveResult:
    """A resolved Document plus every diagnostic found so far.

    ``diagnostics`` starts with the parse diagnostics carried on the input
    Document, followed by resolution diagnostics in document order.
    """

    document: Document
    diagnostics: tuple[RecoverableError, ...]


class _Resolver:
    __slots__ = ("_local", "_external", "_source_file", "_diagnostics")

    def __init__(
        self,
        local: Mapping[str, AnchorTarget],
        external: Mapping[str, AnchorTarget] | None,
        source_file: str | None = None,
    ) -> None:
        self._local = local
        self._external = external
        self._source_file = source_file
        self._diagnostics: list[RecoverableError] = []

    def lookup(self, name: str) -> AnchorTarget | None:
        target = self._local.get(name)
        if target is None and self._external is not None:
            target = self._external.get(name)
        return target

    def __call__(self, node: Node) -> Node:
        match node:
            case Paragraph(text=text):
                return dataclasses.replace(node, children=self._spans(text, node.location))
            case Section(title=title) | Sidebar(title=title) | CodeListing(title=title) if title:
                location = node.title_location or node.location
                return dataclasses.replace(node, title_children=self._spans(title, location))
            case ListItem(label=label) if label:
                location = node.label_location or node.location
                return dataclasses.replace(node, label_children=self._spans(label, location))
            case CrossReference(target=target_name):
                target = self._reference(target_name, node.location)
                return dataclasses.replace(
                    node,
                    resolved=target is not None,
                    title=target.title if target is not None else None,
                    target_file=self._target_file(target),
                )
            case Document():
                return dataclasses.replace(node, resolved=True)
        return node

    def _spans(self, text: str, location: SourceLocation) -> tuple[Inline, ...]:
        spans = parse_inline(text, location, self._diagnostics)
        return tuple(self._resolve_span(span) for span in spans)

    def _resolve_span(self, span: Inline) -> Inline:
        match span:
            case CrossRefTag(target=target_name):
                target = self._reference(target_name, span.location)
                if target is None:
                    return span
                return dataclasses.replace(
                    span,
                    resolved=True,
                    title=target.title,
                    target_file=self._target_file(target),
                )
            case Bold(children=children) | Italic(children=children) | Footnote(
                children=children
            ) | Link(children=children):
                return dataclasses.replace(
                    span, children=tuple(self._resolve_span(c) for c in children)
                )
        return span

    def _target_file(self, target: AnchorTarget | None) -> str | None:
        """Source file of a target declared in another document."""
        if target is None or self._local.get(target.name) is target:
            return None
        source_file = target.location.source_file
        if source_file is None or source_file == self._source_file:
            return None
        return source_file

    def _reference(self, name: str, location: SourceLocation) -> AnchorTarget | None:
        target = self.lookup(name)
        if target is None:
            self._diagnostics.append(
                UnresolvedReferenceError.at(
                    location, f"unresolved reference L<{name}>", target=name
                )
            )
        return target

    def diagnostics(self) -> list[RecoverableError]:
        """Resolution diagnostics sorted into document order.

        transform() visits children before their parent, so a section
        title is seen after its body.
        """
        return sorted(
            self._diagnostics,
            key=lambda d: (d.lineno or 0, d.col_offset or 0),
        )


def resolve(
    doc: Document,
    *,
    external_anchors: Mapping[str, AnchorTarget] | None = None,
) -> ResolveResult:
    """Resolve inline spans and cross references.

    Args:
        doc: Parsed Document
        external_anchors: Anchors from other documents, consulted when a
            name is not declared locally (see ``AnchorTable.combine``)

    Returns:
        ResolveResult with a new Document (``resolved=True``) and the
        combined diagnostics

    Raises:
        LexError: If a text-bearing block has an unterminated format code

    """
    resolver = _Resolver(doc.anchors, external_anchors, doc.location.source_file)
    resolved = transform(doc, resolver)
    diagnostics = (*doc.diagnostics, *resolver.diagnostics())
    resolved = dataclasses.replace(resolved, diagnostics=diagnostics)
    logger.debug(
        "%s: resolved with %d diagnostics",
        doc.location.source_file or "<string>",
        len(diagnostics),
    )
    return ResolveResult(document=resolved, diagnostics=diagnostics)

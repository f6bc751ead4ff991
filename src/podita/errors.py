"""Exception classes for Podita.

Fatal errors (LexError, StructureError, UnsupportedBlockError) abort the
pipeline for the current document. Recoverable errors are never raised by the
pipeline: they are collected into diagnostics lists and handed back to the
caller next to the parsed or resolved document.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from podita.location import SourceLocation


class PoditaError(Exception):
    """Base exception for all Podita errors."""

    pass


class ParseError(PoditaError):
    """Error tied to a position in the markup source.

    The formatted message is prefixed with ``file:line:col`` when the
    location is known.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize parse error with optional location.

        Args:
            message: Error description
            lineno: Line number where error occurred (1-indexed)
            col_offset: Column offset where error occurred (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")

    @classmethod
    def at(cls, location: SourceLocation, message: str, **kwargs: object) -> ParseError:
        """Build the error from a SourceLocation."""
        return cls(
            message,
            lineno=location.lineno,
            col_offset=location.col_offset,
            source_file=location.source_file,
            **kwargs,  # type: ignore[arg-type]
        )


class LexError(ParseError):
    """Malformed token stream, e.g. an inline format code left unterminated."""

    pass


class StructureError(ParseError):
    """Mismatched, stray, or unclosed block directives."""

    pass


class DuplicateAnchorError(StructureError):
    """An anchor name was declared twice in one document."""

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
        *,
        anchor: str = "",
    ) -> None:
        self.anchor = anchor
        super().__init__(message, lineno, col_offset, source_file)


class RecoverableError(ParseError):
    """Issue that is reported but does not stop processing."""

    pass


class UnresolvedReferenceError(RecoverableError):
    """Cross-reference whose target anchor is not declared anywhere."""

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
        *,
        target: str = "",
    ) -> None:
        self.target = target
        super().__init__(message, lineno, col_offset, source_file)


class UnknownDirectiveError(RecoverableError):
    """Directive the parser does not know; the line is ignored."""

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
        *,
        directive: str = "",
    ) -> None:
        self.directive = directive
        super().__init__(message, lineno, col_offset, source_file)


class DeprecatedDirectiveError(RecoverableError):
    """Directive that still works but has a preferred replacement."""

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
        *,
        directive: str = "",
        replacement: str = "",
    ) -> None:
        self.directive = directive
        self.replacement = replacement
        super().__init__(message, lineno, col_offset, source_file)


class UnknownEntityError(RecoverableError):
    """``E<name>`` escape with a name that does not decode."""

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
        *,
        entity: str = "",
    ) -> None:
        self.entity = entity
        super().__init__(message, lineno, col_offset, source_file)


class RenderError(PoditaError):
    """Error during rendering."""

    pass


class UnsupportedBlockError(RenderError):
    """Renderer met a node type it has no template for.

    Raised instead of dropping the node so content is never lost silently.
    """

    def __init__(self, node_type: str, renderer: str) -> None:
        """Initialize unsupported block error.

        Args:
            node_type: Class name of the offending node
            renderer: Name of the renderer that could not handle it
        """
        self.node_type = node_type
        self.renderer = renderer
        super().__init__(f"{renderer}: no template for node type '{node_type}'")


Diagnostic: TypeAlias = RecoverableError

"""Source location tracking for error messages and debugging.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Position of a node or token in the markup source.

    Line and column are 1-indexed; offsets are absolute indices into the
    source string of the document being parsed.

    Examples:
            >>> loc = SourceLocation(lineno=3, col_offset=1, source_file="ch01.pod")
            >>> str(loc)
            'ch01.pod:3:1'

    """

    lineno: int
    col_offset: int
    offset: int = 0
    end_offset: int = 0
    source_file: str | None = None

    def __str__(self) -> str:
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

    def advanced(self, text: str, count: int) -> SourceLocation:
        """Location of ``text[count]`` given that ``text`` starts here.

        Used to point inline diagnostics at the exact format code inside a
        multi-line paragraph.
        """
        prefix = text[:count]
        newlines = prefix.count("\n")
        if newlines:
            col = count - prefix.rfind("\n")
        else:
            col = self.col_offset + count
        return SourceLocation(
            lineno=self.lineno + newlines,
            col_offset=col,
            offset=self.offset + count,
            end_offset=self.offset + count,
            source_file=self.source_file,
        )

    @classmethod
    def unknown(cls) -> SourceLocation:
        """Placeholder for synthetic nodes."""
        return cls(lineno=0, col_offset=0)

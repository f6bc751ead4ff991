"""StringBuilder for O(n) string accumulation.

Renderers append fragments to a list and join once at the end, avoiding
quadratic string concatenation on long chapters.

Thread Safety:
StringBuilder instances are local to each render() call.
No shared mutable state.

"""

from __future__ import annotations


class StringBuilder:
    """Efficient string accumulator.

    Usage:
            >>> sb = StringBuilder()
            >>> sb.append("<h1>").append("Hello").append("</h1>")
            >>> sb.build()
            '<h1>Hello</h1>'

    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        self._parts: list[str] = []

    def append(self, s: str) -> StringBuilder:
        """Append a string (empty strings are skipped). Returns self."""
        if s:
            self._parts.append(s)
        return self

    def append_line(self, s: str = "") -> StringBuilder:
        """Append a string followed by newline. Returns self."""
        if s:
            self._parts.append(s)
        self._parts.append("\n")
        return self

    def extend(self, strings: list[str]) -> StringBuilder:
        """Append multiple strings at once. Returns self."""
        self._parts.extend(s for s in strings if s)
        return self

    def separate(self) -> StringBuilder:
        """Start a new paragraph: ensure the output so far ends in a blank line.

        Does nothing on an empty builder, so the first block is never
        preceded by blank lines.
        """
        if not self._parts:
            return self
        tail = self._parts[-1]
        if tail.endswith("\n\n"):
            return self
        if tail.endswith("\n"):
            if len(tail) == 1 and len(self._parts) > 1 and self._parts[-2].endswith("\n"):
                return self
            self._parts.append("\n")
        else:
            self._parts.append("\n\n")
        return self

    def build(self) -> str:
        """Join all parts into the final string."""
        return "".join(self._parts)

    def __len__(self) -> int:
        """Return number of parts (not total length)."""
        return len(self._parts)

    def __bool__(self) -> bool:
        """Return True if any parts have been appended."""
        return bool(self._parts)

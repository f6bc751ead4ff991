"""Anchor table: the document-wide registry of ``Z<name>`` declarations.

The parser declares anchors while it builds the block tree, then freezes the
table before handing the Document out. From then on the table is a
read-only mapping consulted by the resolver and the renderers.

Each Document owns its table; there is no process-wide registry. A
multi-document build that wants cross-chapter references combines several
tables with ``AnchorTable.combine`` and passes the result to the resolver as
``external_anchors``.

Thread Safety:
A frozen table is never mutated and is safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from podita.errors import DuplicateAnchorError
from podita.location import SourceLocation


@dataclass(frozen=True, slots=True)
class AnchorTarget:
    """What an anchor points at.

    Attributes:
        name: Anchor name as written in ``Z<name>``
        node_type: Class name of the declaring node (``Section``,
            ``Sidebar``, ``Paragraph``, ``IndexMarker``)
        title: Heading or sidebar title of the target, raw markup stripped
            of format codes; None for untitled targets
        location: Where the ``Z<>`` tag was written

    """

    name: str
    node_type: str
    title: str | None
    location: SourceLocation


class AnchorTable(Mapping[str, AnchorTarget]):
    """Mapping of unique anchor name to its AnchorTarget.

    Usage:
            >>> table = AnchorTable()
            >>> table.declare(AnchorTarget("intro", "Section", "Intro", loc))
            >>> table.freeze()
            >>> table["intro"].title
            'Intro'

    """

    __slots__ = ("_entries", "_frozen")

    def __init__(self, targets: Iterable[AnchorTarget] = ()) -> None:
        self._entries: dict[str, AnchorTarget] = {}
        self._frozen = False
        for target in targets:
            self.declare(target)

    def declare(self, target: AnchorTarget) -> None:
        """Register an anchor.

        Raises:
            DuplicateAnchorError: If the name is already declared
            RuntimeError: If the table has been frozen
        """
        if self._frozen:
            msg = "AnchorTable is frozen; anchors can only be declared while parsing"
            raise RuntimeError(msg)
        existing = self._entries.get(target.name)
        if existing is not None:
            raise DuplicateAnchorError.at(
                target.location,
                f"anchor '{target.name}' already declared at {existing.location}",
                anchor=target.name,
            )
        self._entries[target.name] = target

    def freeze(self) -> AnchorTable:
        """Make the table read-only. Returns self."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @classmethod
    def combine(cls, tables: Iterable[AnchorTable]) -> AnchorTable:
        """Merge several document tables into one frozen table.

        Raises:
            DuplicateAnchorError: If two documents declare the same name
        """
        combined = cls()
        for table in tables:
            for target in table.values():
                combined.declare(target)
        return combined.freeze()

    def __getitem__(self, name: str) -> AnchorTarget:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"AnchorTable({list(self._entries)!r}, {state})"

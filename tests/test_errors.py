"""Exception hierarchy and message formatting."""

import pytest

from podita.errors import (
    DeprecatedDirectiveError,
    DuplicateAnchorError,
    LexError,
    ParseError,
    PoditaError,
    RecoverableError,
    RenderError,
    StructureError,
    UnknownDirectiveError,
    UnknownEntityError,
    UnresolvedReferenceError,
    UnsupportedBlockError,
)
from podita.location import SourceLocation


class TestHierarchy:
    @pytest.mark.parametrize(
        ("cls", "base"),
        [
            (LexError, ParseError),
            (StructureError, ParseError),
            (DuplicateAnchorError, StructureError),
            (RecoverableError, ParseError),
            (UnresolvedReferenceError, RecoverableError),
            (UnknownDirectiveError, RecoverableError),
            (DeprecatedDirectiveError, RecoverableError),
            (UnknownEntityError, RecoverableError),
            (UnsupportedBlockError, RenderError),
            (ParseError, PoditaError),
            (RenderError, PoditaError),
        ],
    )
    def test_subclass(self, cls: type, base: type) -> None:
        assert issubclass(cls, base)

    def test_fatal_and_recoverable_are_disjoint(self) -> None:
        assert not issubclass(StructureError, RecoverableError)
        assert not issubclass(LexError, RecoverableError)


class TestMessages:
    def test_full_location_prefix(self) -> None:
        err = LexError("unterminated format code B<", lineno=3, col_offset=7, source_file="a.pod")
        assert str(err) == "a.pod:3:7 unterminated format code B<"
        assert err.message == "unterminated format code B<"

    def test_line_only(self) -> None:
        assert str(StructureError("oops", lineno=2)) == "2 oops"

    def test_no_location(self) -> None:
        assert str(StructureError("oops")) == "oops"

    def test_at_location(self) -> None:
        loc = SourceLocation(lineno=4, col_offset=2, source_file="ch.pod")
        err = UnresolvedReferenceError.at(loc, "unresolved reference L<x>", target="x")
        assert isinstance(err, UnresolvedReferenceError)
        assert (err.lineno, err.col_offset, err.source_file) == (4, 2, "ch.pod")
        assert err.target == "x"
        assert str(err) == "ch.pod:4:2 unresolved reference L<x>"

    def test_unsupported_block(self) -> None:
        err = UnsupportedBlockError("Table", "html")
        assert str(err) == "html: no template for node type 'Table'"


class TestLocationStr:
    def test_with_file(self) -> None:
        assert str(SourceLocation(lineno=3, col_offset=1, source_file="ch01.pod")) == "ch01.pod:3:1"

    def test_without_file(self) -> None:
        assert str(SourceLocation(lineno=3, col_offset=5)) == "3:5"

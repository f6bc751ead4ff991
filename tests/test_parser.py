"""Block parser tests: sections, regions, lists, paragraphs and anchors."""

import pytest

from podita import parse
from podita.config import ParseConfig
from podita.errors import DeprecatedDirectiveError, LexError, UnknownDirectiveError
from podita.nodes import (
    CodeListing,
    CrossReference,
    Document,
    IndexMarker,
    List,
    Paragraph,
    Section,
    Sidebar,
)
from podita.parser import Parser
from podita.parsing import ParserState


class TestDocuments:
    """Basic document shapes."""

    def test_empty_input(self) -> None:
        doc = parse("")
        assert isinstance(doc, Document)
        assert doc.children == ()
        assert len(doc.anchors) == 0
        assert doc.diagnostics == ()
        assert doc.resolved is False

    def test_heading_and_paragraph(self) -> None:
        doc = parse("=head1 Title\n\nHello world.\n")
        assert len(doc.children) == 1
        section = doc.children[0]
        assert isinstance(section, Section)
        assert section.level == 1
        assert section.title == "Title"
        assert len(section.children) == 1
        paragraph = section.children[0]
        assert isinstance(paragraph, Paragraph)
        assert paragraph.text == "Hello world."

    def test_blocks_before_first_heading(self) -> None:
        doc = parse("Preface text.\n\n=head1 One\n")
        assert isinstance(doc.children[0], Paragraph)
        assert isinstance(doc.children[1], Section)

    def test_multi_line_paragraph(self) -> None:
        doc = parse("line one\nline two\n\nnext\n")
        assert [p.text for p in doc.children] == ["line one\nline two", "next"]

    def test_document_location(self) -> None:
        source = "=head1 A\n"
        doc = parse(source, source_file="ch01.pod")
        assert doc.location.source_file == "ch01.pod"
        assert doc.location.end_offset == len(source)

    def test_passive_commands_are_ignored(self) -> None:
        doc = parse("=pod\n\n=encoding utf8\n\ntext\n\n=cut\n")
        assert [type(b) for b in doc.children] == [Paragraph]
        assert doc.diagnostics == ()


class TestSections:
    """Heading nesting."""

    def test_nested_sections(self) -> None:
        doc = parse("=head1 A\n\n=head2 B\n\ntext\n\n=head1 C\n")
        assert [s.title for s in doc.children] == ["A", "C"]
        inner = doc.children[0].children[0]
        assert isinstance(inner, Section)
        assert inner.title == "B"
        assert inner.children[0].text == "text"

    def test_same_level_closes_previous(self) -> None:
        doc = parse("=head2 A\n=head2 B\n")
        assert [s.title for s in doc.children] == ["A", "B"]

    def test_shallower_heading_closes_deeper_sections(self) -> None:
        doc = parse("=head1 A\n=head2 B\n=head3 C\n=head2 D\n")
        a = doc.children[0]
        assert [s.title for s in a.children] == ["B", "D"]
        assert a.children[0].children[0].title == "C"

    def test_skipped_level_still_nests(self) -> None:
        doc = parse("=head1 A\n=head3 C\n")
        assert doc.children[0].children[0].level == 3

    def test_head0_is_deprecated_level_one(self) -> None:
        doc = parse("=head0 Old\n")
        assert doc.children[0].level == 1
        (diagnostic,) = doc.diagnostics
        assert isinstance(diagnostic, DeprecatedDirectiveError)
        assert diagnostic.directive == "head0"
        assert diagnostic.replacement == "head1"
        assert diagnostic.lineno == 1


class TestRegions:
    """=begin/=end and =for."""

    def test_code_listing(self) -> None:
        doc = parse("=begin code\nfoo();\n=end code\n")
        (listing,) = doc.children
        assert isinstance(listing, CodeListing)
        assert listing.code == "foo();\n"
        assert listing.kind == "code"

    def test_listing_keeps_markup_literal(self) -> None:
        doc = parse("=begin programlisting Example 1\n\nB<not bold> L<nowhere\n\n=end programlisting\n")
        (listing,) = doc.children
        assert listing.kind == "programlisting"
        assert listing.title == "Example 1"
        assert listing.code == "\nB<not bold> L<nowhere\n\n"

    def test_sidebar(self) -> None:
        doc = parse("=begin sidebar A Tip\n\nInside.\n\n=end sidebar\n")
        (sidebar,) = doc.children
        assert isinstance(sidebar, Sidebar)
        assert sidebar.kind == "sidebar"
        assert sidebar.title == "A Tip"
        assert [c.text for c in sidebar.children] == ["Inside."]

    def test_sections_inside_region_close_with_it(self) -> None:
        doc = parse("=begin sidebar\n\n=head2 Inner\n\ntext\n\n=end sidebar\n\nafter\n")
        sidebar, after = doc.children
        assert isinstance(sidebar.children[0], Section)
        assert after.text == "after"

    def test_heading_inside_region_does_not_close_outer_section(self) -> None:
        doc = parse("=head2 Outer\n\n=begin tip\n\n=head1 Inner\n\n=end tip\n\nstill outer\n")
        (outer,) = doc.children
        assert [type(c) for c in outer.children] == [Sidebar, Paragraph]

    def test_for_comment_is_dropped(self) -> None:
        assert parse("=for comment not shown\nstill not shown\n").children == ()

    def test_for_code_kind_is_listing(self) -> None:
        (listing,) = parse("=for code print 1\n").children
        assert isinstance(listing, CodeListing)
        assert listing.code == "print 1\n"

    def test_for_other_kind_is_sidebar(self) -> None:
        (sidebar,) = parse("=for tip Short tip.\nSecond line.\n").children
        assert isinstance(sidebar, Sidebar)
        assert sidebar.kind == "tip"
        assert sidebar.children[0].text == "Short tip.\nSecond line."

    def test_custom_code_kinds(self) -> None:
        config = ParseConfig(code_kinds=frozenset({"perl"}))
        (listing,) = parse("=begin perl\n=head1 x\n=end perl\n", config=config).children
        assert isinstance(listing, CodeListing)
        assert listing.code == "=head1 x\n"


class TestVerbatim:
    def test_indented_paragraph_is_listing(self) -> None:
        (listing,) = parse("  my $x = 1;\n  print $x;\n").children
        assert isinstance(listing, CodeListing)
        assert listing.kind == "verbatim"
        assert listing.code == "  my $x = 1;\n  print $x;\n"

    def test_consecutive_verbatim_paragraphs_merge(self) -> None:
        doc = parse("  a\n\n\n  b\n\npara\n")
        listing, paragraph = doc.children
        assert listing.code == "  a\n\n\n  b\n"
        assert paragraph.text == "para"

    def test_verbatim_is_not_inline_parsed(self) -> None:
        (listing,) = parse("  B<unclosed\n").children
        assert listing.code == "  B<unclosed\n"


class TestLists:
    def test_bullet_list(self) -> None:
        doc = parse("=over 4\n\n=item *\n\nOne\n\n=item *\n\nTwo\n\n=back\n")
        (lst,) = doc.children
        assert isinstance(lst, List)
        assert lst.kind == "bullet"
        assert lst.indent == 4
        assert [item.children[0].text for item in lst.items] == ["One", "Two"]

    def test_number_list_with_inline_text(self) -> None:
        (lst,) = parse("=over\n\n=item 1. First\n\n=item 2. Second\n\n=back\n").children
        assert lst.kind == "number"
        assert [item.children[0].text for item in lst.items] == ["First", "Second"]

    def test_definition_list(self) -> None:
        (lst,) = parse("=over\n\n=item Term\n\nDefinition.\n\n=back\n").children
        assert lst.kind == "definition"
        assert lst.items[0].label == "Term"
        assert lst.items[0].children[0].text == "Definition."

    def test_nested_list(self) -> None:
        source = "=over\n\n=item *\n\n=over\n\n=item *\n\ninner\n\n=back\n\n=back\n"
        (outer,) = parse(source).children
        inner = outer.items[0].children[0]
        assert isinstance(inner, List)
        assert inner.items[0].children[0].text == "inner"

    def test_content_before_first_item(self) -> None:
        (lst,) = parse("=over\n\nloose\n\n=item *\n\nx\n\n=back\n").children
        assert len(lst.items) == 2
        assert lst.items[0].children[0].text == "loose"

    def test_empty_list(self) -> None:
        (lst,) = parse("=over\n\n=back\n").children
        assert lst.items == ()
        assert lst.kind == "bullet"


class TestParagraphKinds:
    """Paragraph classification into IndexMarker and CrossReference."""

    def test_index_marker(self) -> None:
        doc = parse("=head1 A\n\nX<term>Z<anchor>\n")
        marker = doc.children[0].children[0]
        assert isinstance(marker, IndexMarker)
        assert marker.terms == ("term",)
        assert marker.anchors == ("anchor",)

    def test_index_marker_with_whitespace(self) -> None:
        doc = parse("X<one> X<two>\n")
        assert doc.children[0].terms == ("one", "two")

    def test_cross_reference(self) -> None:
        (ref,) = parse("L<See it|intro>\n").children
        assert isinstance(ref, CrossReference)
        assert ref.target == "intro"
        assert ref.label == "See it"
        assert ref.resolved is False

    def test_url_link_is_a_paragraph(self) -> None:
        (paragraph,) = parse("L<https://example.com>\n").children
        assert isinstance(paragraph, Paragraph)

    def test_mixed_text_is_a_paragraph(self) -> None:
        (paragraph,) = parse("See L<intro> for more.\n").children
        assert isinstance(paragraph, Paragraph)

    def test_unterminated_code_is_fatal(self) -> None:
        with pytest.raises(LexError) as exc_info:
            parse("=head1 A\n\nsome B<bold\ntext\n")
        assert exc_info.value.lineno == 3

    def test_unterminated_code_in_for_text(self) -> None:
        with pytest.raises(LexError) as exc_info:
            parse("=for tip Some B<bold\n")
        assert (exc_info.value.lineno, exc_info.value.col_offset) == (1, 15)

    def test_unterminated_code_on_for_continuation_line(self) -> None:
        with pytest.raises(LexError) as exc_info:
            parse("=for tip\nsome B<bold\n")
        assert (exc_info.value.lineno, exc_info.value.col_offset) == (2, 6)


class TestAnchors:
    """Anchor declaration while parsing."""

    def test_title_anchor_targets_section(self) -> None:
        doc = parse("=head1 Intro Z<intro>\n")
        assert doc.children[0].anchors == ("intro",)
        target = doc.anchors["intro"]
        assert target.node_type == "Section"
        assert target.title == "Intro"
        assert target.location.lineno == 1
        assert target.location.col_offset > 1

    def test_marker_anchor_targets_enclosing_section(self) -> None:
        doc = parse("=head1 A\n\n=head2 B\n\nZ<b-anchor>\n")
        inner = doc.children[0].children[0]
        assert inner.anchors == ("b-anchor",)
        assert doc.anchors["b-anchor"].title == "B"

    def test_marker_anchor_inside_sidebar(self) -> None:
        doc = parse("=head1 A\n\n=begin sidebar Box\n\nZ<box>\n\n=end sidebar\n")
        sidebar = doc.children[0].children[0]
        assert sidebar.anchors == ("box",)
        assert doc.anchors["box"].node_type == "Sidebar"
        assert doc.anchors["box"].title == "Box"

    def test_top_level_marker_anchor(self) -> None:
        doc = parse("Z<top>\n")
        assert doc.anchors["top"].node_type == "IndexMarker"

    def test_paragraph_anchor(self) -> None:
        doc = parse("=head1 A\n\nSome Z<p1> text.\n")
        assert doc.anchors["p1"].node_type == "Paragraph"
        assert doc.children[0].anchors == ()

    def test_table_is_frozen(self) -> None:
        assert parse("=head1 A Z<a>\n").anchors.frozen


class TestParserState:
    def test_initial_state(self) -> None:
        assert Parser("").state == ParserState.OUTSIDE

    def test_parse_config_is_per_call(self) -> None:
        doc = parse("=frobnicate\n")
        assert isinstance(doc.diagnostics[0], UnknownDirectiveError)
        assert doc.diagnostics[0].directive == "frobnicate"

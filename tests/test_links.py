"""Tests for links, images and reference definitions."""

import pytest

from gfmark import parse, render
from gfmark.nodes import Image, Link, Paragraph, Text
from gfmark.parsing.references import (
    ReferenceTable,
    extract_reference_definitions,
    parse_link_destination,
    parse_link_title,
)
from gfmark.utils.text import normalize_label


class TestInlineLinks:
    def test_basic(self) -> None:
        assert render("[a](http://x.com)") == '<p><a href="http://x.com">a</a></p>\n'

    def test_title(self) -> None:
        html = render('[a](/u "the title")')
        assert html == '<p><a href="/u" title="the title">a</a></p>\n'

    @pytest.mark.parametrize("source", ["[a](/u 'T')", "[a](/u (T))", '[a](/u "T")'])
    def test_title_delimiters(self, source: str) -> None:
        assert render(source) == '<p><a href="/u" title="T">a</a></p>\n'

    def test_angle_destination(self) -> None:
        assert render("[a](</my url>)") == '<p><a href="/my%20url">a</a></p>\n'

    def test_empty_destination(self) -> None:
        assert render("[a]()") == '<p><a href="">a</a></p>\n'

    def test_balanced_parentheses(self) -> None:
        assert render("[a](/u(1))") == '<p><a href="/u(1)">a</a></p>\n'

    def test_link_text_markup(self) -> None:
        assert render("[*a* `b`](/u)") == '<p><a href="/u"><em>a</em> <code>b</code></a></p>\n'

    def test_links_do_not_nest(self) -> None:
        html = render("[a [b](/inner) c](/outer)")
        assert html == '<p>[a <a href="/inner">b</a> c](/outer)</p>\n'

    def test_no_space_before_parenthesis(self) -> None:
        assert render("[a] (/u)") == "<p>[a] (/u)</p>\n"

    def test_attribute_escaping(self) -> None:
        html = render('[a](/u?x="1"&y=2 "say \\"hi\\"")')
        assert html == '<p><a href="/u?x=%221%22&amp;y=2" title="say &quot;hi&quot;">a</a></p>\n'

    def test_tree(self) -> None:
        para = parse("[a](/u)").children[0]
        assert isinstance(para, Paragraph)
        (link,) = para.children
        assert isinstance(link, Link)
        assert link.url == "/u"
        assert link.title is None


class TestReferenceLinks:
    def test_definition_before_use(self) -> None:
        html = render('[foo]: /url "title"\n\n[foo]')
        assert html == '<p><a href="/url" title="title">foo</a></p>\n'

    def test_definition_after_use(self) -> None:
        html = render('[foo]\n\n[foo]: /url "title"')
        assert html == '<p><a href="/url" title="title">foo</a></p>\n'

    def test_full_reference(self) -> None:
        assert render("[text][ref]\n\n[ref]: /r") == '<p><a href="/r">text</a></p>\n'

    def test_collapsed_reference(self) -> None:
        assert render("[ref][]\n\n[ref]: /r") == '<p><a href="/r">ref</a></p>\n'

    def test_label_normalization(self) -> None:
        html = render("[Foo  Bar]\n\n[foo bar]: /u")
        assert html == '<p><a href="/u">Foo  Bar</a></p>\n'

    def test_first_definition_wins(self) -> None:
        html = render("[a]: /one\n[a]: /two\n\n[a]")
        assert html == '<p><a href="/one">a</a></p>\n'

    def test_unresolved_reference_is_literal(self) -> None:
        assert render("[nope]") == "<p>[nope]</p>\n"
        assert render("[text][nope]") == "<p>[text][nope]</p>\n"

    def test_definition_inside_block_quote(self) -> None:
        assert render("> [a]: /u\n\n[a]") == '<blockquote>\n</blockquote>\n<p><a href="/u">a</a></p>\n'

    def test_definition_cannot_interrupt_paragraph(self) -> None:
        html = render("text\n[a]: /u\n\n[a]")
        assert html == "<p>text\n[a]: /u</p>\n<p>[a]</p>\n"

    def test_definition_multiline_title(self) -> None:
        html = render('[a]: /u\n  "multi\nline"\n\n[a]')
        assert html == '<p><a href="/u" title="multi\nline">a</a></p>\n'


class TestImages:
    def test_basic(self) -> None:
        html = render('![alt](/img.png "T")')
        assert html == '<p><img src="/img.png" alt="alt" title="T" /></p>\n'

    def test_alt_is_plain_text(self) -> None:
        assert render("![a *b* `c`](/i)") == '<p><img src="/i" alt="a b c" /></p>\n'

    def test_nested_image_contributes_alt(self) -> None:
        para = parse("![a ![b](/x) c](/y)").children[0]
        (image,) = para.children
        assert isinstance(image, Image)
        assert image.alt == "a b c"
        assert image.url == "/y"

    def test_link_inside_image(self) -> None:
        para = parse("![see [x](/l)](/i)").children[0]
        (image,) = para.children
        assert isinstance(image, Image)
        assert image.alt == "see x"

    def test_image_inside_link(self) -> None:
        html = render("[![i](/i.png)](/page)")
        assert html == '<p><a href="/page"><img src="/i.png" alt="i" /></a></p>\n'

    def test_reference_image(self) -> None:
        assert render("![logo]\n\n[logo]: /l.png") == '<p><img src="/l.png" alt="logo" /></p>\n'

    def test_bang_without_bracket(self) -> None:
        assert render("Hi! there") == "<p>Hi! there</p>\n"


class TestReferenceParsing:
    """Low-level pieces of reference definitions."""

    def test_destination_forms(self) -> None:
        assert parse_link_destination("<a b>", 0) == ("a b", 5)
        assert parse_link_destination("/x(y) z", 0) == ("/x(y)", 5)

    def test_destination_unbalanced(self) -> None:
        assert parse_link_destination("/x(y", 0) is None

    def test_title_forms(self) -> None:
        assert parse_link_title('"t"', 0) == ("t", 3)
        assert parse_link_title("(t)", 0) == ("t", 3)
        assert parse_link_title("x", 0) is None

    def test_extract_definitions(self) -> None:
        definitions, rest = extract_reference_definitions('[a]: /u "t"\n[b]: <v>\nrest')
        assert [(d.label, d.url, d.title) for d in definitions] == [
            ("a", "/u", "t"),
            ("b", "v", None),
        ]
        assert rest == "rest"

    def test_reference_table_first_wins(self) -> None:
        table = ReferenceTable()
        first, second = extract_reference_definitions("[A]: /1\n[a]: /2")[0]
        table.add(first)
        table.add(second)
        refs = table.freeze()
        assert refs["a"].url == "/1"
        assert len(refs) == 1

    def test_normalize_label(self) -> None:
        assert normalize_label("  Foo \n Bar ") == "foo bar"
        assert normalize_label("ẞ") == normalize_label("ss")

    def test_empty_label_is_not_a_definition(self) -> None:
        definitions, rest = extract_reference_definitions("[]: /u")
        assert definitions == []
        assert rest == "[]: /u"


class TestEscapesAndEntities:
    def test_backslash_escape_in_text(self) -> None:
        assert render("\\[not a link\\]") == "<p>[not a link]</p>\n"

    def test_backslash_before_letter_kept(self) -> None:
        assert render("\\a") == "<p>\\a</p>\n"

    def test_entities(self) -> None:
        assert render("&amp; &copy; &#65; &#x41;") == "<p>&amp; © A A</p>\n"

    def test_unknown_entity_literal(self) -> None:
        assert render("&bogus;") == "<p>&amp;bogus;</p>\n"

    def test_entity_in_destination(self) -> None:
        assert render("[a](/u?x=1&amp;y=2)") == '<p><a href="/u?x=1&amp;y=2">a</a></p>\n'

    def test_entity_node(self) -> None:
        para = parse("&copy;").children[0]
        (entity,) = para.children
        assert entity.reference == "&copy;"
        assert entity.content == "©"

    def test_hard_breaks(self) -> None:
        assert render("a  \nb") == "<p>a<br />\nb</p>\n"
        assert render("a\\\nb") == "<p>a<br />\nb</p>\n"

    def test_soft_break(self) -> None:
        para = parse("a\nb").children[0]
        assert [type(n).__name__ for n in para.children] == ["Text", "SoftBreak", "Text"]
        assert render("a\nb") == "<p>a\nb</p>\n"

    def test_text_merging(self) -> None:
        para = parse("a*b").children[0]
        assert para.children == (Text(location=para.location, content="a*b"),)

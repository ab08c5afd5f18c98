"""Tests for block structure: headings, code, quotes, HTML blocks and blank runs."""

from gfmark import RenderOptions, SanitizePolicy, parse, render
from gfmark.location import SourceLocation
from gfmark.nodes import (
    BlankRun,
    BlockQuote,
    CodeBlock,
    Heading,
    HtmlBlock,
    Paragraph,
    Text,
    ThematicBreak,
)

RAW = RenderOptions(sanitize_policy=SanitizePolicy.ALLOW_RAW_HTML)


class TestHeadings:
    def test_atx_levels(self) -> None:
        for level in range(1, 7):
            assert render("#" * level + " T") == f"<h{level}>T</h{level}>\n"

    def test_closing_sequence_removed(self) -> None:
        assert render("## Title ###") == "<h2>Title</h2>\n"

    def test_empty_heading(self) -> None:
        assert render("#") == "<h1></h1>\n"

    def test_setext(self) -> None:
        doc = parse("Title\n=====")
        heading = doc.children[0]
        assert isinstance(heading, Heading)
        assert heading.level == 1
        assert heading.style == "setext"
        assert render("Sub\n---") == "<h2>Sub</h2>\n"

    def test_multiline_setext(self) -> None:
        assert render("a\nb\n===") == "<h1>a\nb</h1>\n"

    def test_heading_interrupts_paragraph(self) -> None:
        assert render("text\n# H") == "<p>text</p>\n<h1>H</h1>\n"

    def test_location(self) -> None:
        doc = parse("\n\n# H")
        heading = doc.children[-1]
        assert heading.location.lineno == 3


class TestThematicBreak:
    def test_variants(self) -> None:
        for source in ("***", "---", "___", " - - -"):
            assert render(source) == "<hr />\n"

    def test_setext_wins_below_paragraph(self) -> None:
        doc = parse("para\n---")
        assert isinstance(doc.children[0], Heading)

    def test_after_blank_line(self) -> None:
        doc = parse("para\n\n---")
        assert isinstance(doc.children[-1], ThematicBreak)


class TestFencedCode:
    def test_info_string(self) -> None:
        html = render("```python\nprint(1)\n```")
        assert html == '<pre><code class="language-python">print(1)\n</code></pre>\n'

    def test_language_is_first_word(self) -> None:
        doc = parse("~~~ js linenos\nx\n~~~")
        block = doc.children[0]
        assert isinstance(block, CodeBlock)
        assert block.info == "js linenos"
        assert block.language == "js"

    def test_content_is_literal(self) -> None:
        assert render("```\n*a* <b>\n```") == "<pre><code>*a* &lt;b&gt;\n</code></pre>\n"

    def test_closing_fence_must_be_long_enough(self) -> None:
        html = render("````\n```\n````")
        assert html == "<pre><code>```\n</code></pre>\n"

    def test_closing_fence_same_character(self) -> None:
        html = render("```\n~~~\n```")
        assert html == "<pre><code>~~~\n</code></pre>\n"

    def test_unterminated_fence_runs_to_end(self) -> None:
        """An unterminated fence swallows the rest of the document without losing it."""
        doc = parse("```\ncode\n\n# After")
        (block,) = doc.children
        assert isinstance(block, CodeBlock)
        assert block.code == "code\n\n# After\n"
        assert render("```\ncode\n\n# After") == "<pre><code>code\n\n# After\n</code></pre>\n"

    def test_content_after_closed_fence_renders(self) -> None:
        html = render("```\ncode\n```\n\n# After")
        assert html == "<pre><code>code\n</code></pre>\n<h1>After</h1>\n"

    def test_fence_indentation_removed(self) -> None:
        assert render("  ```\n  a\n   b\n  ```") == "<pre><code>a\n b\n</code></pre>\n"

    def test_empty_fence(self) -> None:
        assert render("```\n```") == "<pre><code></code></pre>\n"


class TestIndentedCode:
    def test_basic(self) -> None:
        doc = parse("    code")
        block = doc.children[0]
        assert isinstance(block, CodeBlock)
        assert not block.fenced
        assert block.code == "code\n"

    def test_trailing_blank_lines_dropped(self) -> None:
        assert render("    a\n\n    b\n\n") == "<pre><code>a\n\nb\n</code></pre>\n"

    def test_cannot_interrupt_paragraph(self) -> None:
        assert render("para\n    more") == "<p>para\nmore</p>\n"


class TestBlockQuotes:
    def test_basic(self) -> None:
        assert render("> quote") == "<blockquote>\n<p>quote</p>\n</blockquote>\n"

    def test_lazy_continuation(self) -> None:
        assert render("> a\nb") == "<blockquote>\n<p>a\nb</p>\n</blockquote>\n"

    def test_nested(self) -> None:
        doc = parse("> > inner")
        outer = doc.children[0]
        assert isinstance(outer, BlockQuote)
        assert isinstance(outer.children[0], BlockQuote)

    def test_contains_blocks(self) -> None:
        html = render("> # H\n> - a")
        assert html == "<blockquote>\n<h1>H</h1>\n<ul>\n<li>a</li>\n</ul>\n</blockquote>\n"

    def test_blank_line_ends_quote(self) -> None:
        html = render("> a\n\nb")
        assert html == "<blockquote>\n<p>a</p>\n</blockquote>\n<p>b</p>\n"


class TestParagraphs:
    def test_blank_line_separates(self) -> None:
        assert render("a\n\nb") == "<p>a</p>\n<p>b</p>\n"

    def test_leading_and_trailing_space_trimmed(self) -> None:
        assert render("   a   ") == "<p>a</p>\n"

    def test_text_node(self) -> None:
        doc = parse("hello")
        para = doc.children[0]
        assert isinstance(para, Paragraph)
        assert para.children == (Text(location=para.location, content="hello"),)


class TestHtmlBlocks:
    def test_raw_block_passes_through(self) -> None:
        html = render("<div>\n*hi*\n</div>", RAW)
        assert html == "<div>\n*hi*\n</div>\n"

    def test_block_ends_at_blank_line(self) -> None:
        doc = parse("<div>\nx\n\n*y*")
        assert isinstance(doc.children[0], HtmlBlock)
        assert isinstance(doc.children[-1], Paragraph)

    def test_comment_block(self) -> None:
        doc = parse("<!-- a\n\nb -->\nafter")
        block = doc.children[0]
        assert isinstance(block, HtmlBlock)
        assert block.html == "<!-- a\n\nb -->"

    def test_unterminated_comment_is_text(self) -> None:
        """A comment start with no closer ahead does not swallow the document."""
        html = render("<!-- todo\n\n# Title\n\ntext")
        assert html == "<p>&lt;!-- todo</p>\n<h1>Title</h1>\n<p>text</p>\n"

    def test_unterminated_script_is_paragraph(self) -> None:
        doc = parse("<script>\nx\n\ny")
        assert [type(b) for b in doc.children] == [Paragraph, BlankRun, Paragraph]

    def test_closer_on_later_line(self) -> None:
        doc = parse("<?php\n\necho 1;\n?>\nafter")
        block = doc.children[0]
        assert isinstance(block, HtmlBlock)
        assert block.html == "<?php\n\necho 1;\n?>"
        assert isinstance(doc.children[-1], Paragraph)


class TestBlankRuns:
    """Blank lines between top-level blocks are kept as BlankRun nodes."""

    def test_between_blocks(self) -> None:
        doc = parse("# Title\n\ntext")
        assert [type(b) for b in doc.children] == [Heading, BlankRun, Paragraph]

    def test_consecutive_blank_lines_merge(self) -> None:
        doc = parse("a\n\n\n\nb")
        blank = doc.children[1]
        assert isinstance(blank, BlankRun)
        assert len(doc.children) == 3
        assert (blank.location.lineno, blank.location.end_lineno) == (2, 4)

    def test_not_rendered(self) -> None:
        assert render("a\n\n\n\nb") == "<p>a</p>\n<p>b</p>\n"

    def test_sibling_spans_disjoint(self) -> None:
        doc = parse("# a\n\npara\ntext\n\n> q\n\n---")
        spans = [(b.location.lineno, b.location.end_lineno) for b in doc.children]
        for (_, end), (start, _) in zip(spans, spans[1:]):
            assert end < start

    def test_container_span_covers_children(self) -> None:
        doc = parse("> a\n>\n> b")
        (quote,) = doc.children
        assert quote.location == SourceLocation(1, 3)
        for child in quote.children:
            assert quote.location.contains(child.location)
        first, blank, last = quote.children
        assert not first.location.overlaps(last.location)
        assert blank.location.overlaps(SourceLocation(2, 2))

"""Tests for the line scanner and line-start matchers."""

import pytest

from gfmark.scanner import (
    LineScanner,
    html_block_closes,
    match_atx_heading,
    match_block_quote,
    match_fence_close,
    match_fence_open,
    match_html_block_start,
    match_list_marker,
    match_setext_underline,
    match_table_delimiter_row,
    match_thematic_break,
    measure_indent,
    normalize_source,
    split_table_row,
)


class TestNormalizeSource:
    def test_line_endings(self) -> None:
        assert normalize_source("a\r\nb\rc\n") == "a\nb\nc\n"

    def test_bom_removed(self) -> None:
        assert normalize_source("\ufeff# x") == "# x"

    def test_nul_replaced(self) -> None:
        assert normalize_source("a\0b") == "a\ufffdb"


class TestMeasureIndent:
    def test_spaces(self) -> None:
        assert measure_indent("   x") == (3, 3)

    def test_tab_stops(self) -> None:
        """A tab advances to the next multiple of the tab width."""
        assert measure_indent("  \tx") == (4, 3)
        assert measure_indent("  \tx", tab_width=8) == (8, 3)

    def test_blank(self) -> None:
        assert measure_indent("  ") == (2, 2)


class TestLineScanner:
    """LineScanner yields annotated lines lazily."""

    def test_lines(self) -> None:
        lines = list(LineScanner("a\n\n  b\n"))
        assert [line.text for line in lines] == ["a", "", "  b"]
        assert [line.lineno for line in lines] == [1, 2, 3]
        assert [line.blank for line in lines] == [False, True, False]
        assert lines[2].indent == 2

    def test_whitespace_only_line_is_blank(self) -> None:
        (line,) = LineScanner(" \t ")
        assert line.blank

    def test_empty_source(self) -> None:
        assert list(LineScanner("")) == []

    def test_lazy(self) -> None:
        scanner = LineScanner("a\nb\nc")
        it = iter(scanner)
        next(it)
        assert scanner.line_count == 1


class TestBlockMatchers:
    """Each matcher looks at one line from its first non-space character."""

    @pytest.mark.parametrize("text", ["***", "- - -", "___", "*  *  *  "])
    def test_thematic_break(self, text: str) -> None:
        assert match_thematic_break(text, 0)

    @pytest.mark.parametrize("text", ["**", "*-*", "--a"])
    def test_not_thematic_break(self, text: str) -> None:
        assert not match_thematic_break(text, 0)

    def test_atx_heading(self) -> None:
        assert match_atx_heading("## Title ##", 0) == (2, "Title")
        assert match_atx_heading("#", 0) == (1, "")
        assert match_atx_heading("# Title #b", 0) == (1, "Title #b")

    def test_atx_heading_requires_space(self) -> None:
        assert match_atx_heading("#hashtag", 0) is None
        assert match_atx_heading("####### seven", 0) is None

    def test_fence_open(self) -> None:
        assert match_fence_open("```python", 0) == ("`", 3, "python")
        assert match_fence_open("~~~~ ", 0) == ("~", 4, "")

    def test_backtick_fence_info_cannot_contain_backtick(self) -> None:
        assert match_fence_open("``` a`b", 0) is None

    def test_fence_close(self) -> None:
        assert match_fence_close("````", 0, "`", 3)
        assert not match_fence_close("``", 0, "`", 3)
        assert not match_fence_close("~~~", 0, "`", 3)
        assert not match_fence_close("``` x", 0, "`", 3)

    def test_block_quote(self) -> None:
        assert match_block_quote("> a", 0)
        assert not match_block_quote("a > b", 0)

    def test_bullet_marker(self) -> None:
        marker = match_list_marker("- item", 0)
        assert marker is not None
        assert not marker.ordered
        assert marker.bullet_char == "-"
        assert marker.end == 1

    def test_ordered_marker(self) -> None:
        marker = match_list_marker("12) item", 0)
        assert marker is not None
        assert marker.ordered
        assert marker.start == 12
        assert marker.delimiter == ")"

    def test_marker_needs_space(self) -> None:
        assert match_list_marker("-item", 0) is None
        assert match_list_marker("1.5", 0) is None
        assert match_list_marker("1234567890. x", 0) is None

    def test_marker_kinds(self) -> None:
        dash = match_list_marker("- a", 0)
        plus = match_list_marker("+ a", 0)
        other_dash = match_list_marker("- b", 0)
        assert dash is not None and plus is not None and other_dash is not None
        assert not dash.same_kind(plus)
        assert dash.same_kind(other_dash)

    def test_setext_underline(self) -> None:
        assert match_setext_underline("===", 0) == 1
        assert match_setext_underline("---  ", 0) == 2
        assert match_setext_underline("= =", 0) is None

    def test_html_block_start(self) -> None:
        assert match_html_block_start("<script>", 0) == 1
        assert match_html_block_start("<!-- c -->", 0) == 2
        assert match_html_block_start("<div class='x'>", 0) == 6
        assert match_html_block_start("<custom-tag>", 0) == 7
        assert match_html_block_start("text", 0) is None

    def test_type_seven_cannot_interrupt_paragraph(self) -> None:
        assert match_html_block_start("<custom-tag>", 0, in_paragraph=True) is None
        assert match_html_block_start("<div>", 0, in_paragraph=True) == 6

    def test_html_block_closes(self) -> None:
        assert html_block_closes(1, "x</script>")
        assert html_block_closes(2, "end -->")
        assert not html_block_closes(2, "still open")
        assert not html_block_closes(6, "</div>")


class TestTableRows:
    def test_split_row(self) -> None:
        assert split_table_row("| a | b |") == ["a", "b"]
        assert split_table_row("a | b") == ["a", "b"]

    def test_escaped_pipe(self) -> None:
        assert split_table_row("| a \\| b | c |") == ["a | b", "c"]

    def test_other_escapes_kept(self) -> None:
        assert split_table_row("| \\* |") == ["\\*"]

    def test_delimiter_row(self) -> None:
        assert match_table_delimiter_row("|:--|:-:|--:|---|", 0) == (
            "left",
            "center",
            "right",
            None,
        )

    def test_delimiter_row_needs_pipe(self) -> None:
        assert match_table_delimiter_row("---", 0) is None

    def test_invalid_delimiter_cell(self) -> None:
        assert match_table_delimiter_row("| --- | abc |", 0) is None

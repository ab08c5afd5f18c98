"""Container-stack block builder.

Consumes Line objects one at a time and maintains the tree of open blocks.
For every line the builder runs three phases:

1. Continuation: walk down the open blocks and ask each one whether the
   line continues it, consuming container markers (``>``, item
   indentation) as it goes.
2. Block starts: try the line-start matchers against what is left of the
   line, opening new containers and at most one leaf.
3. Text: add the rest of the line to the open leaf, continue a paragraph
   lazily, open a new paragraph or record a blank run.

Blocks that a line fails to continue are closed (finalized) before a new
block is added. Offsets are tracked both as string indexes and as columns,
so tabs count as the right number of spaces even when a container marker
consumes only part of one.

Inline content is not parsed here; the finished tree is converted to
nodes afterwards, once every reference definition is known.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from gfmark.config import RenderOptions
from gfmark.location import SourceLocation
from gfmark.nodes import Inline, LinkReference
from gfmark.parsing.blocks.finalize import NodeBuildMixin
from gfmark.parsing.blocks.starts import BlockStartsMixin
from gfmark.parsing.blocks.state import (
    ACCEPTS_LINES,
    BLANK_RUN,
    BLOCK_QUOTE,
    CODE_BLOCK,
    CODE_INDENT,
    DOCUMENT,
    HTML_BLOCK,
    ITEM,
    LEAF_STARTED,
    LINE_CONSUMED,
    LIST,
    MATCHED,
    NO_START,
    NOT_MATCHED,
    PARAGRAPH,
    OpenBlock,
    can_contain,
)
from gfmark.parsing.blocks.table import TableBlockMixin
from gfmark.parsing.charsets import BLOCK_START_CHARS
from gfmark.parsing.inline import InlineParser
from gfmark.parsing.references import ReferenceTable, extract_reference_definitions
from gfmark.scanner.lines import Line
from gfmark.scanner.matchers import html_block_closes, match_fence_close


class BlockBuilder(BlockStartsMixin, TableBlockMixin, NodeBuildMixin):
    """Builds the block tree for one document.

    Usage:
        >>> from gfmark.scanner import LineScanner
        >>> builder = BlockBuilder(RenderOptions())
        >>> doc = builder.build(LineScanner("# Title\\n\\ntext"))
        >>> [type(b).__name__ for b in doc.children]
        ['Heading', 'BlankRun', 'Paragraph']

    Thread Safety:
        Single-use. Create one builder per document.
    """

    def __init__(self, options: RenderOptions) -> None:
        self._options = options
        self._tab_width = options.tab_width
        self._references = ReferenceTable()

        self._doc = OpenBlock(DOCUMENT, 1)
        self._tip = self._doc
        self._oldtip = self._doc
        self._last_matched = self._doc
        self._all_closed = True

        # Per-line state
        self._line = ""
        self._lineno = 0
        self._offset = 0
        self._column = 0
        self._next_nonspace = 0
        self._next_nonspace_column = 0
        self._indent = 0
        self._indented = False
        self._blank = False
        self._partially_consumed_tab = False

        self._lines: list[Line] = []
        self._html_end_lines: dict[int, int] = {}

        self._block_starts: tuple[Callable[[OpenBlock], int], ...] = (
            self._start_setext_heading,
            self._start_thematic_break,
            self._start_fenced_code,
            self._start_atx_heading,
            self._start_block_quote,
            self._start_list_item,
            self._start_indented_code,
            self._start_table,
            self._start_html_block,
        )

    @property
    def references(self) -> ReferenceTable:
        return self._references

    def _prepare_inline(self, references: Mapping[str, LinkReference]) -> None:
        self._inline_parser = InlineParser(references, self._options)

    def _parse_inline(self, text: str, location: SourceLocation) -> tuple[Inline, ...]:
        return self._inline_parser.parse(text, location)

    # =========================================================================
    # Driver
    # =========================================================================

    def build_tree(self, lines: Iterable[Line]) -> OpenBlock:
        """Read every line and close all blocks. Returns the document record."""
        self._lines = list(lines)
        last_lineno = 0
        for line in self._lines:
            self._incorporate_line(line)
            last_lineno = line.lineno
        while self._tip is not None:
            self._finalize(self._tip, last_lineno)
        self._doc.end_line = max(last_lineno, 1)
        return self._doc

    def _html_end_ahead(self, block_type: int) -> bool:
        """True if the current line or a later one ends an HTML block of this type."""
        last = self._html_end_lines.get(block_type)
        if last is None:
            last = max(
                (line.lineno for line in self._lines if html_block_closes(block_type, line.text)),
                default=0,
            )
            self._html_end_lines[block_type] = last
        return last >= self._lineno

    def _incorporate_line(self, line: Line) -> None:
        self._line = line.text
        self._lineno = line.lineno
        self._offset = 0
        self._column = 0
        self._blank = False
        self._partially_consumed_tab = False

        container = self._doc
        self._oldtip = self._tip

        # Phase 1: continuation
        while (last := container.last_child) is not None and last.is_open:
            container = last
            self._find_next_nonspace()
            result = self._continue(container)
            if result == MATCHED:
                continue
            if result == NOT_MATCHED:
                assert container.parent is not None
                container = container.parent
                break
            return

        self._all_closed = container is self._oldtip
        self._last_matched = container

        # Phase 2: block starts
        matched_leaf = container.kind in ACCEPTS_LINES and container.kind != PARAGRAPH
        while not matched_leaf:
            self._find_next_nonspace()
            if not self._indented and (
                self._blank or self._line[self._next_nonspace] not in BLOCK_START_CHARS
            ):
                self._advance_next_nonspace()
                break

            for start in self._block_starts:
                result = start(container)
                if result == NO_START:
                    continue
                container = self._tip
                if result == LEAF_STARTED:
                    matched_leaf = True
                break
            else:
                self._advance_next_nonspace()
                break

        # Phase 3: text
        if not self._all_closed and not self._blank and self._tip.kind == PARAGRAPH:
            self._add_line()
            return

        self._close_unmatched_blocks()
        self._mark_blank_line(container)
        match container.kind:
            case "paragraph" | "code_block" | "html_block":
                self._add_line()
                if container.kind == HTML_BLOCK and html_block_closes(
                    container.html_type, self._line[self._offset :]
                ):
                    self._finalize(container, self._lineno)
            case "table":
                if self._offset < len(self._line):
                    self._add_table_row(container)
            case _:
                if self._offset < len(self._line) and not self._blank:
                    container = self._add_child(PARAGRAPH)
                    self._advance_next_nonspace()
                    self._add_line()
                elif self._blank and container.kind in (DOCUMENT, BLOCK_QUOTE):
                    self._add_blank_line(container)

    # =========================================================================
    # Continuation
    # =========================================================================

    def _continue(self, block: OpenBlock) -> int:
        match block.kind:
            case "document" | "list":
                return MATCHED
            case "block_quote":
                if not self._indented and self._peek(self._next_nonspace) == ">":
                    self._advance_next_nonspace()
                    self._advance_offset(1, columns=False)
                    if self._peek(self._offset) in (" ", "\t"):
                        self._advance_offset(1, columns=True)
                    return MATCHED
                return NOT_MATCHED
            case "item":
                if self._blank:
                    if not block.children:
                        return NOT_MATCHED
                    self._advance_next_nonspace()
                    return MATCHED
                if self._indent >= block.marker_offset + block.padding:
                    self._advance_offset(block.marker_offset + block.padding, columns=True)
                    return MATCHED
                return NOT_MATCHED
            case "code_block":
                return self._continue_code_block(block)
            case "html_block":
                if self._blank and block.html_type in (6, 7):
                    return NOT_MATCHED
                return MATCHED
            case "paragraph" | "table":
                return NOT_MATCHED if self._blank else MATCHED
            case _:
                return NOT_MATCHED

    def _continue_code_block(self, block: OpenBlock) -> int:
        if block.fenced:
            if self._indent <= 3 and match_fence_close(
                self._line, self._next_nonspace, block.fence_char, block.fence_length
            ):
                self._finalize(block, self._lineno)
                return LINE_CONSUMED
            remaining = block.fence_offset
            while remaining > 0 and self._peek(self._offset) in (" ", "\t"):
                self._advance_offset(1, columns=True)
                remaining -= 1
            return MATCHED

        if self._indent >= CODE_INDENT:
            self._advance_offset(CODE_INDENT, columns=True)
            return MATCHED
        if self._blank:
            self._advance_next_nonspace()
            return MATCHED
        return NOT_MATCHED

    # =========================================================================
    # Tree mutation
    # =========================================================================

    def _add_child(self, kind: str) -> OpenBlock:
        """Open a new block under the tip, closing blocks that cannot hold it."""
        while not can_contain(self._tip.kind, kind):
            self._finalize(self._tip, self._lineno - 1)
        child = OpenBlock(kind, self._lineno, parent=self._tip)
        self._tip.children.append(child)
        self._tip = child
        return child

    def _add_line(self) -> None:
        if self._partially_consumed_tab:
            self._offset += 1
            chars_to_tab = self._tab_width - (self._column % self._tab_width)
            prefix = " " * chars_to_tab
        else:
            prefix = ""
        self._tip.lines.append(prefix + self._line[self._offset :])

    def _mark_blank_line(self, container: OpenBlock) -> None:
        """Record whether the current line left container (and its parents) on a blank."""
        if self._blank and container.children:
            container.children[-1].last_line_blank = True

        # Quote lines are never blank; blanks inside a fence and the blank
        # right after an empty item do not make a list loose.
        kind = container.kind
        last_line_blank = self._blank and not (
            kind == BLOCK_QUOTE
            or (kind == CODE_BLOCK and container.fenced)
            or (kind == ITEM and not container.children and container.start_line == self._lineno)
        )
        block: OpenBlock | None = container
        while block is not None:
            block.last_line_blank = last_line_blank
            block = block.parent

    def _add_blank_line(self, container: OpenBlock) -> None:
        last = container.last_child
        if last is not None and last.kind == BLANK_RUN and last.end_line == self._lineno - 1:
            last.end_line = self._lineno
            return
        blank = OpenBlock(BLANK_RUN, self._lineno, parent=container)
        blank.is_open = False
        container.children.append(blank)

    def _close_unmatched_blocks(self) -> None:
        if self._all_closed:
            return
        while self._oldtip is not self._last_matched:
            parent = self._oldtip.parent
            self._finalize(self._oldtip, self._lineno - 1)
            assert parent is not None
            self._oldtip = parent
        self._all_closed = True

    def _finalize(self, block: OpenBlock, lineno: int) -> None:
        """Close a block and move the tip to its parent."""
        parent = block.parent
        block.is_open = False
        block.end_line = max(lineno, block.start_line)

        match block.kind:
            case "paragraph":
                self._finalize_paragraph(block)
            case "code_block":
                self._finalize_code_block(block)
            case "html_block":
                block.content = "\n".join(block.lines)
            case "item":
                if block.children:
                    block.end_line = block.children[-1].end_line
            case "list":
                block.tight = self._list_is_tight(block)

        self._tip = parent  # type: ignore[assignment]

    def _finalize_paragraph(self, block: OpenBlock) -> None:
        text = "\n".join(block.lines)
        if text.startswith("["):
            definitions, text = extract_reference_definitions(text)
            for definition in definitions:
                self._references.add(definition)
        block.content = text.rstrip()
        if not block.content:
            assert block.parent is not None
            block.parent.children.remove(block)

    def _resolve_paragraph_definitions(self, block: OpenBlock) -> None:
        """Pull reference definitions off the front of an open paragraph."""
        text = "\n".join(block.lines)
        if not text.startswith("["):
            return
        definitions, remaining = extract_reference_definitions(text)
        if not definitions:
            return
        for definition in definitions:
            self._references.add(definition)
        block.lines = remaining.split("\n") if remaining else []

    def _finalize_code_block(self, block: OpenBlock) -> None:
        if block.fenced:
            # First line holds the rest of the opening fence
            body = block.lines[1:]
            block.content = "".join(f"{line}\n" for line in body)
            return

        lines = block.lines
        trailing = 0
        while lines and not lines[-1].strip(" \t"):
            lines.pop()
            trailing += 1
        block.content = "".join(f"{line}\n" for line in lines)
        block.end_line = max(block.start_line, block.end_line - trailing)

    @staticmethod
    def _ends_with_blank_line(block: OpenBlock | None) -> bool:
        """True if block ends with a blank line, looking into trailing lists and items."""
        while block is not None:
            if block.last_line_blank:
                return True
            if block.kind not in (LIST, ITEM):
                return False
            block = block.last_child
        return False

    def _list_is_tight(self, block: OpenBlock) -> bool:
        items = block.children
        last_index = len(items) - 1
        for index, item in enumerate(items):
            has_next = index < last_index
            if has_next and self._ends_with_blank_line(item):
                return False
            children = item.children
            for sub_index, child in enumerate(children):
                if (has_next or sub_index < len(children) - 1) and self._ends_with_blank_line(child):
                    return False
        return True

    # =========================================================================
    # Line cursor
    # =========================================================================

    def _peek(self, pos: int) -> str:
        return self._line[pos] if pos < len(self._line) else ""

    def _find_next_nonspace(self) -> None:
        line = self._line
        i = self._offset
        cols = self._column
        line_len = len(line)
        while i < line_len:
            char = line[i]
            if char == " ":
                cols += 1
            elif char == "\t":
                cols += self._tab_width - (cols % self._tab_width)
            else:
                break
            i += 1
        self._blank = i >= line_len
        self._next_nonspace = i
        self._next_nonspace_column = cols
        self._indent = cols - self._column
        self._indented = self._indent >= CODE_INDENT

    def _advance_next_nonspace(self) -> None:
        self._offset = self._next_nonspace
        self._column = self._next_nonspace_column
        self._partially_consumed_tab = False

    def _advance_offset(self, count: int, *, columns: bool) -> None:
        """Advance by count characters, or by count columns if columns is set."""
        line = self._line
        line_len = len(line)
        while count > 0 and self._offset < line_len:
            if line[self._offset] == "\t":
                chars_to_tab = self._tab_width - (self._column % self._tab_width)
                if columns:
                    self._partially_consumed_tab = chars_to_tab > count
                    advance = min(count, chars_to_tab)
                    self._column += advance
                    if not self._partially_consumed_tab:
                        self._offset += 1
                    count -= advance
                else:
                    self._partially_consumed_tab = False
                    self._column += chars_to_tab
                    self._offset += 1
                    count -= 1
            else:
                self._partially_consumed_tab = False
                self._offset += 1
                self._column += 1
                count -= 1

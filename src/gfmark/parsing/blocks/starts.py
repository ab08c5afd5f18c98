"""Block start handlers.

Each handler looks at the current line (from the builder's next
non-space position) and, on a match, consumes the marker and opens the new
block. Handlers return NO_START, CONTAINER_STARTED (block quote, list item:
keep looking for nested starts) or LEAF_STARTED (the rest of the line
belongs to the new leaf).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gfmark.parsing.blocks.state import (
    BLOCK_QUOTE,
    CODE_BLOCK,
    CODE_INDENT,
    CONTAINER_STARTED,
    HEADING,
    HTML_BLOCK,
    ITEM,
    LEAF_STARTED,
    LIST,
    NO_START,
    PARAGRAPH,
    THEMATIC_BREAK,
)
from gfmark.scanner.matchers import (
    match_atx_heading,
    match_fence_open,
    match_html_block_start,
    match_list_marker,
    match_setext_underline,
    match_thematic_break,
)

if TYPE_CHECKING:
    from gfmark.parsing.blocks.state import OpenBlock

# A list item's content starts at most this many columns after the marker;
# wider gaps mean the content is indented code.
_MAX_MARKER_PADDING = 5


class BlockStartsMixin:
    """Mixin opening new blocks at the start of a line.

    Required Host Attributes:
        - _line: str
        - _offset: int
        - _column: int
        - _next_nonspace: int
        - _indent: int
        - _indented: bool
        - _blank: bool
        - _all_closed: bool
        - _tip: OpenBlock
        - _partially_consumed_tab: bool

    Required Host Methods:
        - _peek(pos) -> str
        - _advance_offset(count, *, columns) -> None
        - _advance_next_nonspace() -> None
        - _close_unmatched_blocks() -> None
        - _add_child(kind) -> OpenBlock
        - _resolve_paragraph_definitions(block) -> None
        - _html_end_ahead(block_type) -> bool
    """

    def _consume_rest_of_line(self) -> None:
        self._advance_offset(len(self._line) - self._offset, columns=False)

    def _start_setext_heading(self, container: OpenBlock) -> int:
        """``===`` / ``---`` under a paragraph turns the paragraph into a heading."""
        if self._indented or container.kind != PARAGRAPH:
            return NO_START
        level = match_setext_underline(self._line, self._next_nonspace)
        if level is None:
            return NO_START

        self._close_unmatched_blocks()
        self._resolve_paragraph_definitions(container)
        if not container.lines:
            return NO_START

        container.kind = HEADING
        container.level = level
        container.setext = True
        container.content = "\n".join(container.lines).strip()
        self._consume_rest_of_line()
        return LEAF_STARTED

    def _start_thematic_break(self, container: OpenBlock) -> int:
        if self._indented or not match_thematic_break(self._line, self._next_nonspace):
            return NO_START
        self._close_unmatched_blocks()
        self._add_child(THEMATIC_BREAK)
        self._consume_rest_of_line()
        return LEAF_STARTED

    def _start_fenced_code(self, container: OpenBlock) -> int:
        if self._indented:
            return NO_START
        fence = match_fence_open(self._line, self._next_nonspace)
        if fence is None:
            return NO_START

        fence_char, fence_length, info = fence
        self._close_unmatched_blocks()
        block = self._add_child(CODE_BLOCK)
        block.fenced = True
        block.fence_char = fence_char
        block.fence_length = fence_length
        block.fence_offset = self._indent
        block.info = info
        self._advance_next_nonspace()
        self._advance_offset(fence_length, columns=False)
        return LEAF_STARTED

    def _start_atx_heading(self, container: OpenBlock) -> int:
        if self._indented:
            return NO_START
        heading = match_atx_heading(self._line, self._next_nonspace)
        if heading is None:
            return NO_START

        self._advance_next_nonspace()
        self._close_unmatched_blocks()
        block = self._add_child(HEADING)
        block.level, block.content = heading
        self._consume_rest_of_line()
        return LEAF_STARTED

    def _start_block_quote(self, container: OpenBlock) -> int:
        if self._indented or self._peek(self._next_nonspace) != ">":
            return NO_START
        self._advance_next_nonspace()
        self._advance_offset(1, columns=False)
        if self._peek(self._offset) in (" ", "\t"):
            self._advance_offset(1, columns=True)
        self._close_unmatched_blocks()
        self._add_child(BLOCK_QUOTE)
        return CONTAINER_STARTED

    def _start_list_item(self, container: OpenBlock) -> int:
        """Bullet or ordered item.

        Interrupting a paragraph is only allowed for non-empty items and, for
        ordered items, only when the list starts at 1. A new list is opened
        whenever the marker kind differs from the current list's.
        """
        if self._indented:
            return NO_START
        marker = match_list_marker(self._line, self._next_nonspace)
        if marker is None:
            return NO_START
        if container.kind == PARAGRAPH:
            if marker.ordered and marker.start != 1:
                return NO_START
            if not self._line[marker.end :].strip(" \t"):
                return NO_START

        marker_offset = self._indent
        marker_length = marker.end - self._next_nonspace
        self._advance_next_nonspace()
        self._advance_offset(marker_length, columns=True)

        spaces_start_column = self._column
        spaces_start_offset = self._offset
        while True:
            self._advance_offset(1, columns=True)
            next_char = self._peek(self._offset)
            if self._column - spaces_start_column >= _MAX_MARKER_PADDING:
                break
            if next_char not in (" ", "\t"):
                break

        blank_item = self._peek(self._offset) == ""
        spaces_after_marker = self._column - spaces_start_column
        if spaces_after_marker >= _MAX_MARKER_PADDING or spaces_after_marker < 1 or blank_item:
            padding = marker_length + 1
            self._column = spaces_start_column
            self._offset = spaces_start_offset
            self._partially_consumed_tab = False
            if self._peek(self._offset) in (" ", "\t"):
                self._advance_offset(1, columns=True)
        else:
            padding = marker_length + spaces_after_marker

        self._close_unmatched_blocks()
        current = container.marker
        if container.kind != LIST or current is None or not current.same_kind(marker):
            block = self._add_child(LIST)
            block.marker = marker
        item = self._add_child(ITEM)
        item.marker = marker
        item.marker_offset = marker_offset
        item.padding = padding
        return CONTAINER_STARTED

    def _start_indented_code(self, container: OpenBlock) -> int:
        if not self._indented or self._blank or self._tip.kind == PARAGRAPH:
            return NO_START
        self._advance_offset(CODE_INDENT, columns=True)
        self._close_unmatched_blocks()
        self._add_child(CODE_BLOCK)
        return LEAF_STARTED

    def _start_html_block(self, container: OpenBlock) -> int:
        if self._indented or self._peek(self._next_nonspace) != "<":
            return NO_START
        in_paragraph = container.kind == PARAGRAPH or (
            not self._all_closed and not self._blank and self._tip.kind == PARAGRAPH
        )
        block_type = match_html_block_start(
            self._line, self._next_nonspace, in_paragraph=in_paragraph
        )
        if block_type is None:
            return NO_START
        # A raw-text, comment, PI, declaration or CDATA start with no end
        # condition anywhere ahead is ordinary text
        if block_type <= 5 and not self._html_end_ahead(block_type):
            return NO_START

        self._close_unmatched_blocks()
        block = self._add_child(HTML_BLOCK)
        block.html_type = block_type
        return LEAF_STARTED


__all__ = ["BlockStartsMixin"]

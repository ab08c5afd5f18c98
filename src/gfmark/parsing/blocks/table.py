"""GFM pipe tables.

A table starts when a delimiter row appears directly under a paragraph
whose last line has the same number of cells:

    | Header 1 | Header 2 |   <- last paragraph line becomes the header
    |:---------|---------:|   <- delimiter row (alignments)
    | Cell 1   | Cell 2   |   <- body rows until a blank line or another block

Earlier paragraph lines stay a paragraph. A header/delimiter cell count
mismatch is not a table; the delimiter row is then read as ordinary text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gfmark.location import SourceLocation
from gfmark.nodes import Alignment, Table, TableCell, TableRow
from gfmark.parsing.blocks.state import LEAF_STARTED, NO_START, PARAGRAPH, TABLE
from gfmark.scanner.matchers import match_table_delimiter_row, split_table_row

if TYPE_CHECKING:
    from gfmark.parsing.blocks.state import OpenBlock


class TableBlockMixin:
    """Mixin for GFM table recognition and conversion.

    Required Host Attributes:
        - _options: RenderOptions
        - _line: str
        - _lineno: int
        - _offset: int
        - _next_nonspace: int
        - _indented: bool
        - _tip: OpenBlock

    Required Host Methods:
        - _close_unmatched_blocks() -> None
        - _add_child(kind) -> OpenBlock
        - _finalize(block, lineno) -> None
        - _resolve_paragraph_definitions(block) -> None
        - _consume_rest_of_line() -> None
        - _parse_inline(text, location) -> tuple[Inline, ...]
    """

    def _start_table(self, container: OpenBlock) -> int:
        if not self._options.enable_tables or self._indented or container.kind != PARAGRAPH:
            return NO_START
        alignments = match_table_delimiter_row(self._line, self._next_nonspace)
        if alignments is None:
            return NO_START

        self._resolve_paragraph_definitions(container)
        if not container.lines:
            return NO_START
        header = container.lines[-1]
        if len(split_table_row(header)) != len(alignments):
            return NO_START

        self._close_unmatched_blocks()
        header_lineno = self._lineno - 1
        container.lines.pop()
        if container.lines:
            self._finalize(container, header_lineno - 1)
        else:
            parent = container.parent
            assert parent is not None
            parent.children.remove(container)
            self._tip = parent

        table = self._add_child(TABLE)
        table.start_line = header_lineno
        table.alignments = alignments
        table.rows.append((header_lineno, header))
        self._consume_rest_of_line()
        return LEAF_STARTED

    def _add_table_row(self, table: OpenBlock) -> None:
        table.rows.append((self._lineno, self._line[self._offset :]))

    def _convert_table(self, block: OpenBlock, location: SourceLocation) -> Table:
        """Build the Table node; every row is padded or cut to the header width."""
        alignments = block.alignments
        (header_lineno, header), *body = block.rows

        head = TableRow(
            location=SourceLocation(header_lineno, header_lineno),
            cells=self._convert_cells(header, header_lineno, alignments, is_header=True),
            is_header=True,
        )
        rows = tuple(
            TableRow(
                location=SourceLocation(lineno, lineno),
                cells=self._convert_cells(text, lineno, alignments, is_header=False),
            )
            for lineno, text in body
        )
        return Table(location=location, head=head, body=rows, alignments=alignments)

    def _convert_cells(
        self,
        text: str,
        lineno: int,
        alignments: tuple[Alignment, ...],
        *,
        is_header: bool,
    ) -> tuple[TableCell, ...]:
        width = len(alignments)
        cells = split_table_row(text)[:width]
        cells.extend([""] * (width - len(cells)))
        location = SourceLocation(lineno, lineno)
        return tuple(
            TableCell(
                location=location,
                children=self._parse_inline(cell, location),
                is_header=is_header,
                align=align,
            )
            for cell, align in zip(cells, alignments, strict=True)
        )

"""Conversion of the finished block tree into frozen nodes.

Runs after every line has been read, so the reference table is complete
before the first inline span is parsed. Each leaf's text is handed to the
inline parser exactly once.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from gfmark.location import SourceLocation
from gfmark.nodes import (
    BlankRun,
    Block,
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    HtmlBlock,
    List,
    ListItem,
    Paragraph,
    ThematicBreak,
)

if TYPE_CHECKING:
    from gfmark.parsing.blocks.state import OpenBlock
    from gfmark.scanner.lines import Line

# [ ], [x] or [X] followed by whitespace at the start of an item's first paragraph
_TASK_MARKER_RE = re.compile(r"\[([ xX])\][ \t\n]+")


class NodeBuildMixin:
    """Mixin turning OpenBlock records into Block nodes.

    Required Host Attributes:
        - _options: RenderOptions
        - _references: ReferenceTable

    Required Host Methods:
        - build_tree(lines) -> OpenBlock
        - _prepare_inline(references) -> None
        - _parse_inline(text, location) -> tuple[Inline, ...]
        - _convert_table(block, location) -> Table
    """

    def build(self, lines: Iterable[Line]) -> Document:
        """Parse all lines into a Document with inline content resolved."""
        root = self.build_tree(lines)
        references = self._references.freeze()
        self._prepare_inline(references)
        return Document(
            location=SourceLocation(1, root.end_line),
            children=self._convert_children(root),
            references=references,
        )

    def _convert_children(self, block: OpenBlock) -> tuple[Block, ...]:
        return tuple(self._convert_block(child) for child in block.children)

    def _convert_block(self, block: OpenBlock) -> Block:
        location = SourceLocation(block.start_line, block.end_line)

        match block.kind:
            case "paragraph":
                return Paragraph(
                    location=location, children=self._parse_inline(block.content, location)
                )
            case "heading":
                return Heading(
                    location=location,
                    level=block.level,  # type: ignore[arg-type]
                    children=self._parse_inline(block.content, location),
                    style="setext" if block.setext else "atx",
                )
            case "thematic_break":
                return ThematicBreak(location=location)
            case "code_block":
                return CodeBlock(
                    location=location,
                    code=block.content,
                    fenced=block.fenced,
                    info=block.info or None,
                )
            case "html_block":
                return HtmlBlock(location=location, html=block.content)
            case "block_quote":
                return BlockQuote(location=location, children=self._convert_children(block))
            case "list":
                return self._convert_list(block, location)
            case "table":
                return self._convert_table(block, location)
            case "blank_run":
                return BlankRun(location=location)
            case _:
                raise AssertionError(f"unexpected block kind {block.kind!r}")

    def _convert_list(self, block: OpenBlock, location: SourceLocation) -> List:
        marker = block.marker
        assert marker is not None
        return List(
            location=location,
            items=tuple(self._convert_item(item) for item in block.children),
            ordered=marker.ordered,
            start=marker.start,
            tight=block.tight,
            marker=marker.bullet_char or marker.delimiter,
        )

    def _convert_item(self, item: OpenBlock) -> ListItem:
        location = SourceLocation(item.start_line, item.end_line)
        children = item.children
        checked: bool | None = None

        if self._options.enable_task_lists and children and children[0].kind == "paragraph":
            first = children[0]
            m = _TASK_MARKER_RE.match(first.content)
            if m is not None:
                checked = m.group(1) != " "
                first_location = SourceLocation(first.start_line, first.end_line)
                paragraph = Paragraph(
                    location=first_location,
                    children=self._parse_inline(first.content[m.end() :], first_location),
                )
                rest = tuple(self._convert_block(child) for child in children[1:])
                return ListItem(location=location, children=(paragraph, *rest), checked=checked)

        return ListItem(location=location, children=self._convert_children(item), checked=checked)

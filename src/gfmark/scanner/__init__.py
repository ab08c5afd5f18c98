"""Line scanner for gfmark.

Splits normalized source into logical lines and classifies line starts.
The block builder consumes both.
"""

from gfmark.scanner.lines import Line, LineScanner, measure_indent, normalize_source
from gfmark.scanner.matchers import (
    ListMarker,
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
    split_table_row,
)

__all__ = [
    "Line",
    "LineScanner",
    "ListMarker",
    "html_block_closes",
    "match_atx_heading",
    "match_block_quote",
    "match_fence_close",
    "match_fence_open",
    "match_html_block_start",
    "match_list_marker",
    "match_setext_underline",
    "match_table_delimiter_row",
    "match_thematic_break",
    "measure_indent",
    "normalize_source",
    "split_table_row",
]

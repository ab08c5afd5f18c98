"""Line-start matchers.

Pure functions that look at one line starting from its first non-space
character (``pos``) and report whether a block construct begins there.
None of them mutate anything; the block builder decides which matcher wins
and consumes the line.

Precedence (applied by the builder):
    thematic break > fenced code > ATX heading > block quote > list item
    > indented code > table delimiter row > HTML block > setext underline
    > paragraph continuation. A setext underline directly below an open
    paragraph wins over a thematic break.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from gfmark.nodes import Alignment
from gfmark.scanner.patterns import HTML_BLOCK_TAG_LINE_RE
from gfmark.utils.text import unescape_string

_THEMATIC_BREAK_RE = re.compile(r"(?:(?:\*[ \t]*){3,}|(?:_[ \t]*){3,}|(?:-[ \t]*){3,})$")
_ATX_OPEN_RE = re.compile(r"#{1,6}(?:[ \t]+|$)")
_ATX_CLOSING_ONLY_RE = re.compile(r"^[ \t]*#+[ \t]*$")
_ATX_CLOSING_RE = re.compile(r"[ \t]+#+[ \t]*$")
_FENCE_OPEN_RE = re.compile(r"`{3,}(?!.*`)|~{3,}")
_FENCE_CLOSE_RE = re.compile(r"(?:`{3,}|~{3,})(?=[ \t]*$)")
_SETEXT_RE = re.compile(r"(?:=+|-+)[ \t]*$")
_BULLET_RE = re.compile(r"[*+-]")
_ORDERED_RE = re.compile(r"(\d{1,9})([.)])")
_DELIMITER_CELL_RE = re.compile(r":?-+:?")

_HTML_BLOCK_OPEN = (
    re.compile(r"<(?:script|pre|textarea|style)(?:\s|>|$)", re.IGNORECASE),
    re.compile(r"<!--"),
    re.compile(r"<\?"),
    re.compile(r"<![A-Za-z]"),
    re.compile(r"<!\[CDATA\["),
    re.compile(
        r"</?(?:address|article|aside|base|basefont|blockquote|body|caption|center|col"
        r"|colgroup|dd|details|dialog|dir|div|dl|dt|fieldset|figcaption|figure|footer"
        r"|form|frame|frameset|h[1-6]|head|header|hr|html|iframe|legend|li|link|main"
        r"|menu|menuitem|nav|noframes|ol|optgroup|option|p|param|search|section"
        r"|summary|table|tbody|td|tfoot|th|thead|title|tr|track|ul)(?:\s|/?>|$)",
        re.IGNORECASE,
    ),
    HTML_BLOCK_TAG_LINE_RE,
)

_HTML_BLOCK_CLOSE = (
    re.compile(r"</(?:script|pre|textarea|style)>", re.IGNORECASE),
    re.compile(r"-->"),
    re.compile(r"\?>"),
    re.compile(r">"),
    re.compile(r"\]\]>"),
)


@dataclass(frozen=True, slots=True)
class ListMarker:
    """A list item marker found at the start of a line.

    Attributes:
        ordered: True for ``1.`` / ``1)`` markers
        bullet_char: ``-``, ``+`` or ``*`` for bullet markers, else ""
        delimiter: ``.`` or ``)`` for ordered markers, else ""
        start: Ordinal of an ordered marker (1 for bullets)
        end: Index just past the marker characters
    """

    ordered: bool
    bullet_char: str
    delimiter: str
    start: int
    end: int

    def same_kind(self, other: ListMarker) -> bool:
        """True if an item with ``other`` may continue a list started by self."""
        return (
            self.ordered == other.ordered
            and self.bullet_char == other.bullet_char
            and self.delimiter == other.delimiter
        )


def match_thematic_break(text: str, pos: int) -> bool:
    """``***``, ``- - -``, ``___`` (three or more, spaces allowed)."""
    return _THEMATIC_BREAK_RE.match(text, pos) is not None


def match_atx_heading(text: str, pos: int) -> tuple[int, str] | None:
    """Match ``# Heading #``.

    Returns:
        (level, raw_content) with the optional closing sequence removed
    """
    m = _ATX_OPEN_RE.match(text, pos)
    if m is None:
        return None
    level = text.count("#", pos, m.end())
    content = text[m.end() :]
    content = _ATX_CLOSING_ONLY_RE.sub("", content)
    content = _ATX_CLOSING_RE.sub("", content)
    return level, content.strip()


def match_fence_open(text: str, pos: int) -> tuple[str, int, str] | None:
    """Match an opening code fence.

    Returns:
        (fence_char, fence_length, info_string)
    """
    m = _FENCE_OPEN_RE.match(text, pos)
    if m is None:
        return None
    run = m.group()
    info = unescape_string(text[m.end() :].strip())
    return run[0], len(run), info


def match_fence_close(text: str, pos: int, fence_char: str, fence_length: int) -> bool:
    """A closing fence: same character, at least as long, nothing after."""
    m = _FENCE_CLOSE_RE.match(text, pos)
    if m is None:
        return False
    run = m.group()
    return run[0] == fence_char and len(run) >= fence_length


def match_block_quote(text: str, pos: int) -> bool:
    """``>`` marker."""
    return pos < len(text) and text[pos] == ">"


def match_list_marker(text: str, pos: int) -> ListMarker | None:
    """Match a bullet (``-``, ``+``, ``*``) or ordered (``1.``, ``1)``) marker.

    The marker must be followed by a space, a tab or the end of the line.
    """
    m = _BULLET_RE.match(text, pos)
    if m is not None:
        marker = ListMarker(ordered=False, bullet_char=m.group(), delimiter="", start=1, end=m.end())
    else:
        m = _ORDERED_RE.match(text, pos)
        if m is None:
            return None
        marker = ListMarker(
            ordered=True,
            bullet_char="",
            delimiter=m.group(2),
            start=int(m.group(1)),
            end=m.end(),
        )
    if marker.end < len(text) and text[marker.end] not in " \t":
        return None
    return marker


def match_setext_underline(text: str, pos: int) -> int | None:
    """``===`` (level 1) or ``---`` (level 2) underline."""
    if _SETEXT_RE.match(text, pos) is None:
        return None
    return 1 if text[pos] == "=" else 2


def match_html_block_start(text: str, pos: int, *, in_paragraph: bool = False) -> int | None:
    """Return the HTML block type (1-7) that starts at pos, if any.

    Type 7 (a complete arbitrary tag alone on its line) cannot interrupt a
    paragraph.
    """
    if pos >= len(text) or text[pos] != "<":
        return None
    for block_type, pattern in enumerate(_HTML_BLOCK_OPEN, start=1):
        if block_type == 7 and in_paragraph:
            break
        if pattern.match(text, pos) is not None:
            return block_type
    return None


def html_block_closes(block_type: int, text: str) -> bool:
    """True if ``text`` satisfies the end condition of an HTML block type 1-5.

    Types 6 and 7 end at a blank line, which the builder handles.
    """
    if not 1 <= block_type <= 5:
        return False
    return _HTML_BLOCK_CLOSE[block_type - 1].search(text) is not None


def split_table_row(text: str) -> list[str]:
    """Split a pipe table row into stripped cell texts.

    Leading and trailing pipes are optional; ``\\|`` is a literal pipe inside
    a cell. Other backslash escapes are left for the inline parser.

    Example:
        >>> split_table_row("| a | b \\\\| c |")
        ['a', 'b | c']
    """
    line = text.strip()
    if line.startswith("|"):
        line = line[1:]
    if line.endswith("|") and not line.endswith("\\|"):
        line = line[:-1]

    cells: list[str] = []
    current: list[str] = []
    i = 0
    line_len = len(line)
    while i < line_len:
        char = line[i]
        if char == "\\" and i + 1 < line_len:
            if line[i + 1] == "|":
                current.append("|")
            else:
                current.append(line[i : i + 2])
            i += 2
            continue
        if char == "|":
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    cells.append("".join(current).strip())
    return cells


def match_table_delimiter_row(text: str, pos: int) -> tuple[Alignment, ...] | None:
    """Parse a delimiter row such as ``|:---|:---:|---:|``.

    The row must contain at least one pipe so it can never be mistaken for a
    setext underline or thematic break.

    Returns:
        Per-column alignments, or None if the line is not a delimiter row
    """
    line = text[pos:]
    if "|" not in line:
        return None
    if line.strip() in ("|", ""):
        return None

    alignments: list[Alignment] = []
    for cell in split_table_row(line):
        if _DELIMITER_CELL_RE.fullmatch(cell) is None:
            return None
        left = cell.startswith(":")
        right = cell.endswith(":")
        if left and right:
            alignments.append("center")
        elif left:
            alignments.append("left")
        elif right:
            alignments.append("right")
        else:
            alignments.append(None)
    return tuple(alignments)

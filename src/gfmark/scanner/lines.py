"""Logical line splitting.

Normalizes line endings and yields one Line per source line, annotated with
its leading-whitespace width and blank status. Lines are produced lazily;
the scanner never holds more than the source buffer itself.

Thread Safety:
LineScanner instances are single-use. Create one per source string.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


def normalize_source(source: str) -> str:
    """Normalize line endings to \\n, replace NUL and drop a leading BOM."""
    if source.startswith("\ufeff"):
        source = source[1:]
    if "\r" in source:
        source = source.replace("\r\n", "\n").replace("\r", "\n")
    if "\0" in source:
        source = source.replace("\0", "\ufffd")
    return source


def measure_indent(text: str, tab_width: int = 4) -> tuple[int, int]:
    """Measure leading whitespace.

    Returns:
        (indent_columns, first_non_whitespace_index)
    """
    columns = 0
    pos = 0
    text_len = len(text)
    while pos < text_len:
        char = text[pos]
        if char == " ":
            columns += 1
        elif char == "\t":
            columns += tab_width - (columns % tab_width)
        else:
            break
        pos += 1
    return columns, pos


@dataclass(frozen=True, slots=True)
class Line:
    """One logical source line (without its newline).

    Attributes:
        lineno: 1-indexed line number
        text: Line content, tabs preserved
        indent: Leading whitespace width in columns
        blank: True if the line holds only spaces/tabs
    """

    lineno: int
    text: str
    indent: int
    blank: bool


class LineScanner:
    """Lazy iterator of Line objects over a normalized source.

    Usage:
        >>> [line.text for line in LineScanner("a\\n\\n  b\\n")]
        ['a', '', '  b']
    """

    __slots__ = ("_source", "_tab_width", "_line_count")

    def __init__(self, source: str, tab_width: int = 4) -> None:
        self._source = normalize_source(source)
        self._tab_width = tab_width
        self._line_count = 0

    @property
    def source(self) -> str:
        """The normalized source text."""
        return self._source

    @property
    def line_count(self) -> int:
        """Number of lines yielded so far."""
        return self._line_count

    def __iter__(self) -> Iterator[Line]:
        source = self._source
        source_len = len(source)
        tab_width = self._tab_width
        pos = 0
        lineno = 0
        while pos < source_len:
            end = source.find("\n", pos)
            if end == -1:
                end = source_len
            text = source[pos:end]
            lineno += 1
            indent, first = measure_indent(text, tab_width)
            self._line_count = lineno
            yield Line(lineno=lineno, text=text, indent=indent, blank=first == len(text))
            pos = end + 1

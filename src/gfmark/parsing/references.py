"""Link reference definitions.

Reference definitions (``[label]: destination "title"``) are collected from
the start of paragraphs while blocks are finalized, before any inline
parsing runs. Definitions may therefore appear before or after their first
use.

The destination, title and label scanners are shared with inline link
parsing.

CommonMark 0.31.2 rules:
- Labels: at most 999 characters, no unescaped brackets, not blank
- Destinations: ``<...>`` (no newline, no unescaped ``<``/``>``) or a raw run
  of non-space characters with balanced parentheses
- Titles: ``"..."``, ``'...'`` or ``(...)``, may span lines but never a
  blank line
- The first definition of a normalized label wins
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from gfmark.nodes import LinkReference
from gfmark.parsing.charsets import ASCII_PUNCTUATION
from gfmark.utils.text import normalize_label, unescape_string

MAX_LABEL_LENGTH = 999
_MAX_PAREN_DEPTH = 32
_TITLE_CLOSERS = {'"': '"', "'": "'", "(": ")"}


def parse_link_label(text: str, pos: int) -> tuple[str, int] | None:
    """Parse ``[label]`` starting at text[pos] == "[".

    Returns:
        (raw_label, end_pos) or None if no valid label starts here
    """
    text_len = len(text)
    i = pos + 1
    while i < text_len:
        char = text[i]
        if char == "\\" and i + 1 < text_len and text[i + 1] in ASCII_PUNCTUATION:
            i += 2
            continue
        if char == "[":
            return None
        if char == "]":
            label = text[pos + 1 : i]
            if len(label) > MAX_LABEL_LENGTH or not label.strip():
                return None
            return label, i + 1
        i += 1
    return None


def parse_link_destination(text: str, pos: int) -> tuple[str, int] | None:
    """Parse a link destination starting exactly at pos.

    A raw destination may be empty; callers that require a non-empty one
    compare the returned end with pos.

    Returns:
        (unescaped_destination, end_pos) or None if invalid
    """
    text_len = len(text)

    if pos < text_len and text[pos] == "<":
        i = pos + 1
        while i < text_len:
            char = text[i]
            if char == "\\" and i + 1 < text_len and text[i + 1] in ASCII_PUNCTUATION:
                i += 2
                continue
            if char in "\n<":
                return None
            if char == ">":
                return unescape_string(text[pos + 1 : i]), i + 1
            i += 1
        return None

    depth = 0
    i = pos
    while i < text_len:
        char = text[i]
        if char == "\\" and i + 1 < text_len and text[i + 1] in ASCII_PUNCTUATION:
            i += 2
            continue
        if char == "(":
            depth += 1
            if depth > _MAX_PAREN_DEPTH:
                return None
        elif char == ")":
            if depth == 0:
                break
            depth -= 1
        elif ord(char) <= 0x20 or char == "\x7f":
            break
        i += 1

    if depth != 0:
        return None
    return unescape_string(text[pos:i]), i


def _blank_line_follows(text: str, newline_pos: int) -> bool:
    i = newline_pos + 1
    text_len = len(text)
    while i < text_len and text[i] in " \t":
        i += 1
    return i >= text_len or text[i] == "\n"


def parse_link_title(text: str, pos: int) -> tuple[str, int] | None:
    """Parse a quoted or parenthesized title starting at text[pos].

    Returns:
        (unescaped_title, end_pos) or None if no valid title starts here
    """
    if pos >= len(text):
        return None
    opener = text[pos]
    closer = _TITLE_CLOSERS.get(opener)
    if closer is None:
        return None

    text_len = len(text)
    i = pos + 1
    while i < text_len:
        char = text[i]
        if char == "\\" and i + 1 < text_len and text[i + 1] in ASCII_PUNCTUATION:
            i += 2
            continue
        if char == closer:
            return unescape_string(text[pos + 1 : i]), i + 1
        if opener == "(" and char == "(":
            return None
        if char == "\n" and _blank_line_follows(text, i):
            return None
        i += 1
    return None


def skip_spaces(text: str, pos: int, *, max_newlines: int = 1) -> int:
    """Skip spaces and tabs and at most ``max_newlines`` line endings."""
    text_len = len(text)
    newlines = 0
    while pos < text_len:
        char = text[pos]
        if char == "\n":
            if newlines >= max_newlines:
                break
            newlines += 1
        elif char not in " \t":
            break
        pos += 1
    return pos


def _end_of_line(text: str, pos: int) -> int | None:
    """Index after the line ending if only spaces/tabs remain on the line."""
    text_len = len(text)
    while pos < text_len and text[pos] in " \t":
        pos += 1
    if pos >= text_len:
        return text_len
    if text[pos] == "\n":
        return pos + 1
    return None


def parse_reference_definition(text: str, pos: int = 0) -> tuple[LinkReference, int] | None:
    """Parse one reference definition starting at pos.

    Args:
        text: Paragraph content with ``\\n`` line separators
        pos: Start of a line

    Returns:
        (reference, end_pos) where end_pos is the start of the next line,
        or None if no definition starts at pos
    """
    pos = skip_spaces(text, pos, max_newlines=0)
    if pos >= len(text) or text[pos] != "[":
        return None

    label_result = parse_link_label(text, pos)
    if label_result is None:
        return None
    raw_label, pos = label_result
    if pos >= len(text) or text[pos] != ":":
        return None

    dest_start = skip_spaces(text, pos + 1)
    dest_result = parse_link_destination(text, dest_start)
    if dest_result is None:
        return None
    url, dest_end = dest_result
    if dest_end == dest_start:
        return None

    label = normalize_label(raw_label)

    title_start = skip_spaces(text, dest_end)
    if title_start > dest_end:
        title_result = parse_link_title(text, title_start)
        if title_result is not None:
            title, title_end = title_result
            line_end = _end_of_line(text, title_end)
            if line_end is not None:
                return LinkReference(label=label, url=url, title=title), line_end

    line_end = _end_of_line(text, dest_end)
    if line_end is None:
        return None
    return LinkReference(label=label, url=url), line_end


def extract_reference_definitions(text: str) -> tuple[list[LinkReference], str]:
    """Strip leading reference definitions from paragraph content.

    Returns:
        (definitions in source order, remaining paragraph text)
    """
    definitions: list[LinkReference] = []
    pos = 0
    while pos < len(text):
        result = parse_reference_definition(text, pos)
        if result is None:
            break
        definition, pos = result
        definitions.append(definition)
    return definitions, text[pos:]


class ReferenceTable:
    """Per-document map of normalized labels to link targets.

    Populated while blocks are finalized, then frozen and handed to the
    inline parser (read-only) and the Document.

    Usage:
        >>> table = ReferenceTable()
        >>> table.add(LinkReference("foo", "/url"))
        True
        >>> table.add(LinkReference("foo", "/other"))
        False
        >>> table.get("FOO").url
        '/url'
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[str, LinkReference] = {}

    def add(self, reference: LinkReference) -> bool:
        """Register a definition. Returns False if the label was already taken."""
        if reference.label in self._entries:
            return False
        self._entries[reference.label] = reference
        return True

    def get(self, label: str) -> LinkReference | None:
        """Look up a raw or normalized label."""
        return self._entries.get(normalize_label(label))

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and normalize_label(label) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def freeze(self) -> Mapping[str, LinkReference]:
        """Read-only view for the Document."""
        return MappingProxyType(dict(self._entries))

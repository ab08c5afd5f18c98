"""Inline parser: one left-to-right scan, then delimiter matching.

Thread Safety:
An InlineParser holds the frozen reference table and the feature flags
for one document; every parse() call builds a fresh InlineArena. Do not
share one instance between threads while a call is running.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Mapping
from typing import TYPE_CHECKING

from gfmark.config import RenderOptions
from gfmark.location import SourceLocation
from gfmark.nodes import HardBreak, Inline, SoftBreak, Text
from gfmark.parsing.charsets import ASCII_PUNCTUATION, INLINE_SPECIAL
from gfmark.parsing.inline.arena import NIL, Bracket, InlineArena
from gfmark.parsing.inline.emphasis import EmphasisMixin
from gfmark.parsing.inline.links import LinkMixin
from gfmark.parsing.inline.special import ExtendedAutolinks, SpecialInlineMixin

if TYPE_CHECKING:
    from gfmark.nodes import LinkReference


class InlineParser(EmphasisMixin, LinkMixin, SpecialInlineMixin):
    """Parses the text of one leaf block into inline nodes.

    Usage:
        >>> from gfmark.location import SourceLocation
        >>> parser = InlineParser({}, RenderOptions())
        >>> [type(n).__name__ for n in parser.parse("*hi* there", SourceLocation(1, 1))]
        ['Emphasis', 'Text']
    """

    def __init__(
        self,
        references: Mapping[str, LinkReference],
        options: RenderOptions | None = None,
    ) -> None:
        options = options or RenderOptions()
        self._references = references
        self._strikethrough_enabled = options.enable_strikethrough
        self._autolinks_enabled = options.enable_autolinks

        self._arena = InlineArena(SourceLocation(1, 1))
        self._brackets: list[Bracket] = []
        self._backtick_runs: dict[int, list[int]] | None = None
        self._html_closers: dict[str, int] | None = None
        self._autolinks: ExtendedAutolinks | None = None
        self._autolink_starts: list[int] = []
        self._links_formed = 0

    def parse(self, text: str, location: SourceLocation) -> tuple[Inline, ...]:
        """Parse ``text`` (lines joined by ``\\n``) into inline nodes."""
        if not text:
            return ()

        self._arena = InlineArena(location)
        self._brackets = []
        self._backtick_runs = None
        self._html_closers = None
        self._links_formed = 0
        self._autolinks = ExtendedAutolinks(text) if self._autolinks_enabled else None
        self._autolink_starts = self._autolinks.starts if self._autolinks is not None else []
        candidates = frozenset(self._autolink_starts)

        pos = 0
        text_len = len(text)
        while pos < text_len:
            if pos in candidates:
                end = self._try_extended_autolink(text, pos)
                if end is not None:
                    pos = end
                    continue

            char = text[pos]
            match char:
                case "\n":
                    pos = self._handle_newline(text, pos)
                case "\\":
                    pos = self._handle_backslash(text, pos)
                case "`":
                    pos = self._handle_code_span(text, pos)
                case "*" | "_" | "~":
                    pos = self._handle_delimiter_run(text, pos)
                case "[":
                    pos = self._open_bracket(pos, image=False)
                case "!" if text.startswith("![", pos):
                    pos = self._open_bracket(pos, image=True)
                case "]":
                    pos = self._close_bracket(text, pos)
                case "<":
                    pos = self._handle_angle(text, pos)
                case "&":
                    pos = self._handle_entity(text, pos)
                case _:
                    pos = self._handle_text(text, pos)

        self._process_emphasis(NIL)
        return self._arena.collect(self._arena.head, NIL)

    def _append_text(self, content: str) -> None:
        self._arena.append(Text(location=self._arena.location, content=content))

    def _handle_text(self, text: str, pos: int) -> int:
        """Consume plain text up to the next special character or autolink start."""
        end = pos + 1
        text_len = len(text)
        while end < text_len and text[end] not in INLINE_SPECIAL:
            end += 1

        starts = self._autolink_starts
        if starts:
            i = bisect_right(starts, pos)
            if i < len(starts) and starts[i] < end:
                end = starts[i]

        self._append_text(text[pos:end])
        return end

    def _handle_newline(self, text: str, pos: int) -> int:
        """Line ending: hard break after two or more spaces, soft break otherwise."""
        arena = self._arena
        hard = False
        tail = arena.tail
        if tail != NIL:
            item = arena.items[tail]
            if isinstance(item, Text) and item.content.endswith(" "):
                stripped = item.content.rstrip(" ")
                hard = len(item.content) - len(stripped) >= 2
                if stripped:
                    arena.replace(tail, Text(location=item.location, content=stripped))
                else:
                    arena.unlink(tail)

        location = arena.location
        arena.append(HardBreak(location=location) if hard else SoftBreak(location=location))
        return self._skip_leading_spaces(text, pos + 1)

    def _handle_backslash(self, text: str, pos: int) -> int:
        following = text[pos + 1] if pos + 1 < len(text) else ""
        if following == "\n":
            self._arena.append(HardBreak(location=self._arena.location))
            return self._skip_leading_spaces(text, pos + 2)
        if following and following in ASCII_PUNCTUATION:
            self._append_text(following)
            return pos + 2
        self._append_text("\\")
        return pos + 1

    @staticmethod
    def _skip_leading_spaces(text: str, pos: int) -> int:
        while pos < len(text) and text[pos] == " ":
            pos += 1
        return pos

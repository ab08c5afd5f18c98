"""Emphasis, strong emphasis and strikethrough.

Implements the CommonMark delimiter algorithm.
See: https://spec.commonmark.org/0.31.2/#emphasis-and-strong-emphasis

Delimiter runs are pushed onto the arena's delimiter list during the scan.
``_process_emphasis`` then walks closers left to right, pairing each with
the nearest compatible opener below it. ``openers_bottom`` remembers, per
(character, closer-can-open, length mod 3), how far down a failed search
already looked, which keeps the pass linear for runs of unmatched
delimiters.

Strikethrough (``~`` / ``~~``) uses the same pass but only pairs runs of
equal length; runs of three or more tildes are plain text.

Thread Safety:
All state lives in the per-call InlineArena.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gfmark.nodes import Emphasis, Inline, Strikethrough, Strong
from gfmark.parsing.charsets import is_unicode_punctuation, is_unicode_whitespace
from gfmark.parsing.inline.arena import NIL, Delimiter

if TYPE_CHECKING:
    from gfmark.parsing.inline.arena import InlineArena

_MAX_TILDE_RUN = 2


def scan_delimiter_run(text: str, pos: int, char: str) -> tuple[int, bool, bool]:
    """Measure the run at pos and apply the flanking rules.

    Returns:
        (run_length, can_open, can_close)
    """
    end = pos
    text_len = len(text)
    while end < text_len and text[end] == char:
        end += 1

    # Start and end of text count as whitespace
    before = text[pos - 1] if pos > 0 else "\n"
    after = text[end] if end < text_len else "\n"

    before_space = is_unicode_whitespace(before)
    after_space = is_unicode_whitespace(after)
    before_punct = is_unicode_punctuation(before)
    after_punct = is_unicode_punctuation(after)

    left_flanking = not after_space and (not after_punct or before_space or before_punct)
    right_flanking = not before_space and (not before_punct or after_space or after_punct)

    if char == "_":
        can_open = left_flanking and (not right_flanking or before_punct)
        can_close = right_flanking and (not left_flanking or after_punct)
    else:
        can_open = left_flanking
        can_close = right_flanking
    return end - pos, can_open, can_close


class EmphasisMixin:
    """Mixin for delimiter runs and their matching.

    Required Host Attributes:
        - _arena: InlineArena
        - _strikethrough_enabled: bool

    Required Host Methods:
        - _append_text(content) -> None
    """

    def _handle_delimiter_run(self, text: str, pos: int) -> int:
        """Push the run at pos. Returns the position after it."""
        char = text[pos]
        count, can_open, can_close = scan_delimiter_run(text, pos, char)

        if char == "~" and (not self._strikethrough_enabled or count > _MAX_TILDE_RUN):
            self._append_text(char * count)
            return pos + count

        self._arena.append_delimiter(
            Delimiter(
                char=char,
                count=count,
                orig_count=count,
                can_open=can_open,
                can_close=can_close,
            )
        )
        return pos + count

    def _process_emphasis(self, stack_bottom: int) -> None:
        """Match every delimiter above ``stack_bottom`` and drop them from the list."""
        arena: InlineArena = self._arena
        openers_bottom: dict[tuple[str, bool, int], int] = {}

        # Lowest delimiter above stack_bottom
        closer_index = arena.last_delim if arena.last_delim != stack_bottom else NIL
        while closer_index != NIL:
            previous = arena.delimiter(closer_index).prev_delim
            if previous == stack_bottom:
                break
            closer_index = previous

        while closer_index != NIL:
            closer = arena.delimiter(closer_index)
            if not closer.can_close:
                closer_index = closer.next_delim
                continue

            bottom_key = (closer.char, closer.can_open, closer.orig_count % 3)
            bottom = openers_bottom.get(bottom_key, stack_bottom)

            opener_index = closer.prev_delim
            opener_found = False
            while opener_index not in (NIL, stack_bottom, bottom):
                opener = arena.delimiter(opener_index)
                if opener.char == closer.char and opener.can_open and self._can_pair(opener, closer):
                    opener_found = True
                    break
                opener_index = opener.prev_delim

            old_closer_index = closer_index
            if opener_found:
                closer_index = self._pair_delimiters(opener_index, closer_index)
            else:
                closer_index = closer.next_delim
                openers_bottom[bottom_key] = closer.prev_delim
                if not closer.can_open:
                    # Nothing below can ever match this closer
                    arena.remove_delimiter(old_closer_index)

        while arena.last_delim != NIL and arena.last_delim != stack_bottom:
            arena.remove_delimiter(arena.last_delim)

    @staticmethod
    def _can_pair(opener: Delimiter, closer: Delimiter) -> bool:
        if closer.char == "~":
            return opener.count == closer.count
        # Rule of 3: a run that can both open and close may not pair with
        # another if the sum of the lengths is a multiple of 3, unless both are.
        if (opener.can_close or closer.can_open) and (
            closer.orig_count % 3 != 0 and (opener.orig_count + closer.orig_count) % 3 == 0
        ):
            return False
        return True

    @staticmethod
    def _delimiters_to_use(opener: Delimiter, closer: Delimiter) -> int:
        """How many characters the next match consumes from each side.

        ``***x***`` uses one first so the shorter emphasis ends up inside
        the strong emphasis.
        """
        if opener.char == "~":
            return closer.count
        if opener.count >= 3 and closer.count >= 3 and opener.count % 2 and closer.count % 2:
            return 1
        return 2 if opener.count >= 2 and closer.count >= 2 else 1

    def _pair_delimiters(self, opener_index: int, closer_index: int) -> int:
        """Wrap everything between opener and closer. Returns the next closer to try."""
        arena: InlineArena = self._arena
        opener = arena.delimiter(opener_index)
        closer = arena.delimiter(closer_index)

        use = self._delimiters_to_use(opener, closer)
        opener.count -= use
        closer.count -= use

        # Delimiters strictly between the pair can no longer match anything
        between = closer.prev_delim
        while between != opener_index and between != NIL:
            following = arena.delimiter(between).prev_delim
            arena.remove_delimiter(between)
            between = following

        children = arena.collect(arena.next[opener_index], closer_index)
        node: Inline
        if opener.char == "~":
            node = Strikethrough(location=arena.location, children=children)
        elif use == 2:
            node = Strong(location=arena.location, children=children)
        else:
            node = Emphasis(location=arena.location, children=children)
        arena.insert_after(opener_index, node)

        if opener.count == 0:
            arena.remove_delimiter(opener_index)
            arena.unlink(opener_index)

        if closer.count == 0:
            next_closer = closer.next_delim
            arena.remove_delimiter(closer_index)
            arena.unlink(closer_index)
            return next_closer
        return closer_index

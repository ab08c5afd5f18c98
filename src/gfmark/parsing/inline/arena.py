"""Index-addressed storage for one inline parse.

Every scanned piece (finished node, delimiter run, bracket text) lives in a
flat list and is threaded into a doubly linked sequence through parallel
``prev``/``next`` index arrays. Emphasis matching and link formation remove
arbitrary ranges from the middle of that sequence and splice one wrapping
node in their place, which is O(1) per splice with index links.

Delimiter runs form a second linked list (by arena index) so the emphasis
pass can walk only delimiters.

Thread Safety:
InlineArena instances are single-use per parse call. All state is
instance-local; no shared mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass

from gfmark.location import SourceLocation
from gfmark.nodes import Inline, Text

NIL = -1


@dataclass(slots=True)
class Delimiter:
    """A run of ``*``, ``_`` or ``~`` awaiting a partner.

    Attributes:
        char: Delimiter character
        count: Characters not yet used by a match
        orig_count: Run length as scanned (for the rule of 3)
        can_open: Left-flanking (with the ``_`` word rule applied)
        can_close: Right-flanking (with the ``_`` word rule applied)
        prev_delim: Arena index of the previous delimiter, or NIL
        next_delim: Arena index of the next delimiter, or NIL
    """

    char: str
    count: int
    orig_count: int
    can_open: bool
    can_close: bool
    prev_delim: int = NIL
    next_delim: int = NIL


@dataclass(slots=True)
class Bracket:
    """An opening ``[`` or ``![`` awaiting its ``]``.

    Attributes:
        item: Arena index of the bracket's text item
        text_start: Source offset just after the bracket
        image: True for ``![``
        previous_delim: Top of the delimiter list when the bracket was seen
        links_before: Links formed in the text before this bracket opened
        bracket_after: True if another bracket opened after this one
    """

    item: int
    text_start: int
    image: bool
    previous_delim: int
    links_before: int = 0
    bracket_after: bool = False


class InlineArena:
    """Arena of inline items with index links.

    Usage:
        >>> arena = InlineArena(SourceLocation(1, 1))
        >>> first = arena.append(Text(SourceLocation(1, 1), "a"))
        >>> arena.append(Text(SourceLocation(1, 1), "b"))
        1
        >>> [n.content for n in arena.collect(arena.head, NIL)]
        ['ab']

    Complexity:
        - append(), unlink(), insert_after(): O(1)
        - collect(): O(k) for k items in the range
    """

    __slots__ = ("items", "prev", "next", "head", "tail", "last_delim", "location")

    def __init__(self, location: SourceLocation) -> None:
        self.items: list[Inline | Delimiter] = []
        self.prev: list[int] = []
        self.next: list[int] = []
        self.head = NIL
        self.tail = NIL
        self.last_delim = NIL
        self.location = location

    def append(self, item: Inline | Delimiter) -> int:
        """Append an item to the sequence. Returns its arena index."""
        index = len(self.items)
        self.items.append(item)
        self.prev.append(self.tail)
        self.next.append(NIL)
        if self.tail == NIL:
            self.head = index
        else:
            self.next[self.tail] = index
        self.tail = index
        return index

    def append_delimiter(self, delimiter: Delimiter) -> int:
        """Append a delimiter run and push it on the delimiter list."""
        index = self.append(delimiter)
        delimiter.prev_delim = self.last_delim
        if self.last_delim != NIL:
            self.delimiter(self.last_delim).next_delim = index
        self.last_delim = index
        return index

    def delimiter(self, index: int) -> Delimiter:
        item = self.items[index]
        assert isinstance(item, Delimiter)
        return item

    def remove_delimiter(self, index: int) -> None:
        """Drop a delimiter from the delimiter list (its item stays)."""
        delimiter = self.delimiter(index)
        if delimiter.prev_delim != NIL:
            self.delimiter(delimiter.prev_delim).next_delim = delimiter.next_delim
        if delimiter.next_delim != NIL:
            self.delimiter(delimiter.next_delim).prev_delim = delimiter.prev_delim
        else:
            self.last_delim = delimiter.prev_delim
        delimiter.prev_delim = NIL
        delimiter.next_delim = NIL

    def insert_after(self, index: int, item: Inline) -> int:
        """Splice a new item in after ``index``."""
        new_index = len(self.items)
        following = self.next[index]
        self.items.append(item)
        self.prev.append(index)
        self.next.append(following)
        self.next[index] = new_index
        if following == NIL:
            self.tail = new_index
        else:
            self.prev[following] = new_index
        return new_index

    def unlink(self, index: int) -> None:
        """Remove one item from the sequence."""
        self.unlink_range(index, self.next[index])

    def unlink_range(self, start: int, stop: int) -> None:
        """Remove items from ``start`` up to (not including) ``stop``."""
        if start == stop:
            return
        before = self.prev[start]
        if before == NIL:
            self.head = stop
        else:
            self.next[before] = stop
        if stop == NIL:
            self.tail = before
        else:
            self.prev[stop] = before

    def replace(self, index: int, item: Inline) -> None:
        self.items[index] = item

    def collect(self, start: int, stop: int) -> tuple[Inline, ...]:
        """Detach items ``start`` .. ``stop`` (exclusive) as finished nodes.

        Delimiter runs become literal text for whatever characters were not
        used by a match; adjacent text is merged.
        """
        nodes: list[Inline] = []
        pending: list[str] = []
        location = self.location
        index = start
        while index != stop and index != NIL:
            item = self.items[index]
            if isinstance(item, Delimiter):
                if item.count:
                    pending.append(item.char * item.count)
            elif isinstance(item, Text):
                pending.append(item.content)
            else:
                if pending:
                    nodes.append(Text(location=location, content="".join(pending)))
                    pending = []
                nodes.append(item)
            index = self.next[index]
        if pending:
            nodes.append(Text(location=location, content="".join(pending)))
        self.unlink_range(start, stop)
        return tuple(nodes)

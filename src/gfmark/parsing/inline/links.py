"""Link and image parsing.

Brackets are tracked on a stack while scanning. When a ``]`` is reached
the top bracket is tried against, in order:

- an inline tail: ``(destination "title")``
- a full reference: ``[label]``
- a collapsed (``[]``) or shortcut reference, using the bracketed text
  itself as the label (only when no other bracket opened inside it)

A link may not contain another link: once a link forms, every earlier
``[`` on the stack is deactivated. Images may contain links and images;
nested images contribute their alt text.

CommonMark 0.31.2 compliance:
- Destinations may be empty only in the inline form (``[a]()``)
- A title must be separated from the destination by whitespace
- At most one line ending between the parts of an inline tail
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from gfmark.nodes import (
    Autolink,
    CodeSpan,
    Emphasis,
    Entity,
    HardBreak,
    HtmlInline,
    Image,
    Inline,
    Link,
    SoftBreak,
    Strikethrough,
    Strong,
    Text,
)
from gfmark.parsing.inline.arena import NIL, Bracket
from gfmark.parsing.references import (
    MAX_LABEL_LENGTH,
    parse_link_destination,
    parse_link_label,
    parse_link_title,
    skip_spaces,
)
from gfmark.utils.text import normalize_label, normalize_uri

if TYPE_CHECKING:
    from gfmark.nodes import LinkReference
    from gfmark.parsing.inline.arena import InlineArena


def plain_text(nodes: tuple[Inline, ...]) -> str:
    """Flatten inline nodes to the text an image's alt attribute shows.

    Usage:
        >>> from gfmark.location import SourceLocation
        >>> loc = SourceLocation(1, 1)
        >>> plain_text((Text(loc, "a "), Emphasis(loc, (Text(loc, "b"),))))
        'a b'
    """
    parts: list[str] = []
    for node in nodes:
        match node:
            case Text(content=content) | Entity(content=content):
                parts.append(content)
            case CodeSpan(code=code):
                parts.append(code)
            case SoftBreak() | HardBreak():
                parts.append("\n")
            case Emphasis(children=children) | Strong(children=children):
                parts.append(plain_text(children))
            case Strikethrough(children=children) | Link(children=children):
                parts.append(plain_text(children))
            case Image(alt=alt):
                parts.append(alt)
            case Autolink(text=text):
                parts.append(text)
            case HtmlInline(html=html):
                parts.append(html)
    return "".join(parts)


def _unlink_autolinks(nodes: tuple[Inline, ...]) -> tuple[Inline, ...]:
    """Turn autolinks inside link text back into text (links do not nest)."""
    result: list[Inline] = []
    for node in nodes:
        match node:
            case Autolink(location=location, text=text):
                result.append(Text(location=location, content=text))
            case Emphasis(location=location, children=children):
                result.append(Emphasis(location=location, children=_unlink_autolinks(children)))
            case Strong(location=location, children=children):
                result.append(Strong(location=location, children=_unlink_autolinks(children)))
            case Strikethrough(location=location, children=children):
                result.append(
                    Strikethrough(location=location, children=_unlink_autolinks(children))
                )
            case _:
                result.append(node)
    return tuple(result)


class LinkMixin:
    """Mixin for ``[``, ``![`` and ``]``.

    Required Host Attributes:
        - _arena: InlineArena
        - _brackets: list[Bracket]
        - _links_formed: int
        - _references: Mapping[str, LinkReference]

    Required Host Methods:
        - _append_text(content) -> None
        - _process_emphasis(stack_bottom) -> None
    """

    _references: Mapping[str, LinkReference]
    _links_formed: int

    def _open_bracket(self, pos: int, *, image: bool) -> int:
        arena: InlineArena = self._arena
        marker = "![" if image else "["
        index = arena.append(Text(location=arena.location, content=marker))
        if self._brackets:
            self._brackets[-1].bracket_after = True
        self._brackets.append(
            Bracket(
                item=index,
                text_start=pos + len(marker),
                image=image,
                previous_delim=arena.last_delim,
                links_before=self._links_formed,
            )
        )
        return pos + len(marker)

    def _close_bracket(self, text: str, pos: int) -> int:
        """Handle ``]`` at pos. Returns the position after whatever was consumed."""
        if not self._brackets:
            self._append_text("]")
            return pos + 1

        opener = self._brackets[-1]
        # Links cannot nest: a [ opened before the latest link is inert
        if not opener.image and opener.links_before < self._links_formed:
            self._brackets.pop()
            self._append_text("]")
            return pos + 1

        target = self._parse_inline_tail(text, pos + 1)
        if target is None:
            target = self._resolve_reference(text, pos, opener)
        if target is None:
            self._brackets.pop()
            self._append_text("]")
            return pos + 1

        url, title, end = target
        self._brackets.pop()
        self._build_link(opener, url, title)
        return end

    def _parse_inline_tail(self, text: str, pos: int) -> tuple[str, str | None, int] | None:
        """Parse ``(destination "title")`` starting at pos."""
        if pos >= len(text) or text[pos] != "(":
            return None

        dest_start = skip_spaces(text, pos + 1)
        dest_result = parse_link_destination(text, dest_start)
        if dest_result is None:
            return None
        destination, dest_end = dest_result
        if dest_end == dest_start and (dest_end >= len(text) or text[dest_end] != ")"):
            return None

        title: str | None = None
        after = skip_spaces(text, dest_end)
        if after > dest_end:
            title_result = parse_link_title(text, after)
            if title_result is not None:
                title, title_end = title_result
                after = skip_spaces(text, title_end)

        if after >= len(text) or text[after] != ")":
            return None
        return destination, title, after + 1

    def _resolve_reference(
        self, text: str, pos: int, opener: Bracket
    ) -> tuple[str, str | None, int] | None:
        """Full, collapsed or shortcut reference after the ``]`` at pos."""
        after = pos + 1
        label: str | None = None
        end = after

        if text.startswith("[]", after):
            end = after + 2
        elif after < len(text) and text[after] == "[":
            label_result = parse_link_label(text, after)
            if label_result is not None:
                label, end = label_result

        if label is None:
            if opener.bracket_after or pos - opener.text_start > MAX_LABEL_LENGTH:
                return None
            label = text[opener.text_start : pos]

        reference = self._references.get(normalize_label(label))
        if reference is None:
            return None
        return reference.url, reference.title, end

    def _build_link(self, opener: Bracket, url: str, title: str | None) -> None:
        arena: InlineArena = self._arena
        self._process_emphasis(opener.previous_delim)
        children = arena.collect(arena.next[opener.item], NIL)

        node: Inline
        if opener.image:
            node = Image(
                location=arena.location,
                url=normalize_uri(url),
                alt=plain_text(children),
                title=title,
            )
        else:
            node = Link(
                location=arena.location,
                url=normalize_uri(url),
                title=title,
                children=_unlink_autolinks(children),
            )
            self._links_formed += 1
        arena.replace(opener.item, node)

"""Fixed-form inline spans.

Handles code spans, ``<...>`` autolinks, raw HTML, character references
and GFM extended autolinks (``www.``, ``http://``, ``https://`` and bare
email addresses).

Code span closers are found through an index of every maximal backtick
run in the text, built on the first backtick, so a text with many
unmatched openers is still scanned in linear time. Comments, processing
instructions, CDATA and declarations are checked against the last
offset of their closer the same way, and extended autolinks go through
a per-text ExtendedAutolinks index.
"""

from __future__ import annotations

import re
import string
from bisect import bisect_left, bisect_right
from typing import TYPE_CHECKING

from gfmark.nodes import Autolink, CodeSpan, Entity, HtmlInline
from gfmark.parsing.charsets import AUTOLINK_BOUNDARY
from gfmark.scanner.patterns import HTML_TAG_RE
from gfmark.utils.text import match_entity, normalize_uri

if TYPE_CHECKING:
    from gfmark.nodes import Inline
    from gfmark.parsing.inline.arena import InlineArena

# https://spec.commonmark.org/0.31.2/#autolinks
_URI_AUTOLINK_RE = re.compile(r"<([A-Za-z][A-Za-z0-9+.\-]{1,31}:[^\x00-\x20<>]*)>")
_EMAIL_AUTOLINK_RE = re.compile(
    r"<([a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*)>"
)

_BACKTICK_RUN_RE = re.compile(r"`+")

_URL_PREFIX_RE = re.compile(r"www\.|https?://")
_EXTENDED_EMAIL_RE = re.compile(r"[A-Za-z0-9.+_-]+@[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)+")
_DOMAIN_RE = re.compile(r"[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)*")
_PATH_END_RE = re.compile(r"[\s<]")

_EMAIL_LOCAL_CHARS = frozenset(string.ascii_letters + string.digits + ".+_-")
_TRAILING_PUNCTUATION = frozenset("?!.,:*_~")

# Raw HTML forms that run to a fixed closer: opener, closer, least closer offset
_HTML_CLOSERS = (
    ("<!--", "-->", 2),
    ("<?", "?>", 2),
    ("<![CDATA[", "]]>", 9),
    ("<!", ">", 3),
)


def find_backtick_runs(text: str) -> dict[int, list[int]]:
    """Map run length to the sorted start offsets of maximal backtick runs."""
    runs: dict[int, list[int]] = {}
    for m in _BACKTICK_RUN_RE.finditer(text):
        runs.setdefault(m.end() - m.start(), []).append(m.start())
    return runs


def _email_starts(text: str) -> list[int]:
    """Start of the local part before each ``@``.

    Each walk back stops at the previous ``@``, so every character is
    visited once.
    """
    starts: list[int] = []
    floor = 0
    at = text.find("@")
    while at != -1:
        start = at
        while start > floor and text[start - 1] in _EMAIL_LOCAL_CHARS:
            start -= 1
        while start < at and text[start] == "_":
            start += 1
        if start < at:
            starts.append(start)
        floor = at + 1
        at = text.find("@", floor)
    return starts


class ExtendedAutolinks:
    """Extended autolink matcher for one text.

    Candidate offsets and the maximal domain runs are found once, up
    front. Domains are validated against the run they sit in (results
    cached per run), and the path after a domain is only scanned once
    the domain is known to be valid, so a text full of failing
    candidates stays linear.

    Usage:
        >>> links = ExtendedAutolinks("see www.example.com.")
        >>> links.starts
        [4]
        >>> links.match(4)
        ('http://www.example.com', 'www.example.com', 'www', 19)
    """

    __slots__ = ("_emails", "_run_ends", "_run_starts", "_runs", "_text", "_urls", "starts")

    def __init__(self, text: str) -> None:
        self._text = text
        self._urls = frozenset(m.start() for m in _URL_PREFIX_RE.finditer(text))
        self._emails = frozenset(_email_starts(text))
        self.starts: list[int] = sorted(self._urls | self._emails)

        self._run_starts: list[int] = []
        self._run_ends: list[int] = []
        for m in _DOMAIN_RE.finditer(text):
            self._run_starts.append(m.start())
            self._run_ends.append(m.end())
        self._runs: dict[int, tuple[int, int, bool]] = {}

    def match(self, pos: int) -> tuple[str, str, str, int] | None:
        """Match an extended autolink starting at pos.

        Returns:
            (href, link_text, kind, end_pos) or None
        """
        text = self._text
        if pos in self._emails:
            m = _EXTENDED_EMAIL_RE.match(text, pos)
            if m is not None:
                address = m.group()
                if address[-1] in "-_":
                    return None
                return "mailto:" + address, address, "email", m.end()

        if pos not in self._urls:
            return None
        if pos > 0 and text[pos - 1] not in AUTOLINK_BOUNDARY:
            return None

        www = text.startswith("www.", pos)
        prefix_end = pos + 4 if www else text.index("://", pos) + 3
        domain_end = self._domain_end(pos if www else prefix_end, require_period=www)
        if domain_end is None:
            return None

        m = _PATH_END_RE.search(text, domain_end)
        path_end = m.start() if m is not None else len(text)
        link = trim_autolink(text[pos:path_end])
        if pos + len(link) <= prefix_end:
            return None
        href = "http://" + link if www else link
        return href, link, "www" if www else "uri", pos + len(link)

    def _domain_end(self, start: int, *, require_period: bool) -> int | None:
        """End of a valid domain beginning at start, or None.

        A domain needs non-empty labels and no ``_`` in its last two
        labels; ``www.`` links also need at least one period.
        """
        text = self._text
        i = bisect_right(self._run_starts, start) - 1
        if i < 0 or start >= self._run_ends[i] or text[start] == ".":
            return None
        end = self._run_ends[i]

        if i not in self._runs:
            run_start = self._run_starts[i]
            last_dot = text.rfind(".", run_start, end)
            second_dot = text.rfind(".", run_start, last_dot) if last_dot != -1 else -1
            self._runs[i] = (last_dot, second_dot, "_" in text[second_dot + 1 : end])
        last_dot, second_dot, tail_underscore = self._runs[i]

        if last_dot < start:
            if require_period:
                return None
            return None if "_" in text[start:end] else end
        if second_dot < start:
            return None if "_" in text[start:end] else end
        return None if tail_underscore else end


def trim_autolink(link: str) -> str:
    """Drop trailing punctuation, unmatched ``)`` and trailing entity references.

    Usage:
        >>> trim_autolink("www.example.com/a_(b)).")
        'www.example.com/a_(b)'
        >>> trim_autolink("www.example.com/?q=1&amp;")
        'www.example.com/?q=1'
    """
    end = len(link)
    opens = link.count("(")
    closes = link.count(")")
    while end:
        last = link[end - 1]
        if last in _TRAILING_PUNCTUATION:
            end -= 1
        elif last == ")" and closes > opens:
            closes -= 1
            end -= 1
        elif last == ";":
            start = end - 2
            while start >= 0 and link[start].isascii() and link[start].isalnum():
                start -= 1
            if 0 <= start < end - 2 and link[start] == "&":
                end = start
            else:
                end -= 1
        else:
            break
    return link[:end]


def match_extended_autolink(text: str, pos: int) -> tuple[str, str, str, int] | None:
    """Match a GFM extended autolink starting at pos.

    Returns:
        (href, link_text, kind, end_pos) or None
    """
    return ExtendedAutolinks(text).match(pos)


class SpecialInlineMixin:
    """Mixin for code spans, autolinks, raw HTML and entities.

    Required Host Attributes:
        - _arena: InlineArena
        - _backtick_runs: dict[int, list[int]] | None
        - _html_closers: dict[str, int] | None
        - _autolinks: ExtendedAutolinks | None

    Required Host Methods:
        - _append_text(content) -> None
    """

    _backtick_runs: dict[int, list[int]] | None
    _html_closers: dict[str, int] | None
    _autolinks: ExtendedAutolinks | None

    def _handle_code_span(self, text: str, pos: int) -> int:
        arena: InlineArena = self._arena
        end = pos
        while end < len(text) and text[end] == "`":
            end += 1
        length = end - pos

        if self._backtick_runs is None:
            self._backtick_runs = find_backtick_runs(text)
        starts = self._backtick_runs.get(length, [])
        i = bisect_left(starts, end)
        if i == len(starts):
            self._append_text("`" * length)
            return end

        closer = starts[i]
        code = text[end:closer].replace("\n", " ")
        if len(code) >= 2 and code[0] == " " and code[-1] == " " and code.strip(" "):
            code = code[1:-1]
        arena.append(CodeSpan(location=arena.location, code=code))
        return closer + length

    def _handle_angle(self, text: str, pos: int) -> int:
        """``<`` starts a URI autolink, an email autolink, raw HTML or plain text."""
        arena: InlineArena = self._arena
        node: Inline

        if m := _URI_AUTOLINK_RE.match(text, pos):
            target = m.group(1)
            node = Autolink(location=arena.location, url=normalize_uri(target), text=target)
        elif m := _EMAIL_AUTOLINK_RE.match(text, pos):
            target = m.group(1)
            node = Autolink(
                location=arena.location,
                url="mailto:" + normalize_uri(target),
                text=target,
                kind="email",
            )
        elif not self._unclosed_html(text, pos) and (m := HTML_TAG_RE.match(text, pos)):
            node = HtmlInline(location=arena.location, html=m.group())
        else:
            self._append_text("<")
            return pos + 1

        arena.append(node)
        return m.end()

    def _unclosed_html(self, text: str, pos: int) -> bool:
        """True if a comment, PI, CDATA or declaration at pos has no closer."""
        if self._html_closers is None:
            self._html_closers = {closer: text.rfind(closer) for _, closer, _ in _HTML_CLOSERS}
        for opener, closer, offset in _HTML_CLOSERS:
            if text.startswith(opener, pos):
                return self._html_closers[closer] < pos + offset
        return False

    def _handle_entity(self, text: str, pos: int) -> int:
        result = match_entity(text, pos)
        if result is None:
            self._append_text("&")
            return pos + 1
        decoded, end = result
        arena: InlineArena = self._arena
        arena.append(Entity(location=arena.location, reference=text[pos:end], content=decoded))
        return end

    def _try_extended_autolink(self, text: str, pos: int) -> int | None:
        if self._autolinks is None:
            return None
        result = self._autolinks.match(pos)
        if result is None:
            return None
        href, link_text, kind, end = result
        arena: InlineArena = self._arena
        arena.append(
            Autolink(
                location=arena.location,
                url=normalize_uri(href),
                text=link_text,
                kind=kind,  # type: ignore[arg-type]
            )
        )
        return end

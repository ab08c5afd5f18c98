"""Text helpers shared by the parser and the renderer.

Example:
    >>> from gfmark.utils.text import escape_html, normalize_label
    >>> escape_html('<a href="x">&</a>')
    '&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;'
    >>> normalize_label("  Foo\\n  BAR ")
    'foo bar'
"""

from __future__ import annotations

import re
from html.entities import html5 as _HTML5_ENTITIES
from urllib.parse import quote

# Backslash followed by ASCII punctuation
_ESCAPE_PATTERN = re.compile(r"\\([!\"#$%&'()*+,\-./:;<=>?@\[\\\]^_`{|}~])")

# Named, decimal and hexadecimal character references
_ENTITY_PATTERN = re.compile(r"&(?:#[xX][0-9a-fA-F]{1,6}|#[0-9]{1,7}|[A-Za-z][A-Za-z0-9]{1,31});")

_ESCAPE_OR_ENTITY = re.compile(_ESCAPE_PATTERN.pattern + "|" + _ENTITY_PATTERN.pattern)

_WHITESPACE_RUN = re.compile(r"[ \t\r\n]+")

# Lone % not starting a %XX escape
_BARE_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")

_URL_SAFE = "/:?#[]@!$&'()*+,;=-_.~%"

_ESCAPE_TABLE = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"})


def escape_html(text: str) -> str:
    """Escape &, <, > and " for text content and attribute values.

    Single quotes are left alone; every attribute gfmark writes is
    double-quoted.
    """
    return text.translate(_ESCAPE_TABLE)


def decode_entity(reference: str) -> str | None:
    """Decode one complete character reference such as ``&amp;`` or ``&#x41;``.

    Returns None for unknown names. Code point 0 and values outside the
    Unicode range decode to U+FFFD.
    """
    if reference.startswith("&#"):
        body = reference[2:-1]
        codepoint = int(body[1:], 16) if body[:1] in ("x", "X") else int(body)
        if codepoint == 0 or codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
            return "\ufffd"
        return chr(codepoint)
    return _HTML5_ENTITIES.get(reference[1:])


def match_entity(text: str, pos: int) -> tuple[str, int] | None:
    """Match a character reference starting at text[pos] == "&".

    Returns:
        (decoded, end_pos) or None if no known reference starts here
    """
    m = _ENTITY_PATTERN.match(text, pos)
    if m is None:
        return None
    decoded = decode_entity(m.group())
    if decoded is None:
        return None
    return decoded, m.end()


def unescape_string(text: str) -> str:
    """Resolve backslash escapes and character references.

    Used for link destinations, titles and fence info strings.
    """
    if "\\" not in text and "&" not in text:
        return text

    def replace(m: re.Match[str]) -> str:
        if m.group(1) is not None:
            return m.group(1)
        decoded = decode_entity(m.group())
        return m.group() if decoded is None else decoded

    return _ESCAPE_OR_ENTITY.sub(replace, text)


def normalize_label(label: str) -> str:
    """Normalize a link label for reference matching.

    Case-folds and collapses internal whitespace to single spaces.
    """
    return _WHITESPACE_RUN.sub(" ", label.strip()).casefold()


def normalize_uri(url: str) -> str:
    """Percent-encode characters that are not URL-safe.

    Existing %XX escapes are preserved; a lone % becomes %25.
    """
    return quote(_BARE_PERCENT.sub("%25", url), safe=_URL_SAFE)

"""Inline parsing subsystem.

Provides the parser for the text of leaf blocks:
- Emphasis and strong (*, _)
- Strikethrough (~, ~~)
- Code spans (`)
- Links, images and reference links
- Autolinks (<...> and GFM extended)
- Raw HTML and character references
- Hard and soft line breaks

Architecture:
A single scan fills an InlineArena; the CommonMark delimiter algorithm
then pairs emphasis runs in place.
See: https://spec.commonmark.org/0.31.2/#emphasis-and-strong-emphasis
"""

from __future__ import annotations

from gfmark.parsing.inline.arena import NIL, Bracket, Delimiter, InlineArena
from gfmark.parsing.inline.core import InlineParser
from gfmark.parsing.inline.emphasis import EmphasisMixin, scan_delimiter_run
from gfmark.parsing.inline.links import LinkMixin, plain_text
from gfmark.parsing.inline.special import (
    ExtendedAutolinks,
    SpecialInlineMixin,
    match_extended_autolink,
    trim_autolink,
)

__all__ = [
    "NIL",
    "Bracket",
    "Delimiter",
    "EmphasisMixin",
    "ExtendedAutolinks",
    "InlineArena",
    "InlineParser",
    "LinkMixin",
    "SpecialInlineMixin",
    "match_extended_autolink",
    "plain_text",
    "scan_delimiter_run",
    "trim_autolink",
]

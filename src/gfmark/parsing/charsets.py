"""Character sets for O(1) classification.

All sets are module-level frozensets: immutable, allocated once.

Usage:
    from gfmark.parsing.charsets import ASCII_PUNCTUATION

    if char in ASCII_PUNCTUATION:
        ...
"""

import unicodedata

# https://spec.commonmark.org/0.31.2/#ascii-punctuation-character
ASCII_PUNCTUATION: frozenset[str] = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

WHITESPACE: frozenset[str] = frozenset(" \t\n\r\f\v")

# Characters that end a plain-text run in the inline scanner
INLINE_SPECIAL: frozenset[str] = frozenset("*_~`[]!\\\n<&")

# Bare autolinks may only start after one of these (or at the start of text)
AUTOLINK_BOUNDARY: frozenset[str] = frozenset(" \t\n*_~(\"'")

# First characters that can start a block other than a paragraph. Lines whose
# first non-space character is not in this set (and that are not indented
# code) skip the block-start matchers entirely.
BLOCK_START_CHARS: frozenset[str] = frozenset("#`~*+_=<>-|:0123456789")


def is_unicode_punctuation(char: str) -> bool:
    """Unicode punctuation (P*) or symbol (S*) character."""
    if not char:
        return False
    if char in ASCII_PUNCTUATION:
        return True
    category = unicodedata.category(char)
    return category[0] in ("P", "S")


def is_unicode_whitespace(char: str) -> bool:
    """Unicode whitespace; the empty string (text boundary) counts too."""
    if not char:
        return True
    if char in WHITESPACE:
        return True
    return unicodedata.category(char) == "Zs"

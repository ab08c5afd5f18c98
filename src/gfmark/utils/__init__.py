"""Utility modules for gfmark.

Provides:
- text: escape_html, entity decoding, label and URI normalization
- logger: get_logger for logging
"""

from gfmark.utils.logger import get_logger
from gfmark.utils.text import (
    decode_entity,
    escape_html,
    normalize_label,
    normalize_uri,
    unescape_string,
)

__all__ = [
    "decode_entity",
    "escape_html",
    "get_logger",
    "normalize_label",
    "normalize_uri",
    "unescape_string",
]

"""Regular expressions for raw HTML recognition.

Shared by the HTML block matcher (type 7 start condition), the inline raw
HTML scanner and the sanitizer's tag tokenizer. Follows the CommonMark
definitions of open tags, closing tags, comments, processing instructions,
declarations and CDATA sections.
"""

from __future__ import annotations

import re

TAG_NAME = r"[A-Za-z][A-Za-z0-9-]*"
ATTRIBUTE_NAME = r"[A-Za-z_:][A-Za-z0-9:._-]*"
_UNQUOTED_VALUE = r"[^\"'=<>`\x00-\x20]+"
_SINGLE_QUOTED_VALUE = r"'[^']*'"
_DOUBLE_QUOTED_VALUE = r'"[^"]*"'
ATTRIBUTE_VALUE = rf"(?:{_UNQUOTED_VALUE}|{_SINGLE_QUOTED_VALUE}|{_DOUBLE_QUOTED_VALUE})"
_ATTRIBUTE = rf"(?:\s+{ATTRIBUTE_NAME}(?:\s*=\s*{ATTRIBUTE_VALUE})?)"

OPEN_TAG = rf"<{TAG_NAME}{_ATTRIBUTE}*\s*/?>"
CLOSE_TAG = rf"</{TAG_NAME}\s*>"
_COMMENT = r"<!-->|<!--->|<!--[\s\S]*?-->"
_PROCESSING = r"<\?[\s\S]*?\?>"
_DECLARATION = r"<![A-Za-z]+[^>]*>"
_CDATA = r"<!\[CDATA\[[\s\S]*?\]\]>"

HTML_TAG_RE = re.compile(
    rf"(?:{OPEN_TAG}|{CLOSE_TAG}|{_COMMENT}|{_PROCESSING}|{_DECLARATION}|{_CDATA})"
)

# Whole-line open or closing tag (HTML block type 7)
HTML_BLOCK_TAG_LINE_RE = re.compile(rf"(?:{OPEN_TAG}|{CLOSE_TAG})[ \t]*$")

# Tokenizer pieces for the sanitizer
TAG_PARTS_RE = re.compile(rf"<(/?)({TAG_NAME})((?:{_ATTRIBUTE})*)\s*(/?)>")
ATTRIBUTE_RE = re.compile(rf"\s+({ATTRIBUTE_NAME})(?:\s*=\s*({ATTRIBUTE_VALUE}))?")

"""Parsing pipeline producing a typed Document.

Runs the stages in order, each consuming the previous stage's output:

    LineScanner -> BlockBuilder (blocks + reference table) -> InlineParser

Thread Safety:
- Parser reads RenderOptions from a ContextVar (thread-local)
- Every parse() call builds its own scanner, builder and reference table
- The resulting Document is immutable and safe to share across threads
"""

from __future__ import annotations


from gfmark.config import RenderOptions, get_render_options
from gfmark.errors import EncodingError
from gfmark.nodes import Document
from gfmark.parsing import BlockBuilder
from gfmark.scanner import LineScanner
from gfmark.utils.logger import get_logger

logger = get_logger(__name__)


def decode_source(source: str | bytes | bytearray) -> str:
    """Return the input as text, rejecting anything that is not valid UTF-8.

    Bytes are decoded strictly. A str is checked for lone surrogates, which
    have no UTF-8 encoding.

    Raises:
        EncodingError: With the offset of the first offending byte or code point

    Example:
        >>> decode_source(b"caf\\xc3\\xa9")
        'café'
    """
    if isinstance(source, (bytes, bytearray)):
        try:
            return bytes(source).decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(e.reason, e.start) from e
    if not isinstance(source, str):
        raise TypeError(f"expected str or bytes, got {type(source).__name__}")
    try:
        source.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(e.reason, e.start) from e
    return source


class Parser:
    """Markdown parser for one source text.

    Usage:
        >>> doc = Parser("# Hello\\n\\nWorld").parse()
        >>> [type(block).__name__ for block in doc.children]
        ['Heading', 'BlankRun', 'Paragraph']

    Thread Safety:
        Parser instances are single-use. Configuration is read from the
        ContextVar at parse() time, so wrap the call in
        render_options_context() to use non-default options.
    """

    __slots__ = ("_source",)

    def __init__(self, source: str | bytes | bytearray) -> None:
        self._source = decode_source(source)

    @property
    def _options(self) -> RenderOptions:
        """Current render options (thread-local)."""
        return get_render_options()

    def parse(self) -> Document:
        """Parse the source into a Document."""
        options = self._options
        lines = LineScanner(self._source, tab_width=options.tab_width)
        doc = BlockBuilder(options).build(lines)
        logger.debug(
            "Parsed %d chars into %d blocks (%d references)",
            len(self._source),
            len(doc.children),
            len(doc.references),
        )
        return doc

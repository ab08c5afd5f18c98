"""
gfmark: GitHub-Flavored Markdown to HTML

Parses GFM (CommonMark plus tables, strikethrough, extended autolinks and
task lists) into an immutable typed tree and renders it as HTML under a
configurable raw-HTML sanitization policy. Zero runtime dependencies.

Quick Start:
    >>> from gfmark import render
    >>> render("# Hello, **World**!")
    '<h1>Hello, <strong>World</strong>!</h1>\\n'

    >>> # Parse and render separately
    >>> from gfmark import parse, render_document
    >>> doc = parse("- [x] done")
    >>> doc.children[0].items[0].checked
    True

    >>> # Or use the high-level Markdown class
    >>> from gfmark import Markdown, RenderOptions
    >>> md = Markdown(RenderOptions(sanitize_policy="escape-all"))
    >>> md("<b>hi</b>")
    '<p>&lt;b&gt;hi&lt;/b&gt;</p>\\n'

Errors:
    Malformed Markdown never raises. The only input-driven failure is
    EncodingError for bytes that are not valid UTF-8 (or a str holding lone
    surrogates).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from gfmark.config import (
    RenderOptions,
    SanitizePolicy,
    get_render_options,
    render_options_context,
    reset_render_options,
    set_render_options,
)
from gfmark.errors import ConfigError, EncodingError, GfmarkError, RenderError
from gfmark.location import SourceLocation
from gfmark.nodes import (
    Alignment,
    Autolink,
    BlankRun,
    Block,
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Document,
    Emphasis,
    Entity,
    HardBreak,
    Heading,
    HtmlBlock,
    HtmlInline,
    Image,
    Inline,
    Link,
    LinkReference,
    List,
    ListItem,
    Paragraph,
    SoftBreak,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from gfmark.parser import Parser, decode_source
from gfmark.renderers.html import HtmlRenderer
from gfmark.sanitize import HtmlSanitizer, is_dangerous_url

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def parse(markdown_text: str | bytes | bytearray, options: RenderOptions | None = None) -> Document:
    """Parse Markdown into a typed Document.

    Args:
        markdown_text: Markdown source (str, or UTF-8 bytes)
        options: Render options (defaults if None)

    Returns:
        Document root node

    Raises:
        EncodingError: If the input is not valid UTF-8
    """
    with render_options_context(options or RenderOptions()):
        return Parser(markdown_text).parse()


def render_document(doc: Document, options: RenderOptions | None = None) -> str:
    """Render a Document produced by parse() to HTML.

    Raises:
        RenderError: If doc is not a Document
    """
    options = options or RenderOptions()
    return HtmlRenderer(options.sanitize_policy).render(doc)


def render(markdown_text: str | bytes | bytearray, options: RenderOptions | None = None) -> str:
    """Convert Markdown to HTML.

    Args:
        markdown_text: Markdown source (str, or UTF-8 bytes)
        options: Render options (defaults if None)

    Returns:
        HTML string; empty input gives an empty string

    Raises:
        EncodingError: If the input is not valid UTF-8
    """
    options = options or RenderOptions()
    doc = parse(markdown_text, options)
    html = render_document(doc, options)
    logger.debug("Rendered %d blocks to %d chars of HTML", len(doc.children), len(html))
    return html


class Markdown:
    """High-level Markdown processor holding one RenderOptions.

    Usage:
        >>> md = Markdown()
        >>> md("~~old~~ new")
        '<p><del>old</del> new</p>\\n'

        >>> # Access the tree
        >>> doc = md.parse("# Heading")
        >>> doc.children[0].level
        1

    Thread Safety:
        Options are immutable and each call activates them through a
        ContextVar, so one instance can be shared between threads.
    """

    __slots__ = ("_options", "_renderer")

    def __init__(self, options: RenderOptions | None = None) -> None:
        self._options = options or RenderOptions()
        self._renderer = HtmlRenderer(self._options.sanitize_policy)

    @property
    def options(self) -> RenderOptions:
        return self._options

    def __call__(self, markdown_text: str | bytes | bytearray) -> str:
        """Parse and render in one call."""
        return self.render(self.parse(markdown_text))

    def parse(self, markdown_text: str | bytes | bytearray) -> Document:
        return parse(markdown_text, self._options)

    def render(self, doc: Document) -> str:
        return self._renderer.render(doc)

    def render_many(self, texts: Iterable[str | bytes | bytearray]) -> list[str]:
        """Render several documents with the same options.

        Example:
            >>> Markdown().render_many(["*a*", "b"])
            ['<p><em>a</em></p>\\n', '<p>b</p>\\n']
        """
        with render_options_context(self._options):
            return [self._renderer.render(Parser(text).parse()) for text in texts]


__all__ = [  # noqa: RUF022 (grouped by category)
    # Version
    "__version__",
    # Core API
    "parse",
    "render",
    "render_document",
    "decode_source",
    # Block nodes
    "Block",
    "BlankRun",
    "BlockQuote",
    "CodeBlock",
    "Document",
    "Heading",
    "HtmlBlock",
    "List",
    "ListItem",
    "Paragraph",
    "Table",
    "TableCell",
    "TableRow",
    "ThematicBreak",
    "Alignment",
    "LinkReference",
    # Inline nodes
    "Inline",
    "Autolink",
    "CodeSpan",
    "Emphasis",
    "Entity",
    "HardBreak",
    "HtmlInline",
    "Image",
    "Link",
    "SoftBreak",
    "Strikethrough",
    "Strong",
    "Text",
    # Parser / renderer components
    "Parser",
    "HtmlRenderer",
    "HtmlSanitizer",
    "is_dangerous_url",
    # Configuration (ContextVar-based)
    "RenderOptions",
    "SanitizePolicy",
    "get_render_options",
    "set_render_options",
    "reset_render_options",
    "render_options_context",
    # Errors
    "GfmarkError",
    "EncodingError",
    "ConfigError",
    "RenderError",
    # Location
    "SourceLocation",
    # High-level
    "Markdown",
]

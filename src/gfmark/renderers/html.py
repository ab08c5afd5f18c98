"""HTML renderer using StringBuilder pattern.

Renders the typed tree to HTML in a single depth-first walk. Literal text,
code and attribute values are always escaped; raw HTML goes through the
HtmlSanitizer for the active SanitizePolicy, and link/image destinations
with a dangerous scheme are replaced by an empty placeholder under the
SANITIZE and ESCAPE_ALL policies.

Thread Safety:
HtmlRenderer holds only its policy. Every render() call builds its own
StringBuilder, so one instance can be shared between threads.

Output format:
Block tags start on their own line, like the CommonMark reference
renderer (``<hr />``, ``<br />``, ``class="language-x"`` on fenced code).
Identical input and policy always give byte-identical output.
"""

from __future__ import annotations

import logging

from gfmark.config import SanitizePolicy, get_render_options
from gfmark.errors import RenderError
from gfmark.nodes import (
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
    List,
    ListItem,
    Paragraph,
    SoftBreak,
    Strikethrough,
    Strong,
    Table,
    TableRow,
    Text,
    ThematicBreak,
)
from gfmark.sanitize import HtmlSanitizer, is_dangerous_url
from gfmark.stringbuilder import StringBuilder
from gfmark.utils.text import escape_html

logger = logging.getLogger(__name__)

_TASK_CHECKBOX = '<input type="checkbox" disabled /> '
_TASK_CHECKBOX_CHECKED = '<input type="checkbox" disabled checked /> '


class HtmlRenderer:
    """Render a Document to HTML.

    Usage:
        >>> from gfmark import parse
        >>> HtmlRenderer().render(parse("# Hello **World**"))
        '<h1>Hello <strong>World</strong></h1>\\n'

    Args:
        policy: Sanitize policy; None reads it from the active RenderOptions
            at render time.
    """

    __slots__ = ("_policy",)

    def __init__(self, policy: SanitizePolicy | str | None = None) -> None:
        if policy is not None and not isinstance(policy, SanitizePolicy):
            policy = SanitizePolicy(policy)
        self._policy = policy

    @property
    def policy(self) -> SanitizePolicy:
        return self._policy or get_render_options().sanitize_policy

    def render(self, doc: Document) -> str:
        """Render document tree to an HTML string."""
        if not isinstance(doc, Document):
            raise RenderError(f"expected a Document, got {type(doc).__name__}")

        policy = self.policy
        logger.debug("Rendering %d blocks with %s policy", len(doc.children), policy.value)
        walker = _RenderWalk(
            HtmlSanitizer(policy),
            check_urls=policy is not SanitizePolicy.ALLOW_RAW_HTML,
        )
        for block in doc.children:
            walker.block(block)
        return walker.sb.build()


class _RenderWalk:
    """Per-render state: the output buffer and the sanitizer."""

    __slots__ = ("sb", "_sanitizer", "_check_urls")

    def __init__(self, sanitizer: HtmlSanitizer, *, check_urls: bool) -> None:
        self.sb = StringBuilder()
        self._sanitizer = sanitizer
        self._check_urls = check_urls

    # =========================================================================
    # Block rendering
    # =========================================================================

    def block(self, node: Block, *, tight: bool = False) -> None:
        sb = self.sb
        match node:
            case Paragraph():
                if tight:
                    self.inlines(node.children)
                else:
                    sb.cr().append("<p>")
                    self.inlines(node.children)
                    sb.append("</p>").cr()
            case Heading():
                sb.cr().append(f"<h{node.level}>")
                self.inlines(node.children)
                sb.append(f"</h{node.level}>").cr()
            case ThematicBreak():
                sb.cr().append("<hr />").cr()
            case CodeBlock():
                self._code_block(node)
            case HtmlBlock():
                sb.cr().append(self._sanitizer.clean(node.html)).cr()
            case BlockQuote():
                sb.cr().append("<blockquote>").cr()
                for child in node.children:
                    self.block(child)
                sb.cr().append("</blockquote>").cr()
            case List():
                self._list(node)
            case Table():
                self._table(node)
            case BlankRun():
                pass
            case _:
                raise RenderError(f"cannot render block {type(node).__name__}")

    def _code_block(self, node: CodeBlock) -> None:
        language = node.language
        lang_class = f' class="language-{escape_html(language)}"' if language else ""
        self.sb.cr().append(f"<pre><code{lang_class}>")
        self.sb.append(escape_html(node.code)).append("</code></pre>").cr()

    def _list(self, node: List) -> None:
        sb = self.sb
        if node.ordered:
            start = f' start="{node.start}"' if node.start != 1 else ""
            sb.cr().append(f"<ol{start}>").cr()
        else:
            sb.cr().append("<ul>").cr()
        for item in node.items:
            self._list_item(item, tight=node.tight)
        sb.cr().append("</ol>" if node.ordered else "</ul>").cr()

    def _list_item(self, item: ListItem, *, tight: bool) -> None:
        """Render one item.

        Tight lists write paragraph text straight into the ``<li>``; loose
        lists keep the ``<p>`` tags. A task checkbox goes in front of the
        first paragraph's text.
        """
        sb = self.sb
        sb.append("<li>")
        for index, child in enumerate(item.children):
            if index == 0 and item.checked is not None and isinstance(child, Paragraph):
                checkbox = _TASK_CHECKBOX_CHECKED if item.checked else _TASK_CHECKBOX
                if tight:
                    sb.append(checkbox)
                    self.inlines(child.children)
                else:
                    sb.cr().append("<p>").append(checkbox)
                    self.inlines(child.children)
                    sb.append("</p>").cr()
                continue
            self.block(child, tight=tight)
        sb.append("</li>").cr()

    def _table(self, node: Table) -> None:
        sb = self.sb
        sb.cr().append("<table>").cr()
        sb.append("<thead>").cr()
        self._table_row(node.head)
        sb.append("</thead>").cr()
        if node.body:
            sb.append("<tbody>").cr()
            for row in node.body:
                self._table_row(row)
            sb.append("</tbody>").cr()
        sb.append("</table>").cr()

    def _table_row(self, row: TableRow) -> None:
        sb = self.sb
        sb.append("<tr>").cr()
        for cell in row.cells:
            tag = "th" if cell.is_header else "td"
            style = f' style="text-align: {cell.align}"' if cell.align else ""
            sb.append(f"<{tag}{style}>")
            self.inlines(cell.children)
            sb.append(f"</{tag}>").cr()
        sb.append("</tr>").cr()

    # =========================================================================
    # Inline rendering
    # =========================================================================

    def inlines(self, nodes: tuple[Inline, ...]) -> None:
        for node in nodes:
            self.inline(node)

    def inline(self, node: Inline) -> None:
        sb = self.sb
        match node:
            case Text(content=content) | Entity(content=content):
                sb.append(escape_html(content))
            case SoftBreak():
                sb.append("\n")
            case HardBreak():
                sb.append("<br />\n")
            case Emphasis():
                sb.append("<em>")
                self.inlines(node.children)
                sb.append("</em>")
            case Strong():
                sb.append("<strong>")
                self.inlines(node.children)
                sb.append("</strong>")
            case Strikethrough():
                sb.append("<del>")
                self.inlines(node.children)
                sb.append("</del>")
            case CodeSpan():
                sb.append("<code>").append(escape_html(node.code)).append("</code>")
            case Link():
                sb.append(f'<a href="{self._url(node.url)}"{_title(node.title)}>')
                self.inlines(node.children)
                sb.append("</a>")
            case Image():
                sb.append(
                    f'<img src="{self._url(node.url)}" alt="{escape_html(node.alt)}"'
                    f"{_title(node.title)} />"
                )
            case Autolink():
                sb.append(f'<a href="{self._url(node.url)}">{escape_html(node.text)}</a>')
            case HtmlInline():
                sb.append(self._sanitizer.clean(node.html))
            case _:
                raise RenderError(f"cannot render inline {type(node).__name__}")

    def _url(self, url: str) -> str:
        """Escaped attribute value, or the empty placeholder for unsafe schemes."""
        if self._check_urls and is_dangerous_url(url):
            logger.debug("Replaced unsafe URL scheme in %r", url[:32])
            return ""
        return escape_html(url)


def _title(title: str | None) -> str:
    return f' title="{escape_html(title)}"' if title else ""

"""Typed tree nodes for gfmark.

All nodes are frozen dataclasses with slots. Block and Inline are closed
unions (PEP 695 aliases) so the renderer can dispatch with exhaustive
``match`` statements.

Node Hierarchy:
Node (base)
├── Block
│   ├── Document
│   ├── Paragraph
│   ├── Heading
│   ├── ThematicBreak
│   ├── CodeBlock
│   ├── BlockQuote
│   ├── List
│   ├── ListItem
│   ├── Table (TableRow, TableCell)
│   ├── HtmlBlock
│   └── BlankRun
└── Inline
    ├── Text
    ├── Emphasis
    ├── Strong
    ├── Strikethrough
    ├── CodeSpan
    ├── Link
    ├── Image
    ├── Autolink
    ├── HtmlInline
    ├── SoftBreak
    ├── HardBreak
    └── Entity

Ownership:
Each node owns its children exclusively; no node is shared between two
parents. Trees are built once per parse call and never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from gfmark.location import SourceLocation

type Alignment = Literal["left", "center", "right"] | None

# =============================================================================
# Base Node
# =============================================================================


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all nodes.

    Inline nodes carry the span of the leaf block that contains them.
    """

    location: SourceLocation


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal text. Escaped on output."""

    content: str


@dataclass(frozen=True, slots=True)
class Emphasis(Node):
    """*text* or _text_ → <em>"""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Strong(Node):
    """**text** or __text__ → <strong>"""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Strikethrough(Node):
    """~~text~~ or ~text~ → <del>"""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class CodeSpan(Node):
    """`code` → <code>. Content is literal, never inline-parsed."""

    code: str


@dataclass(frozen=True, slots=True)
class Link(Node):
    """Inline or reference link.

    Markdown: [text](url "title"), [text][label], [label][], [label]
    """

    url: str
    title: str | None
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Image(Node):
    """Image. ``alt`` is the plain-text flattening of the description.

    Markdown: ![alt](url "title")
    """

    url: str
    alt: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class Autolink(Node):
    """Autolink: <https://x>, <a@b.c>, or a bare GFM www./http/e-mail link.

    ``url`` is the href (``mailto:`` / ``http://`` prefixed where needed),
    ``text`` is the literal text shown.
    """

    url: str
    text: str
    kind: Literal["uri", "email", "www"] = "uri"


@dataclass(frozen=True, slots=True)
class HtmlInline(Node):
    """One raw HTML tag, comment, declaration or CDATA section."""

    html: str


@dataclass(frozen=True, slots=True)
class SoftBreak(Node):
    """Single newline inside a paragraph."""


@dataclass(frozen=True, slots=True)
class HardBreak(Node):
    """Backslash or two+ spaces before a newline → <br />"""


@dataclass(frozen=True, slots=True)
class Entity(Node):
    """Character reference such as ``&amp;`` or ``&#x41;``.

    ``content`` is the decoded text; ``reference`` the original spelling.
    """

    reference: str
    content: str


type Inline = (
    Text
    | Emphasis
    | Strong
    | Strikethrough
    | CodeSpan
    | Link
    | Image
    | Autolink
    | HtmlInline
    | SoftBreak
    | HardBreak
    | Entity
)


# =============================================================================
# Block Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Paragraph(Node):
    """Run of text lines → <p>"""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Heading(Node):
    """ATX (``# x``) or setext (``x\\n===``) heading."""

    level: Literal[1, 2, 3, 4, 5, 6]
    children: tuple[Inline, ...]
    style: Literal["atx", "setext"] = "atx"


@dataclass(frozen=True, slots=True)
class ThematicBreak(Node):
    """--- / *** / ___ → <hr />"""


@dataclass(frozen=True, slots=True)
class CodeBlock(Node):
    """Fenced or indented code block.

    ``info`` is the unescaped info string of a fenced block (None for
    indented blocks or an empty info string).
    """

    code: str
    fenced: bool = True
    info: str | None = None

    @property
    def language(self) -> str | None:
        """First word of the info string."""
        if not self.info:
            return None
        return self.info.split()[0]


@dataclass(frozen=True, slots=True)
class BlockQuote(Node):
    """> quoted blocks"""

    children: tuple[Block, ...]


@dataclass(frozen=True, slots=True)
class ListItem(Node):
    """List item. ``checked`` is None unless the item is a task item."""

    children: tuple[Block, ...]
    checked: bool | None = None


@dataclass(frozen=True, slots=True)
class List(Node):
    """Ordered or bullet list."""

    items: tuple[ListItem, ...]
    ordered: bool = False
    start: int = 1
    tight: bool = True
    marker: str = "-"


@dataclass(frozen=True, slots=True)
class TableCell(Node):
    """th/td cell."""

    children: tuple[Inline, ...]
    is_header: bool = False
    align: Alignment = None


@dataclass(frozen=True, slots=True)
class TableRow(Node):
    """Table row; always as wide as the header."""

    cells: tuple[TableCell, ...]
    is_header: bool = False


@dataclass(frozen=True, slots=True)
class Table(Node):
    """GFM pipe table: one header row, zero or more body rows."""

    head: TableRow
    body: tuple[TableRow, ...]
    alignments: tuple[Alignment, ...]


@dataclass(frozen=True, slots=True)
class HtmlBlock(Node):
    """Raw HTML block text (trailing newline stripped)."""

    html: str


@dataclass(frozen=True, slots=True)
class BlankRun(Node):
    """One or more consecutive blank lines between blocks. Renders nothing."""


@dataclass(frozen=True, slots=True)
class LinkReference:
    """Target of a ``[label]: destination "title"`` definition."""

    label: str
    url: str
    title: str | None = None


def _empty_references() -> Mapping[str, LinkReference]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Document(Node):
    """Root node. Owns the top-level blocks and the reference table.

    ``references`` maps normalized labels to their first definition and is
    read-only.
    """

    children: tuple[Block, ...]
    references: Mapping[str, LinkReference] = field(default_factory=_empty_references)


type Block = (
    Document
    | Paragraph
    | Heading
    | ThematicBreak
    | CodeBlock
    | BlockQuote
    | List
    | ListItem
    | Table
    | HtmlBlock
    | BlankRun
)

"""Open block records and the constants shared by the block builder mixins."""

from __future__ import annotations

from gfmark.scanner.matchers import ListMarker

CODE_INDENT = 4

# Continuation results
MATCHED = 0
NOT_MATCHED = 1
LINE_CONSUMED = 2

# Block start results
NO_START = 0
CONTAINER_STARTED = 1
LEAF_STARTED = 2

# Kinds of open block
DOCUMENT = "document"
BLOCK_QUOTE = "block_quote"
LIST = "list"
ITEM = "item"
PARAGRAPH = "paragraph"
HEADING = "heading"
THEMATIC_BREAK = "thematic_break"
CODE_BLOCK = "code_block"
HTML_BLOCK = "html_block"
TABLE = "table"
BLANK_RUN = "blank_run"

ACCEPTS_LINES = frozenset({PARAGRAPH, CODE_BLOCK, HTML_BLOCK})


def can_contain(parent_kind: str, child_kind: str) -> bool:
    """Containment rules: lists hold items, containers hold anything else."""
    match parent_kind:
        case "document" | "block_quote" | "item":
            return child_kind != ITEM
        case "list":
            return child_kind == ITEM
        case _:
            return False


class OpenBlock:
    """Mutable block record used only while building.

    One record type serves every block kind; fields that do not apply to a
    kind keep their defaults. Records are converted to frozen nodes once the
    whole document has been read and never escape the parser.
    """

    __slots__ = (
        "kind",
        "parent",
        "children",
        "start_line",
        "end_line",
        "is_open",
        "last_line_blank",
        "lines",
        "content",
        "marker",
        "marker_offset",
        "padding",
        "tight",
        "level",
        "setext",
        "fenced",
        "fence_char",
        "fence_length",
        "fence_offset",
        "info",
        "html_type",
        "alignments",
        "rows",
    )

    def __init__(self, kind: str, start_line: int, parent: OpenBlock | None = None) -> None:
        self.kind = kind
        self.parent = parent
        self.children: list[OpenBlock] = []
        self.start_line = start_line
        self.end_line = start_line
        self.is_open = True
        self.last_line_blank = False
        self.lines: list[str] = []
        self.content = ""
        # list / item
        self.marker: ListMarker | None = None
        self.marker_offset = 0
        self.padding = 0
        self.tight = True
        # heading
        self.level = 0
        self.setext = False
        # code block
        self.fenced = False
        self.fence_char = ""
        self.fence_length = 0
        self.fence_offset = 0
        self.info = ""
        # html block
        self.html_type = 0
        # table
        self.alignments: tuple[str | None, ...] = ()
        self.rows: list[tuple[int, str]] = []

    @property
    def last_child(self) -> OpenBlock | None:
        return self.children[-1] if self.children else None

    def __repr__(self) -> str:
        return f"OpenBlock({self.kind}, {self.start_line}-{self.end_line})"

"""Parsing subsystem for gfmark.

Provides the two passes that turn normalized lines into a Document:
- `BlockBuilder`: line-by-line block structure (containers, leaves,
  reference definitions)
- `InlineParser`: inline content of each leaf (emphasis, links, code spans)

Architecture:
The block builder uses a mixin-based design for separation of concerns;
each mixin handles one aspect of the block grammar. Inline parsing runs
only after the whole document has been read, so reference links can
point forward.

Example:
    >>> from gfmark.config import RenderOptions
    >>> from gfmark.parsing import BlockBuilder
    >>> from gfmark.scanner import LineScanner
    >>> doc = BlockBuilder(RenderOptions()).build(LineScanner("# Title\\n"))
    >>> type(doc.children[0]).__name__
    'Heading'
"""

from gfmark.parsing.blocks import BlockBuilder
from gfmark.parsing.inline import InlineParser
from gfmark.parsing.references import ReferenceTable

__all__ = [
    "BlockBuilder",
    "InlineParser",
    "ReferenceTable",
]

"""Block parsing subsystem for gfmark.

Builds the block tree line by line and converts it to nodes:
- core: BlockBuilder driver, continuation and tree mutation
- starts: block start handlers (quotes, lists, headings, fences, HTML)
- table: GFM table recognition and conversion
- finalize: conversion of the finished tree to frozen nodes
- state: the mutable OpenBlock record and shared constants
"""

from gfmark.parsing.blocks.core import BlockBuilder
from gfmark.parsing.blocks.finalize import NodeBuildMixin
from gfmark.parsing.blocks.starts import BlockStartsMixin
from gfmark.parsing.blocks.state import OpenBlock, can_contain
from gfmark.parsing.blocks.table import TableBlockMixin

__all__ = [
    "BlockBuilder",
    "BlockStartsMixin",
    "NodeBuildMixin",
    "OpenBlock",
    "TableBlockMixin",
    "can_contain",
]

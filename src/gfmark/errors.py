"""Exception classes for gfmark.

Malformed Markdown never raises: every construct that fails its grammar
degrades to a lower-precedence reading. The only input-driven failure is
text that cannot be represented as UTF-8.
"""

from __future__ import annotations


class GfmarkError(Exception):
    """Base exception for all gfmark errors."""


class EncodingError(GfmarkError, ValueError):
    """Input is not valid UTF-8.

    Raised before any parsing happens, so no partial output exists.
    """

    def __init__(self, reason: str, position: int | None = None) -> None:
        """Initialize encoding error.

        Args:
            reason: Decoder message (e.g., "invalid start byte")
            position: Offset of the first offending byte or code point
        """
        self.reason = reason
        self.position = position

        location = f" at offset {position}" if position is not None else ""
        super().__init__(f"Input is not valid UTF-8{location}: {reason}")


class ConfigError(GfmarkError, ValueError):
    """Invalid RenderOptions value."""

    def __init__(self, field_name: str, message: str) -> None:
        self.field_name = field_name
        super().__init__(f"Invalid option '{field_name}': {message}")


class RenderError(GfmarkError):
    """Renderer was handed something that is not a Document.

    Programming error only; never produced by Markdown input.
    """

"""Source line spans for block and inline nodes.

Every block records the 1-indexed lines it was built from. Sibling spans
never overlap and a container's span covers all of its children.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Line span of a node in the normalized source.

    Attributes:
        lineno: First line (1-indexed)
        end_lineno: Last line (inclusive, 1-indexed)

    Examples:
        >>> SourceLocation(3, 5)
        SourceLocation(lineno=3, end_lineno=5)
        >>> str(SourceLocation(3, 3))
        '3'
    """

    lineno: int
    end_lineno: int

    def __str__(self) -> str:
        if self.lineno == self.end_lineno:
            return str(self.lineno)
        return f"{self.lineno}-{self.end_lineno}"

    @property
    def line_count(self) -> int:
        """Number of source lines covered."""
        return self.end_lineno - self.lineno + 1

    def contains(self, other: SourceLocation) -> bool:
        """True if other lies entirely within this span."""
        return self.lineno <= other.lineno and other.end_lineno <= self.end_lineno

    def overlaps(self, other: SourceLocation) -> bool:
        """True if the two spans share at least one line."""
        return self.lineno <= other.end_lineno and other.lineno <= self.end_lineno

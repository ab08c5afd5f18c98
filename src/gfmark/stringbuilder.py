"""StringBuilder for O(n) HTML accumulation.

Appends to a list and joins once at the end. Also remembers whether the
output currently ends at a line start, which block rendering needs to put
each block tag on its own line without doubling blank lines.

Thread Safety:
StringBuilder instances are local to each render() call.
"""

from __future__ import annotations


class StringBuilder:
    """Efficient string accumulator with line-start tracking.

    Usage:
        >>> sb = StringBuilder()
        >>> sb.append("<li>").append("a").cr().cr().append("</li>").build()
        '<li>a\\n</li>'
    """

    __slots__ = ("_parts", "_at_line_start")

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._at_line_start = True

    def append(self, s: str) -> StringBuilder:
        """Append a string (empty strings are skipped)."""
        if s:
            self._parts.append(s)
            self._at_line_start = s[-1] == "\n"
        return self

    def cr(self) -> StringBuilder:
        """Ensure the output ends with a newline, unless it is empty."""
        if not self._at_line_start:
            self._parts.append("\n")
            self._at_line_start = True
        return self

    def build(self) -> str:
        """Join all parts into the final string."""
        return "".join(self._parts)

    def __len__(self) -> int:
        """Return number of parts (not total length)."""
        return len(self._parts)

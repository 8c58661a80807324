"""Immutable text buffer with line lookup.

Offsets are Python string indices. Lines are 1-based and never include
their terminating newline.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass


@dataclass(frozen=True)
class Line:
    """A single line of a :class:`Text`."""

    number: int
    start: int
    end: int
    text: str

    @property
    def length(self) -> int:
        return self.end - self.start


class Text:
    """A document snapshot. Never mutated; edits produce a new ``Text``."""

    __slots__ = ("_content", "_line_starts")

    def __init__(self, content: str = "") -> None:
        self._content = content
        starts = [0]
        idx = content.find("\n")
        while idx != -1:
            starts.append(idx + 1)
            idx = content.find("\n", idx + 1)
        self._line_starts = starts

    def __str__(self) -> str:
        return self._content

    def __repr__(self) -> str:
        return f"Text({self._content!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Text):
            return self._content == other._content
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._content)

    @property
    def length(self) -> int:
        return len(self._content)

    @property
    def lines(self) -> int:
        """Number of lines (an empty document has one empty line)."""
        return len(self._line_starts)

    def slice(self, start: int, end: int | None = None) -> str:
        """Return the text between *start* and *end*."""
        if end is None:
            end = self.length
        self._check_range(start, end)
        return self._content[start:end]

    def line(self, number: int) -> Line:
        """Return line *number* (1-based)."""
        if number < 1 or number > self.lines:
            msg = f"Line {number} out of range (document has {self.lines} lines)"
            raise ValueError(msg)
        start = self._line_starts[number - 1]
        if number < self.lines:
            end = self._line_starts[number] - 1
        else:
            end = self.length
        return Line(number=number, start=start, end=end, text=self._content[start:end])

    def line_at(self, pos: int) -> Line:
        """Return the line containing offset *pos*."""
        if pos < 0 or pos > self.length:
            msg = f"Position {pos} out of range (document length {self.length})"
            raise ValueError(msg)
        return self.line(bisect.bisect_right(self._line_starts, pos))

    def _check_range(self, start: int, end: int) -> None:
        if start < 0 or end > self.length or start > end:
            msg = f"Invalid range {start}-{end} (document length {self.length})"
            raise ValueError(msg)

"""Task line classification.

A task line is a list item (``-``, ``*``, ``+``, ``N.`` or ``N)``)
followed by a single-character checkbox ``[?]``. Everything after the
checkbox is split into human content and trailing metadata; a trailing
``^block-id`` anchor is detected separately and never moves.

Pure functions, no editor dependencies.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Groups: indent, bullet, gap, marker.
TASK_PATTERN = re.compile(r"^([ \t]*)([-*+]|\d+[.)])([ \t]+)\[(.)\]")

# Anywhere in a line (used by the transaction guards).
TASK_MARKER_PATTERN = re.compile(r"(?:[-*+]|\d+[.)])\s\[.\]")

# A complete task prefix, e.g. "- [x" or "1. [ ]".
TASK_PREFIX_PATTERN = re.compile(r"^[ \t]*(?:[-*+]|\d+[.)])\s+\[.\]?")

BLOCK_REFERENCE_PATTERN = re.compile(r"\s*(\^[A-Za-z0-9_-]+)\s*$")

_FIELD_START = re.compile(r"\[[A-Za-z]+::")
_TAG_BODY = re.compile(r"[\w-]+")
_DATE_AFTER_EMOJI = re.compile(r"\s*\d{4}-\d{2}-\d{2}(?:\s+\d{1,2}:\d{2})?")

DATE_EMOJIS: tuple[str, ...] = ("📅", "✅", "❌", "🛫", "▶️", "⏰", "🏁")


@dataclass(frozen=True)
class BlockReference:
    """Trailing ``^id`` anchor. ``index`` includes leading whitespace."""

    block_id: str
    index: int
    length: int


@dataclass(frozen=True)
class TaskLine:
    """A classified task line. Offsets are relative to the line start."""

    indent: str
    bullet: str
    marker: str
    marker_offset: int
    prefix_end: int  # just past "]" and any following whitespace
    content_end: int  # end of human content, before metadata
    block_reference: BlockReference | None

    @property
    def insert_limit(self) -> int | None:
        """Latest offset an insertion may use (start of the block reference)."""
        return self.block_reference.index if self.block_reference else None


def detect_block_reference(text: str) -> BlockReference | None:
    """Find a line-final ``^block-id`` anchor."""
    match = BLOCK_REFERENCE_PATTERN.search(text)
    if match is None:
        return None
    return BlockReference(block_id=match.group(1), index=match.start(), length=len(match.group(0)))


def task_marker(text: str) -> str | None:
    """The checkbox marker of *text*, or None if it is not a task line."""
    match = TASK_PATTERN.match(text)
    return match.group(4) if match else None


def is_task_line(text: str) -> bool:
    return TASK_PATTERN.match(text) is not None


def _prefix_end(text: str, match: re.Match[str]) -> int:
    end = match.end()
    while end < len(text) and text[end] in " \t":
        end += 1
    return end


def _starts_date_emoji(text: str, i: int) -> bool:
    for emoji in DATE_EMOJIS:
        if text.startswith(emoji, i):
            return _DATE_AFTER_EMOJI.match(text, i + len(emoji)) is not None
    return False


def find_content_end(text: str, start: int, stop: int | None = None) -> int:
    """End of the human content that begins at *start*.

    Scans forward tracking ``[[link]]`` depth (link interiors are always
    content) and stops at the first ``[field::`` token, ``#tag`` preceded
    by whitespace, or date emoji followed by a date. Trailing spaces are
    trimmed. The scan never passes *stop*.
    """
    limit = len(text) if stop is None else min(stop, len(text))
    content_end = start
    depth = 0
    i = start
    while i < limit:
        two = text[i : i + 2]
        if two == "[[":
            depth += 1
            i += 2
            content_end = i
            continue
        if two == "]]" and depth > 0:
            depth -= 1
            i += 2
            content_end = i
            continue
        if depth > 0:
            i += 1
            content_end = i
            continue
        char = text[i]
        if char == "[" and _FIELD_START.match(text, i):
            break
        if char == "#" and (i == start or text[i - 1] in " \t") and _TAG_BODY.match(text, i + 1):
            break
        if _starts_date_emoji(text, i):
            break
        i += 1
        content_end = i
    content_end = min(content_end, limit)
    while content_end > start and text[content_end - 1] == " ":
        content_end -= 1
    return content_end


def classify(text: str) -> TaskLine | None:
    """Classify a single line of text; None if it is not a task line."""
    match = TASK_PATTERN.match(text)
    if match is None:
        return None
    block_ref = detect_block_reference(text)
    prefix_end = _prefix_end(text, match)
    stop = block_ref.index if block_ref else None
    return TaskLine(
        indent=match.group(1),
        bullet=match.group(2),
        marker=match.group(4),
        marker_offset=match.start(4),
        prefix_end=prefix_end,
        content_end=find_content_end(text, prefix_end, stop),
        block_reference=block_ref,
    )


def strip_task_prefix(text: str) -> str:
    """Line text without its task prefix, trimmed (for content comparison)."""
    match = TASK_PATTERN.match(text)
    if match is None:
        return text.strip()
    return text[match.end() :].strip()

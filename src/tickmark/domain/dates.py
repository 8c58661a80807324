"""Lifecycle dates — start, completion, and cancellation stamps.

Dates are written in one of two encodings, chosen globally:

- emoji:      ``✅ 2024-01-01`` (optionally ``HH:mm[:ss]``)
- bracketed:  ``[completion:: 2024-01-01]``

Both encodings are produced and matched symmetrically. Date operations
are keyed off status *types*, never raw markers, so switching between two
markers of the same type never touches dates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel

from tickmark.domain.lines import TASK_PATTERN, detect_block_reference, find_content_end
from tickmark.domain.statuses import StatusType

_DATE_VALUE = r"\d{4}-\d{2}-\d{2}(?:\s+\d{2}:\d{2}(?::\d{2})?)?"

COMMON_START_MARKERS: tuple[str, ...] = ("🛫", "▶️", "⏰", "🏁")


class DateType(StrEnum):
    COMPLETED = "completed"
    START = "start"
    CANCELLED = "cancelled"


class OperationKind(StrEnum):
    ADD = "add"
    REMOVE = "remove"


class MetadataFormat(StrEnum):
    EMOJI = "emoji"
    BRACKETED = "bracketed"


# Status type whose lifecycle stage each date records.
DATE_FOR_STATUS: dict[StatusType, DateType] = {
    StatusType.COMPLETED: DateType.COMPLETED,
    StatusType.IN_PROGRESS: DateType.START,
    StatusType.ABANDONED: DateType.CANCELLED,
}


class DateSettings(BaseModel):
    """[dates] section — which lifecycle dates are managed, and how."""

    model_config = {"frozen": True}

    enabled: bool = True
    manage_start_date: bool = True
    manage_completed_date: bool = True
    manage_cancelled_date: bool = True
    start_date_format: str = "YYYY-MM-DD"
    completed_date_format: str = "YYYY-MM-DD"
    cancelled_date_format: str = "YYYY-MM-DD"
    start_date_marker: str = "🛫"
    completed_date_marker: str = "✅"
    cancelled_date_marker: str = "❌"
    metadata_format: MetadataFormat = MetadataFormat.EMOJI
    start_field: str = "start"
    completed_field: str = "completion"
    cancelled_field: str = "cancelled"

    def manages(self, date_type: DateType) -> bool:
        return {
            DateType.START: self.manage_start_date,
            DateType.COMPLETED: self.manage_completed_date,
            DateType.CANCELLED: self.manage_cancelled_date,
        }[date_type]

    def format_for(self, date_type: DateType) -> str:
        return {
            DateType.START: self.start_date_format,
            DateType.COMPLETED: self.completed_date_format,
            DateType.CANCELLED: self.cancelled_date_format,
        }[date_type]

    def marker_for(self, date_type: DateType) -> str:
        return {
            DateType.START: self.start_date_marker,
            DateType.COMPLETED: self.completed_date_marker,
            DateType.CANCELLED: self.cancelled_date_marker,
        }[date_type]

    def field_for(self, date_type: DateType) -> str:
        return {
            DateType.START: self.start_field,
            DateType.COMPLETED: self.completed_field,
            DateType.CANCELLED: self.cancelled_field,
        }[date_type]


@dataclass(frozen=True)
class DateOperation:
    kind: OperationKind
    date_type: DateType
    format: str | None = None  # only for ADD


def format_date(fmt: str, now: datetime) -> str:
    """Render *now* using ``YYYY MM DD HH mm ss`` tokens."""
    return (
        fmt.replace("YYYY", f"{now.year:04d}")
        .replace("MM", f"{now.month:02d}")
        .replace("DD", f"{now.day:02d}")
        .replace("HH", f"{now.hour:02d}")
        .replace("mm", f"{now.minute:02d}")
        .replace("ss", f"{now.second:02d}")
    )


def date_pattern(date_type: DateType, settings: DateSettings, marker: str | None = None) -> re.Pattern[str]:
    """Pattern matching one date token, including its leading whitespace."""
    if settings.metadata_format is MetadataFormat.BRACKETED:
        field = re.escape(settings.field_for(date_type))
        return re.compile(rf"\s*\[{field}::\s*{_DATE_VALUE}\]")
    glyph = re.escape(marker or settings.marker_for(date_type))
    return re.compile(rf"\s*{glyph}\s*{_DATE_VALUE}")


def render_date(date_type: DateType, value: str, settings: DateSettings) -> str:
    """Date token to insert, with its separating leading space."""
    if settings.metadata_format is MetadataFormat.BRACKETED:
        return f" [{settings.field_for(date_type)}:: {value}]"
    return f" {settings.marker_for(date_type)} {value}"


def find_dates(line_text: str, date_type: DateType, settings: DateSettings) -> list[tuple[int, int]]:
    """``(start, end)`` spans of every token of *date_type* on the line."""
    return [m.span() for m in date_pattern(date_type, settings).finditer(line_text)]


def has_date(line_text: str, date_type: DateType, settings: DateSettings) -> bool:
    return bool(find_dates(line_text, date_type, settings))


def determine_date_operations(
    old_type: StatusType,
    new_type: StatusType,
    settings: DateSettings,
    line_text: str,
) -> list[DateOperation]:
    """Date operations implied by a status-type transition.

    Removals come first: the date of the stage being left is removed when
    managed and present. Then the date of the stage being entered is added
    when managed; a start date is never added twice.
    """
    if old_type == new_type:
        return []
    operations: list[DateOperation] = []
    leaving = DATE_FOR_STATUS.get(old_type)
    if leaving is not None and settings.manages(leaving) and has_date(line_text, leaving, settings):
        operations.append(DateOperation(OperationKind.REMOVE, leaving))
    entering = DATE_FOR_STATUS.get(new_type)
    if entering is not None and settings.manages(entering):
        if not (entering is DateType.START and has_date(line_text, entering, settings)):
            operations.append(
                DateOperation(OperationKind.ADD, entering, settings.format_for(entering))
            )
    return operations


def completed_insert_position(line_text: str) -> int:
    """Line end, or just before a trailing block reference."""
    block_ref = detect_block_reference(line_text)
    if block_ref is None:
        return len(line_text)
    position = block_ref.index
    if position > 0 and line_text[position - 1] == " ":
        position -= 1
    return position


def _find_start_date_end(line_text: str, settings: DateSettings) -> int | None:
    if settings.metadata_format is MetadataFormat.BRACKETED:
        match = date_pattern(DateType.START, settings).search(line_text)
        return match.end() if match else None
    markers = (settings.start_date_marker, *COMMON_START_MARKERS)
    for marker in dict.fromkeys(markers):
        match = date_pattern(DateType.START, settings, marker).search(line_text)
        if match:
            return match.end()
    return None


def metadata_insert_position(line_text: str, date_type: DateType, settings: DateSettings) -> int:
    """Insertion offset for a start or cancellation date.

    The date goes at the end of the task's content; a cancellation date
    goes after an existing start date so lifecycle metadata stays in
    chronological order. Never later than a block reference.
    """
    if date_type is DateType.COMPLETED:
        return completed_insert_position(line_text)
    block_ref = detect_block_reference(line_text)
    match = TASK_PATTERN.match(line_text)
    if match is None:
        return block_ref.index if block_ref else len(line_text)
    stop = block_ref.index if block_ref else None
    body_start = match.end()
    while body_start < len(line_text) and line_text[body_start] in " \t":
        body_start += 1
    position = find_content_end(line_text, body_start, stop)
    if position < match.end():
        position = match.end()
    if date_type is DateType.CANCELLED:
        start_end = _find_start_date_end(line_text, settings)
        if start_end is not None:
            position = start_end
    if block_ref is not None and position > block_ref.index:
        position = block_ref.index
        if position > 0 and line_text[position - 1] == " ":
            position -= 1
    return max(0, min(position, len(line_text)))


def insert_position(line_text: str, date_type: DateType, settings: DateSettings) -> int:
    if date_type is DateType.COMPLETED:
        return completed_insert_position(line_text)
    return metadata_insert_position(line_text, date_type, settings)

"""Lifecycle date manager — keep date stamps in step with status types.

Second interceptor in the chain. It re-derives the status transition from
whatever transaction it receives (possibly already rewritten by the
status committer), computes date additions and removals on the post-edit
line, and maps them back into start-document coordinates so they can be
returned alongside the transaction's existing changes as one edit set.

INVARIANT: Offsets are clamped to the start document. A date edit whose
range is still inverted, that lands inside freshly inserted text, or that
collides with an existing change is dropped on its own while the rest are
applied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from tickmark.domain.dates import (
    DateOperation,
    DateSettings,
    OperationKind,
    determine_date_operations,
    find_dates,
    format_date,
    insert_position,
    render_date,
)
from tickmark.domain.statuses import StatusModel
from tickmark.editor.changes import ChangeRange, ChangeSpec, PositionMap
from tickmark.editor.state import Transaction, TransactionSpec
from tickmark.pipeline.detector import (
    DATE_MANAGER_TAG,
    REJECTION_RULES,
    STATUS_CHANGE,
    is_move_operation,
    rejection_reason,
)
from tickmark.pipeline.transition import find_status_transition

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Status-annotated transactions are exactly what this interceptor is for,
# so only the remaining guards apply.
DATE_REJECTION_RULES = tuple(
    (name, rule) for name, rule in REJECTION_RULES if name != "status_annotation"
)


@dataclass(frozen=True)
class LineEdit:
    """An edit relative to the start of one line."""

    start: int
    end: int
    insert: str


def plan_line_edits(
    line_text: str,
    operations: list[DateOperation],
    settings: DateSettings,
    now: datetime,
) -> list[LineEdit]:
    """Edits realising *operations* on *line_text*, all in its coordinates.

    Removals strip every matching token. Insertion points are computed on
    the text as it reads after the removals and mapped back onto the
    original line.
    """
    removals: list[LineEdit] = []
    for op in operations:
        if op.kind is OperationKind.REMOVE:
            removals.extend(LineEdit(start, end, "") for start, end in find_dates(line_text, op.date_type, settings))
    removals.sort(key=lambda e: e.start)

    working = line_text
    for edit in reversed(removals):
        working = working[: edit.start] + working[edit.end :]
    back = PositionMap((e.start, e.end, 0) for e in removals).inverted()

    edits = list(removals)
    for op in operations:
        if op.kind is not OperationKind.ADD:
            continue
        token = render_date(op.date_type, format_date(op.format or settings.format_for(op.date_type), now), settings)
        at = insert_position(working, op.date_type, settings)
        if at > 0 and working[at - 1] in " \t":
            token = token.lstrip(" ")
        position = back.map(at, -1)
        edits.append(LineEdit(position, position, token))
    return edits


def _inside_inserted(changes: list[ChangeRange], start: int, end: int) -> bool:
    for ch in changes:
        if start == end:
            if ch.from_b < start < ch.to_b:
                return True
        elif start < ch.to_b and ch.from_b < end:
            return True
    return False


def _clamp(start: int, end: int, length: int) -> tuple[int, int] | None:
    start = min(max(0, start), length)
    end = min(max(0, end), length)
    return (start, end) if start <= end else None


def _overlaps(spec: ChangeSpec, base: list[ChangeSpec]) -> bool:
    for other in base:
        if spec.start < other.end and other.start < spec.end:
            return True
        if spec.start == spec.end and other.start < spec.start < other.end:
            return True
        if other.start == other.end and spec.start < other.start < spec.end:
            return True
    return False


def manage(
    tr: Transaction,
    model: StatusModel,
    settings: DateSettings,
    clock: Clock = datetime.now,
) -> Transaction | TransactionSpec:
    """Add and remove lifecycle dates implied by the status change in *tr*."""
    if not tr.doc_changed or not settings.enabled:
        return tr
    if tr.annotation(STATUS_CHANGE) == DATE_MANAGER_TAG:
        return tr
    if tr.is_user_event("input.paste") or tr.is_user_event("set"):
        return tr
    if is_move_operation(tr, model):
        logger.debug("Move operation, skipping date management")
        return tr
    reason = rejection_reason(tr, model, DATE_REJECTION_RULES)
    if reason is not None:
        logger.debug("Transaction rejected for date management: %s", reason)
        return tr

    found = find_status_transition(tr, model)
    if found is None:
        return tr
    line, transition = found
    if not transition.changes_type:
        return tr

    operations = determine_date_operations(transition.old_type, transition.new_type, settings, line.text)
    if not operations:
        return tr

    inserted_ranges = [ch for ch in tr.changes.iter_changes() if ch.inserted]
    back = tr.changes.position_map().inverted()
    base = tr.changes.specs()
    date_specs: list[ChangeSpec] = []
    for edit in plan_line_edits(line.text, operations, settings, clock()):
        start = line.start + edit.start
        end = line.start + edit.end
        if _inside_inserted(inserted_ranges, start, end):
            logger.debug("Dropping date edit %d-%d inside freshly inserted text", start, end)
            continue
        bounds = _clamp(back.map(start, -1), back.map(end, -1), tr.start_doc.length)
        if bounds is None:
            logger.debug("Dropping inverted date edit %d-%d", start, end)
            continue
        spec = ChangeSpec(*bounds, edit.insert)
        if _overlaps(spec, base):
            logger.debug("Dropping date edit %r overlapping an existing change", spec)
            continue
        date_specs.append(spec)

    if not date_specs:
        return tr
    logger.debug(
        "Lifecycle dates on line %d (%s -> %s): %s",
        line.number,
        transition.old_type,
        transition.new_type,
        ", ".join(f"{op.kind} {op.date_type}" for op in operations),
    )
    return TransactionSpec(
        changes=[*base, *date_specs],
        selection=tr.selection,
        annotations=[STATUS_CHANGE.of(DATE_MANAGER_TAG)],
    )


class LifecycleDateManager:
    """Transaction filter wrapping :func:`manage`."""

    def __init__(self, model: StatusModel, settings: DateSettings, clock: Clock = datetime.now) -> None:
        self._model = model
        self._settings = settings
        self._clock = clock

    def __call__(self, tr: Transaction) -> Transaction | TransactionSpec:
        return manage(tr, self._model, self._settings, self._clock)

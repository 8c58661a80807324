"""Editor commands — transaction specs for checkbox interactions.

Each command inspects a state and returns the :class:`TransactionSpec`
the host would dispatch, or None when the line is not a task. Dispatch
through :meth:`EditorState.update` so the filter chain sees it.
"""

from __future__ import annotations

from tickmark.domain.cycles import next_status
from tickmark.domain.lines import classify
from tickmark.domain.statuses import StatusModel
from tickmark.editor.changes import ChangeSpec
from tickmark.editor.state import EditorState, Selection, TransactionSpec
from tickmark.pipeline.detector import MANUAL_TAG, STATUS_CHANGE

TOGGLE_EVENT = "input.toggle"


def _marker_offset(state: EditorState, line_number: int) -> tuple[int, str] | None:
    line = state.doc.line(line_number)
    task = classify(line.text)
    if task is None:
        return None
    return line.start + task.marker_offset, task.marker


def toggle_checkbox(state: EditorState, line_number: int) -> TransactionSpec | None:
    """The host's native checkbox click: empty becomes ``x``, anything else empty."""
    found = _marker_offset(state, line_number)
    if found is None:
        return None
    offset, marker = found
    return TransactionSpec(
        changes=[ChangeSpec(offset, offset + 1, "x" if marker == " " else " ")],
        selection=Selection(offset + 1),
        user_event=TOGGLE_EVENT,
    )


def set_status_mark(state: EditorState, line_number: int, mark: str) -> TransactionSpec | None:
    """Replace the marker on *line_number* with *mark*, as a status menu would."""
    if len(mark) != 1:
        msg = f"Status mark must be exactly one character, got {mark!r}"
        raise ValueError(msg)
    found = _marker_offset(state, line_number)
    if found is None:
        return None
    offset, _ = found
    return TransactionSpec(
        changes=[ChangeSpec(offset, offset + 1, mark)],
        annotations=[STATUS_CHANGE.of(MANUAL_TAG)],
    )


def cycle_status(state: EditorState, line_number: int, model: StatusModel) -> TransactionSpec | None:
    """Advance the task on *line_number* one step through its cycle."""
    found = _marker_offset(state, line_number)
    if found is None:
        return None
    nxt = next_status(found[1], model)
    if nxt is None:
        return None
    return set_status_mark(state, line_number, nxt.mark)

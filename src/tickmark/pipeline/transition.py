"""Status transition derivation shared by the interceptors.

Each interceptor re-derives the transition from the transaction it is
given rather than receiving state from an earlier interceptor.
"""

from __future__ import annotations

from dataclasses import dataclass

from tickmark.domain.lines import classify, strip_task_prefix, task_marker
from tickmark.domain.statuses import StatusModel, StatusType
from tickmark.editor.state import Transaction
from tickmark.editor.text import Line


@dataclass(frozen=True)
class StatusTransition:
    old_marker: str
    new_marker: str
    old_type: StatusType
    new_type: StatusType

    @property
    def changes_type(self) -> bool:
        return self.old_type != self.new_type


def detect_status_transition(old_line: str, new_line: str, model: StatusModel) -> StatusTransition | None:
    """Marker transition between two versions of a task line, if any."""
    old_marker = task_marker(old_line)
    new_marker = task_marker(new_line)
    if old_marker is None or new_marker is None or old_marker == new_marker:
        return None
    return StatusTransition(
        old_marker=old_marker,
        new_marker=new_marker,
        old_type=model.type_of(old_marker),
        new_type=model.type_of(new_marker),
    )


def _from_deleted_lines(tr: Transaction, new_text: str, model: StatusModel) -> StatusTransition | None:
    content = strip_task_prefix(new_text)
    for ch in tr.changes.iter_changes():
        if ch.to_a <= ch.from_a:
            continue
        for deleted_line in tr.start_doc.slice(ch.from_a, ch.to_a).split("\n"):
            if task_marker(deleted_line) is None:
                continue
            if strip_task_prefix(deleted_line) == content:
                # same task; None here means the marker did not change
                return detect_status_transition(deleted_line, new_text, model)
    return None


def find_status_transition(tr: Transaction, model: StatusModel) -> tuple[Line, StatusTransition] | None:
    """First task line whose marker differs between the two documents.

    The old version of a line is taken from a deleted line with identical
    content when one exists (the line was rewritten as a whole), otherwise
    from the pre-edit line at the change position, provided the change
    overlaps the checkbox.
    """
    for ch in tr.changes.iter_changes():
        if not ch.inserted:
            continue
        new_line = tr.new_doc.line_at(ch.from_b)
        if classify(new_line.text) is None:
            continue
        transition = _from_deleted_lines(tr, new_line.text, model)
        if transition is None:
            status_start = new_line.text.find("[") + 1
            status_end = new_line.text.find("]")
            if ch.from_b <= new_line.start + status_end and ch.to_b >= new_line.start + status_start:
                old_line = tr.start_doc.line_at(ch.from_a)
                transition = detect_status_transition(old_line.text, new_line.text, model)
        if transition is not None:
            return new_line, transition
    return None

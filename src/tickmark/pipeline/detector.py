"""Change detector — infer deliberate status-marker edits from raw diffs.

Works on character-level changes, not a syntax tree, so it is built as a
list of independent rejection predicates evaluated cheapest-first,
followed by positive matching. Any ambiguity fails closed: the transaction
yields no candidates and passes through untouched.

INVARIANT: Move and paste guards run before any positive detection.
A misclassified move would rewrite unrelated content.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from tickmark.domain.lines import TASK_MARKER_PATTERN, TASK_PREFIX_PATTERN, classify
from tickmark.domain.statuses import StatusModel
from tickmark.editor.changes import ChangeRange
from tickmark.editor.state import AnnotationType, Transaction

logger = logging.getLogger(__name__)

# Shared by the status committer, the date manager, and manual status
# selection. Values identify the writer.
STATUS_CHANGE: AnnotationType[str] = AnnotationType("status_change")
COMMITTER_TAG = "status_cycle"
DATE_MANAGER_TAG = "date_manager.date_update"
MANUAL_TAG = "status_switch"

_INDENT_UNITS = frozenset({"\t", "    "})
_MARKDOWN_LINK = re.compile(r"^\[.*\]\(.*\)$", re.DOTALL)
_LETTER = re.compile(r"[A-Za-z]")


@dataclass(frozen=True)
class StatusChangeCandidate:
    """A possible status edit found in one atomic change."""

    position: int  # marker offset in the post-edit document
    previous_marker: str
    was_full_line_insertion: bool
    change: ChangeRange
    suppressed: bool = False

    @property
    def inserted_text(self) -> str:
        return self.change.inserted


RejectionRule = Callable[[Transaction, StatusModel], bool]


def _deleted_text(tr: Transaction, ch: ChangeRange) -> str:
    return tr.start_doc.slice(ch.from_a, ch.to_a)


def _at_line_start(tr: Transaction, pos: int) -> bool:
    return pos == 0 or tr.start_doc.slice(pos - 1, pos) == "\n"


# ---------------------------------------------------------------------------
# Rejection rules
# ---------------------------------------------------------------------------


def has_status_annotation(tr: Transaction, model: StatusModel) -> bool:
    """Written by a status interceptor or a manual status switch."""
    return tr.annotation(STATUS_CHANGE) is not None


def is_paste_or_bulk_set(tr: Transaction, model: StatusModel) -> bool:
    if tr.is_user_event("input.paste"):
        return True
    return tr.is_user_event("set") and len(tr.changes) > 1


def is_link_autocomplete(tr: Transaction, model: StatusModel) -> bool:
    """A ``[text](url)`` link inserted by autocompletion."""
    if not tr.is_user_event("input.autocomplete"):
        return False
    return any(
        "](" in ch.inserted and _MARKDOWN_LINK.match(ch.inserted)
        for ch in tr.changes.iter_changes()
    )


def _content_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def is_move_operation(tr: Transaction, model: StatusModel | None = None) -> bool:
    """Some deleted span reappears, line for line, as an inserted span."""
    deleted: list[list[str]] = []
    inserted: list[list[str]] = []
    for ch in tr.changes.iter_changes():
        if ch.to_a > ch.from_a:
            deleted.append(_content_lines(_deleted_text(tr, ch)))
        if ch.inserted:
            inserted.append(_content_lines(ch.inserted))
    for old_lines in deleted:
        if not old_lines:
            continue
        if any(old_lines == new_lines for new_lines in inserted):
            return True
    return False


def is_indentation_change(tr: Transaction, model: StatusModel) -> bool:
    changes = list(tr.changes.iter_changes())
    if len(changes) > 1 and all(
        ch.inserted in _INDENT_UNITS
        or (ch.inserted == "" and _deleted_text(tr, ch) in _INDENT_UNITS)
        for ch in changes
    ):
        return True
    for ch in changes:
        if not _at_line_start(tr, ch.from_a):
            continue
        old_line = tr.start_doc.line_at(ch.from_a).text
        # whole line re-inserted with different leading whitespace
        if ch.inserted.strip() == old_line.strip() and len(ch.inserted) != len(old_line):
            return True
        # only leading whitespace added or removed
        if ch.inserted.strip() == "" and _deleted_text(tr, ch).strip() == "":
            new_line = tr.new_doc.line_at(ch.from_b).text
            if new_line != old_line and new_line.strip() == old_line.strip():
                return True
    return False


def is_bullet_deletion(tr: Transaction, model: StatusModel) -> bool:
    """A lone ``-`` deleted at the start of a line (task being removed)."""
    for ch in tr.changes.iter_changes():
        if not ch.is_deletion or _deleted_text(tr, ch) != "-":
            continue
        line = tr.start_doc.line_at(ch.from_a)
        if tr.start_doc.slice(line.start, ch.from_a).strip() == "":
            return True
    return False


def inserts_newline_or_link(tr: Transaction, model: StatusModel) -> bool:
    return any(
        "\n" in ch.inserted or "[[" in ch.inserted or "]]" in ch.inserted
        for ch in tr.changes.iter_changes()
    )


def is_line_rewrite(tr: Transaction, model: StatusModel) -> bool:
    """Whole buffer replaced by one task line, or a task line kept while its
    neighbours are deleted."""
    length = tr.start_doc.length
    for ch in tr.changes.iter_changes():
        inserted = ch.inserted
        if "\n" in inserted:
            continue
        has_marker = TASK_MARKER_PATTERN.search(inserted) is not None
        if ch.from_a == 0 and ch.to_a == length and has_marker:
            return True
        deleted = _deleted_text(tr, ch)
        if (
            "\n" in deleted
            and has_marker
            and TASK_MARKER_PATTERN.search(deleted)
            and inserted.strip() in deleted
        ):
            return True
    return False


def is_deletion_near_marker(tr: Transaction, model: StatusModel) -> bool:
    """Backspace chains that incidentally land inside a checkbox."""
    changes = list(tr.changes.iter_changes())
    for ch in changes:
        if ch.is_deletion and _deleted_text(tr, ch) == "-" and (ch.from_b, ch.to_b) != (ch.from_a, ch.to_a):
            around = tr.new_doc.slice(max(0, ch.from_b - 5), min(ch.from_b + 5, tr.new_doc.length))
            if "[" in around:
                return True
    if len(changes) < 2:
        return False
    has_deletion = any(ch.is_deletion for ch in changes)
    touches_task = False
    for ch in changes:
        text = tr.new_doc.line_at(min(ch.from_b, tr.new_doc.length)).text
        if "[" in text and "]" in text:
            touches_task = True
            break
    return has_deletion and touches_task


# Ordered cheapest and most safety-critical first.
REJECTION_RULES: tuple[tuple[str, RejectionRule], ...] = (
    ("status_annotation", has_status_annotation),
    ("paste_or_set", is_paste_or_bulk_set),
    ("link_autocomplete", is_link_autocomplete),
    ("move", is_move_operation),
    ("indentation", is_indentation_change),
    ("bullet_deletion", is_bullet_deletion),
    ("newline_or_link", inserts_newline_or_link),
    ("line_rewrite", is_line_rewrite),
    ("deletion_near_marker", is_deletion_near_marker),
)


def rejection_reason(
    tr: Transaction,
    model: StatusModel,
    rules: Sequence[tuple[str, RejectionRule]] = REJECTION_RULES,
) -> str | None:
    """Name of the first rule that rejects *tr*, or None."""
    for name, rule in rules:
        if rule(tr, model):
            return name
    return None


# ---------------------------------------------------------------------------
# Positive matching
# ---------------------------------------------------------------------------


def is_valid_marker_replacement(original: str, inserted: str, model: StatusModel) -> bool:
    """Single-character swap between two known markers (or a space)."""
    if len(original) != 1 or len(inserted) != 1:
        return False
    valid = model.valid_marks()
    if not (original in valid or original == " "):
        return False
    if not (inserted in valid or inserted == " "):
        return False
    # typing a letter into an empty checkbox is text entry, not cycling
    return not (original == " " and inserted not in valid and inserted != " ")


def _match_change(tr: Transaction, ch: ChangeRange, model: StatusModel) -> StatusChangeCandidate | None:
    inserted = ch.inserted
    old_line = tr.start_doc.line_at(ch.from_a)
    if old_line.text.strip() == "":
        return None
    new_line = tr.new_doc.line_at(ch.from_b)
    old_task = classify(old_line.text)
    new_task = classify(new_line.text)
    if new_task is None:
        return None
    marker_pos = new_line.start + new_task.marker_offset

    # a whole task line arrived in one insert
    if old_task is None:
        if inserted == new_line.text:
            return StatusChangeCandidate(marker_pos, new_task.marker, True, ch)
        return None

    if TASK_PREFIX_PATTERN.match(inserted.strip()):
        return StatusChangeCandidate(marker_pos, old_task.marker, True, ch)

    if len(inserted) == 1:
        if ch.from_b != marker_pos or inserted == "[":
            return None
        valid = model.valid_marks()
        if old_task.marker == " " and _LETTER.match(inserted) and inserted not in valid:
            return None
        if ch.to_a != ch.from_a:
            original = _deleted_text(tr, ch)
            if not is_valid_marker_replacement(original, inserted, model):
                logger.debug("Manual marker input %r over %r, not cycling", inserted, original)
                return None
        return StatusChangeCandidate(marker_pos, old_task.marker, False, ch)

    if "[" in inserted and "]" in inserted and inserted != "[]":
        return StatusChangeCandidate(marker_pos, old_task.marker, False, ch)
    return None


def find_candidates(tr: Transaction, model: StatusModel) -> list[StatusChangeCandidate]:
    """Positive matching only; callers apply :data:`REJECTION_RULES` first."""
    candidates: list[StatusChangeCandidate] = []
    for ch in tr.changes.iter_changes():
        candidate = _match_change(tr, ch, model)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def detect(tr: Transaction, model: StatusModel) -> list[StatusChangeCandidate]:
    """Status-change candidates in *tr*; empty when any rejection rule fires."""
    if not tr.doc_changed:
        return []
    reason = rejection_reason(tr, model)
    if reason is not None:
        logger.debug("Transaction rejected for status detection: %s", reason)
        return []
    return find_candidates(tr, model)

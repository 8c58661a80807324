"""Status mutation committer — rewrite marker edits into canonical cycles.

First interceptor in the chain. When the user touches a checkbox, the
character they produced is replaced with the marker the cycle resolver
says comes next. The rewritten transaction carries the
:data:`STATUS_CHANGE` annotation so no interceptor re-classifies it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from tickmark.domain.cycles import NextStatus, next_status
from tickmark.domain.statuses import StatusModel
from tickmark.editor.changes import ChangeSpec
from tickmark.editor.state import Transaction, TransactionSpec
from tickmark.pipeline.detector import (
    COMMITTER_TAG,
    STATUS_CHANGE,
    StatusChangeCandidate,
    detect,
)
from tickmark.pipeline.transition import detect_status_transition

logger = logging.getLogger(__name__)

_NEW_TASK_PREFIXES = ("- [ ]", "* [ ]", "+ [ ]")


def _is_new_empty_task(tr: Transaction, candidate: StatusChangeCandidate) -> bool:
    """A freshly typed ``[ ]`` task, which must never be auto-cycled."""
    if candidate.previous_marker != " ":
        return False
    inserted = candidate.inserted_text
    if "[ ]" in inserted:
        return True
    if any(prefix in inserted for prefix in _NEW_TASK_PREFIXES):
        return True
    new_line = tr.new_doc.line_at(candidate.position).text
    old_line = tr.start_doc.line_at(candidate.change.from_a).text
    return "[ ]" in new_line and "[ ]" not in old_line


def _user_mark_at(tr: Transaction, position: int) -> str | None:
    for ch in tr.changes.iter_changes():
        if ch.from_b == position and len(ch.inserted) == 1:
            return ch.inserted
    return None


def _suppression_reason(tr: Transaction, candidate: StatusChangeCandidate, next_mark: str) -> str | None:
    if candidate.previous_marker == next_mark:
        return "already_next"
    if _user_mark_at(tr, candidate.position) == next_mark:
        return "user_typed_next"
    if candidate.was_full_line_insertion and _is_new_empty_task(tr, candidate):
        return "new_empty_task"
    line = tr.new_doc.line_at(candidate.position)
    if not line.start <= candidate.position < line.end:
        return "outside_line"
    return None


def _rewrite(tr: Transaction, edits: dict[int, str]) -> list[ChangeSpec]:
    """Express post-edit marker replacements in start-document coordinates.

    The user's own changes are kept; where a change produced a marker
    character, that character is swapped in the change's inserted text.
    A marker the user did not touch gets its own single-character edit.
    """
    pending = dict(edits)
    specs: list[ChangeSpec] = []
    for ch in tr.changes.iter_changes():
        inserted = ch.inserted
        for position in sorted(pending):
            if ch.from_b <= position < ch.to_b:
                k = position - ch.from_b
                inserted = inserted[:k] + pending.pop(position) + inserted[k + 1 :]
        specs.append(ChangeSpec(ch.from_a, ch.to_a, inserted))
    if pending:
        back = tr.changes.position_map().inverted()
        for position, mark in sorted(pending.items()):
            start = back.map(position, -1)
            end = back.map(position + 1, 1)
            if end - start != 1:
                logger.debug("Marker at %d has no single-character source, skipping", position)
                continue
            specs.append(ChangeSpec(start, end, mark))
    return specs


def evaluate(
    tr: Transaction,
    candidates: list[StatusChangeCandidate],
    model: StatusModel,
) -> list[tuple[StatusChangeCandidate, NextStatus]] | None:
    """Resolve each candidate's next marker, flagging the ones to skip.

    Returns None when cycling is disabled altogether.
    """
    resolved: list[tuple[StatusChangeCandidate, NextStatus]] = []
    for candidate in candidates:
        nxt = next_status(candidate.previous_marker, model)
        if nxt is None:
            return None
        reason = _suppression_reason(tr, candidate, nxt.mark)
        if reason is not None:
            logger.debug(
                "Candidate at %d suppressed (%s): %r -> %r",
                candidate.position,
                reason,
                candidate.previous_marker,
                nxt.mark,
            )
            candidate = replace(candidate, suppressed=True)
        resolved.append((candidate, nxt))
    return resolved


def commit(
    tr: Transaction,
    candidates: list[StatusChangeCandidate],
    model: StatusModel,
) -> Transaction | TransactionSpec:
    """Rewrite *tr* so every accepted candidate lands on its next marker."""
    resolved = evaluate(tr, candidates, model)
    if resolved is None:
        return tr
    edits: dict[int, str] = {}
    for candidate, nxt in resolved:
        if candidate.suppressed:
            continue
        line = tr.new_doc.line_at(candidate.position)
        end = min(candidate.position + 1, line.end)
        if end <= candidate.position:
            continue
        edits[candidate.position] = nxt.mark
        k = candidate.position - line.start
        old_line = tr.start_doc.line_at(candidate.change.from_a).text
        transition = detect_status_transition(old_line, line.text[:k] + nxt.mark + line.text[k + 1 :], model)
        logger.debug(
            "Cycling marker at %d: %r -> %r (%s, %s)",
            candidate.position,
            candidate.previous_marker,
            nxt.mark,
            nxt.status_name,
            f"{transition.old_type} -> {transition.new_type}" if transition else "same marker",
        )

    if not edits:
        return tr
    return TransactionSpec(
        changes=_rewrite(tr, edits),
        selection=tr.selection,
        annotations=[STATUS_CHANGE.of(COMMITTER_TAG)],
    )


class StatusMutationCommitter:
    """Transaction filter wrapping :func:`detect` and :func:`commit`."""

    def __init__(self, model: StatusModel) -> None:
        self._model = model

    def __call__(self, tr: Transaction) -> Transaction | TransactionSpec:
        if not tr.doc_changed:
            return tr
        candidates = detect(tr, self._model)
        if not candidates:
            return tr
        return commit(tr, candidates, self._model)

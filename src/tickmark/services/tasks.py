"""TaskService — status changes on Markdown task lines.

Pipeline: LOAD → LOCATE → DISPATCH (through the filter chain) → WRITE → RESPOND

Each mutation builds the same transaction a host editor would (a checkbox
click, or a status picked from a menu) and resolves it through the
configured transaction filters, so files edited here get exactly the
marker and date rewrites an interactive session would.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tickmark.domain.cycles import next_status, status_options
from tickmark.domain.lines import classify
from tickmark.editor.commands import set_status_mark, toggle_checkbox
from tickmark.editor.state import EditorState, TransactionSpec
from tickmark.infrastructure.buffers import EditorPool, TaskKey
from tickmark.infrastructure.filesystem import read_document, write_document
from tickmark.pipeline.chain import build_transaction_filters
from tickmark.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from tickmark.config.settings import TickmarkSettings
    from tickmark.pipeline.date_manager import Clock
    from tickmark.plugins.manager import PluginManager

    Command = Callable[[EditorState, int], TransactionSpec | None]

logger = logging.getLogger(__name__)


class TaskService:
    """Cycle, set, and inspect task statuses."""

    def __init__(
        self,
        settings: TickmarkSettings,
        *,
        pool: EditorPool | None = None,
        plugins: PluginManager | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings
        self._config = settings.pipeline
        self._pool = pool if pool is not None else EditorPool()
        self._filters = build_transaction_filters(self._config, plugins, clock)

    @property
    def pool(self) -> EditorPool:
        return self._pool

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def cycle(self, path: Path, line: int) -> ServiceResult:
        """Click the checkbox on *line* of *path*."""
        return self._mutate("cycle", path, line, toggle_checkbox)

    def set_status(self, path: Path, line: int, status_name: str) -> ServiceResult:
        """Set the task on *line* to *status_name* (or a literal marker)."""
        op = "set_status"
        mark = self._resolve_mark(status_name)
        if mark is None:
            return ServiceResult.failure(
                op,
                "UNKNOWN_STATUS",
                f"Unknown status: {status_name!r}",
                known=list(self._config.statuses.statuses),
            )
        return self._mutate(op, path, line, lambda state, n: set_status_mark(state, n, mark))

    def _resolve_mark(self, status_name: str) -> str | None:
        model = self._config.statuses
        mark = model.mark_for(status_name)
        if mark is not None:
            return mark
        folded = status_name.casefold()
        for name in model.statuses:
            if name.casefold() == folded:
                return model.mark_for(name)
        if len(status_name) == 1 and status_name in model.valid_marks():
            return status_name
        return None

    def _mutate(self, op: str, path: Path, line: int, command: Command) -> ServiceResult:
        if not path.is_file():
            return ServiceResult.failure(op, "NOT_FOUND", f"No such file: {path}", path=str(path))

        try:
            document = read_document(path)
        except (OSError, UnicodeError) as exc:
            return ServiceResult.failure(op, "READ_ERROR", f"Cannot read {path}: {exc}", path=str(path))

        key = TaskKey(path.resolve(), line)
        with self._pool.session(key, lambda: EditorState.create(document.content)) as state:
            if not 1 <= line <= state.doc.lines:
                return ServiceResult.failure(
                    op,
                    "OUT_OF_RANGE",
                    f"Line {line} out of range ({path} has {state.doc.lines} lines)",
                    line=line,
                    lines=state.doc.lines,
                )
            before = state.doc.line(line).text
            spec = command(state, line)
            if spec is None:
                return ServiceResult.failure(
                    op, "NOT_A_TASK", f"Line {line} is not a task: {before!r}", line=line
                )

            tr = state.update(spec, self._filters)
            new_state = tr.state
            after = new_state.doc.line(line).text
            changed = tr.doc_changed and str(tr.new_doc) != str(tr.start_doc)
            if changed:
                try:
                    write_document(path, replace(document, content=str(new_state.doc)))
                except OSError as exc:
                    return ServiceResult.failure(
                        op, "WRITE_ERROR", f"Cannot write {path}: {exc}", path=str(path)
                    )
                logger.debug("Wrote %s line %d: %r -> %r", path, line, before, after)
            self._pool.update(key, new_state)

        old_task = classify(before)
        new_task = classify(after)
        model = self._config.statuses
        data: dict[str, Any] = {
            "path": str(path),
            "line": line,
            "before": before,
            "after": after,
            "old_mark": old_task.marker if old_task else None,
            "new_mark": new_task.marker if new_task else None,
        }
        if new_task is not None:
            data["status"] = model.status_for(new_task.marker)
            data["type"] = str(model.type_of(new_task.marker))
        warnings: list[str] = []
        if not changed:
            warnings.append("Document unchanged")
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def next_status(self, mark: str) -> ServiceResult:
        """What *mark* advances to under the configured cycles."""
        op = "next_status"
        if len(mark) != 1:
            return ServiceResult.failure(
                op, "INVALID_MARK", f"A status mark is exactly one character, got {mark!r}"
            )
        model = self._config.statuses
        nxt = next_status(mark, model)
        if nxt is None:
            return ServiceResult(
                ok=True,
                op=op,
                data={"mark": mark, "next_mark": None, "status": None, "cycle": None},
                warnings=["Cycling disabled: every status is excluded from the cycle"],
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "mark": mark,
                "next_mark": nxt.mark,
                "status": nxt.status_name,
                "type": str(model.type_of(nxt.mark)),
                "cycle": nxt.cycle.id if nxt.cycle else None,
            },
        )

    def list_statuses(self) -> ServiceResult:
        """Configured statuses, their marks and types, and the cycles."""
        model = self._config.statuses
        excluded = set(model.excluded_from_cycle)
        statuses = []
        for name in model.statuses:
            mark = model.marks.get(name)
            statuses.append(
                {
                    "name": name,
                    "mark": mark,
                    "type": str(model.type_of(mark)) if mark is not None else None,
                    "in_cycle": name not in excluded,
                }
            )
        cycles = [
            {
                "id": c.id,
                "name": c.name,
                "priority": c.priority,
                "enabled": c.enabled,
                "cycle": [f"{c.marks[n]}:{n}" for n in c.cycle],
            }
            for c in model.cycles
        ]
        return ServiceResult(
            ok=True,
            op="list_statuses",
            data={
                "statuses": statuses,
                "cycles": cycles,
                "options": [{"mark": m, "status": n} for m, n in status_options(model)],
            },
        )

"""Editor buffer pool keyed by task identity.

Each task being edited gets its own :class:`EditorState`. The pool is an
explicit object owned by whoever runs the edits (normally
:class:`~tickmark.services.tasks.TaskService`); there is no module-level
instance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from tickmark.editor.state import EditorState

logger = logging.getLogger(__name__)

Loader = Callable[[], EditorState]


@dataclass(frozen=True)
class TaskKey:
    """A task identified by its file and 1-based line number."""

    path: Path
    line: int


@dataclass
class _Entry:
    state: EditorState
    refs: int = 0


class EditorPool:
    """Reference-counted map of task keys to editor states."""

    def __init__(self) -> None:
        self._entries: dict[TaskKey, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def acquire(self, key: TaskKey, loader: Loader) -> EditorState:
        """Return the state for *key*, loading it on first acquisition."""
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(loader())
            self._entries[key] = entry
            logger.debug("Opened editor for %s:%d", key.path, key.line)
        entry.refs += 1
        return entry.state

    def release(self, key: TaskKey) -> None:
        """Drop one reference; the entry is discarded at zero.

        Raises:
            KeyError: *key* is not held.
        """
        entry = self._entries[key]
        entry.refs -= 1
        if entry.refs <= 0:
            del self._entries[key]
            logger.debug("Closed editor for %s:%d", key.path, key.line)

    def get(self, key: TaskKey) -> EditorState | None:
        entry = self._entries.get(key)
        return entry.state if entry else None

    def update(self, key: TaskKey, state: EditorState) -> None:
        """Replace the held state for *key* (after a committed transaction)."""
        self._entries[key].state = state

    @contextmanager
    def session(self, key: TaskKey, loader: Loader) -> Iterator[EditorState]:
        """Hold *key* for the duration of a ``with`` block."""
        state = self.acquire(key, loader)
        try:
            yield state
        finally:
            self.release(key)

"""Editor state, transactions, and the transaction-filter chain.

A transaction is proposed against a start state and passed through an
ordered chain of filters before it is committed. Each filter either
returns the transaction unchanged (pass-through) or a
:class:`TransactionSpec` that replaces it. Replacement specs are always
expressed in start-document coordinates; the next filter sees the rebuilt
transaction.

INVARIANT: Filters run synchronously and in registration order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Generic, TypeVar

from tickmark.editor.changes import ChangeSet, ChangeSpec
from tickmark.editor.text import Text

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnnotationType(Generic[T]):
    """A typed key for metadata attached to a transaction."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"AnnotationType({self.name!r})"

    def of(self, value: T) -> Annotation:
        return Annotation(type=self, value=value)


@dataclass(frozen=True)
class Annotation:
    type: AnnotationType[Any]
    value: Any


# Dotted user-event names, e.g. "input.paste", "input.type", "set".
USER_EVENT: AnnotationType[str] = AnnotationType("user_event")


@dataclass(frozen=True)
class Selection:
    """A single selection range (``anchor == head`` for a cursor)."""

    anchor: int
    head: int | None = None

    @property
    def cursor(self) -> int:
        return self.anchor if self.head is None else self.head

    @property
    def start(self) -> int:
        return min(self.anchor, self.cursor)

    @property
    def end(self) -> int:
        return max(self.anchor, self.cursor)

    def clamp(self, length: int) -> Selection:
        anchor = min(max(0, self.anchor), length)
        head = None if self.head is None else min(max(0, self.head), length)
        return Selection(anchor, head)


@dataclass(frozen=True)
class TransactionSpec:
    """A description of a transaction, in start-document coordinates."""

    changes: Sequence[ChangeSpec] = ()
    selection: Selection | None = None
    annotations: Sequence[Annotation] = ()
    user_event: str | None = None


class Transaction:
    """A proposed, not yet committed, update of an :class:`EditorState`."""

    def __init__(
        self,
        start_state: EditorState,
        changes: ChangeSet,
        selection: Selection | None = None,
        annotations: Iterable[Annotation] = (),
    ) -> None:
        self.start_state = start_state
        self.changes = changes
        self._selection = selection
        self.annotations: tuple[Annotation, ...] = tuple(annotations)

    def __repr__(self) -> str:
        return f"Transaction(changes={self.changes!r}, annotations={self.annotations!r})"

    @property
    def start_doc(self) -> Text:
        return self.start_state.doc

    @cached_property
    def new_doc(self) -> Text:
        return self.changes.apply(self.start_state.doc)

    @property
    def doc_changed(self) -> bool:
        return bool(self.changes)

    @property
    def selection(self) -> Selection:
        """Selection after the transaction, in new-document coordinates."""
        if self._selection is not None:
            return self._selection.clamp(self.new_doc.length)
        sel = self.start_state.selection
        mapping = self.changes.position_map()
        head = None if sel.head is None else mapping.map(sel.head, 1)
        return Selection(mapping.map(sel.anchor, 1), head)

    def annotation(self, annotation_type: AnnotationType[T]) -> T | None:
        for ann in self.annotations:
            if ann.type is annotation_type:
                return ann.value
        return None

    def is_user_event(self, event: str) -> bool:
        """True if the user event is *event* or a dotted sub-event of it."""
        value = self.annotation(USER_EVENT)
        if not value:
            return False
        return value == event or value.startswith(event + ".")

    @cached_property
    def state(self) -> EditorState:
        return EditorState(self.new_doc, self.selection)


TransactionFilter = Callable[[Transaction], Transaction | TransactionSpec]


@dataclass(frozen=True)
class EditorState:
    """Immutable document plus selection."""

    doc: Text
    selection: Selection = field(default_factory=lambda: Selection(0))

    @classmethod
    def create(cls, content: str, cursor: int = 0) -> EditorState:
        return cls(Text(content), Selection(cursor))

    def build(self, spec: TransactionSpec) -> Transaction:
        """Turn *spec* into a transaction without running any filters."""
        annotations = list(spec.annotations)
        if spec.user_event is not None:
            annotations.append(USER_EVENT.of(spec.user_event))
        changes = ChangeSet.of(spec.changes, self.doc.length)
        return Transaction(self, changes, spec.selection, annotations)

    def update(
        self,
        spec: TransactionSpec,
        filters: Sequence[TransactionFilter] = (),
    ) -> Transaction:
        """Build a transaction from *spec* and resolve it through *filters*."""
        tr = self.build(spec)
        for tr_filter in filters:
            result = tr_filter(tr)
            if result is tr:
                continue
            if isinstance(result, Transaction):
                tr = result
                continue
            logger.debug(
                "Transaction replaced by %s", getattr(tr_filter, "__name__", type(tr_filter).__name__)
            )
            tr = self.build(result)
        return tr

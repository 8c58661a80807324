"""In-memory editor host — text buffer, change sets, and transactions."""

from tickmark.editor.changes import ChangeRange, ChangeSet, ChangeSpec, PositionMap
from tickmark.editor.state import (
    USER_EVENT,
    Annotation,
    AnnotationType,
    EditorState,
    Selection,
    Transaction,
    TransactionFilter,
    TransactionSpec,
)
from tickmark.editor.text import Line, Text

__all__ = [
    "USER_EVENT",
    "Annotation",
    "AnnotationType",
    "ChangeRange",
    "ChangeSet",
    "ChangeSpec",
    "EditorState",
    "Line",
    "PositionMap",
    "Selection",
    "Text",
    "Transaction",
    "TransactionFilter",
    "TransactionSpec",
]

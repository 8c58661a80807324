"""Task-status transaction pipeline.

Interceptors that turn raw checkbox edits into canonical status changes
and keep lifecycle dates consistent with them.
"""

from tickmark.pipeline.chain import build_transaction_filters
from tickmark.pipeline.committer import StatusMutationCommitter
from tickmark.pipeline.date_manager import LifecycleDateManager
from tickmark.pipeline.detector import (
    COMMITTER_TAG,
    DATE_MANAGER_TAG,
    MANUAL_TAG,
    STATUS_CHANGE,
)

__all__ = [
    "COMMITTER_TAG",
    "DATE_MANAGER_TAG",
    "MANUAL_TAG",
    "STATUS_CHANGE",
    "LifecycleDateManager",
    "StatusMutationCommitter",
    "build_transaction_filters",
]

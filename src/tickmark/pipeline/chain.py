"""Filter chain assembly.

INVARIANT: The status committer runs before the date manager. The date
manager must see the committer's rewrite to stamp the right dates.
"""

from __future__ import annotations

import logging
from datetime import datetime

from tickmark.config.models import PipelineConfig
from tickmark.editor.state import TransactionFilter
from tickmark.pipeline.committer import StatusMutationCommitter
from tickmark.pipeline.date_manager import Clock, LifecycleDateManager
from tickmark.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


def build_transaction_filters(
    config: PipelineConfig,
    plugins: PluginManager | None = None,
    clock: Clock | None = None,
) -> list[TransactionFilter]:
    """Ordered transaction filters for *config*."""
    filters: list[TransactionFilter] = []
    if config.cycle.enabled:
        filters.append(StatusMutationCommitter(config.statuses))
    if config.dates.enabled:
        filters.append(LifecycleDateManager(config.statuses, config.dates, clock or datetime.now))
    if plugins is not None:
        filters.extend(plugins.collect_filters(config))
    logger.debug("Transaction filters: %s", ", ".join(type(f).__name__ for f in filters) or "none")
    return filters

"""Pluggy hook specifications for tickmark.

One setup-time hook lets plugins append transaction filters to the chain.
Plugin filters always run after the built-in interceptors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from tickmark.config.models import PipelineConfig
    from tickmark.editor.state import TransactionFilter

hookspec = pluggy.HookspecMarker("tickmark")
hookimpl = pluggy.HookimplMarker("tickmark")


class TickmarkHookSpec:
    """Hook specifications for the tickmark plugin system."""

    @hookspec
    def register_transaction_filters(self, config: PipelineConfig) -> list[TransactionFilter] | None:
        """Return filters to run after the status and date interceptors."""

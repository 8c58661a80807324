"""Plugin discovery and loading.

Discovery: entry points in the ``tickmark.plugins`` group, loaded through
pluggy, plus plugins registered directly by the caller.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

import pluggy

from tickmark.plugins.hookspecs import TickmarkHookSpec

if TYPE_CHECKING:
    from tickmark.config.models import PipelineConfig
    from tickmark.editor.state import TransactionFilter

PROJECT_NAME = "tickmark"
ENTRY_POINT_GROUP = "tickmark.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, registration, and filter collection."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(TickmarkHookSpec)
        self._loaded = False

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins; returns the registered plugin names."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [name for name, _ in self._pm.list_name_plugin()]

    def collect_filters(self, config: PipelineConfig) -> list[TransactionFilter]:
        """Filters contributed by every registered plugin, in registration order.

        A plugin whose hook raises or returns something other than a list
        of callables is logged and skipped.
        """
        filters: list[TransactionFilter] = []
        for name, plugin in self._pm.list_name_plugin():
            hook = getattr(plugin, "register_transaction_filters", None)
            if hook is None:
                continue
            try:
                contributed = hook(config=config)
            except Exception:
                logger.warning("Plugin %s failed to register filters", name, exc_info=True)
                continue
            if contributed is None:
                continue
            if not isinstance(contributed, list) or not all(callable(f) for f in contributed):
                logger.warning("Plugin %s returned invalid transaction filters", name)
                continue
            filters.extend(contributed)
        return filters

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly, which
        leaves ``self`` unbound when its hooks are called.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True)
                continue
            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

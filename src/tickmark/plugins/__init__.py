"""Extension layer — plugin system via pluggy.

Discovery: entry points (pip-installed) in the ``tickmark.plugins`` group.
INVARIANT: Plugin failures are warnings, never errors.
"""

from tickmark.plugins.hookspecs import hookimpl
from tickmark.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]

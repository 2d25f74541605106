"""
Plugin data access for MCStats.

Plugin scoped queries, plugin lookup and ping ingestion.
"""

from .accessor import PluginAccessor
from .crud import get_all_plugins, get_or_create_plugin, get_plugin_by_name
from .reports import record_ping

__all__ = [
    "PluginAccessor",
    "get_all_plugins",
    "get_or_create_plugin",
    "get_plugin_by_name",
    "record_ping",
]

"""Gerrit implementations of the playback collaborators.

Usage:
    >>> from gerrit_playback.gerrit import GerritServerConfiguration, create_playback_manager
    >>>
    >>> server = GerritServerConfiguration(name="MyGerritServer", frontend_url="https://review.example.com")
    >>> manager = create_playback_manager(server, checkpoint_store, sink)
    >>> await manager.on_startup()
"""

from .config import GerritServerConfiguration
from .events_log import EVENTS_LOG_PLUGIN_NAME, EventsLogFetcher, format_lower_bound
from .factory import create_playback_manager
from .parsing import GerritJsonEventParser
from .plugin_checker import GerritPluginChecker

__all__ = [
    "EVENTS_LOG_PLUGIN_NAME",
    "EventsLogFetcher",
    "GerritJsonEventParser",
    "GerritPluginChecker",
    "GerritServerConfiguration",
    "create_playback_manager",
    "format_lower_bound",
]

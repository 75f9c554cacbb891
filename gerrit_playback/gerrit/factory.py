from collections.abc import Callable

from ..checkpoint import CheckpointStore
from ..domain import now_millis
from ..recovery import CapabilityGate, EventSink, MissedEventsPlaybackManager
from .config import GerritServerConfiguration
from .events_log import EVENTS_LOG_PLUGIN_NAME, EventsLogFetcher
from .parsing import GerritJsonEventParser
from .plugin_checker import GerritPluginChecker


def create_playback_manager(
    server: GerritServerConfiguration,
    checkpoint_store: CheckpointStore,
    sink: EventSink,
    plugin_name: str = EVENTS_LOG_PLUGIN_NAME,
    clock: Callable[[], int] = now_millis,
) -> MissedEventsPlaybackManager:
    """Wire a playback manager for one Gerrit server.

    The server name becomes the connection identity. The manager queries
    the events-log plugin for missed events, after checking through the REST
    API that the plugin is installed.

    Args:
        server: The Gerrit server to recover events from
        checkpoint_store: Store shared by all managers of the process
        sink: Consumer of the recovered events
        plugin_name: Name the events-log plugin is installed under
        clock: Current time in epoch milliseconds

    Returns:
        A manager that still needs ``on_startup()`` before use
    """
    return MissedEventsPlaybackManager(
        identity=server.name,
        checkpoint_store=checkpoint_store,
        fetcher=EventsLogFetcher(server, plugin_name),
        parser=GerritJsonEventParser(),
        sink=sink,
        capability_gate=CapabilityGate(GerritPluginChecker(server, plugin_name)),
        clock=clock,
    )

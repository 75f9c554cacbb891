"""Library configuration using pydantic-settings."""

from functools import cached_property
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from .checkpoint import CheckpointStore, JsonFileCheckpointStore
from .gerrit import EVENTS_LOG_PLUGIN_NAME, GerritServerConfiguration, create_playback_manager
from .recovery import EventSink, MissedEventsPlaybackManager


class PlaybackConfiguration(BaseSettings):
    """Configuration and factory for missed events playback.

    All settings can be configured via environment variables with the
    GERRIT_PLAYBACK_ prefix. For example:
    - GERRIT_PLAYBACK_CHECKPOINT_PATH=/var/lib/jenkins/gerrit-server-timestamps.json
    - GERRIT_PLAYBACK_PLUGIN_NAME=events-log

    One configuration serves every Gerrit server of the process: all of their
    managers share the same checkpoint store.

    Attributes:
        checkpoint_path: Location of the checkpoint file.
        plugin_name: Name the events-log plugin is installed under.

    Example:
        >>> config = PlaybackConfiguration()
        >>> managers = [
        ...     config.create_manager(server, sink)
        ...     for server in (primary, secondary)
        ... ]
        >>> for manager in managers:
        ...     await manager.on_startup()
    """

    checkpoint_path: Path = Path("gerrit-server-timestamps.json")
    plugin_name: str = Field(default=EVENTS_LOG_PLUGIN_NAME, min_length=1)

    model_config = {"env_prefix": "GERRIT_PLAYBACK_"}

    @cached_property
    def checkpoint_store(self) -> CheckpointStore:
        """Get the checkpoint store.

        The store is lazily created and cached, so every manager created from
        this configuration shares it.
        """
        return JsonFileCheckpointStore(self.checkpoint_path)

    def create_manager(
        self,
        server: GerritServerConfiguration,
        sink: EventSink,
    ) -> MissedEventsPlaybackManager:
        """Create the playback manager of one Gerrit server."""
        return create_playback_manager(
            server,
            self.checkpoint_store,
            sink,
            plugin_name=self.plugin_name,
        )

"""gerrit-playback - Missed events playback for Gerrit event streams.

This module provides the public API for recovering the events a stream
connection missed while it was down.
"""

from .checkpoint import CheckpointStore, InMemoryCheckpointStore, JsonFileCheckpointStore
from .config import PlaybackConfiguration
from .domain import (
    EventKey,
    EventTimeSlice,
    FetchError,
    GerritEvent,
    ParseError,
    PersistenceError,
    PlaybackError,
    PlaybackEvent,
)
from .gerrit import GerritServerConfiguration, create_playback_manager
from .recovery import (
    CapabilityGate,
    CapabilityProbe,
    EventFetcher,
    EventParser,
    EventSink,
    LiveDedupCache,
    MissedEventsPlaybackManager,
    PlaybackResult,
    RecoveryState,
)

__all__ = [
    # Recovery
    "MissedEventsPlaybackManager",
    "PlaybackResult",
    "RecoveryState",
    "LiveDedupCache",
    "CapabilityGate",
    # Collaborator interfaces
    "CapabilityProbe",
    "EventFetcher",
    "EventParser",
    "EventSink",
    # Checkpoints
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "JsonFileCheckpointStore",
    # Domain
    "EventKey",
    "EventTimeSlice",
    "GerritEvent",
    "PlaybackEvent",
    # Errors
    "PlaybackError",
    "PersistenceError",
    "FetchError",
    "ParseError",
    # Configuration
    "PlaybackConfiguration",
    "GerritServerConfiguration",
    "create_playback_manager",
]

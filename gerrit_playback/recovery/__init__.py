"""Missed-events recovery: state machine, dedup cache and capability gate."""

from .cache import LiveDedupCache
from .capability import CapabilityGate
from .collaborators import (
    CapabilityProbe,
    EventFetcher,
    EventParser,
    EventSink,
    RawRecord,
)
from .manager import MissedEventsPlaybackManager, PlaybackResult, RecoveryState

__all__ = [
    "CapabilityGate",
    "CapabilityProbe",
    "EventFetcher",
    "EventParser",
    "EventSink",
    "LiveDedupCache",
    "MissedEventsPlaybackManager",
    "PlaybackResult",
    "RawRecord",
    "RecoveryState",
]

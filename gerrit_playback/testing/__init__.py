from .fakes import (
    FrozenClock,
    InMemoryEventFetcher,
    RecordingEventSink,
    StaticCapabilityProbe,
    gerrit_event,
    gerrit_record,
)
from .scenario import PlaybackScenario

__all__ = [
    "FrozenClock",
    "InMemoryEventFetcher",
    "PlaybackScenario",
    "RecordingEventSink",
    "StaticCapabilityProbe",
    "gerrit_event",
    "gerrit_record",
]

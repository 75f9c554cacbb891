from .event import (
    Change,
    EventKey,
    GerritEvent,
    PatchSet,
    PlaybackEvent,
    RefUpdate,
    now_millis,
    utc_now,
)
from .exceptions import FetchError, ParseError, PersistenceError, PlaybackError
from .timeslice import EventTimeSlice

__all__ = [
    "Change",
    "EventKey",
    "EventTimeSlice",
    "FetchError",
    "GerritEvent",
    "ParseError",
    "PatchSet",
    "PersistenceError",
    "PlaybackError",
    "PlaybackEvent",
    "RefUpdate",
    "now_millis",
    "utc_now",
]

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .event import EventKey


@dataclass(frozen=True, eq=False)
class EventTimeSlice:
    """All events sharing one upstream-reported creation timestamp.

    Upstream timestamps are coarser than the event rate, so several events
    may carry the same timestamp. A time slice records which of them have
    already been delivered, which is what lets a catch-up query that starts
    *at* the checkpoint timestamp skip the events delivered before the outage.

    The timestamp is fixed for the lifetime of the slice. The event set only
    ever grows and keeps insertion order.

    Attributes:
        timestamp: Creation time shared by all events, in epoch milliseconds
        events: Keys of the events delivered at ``timestamp``, in order

    Example:
        >>> time_slice = EventTimeSlice(1415906575000)
        >>> time_slice.add(key)
        True
        >>> time_slice.add(key)  # Already present
        False
        >>> key in time_slice
        True
    """

    timestamp: int
    _events: dict[EventKey, None] = field(default_factory=dict, repr=False)

    @classmethod
    def of(cls, timestamp: int, keys: Iterable[EventKey] = ()) -> "EventTimeSlice":
        """Create a slice holding the given keys (duplicates collapse)."""
        time_slice = cls(timestamp)
        for key in keys:
            time_slice.add(key)
        return time_slice

    @property
    def events(self) -> tuple[EventKey, ...]:
        return tuple(self._events)

    def add(self, key: EventKey) -> bool:
        """Add a key to the slice.

        Returns:
            True if the key was new, False if it was already present
        """
        if key in self._events:
            return False
        self._events[key] = None
        return True

    def copy(self) -> "EventTimeSlice":
        return EventTimeSlice.of(self.timestamp, self._events)

    def __contains__(self, key: object) -> bool:
        return key in self._events

    def __iter__(self) -> Iterator[EventKey]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EventTimeSlice):
            return NotImplemented
        return self.timestamp == other.timestamp and self.events == other.events

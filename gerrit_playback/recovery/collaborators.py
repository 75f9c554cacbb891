"""Interfaces of the collaborators a playback manager depends on.

The manager never talks to the network or parses wire formats itself. It is
constructed with one implementation of each of these interfaces:

- EventFetcher: Pulls the events of an outage window from the upstream
- EventParser: Turns a raw record into a typed event
- EventSink: Hands a recovered event to the downstream consumer
- CapabilityProbe: Tells whether the upstream can answer catch-up queries

Gerrit implementations live in ``gerrit_playback.gerrit``. In-memory
implementations for tests live in ``gerrit_playback.testing``.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, TypeAlias

from ..domain import PlaybackEvent

RawRecord: TypeAlias = str | Mapping[str, Any]


class EventFetcher(ABC):
    """Pull-based access to the events an upstream server recorded."""

    @abstractmethod
    async def fetch_events_since(self, identity: str, lower_bound: int) -> Sequence[RawRecord]:
        """Fetch the raw records of all events created at or after a time.

        Args:
            identity: The connection identity to query
            lower_bound: Lower bound of the outage window, epoch milliseconds

        Returns:
            Raw event records in the order the upstream returned them

        Raises:
            FetchError: If the query failed
        """
        ...


class EventParser(ABC):
    @abstractmethod
    def parse(self, record: RawRecord) -> PlaybackEvent:
        """Parse one raw record.

        Raises:
            ParseError: If the record is malformed
        """
        ...


class EventSink(ABC):
    """Downstream consumer of recovered events.

    This is the same consumer that receives live events. A recovered event
    is indistinguishable from a live one, except that it necessarily carries
    its original creation timestamp.

    The manager does not hold its lock while delivering, so a sink that is
    also the live consumer may pass the event back to ``event_observed()``.
    """

    @abstractmethod
    async def deliver(self, identity: str, event: PlaybackEvent) -> None:
        """Deliver one recovered event.

        Args:
            identity: The connection identity the event was recovered from
            event: The recovered event
        """
        ...


class CapabilityProbe(ABC):
    @abstractmethod
    async def probe(self, identity: str) -> bool:
        """Check whether the upstream of ``identity`` supports catch-up queries."""
        ...

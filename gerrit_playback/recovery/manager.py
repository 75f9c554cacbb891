"""Recovery orchestration for missed events.

This module provides the MissedEventsPlaybackManager, which records the last
time a connection was known to be alive and, when the connection comes back,
replays the events that were missed while it was down.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from ulid import ULID

from ..checkpoint import CheckpointStore
from ..domain import (
    EventTimeSlice,
    FetchError,
    ParseError,
    PersistenceError,
    PlaybackEvent,
    now_millis,
)
from .cache import LiveDedupCache
from .capability import CapabilityGate
from .collaborators import EventFetcher, EventParser, EventSink

LOGGER = logging.getLogger(__name__)


class RecoveryState(Enum):
    """Recovery state of one connection identity.

    IDLE: Not recovering. Live events only advance the checkpoint.
    RECOVERING: A catch-up cycle is in flight. Live events are also recorded
        so the cycle does not deliver them a second time.
    UNSUPPORTED: Playback is disabled for this identity, either because the
        upstream cannot answer catch-up queries or because it stopped
        reporting event creation times.
    """

    IDLE = "idle"
    RECOVERING = "recovering"
    UNSUPPORTED = "unsupported"


@dataclass
class PlaybackResult:
    """Outcome of one reconnect.

    Attributes:
        cycle_id: Unique ID of the cycle, also attached to its log records
        performed: True if a catch-up query was issued
        aborted: True if the catch-up query failed
        window_start: Lower bound of the outage window (epoch millis), None
            when there was nothing to recover
        fetched: Number of raw records returned by the upstream
        delivered: Number of events delivered downstream
        skipped: Number of events skipped as already delivered or unorderable
        malformed: Number of records that could not be parsed
    """

    cycle_id: ULID = field(default_factory=ULID)
    performed: bool = False
    aborted: bool = False
    window_start: int | None = None
    fetched: int = 0
    delivered: int = 0
    skipped: int = 0
    malformed: int = 0


class MissedEventsPlaybackManager:
    """Replays events missed by one upstream connection while it was down.

    The manager is driven by the connection layer through three callbacks:

    - ``connection_established()`` when the connection (re)opens
    - ``connection_down()`` when it drops
    - ``event_observed(event)`` for every event received live

    Every live event advances a checkpoint: the latest creation timestamp seen
    on the connection, plus the keys of the events already delivered at that
    exact timestamp. When the connection comes back, the manager fetches
    everything created since the checkpoint timestamp, skips what was already
    delivered (at the checkpoint boundary, or live while the query was in
    flight), delivers the rest and advances the checkpoint with it.

    **Degradation:**
    - Upstream without catch-up support: the manager stays passive
    - Live event without creation time: playback disabled for good
    - Unreadable checkpoint: no catch-up on this reconnect
    - Failed catch-up query: the cycle is abandoned, the next reconnect
      retries from the same checkpoint
    - Failed checkpoint save: logged, the in-memory checkpoint stays current

    **Concurrency:**
    All mutations of the checkpoint, the live cache and the state are
    serialized by one lock per manager. The catch-up query and every delivery
    to the sink run outside that lock, so live events keep flowing while they
    are in flight, and a sink may feed delivered events back through
    ``event_observed()``. Concurrent reconnects of the same connection run
    their cycles one after the other.

    Attributes:
        identity: Name of the upstream connection (checkpoint key)
        checkpoint_store: Durable storage for checkpoints
        fetcher: Pulls missed events from the upstream
        parser: Parses the fetched raw records
        sink: Downstream consumer of recovered events
        capability_gate: Tells whether the upstream supports catch-up
        clock: Current time in epoch milliseconds

    Example:
        >>> manager = MissedEventsPlaybackManager(
        ...     identity="MyGerritServer",
        ...     checkpoint_store=JsonFileCheckpointStore("gerrit-server-timestamps.json"),
        ...     fetcher=EventsLogFetcher(server_config),
        ...     parser=GerritJsonEventParser(),
        ...     sink=build_trigger_sink,
        ...     capability_gate=CapabilityGate(GerritPluginChecker(server_config)),
        ... )
        >>> await manager.on_startup()
        >>>
        >>> # From the connection layer
        >>> result = await manager.connection_established()
        >>> await manager.event_observed(event)
    """

    __slots__ = (
        "identity",
        "checkpoint_store",
        "fetcher",
        "parser",
        "sink",
        "capability_gate",
        "clock",
        "_state",
        "_checkpoint",
        "_live_cache",
        "_lock",
        "_cycle_lock",
    )

    def __init__(
        self,
        identity: str,
        checkpoint_store: CheckpointStore,
        fetcher: EventFetcher,
        parser: EventParser,
        sink: EventSink,
        capability_gate: CapabilityGate,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        if not identity:
            raise ValueError("identity must not be empty")
        self.identity = identity
        self.checkpoint_store = checkpoint_store
        self.fetcher = fetcher
        self.parser = parser
        self.sink = sink
        self.capability_gate = capability_gate
        self.clock = clock
        self._state = RecoveryState.IDLE
        self._checkpoint: EventTimeSlice | None = None
        self._live_cache = LiveDedupCache()
        self._lock = asyncio.Lock()
        self._cycle_lock = asyncio.Lock()

    @property
    def state(self) -> RecoveryState:
        return self._state

    @property
    def is_supported(self) -> bool:
        return self._state is not RecoveryState.UNSUPPORTED

    @property
    def checkpoint(self) -> EventTimeSlice | None:
        """A copy of the current checkpoint, None if nothing was seen yet."""
        return self._checkpoint.copy() if self._checkpoint is not None else None

    @property
    def live_cache(self) -> LiveDedupCache:
        return self._live_cache

    # HasLifecycle protocol implementation

    async def on_startup(self) -> None:
        """Probe the upstream capability and load the last checkpoint."""
        await self._check_capability()
        async with self._lock:
            await self._load_checkpoint()

    async def on_shutdown(self) -> None:
        """Stop the manager. Durable checkpoints are left as they are."""
        LOGGER.info(
            f"Shutting down missed events playback for {self.identity}",
            extra={"identity": self.identity},
        )

    # Connection layer callbacks

    async def connection_established(self) -> PlaybackResult:
        """Catch up on the events missed since the last checkpoint.

        Returns:
            Summary of the cycle

        Raises:
            Any exception raised by the sink. The manager is back to IDLE
            and the live cache is reset before it propagates.
        """
        LOGGER.info(f"Connection established for {self.identity}", extra={"identity": self.identity})

        async with self._cycle_lock:
            result = PlaybackResult()
            extra = {"identity": self.identity, "cycle_id": str(result.cycle_id)}

            if not await self._check_capability():
                LOGGER.info(f"Missed events playback is not supported for {self.identity}", extra=extra)
                return result

            async with self._lock:
                if self._state is RecoveryState.UNSUPPORTED:
                    return result
                self._state = RecoveryState.RECOVERING
                await self._load_checkpoint()
                boundary = self.checkpoint
                now = self.clock()
                window_start = boundary.timestamp if boundary is not None else now
                if now - window_start <= 0:
                    LOGGER.info(f"No events missed by {self.identity}", extra=extra)
                    self._complete_cycle()
                    return result

            result.window_start = window_start
            LOGGER.info(
                f"Playing back events missed by {self.identity} during the last {now - window_start} ms",
                extra={**extra, "window_start": window_start},
            )

            try:
                await self._play_back(result, window_start, boundary)
            finally:
                async with self._lock:
                    self._complete_cycle()

            LOGGER.info(
                f"Playback for {self.identity} complete: {result.delivered} delivered, "
                f"{result.skipped} skipped, {result.malformed} malformed",
                extra={
                    **extra,
                    "fetched": result.fetched,
                    "delivered": result.delivered,
                    "skipped": result.skipped,
                    "malformed": result.malformed,
                    "aborted": result.aborted,
                },
            )
            return result

    async def connection_down(self) -> None:
        LOGGER.info(f"Connection down for {self.identity}", extra={"identity": self.identity})

    async def event_observed(self, event: PlaybackEvent) -> None:
        """Record an event received on the live stream.

        An event without a creation time disables playback for this identity
        for good: without timestamps the checkpoint cannot be ordered.

        Args:
            event: The live event
        """
        async with self._lock:
            if event.created_on == 0:
                if self._state is not RecoveryState.UNSUPPORTED:
                    LOGGER.warning(
                        f"{self.identity} does not report event creation times, "
                        "disabling missed events playback",
                        extra={"identity": self.identity},
                    )
                self._state = RecoveryState.UNSUPPORTED
                return

            if self._state is RecoveryState.RECOVERING:
                self._live_cache.add(event.event_key)
            await self._advance(event)

    async def advance(self, event: PlaybackEvent) -> bool:
        """Advance the checkpoint with an event and persist it.

        Args:
            event: A delivered event

        Returns:
            True if the checkpoint changed, False if the event was older than
            the checkpoint or already part of it
        """
        async with self._lock:
            return await self._advance(event)

    # Internals, called with self._lock held

    async def _advance(self, event: PlaybackEvent) -> bool:
        timestamp = event.created_on
        key = event.event_key
        current = self._checkpoint

        if timestamp <= 0:
            return False

        if current is None or timestamp > current.timestamp:
            current = EventTimeSlice.of(timestamp, [key])
            self._checkpoint = current
        elif timestamp < current.timestamp:
            LOGGER.debug(
                f"Not regressing checkpoint of {self.identity} from {current.timestamp} to {timestamp}",
                extra={"identity": self.identity},
            )
            return False
        elif not current.add(key):
            return False

        await self._persist(current)
        return True

    async def _persist(self, time_slice: EventTimeSlice) -> None:
        try:
            await self.checkpoint_store.put(self.identity, time_slice)
        except PersistenceError as e:
            LOGGER.warning(
                f"Failed to persist checkpoint for {self.identity}: {e}",
                extra={"identity": self.identity},
            )

    async def _load_checkpoint(self) -> None:
        try:
            checkpoints = await self.checkpoint_store.load()
        except PersistenceError as e:
            LOGGER.error(
                f"Failed to load checkpoints for {self.identity}: {e}",
                extra={"identity": self.identity},
            )
            return

        loaded = checkpoints.get(self.identity)
        # An unsaved in-memory checkpoint is newer than what is on disk
        if loaded is not None and (
            self._checkpoint is None or loaded.timestamp > self._checkpoint.timestamp
        ):
            self._checkpoint = loaded

    def _complete_cycle(self) -> None:
        if self._state is RecoveryState.RECOVERING:
            self._state = RecoveryState.IDLE
        self._live_cache.reset()

    async def _check_capability(self) -> bool:
        supported = await self.capability_gate.is_supported(self.identity)
        async with self._lock:
            if not supported:
                self._state = RecoveryState.UNSUPPORTED
            return self._state is not RecoveryState.UNSUPPORTED

    # Catch-up

    async def _play_back(
        self,
        result: PlaybackResult,
        window_start: int,
        boundary: EventTimeSlice | None,
    ) -> None:
        extra = {"identity": self.identity, "cycle_id": str(result.cycle_id)}

        result.performed = True
        try:
            records = await self.fetcher.fetch_events_since(self.identity, window_start)
        except FetchError as e:
            result.aborted = True
            LOGGER.error(f"Failed to fetch events missed by {self.identity}: {e}", extra=extra)
            return
        result.fetched = len(records)

        for record in records:
            try:
                event = self.parser.parse(record)
            except ParseError as e:
                result.malformed += 1
                LOGGER.warning(f"Skipping malformed event record from {self.identity}: {e}", extra=extra)
                continue

            async with self._lock:
                if self._already_delivered(event, window_start, boundary):
                    result.skipped += 1
                    continue
                self._live_cache.add(event.event_key)

            # Lock released: the sink may call back into event_observed()
            await self.sink.deliver(self.identity, event)

            async with self._lock:
                await self._advance(event)
            result.delivered += 1

    def _already_delivered(
        self,
        event: PlaybackEvent,
        window_start: int,
        boundary: EventTimeSlice | None,
    ) -> bool:
        timestamp = event.created_on
        key = event.event_key

        if key in self._live_cache:
            LOGGER.debug(f"Skipping {key}: already delivered live")
            return True

        if timestamp <= 0:
            LOGGER.debug(f"Skipping {key}: no creation time")
            return True

        # The upstream filters on a coarser resolution than the checkpoint
        if timestamp < window_start:
            LOGGER.debug(f"Skipping {key}: created before the outage window")
            return True

        for time_slice in (boundary, self._checkpoint):
            if time_slice is not None and time_slice.timestamp == timestamp and key in time_slice:
                LOGGER.debug(f"Skipping {key}: already part of the checkpoint")
                return True

        return False

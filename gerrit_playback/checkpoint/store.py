"""Checkpoint store for tracking the last known good state per connection."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from ..domain import EventTimeSlice, PersistenceError

LOGGER = logging.getLogger(__name__)


class CheckpointStore(ABC):
    """Abstract interface for persisting playback checkpoints.

    A checkpoint maps each connection identity (a Gerrit server name) to the
    latest EventTimeSlice seen on that connection. Checkpoints let a playback
    manager work out, after a restart or a reconnect, how long the connection
    was down and which events at the boundary were already delivered.

    Implementations should handle:
    - Atomic updates (a crash mid-save must not corrupt the next load)
    - Persistence (checkpoints survive process restarts)
    - Absence (the first run has no checkpoints at all)

    Several playback managers may share one store. They update their own
    entry through ``put``, which serializes the whole load-modify-save
    sequence so that no manager overwrites another's entry.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    @staticmethod
    def in_memory() -> "CheckpointStore":
        """Create in-memory checkpoint store for development/testing."""
        return InMemoryCheckpointStore()

    @abstractmethod
    async def load(self) -> dict[str, EventTimeSlice]:
        """Load the checkpoints of every connection identity.

        Returns:
            Mapping of identity to its latest time slice. Empty if nothing
            has been saved yet.

        Raises:
            PersistenceError: If the durable data is unreadable or malformed
        """
        ...

    @abstractmethod
    async def save(self, checkpoints: Mapping[str, EventTimeSlice]) -> None:
        """Replace the durable checkpoints with the given mapping.

        Args:
            checkpoints: Mapping of identity to its latest time slice

        Raises:
            PersistenceError: If the checkpoints could not be written
        """
        ...

    async def put(self, identity: str, time_slice: EventTimeSlice) -> None:
        """Replace one identity's checkpoint and persist the whole mapping.

        Durable data that cannot be loaded is overwritten, since it would
        otherwise block every future save.

        Args:
            identity: The connection identity to update
            time_slice: Its new latest time slice

        Raises:
            PersistenceError: If the checkpoints could not be written
        """
        async with self._lock:
            try:
                checkpoints = await self.load()
            except PersistenceError as e:
                LOGGER.warning(f"Overwriting unreadable checkpoints: {e}")
                checkpoints = {}
            checkpoints[identity] = time_slice.copy()
            await self.save(checkpoints)


class InMemoryCheckpointStore(CheckpointStore):
    """In-memory checkpoint storage for testing.

    Not suitable for production use as checkpoints are lost on restart.
    Slices are copied on the way in and out, so callers never share state
    with the store.
    """

    def __init__(self) -> None:
        super().__init__()
        self._checkpoints: dict[str, EventTimeSlice] = {}

    async def load(self) -> dict[str, EventTimeSlice]:
        return {identity: s.copy() for identity, s in self._checkpoints.items()}

    async def save(self, checkpoints: Mapping[str, EventTimeSlice]) -> None:
        self._checkpoints = {identity: s.copy() for identity, s in checkpoints.items()}

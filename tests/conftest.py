"""Central test fixtures."""

import pytest

from gerrit_playback.checkpoint import InMemoryCheckpointStore
from gerrit_playback.gerrit import GerritJsonEventParser
from gerrit_playback.recovery import CapabilityGate, MissedEventsPlaybackManager
from gerrit_playback.testing import (
    FrozenClock,
    InMemoryEventFetcher,
    RecordingEventSink,
    StaticCapabilityProbe,
)

IDENTITY = "MyGerritServer"

# Creation time of the events used throughout the tests, in epoch seconds
# (as Gerrit reports it) and in epoch milliseconds (as checkpoints hold it)
CREATED_ON = 1415906575
TIMESTAMP = CREATED_ON * 1000


@pytest.fixture
def clock() -> FrozenClock:
    """A clock one minute after the reference timestamp."""
    return FrozenClock(TIMESTAMP + 60_000)


@pytest.fixture
def checkpoint_store() -> InMemoryCheckpointStore:
    """Create an in-memory checkpoint store."""
    return InMemoryCheckpointStore()


@pytest.fixture
def fetcher() -> InMemoryEventFetcher:
    return InMemoryEventFetcher()


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def probe() -> StaticCapabilityProbe:
    return StaticCapabilityProbe()


@pytest.fixture
def manager(
    checkpoint_store: InMemoryCheckpointStore,
    fetcher: InMemoryEventFetcher,
    sink: RecordingEventSink,
    probe: StaticCapabilityProbe,
    clock: FrozenClock,
) -> MissedEventsPlaybackManager:
    """Create a playback manager wired to in-memory collaborators."""
    return MissedEventsPlaybackManager(
        identity=IDENTITY,
        checkpoint_store=checkpoint_store,
        fetcher=fetcher,
        parser=GerritJsonEventParser(),
        sink=sink,
        capability_gate=CapabilityGate(probe),
        clock=clock,
    )

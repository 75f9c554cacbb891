"""Property-based tests for checkpoint advancement.

Whatever order events arrive in, the checkpoint ends up at the latest known
creation time and holds exactly the events seen at that time.
"""

import asyncio
from dataclasses import dataclass

from hypothesis import given, settings
from hypothesis import strategies as st

from gerrit_playback.checkpoint import InMemoryCheckpointStore
from gerrit_playback.domain import EventKey
from gerrit_playback.gerrit import GerritJsonEventParser
from gerrit_playback.recovery import CapabilityGate, MissedEventsPlaybackManager
from gerrit_playback.testing import InMemoryEventFetcher, RecordingEventSink, StaticCapabilityProbe


@dataclass(frozen=True)
class StubEvent:
    created_on: int
    event_key: EventKey


event_keys = st.builds(
    EventKey,
    change_id=st.sampled_from(["I1", "I2", "I3"]),
    revision=st.sampled_from(["r1", "r2"]),
    event_type=st.sampled_from(["patchset-created", "comment-added"]),
)
events = st.builds(
    StubEvent,
    created_on=st.sampled_from([0, 1000, 2000, 3000]),
    event_key=event_keys,
)


def build_manager(store: InMemoryCheckpointStore) -> MissedEventsPlaybackManager:
    return MissedEventsPlaybackManager(
        identity="MyGerritServer",
        checkpoint_store=store,
        fetcher=InMemoryEventFetcher(),
        parser=GerritJsonEventParser(),
        sink=RecordingEventSink(),
        capability_gate=CapabilityGate(StaticCapabilityProbe()),
        clock=lambda: 10_000,
    )


@given(st.lists(events, max_size=30))
@settings(max_examples=200, deadline=None)
def test_checkpoint_tracks_latest_time_slice(observed: list[StubEvent]):
    store = InMemoryCheckpointStore()
    manager = build_manager(store)

    async def advance_all():
        for event in observed:
            await manager.advance(event)
        return await store.load()

    durable = asyncio.run(advance_all())

    timestamps = [event.created_on for event in observed if event.created_on > 0]
    if not timestamps:
        assert manager.checkpoint is None
        assert durable == {}
        return

    latest = max(timestamps)
    expected_keys = list(dict.fromkeys(e.event_key for e in observed if e.created_on == latest))

    checkpoint = manager.checkpoint
    assert checkpoint is not None
    assert checkpoint.timestamp == latest
    assert list(checkpoint.events) == expected_keys
    assert durable["MyGerritServer"] == checkpoint


@given(st.lists(events, min_size=1, max_size=30))
@settings(max_examples=100, deadline=None)
def test_checkpoint_never_regresses(observed: list[StubEvent]):
    manager = build_manager(InMemoryCheckpointStore())

    async def advance_all():
        previous = 0
        for event in observed:
            await manager.advance(event)
            current = manager.checkpoint.timestamp if manager.checkpoint is not None else 0
            assert current >= previous
            previous = current

    asyncio.run(advance_all())

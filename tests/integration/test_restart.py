"""Recovery across process restarts with the JSON file checkpoint store."""

import json

import pytest

from gerrit_playback import JsonFileCheckpointStore, PlaybackConfiguration
from gerrit_playback.gerrit import GerritJsonEventParser
from gerrit_playback.recovery import CapabilityGate, MissedEventsPlaybackManager
from gerrit_playback.testing import (
    FrozenClock,
    InMemoryEventFetcher,
    RecordingEventSink,
    StaticCapabilityProbe,
    gerrit_event,
    gerrit_record,
)

SEEN = gerrit_event(change_id="I1", revision="r1", created_on=1415906575)
SAME_SECOND = gerrit_event(change_id="I2", revision="r2", created_on=1415906575)
MISSED = gerrit_event(change_id="I3", revision="r3", created_on=1415906585)


def build_manager(identity, store, fetcher, sink) -> MissedEventsPlaybackManager:
    return MissedEventsPlaybackManager(
        identity=identity,
        checkpoint_store=store,
        fetcher=fetcher,
        parser=GerritJsonEventParser(),
        sink=sink,
        capability_gate=CapabilityGate(StaticCapabilityProbe()),
        clock=FrozenClock(1415906600000),
    )


@pytest.mark.asyncio
async def test_restart_replays_only_missed_events(tmp_path):
    path = tmp_path / "gerrit-server-timestamps.json"

    before = build_manager(
        "MyGerritServer", JsonFileCheckpointStore(path), InMemoryEventFetcher(), RecordingEventSink()
    )
    await before.on_startup()
    await before.event_observed(SEEN)
    await before.on_shutdown()

    sink = RecordingEventSink()
    fetcher = InMemoryEventFetcher([gerrit_record(e) for e in (SEEN, SAME_SECOND, MISSED)])
    after = build_manager("MyGerritServer", JsonFileCheckpointStore(path), fetcher, sink)
    await after.on_startup()
    result = await after.connection_established()

    assert fetcher.calls == [("MyGerritServer", 1415906575000)]
    assert sink.events == [SAME_SECOND, MISSED]
    assert result.skipped == 1

    document = json.loads(path.read_text())
    assert document["checkpoints"][0]["timestamp"] == 1415906585000


@pytest.mark.asyncio
async def test_restart_from_legacy_timestamp_file(tmp_path):
    """A file holding plain timestamps replays the whole boundary second."""
    path = tmp_path / "gerrit-server-timestamps.json"
    path.write_text(json.dumps({"MyGerritServer": 1415906575128}))

    sink = RecordingEventSink()
    fetcher = InMemoryEventFetcher([gerrit_record(e) for e in (SEEN, MISSED)])
    manager = build_manager("MyGerritServer", JsonFileCheckpointStore(path), fetcher, sink)
    await manager.on_startup()
    await manager.connection_established()

    # The checkpoint is 128 ms into the second of SEEN
    assert sink.events == [MISSED]


@pytest.mark.asyncio
async def test_servers_share_one_checkpoint_file(tmp_path):
    config = PlaybackConfiguration(checkpoint_path=tmp_path / "timestamps.json")
    primary = build_manager(
        "primary", config.checkpoint_store, InMemoryEventFetcher(), RecordingEventSink()
    )
    secondary = build_manager(
        "secondary", config.checkpoint_store, InMemoryEventFetcher(), RecordingEventSink()
    )

    await primary.event_observed(SEEN)
    await secondary.event_observed(MISSED)

    checkpoints = await JsonFileCheckpointStore(tmp_path / "timestamps.json").load()
    assert checkpoints["primary"].timestamp == SEEN.created_on
    assert checkpoints["secondary"].timestamp == MISSED.created_on

"""Unit tests for PlaybackConfiguration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from gerrit_playback import GerritServerConfiguration, JsonFileCheckpointStore, PlaybackConfiguration
from gerrit_playback.testing import RecordingEventSink


def test_config_with_defaults():
    config = PlaybackConfiguration()

    assert config.checkpoint_path == Path("gerrit-server-timestamps.json")
    assert config.plugin_name == "events-log"


def test_config_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("GERRIT_PLAYBACK_CHECKPOINT_PATH", str(tmp_path / "timestamps.json"))
    monkeypatch.setenv("GERRIT_PLAYBACK_PLUGIN_NAME", "my-events-log")

    config = PlaybackConfiguration()

    assert config.checkpoint_path == tmp_path / "timestamps.json"
    assert config.plugin_name == "my-events-log"


def test_plugin_name_must_not_be_empty():
    with pytest.raises(ValidationError):
        PlaybackConfiguration(plugin_name="")


def test_checkpoint_store_is_shared(tmp_path):
    config = PlaybackConfiguration(checkpoint_path=tmp_path / "timestamps.json")

    store = config.checkpoint_store

    assert isinstance(store, JsonFileCheckpointStore)
    assert store.path == tmp_path / "timestamps.json"
    assert config.checkpoint_store is store


def test_create_manager_per_server(tmp_path):
    config = PlaybackConfiguration(checkpoint_path=tmp_path / "timestamps.json", plugin_name="my-events-log")
    sink = RecordingEventSink()

    primary = config.create_manager(GerritServerConfiguration(name="primary"), sink)
    secondary = config.create_manager(GerritServerConfiguration(name="secondary"), sink)

    assert (primary.identity, secondary.identity) == ("primary", "secondary")
    assert primary.checkpoint_store is secondary.checkpoint_store
    assert primary.fetcher.plugin_name == "my-events-log"

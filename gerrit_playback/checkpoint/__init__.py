"""Durable checkpoints of the last known good state per connection."""

from .file import JsonFileCheckpointStore
from .schema import SCHEMA_VERSION, CheckpointDocument, CheckpointRecord
from .store import CheckpointStore, InMemoryCheckpointStore

__all__ = [
    "SCHEMA_VERSION",
    "CheckpointDocument",
    "CheckpointRecord",
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "JsonFileCheckpointStore",
]

"""MongoDB implementation of CheckpointStore.

This module provides a MongoDB-backed checkpoint store using PyMongo's async
API, for deployments where several processes share checkpoints.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from pymongo import ReplaceOne
from pymongo.errors import PyMongoError

from ...checkpoint import CheckpointRecord, CheckpointStore
from ...domain import EventTimeSlice, PersistenceError, utc_now
from .config import MongoConfiguration


class MongoDBCheckpointStore(CheckpointStore):
    """MongoDB implementation of the CheckpointStore interface.

    Each connection identity is one document, keyed by the identity. A
    single identity is updated with an atomic ``replace_one`` upsert, so
    ``put`` needs no read of the other identities.

    Document structure:
        {
            "_id": "MyGerritServer",
            "timestamp": 1415906575128,
            "events": [
                {"change_id": "I0123", "revision": "abc", "event_type": "patchset-created"}
            ],
            "updated_at": ISODate(...)
        }

    Examples:
        >>> config = MongoConfiguration(uri="mongodb://localhost:27017")
        >>> store = MongoDBCheckpointStore(config)
        >>> await store.put("MyGerritServer", EventTimeSlice(1415906575128))
        >>> checkpoints = await store.load()
    """

    def __init__(self, config: MongoConfiguration):
        super().__init__()
        self.config = config

    async def load(self) -> dict[str, EventTimeSlice]:
        try:
            documents = await self.config.checkpoints.find({}).to_list(None)
        except PyMongoError as e:
            raise PersistenceError(f"Cannot load checkpoints: {e}") from e

        checkpoints = {}
        for doc in documents:
            try:
                record = CheckpointRecord(
                    identity=doc["_id"],
                    timestamp=doc["timestamp"],
                    events=doc.get("events", []),
                )
            except (KeyError, ValidationError) as e:
                raise PersistenceError(f"Malformed checkpoint document {doc.get('_id')!r}: {e}") from e
            checkpoints[record.identity] = record.to_time_slice()
        return checkpoints

    async def save(self, checkpoints: Mapping[str, EventTimeSlice]) -> None:
        operations = [
            ReplaceOne({"_id": identity}, self._to_document(time_slice), upsert=True)
            for identity, time_slice in checkpoints.items()
        ]
        try:
            if operations:
                await self.config.checkpoints.bulk_write(operations)
            await self.config.checkpoints.delete_many({"_id": {"$nin": list(checkpoints)}})
        except PyMongoError as e:
            raise PersistenceError(f"Cannot save checkpoints: {e}") from e

    async def put(self, identity: str, time_slice: EventTimeSlice) -> None:
        try:
            await self.config.checkpoints.replace_one(
                {"_id": identity}, self._to_document(time_slice), upsert=True
            )
        except PyMongoError as e:
            raise PersistenceError(f"Cannot save checkpoint of {identity}: {e}") from e

    @staticmethod
    def _to_document(time_slice: EventTimeSlice) -> dict[str, Any]:
        return {
            "timestamp": time_slice.timestamp,
            "events": [key.model_dump() for key in time_slice.events],
            "updated_at": utc_now(),
        }

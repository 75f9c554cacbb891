"""Durable schema of the checkpoint file.

The file holds an explicit list of records rather than a map keyed by server
name, so that it can be validated independently of this library:

    {
        "version": 1,
        "checkpoints": [
            {
                "identity": "MyGerritServer",
                "timestamp": 1415906575128,
                "events": [
                    {"change_id": "I0123", "revision": "abc", "event_type": "patchset-created"}
                ]
            }
        ]
    }

Two older layouts are still accepted on load and converted transparently:

- the mapping layout ``{"<identity>": {"timestamp": ..., "events": [...]}}``
- the timestamp-only layout ``{"<identity>": 1415906575128}``
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, model_validator

from ..domain import EventKey, EventTimeSlice

SCHEMA_VERSION = 1


class CheckpointRecord(BaseModel):
    """One identity's checkpoint as persisted."""

    identity: str = Field(min_length=1)
    timestamp: int = Field(ge=0)
    events: list[EventKey] = Field(default_factory=list)

    @classmethod
    def from_time_slice(cls, identity: str, time_slice: EventTimeSlice) -> "CheckpointRecord":
        return cls(identity=identity, timestamp=time_slice.timestamp, events=list(time_slice.events))

    def to_time_slice(self) -> EventTimeSlice:
        return EventTimeSlice.of(self.timestamp, self.events)


class CheckpointDocument(BaseModel):
    """The whole checkpoint file."""

    version: int = SCHEMA_VERSION
    checkpoints: list[CheckpointRecord] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def upgrade_legacy_layout(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        # Legacy entries are never lists, so a server named "checkpoints" stays legacy
        if "version" in data and isinstance(data.get("checkpoints"), list):
            return data

        records = []
        for identity, entry in data.items():
            if isinstance(entry, Mapping):
                records.append({"identity": identity, **entry})
            else:
                records.append({"identity": identity, "timestamp": entry})
        return {"version": SCHEMA_VERSION, "checkpoints": records}

    @classmethod
    def from_mapping(cls, checkpoints: Mapping[str, EventTimeSlice]) -> "CheckpointDocument":
        return cls(
            checkpoints=[
                CheckpointRecord.from_time_slice(identity, time_slice)
                for identity, time_slice in sorted(checkpoints.items())
            ]
        )

    def to_mapping(self) -> dict[str, EventTimeSlice]:
        return {record.identity: record.to_time_slice() for record in self.checkpoints}

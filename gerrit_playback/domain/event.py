import time
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Get the current UTC timestamp.

    Returns:
        Current datetime with UTC timezone information
    """
    return datetime.now(tz=timezone.utc)


def now_millis() -> int:
    """Get the current wall-clock time in epoch milliseconds.

    This is the default clock of the playback manager. Checkpoint timestamps
    use the same unit, so the outage window is a plain subtraction.
    """
    return time.time_ns() // 1_000_000


class EventKey(BaseModel):
    """Identity of an event across the live stream and the catch-up query.

    Two events with equal keys are the same event, regardless of which
    transport delivered them. The key is frozen and hashable so it can be
    stored in sets and persisted in checkpoints.

    Attributes:
        change_id: Change identifier (Change-Id), or ``project:ref`` for
            events that are not tied to a change.
        revision: Patch set revision (commit SHA), or the new ref revision.
        event_type: Upstream event type, e.g. ``patchset-created``.

    Example:
        >>> key = EventKey(change_id="I0123", revision="abc", event_type="patchset-created")
        >>> key in {key}
        True
    """

    model_config = ConfigDict(frozen=True)

    change_id: str = ""
    revision: str = ""
    event_type: str


@runtime_checkable
class PlaybackEvent(Protocol):
    """Protocol for events that can pass through the playback manager.

    The manager only needs two things from an event: a creation timestamp to
    order it, and a key to deduplicate it. Anything that provides both can be
    observed live and replayed.

    A ``created_on`` of ``0`` means the upstream did not report a creation
    time for the event.
    """

    @property
    def created_on(self) -> int:
        """Upstream-reported creation time in epoch milliseconds."""
        ...

    @property
    def event_key(self) -> EventKey:
        """The deduplication key of this event."""
        ...


class Change(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    number: int | str | None = None
    project: str | None = None
    branch: str | None = None


class PatchSet(BaseModel):
    model_config = ConfigDict(extra="allow")

    number: int | str | None = None
    revision: str = ""


class RefUpdate(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    project: str = ""
    ref_name: str = Field(default="", alias="refName")
    old_rev: str = Field(default="", alias="oldRev")
    new_rev: str = Field(default="", alias="newRev")


class GerritEvent(BaseModel):
    """A Gerrit stream event, as delivered live or by the events-log plugin.

    Only the fields needed for ordering and deduplication are typed. All
    other upstream fields are retained as extras, so a replayed event carries
    the same payload as its live counterpart.

    Attributes:
        type: Upstream event type (``patchset-created``, ``comment-added``...)
        change: The change the event relates to, if any
        patch_set: The patch set the event relates to, if any
        ref_update: The ref update, for ``ref-updated`` events
        event_created_on: Creation time in epoch *seconds* as reported by
            Gerrit. ``0`` when the server does not report it.

    Example:
        >>> event = GerritEvent.model_validate({
        ...     "type": "patchset-created",
        ...     "change": {"id": "I0123", "project": "tools"},
        ...     "patchSet": {"number": 2, "revision": "abc"},
        ...     "eventCreatedOn": 1415906575,
        ... })
        >>> event.created_on
        1415906575000
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    change: Change | None = None
    patch_set: PatchSet | None = Field(default=None, alias="patchSet")
    ref_update: RefUpdate | None = Field(default=None, alias="refUpdate")
    event_created_on: int = Field(default=0, alias="eventCreatedOn", ge=0)

    @property
    def created_on(self) -> int:
        """Creation time in epoch milliseconds (``0`` if unknown)."""
        return self.event_created_on * 1000

    @property
    def event_key(self) -> EventKey:
        """Key built from the change, the revision and the event type."""
        if self.change is not None:
            change_id = self.change.id
        elif self.ref_update is not None:
            change_id = f"{self.ref_update.project}:{self.ref_update.ref_name}"
        else:
            change_id = ""

        if self.patch_set is not None:
            revision = self.patch_set.revision
        elif self.ref_update is not None:
            revision = self.ref_update.new_rev
        else:
            revision = ""

        return EventKey(change_id=change_id, revision=revision, event_type=self.type)

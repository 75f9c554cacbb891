"""JSON file implementation of CheckpointStore.

The file is rewritten as a whole on every save: the new content goes to a
temporary file in the same directory, which then atomically replaces the
previous one. A crash mid-write leaves either the old or the new file, never
a truncated one.
"""

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from ..domain import EventTimeSlice, PersistenceError
from .schema import CheckpointDocument
from .store import CheckpointStore

LOGGER = logging.getLogger(__name__)


class JsonFileCheckpointStore(CheckpointStore):
    """Checkpoint store backed by a single JSON document on disk.

    Blocking file I/O runs in a worker thread, so a save never stalls the
    event loop, but callers still await it: a checkpoint is durable before
    the event that advanced it is considered processed.

    Attributes:
        path: Location of the checkpoint file

    Example:
        >>> store = JsonFileCheckpointStore(Path("gerrit-server-timestamps.json"))
        >>> checkpoints = await store.load()
        >>> await store.put("MyGerritServer", EventTimeSlice(1415906575128))
    """

    def __init__(self, path: Path | str):
        super().__init__()
        self.path = Path(path)

    async def load(self) -> dict[str, EventTimeSlice]:
        return await asyncio.to_thread(self._read)

    async def save(self, checkpoints: Mapping[str, EventTimeSlice]) -> None:
        document = CheckpointDocument.from_mapping(checkpoints)
        await asyncio.to_thread(self._write, document.model_dump_json(indent=2))

    def _read(self) -> dict[str, EventTimeSlice]:
        if not self.path.exists():
            LOGGER.debug(f"No checkpoint file at {self.path}, starting empty")
            return {}

        try:
            content = self.path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"Cannot read checkpoint file {self.path}: {e}") from e

        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        try:
            document = CheckpointDocument.model_validate(json.loads(content.decode("utf-8")))
        except (ValueError, ValidationError) as e:
            raise PersistenceError(f"Malformed checkpoint file {self.path}: {e}") from e

        return document.to_mapping()

    def _write(self, content: str) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                suffix=".tmp",
                prefix=f".{self.path.name}.",
                dir=directory,
            )
        except OSError as e:
            raise PersistenceError(f"Cannot write checkpoint file {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise PersistenceError(f"Cannot write checkpoint file {self.path}: {e}") from e

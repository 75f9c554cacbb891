"""MongoDB configuration using pydantic-settings."""

from functools import cached_property
from typing import Any

from pydantic_settings import BaseSettings
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.asynchronous.mongo_client import AsyncMongoClient


class MongoConfiguration(BaseSettings):
    """Configuration and factory for MongoDB resources.

    Implements the HasLifecycle protocol. The client is closed on shutdown.

    All settings can be configured via environment variables with the
    GERRIT_PLAYBACK_MONGO_ prefix. For example:
    - GERRIT_PLAYBACK_MONGO_URI=mongodb://localhost:27017
    - GERRIT_PLAYBACK_MONGO_DATABASE=jenkins

    Attributes:
        uri: MongoDB connection URI.
        database: Database name to use.
        checkpoints_collection: Collection name for playback checkpoints.

    Example:
        >>> config = MongoConfiguration()
        >>> store = MongoDBCheckpointStore(config)
        >>> checkpoints = await store.load()
        >>> await config.on_shutdown()
    """

    uri: str = "mongodb://localhost:27017"
    database: str = "gerrit_playback"
    checkpoints_collection: str = "checkpoints"

    model_config = {"env_prefix": "GERRIT_PLAYBACK_MONGO_"}

    @cached_property
    def client(self) -> AsyncMongoClient[dict[str, Any]]:
        """Get the MongoDB async client.

        The client is lazily created and cached for reuse.
        """
        return AsyncMongoClient(self.uri)

    @cached_property
    def db(self) -> AsyncDatabase[dict[str, Any]]:
        return self.client[self.database]

    @cached_property
    def checkpoints(self) -> AsyncCollection[dict[str, Any]]:
        """Get the checkpoints collection."""
        return self.db[self.checkpoints_collection]

    # HasLifecycle protocol implementation

    async def on_startup(self) -> None:
        """No-op for MongoDB - connections are established lazily."""
        pass

    async def on_shutdown(self) -> None:
        """Closes the MongoDB client connection if it was created."""
        if "client" in self.__dict__:
            await self.client.close()

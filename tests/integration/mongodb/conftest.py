"""Pytest fixtures for MongoDB integration tests."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from gerrit_playback.integrations.mongodb import MongoConfiguration

# Assumes a MongoDB container is running locally on port 27017
LOCAL_MONGO_URI = "mongodb://localhost:27017"


@pytest_asyncio.fixture
async def mongo_config(request: pytest.FixtureRequest) -> AsyncIterator[MongoConfiguration]:
    """Create a MongoConfiguration pointing to local MongoDB, on a fresh database."""
    config = MongoConfiguration(
        uri=LOCAL_MONGO_URI,
        database=f"test_{request.node.name}"[:63],
    )
    await config.client.drop_database(config.database)
    try:
        yield config
    finally:
        await config.client.drop_database(config.database)
        await config.on_shutdown()

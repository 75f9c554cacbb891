"""MongoDB integration for gerrit-playback.

This module provides a MongoDB implementation of the CheckpointStore
interface using the async PyMongo driver.

Installation:
    pip install gerrit-playback[mongodb]

Usage:
    >>> from gerrit_playback.integrations.mongodb import (
    ...     MongoConfiguration,
    ...     MongoDBCheckpointStore,
    ... )
    >>>
    >>> config = MongoConfiguration(uri="mongodb://localhost:27017", database="jenkins")
    >>> store = MongoDBCheckpointStore(config)
    >>> manager = create_playback_manager(server, store, sink)
"""

from .checkpoint import MongoDBCheckpointStore
from .config import MongoConfiguration

__all__ = [
    "MongoConfiguration",
    "MongoDBCheckpointStore",
]

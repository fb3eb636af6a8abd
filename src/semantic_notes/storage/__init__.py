"""
Persistent key-value storage for vectors.

Provides a protocol definition plus in-memory, SQLAlchemy and Redis
backends. The caches only depend on the protocol.
"""

from semantic_notes.storage.memory import InMemoryKeyValueStore
from semantic_notes.storage.protocols import (
    EMBEDDINGS_CACHE,
    NOTE_EMBEDDINGS,
    PARTITIONS,
    KeyValueStore,
    UnknownPartitionError,
)

__all__ = [
    "EMBEDDINGS_CACHE",
    "NOTE_EMBEDDINGS",
    "PARTITIONS",
    "KeyValueStore",
    "UnknownPartitionError",
    "InMemoryKeyValueStore",
]

"""
Storage protocol definitions for persisted vectors.

The store is a durability layer behind the in-memory caches: it maps opaque
string keys to vectors inside named partitions. Implementations are free to
encode vectors however they like as long as ``get`` returns what ``set``
was given.
"""

from typing import List, Optional, Protocol, Tuple

# Partition holding content-addressed vectors, keyed by text fingerprint
EMBEDDINGS_CACHE = "embeddings_cache"
# Partition holding the current vector of each note, keyed by str(note_id)
NOTE_EMBEDDINGS = "note_embeddings"

PARTITIONS = (EMBEDDINGS_CACHE, NOTE_EMBEDDINGS)


class UnknownPartitionError(KeyError):
    """A partition name that the store was not created with."""


class KeyValueStore(Protocol):
    """
    Protocol for partitioned vector persistence.

    Partitions are independent: reads, writes, deletes and clears on one never
    affect another. Concurrent writes to different keys must not corrupt one
    another, but no cross-key atomicity is required.
    """

    async def get(self, partition: str, key: str) -> Optional[List[float]]:
        """
        Get a vector by key.

        Returns:
            The stored vector, or None if the key is absent
        """
        ...

    async def set(self, partition: str, key: str, vector: List[float]) -> None:
        """Store a vector, replacing any existing value for the key."""
        ...

    async def delete(self, partition: str, key: str) -> None:
        """Delete a key. Deleting an absent key is not an error."""
        ...

    async def get_all_entries(self, partition: str) -> List[Tuple[str, List[float]]]:
        """
        Get every (key, vector) pair in a partition.

        Entries are returned oldest write first.
        """
        ...

    async def clear(self, partition: str) -> None:
        """Delete every entry in a partition."""
        ...

    async def close(self) -> None:
        """Release connections held by the store."""
        ...

"""
In-memory key-value storage implementation.

Provides a simple dictionary-backed store suitable for testing and for
sessions that do not need vectors to survive a restart.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from semantic_notes.storage.codec import decode_vector, encode_vector
from semantic_notes.storage.protocols import PARTITIONS, UnknownPartitionError

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore:
    """
    In-memory implementation of the KeyValueStore protocol.

    Vectors are stored encoded, exactly as a durable backend would hold them,
    so callers never share list objects with the store. Data is lost on
    restart.
    """

    def __init__(self, partitions: Iterable[str] = PARTITIONS):
        # Dicts preserve insertion order, which doubles as write order
        self._partitions: Dict[str, Dict[str, bytes]] = {name: {} for name in partitions}

        logger.info(f"InMemoryKeyValueStore initialized (partitions={list(self._partitions)})")

    def _partition(self, partition: str) -> Dict[str, bytes]:
        try:
            return self._partitions[partition]
        except KeyError:
            raise UnknownPartitionError(partition) from None

    async def get(self, partition: str, key: str) -> Optional[List[float]]:
        data = self._partition(partition).get(key)
        if data is None:
            return None
        return decode_vector(data)

    async def set(self, partition: str, key: str, vector: List[float]) -> None:
        entries = self._partition(partition)
        # Re-insert so that overwritten keys move to the end of the write order
        entries.pop(key, None)
        entries[key] = encode_vector(vector)

    async def delete(self, partition: str, key: str) -> None:
        self._partition(partition).pop(key, None)

    async def get_all_entries(self, partition: str) -> List[Tuple[str, List[float]]]:
        return [(key, decode_vector(data)) for key, data in self._partition(partition).items()]

    async def clear(self, partition: str) -> None:
        entries = self._partition(partition)
        count = len(entries)
        entries.clear()
        logger.info(f"Cleared partition {partition} ({count} entries)")

    async def close(self) -> None:
        pass

    def count(self, partition: str) -> int:
        """Number of entries in a partition."""
        return len(self._partition(partition))

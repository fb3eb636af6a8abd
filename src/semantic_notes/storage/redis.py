"""
Redis key-value storage implementation.

Each partition is one Redis hash (``<prefix><partition>``) mapping keys to
encoded vectors. Survives restarts and can be shared by several processes.
"""

import logging
from typing import Iterable, List, Optional, Tuple

import redis.asyncio as redis

from semantic_notes.storage.codec import decode_vector, encode_vector
from semantic_notes.storage.protocols import PARTITIONS, UnknownPartitionError

logger = logging.getLogger(__name__)


class RedisKeyValueStore:
    """
    Redis implementation of the KeyValueStore protocol.

    Redis hashes do not keep insertion order, so ``get_all_entries`` returns
    entries in arbitrary order.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        key_prefix: str = "semantic_notes:",
        partitions: Iterable[str] = PARTITIONS,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize the Redis store.

        Args:
            url: Redis connection URL
            key_prefix: Prefix for Redis keys (default: "semantic_notes:")
            partitions: Partition names this store accepts
            client: Existing client to use instead of connecting to ``url``
        """
        # Vectors are binary, so responses must not be decoded
        self.client = client or redis.Redis.from_url(url, decode_responses=False)
        self._key_prefix = key_prefix
        self._partitions = frozenset(partitions)

        logger.info(f"RedisKeyValueStore initialized (prefix={key_prefix})")

    def _get_key(self, partition: str) -> str:
        """Get the Redis key for a partition's hash."""
        if partition not in self._partitions:
            raise UnknownPartitionError(partition)
        return f"{self._key_prefix}{partition}"

    async def ping(self) -> bool:
        """Check that the server is reachable."""
        try:
            return await self.client.ping()
        except redis.ConnectionError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def get(self, partition: str, key: str) -> Optional[List[float]]:
        data = await self.client.hget(self._get_key(partition), key)
        if data is None:
            return None
        return decode_vector(data)

    async def set(self, partition: str, key: str, vector: List[float]) -> None:
        await self.client.hset(self._get_key(partition), key, encode_vector(vector))

    async def delete(self, partition: str, key: str) -> None:
        await self.client.hdel(self._get_key(partition), key)

    async def get_all_entries(self, partition: str) -> List[Tuple[str, List[float]]]:
        raw = await self.client.hgetall(self._get_key(partition))

        entries = []
        for key, data in raw.items():
            try:
                entries.append((key.decode("utf-8"), decode_vector(data)))
            except ValueError as e:
                logger.warning(f"Skipping undecodable entry {key!r} in {partition}: {e}")
                continue

        return entries

    async def clear(self, partition: str) -> None:
        hash_key = self._get_key(partition)
        count = await self.client.hlen(hash_key)
        await self.client.delete(hash_key)
        logger.info(f"Cleared partition {partition} ({count} entries)")

    async def close(self) -> None:
        await self.client.aclose()

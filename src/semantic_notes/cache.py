"""
Content-addressed vector cache.

Maps a fingerprint of a text to its embedding so that the same text is
never sent to the embedding provider twice. The in-memory map is the source
of truth; writes to the persistent store happen in background tasks and
their failures are only logged.
"""

import asyncio
import hashlib
import logging
from collections import OrderedDict
from typing import List, Optional, Set

from semantic_notes.embeddings.protocol import EmbeddingProvider
from semantic_notes.exceptions import EmbeddingComputationError, ProviderLoadError
from semantic_notes.storage.protocols import EMBEDDINGS_CACHE, KeyValueStore

logger = logging.getLogger(__name__)


def fingerprint(text: str) -> str:
    """Deterministic digest of the exact text content (deduplication only)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class VectorCache:
    """
    Fingerprint -> vector cache in front of an embedding provider.

    Entries are never modified once written. With ``max_entries`` set, the
    oldest entries are dropped (in memory and in the store) when the cache
    grows past the limit.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        store: KeyValueStore,
        max_entries: Optional[int] = None,
    ):
        """
        Args:
            provider: Embedding provider used on cache misses
            store: Persistent store mirroring the cache
            max_entries: Retention limit (None = unbounded)
        """
        self._provider = provider
        self._store = store
        self._max_entries = max_entries
        self._entries: "OrderedDict[str, List[float]]" = OrderedDict()
        self._pending_writes: Set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, text: str) -> bool:
        return fingerprint(text) in self._entries

    @property
    def dimension(self) -> int:
        """Vector length the provider produces (0 while unknown)."""
        return self._provider.dimension

    @property
    def pending_writes(self) -> int:
        """Number of background persistence operations still running."""
        return len(self._pending_writes)

    async def load(self) -> None:
        """
        Read all persisted entries into memory.

        A failing store leaves the cache empty; it will be rebuilt as texts
        are embedded again.
        """
        try:
            entries = await self._store.get_all_entries(EMBEDDINGS_CACHE)
        except Exception as e:
            logger.warning(f"Failed to load embedding cache: {e}")
            return

        dimension = self.dimension
        valid = [
            (key, vector) for key, vector in entries if not dimension or len(vector) == dimension
        ]
        if len(valid) < len(entries):
            logger.warning(
                f"Ignoring {len(entries) - len(valid)} cached embeddings "
                f"that are not {dimension}-dimensional"
            )

        self._entries = OrderedDict(valid)
        self._enforce_limit()
        logger.info(f"Loaded {len(self._entries)} cached embeddings")

    async def get_or_compute(self, text: str) -> List[float]:
        """
        Return the embedding of ``text``, computing it on a cache miss.

        Raises:
            ProviderLoadError: If the provider's model could not be loaded
            EmbeddingComputationError: If the provider failed to embed the text
        """
        key = fingerprint(text)

        cached = self._entries.get(key)
        if cached is not None:
            logger.debug(f"Embedding cache hit: {key[:12]}")
            return cached

        try:
            vector = await self._provider.embed(text)
        except ProviderLoadError:
            raise
        except Exception as e:
            logger.error(f"Error generating embedding: {e}")
            raise EmbeddingComputationError(f"Failed to embed text: {e}") from e

        if self._provider.dimension and len(vector) != self._provider.dimension:
            raise EmbeddingComputationError(
                f"Provider returned {len(vector)} dimensions, "
                f"expected {self._provider.dimension}"
            )

        # A concurrent call for the same text may have finished first
        if key in self._entries:
            return self._entries[key]

        self._entries[key] = vector
        self._schedule(self._persist(key, vector))
        self._enforce_limit()

        return vector

    async def clear(self) -> None:
        """Drop every entry, in memory and in the store."""
        # Let in-flight writes land first so they cannot resurrect entries
        await self.flush()

        count = len(self._entries)
        self._entries.clear()

        try:
            await self._store.clear(EMBEDDINGS_CACHE)
        except Exception as e:
            logger.warning(f"Failed to clear persisted embedding cache: {e}")

        logger.info(f"Cleared embedding cache ({count} entries)")

    async def flush(self) -> None:
        """Wait for outstanding background writes to finish."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    def _enforce_limit(self) -> None:
        if self._max_entries is None:
            return

        while len(self._entries) > self._max_entries:
            key, _ = self._entries.popitem(last=False)
            self._schedule(self._evict(key))

    def _schedule(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _persist(self, key: str, vector: List[float]) -> None:
        try:
            await self._store.set(EMBEDDINGS_CACHE, key, vector)
        except Exception as e:
            logger.warning(f"Failed to save embedding to cache: {e}")

    async def _evict(self, key: str) -> None:
        try:
            await self._store.delete(EMBEDDINGS_CACHE, key)
        except Exception as e:
            logger.warning(f"Failed to evict embedding {key[:12]} from cache: {e}")

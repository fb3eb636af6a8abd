"""
Semantic note service.

Owns the embedding provider, vector cache, note index, batch processor and
search engine, and exposes the operations the note application calls:
lifecycle hooks when notes change, similarity queries, and diagnostics.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from semantic_notes.batch import BatchProcessor
from semantic_notes.cache import VectorCache
from semantic_notes.config import EmbeddingSettings
from semantic_notes.embeddings import (
    EmbeddingProvider,
    OpenAIEmbedding,
    SentenceTransformerEmbedding,
)
from semantic_notes.index import NoteVectorIndex
from semantic_notes.models import BatchResult, CacheStats, Note, SimilarityResult
from semantic_notes.search import SimilaritySearchEngine
from semantic_notes.storage import InMemoryKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)


class SemanticNoteService:
    def __init__(
        self,
        provider: EmbeddingProvider,
        store: KeyValueStore,
        settings: Optional[EmbeddingSettings] = None,
    ):
        settings = settings or EmbeddingSettings()

        self.provider = provider
        self.store = store
        self.cache = VectorCache(provider, store, max_entries=settings.cache_max_entries)
        self.index = NoteVectorIndex(self.cache, store)
        self.batch_processor = BatchProcessor(
            self.index,
            batch_size=settings.batch_size,
            pause_seconds=settings.batch_pause_seconds,
        )
        self.search = SimilaritySearchEngine(
            self.cache,
            self.index,
            on_demand_threshold=settings.on_demand_threshold,
            precomputed_threshold=settings.precomputed_threshold,
            fallback_max_results=settings.fallback_max_results,
        )

        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Load the embedding model, then the persisted caches.

        Safe to call repeatedly and concurrently. If the model fails to load
        the error propagates and the next call tries again.
        """
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            await self.provider.load()
            await self.load_persisted()

            self._initialized = True
            logger.info(
                f"Semantic search ready: {len(self.cache)} cached embeddings, "
                f"{len(self.index)} indexed notes"
            )

    async def load_persisted(self) -> None:
        """Read both caches from the store without loading the model."""
        await self.cache.load()
        await self.index.load()

    async def find_similar(
        self, query: str, notes: Sequence[Note], max_results: int = 10
    ) -> List[SimilarityResult]:
        """On-demand similarity search. Never raises; returns [] on failure."""
        try:
            await self.initialize()
        except Exception as e:
            logger.error(f"Semantic search unavailable: {e}")
            return []

        return await self.search.find_similar(query, notes, max_results)

    async def find_similar_precomputed(
        self, query: str, notes: Sequence[Note], threshold: Optional[float] = None
    ) -> List[SimilarityResult]:
        """Similarity search over already indexed notes. Never raises."""
        try:
            await self.initialize()
        except Exception as e:
            logger.error(f"Semantic search unavailable: {e}")
            return []

        return await self.search.find_similar_precomputed(query, notes, threshold)

    async def process_all(self, notes: Sequence[Note]) -> BatchResult:
        """Index every note that has no vector yet."""
        try:
            await self.initialize()
        except Exception as e:
            logger.warning(f"Embedding model not ready, skipping note processing: {e}")
            return BatchResult(total=len(notes))

        return await self.batch_processor.process_all(notes)

    async def upsert(self, note: Note) -> bool:
        """
        Embed (or re-embed) a single note.

        Returns:
            True if the note's vector was stored. Failures are logged and leave
            the note unsearchable until the next attempt.
        """
        try:
            await self.initialize()
            return await self.index.upsert(note)
        except Exception as e:
            logger.warning(f"Failed to process embedding for note {note.id}: {e}")
            return False

    async def on_note_saved(self, note: Note) -> bool:
        """Hook for note create/update: refreshes the note's vector."""
        return await self.upsert(note)

    async def remove(self, note_id: int) -> None:
        await self.index.remove(note_id)

    async def on_note_deleted(self, note_id: int) -> None:
        """Hook for note deletion."""
        await self.remove(note_id)

    def has(self, note_id: int) -> bool:
        """Whether a note is currently searchable in precomputed mode."""
        return self.index.has(note_id)

    def get_cache_stats(self) -> CacheStats:
        return CacheStats(
            cache_size=len(self.cache),
            indexed_note_count=len(self.index),
            in_flight_count=self.index.in_flight_count,
            model_loaded=self.provider.is_loaded,
            model_loading=self.provider.is_loading,
        )

    async def clear_cache(self) -> None:
        """Administrative reset: wipe both caches in memory and in the store."""
        await self.cache.clear()
        await self.index.clear()
        logger.info("Cleared all embedding caches")

    async def flush(self) -> None:
        """Wait for background cache writes to reach the store."""
        await self.cache.flush()

    async def close(self) -> None:
        await self.flush()
        await self.store.close()


def build_provider(settings: EmbeddingSettings) -> EmbeddingProvider:
    if settings.provider == "openai":
        return OpenAIEmbedding(
            model=settings.model_name,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            # Only text-embedding-3-* accept a dimensions parameter; use the model default otherwise
            dimensions=settings.dimension if "dimension" in settings.model_fields_set else None,
        )

    return SentenceTransformerEmbedding(
        model_name=settings.model_name,
        device=settings.device,
        dimension=settings.dimension,
    )


def build_store(settings: EmbeddingSettings) -> KeyValueStore:
    if settings.store_backend == "memory":
        return InMemoryKeyValueStore()

    if settings.store_backend == "redis":
        from semantic_notes.storage.redis import RedisKeyValueStore

        return RedisKeyValueStore(url=settings.redis_url, key_prefix=settings.redis_key_prefix)

    from semantic_notes.storage.sqlalchemy import SQLAlchemyKeyValueStore

    if settings.database_url.endswith(":memory:"):
        # One shared connection, reachable from worker threads
        engine = create_engine(
            settings.database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(settings.database_url)

    store = SQLAlchemyKeyValueStore(engine)
    store.create_tables()
    return store


def build_service(settings: Optional[EmbeddingSettings] = None) -> SemanticNoteService:
    """Create a service wired from settings (environment / .env by default)."""
    settings = settings or EmbeddingSettings()
    return SemanticNoteService(build_provider(settings), build_store(settings), settings)

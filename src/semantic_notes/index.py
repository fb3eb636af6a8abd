"""
Note vector index.

Holds the current embedding of every indexed note, keyed by note id, and
mirrors it to the ``note_embeddings`` partition of the persistent store.
"""

import logging
from typing import Dict, List, Optional, Set

from semantic_notes.cache import VectorCache
from semantic_notes.models import Note
from semantic_notes.storage.protocols import NOTE_EMBEDDINGS, KeyValueStore

logger = logging.getLogger(__name__)

NOTE_TEXT_SEPARATOR = "\n"


def compose_note_text(note: Note) -> str:
    """Text that represents a note for embedding: title, newline, content."""
    return f"{note.title}{NOTE_TEXT_SEPARATOR}{note.content}"


class NoteVectorIndex:
    """
    In-memory note id -> vector map backed by a persistent store.

    A note id is in the processing set exactly while an ``upsert`` for it is
    running; a second ``upsert`` for the same id during that time is a no-op.
    """

    def __init__(self, cache: VectorCache, store: KeyValueStore):
        self._cache = cache
        self._store = store
        self._vectors: Dict[int, List[float]] = {}
        self._processing: Set[int] = set()
        # Ids removed while their upsert was running; the result is discarded
        self._discarded: Set[int] = set()

    def __len__(self) -> int:
        return len(self._vectors)

    def has(self, note_id: int) -> bool:
        return note_id in self._vectors

    def get(self, note_id: int) -> Optional[List[float]]:
        return self._vectors.get(note_id)

    def is_processing(self, note_id: int) -> bool:
        return note_id in self._processing

    @property
    def in_flight_count(self) -> int:
        return len(self._processing)

    def note_ids(self) -> List[int]:
        return list(self._vectors)

    async def load(self) -> None:
        """Read persisted note vectors into memory. Failures leave the index empty."""
        try:
            entries = await self._store.get_all_entries(NOTE_EMBEDDINGS)
        except Exception as e:
            logger.warning(f"Failed to load note embeddings: {e}")
            return

        dimension = self._cache.dimension
        vectors = {}
        for key, vector in entries:
            try:
                note_id = int(key)
            except ValueError:
                logger.warning(f"Ignoring note embedding with invalid id: {key!r}")
                continue

            if dimension and len(vector) != dimension:
                logger.warning(
                    f"Ignoring note embedding {note_id}: {len(vector)} dimensions, "
                    f"expected {dimension}"
                )
                continue

            vectors[note_id] = vector

        self._vectors = vectors
        logger.info(f"Loaded {len(self._vectors)} note embeddings from cache")

    async def upsert(self, note: Note) -> bool:
        """
        Embed a note and store its vector, replacing any previous one.

        Returns:
            True if the note was embedded, False if an upsert for the same note
            was already running

        Raises:
            ProviderLoadError, EmbeddingComputationError: If embedding failed.
                The note stays (or becomes) unindexed only if it had no vector.
        """
        if note.id in self._processing:
            logger.debug(f"Note {note.id} is already being processed")
            return False

        self._processing.add(note.id)
        try:
            vector = await self._cache.get_or_compute(compose_note_text(note))

            if note.id in self._discarded:
                logger.debug(f"Note {note.id} was removed while processing, discarding")
                return False

            self._vectors[note.id] = vector
            await self._persist(note.id, vector)

            if note.id in self._discarded:
                # remove() ran while the write was in flight; its delete may have landed first
                await self._delete(note.id)
                return False

            logger.debug(f"Processed embedding for note {note.id}: {note.title[:50]}")
            return True
        finally:
            self._processing.discard(note.id)
            self._discarded.discard(note.id)

    async def remove(self, note_id: int) -> None:
        """Forget a note's vector. Removing an unknown id is a no-op."""
        self._vectors.pop(note_id, None)
        if note_id in self._processing:
            self._discarded.add(note_id)

        await self._delete(note_id)

    async def clear(self) -> None:
        """Drop every note vector, in memory and in the store."""
        count = len(self._vectors)
        self._vectors.clear()
        self._discarded.update(self._processing)

        try:
            await self._store.clear(NOTE_EMBEDDINGS)
        except Exception as e:
            logger.warning(f"Failed to clear persisted note embeddings: {e}")

        logger.info(f"Cleared note index ({count} notes)")

    async def _persist(self, note_id: int, vector: List[float]) -> None:
        try:
            await self._store.set(NOTE_EMBEDDINGS, str(note_id), vector)
        except Exception as e:
            logger.warning(f"Failed to save note embedding {note_id}: {e}")

    async def _delete(self, note_id: int) -> None:
        try:
            await self._store.delete(NOTE_EMBEDDINGS, str(note_id))
        except Exception as e:
            logger.warning(f"Failed to remove note embedding {note_id}: {e}")

"""
Similarity search over notes.

Two modes:

- on-demand (``find_similar``): embeds every candidate note (through the
  content cache) on each query. Slow on a cold cache but always complete.
- precomputed (``find_similar_precomputed``): only scores notes that are
  already in the note index. This is the primary path; it falls back to
  on-demand mode if anything goes wrong.
"""

import logging
from typing import List, Optional, Sequence

from semantic_notes.cache import VectorCache
from semantic_notes.index import NoteVectorIndex, compose_note_text
from semantic_notes.models import Note, SimilarityResult
from semantic_notes.similarity import cosine_similarity

logger = logging.getLogger(__name__)

ON_DEMAND_THRESHOLD = 0.1
PRECOMPUTED_THRESHOLD = 0.25
FALLBACK_MAX_RESULTS = 10


class SimilaritySearchEngine:
    def __init__(
        self,
        cache: VectorCache,
        index: NoteVectorIndex,
        on_demand_threshold: float = ON_DEMAND_THRESHOLD,
        precomputed_threshold: float = PRECOMPUTED_THRESHOLD,
        fallback_max_results: int = FALLBACK_MAX_RESULTS,
    ):
        """
        Args:
            cache: Content cache used for query (and on-demand note) vectors
            index: Note index used by the precomputed mode
            on_demand_threshold: On-demand results must score strictly above this
            precomputed_threshold: Default minimum score for precomputed results
            fallback_max_results: Result cap when precomputed mode falls back
        """
        self.cache = cache
        self.index = index
        self.on_demand_threshold = on_demand_threshold
        self.precomputed_threshold = precomputed_threshold
        self.fallback_max_results = fallback_max_results

    async def find_similar(
        self, query: str, notes: Sequence[Note], max_results: int = 10
    ) -> List[SimilarityResult]:
        """
        Rank notes by similarity to a query, embedding every note as needed.

        A note whose embedding fails or has the wrong length is scored with a
        zero vector (and so drops out). Any other failure yields an empty list.
        """
        try:
            query_vector = await self.cache.get_or_compute(query)

            results = []
            for note in notes:
                try:
                    note_vector = await self.cache.get_or_compute(compose_note_text(note))
                    similarity = cosine_similarity(query_vector, note_vector)
                except Exception as e:
                    logger.warning(f"Failed to get embedding for note {note.id}: {e}")
                    similarity = cosine_similarity(query_vector, [0.0] * len(query_vector))

                results.append(
                    SimilarityResult(
                        note=note,
                        similarity=similarity,
                        embedding_generated=True,
                    )
                )

            results = [r for r in results if r.similarity > self.on_demand_threshold]
            results.sort(key=lambda r: r.similarity, reverse=True)
            return results[:max_results]

        except Exception as e:
            logger.error(f"Error in similarity search: {e}")
            return []

    async def find_similar_precomputed(
        self, query: str, notes: Sequence[Note], threshold: Optional[float] = None
    ) -> List[SimilarityResult]:
        """
        Rank notes that already have a vector in the note index.

        Notes without a precomputed vector are left out, not scored. On
        failure, falls back to ``find_similar`` capped at
        ``min(len(notes), fallback_max_results)``.
        """
        if threshold is None:
            threshold = self.precomputed_threshold

        try:
            query_vector = await self.cache.get_or_compute(query)

            # No awaits below: the index cannot change while scoring
            results = []
            for note in notes:
                note_vector = self.index.get(note.id)
                if note_vector is None:
                    continue

                results.append(
                    SimilarityResult(
                        note=note,
                        similarity=cosine_similarity(query_vector, note_vector),
                        embedding_generated=False,
                    )
                )

            results = [r for r in results if r.similarity >= threshold]
            results.sort(key=lambda r: r.similarity, reverse=True)

            logger.info(
                f"Found {len(results)} similar notes using pre-computed embeddings "
                f"(threshold: {threshold})"
            )
            return results

        except Exception as e:
            logger.error(f"Error in optimized similarity search: {e}")
            return await self.find_similar(
                query, notes, min(len(notes), self.fallback_max_results)
            )

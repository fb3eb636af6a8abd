"""
semantic-notes: local embedding cache and similarity search for notes.

Core components:
- embeddings: Embedding providers (local sentence-transformers, OpenAI)
- storage: Partitioned key-value persistence for vectors
- cache: Content-addressed vector cache
- index: Note id -> vector index with in-flight tracking
- batch: Bounded-concurrency bulk indexing
- search: Cosine similarity search (on-demand and precomputed modes)
- service: SemanticNoteService wiring it all together
"""

__version__ = "0.1.0"

from semantic_notes.models import BatchResult, CacheStats, Note, SimilarityResult
from semantic_notes.service import SemanticNoteService, build_service
from semantic_notes.similarity import cosine_similarity

__all__ = [
    "__version__",
    # Models
    "Note",
    "SimilarityResult",
    "CacheStats",
    "BatchResult",
    "SemanticNoteService",
    "build_service",
    "cosine_similarity",
]

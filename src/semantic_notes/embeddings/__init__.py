"""
Embedding providers for semantic-notes.

- SentenceTransformerEmbedding: local model (all-MiniLM-L6-v2 by default)
- OpenAIEmbedding: OpenAI API embeddings
"""

from semantic_notes.embeddings.openai_embedding import OpenAIEmbedding
from semantic_notes.embeddings.protocol import EmbeddingProvider
from semantic_notes.embeddings.sentence_transformer import SentenceTransformerEmbedding

__all__ = [
    "EmbeddingProvider",
    "OpenAIEmbedding",
    "SentenceTransformerEmbedding",
]

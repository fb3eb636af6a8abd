"""
Embedding provider protocol for semantic-notes.

The cache and search engine only need a single-text ``embed`` call and a
way to trigger (possibly slow) model loading ahead of time.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Protocol for text embedding providers.

    All implementations must:

    1. Return vectors of exactly ``dimension`` elements
    2. Return L2-normalized vectors (cosine similarity is the only metric used)
    3. Load lazily: ``embed`` triggers ``load`` on first use, and concurrent
       callers must not cause the model to be loaded twice

    Example:
        >>> embedder = SentenceTransformerEmbedding()
        >>> embedder.is_loaded
        False
        >>> vector = await embedder.embed("Shopping list")
        >>> len(vector) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> int:
        """
        Vector dimension produced by this provider.

        Available before loading (from configuration) so that zero-vector
        fallbacks can be sized without waiting for the model.
        """
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model."""
        ...

    @property
    def is_loaded(self) -> bool:
        """Whether the model is ready to embed."""
        ...

    @property
    def is_loading(self) -> bool:
        """Whether a model load is currently in progress."""
        ...

    async def load(self) -> None:
        """
        Load the model if it is not loaded yet.

        Raises:
            ProviderLoadError: If the model cannot be loaded. The provider stays
                unloaded and the next call retries.
        """
        ...

    async def embed(self, text: str) -> List[float]:
        """
        Generate an embedding for a text.

        Args:
            text: Text to embed

        Returns:
            Normalized embedding vector

        Raises:
            ValueError: If text is empty
            ProviderLoadError: If the model had to be loaded and loading failed
        """
        ...

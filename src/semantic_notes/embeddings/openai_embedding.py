"""OpenAI embedding provider for semantic-notes."""

import asyncio
import logging
import os
from typing import List, Optional

from semantic_notes.exceptions import ProviderLoadError

logger = logging.getLogger(__name__)

# Default output sizes of the hosted models
KNOWN_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbedding:
    """
    Embedding provider using OpenAI's embedding API.

    Also compatible with OpenAI-compatible APIs (Azure, OpenRouter, a local
    server...). OpenAI returns unit-length vectors, so no extra normalization
    is applied.

    Example:
        >>> embedder = OpenAIEmbedding(
        ...     model="text-embedding-3-small",
        ...     dimensions=384,  # Match the local model
        ... )
        >>> vector = await embedder.embed("Daily 12/05")
        >>> len(vector)
        384
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
    ):
        """
        Initialize the provider. The API client is created on first use.

        Args:
            model: OpenAI model name (default: text-embedding-3-small)
            api_key: OpenAI API key (None = use OPENAI_API_KEY env var)
            base_url: Custom endpoint (None = official OpenAI)
            dimensions: Output dimension (only for text-embedding-3-* models)
            timeout: Request timeout in seconds
            max_retries: Number of retry attempts for failed requests
        """
        self._model = model
        self._api_key = api_key
        self._base_url = base_url
        self._dimensions = dimensions
        self._timeout = timeout
        self._max_retries = max_retries
        self._client = None
        self._loading = False
        self._load_lock = asyncio.Lock()

        self._dimension = dimensions or KNOWN_DIMENSIONS.get(model, 0)

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def is_loaded(self) -> bool:
        return self._client is not None

    @property
    def is_loading(self) -> bool:
        return self._loading

    async def load(self) -> None:
        if self._client is not None:
            return

        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAIEmbedding. "
                "Install with: pip install semantic-notes[embeddings-openai]"
            ) from e

        async with self._load_lock:
            if self._client is not None:
                return

            self._loading = True
            try:
                client = AsyncOpenAI(
                    api_key=self._api_key or os.getenv("OPENAI_API_KEY"),
                    base_url=self._base_url,
                    timeout=self._timeout,
                    max_retries=self._max_retries,
                )

                if not self._dimension:
                    # Unknown model - make test call to determine
                    logger.warning(f"Unknown model {self._model}, testing dimension...")
                    test_vector = await self._create_embedding(client, "test")
                    self._dimension = len(test_vector)
            except Exception as e:
                logger.error(f"Failed to initialize OpenAI embedder: {e}")
                raise ProviderLoadError(f"Failed to initialize {self._model}: {e}") from e
            finally:
                self._loading = False

            self._client = client
            logger.info(
                f"OpenAI embedder initialized: {self._model} ({self._dimension} dimensions)"
            )

    async def _create_embedding(self, client, text: str) -> List[float]:
        kwargs = {"model": self._model, "input": text}
        if self._dimensions is not None:
            kwargs["dimensions"] = self._dimensions

        response = await client.embeddings.create(**kwargs)
        return response.data[0].embedding

    async def embed(self, text: str) -> List[float]:
        """
        Generate an embedding for a text.

        Raises:
            ValueError: If text is empty
            ProviderLoadError: If the client could not be initialized
            openai.OpenAIError: If the API request fails
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        await self.load()
        return await self._create_embedding(self._client, text)

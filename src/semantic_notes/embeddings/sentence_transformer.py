"""Local sentence-transformers embedding provider for semantic-notes."""

import asyncio
import logging
from typing import List, Optional

from semantic_notes.exceptions import ProviderLoadError

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedding:
    """
    Local embedding provider backed by sentence-transformers.

    The default model, all-MiniLM-L6-v2, mean-pools token embeddings into a
    384 dimension vector; vectors are L2-normalized on output. The model is
    downloaded and loaded on first use, not at construction, so creating the
    provider is cheap and startup is never blocked by a model download.

    Encoding runs in a worker thread so the event loop stays responsive while
    the model is busy.

    Example:
        >>> embedder = SentenceTransformerEmbedding(device="cpu")
        >>> vector = await embedder.embed("Daily 12/05")
        >>> len(vector)
        384
    """

    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        device: Optional[str] = None,
        dimension: int = 384,
        cache_folder: Optional[str] = None,
    ):
        """
        Initialize the provider without loading the model.

        Args:
            model_name: HuggingFace model identifier
            device: Device for computation ("cuda", "cpu", or None for auto)
            dimension: Expected output dimension, reported until the model is loaded
            cache_folder: Directory for model cache (None = default ~/.cache)
        """
        self._model_name = model_name
        self._device = device
        self._dimension = dimension
        self._cache_folder = cache_folder
        self._model = None
        self._loading = False
        self._load_lock = asyncio.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    @property
    def is_loading(self) -> bool:
        return self._loading

    def _create_model(self):
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ImportError(
                "sentence-transformers is required for SentenceTransformerEmbedding. "
                "Install with: pip install semantic-notes[embeddings-transformers]"
            ) from e

        return SentenceTransformer(
            self._model_name,
            device=self._device,
            cache_folder=self._cache_folder,
        )

    async def load(self) -> None:
        if self._model is not None:
            return

        async with self._load_lock:
            # Another caller may have finished loading while we waited
            if self._model is not None:
                return

            self._loading = True
            try:
                logger.info(f"Loading embedding model: {self._model_name}")
                model = await asyncio.to_thread(self._create_model)
            except ImportError:
                raise
            except Exception as e:
                logger.error(f"Failed to load embedding model {self._model_name}: {e}")
                raise ProviderLoadError(f"Failed to load {self._model_name}: {e}") from e
            finally:
                self._loading = False

            self._model = model
            self._dimension = model.get_sentence_embedding_dimension()
            logger.info(f"Model loaded: {self._model_name} ({self._dimension} dimensions)")

    async def embed(self, text: str) -> List[float]:
        """
        Generate a normalized, mean-pooled embedding for a text.

        Raises:
            ValueError: If text is empty
            ProviderLoadError: If the model could not be loaded
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        await self.load()

        embedding = await asyncio.to_thread(
            self._model.encode,
            text,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
        return embedding.tolist()

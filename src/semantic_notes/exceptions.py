"""Errors raised by the embedding cache and search engine."""


class ProviderLoadError(RuntimeError):
    """The embedding provider could not load its model."""


class EmbeddingComputationError(RuntimeError):
    """The embedding provider failed to produce a vector for a text."""


class DimensionMismatchError(ValueError):
    """Two vectors of different length were compared."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Vectors must have the same length (got {left} and {right})")
        self.left = left
        self.right = right

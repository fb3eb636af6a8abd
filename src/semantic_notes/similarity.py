from typing import Sequence

from semantic_notes.exceptions import DimensionMismatchError


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Calculate cosine similarity between two vectors.

    A zero vector (the fallback for a failed embedding) scores 0.0 against
    everything, itself included.

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    if len(vec1) != len(vec2):
        raise DimensionMismatchError(len(vec1), len(vec2))

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    magnitude1 = sum(a * a for a in vec1) ** 0.5
    magnitude2 = sum(b * b for b in vec2) ** 0.5

    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)

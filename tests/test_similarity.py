"""Unit tests for cosine similarity."""

import pytest

from semantic_notes.exceptions import DimensionMismatchError
from semantic_notes.similarity import cosine_similarity


def test_identical_vectors():
    """A nonzero vector is perfectly similar to itself."""
    vector = [0.3, -1.2, 4.0, 0.5]

    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_orthogonal_vectors():
    assert cosine_similarity([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]) == pytest.approx(0.0)


def test_opposite_vectors():
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_scale_invariant():
    assert cosine_similarity([1.0, 1.0], [5.0, 5.0]) == pytest.approx(1.0)


def test_zero_vector_scores_zero():
    """A zero vector (failed embedding fallback) never matches anything."""
    assert cosine_similarity([0.2, 0.9, 0.1], [0.0, 0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0, 0.0], [0.2, 0.9, 0.1]) == 0.0


def test_zero_vector_against_itself():
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_dimension_mismatch_raises():
    with pytest.raises(DimensionMismatchError, match="same length") as exc_info:
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])

    assert exc_info.value.left == 2
    assert exc_info.value.right == 3


def test_dimension_mismatch_is_value_error():
    with pytest.raises(ValueError):
        cosine_similarity([1.0], [])

"""Binary encoding of vectors for persistence."""

from typing import List, Sequence

import numpy as np

# Little-endian float64 keeps stored vectors bit-identical to the in-memory ones
VECTOR_DTYPE = np.dtype("<f8")


def encode_vector(vector: Sequence[float]) -> bytes:
    return np.asarray(vector, dtype=VECTOR_DTYPE).tobytes()


def decode_vector(data: bytes) -> List[float]:
    if len(data) % VECTOR_DTYPE.itemsize:
        raise ValueError(
            f"Encoded vector length {len(data)} is not a multiple of {VECTOR_DTYPE.itemsize}"
        )
    return np.frombuffer(data, dtype=VECTOR_DTYPE).tolist()

"""Vector similarity for resume-job matching."""

from collections.abc import Sequence

import numpy as np

from services.errors import DimensionMismatch


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors, in [-1, 1].

    Returns 0.0 when either vector has zero magnitude. Raises
    DimensionMismatch when the lengths differ.
    """
    if len(vector_a) != len(vector_b):
        raise DimensionMismatch(len(vector_a), len(vector_b))

    a = np.asarray(vector_a, dtype=np.float64)
    b = np.asarray(vector_b, dtype=np.float64)

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(a, b) / (norm_a * norm_b))
    # Guard float drift past the mathematical bounds
    return max(-1.0, min(1.0, score))

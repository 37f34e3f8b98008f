from typing import List, Sequence, Tuple, TypeVar

import numpy as np

from ..exceptions import ValidationException

K = TypeVar("K")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        ValidationException: If the vectors differ in length
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValidationException(
            f"Vector length mismatch: {va.size} vs {vb.size}",
            details={"left_length": int(va.size), "right_length": int(vb.size)},
        )

    denominator = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denominator == 0.0:
        return 0.0
    return float(np.dot(va, vb)) / denominator


def rank_candidates(
    query: Sequence[float],
    candidates: Sequence[Tuple[K, Sequence[float]]],
    top_k: int,
) -> List[Tuple[K, float]]:
    """
    Score every candidate against ``query`` and keep the best ``top_k``.

    Equal scores keep the order of ``candidates``.
    """
    scored = [(key, cosine_similarity(query, vector)) for key, vector in candidates]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored[:top_k]

# infrastructure/similarity.py
"""Cosine similarity scoring"""
from typing import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    dot(a, b) / (||a|| * ||b||), clipped to [-1, 1].

    A zero-magnitude vector on either side scores 0.0 instead of NaN.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector length mismatch: {va.shape[0]} vs {vb.shape[0]}")

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, similarity))


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """
    Vectorised form of cosine_similarity for an (N, D) matrix of stored vectors.

    Rows with zero magnitude (and a zero query) score 0.0.
    """
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)
    if m.size == 0:
        return np.zeros(0, dtype=np.float64)
    if m.ndim != 2 or m.shape[1] != q.shape[0]:
        raise ValueError(f"Vector length mismatch: query {q.shape[0]} vs stored {m.shape[-1]}")

    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(m, axis=1)
    denom = row_norms * q_norm

    scores = np.zeros(m.shape[0], dtype=np.float64)
    nonzero = denom > 0
    scores[nonzero] = (m[nonzero] @ q) / denom[nonzero]
    return np.clip(scores, -1.0, 1.0)

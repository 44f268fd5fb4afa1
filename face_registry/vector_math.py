"""
Vector Math Module

Cosine distance between face embeddings and embedding sanity checks.
Degenerate inputs never raise: they produce an infinite distance or an
invalid validation result.
"""

import math
from typing import Dict, Any, Optional, Sequence, Union

import numpy as np

VectorLike = Union[np.ndarray, Sequence[float]]


def as_vector(values: VectorLike) -> np.ndarray:
    """Flatten a sequence or array into a 1-D float64 vector."""
    return np.asarray(values, dtype=np.float64).reshape(-1)


def cosine_distance(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine distance between two embeddings.

    distance = 1 - dot(a, b) / (|a| * |b|)

    Args:
        a: First embedding vector
        b: Second embedding vector

    Returns:
        Distance in [0, 2], or math.inf when the pair cannot be compared
        (length mismatch, empty, zero norm or non-finite values)
    """
    try:
        va = as_vector(a)
        vb = as_vector(b)
    except (TypeError, ValueError, OverflowError):
        return math.inf

    if va.size == 0 or va.shape != vb.shape:
        return math.inf
    if not (np.all(np.isfinite(va)) and np.all(np.isfinite(vb))):
        return math.inf

    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return math.inf

    distance = 1.0 - float(np.dot(va, vb)) / (norm_a * norm_b)
    # Overflow in the dot product or the norms
    if not math.isfinite(distance):
        return math.inf
    return distance


def validate_embedding(embedding: Optional[VectorLike],
                       expected_dim: Optional[int] = None) -> Dict[str, Any]:
    """
    Validate embedding shape and values.

    Args:
        embedding: Embedding vector to check
        expected_dim: Required length (skipped if None)

    Returns:
        Validation results with 'valid', 'reason', 'size' and 'magnitude'
        keys; 'size' and 'magnitude' are None when they cannot be computed
    """
    result = {'valid': False, 'reason': None, 'size': None, 'magnitude': None}

    if embedding is None:
        result['reason'] = 'None embedding'
        return result

    try:
        vector = as_vector(embedding)
    except (TypeError, ValueError, OverflowError):
        result['reason'] = 'Non-numeric embedding'
        return result

    result['size'] = int(vector.size)
    if vector.size == 0:
        result['reason'] = 'Empty embedding'
        return result

    if expected_dim is not None and vector.size != expected_dim:
        result['reason'] = f"Expected {expected_dim} values, got {vector.size}"
        return result

    # Check for NaN or infinite values
    if not np.all(np.isfinite(vector)):
        result['reason'] = 'NaN or infinite values'
        return result

    result['magnitude'] = float(np.linalg.norm(vector))
    if result['magnitude'] == 0.0:
        result['reason'] = 'Zero magnitude'
        return result

    result['valid'] = True
    return result

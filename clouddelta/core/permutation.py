"""
Order-preserving sort with permutation recovery.

Each coordinate axis is sorted independently before delta coding. The
inverse permutation travels with the compressed data so the original
ordering can be restored exactly after decompression.
"""

import numpy as np
from typing import Tuple

from clouddelta.core.errors import ShapeError


def _check_sequence(sequence: np.ndarray, name: str) -> None:
    if sequence.ndim != 1:
        raise ShapeError(f"{name} must be one-dimensional, got shape {sequence.shape}")
    if sequence.size == 0:
        raise ShapeError(f"{name} must contain at least one element")


def forward(sequence: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sorts a sequence ascending and returns the inverse permutation.

    Sorting is stable, so repeated values keep their original relative
    order and the permutation is well defined.

    Args:
        sequence: One-dimensional array of values

    Returns:
        Tuple of (sorted_sequence, inverse_permutation)
        - sorted_sequence: ``sequence[perm]`` in ascending order
        - inverse_permutation: int64 array with
          ``sorted_sequence[inverse_permutation] == sequence``

    Raises:
        ShapeError: If the sequence is empty or not one-dimensional

    Example:
        >>> sorted_x, inv = forward(np.array([2.0, 0.5, 1.0], dtype=np.float32))
        >>> inv.tolist()
        [2, 0, 1]
    """
    sequence = np.asarray(sequence)
    _check_sequence(sequence, "sequence")

    perm = np.argsort(sequence, kind="stable")
    sorted_sequence = sequence[perm]

    inverse_permutation = np.empty_like(perm)
    inverse_permutation[perm] = np.arange(perm.size, dtype=perm.dtype)

    return sorted_sequence, inverse_permutation


def apply_inverse(sorted_sequence: np.ndarray, inverse_permutation: np.ndarray) -> np.ndarray:
    """
    Restores original ordering: ``result[i] = sorted_sequence[inverse_permutation[i]]``.

    Args:
        sorted_sequence: Sorted values produced by :func:`forward`
        inverse_permutation: Index mapping produced by :func:`forward`

    Returns:
        Array in the original order

    Raises:
        ShapeError: On empty input, length mismatch, or an index outside [0, n)
    """
    sorted_sequence = np.asarray(sorted_sequence)
    inverse_permutation = np.asarray(inverse_permutation)

    _check_sequence(sorted_sequence, "sorted_sequence")
    _check_sequence(inverse_permutation, "inverse_permutation")

    n = sorted_sequence.size
    if inverse_permutation.size != n:
        raise ShapeError(
            f"Permutation length {inverse_permutation.size} does not match sequence length {n}"
        )
    if inverse_permutation.min() < 0 or inverse_permutation.max() >= n:
        raise ShapeError(f"Permutation contains indices outside [0, {n})")

    return sorted_sequence[inverse_permutation.astype(np.int64, copy=False)]

"""
Delta transform between a sorted sequence and its first differences.

All arithmetic happens in float32. Decoding is a float32 running sum, so the
encoder checks every difference against that running sum and moves it by
single ulps where rounding would otherwise drift away from the sorted value.
"""

import numpy as np

from clouddelta.core.errors import FatalCodecError, ShapeError

# Upper bound on one-ulp corrections per difference
MAX_DELTA_ADJUSTMENTS = 4


def encode(sorted_sequence: np.ndarray) -> np.ndarray:
    """
    Converts a sorted sequence to first differences.

    ``d[0]`` carries the absolute first value; ``d[i]`` is
    ``sorted[i] - sorted[i - 1]`` computed in float32.

    Zeros compare equal regardless of sign, so a ``-0.0`` anywhere but the
    first sorted position decodes as ``+0.0``: adding a delta to a running
    sum never yields ``-0.0`` under round-to-nearest.

    Args:
        sorted_sequence: Ascending one-dimensional sequence

    Returns:
        float32 delta sequence of the same length

    Raises:
        ShapeError: If the sequence is empty or not one-dimensional
        FatalCodecError: If no float32 delta reproduces a value under the running sum
    """
    values = np.asarray(sorted_sequence, dtype=np.float32)
    if values.ndim != 1 or values.size == 0:
        raise ShapeError(f"Delta encoding needs a non-empty 1-D sequence, got shape {values.shape}")

    deltas = np.empty_like(values)
    deltas[0] = values[0]
    if values.size == 1:
        return deltas

    previous = values[:-1]
    target = values[1:]
    step = target - previous

    for _ in range(MAX_DELTA_ADJUSTMENTS):
        drift = (previous + step) != target
        if not drift.any():
            break
        towards = np.where((previous + step)[drift] < target[drift], np.inf, -np.inf).astype(np.float32)
        step[drift] = np.nextafter(step[drift], towards)
    else:
        drift = (previous + step) != target
        if drift.any():
            position = int(np.flatnonzero(drift)[0]) + 1
            raise FatalCodecError(
                f"No float32 delta reproduces sorted value at position {position}"
            )

    deltas[1:] = step
    return deltas


def decode(delta_sequence: np.ndarray) -> np.ndarray:
    """
    Rebuilds the sorted sequence as a float32 running sum.

    The first delta already holds the absolute first value, so no separate
    seed is needed.

    Args:
        delta_sequence: Output of :func:`encode`

    Returns:
        float32 sorted sequence
    """
    deltas = np.asarray(delta_sequence, dtype=np.float32)
    if deltas.ndim != 1 or deltas.size == 0:
        raise ShapeError(f"Delta decoding needs a non-empty 1-D sequence, got shape {deltas.shape}")
    return np.cumsum(deltas, dtype=np.float32)

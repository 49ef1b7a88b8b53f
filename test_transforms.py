"""
Tests for the sort/permutation and delta transforms.

Verifies:
1. Stable sorting and inverse permutations restore the original order
2. Deltas decode back to the sorted values under a float32 running sum
3. Malformed inputs are rejected
"""

import numpy as np
import pytest

from clouddelta.core import delta, permutation
from clouddelta.core.errors import FatalCodecError, ShapeError


def test_forward_breaks_ties_by_original_index():
    """Equal values keep their input order."""
    sorted_values, inverse = permutation.forward(np.array([0.5, 0.0, 0.5], dtype=np.float32))

    assert sorted_values.tolist() == [0.0, 0.5, 0.5]
    assert inverse.tolist() == [1, 0, 2]


def test_forward_inverse_for_unsorted_axis():
    y = np.array([5, 1, 3, 2, 4], dtype=np.float32)
    sorted_y, inverse = permutation.forward(y)

    assert sorted_y.tolist() == [1.0, 2.0, 3.0, 4.0, 5.0]
    assert inverse.tolist() == [4, 0, 2, 1, 3]
    assert np.array_equal(permutation.apply_inverse(sorted_y, inverse), y)


def test_forward_on_sorted_input_is_identity():
    x = np.array([0.0, 0.5, 0.5, 1.0, 2.0], dtype=np.float32)
    sorted_x, inverse = permutation.forward(x)

    assert np.array_equal(sorted_x, x)
    assert inverse.tolist() == [0, 1, 2, 3, 4]


def test_permutation_round_trip_large():
    rng = np.random.default_rng(7)
    values = rng.integers(0, 50, size=2000).astype(np.float32)

    sorted_values, inverse = permutation.forward(values)

    assert np.all(np.diff(sorted_values) >= 0)
    assert np.array_equal(permutation.apply_inverse(sorted_values, inverse), values)


def test_forward_rejects_empty_and_2d():
    with pytest.raises(ShapeError):
        permutation.forward(np.array([], dtype=np.float32))
    with pytest.raises(ShapeError):
        permutation.forward(np.zeros((2, 2), dtype=np.float32))


def test_apply_inverse_rejects_bad_permutations():
    sorted_values = np.array([1.0, 2.0, 3.0], dtype=np.float32)

    with pytest.raises(ShapeError):
        permutation.apply_inverse(sorted_values, np.array([0, 1]))
    with pytest.raises(ShapeError):
        permutation.apply_inverse(sorted_values, np.array([0, 1, 3]))
    with pytest.raises(ShapeError):
        permutation.apply_inverse(sorted_values, np.array([0, -1, 2]))


def test_delta_encode_first_value_is_absolute():
    """d[0] holds the first sorted value, the rest are differences."""
    x = np.array([0.0, 0.5, 0.5, 1.0, 2.0], dtype=np.float32)
    deltas = delta.encode(x)

    assert deltas.dtype == np.float32
    assert deltas.tolist() == [0.0, 0.5, 0.0, 0.5, 1.0]
    assert np.array_equal(delta.decode(deltas), x)


def test_delta_single_value():
    deltas = delta.encode(np.array([3.25], dtype=np.float32))

    assert deltas.tolist() == [3.25]
    assert delta.decode(deltas).tolist() == [3.25]


def test_delta_round_trip_on_grid_values():
    rng = np.random.default_rng(0)
    values = np.sort(rng.integers(-8192, 8192, size=1000) / 1024).astype(np.float32)

    assert np.array_equal(delta.decode(delta.encode(values)), values)


def test_delta_unrepresentable_step_fails():
    """No float32 step takes 1.0 to 16777218.0 under float32 addition."""
    values = np.array([1.0, 16777218.0], dtype=np.float32)

    with pytest.raises(FatalCodecError):
        delta.encode(values)


def test_delta_rejects_empty():
    with pytest.raises(ShapeError):
        delta.encode(np.array([], dtype=np.float32))
    with pytest.raises(ShapeError):
        delta.decode(np.array([], dtype=np.float32))


def test_negative_zero_after_first_position_decodes_positive():
    """-0.0 equals +0.0, so only its value survives the running sum, not its sign."""
    values = np.array([-1.0, -0.0], dtype=np.float32)
    decoded = delta.decode(delta.encode(values))

    assert np.array_equal(decoded, values)
    assert np.signbit(decoded).tolist() == [True, False]


def test_leading_negative_zero_keeps_sign():
    decoded = delta.decode(delta.encode(np.array([-0.0, 1.0], dtype=np.float32)))

    assert np.signbit(decoded).tolist() == [True, False]

"""
Metrics and evaluation utilities for compression performance.

This module provides standard size metrics (ratio, factor, savings) and
entropy statistics of the delta population, i.e. how many bits the Huffman
code spends per delta before container overhead.
"""

import numpy as np
from typing import Tuple

from clouddelta.core import huffman
from clouddelta.core.codec import as_point_cloud, split_deltas

# Per-index width of a stored inverse permutation
PERMUTATION_INDEX_BITS = 32


def compression_ratio(
    original_size: int,
    compressed_size: int
) -> float:
    """
    Computes compressed size as a fraction of the original size.

    Args:
        original_size: Size of uncompressed data in bytes
        compressed_size: Size of compressed data in bytes

    Returns:
        Compression ratio (e.g., 0.25 means 4:1 compression)

    Example:
        >>> compression_ratio(original_size=8000, compressed_size=2000)
        0.25
    """
    if original_size == 0:
        return 0.0

    return compressed_size / original_size


def compression_factor(
    original_size: int,
    compressed_size: int
) -> float:
    """
    Computes compression factor (inverse of ratio).

    Returns:
        Compression factor (e.g., 4.0 means 4x size reduction)
    """
    if compressed_size == 0:
        return float('inf')

    return original_size / compressed_size


def percent_savings(
    original_size: int,
    compressed_size: int
) -> float:
    """Computes storage savings as a percentage of the original size."""
    if original_size == 0:
        return 0.0

    return (original_size - compressed_size) / original_size * 100


def entropy_statistics(point_cloud) -> Tuple[int, float]:
    """
    Measures the Huffman code size of a point cloud's deltas.

    Args:
        point_cloud: ``(x, y)`` pair of equal-length sequences

    Returns:
        Tuple of (total_bits, avg_bits)
        - total_bits: Bits of the Huffman bitstream for all 2n deltas
        - avg_bits: Average bits per delta
    """
    x_deltas, y_deltas = split_deltas(point_cloud)
    deltas = np.concatenate([x_deltas, y_deltas])

    frequency_table = huffman.build_frequency_table(deltas)
    tree = huffman.build_tree(frequency_table)
    codebook = huffman.assign_codes(tree, len(frequency_table))

    total_bits = sum(count * codebook[symbol][1] for symbol, count in frequency_table.items())
    return total_bits, total_bits / deltas.size


def estimate_compressed_bits(point_cloud) -> int:
    """
    Theoretical compressed size in bits: Huffman bitstream, both inverse
    permutations and the two initial values. Tree and framing overhead
    are excluded.
    """
    cloud = as_point_cloud(point_cloud)
    total_bits, _ = entropy_statistics(cloud)
    return total_bits + 2 * cloud.n * PERMUTATION_INDEX_BITS + 2 * 32


def evaluate_compression_performance(point_cloud, compressed_data: bytes) -> dict:
    """
    Computes comprehensive compression performance metrics.

    Args:
        point_cloud: Uncompressed ``(x, y)`` pair
        compressed_data: Container bytes produced from it

    Returns:
        Dictionary containing:
        - points: Number of points
        - original_size_bytes: Raw float32 size
        - compressed_size_bytes: Container size
        - compression_ratio: Fraction of original
        - compression_factor: Inverse of ratio
        - percent_savings: Percentage reduction
        - avg_bits_per_delta: Huffman bits per delta
        - effective_bits_per_value: Actual container bits per coordinate value
    """
    cloud = as_point_cloud(point_cloud)
    original_size = cloud.nbytes
    compressed_size = len(compressed_data)

    _, avg_bits = entropy_statistics(cloud)

    return {
        'points': cloud.n,
        'original_size_bytes': original_size,
        'compressed_size_bytes': compressed_size,
        'compression_ratio': compression_ratio(original_size, compressed_size),
        'compression_factor': compression_factor(original_size, compressed_size),
        'percent_savings': percent_savings(original_size, compressed_size),
        'avg_bits_per_delta': avg_bits,
        'effective_bits_per_value': (compressed_size * 8) / (2 * cloud.n)
    }

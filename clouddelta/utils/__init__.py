"""Utilities for configuration loading and compression metrics."""

from .config import DEFAULT_CONFIG, load_config
from .metrics import (
    compression_ratio,
    compression_factor,
    percent_savings,
    entropy_statistics,
    estimate_compressed_bits,
    evaluate_compression_performance,
)

__all__ = [
    "DEFAULT_CONFIG",
    "load_config",
    "compression_ratio",
    "compression_factor",
    "percent_savings",
    "entropy_statistics",
    "estimate_compressed_bits",
    "evaluate_compression_performance",
]

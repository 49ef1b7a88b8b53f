"""
CloudDelta: Lossless 2D Point Cloud Compressor

Compresses paired float32 coordinate sequences by sorting each axis
independently, delta coding the sorted values, and entropy coding the deltas
with a Huffman coder (or storing them fixed-width in hybrid mode).
"""

__version__ = "0.1.0"

from clouddelta.core import (
    CloudDeltaError,
    FatalCodecError,
    FormatError,
    Method,
    PointCloud,
    ShapeError,
    check_compression,
    compress,
    compress_file,
    decompress_file,
    uncompress,
)

__all__ = [
    "CloudDeltaError",
    "FatalCodecError",
    "FormatError",
    "Method",
    "PointCloud",
    "ShapeError",
    "check_compression",
    "compress",
    "compress_file",
    "decompress_file",
    "uncompress",
]

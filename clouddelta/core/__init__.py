"""Compression pipeline: permutation, delta, entropy coding and container framing."""

from .errors import CloudDeltaError, FatalCodecError, FormatError, ShapeError
from .codec import (
    Method,
    PointCloud,
    as_point_cloud,
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
    "ShapeError",
    "Method",
    "PointCloud",
    "as_point_cloud",
    "check_compression",
    "compress",
    "compress_file",
    "decompress_file",
    "uncompress",
]

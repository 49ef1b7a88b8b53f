"""
Binary container framing for compressed point clouds.

Layout (big-endian)::

    initial_x           float32
    initial_y           float32
    n                   uint32
    x_inv_perm          uint32[n]
    y_inv_perm          uint32[n]
    delta_section_len   uint32      bytes of method_flag + payload
    method_flag         uint8       0 = hybrid, 1 = huffman
    payload             bytes[delta_section_len - 1]

Huffman payload::

    tree_size           uint32
    tree_bytes          bytes[tree_size]
    original_bit_count  uint32
    bitstream_bytes     uint32
    bitstream           bytes[bitstream_bytes]

This module frames and parses only; it holds no transform logic.
"""

import struct
import numpy as np
from dataclasses import dataclass
from typing import Tuple

from clouddelta.core.errors import FormatError, ShapeError

METHOD_HYBRID = 0
METHOD_HUFFMAN = 1
KNOWN_METHODS = (METHOD_HYBRID, METHOD_HUFFMAN)

UINT32_MAX = 2**32 - 1

_HEADER = struct.Struct(">ffI")
_UINT32 = struct.Struct(">I")
_METHOD = struct.Struct(">B")
_INDEX_DTYPE = np.dtype(">u4")


@dataclass
class Container:
    """
    Parsed fields of a compressed point cloud.

    Attributes:
        initial_x: First sorted x value
        initial_y: First sorted y value
        n: Number of points
        x_inv_perm: Inverse permutation restoring x order
        y_inv_perm: Inverse permutation restoring y order
        method: Method flag (0 hybrid, 1 huffman)
        payload: Encoded deltas in the layout selected by ``method``
    """

    initial_x: float
    initial_y: float
    n: int
    x_inv_perm: np.ndarray
    y_inv_perm: np.ndarray
    method: int
    payload: bytes


def _check_uint32(value: int, name: str) -> None:
    if value > UINT32_MAX:
        raise ShapeError(f"{name} of {value} does not fit the uint32 container field")


def _take(data: memoryview, offset: int, size: int, what: str) -> Tuple[memoryview, int]:
    end = offset + size
    if end > len(data):
        raise FormatError(
            f"Container truncated in {what}: need {size} bytes at offset {offset}, "
            f"only {len(data) - offset} available"
        )
    return data[offset:end], end


def pack(container: Container) -> bytes:
    """
    Assembles the container bytes.

    Raises:
        ShapeError: If permutation lengths disagree with ``n`` or a length
            does not fit its uint32 field
        FormatError: If the method flag is unknown
    """
    n = container.n
    _check_uint32(n, "Point count")

    x_inv_perm = np.asarray(container.x_inv_perm)
    y_inv_perm = np.asarray(container.y_inv_perm)
    if x_inv_perm.size != n or y_inv_perm.size != n:
        raise ShapeError(
            f"Permutation lengths ({x_inv_perm.size}, {y_inv_perm.size}) do not match n={n}"
        )
    if container.method not in KNOWN_METHODS:
        raise FormatError(f"Unknown method flag {container.method}")

    delta_section_len = _METHOD.size + len(container.payload)
    _check_uint32(delta_section_len, "Delta section length")

    return b"".join([
        _HEADER.pack(container.initial_x, container.initial_y, n),
        x_inv_perm.astype(_INDEX_DTYPE).tobytes(),
        y_inv_perm.astype(_INDEX_DTYPE).tobytes(),
        _UINT32.pack(delta_section_len),
        _METHOD.pack(container.method),
        container.payload,
    ])


def unpack(data: bytes) -> Container:
    """
    Parses container bytes and validates every declared length.

    Raises:
        FormatError: On truncation, trailing bytes, ``n == 0``, permutation
            indices outside [0, n), an empty delta section, or an unknown
            method flag
    """
    view = memoryview(bytes(data))

    header, offset = _take(view, 0, _HEADER.size, "header")
    initial_x, initial_y, n = _HEADER.unpack(header)
    if n == 0:
        raise FormatError("Container declares zero points")

    perm_size = n * _INDEX_DTYPE.itemsize
    x_bytes, offset = _take(view, offset, perm_size, "x permutation")
    y_bytes, offset = _take(view, offset, perm_size, "y permutation")
    x_inv_perm = np.frombuffer(x_bytes, dtype=_INDEX_DTYPE).astype(np.int64)
    y_inv_perm = np.frombuffer(y_bytes, dtype=_INDEX_DTYPE).astype(np.int64)

    for name, perm in (("x", x_inv_perm), ("y", y_inv_perm)):
        if perm.max() >= n:
            raise FormatError(f"{name} permutation holds index {int(perm.max())} outside [0, {n})")

    length_bytes, offset = _take(view, offset, _UINT32.size, "delta section length")
    (delta_section_len,) = _UINT32.unpack(length_bytes)
    if delta_section_len < _METHOD.size:
        raise FormatError("Delta section is empty (missing method flag)")

    section, offset = _take(view, offset, delta_section_len, "delta section")
    if offset != len(view):
        raise FormatError(f"{len(view) - offset} trailing bytes after the delta section")

    (method,) = _METHOD.unpack(section[:_METHOD.size])
    if method not in KNOWN_METHODS:
        raise FormatError(f"Unknown method flag {method}")

    return Container(
        initial_x=initial_x,
        initial_y=initial_y,
        n=n,
        x_inv_perm=x_inv_perm,
        y_inv_perm=y_inv_perm,
        method=method,
        payload=bytes(section[_METHOD.size:]),
    )


def pack_huffman_payload(tree_bytes: bytes, bit_count: int, bitstream: bytes) -> bytes:
    """Frames a serialized tree and its bitstream as a Huffman payload."""
    _check_uint32(len(tree_bytes), "Tree size")
    _check_uint32(bit_count, "Bit count")
    _check_uint32(len(bitstream), "Bitstream size")

    return b"".join([
        _UINT32.pack(len(tree_bytes)),
        tree_bytes,
        _UINT32.pack(bit_count),
        _UINT32.pack(len(bitstream)),
        bitstream,
    ])


def unpack_huffman_payload(payload: bytes) -> Tuple[bytes, int, bytes]:
    """
    Splits a Huffman payload into its parts.

    Returns:
        Tuple of (tree_bytes, original_bit_count, bitstream)

    Raises:
        FormatError: If a field disagrees with its declared length or bytes
            follow the bitstream
    """
    view = memoryview(payload)

    field, offset = _take(view, 0, _UINT32.size, "tree size")
    (tree_size,) = _UINT32.unpack(field)
    tree_bytes, offset = _take(view, offset, tree_size, "tree bytes")

    field, offset = _take(view, offset, _UINT32.size, "bit count")
    (bit_count,) = _UINT32.unpack(field)
    field, offset = _take(view, offset, _UINT32.size, "bitstream size")
    (bitstream_size,) = _UINT32.unpack(field)
    bitstream, offset = _take(view, offset, bitstream_size, "bitstream")

    if offset != len(view):
        raise FormatError(f"{len(view) - offset} trailing bytes after the Huffman bitstream")
    if bit_count > bitstream_size * 8:
        raise FormatError(
            f"Declared bit count {bit_count} exceeds bitstream of {bitstream_size} bytes"
        )

    return bytes(tree_bytes), bit_count, bytes(bitstream)

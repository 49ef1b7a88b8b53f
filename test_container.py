"""
Tests for container framing and validation.

Every malformed container must raise FormatError rather than decode to
wrong values.
"""

import struct

import numpy as np
import pytest

from clouddelta import FormatError, compress, uncompress
from clouddelta.core import container, hybrid
from clouddelta.core.errors import ShapeError

X = [0.0, 0.5, 0.5, 1.0, 2.0]
Y = [5, 1, 3, 2, 4]
N = 5
METHOD_FLAG_OFFSET = 12 + 8 * N + 4


def _replace(data, offset, chunk):
    patched = bytearray(data)
    patched[offset:offset + len(chunk)] = chunk
    return bytes(patched)


def test_hybrid_container_layout():
    data = compress((X, Y), method="hybrid")

    # header, two permutations, section length, flag, ten float32 deltas
    assert len(data) == 12 + 2 * 4 * N + 4 + 1 + 4 * 2 * N == 97

    initial_x, initial_y, n = struct.unpack(">ffI", data[:12])
    assert (initial_x, initial_y, n) == (0.0, 1.0, 5)

    y_perm = np.frombuffer(data[12 + 4 * N:12 + 8 * N], dtype=">u4")
    assert y_perm.tolist() == [4, 0, 2, 1, 3]

    (section_len,) = struct.unpack(">I", data[12 + 8 * N:METHOD_FLAG_OFFSET])
    assert section_len == 1 + 4 * 2 * N
    assert data[METHOD_FLAG_OFFSET] == container.METHOD_HYBRID


def test_huffman_container_flag():
    data = compress((X, Y), method="huffman")

    assert data[METHOD_FLAG_OFFSET] == container.METHOD_HUFFMAN
    # tree (37) + bitstream (2) + three uint32 fields
    assert len(data) == METHOD_FLAG_OFFSET + 1 + 4 + 37 + 4 + 4 + 2


def test_pack_unpack_fields():
    packed = container.pack(container.Container(
        initial_x=1.5,
        initial_y=-2.0,
        n=3,
        x_inv_perm=np.array([2, 0, 1]),
        y_inv_perm=np.array([0, 1, 2]),
        method=container.METHOD_HYBRID,
        payload=b"abc",
    ))

    parsed = container.unpack(packed)

    assert parsed.initial_x == 1.5
    assert parsed.initial_y == -2.0
    assert parsed.n == 3
    assert parsed.x_inv_perm.tolist() == [2, 0, 1]
    assert parsed.y_inv_perm.tolist() == [0, 1, 2]
    assert parsed.method == container.METHOD_HYBRID
    assert parsed.payload == b"abc"


def test_pack_rejects_mismatched_permutation():
    with pytest.raises(ShapeError):
        container.pack(container.Container(0.0, 0.0, 3, np.array([0, 1]), np.array([0, 1, 2]), 0, b""))


@pytest.mark.parametrize("method", ["hybrid", "huffman"])
def test_truncated_container(method):
    data = compress((X, Y), method=method)

    for cut in (0, 11, 12, METHOD_FLAG_OFFSET, len(data) - 1):
        with pytest.raises(FormatError):
            uncompress(data[:cut])


@pytest.mark.parametrize("method", ["hybrid", "huffman"])
def test_trailing_bytes(method):
    data = compress((X, Y), method=method)

    with pytest.raises(FormatError):
        uncompress(data + b"\x00")


def test_unknown_method_flag():
    data = compress((X, Y), method="hybrid")

    with pytest.raises(FormatError):
        uncompress(_replace(data, METHOD_FLAG_OFFSET, b"\x07"))


def test_zero_points():
    data = struct.pack(">ffI", 0.0, 0.0, 0) + struct.pack(">IB", 1, 0)

    with pytest.raises(FormatError):
        uncompress(data)


def test_permutation_index_out_of_range():
    data = compress((X, Y), method="hybrid")

    with pytest.raises(FormatError):
        uncompress(_replace(data, 12, struct.pack(">I", N)))


def test_empty_delta_section():
    data = compress((X, Y), method="hybrid")
    truncated = data[:12 + 8 * N] + struct.pack(">I", 0)

    with pytest.raises(FormatError):
        uncompress(truncated)


def test_tampered_initial_value():
    data = compress((X, Y), method="hybrid")

    with pytest.raises(FormatError):
        uncompress(_replace(data, 0, struct.pack(">f", 9.0)))


def test_hybrid_payload_length_mismatch():
    with pytest.raises(FormatError):
        hybrid.decode(b"\x00" * 7, 2)

    assert hybrid.decode(hybrid.encode(np.array([0.5, -1.0], dtype=np.float32)), 2).tolist() == [0.5, -1.0]


def test_huffman_payload_validation():
    payload = container.pack_huffman_payload(b"\x00", 0, b"")

    assert container.unpack_huffman_payload(payload) == (b"\x00", 0, b"")

    with pytest.raises(FormatError):
        container.unpack_huffman_payload(payload + b"\x00")
    with pytest.raises(FormatError):
        container.unpack_huffman_payload(container.pack_huffman_payload(b"\x00", 9, b"\x00"))

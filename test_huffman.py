"""
Tests for the Huffman entropy coder.

Verifies:
1. Tree construction is deterministic and codes are prefix-free
2. Trees serialize to the documented byte grammar and parse back
3. Bitstreams decode exactly, and corruption is reported instead of masked
"""

import struct

import numpy as np
import pytest

from clouddelta.core import huffman
from clouddelta.core.errors import FatalCodecError, FormatError

# x-deltas then y-deltas of x = [0, 0.5, 0.5, 1, 2], y = [5, 1, 3, 2, 4]
EXAMPLE_DELTAS = np.array([0.0, 0.5, 0.0, 0.5, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0], dtype=np.float32)


def _symbol(value):
    return int(huffman.to_symbols(np.array([value], dtype=np.float32))[0])


def _build(values):
    table = huffman.build_frequency_table(values)
    tree = huffman.build_tree(table)
    return table, tree, huffman.assign_codes(tree, len(table))


def test_frequency_table_in_first_occurrence_order():
    table = huffman.build_frequency_table(EXAMPLE_DELTAS)

    assert list(table.items()) == [(_symbol(0.0), 2), (_symbol(0.5), 2), (_symbol(1.0), 6)]


def test_negative_zero_is_a_distinct_symbol():
    table = huffman.build_frequency_table(np.array([0.0, -0.0, 0.0], dtype=np.float32))

    assert len(table) == 2
    assert table[_symbol(0.0)] == 2
    assert table[_symbol(-0.0)] == 1


def test_equal_weights_merge_in_table_order():
    """Ties pop the earlier entry first, merged nodes after existing equal weights."""
    tree = huffman.build_tree({10: 1, 20: 1, 30: 2})
    codebook = huffman.assign_codes(tree, 3)

    assert codebook == {30: (0b0, 1), 10: (0b10, 2), 20: (0b11, 2)}
    assert tree.weight == 4


def test_codebook_is_prefix_free():
    rng = np.random.default_rng(3)
    values = (rng.integers(0, 40, size=500) / 8).astype(np.float32)
    _, _, codebook = _build(values)

    words = [format(code, f"0{length}b") for code, length in codebook.values()]
    for i, a in enumerate(words):
        for j, b in enumerate(words):
            if i != j:
                assert not b.startswith(a)


def test_identical_tables_build_identical_trees():
    table = huffman.build_frequency_table(EXAMPLE_DELTAS)

    first = huffman.serialize_tree(huffman.build_tree(table))
    second = huffman.serialize_tree(huffman.build_tree(dict(table)))

    assert first == second


def test_single_symbol_gets_one_bit_code():
    _, tree, codebook = _build(np.zeros(6, dtype=np.float32))

    assert tree.is_leaf
    assert codebook == {_symbol(0.0): (0, 1)}


def test_empty_table_has_no_tree():
    assert huffman.build_tree({}) is None
    assert huffman.assign_codes(None, 0) == {}


def test_encode_example_bits():
    """0.0 -> 00, 0.5 -> 01, 1.0 -> 1 for the example population."""
    _, _, codebook = _build(EXAMPLE_DELTAS)

    assert codebook[_symbol(0.0)] == (0b00, 2)
    assert codebook[_symbol(0.5)] == (0b01, 2)
    assert codebook[_symbol(1.0)] == (0b1, 1)

    bitstream, bit_count = huffman.encode(EXAMPLE_DELTAS, codebook)

    assert bit_count == 14
    assert bitstream == bytes([0b00010001, 0b11111100])


def test_encode_missing_symbol_fails():
    _, _, codebook = _build(np.array([1.0, 1.0, 2.0], dtype=np.float32))

    with pytest.raises(FatalCodecError):
        huffman.encode(np.array([1.0, 3.0], dtype=np.float32), codebook)


def test_serialize_single_leaf_bytes():
    tree = huffman.build_tree({_symbol(1.5): 3})

    assert huffman.serialize_tree(tree) == b"\x02" + struct.pack(">i", 3) + struct.pack(">f", 1.5)


def test_serialize_empty_tree():
    assert huffman.serialize_tree(None) == b"\x00"

    tree, remainder = huffman.deserialize_tree(b"\x00")
    assert tree is None
    assert remainder == b""


def test_tree_bytes_round_trip():
    _, tree, codebook = _build(EXAMPLE_DELTAS)
    data = huffman.serialize_tree(tree)

    # two internal nodes (5 bytes each) and three leaves (9 bytes each)
    assert len(data) == 37

    parsed, remainder = huffman.deserialize_tree(data + b"tail")

    assert remainder == b"tail"
    assert huffman.serialize_tree(parsed) == data
    assert huffman.assign_codes(parsed, 3) == codebook


def test_deserialize_rejects_truncated_bytes():
    _, tree, _ = _build(EXAMPLE_DELTAS)
    data = huffman.serialize_tree(tree)

    for cut in (0, 1, 4, 12, len(data) - 1):
        with pytest.raises(FormatError):
            huffman.deserialize_tree(data[:cut])


def test_deserialize_rejects_unknown_kind():
    with pytest.raises(FormatError):
        huffman.deserialize_tree(b"\x07\x00\x00\x00\x01")


def test_decode_bitstream_example():
    _, tree, codebook = _build(EXAMPLE_DELTAS)
    bitstream, bit_count = huffman.encode(EXAMPLE_DELTAS, codebook)

    decoded = huffman.decode_bitstream(bitstream, bit_count, tree, EXAMPLE_DELTAS.size)

    assert np.array_equal(decoded, EXAMPLE_DELTAS)


def test_decode_bitstream_underrun_is_fatal():
    _, tree, codebook = _build(EXAMPLE_DELTAS)
    bitstream, bit_count = huffman.encode(EXAMPLE_DELTAS, codebook)

    with pytest.raises(FatalCodecError):
        huffman.decode_bitstream(bitstream, bit_count - 1, tree, EXAMPLE_DELTAS.size)


def test_decode_bitstream_leftover_bits():
    _, tree, codebook = _build(EXAMPLE_DELTAS)
    bitstream, bit_count = huffman.encode(EXAMPLE_DELTAS, codebook)

    with pytest.raises(FormatError):
        huffman.decode_bitstream(bitstream, bit_count, tree, EXAMPLE_DELTAS.size - 1)


def test_decode_bitstream_bit_count_past_end():
    _, tree, _ = _build(EXAMPLE_DELTAS)

    with pytest.raises(FormatError):
        huffman.decode_bitstream(b"\x00", 9, tree, 1)


def test_single_leaf_bitstream():
    values = np.full(5, 0.25, dtype=np.float32)
    _, tree, codebook = _build(values)
    bitstream, bit_count = huffman.encode(values, codebook)

    assert bit_count == 5
    assert bitstream == b"\x00"
    assert np.array_equal(huffman.decode_bitstream(bitstream, bit_count, tree, 5), values)

    with pytest.raises(FatalCodecError):
        huffman.decode_bitstream(b"\x08", 5, tree, 5)


def test_symbols_payload_round_trip():
    rng = np.random.default_rng(11)
    values = (rng.integers(-20, 20, size=300) / 4).astype(np.float32)

    payload = huffman.encode_symbols(values)

    assert np.array_equal(huffman.decode_symbols(payload, values.size), values)


def test_symbols_payload_rejects_bytes_after_tree():
    _, tree, codebook = _build(EXAMPLE_DELTAS)
    bitstream, bit_count = huffman.encode(EXAMPLE_DELTAS, codebook)
    tree_bytes = huffman.serialize_tree(tree) + b"\x00"

    payload = (
        struct.pack(">I", len(tree_bytes)) + tree_bytes
        + struct.pack(">II", bit_count, len(bitstream)) + bitstream
    )

    with pytest.raises(FormatError):
        huffman.decode_symbols(payload, EXAMPLE_DELTAS.size)


def _left_leaf_only_tree():
    """Internal root whose right child is the empty marker."""
    data = (
        b"\x01" + struct.pack(">i", 1)
        + b"\x02" + struct.pack(">i", 1) + struct.pack(">f", 1.0)
        + b"\x00"
    )
    tree, remainder = huffman.deserialize_tree(data)
    assert remainder == b""
    assert tree.right is None
    return tree


def test_assign_codes_depth_guard():
    tree = huffman.build_tree({10: 1, 20: 1, 30: 2})

    with pytest.raises(FatalCodecError):
        huffman.assign_codes(tree, 1)


def test_assign_codes_empty_branch():
    with pytest.raises(FatalCodecError):
        huffman.assign_codes(_left_leaf_only_tree(), 1)


def test_decode_bitstream_into_empty_branch():
    tree = _left_leaf_only_tree()

    assert huffman.decode_bitstream(b"\x00", 1, tree, 1).tolist() == [1.0]
    with pytest.raises(FatalCodecError):
        huffman.decode_bitstream(b"\x80", 1, tree, 1)


def test_decode_bitstream_empty_tree_with_symbols_pending():
    with pytest.raises(FatalCodecError):
        huffman.decode_bitstream(b"", 0, None, 1)

    assert huffman.decode_bitstream(b"", 0, None, 0).size == 0


def test_encode_in_several_chunks(monkeypatch):
    """Chunk boundaries that fall mid-byte produce the same bitstream."""
    _, _, codebook = _build(EXAMPLE_DELTAS)
    monkeypatch.setattr(huffman, "ENCODE_CHUNK_SYMBOLS", 3)

    bitstream, bit_count = huffman.encode(EXAMPLE_DELTAS, codebook)

    assert bit_count == 14
    assert bitstream == bytes([0b00010001, 0b11111100])


def test_encode_chunked_round_trip(monkeypatch):
    rng = np.random.default_rng(21)
    values = (rng.integers(-64, 64, size=5000) / 8).astype(np.float32)
    monkeypatch.setattr(huffman, "ENCODE_CHUNK_SYMBOLS", 777)

    _, tree, codebook = _build(values)
    bitstream, bit_count = huffman.encode(values, codebook)

    assert np.array_equal(huffman.decode_bitstream(bitstream, bit_count, tree, values.size), values)

"""
Huffman entropy coder for float32 delta symbols.

Covers the whole entropy path: frequency analysis, greedy tree construction,
code assignment, tree serialization and bitstream encode/decode. Symbols are
keyed by their uint32 bit pattern, so two deltas share a code only when they
are bit-identical (``0.0`` and ``-0.0`` are distinct symbols).

Serialized tree grammar (pre-order, big-endian):

    empty:    kind=0 (uint8)
    internal: kind=1 (uint8), weight (int32), left, right
    leaf:     kind=2 (uint8), weight (int32), value (float32)
"""

import heapq
import struct
import numpy as np
from typing import Dict, List, Optional, Tuple

from clouddelta.core.container import pack_huffman_payload, unpack_huffman_payload
from clouddelta.core.errors import FatalCodecError, FormatError, ShapeError

KIND_EMPTY = 0
KIND_INTERNAL = 1
KIND_LEAF = 2

INT32_MAX = 2**31 - 1
MAX_CODE_LENGTH = 64

# Symbols per vectorized pass in :func:`encode`
ENCODE_CHUNK_SYMBOLS = 1 << 16

_NODE_HEADER = struct.Struct(">Bi")
_LEAF_VALUE = struct.Struct(">I")

FrequencyTable = Dict[int, int]
Codebook = Dict[int, Tuple[int, int]]


class HuffmanNode:
    """
    Node of a Huffman tree.

    Leaves carry a symbol (uint32 bit pattern of a float32 delta); internal
    nodes carry two children whose weights sum to the node weight. A child
    may be ``None`` only in trees parsed from bytes that contain the empty
    marker.
    """

    __slots__ = ("weight", "symbol", "left", "right")

    def __init__(
        self,
        weight: int,
        symbol: Optional[int] = None,
        left: Optional["HuffmanNode"] = None,
        right: Optional["HuffmanNode"] = None
    ):
        self.weight = weight
        self.symbol = symbol
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None

    @property
    def value(self) -> float:
        """Leaf symbol as a float32 value."""
        return float(np.array([self.symbol], dtype=np.uint32).view(np.float32)[0])

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"HuffmanNode(weight={self.weight}, value={self.value!r})"
        return f"HuffmanNode(weight={self.weight}, left={self.left!r}, right={self.right!r})"


def to_symbols(values: np.ndarray) -> np.ndarray:
    """Returns the uint32 bit patterns of float32 values."""
    return np.ascontiguousarray(values, dtype=np.float32).view(np.uint32)


def from_symbols(symbols: np.ndarray) -> np.ndarray:
    """Returns float32 values for uint32 bit patterns."""
    return np.ascontiguousarray(symbols, dtype=np.uint32).view(np.float32)


def build_frequency_table(values: np.ndarray) -> FrequencyTable:
    """
    Counts occurrences of each distinct symbol.

    Args:
        values: float32 deltas (x-deltas followed by y-deltas)

    Returns:
        Mapping of symbol bit pattern to count, ordered by first occurrence
    """
    symbols = to_symbols(values)
    if symbols.size == 0:
        return {}

    unique, first_index, counts = np.unique(symbols, return_index=True, return_counts=True)
    order = np.argsort(first_index, kind="stable")

    return {int(unique[i]): int(counts[i]) for i in order}


def build_tree(frequency_table: FrequencyTable) -> Optional[HuffmanNode]:
    """
    Builds a Huffman tree by repeatedly merging the two lightest nodes.

    Heap entries are keyed by ``(weight, sequence)`` where ``sequence`` is the
    insertion order (table order for leaves, creation order for merged
    nodes), so equal weights always resolve the same way and identical
    tables always produce identical trees.

    Args:
        frequency_table: Output of :func:`build_frequency_table`

    Returns:
        Root node, a lone leaf when there is one distinct symbol, or ``None``
        for an empty table
    """
    if not frequency_table:
        return None

    heap = [
        (weight, sequence, HuffmanNode(weight, symbol=symbol))
        for sequence, (symbol, weight) in enumerate(frequency_table.items())
    ]
    heapq.heapify(heap)
    sequence = len(heap)

    while len(heap) > 1:
        left_weight, _, left = heapq.heappop(heap)
        right_weight, _, right = heapq.heappop(heap)
        weight = left_weight + right_weight
        heapq.heappush(heap, (weight, sequence, HuffmanNode(weight, left=left, right=right)))
        sequence += 1

    return heap[0][2]


def assign_codes(tree: Optional[HuffmanNode], distinct_symbols: int) -> Codebook:
    """
    Derives the codebook from a tree: 0 per left edge, 1 per right edge.

    Codes are accumulated as integers on an explicit stack. A tree that is a
    single leaf gets the one-bit code ``0``.

    Args:
        tree: Root node from :func:`build_tree`
        distinct_symbols: Number of distinct symbols; bounds the traversal depth

    Returns:
        Mapping of symbol to ``(code, length)``

    Raises:
        FatalCodecError: If the traversal goes deeper than ``distinct_symbols``
            or meets an empty branch
    """
    if tree is None:
        return {}
    if tree.is_leaf:
        return {tree.symbol: (0, 1)}

    codebook: Codebook = {}
    stack: List[Tuple[Optional[HuffmanNode], int, int]] = [(tree, 0, 0)]

    while stack:
        node, code, depth = stack.pop()
        if depth > distinct_symbols:
            raise FatalCodecError(
                f"Code assignment reached depth {depth} with only {distinct_symbols} distinct symbols"
            )
        if node is None:
            raise FatalCodecError("Code assignment met an empty branch")

        if node.is_leaf:
            codebook[node.symbol] = (code, depth)
            continue

        stack.append((node.right, (code << 1) | 1, depth + 1))
        stack.append((node.left, code << 1, depth + 1))

    return codebook


def encode(values: np.ndarray, codebook: Codebook) -> Tuple[bytes, int]:
    """
    Concatenates the codeword of every symbol in input order.

    Args:
        values: float32 deltas to encode
        codebook: Codebook built from the same population

    Returns:
        Tuple of (bitstream, bit_count)
        - bitstream: MSB-first bytes, zero-padded to a byte boundary
        - bit_count: Number of meaningful bits before padding

    Raises:
        FatalCodecError: If any symbol has no codeword
    """
    symbols = to_symbols(values)
    if symbols.size == 0:
        return b"", 0

    book_symbols = np.fromiter(codebook.keys(), dtype=np.uint32, count=len(codebook))
    book_codes = np.fromiter((c for c, _ in codebook.values()), dtype=np.uint64, count=len(codebook))
    book_lengths = np.fromiter((n for _, n in codebook.values()), dtype=np.int64, count=len(codebook))

    if book_symbols.size == 0:
        raise FatalCodecError("Cannot encode symbols with an empty codebook")
    if book_lengths.max() > MAX_CODE_LENGTH:
        raise FatalCodecError(f"Codeword longer than {MAX_CODE_LENGTH} bits")

    order = np.argsort(book_symbols)
    book_symbols = book_symbols[order]
    book_codes = book_codes[order]
    book_lengths = book_lengths[order]

    index = np.minimum(np.searchsorted(book_symbols, symbols), book_symbols.size - 1)
    missing = book_symbols[index] != symbols
    if missing.any():
        position = int(np.flatnonzero(missing)[0])
        raise FatalCodecError(
            f"Symbol {from_symbols(symbols[position:position + 1])[0]!r} at position {position} "
            "has no codeword"
        )

    lengths = book_lengths[index]
    ends = np.cumsum(lengths)
    total_bits = int(ends[-1])

    # One byte per output bit; per-bit index arithmetic stays bounded by the chunk
    bits = np.empty(total_bits, dtype=np.uint8)
    for start in range(0, symbols.size, ENCODE_CHUNK_SYMBOLS):
        stop = min(start + ENCODE_CHUNK_SYMBOLS, symbols.size)
        chunk_lengths = lengths[start:stop]
        first_bit = int(ends[start] - lengths[start])
        last_bit = int(ends[stop - 1])

        codes_per_bit = np.repeat(book_codes[index[start:stop]], chunk_lengths)
        # Bits still to come in the codeword after this one
        remaining = np.repeat(ends[start:stop], chunk_lengths) - np.arange(first_bit + 1, last_bit + 1)

        bits[first_bit:last_bit] = (codes_per_bit >> remaining.astype(np.uint64)) & np.uint64(1)

    return np.packbits(bits).tobytes(), total_bits


def serialize_tree(tree: Optional[HuffmanNode]) -> bytes:
    """
    Serializes a tree in pre-order (see module docstring for the grammar).

    Raises:
        ShapeError: If a node weight does not fit in int32
    """
    out = bytearray()
    stack: List[Optional[HuffmanNode]] = [tree]

    while stack:
        node = stack.pop()
        if node is None:
            out.append(KIND_EMPTY)
            continue
        if node.weight > INT32_MAX:
            raise ShapeError(f"Node weight {node.weight} exceeds the int32 weight field")

        if node.is_leaf:
            out += _NODE_HEADER.pack(KIND_LEAF, node.weight)
            out += _LEAF_VALUE.pack(node.symbol)
        else:
            out += _NODE_HEADER.pack(KIND_INTERNAL, node.weight)
            stack.append(node.right)
            stack.append(node.left)

    return bytes(out)


def _read_node(view: memoryview, offset: int) -> Tuple[Optional[HuffmanNode], int]:
    if offset >= len(view):
        raise FormatError("Tree bytes end before the tree is complete")

    kind = view[offset]
    if kind == KIND_EMPTY:
        return None, offset + 1
    if kind not in (KIND_INTERNAL, KIND_LEAF):
        raise FormatError(f"Unknown tree node kind {kind} at byte {offset}")

    if offset + _NODE_HEADER.size > len(view):
        raise FormatError("Tree bytes truncated inside a node header")
    _, weight = _NODE_HEADER.unpack_from(view, offset)
    offset += _NODE_HEADER.size

    if kind == KIND_INTERNAL:
        return HuffmanNode(weight), offset

    if offset + _LEAF_VALUE.size > len(view):
        raise FormatError("Tree bytes truncated inside a leaf value")
    (symbol,) = _LEAF_VALUE.unpack_from(view, offset)
    return HuffmanNode(weight, symbol=symbol), offset + _LEAF_VALUE.size


def deserialize_tree(data: bytes) -> Tuple[Optional[HuffmanNode], bytes]:
    """
    Parses a tree written by :func:`serialize_tree`.

    Parsing is iterative, so deeply nested input cannot exhaust the
    interpreter stack.

    Args:
        data: Bytes starting with a serialized tree

    Returns:
        Tuple of (tree, remainder) where remainder is the unparsed tail

    Raises:
        FormatError: On truncated bytes or an unknown node kind
    """
    view = memoryview(bytes(data))
    root, offset = _read_node(view, 0)

    # Internal nodes still waiting for children, with the number attached so far
    pending: List[List] = []
    if root is not None and not root.is_leaf:
        pending.append([root, 0])

    while pending:
        node, offset = _read_node(view, offset)

        parent = pending[-1]
        if parent[1] == 0:
            parent[0].left = node
            parent[1] = 1
        else:
            parent[0].right = node
            pending.pop()

        if node is not None and not node.is_leaf:
            pending.append([node, 0])

    return root, bytes(view[offset:])


def _flatten(tree: HuffmanNode) -> Tuple[List[int], List[int], List[int], List[bool]]:
    left: List[int] = []
    right: List[int] = []
    symbols: List[int] = []
    leaf: List[bool] = []

    nodes = [tree]
    i = 0
    while i < len(nodes):
        node = nodes[i]
        if node.is_leaf:
            left.append(-1)
            right.append(-1)
            symbols.append(node.symbol)
            leaf.append(True)
        else:
            for child, links in ((node.left, left), (node.right, right)):
                if child is None:
                    links.append(-1)
                else:
                    links.append(len(nodes))
                    nodes.append(child)
            symbols.append(0)
            leaf.append(False)
        i += 1

    return left, right, symbols, leaf


def decode_bitstream(
    bitstream: bytes,
    bit_count: int,
    tree: Optional[HuffmanNode],
    symbol_count: int
) -> np.ndarray:
    """
    Decodes exactly ``symbol_count`` symbols from the first ``bit_count`` bits.

    Walks from the root one bit per step (0 left, 1 right) and restarts at
    the root after every leaf. A tree that is a single leaf consumes one
    ``0`` bit per symbol.

    Args:
        bitstream: Padded bitstream bytes
        bit_count: Number of meaningful bits before padding
        tree: Decoding tree
        symbol_count: Number of symbols to produce

    Returns:
        float32 array of decoded deltas

    Raises:
        FatalCodecError: If the bits run out early or lead into an empty branch
        FormatError: If ``bit_count`` exceeds the bitstream or meaningful bits
            remain after the last symbol
    """
    if bit_count > len(bitstream) * 8:
        raise FormatError(
            f"Declared bit count {bit_count} exceeds bitstream of {len(bitstream)} bytes"
        )
    if symbol_count == 0:
        if bit_count:
            raise FormatError(f"{bit_count} meaningful bits left over with no symbols to decode")
        return np.empty(0, dtype=np.float32)
    if tree is None:
        raise FatalCodecError(f"Empty tree cannot produce {symbol_count} symbols")

    bits = np.unpackbits(np.frombuffer(bitstream, dtype=np.uint8), count=bit_count)

    if tree.is_leaf:
        if bit_count < symbol_count:
            raise FatalCodecError(
                f"Bitstream exhausted after {bit_count} of {symbol_count} symbols"
            )
        if bit_count > symbol_count:
            raise FormatError(
                f"{bit_count - symbol_count} meaningful bits left over after {symbol_count} symbols"
            )
        if bits.any():
            raise FatalCodecError("Bit 1 leads into an empty branch of a single-leaf tree")
        return from_symbols(np.full(symbol_count, tree.symbol, dtype=np.uint32))

    left, right, symbols, leaf = _flatten(tree)
    out = np.empty(symbol_count, dtype=np.uint32)
    produced = 0
    node = 0

    for position, bit in enumerate(bits.tolist()):
        node = right[node] if bit else left[node]
        if node < 0:
            raise FatalCodecError(f"Bit {position} leads into an empty branch")
        if leaf[node]:
            out[produced] = symbols[node]
            produced += 1
            node = 0
            if produced == symbol_count:
                if position + 1 != bit_count:
                    raise FormatError(
                        f"{bit_count - position - 1} meaningful bits left over after "
                        f"{symbol_count} symbols"
                    )
                return from_symbols(out)

    raise FatalCodecError(
        f"Bitstream exhausted after {produced} of {symbol_count} symbols"
    )


def encode_symbols(values: np.ndarray) -> bytes:
    """
    Huffman-encodes deltas into a complete payload (tree + bitstream).

    Args:
        values: float32 deltas, x-deltas followed by y-deltas

    Returns:
        Payload bytes in the Huffman payload layout
    """
    frequency_table = build_frequency_table(values)
    tree = build_tree(frequency_table)
    codebook = assign_codes(tree, len(frequency_table))
    bitstream, bit_count = encode(values, codebook)

    return pack_huffman_payload(serialize_tree(tree), bit_count, bitstream)


def decode_symbols(payload: bytes, count: int) -> np.ndarray:
    """
    Decodes ``count`` deltas from a payload written by :func:`encode_symbols`.

    Raises:
        FormatError: On malformed payload or tree bytes
        FatalCodecError: On bitstream corruption
    """
    tree_bytes, bit_count, bitstream = unpack_huffman_payload(payload)

    tree, remainder = deserialize_tree(tree_bytes)
    if remainder:
        raise FormatError(f"{len(remainder)} unexpected bytes after the serialized tree")

    return decode_bitstream(bitstream, bit_count, tree, count)

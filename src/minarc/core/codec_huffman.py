from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from minarc.core.codec_base import Codec
from minarc.errors import MalformedArchiveError

# Tree grammar (preorder): leaf = TAG_LEAF sym ; internal = TAG_INTERNAL left right
TAG_INTERNAL = 0
TAG_LEAF = 1

# 256 leaves (2 bytes each) + 255 internal nodes (1 byte each)
MAX_TREE_BYTES = 256 * 2 + 255

U32 = 4


# -------------------
# Huffman base structures
# -------------------
@dataclass
class HuffmanNode:
    freq: int
    symbol: Optional[int] = None  # 0-255 for leaves, None for internal nodes
    left: Optional["HuffmanNode"] = None
    right: Optional["HuffmanNode"] = None

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


def build_freq_table(data: bytes) -> List[int]:
    freq = [0] * 256
    for b in data:
        freq[b] += 1
    return freq


def build_huffman_tree(freq: List[int]) -> Optional[HuffmanNode]:
    """
    Merge the two lightest nodes until one root remains.

    Ties are broken by insertion order (leaves pushed in ascending symbol
    order), so the tree is deterministic for a given frequency table.
    A single distinct symbol yields a single-leaf tree.
    """
    heap: List[tuple[int, int, HuffmanNode]] = []
    counter = itertools.count()

    for sym, f in enumerate(freq):
        if f > 0:
            node = HuffmanNode(freq=f, symbol=sym)
            heapq.heappush(heap, (f, next(counter), node))

    if not heap:
        return None

    while len(heap) > 1:
        f1, _, n1 = heapq.heappop(heap)
        f2, _, n2 = heapq.heappop(heap)
        parent = HuffmanNode(freq=f1 + f2, symbol=None, left=n1, right=n2)
        heapq.heappush(heap, (parent.freq, next(counter), parent))

    return heap[0][2]


def build_code_table(root: HuffmanNode) -> Dict[int, List[int]]:
    codes: Dict[int, List[int]] = {}

    def dfs(node: HuffmanNode, path: List[int]) -> None:
        if node.is_leaf():
            # single-leaf tree: the root gets the one-bit code "0"
            codes[int(node.symbol)] = path.copy() if path else [0]
            return
        dfs(node.left, path + [0])
        dfs(node.right, path + [1])

    dfs(root, [])
    return codes


def encode_data(data: bytes, codes: Dict[int, List[int]]) -> bytes:
    """data -> bitstream, MSB-first, last byte zero-padded."""
    out_bytes = bytearray()
    current_byte = 0
    bit_count = 0

    for b in data:
        for bit in codes[b]:
            current_byte = (current_byte << 1) | bit
            bit_count += 1
            if bit_count == 8:
                out_bytes.append(current_byte)
                current_byte = 0
                bit_count = 0

    if bit_count > 0:
        current_byte <<= 8 - bit_count
        out_bytes.append(current_byte)

    return bytes(out_bytes)


def decode_bitstream(root: HuffmanNode, bitstream: bytes, n_symbols: int) -> bytes:
    """Decode exactly n_symbols; any bits left over are padding."""
    if n_symbols == 0:
        return b""

    out = bytearray()

    if root.is_leaf():
        # one bit per symbol, value irrelevant
        if len(bitstream) * 8 < n_symbols:
            raise MalformedArchiveError(
                f"huffman: bitstream too short for {n_symbols} symbols"
            )
        return bytes([int(root.symbol)]) * n_symbols

    node = root
    for byte in bitstream:
        for bit_index in range(8):
            bit = (byte >> (7 - bit_index)) & 1
            node = node.left if bit == 0 else node.right
            if node.is_leaf():
                out.append(int(node.symbol))
                node = root
                if len(out) == n_symbols:
                    return bytes(out)

    raise MalformedArchiveError(
        f"huffman: expected {n_symbols} symbols, bitstream ended after {len(out)}"
    )


# -------------------
# Tree (de)serialization
# -------------------
def serialize_tree(root: Optional[HuffmanNode]) -> bytes:
    out = bytearray()

    def walk(node: HuffmanNode) -> None:
        if node.is_leaf():
            out.append(TAG_LEAF)
            out.append(int(node.symbol))
            return
        out.append(TAG_INTERNAL)
        walk(node.left)
        walk(node.right)

    if root is not None:
        walk(root)
    return bytes(out)


def deserialize_tree(blob: bytes) -> Optional[HuffmanNode]:
    """Parse a preorder tree blob; the blob must be consumed exactly."""
    if not blob:
        return None
    if len(blob) > MAX_TREE_BYTES:
        raise MalformedArchiveError(f"huffman: tree too large ({len(blob)} bytes)")

    seen: set[int] = set()

    def parse(idx: int, depth: int) -> tuple[HuffmanNode, int]:
        if idx >= len(blob):
            raise MalformedArchiveError("huffman: tree truncated")
        tag = blob[idx]
        idx += 1
        if tag == TAG_LEAF:
            if idx >= len(blob):
                raise MalformedArchiveError("huffman: tree truncated (leaf symbol)")
            sym = blob[idx]
            if sym in seen:
                raise MalformedArchiveError(f"huffman: duplicate leaf symbol {sym:#04x}")
            seen.add(sym)
            return HuffmanNode(freq=0, symbol=sym), idx + 1
        if tag != TAG_INTERNAL:
            raise MalformedArchiveError(f"huffman: bad tree node tag {tag}")
        # 256 leaves cannot be deeper than 255 internal levels
        if depth >= 255:
            raise MalformedArchiveError("huffman: tree too deep")
        left, idx = parse(idx, depth + 1)
        right, idx = parse(idx, depth + 1)
        return HuffmanNode(freq=0, left=left, right=right), idx

    root, end = parse(0, 0)
    if end != len(blob):
        raise MalformedArchiveError(f"huffman: {len(blob) - end} trailing bytes in tree")
    return root


# -------------------
# Payload framing
# [TREE_LEN(u32)|TREE|ENC_LEN(u32)|ENC|N_SYMBOLS(u32)]
# -------------------
def pack_huffman_payload(tree: bytes, bitstream: bytes, n_symbols: int) -> bytes:
    if n_symbols > 0xFFFFFFFF or len(bitstream) > 0xFFFFFFFF:
        raise ValueError("huffman: input too large (u32 overflow)")
    out = bytearray()
    out += len(tree).to_bytes(U32, "big")
    out += tree
    out += len(bitstream).to_bytes(U32, "big")
    out += bitstream
    out += n_symbols.to_bytes(U32, "big")
    return bytes(out)


def unpack_huffman_payload(payload: bytes) -> Tuple[bytes, bytes, int]:
    """payload -> (tree_blob, bitstream, n_symbols), with bounds checks."""
    idx = 0
    if idx + U32 > len(payload):
        raise MalformedArchiveError("huffman: payload truncated (tree length)")
    tree_len = int.from_bytes(payload[idx : idx + U32], "big")
    idx += U32

    if idx + tree_len > len(payload):
        raise MalformedArchiveError("huffman: tree length exceeds payload")
    tree = payload[idx : idx + tree_len]
    idx += tree_len

    if idx + U32 > len(payload):
        raise MalformedArchiveError("huffman: payload truncated (encoded length)")
    enc_len = int.from_bytes(payload[idx : idx + U32], "big")
    idx += U32

    if idx + enc_len > len(payload):
        raise MalformedArchiveError("huffman: encoded length exceeds payload")
    bitstream = payload[idx : idx + enc_len]
    idx += enc_len

    if idx + U32 > len(payload):
        raise MalformedArchiveError("huffman: payload truncated (symbol count)")
    n_symbols = int.from_bytes(payload[idx : idx + U32], "big")
    idx += U32

    if idx != len(payload):
        raise MalformedArchiveError(f"huffman: {len(payload) - idx} trailing bytes after payload")

    return tree, bitstream, n_symbols


def huffman_compress_core(data: bytes) -> bytes:
    freq = build_freq_table(data)
    root = build_huffman_tree(freq)
    if root is None:
        return pack_huffman_payload(b"", b"", 0)
    codes = build_code_table(root)
    return pack_huffman_payload(serialize_tree(root), encode_data(data, codes), len(data))


def huffman_decompress_core(payload: bytes) -> bytes:
    tree, bitstream, n_symbols = unpack_huffman_payload(payload)
    root = deserialize_tree(tree)
    if root is None:
        if n_symbols:
            raise MalformedArchiveError("huffman: empty tree with non-zero symbol count")
        return b""
    return decode_bitstream(root, bitstream, n_symbols)


class CodecHuffman(Codec):
    """Static Huffman over bytes, tree shipped inside the payload."""

    codec_id: str = "huffman"

    def compress(self, data: bytes) -> bytes:
        return huffman_compress_core(bytes(data))

    def decompress(self, payload: bytes) -> bytes:
        return huffman_decompress_core(bytes(payload))

    def check(self, payload: bytes) -> None:
        tree, _bitstream, n_symbols = unpack_huffman_payload(bytes(payload))
        if deserialize_tree(tree) is None and n_symbols:
            raise MalformedArchiveError("huffman: empty tree with non-zero symbol count")

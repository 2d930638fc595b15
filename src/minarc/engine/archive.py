from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Tuple

from minarc.analyzer.stats import distinct_ngrams, longest_run
from minarc.core.codec_base import Codec
from minarc.core.codec_huffman import CodecHuffman
from minarc.core.codec_lzw import CodecLZW
from minarc.core.codec_rle import CodecRLE
from minarc.errors import MalformedArchiveError, UnsupportedMethodError, UsageError

# auto-select thresholds (part of the archive contract, do not tune)
RLE_MIN_LONGEST_RUN = 10  # strictly greater than this -> RLE


class Method(IntEnum):
    """Archive method tag. IMPORTANT: keep these values stable forever."""

    RLE = 0
    LZW = 1
    HUFFMAN = 2


# Closed dispatch table: one stateless codec per method.
CODECS: Dict[Method, Codec] = {
    Method.RLE: CodecRLE(),
    Method.LZW: CodecLZW(),
    Method.HUFFMAN: CodecHuffman(),
}

_NAME_TO_METHOD: Dict[str, Method] = {m.name.lower(): m for m in Method}


@dataclass(frozen=True)
class ArchiveRecord:
    method: Method
    payload: bytes


def method_from_name(name: str) -> Method:
    key = name.strip().lower()
    if key not in _NAME_TO_METHOD:
        raise UsageError(
            f"unknown method {name!r} (expected one of: {', '.join(_NAME_TO_METHOD)})"
        )
    return _NAME_TO_METHOD[key]


def method_from_tag(tag: int) -> Method:
    try:
        return Method(tag)
    except ValueError as err:
        raise UnsupportedMethodError(f"unsupported method tag: {tag}") from err


def get_codec(method: Method) -> Codec:
    return CODECS[method_from_tag(int(method))]


# -------------------
# Archive
# [TAG(1)|PAYLOAD(...)]  payload runs to end of buffer
# -------------------
def pack_archive(record: ArchiveRecord) -> bytes:
    return bytes([int(record.method)]) + bytes(record.payload)


def unpack_archive(blob: bytes) -> ArchiveRecord:
    if not blob:
        raise MalformedArchiveError("empty archive (missing method tag)")
    return ArchiveRecord(method=method_from_tag(blob[0]), payload=bytes(blob[1:]))


def compress_with_tag(data: bytes, method: Method) -> bytes:
    codec = get_codec(method)
    return pack_archive(ArchiveRecord(method=Method(method), payload=codec.compress(data)))


def decompress_tagged(archive: bytes) -> bytes:
    rec = unpack_archive(archive)
    return CODECS[rec.method].decompress(rec.payload)


def decompress_as(archive: bytes, method: Method) -> bytes:
    """Ignore the stored tag and decode the payload with an explicit method."""
    if not archive:
        raise MalformedArchiveError("empty archive (missing method tag)")
    return get_codec(method).decompress(bytes(archive[1:]))


def auto_select(data: bytes) -> Method:
    """
    Pick a method from input statistics, first match wins:
      1. longest run > 10                     -> RLE
      2. distinct 3-grams < len(data) // 2    -> LZW
      3. otherwise                            -> HUFFMAN
    """
    b = bytes(data)
    if longest_run(b) > RLE_MIN_LONGEST_RUN:
        return Method.RLE
    if distinct_ngrams(b) < len(b) // 2:
        return Method.LZW
    return Method.HUFFMAN


def compress_auto(data: bytes) -> Tuple[Method, bytes]:
    method = auto_select(data)
    return method, compress_with_tag(data, method)

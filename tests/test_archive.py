from __future__ import annotations

import random

import pytest

from minarc.analyzer.stats import distinct_ngrams, longest_run, stats_bytes
from minarc.engine.archive import (
    ArchiveRecord,
    Method,
    auto_select,
    compress_auto,
    compress_with_tag,
    decompress_as,
    decompress_tagged,
    method_from_name,
    pack_archive,
    unpack_archive,
)
from minarc.errors import MalformedArchiveError, UnsupportedMethodError, UsageError

pytestmark = pytest.mark.p0


SAMPLES = [
    b"",
    b"aaaaabbbbccccccdddddd",
    b"TOBEORNOTTOBEORTOBEORNOT",
    b"ABBCCCDDDDEEEEE",
    b"\xff\x00\xff\xff" * 50,
    bytes(range(256)),
]


@pytest.mark.parametrize("method", list(Method))
@pytest.mark.parametrize("data", SAMPLES)
def test_tagged_roundtrip(method: Method, data: bytes) -> None:
    blob = compress_with_tag(data, method)
    assert blob[0] == int(method)
    assert decompress_tagged(blob) == data


def test_method_tags_are_stable() -> None:
    assert (Method.RLE, Method.LZW, Method.HUFFMAN) == (0, 1, 2)


def test_archive_is_tag_plus_codec_payload() -> None:
    from minarc.core.codec_rle import CodecRLE

    data = b"a" * 300
    assert compress_with_tag(data, Method.RLE) == b"\x00" + CodecRLE().compress(data)


def test_pack_unpack_archive() -> None:
    rec = ArchiveRecord(method=Method.LZW, payload=b"\x00\x41")
    blob = pack_archive(rec)
    assert blob == b"\x01\x00\x41"
    assert unpack_archive(blob) == rec


def test_unsupported_method_tag() -> None:
    with pytest.raises(UnsupportedMethodError, match="tag: 3"):
        decompress_tagged(b"\x03abc")


def test_empty_archive_is_malformed() -> None:
    with pytest.raises(MalformedArchiveError, match="empty archive"):
        decompress_tagged(b"")


def test_compress_with_unknown_method() -> None:
    with pytest.raises(UnsupportedMethodError):
        compress_with_tag(b"abc", 7)  # type: ignore[arg-type]


# -------------------
# auto-select
# -------------------
def test_auto_select_long_run_picks_rle() -> None:
    data = b"xyz" + b"q" * 15 + b"abcdefghijklmnop"
    assert auto_select(data) == Method.RLE


def test_auto_select_run_threshold_is_strict() -> None:
    # runs of exactly 10 are not enough; the 3-gram rule decides instead
    data = b"aaaaaaaaaabbbbbbbbbbccccccccccdddddddddd"
    assert longest_run(data) == 10
    assert auto_select(data) == Method.LZW
    assert auto_select(b"a" * 11) == Method.RLE


def test_auto_select_small_vocabulary_picks_lzw() -> None:
    data = b"word word word phrase phrase phrase word word phrase"
    assert distinct_ngrams(data) < len(data) // 2
    assert auto_select(data) == Method.LZW


def test_auto_select_distinct_chars_pick_huffman() -> None:
    data = b"abcdefgABCDEFG1234567"
    assert distinct_ngrams(data) == 19
    assert auto_select(data) == Method.HUFFMAN


def test_auto_select_ngram_threshold_uses_integer_half() -> None:
    # 21 bytes -> half is 10: exactly 10 distinct 3-grams is not "less than"
    data = (b"abcdefghij" * 3)[:21]
    assert len(data) == 21
    assert distinct_ngrams(data) == 10
    assert auto_select(data) == Method.HUFFMAN


def test_auto_select_empty_input() -> None:
    assert auto_select(b"") == Method.HUFFMAN


def test_auto_random_binary_end_to_end() -> None:
    data = random.Random(42).randbytes(100)
    method, blob = compress_auto(data)
    assert blob[0] == int(method)
    assert decompress_tagged(blob) == data


@pytest.mark.parametrize("method", [Method.LZW, Method.HUFFMAN])
def test_truncated_archive_is_malformed(method: Method) -> None:
    data = random.Random(42).randbytes(100)
    blob = compress_with_tag(data, method)
    with pytest.raises(MalformedArchiveError):
        decompress_tagged(blob[:-3])


# -------------------
# supplemented helpers
# -------------------
def test_decompress_as_ignores_stored_tag() -> None:
    data = b"TOBEORNOTTOBEORTOBEORNOT"
    blob = compress_with_tag(data, Method.LZW)
    forged = b"\x02" + blob[1:]
    assert decompress_as(forged, Method.LZW) == data
    with pytest.raises(MalformedArchiveError):
        decompress_as(b"", Method.LZW)


@pytest.mark.parametrize(
    "name, method",
    [("rle", Method.RLE), ("LZW", Method.LZW), (" Huffman ", Method.HUFFMAN)],
)
def test_method_from_name(name: str, method: Method) -> None:
    assert method_from_name(name) == method


def test_method_from_name_unknown() -> None:
    with pytest.raises(UsageError, match="unknown method"):
        method_from_name("bzip2")


def test_stats_bytes() -> None:
    st = stats_bytes(b"aaab")
    assert st.size == 4
    assert st.longest_run == 3
    assert st.distinct_ngrams == 2
    assert st.distinct_bytes == 2

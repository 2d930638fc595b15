from __future__ import annotations

from minarc.core.codec_base import Codec
from minarc.errors import MalformedArchiveError

FLAG = 0xFF
MIN_RUN = 4  # runs shorter than this stay literal (except FLAG itself)
MAX_RUN = 0xFF  # count is a single byte


def _run_length(data: bytes, i: int) -> int:
    value = data[i]
    n = 1
    end = min(len(data), i + MAX_RUN)
    while i + n < end and data[i + n] == value:
        n += 1
    return n


class CodecRLE(Codec):
    """
    Byte-level run-length codec.

    Payload: a sequence of items, each one either
      - a literal byte (any value except FLAG)
      - a token FLAG, value, count  (count 1..255)

    Runs of 4..255 identical bytes become one token; longer runs are split
    into consecutive tokens. The FLAG value is always tokenized, even as a
    single byte (FF FF 01), so a literal FLAG never appears in the payload.
    """

    codec_id: str = "rle"

    def compress(self, data: bytes) -> bytes:
        b = bytes(data)
        out = bytearray()
        i = 0
        while i < len(b):
            run = _run_length(b, i)
            value = b[i]
            if run >= MIN_RUN or value == FLAG:
                out.append(FLAG)
                out.append(value)
                out.append(run)
                i += run
            else:
                out.append(value)
                i += 1
        return bytes(out)

    def decompress(self, payload: bytes) -> bytes:
        b = bytes(payload)
        out = bytearray()
        i = 0
        while i < len(b):
            if b[i] != FLAG:
                out.append(b[i])
                i += 1
                continue
            if i + 2 >= len(b):
                raise MalformedArchiveError(f"rle: truncated run token at offset {i}")
            value = b[i + 1]
            count = b[i + 2]
            if count == 0:
                raise MalformedArchiveError(f"rle: zero run count at offset {i}")
            out += bytes([value]) * count
            i += 3
        return bytes(out)

    def check(self, payload: bytes) -> None:
        b = bytes(payload)
        i = 0
        while i < len(b):
            if b[i] != FLAG:
                i += 1
                continue
            if i + 2 >= len(b):
                raise MalformedArchiveError(f"rle: truncated run token at offset {i}")
            if b[i + 2] == 0:
                raise MalformedArchiveError(f"rle: zero run count at offset {i}")
            i += 3

from __future__ import annotations

from minarc.core.codec_base import Codec
from minarc.errors import InvalidCodeError, MalformedArchiveError

CODE_BYTES = 2
BASE_CODES = 256
MAX_CODES = 1 << (8 * CODE_BYTES)  # 65536: every code must fit in u16


def _pack_codes(codes: list[int]) -> bytes:
    out = bytearray()
    for code in codes:
        out += code.to_bytes(CODE_BYTES, "big")
    return bytes(out)


def _unpack_codes(payload: bytes) -> list[int]:
    if len(payload) % CODE_BYTES:
        raise MalformedArchiveError(
            f"lzw: payload length {len(payload)} is not a multiple of {CODE_BYTES}"
        )
    return [
        int.from_bytes(payload[i : i + CODE_BYTES], "big")
        for i in range(0, len(payload), CODE_BYTES)
    ]


def lzw_encode(data: bytes) -> list[int]:
    """
    Classic LZW over bytes -> list of codes.

    Dictionary policy "freeze": once all 65536 codes are assigned, no new
    entries are added and the existing table keeps being used.
    """
    table: dict[bytes, int] = {bytes([i]): i for i in range(BASE_CODES)}
    codes: list[int] = []
    w = b""

    for c in data:
        wc = w + bytes([c])
        if wc in table:
            w = wc
            continue
        codes.append(table[w])
        if len(table) < MAX_CODES:
            table[wc] = len(table)
        w = bytes([c])

    if w:
        codes.append(table[w])
    return codes


def lzw_decode(codes: list[int]) -> bytes:
    """Inverse of lzw_encode; grows the table in lockstep with the encoder."""
    if not codes:
        return b""

    table: list[bytes] = [bytes([i]) for i in range(BASE_CODES)]

    first = codes[0]
    if first >= BASE_CODES:
        raise InvalidCodeError(f"lzw: first code must be a literal byte, got {first}")

    w = table[first]
    out = bytearray(w)

    for pos, k in enumerate(codes[1:], start=1):
        if k < len(table):
            entry = table[k]
        elif k == len(table) and len(table) < MAX_CODES:
            # code defined by this very step (cScSc case)
            entry = w + w[:1]
        else:
            raise InvalidCodeError(f"lzw: unknown code {k} at position {pos}")
        out += entry
        if len(table) < MAX_CODES:
            table.append(w + entry[:1])
        w = entry

    return bytes(out)


class CodecLZW(Codec):
    """
    Dictionary codec (LZW) with fixed 16-bit big-endian codes.

    Payload: code(u16) * N, no header; the decoder consumes to end of buffer.
    """

    codec_id: str = "lzw"

    def compress(self, data: bytes) -> bytes:
        return _pack_codes(lzw_encode(bytes(data)))

    def decompress(self, payload: bytes) -> bytes:
        return lzw_decode(_unpack_codes(bytes(payload)))

    def check(self, payload: bytes) -> None:
        codes = _unpack_codes(bytes(payload))
        if codes and codes[0] >= BASE_CODES:
            raise InvalidCodeError(f"lzw: first code must be a literal byte, got {codes[0]}")

"""Verification helpers.

  - light (default): method tag + payload framing, no full decode
  - full: decode the whole payload
  - original: full decode, then compare against the original bytes

Policy: light by default, --full decodes everything.
"""

from __future__ import annotations

from pathlib import Path

from minarc.engine.archive import CODECS, ArchiveRecord, unpack_archive
from minarc.errors import MalformedArchiveError, RoundtripMismatch


def verify_archive_bytes(
    blob: bytes, *, full: bool = False, original: bytes | None = None
) -> ArchiveRecord:
    rec = unpack_archive(blob)
    codec = CODECS[rec.method]

    if not full and original is None:
        codec.check(rec.payload)
        return rec

    data = codec.decompress(rec.payload)
    if original is not None and data != bytes(original):
        raise RoundtripMismatch(
            f"decoded {len(data)} bytes differ from original ({len(original)} bytes)"
        )
    return rec


def verify_archive_file(
    path: Path, *, full: bool = False, original: Path | None = None
) -> ArchiveRecord:
    p = Path(path)
    if not p.is_file():
        raise MalformedArchiveError(f"archive not found: {p}")
    orig_b = None
    if original is not None:
        orig_b = Path(original).read_bytes()
    return verify_archive_bytes(p.read_bytes(), full=full, original=orig_b)

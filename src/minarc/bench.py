"""Codec benchmark.

Compresses one buffer with every archive method plus two reference
baselines (zlib, zstd) and reports sizes, ratios and best-of timings.
Baselines are not archive methods; they only give the numbers a scale.
"""

from __future__ import annotations

import time
import zlib
from collections.abc import Callable
from dataclasses import asdict
from typing import Any

import zstandard as zstd

from minarc.analyzer.stats import stats_bytes
from minarc.engine.archive import Method, auto_select, compress_with_tag, decompress_tagged

ZLIB_LEVEL = 9
ZSTD_LEVEL = 19


def _zstd_compress(data: bytes) -> bytes:
    return zstd.ZstdCompressor(level=ZSTD_LEVEL).compress(data)


def _zstd_decompress(comp: bytes) -> bytes:
    return zstd.ZstdDecompressor().decompress(comp)


def _best_of(fn: Callable[[], Any], iters: int) -> tuple[Any, float]:
    best = float("inf")
    out = None
    for _ in range(max(1, iters)):
        t0 = time.perf_counter()
        out = fn()
        best = min(best, time.perf_counter() - t0)
    return out, best


def _row(
    name: str,
    data: bytes,
    enc: Callable[[bytes], bytes],
    dec: Callable[[bytes], bytes],
    iters: int,
) -> dict[str, Any]:
    comp, t_enc = _best_of(lambda: enc(data), iters)
    back, t_dec = _best_of(lambda: dec(comp), iters)
    n = len(data)
    return {
        "codec": name,
        "in_size": n,
        "out_size": len(comp),
        "ratio": (len(comp) / n) if n else 0.0,
        "times_sec": {"encode": t_enc, "decode": t_dec},
        "roundtrip_ok": back == data,
    }


def bench_bytes(data: bytes, *, iters: int = 1) -> list[dict[str, Any]]:
    """One row per archive method, then the zlib and zstd baselines."""
    b = bytes(data)
    rows: list[dict[str, Any]] = []
    for m in Method:
        rows.append(
            _row(
                m.name.lower(),
                b,
                lambda x, m=m: compress_with_tag(x, m),
                decompress_tagged,
                iters,
            )
        )
    rows.append(_row("zlib", b, lambda x: zlib.compress(x, ZLIB_LEVEL), zlib.decompress, iters))
    rows.append(_row("zstd", b, _zstd_compress, _zstd_decompress, iters))
    return rows


def bench_summary(data: bytes, rows: list[dict[str, Any]]) -> dict[str, Any]:
    ours = [r for r in rows if r["codec"] in {m.name.lower() for m in Method}]
    best = min(ours, key=lambda r: r["out_size"]) if ours else None
    return {
        "schema": "minarc.bench.v1",
        "in_size": len(data),
        "auto_method": auto_select(data).name.lower(),
        "stats": asdict(stats_bytes(data)),
        "best_method": best["codec"] if best else None,
        "all_roundtrip_ok": all(r["roundtrip_ok"] for r in rows),
    }

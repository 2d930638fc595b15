#!/usr/bin/env python3
"""Codec benchmark over a set of files or a directory tree.

Runs every archive method plus zlib/zstd baselines on each file and prints
one JSON row per (file, codec), then a summary row.

Usage example:
  python tools/bench_codecs.py /path/to/corpus --iters 3

Notes:
- Uses internal APIs (no subprocess). Run inside repo venv.
- Files larger than --max-bytes are skipped (pure-Python codecs are slow).
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any


def _iter_inputs(paths: list[Path]) -> list[Path]:
    out: list[Path] = []
    for p in paths:
        if p.is_dir():
            out.extend(sorted(q for q in p.rglob("*") if q.is_file()))
        elif p.is_file():
            out.append(p)
    return out


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="bench_codecs.py", description="minarc codec benchmark")
    ap.add_argument("inputs", nargs="+", type=Path)
    ap.add_argument("--iters", type=int, default=3)
    ap.add_argument("--max-bytes", type=int, default=4 * 1024 * 1024)
    ns = ap.parse_args(argv)

    from minarc.bench import bench_bytes, bench_summary

    files = _iter_inputs(ns.inputs)
    if not files:
        raise SystemExit("no input files")

    totals: dict[str, dict[str, Any]] = {}
    for p in files:
        data = p.read_bytes()
        if len(data) > int(ns.max_bytes):
            print(json.dumps({"path": str(p), "skipped": "too large", "size": len(data)}))
            continue
        rows = bench_bytes(data, iters=int(ns.iters))
        for row in rows:
            print(json.dumps({"path": str(p), **row}, ensure_ascii=False))
            t = totals.setdefault(row["codec"], {"in_size": 0, "out_size": 0, "roundtrip_ok": True})
            t["in_size"] += row["in_size"]
            t["out_size"] += row["out_size"]
            t["roundtrip_ok"] = t["roundtrip_ok"] and row["roundtrip_ok"]
        print(json.dumps({"path": str(p), **bench_summary(data, rows)}, ensure_ascii=False))
        if not all(r["roundtrip_ok"] for r in rows):
            raise SystemExit(f"roundtrip mismatch on {p}")

    summary = {
        "schema": "minarc.bench_codecs.v1",
        "files": len(files),
        "totals": {
            k: {**v, "ratio": (v["out_size"] / v["in_size"]) if v["in_size"] else 0.0}
            for k, v in totals.items()
        },
    }
    print(json.dumps(summary, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

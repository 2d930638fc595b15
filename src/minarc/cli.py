"""minarc CLI.

This is the stable CLI entrypoint (console-script: ``minarc``).

UX policy:
  - Archives are self-describing: decompress reads the method tag.
  - ``--method`` on decompress forces a codec (ignores the stored tag).
  - Status goes to stdout, errors to stderr as ``[minarc] ...``.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from minarc.errors import MinarcError, RoundtripMismatch
from minarc.profile_spec import METHOD_AUTO, ProfileSpecError, ProfileV1, load_profile

METHOD_CHOICES = ["auto", "rle", "lzw", "huffman"]


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _print_stats(
    input_path: Path, output_path: Path, method_name: str, in_size: int, out_size: int
) -> None:
    print("=== minarc archive ===")
    print(f"Method         : {method_name}")
    print(f"Input          : {input_path} ({in_size} bytes)")
    print(f"Archive        : {output_path} ({out_size} bytes)")
    if in_size:
        print(f"Ratio          : {out_size / in_size:.3f} (1.0 = no compression)")
    else:
        print("Ratio          : n/a (empty input)")
    print("======================")


def compress_file(input_path: Path, output_path: Path, profile: ProfileV1) -> str:
    """Whole-file compress. Returns the method name actually used."""
    from minarc.engine.archive import compress_with_tag, decompress_tagged

    data = Path(input_path).read_bytes()
    method = profile.resolve_method(data)
    blob = compress_with_tag(data, method)
    if profile.verify and decompress_tagged(blob) != data:
        raise RoundtripMismatch(f"roundtrip check failed for {input_path} ({method.name})")
    Path(output_path).write_bytes(blob)
    _print_stats(input_path, output_path, method.name, len(data), len(blob))
    return method.name


def decompress_file(input_path: Path, output_path: Path, method_name: str = METHOD_AUTO) -> None:
    from minarc.engine.archive import decompress_as, decompress_tagged, method_from_name

    blob = Path(input_path).read_bytes()
    if method_name == METHOD_AUTO:
        data = decompress_tagged(blob)
        how = "method from tag"
    else:
        method = method_from_name(method_name)
        data = decompress_as(blob, method)
        how = f"forced {method.name}"
    Path(output_path).write_bytes(data)
    print(f"Decompressed {input_path} -> {output_path} ({len(data)} bytes, {how})")


def _cmd_compress(ns: argparse.Namespace) -> int:
    if ns.profile is not None:
        profile = load_profile(str(ns.profile))
    else:
        profile = ProfileV1(name="cli", method=ns.method)
    if ns.verify:
        profile = ProfileV1(name=profile.name, method=profile.method, verify=True)
    compress_file(ns.input, ns.output, profile)
    return 0


def _cmd_verify(ns: argparse.Namespace) -> int:
    from minarc.verify import verify_archive_file

    verify_archive_file(ns.input, full=bool(ns.full), original=ns.original)
    print("OK")
    return 0


def _cmd_info(ns: argparse.Namespace) -> int:
    from minarc.engine.archive import unpack_archive

    blob = Path(ns.input).read_bytes()
    rec = unpack_archive(blob)
    info = {
        "path": str(ns.input),
        "method": rec.method.name.lower(),
        "tag": int(rec.method),
        "archive_size": len(blob),
        "payload_size": len(rec.payload),
    }
    print(json.dumps(info, ensure_ascii=False))
    return 0


def _cmd_profile_validate(ns: argparse.Namespace) -> int:
    # load is the validation
    load_profile(str(ns.profile))
    print("OK")
    return 0


def _cmd_bench(ns: argparse.Namespace) -> int:
    from minarc.bench import bench_bytes, bench_summary

    for p in ns.inputs:
        data = Path(p).read_bytes()
        rows = bench_bytes(data, iters=int(ns.iters))
        for row in rows:
            print(json.dumps({"path": str(p), **row}, ensure_ascii=False))
        print(json.dumps({"path": str(p), **bench_summary(data, rows)}, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="minarc", description="minarc: RLE / LZW / Huffman archiver")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_c = sub.add_parser("compress", help="Compress a file into a tagged archive")
    p_c.add_argument("input", type=Path)
    p_c.add_argument("output", type=Path)
    p_c.add_argument(
        "--method",
        default=METHOD_AUTO,
        type=str.lower,
        choices=METHOD_CHOICES,
        help="Codec to use (default: auto-select from input statistics)",
    )
    p_c.add_argument(
        "--profile",
        default=None,
        help=(
            "Compression profile (JSON). Use '@file.json' to load from file, or pass JSON inline. "
            "When set, --method is ignored."
        ),
    )
    p_c.add_argument("--verify", action="store_true", help="Decode after compress and compare")
    _add_common_args(p_c)

    p_d = sub.add_parser("decompress", help="Restore a file from an archive")
    p_d.add_argument("input", type=Path)
    p_d.add_argument("output", type=Path)
    p_d.add_argument(
        "--method",
        default=METHOD_AUTO,
        type=str.lower,
        choices=METHOD_CHOICES,
        help="Force a codec instead of reading the method tag (default: auto)",
    )
    _add_common_args(p_d)

    p_v = sub.add_parser("verify", help="Verify an archive")
    p_v.add_argument("input", type=Path)
    p_v.add_argument("--full", action="store_true", help="Decode the whole payload")
    p_v.add_argument(
        "--original", type=Path, default=None, help="Compare decoded bytes against this file"
    )
    _add_common_args(p_v)

    p_i = sub.add_parser("info", help="Show archive method and sizes (JSON)")
    p_i.add_argument("input", type=Path)
    _add_common_args(p_i)

    p_pv = sub.add_parser("profile-validate", help="Validate a compression profile (v1)")
    p_pv.add_argument("profile", help="Profile JSON (@file.json or inline JSON)")
    _add_common_args(p_pv)

    p_b = sub.add_parser("bench", help="Benchmark all methods (plus zlib/zstd baselines)")
    p_b.add_argument("inputs", nargs="+", type=Path)
    p_b.add_argument("--iters", type=int, default=1)
    _add_common_args(p_b)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "compress":
            return _cmd_compress(ns)
        if ns.cmd == "decompress":
            decompress_file(ns.input, ns.output, ns.method)
            return 0
        if ns.cmd == "verify":
            return _cmd_verify(ns)
        if ns.cmd == "info":
            return _cmd_info(ns)
        if ns.cmd == "profile-validate":
            return _cmd_profile_validate(ns)
        if ns.cmd == "bench":
            return _cmd_bench(ns)
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except ProfileSpecError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[minarc] {e}", file=sys.stderr)
        return 2
    except MinarcError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[minarc] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", 10) or 10)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[minarc] error: {e}", file=sys.stderr)
        return 10


if __name__ == "__main__":
    raise SystemExit(main())

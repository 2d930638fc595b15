#!/usr/bin/env python3
"""Generate docs/exit_codes.md from src/minarc/errors.py (single source of truth).

``--check`` exits 1 when the file on disk is missing or stale (for CI).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO = Path(__file__).resolve().parents[1]
DEFAULT_OUT = REPO / "docs" / "exit_codes.md"


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Render the minarc exit-code table as markdown")
    ap.add_argument("--out", type=Path, default=DEFAULT_OUT)
    ap.add_argument("--check", action="store_true", help="Do not write; fail if --out is stale")
    ns = ap.parse_args(argv)

    src = str(REPO / "src")
    if src not in sys.path:
        sys.path.insert(0, src)
    from minarc import errors  # noqa: E402

    md = errors.render_exit_codes_markdown()
    out: Path = ns.out

    if ns.check:
        current = out.read_text(encoding="utf-8") if out.is_file() else None
        if current != md:
            print(f"[minarc] {out} is out of date (run scripts/gen_exit_codes_md.py)", file=sys.stderr)
            return 1
        print(f"[minarc] {out} up to date")
        return 0

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(md, encoding="utf-8")
    print(f"[minarc] wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Typed errors for minarc.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- The CLI maps errors to stable exit codes (see EXIT_CODE_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_UNSUPPORTED_METHOD = 11
EXIT_MALFORMED_ARCHIVE = 12
EXIT_INVALID_CODE = 13
EXIT_ROUNDTRIP_MISMATCH = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid profile, etc.)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (I/O error, unexpected error, etc.)"),
    ExitCodeInfo(EXIT_UNSUPPORTED_METHOD, "UNSUPPORTED_METHOD", "Archive method tag is not 0, 1 or 2"),
    ExitCodeInfo(EXIT_MALFORMED_ARCHIVE, "MALFORMED_ARCHIVE", "Truncated or inconsistent payload"),
    ExitCodeInfo(EXIT_INVALID_CODE, "INVALID_CODE", "Dictionary payload references an unknown code"),
    ExitCodeInfo(
        EXIT_ROUNDTRIP_MISMATCH, "ROUNDTRIP_MISMATCH", "Decoded bytes differ from the original"
    ),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE. Do not edit manually.\n")
    lines.append("> Source of truth: `src/minarc/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- All library errors extend `MinarcError` and carry an `exit_code`.\n")
    lines.append("- `InvalidCodeError` is also a `MalformedArchiveError`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class MinarcError(Exception):
    """Base error for minarc."""

    exit_code: int = EXIT_GENERIC


class UsageError(MinarcError):
    exit_code = EXIT_USAGE


class MalformedArchiveError(MinarcError):
    exit_code = EXIT_MALFORMED_ARCHIVE


class InvalidCodeError(MalformedArchiveError):
    exit_code = EXIT_INVALID_CODE


class UnsupportedMethodError(MinarcError):
    exit_code = EXIT_UNSUPPORTED_METHOD


class RoundtripMismatch(MinarcError):
    exit_code = EXIT_ROUNDTRIP_MISMATCH

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from minarc.cli import main

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def _run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    """Run the minarc CLI through a python -c wrapper.

    This avoids assuming the console-script entrypoint is installed.
    """
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        [str(SRC_DIR)] + ([env["PYTHONPATH"]] if env.get("PYTHONPATH") else [])
    )
    cmd = [sys.executable, "-c", "from minarc.cli import main; raise SystemExit(main())", *args]
    return subprocess.run(cmd, text=True, capture_output=True, env=env)


def test_cli_subprocess_roundtrip_auto(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    out = tmp_path / "out.mrc"
    back = tmp_path / "back.txt"

    data = "word word word phrase phrase phrase word word phrase"
    inp.write_text(data, encoding="utf-8")

    r = _run_cli("compress", str(inp), str(out))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "Method         : LZW" in r.stdout

    r = _run_cli("decompress", str(out), str(back))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert back.read_text(encoding="utf-8") == data


@pytest.mark.parametrize("method", ["rle", "lzw", "huffman", "HUFFMAN"])
def test_cli_roundtrip_explicit_method(tmp_path: Path, method: str, capsys) -> None:
    inp = tmp_path / "in.bin"
    out = tmp_path / "out.mrc"
    back = tmp_path / "back.bin"
    data = b"aaaaabbbbccccccdddddd\xff\x00" * 10
    inp.write_bytes(data)

    assert main(["compress", str(inp), str(out), "--method", method, "--verify"]) == 0
    assert out.read_bytes()[0] == {"rle": 0, "lzw": 1, "huffman": 2}[method.lower()]

    assert main(["decompress", str(out), str(back)]) == 0
    assert back.read_bytes() == data

    # forcing the same method must give the same bytes
    back2 = tmp_path / "back2.bin"
    assert main(["decompress", str(out), str(back2), "--method", method]) == 0
    assert back2.read_bytes() == data

    stdout = capsys.readouterr().out
    assert "=== minarc archive ===" in stdout


def test_cli_verify_and_info(tmp_path: Path, capsys) -> None:
    inp = tmp_path / "in.txt"
    out = tmp_path / "out.mrc"
    inp.write_bytes(b"abcdefgABCDEFG1234567")

    assert main(["compress", str(inp), str(out)]) == 0
    capsys.readouterr()

    assert main(["verify", str(out), "--full", "--original", str(inp)]) == 0
    assert "OK" in capsys.readouterr().out

    assert main(["info", str(out)]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["method"] == "huffman"
    assert info["tag"] == 2
    assert info["archive_size"] == info["payload_size"] + 1


def test_cli_profile_inline(tmp_path: Path, capsys) -> None:
    inp = tmp_path / "in.txt"
    out = tmp_path / "out.mrc"
    inp.write_bytes(b"q" * 100)
    prof = json.dumps({"spec": "minarc.profile.v1", "method": "huffman", "verify": True})

    assert main(["profile-validate", prof]) == 0
    assert "OK" in capsys.readouterr().out

    # --profile wins over --method
    assert main(["compress", str(inp), str(out), "--method", "rle", "--profile", prof]) == 0
    assert out.read_bytes()[0] == 2


def test_cli_bad_profile_exit_2(capsys) -> None:
    assert main(["profile-validate", "{}"]) == 2
    assert "[minarc]" in capsys.readouterr().err


def test_cli_malformed_archive_exit_codes(tmp_path: Path, capsys) -> None:
    bad_tag = tmp_path / "bad_tag.mrc"
    bad_tag.write_bytes(b"\x07abc")
    assert main(["decompress", str(bad_tag), str(tmp_path / "x")]) == 11

    trunc = tmp_path / "trunc.mrc"
    trunc.write_bytes(b"\x02\x00\x00")
    assert main(["verify", str(trunc)]) == 12

    bad_code = tmp_path / "bad_code.mrc"
    bad_code.write_bytes(b"\x01" + bytes.fromhex("00410300"))
    assert main(["verify", str(bad_code), "--full"]) == 13

    err = capsys.readouterr().err
    assert err.count("[minarc]") == 3


def test_cli_roundtrip_mismatch_exit_14(tmp_path: Path, capsys) -> None:
    inp = tmp_path / "in.txt"
    other = tmp_path / "other.txt"
    out = tmp_path / "out.mrc"
    inp.write_bytes(b"hello hello hello")
    other.write_bytes(b"something else")
    assert main(["compress", str(inp), str(out)]) == 0
    assert main(["verify", str(out), "--original", str(other)]) == 14


def test_cli_missing_input_generic_exit(tmp_path: Path, capsys) -> None:
    assert main(["compress", str(tmp_path / "nope"), str(tmp_path / "out")]) == 10
    assert "[minarc] error:" in capsys.readouterr().err


def test_cli_debug_reraises(tmp_path: Path) -> None:
    from minarc.errors import UnsupportedMethodError

    bad = tmp_path / "bad.mrc"
    bad.write_bytes(b"\x05")
    with pytest.raises(UnsupportedMethodError):
        main(["decompress", str(bad), str(tmp_path / "x"), "--debug"])


def test_cli_unknown_method_is_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as ei:
        main(["compress", str(tmp_path / "a"), str(tmp_path / "b"), "--method", "bzip2"])
    assert ei.value.code == 2

import json
import os
import subprocess
import sys
from pathlib import Path

from click.testing import CliRunner

from zs_core.protocol import U32_MAX, LayoutProfile
from zs_write import cli

REPO = Path(__file__).resolve().parents[1]


def run(args, stdin=None):
    env = dict(os.environ)
    env["PYTHONPATH"] = str(REPO / "src") + os.pathsep + env.get("PYTHONPATH", "")
    return subprocess.run(
        [sys.executable, "-m", "zs_write.cli", *args],
        cwd=REPO, env=env, input=stdin, check=False, capture_output=True,
    )


def test_text_payload_json_result(tmp_path, parse):
    out = tmp_path / "cli.zs"
    r = run([str(out), "--text", "hello", "--timestamp", "2026-01-01T00:00:00Z",
             "--host", "h1", "--user", "u1", "--json"])
    assert r.returncode == 0, r.stderr

    result = json.loads(r.stdout)
    c = parse(out)
    assert result["payload_length"] == 5
    assert result["file_size"] == len(c["raw"])
    info = json.loads(c["metadata"])["build-info"]
    assert info == {"host": "h1", "version": "zs 0.10.0", "user": "u1",
                    "time": "2026-01-01T00:00:00.000000Z"}


def test_source_file_and_layout(tmp_path, parse):
    src = tmp_path / "in.bin"
    src.write_bytes(b"\x00\xffbinary")
    out = tmp_path / "out.zs"
    r = run([str(out), str(src), "--layout", "v2"])
    assert r.returncode == 0, r.stderr
    assert b"PASS:" in r.stdout

    c = parse(out)
    assert c["payload"] == b"\x00\xffbinary"
    assert c["block_length"] == len(b"\x00\xffbinary") + 1


def test_stdin_payload(tmp_path, parse):
    out = tmp_path / "stdin.zs"
    r = run([str(out)], stdin=b"from stdin")
    assert r.returncode == 0, r.stderr
    assert parse(out)["payload"] == b"from stdin"


def test_fatal_on_missing_directory(tmp_path):
    r = run([str(tmp_path / "missing" / "x.zs"), "--text", "hello"])
    assert r.returncode == 1
    assert r.stderr.decode().startswith("FATAL: E_WRITE_IO")


def test_fatal_on_conflicting_payload(tmp_path):
    src = tmp_path / "in.txt"
    src.write_text("a")
    r = run([str(tmp_path / "x.zs"), str(src), "--text", "b"])
    assert r.returncode == 1
    assert b"E_PAYLOAD_CONFLICT" in r.stderr
    assert not (tmp_path / "x.zs").exists()


def test_fatal_on_bad_timestamp(tmp_path):
    r = run([str(tmp_path / "x.zs"), "--text", "a", "--timestamp", "yesterday"])
    assert r.returncode == 1
    assert b"E_TIMESTAMP" in r.stderr


def test_fatal_on_missing_source(tmp_path):
    r = run([str(tmp_path / "x.zs"), str(tmp_path / "absent.bin")])
    assert r.returncode == 1
    assert r.stderr.decode().startswith("FATAL: E_PAYLOAD_SOURCE")
    assert not (tmp_path / "x.zs").exists()


def test_verbose_logs_info(tmp_path):
    out = tmp_path / "v.zs"
    r = run([str(out), "--text", "hello", "-v"])
    assert r.returncode == 0, r.stderr
    assert b"INFO zs_write.writer: Wrote" in r.stderr


def test_quiet_by_default(tmp_path):
    r = run([str(tmp_path / "q.zs"), "--text", "hello"])
    assert r.returncode == 0, r.stderr
    assert b"INFO" not in r.stderr


def test_fatal_on_layout_overflow(tmp_path, monkeypatch):
    huge = LayoutProfile(
        name="v2", header_constant=U32_MAX, fixed_header_len=0,
        block_overhead=1, file_length=0,
    )
    monkeypatch.setitem(cli.PROFILES, "v2", huge)
    out = tmp_path / "x.zs"
    result = CliRunner().invoke(cli.main, [str(out), "--text", "hello", "--layout", "v2"])
    assert result.exit_code == 1
    assert "FATAL: E_LAYOUT" in result.output
    assert not out.exists()

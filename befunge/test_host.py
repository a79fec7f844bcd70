"""
Tests for the host facade and the headless command-line runner.
"""

from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

from befunge import cli
from befunge.host import BefungeHost
from befunge.interpreter import StepLimitExceeded, IllegalInstruction
from befunge.streams import InputOutput


EXAMPLES = Path(__file__).resolve().parent.parent / "examples"

HELLO = (
    ">              v\n"
    "v  ,,,,,\"Hello\"<\n"
    ">48*,          v\n"
    "v,,,,,,\"World!\"<\n"
    ">25*,@\n"
)


# ---------------------------------------------------------------------------
# Host
# ---------------------------------------------------------------------------

def test_host_run_hello():
    r = BefungeHost(HELLO).run()
    assert r["ok"]
    assert r["mode"] == "TERMINATE"
    assert r["output"] == b"Hello World!\n"
    assert r["error"] is None
    assert r["stats"]["io_writes"] == 13


def test_host_input():
    host = BefungeHost("&&+.@", input=b"19\n23\n")
    r = host.run()
    assert r["output"] == b"42 "
    assert host.output() == b"42 "
    assert host.stack() == []


def test_host_step_limit():
    """A program that never terminates is cut off, not hung."""
    r = BefungeHost(">").run(max_steps=500)
    assert not r["ok"]
    assert r["mode"] == "EXECUTE"
    assert isinstance(r["error"], StepLimitExceeded)
    assert r["stats"]["steps"] == 500


def test_host_reports_program_fault():
    r = BefungeHost("12x").run()
    assert not r["ok"]
    assert isinstance(r["error"], IllegalInstruction)
    assert r["error"].pos == (2, 0)


def test_host_from_file(tmp_path):
    path = tmp_path / "six.bf"
    path.write_text("23*.@\n")

    r = BefungeHost.from_file(path).run()
    assert r["output"] == b"6 "


@pytest.mark.parametrize("name,input,output", [
    ("hello.bf", b"", b"Hello World!\n"),
    ("sum.bf", b"40\n2\n", b"42 "),
    ("countdown.bf", b"", b"9 8 7 6 5 4 3 2 1 "),
])
def test_example_programs(name, input, output):
    r = BefungeHost.from_file(EXAMPLES / name, input=input).run()
    assert r["ok"]
    assert r["output"] == output


def test_host_seeded_runs_agree():
    """Right prints 1, down prints 2, up exits silently, left retries."""
    source = ">?1.@\n 2\n .\n @"

    same_seed = {BefungeHost(source, seed=99).run()["output"] for _ in range(5)}
    assert len(same_seed) == 1

    any_seed = {BefungeHost(source, seed=s).run()["output"] for s in range(40)}
    assert any_seed <= {b"1 ", b"2 ", b""}
    assert len(any_seed) > 1


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@pytest.fixture
def stdin_bytes(monkeypatch):
    def feed(data: bytes):
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
    feed(b"")
    return feed


def test_cli_runs_program(tmp_path, capsysbinary, stdin_bytes):
    path = _write(tmp_path, HELLO)

    assert cli.main([str(path)]) == 0
    out, err = capsysbinary.readouterr()
    assert out == b"Hello World!\n"
    assert err == b""


def test_cli_reads_stdin(tmp_path, capsysbinary, stdin_bytes):
    stdin_bytes(b"19\n23\n")
    path = _write(tmp_path, "&&+.@")

    assert cli.main([str(path)]) == 0
    out, _ = capsysbinary.readouterr()
    assert out == b"42 "


def test_cli_missing_argument(capsys):
    """No file argument prints usage and exits non-zero."""
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code != 0
    assert "usage" in capsys.readouterr().err


def test_cli_missing_file(tmp_path, capsys, stdin_bytes):
    assert cli.main([str(tmp_path / "nope.bf")]) == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_cli_empty_file(tmp_path, capsys, stdin_bytes):
    assert cli.main([str(_write(tmp_path, ""))]) == 1
    assert "Error:" in capsys.readouterr().err


def test_cli_program_fault(tmp_path, capsysbinary, stdin_bytes):
    path = _write(tmp_path, "1.x")

    assert cli.main([str(path)]) == 1
    out, err = capsysbinary.readouterr()
    assert out == b"1 "
    assert b"Illegal character 'x' at (2, 0)" in err


def test_cli_max_steps(tmp_path, capsysbinary, stdin_bytes):
    path = _write(tmp_path, ">")

    assert cli.main(["--max-steps", "50", str(path)]) == 1
    _, err = capsysbinary.readouterr()
    assert b"no termination after 50 steps" in err


def test_cli_trace_and_stats(tmp_path, capsysbinary, stdin_bytes):
    path = _write(tmp_path, "23*.@")

    assert cli.main(["--trace", "--stats", str(path)]) == 0
    out, err = capsysbinary.readouterr()
    assert out == b"6 "
    lines = err.decode().splitlines()
    assert lines[0] == "(0,0) '2' mode=EXECUTE stack=[]"
    assert lines[2] == "(2,0) '*' mode=EXECUTE stack=[2, 3]"
    assert lines[4].startswith("(4,0) '@'")
    assert "Steps: 5 (TERMINATE)" in err.decode()


def test_cli_trace_step_limit(tmp_path, capsysbinary, stdin_bytes):
    path = _write(tmp_path, ">")

    assert cli.main(["--trace", "--max-steps", "3", str(path)]) == 1
    _, err = capsysbinary.readouterr()
    assert err.decode().count("'>'") == 3


@pytest.mark.parametrize("trace", [False, True])
def test_cli_output_failure(tmp_path, capsys, monkeypatch, trace):
    """A closed output pipe ends the run with an error, not a traceback."""
    monkeypatch.setattr(
        cli.InputOutput, "from_std",
        lambda: InputOutput(io.BytesIO(), _BrokenPipe()))
    path = _write(tmp_path, "1.@")

    argv = ["--trace", str(path)] if trace else [str(path)]
    assert cli.main(argv) == 1
    assert "Error:" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write(tmp_path, source: str):
    path = tmp_path / "prog.bf"
    path.write_text(source)
    return path


class _BrokenPipe(io.RawIOBase):
    def writable(self):
        return True

    def write(self, b):
        raise BrokenPipeError(32, "Broken pipe")

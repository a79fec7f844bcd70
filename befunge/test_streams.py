"""
Tests for the InputOutput transport and its fallback values.
"""

from __future__ import annotations

import io

from befunge.streams import InputOutput


def test_read_int():
    """Lines are stripped and parsed; junk and EOF yield 0."""
    stream = InputOutput.from_bytes(b"4\n  -12 \nabc\n7")

    assert stream.read_int() == 4
    assert stream.read_int() == -12
    assert stream.read_int() == 0
    assert stream.read_int() == 7
    assert stream.read_int() == 0


def test_read_int_plain_decimal_only():
    """Underscores, radix prefixes and embedded spaces are not numbers."""
    stream = InputOutput.from_bytes(b"1_000\n0x10\n1 2\n+5\n")

    assert stream.read_int() == 0
    assert stream.read_int() == 0
    assert stream.read_int() == 0
    assert stream.read_int() == 5


def test_read_char():
    """Bytes come back unsigned; an exhausted source yields -1."""
    stream = InputOutput.from_bytes(b"a\xff")

    assert stream.read_char() == 0x61
    assert stream.read_char() == 0xFF
    assert stream.read_char() == -1
    assert stream.read_char() == -1


def test_mixed_reads_share_buffer():
    stream = InputOutput.from_bytes(b"12\nxy")

    assert stream.read_int() == 12
    assert stream.read_char() == ord("x")
    assert stream.pending_input() == b"y"


def test_reader_failure_falls_back():
    """A reader that raises still produces the fallback values."""
    stream = InputOutput(_BrokenReader(), io.BytesIO())

    assert stream.read_int() == 0
    assert stream.read_char() == -1


def test_write_int():
    stream = InputOutput.from_bytes()

    stream.write_int(42)
    stream.write_int(-5)
    assert stream.output() == b"42 -5 "


def test_write_char_low_byte():
    """Only the low eight bits of a value are written."""
    stream = InputOutput.from_bytes()

    stream.write_char(ord("A"))
    stream.write_char(256 + ord("B"))
    stream.write_char(-1)
    assert stream.output() == b"AB\xff"


def test_counters():
    stream = InputOutput.from_bytes(b"1\n")

    stream.read_int()
    stream.read_char()
    stream.write_int(1)
    assert stream.reads == 2
    assert stream.writes == 1


def test_external_streams_not_inspected():
    """output()/pending_input() only report in-memory buffers."""
    stream = InputOutput(_BrokenReader(), _Sink())
    stream.write_char(0x41)

    assert stream.output() == b""
    assert stream.pending_input() == b""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _BrokenReader:
    def readline(self) -> bytes:
        raise OSError("device gone")

    def read(self, n: int) -> bytes:
        raise OSError("device gone")


class _Sink:
    def __init__(self):
        self.chunks: list[bytes] = []

    def write(self, data: bytes) -> int:
        self.chunks.append(data)
        return len(data)

    def flush(self):
        pass

"""
InputOutput — byte-stream transport between a program and its environment.

Wraps a binary reader and a binary writer. Reads never raise: numeric
input falls back to 0 and character input to -1 when the source is
exhausted, so the machine stays total.
"""

from __future__ import annotations

import io
import re
import sys
from typing import BinaryIO


DECIMAL = re.compile(rb"[+-]?[0-9]+")


class InputOutput:
    """Line-buffered reader plus an output sink."""

    def __init__(self, reader: BinaryIO, writer: BinaryIO):
        self.reader = reader
        self.writer = writer
        self.reads = 0
        self.writes = 0

    @classmethod
    def from_std(cls) -> "InputOutput":
        """Use the process's standard input and output."""
        return cls(sys.stdin.buffer, sys.stdout.buffer)

    @classmethod
    def from_bytes(cls, data: bytes = b"") -> "InputOutput":
        """In-memory transport: input preloaded with data, output captured."""
        return cls(io.BytesIO(data), io.BytesIO())

    # -------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------

    def read_int(self) -> int:
        """Read one line and parse it as a signed decimal, else 0."""
        self.reads += 1
        try:
            line = self.reader.readline()
        except (OSError, ValueError):
            return 0
        line = line.strip()
        if not DECIMAL.fullmatch(line):
            return 0
        return int(line)

    def read_char(self) -> int:
        """Read one byte, or -1 when the input is exhausted."""
        self.reads += 1
        try:
            buf = self.reader.read(1)
        except (OSError, ValueError):
            return -1
        if not buf:
            return -1
        return buf[0]

    # -------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------

    def write_int(self, val: int):
        self.writes += 1
        self.writer.write(f"{val} ".encode("ascii"))
        self.writer.flush()

    def write_char(self, val: int):
        self.writes += 1
        self.writer.write(bytes([val & 0xFF]))
        self.writer.flush()

    # -------------------------------------------------------------------
    # In-memory inspection (debugger panels, tests)
    # -------------------------------------------------------------------

    def output(self) -> bytes:
        """Bytes written so far. Only meaningful for in-memory writers."""
        if isinstance(self.writer, io.BytesIO):
            return self.writer.getvalue()
        return b""

    def pending_input(self) -> bytes:
        """Unread input bytes. Only meaningful for in-memory readers."""
        if isinstance(self.reader, io.BytesIO):
            return self.reader.getvalue()[self.reader.tell():]
        return b""

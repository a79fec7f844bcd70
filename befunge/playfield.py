"""
Playfield primitives for the Befunge machine.

Models the two pieces of program geometry: the Playfield (a padded,
mutable byte matrix) and the Navigator (instruction pointer with a
facing direction that wraps around the edges of the field).
"""

from __future__ import annotations

from typing import Iterator


SPACE = 0x20

# Directions
UP    = 0
DOWN  = 1
LEFT  = 2
RIGHT = 3

DIRECTIONS = (UP, DOWN, LEFT, RIGHT)

DIRECTION_NAMES = {UP: "UP", DOWN: "DOWN", LEFT: "LEFT", RIGHT: "RIGHT"}


class EmptyProgramError(ValueError):
    """Raised when a program source has no rows or no columns."""


class Playfield:
    """
    Two-dimensional matrix of instruction bytes.

    Width is the length of the longest source line, height the number of
    lines. Shorter lines are right-padded with spaces. Storage is a flat
    bytearray in row-major order, so len(data) == width * height.
    """

    def __init__(self, source: str | bytes):
        if isinstance(source, str):
            source = source.encode("utf-8")
        rows = source.splitlines()
        if not rows:
            raise EmptyProgramError("program has no lines")

        self.width = max(len(r) for r in rows)
        self.height = len(rows)
        if self.width == 0:
            raise EmptyProgramError("program has no columns")

        self.data = bytearray()
        for r in rows:
            self.data += r.ljust(self.width, b" ")

    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def read(self, x: int, y: int) -> int:
        return self.data[x + self.width * y]

    def write(self, x: int, y: int, val: int):
        self.data[x + self.width * y] = val & 0xFF

    def lines(self) -> Iterator[bytes]:
        """Iterate over the rows of the field. Each call starts afresh."""
        w = self.width
        return (bytes(self.data[i:i + w]) for i in range(0, len(self.data), w))

    def __str__(self) -> str:
        return "".join(row.decode("latin-1") + "\n" for row in self.lines())

    def __repr__(self) -> str:
        return f"Playfield({self.width}x{self.height})"


class Navigator:
    """
    Instruction pointer over a field of known dimensions.

    Starts at (0, 0) looking RIGHT. Stepping past an edge continues at
    the opposite edge, so the position is always inside the field.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.x = 0
        self.y = 0
        self.dir = RIGHT

    @property
    def pos(self) -> tuple[int, int]:
        return (self.x, self.y)

    def step(self):
        """Move one cell in the current direction, wrapping at the border."""
        d = self.dir
        if d == UP:
            self.y = self.y - 1 if self.y > 0 else self.height - 1
        elif d == DOWN:
            self.y = self.y + 1 if self.y < self.height - 1 else 0
        elif d == LEFT:
            self.x = self.x - 1 if self.x > 0 else self.width - 1
        else:
            self.x = self.x + 1 if self.x < self.width - 1 else 0

    def turn(self, direction: int):
        self.dir = direction

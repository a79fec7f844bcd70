"""
Befunge interpreter — single-step state machine for Befunge-93.

Each call to step() reads one cell under the navigator, runs it through
the handler for the current mode, and advances the navigator unless the
program has terminated. A driver either loops step() itself (debugger,
tracing CLI) or calls run().
"""

from __future__ import annotations

import random

from .playfield import (
    Playfield, Navigator, UP, DOWN, LEFT, RIGHT, DIRECTIONS,
)
from .streams import InputOutput


# Modes
M_EXECUTE   = 0
M_PARSE     = 1
M_TERMINATE = 2

MODE_NAMES = {M_EXECUTE: "EXECUTE", M_PARSE: "PARSE", M_TERMINATE: "TERMINATE"}

QUOTE = 0x22

ARROWS = {
    ord(">"): RIGHT,
    ord("<"): LEFT,
    ord("^"): UP,
    ord("v"): DOWN,
}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class BefungeError(Exception):
    """A fault in the running program, located at a playfield cell."""

    def __init__(self, message: str, pos: tuple[int, int] | None = None):
        super().__init__(message)
        self.pos = pos


class IllegalInstruction(BefungeError):
    """The navigator landed on a character outside the instruction set."""

    def __init__(self, char: int, pos: tuple[int, int]):
        super().__init__(
            f"Illegal character {chr(char)!r} at ({pos[0]}, {pos[1]})", pos)
        self.char = char


class GridIndexError(BefungeError):
    """A p or g instruction addressed a cell outside the playfield."""

    def __init__(self, op: str, target: tuple[int, int], pos: tuple[int, int]):
        super().__init__(
            f"{op} at ({pos[0]}, {pos[1]}) addresses ({target[0]}, {target[1]}) "
            f"outside the playfield", pos)
        self.target = target


class StepLimitExceeded(BefungeError):
    """run() hit its step budget before the program terminated."""


# ---------------------------------------------------------------------------
# Integer helpers
# ---------------------------------------------------------------------------

def trunc_div(b: int, a: int) -> int:
    """b / a rounded toward zero. Division by zero yields 0."""
    if a == 0:
        return 0
    q = abs(b) // abs(a)
    return q if (b < 0) == (a < 0) else -q


def trunc_mod(b: int, a: int) -> int:
    """Remainder matching trunc_div: the sign follows b."""
    if a == 0:
        return 0
    return b - a * trunc_div(b, a)


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------

class Interpreter:
    """Befunge-93 machine: playfield, navigator, stack, IO and mode."""

    def __init__(self, field: Playfield, io: InputOutput | None = None,
                 rng: random.Random | None = None, seed: int | None = None):
        self.field = field
        self.io = io or InputOutput.from_bytes()
        self.nav = Navigator(*field.dimensions())
        self.stack: list[int] = []
        self.mode = M_EXECUTE
        self.rng = rng or random.Random(seed)

        # --- Counters ---
        self.steps = 0
        self.stack_peak = 0
        self.field_writes = 0

    @property
    def terminated(self) -> bool:
        return self.mode == M_TERMINATE

    def current_cell(self) -> int:
        return self.field.read(*self.nav.pos)

    # -------------------------------------------------------------------
    # Stack helpers
    # -------------------------------------------------------------------

    def push(self, val: int):
        self.stack.append(val)
        if len(self.stack) > self.stack_peak:
            self.stack_peak = len(self.stack)

    def pop(self) -> int:
        """Pop the top value. An empty stack yields 0."""
        return self.stack.pop() if self.stack else 0

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------

    def step(self) -> bool:
        """Execute one cell. Returns True if still running."""
        if self.mode == M_TERMINATE:
            return False

        c = self.current_cell()

        if self.mode == M_EXECUTE:
            mode = self._execute(c)
        else:
            mode = self._parse(c)

        self.steps += 1
        self.mode = mode
        if mode == M_TERMINATE:
            return False

        self.nav.step()
        return True

    def _parse(self, c: int) -> int:
        """String mode: push every cell up to the closing quote."""
        if c == QUOTE:
            return M_EXECUTE
        self.push(c)
        return M_PARSE

    def _execute(self, c: int) -> int:
        """Run one instruction and return the next mode."""

        # --- Digits ---
        if 0x30 <= c <= 0x39:
            self.push(c - 0x30)
            return M_EXECUTE

        ch = chr(c)

        # --- Arithmetic: pop a, then b ---
        if ch in "+-*/%`":
            a = self.pop()
            b = self.pop()
            if ch == "+":
                self.push(b + a)
            elif ch == "-":
                self.push(b - a)
            elif ch == "*":
                self.push(b * a)
            elif ch == "/":
                self.push(trunc_div(b, a))
            elif ch == "%":
                self.push(trunc_mod(b, a))
            else:
                self.push(1 if b > a else 0)
            return M_EXECUTE

        if ch == "!":
            self.push(1 if self.pop() == 0 else 0)
            return M_EXECUTE

        # --- Movement ---
        if c in ARROWS:
            self.nav.turn(ARROWS[c])
            return M_EXECUTE

        if ch == "?":
            self.nav.turn(self.rng.choice(DIRECTIONS))
            return M_EXECUTE

        if ch == "_":
            self.nav.turn(RIGHT if self.pop() == 0 else LEFT)
            return M_EXECUTE

        if ch == "|":
            self.nav.turn(DOWN if self.pop() == 0 else UP)
            return M_EXECUTE

        if ch == "#":
            self.nav.step()
            return M_EXECUTE

        # --- Strings ---
        if c == QUOTE:
            return M_PARSE

        # --- Stack ---
        if ch == ":":
            v = self.pop()
            self.push(v)
            self.push(v)
            return M_EXECUTE

        if ch == "\\":
            a = self.pop()
            b = self.pop()
            self.push(a)
            self.push(b)
            return M_EXECUTE

        if ch == "$":
            self.pop()
            return M_EXECUTE

        # --- IO ---
        if ch == ".":
            self.io.write_int(self.pop())
            return M_EXECUTE

        if ch == ",":
            self.io.write_char(self.pop())
            return M_EXECUTE

        if ch == "&":
            self.push(self.io.read_int())
            return M_EXECUTE

        if ch == "~":
            self.push(self.io.read_char())
            return M_EXECUTE

        # --- Self-modification ---
        if ch == "p":
            y = self.pop()
            x = self.pop()
            v = self.pop()
            if not self.field.contains(x, y):
                raise GridIndexError("p", (x, y), self.nav.pos)
            self.field.write(x, y, v)
            self.field_writes += 1
            return M_EXECUTE

        if ch == "g":
            y = self.pop()
            x = self.pop()
            if not self.field.contains(x, y):
                raise GridIndexError("g", (x, y), self.nav.pos)
            self.push(self.field.read(x, y))
            return M_EXECUTE

        # --- Control ---
        if ch == "@":
            return M_TERMINATE

        if ch == " ":
            return M_EXECUTE

        raise IllegalInstruction(c, self.nav.pos)

    # -------------------------------------------------------------------
    # Run to completion
    # -------------------------------------------------------------------

    def run(self, max_steps: int | None = None) -> int:
        """Step until TERMINATE. Returns the total step count.

        max_steps caps the steps taken by this call, not the running total.
        """
        start = self.steps
        while self.step():
            if max_steps is not None and self.steps - start >= max_steps:
                raise StepLimitExceeded(
                    f"no termination after {self.steps - start} steps", self.nav.pos)
        return self.steps

    def stats(self) -> dict:
        return {
            "steps": self.steps,
            "mode": MODE_NAMES[self.mode],
            "stack_depth": len(self.stack),
            "stack_peak": self.stack_peak,
            "field_writes": self.field_writes,
            "io_reads": self.io.reads,
            "io_writes": self.io.writes,
        }

    def stats_summary(self) -> str:
        s = self.stats()
        return (
            f"Steps: {s['steps']} ({s['mode']})\n"
            f"Stack: {s['stack_depth']} deep, peak {s['stack_peak']}\n"
            f"Field writes: {s['field_writes']}\n"
            f"IO: {s['io_reads']} reads, {s['io_writes']} writes"
        )

"""
BefungeHost — high-level interface to the Befunge interpreter.

Provides program loading (text or file → playfield), IO wiring, bounded
runs to completion and result reporting.
"""

from __future__ import annotations

import random
from pathlib import Path

from .playfield import Playfield
from .streams import InputOutput
from .interpreter import (
    Interpreter, BefungeError, M_TERMINATE, MODE_NAMES,
)


MAX_STEPS = 1_000_000


def read_source(path: str | Path) -> bytes:
    """Read a program file as raw bytes."""
    return Path(path).read_bytes()


class BefungeHost:
    """High-level interface to the Befunge interpreter.

    Args:
        source: Program text or bytes.
        input: Bytes preloaded as program input when io is not given.
        seed: Seed for the ? instruction's generator.
        rng: Pre-built generator; takes precedence over seed.
        io: Explicit transport, e.g. InputOutput.from_std().
    """

    def __init__(self, source: str | bytes, input: bytes = b"",
                 seed: int | None = None,
                 rng: random.Random | None = None,
                 io: InputOutput | None = None):
        self.field = Playfield(source)
        self.io = io or InputOutput.from_bytes(input)
        self.interpreter = Interpreter(self.field, self.io, rng=rng, seed=seed)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> "BefungeHost":
        return cls(read_source(path), **kwargs)

    # -------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------

    def run(self, max_steps: int | None = MAX_STEPS) -> dict:
        """
        Run the program to completion.

        Returns dict with success flag, final mode, captured output,
        the error (if any) and interpreter stats.
        """
        error = None
        try:
            self.interpreter.run(max_steps)
        except BefungeError as e:
            error = e

        return {
            "ok": error is None and self.interpreter.mode == M_TERMINATE,
            "mode": MODE_NAMES[self.interpreter.mode],
            "output": self.io.output(),
            "error": error,
            "stats": self.interpreter.stats(),
        }

    def output(self) -> bytes:
        return self.io.output()

    def stack(self) -> list[int]:
        return list(self.interpreter.stack)


# ---------------------------------------------------------------------------
# CLI demo
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    hello = (
        ">              v\n"
        "v  ,,,,,\"Hello\"<\n"
        ">48*,          v\n"
        "v,,,,,,\"World!\"<\n"
        ">25*,@\n"
    )
    r = BefungeHost(hello).run()
    print(f"hello: {r['output']!r}  [{r['stats']['steps']} steps]")

    r = BefungeHost("23*.@").run()
    print(f"23*.@: {r['output']!r}  [{r['stats']['steps']} steps]")

    r = BefungeHost("&&+.@", input=b"19\n23\n").run()
    print(f"&&+.@ <- 19, 23: {r['output']!r}")

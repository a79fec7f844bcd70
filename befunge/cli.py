"""
Headless Befunge runner.

Usage:
    befunge program.bf
    befunge --trace --max-steps 5000 program.bf
    python -m befunge program.bf < input.txt
"""

from __future__ import annotations

import argparse
import sys

from .host import read_source
from .interpreter import Interpreter, BefungeError, StepLimitExceeded, MODE_NAMES
from .playfield import Playfield, EmptyProgramError
from .streams import InputOutput


def trace_line(interp: Interpreter) -> str:
    """One-line description of the cell about to execute."""
    x, y = interp.nav.pos
    c = interp.current_cell()
    ch = chr(c) if 32 <= c < 127 else f"\\x{c:02x}"
    return (f"({x},{y}) '{ch}' mode={MODE_NAMES[interp.mode]} "
            f"stack={interp.stack[-8:]}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a Befunge-93 program",
        prog="befunge",
    )
    parser.add_argument("file", help="Path to a Befunge program")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the ? instruction")
    parser.add_argument("--max-steps", type=int, default=0,
                        help="Abort after this many steps (0 = unlimited)")
    parser.add_argument("--trace", action="store_true",
                        help="Print every step to stderr")
    parser.add_argument("--stats", action="store_true",
                        help="Print execution stats to stderr when done")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        field = Playfield(read_source(args.file))
    except (OSError, EmptyProgramError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    interp = Interpreter(field, InputOutput.from_std(), seed=args.seed)
    max_steps = args.max_steps or None

    try:
        if args.trace:
            while not interp.terminated:
                print(trace_line(interp), file=sys.stderr, flush=True)
                interp.step()
                if max_steps is not None and interp.steps >= max_steps \
                        and not interp.terminated:
                    raise StepLimitExceeded(
                        f"no termination after {interp.steps} steps", interp.nav.pos)
        else:
            interp.run(max_steps)
    except (BefungeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if args.stats:
            print(interp.stats_summary(), file=sys.stderr, flush=True)

    return 0


if __name__ == "__main__":
    sys.exit(main())

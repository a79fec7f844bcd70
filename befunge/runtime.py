"""
runtime — paced, command-driven execution for interactive front ends.

A Runtime owns one Interpreter inside a single worker thread. Front ends
never touch the interpreter: they send commands (pause, step, speed) over
a queue and read the immutable Snapshot published after every tick.
"""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass

from .interpreter import Interpreter, BefungeError, M_TERMINATE


# Commands
TOGGLE_PAUSE = "toggle_pause"
SLOWER       = "slower"
FASTER       = "faster"
STEP         = "step"
STOP         = "stop"

COMMANDS = frozenset({TOGGLE_PAUSE, SLOWER, FASTER, STEP, STOP})

DEFAULT_DELAY_MS = 100
MIN_DELAY_MS     = 10
MAX_DELAY_MS     = 1000


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Snapshot:
    """Read-only copy of the machine state after a tick."""
    lines: tuple[bytes, ...]
    pos: tuple[int, int]
    dir: int
    stack: tuple[int, ...]
    mode: int
    steps: int
    output: bytes
    pending_input: bytes
    running: bool
    delay_ms: int
    error: str | None = None

    @property
    def finished(self) -> bool:
        return self.mode == M_TERMINATE or self.error is not None


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------

class Runtime:
    """Runs an interpreter at a controllable pace. Starts paused."""

    def __init__(self, interpreter: Interpreter,
                 delay_ms: int = DEFAULT_DELAY_MS):
        self.interpreter = interpreter
        self.commands: queue.Queue[str] = queue.Queue()
        self.delay_ms = delay_ms
        self.running = False
        self.stopped = False
        self.error: str | None = None
        self._thread: threading.Thread | None = None
        self._snapshot = self._take_snapshot()

    # -------------------------------------------------------------------
    # Front-end interface
    # -------------------------------------------------------------------

    def start(self):
        """Spawn the worker thread that owns the interpreter."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._loop, name="befunge-runtime", daemon=True)
        self._thread.start()

    def send(self, cmd: str):
        if cmd not in COMMANDS:
            raise ValueError(f"Unknown runtime command: {cmd!r}")
        self.commands.put(cmd)

    def stop(self, timeout: float = 2.0):
        """Ask the worker to exit and wait for it."""
        self.send(STOP)
        if self._thread is not None:
            self._thread.join(timeout)

    def snapshot(self) -> Snapshot:
        return self._snapshot

    # -------------------------------------------------------------------
    # Worker side
    # -------------------------------------------------------------------

    def process_commands(self):
        """Drain the command queue."""
        while True:
            try:
                cmd = self.commands.get_nowait()
            except queue.Empty:
                return

            if cmd == TOGGLE_PAUSE:
                self.running = not self.running
            elif cmd == SLOWER:
                self.delay_ms = min(self.delay_ms + self.delay_ms // 5, MAX_DELAY_MS)
            elif cmd == FASTER:
                self.delay_ms = max(self.delay_ms - self.delay_ms // 5, MIN_DELAY_MS)
            elif cmd == STEP:
                # Single steps only apply while paused
                if not self.running:
                    self._step()
            elif cmd == STOP:
                self.stopped = True
                return

    def tick(self) -> bool:
        """One scheduling round. Returns False once stopped."""
        self.process_commands()
        if self.stopped:
            return False
        if self.running:
            self._step()
        self._snapshot = self._take_snapshot()
        return True

    def _step(self):
        if self.error is not None or self.interpreter.terminated:
            self.running = False
            return
        try:
            if not self.interpreter.step():
                self.running = False
        except BefungeError as e:
            self.error = str(e)
            self.running = False

    def _loop(self):
        while True:
            start = time.monotonic()
            if not self.tick():
                break
            remaining = self.delay_ms / 1000 - (time.monotonic() - start)
            if remaining > 0:
                time.sleep(remaining)

    def _take_snapshot(self) -> Snapshot:
        interp = self.interpreter
        return Snapshot(
            lines=tuple(interp.field.lines()),
            pos=interp.nav.pos,
            dir=interp.nav.dir,
            stack=tuple(interp.stack),
            mode=interp.mode,
            steps=interp.steps,
            output=interp.io.output(),
            pending_input=interp.io.pending_input(),
            running=self.running,
            delay_ms=self.delay_ms,
            error=self.error,
        )

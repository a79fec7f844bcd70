"""
Textual TUI debugger for the Befunge interpreter.

Loads a Befunge program, runs it at an adjustable pace and displays the
playfield, stack, output and remaining input after every step.

Usage:
    python -m befunge.debugger examples/hello.bf
    python -m befunge.debugger --input "40\n2\n" examples/sum.bf
    python -m befunge.debugger --run examples/hello.bf
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.widgets import Static, Footer

from befunge.host import read_source
from befunge.interpreter import Interpreter, MODE_NAMES
from befunge.playfield import Playfield, EmptyProgramError, DIRECTION_NAMES
from befunge.runtime import (
    Runtime, Snapshot, TOGGLE_PAUSE, SLOWER, FASTER, STEP,
)
from befunge.streams import InputOutput


FPS = 30

CURSOR_STYLE = "bold white on red"

# Presentation-only classification of instruction cells
CELL_STYLES: dict[str, str] = {}
CELL_STYLES.update(dict.fromkeys("0123456789", "blue"))
CELL_STYLES.update(dict.fromkeys("+-*/%!`", "red"))         # operators
CELL_STYLES.update(dict.fromkeys("><^v?", "magenta"))       # movement
CELL_STYLES.update(dict.fromkeys("_|#@", "yellow"))         # branching
CELL_STYLES.update(dict.fromkeys(":\\$\"", "cyan"))         # stack
CELL_STYLES.update(dict.fromkeys(".,&~", "green"))          # io
CELL_STYLES.update(dict.fromkeys("pg", "bold red"))         # storage


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

DEBUGGER_CSS = """
Screen {
    layout: grid;
    grid-size: 2 4;
    grid-columns: 1fr 1fr;
    grid-rows: 2fr 1fr 5 auto;
}

.panel {
    border: solid $accent;
    border-title-align: left;
    overflow-y: auto;
    height: 100%;
}

#state-panel { column-span: 2; }

Footer {
    column-span: 2;
}
"""


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------

def render_playfield(snap: Snapshot) -> Text:
    """Playfield with instruction classes coloured and the cursor marked."""
    text = Text()
    for y, row in enumerate(snap.lines):
        for x, byte in enumerate(row):
            ch = chr(byte) if 32 <= byte < 127 else "·"
            if (x, y) == snap.pos:
                style = CURSOR_STYLE
            else:
                style = CELL_STYLES.get(ch, "")
            text.append(ch, style=style)
        text.append("\n")
    return text


def render_stack(snap: Snapshot) -> Text:
    """Stack contents, top first."""
    if not snap.stack:
        return Text("(empty)")
    lines = []
    for i in range(len(snap.stack) - 1, -1, -1):
        v = snap.stack[i]
        glyph = f" '{chr(v)}'" if 32 <= v < 127 else ""
        lines.append(f"[{i:3d}] {v}{glyph}")
    return Text("\n".join(lines))


def render_bytes(data: bytes) -> Text:
    if not data:
        return Text("(empty)")
    return Text(data.decode("latin-1"))


def render_state(snap: Snapshot) -> str:
    if snap.error:
        status = "[bold red]error[/bold red]"
    elif snap.finished:
        status = "finished"
    elif snap.running:
        status = "running"
    else:
        status = "paused"
    return (
        f"[bold]Mode:[/bold] {MODE_NAMES[snap.mode]}    [bold]Step:[/bold] {snap.steps}\n"
        f"[bold]Pos:[/bold] ({snap.pos[0]}, {snap.pos[1]})  "
        f"[bold]Dir:[/bold] {DIRECTION_NAMES[snap.dir]}\n"
        f"[bold]Delay:[/bold] {snap.delay_ms} ms  [bold]Status:[/bold] {status}"
    )


# ---------------------------------------------------------------------------
# Panel widgets
# ---------------------------------------------------------------------------

class PlayfieldPanel(ScrollableContainer):
    """Program grid with the instruction pointer highlighted."""
    BORDER_TITLE = "Playfield"

    def compose(self) -> ComposeResult:
        yield Static("", id="playfield-content")


class StatePanel(ScrollableContainer):
    """Mode, position, direction, pace."""
    BORDER_TITLE = "State"

    def compose(self) -> ComposeResult:
        yield Static("", id="state-content")


class StackPanel(ScrollableContainer):
    BORDER_TITLE = "Stack"

    def compose(self) -> ComposeResult:
        yield Static("", id="stack-content")


class OutputPanel(ScrollableContainer):
    BORDER_TITLE = "Output"

    def compose(self) -> ComposeResult:
        yield Static("", id="output-content")


class InputPanel(ScrollableContainer):
    """Input not yet consumed by the program."""
    BORDER_TITLE = "Input"

    def compose(self) -> ComposeResult:
        yield Static("", id="input-content")


# ---------------------------------------------------------------------------
# Main debugger app
# ---------------------------------------------------------------------------

class BefungeDebugger(App):
    """Textual TUI debugger for the Befunge interpreter."""

    CSS = DEBUGGER_CSS
    TITLE = "Befunge Debugger"

    BINDINGS = [
        Binding("p", "toggle_pause", "Run/Pause"),
        Binding("n", "step", "Step"),
        Binding("space", "step", "Step", show=False),
        # Scroll containers bind the arrow keys themselves
        Binding("left", "slower", "Slower", priority=True),
        Binding("right", "faster", "Faster", priority=True),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, runtime: Runtime, auto_run: bool = False):
        super().__init__()
        self.runtime = runtime
        self.auto_run = auto_run
        self._last_snapshot: Snapshot | None = None

    def compose(self) -> ComposeResult:
        yield PlayfieldPanel(id="playfield-panel", classes="panel")
        yield OutputPanel(id="output-panel", classes="panel")
        yield StackPanel(id="stack-panel", classes="panel")
        yield InputPanel(id="input-panel", classes="panel")
        yield StatePanel(id="state-panel", classes="panel")
        yield Footer()

    def on_mount(self) -> None:
        self.runtime.start()
        if self.auto_run:
            self.runtime.send(TOGGLE_PAUSE)
        self.refresh_panels()
        self.set_interval(1 / FPS, self.refresh_panels)

    def on_unmount(self) -> None:
        self.runtime.stop()

    # -------------------------------------------------------------------
    # Panel refresh
    # -------------------------------------------------------------------

    def refresh_panels(self) -> None:
        snap = self.runtime.snapshot()
        if snap is self._last_snapshot:
            return
        self._last_snapshot = snap

        self.query_one("#playfield-content", Static).update(render_playfield(snap))
        self.query_one("#stack-content", Static).update(render_stack(snap))
        self.query_one("#state-content", Static).update(render_state(snap))
        self.query_one("#input-content", Static).update(render_bytes(snap.pending_input))

        output = render_bytes(snap.output)
        if snap.error:
            output.append(f"\n[ERROR] {snap.error}", style="bold red")
        self.query_one("#output-content", Static).update(output)

    # -------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------

    def action_toggle_pause(self) -> None:
        self.runtime.send(TOGGLE_PAUSE)

    def action_step(self) -> None:
        self.runtime.send(STEP)

    def action_slower(self) -> None:
        self.runtime.send(SLOWER)

    def action_faster(self) -> None:
        self.runtime.send(FASTER)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def decode_input(arg: str) -> bytes:
    """Decode backslash escapes in --input into the bytes fed to the program."""
    return arg.encode("utf-8").decode("unicode_escape").encode("latin-1")


def main():
    parser = argparse.ArgumentParser(
        description="Befunge interpreter TUI debugger",
        prog="python -m befunge.debugger",
    )
    parser.add_argument("file", help="Path to a Befunge program")
    parser.add_argument("-i", "--input", default="",
                        help="Program input (escape sequences like \\n are decoded)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the ? instruction")
    parser.add_argument("--run", action="store_true",
                        help="Start running immediately instead of paused")
    args = parser.parse_args()

    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)

    try:
        field = Playfield(read_source(path))
    except (OSError, EmptyProgramError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        data = decode_input(args.input)
    except UnicodeError as e:
        print(f"Error: Bad --input: {e}", file=sys.stderr)
        sys.exit(1)

    interpreter = Interpreter(field, InputOutput.from_bytes(data), seed=args.seed)
    runtime = Runtime(interpreter)

    app = BefungeDebugger(runtime, auto_run=args.run)
    app.run()


if __name__ == "__main__":
    main()

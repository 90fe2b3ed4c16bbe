"""Hull-painting robot driven by a runtime.

Each cycle the robot reports the colour under its camera (0 black, 1 white)
and the program answers with two words: the colour to paint and the turn
to make (0 left, 1 right). The robot then moves one panel forward.
"""

from __future__ import annotations

import logging
from enum import IntEnum

from processor import ProtocolError
from program import Program


class Direction(IntEnum):
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3


class Turn(IntEnum):
    LEFT = 0
    RIGHT = 1


class Color(IntEnum):
    BLACK = 0
    WHITE = 1


_MOVES: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, 1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
}


class Robot:
    panels: dict[tuple[int, int], Color]
    loc: tuple[int, int]
    dir: Direction

    def __init__(self) -> None:
        self.panels = {}
        self.loc = (0, 0)
        self.dir = Direction.UP

    def painted_panels(self) -> int:
        """Number of panels painted at least once."""
        return len(self.panels)

    def run(self, prog: Program) -> None:
        rt = prog.new_runtime()
        while rt.wait_for_input():
            out = rt.step_n([self.read_camera()], 2)
            if out is None:
                msg = "robot program halted mid-command"
                raise ProtocolError(msg)
            self.prog_command(out[0], out[1])
        logging.debug("robot: halted at %s facing %s, %d panels painted", self.loc, self.dir.name, len(self.panels))

    def prog_command(self, color: int, turn: int) -> None:
        self.paint(Color(color))
        self.turn(Turn(turn))
        self.advance(1)

    def read_camera(self) -> Color:
        return self.panels.get(self.loc, Color.BLACK)

    def paint(self, c: Color) -> None:
        self.panels[self.loc] = c

    def turn(self, t: Turn) -> None:
        step = 1 if t == Turn.RIGHT else -1
        self.dir = Direction((self.dir + step) % 4)

    def advance(self, n: int) -> None:
        dx, dy = _MOVES[self.dir]
        self.loc = (self.loc[0] + dx * n, self.loc[1] + dy * n)

    def panels_to_string(self) -> str:
        """Render white panels as '#' and black as '.', north at the top."""
        if not self.panels:
            return ""
        xs = [x for x, _ in self.panels]
        ys = [y for _, y in self.panels]
        rows = []
        for y in range(max(ys), min(ys) - 1, -1):
            row = "".join(
                "#" if self.panels.get((x, y), Color.BLACK) == Color.WHITE else "." for x in range(min(xs), max(xs) + 1)
            )
            rows.append(row)
        return "\n".join(rows) + "\n"

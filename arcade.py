"""Arcade cabinet: a runtime draws tiles and reads a joystick.

Outputs arrive in triples (x, y, tile). The triple (-1, 0, n) sets the score
instead of drawing. Whenever the program asks for input the frame is
finished and the joystick position (-1 left, 0 neutral, 1 right) is read.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import IntEnum

from processor import Complete, ProducedOutput, ProtocolError
from program import Program

QUARTERS_ADDR = 0
FREE_PLAY = 2


class Tile(IntEnum):
    EMPTY = 0
    WALL = 1
    BLOCK = 2
    PADDLE = 3
    BALL = 4


GLYPHS: dict[Tile, str] = {
    Tile.EMPTY: " ",
    Tile.WALL: "#",
    Tile.BLOCK: "=",
    Tile.PADDLE: "-",
    Tile.BALL: "o",
}


class Game:
    tiles: dict[tuple[int, int], Tile]
    score: int
    width: int
    height: int
    quarters: int | None
    frames: int

    def __init__(self) -> None:
        self.tiles = {}
        self.score = 0
        self.width = 0
        self.height = 0
        self.quarters = None
        self.frames = 0

    def insert_quarters(self, n: int) -> None:
        """Patch the quarter count before the next run; 2 plays for free."""
        self.quarters = n

    def run(
        self,
        prog: Program,
        joystick: Callable[[Game], int] | None = None,
        frame_delay: float = 0.0,
        on_frame: Callable[[Game], None] | None = None,
    ) -> int:
        """Play until the program halts and return the final score."""
        stick = joystick or track_ball
        rt = prog.new_runtime()
        if self.quarters is not None:
            rt.set(QUARTERS_ADDR, self.quarters)

        state = rt.resume()
        while True:
            while isinstance(state, ProducedOutput):
                rest = rt.step_read(2)
                if rest is None:
                    msg = f"draw command cut short after x={state.value}"
                    raise ProtocolError(msg)
                self.draw_cmd(state.value, rest[0], rest[1])
                state = rt.resume()

            self.frames += 1
            if on_frame is not None:
                on_frame(self)
            if isinstance(state, Complete):
                break
            if frame_delay > 0:
                time.sleep(frame_delay)
            state = rt.resume(stick(self))

        logging.debug(
            "arcade: halted after %d frames, score %d, %d blocks left",
            self.frames,
            self.score,
            self.count(Tile.BLOCK),
        )
        return self.score

    def draw_cmd(self, x: int, y: int, t: int) -> None:
        if x == -1 and y == 0:
            self.score = t
            return
        self.tiles[(x, y)] = Tile(t)
        self.width = max(self.width, x)
        self.height = max(self.height, y)

    def count(self, tile: Tile) -> int:
        return sum(1 for t in self.tiles.values() if t == tile)

    def find(self, tile: Tile) -> tuple[int, int] | None:
        for pos, t in self.tiles.items():
            if t == tile:
                return pos
        return None

    def render(self) -> str:
        rows = []
        for y in range(self.height + 1):
            rows.append("".join(GLYPHS[self.tiles.get((x, y), Tile.EMPTY)] for x in range(self.width + 1)))
        rows.append(f"SCORE: {self.score}")
        return "\n".join(rows)


def track_ball(game: Game) -> int:
    """Joystick that keeps the paddle under the ball."""
    ball = game.find(Tile.BALL)
    paddle = game.find(Tile.PADDLE)
    if ball is None or paddle is None:
        return 0
    return (ball[0] > paddle[0]) - (ball[0] < paddle[0])

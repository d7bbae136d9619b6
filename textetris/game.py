"""Falling-block game state: the board, the pieces and the rules that move them."""

from __future__ import annotations

import enum
import random
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:
    from .rendering import Renderer

__all__ = [
    "ROWS",
    "COLUMNS",
    "SPAWN_X",
    "POINTS_PER_LINE",
    "Move",
    "PieceBag",
    "Tetris",
    "shape",
    "new_table",
]

ROWS = 21  # 20 playing rows plus the floor
COLUMNS = 10  # 8 playing columns between two walls
SPAWN_X = 3
POINTS_PER_LINE = 100

_EMPTY = 0
_WALL = 1


class Move(enum.IntEnum):
    """A player command that moves the falling piece."""

    LEFT = 0
    RIGHT = 1
    DOWN = 2
    ROTATE = 3


def _parse(*rotations: str) -> tuple[tuple[tuple[int, ...], ...], ...]:
    return tuple(
        tuple(tuple(int(c) for c in row) for row in rotation.split("/"))
        for rotation in rotations
    )


# Pieces in order I, T, S, Z, L, J, O; four rotations of four rows each.
_SHAPES = (
    _parse("1111/0000/0000/0000", "0001/0001/0001/0001",
           "0000/0000/0000/1111", "1000/1000/1000/1000"),
    _parse("1000/1100/1000/0000", "1110/0100/0000/0000",
           "0010/0110/0010/0000", "0000/0100/1110/0000"),
    _parse("1000/1100/0100/0000", "0110/1100/0000/0000",
           "0100/0110/0010/0000", "0000/0110/1100/0000"),
    _parse("0100/1100/1000/0000", "1100/0110/0000/0000",
           "0010/0110/0100/0000", "0000/1100/0110/0000"),
    _parse("1000/1000/1100/0000", "1110/1000/0000/0000",
           "0110/0010/0010/0000", "0000/0010/1110/0000"),
    _parse("0100/0100/1100/0000", "1000/1110/0000/0000",
           "1100/1000/1000/0000", "0000/1110/0010/0000"),
    _parse("1100/1100/0000/0000", "1100/1100/0000/0000",
           "1100/1100/0000/0000", "1100/1100/0000/0000"),
)

_FOOTER = (
    "\n\t[ j: LEFT | l: RIGHT | k: DOWN | i: ROTATE | a: DROP | h: HOLD | p: QUIT ]\n"
)


def shape(block: int, rotation: int) -> tuple[tuple[int, ...], ...]:
    """The 4x4 grid of a piece in a rotation; unknown pieces fall back to I."""
    pieces = _SHAPES[block] if 0 <= block < len(_SHAPES) else _SHAPES[0]
    return pieces[rotation % 4]


def _empty_row() -> list[int]:
    return [_WALL] + [_EMPTY] * (COLUMNS - 2) + [_WALL]


def new_table() -> list[list[int]]:
    """An empty board: walls left and right, floor at the bottom."""
    rows = [_empty_row() for _ in range(ROWS - 1)]
    rows.append([_WALL] * COLUMNS)
    return rows


class PieceBag:
    """Deals pieces in shuffled runs holding each of the seven exactly once."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._pending: list[int] = []

    def next(self) -> int:
        """The next piece type, refilling the bag when it runs out."""
        if not self._pending:
            run = list(range(len(_SHAPES)))
            self._rng.shuffle(run)
            self._pending = run[::-1]
        return self._pending.pop()


class Tetris:
    """One game: the board, the falling piece, the next and held pieces and the score."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self.reset()

    def reset(self) -> None:
        """Start a new game with an empty board and a fresh bag."""
        self.table = new_table()
        self._bag = PieceBag(self._rng)
        self.block = self._bag.next()
        self.next_block = self._bag.next()
        self.held: Optional[int] = None
        self.rotation = 0
        self.x = SPAWN_X
        self.y = 0
        self.point = 0
        self.over = False

    def _cells(self, x: int, y: int, rotation: int) -> Iterator[tuple[int, int]]:
        for i, row in enumerate(shape(self.block, rotation)):
            for j, filled in enumerate(row):
                if filled:
                    yield y + i, x + j

    def collides(self, x: int, y: int, rotation: int) -> bool:
        """Whether the current piece at (x, y) in this rotation hits the board."""
        return any(
            not (0 <= col < COLUMNS and 0 <= row < ROWS) or self.table[row][col] != _EMPTY
            for row, col in self._cells(x, y, rotation)
        )

    def _spawn(self) -> None:
        self.rotation = 0
        self.x = SPAWN_X
        self.y = 0
        if self.collides(self.x, self.y, self.rotation):
            self.over = True

    def move(self, direction: Move) -> None:
        """Shift the piece; a blocked move down locks it in place."""
        direction = Move(direction)
        if direction is Move.ROTATE:
            self.rotate()
            return
        dx = {Move.LEFT: -1, Move.RIGHT: 1}.get(direction, 0)
        dy = 1 if direction is Move.DOWN else 0
        if not self.collides(self.x + dx, self.y + dy, self.rotation):
            self.x += dx
            self.y += dy
        elif direction is Move.DOWN:
            self.lock()

    def rotate(self) -> None:
        """Turn the piece a quarter, unless that would collide."""
        turned = (self.rotation + 1) % 4
        if not self.collides(self.x, self.y, turned):
            self.rotation = turned

    def drop(self) -> None:
        """Let the piece fall as far as it goes and lock it."""
        while not self.collides(self.x, self.y + 1, self.rotation):
            self.y += 1
        self.move(Move.DOWN)

    def hold(self) -> None:
        """Put the piece aside, or swap it with the one already held."""
        if self.held is None:
            self.held = self.block
            self.block = self.next_block
            self.next_block = self._bag.next()
            self._spawn()
        else:
            self.block, self.held = self.held, self.block

    def lock(self) -> int:
        """Fix the piece to the board, clear lines and bring in the next piece.

        Returns the number of lines cleared.
        """
        value = self.block + 2
        for row, col in self._cells(self.x, self.y, self.rotation):
            self.table[row][col] = value
        cleared = self.clear_lines()
        self.block = self.next_block
        self.next_block = self._bag.next()
        self._spawn()
        return cleared

    def clear_lines(self) -> int:
        """Remove full rows, shift the rest down and score them."""
        playing = self.table[:-1]
        kept = [row for row in playing if not all(row[1:-1])]
        cleared = len(playing) - len(kept)
        if cleared:
            self.table = [_empty_row() for _ in range(cleared)] + kept + [self.table[-1]]
            self.point += cleared * POINTS_PER_LINE
        return cleared

    def _preview_row(self, renderer: "Renderer", block: int, row: tuple[int, ...]) -> str:
        return "".join(
            renderer.preview_segment(block) if filled else renderer.empty_segment()
            for filled in row
        )

    def render(self, renderer: "Renderer") -> str:
        """The full board with score, next and held pieces, as terminal text."""
        piece = set(self._cells(self.x, self.y, self.rotation))
        next_rows = shape(self.next_block, 0)
        hold_rows = shape(self.held, 0) if self.held is not None else None
        parts = [f"\n\t[ SCORE: {self.point} ]\t\t[ NEXT BLOCK ]\n"]
        for i, row in enumerate(self.table):
            parts.append("\t")
            for j, value in enumerate(row):
                if value != _EMPTY:
                    parts.append(renderer.block_segment(value))
                elif (i, j) in piece:
                    parts.append(renderer.preview_segment(self.block))
                else:
                    parts.append(renderer.empty_segment())
            if i < 4:
                parts.append("\t    ")
                parts.append(self._preview_row(renderer, self.next_block, next_rows[i]))
            elif i == 4:
                parts.append("    [ HOLD BLOCK ]")
            elif i < 8:
                parts.append("\t    ")
                if hold_rows is not None and self.held is not None:
                    parts.append(self._preview_row(renderer, self.held, hold_rows[i - 5]))
                else:
                    parts.append("    ")
            parts.append("\n")
        parts.append(_FOOTER)
        return "".join(parts)
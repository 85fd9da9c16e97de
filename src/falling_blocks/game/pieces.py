from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Sequence, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


Shape = np.ndarray


def as_shape(rows: Sequence[Sequence[int]] | np.ndarray) -> Shape:
    """Normalize a 0/1 matrix into a read-only int8 array."""
    shape = np.array(rows, dtype=np.int8)
    if shape.ndim != 2 or shape.size == 0:
        raise ValueError("shape must be a non-empty rectangular matrix")
    shape = (shape != 0).astype(np.int8)
    shape.setflags(write=False)
    return shape


def rotate_shape(shape: Shape) -> Shape:
    """Rotate 90 degrees clockwise.

    Cell (i, j) of an R x C shape lands at (j, R - 1 - i) of the C x R result.
    """
    return as_shape(np.rot90(shape, 1, axes=(1, 0)))


@dataclass(frozen=True, eq=False)
class Tetromino:
    type: TetrominoType
    shape: Shape
    color: str = "#c0c0c0"

    def rotated(self) -> "Tetromino":
        return replace(self, shape=rotate_shape(self.shape))

    def same_as(self, other: "Tetromino") -> bool:
        return self.type == other.type and np.array_equal(self.shape, other.shape)

    @property
    def width(self) -> int:
        return int(self.shape.shape[1])

    @property
    def height(self) -> int:
        return int(self.shape.shape[0])


def _tetromino(kind: TetrominoType, rows: List[List[int]], color: str) -> Tetromino:
    return Tetromino(type=kind, shape=as_shape(rows), color=color)


TETROMINOES: Dict[TetrominoType, Tetromino] = {
    TetrominoType.I: _tetromino(TetrominoType.I, [[1, 1, 1, 1]], "#00f0f0"),
    TetrominoType.O: _tetromino(TetrominoType.O, [[1, 1], [1, 1]], "#f0f000"),
    TetrominoType.T: _tetromino(TetrominoType.T, [[0, 1, 0], [1, 1, 1]], "#a000f0"),
    TetrominoType.S: _tetromino(TetrominoType.S, [[0, 1, 1], [1, 1, 0]], "#00f000"),
    TetrominoType.Z: _tetromino(TetrominoType.Z, [[1, 1, 0], [0, 1, 1]], "#f00000"),
    TetrominoType.J: _tetromino(TetrominoType.J, [[1, 0, 0], [1, 1, 1]], "#0000f0"),
    TetrominoType.L: _tetromino(TetrominoType.L, [[0, 0, 1], [1, 1, 1]], "#f0a000"),
}


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def moved(self, dx: int = 0, dy: int = 0) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True, eq=False)
class GamePiece:
    tetromino: Tetromino
    position: Position

    def moved_to(self, position: Position) -> "GamePiece":
        return GamePiece(self.tetromino, position)

    def rotated(self) -> "GamePiece":
        return GamePiece(self.tetromino.rotated(), self.position)

    def cells_at(self, position: Position) -> List[Tuple[int, int]]:
        """Board coordinates of the occupied cells if the origin sat at `position`."""
        ys, xs = np.nonzero(self.tetromino.shape)
        return [(position.x + int(dx), position.y + int(dy)) for dy, dx in zip(ys, xs)]

    def cells(self) -> List[Tuple[int, int]]:
        return self.cells_at(self.position)

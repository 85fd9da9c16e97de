from __future__ import annotations

import random
from typing import Any, Optional, Protocol, Sequence

from .pieces import TETROMINOES, Position, Tetromino, TetrominoType


class RandomSource(Protocol):
    def choice(self, seq: Sequence[Any]) -> Any: ...


def random_tetromino(rng: RandomSource) -> Tetromino:
    """Pick one of the seven tetrominoes uniformly."""
    kind = rng.choice(list(TetrominoType))
    return TETROMINOES[TetrominoType(kind)]


def spawn_position(width: int) -> Position:
    return Position(width // 2 - 1, 0)


class PieceGenerator:
    """Supplies pieces one step ahead so a preview is always available."""

    def __init__(self, rng: Optional[RandomSource] = None, seed: Optional[int] = None) -> None:
        self.rng: RandomSource = rng if rng is not None else random.Random(seed)
        self.next_piece: Tetromino = random_tetromino(self.rng)

    def reset(self) -> Tetromino:
        self.next_piece = random_tetromino(self.rng)
        return self.next_piece

    def draw(self) -> Tetromino:
        """Consume the preview and immediately generate its replacement."""
        piece = self.next_piece
        self.next_piece = random_tetromino(self.rng)
        return piece

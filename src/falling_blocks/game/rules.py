from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .collision import place_piece
from .grid import FILLED, Grid
from .pieces import GamePiece


@dataclass(frozen=True)
class ScoringRules:
    line_clear_points: int = 100
    hard_drop_bonus: int = 20
    lines_per_level: int = 10
    base_drop_interval_ms: int = 1000
    drop_interval_step_ms: int = 50
    min_drop_interval_ms: int = 50

    def score_for_lines(self, lines: int, level: int) -> int:
        if lines <= 0:
            return 0
        return lines * self.line_clear_points * level

    def level_for_lines(self, lines: int) -> int:
        return max(0, lines) // self.lines_per_level + 1

    def drop_interval_for_level(self, level: int) -> int:
        interval = self.base_drop_interval_ms - (level - 1) * self.drop_interval_step_ms
        return max(self.min_drop_interval_ms, interval)


@dataclass
class PlacementOutcome:
    grid: Grid
    lines_cleared: int
    score_delta: int


def clear_lines(grid: Grid) -> Tuple[Grid, int]:
    """Remove complete rows and refill from the top.

    A row is complete when every cell equals 1. Remaining rows keep their
    order; empty rows are stacked on top until the height is restored.
    """
    full = np.all(grid == FILLED, axis=1)
    num = int(np.count_nonzero(full))
    if num == 0:
        return grid.copy(), 0
    kept = grid[~full]
    new_rows = np.zeros((num, grid.shape[1]), dtype=grid.dtype)
    return np.vstack((new_rows, kept)), num


def resolve_placement(
    grid: Grid,
    piece: GamePiece,
    level: int,
    rules: ScoringRules,
    hard_drop: bool = False,
) -> PlacementOutcome:
    """Lock `piece`, clear lines and score the result at the current level."""
    placed = place_piece(grid, piece)
    cleared, lines = clear_lines(placed)
    delta = rules.score_for_lines(lines, level)
    if hard_drop:
        delta += rules.hard_drop_bonus
    return PlacementOutcome(grid=cleared, lines_cleared=lines, score_delta=delta)

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import numpy as np

if TYPE_CHECKING:
    from .pieces import GamePiece


WIDTH = 10
HEIGHT = 20

EMPTY = 0
FILLED = 1
# Display-only tag for the falling piece; never stored in a session grid.
ACTIVE = 2

Grid = np.ndarray


def create_empty_grid(width: int = WIDTH, height: int = HEIGHT) -> Grid:
    """Return a fresh ``height x width`` grid of empty cells.

    The grid uses 0 for empty cells and 1 for locked cells. Grids are treated
    as immutable snapshots: every operation in this package returns a new
    array instead of writing into the one it was given.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
    return np.zeros((int(height), int(width)), dtype=np.int8)


def grid_size(grid: Grid) -> tuple[int, int]:
    """(width, height) of a grid."""
    height, width = grid.shape
    return int(width), int(height)


def frozen_copy(grid: Grid) -> Grid:
    snapshot = grid.copy()
    snapshot.setflags(write=False)
    return snapshot


def is_position_in_bounds(grid: Grid, x: int, y: int) -> bool:
    width, height = grid_size(grid)
    return 0 <= x < width and 0 <= y < height


def render_piece_on_board(grid: Grid, piece: Optional["GamePiece"]) -> Grid:
    """Overlay the falling piece on a copy of the grid for renderers."""
    display = grid.copy()
    if piece is None:
        return display
    for x, y in piece.cells():
        if is_position_in_bounds(grid, x, y):
            display[y, x] = ACTIVE
    return display

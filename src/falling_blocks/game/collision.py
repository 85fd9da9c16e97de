from __future__ import annotations

from typing import Callable, Optional

from .grid import FILLED, Grid, grid_size
from .pieces import GamePiece, Position


# Returns a forced verdict, or None to fall through to the real check.
CollisionOverride = Callable[[Grid, GamePiece, Position], Optional[bool]]
MoveValidator = Callable[[Grid, GamePiece, Position], bool]


def is_valid_move(grid: Grid, piece: GamePiece, position: Position) -> bool:
    """Check whether `piece` fits on `grid` with its origin at `position`.

    Cells left of the board, right of it or below the floor reject the move.
    Cells above the ceiling (y < 0) are allowed and skip the occupancy check so
    that pieces can spawn and rotate partly outside the visible area.
    """
    width, height = grid_size(grid)
    for x, y in piece.cells_at(position):
        if x < 0 or x >= width or y >= height:
            return False
        if y >= 0 and grid[y, x] != 0:
            return False
    return True


def with_override(override: Optional[CollisionOverride]) -> MoveValidator:
    """Wrap `is_valid_move` so an injected strategy can force its verdict."""
    if override is None:
        return is_valid_move

    def validate(grid: Grid, piece: GamePiece, position: Position) -> bool:
        verdict = override(grid, piece, position)
        if verdict is None:
            return is_valid_move(grid, piece, position)
        return bool(verdict)

    return validate


def place_piece(grid: Grid, piece: GamePiece) -> Grid:
    """Return a new grid with the piece locked in.

    Cells above the ceiling are dropped; normal play never places those.
    """
    placed = grid.copy()
    for x, y in piece.cells():
        if y >= 0:
            placed[y, x] = FILLED
    return placed


def calculate_drop_position(
    grid: Grid, piece: GamePiece, is_valid: MoveValidator = is_valid_move
) -> Position:
    """Lowest position reachable by moving straight down (hard drop target)."""
    _, height = grid_size(grid)
    position = piece.position
    # The floor bounds the search even if an override accepts everything.
    while position.y < height and is_valid(grid, piece, position.moved(dy=1)):
        position = position.moved(dy=1)
    return position

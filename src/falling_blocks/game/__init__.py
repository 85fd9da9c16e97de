"""Falling-block puzzle engine.

Exports the engine and its building blocks:
- grid: board constants and grid helpers
- pieces: Tetromino / Position / GamePiece value types and rotation
- collision: move validation, placement and hard-drop targeting
- rules: line clearing and scoring
- generator: random piece supply with a one-piece preview
- FallingBlockGame: session state machine driven by commands and ticks
- GravityClock / DropTimer: tick drivers
"""

from .grid import WIDTH, HEIGHT, create_empty_grid, render_piece_on_board
from .pieces import GamePiece, Position, Tetromino, TetrominoType, TETROMINOES, rotate_shape
from .collision import CollisionOverride, calculate_drop_position, is_valid_move, place_piece
from .rules import ScoringRules, clear_lines
from .generator import PieceGenerator, RandomSource, random_tetromino
from .events import EventBus, GameEvent
from .core import (
    Action,
    FallingBlockGame,
    GameConfig,
    LINE_DESTROYER_CONFIG,
    Phase,
    SessionState,
    TETRIS_CONFIG,
    VARIANTS,
)
from .timing import DropTimer, GravityClock

__all__ = [
    "WIDTH",
    "HEIGHT",
    "create_empty_grid",
    "render_piece_on_board",
    "GamePiece",
    "Position",
    "Tetromino",
    "TetrominoType",
    "TETROMINOES",
    "rotate_shape",
    "CollisionOverride",
    "calculate_drop_position",
    "is_valid_move",
    "place_piece",
    "ScoringRules",
    "clear_lines",
    "PieceGenerator",
    "RandomSource",
    "random_tetromino",
    "EventBus",
    "GameEvent",
    "Action",
    "FallingBlockGame",
    "GameConfig",
    "LINE_DESTROYER_CONFIG",
    "Phase",
    "SessionState",
    "TETRIS_CONFIG",
    "VARIANTS",
    "DropTimer",
    "GravityClock",
]

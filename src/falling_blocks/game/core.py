from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Dict, Optional

from .collision import CollisionOverride, calculate_drop_position, with_override
from .events import EventBus, GameEvent
from .generator import PieceGenerator, RandomSource, spawn_position
from .grid import HEIGHT, WIDTH, Grid, create_empty_grid, frozen_copy, render_piece_on_board
from .pieces import GamePiece, Tetromino
from .rules import ScoringRules, resolve_placement

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    TOGGLE_PAUSE = 5
    NONE = 6


@dataclass(frozen=True)
class GameConfig:
    width: int = WIDTH
    height: int = HEIGHT
    game_id: str = "tetris"
    rules: ScoringRules = field(default_factory=ScoringRules)
    random_seed: Optional[int] = None


TETRIS_CONFIG = GameConfig(game_id="tetris")
LINE_DESTROYER_CONFIG = GameConfig(game_id="lineDestroyer")

VARIANTS: Dict[str, GameConfig] = {
    TETRIS_CONFIG.game_id: TETRIS_CONFIG,
    LINE_DESTROYER_CONFIG.game_id: LINE_DESTROYER_CONFIG,
}


@dataclass(frozen=True, eq=False)
class SessionState:
    """Read-only view of a session, enough for a renderer to redraw."""

    grid: Grid
    current_piece: Optional[GamePiece]
    next_piece: Tetromino
    score: int
    level: int
    lines_cleared: int
    phase: Phase
    drop_interval_ms: int
    session_id: int
    game_id: str

    def display_grid(self) -> Grid:
        return render_piece_on_board(self.grid, self.current_piece)


class FallingBlockGame:
    """Falling-block session engine shared by every variant.

    Owns the grid and the piece state and runs the Idle -> Playing <-> Paused
    -> GameOver lifecycle. Commands return True when they changed the session
    and False when they were rejected; rejected commands never raise.

    All mutations happen under a single re-entrant lock so a threaded tick
    driver and an input layer can call in concurrently.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None,
        collision_override: Optional[CollisionOverride] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = self.config.rules
        self.events = events or EventBus()
        self._is_valid = with_override(collision_override)
        self._generator = PieceGenerator(rng, seed=self.config.random_seed)
        self._lock = threading.RLock()

        self._phase = Phase.IDLE
        self._session_id = 0
        self._grid: Grid = create_empty_grid(self.config.width, self.config.height)
        self._current: Optional[GamePiece] = None
        self._score = 0
        self._lines = 0

    # Queries

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def score(self) -> int:
        return self._score

    @property
    def lines_cleared(self) -> int:
        return self._lines

    @property
    def level(self) -> int:
        return self.rules.level_for_lines(self._lines)

    @property
    def drop_interval_ms(self) -> int:
        return self.rules.drop_interval_for_level(self.level)

    @property
    def session_id(self) -> int:
        return self._session_id

    @property
    def current_piece(self) -> Optional[GamePiece]:
        return self._current

    @property
    def next_piece(self) -> Tetromino:
        return self._generator.next_piece

    @property
    def grid(self) -> Grid:
        return frozen_copy(self._grid)

    def snapshot(self) -> SessionState:
        with self._lock:
            return SessionState(
                grid=frozen_copy(self._grid),
                current_piece=self._current,
                next_piece=self._generator.next_piece,
                score=self._score,
                level=self.level,
                lines_cleared=self._lines,
                phase=self._phase,
                drop_interval_ms=self.drop_interval_ms,
                session_id=self._session_id,
                game_id=self.config.game_id,
            )

    # Lifecycle

    def start(self) -> bool:
        """Reset everything and begin a new session from any phase."""
        with self._lock:
            self._session_id += 1
            self._grid = create_empty_grid(self.config.width, self.config.height)
            self._score = 0
            self._lines = 0
            self._current = None
            self._generator.reset()
            logger.debug("session %d started (%s)", self._session_id, self.config.game_id)
            # Announced even when restarting from Playing: drivers re-arm per session.
            self._set_phase(Phase.PLAYING, always=True)
            # The loop spawns as soon as there is no active piece.
            self._spawn_piece()
            return True

    def pause(self) -> bool:
        with self._lock:
            if self._phase is not Phase.PLAYING:
                return False
            self._set_phase(Phase.PAUSED)
            return True

    def resume(self) -> bool:
        with self._lock:
            # GameOver is terminal; only start() leaves it.
            if self._phase is not Phase.PAUSED:
                return False
            self._set_phase(Phase.PLAYING)
            if self._current is None:
                self._spawn_piece()
            return True

    def toggle_pause(self) -> bool:
        with self._lock:
            if self._phase is Phase.PLAYING:
                return self.pause()
            return self.resume()

    def teardown(self) -> None:
        """Discard the session; any tick driver bound to it goes stale."""
        with self._lock:
            self._session_id += 1
            self._grid = create_empty_grid(self.config.width, self.config.height)
            self._score = 0
            self._lines = 0
            self._current = None
            self._set_phase(Phase.IDLE)

    # Commands

    def move_left(self) -> bool:
        return self._shift(-1)

    def move_right(self) -> bool:
        return self._shift(1)

    def move_down(self) -> bool:
        """Soft drop one row; lock the piece when the row below is blocked."""
        with self._lock:
            if not self._can_act():
                return False
            assert self._current is not None
            target = self._current.position.moved(dy=1)
            if self._is_valid(self._grid, self._current, target):
                self._current = self._current.moved_to(target)
            else:
                self._lock_piece(self._current, hard_drop=False)
            return True

    def rotate(self) -> bool:
        with self._lock:
            if not self._can_act():
                return False
            assert self._current is not None
            rotated = self._current.rotated()
            # No wall kicks: a blocked rotation is simply dropped.
            if not self._is_valid(self._grid, rotated, rotated.position):
                return False
            self._current = rotated
            return True

    def hard_drop(self) -> bool:
        with self._lock:
            if not self._can_act():
                return False
            assert self._current is not None
            resting = calculate_drop_position(self._grid, self._current, self._is_valid)
            self._lock_piece(self._current.moved_to(resting), hard_drop=True)
            return True

    def tick(self, session_id: Optional[int] = None) -> bool:
        """One automatic descent; spawns instead when no piece is active.

        A driver passes the session id it was armed for so that a fire left
        over from an earlier session is ignored.
        """
        with self._lock:
            if session_id is not None and session_id != self._session_id:
                return False
            if self._phase is not Phase.PLAYING:
                return False
            if self._current is None:
                return self._spawn_piece()
            return self.move_down()

    def step(self, action: Action) -> bool:
        handlers: Dict[Action, Callable[[], bool]] = {
            Action.LEFT: self.move_left,
            Action.RIGHT: self.move_right,
            Action.ROTATE: self.rotate,
            Action.SOFT_DROP: self.move_down,
            Action.HARD_DROP: self.hard_drop,
            Action.TOGGLE_PAUSE: self.toggle_pause,
        }
        handler = handlers.get(Action(action))
        if handler is None:
            return False
        return handler()

    # Internals

    def _can_act(self) -> bool:
        return self._phase is Phase.PLAYING and self._current is not None

    def _shift(self, dx: int) -> bool:
        with self._lock:
            if not self._can_act():
                return False
            assert self._current is not None
            target = self._current.position.moved(dx=dx)
            if not self._is_valid(self._grid, self._current, target):
                return False
            self._current = self._current.moved_to(target)
            return True

    def _set_phase(self, phase: Phase, always: bool = False) -> None:
        if phase is self._phase and not always:
            return
        previous = self._phase
        self._phase = phase
        logger.debug("phase %s -> %s", previous.value, phase.value)
        self.events.emit(GameEvent.PHASE_CHANGED, phase)

    def _spawn_piece(self) -> bool:
        tetromino = self._generator.draw()
        piece = GamePiece(tetromino, spawn_position(self.config.width))
        if not self._is_valid(self._grid, piece, piece.position):
            self._current = None
            self._set_phase(Phase.GAME_OVER)
            logger.info(
                "game over (%s): score=%d lines=%d level=%d",
                self.config.game_id, self._score, self._lines, self.level,
            )
            self.events.emit(GameEvent.GAME_OVER, self._score)
            return True
        self._current = piece
        self.events.emit(GameEvent.PIECE_SPAWNED, piece)
        return True

    def _lock_piece(self, piece: GamePiece, hard_drop: bool) -> None:
        level_before = self.level
        outcome = resolve_placement(self._grid, piece, level_before, self.rules, hard_drop)
        self._grid = outcome.grid
        self._lines += outcome.lines_cleared
        self._score += outcome.score_delta
        self._current = None
        self.events.emit(
            GameEvent.PIECE_LOCKED,
            {"lines": outcome.lines_cleared, "score_delta": outcome.score_delta, "hard_drop": hard_drop},
        )
        if outcome.lines_cleared:
            self.events.emit(GameEvent.LINE_CLEARED, outcome.lines_cleared)
        if self.level > level_before:
            logger.debug("level up: %d (drop interval %d ms)", self.level, self.drop_interval_ms)
            self.events.emit(GameEvent.LEVEL_UP, self.level)
        self._spawn_piece()

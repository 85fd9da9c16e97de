from __future__ import annotations

import itertools
from typing import Callable, List, Optional, Sequence

import pytest

from falling_blocks.game import FallingBlockGame, GameConfig, GameEvent, TetrominoType


class SequenceSource:
    """Random source that plays back a fixed list of piece types.

    The engine draws one preview on construction and one on every start(),
    so the first listed type is only ever seen as a discarded preview.
    """

    def __init__(self, kinds: Sequence[TetrominoType], then: TetrominoType = TetrominoType.O) -> None:
        self._kinds = itertools.chain(kinds, itertools.repeat(then))

    def choice(self, seq):
        return next(self._kinds)


class FakeTimer:
    def __init__(self, interval: float, function: Callable, args=()) -> None:
        self.interval = interval
        self.function = function
        self.args = tuple(args)
        self.started = False
        self.cancelled = False
        self.daemon = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function(*self.args)


@pytest.fixture
def make_game():
    def factory(
        kinds: Sequence[TetrominoType] | TetrominoType = TetrominoType.O,
        config: Optional[GameConfig] = None,
        override=None,
    ) -> FallingBlockGame:
        if isinstance(kinds, TetrominoType):
            source = SequenceSource([], then=kinds)
        else:
            source = SequenceSource(kinds)
        return FallingBlockGame(config, rng=source, collision_override=override)

    return factory


@pytest.fixture
def timers():
    created: List[FakeTimer] = []

    def factory(interval, function, args=()):
        timer = FakeTimer(interval, function, args)
        created.append(timer)
        return timer

    factory.created = created
    return factory


def soft_drop_until_locked(game: FallingBlockGame) -> dict:
    locked: List[dict] = []
    unsubscribe = game.events.subscribe(GameEvent.PIECE_LOCKED, locked.append)
    try:
        while not locked:
            assert game.move_down()
    finally:
        unsubscribe()
    return locked[0]


@pytest.fixture
def soft_drop():
    return soft_drop_until_locked

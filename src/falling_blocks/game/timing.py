from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Optional

from .core import FallingBlockGame, Phase
from .events import GameEvent

logger = logging.getLogger(__name__)


TimerFactory = Callable[..., Any]


class GravityClock:
    """Frame-driven tick driver for render loops.

    Call `update` with the milliseconds elapsed since the previous frame; the
    clock fires `game.tick()` once per `drop_interval_ms`. Time does not
    accumulate while the session is not playing, and a new session starts
    from zero.
    """

    def __init__(self, game: FallingBlockGame) -> None:
        self.game = game
        self.elapsed_ms = 0
        self._session_id = game.session_id

    def update(self, elapsed_ms: int) -> int:
        if self.game.session_id != self._session_id:
            self._session_id = self.game.session_id
            self.elapsed_ms = 0
        if self.game.phase is not Phase.PLAYING:
            self.elapsed_ms = 0
            return 0
        self.elapsed_ms += max(0, int(elapsed_ms))
        ticks = 0
        while self.game.phase is Phase.PLAYING:
            interval = self.game.drop_interval_ms
            if self.elapsed_ms < interval:
                break
            self.elapsed_ms -= interval
            self.game.tick(self._session_id)
            ticks += 1
        return ticks


class DropTimer:
    """Real-time tick driver built on one-shot `threading.Timer`s.

    Each timer is armed for the current `drop_interval_ms` and bound to the
    session id at arm time. Level-ups re-arm it with the new interval; pause,
    game over and teardown cancel it. A fire whose session id is stale does
    nothing and does not re-arm.
    """

    def __init__(self, game: FallingBlockGame, timer_factory: TimerFactory = threading.Timer) -> None:
        self.game = game
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None
        self._closed = False
        self.armed_session_id: Optional[int] = None
        self.armed_interval_ms: Optional[int] = None
        self._unsubscribe: List[Callable[[], None]] = [
            game.events.subscribe(GameEvent.PHASE_CHANGED, self._on_phase_changed),
            game.events.subscribe(GameEvent.LEVEL_UP, self._on_level_up),
        ]
        if game.phase is Phase.PLAYING:
            self._arm()

    @property
    def active(self) -> bool:
        return self._timer is not None

    def close(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self._closed = True
        self._cancel()

    def _on_phase_changed(self, phase: Phase) -> None:
        if phase is Phase.PLAYING:
            self._arm()
        else:
            self._cancel()

    def _on_level_up(self, level: int) -> None:
        logger.debug("re-arming drop timer for level %d", level)
        self._arm()

    def _arm(self, session_id: Optional[int] = None) -> None:
        with self._lock:
            if self._closed or self.game.phase is not Phase.PLAYING:
                return
            # A re-arm after a fire stays bound to the session that fired.
            if session_id is not None and session_id != self.game.session_id:
                return
            if self._timer is not None:
                self._timer.cancel()
            session_id = self.game.session_id
            interval_ms = self.game.drop_interval_ms
            timer = self._timer_factory(interval_ms / 1000.0, self._fire, args=(session_id,))
            timer.daemon = True
            self._timer = timer
            self.armed_session_id = session_id
            self.armed_interval_ms = interval_ms
            timer.start()

    def _cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self.armed_session_id = None
            self.armed_interval_ms = None

    def _fire(self, session_id: int) -> None:
        if self._closed or session_id != self.armed_session_id:
            return
        self.game.tick(session_id)
        self._arm(session_id)

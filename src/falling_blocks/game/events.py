from __future__ import annotations

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, DefaultDict, List

logger = logging.getLogger(__name__)


class GameEvent(Enum):
    PHASE_CHANGED = "phase_changed"
    PIECE_SPAWNED = "piece_spawned"
    PIECE_LOCKED = "piece_locked"
    LINE_CLEARED = "line_cleared"
    LEVEL_UP = "level_up"
    GAME_OVER = "game_over"


Handler = Callable[[Any], None]


class EventBus:
    """Synchronous publish/subscribe hub for engine notifications.

    Handlers run on the emitting thread. A failing handler is logged and
    skipped so a broken collaborator cannot corrupt the session.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[GameEvent, List[Handler]] = defaultdict(list)

    def subscribe(self, event: GameEvent, handler: Handler) -> Callable[[], None]:
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def emit(self, event: GameEvent, payload: Any = None) -> None:
        for handler in list(self._handlers[event]):
            try:
                handler(payload)
            except Exception:
                logger.exception("handler for %s failed", event.value)

    def handler_count(self, event: GameEvent) -> int:
        return len(self._handlers[event])

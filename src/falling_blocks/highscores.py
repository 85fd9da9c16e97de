"""High-score collaborator for variants that keep a leaderboard.

The engine only surfaces the final score through `GameEvent.GAME_OVER`. The
store decides whether it qualifies and keeps the table; this module ships an
in-memory store and the hook that connects it to a game.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, DefaultDict, List, Optional, Protocol

from falling_blocks.game import FallingBlockGame, GameEvent

logger = logging.getLogger(__name__)


@dataclass
class ScoreRecord:
    name: str
    score: int
    game_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class HighScoreStore(Protocol):
    def is_high_score(self, game_id: str, score: int) -> bool: ...

    def save_score(self, record: ScoreRecord) -> ScoreRecord: ...

    def top_scores(self, game_id: str, limit: int = 10) -> List[ScoreRecord]: ...


class InMemoryHighScoreStore:
    """Leaderboard kept in process memory, one table per game id."""

    def __init__(self, table_size: int = 10) -> None:
        self.table_size = int(table_size)
        self._records: DefaultDict[str, List[ScoreRecord]] = defaultdict(list)

    def top_scores(self, game_id: str, limit: int = 10) -> List[ScoreRecord]:
        ranked = sorted(self._records[game_id], key=lambda r: r.score, reverse=True)
        return ranked[:limit]

    def is_high_score(self, game_id: str, score: int) -> bool:
        top = self.top_scores(game_id, self.table_size)
        if len(top) < self.table_size:
            return True
        return score > top[-1].score

    def save_score(self, record: ScoreRecord) -> ScoreRecord:
        self._records[record.game_id].append(record)
        return record

    def clear(self, game_id: Optional[str] = None) -> None:
        if game_id is None:
            self._records.clear()
        else:
            self._records.pop(game_id, None)


class HighScoreHook:
    """Offers a finished game's score to a `HighScoreStore`.

    On game over the hook asks the store whether the score qualifies and, if
    so, keeps it pending until `submit(name)` or `skip()`. Store failures are
    logged and treated as "not a high score"; they never reach the engine.
    """

    def __init__(self, game: FallingBlockGame, store: HighScoreStore) -> None:
        self.game = game
        self.store = store
        self.pending_score: Optional[int] = None
        self.last_saved: Optional[ScoreRecord] = None
        self._unsubscribe: Callable[[], None] = game.events.subscribe(GameEvent.GAME_OVER, self._on_game_over)

    @property
    def game_id(self) -> str:
        return self.game.config.game_id

    @property
    def pending(self) -> bool:
        return self.pending_score is not None

    def _on_game_over(self, score: int) -> None:
        self.pending_score = None
        try:
            qualifies = self.store.is_high_score(self.game_id, score)
        except Exception:
            logger.exception("failed to check high score for %s", self.game_id)
            return
        if qualifies:
            self.pending_score = score

    def submit(self, name: str) -> bool:
        """Save the pending score under `name`; blank names are ignored."""
        name = name.strip()
        if self.pending_score is None or not name:
            return False
        record = ScoreRecord(name=name, score=self.pending_score, game_id=self.game_id)
        try:
            self.last_saved = self.store.save_score(record)
        except Exception:
            logger.exception("failed to save high score for %s", self.game_id)
            return False
        self.pending_score = None
        return True

    def skip(self) -> None:
        self.pending_score = None

    def close(self) -> None:
        self._unsubscribe()

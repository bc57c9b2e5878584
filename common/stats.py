# Aggregate statistics shared by every game, and per-game high scores.

import json
import logging
import threading
from typing import Optional, Dict

logger = logging.getLogger(__name__)

GAME_STATS_KEY = "gameStats"
TETRIS_HIGH_SCORE_KEY = "tetrisHighScore"


def _empty_stats() -> Dict[str, int]:
    return {"gamesPlayed": 0, "totalScore": 0, "bestStreak": 0}


class StatsService:
    """
    Owns the "gameStats" record in the key-value store.

    Games report finished rounds through record_game_result() instead of
    editing the JSON themselves.
    """

    def __init__(self, store):
        self.store = store
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, int]:
        raw = self.store.get(GAME_STATS_KEY)
        stats = _empty_stats()
        if not raw:
            return stats
        try:
            saved = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding malformed {GAME_STATS_KEY}: {e}")
            return stats
        if not isinstance(saved, dict):
            logger.warning(f"Discarding malformed {GAME_STATS_KEY}: not an object")
            return stats
        for field in stats:
            try:
                stats[field] = int(saved.get(field, 0))
            except (TypeError, ValueError):
                logger.warning(f"Resetting non-integer {field} in {GAME_STATS_KEY}")
        return stats

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return self._load()

    def record_game_result(self, score: int, streak: Optional[int] = None) -> Dict[str, int]:
        """
        Count one finished game: gamesPlayed += 1, totalScore += score, and
        bestStreak raised to streak when given and larger.
        Returns the updated stats.
        """
        if score < 0:
            raise ValueError("score cannot be negative")
        with self._lock:
            stats = self._load()
            stats["gamesPlayed"] += 1
            stats["totalScore"] += int(score)
            if streak is not None and streak > stats["bestStreak"]:
                stats["bestStreak"] = int(streak)
            self.store.set(GAME_STATS_KEY, json.dumps(stats))
        logger.info(f"Recorded game result: score={score}, stats={stats}")
        return stats


class HighScoreTracker:
    """
    Single integer record stored as a string under one key.

    By default a higher value is better (scores). With lower_is_better the
    record is a best time or fewest moves, and any first value is stored.
    """

    def __init__(self, store, key: str = TETRIS_HIGH_SCORE_KEY, lower_is_better: bool = False):
        self.store = store
        self.key = key
        self.lower_is_better = lower_is_better

    @property
    def best(self) -> Optional[int]:
        """The stored record, or None when missing or not an integer."""
        raw = self.store.get(self.key)
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-integer record under {self.key}: {raw!r}")
            return None

    @property
    def high_score(self) -> int:
        best = self.best
        return 0 if best is None else best

    def submit(self, score: int) -> bool:
        """Store score if it beats the current record. Returns True if stored."""
        if self.lower_is_better:
            best = self.best
            if best is not None and score >= best:
                return False
        elif score <= self.high_score:
            return False
        self.store.set(self.key, str(score))
        logger.info(f"New record for {self.key}: {score}")
        return True


# Process-wide instance
_stats_service: Optional[StatsService] = None
_service_lock = threading.Lock()


def init_stats_service(store) -> StatsService:
    """Create (or replace) the process-wide StatsService bound to store."""
    global _stats_service
    with _service_lock:
        _stats_service = StatsService(store)
        return _stats_service


def get_stats_service() -> StatsService:
    """Return the process-wide StatsService; init_stats_service() must run first."""
    with _service_lock:
        if _stats_service is None:
            raise RuntimeError("stats service not initialized; call init_stats_service() first")
        return _stats_service

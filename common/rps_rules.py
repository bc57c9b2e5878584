# Self-contained, non-GUI
# Rock-paper-scissors against a random computer, with score tally and
# win streaks kept in the key-value store.

import json
import logging
import random
from typing import Optional

logger = logging.getLogger(__name__)

SCORES_KEY = "rpsScores"
BEST_STREAK_KEY = "rpsBestStreak"
WIN_POINTS = 5

# choice -> the choice it beats
BEATS = {
    "rock": "scissors",
    "paper": "rock",
    "scissors": "paper",
}
CHOICES = tuple(BEATS)

RESULT_WIN = "win"
RESULT_LOSE = "lose"
RESULT_DRAW = "draw"


def determine_winner(player: str, computer: str) -> str:
    for choice in (player, computer):
        if choice not in BEATS:
            raise ValueError(f"Unknown choice: {choice!r}")
    if player == computer:
        return RESULT_DRAW
    return RESULT_WIN if BEATS[player] == computer else RESULT_LOSE


class RockPaperScissorsGame:
    """Rounds against the computer; streak counts consecutive wins."""

    def __init__(self, store, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng or random.Random()
        self.scores = self._load_scores()
        self.best_streak = self._load_best_streak()
        self.streak = 0

    def _load_scores(self) -> dict:
        scores = {"player": 0, "computer": 0, "draws": 0}
        raw = self.store.get(SCORES_KEY)
        if raw:
            try:
                saved = json.loads(raw)
                for key in scores:
                    scores[key] = int(saved.get(key, 0))
            except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
                logger.warning(f"Discarding malformed {SCORES_KEY}: {e}")
        return scores

    def _load_best_streak(self) -> int:
        raw = self.store.get(BEST_STREAK_KEY)
        try:
            return int(raw) if raw else 0
        except ValueError:
            logger.warning(f"Ignoring non-integer {BEST_STREAK_KEY}: {raw!r}")
            return 0

    def play(self, choice: str, computer_choice: Optional[str] = None) -> dict:
        """Play one round. The computer picks at random unless computer_choice is given."""
        if computer_choice is None:
            computer_choice = self.rng.choice(CHOICES)
        result = determine_winner(choice, computer_choice)

        if result == RESULT_WIN:
            self.scores["player"] += 1
            self.streak += 1
            self.best_streak = max(self.best_streak, self.streak)
        elif result == RESULT_LOSE:
            self.scores["computer"] += 1
            self.streak = 0
        else:
            self.scores["draws"] += 1
            self.streak = 0

        self.store.set(SCORES_KEY, json.dumps(self.scores))
        self.store.set(BEST_STREAK_KEY, str(self.best_streak))
        return {
            "player": choice,
            "computer": computer_choice,
            "result": result,
            "points": WIN_POINTS if result == RESULT_WIN else 0,
            "streak": self.streak,
        }

    def reset_scores(self):
        self.scores = {"player": 0, "computer": 0, "draws": 0}
        self.streak = 0
        self.store.set(SCORES_KEY, json.dumps(self.scores))

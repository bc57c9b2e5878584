# Self-contained, non-GUI
# Picture matching: eight emoji pairs shuffled face down. Two flips make
# one move; a matching pair stays up, a mismatch stays visible until the
# front end calls hide_mismatch().

import logging
import random
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

BEST_TIME_KEY = "pictureMatchingBestTime"
BEST_MOVES_KEY = "pictureMatchingBestMoves"

EMOJIS = ("🎮", "🎯", "🎲", "🎪", "🎨", "🎭", "🎸", "🎺")

MAX_POINTS = 100
MIN_POINTS = 10


def score_for_moves(moves: int) -> int:
    """Fewer moves score more, never below MIN_POINTS."""
    return max(MAX_POINTS - moves, MIN_POINTS)


@dataclass
class Card:
    id: int
    emoji: str
    flipped: bool = False
    matched: bool = False

    @property
    def face_up(self) -> bool:
        return self.flipped or self.matched


class MemoryGame:
    """One shuffled deck and the player's progress through it."""

    def __init__(self, seed: Optional[int] = None, clock=time.monotonic):
        self._rng = random.Random(seed)
        self._clock = clock
        self.reset()

    def reset(self):
        faces = list(EMOJIS) * 2
        self._rng.shuffle(faces)
        self.cards: List[Card] = [Card(index, emoji) for index, emoji in enumerate(faces)]
        self.flipped_ids: List[int] = []
        self.matched_pairs = 0
        self.moves = 0
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None

    @property
    def completed(self) -> bool:
        return self.matched_pairs == len(EMOJIS)

    @property
    def awaiting_hide(self) -> bool:
        """Two unmatched cards are face up and must be hidden before the next flip."""
        return len(self.flipped_ids) == 2

    @property
    def elapsed_seconds(self) -> int:
        if self.started_at is None:
            return 0
        end = self.finished_at if self.finished_at is not None else self._clock()
        return int(end - self.started_at)

    @property
    def score(self) -> int:
        return score_for_moves(self.moves)

    def flip(self, card_id: int) -> Dict:
        """
        Turn a card face up. Returns {'success', 'message'} and, on the
        second card of a move, 'match' (bool) and 'completed'.
        """
        if self.completed:
            return {'success': False, 'message': 'Game is already complete'}
        if not (0 <= card_id < len(self.cards)):
            return {'success': False, 'message': 'No such card'}
        if self.awaiting_hide:
            return {'success': False, 'message': 'Wait for the cards to turn back'}
        card = self.cards[card_id]
        if card.face_up:
            return {'success': False, 'message': 'Card is already face up'}

        if self.started_at is None:
            self.started_at = self._clock()
        card.flipped = True
        self.flipped_ids.append(card_id)
        if len(self.flipped_ids) < 2:
            return {'success': True, 'message': f'Flipped {card.emoji}'}

        self.moves += 1
        first, second = (self.cards[i] for i in self.flipped_ids)
        if first.emoji != second.emoji:
            return {'success': True, 'message': 'No match', 'match': False, 'completed': False}

        first.matched = second.matched = True
        first.flipped = second.flipped = False
        self.flipped_ids = []
        self.matched_pairs += 1
        if self.completed:
            self.finished_at = self._clock()
            logger.info(f"Memory game complete: moves={self.moves}, seconds={self.elapsed_seconds}")
        return {'success': True, 'message': 'Match!', 'match': True, 'completed': self.completed}

    def hide_mismatch(self):
        """Turn the unmatched pair back face down."""
        for card_id in self.flipped_ids:
            self.cards[card_id].flipped = False
        self.flipped_ids = []

    def render(self, columns: int = 4) -> str:
        lines = []
        for start in range(0, len(self.cards), columns):
            row = self.cards[start:start + columns]
            lines.append("  ".join(f"{c.id:2d}:{c.emoji if c.face_up else '??'}" for c in row))
        return "\n".join(lines)

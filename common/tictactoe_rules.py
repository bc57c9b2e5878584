# Self-contained, non-GUI
# Tic-tac-toe rules, the persistent score tally, and the players that
# choose moves. A human and a computer opponent both implement
# choose_move(game) -> (row, col), so game loops never special-case either.

import json
import logging
import random
import string
import time
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

SCORES_KEY = "ticTacToeScores"
WIN_POINTS = 10

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits

Move = Tuple[int, int]


class TicTacToeGame:
    """Simple Tic-Tac-Toe game logic."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.board = [[' ' for _ in range(3)] for _ in range(3)]
        self.current_player = 'X'  # X goes first
        self.game_over = False
        self.winner = None
        self.move_count = 0

    def available_moves(self) -> List[Move]:
        return [(r, c) for r in range(3) for c in range(3) if self.board[r][c] == ' ']

    def make_move(self, row: int, col: int, player: str) -> dict:
        """Make a move. Returns {'success': bool, 'message': str}."""
        if self.game_over:
            return {'success': False, 'message': 'Game is already over'}

        if player != self.current_player:
            return {'success': False, 'message': f'Not {player}\'s turn'}

        if not (0 <= row < 3 and 0 <= col < 3):
            return {'success': False, 'message': 'Invalid position'}

        if self.board[row][col] != ' ':
            return {'success': False, 'message': 'Position already taken'}

        self.board[row][col] = player
        self.move_count += 1

        if self._check_win(row, col, player):
            self.game_over = True
            self.winner = player
            return {'success': True, 'message': f'{player} wins!', 'game_over': True, 'winner': player}

        if self.move_count >= 9:
            self.game_over = True
            self.winner = 'TIE'
            return {'success': True, 'message': 'Tie game!', 'game_over': True, 'winner': 'TIE'}

        self.current_player = 'O' if player == 'X' else 'X'
        return {'success': True, 'message': f'{player} played ({row}, {col})'}

    def _check_win(self, row: int, col: int, player: str) -> bool:
        """Check if the last move resulted in a win."""
        if all(self.board[row][c] == player for c in range(3)):
            return True
        if all(self.board[r][col] == player for r in range(3)):
            return True
        # Diagonal (top-left to bottom-right)
        if row == col and all(self.board[i][i] == player for i in range(3)):
            return True
        # Anti-diagonal (top-right to bottom-left)
        if row + col == 2 and all(self.board[i][2 - i] == player for i in range(3)):
            return True
        return False

    def get_state(self) -> dict:
        return {
            'board': [row[:] for row in self.board],
            'current_player': self.current_player,
            'game_over': self.game_over,
            'winner': self.winner,
            'move_count': self.move_count
        }

    def render(self) -> str:
        lines = ["  0   1   2"]
        for i, row in enumerate(self.board):
            lines.append(f"{i} {row[0]} | {row[1]} | {row[2]}")
            if i < 2:
                lines.append("  ---------")
        return "\n".join(lines)


class ScoreTally:
    """Wins per symbol and draws, persisted as JSON."""

    def __init__(self, store):
        self.store = store
        self.scores = self._load()

    def _load(self) -> Dict[str, int]:
        scores = {"X": 0, "O": 0, "draws": 0}
        raw = self.store.get(SCORES_KEY)
        if raw:
            try:
                saved = json.loads(raw)
                for key in scores:
                    scores[key] = int(saved.get(key, 0))
            except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
                logger.warning(f"Discarding malformed {SCORES_KEY}: {e}")
        return scores

    def record(self, winner: str):
        key = "draws" if winner == 'TIE' else winner
        self.scores[key] += 1
        self.store.set(SCORES_KEY, json.dumps(self.scores))

    def reset(self):
        self.scores = {"X": 0, "O": 0, "draws": 0}
        self.store.set(SCORES_KEY, json.dumps(self.scores))


#  Players

class HumanPlayer:
    """Reads "row col" from an input function (the console by default)."""

    def __init__(self, name: str = "Player", input_func=input, output_func=print):
        self.name = name
        self.input_func = input_func
        self.output_func = output_func

    def choose_move(self, game: TicTacToeGame) -> Move:
        while True:
            raw = self.input_func(f"{self.name} ({game.current_player}) - enter row and column: ")
            parts = raw.replace(',', ' ').split()
            try:
                row, col = (int(p) for p in parts)
            except ValueError:
                self.output_func("Please enter two numbers, e.g. '1 2'.")
                continue
            if (row, col) not in game.available_moves():
                self.output_func("That square is not available.")
                continue
            return row, col


class RandomOpponent:
    """Computer opponent that picks uniformly among free squares."""

    def __init__(self, name: str = "Computer", rng: Optional[random.Random] = None):
        self.name = name
        self.rng = rng or random.Random()

    def choose_move(self, game: TicTacToeGame) -> Move:
        moves = game.available_moves()
        if not moves:
            raise ValueError("No moves available")
        return self.rng.choice(moves)


def generate_room_code(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return "".join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


class MockOnlineOpponent(RandomOpponent):
    """
    Stand-in for a remote player: a room that someone "joins" after a
    simulated wait, then random moves after a simulated network delay.
    There is no transport behind it.
    """

    def __init__(self, name: str = "Player2", rng: Optional[random.Random] = None,
                 min_delay: float = 1.0, max_delay: float = 3.0,
                 join_min_delay: float = 3.0, join_max_delay: float = 8.0, sleep=time.sleep):
        super().__init__(name, rng)
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.join_min_delay = join_min_delay
        self.join_max_delay = join_max_delay
        self.sleep = sleep
        self.room_code: Optional[str] = None
        self.connected = False

    def host_room(self) -> str:
        """Open a room and return its code; the opponent has not joined yet."""
        self.room_code = generate_room_code(self.rng)
        self.connected = False
        logger.info(f"Hosting room {self.room_code}")
        return self.room_code

    def wait_for_join(self):
        """Block until the simulated opponent joins the hosted room."""
        if self.room_code is None:
            raise RuntimeError("No room is open; call host_room() first")
        self.sleep(self.rng.uniform(self.join_min_delay, self.join_max_delay))
        self.connected = True
        logger.info(f"{self.name} joined room {self.room_code}")

    def join_room(self, room_code: str):
        """Join someone else's room; the host is there already."""
        room_code = room_code.strip().upper()
        if not room_code:
            raise ValueError("Room code cannot be empty")
        self.room_code = room_code
        self.connected = True

    def choose_move(self, game: TicTacToeGame) -> Move:
        if not self.connected:
            raise RuntimeError("Opponent is not connected")
        self.sleep(self.rng.uniform(self.min_delay, self.max_delay))
        return super().choose_move(game)


def play_match(game: TicTacToeGame, players: Dict[str, object], on_move=None) -> str:
    """
    Ask each player for moves in turn until the game ends.
    players maps 'X' and 'O' to objects with choose_move(game).
    Returns the winner ('X', 'O' or 'TIE').
    """
    while not game.game_over:
        symbol = game.current_player
        row, col = players[symbol].choose_move(game)
        result = game.make_move(row, col, symbol)
        if not result['success']:
            raise ValueError(f"{symbol} chose an illegal move ({row}, {col}): {result['message']}")
        if on_move is not None:
            on_move(game, result)
    return game.winner

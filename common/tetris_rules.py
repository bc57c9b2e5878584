# Self-contained, non-networked, non-GUI
# Logic for a single game of Tetris.
# The pygame front end (games/tetris.py) drives one instance of
# TetrisGame with key events and a gravity timer.

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Constants
BOARD_WIDTH = 10
BOARD_HEIGHT = 20

# Base shapes at rotation 0, each with its color tag
TETROMINOS = {
    "I": {"shape": ((1, 1, 1, 1),), "color": "cyan"},
    "O": {"shape": ((1, 1),
                    (1, 1)), "color": "yellow"},
    "T": {"shape": ((0, 1, 0),
                    (1, 1, 1)), "color": "purple"},
    "S": {"shape": ((0, 1, 1),
                    (1, 1, 0)), "color": "green"},
    "Z": {"shape": ((1, 1, 0),
                    (0, 1, 1)), "color": "red"},
    "J": {"shape": ((1, 0, 0),
                    (1, 1, 1)), "color": "blue"},
    "L": {"shape": ((0, 0, 1),
                    (1, 1, 1)), "color": "orange"},
}
TETROMINO_TYPES = ("I", "O", "T", "S", "Z", "J", "L")

# Gravity
BASE_DROP_INTERVAL_MS = 1000
DROP_INTERVAL_STEP_MS = 50
MIN_DROP_INTERVAL_MS = 100
LINES_PER_LEVEL = 10

# Scoring
POINTS_PER_LINE = 100
POINTS_PER_PIECE = 10

# Game status
STATUS_IDLE = "idle"
STATUS_RUNNING = "running"
STATUS_PAUSED = "paused"
STATUS_GAME_OVER = "game_over"

Shape = Tuple[Tuple[int, ...], ...]


@dataclass(frozen=True)
class Cell:
    filled: bool = False
    color: str = ""


EMPTY_CELL = Cell()

Board = List[List[Cell]]


#  Pure helpers

def create_empty_board() -> Board:
    return [[EMPTY_CELL for _ in range(BOARD_WIDTH)] for _ in range(BOARD_HEIGHT)]


def rotate_shape(shape: Shape) -> Shape:
    """Rotate a shape matrix 90 degrees clockwise (R x C becomes C x R)."""
    rows = len(shape)
    cols = len(shape[0])
    rotated = [[0] * rows for _ in range(cols)]
    for i in range(rows):
        for j in range(cols):
            rotated[j][rows - 1 - i] = shape[i][j]
    return tuple(tuple(row) for row in rotated)


def get_shape(piece_type: str, rotation: int = 0) -> Shape:
    """Base shape of piece_type rotated clockwise 'rotation' times."""
    if piece_type not in TETROMINOS:
        raise ValueError(f"Unknown tetromino type: {piece_type!r}")
    shape = TETROMINOS[piece_type]["shape"]
    for _ in range(rotation % 4):
        shape = rotate_shape(shape)
    return shape


def is_valid_position(shape: Shape, position: Tuple[int, int], board: Board) -> bool:
    """
    Checks whether shape fits on the board with its top-left at position (x, y).
    Rows above the board (negative y) are allowed and never collide.
    """
    pos_x, pos_y = position
    for y, row in enumerate(shape):
        for x, value in enumerate(row):
            if not value:
                continue
            board_x = pos_x + x
            board_y = pos_y + y
            # Wall and floor bounds
            if board_x < 0 or board_x >= BOARD_WIDTH or board_y >= BOARD_HEIGHT:
                return False
            # Only visible rows can hold locked cells
            if board_y >= 0 and board[board_y][board_x].filled:
                return False
    return True


def clear_lines(board: Board) -> int:
    """Removes full rows in place, refilling from the top. Returns the count."""
    kept_rows = [row for row in board if not all(cell.filled for cell in row)]
    cleared = BOARD_HEIGHT - len(kept_rows)
    if cleared:
        empty_rows = [[EMPTY_CELL for _ in range(BOARD_WIDTH)] for _ in range(cleared)]
        board[:] = empty_rows + kept_rows
    return cleared


def level_for_lines(total_lines: int) -> int:
    return total_lines // LINES_PER_LEVEL + 1


def drop_interval_for_level(level: int) -> int:
    return max(MIN_DROP_INTERVAL_MS, BASE_DROP_INTERVAL_MS - (level - 1) * DROP_INTERVAL_STEP_MS)


#  Helper Class

class ActivePiece:
    """The falling piece: type, top-left position and rotation index."""

    def __init__(self, piece_type: str, x: int, y: int, rotation: int = 0):
        if piece_type not in TETROMINOS:
            raise ValueError(f"Unknown tetromino type: {piece_type!r}")
        self.type = piece_type
        self.x = x
        self.y = y
        self.rotation = rotation % 4

    @property
    def shape(self) -> Shape:
        return get_shape(self.type, self.rotation)

    @property
    def color(self) -> str:
        return TETROMINOS[self.type]["color"]

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def get_blocks(self) -> List[Tuple[int, int]]:
        """Absolute (x, y) board coordinates of the piece's filled cells."""
        return [(self.x + x, self.y + y)
                for y, row in enumerate(self.shape)
                for x, value in enumerate(row) if value]

    def __repr__(self):
        return f"ActivePiece({self.type!r}, x={self.x}, y={self.y}, rotation={self.rotation})"


#  Main Game Class

class TetrisGame:
    """Manages the state of one Tetris board."""

    def __init__(self, seed: Optional[int] = None):
        # Seedable RNG for reproducible piece sequences
        self._rng = random.Random(seed)
        self._game_over_listeners: List[Callable[["TetrisGame"], None]] = []
        self.reset()

    def reset(self):
        """Back to Idle: empty board, zeroed counters, no active or queued piece."""
        self.board = create_empty_board()
        self.active_piece: Optional[ActivePiece] = None
        self.next_type: Optional[str] = None
        self.running = False
        self.over = False
        self.score = 0
        self.level = 1
        self.lines_cleared = 0
        self.drop_interval_ms = BASE_DROP_INTERVAL_MS

    @property
    def status(self) -> str:
        if self.over:
            return STATUS_GAME_OVER
        if self.running:
            return STATUS_RUNNING
        if self.active_piece is not None:
            return STATUS_PAUSED
        return STATUS_IDLE

    def add_game_over_listener(self, listener: Callable[["TetrisGame"], None]):
        """Register a callable invoked with this game when it reaches GameOver."""
        self._game_over_listeners.append(listener)

    def _random_type(self) -> str:
        return self._rng.choice(TETROMINO_TYPES)

    def spawn(self):
        """Promotes next_type to the active piece and checks for game over."""
        piece_type = self.next_type or self._random_type()
        self.next_type = self._random_type()
        piece = ActivePiece(piece_type, BOARD_WIDTH // 2 - 1, 0)

        if not is_valid_position(piece.shape, piece.position, self.board):
            self.active_piece = None
            self._game_over()
            return
        self.active_piece = piece

    def _game_over(self):
        self.over = True
        self.running = False
        logger.info(f"Game over: score={self.score}, level={self.level}, lines={self.lines_cleared}")
        for listener in list(self._game_over_listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Game over listener failed: {e}", exc_info=True)

    def _accepts_input(self) -> bool:
        return self.running and not self.over and self.active_piece is not None

    def _lock_piece(self):
        """Stamps the active piece onto the board, clears lines, scores, spawns."""
        piece = self.active_piece
        for x, y in piece.get_blocks():
            # Cells still above the board are discarded
            if y >= 0:
                self.board[y][x] = Cell(True, piece.color)
        self.active_piece = None

        cleared = clear_lines(self.board)
        self.score += cleared * POINTS_PER_LINE * self.level + POINTS_PER_PIECE
        self.lines_cleared += cleared
        self.level = level_for_lines(self.lines_cleared)
        self.drop_interval_ms = drop_interval_for_level(self.level)
        if cleared:
            logger.debug(f"Cleared {cleared} line(s); level {self.level}")

        self.spawn()

    #  Public API (called by the front end)

    def start(self):
        """Idle/Paused -> Running. Spawns the first piece when none is active."""
        if self.over:
            return
        self.running = True
        if self.active_piece is None:
            self.spawn()

    def pause(self):
        """Running -> Paused, keeping all state."""
        if self.over:
            return
        self.running = False

    def move(self, dx: int, dy: int = 0) -> bool:
        """Shift the active piece. Returns False (and changes nothing) if blocked."""
        if not self._accepts_input():
            return False
        piece = self.active_piece
        candidate = (piece.x + dx, piece.y + dy)
        if not is_valid_position(piece.shape, candidate, self.board):
            return False
        piece.x, piece.y = candidate
        return True

    def rotate(self) -> bool:
        """Rotate the active piece clockwise. No wall kicks."""
        if not self._accepts_input():
            return False
        piece = self.active_piece
        new_rotation = (piece.rotation + 1) % 4
        if not is_valid_position(get_shape(piece.type, new_rotation), piece.position, self.board):
            return False
        piece.rotation = new_rotation
        return True

    def tick(self):
        """Gravity: move the active piece down by one, or lock it if it can't move."""
        if not self._accepts_input():
            return
        if not self.move(0, 1):
            self._lock_piece()

    def soft_drop(self):
        """Player-requested drop by one row; same as a gravity tick."""
        self.tick()

    def hard_drop(self):
        """Drop the active piece as far as it goes and lock it immediately."""
        if not self._accepts_input():
            return
        while self.move(0, 1):
            pass
        self._lock_piece()

    def get_display_board(self) -> Board:
        """Locked cells with the active piece drawn on top."""
        display = [row[:] for row in self.board]
        piece = self.active_piece
        if piece is not None:
            for x, y in piece.get_blocks():
                if 0 <= y < BOARD_HEIGHT and 0 <= x < BOARD_WIDTH:
                    display[y][x] = Cell(True, piece.color)
        return display

    def get_state_snapshot(self) -> dict:
        """
        Returns the render state of the game as a
        JSON-serializable dictionary.
        """
        return {
            "board": [[{"filled": cell.filled, "color": cell.color} for cell in row]
                      for row in self.get_display_board()],
            "next_type": self.next_type,
            "next_shape": [list(row) for row in get_shape(self.next_type)] if self.next_type else None,
            "score": self.score,
            "level": self.level,
            "lines": self.lines_cleared,
            "drop_interval_ms": self.drop_interval_ms,
            "status": self.status,
            "running": self.running,
            "game_over": self.over,
        }

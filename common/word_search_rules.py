# Self-contained, non-GUI
# Word search: eight words hidden in a 15x15 letter grid in any of the
# eight straight directions. The player selects a straight line of cells
# by its two ends; a word read forwards or backwards counts.

import logging
import random
import string
import time
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

HIGH_SCORE_KEY = "wordPuzzleHighScore"

WORDS = (
    "REACT", "JAVASCRIPT", "CODING", "PUZZLE", "GAME", "WORD", "SEARCH", "FIND",
    "LETTERS", "GRID", "CHALLENGE", "BRAIN", "LOGIC", "PATTERN", "SOLVE", "THINK",
)

GRID_SIZE = 15
WORDS_PER_PUZZLE = 8
PLACEMENT_ATTEMPTS = 100
POINTS_PER_WORD = 100

# (d_row, d_col)
DIRECTIONS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)

Cell = Tuple[int, int]


def line_cells(start: Cell, end: Cell) -> List[Cell]:
    """
    Cells on the straight line from start to end, inclusive.
    Anything that is not horizontal, vertical or 45° diagonal selects
    only the start cell.
    """
    d_row = end[0] - start[0]
    d_col = end[1] - start[1]
    if d_row and d_col and abs(d_row) != abs(d_col):
        return [start]
    steps = max(abs(d_row), abs(d_col))
    if steps == 0:
        return [start]
    step_row, step_col = d_row // steps, d_col // steps
    return [(start[0] + i * step_row, start[1] + i * step_col) for i in range(steps + 1)]


def place_words(words, rng: random.Random, size: int = GRID_SIZE):
    """
    Try to place each word in a random direction; words may cross on equal
    letters. Returns (grid, placements) where empty cells are '' and
    placements maps each placed word to its cells. Words that found no
    spot after PLACEMENT_ATTEMPTS tries are left out.
    """
    grid = [["" for _ in range(size)] for _ in range(size)]
    placements: Dict[str, List[Cell]] = {}
    for word in words:
        for _ in range(PLACEMENT_ATTEMPTS):
            d_row, d_col = rng.choice(DIRECTIONS)
            row, col = rng.randrange(size), rng.randrange(size)
            cells = [(row + i * d_row, col + i * d_col) for i in range(len(word))]
            if all(0 <= r < size and 0 <= c < size and grid[r][c] in ("", letter)
                   for (r, c), letter in zip(cells, word)):
                for (r, c), letter in zip(cells, word):
                    grid[r][c] = letter
                placements[word] = cells
                break
        else:
            logger.warning(f"Could not place {word!r}; leaving it out of this puzzle")
    return grid, placements


class WordSearchGame:
    """One puzzle, the words found so far and the elapsed time."""

    def __init__(self, seed: Optional[int] = None, clock=time.monotonic,
                 word_count: int = WORDS_PER_PUZZLE):
        self._rng = random.Random(seed)
        self._clock = clock
        self.word_count = word_count
        self.new_puzzle()

    def new_puzzle(self):
        chosen = self._rng.sample(WORDS, self.word_count)
        grid, self.placements = place_words(chosen, self._rng)
        self.words = [word for word in chosen if word in self.placements]
        self.grid = [[letter or self._rng.choice(string.ascii_uppercase) for letter in row] for row in grid]
        self.found: List[str] = []
        self.found_cells = set()
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None

    @property
    def completed(self) -> bool:
        return bool(self.words) and len(self.found) == len(self.words)

    @property
    def elapsed_seconds(self) -> int:
        if self.started_at is None:
            return 0
        end = self.finished_at if self.finished_at is not None else self._clock()
        return int(end - self.started_at)

    @property
    def score(self) -> int:
        """Final score: 100 per word minus one per second. May be negative."""
        return len(self.words) * POINTS_PER_WORD - self.elapsed_seconds

    def letters(self, cells: List[Cell]) -> str:
        return "".join(self.grid[r][c] for r, c in cells)

    def select(self, start: Cell, end: Cell) -> Optional[str]:
        """Check the line between start and end. Returns the newly found word, or None."""
        if self.completed:
            return None
        for r, c in (start, end):
            if not (0 <= r < GRID_SIZE and 0 <= c < GRID_SIZE):
                raise ValueError(f"Cell ({r}, {c}) is outside the grid")
        if self.started_at is None:
            self.started_at = self._clock()

        cells = line_cells(start, end)
        text = self.letters(cells)
        for word in self.words:
            if word in self.found or word not in (text, text[::-1]):
                continue
            self.found.append(word)
            self.found_cells.update(cells)
            if self.completed:
                self.finished_at = self._clock()
                logger.info(f"Word search complete in {self.elapsed_seconds}s, score {self.score}")
            return word
        return None

    def word_list(self, show_hints: bool = False) -> List[str]:
        """The words to find; unfound ones are masked unless hints are on."""
        return [word if show_hints or word in self.found else "???" for word in self.words]

    def render(self) -> str:
        # Found letters are shown in lower case
        lines = ["    " + "".join(f"{c:3d}" for c in range(GRID_SIZE))]
        for r, row in enumerate(self.grid):
            cells = [letter.lower() if (r, c) in self.found_cells else letter for c, letter in enumerate(row)]
            lines.append(f"{r:3d} " + "".join(f"{letter:>3}" for letter in cells))
        return "\n".join(lines)

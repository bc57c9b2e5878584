# Self-contained, non-GUI
# Snake on a walled square grid, single player or two players on one
# keyboard. Ticks are driven by the front end's timer at speed_ms;
# every food eaten speeds the game up.

import logging
import random
from collections import deque
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

GRID_SIZE = 20

SNAKE_HIGH_SCORE_KEY = "snakeHighScore"

MODE_SINGLE = "single"
MODE_MULTIPLAYER = "multiplayer"
MODES = (MODE_SINGLE, MODE_MULTIPLAYER)

POINTS_PER_FOOD = 10
INITIAL_SPEED_MS = 150
SPEED_STEP_MS = 2
MIN_SPEED_MS = 80

INITIAL_FOOD = (15, 15)

DIRECTIONS = {
    'UP': (0, -1),
    'DOWN': (0, 1),
    'LEFT': (-1, 0),
    'RIGHT': (1, 0),
}
OPPOSITE = {'UP': 'DOWN', 'DOWN': 'UP', 'LEFT': 'RIGHT', 'RIGHT': 'LEFT'}

Position = Tuple[int, int]


class Snake:
    """A snake's body (head first) and its heading."""

    def __init__(self, start_pos: Position, direction: str, name: str, color: str):
        self.body = deque([start_pos])
        self.direction = direction
        self.name = name
        self.color = color
        self.score = 0

    @property
    def head(self) -> Position:
        return self.body[0]

    def change_direction(self, new_direction: str) -> bool:
        """Turn, unless new_direction would reverse the snake onto itself."""
        if new_direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {new_direction!r}")
        if new_direction == OPPOSITE[self.direction]:
            return False
        self.direction = new_direction
        return True

    def next_head(self) -> Position:
        dx, dy = DIRECTIONS[self.direction]
        return (self.head[0] + dx, self.head[1] + dy)


class SnakeGame:
    """Board state for one round of Snake."""

    def __init__(self, mode: str = MODE_SINGLE, seed: Optional[int] = None):
        if mode not in MODES:
            raise ValueError(f"Unknown mode: {mode}")
        self.mode = mode
        self._rng = random.Random(seed)
        self._game_over_listeners: List[Callable[["SnakeGame"], None]] = []
        self.reset()

    def reset(self):
        self.snakes = [Snake((10, 10), 'RIGHT', "Player 1", "green")]
        if self.mode == MODE_MULTIPLAYER:
            self.snakes.append(Snake((5, 5), 'LEFT', "Player 2", "blue"))
        self.food: Optional[Position] = INITIAL_FOOD
        self.speed_ms = INITIAL_SPEED_MS
        self.running = False
        self.over = False
        self.winner: Optional[str] = None

    def add_game_over_listener(self, listener: Callable[["SnakeGame"], None]):
        self._game_over_listeners.append(listener)

    @property
    def final_score(self) -> int:
        """The score that counts for the high score and stats: the best snake's."""
        return max(snake.score for snake in self.snakes)

    def start(self):
        if self.over:
            return
        self.running = True

    def pause(self):
        self.running = False

    def toggle_pause(self):
        if self.running:
            self.pause()
        else:
            self.start()

    def turn(self, player: int, direction: str) -> bool:
        """Change a snake's heading. Ignored unless running."""
        if not self.running or player >= len(self.snakes):
            return False
        return self.snakes[player].change_direction(direction)

    def _occupied(self) -> set:
        return {pos for snake in self.snakes for pos in snake.body}

    def _place_food(self):
        free = [(x, y) for y in range(GRID_SIZE) for x in range(GRID_SIZE)
                if (x, y) not in self._occupied()]
        self.food = self._rng.choice(free) if free else None

    def _crashes(self, head: Position) -> bool:
        x, y = head
        if not (0 <= x < GRID_SIZE and 0 <= y < GRID_SIZE):
            return True
        # The whole current body counts, tail included
        return any(head in other.body for other in self.snakes)

    def tick(self):
        """Advance every snake one cell; a crash ends the round."""
        if not self.running or self.over:
            return
        for index, snake in enumerate(self.snakes):
            head = snake.next_head()
            if self._crashes(head):
                if self.mode == MODE_MULTIPLAYER:
                    self.winner = self.snakes[1 - index].name
                self._game_over()
                return
            snake.body.appendleft(head)
            if head == self.food:
                snake.score += POINTS_PER_FOOD
                self.speed_ms = max(self.speed_ms - SPEED_STEP_MS, MIN_SPEED_MS)
                self._place_food()
            else:
                snake.body.pop()

    def _game_over(self):
        self.over = True
        self.running = False
        logger.info(f"Snake over: scores={[s.score for s in self.snakes]}, winner={self.winner}")
        for listener in list(self._game_over_listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Game over listener failed: {e}", exc_info=True)

    def get_display_grid(self) -> List[List[str]]:
        """Color tag per cell ('' for empty): food, then snakes on top."""
        grid = [["" for _ in range(GRID_SIZE)] for _ in range(GRID_SIZE)]
        if self.food is not None:
            grid[self.food[1]][self.food[0]] = "red"
        for snake in self.snakes:
            for x, y in snake.body:
                grid[y][x] = snake.color
        return grid

    def get_state(self) -> Dict:
        return {
            'mode': self.mode,
            'snakes': [{'name': s.name, 'body': list(s.body), 'direction': s.direction, 'score': s.score}
                       for s in self.snakes],
            'food': self.food,
            'speed_ms': self.speed_ms,
            'running': self.running,
            'game_over': self.over,
            'winner': self.winner,
        }

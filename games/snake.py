#!/usr/bin/env python3
"""
Snake
A pygame front end for common/snake_rules.py.
Player 1 steers with the arrow keys; in multiplayer mode Player 2 uses WASD.
Space pauses and resumes, R resets.
"""

import argparse
import logging
import os
import sys

import pygame

# Add project root to path to access common modules
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from common import config
from common.snake_rules import GRID_SIZE, MODES, MODE_SINGLE, SNAKE_HIGH_SCORE_KEY, SnakeGame
from common.stats import HighScoreTracker, get_stats_service, init_stats_service
from common.storage import JsonFileStore
from common.sync import LeaderboardClient, upload_score_in_background
from common.tetris_rules import Cell
from gui.base_gui import BASE_CONFIG, Button, draw_board, draw_text, load_fonts

logger = logging.getLogger(__name__)

# ============================================================================
# INPUT AND GAME-OVER HANDLING
# ============================================================================

# key -> (player index, direction)
KEY_TURNS = {
    pygame.K_UP: (0, 'UP'),
    pygame.K_DOWN: (0, 'DOWN'),
    pygame.K_LEFT: (0, 'LEFT'),
    pygame.K_RIGHT: (0, 'RIGHT'),
    pygame.K_w: (1, 'UP'),
    pygame.K_s: (1, 'DOWN'),
    pygame.K_a: (1, 'LEFT'),
    pygame.K_d: (1, 'RIGHT'),
}


def process_input(game: SnakeGame, action: str):
    """START, PAUSE, TOGGLE, RESET, or 'TURN:<player>:<direction>'."""
    if action == "START":
        game.start()
    elif action == "PAUSE":
        game.pause()
    elif action == "TOGGLE":
        game.toggle_pause()
    elif action == "RESET":
        game.reset()
    elif action.startswith("TURN:"):
        _, player, direction = action.split(":")
        game.turn(int(player), direction)
    else:
        logger.warning(f"Ignoring unknown action: {action}")


class SnakeSession:
    """A Snake game plus high score, stats and leaderboard bookkeeping on game over."""

    def __init__(self, store, stats_service, leaderboard_client=None, mode=MODE_SINGLE, seed=None, sync=True):
        self.store = store
        self.stats_service = stats_service
        self.leaderboard_client = leaderboard_client
        self.sync = sync
        self.high_scores = HighScoreTracker(store, SNAKE_HIGH_SCORE_KEY)
        try:
            self.high_score = self.high_scores.high_score
        except Exception as e:
            logger.error(f"Could not read high score: {e}")
            self.high_score = 0
        self.game = SnakeGame(mode, seed)
        self.game.add_game_over_listener(self._on_game_over)

    def _on_game_over(self, game: SnakeGame):
        final_score = game.final_score
        self.high_score = max(self.high_score, final_score)
        try:
            self.high_scores.submit(final_score)
        except Exception as e:
            logger.error(f"Failed to save high score: {e}")
        try:
            self.stats_service.record_game_result(final_score)
        except Exception as e:
            logger.error(f"Failed to record game stats: {e}")
            return
        if self.sync:
            upload_score_in_background(self.store, self.stats_service, self.leaderboard_client)

    def handle_action(self, action: str):
        process_input(self.game, action)

# ============================================================================
# GAME CLIENT (pygame window and loop)
# ============================================================================

TICK_EVENT = pygame.USEREVENT + 2

CELL_SIZE = 25
BOARD_POS = (30, 40)
PANEL_X = BOARD_POS[0] + GRID_SIZE * CELL_SIZE + 30


def draw_game_state(surface, fonts, session: SnakeSession, ui_elements):
    colors = BASE_CONFIG["COLORS"]
    game = session.game
    cells = [[Cell(bool(tag), tag) for tag in row] for row in game.get_display_grid()]
    draw_board(surface, cells, BOARD_POS[0], BOARD_POS[1], CELL_SIZE)

    y = BOARD_POS[1]
    for snake in game.snakes:
        draw_text(surface, snake.name.upper(), PANEL_X, y, fonts["SMALL"], colors["MUTED_TEXT"])
        draw_text(surface, str(snake.score), PANEL_X, y + 22, fonts["MEDIUM"], colors["TEXT"])
        y += 60
    draw_text(surface, "HIGH", PANEL_X, y, fonts["SMALL"], colors["MUTED_TEXT"])
    draw_text(surface, str(max(session.high_score, game.final_score)), PANEL_X, y + 22,
              fonts["MEDIUM"], colors["TEXT"])
    y += 70

    if game.over:
        message = f"{game.winner} wins!" if game.winner else "Game Over"
        draw_text(surface, message, PANEL_X, y, fonts["SMALL"], colors["ERROR"])
    elif not game.running:
        draw_text(surface, "Paused", PANEL_X, y, fonts["SMALL"], colors["TEXT"])

    for button in ui_elements.values():
        button.draw(surface)


def run_game_client(store_path: str, host: str, port: int, mode=MODE_SINGLE, seed=None, sync=True):
    """Runs the Snake window until the player closes it."""
    store = JsonFileStore(store_path)
    init_stats_service(store)
    session = SnakeSession(store, get_stats_service(), LeaderboardClient(host, port),
                           mode=mode, seed=seed, sync=sync)

    pygame.init()
    pygame.font.init()
    screen = pygame.display.set_mode((PANEL_X + 200, BOARD_POS[1] * 2 + GRID_SIZE * CELL_SIZE))
    pygame.display.set_caption("PlayZone - Snake")
    clock = pygame.time.Clock()
    fonts = load_fonts()

    button_y = BOARD_POS[1] + GRID_SIZE * CELL_SIZE - 40
    ui_elements = {
        "START": Button(PANEL_X, button_y - 100, 120, 40, fonts["SMALL"], "Start"),
        "PAUSE": Button(PANEL_X, button_y - 50, 120, 40, fonts["SMALL"], "Pause"),
        "RESET": Button(PANEL_X, button_y, 120, 40, fonts["SMALL"], "Reset"),
    }

    armed_interval = None
    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        session.handle_action("TOGGLE")
                    elif event.key == pygame.K_r:
                        session.handle_action("RESET")
                    elif event.key in KEY_TURNS:
                        player, direction = KEY_TURNS[event.key]
                        session.handle_action(f"TURN:{player}:{direction}")
                elif event.type == TICK_EVENT:
                    session.game.tick()
                else:
                    for action, button in ui_elements.items():
                        if button.handle_event(event):
                            session.handle_action(action)

            wanted = session.game.speed_ms if session.game.running else None
            if wanted != armed_interval:
                pygame.time.set_timer(TICK_EVENT, wanted or 0)
                armed_interval = wanted

            screen.fill(BASE_CONFIG["COLORS"]["BACKGROUND"])
            draw_game_state(screen, fonts, session, ui_elements)
            pygame.display.flip()
            clock.tick(BASE_CONFIG["TIMING"]["FPS"])
    finally:
        pygame.time.set_timer(TICK_EVENT, 0)
        pygame.quit()
        logger.info("Snake window closed.")


def main():
    parser = argparse.ArgumentParser(description="PlayZone Snake")
    parser.add_argument('--mode', choices=MODES, default=MODE_SINGLE, help='One snake or two on one keyboard')
    parser.add_argument('--store', type=str, default=config.LOCAL_STORE_FILE, help='Local key-value store file')
    parser.add_argument('--host', type=str, default=config.LEADERBOARD_HOST, help='Leaderboard server host')
    parser.add_argument('--port', type=int, default=config.LEADERBOARD_PORT, help='Leaderboard server port')
    parser.add_argument('--seed', type=int, default=None, help='Seed for food placement')
    parser.add_argument('--no-sync', action='store_true', help='Do not upload results to the leaderboard')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='[SNAKE] %(asctime)s - %(message)s')
    run_game_client(args.store, args.host, args.port, mode=args.mode, seed=args.seed, sync=not args.no_sync)


if __name__ == "__main__":
    main()

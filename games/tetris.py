#!/usr/bin/env python3
"""
Tetris
A single-player pygame front end for the Tetris engine in common/tetris_rules.py:
- Input mapping (keyboard and on-screen buttons) onto engine actions
- Gravity driven by a pygame timer at the engine's drop interval
- Game-over bookkeeping: high score, shared stats, leaderboard sync
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
from common.stats import HighScoreTracker, TETRIS_HIGH_SCORE_KEY, get_stats_service, init_stats_service
from common.storage import JsonFileStore
from common.sync import LeaderboardClient, upload_score_in_background
from common.tetris_rules import (
    BOARD_HEIGHT, BOARD_WIDTH, STATUS_GAME_OVER, STATUS_IDLE, STATUS_PAUSED, STATUS_RUNNING,
    TETROMINOS, TetrisGame, get_shape,
)
from gui.base_gui import BASE_CONFIG, Button, draw_board, draw_shape, draw_text, load_fonts

logger = logging.getLogger(__name__)

# ============================================================================
# INPUT AND GAME-OVER HANDLING
# ============================================================================

ACTIONS = ("MOVE_LEFT", "MOVE_RIGHT", "SOFT_DROP", "ROTATE", "HARD_DROP", "START", "PAUSE", "RESET")

KEY_ACTIONS = {
    pygame.K_LEFT: "MOVE_LEFT",
    pygame.K_RIGHT: "MOVE_RIGHT",
    pygame.K_DOWN: "SOFT_DROP",
    pygame.K_UP: "ROTATE",
    pygame.K_SPACE: "ROTATE",
    pygame.K_RETURN: "HARD_DROP",
    pygame.K_s: "START",
    pygame.K_p: "PAUSE",
    pygame.K_r: "RESET",
}


def process_input(game: TetrisGame, action: str):
    """Maps an action string to a game logic function."""
    if action == "MOVE_LEFT":
        game.move(-1, 0)
    elif action == "MOVE_RIGHT":
        game.move(1, 0)
    elif action == "ROTATE":
        game.rotate()
    elif action == "SOFT_DROP":
        game.soft_drop()
    elif action == "HARD_DROP":
        game.hard_drop()
    elif action == "START":
        game.start()
    elif action == "PAUSE":
        game.pause()
    elif action == "RESET":
        game.reset()
    else:
        logger.warning(f"Ignoring unknown action: {action}")


class TetrisSession:
    """
    One player's Tetris game plus its collaborators.

    When the engine reaches game over the session stores the high score,
    records the result with the stats service and starts a background
    leaderboard upload. Failures there are logged and never reach the engine.
    """

    def __init__(self, store, stats_service, leaderboard_client=None, seed=None, sync=True):
        self.store = store
        self.stats_service = stats_service
        self.leaderboard_client = leaderboard_client
        self.sync = sync
        self.high_scores = HighScoreTracker(store, TETRIS_HIGH_SCORE_KEY)
        self.high_score = self._read_high_score()
        self.game = TetrisGame(seed)
        self.game.add_game_over_listener(self._on_game_over)

    def _read_high_score(self) -> int:
        try:
            return self.high_scores.high_score
        except Exception as e:
            logger.error(f"Could not read high score: {e}")
            return 0

    def _on_game_over(self, game: TetrisGame):
        final_score = game.score
        if final_score > self.high_score:
            self.high_score = final_score
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

GRAVITY_EVENT = pygame.USEREVENT + 1

BOARD_POS = (30, 40)
PANEL_X = BOARD_POS[0] + BOARD_WIDTH * BASE_CONFIG["SIZES"]["BLOCK_SIZE"] + 30

STATUS_TEXT = {
    STATUS_IDLE: "Press S to start",
    STATUS_RUNNING: "",
    STATUS_PAUSED: "Paused",
    STATUS_GAME_OVER: "Game Over",
}


def draw_game_state(surface, fonts, session: TetrisSession, ui_elements):
    colors = BASE_CONFIG["COLORS"]; sizes = BASE_CONFIG["SIZES"]
    game = session.game

    draw_board(surface, game.get_display_board(), BOARD_POS[0], BOARD_POS[1], sizes["BLOCK_SIZE"])

    draw_text(surface, "NEXT", PANEL_X, BOARD_POS[1], fonts["MEDIUM"], colors["TEXT"])
    if game.next_type:
        draw_shape(surface, get_shape(game.next_type), TETROMINOS[game.next_type]["color"],
                   PANEL_X, BOARD_POS[1] + 35, sizes["PREVIEW_BLOCK_SIZE"])

    rows = [
        ("SCORE", game.score),
        ("HIGH", max(session.high_score, game.score)),
        ("LEVEL", game.level),
        ("LINES", game.lines_cleared),
    ]
    y = BOARD_POS[1] + 120
    for label, value in rows:
        draw_text(surface, label, PANEL_X, y, fonts["SMALL"], colors["MUTED_TEXT"])
        draw_text(surface, str(value), PANEL_X, y + 22, fonts["MEDIUM"], colors["TEXT"])
        y += 60

    message = STATUS_TEXT[game.status]
    if message:
        color = colors["ERROR"] if game.status == STATUS_GAME_OVER else colors["TEXT"]
        draw_text(surface, message, PANEL_X, y + 10, fonts["MEDIUM"], color)

    for button in ui_elements.values():
        button.draw(surface)


def run_game_client(store_path: str, host: str, port: int, seed=None, sync=True):
    """Runs the Tetris window until the player closes it."""
    store = JsonFileStore(store_path)
    init_stats_service(store)
    session = TetrisSession(store, get_stats_service(), LeaderboardClient(host, port), seed=seed, sync=sync)

    pygame.init()
    pygame.font.init()
    screen = pygame.display.set_mode((BASE_CONFIG["SCREEN"]["WIDTH"], BASE_CONFIG["SCREEN"]["HEIGHT"]))
    pygame.display.set_caption("PlayZone - Tetris")
    clock = pygame.time.Clock()
    fonts = load_fonts()

    button_y = BASE_CONFIG["SCREEN"]["HEIGHT"] - 70
    ui_elements = {
        "START": Button(PANEL_X, button_y - 120, 120, 40, fonts["SMALL"], "Start"),
        "PAUSE": Button(PANEL_X, button_y - 70, 120, 40, fonts["SMALL"], "Pause"),
        "RESET": Button(PANEL_X, button_y - 20, 120, 40, fonts["SMALL"], "Reset"),
    }

    # Gravity timer: re-armed whenever the interval changes, cleared when not running
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
                    elif event.key in KEY_ACTIONS:
                        session.handle_action(KEY_ACTIONS[event.key])
                elif event.type == GRAVITY_EVENT:
                    session.game.tick()
                else:
                    for action, button in ui_elements.items():
                        if button.handle_event(event):
                            session.handle_action(action)

            wanted = session.game.drop_interval_ms if session.game.running else None
            if wanted != armed_interval:
                pygame.time.set_timer(GRAVITY_EVENT, wanted or 0)
                armed_interval = wanted

            screen.fill(BASE_CONFIG["COLORS"]["BACKGROUND"])
            draw_text(screen, "Esc to exit", BASE_CONFIG["SCREEN"]["WIDTH"] - 130, 10,
                      fonts["TINY"], BASE_CONFIG["COLORS"]["TEXT"])
            draw_game_state(screen, fonts, session, ui_elements)
            pygame.display.flip()
            clock.tick(BASE_CONFIG["TIMING"]["FPS"])
    finally:
        pygame.time.set_timer(GRAVITY_EVENT, 0)
        pygame.quit()
        logger.info("Tetris window closed.")


def main():
    parser = argparse.ArgumentParser(description="PlayZone Tetris")
    parser.add_argument('--store', type=str, default=config.LOCAL_STORE_FILE, help='Local key-value store file')
    parser.add_argument('--host', type=str, default=config.LEADERBOARD_HOST, help='Leaderboard server host')
    parser.add_argument('--port', type=int, default=config.LEADERBOARD_PORT, help='Leaderboard server port')
    parser.add_argument('--seed', type=int, default=None, help='Seed for the piece sequence')
    parser.add_argument('--no-sync', action='store_true', help='Do not upload results to the leaderboard')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='[TETRIS] %(asctime)s - %(message)s')
    run_game_client(args.store, args.host, args.port, seed=args.seed, sync=not args.no_sync)


if __name__ == "__main__":
    main()

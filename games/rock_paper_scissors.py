#!/usr/bin/env python3
"""
Rock-Paper-Scissors
A simple CLI-based game against the computer.
"""

import argparse
import logging
import os
import sys
import time

# Add project root to path to access common modules
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from common import config
from common.rps_rules import CHOICES, RESULT_DRAW, RESULT_WIN, RockPaperScissorsGame
from common.stats import init_stats_service
from common.storage import JsonFileStore
from common.sync import LeaderboardClient, upload_score_in_background

logger = logging.getLogger(__name__)

MESSAGES = {
    RESULT_WIN: "You win!",
    RESULT_DRAW: "It's a draw!",
}
SHORTCUTS = {choice[0]: choice for choice in CHOICES}


def play_round(game: RockPaperScissorsGame, choice: str, stats_service) -> dict:
    """Play one round and count it in the shared stats."""
    outcome = game.play(choice)
    try:
        stats_service.record_game_result(outcome["points"], streak=outcome["streak"])
    except Exception as e:
        logger.error(f"Failed to record rock-paper-scissors stats: {e}")
    return outcome


def main():
    parser = argparse.ArgumentParser(description="PlayZone Rock-Paper-Scissors")
    parser.add_argument('--store', type=str, default=config.LOCAL_STORE_FILE, help='Local key-value store file')
    parser.add_argument('--host', type=str, default=config.LEADERBOARD_HOST, help='Leaderboard server host')
    parser.add_argument('--port', type=int, default=config.LEADERBOARD_PORT, help='Leaderboard server port')
    parser.add_argument('--no-sync', action='store_true', help='Do not upload results to the leaderboard')
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='[RPS] %(asctime)s - %(message)s')

    store = JsonFileStore(args.store)
    stats_service = init_stats_service(store)
    game = RockPaperScissorsGame(store)
    client = LeaderboardClient(args.host, args.port)

    try:
        while True:
            raw = input("rock, paper or scissors (q to quit): ").strip().lower()
            if raw in ('q', 'quit'):
                break
            choice = SHORTCUTS.get(raw, raw)
            if choice not in CHOICES:
                print("Unknown choice.")
                continue
            print("Computer is choosing...")
            time.sleep(1)
            outcome = play_round(game, choice, stats_service)
            print(f"You: {outcome['player']}  Computer: {outcome['computer']}")
            print(MESSAGES.get(outcome['result'], "Computer wins!"))
            if outcome['streak'] > 0:
                print(f"Win streak: {outcome['streak']}")
            scores = game.scores
            print(f"Score - You: {scores['player']}  Computer: {scores['computer']}  "
                  f"Draws: {scores['draws']}  Best streak: {game.best_streak}")
            if not args.no_sync:
                upload_score_in_background(store, stats_service, client)
    except (KeyboardInterrupt, EOFError):
        print()


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Picture Matching
A simple CLI-based memory game: flip two cards per move and find all
eight pairs in as few moves and seconds as possible.
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
from common.memory_rules import BEST_MOVES_KEY, BEST_TIME_KEY, MemoryGame
from common.stats import HighScoreTracker, init_stats_service
from common.storage import JsonFileStore
from common.sync import LeaderboardClient, upload_score

logger = logging.getLogger(__name__)

MISMATCH_DELAY_SECONDS = 1.0


def record_completion(game: MemoryGame, store, stats_service) -> dict:
    """Update best time, best moves and shared stats. Returns which records were beaten."""
    records = {}
    try:
        records["best_time"] = HighScoreTracker(store, BEST_TIME_KEY, lower_is_better=True).submit(
            game.elapsed_seconds)
        records["best_moves"] = HighScoreTracker(store, BEST_MOVES_KEY, lower_is_better=True).submit(game.moves)
        stats_service.record_game_result(game.score)
    except Exception as e:
        logger.error(f"Failed to save picture matching result: {e}")
    return records


def main():
    parser = argparse.ArgumentParser(description="PlayZone Picture Matching")
    parser.add_argument('--store', type=str, default=config.LOCAL_STORE_FILE, help='Local key-value store file')
    parser.add_argument('--host', type=str, default=config.LEADERBOARD_HOST, help='Leaderboard server host')
    parser.add_argument('--port', type=int, default=config.LEADERBOARD_PORT, help='Leaderboard server port')
    parser.add_argument('--seed', type=int, default=None, help='Seed for the shuffle')
    parser.add_argument('--no-sync', action='store_true', help='Do not upload results to the leaderboard')
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='[MEMORY] %(asctime)s - %(message)s')

    store = JsonFileStore(args.store)
    stats_service = init_stats_service(store)
    game = MemoryGame(seed=args.seed)

    try:
        while True:
            print(game.render())
            print(f"Moves: {game.moves}  Pairs: {game.matched_pairs}  Time: {game.elapsed_seconds}s")
            raw = input("Card number (n for new game, q to quit): ").strip().lower()
            if raw in ('q', 'quit'):
                break
            if raw == 'n':
                game.reset()
                continue
            try:
                result = game.flip(int(raw))
            except ValueError:
                print("Please enter a card number.")
                continue
            print(result['message'])
            if result.get('match') is False:
                print(game.render())
                time.sleep(MISMATCH_DELAY_SECONDS)
                game.hide_mismatch()
            if result.get('completed'):
                records = record_completion(game, store, stats_service)
                print(f"All pairs found in {game.moves} moves and {game.elapsed_seconds}s. Score: {game.score}")
                if any(records.values()):
                    print("New personal best!")
                if not args.no_sync:
                    upload_score(store, stats_service, LeaderboardClient(args.host, args.port))
                if input("Play again? [y/N] ").strip().lower() != 'y':
                    break
                game.reset()
    except (KeyboardInterrupt, EOFError):
        print()
    print("Thanks for playing!")


if __name__ == "__main__":
    main()

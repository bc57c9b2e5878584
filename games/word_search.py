#!/usr/bin/env python3
"""
Word Search
A simple CLI-based word puzzle. Select a word by typing the row and column
of its first and last letters, e.g. "3 4 3 9". Words run in any straight
direction, forwards or backwards.
"""

import argparse
import logging
import os
import sys

# Add project root to path to access common modules
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from common import config
from common.stats import HighScoreTracker, init_stats_service
from common.storage import JsonFileStore
from common.sync import LeaderboardClient, upload_score
from common.word_search_rules import HIGH_SCORE_KEY, WordSearchGame

logger = logging.getLogger(__name__)


def parse_selection(raw: str):
    """'r1 c1 r2 c2' (commas allowed) -> ((r1, c1), (r2, c2)). Raises ValueError."""
    parts = raw.replace(',', ' ').split()
    if len(parts) != 4:
        raise ValueError("Enter four numbers: start row, start column, end row, end column")
    r1, c1, r2, c2 = (int(p) for p in parts)
    return (r1, c1), (r2, c2)


def record_completion(game: WordSearchGame, store, stats_service) -> bool:
    """Update the high score and shared stats. Returns True on a new high score."""
    try:
        is_record = HighScoreTracker(store, HIGH_SCORE_KEY).submit(game.score)
        stats_service.record_game_result(max(game.score, 0))
        return is_record
    except Exception as e:
        logger.error(f"Failed to save word search result: {e}")
        return False


def main():
    parser = argparse.ArgumentParser(description="PlayZone Word Search")
    parser.add_argument('--store', type=str, default=config.LOCAL_STORE_FILE, help='Local key-value store file')
    parser.add_argument('--host', type=str, default=config.LEADERBOARD_HOST, help='Leaderboard server host')
    parser.add_argument('--port', type=int, default=config.LEADERBOARD_PORT, help='Leaderboard server port')
    parser.add_argument('--seed', type=int, default=None, help='Seed for the puzzle')
    parser.add_argument('--no-sync', action='store_true', help='Do not upload results to the leaderboard')
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='[WORD_SEARCH] %(asctime)s - %(message)s')

    store = JsonFileStore(args.store)
    stats_service = init_stats_service(store)
    game = WordSearchGame(seed=args.seed)
    show_hints = False

    try:
        while True:
            print(game.render())
            print("Words: " + ", ".join(game.word_list(show_hints)))
            print(f"Found {len(game.found)}/{len(game.words)}  Time: {game.elapsed_seconds}s")
            raw = input("Selection (h toggles hints, n new puzzle, q quits): ").strip().lower()
            if raw in ('q', 'quit'):
                break
            if raw == 'h':
                show_hints = not show_hints
                continue
            if raw == 'n':
                game.new_puzzle()
                continue
            try:
                start, end = parse_selection(raw)
                word = game.select(start, end)
            except ValueError as e:
                print(e)
                continue
            print(f"Found {word}!" if word else "No word there.")
            if game.completed:
                is_record = record_completion(game, store, stats_service)
                print(f"Puzzle solved in {game.elapsed_seconds}s. Score: {game.score}")
                if is_record:
                    print("New high score!")
                if not args.no_sync:
                    upload_score(store, stats_service, LeaderboardClient(args.host, args.port))
                if input("Play again? [y/N] ").strip().lower() != 'y':
                    break
                game.new_puzzle()
    except (KeyboardInterrupt, EOFError):
        print()
    print("Thanks for playing!")


if __name__ == "__main__":
    main()

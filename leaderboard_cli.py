#!/usr/bin/env python3
"""
Leaderboard viewer.
Fetches the leaderboard from the leaderboard server and prints it,
ranked by the chosen column. The local player's row is marked with '*'.
"""

import argparse
import logging
import sys

from common import config
from common.message_types import DEFAULT_SORT_FIELD, SORTABLE_FIELDS
from common.profile import ensure_user_id, save_profile
from common.storage import JsonFileStore
from common.sync import LeaderboardClient

logger = logging.getLogger(__name__)

HEADERS = (
    ("rank", "#", 4),
    ("username", "Player", 20),
    ("totalScore", "Score", 10),
    ("gamesPlayed", "Games", 8),
    ("bestStreak", "Streak", 8),
)


def format_leaderboard(entries, own_id=None) -> str:
    """Render rows (already sorted) as a fixed-width table."""
    lines = ["  " + "".join(title.ljust(width) for _, title, width in HEADERS)]
    for rank, entry in enumerate(entries, start=1):
        values = {"rank": rank, **entry}
        marker = "* " if own_id and entry.get("id") == own_id else "  "
        lines.append(marker + "".join(str(values.get(key, "")).ljust(width)[:width] for key, _, width in HEADERS))
    if not entries:
        lines.append("  (no players yet)")
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="PlayZone Leaderboard")
    parser.add_argument('--sort-by', choices=SORTABLE_FIELDS, default=DEFAULT_SORT_FIELD, help='Column to rank by')
    parser.add_argument('--limit', type=int, default=10, help='Number of rows to show')
    parser.add_argument('--set-username', type=str, default=None, help='Save a profile username before listing')
    parser.add_argument('--store', type=str, default=config.LOCAL_STORE_FILE, help='Local key-value store file')
    parser.add_argument('--host', type=str, default=config.LEADERBOARD_HOST, help='Leaderboard server host')
    parser.add_argument('--port', type=int, default=config.LEADERBOARD_PORT, help='Leaderboard server port')
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='[LEADERBOARD] %(asctime)s - %(message)s')

    if args.limit <= 0:
        parser.error("--limit must be positive")

    store = JsonFileStore(args.store)
    if args.set_username is not None:
        try:
            save_profile(store, {"username": args.set_username})
        except ValueError as e:
            parser.error(str(e))

    entries = LeaderboardClient(args.host, args.port).query(args.sort_by, args.limit)
    print(format_leaderboard(entries, ensure_user_id(store)))
    return 0


if __name__ == "__main__":
    sys.exit(main())

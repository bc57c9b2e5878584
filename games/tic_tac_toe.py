#!/usr/bin/env python3
"""
Tic-Tac-Toe
A simple CLI-based game.
Modes:
- single: you (X) against a random computer opponent
- local:  two players sharing the keyboard
- online: host a room as X (or --join a room as O) against a simulated remote opponent
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
from common.stats import get_stats_service, init_stats_service
from common.storage import JsonFileStore
from common.sync import LeaderboardClient, upload_score
from common.tictactoe_rules import (
    WIN_POINTS, HumanPlayer, MockOnlineOpponent, RandomOpponent, ScoreTally, TicTacToeGame, play_match,
)

logger = logging.getLogger(__name__)

MODES = ("single", "local", "online")


def build_players(mode: str, input_func=input, output_func=print, join_code: str | None = None) -> dict:
    """
    Players for a mode. In online mode the local player hosts as X, or
    joins someone else's room as O when join_code is given.
    """
    if mode == "single":
        return {'X': HumanPlayer("You", input_func, output_func), 'O': RandomOpponent()}
    if mode == "local":
        return {'X': HumanPlayer("Player 1", input_func, output_func),
                'O': HumanPlayer("Player 2", input_func, output_func)}
    if mode == "online":
        if join_code is not None:
            host = MockOnlineOpponent("Host")
            host.join_room(join_code)
            return {'X': host, 'O': HumanPlayer("You", input_func, output_func)}
        return {'X': HumanPlayer("You", input_func, output_func), 'O': MockOnlineOpponent()}
    raise ValueError(f"Unknown mode: {mode}")


def local_symbol(players: dict) -> str:
    """The symbol of the first human player ('X' unless joining as a guest)."""
    for symbol in ('X', 'O'):
        if isinstance(players[symbol], HumanPlayer):
            return symbol
    return 'X'


def record_result(winner: str, tally: ScoreTally, stats_service, player_symbol: str = 'X'):
    """Update the local tally and the shared stats for the local player's symbol."""
    try:
        tally.record(winner)
        stats_service.record_game_result(WIN_POINTS if winner == player_symbol else 0)
    except Exception as e:
        logger.error(f"Failed to save tic-tac-toe result: {e}")


def connect_online(players: dict, output_func=print):
    """Host a room for the remote opponent and wait for it to join."""
    opponent = players['O']
    if isinstance(opponent, MockOnlineOpponent) and not opponent.connected:
        code = opponent.host_room()
        output_func(f"Room code: {code}. Waiting for an opponent to join...")
        opponent.wait_for_join()
    remote = next(p for p in players.values() if isinstance(p, MockOnlineOpponent))
    output_func(f"Connected to {remote.name} in room {remote.room_code}. You are {local_symbol(players)}.")


def main():
    parser = argparse.ArgumentParser(description="PlayZone Tic-Tac-Toe")
    parser.add_argument('--mode', choices=MODES, default='single', help='Who plays O')
    parser.add_argument('--store', type=str, default=config.LOCAL_STORE_FILE, help='Local key-value store file')
    parser.add_argument('--host', type=str, default=config.LEADERBOARD_HOST, help='Leaderboard server host')
    parser.add_argument('--port', type=int, default=config.LEADERBOARD_PORT, help='Leaderboard server port')
    parser.add_argument('--join', type=str, default=None, metavar='CODE',
                        help='Online mode: join this room as O instead of hosting')
    parser.add_argument('--no-sync', action='store_true', help='Do not upload results to the leaderboard')
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='[TIC_TAC_TOE] %(asctime)s - %(message)s')

    if args.join is not None and args.mode != "online":
        parser.error("--join requires --mode online")

    store = JsonFileStore(args.store)
    stats_service = init_stats_service(store)
    tally = ScoreTally(store)
    try:
        players = build_players(args.mode, join_code=args.join)
    except ValueError as e:
        parser.error(str(e))
    game = TicTacToeGame()

    if args.mode == "online":
        try:
            connect_online(players)
        except KeyboardInterrupt:
            print("\nLeft the room.")
            return

    def show(game, result):
        print(game.render())
        print(result['message'])

    try:
        while True:
            game.reset()
            print(game.render())
            winner = play_match(game, players, on_move=show)
            record_result(winner, tally, get_stats_service(), local_symbol(players))
            if not args.no_sync:
                upload_score(store, stats_service, LeaderboardClient(args.host, args.port))
            scores = tally.scores
            print(f"Score - X: {scores['X']}  O: {scores['O']}  Draws: {scores['draws']}")
            if input("Play again? [y/N] ").strip().lower() != 'y':
                break
    except (KeyboardInterrupt, EOFError):
        print()
    print("Thanks for playing!")


if __name__ == "__main__":
    main()

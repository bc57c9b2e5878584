"""
Tests for the remaining games:
- Snake movement, food, crashes and game-over bookkeeping
- Picture matching flips, moves and best records
- Word search placement, selection and scoring
"""

import json
import random
from collections import deque

import pytest

from common.memory_rules import BEST_MOVES_KEY, BEST_TIME_KEY, EMOJIS, MemoryGame, score_for_moves
from common.snake_rules import (
    GRID_SIZE, INITIAL_SPEED_MS, MIN_SPEED_MS, MODE_MULTIPLAYER, SNAKE_HIGH_SCORE_KEY, SnakeGame,
)
from common.stats import GAME_STATS_KEY, StatsService
from common.storage import MemoryStore
from common.word_search_rules import HIGH_SCORE_KEY, WordSearchGame, line_cells, place_words
from games.memory_match import record_completion as record_memory_completion
from games.snake import SnakeSession, process_input
from games.word_search import parse_selection, record_completion as record_word_completion


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


# Snake

def test_snake_eats_food_grows_and_speeds_up():
    game = SnakeGame(seed=1)
    game.start()
    game.food = (11, 10)
    game.tick()
    snake = game.snakes[0]
    assert list(snake.body) == [(11, 10), (10, 10)]
    assert snake.score == 10
    assert game.speed_ms == INITIAL_SPEED_MS - 2
    assert game.food is not None and game.food not in snake.body

    game.food = (0, 0)
    game.tick()
    assert list(snake.body) == [(12, 10), (11, 10)]


def test_speed_never_drops_below_floor():
    game = SnakeGame(seed=2)
    game.start()
    game.speed_ms = MIN_SPEED_MS + 1
    for x in (11, 12):
        game.food = (x, 10)
        game.tick()
    assert game.speed_ms == MIN_SPEED_MS


def test_snake_cannot_reverse_and_ignores_input_when_stopped():
    game = SnakeGame(seed=3)
    assert not game.turn(0, 'UP')
    game.start()
    assert not game.turn(0, 'LEFT')
    assert game.turn(0, 'UP')
    game.tick()
    assert game.snakes[0].head == (10, 9)
    game.toggle_pause()
    game.tick()
    assert game.snakes[0].head == (10, 9)
    with pytest.raises(ValueError):
        game.snakes[0].change_direction('SIDEWAYS')


def test_wall_crash_ends_game_and_notifies():
    game = SnakeGame(seed=4)
    over_calls = []
    game.add_game_over_listener(over_calls.append)
    game.snakes[0].body = deque([(GRID_SIZE - 1, 3)])
    game.start()
    game.tick()
    assert game.over and not game.running
    assert game.winner is None
    assert over_calls == [game]
    # GameOver: nothing moves and start() does nothing until reset
    game.start()
    assert not game.running
    game.reset()
    assert not game.over and game.snakes[0].head == (10, 10)


def test_self_collision_counts_tail():
    game = SnakeGame(seed=5)
    snake = game.snakes[0]
    snake.body = deque([(5, 5), (6, 5), (6, 6), (5, 6)])
    snake.direction = 'DOWN'
    game.start()
    game.tick()
    assert game.over


def test_multiplayer_crash_names_other_player_winner():
    game = SnakeGame(MODE_MULTIPLAYER, seed=6)
    assert [s.head for s in game.snakes] == [(10, 10), (5, 5)]
    game.start()
    for _ in range(6):
        game.tick()
    assert game.over
    assert game.winner == "Player 1"
    assert game.snakes[0].head == (16, 10)


def test_snake_session_records_game_over():
    store = MemoryStore({SNAKE_HIGH_SCORE_KEY: "20"})
    session = SnakeSession(store, StatsService(store), seed=7, sync=False)
    game = session.game
    process_input(game, "START")
    process_input(game, "TURN:0:UP")
    assert game.snakes[0].direction == 'UP'
    game.snakes[0].score = 30
    game.snakes[0].body = deque([(3, 0)])
    game.tick()

    assert game.over
    assert store.get(SNAKE_HIGH_SCORE_KEY) == "30"
    assert session.high_score == 30
    assert json.loads(store.get(GAME_STATS_KEY)) == {"gamesPlayed": 1, "totalScore": 30, "bestStreak": 0}


def test_display_grid_marks_food_and_snakes():
    game = SnakeGame(MODE_MULTIPLAYER, seed=8)
    grid = game.get_display_grid()
    assert grid[10][10] == "green"
    assert grid[5][5] == "blue"
    assert grid[15][15] == "red"
    assert sum(bool(tag) for row in grid for tag in row) == 3


# Picture matching

def pair_ids(game):
    ids = {}
    for card in game.cards:
        ids.setdefault(card.emoji, []).append(card.id)
    return ids


def test_deck_has_every_emoji_twice():
    game = MemoryGame(seed=1)
    assert len(game.cards) == 2 * len(EMOJIS)
    assert all(len(ids) == 2 for ids in pair_ids(game).values())
    assert [c.emoji for c in MemoryGame(seed=1).cards] == [c.emoji for c in game.cards]


def test_mismatch_must_be_hidden_before_next_flip():
    game = MemoryGame(seed=2)
    ids = pair_ids(game)
    first, second = ids[EMOJIS[0]][0], ids[EMOJIS[1]][0]

    assert game.flip(first)['success']
    assert not game.flip(first)['success']
    result = game.flip(second)
    assert result['match'] is False
    assert game.moves == 1 and game.awaiting_hide
    assert not game.flip(ids[EMOJIS[2]][0])['success']

    game.hide_mismatch()
    assert not game.cards[first].face_up and not game.cards[second].face_up
    assert not game.flip(99)['success']


def test_completing_the_board_scores_by_moves():
    clock = FakeClock()
    game = MemoryGame(seed=3, clock=clock)
    ids = pair_ids(game)
    game.flip(ids[EMOJIS[0]][0])
    game.flip(ids[EMOJIS[1]][0])
    game.hide_mismatch()

    for emoji in EMOJIS:
        clock.now += 4
        a, b = ids[emoji]
        game.flip(a)
        result = game.flip(b)
        assert result['match']
    assert result['completed']
    assert game.moves == 9
    assert game.score == 91
    assert game.elapsed_seconds == 32
    clock.now += 50
    assert game.elapsed_seconds == 32
    assert not game.flip(0)['success']


def test_score_has_floor():
    assert score_for_moves(8) == 92
    assert score_for_moves(95) == 10


def test_memory_completion_updates_records_and_stats():
    store = MemoryStore()
    stats = StatsService(store)

    def play(moves_wasted, seconds):
        clock = FakeClock()
        game = MemoryGame(seed=4, clock=clock)
        ids = pair_ids(game)
        for _ in range(moves_wasted):
            game.flip(ids[EMOJIS[0]][0])
            game.flip(ids[EMOJIS[1]][0])
            game.hide_mismatch()
        for emoji in EMOJIS:
            game.flip(ids[emoji][0])
            game.flip(ids[emoji][1])
        clock.now += seconds
        game.finished_at = clock.now
        return record_memory_completion(game, store, stats)

    assert play(2, 60) == {"best_time": True, "best_moves": True}
    assert store.get(BEST_TIME_KEY) == "60" and store.get(BEST_MOVES_KEY) == "10"
    assert play(4, 30) == {"best_time": True, "best_moves": False}
    assert store.get(BEST_TIME_KEY) == "30" and store.get(BEST_MOVES_KEY) == "10"
    assert stats.get_stats() == {"gamesPlayed": 2, "totalScore": 90 + 88, "bestStreak": 0}


# Word search

def test_line_cells():
    assert line_cells((2, 2), (2, 5)) == [(2, 2), (2, 3), (2, 4), (2, 5)]
    assert line_cells((4, 1), (1, 1)) == [(4, 1), (3, 1), (2, 1), (1, 1)]
    assert line_cells((0, 4), (2, 2)) == [(0, 4), (1, 3), (2, 2)]
    assert line_cells((0, 0), (1, 3)) == [(0, 0)]
    assert line_cells((3, 3), (3, 3)) == [(3, 3)]


def test_placed_words_read_correctly():
    game = WordSearchGame(seed=11)
    assert 0 < len(game.words) <= 8
    assert all(len(row) == 15 and all(letter.isalpha() for letter in row) for row in game.grid)
    for word in game.words:
        assert game.letters(game.placements[word]) == word


def test_word_that_cannot_fit_is_left_out():
    grid, placements = place_words(["ABCDEFGHIJKLMNOPQ", "CAT"], random.Random(1), size=5)
    assert "ABCDEFGHIJKLMNOPQ" not in placements
    assert "CAT" in placements
    assert len(grid) == 5


def test_selecting_words_forwards_and_backwards_completes_puzzle():
    clock = FakeClock()
    game = WordSearchGame(seed=12, clock=clock)
    assert game.word_list() == ["???"] * len(game.words)

    for index, word in enumerate(game.words):
        clock.now += 5
        cells = game.placements[word]
        start, end = (cells[0], cells[-1]) if index % 2 == 0 else (cells[-1], cells[0])
        assert game.select(start, end) == word
        assert game.select(start, end) is None
        assert word in game.word_list()

    assert game.completed
    # Timer started at the first selection
    assert game.elapsed_seconds == 5 * (len(game.words) - 1)
    assert game.score == 100 * len(game.words) - game.elapsed_seconds
    assert game.word_list(show_hints=True) == game.words


def test_bad_selections():
    game = WordSearchGame(seed=13)
    with pytest.raises(ValueError):
        game.select((0, 0), (0, 15))
    # Not a straight line: only the start cell, which is never a whole word
    assert game.select((0, 0), (1, 3)) is None
    assert game.found == []
    with pytest.raises(ValueError):
        parse_selection("1 2 3")
    assert parse_selection("1, 2, 3, 4") == ((1, 2), (3, 4))


def test_word_search_completion_updates_high_score_and_stats():
    store = MemoryStore()
    stats = StatsService(store)
    clock = FakeClock()
    game = WordSearchGame(seed=14, clock=clock)
    for word in game.words:
        cells = game.placements[word]
        game.select(cells[0], cells[-1])
        clock.now += 10
    assert game.completed
    expected = 100 * len(game.words) - 10 * (len(game.words) - 1)
    assert record_word_completion(game, store, stats)
    assert store.get(HIGH_SCORE_KEY) == str(expected)
    assert stats.get_stats()["totalScore"] == expected

    # A very slow solve scores below zero: stats add nothing, no record
    slow = WordSearchGame(seed=15, clock=clock)
    for word in slow.words:
        cells = slow.placements[word]
        slow.select(cells[0], cells[-1])
        clock.now += 1000
    assert slow.score < 0
    assert not record_word_completion(slow, store, stats)
    assert stats.get_stats() == {"gamesPlayed": 2, "totalScore": expected, "bestStreak": 0}

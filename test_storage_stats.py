"""
Tests for the player-side collaborators:
- Key-value stores
- Shared game stats and high scores
- Profile and user id
"""

import json
import threading

import pytest

from common import stats as stats_module
from common.profile import PROFILE_KEY, ensure_user_id, load_profile, save_profile
from common.stats import (
    GAME_STATS_KEY, HighScoreTracker, StatsService, get_stats_service, init_stats_service,
)
from common.storage import JsonFileStore, MemoryStore


# Key-value stores

def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(str(path))
    assert store.get("missing") is None
    assert store.get("missing", "fallback") == "fallback"

    store.set("tetrisHighScore", "1200")
    assert store.get("tetrisHighScore") == "1200"
    # A second handle on the same file sees the write
    assert JsonFileStore(str(path)).get("tetrisHighScore") == "1200"

    store.delete("tetrisHighScore")
    assert store.get("tetrisHighScore") is None
    assert list(path.parent.glob("*.tmp")) == []


def test_json_file_store_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(str(path))
    assert store.get("anything") is None
    store.set("key", "value")
    assert json.loads(path.read_text(encoding="utf-8")) == {"key": "value"}


@pytest.mark.parametrize("store_factory", [MemoryStore, lambda: JsonFileStore("unused")])
def test_stores_only_accept_strings(store_factory):
    with pytest.raises(TypeError):
        store_factory().set("key", 12)


# Stats

def test_record_game_result_accumulates():
    store = MemoryStore()
    service = StatsService(store)
    assert service.get_stats() == {"gamesPlayed": 0, "totalScore": 0, "bestStreak": 0}

    service.record_game_result(150)
    updated = service.record_game_result(40, streak=3)
    assert updated == {"gamesPlayed": 2, "totalScore": 190, "bestStreak": 3}

    service.record_game_result(0, streak=1)
    assert json.loads(store.get(GAME_STATS_KEY)) == {"gamesPlayed": 3, "totalScore": 190, "bestStreak": 3}


def test_record_game_result_rejects_negative_score():
    with pytest.raises(ValueError):
        StatsService(MemoryStore()).record_game_result(-1)


def test_stats_recover_from_malformed_json():
    store = MemoryStore({GAME_STATS_KEY: "{broken"})
    service = StatsService(store)
    assert service.record_game_result(10)["gamesPlayed"] == 1

    store.set(GAME_STATS_KEY, json.dumps({"gamesPlayed": "7", "totalScore": None}))
    assert service.get_stats() == {"gamesPlayed": 7, "totalScore": 0, "bestStreak": 0}


def test_concurrent_results_are_not_lost():
    service = StatsService(MemoryStore())
    threads = [threading.Thread(target=service.record_game_result, args=(1,)) for _ in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert service.get_stats()["gamesPlayed"] == 20
    assert service.get_stats()["totalScore"] == 20


def test_process_wide_service(monkeypatch):
    monkeypatch.setattr(stats_module, "_stats_service", None)
    with pytest.raises(RuntimeError):
        get_stats_service()
    store = MemoryStore()
    service = init_stats_service(store)
    assert get_stats_service() is service
    assert service.store is store


def test_high_score_only_written_when_beaten():
    store = MemoryStore()
    tracker = HighScoreTracker(store)
    assert tracker.high_score == 0
    assert tracker.submit(300)
    assert store.get("tetrisHighScore") == "300"
    assert not tracker.submit(300)
    assert not tracker.submit(120)
    assert tracker.high_score == 300

    store.set("tetrisHighScore", "garbage")
    assert tracker.high_score == 0


def test_lower_is_better_record():
    store = MemoryStore()
    best_time = HighScoreTracker(store, "pictureMatchingBestTime", lower_is_better=True)
    assert best_time.best is None
    assert best_time.submit(90)
    assert not best_time.submit(90)
    assert not best_time.submit(120)
    assert best_time.submit(45)
    assert store.get("pictureMatchingBestTime") == "45"
    # Zero is a valid first record when lower is better
    assert HighScoreTracker(MemoryStore(), "moves", lower_is_better=True).submit(0)


# Profile

def test_user_id_is_created_once():
    store = MemoryStore()
    user_id = ensure_user_id(store)
    assert user_id
    assert ensure_user_id(store) == user_id


def test_profile_defaults_and_save():
    store = MemoryStore()
    assert load_profile(store)["username"] == ""

    saved = save_profile(store, {"username": "  arcade_ace ", "avatar": "🐱"})
    assert saved["username"] == "arcade_ace"
    assert saved["favoriteGame"] == "Tetris"
    assert load_profile(store) == saved

    with pytest.raises(ValueError):
        save_profile(store, {"username": "   "})

    store.set(PROFILE_KEY, "not json")
    assert load_profile(store)["username"] == ""

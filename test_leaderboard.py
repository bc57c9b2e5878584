"""
Tests for the leaderboard path:
- Length-prefixed framing
- Server request handling and JSON storage
- Client upsert/query against a live server
- Best-effort upload when the server is down
"""

import json
import socket
import struct
import threading

import pytest

from common import protocol
from common.db_operations import DatabaseOperations
from common.message_types import validate_request
from common.profile import save_profile
from common.stats import StatsService
from common.storage import MemoryStore
from common.sync import LeaderboardClient, build_leaderboard_record, send_request, upload_score
from leaderboard_cli import format_leaderboard
from server import leaderboard_server


def record(user_id, username, total, games=1, streak=0):
    return {"id": user_id, "username": username, "avatar": "🎮", "favoriteGame": "Tetris",
            "totalScore": total, "gamesPlayed": games, "bestStreak": streak}


@pytest.fixture
def db(tmp_path, monkeypatch):
    # Restored to the previous value after the test
    monkeypatch.setattr(leaderboard_server, "db_ops", None)
    return leaderboard_server.setup_database(str(tmp_path / "storage"))


@pytest.fixture
def live_server(db):
    server_socket = leaderboard_server.create_server_socket('127.0.0.1', 0)
    server_socket.settimeout(0.2)
    stop = threading.Event()
    thread = threading.Thread(target=leaderboard_server.serve_forever, args=(server_socket, stop), daemon=True)
    thread.start()
    yield server_socket.getsockname()
    stop.set()
    thread.join(timeout=2)
    server_socket.close()


def unused_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


# Framing

def test_framing_round_trip_over_socket_pair():
    left, right = socket.socketpair()
    with left, right:
        protocol.send_json(left, {"collection": "Leaderboard", "action": "query"})
        raw = right.recv(protocol.HEADER_LENGTH, socket.MSG_PEEK)
        assert struct.unpack(protocol.HEADER_FORMAT, raw)[0] > 0
        assert protocol.recv_json(right) == {"collection": "Leaderboard", "action": "query"}


def test_framing_rejects_oversized_and_detects_disconnect():
    left, right = socket.socketpair()
    with right:
        with pytest.raises(ValueError):
            protocol.send_msg(left, b"x" * (protocol.MAX_MSG_SIZE + 1))
        left.close()
        assert protocol.recv_msg(right) is None


def test_recv_json_rejects_non_json_body():
    left, right = socket.socketpair()
    with left, right:
        protocol.send_msg(left, b"not json")
        with pytest.raises(ValueError):
            protocol.recv_json(right)


# Request validation and processing

def test_validate_request():
    assert validate_request({"collection": "Leaderboard", "action": "query", "data": {}}) == (True, "")
    assert not validate_request([])[0]
    assert not validate_request({"action": "query"})[0]
    assert not validate_request({"collection": "Leaderboard", "action": "upsert", "data": {}})[0]
    assert not validate_request({"collection": "Leaderboard", "action": "query",
                                 "data": {"sort_by": "username"}})[0]
    assert not validate_request({"collection": "Leaderboard", "action": "query", "data": {"limit": 0}})[0]


def test_upsert_replaces_row_with_same_id(db):
    process = leaderboard_server.process_request
    assert process({"collection": "Leaderboard", "action": "upsert", "data": record("u1", "ana", 100)})["status"] == "ok"
    assert process({"collection": "Leaderboard", "action": "upsert", "data": record("u2", "ben", 50)})["status"] == "ok"
    response = process({"collection": "Leaderboard", "action": "upsert", "data": record("u1", "ana", 400, games=3)})
    assert response["entry"]["totalScore"] == 400

    entries = process({"collection": "Leaderboard", "action": "query", "data": {}})["entries"]
    assert [e["id"] for e in entries] == ["u1", "u2"]
    assert entries[0]["gamesPlayed"] == 3

    with open(db.leaderboard_file, encoding="utf-8") as f:
        assert len(json.load(f)["leaderboard"]) == 2


def test_query_sorts_descending_and_limits(db):
    db.upsert_entry(record("a", "ana", 100, games=9, streak=1))
    db.upsert_entry(record("b", "ben", 300, games=2, streak=7))
    db.upsert_entry(record("c", "cy", 200, games=5, streak=3))

    by_score = leaderboard_server.process_request(
        {"collection": "Leaderboard", "action": "query", "data": {"limit": 2}})
    assert [e["username"] for e in by_score["entries"]] == ["ben", "cy"]

    by_games = leaderboard_server.process_request(
        {"collection": "Leaderboard", "action": "query", "data": {"sort_by": "gamesPlayed"}})
    assert [e["username"] for e in by_games["entries"]] == ["ana", "cy", "ben"]

    assert [e["id"] for e in db.list_entries("bestStreak")] == ["b", "c", "a"]


def test_unknown_collection_and_action(db):
    response = leaderboard_server.process_request({"collection": "GameLog", "action": "query", "data": {}})
    assert response == {"status": "error", "reason": "Unknown collection 'GameLog'"}
    response = leaderboard_server.process_request({"collection": "Leaderboard", "action": "delete", "data": {}})
    assert response["status"] == "error"


def test_non_numeric_stats_are_stored_as_zero(tmp_path):
    ops = DatabaseOperations(str(tmp_path))
    row = ops.upsert_entry({"id": 7, "username": "x", "totalScore": "lots"})
    assert row["id"] == "7" and row["totalScore"] == 0
    assert ops.get_entry("7")["username"] == "x"
    with pytest.raises(ValueError):
        ops.upsert_entry({"username": "no id"})


# Live server

def test_client_upsert_and_query_over_tcp(live_server):
    host, port = live_server
    client = LeaderboardClient(host, port, timeout=2)
    assert client.upsert(record("p1", "ana", 120))
    assert client.upsert(record("p2", "ben", 480))
    entries = client.query("totalScore")
    assert [e["username"] for e in entries] == ["ben", "ana"]


def test_server_answers_bad_json(live_server):
    with socket.create_connection(live_server, timeout=2) as sock:
        protocol.send_msg(sock, b"{oops")
        assert protocol.recv_json(sock) == {"status": "error", "reason": "invalid_json_format"}


def test_upload_score_builds_record_from_profile_and_stats(live_server):
    host, port = live_server
    store = MemoryStore()
    stats = StatsService(store)
    client = LeaderboardClient(host, port, timeout=2)

    # No username yet: nothing is sent
    assert build_leaderboard_record(store, stats) is None
    assert not upload_score(store, stats, client)

    save_profile(store, {"username": "ana"})
    stats.record_game_result(250)
    assert upload_score(store, stats, client)

    entries = client.query()
    assert len(entries) == 1
    assert entries[0]["username"] == "ana"
    assert entries[0]["totalScore"] == 250
    assert entries[0]["id"] == store.get("userId")


def test_unreachable_server_is_reported_not_raised():
    port = unused_port()
    response = send_request({"collection": "Leaderboard", "action": "query"}, '127.0.0.1', port, timeout=1)
    assert response["status"] == "error"

    client = LeaderboardClient('127.0.0.1', port, timeout=1)
    assert client.query() == []
    store = MemoryStore()
    save_profile(store, {"username": "ana"})
    assert not upload_score(store, StatsService(store), client)


def test_oversized_request_is_rejected_before_connecting():
    # Nothing listens on this port; the size check must answer first
    port = unused_port()
    huge = record("u1", "x" * (protocol.MAX_MSG_SIZE + 1), 1)
    response = send_request({"collection": "Leaderboard", "action": "upsert", "data": huge},
                            '127.0.0.1', port, timeout=1)
    assert response == {"status": "error", "reason": "request_too_large"}
    assert not LeaderboardClient('127.0.0.1', port, timeout=1).upsert(huge)


def test_format_leaderboard_marks_own_row():
    text = format_leaderboard([record("a", "ana", 300), record("b", "ben", 100)], own_id="b")
    lines = text.splitlines()
    assert lines[1].startswith("  1")
    assert lines[2].startswith("* 2")
    assert "(no players yet)" in format_leaderboard([])

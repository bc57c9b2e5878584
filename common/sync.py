# Leaderboard sync client.
# Acts as a client to the leaderboard server: one request per connection.
# Every failure is logged and reported as an error response; nothing here
# raises into game code.

import json
import logging
import socket
import threading
from typing import Optional, List, Dict, Any

from common import config
from common import protocol
from common.message_types import (
    ACTION_QUERY, ACTION_UPSERT, COLLECTION_LEADERBOARD, DEFAULT_SORT_FIELD, STATUS_OK,
)
from common.profile import ensure_user_id, load_profile

logger = logging.getLogger(__name__)


def send_request(request: dict, host: Optional[str] = None, port: Optional[int] = None,
                 timeout: Optional[float] = None) -> dict:
    """Send one request to the leaderboard server and return its response."""
    host = host or config.LEADERBOARD_HOST
    port = port or config.LEADERBOARD_PORT
    timeout = config.SYNC_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        body = json.dumps(request).encode('utf-8')
    except (TypeError, ValueError) as e:
        logger.error(f"Request is not JSON-serializable: {e}")
        return {"status": "error", "reason": "invalid_request"}
    if len(body) > protocol.MAX_MSG_SIZE:
        logger.error(f"Request of {len(body)} bytes exceeds the {protocol.MAX_MSG_SIZE}-byte limit")
        return {"status": "error", "reason": "request_too_large"}

    try:
        with socket.create_connection((host, port), timeout=timeout) as sock:
            protocol.send_msg(sock, body)
            response = protocol.recv_json(sock)
            if response is None:
                logger.warning("Leaderboard server closed connection unexpectedly.")
                return {"status": "error", "reason": "server_no_response"}
            return response
    except (socket.error, OSError) as e:
        logger.error(f"Failed to connect or communicate with leaderboard server at {host}:{port}: {e}")
        return {"status": "error", "reason": f"connection_error: {e}"}
    except ValueError as e:
        logger.error(f"Bad response from leaderboard server: {e}")
        return {"status": "error", "reason": "invalid_response"}


class LeaderboardClient:
    """Upsert and query leaderboard rows on a remote leaderboard server."""

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 timeout: Optional[float] = None):
        self.host = host or config.LEADERBOARD_HOST
        self.port = port or config.LEADERBOARD_PORT
        self.timeout = timeout

    def _send(self, action: str, data: dict) -> dict:
        return send_request(
            {"collection": COLLECTION_LEADERBOARD, "action": action, "data": data},
            self.host, self.port, self.timeout,
        )

    def upsert(self, record: Dict[str, Any]) -> bool:
        response = self._send(ACTION_UPSERT, record)
        if response.get("status") == STATUS_OK:
            logger.info(f"Synced leaderboard entry for {record.get('username')}")
            return True
        logger.warning(f"Leaderboard upload failed: {response.get('reason')}")
        return False

    def query(self, sort_by: str = DEFAULT_SORT_FIELD, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Rows sorted descending by sort_by; an empty list when the server is unreachable."""
        data = {"sort_by": sort_by}
        if limit is not None:
            data["limit"] = limit
        response = self._send(ACTION_QUERY, data)
        if response.get("status") != STATUS_OK:
            logger.warning(f"Leaderboard query failed: {response.get('reason')}")
            return []
        return response.get("entries", [])


def build_leaderboard_record(store, stats_service) -> Optional[Dict[str, Any]]:
    """The player's leaderboard row, or None when no username has been set."""
    profile = load_profile(store)
    if not profile["username"]:
        return None
    stats = stats_service.get_stats()
    return {
        "id": ensure_user_id(store),
        "username": profile["username"],
        "avatar": profile["avatar"],
        "favoriteGame": profile["favoriteGame"],
        "totalScore": stats["totalScore"],
        "gamesPlayed": stats["gamesPlayed"],
        "bestStreak": stats["bestStreak"],
    }


def upload_score(store, stats_service, client: Optional[LeaderboardClient] = None) -> bool:
    """Best-effort push of the player's aggregate stats. Returns True on success."""
    try:
        record = build_leaderboard_record(store, stats_service)
    except Exception as e:
        logger.error(f"Could not build leaderboard record: {e}")
        return False
    if record is None:
        logger.info("No profile username set; skipping leaderboard sync.")
        return False
    return (client or LeaderboardClient()).upsert(record)


def upload_score_in_background(store, stats_service, client: Optional[LeaderboardClient] = None) -> threading.Thread:
    """Fire-and-forget upload_score() on a daemon thread."""
    thread = threading.Thread(target=upload_score, args=(store, stats_service, client), daemon=True)
    thread.start()
    return thread

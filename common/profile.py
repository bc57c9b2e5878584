# Player profile and stable identity, kept in the key-value store.

import json
import logging
import uuid
from typing import Dict

logger = logging.getLogger(__name__)

PROFILE_KEY = "userProfile"
USER_ID_KEY = "userId"

DEFAULT_AVATAR = "🎮"
DEFAULT_FAVORITE_GAME = "Tetris"


def ensure_user_id(store) -> str:
    """Return the stored user id, creating a random one on first use."""
    user_id = store.get(USER_ID_KEY)
    if not user_id:
        user_id = str(uuid.uuid4())
        store.set(USER_ID_KEY, user_id)
        logger.info(f"Created user id {user_id}")
    return user_id


def load_profile(store) -> Dict[str, str]:
    """Load the profile; missing or malformed data yields an empty username."""
    profile = {"username": "", "avatar": DEFAULT_AVATAR, "favoriteGame": DEFAULT_FAVORITE_GAME}
    raw = store.get(PROFILE_KEY)
    if not raw:
        return profile
    try:
        saved = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Discarding malformed {PROFILE_KEY}: {e}")
        return profile
    if isinstance(saved, dict):
        for field in profile:
            if saved.get(field):
                profile[field] = str(saved[field])
    return profile


def save_profile(store, profile: Dict[str, str]) -> Dict[str, str]:
    """Validate and store the profile. Returns what was saved."""
    username = str(profile.get("username", "")).strip()
    if not username:
        raise ValueError("Username cannot be empty")
    saved = {
        "username": username,
        "avatar": profile.get("avatar") or DEFAULT_AVATAR,
        "favoriteGame": profile.get("favoriteGame") or DEFAULT_FAVORITE_GAME,
    }
    store.set(PROFILE_KEY, json.dumps(saved, ensure_ascii=False))
    return saved

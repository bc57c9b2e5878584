# Database schema definitions and initialization utilities
# JSON file storage initialization for the leaderboard server

import logging
import os

from common import config
from common.db_operations import DatabaseOperations, LEADERBOARD_FILENAME
from common.storage import write_json_atomic

logger = logging.getLogger(__name__)


def initialize_database(storage_dir: str = config.STORAGE_DIR) -> DatabaseOperations:
    """
    Initialize the JSON file storage, creating an empty leaderboard file
    if it doesn't exist. Returns a DatabaseOperations instance.
    """
    os.makedirs(storage_dir, exist_ok=True)

    filepath = os.path.join(storage_dir, LEADERBOARD_FILENAME)
    if not os.path.exists(filepath):
        write_json_atomic(filepath, {"leaderboard": []})
        logger.info(f"Created {filepath}")

    logger.info("JSON storage initialized successfully")
    return DatabaseOperations(storage_dir=storage_dir)

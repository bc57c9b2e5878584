# Database CRUD operations
# Clean interface for leaderboard storage

import logging
import os
import threading
from datetime import datetime
from typing import Optional, List, Dict, Any

from common.message_types import DEFAULT_SORT_FIELD, LEADERBOARD_FIELDS, SORTABLE_FIELDS
from common.storage import read_json_file, write_json_atomic

logger = logging.getLogger(__name__)

LEADERBOARD_FILENAME = 'leaderboard.json'


class DatabaseOperations:
    """Clean interface for leaderboard operations using JSON file storage."""

    def __init__(self, storage_dir: str = 'storage'):
        self.storage_dir = storage_dir
        os.makedirs(storage_dir, exist_ok=True)

        self.leaderboard_file = os.path.join(storage_dir, LEADERBOARD_FILENAME)

        # Serializes read-modify-write cycles on the leaderboard file
        self.leaderboard_lock = threading.Lock()

    def _load_leaderboard(self) -> Dict[str, Any]:
        data = read_json_file(self.leaderboard_file, {"leaderboard": []})
        if not isinstance(data, dict) or not isinstance(data.get("leaderboard"), list):
            logger.error(f"Malformed {self.leaderboard_file}, starting from an empty leaderboard")
            return {"leaderboard": []}
        return data

    def _save_leaderboard(self, data: Dict[str, Any]):
        try:
            write_json_atomic(self.leaderboard_file, data)
        except Exception as e:
            logger.error(f"Error saving {self.leaderboard_file}: {e}")
            raise

    @staticmethod
    def _normalize(record: Dict[str, Any]) -> Dict[str, Any]:
        row = {field: record.get(field) for field in LEADERBOARD_FIELDS}
        row["id"] = str(row["id"])
        row["username"] = str(row["username"] or "")
        for field in SORTABLE_FIELDS:
            try:
                row[field] = int(row[field] or 0)
            except (TypeError, ValueError):
                row[field] = 0
        return row

    # Leaderboard operations
    def upsert_entry(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert the record, or replace the row with the same id. Returns the stored row."""
        if not record.get("id"):
            raise ValueError("Leaderboard record requires an id")

        row = self._normalize(record)
        row["updated_at"] = datetime.now().isoformat()

        with self.leaderboard_lock:
            data = self._load_leaderboard()
            rows = data["leaderboard"]
            for index, existing in enumerate(rows):
                if existing.get("id") == row["id"]:
                    rows[index] = row
                    logger.info(f"Updated leaderboard entry: {row['username']} ({row['id']})")
                    break
            else:
                rows.append(row)
                logger.info(f"Created leaderboard entry: {row['username']} ({row['id']})")
            self._save_leaderboard(data)
        return dict(row)

    def get_entry(self, entry_id: str) -> Optional[Dict[str, Any]]:
        """Get a leaderboard row by id."""
        with self.leaderboard_lock:
            data = self._load_leaderboard()
        for row in data["leaderboard"]:
            if row.get("id") == entry_id:
                return dict(row)
        return None

    def list_entries(self, sort_by: str = DEFAULT_SORT_FIELD, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """List leaderboard rows sorted descending by sort_by."""
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort by {sort_by!r}")
        with self.leaderboard_lock:
            data = self._load_leaderboard()
        rows = [dict(row) for row in data["leaderboard"]]
        rows.sort(key=lambda x: x.get(sort_by, 0), reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return rows

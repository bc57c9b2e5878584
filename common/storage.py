# Key-value persistence for the player side.
# Every game reads and writes plain strings by key; structured values
# (stats, profile, score tallies) are JSON-encoded by their owners.

import json
import logging
import os
import tempfile
import threading
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


def write_json_atomic(filepath: str, data: Any):
    """Write JSON to filepath atomically (write to temp file, then rename)."""
    directory = os.path.dirname(filepath) or '.'
    os.makedirs(directory, exist_ok=True)
    # Temp file must live in the same directory for the rename to be atomic
    temp_fd, temp_path = tempfile.mkstemp(dir=directory, suffix='.tmp')
    try:
        with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(temp_path, filepath)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def read_json_file(filepath: str, default: Any) -> Any:
    """Load JSON from filepath; a missing or unreadable file yields default."""
    if not os.path.exists(filepath):
        return default
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.error(f"Error loading {filepath}: {e}")
        return default


class MemoryStore:
    """In-memory key-value store with the same interface as JsonFileStore."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: str):
        if not isinstance(value, str):
            raise TypeError(f"value for '{key}' must be a string, got {type(value).__name__}")
        with self._lock:
            self._data[key] = value

    def delete(self, key: str):
        with self._lock:
            self._data.pop(key, None)


class JsonFileStore:
    """
    Key-value store persisted as a single JSON object on disk.

    Reads always go to the file so that several processes (one per game)
    see each other's writes. Writes rewrite the whole file atomically.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        data = read_json_file(self.path, {})
        if not isinstance(data, dict):
            logger.error(f"Ignoring {self.path}: top-level value is not an object")
            return {}
        return data

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            value = self._load().get(key)
        return default if value is None else str(value)

    def set(self, key: str, value: str):
        if not isinstance(value, str):
            raise TypeError(f"value for '{key}' must be a string, got {type(value).__name__}")
        with self._lock:
            data = self._load()
            data[key] = value
            try:
                write_json_atomic(self.path, data)
            except Exception as e:
                logger.error(f"Error saving {self.path}: {e}")
                raise

    def delete(self, key: str):
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                write_json_atomic(self.path, data)

"""Key-value persistence backends for the diagram and collection stores."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class SqliteKVStore:
    """SQLite table holding one text value per key."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")

    def init_db(self) -> None:
        """Create the kv table."""
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    def get(self, key: str) -> str | None:
        """Get a value by key, or None if not found."""
        cur = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cur.fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Set a key-value pair (INSERT OR REPLACE)."""
        self._conn.execute(
            "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
            (key, value),
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()


class MemoryKVStore:
    """Dict-backed backend for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


def load_array(backend: KeyValueBackend, key: str) -> list[dict]:
    """Read the JSON array stored under ``key``.

    A missing key is an empty store. A value that is not a JSON array is
    logged and also treated as empty so listing never fails.
    """
    raw = backend.get(key)
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored value under %r is not valid JSON, ignoring it", key)
        return []
    if not isinstance(data, list):
        logger.warning("Stored value under %r is not a JSON array, ignoring it", key)
        return []
    return [item for item in data if isinstance(item, dict)]


def save_array(backend: KeyValueBackend, key: str, items: list[dict]) -> None:
    """Serialize the whole array back under ``key``."""
    backend.set(key, json.dumps(items, ensure_ascii=False))

import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Tuple

from ...domain.errors import StorageError
from ...domain.ports.persistence import KeyValueStore


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed implementation of the key-value store."""

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )

    def close(self) -> None:
        self._conn.close()

    def get(self, key: str) -> Optional[str]:
        try:
            with self._lock:
                cur = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
                row = cur.fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key}") from exc
        return row["value"] if row else None

    def put(self, key: str, value: str) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    "INSERT INTO kv (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {key}") from exc

    def delete(self, key: str) -> bool:
        try:
            with self._lock, self._conn:
                cur = self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                return cur.rowcount > 0
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to delete {key}") from exc

    def list_keys(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: int = 100,
    ) -> Tuple[List[str], Optional[str]]:
        if limit <= 0:
            raise ValueError("limit must be positive")
        query = "SELECT key FROM kv WHERE substr(key, 1, ?) = ?"
        params: list = [len(prefix), prefix]
        if cursor:
            query += " AND key > ?"
            params.append(cursor)
        # Fetch one extra row to know whether another page exists.
        query += " ORDER BY key ASC LIMIT ?"
        params.append(limit + 1)
        try:
            with self._lock:
                cur = self._conn.execute(query, params)
                rows = cur.fetchall()
        except sqlite3.Error as exc:
            raise StorageError("Failed to list keys") from exc
        keys = [row["key"] for row in rows]
        if len(keys) > limit:
            keys = keys[:limit]
            return keys, keys[-1]
        return keys, None

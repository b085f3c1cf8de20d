"""SQLite key-value storage with a byte quota.

Stands in for browser local storage: string values under string keys, and a
hard upper bound on the total number of bytes held.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from ..errors import QuotaExceededError, StorageError
from ..logger import get_logger

logger = get_logger(__name__)

# Roughly what browsers grant a single origin
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


def entry_size(key: str, value: str) -> int:
    """Bytes an entry counts against the quota (UTF-8 key + value)."""
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class KeyValueStorage:
    """Manages string key/value slots in SQLite."""

    def __init__(
        self,
        db_path: str | Path = "data/portfolio.db",
        quota_bytes: int = DEFAULT_QUOTA_BYTES,
    ):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.quota_bytes = quota_bytes
        self._init_db()

    @contextmanager
    def _connect(self):
        """Yield a connection; SQLite failures surface as StorageError."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                yield conn
        except sqlite3.Error as e:
            raise StorageError(f"Storage failure in {self.db_path}: {e}") from e

    def _init_db(self):
        """Create the items table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS items (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    size INTEGER NOT NULL
                )
            """)
            conn.commit()

    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None."""
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM items WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Store value under key.

        Raises:
            QuotaExceededError: If the write would exceed the quota. The
                previous value (if any) is left untouched.
            StorageError: If the database cannot be written
        """
        size = entry_size(key, value)
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT COALESCE(SUM(size), 0) FROM items WHERE key != ?", (key,)
            )
            needed = cursor.fetchone()[0] + size
            if needed > self.quota_bytes:
                raise QuotaExceededError(needed, self.quota_bytes)
            conn.execute(
                "INSERT OR REPLACE INTO items (key, value, size) VALUES (?, ?, ?)",
                (key, value, size),
            )
            conn.commit()
        logger.debug("Stored %s (%d bytes, %d/%d used)", key, size, needed, self.quota_bytes)

    def remove_item(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM items WHERE key = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0

    def used_bytes(self) -> int:
        """Total bytes currently counted against the quota."""
        with self._connect() as conn:
            return conn.execute("SELECT COALESCE(SUM(size), 0) FROM items").fetchone()[0]


class MemoryStorage(KeyValueStorage):
    """In-memory storage with the same quota rules, for tests and dry runs."""

    def __init__(self, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.db_path = None
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        needed = sum(entry_size(k, v) for k, v in self._items.items() if k != key)
        needed += entry_size(key, value)
        if needed > self.quota_bytes:
            raise QuotaExceededError(needed, self.quota_bytes)
        self._items[key] = value

    def remove_item(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def used_bytes(self) -> int:
        return sum(entry_size(k, v) for k, v in self._items.items())

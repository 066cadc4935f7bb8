"""
Durable key-value storage for Melody

The playlist, favorites and recently-played aggregates each serialize
themselves to a string and store it under a fixed key.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol

from loguru import logger

# Keys used by the persisted aggregates
PLAYLIST_KEY = "playlist"
FAVORITES_KEY = "favorites"
RECENTLY_PLAYED_KEY = "recently-played"


class KeyValueStore(Protocol):
    """Minimal storage interface consumed by the core."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store, used when nothing needs to survive a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SqliteStore:
    """Key-value store backed by a single SQLite table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._init_schema()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open a connection with proper cleanup."""
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()
        logger.debug(f"Store ready at {self.db_path}")

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key`` or None when absent."""
        try:
            with self._connection() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error:
            logger.exception(f"Failed to read key '{key}' from store")
            return None
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value for ``key``.

        Write failures are logged, not raised.
        """
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    """,
                    (key, value),
                )
                conn.commit()
        except sqlite3.Error:
            logger.exception(f"Failed to write key '{key}' to store")

"""Key-value stores with timestamped entries and expiry by age.

``KeyValueStore`` is the interface the acknowledgement store and the search
response cache are written against. ``SQLiteKeyValueStore`` persists to disk;
``MemoryKeyValueStore`` is a drop-in for tests and short-lived processes.
"""

import json
import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import aiosqlite

from bloomie.engine.config import PathConfig


def _utcnow() -> datetime:
    return datetime.now(UTC)


class KeyValueStore(ABC):
    """JSON values keyed by string, each stamped with its write time."""

    def __init__(self, clock: Callable[[], datetime] = None):
        self.clock = clock or _utcnow

    async def initialize(self):
        """Prepare backing storage. No-op by default."""

    async def close(self):
        """Release backing storage. No-op by default."""

    @abstractmethod
    async def get_entry(self, key: str) -> tuple[Any, datetime] | None:
        """Return (value, stored_at) or None."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, stamped with the current time."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if it existed."""

    @abstractmethod
    async def entries(self, prefix: str = "") -> list[tuple[str, datetime]]:
        """(key, stored_at) pairs for keys starting with ``prefix``."""

    async def get(self, key: str, max_age: timedelta = None) -> Any | None:
        """Value for ``key``, or None if missing or older than ``max_age``."""
        entry = await self.get_entry(key)
        if entry is None:
            return None
        value, stored_at = entry
        if max_age is not None and self.clock() - stored_at >= max_age:
            return None
        return value

    async def expire(self, max_age: timedelta, prefix: str = "") -> int:
        """Delete entries older than ``max_age``. Returns how many were removed."""
        cutoff = self.clock() - max_age
        removed = 0
        for key, stored_at in await self.entries(prefix):
            if stored_at <= cutoff and await self.delete(key):
                removed += 1
        return removed

    async def trim(self, max_entries: int, prefix: str = "") -> int:
        """Evict the oldest entries beyond ``max_entries``."""
        entries = sorted(await self.entries(prefix), key=lambda e: e[1])
        excess = entries[: max(0, len(entries) - max_entries)]
        for key, _ in excess:
            await self.delete(key)
        return len(excess)


class MemoryKeyValueStore(KeyValueStore):
    """In-process store backed by a dict."""

    def __init__(self, clock: Callable[[], datetime] = None):
        super().__init__(clock)
        self._data: dict[str, tuple[str, datetime]] = {}

    async def get_entry(self, key):
        if key not in self._data:
            return None
        raw, stored_at = self._data[key]
        return json.loads(raw), stored_at

    async def set(self, key, value):
        # Round-trip through JSON so values behave like the SQLite store's
        self._data[key] = (json.dumps(value), self.clock())

    async def delete(self, key):
        return self._data.pop(key, None) is not None

    async def entries(self, prefix=""):
        return [(k, ts) for k, (_, ts) in self._data.items() if k.startswith(prefix)]


class SQLiteKeyValueStore(KeyValueStore):
    """Async SQLite-backed store."""

    def __init__(self, db_path: str, clock: Callable[[], datetime] = None):
        """Initialize store.

        Args:
            db_path: Path to SQLite database file
            clock: Returns the current time; defaults to UTC now
        """
        super().__init__(clock)
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def initialize(self):
        """Create database, enable WAL mode, and ensure schema exists."""
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)

        self._conn = await aiosqlite.connect(self.db_path)
        self._conn.row_factory = aiosqlite.Row

        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA busy_timeout=5000")

        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                stored_at TEXT NOT NULL
            )
        """)
        await self._conn.execute("CREATE INDEX IF NOT EXISTS idx_kv_stored_at ON kv_store(stored_at)")
        await self._conn.commit()

    async def close(self):
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Store not initialized. Call initialize() first.")
        return self._conn

    async def get_entry(self, key):
        conn = self._require_conn()
        cursor = await conn.execute("SELECT value, stored_at FROM kv_store WHERE key = ?", (key,))
        row = await cursor.fetchone()
        if not row:
            return None
        return json.loads(row["value"]), datetime.fromisoformat(row["stored_at"])

    async def set(self, key, value):
        conn = self._require_conn()
        await conn.execute(
            """
            INSERT INTO kv_store (key, value, stored_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                stored_at = excluded.stored_at
            """,
            (key, json.dumps(value), self.clock().isoformat()),
        )
        await conn.commit()

    async def delete(self, key):
        conn = self._require_conn()
        cursor = await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await conn.commit()
        return cursor.rowcount > 0

    async def entries(self, prefix=""):
        conn = self._require_conn()
        cursor = await conn.execute(
            "SELECT key, stored_at FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY stored_at",
            (len(prefix), prefix),
        )
        rows = await cursor.fetchall()
        return [(row["key"], datetime.fromisoformat(row["stored_at"])) for row in rows]


async def open_sqlite_store(paths: PathConfig = None) -> SQLiteKeyValueStore:
    """Open the default on-disk store under the configured data directory."""
    if paths is None:
        paths = PathConfig.from_env()
    store = SQLiteKeyValueStore(str(paths.cache_db_path))
    await store.initialize()
    return store

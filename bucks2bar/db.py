"""Durable key-value byte stores backing the persistence gateway.

Two implementations share the same small interface (``get``, ``set``,
``delete``, ``total_bytes``): a SQLite file store used by the dashboard and an
in-memory store for tests and throwaway sessions. Both enforce a byte quota
measured as the UTF-8 size of every key plus its value.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, Optional

from .config import DB_PATH, QUOTA_LIMIT, ensure_data_directories
from .errors import StorageError
from .logging_setup import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT
);
"""


def entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class KeyValueStore(ABC):
    """Common quota handling for key-value stores."""

    def __init__(self, quota_bytes: Optional[int] = QUOTA_LIMIT) -> None:
        self.quota_bytes = quota_bytes

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def total_bytes(self) -> int:
        raise NotImplementedError

    def _check_quota(self, key: str, value: str) -> None:
        if self.quota_bytes is None:
            return
        current = self.get(key)
        existing = entry_size(key, current) if current is not None else 0
        projected = self.total_bytes() - existing + entry_size(key, value)
        if projected > self.quota_bytes:
            raise StorageError(
                f"Storage quota exceeded: {projected} of {self.quota_bytes} bytes required for '{key}'"
            )


class MemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store; contents vanish with the process."""

    def __init__(self, quota_bytes: Optional[int] = QUOTA_LIMIT) -> None:
        super().__init__(quota_bytes)
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def total_bytes(self) -> int:
        return sum(entry_size(k, v) for k, v in self._data.items())


class SQLiteKeyValueStore(KeyValueStore):
    """Key-value store persisted in a single SQLite table."""

    def __init__(self, path: Optional[Path] = None, quota_bytes: Optional[int] = QUOTA_LIMIT) -> None:
        super().__init__(quota_bytes)
        self.path = Path(path) if path is not None else DB_PATH
        self.init_db()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        if self.path == DB_PATH:
            ensure_data_directories()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(str(self.path))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to open storage at {self.path}: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            logger.error("Storage operation failed on %s: %s", self.path, e)
            raise StorageError(f"Storage operation failed: {e}") from e
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def get(self, key: str) -> Optional[str]:
        with self.connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self.connect() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()

    def total_bytes(self) -> int:
        with self.connect() as conn:
            row = conn.execute(
                """
                SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0)
                FROM kv_store
                """
            ).fetchone()
        return int(row[0])

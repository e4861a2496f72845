# file: trustscore/store.py
"""
Persistent key-value stores.

The scoring engine treats durable storage as an external asynchronous get/set
service holding JSON-serializable values. Two implementations are provided:
an in-memory store (tests, single-shot CLI runs) and a SQLite-backed store.
"""

from __future__ import annotations

import asyncio
import copy
import json
import sqlite3
from pathlib import Path
from typing import Any, Protocol

from trustscore.errors import StoreError


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any | None:  # pragma: no cover - helper protocol
        raise NotImplementedError

    async def set(self, key: str, value: Any) -> None:  # pragma: no cover - helper protocol
        raise NotImplementedError


class MemoryKeyValueStore:
    """Dict-backed store. Values are deep-copied on the way in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)


class SQLiteKeyValueStore:
    """
    SQLite-backed store.

    Values are stored as JSON text keyed by a string. Blocking sqlite calls run
    in a worker thread so the event loop is never blocked.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        return conn

    def _init_db(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL
                );
                """)

    def get_sync(self, key: str) -> Any | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value_json FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def set_sync(self, key: str, value: Any) -> None:
        value_json = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv(key, value_json) VALUES (?, ?)",
                (key, value_json),
            )

    async def get(self, key: str) -> Any | None:
        try:
            return await asyncio.to_thread(self.get_sync, key)
        except (sqlite3.Error, json.JSONDecodeError) as exc:
            raise StoreError(f"Failed to read {key!r}: {exc}") from exc

    async def set(self, key: str, value: Any) -> None:
        try:
            await asyncio.to_thread(self.set_sync, key, value)
        except (sqlite3.Error, TypeError, ValueError) as exc:
            raise StoreError(f"Failed to write {key!r}: {exc}") from exc

# file: tests/test_store.py
from __future__ import annotations

from pathlib import Path

import pytest

from trustscore.errors import StoreError
from trustscore.store import MemoryKeyValueStore, SQLiteKeyValueStore


async def test_memory_store_copies_values() -> None:
    store = MemoryKeyValueStore()
    value = {"allowlist": ["example.com"]}
    await store.set("settings", value)
    value["allowlist"].append("mutated.com")

    got = await store.get("settings")
    assert got == {"allowlist": ["example.com"]}
    got["allowlist"].clear()
    assert store.snapshot()["settings"] == {"allowlist": ["example.com"]}
    assert await store.get("missing") is None


async def test_sqlite_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.sqlite3"
    first = SQLiteKeyValueStore(path)
    await first.set("trustscore_history", [{"hostname": "example.com", "score": 90}])
    await first.set("settings", {"sensitivity": "strict"})
    await first.set("settings", {"sensitivity": "relaxed"})

    second = SQLiteKeyValueStore(path)
    assert await second.get("trustscore_history") == [{"hostname": "example.com", "score": 90}]
    assert await second.get("settings") == {"sensitivity": "relaxed"}
    assert await second.get("missing") is None


async def test_sqlite_store_wraps_serialization_errors(tmp_path: Path) -> None:
    store = SQLiteKeyValueStore(tmp_path / "store.sqlite3")
    with pytest.raises(StoreError):
        await store.set("bad", {"value": object()})

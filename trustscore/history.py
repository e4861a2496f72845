# file: trustscore/history.py
"""
Bounded evaluation history.

A compact summary of every evaluation is kept newest-first under
``trustscore_history``. The ledger is a fixed-capacity ring buffer: once it
grows past capacity the oldest entries fall off the end.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from trustscore.scoring.aggregator import EvaluationResult
from trustscore.store import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "trustscore_history"
MAX_HISTORY = 25


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    hostname: str | None
    score: int
    tier: str
    timestamp: int

    @classmethod
    def from_evaluation(cls, evaluation: EvaluationResult) -> HistoryEntry:
        return cls(
            hostname=evaluation.hostname,
            score=evaluation.score,
            tier=evaluation.tier,
            timestamp=evaluation.timestamp,
        )

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> HistoryEntry:
        hostname = obj.get("hostname")
        score = obj.get("score")
        timestamp = obj.get("timestamp")
        return cls(
            hostname=hostname if isinstance(hostname, str) else None,
            score=int(score) if isinstance(score, (int, float)) else 0,
            tier=str(obj.get("tier") or ""),
            timestamp=int(timestamp) if isinstance(timestamp, (int, float)) else 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hostname": self.hostname,
            "score": self.score,
            "tier": self.tier,
            "timestamp": self.timestamp,
        }


class HistoryRecorder:
    def __init__(self, store: KeyValueStore, *, capacity: int = MAX_HISTORY) -> None:
        self._store = store
        self._capacity = max(1, int(capacity))
        self._lock = asyncio.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    async def _raw(self) -> list[Any]:
        stored = await self._store.get(HISTORY_KEY)
        return list(stored) if isinstance(stored, list) else []

    async def entries(self) -> list[HistoryEntry]:
        """Return the ledger, newest first."""

        raw = await self._raw()
        return [HistoryEntry.from_dict(item) for item in raw if isinstance(item, dict)]

    async def record(self, evaluation: EvaluationResult) -> None:
        """
        Prepend a summary of `evaluation` and trim the ledger to capacity.

        Best-effort: failures are logged and swallowed so they never reach the
        caller of the evaluation.
        """

        try:
            async with self._lock:
                ledger = await self._raw()
                ledger.insert(0, HistoryEntry.from_evaluation(evaluation).to_dict())
                await self._store.set(HISTORY_KEY, ledger[: self._capacity])
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Failed to record history for %s: %s", evaluation.hostname, exc)

# file: trustscore/service.py
"""
Request/response facade used by signal collectors and presentation layers.

`TrustScoreService` wires the scoring engine to settings, the allowlist and
the history ledger. Scoring itself is synchronous; only store I/O awaits.
History is recorded in a background task so a slow or failing store never
delays the evaluation result.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Any, Hashable, Mapping

from trustscore.allowlist import AllowlistManager
from trustscore.core.payload import SignalPayload
from trustscore.history import MAX_HISTORY, HistoryEntry, HistoryRecorder
from trustscore.scoring.aggregator import EvaluationResult, evaluate
from trustscore.settings import Settings, SettingsManager
from trustscore.store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_TAB_CACHE_MAX_ENTRIES = 256


class TabResultCache:
    """
    Last evaluation per tab, bounded as an LRU.

    Reads and writes both refresh recency. When full, the least recently used
    tab is evicted.
    """

    def __init__(self, *, max_entries: int = DEFAULT_TAB_CACHE_MAX_ENTRIES) -> None:
        self._max_entries = max(1, int(max_entries))
        self._entries: OrderedDict[Hashable, EvaluationResult] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, tab_id: object) -> bool:
        return tab_id in self._entries

    def get(self, tab_id: Hashable) -> EvaluationResult | None:
        result = self._entries.get(tab_id)
        if result is not None:
            self._entries.move_to_end(tab_id)
        return result

    def put(self, tab_id: Hashable, result: EvaluationResult) -> None:
        self._entries[tab_id] = result
        self._entries.move_to_end(tab_id)
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cached evaluation for tab %s", evicted)

    def discard(self, tab_id: Hashable) -> None:
        self._entries.pop(tab_id, None)


class TrustScoreService:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        tab_cache_max_entries: int = DEFAULT_TAB_CACHE_MAX_ENTRIES,
        history_capacity: int = MAX_HISTORY,
    ) -> None:
        self.settings = SettingsManager(store)
        self.allowlist = AllowlistManager(self.settings)
        self.history = HistoryRecorder(store, capacity=history_capacity)
        self.tab_cache = TabResultCache(max_entries=tab_cache_max_entries)
        self._pending: set[asyncio.Task[None]] = set()

    async def evaluate_signals(
        self, payload: SignalPayload | Mapping[str, Any] | None, *, tab_id: Hashable = 0
    ) -> EvaluationResult:
        """
        Score a payload with the current settings, cache it for `tab_id`, and
        schedule the history append.

        Raises:
            SettingsError: if settings cannot be loaded.
        """

        settings = await self.settings.load()
        result = evaluate(payload, settings)
        self.tab_cache.put(tab_id, result)
        logger.info(
            "Evaluated %s: score=%d tier=%s",
            result.hostname or "<unknown>",
            result.score,
            result.tier,
        )

        task = asyncio.create_task(self.history.record(result))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return result

    def get_cached_result(self, tab_id: Hashable) -> EvaluationResult | None:
        return self.tab_cache.get(tab_id)

    def forget_tab(self, tab_id: Hashable) -> None:
        """Drop the cached evaluation for a closed tab."""

        self.tab_cache.discard(tab_id)

    async def get_settings(self) -> Settings:
        return await self.settings.load()

    async def save_settings(self, partial: Settings | Mapping[str, Any] | None) -> Settings:
        return await self.settings.save(partial)

    async def toggle_allowlist(self, domain: str, allow: bool) -> dict[str, list[str]]:
        return await self.allowlist.toggle(domain, allow)

    async def get_history(self) -> list[HistoryEntry]:
        return await self.history.entries()

    async def drain(self) -> None:
        """Wait for any in-flight history writes."""

        if self._pending:
            await asyncio.gather(*list(self._pending))

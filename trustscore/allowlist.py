# file: trustscore/allowlist.py
"""Allowlist membership toggling on top of `SettingsManager`."""

from __future__ import annotations

import logging

from trustscore.core.domain import normalize_domain
from trustscore.settings import SettingsManager

logger = logging.getLogger(__name__)


class AllowlistManager:
    def __init__(self, settings: SettingsManager) -> None:
        self._settings = settings

    async def toggle(self, domain: str, allow: bool) -> dict[str, list[str]]:
        """
        Add (`allow=True`) or remove a domain from the allowlist.

        The domain is canonicalized first. An invalid domain leaves the stored
        allowlist untouched and returns it as-is.

        Returns:
            ``{"allowlist": [...]}`` with the resulting allowlist.
        """

        canonical = normalize_domain(domain)
        if not canonical:
            current = await self._settings.read()
            logger.info("Ignoring allowlist toggle for invalid domain %r", domain)
            return {"allowlist": list(current.allowlist)}

        async with self._settings.write_lock:
            settings = await self._settings.load_unlocked()
            entries = list(settings.allowlist)
            if allow and canonical not in entries:
                entries.append(canonical)
            elif not allow and canonical in entries:
                entries.remove(canonical)
            saved = await self._settings.save_unlocked({"allowlist": entries})

        logger.info("Allowlist %s %s", "added" if allow else "removed", canonical)
        return {"allowlist": list(saved.allowlist)}

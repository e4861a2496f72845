# file: trustscore/settings.py
"""
User settings: sensitivity profile, allowlist, backend flag.

Settings live in the key-value store under ``settings`` in their wire shape
(``{"sensitivity", "allowlist", "enableBackend"}``). Loading merges stored
values over defaults, canonicalizes the allowlist and writes the result back,
so older or hand-edited records heal themselves on first read.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator
from pydantic import ConfigDict as PydanticConfigDict

from trustscore.core.domain import normalize_allowlist
from trustscore.errors import SettingsError, StoreError
from trustscore.store import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"

Sensitivity = Literal["strict", "normal", "relaxed"]
SENSITIVITIES: tuple[str, ...] = ("strict", "normal", "relaxed")
DEFAULT_SENSITIVITY: Sensitivity = "normal"

_BOOL = TypeAdapter(bool)


class Settings(BaseModel):
    model_config = PydanticConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    sensitivity: Sensitivity = DEFAULT_SENSITIVITY
    allowlist: list[str] = Field(default_factory=list)
    # Opaque to scoring; carried through for the presentation layer.
    enable_backend: bool = Field(default=False, alias="enableBackend")

    @field_validator("sensitivity", mode="before")
    @classmethod
    def _known_sensitivity(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in SENSITIVITIES:
            return value.strip().lower()
        return DEFAULT_SENSITIVITY

    @field_validator("allowlist", mode="before")
    @classmethod
    def _canonical_allowlist(cls, value: Any) -> list[str]:
        if isinstance(value, (list, tuple, set, frozenset)):
            return normalize_allowlist(value)
        return []

    @field_validator("enable_backend", mode="before")
    @classmethod
    def _backend_flag(cls, value: Any) -> bool:
        # Opaque pass-through flag; anything that is not a recognizable bool is off.
        try:
            return _BOOL.validate_python(value)
        except ValidationError:
            return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "sensitivity": self.sensitivity,
            "allowlist": list(self.allowlist),
            "enableBackend": self.enable_backend,
        }


def default_settings() -> Settings:
    return Settings()


def _merge(base: Mapping[str, Any], overlay: Mapping[str, Any] | None) -> dict[str, Any]:
    merged = dict(base)
    if overlay:
        merged.update(overlay)
    return merged


def _partial_to_wire(partial: Settings | Mapping[str, Any] | None) -> dict[str, Any]:
    if partial is None:
        return {}
    if isinstance(partial, Settings):
        return partial.to_dict()
    out = dict(partial)
    # Accept the Python field name as well as the wire name.
    if "enable_backend" in out and "enableBackend" not in out:
        out["enableBackend"] = out.pop("enable_backend")
    return out


class SettingsManager:
    """
    Load/merge/persist settings against a key-value store.

    Writes go through one asyncio lock per manager, so concurrent saves and
    allowlist toggles made through the same manager are applied one after the
    other instead of overwriting each other. Across processes the store gives
    no isolation and the last writer wins.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self.write_lock = asyncio.Lock()

    async def read(self) -> Settings:
        """Read and merge settings without writing them back."""

        try:
            stored = await self._store.get(SETTINGS_KEY)
        except StoreError as exc:
            raise SettingsError(f"Could not load settings: {exc}") from exc
        if stored is not None and not isinstance(stored, Mapping):
            logger.warning("Ignoring malformed stored settings of type %s", type(stored).__name__)
            stored = None
        try:
            return Settings.model_validate(_merge(default_settings().to_dict(), stored))
        except ValidationError as exc:
            raise SettingsError(f"Invalid stored settings: {exc}") from exc

    async def _write(self, settings: Settings) -> None:
        try:
            await self._store.set(SETTINGS_KEY, settings.to_dict())
        except StoreError as exc:
            raise SettingsError(f"Could not save settings: {exc}") from exc

    async def load_unlocked(self) -> Settings:
        """`load` for callers that already hold `write_lock`."""

        settings = await self.read()
        await self._write(settings)
        return settings

    async def load(self) -> Settings:
        """Read settings, merge over defaults, canonicalize and write the result back."""

        async with self.write_lock:
            return await self.load_unlocked()

    async def save_unlocked(self, partial: Settings | Mapping[str, Any] | None) -> Settings:
        """`save` for callers that already hold `write_lock`."""

        current = await self.load_unlocked()
        try:
            merged = Settings.model_validate(_merge(current.to_dict(), _partial_to_wire(partial)))
        except ValidationError as exc:
            raise SettingsError(f"Invalid settings update: {exc}") from exc
        await self._write(merged)
        logger.debug(
            "Saved settings: sensitivity=%s allowlist=%d",
            merged.sensitivity,
            len(merged.allowlist),
        )
        return merged

    async def save(self, partial: Settings | Mapping[str, Any] | None) -> Settings:
        """Merge a partial update over the current settings (partial wins) and persist."""

        async with self.write_lock:
            return await self.save_unlocked(partial)

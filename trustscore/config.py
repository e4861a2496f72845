# file: trustscore/config.py
"""
Configuration loader.

Settings come from up to three layers, applied lowest first:
1. YAML config file (path given explicitly or via ``TRUSTSCORE_CONFIG``)
2. `.env` values
3. OS environment variables

Every field of `TrustScoreConfig` can be set from the environment as
``TRUSTSCORE_<FIELD_NAME>``, e.g. ``TRUSTSCORE_STORE_PATH``.

User-facing scoring preferences (sensitivity, allowlist) are not configured
here; they live in the key-value store and are managed by `trustscore.settings`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel
from pydantic import ConfigDict as PydanticConfigDict

from trustscore.history import MAX_HISTORY
from trustscore.service import DEFAULT_TAB_CACHE_MAX_ENTRIES

ENV_PREFIX = "TRUSTSCORE_"
CONFIG_PATH_VAR = f"{ENV_PREFIX}CONFIG"


class TrustScoreConfig(BaseModel):
    model_config = PydanticConfigDict(extra="ignore")

    log_level: str = "INFO"
    json_logging: bool = False
    store_path: Path = Path(".cache/trustscore.sqlite3")
    tab_cache_max_entries: int = DEFAULT_TAB_CACHE_MAX_ENTRIES
    history_capacity: int = MAX_HISTORY


def env_var(field_name: str) -> str:
    return f"{ENV_PREFIX}{field_name.upper()}"


def _env_layer(env: Mapping[str, str | None]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name in TrustScoreConfig.model_fields:
        value = env.get(env_var(name))
        if isinstance(value, str):
            out[name] = value
    return out


def _yaml_layer(path: Path | None) -> dict[str, Any]:
    if path is None or not path.is_file():
        return {}
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    return raw if isinstance(raw, dict) else {}


def load_config(
    *, yaml_path: Path | None = None, env_path: Path | None = None
) -> TrustScoreConfig:
    """
    Build the config from YAML, `.env` and the OS environment.

    Args:
        yaml_path: Optional YAML config path. Defaults to ``TRUSTSCORE_CONFIG``
            from the OS environment, then from `.env`.
        env_path: Optional .env path (default: `.env` in the working directory).
    """

    if env_path is None:
        env_path = Path(".env")
    # dotenv_values only parses; os.environ is left alone.
    dotenv = dotenv_values(env_path) if env_path.is_file() else {}

    if yaml_path is None:
        configured = os.environ.get(CONFIG_PATH_VAR) or dotenv.get(CONFIG_PATH_VAR)
        yaml_path = Path(configured) if configured else None

    data: dict[str, Any] = {}
    for layer in (_yaml_layer(yaml_path), _env_layer(dotenv), _env_layer(os.environ)):
        data.update(layer)
    return TrustScoreConfig.model_validate(data)

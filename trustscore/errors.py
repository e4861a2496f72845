# file: trustscore/errors.py
"""Exception hierarchy shared across trustscore."""

from __future__ import annotations


class TrustScoreError(Exception):
    """Base class for trustscore errors."""


class StoreError(TrustScoreError):
    """Raised when the persistent key-value store cannot be read or written."""


class SettingsError(TrustScoreError):
    """Raised when settings cannot be loaded or saved."""


class InvalidPayloadError(TrustScoreError, ValueError):
    """Raised when a signal payload document is not a JSON object."""

# file: trustscore/__init__.py
"""
trustscore - explainable trust scoring for web pages.

This package turns structured observations about a page (URL shape, DOM
findings, interaction anomalies, transport security) into a 0-100 trust score,
a risk tier, and an ordered list of human-readable reasons.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"

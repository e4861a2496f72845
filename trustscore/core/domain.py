# file: trustscore/core/domain.py
"""
Domain canonicalization and allowlist matching.

This module provides small, pure helpers that:
- canonicalize user input (bare hostnames or full URLs) into a lowercase hostname,
- reject anything that is not a plain `[a-z0-9.-]` hostname (fail closed),
- normalize allowlists and test hostnames against them.

A `None` result always means "no canonical value". Callers must treat it as
non-matching, never as a wildcard.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence
from urllib.parse import urlsplit

_HOSTNAME_CHARS = re.compile(r"^[a-z0-9.-]+$")


def normalize_domain(value: object) -> str | None:
    """
    Canonicalize a domain or URL into a lowercase hostname.

    Args:
        value: A bare hostname (``"Example.com"``) or a full URL
            (``"https://pay.example.com/login"``).

    Returns:
        The canonical hostname, or ``None`` if the input is empty, unparsable,
        or contains characters outside ``[a-z0-9.-]``.
    """

    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not raw:
        return None

    candidate = raw if "://" in raw else f"https://{raw}"
    try:
        hostname = urlsplit(candidate).hostname or ""
    except ValueError:
        return None

    hostname = hostname.lower()
    if hostname.startswith("."):
        hostname = hostname[1:]

    # A second leading dot is an empty label, same as "..".
    if not hostname or hostname.startswith(".") or ".." in hostname:
        return None
    if not _HOSTNAME_CHARS.match(hostname):
        return None
    return hostname


def normalize_allowlist(items: Iterable[object] | None) -> list[str]:
    """Normalize allowlist entries, dropping invalid ones and duplicates (first seen wins)."""

    out: list[str] = []
    seen: set[str] = set()
    for item in items or ():
        normalized = normalize_domain(item)
        if normalized and normalized not in seen:
            seen.add(normalized)
            out.append(normalized)
    return out


def is_allowlisted(allowlist: Sequence[str] | None, hostname: object) -> bool:
    """
    Return True if `hostname` equals an allowlist entry or is a subdomain of one.

    Matching is exact-or-dot-suffix: ``pay.example.com`` matches ``example.com``
    but ``notexample.com`` does not.
    """

    target = normalize_domain(hostname)
    if not target:
        return False
    for entry in allowlist or ():
        if target == entry or target.endswith(f".{entry}"):
            return True
    return False

# file: trustscore/core/url_signals.py
"""
URL-shape signal derivation.

These heuristics mirror what an in-page collector reports in `urlInfo` and
`sslInfo`, computed from nothing but the URL string. They are intentionally
simple and auditable; customize the marker tuples as needed.
"""

from __future__ import annotations

import re
from urllib.parse import SplitResult, urlsplit

from trustscore.core.payload import SignalPayload, SslInfo, UrlInfo

BRANDS = (
    "apple",
    "google",
    "microsoft",
    "amazon",
    "paypal",
    "chase",
    "wellsfargo",
    "bankofamerica",
    "facebook",
    "instagram",
    "coinbase",
    "binance",
)

_SENSITIVE_PATH_MARKERS = ("login", "signin", "account", "payment", "checkout", "wallet")
_SUSPICIOUS_QUERY_MARKERS = ("redirect", "token", "session", "verify", "update")

_IP_LIKE = re.compile(r"^[0-9.]+$")


def has_sensitive_path(path: str) -> bool:
    lowered = path.lower()
    return any(m in lowered for m in _SENSITIVE_PATH_MARKERS)


def has_suspicious_query(query: str) -> bool:
    lowered = query.lower()
    return any(m in lowered for m in _SUSPICIOUS_QUERY_MARKERS)


def has_suspicious_subdomain(hostname: str) -> bool:
    """
    True if the subdomain portion is two or more labels deep or contains a brand.

    The subdomain is every label except the last two.
    """

    parts = hostname.split(".")
    subdomain = ".".join(parts[:-2]).lower()
    depth = len(subdomain.split(".")) if subdomain else 0
    return depth >= 2 or any(brand in subdomain for brand in BRANDS)


def is_brand_lookalike(hostname: str) -> bool:
    """True if a brand appears in the hostname but not in its registrable label."""

    base = (hostname.split(".")[-2:] or [""])[0]
    return any(brand in hostname and brand not in base for brand in BRANDS)


def _split(url: str) -> SplitResult:
    raw = url.strip()
    return urlsplit(raw if "://" in raw else f"https://{raw}")


def derive_url_info(url: str) -> UrlInfo:
    """
    Build `UrlInfo` for a URL. Inputs without a scheme are treated as https.

    Raises:
        ValueError: if the URL cannot be parsed.
    """

    parts = _split(url)
    hostname = (parts.hostname or "").lower()
    query = f"?{parts.query}" if parts.query else ""
    path = parts.path or "/"
    return UrlInfo(
        href=parts.geturl(),
        protocol=f"{parts.scheme.lower()}:",
        hostname=hostname,
        path=path,
        query=query,
        is_ip_address=bool(_IP_LIKE.match(hostname)),
        has_suspicious_subdomain=has_suspicious_subdomain(hostname),
        has_sensitive_path=has_sensitive_path(path),
        has_suspicious_query=has_suspicious_query(query),
        brand_lookalike=is_brand_lookalike(hostname),
    )


def derive_ssl_info(url: str) -> SslInfo:
    # Mixed content needs the rendered page; a bare URL can never show it.
    return SslInfo(uses_https=_split(url).scheme.lower() == "https", mixed_content=False)


def payload_from_url(url: str) -> SignalPayload:
    """Payload for a URL with no DOM or behavior observations."""

    return SignalPayload(url_info=derive_url_info(url), ssl_info=derive_ssl_info(url))

# file: trustscore/core/payload.py
"""
Signal payload model.

A payload is the per-page observation bundle produced by a signal collector.
It arrives as a JSON-like mapping using camelCase wire keys. Every field is
optional: absent or malformed values coerce to their falsy default (False, 0,
empty string or empty tuple) and parsing never raises.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping


def _section(obj: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        return {}
    value = obj.get(key)
    return value if isinstance(value, Mapping) else {}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    return False


def _as_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return int(value) if value > 0 else 0


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _as_seq(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return ()


@dataclass(frozen=True, slots=True)
class UrlInfo:
    """URL-shape facts about the page."""

    href: str | None = None
    protocol: str = ""
    hostname: str | None = None
    path: str = ""
    query: str = ""
    is_ip_address: bool = False
    has_suspicious_subdomain: bool = False
    has_sensitive_path: bool = False
    has_suspicious_query: bool = False
    brand_lookalike: bool = False

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any] | None) -> UrlInfo:
        obj = obj if isinstance(obj, Mapping) else {}
        return cls(
            href=_as_optional_str(obj.get("href")),
            protocol=_as_str(obj.get("protocol")),
            hostname=_as_optional_str(obj.get("hostname")),
            path=_as_str(obj.get("path")),
            query=_as_str(obj.get("query")),
            is_ip_address=_as_bool(obj.get("isIpAddress")),
            has_suspicious_subdomain=_as_bool(obj.get("hasSuspiciousSubdomain")),
            has_sensitive_path=_as_bool(obj.get("hasSensitivePath")),
            has_suspicious_query=_as_bool(obj.get("hasSuspiciousQuery")),
            brand_lookalike=_as_bool(obj.get("brandLookalike")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "href": self.href,
            "protocol": self.protocol,
            "hostname": self.hostname,
            "path": self.path,
            "query": self.query,
            "isIpAddress": self.is_ip_address,
            "hasSuspiciousSubdomain": self.has_suspicious_subdomain,
            "hasSensitivePath": self.has_sensitive_path,
            "hasSuspiciousQuery": self.has_suspicious_query,
            "brandLookalike": self.brand_lookalike,
        }


@dataclass(frozen=True, slots=True)
class DomFindings:
    """Results of a DOM scan. Only the length of the hit sequences matters."""

    has_password_field: bool = False
    has_credit_card_field: bool = False
    has_personal_info_field: bool = False
    suspicious_text_hits: tuple[str, ...] = ()
    brand_mentions: tuple[str, ...] = ()
    external_form_actions: int = 0
    hidden_iframes: int = 0

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any] | None) -> DomFindings:
        obj = obj if isinstance(obj, Mapping) else {}
        return cls(
            has_password_field=_as_bool(obj.get("hasPasswordField")),
            has_credit_card_field=_as_bool(obj.get("hasCreditCardField")),
            has_personal_info_field=_as_bool(obj.get("hasPersonalInfoField")),
            suspicious_text_hits=_as_seq(obj.get("suspiciousTextHits")),
            brand_mentions=_as_seq(obj.get("brandMentions")),
            external_form_actions=_as_count(obj.get("externalFormActions")),
            hidden_iframes=_as_count(obj.get("hiddenIframes")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasPasswordField": self.has_password_field,
            "hasCreditCardField": self.has_credit_card_field,
            "hasPersonalInfoField": self.has_personal_info_field,
            "suspiciousTextHits": list(self.suspicious_text_hits),
            "brandMentions": list(self.brand_mentions),
            "externalFormActions": self.external_form_actions,
            "hiddenIframes": self.hidden_iframes,
        }


@dataclass(frozen=True, slots=True)
class BehaviorFindings:
    """Interaction counters observed while the page was open."""

    redirect_attempts: int = 0
    auto_form_submits: int = 0
    iframe_form_loads: int = 0
    keyboard_interception: bool = False
    clipboard_access: bool = False

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any] | None) -> BehaviorFindings:
        obj = obj if isinstance(obj, Mapping) else {}
        return cls(
            redirect_attempts=_as_count(obj.get("redirectAttempts")),
            auto_form_submits=_as_count(obj.get("autoFormSubmits")),
            iframe_form_loads=_as_count(obj.get("iframeFormLoads")),
            keyboard_interception=_as_bool(obj.get("keyboardInterception")),
            clipboard_access=_as_bool(obj.get("clipboardAccess")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "redirectAttempts": self.redirect_attempts,
            "autoFormSubmits": self.auto_form_submits,
            "iframeFormLoads": self.iframe_form_loads,
            "keyboardInterception": self.keyboard_interception,
            "clipboardAccess": self.clipboard_access,
        }


@dataclass(frozen=True, slots=True)
class SslInfo:
    uses_https: bool = False
    mixed_content: bool = False

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any] | None) -> SslInfo:
        obj = obj if isinstance(obj, Mapping) else {}
        return cls(
            uses_https=_as_bool(obj.get("usesHttps")),
            mixed_content=_as_bool(obj.get("mixedContent")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"usesHttps": self.uses_https, "mixedContent": self.mixed_content}


@dataclass(frozen=True, slots=True)
class SignalPayload:
    """The full observation bundle for one evaluation."""

    url_info: UrlInfo = field(default_factory=UrlInfo)
    dom_findings: DomFindings = field(default_factory=DomFindings)
    behavior_findings: BehaviorFindings = field(default_factory=BehaviorFindings)
    ssl_info: SslInfo = field(default_factory=SslInfo)

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any] | None) -> SignalPayload:
        return cls(
            url_info=UrlInfo.from_dict(_section(obj, "urlInfo")),
            dom_findings=DomFindings.from_dict(_section(obj, "domFindings")),
            behavior_findings=BehaviorFindings.from_dict(_section(obj, "behaviorFindings")),
            ssl_info=SslInfo.from_dict(_section(obj, "sslInfo")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "urlInfo": self.url_info.to_dict(),
            "domFindings": self.dom_findings.to_dict(),
            "behaviorFindings": self.behavior_findings.to_dict(),
            "sslInfo": self.ssl_info.to_dict(),
        }


def coerce_payload(payload: SignalPayload | Mapping[str, Any] | None) -> SignalPayload:
    """Accept either a parsed payload or a raw mapping."""

    if isinstance(payload, SignalPayload):
        return payload
    return SignalPayload.from_dict(payload)

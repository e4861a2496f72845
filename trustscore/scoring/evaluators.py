# file: trustscore/scoring/evaluators.py
"""
Per-category risk evaluators.

Each category is a declarative table of rules. A rule maps the payload to a
risk contribution (0 means "not triggered") plus one fixed reason string.
Contributions are additive within a category and the sum is capped at the
category ceiling. Every triggered rule yields exactly one reason, in table
order, so the output is both a number and an auditable explanation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from trustscore.core.payload import SignalPayload, coerce_payload

Amount = Callable[[SignalPayload], float]


@dataclass(frozen=True, slots=True)
class RiskRule:
    name: str
    amount: Amount
    reason: str


@dataclass(frozen=True, slots=True)
class RuleHit:
    name: str
    contribution: float
    reason: str


@dataclass(frozen=True, slots=True)
class RiskCategory:
    name: str
    cap: float
    rules: tuple[RiskRule, ...]


@dataclass(frozen=True, slots=True)
class CategoryRisk:
    """Capped risk for one category, with the rules that fired."""

    category: str
    risk: float
    cap: float
    hits: tuple[RuleHit, ...]

    @property
    def reasons(self) -> list[str]:
        return [h.reason for h in self.hits]


def _when(predicate: Callable[[SignalPayload], bool], weight: float) -> Amount:
    return lambda p: weight if predicate(p) else 0.0


def _per_unit(count: Callable[[SignalPayload], int], weight: float, cap: float) -> Amount:
    return lambda p: min(count(p) * weight, cap)


def _insecure_protocol(p: SignalPayload) -> float:
    if p.url_info.protocol == "https:":
        return 0.0
    return 12.0 if p.url_info.has_sensitive_path else 8.0


def _insecure_transport(p: SignalPayload) -> float:
    if p.ssl_info.uses_https:
        return 0.0
    return 12.0 if p.dom_findings.has_password_field else 8.0


URL_CATEGORY = RiskCategory(
    name="url",
    cap=30.0,
    rules=(
        RiskRule("insecure_protocol", _insecure_protocol, "Page not served over HTTPS."),
        RiskRule(
            "ip_address",
            _when(lambda p: p.url_info.is_ip_address, 6.0),
            "Website uses a raw IP address.",
        ),
        RiskRule(
            "suspicious_subdomain",
            _when(lambda p: p.url_info.has_suspicious_subdomain, 10.0),
            "Suspicious subdomain structure (brand in subdomain or deep nesting).",
        ),
        RiskRule(
            "brand_lookalike",
            _when(lambda p: p.url_info.brand_lookalike, 8.0),
            "Brand lookalike detected in domain or title.",
        ),
        RiskRule(
            "sensitive_path",
            _when(lambda p: p.url_info.has_sensitive_path, 5.0),
            "Sensitive path (login/payment) detected.",
        ),
        RiskRule(
            "suspicious_query",
            _when(lambda p: p.url_info.has_suspicious_query, 5.0),
            "Suspicious query parameters found.",
        ),
    ),
)

DOM_CATEGORY = RiskCategory(
    name="dom",
    cap=25.0,
    rules=(
        RiskRule(
            "password_field",
            _when(lambda p: p.dom_findings.has_password_field, 6.0),
            "Password fields detected on page.",
        ),
        RiskRule(
            "credit_card_field",
            _when(lambda p: p.dom_findings.has_credit_card_field, 6.0),
            "Credit card inputs detected.",
        ),
        RiskRule(
            "personal_info_field",
            _when(lambda p: p.dom_findings.has_personal_info_field, 4.0),
            "Personal information fields present.",
        ),
        RiskRule(
            "suspicious_text",
            _per_unit(lambda p: len(p.dom_findings.suspicious_text_hits), 2.0, 8.0),
            "Suspicious call-to-action text found.",
        ),
        RiskRule(
            "brand_mismatch",
            _when(
                lambda p: bool(p.dom_findings.brand_mentions) and p.url_info.brand_lookalike,
                4.0,
            ),
            "Brand mentions mismatch visible domain.",
        ),
        RiskRule(
            "external_form_action",
            _when(lambda p: p.dom_findings.external_form_actions > 0, 5.0),
            "Form submits to different domain.",
        ),
        RiskRule(
            "hidden_iframe",
            _when(lambda p: p.dom_findings.hidden_iframes > 0, 4.0),
            "Hidden iframe with form or external source detected.",
        ),
    ),
)

BEHAVIOR_CATEGORY = RiskCategory(
    name="behavior",
    cap=30.0,
    rules=(
        RiskRule(
            "redirect_attempts",
            _per_unit(lambda p: p.behavior_findings.redirect_attempts, 10.0, 20.0),
            "Unexpected redirect attempts detected.",
        ),
        RiskRule(
            "auto_form_submits",
            _per_unit(lambda p: p.behavior_findings.auto_form_submits, 8.0, 16.0),
            "Form auto-submission observed.",
        ),
        RiskRule(
            "iframe_form_loads",
            _per_unit(lambda p: p.behavior_findings.iframe_form_loads, 6.0, 12.0),
            "Hidden iframe loading external form.",
        ),
        RiskRule(
            "keyboard_interception",
            _when(lambda p: p.behavior_findings.keyboard_interception, 5.0),
            "Keyboard interception on sensitive inputs.",
        ),
        RiskRule(
            "clipboard_access",
            _when(lambda p: p.behavior_findings.clipboard_access, 5.0),
            "Clipboard access near credential fields.",
        ),
    ),
)

SSL_CATEGORY = RiskCategory(
    name="ssl",
    cap=15.0,
    rules=(
        RiskRule("insecure_transport", _insecure_transport, "Page not secured with HTTPS."),
        RiskRule(
            "mixed_content",
            _when(lambda p: p.ssl_info.mixed_content, 5.0),
            "Mixed content detected (HTTP resources on HTTPS page).",
        ),
    ),
)

CATEGORIES: tuple[RiskCategory, ...] = (
    URL_CATEGORY,
    DOM_CATEGORY,
    BEHAVIOR_CATEGORY,
    SSL_CATEGORY,
)


def evaluate_category(
    category: RiskCategory, payload: SignalPayload | Mapping[str, Any] | None
) -> CategoryRisk:
    """Run one category's rule table against a payload."""

    p = coerce_payload(payload)
    hits: list[RuleHit] = []
    for rule in category.rules:
        contribution = float(rule.amount(p))
        if contribution:
            hits.append(RuleHit(name=rule.name, contribution=contribution, reason=rule.reason))
    total = sum(h.contribution for h in hits)
    return CategoryRisk(
        category=category.name,
        risk=min(total, category.cap),
        cap=category.cap,
        hits=tuple(hits),
    )


def evaluate_url_risk(payload: SignalPayload | Mapping[str, Any] | None) -> CategoryRisk:
    return evaluate_category(URL_CATEGORY, payload)


def evaluate_dom_risk(payload: SignalPayload | Mapping[str, Any] | None) -> CategoryRisk:
    # Brand-mismatch needs urlInfo.brandLookalike, so this reads the whole payload.
    return evaluate_category(DOM_CATEGORY, payload)


def evaluate_behavior_risk(payload: SignalPayload | Mapping[str, Any] | None) -> CategoryRisk:
    return evaluate_category(BEHAVIOR_CATEGORY, payload)


def evaluate_ssl_risk(payload: SignalPayload | Mapping[str, Any] | None) -> CategoryRisk:
    # The transport penalty is higher when the DOM scan found a password field.
    return evaluate_category(SSL_CATEGORY, payload)

# file: trustscore/scoring/aggregator.py
"""
Trust score aggregation.

Combines the four category evaluators into one explainable result:

1. pick the sensitivity profile multipliers (unknown profiles use "normal"),
2. run every category evaluator,
3. scale each capped category risk by its multiplier and sum,
4. dampen the total for allowlisted hosts,
5. turn the total into a 0-100 score and a tier.

`evaluate` is synchronous and pure apart from reading the clock; persistence
and caching are the caller's business.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from trustscore.core.domain import is_allowlisted, normalize_allowlist
from trustscore.core.payload import SignalPayload, coerce_payload
from trustscore.scoring.evaluators import (
    CategoryRisk,
    evaluate_behavior_risk,
    evaluate_dom_risk,
    evaluate_ssl_risk,
    evaluate_url_risk,
)
from trustscore.settings import Settings

Tier = Literal["trusted", "caution", "high-risk"]

TRUSTED_MIN_SCORE = 80
CAUTION_MIN_SCORE = 50

ALLOWLIST_DAMPENING = 0.35
ALLOWLIST_REASON = "Domain on allowlist - risks dampened."

# Display weights reported alongside the breakdown. They equal the category caps.
NOMINAL_WEIGHTS: dict[str, int] = {"url": 30, "dom": 25, "behavior": 30, "ssl": 15}


@dataclass(frozen=True, slots=True)
class ProfileMultipliers:
    url: float = 1.0
    dom: float = 1.0
    behavior: float = 1.0
    ssl: float = 1.0


PROFILE_MULTIPLIERS: dict[str, ProfileMultipliers] = {
    "strict": ProfileMultipliers(url=1.1, dom=1.05, behavior=1.2, ssl=1.1),
    "normal": ProfileMultipliers(),
    "relaxed": ProfileMultipliers(url=0.85, dom=0.9, behavior=0.85, ssl=0.9),
}


def multipliers_for(sensitivity: object) -> ProfileMultipliers:
    if isinstance(sensitivity, str) and sensitivity in PROFILE_MULTIPLIERS:
        return PROFILE_MULTIPLIERS[sensitivity]
    return PROFILE_MULTIPLIERS["normal"]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _round1(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def classify_tier(score: int) -> Tier:
    """Lower bounds are inclusive: 80 is trusted, 50 is caution."""

    if score >= TRUSTED_MIN_SCORE:
        return "trusted"
    if score >= CAUTION_MIN_SCORE:
        return "caution"
    return "high-risk"


def score_from_risk(total_risk: float) -> int:
    return max(0, min(100, _round_half_up(100 - total_risk)))


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    url_risk: float
    dom_risk: float
    behavior_risk: float
    ssl_risk: float
    url_weight: int = NOMINAL_WEIGHTS["url"]
    dom_weight: int = NOMINAL_WEIGHTS["dom"]
    behavior_weight: int = NOMINAL_WEIGHTS["behavior"]
    ssl_weight: int = NOMINAL_WEIGHTS["ssl"]

    def to_dict(self) -> dict[str, float | int]:
        return {
            "urlRisk": self.url_risk,
            "domRisk": self.dom_risk,
            "behaviorRisk": self.behavior_risk,
            "sslRisk": self.ssl_risk,
            "urlWeight": self.url_weight,
            "domWeight": self.dom_weight,
            "behaviorWeight": self.behavior_weight,
            "sslWeight": self.ssl_weight,
        }


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """
    A complete, immutable evaluation record.

    Fields:
        score: Integer trust score in [0, 100]; higher is safer.
        tier: "trusted", "caution" or "high-risk".
        breakdown: Rounded pre-multiplier category risks plus nominal weights.
        allowlisted: True if the hostname matched the allowlist.
        url: `urlInfo.href` as given in the payload.
        hostname: `urlInfo.hostname` as given in the payload.
        timestamp: Evaluation time in epoch milliseconds.
        reasons: URL, DOM, behavior and SSL reasons, then the allowlist note.
    """

    score: int
    tier: Tier
    breakdown: ScoreBreakdown
    allowlisted: bool
    url: str | None
    hostname: str | None
    timestamp: int
    reasons: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "tier": self.tier,
            "breakdown": self.breakdown.to_dict(),
            "allowlisted": self.allowlisted,
            "url": self.url,
            "hostname": self.hostname,
            "timestamp": self.timestamp,
            "reasons": list(self.reasons),
        }


def _profile_inputs(settings: Settings | Mapping[str, Any] | None) -> tuple[object, list[str]]:
    if isinstance(settings, Settings):
        return settings.sensitivity, list(settings.allowlist)
    if isinstance(settings, Mapping):
        allowlist = settings.get("allowlist")
        items = allowlist if isinstance(allowlist, (list, tuple, set, frozenset)) else ()
        return settings.get("sensitivity"), normalize_allowlist(items)
    return None, []


def weighted_risks(
    categories: Mapping[str, CategoryRisk], multipliers: ProfileMultipliers
) -> dict[str, float]:
    # Multipliers scale the already-capped risk, so a weighted value may exceed its cap.
    return {name: risk.risk * getattr(multipliers, name) for name, risk in categories.items()}


def evaluate(
    payload: SignalPayload | Mapping[str, Any] | None,
    settings: Settings | Mapping[str, Any] | None = None,
    *,
    timestamp: int | None = None,
) -> EvaluationResult:
    """
    Score a signal payload. Never raises on partial or malformed input.

    Args:
        payload: Parsed payload or a raw camelCase mapping.
        settings: Active settings (model or wire-shaped mapping). None means defaults.
        timestamp: Optional fixed evaluation time in epoch milliseconds.
    """

    p = coerce_payload(payload)
    sensitivity, allowlist = _profile_inputs(settings)
    multipliers = multipliers_for(sensitivity)

    categories: dict[str, CategoryRisk] = {
        "url": evaluate_url_risk(p),
        "dom": evaluate_dom_risk(p),
        "behavior": evaluate_behavior_risk(p),
        "ssl": evaluate_ssl_risk(p),
    }

    total_risk = sum(weighted_risks(categories, multipliers).values())
    allowlisted = is_allowlisted(allowlist, p.url_info.hostname)
    if allowlisted:
        total_risk *= ALLOWLIST_DAMPENING

    score = score_from_risk(total_risk)

    reasons: list[str] = []
    for risk in categories.values():
        reasons.extend(risk.reasons)
    if allowlisted:
        reasons.append(ALLOWLIST_REASON)

    return EvaluationResult(
        score=score,
        tier=classify_tier(score),
        breakdown=ScoreBreakdown(
            url_risk=_round1(categories["url"].risk),
            dom_risk=_round1(categories["dom"].risk),
            behavior_risk=_round1(categories["behavior"].risk),
            ssl_risk=_round1(categories["ssl"].risk),
        ),
        allowlisted=allowlisted,
        url=p.url_info.href,
        hostname=p.url_info.hostname,
        timestamp=now_ms() if timestamp is None else timestamp,
        reasons=tuple(reasons),
    )

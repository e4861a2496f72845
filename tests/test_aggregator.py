# file: tests/test_aggregator.py
from __future__ import annotations

from typing import Any

import pytest

from trustscore.scoring.aggregator import (
    ALLOWLIST_REASON,
    PROFILE_MULTIPLIERS,
    classify_tier,
    evaluate,
    multipliers_for,
    score_from_risk,
)
from trustscore.settings import Settings


def _clean_payload(**url_overrides: Any) -> dict[str, Any]:
    url_info = {
        "href": "https://example.com/",
        "protocol": "https:",
        "hostname": "example.com",
    }
    url_info.update(url_overrides)
    return {"urlInfo": url_info, "sslInfo": {"usesHttps": True, "mixedContent": False}}


def _insecure_ip_payload(*, sensitive_path: bool) -> dict[str, Any]:
    return {
        "urlInfo": {
            "href": "http://10.0.0.5/login",
            "protocol": "http:",
            "hostname": "10.0.0.5",
            "isIpAddress": True,
            "hasSensitivePath": sensitive_path,
        },
        "domFindings": {"hasPasswordField": False},
        "sslInfo": {"usesHttps": False},
    }


def test_clean_page_scores_100_and_is_trusted() -> None:
    result = evaluate(_clean_payload(), Settings())
    assert result.score == 100
    assert result.tier == "trusted"
    assert result.reasons == ()
    assert result.allowlisted is False
    assert result.url == "https://example.com/"
    assert result.hostname == "example.com"
    assert result.breakdown.to_dict() == {
        "urlRisk": 0.0,
        "domRisk": 0.0,
        "behaviorRisk": 0.0,
        "sslRisk": 0.0,
        "urlWeight": 30,
        "domWeight": 25,
        "behaviorWeight": 30,
        "sslWeight": 15,
    }


def test_insecure_ip_page_is_caution() -> None:
    # url: 8 (not https) + 6 (ip) = 14; ssl: 8 -> total 22
    result = evaluate(_insecure_ip_payload(sensitive_path=False), Settings())
    assert result.breakdown.url_risk == 14
    assert result.breakdown.ssl_risk == 8
    assert result.score == 78
    assert result.tier == "caution"


def test_insecure_sensitive_ip_page_is_caution() -> None:
    # url: 12 (not https, sensitive path) + 6 (ip) + 5 (sensitive path) = 23; ssl: 8
    result = evaluate(_insecure_ip_payload(sensitive_path=True), Settings())
    assert result.breakdown.url_risk == 23
    assert result.breakdown.ssl_risk == 8
    assert result.breakdown.dom_risk == 0
    assert result.breakdown.behavior_risk == 0
    assert result.score == 69
    assert result.tier == "caution"
    assert result.reasons == (
        "Page not served over HTTPS.",
        "Website uses a raw IP address.",
        "Sensitive path (login/payment) detected.",
        "Page not secured with HTTPS.",
    )


def test_allowlisted_insecure_page_is_dampened_to_trusted() -> None:
    settings = Settings(allowlist=["10.0.0.5"])
    result = evaluate(_insecure_ip_payload(sensitive_path=True), settings)
    # 0.35 * 31 = 10.85 -> 100 - 10.85 = 89.15 -> 89
    assert result.allowlisted is True
    assert result.score == 89
    assert result.tier == "trusted"
    assert result.reasons[-1] == ALLOWLIST_REASON

    plain = evaluate(_insecure_ip_payload(sensitive_path=False), settings)
    # 0.35 * 22 = 7.7 -> 92.3 -> 92
    assert plain.score == 92


def test_allowlist_matches_subdomains_only() -> None:
    settings = Settings(allowlist=["example.com"])
    insecure = {"protocol": "http:"}
    assert evaluate(_clean_payload(hostname="pay.example.com", **insecure), settings).allowlisted
    assert not evaluate(_clean_payload(hostname="notexample.com", **insecure), settings).allowlisted


@pytest.mark.parametrize(
    "payload",
    [
        _insecure_ip_payload(sensitive_path=True),
        _clean_payload(protocol="http:", brandLookalike=True),
        {
            "urlInfo": {"protocol": "http:", "hostname": "example.com"},
            "behaviorFindings": {"redirectAttempts": 4, "clipboardAccess": True},
            "domFindings": {"hasPasswordField": True, "suspiciousTextHits": ["x", "y"]},
        },
    ],
)
def test_allowlist_dampening_is_monotonic(payload: dict[str, Any]) -> None:
    hostname = payload["urlInfo"].get("hostname") or "example.com"
    payload["urlInfo"]["hostname"] = hostname
    plain = evaluate(payload, Settings())
    damped = evaluate(payload, Settings(allowlist=[hostname]))

    b = plain.breakdown
    total_risk = b.url_risk + b.dom_risk + b.behavior_risk + b.ssl_risk
    assert total_risk > 0
    assert damped.score >= plain.score
    assert damped.score == score_from_risk(0.35 * total_risk)


@pytest.mark.parametrize(
    "score, tier",
    [
        (100, "trusted"),
        (80, "trusted"),
        (79, "caution"),
        (50, "caution"),
        (49, "high-risk"),
        (0, "high-risk"),
    ],
)
def test_tier_boundaries(score: int, tier: str) -> None:
    assert classify_tier(score) == tier


def test_score_from_risk_rounds_half_up_and_clamps() -> None:
    assert score_from_risk(0) == 100
    assert score_from_risk(7.5) == 93
    assert score_from_risk(8.5) == 92
    assert score_from_risk(250) == 0
    assert score_from_risk(-10) == 100


def test_strict_profile_can_exceed_category_caps() -> None:
    payload = {
        "urlInfo": {
            "protocol": "http:",
            "isIpAddress": True,
            "hasSuspiciousSubdomain": True,
            "brandLookalike": True,
            "hasSensitivePath": True,
            "hasSuspiciousQuery": True,
        },
        "domFindings": {
            "hasPasswordField": True,
            "hasCreditCardField": True,
            "hasPersonalInfoField": True,
            "externalFormActions": 1,
            "hiddenIframes": 1,
        },
        "behaviorFindings": {"redirectAttempts": 9, "autoFormSubmits": 9, "iframeFormLoads": 9},
        "sslInfo": {"usesHttps": False, "mixedContent": True},
    }
    result = evaluate(payload, Settings(sensitivity="strict"))
    # Breakdown reports the capped, pre-multiplier risks.
    assert result.breakdown.url_risk == 30
    assert result.breakdown.dom_risk == 25
    assert result.breakdown.behavior_risk == 30
    assert result.breakdown.ssl_risk == 15
    assert result.score == 0
    assert result.tier == "high-risk"


def test_sensitivity_profiles_scale_behavior_risk() -> None:
    payload = _clean_payload()
    payload["behaviorFindings"] = {"redirectAttempts": 1}
    assert evaluate(payload, Settings(sensitivity="normal")).score == 90
    assert evaluate(payload, Settings(sensitivity="strict")).score == 88
    assert evaluate(payload, Settings(sensitivity="relaxed")).score == 92


def test_unknown_sensitivity_falls_back_to_normal() -> None:
    assert multipliers_for("paranoid") == PROFILE_MULTIPLIERS["normal"]
    assert multipliers_for(None) == PROFILE_MULTIPLIERS["normal"]
    payload = _clean_payload()
    payload["behaviorFindings"] = {"redirectAttempts": 1}
    result = evaluate(payload, {"sensitivity": "paranoid", "allowlist": []})
    assert result.score == 90


def test_mapping_settings_allowlist_is_canonicalized() -> None:
    payload = _clean_payload(protocol="http:", hostname="shop.example.com")
    result = evaluate(payload, {"allowlist": ["HTTPS://Example.com/"]})
    assert result.allowlisted is True


def test_evaluate_is_total_over_garbage_input() -> None:
    for payload in (None, {}, {"urlInfo": None}, {"urlInfo": [], "domFindings": 3}):
        result = evaluate(payload, None)
        assert 0 <= result.score <= 100
        assert result.tier in ("trusted", "caution", "high-risk")
        assert result.url is None and result.hostname is None


def test_fixed_timestamp_and_wire_shape() -> None:
    result = evaluate(_clean_payload(), Settings(), timestamp=1_700_000_000_000)
    out = result.to_dict()
    assert out["timestamp"] == 1_700_000_000_000
    assert set(out) == {
        "score",
        "tier",
        "breakdown",
        "allowlisted",
        "url",
        "hostname",
        "timestamp",
        "reasons",
    }
    assert out["reasons"] == []

# file: tests/test_evaluators.py
from __future__ import annotations

from trustscore.scoring.evaluators import (
    CATEGORIES,
    evaluate_behavior_risk,
    evaluate_dom_risk,
    evaluate_ssl_risk,
    evaluate_url_risk,
)


def test_every_evaluator_tolerates_missing_input() -> None:
    assert evaluate_dom_risk(None).risk == 0
    assert evaluate_behavior_risk({}).risk == 0
    assert evaluate_behavior_risk({}).reasons == []
    # Absent protocol / usesHttps are falsy, i.e. not HTTPS.
    assert evaluate_url_risk(None).risk == 8
    assert evaluate_ssl_risk(None).risk == 8


def test_url_rules_and_cap() -> None:
    clean = evaluate_url_risk({"urlInfo": {"protocol": "https:"}})
    assert clean.risk == 0 and clean.reasons == []

    insecure_login = evaluate_url_risk({"urlInfo": {"protocol": "http:", "hasSensitivePath": True}})
    assert insecure_login.risk == 12 + 5
    assert insecure_login.reasons == [
        "Page not served over HTTPS.",
        "Sensitive path (login/payment) detected.",
    ]

    everything = evaluate_url_risk(
        {
            "urlInfo": {
                "protocol": "http:",
                "isIpAddress": True,
                "hasSuspiciousSubdomain": True,
                "brandLookalike": True,
                "hasSensitivePath": True,
                "hasSuspiciousQuery": True,
            }
        }
    )
    assert everything.risk == 30
    assert len(everything.reasons) == 6


def test_dom_suspicious_text_is_one_reason_and_capped() -> None:
    one = evaluate_dom_risk({"domFindings": {"suspiciousTextHits": ["sign in"]}})
    assert one.risk == 2
    many = evaluate_dom_risk({"domFindings": {"suspiciousTextHits": ["a", "b", "c", "d", "e"]}})
    assert many.risk == 8
    assert many.reasons == ["Suspicious call-to-action text found."]


def test_dom_brand_mismatch_needs_url_lookalike() -> None:
    findings = {"brandMentions": ["paypal"]}
    assert evaluate_dom_risk({"domFindings": findings}).risk == 0
    mismatch = evaluate_dom_risk({"domFindings": findings, "urlInfo": {"brandLookalike": True}})
    assert mismatch.risk == 4
    assert mismatch.reasons == ["Brand mentions mismatch visible domain."]


def test_dom_cap() -> None:
    result = evaluate_dom_risk(
        {
            "urlInfo": {"brandLookalike": True},
            "domFindings": {
                "hasPasswordField": True,
                "hasCreditCardField": True,
                "hasPersonalInfoField": True,
                "suspiciousTextHits": ["a", "b", "c", "d"],
                "brandMentions": ["apple"],
                "externalFormActions": 2,
                "hiddenIframes": 1,
            },
        }
    )
    assert result.risk == 25
    assert len(result.reasons) == 7


def test_behavior_per_unit_contributions() -> None:
    single = evaluate_behavior_risk(
        {"behaviorFindings": {"redirectAttempts": 1, "autoFormSubmits": 1, "iframeFormLoads": 1}}
    )
    assert single.risk == 10 + 8 + 6
    assert single.reasons == [
        "Unexpected redirect attempts detected.",
        "Form auto-submission observed.",
        "Hidden iframe loading external form.",
    ]

    redirects = evaluate_behavior_risk({"behaviorFindings": {"redirectAttempts": 5}})
    assert redirects.risk == 20
    assert len(redirects.reasons) == 1


def test_behavior_cap() -> None:
    result = evaluate_behavior_risk(
        {
            "behaviorFindings": {
                "redirectAttempts": 3,
                "autoFormSubmits": 3,
                "iframeFormLoads": 3,
                "keyboardInterception": True,
                "clipboardAccess": True,
            }
        }
    )
    assert result.risk == 30
    assert len(result.reasons) == 5


def test_ssl_rules_depend_on_password_field() -> None:
    assert evaluate_ssl_risk({"sslInfo": {"usesHttps": True}}).risk == 0
    assert evaluate_ssl_risk({"sslInfo": {"usesHttps": False}}).risk == 8
    with_password = evaluate_ssl_risk(
        {"sslInfo": {"usesHttps": False}, "domFindings": {"hasPasswordField": True}}
    )
    assert with_password.risk == 12
    capped = evaluate_ssl_risk(
        {
            "sslInfo": {"usesHttps": False, "mixedContent": True},
            "domFindings": {"hasPasswordField": True},
        }
    )
    assert capped.risk == 15
    assert capped.reasons == [
        "Page not secured with HTTPS.",
        "Mixed content detected (HTTP resources on HTTPS page).",
    ]


def test_category_caps_match_nominal_weights() -> None:
    assert {c.name: c.cap for c in CATEGORIES} == {
        "url": 30.0,
        "dom": 25.0,
        "behavior": 30.0,
        "ssl": 15.0,
    }

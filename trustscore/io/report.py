# file: trustscore/io/report.py
"""
Report rendering and export helpers.

Evaluations and history are rendered as plain text for terminals or written
as JSON. Reports are plain dictionaries so the same data serves the CLI and
any other presentation layer.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from trustscore.history import HistoryEntry
from trustscore.scoring.aggregator import EvaluationResult
from trustscore.settings import Settings

MAX_DISPLAY_REASONS = 6
NO_RISKS_TEXT = "No significant risks detected."

TIER_LABELS = {
    "trusted": "Trusted",
    "caution": "Caution",
    "high-risk": "High Risk",
}


def tier_label(tier: str) -> str:
    return TIER_LABELS.get(tier, TIER_LABELS["high-risk"])


def format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat(
        timespec="seconds"
    )


def export_json(report: Mapping[str, Any], path: Path) -> None:
    """Write a report to disk as pretty-printed JSON."""

    path.write_text(json.dumps(report, indent=2, sort_keys=True), encoding="utf-8")


def evaluation_text(result: EvaluationResult) -> str:
    b = result.breakdown
    lines: list[str] = []
    lines.append(f"TrustScore: {result.score}/100 ({tier_label(result.tier)})")
    lines.append(f"  Site: {result.hostname or result.url or ''}")
    if result.allowlisted:
        lines.append("  Allowlisted: yes")
    lines.append("")

    lines.append("Breakdown:")
    lines.append(f"  URL:      {b.url_risk} / {b.url_weight}")
    lines.append(f"  Behavior: {b.behavior_risk} / {b.behavior_weight}")
    lines.append(f"  DOM:      {b.dom_risk} / {b.dom_weight}")
    lines.append(f"  SSL:      {b.ssl_risk} / {b.ssl_weight}")
    lines.append("")

    lines.append("Reasons:")
    reasons = list(result.reasons[:MAX_DISPLAY_REASONS])
    if not reasons:
        lines.append(f"  {NO_RISKS_TEXT}")
    for reason in reasons:
        lines.append(f"  - {reason}")
    hidden = len(result.reasons) - len(reasons)
    if hidden > 0:
        lines.append(f"  (+{hidden} more)")

    return "\n".join(lines) + "\n"


def history_text(entries: Sequence[HistoryEntry], *, limit: int | None = None) -> str:
    if not entries:
        return "No history yet.\n"
    shown = entries if limit is None else entries[:limit]
    lines = [
        f"{format_timestamp(e.timestamp)}  {e.score:>3}  {e.tier:<9}  {e.hostname or 'unknown'}"
        for e in shown
    ]
    return "\n".join(lines) + "\n"


def settings_text(settings: Settings) -> str:
    lines: list[str] = []
    lines.append(f"Sensitivity: {settings.sensitivity.capitalize()} mode")
    lines.append(f"Backend enabled: {'yes' if settings.enable_backend else 'no'}")
    if settings.allowlist:
        lines.append("Allowlist:")
        for domain in settings.allowlist:
            lines.append(f"  - {domain}")
    else:
        lines.append("Allowlist: (empty)")
    return "\n".join(lines) + "\n"

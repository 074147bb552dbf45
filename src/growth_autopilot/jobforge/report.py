"""Human-readable (markdown) and canonical JSON renderings of a report envelope."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Literal

from growth_autopilot.utils.canonical import serialize_deterministic

ReportFormat = Literal["md", "json"]

_SAFETY_LINES = (
    "- Runnerless module: emits dry-run job requests only.",
    "- JobForge policy tokens required for action jobs.",
)


def render_report(report: Mapping[str, Any], fmt: ReportFormat = "md") -> str:
    if fmt == "json":
        return serialize_deterministic(report)
    if fmt != "md":
        raise ValueError(f"unsupported report format: {fmt!r}")

    lines = [
        "# Growth Autopilot Report",
        "",
        f"- Report ID: {report['report_id']}",
        f"- Tenant: {report['tenant_id']}",
        f"- Project: {report['project_id']}",
        f"- Trace: {report['trace_id']}",
        f"- Created At: {report['created_at']}",
        "",
        "## Summary",
        "",
    ]
    for key, value in report["summary"].items():
        lines.append(f"- {key}: {format_summary_value(value)}")

    lines += ["", "## Findings", ""]
    findings = report["findings"]
    if not findings:
        lines.append("- No findings reported.")
    for finding in findings:
        lines.append(f"- **{finding['title']}** ({finding['severity']})")
        lines.append(f"  - {finding['description']}")

    lines += ["", "## Recommendations", ""]
    recommendations = report["recommendations"]
    if not recommendations:
        lines.append("- No recommendations generated.")
    for recommendation in recommendations:
        policy_note = " (requires policy token)" if recommendation.get("requires_policy_token") else ""
        lines.append(f"- **{recommendation['title']}**{policy_note}")
        lines.append(f"  - {recommendation['description']}")

    lines += ["", "## Safety", "", *_SAFETY_LINES]
    return "\n".join(lines)


def format_summary_value(value: object) -> str:
    if value is None:
        return "n/a"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return format_number(value) if isinstance(value, float) else str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def format_number(value: float | int) -> str:
    """Integral floats print without a fractional part (``12.0`` -> ``12``)."""

    if isinstance(value, int) or value.is_integer():
        return str(int(value))
    return repr(value)


__all__ = ["ReportFormat", "format_number", "format_summary_value", "render_report"]

"""
growth-autopilot: experiment proposals from funnel metrics

File: src/growth_autopilot/experiments/proposals.py
Last updated: 2026-10-19

Purpose
- Match funnel metrics against a library of experiment templates and emit
  evidence-backed A/B test proposals.

Functional requirements
- Templates are evaluated in library order; generation stops at ``max_proposals``.
- Never returns an empty list: a general-analysis proposal is emitted when no
  template applies.
- Target step: the recorded biggest drop-off, else the step with the highest
  drop-off rate strictly between 0 and 1.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

from growth_autopilot.constants import DEFAULT_MAX_PROPOSALS
from growth_autopilot.domain.ids import PROPOSAL_ID_PREFIX, IdFactory, generate_prefixed_id
from growth_autopilot.domain.timestamps import Clock, now_iso8601z
from growth_autopilot.funnel.analysis import js_round

FunnelMetrics = Mapping[str, Any]
Variant = dict[str, Any]

SUCCESS_METRIC: Final[str] = "conversion_rate"


@dataclass(frozen=True, slots=True)
class ExperimentTemplate:
    name: str
    experiment_type: str
    effort_level: str
    days_estimate: int
    resources_needed: tuple[str, ...]
    applies_to: Callable[[FunnelMetrics], bool]
    hypothesis: Callable[[FunnelMetrics], str]
    variants: tuple[tuple[str, str, tuple[str, ...]], ...]

    def variant_dicts(self) -> list[Variant]:
        return [
            {"name": name, "description": description, "changes": list(changes)}
            for name, description, changes in self.variants
        ]


def _find_step(metrics: FunnelMetrics, *needles: str) -> Mapping[str, Any] | None:
    for step in metrics["steps"]:
        if any(needle in step["step_name"] for needle in needles):
            return step
    return None


def _step_rate_above(threshold: float, *needles: str) -> Callable[[FunnelMetrics], bool]:
    def applies(metrics: FunnelMetrics) -> bool:
        step = _find_step(metrics, *needles)
        return step is not None and step["drop_off_rate"] > threshold

    return applies


def _pct_of_step(*needles: str) -> Callable[[FunnelMetrics], int]:
    def pct(metrics: FunnelMetrics) -> int:
        step = _find_step(metrics, *needles)
        return js_round((step["drop_off_rate"] if step else 0) * 100)

    return pct


def _first_step_pct(metrics: FunnelMetrics) -> int:
    steps = metrics["steps"]
    return js_round((steps[0]["drop_off_rate"] if steps else 0) * 100)


_signup_pct = _pct_of_step("signup")
_onboarding_pct = _pct_of_step("onboard", "setup")
_activation_pct = _pct_of_step("activate", "first_action")

_CONTROL = "Control"

EXPERIMENT_TEMPLATES: Final[tuple[ExperimentTemplate, ...]] = (
    ExperimentTemplate(
        name="Landing Page Value Prop Test",
        experiment_type="content_change",
        effort_level="small",
        days_estimate=3,
        resources_needed=("copywriter", "designer"),
        applies_to=lambda m: bool(m["steps"]) and m["steps"][0]["drop_off_rate"] > 0.3,
        hypothesis=lambda m: (
            "Testing clearer value proposition on landing page will reduce "
            f"{_first_step_pct(m)}% drop-off to signup"
        ),
        variants=(
            (_CONTROL, "Current landing page", ("No changes",)),
            (
                "Value-First Headline",
                "Lead with primary benefit instead of feature",
                ("Rewrite H1 to focus on outcome", "Move social proof above fold"),
            ),
            (
                "Problem-Agitation",
                "Highlight pain point before solution",
                ("Add pain point header", "Contrast with solution"),
            ),
        ),
    ),
    ExperimentTemplate(
        name="Signup Form Optimization",
        experiment_type="flow_change",
        effort_level="medium",
        days_estimate=5,
        resources_needed=("frontend_dev", "ux_designer"),
        applies_to=_step_rate_above(0.4, "signup"),
        hypothesis=lambda m: (
            f"Reducing signup form fields will decrease {_signup_pct(m)}% abandonment at signup step"
        ),
        variants=(
            (_CONTROL, "Current multi-field signup form", ("No changes",)),
            (
                "Email-Only First Step",
                "Single field to start, collect rest later",
                ("Reduce initial fields to email only", "Progressive profiling"),
            ),
            (
                "Social Login Prominent",
                "Prioritize OAuth over email signup",
                ("Move Google/GitHub buttons above email form", "One-click signup CTA"),
            ),
        ),
    ),
    ExperimentTemplate(
        name="Onboarding Progress Indicator",
        experiment_type="feature_flag",
        effort_level="small",
        days_estimate=2,
        resources_needed=("frontend_dev",),
        applies_to=_step_rate_above(0.2, "onboard", "setup"),
        hypothesis=lambda m: (
            f"Adding progress indicator during onboarding will reduce {_onboarding_pct(m)}% "
            "drop-off by setting clear expectations"
        ),
        variants=(
            (_CONTROL, "Current onboarding without progress indicator", ("No changes",)),
            ("Step Counter", 'Show "Step 1 of 3" style indicator', ("Add step counter UI", "Highlight current step")),
            (
                "Progress Bar",
                "Visual progress bar showing completion %",
                ("Add progress bar component", "Animate transitions"),
            ),
        ),
    ),
    ExperimentTemplate(
        name="Activation Email Sequence",
        experiment_type="content_change",
        effort_level="medium",
        days_estimate=4,
        resources_needed=("copywriter", "email_specialist"),
        applies_to=_step_rate_above(0.5, "activate", "first_action"),
        hypothesis=lambda m: (
            f"Targeted activation email sequence will re-engage {_activation_pct(m)}% "
            "of users who drop off before activation"
        ),
        variants=(
            (_CONTROL, "Current single welcome email", ("No changes",)),
            (
                "3-Day Activation Series",
                "Timed emails to drive first key action",
                ("Day 0: Welcome + quick win", "Day 1: Feature highlight", "Day 2: Social proof"),
            ),
            (
                "Personalized Outreach",
                "Segmented emails based on signup source",
                ("Custom content per acquisition channel", "Dynamic product tips"),
            ),
        ),
    ),
    ExperimentTemplate(
        name="Checkout Flow Simplification",
        experiment_type="flow_change",
        effort_level="large",
        days_estimate=10,
        resources_needed=("frontend_dev", "backend_dev", "ux_designer", "qa"),
        applies_to=lambda m: bool(m["steps"]) and m["overall_conversion_rate"] < 0.1,
        hypothesis=lambda m: (
            "Streamlined checkout flow will increase overall conversion from "
            f"{js_round(m['overall_conversion_rate'] * 100)}% to target 15%"
        ),
        variants=(
            (_CONTROL, "Current multi-step checkout", ("No changes",)),
            (
                "Single-Page Checkout",
                "All checkout steps on one page",
                ("Collapse steps into accordion", "Inline validation", "Sticky CTA"),
            ),
            (
                "Express Checkout",
                "Apple Pay / Google Pay as primary options",
                ("Prominently display express checkout", "Defer account creation"),
            ),
        ),
    ),
)


@dataclass(frozen=True, slots=True)
class ExpectedImpact:
    lift_percent: int
    confidence: str
    rationale: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": SUCCESS_METRIC,
            "lift_percent": self.lift_percent,
            "confidence": self.confidence,
            "rationale": self.rationale,
        }


def resolve_target_step(metrics: FunnelMetrics) -> str | None:
    """Recorded biggest drop-off, else the worst step that still retains some users."""

    biggest = metrics.get("biggest_drop_off_step")
    if biggest:
        return str(biggest)
    target: str | None = None
    max_rate = 0.0
    for step in metrics["steps"]:
        rate = step["drop_off_rate"]
        if max_rate < rate < 1:
            max_rate = rate
            target = step["step_name"]
    return target


def estimate_impact(metrics: FunnelMetrics, target_step: str) -> ExpectedImpact:
    step = next((s for s in metrics["steps"] if s["step_name"] == target_step), None)
    if step is None:
        return ExpectedImpact(10, "low", "Insufficient data for this step")

    rate = step["drop_off_rate"]
    pct = js_round(rate * 100)
    if rate > 0.6:
        return ExpectedImpact(
            25,
            "high",
            f"Severe drop-off ({pct}%) indicates clear optimization opportunity with high potential impact",
        )
    if rate > 0.3:
        return ExpectedImpact(
            15,
            "medium",
            f"Moderate drop-off ({pct}%) suggests room for improvement with moderate confidence",
        )
    return ExpectedImpact(8, "low", f"Low drop-off ({pct}%) - gains possible but marginal")


def propose_experiments(
    tenant_context: Mapping[str, str],
    funnel_metrics: FunnelMetrics,
    max_proposals: int = DEFAULT_MAX_PROPOSALS,
    *,
    templates: Sequence[ExperimentTemplate] = EXPERIMENT_TEMPLATES,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> list[dict[str, Any]]:
    new_id = id_factory or generate_prefixed_id
    proposals: list[dict[str, Any]] = []

    for template in templates:
        if not template.applies_to(funnel_metrics):
            continue
        target_step = resolve_target_step(funnel_metrics)
        if target_step is None:
            continue
        proposals.append(
            _proposal(
                tenant_context,
                funnel_metrics,
                proposal_id=new_id(PROPOSAL_ID_PREFIX),
                created_at=now_iso8601z(clock),
                title=template.name,
                hypothesis=template.hypothesis(funnel_metrics),
                target_step=target_step,
                experiment_type=template.experiment_type,
                effort={
                    "level": template.effort_level,
                    "days_estimate": template.days_estimate,
                    "resources_needed": list(template.resources_needed),
                },
                variants=template.variant_dicts(),
                evidence=[
                    {
                        "type": "calculation",
                        "path": "funnel_metrics.overall_conversion_rate",
                        "description": "Current overall conversion rate",
                        "value": js_round(funnel_metrics["overall_conversion_rate"] * 100),
                    },
                    {
                        "type": "json_path",
                        "path": "steps",
                        "description": "Based on funnel step analysis",
                        "value": len(funnel_metrics["steps"]),
                    },
                    {
                        "type": "assumption",
                        "path": "industry_benchmarks",
                        "description": "Expected impact based on industry benchmarks for similar experiments",
                        "value": True,
                    },
                ],
            )
        )
        if len(proposals) >= max_proposals:
            break

    if proposals:
        return proposals

    steps = funnel_metrics["steps"]
    target_step = resolve_target_step(funnel_metrics) or (steps[0]["step_name"] if steps else "unknown")
    return [
        _proposal(
            tenant_context,
            funnel_metrics,
            proposal_id=new_id(PROPOSAL_ID_PREFIX),
            created_at=now_iso8601z(clock),
            title="Funnel Optimization - General Analysis",
            hypothesis=f"Analyzing user behavior at {target_step} step will reveal optimization opportunities",
            target_step=target_step,
            experiment_type="ab_test",
            effort={"level": "medium", "days_estimate": 7, "resources_needed": ["analyst", "product_manager"]},
            variants=[
                {"name": _CONTROL, "description": "Current experience", "changes": ["No changes"]},
                {
                    "name": "To Be Defined",
                    "description": "Requires further user research",
                    "changes": ["Conduct user interviews", "Analyze session recordings", "Define testable hypothesis"],
                },
            ],
            evidence=[
                {
                    "type": "calculation",
                    "path": "funnel_metrics.steps",
                    "description": "Analysis of all funnel steps",
                    "value": len(steps),
                }
            ],
        )
    ]


def _proposal(
    tenant_context: Mapping[str, str],
    funnel_metrics: FunnelMetrics,
    *,
    proposal_id: str,
    created_at: str,
    title: str,
    hypothesis: str,
    target_step: str,
    experiment_type: str,
    effort: dict[str, Any],
    variants: list[Variant],
    evidence: list[dict[str, Any]],
) -> dict[str, Any]:
    return {
        "tenant_id": tenant_context["tenant_id"],
        "project_id": tenant_context["project_id"],
        "id": proposal_id,
        "created_at": created_at,
        "title": title,
        "hypothesis": hypothesis,
        "funnel_metrics_id": funnel_metrics["id"],
        "target_step": target_step,
        "experiment_type": experiment_type,
        "effort": effort,
        "expected_impact": estimate_impact(funnel_metrics, target_step).to_dict(),
        "suggested_variants": variants,
        "evidence": evidence,
    }


__all__ = [
    "EXPERIMENT_TEMPLATES",
    "ExpectedImpact",
    "ExperimentTemplate",
    "estimate_impact",
    "propose_experiments",
    "resolve_target_step",
]

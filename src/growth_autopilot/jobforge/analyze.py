"""
growth-autopilot: analysis orchestrator

File: src/growth_autopilot/jobforge/analyze.py
Last updated: 2026-10-19

Purpose
- Run the applicable analysis phases (SEO, funnel, experiments, content) over
  one input document and emit a canonical-hashed report, a JobForge request
  bundle and the runner maturity report.

Functional requirements
- Phase order is fixed; it is the order findings and recommendations appear.
- Each phase is a pure function from ``OrchestrationState`` to a new state.
- Stable-output mode rewrites only identifiers and timestamps.
- Every request carries the orchestration trace id; idempotency keys never do.
- A finished artifact that fails its own schema is an internal defect
  (``InvariantViolationError``), never a user input error.
- Collaborator failures propagate unchanged.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from growth_autopilot.constants import (
    ACTION_JOB_TYPES,
    DEFAULT_FUNNEL_NAME,
    DEFAULT_MAX_PROPOSALS,
    JOB_TYPE_CONTENT_DRAFT,
    JOB_TYPE_EXPERIMENT_PROPOSE,
    JOB_TYPE_SEO_SCAN,
    MODULE_ID,
    REPORT_TYPE,
    SCHEMA_VERSION,
    STABLE_AUDIT_ID,
    STABLE_BUNDLE_ID,
    STABLE_REPORT_ID,
    STABLE_TIME,
)
from growth_autopilot.content.drafter import draft_content
from growth_autopilot.content.profiles import BUILTIN_PROFILES_DIR, ProfileLoader
from growth_autopilot.contracts.envelopes import parse_tenant_context, validate_job_request_bundle, validate_report
from growth_autopilot.contracts.growth import parse_funnel_metrics
from growth_autopilot.contracts.inputs import parse_analyze_inputs
from growth_autopilot.domain.ids import (
    BUNDLE_ID_PREFIX,
    FINDING_ID_PREFIX,
    RECOMMENDATION_ID_PREFIX,
    REPORT_ID_PREFIX,
    IdFactory,
    generate_prefixed_id,
)
from growth_autopilot.domain.timestamps import Clock, now_iso8601z, parse_iso8601
from growth_autopilot.errors import InvariantViolationError
from growth_autopilot.experiments.proposals import propose_experiments
from growth_autopilot.funnel.analysis import analyze_funnel
from growth_autopilot.jobforge.bundle import build_bundle_entries
from growth_autopilot.jobforge.maturity import build_runner_maturity_report
from growth_autopilot.jobforge.report import format_number
from growth_autopilot.jobforge.requests import (
    create_content_draft_job,
    create_experiment_proposal_job,
    create_seo_scan_job,
)
from growth_autopilot.seo.scanner import scan_site
from growth_autopilot.utils.canonical import with_canonical_hash
from growth_autopilot.utils.fs import read_json_file

Artifact = dict[str, Any]


@dataclass(frozen=True, slots=True)
class AnalyzeOptions:
    tenant_id: str
    project_id: str
    trace_id: str
    stable_output: bool = False
    profile_loader: ProfileLoader | None = None
    clock: Clock | None = None
    id_factory: IdFactory | None = None
    logger: Any | None = None


@dataclass(frozen=True, slots=True)
class AnalyzeResult:
    report: Artifact
    bundle: Artifact
    runner_maturity: Artifact


@dataclass(frozen=True, slots=True)
class PhaseContext:
    """Per-call collaborators shared by every phase."""

    tenant_context: Mapping[str, str]
    stable_output: bool
    profile_loader: ProfileLoader
    clock: Clock | None
    id_factory: IdFactory
    logger: Any


@dataclass(frozen=True, slots=True)
class OrchestrationState:
    findings: tuple[Artifact, ...] = ()
    job_requests: tuple[Artifact, ...] = ()
    seo_findings: int = 0
    funnel_drop_off_step: str | None = None
    funnel_metrics: Artifact | None = field(default=None)
    experiment_proposals: int = 0
    content_drafts: int = 0

    def with_finding(self, finding: Artifact) -> OrchestrationState:
        return replace(self, findings=(*self.findings, finding))

    def with_job_request(self, job: Artifact) -> OrchestrationState:
        return replace(self, job_requests=(*self.job_requests, job))

    def summary(self) -> dict[str, Any]:
        return {
            "seo_findings": self.seo_findings,
            "funnel_biggest_drop_off_step": self.funnel_drop_off_step,
            "experiment_proposals": self.experiment_proposals,
            "content_drafts": self.content_drafts,
        }


def sequence_id_factory() -> IdFactory:
    """Return an id factory yielding ``<prefix>-1``, ``<prefix>-2``, ... per prefix.

    Counters live in the returned closure, so concurrent calls never share them.
    """

    counters: defaultdict[str, int] = defaultdict(int)

    def new_id(prefix: str) -> str:
        counters[prefix] += 1
        return f"{prefix}-{counters[prefix]}"

    return new_id


def fixed_clock(moment: datetime) -> Clock:
    def now() -> datetime:
        return moment

    return now


def build_finding(
    context: PhaseContext,
    state: OrchestrationState,
    *,
    title: str,
    description: str,
    severity: str,
    evidence: list[Artifact],
    related_job_types: list[str],
) -> Artifact:
    index = len(state.findings)
    return {
        "id": f"finding-{index + 1}" if context.stable_output else context.id_factory(FINDING_ID_PREFIX),
        "title": title,
        "description": description,
        "severity": severity,
        "evidence": evidence,
        "related_job_types": related_job_types,
    }


def run_seo_phase(state: OrchestrationState, inputs: Mapping[str, Any], context: PhaseContext) -> OrchestrationState:
    seo_scan = inputs.get("seo_scan")
    audit = inputs.get("seo_audit")
    if audit is None and seo_scan is None:
        return state
    if audit is None:
        audit = scan_site(
            dict(context.tenant_context),
            seo_scan["source_type"],
            seo_scan["source_path"],
            clock=context.clock,
            id_factory=context.id_factory,
        )

    seo_findings = audit["findings"]
    state = state.with_finding(
        build_finding(
            context,
            state,
            title="SEO scan findings detected",
            description=f"Detected {len(seo_findings)} SEO findings across {audit['urls_scanned']} URLs.",
            severity="critical" if audit["summary"]["critical"] > 0 else "warning",
            evidence=[
                {"type": "url", "path": finding["url"], "description": finding["message"]}
                for finding in seo_findings[:3]
            ],
            related_job_types=[JOB_TYPE_SEO_SCAN],
        )
    )
    state = replace(state, seo_findings=len(seo_findings))

    if seo_scan is not None:
        state = state.with_job_request(
            create_seo_scan_job(
                context.tenant_context,
                seo_scan["source_path"],
                seo_scan["source_type"],
                "medium",
                related_audit_id=STABLE_AUDIT_ID if context.stable_output else audit["id"],
                notes=f"SEO scan identified {len(seo_findings)} findings",
                clock=context.clock,
                id_factory=context.id_factory,
            )
        )
    context.logger.info("analysis_phase_completed", phase="seo", seo_findings=len(seo_findings))
    return state


def run_funnel_phase(state: OrchestrationState, inputs: Mapping[str, Any], context: PhaseContext) -> OrchestrationState:
    funnel = inputs.get("funnel_metrics")
    funnel_analysis = inputs.get("funnel_analysis")
    if funnel is None and funnel_analysis is None:
        return state
    if funnel is None:
        funnel = analyze_funnel(
            context.tenant_context,
            funnel_analysis["events_path"],
            funnel_analysis.get("funnel_name", DEFAULT_FUNNEL_NAME),
            funnel_analysis["steps"],
            clock=context.clock,
            id_factory=context.id_factory,
        )

    biggest = funnel.get("biggest_drop_off_step")
    if biggest:
        rate = next((step["drop_off_rate"] for step in funnel["steps"] if step["step_name"] == biggest), 0)
        description = f"Biggest drop-off at {biggest} with {format_number(rate * 100)}% drop-off."
    else:
        description = "No significant drop-off detected in the funnel steps."

    state = state.with_finding(
        build_finding(
            context,
            state,
            title="Funnel drop-off identified",
            description=description,
            severity="warning" if biggest else "info",
            evidence=list(funnel["evidence"][:2]),
            related_job_types=[JOB_TYPE_EXPERIMENT_PROPOSE],
        )
    )
    state = replace(state, funnel_metrics=funnel, funnel_drop_off_step=biggest or None)
    state = state.with_job_request(
        create_experiment_proposal_job(
            context.tenant_context,
            funnel,
            "medium",
            notes="Generate experiment proposals from funnel analysis",
            clock=context.clock,
            id_factory=context.id_factory,
        )
    )
    context.logger.info("analysis_phase_completed", phase="funnel", biggest_drop_off_step=biggest)
    return state


def run_experiments_phase(
    state: OrchestrationState, inputs: Mapping[str, Any], context: PhaseContext
) -> OrchestrationState:
    request = inputs.get("experiment_proposals")
    if request is None:
        return state

    metrics_path = request.get("funnel_metrics_path")
    if metrics_path is not None:
        funnel_metrics = parse_funnel_metrics(read_json_file(metrics_path, label="funnel metrics file"))
    else:
        funnel_metrics = state.funnel_metrics
    if funnel_metrics is None:
        context.logger.info("analysis_phase_skipped", phase="experiments", reason="no_funnel_metrics")
        return state

    proposals = propose_experiments(
        context.tenant_context,
        funnel_metrics,
        request.get("max_proposals", DEFAULT_MAX_PROPOSALS),
        clock=context.clock,
        id_factory=context.id_factory,
    )
    state = replace(state, experiment_proposals=len(proposals))
    if proposals:
        state = state.with_finding(
            build_finding(
                context,
                state,
                title="Experiment proposals generated",
                description=(
                    f"Generated {len(proposals)} experiment proposal(s) targeting {funnel_metrics['funnel_name']}."
                ),
                severity="opportunity",
                evidence=[
                    {"type": "json_path", "path": f"proposal:{proposal['id']}", "description": proposal["title"]}
                    for proposal in proposals[:2]
                ],
                related_job_types=[JOB_TYPE_EXPERIMENT_PROPOSE],
            )
        )
    context.logger.info("analysis_phase_completed", phase="experiments", proposal_count=len(proposals))
    return state


def run_content_phase(state: OrchestrationState, inputs: Mapping[str, Any], context: PhaseContext) -> OrchestrationState:
    request = inputs.get("content_draft")
    if request is None:
        return state

    draft = draft_content(
        context.tenant_context,
        request["profile"],
        request["content_type"],
        request["goal"],
        profile_loader=context.profile_loader,
        keywords=request.get("keywords", ()),
        features=request.get("features", ()),
        target_audience=request.get("audience"),
        llm_provider=request.get("llm_provider"),
        variant_count=request.get("variants", 1),
        clock=context.clock,
        id_factory=context.id_factory,
    )
    state = state.with_finding(
        build_finding(
            context,
            state,
            title="Content draft prepared",
            description=f"Drafted {draft['content_type']} content using {draft['profile_used']} profile.",
            severity="info",
            evidence=list(draft["evidence"][:2]),
            related_job_types=[JOB_TYPE_CONTENT_DRAFT],
        )
    )
    state = replace(state, content_drafts=draft["variant_count"])
    state = state.with_job_request(
        create_content_draft_job(
            context.tenant_context,
            request["profile"],
            request["content_type"],
            request["goal"],
            "medium",
            keywords=request.get("keywords"),
            features=request.get("features"),
            target_audience=request.get("audience"),
            use_llm=bool(request.get("llm_provider")),
            llm_provider=request.get("llm_provider"),
            notes=f"Draft {request['content_type']} content",
            clock=context.clock,
            id_factory=context.id_factory,
        )
    )
    context.logger.info("analysis_phase_completed", phase="content", content_type=draft["content_type"])
    return state


PHASES = (run_seo_phase, run_funnel_phase, run_experiments_phase, run_content_phase)


def build_recommendations(job_requests: tuple[Artifact, ...], *, stable_output: bool, id_factory: IdFactory) -> list[Artifact]:
    recommendations: list[Artifact] = []
    for index, job in enumerate(job_requests):
        job_type = job["job_type"]
        recommendations.append(
            {
                "id": f"recommendation-{index + 1}" if stable_output else id_factory(RECOMMENDATION_ID_PREFIX),
                "title": f"Queue {job_type} request",
                "description": f"Submit JobForge request for {job_type}.",
                "job_type": job_type,
                "requires_policy_token": job_type in ACTION_JOB_TYPES,
            }
        )
    return recommendations


def normalize_job_request(job: Mapping[str, Any], trace_id: str, *, stable_output: bool, index: int) -> Artifact:
    context = {**job["context"], "trace_id": trace_id}
    normalized = {**job, "context": context}
    if stable_output:
        normalized["id"] = f"job-{index + 1}"
        normalized["created_at"] = STABLE_TIME
        if context.get("correlation_id"):
            context["correlation_id"] = f"correlation-{index + 1}"
    return normalized


def analyze(inputs: object, options: AnalyzeOptions) -> AnalyzeResult:
    """Run every applicable phase over ``inputs`` and return the finished artifacts."""

    parsed = parse_analyze_inputs(inputs)
    tenant_context = parse_tenant_context({"tenant_id": options.tenant_id, "project_id": options.project_id})
    stable = options.stable_output
    logger = options.logger if options.logger is not None else structlog.get_logger(__name__)

    id_factory = options.id_factory
    clock = options.clock
    if stable:
        # Collaborator ids (funnel metrics id, proposal ids) reach payloads and
        # evidence, so they are sequenced too.
        id_factory = sequence_id_factory()
        clock = fixed_clock(parse_iso8601(STABLE_TIME))
    context = PhaseContext(
        tenant_context=tenant_context,
        stable_output=stable,
        profile_loader=options.profile_loader or ProfileLoader(BUILTIN_PROFILES_DIR, logger=logger),
        clock=clock,
        id_factory=id_factory or generate_prefixed_id,
        logger=logger,
    )

    state = OrchestrationState()
    for phase in PHASES:
        state = phase(state, parsed, context)

    created_at = STABLE_TIME if stable else now_iso8601z(options.clock)
    report = with_canonical_hash(
        {
            "schema_version": SCHEMA_VERSION,
            "module_id": MODULE_ID,
            "report_id": STABLE_REPORT_ID if stable else context.id_factory(REPORT_ID_PREFIX),
            "tenant_id": tenant_context["tenant_id"],
            "project_id": tenant_context["project_id"],
            "trace_id": options.trace_id,
            "created_at": created_at,
            "report_type": REPORT_TYPE,
            "summary": state.summary(),
            "findings": list(state.findings),
            "recommendations": build_recommendations(
                state.job_requests, stable_output=stable, id_factory=context.id_factory
            ),
            "inputs": {
                "event_count": len(parsed["events"]),
                "run_manifest_count": len(parsed["run_manifests"]),
                "notes": [
                    name
                    for name in ("seo_scan", "funnel_analysis", "experiment_proposals", "content_draft")
                    if name in parsed
                ],
            },
        }
    )

    jobs = [
        normalize_job_request(job, options.trace_id, stable_output=stable, index=index)
        for index, job in enumerate(state.job_requests)
    ]
    bundle = with_canonical_hash(
        {
            "schema_version": SCHEMA_VERSION,
            "module_id": MODULE_ID,
            "bundle_id": STABLE_BUNDLE_ID if stable else context.id_factory(BUNDLE_ID_PREFIX),
            "tenant_id": tenant_context["tenant_id"],
            "project_id": tenant_context["project_id"],
            "trace_id": options.trace_id,
            "created_at": created_at,
            "requests": build_bundle_entries(jobs),
        }
    )
    runner_maturity = build_runner_maturity_report(
        tenant_id=tenant_context["tenant_id"],
        project_id=tenant_context["project_id"],
        trace_id=options.trace_id,
        created_at=created_at,
    )

    _assert_valid("report", validate_report(report).issues)
    _assert_valid("request bundle", validate_job_request_bundle(bundle).issues)

    logger.info(
        "analysis_completed",
        trace_id=options.trace_id,
        finding_count=len(state.findings),
        request_count=len(jobs),
        stable_output=stable,
    )
    return AnalyzeResult(report=report, bundle=bundle, runner_maturity=runner_maturity)


def load_analyze_inputs(path: str | Path) -> dict[str, Any]:
    """Read and validate an inputs document from disk."""

    return parse_analyze_inputs(read_json_file(path, label="inputs file"))


def _assert_valid(label: str, issues: tuple[Any, ...]) -> None:
    if issues:
        raise InvariantViolationError(f"generated {label} failed schema validation", issues)


__all__ = [
    "AnalyzeOptions",
    "AnalyzeResult",
    "OrchestrationState",
    "PHASES",
    "PhaseContext",
    "analyze",
    "build_recommendations",
    "fixed_clock",
    "load_analyze_inputs",
    "normalize_job_request",
    "sequence_id_factory",
]

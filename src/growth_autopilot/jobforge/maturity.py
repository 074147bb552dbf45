"""Runner maturity report: what each JobForge runner does, how it fails and what it may cost."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

from growth_autopilot.constants import (
    ACTION_JOB_TYPES,
    JOB_TYPE_CONTENT_DRAFT,
    JOB_TYPE_EXPERIMENT_PROPOSE,
    JOB_TYPE_EXPERIMENT_RUN,
    JOB_TYPE_PUBLISH_CONTENT,
    JOB_TYPE_SEO_SCAN,
    MODULE_ID,
    RUNNER_COST_CAPS_USD,
    SCHEMA_VERSION,
)
from growth_autopilot.utils.canonical import with_canonical_hash

IDEMPOTENCY: Final[dict[str, str]] = {
    "strategy": "payload_hash",
    "key_source": "tenant_id + project_id + job_type + payload (stable hash)",
}

RETRY_GUIDANCE: Final[dict[str, Any]] = {
    "retryable": True,
    "reason": "JobForge queueing failures can be retried safely when using idempotency keys.",
    "max_retries": 3,
    "strategy": "exponential_backoff",
}

# (metric, description, source)
Metric = tuple[str, str, str]

_ENQUEUED = "job_request_enqueued"
_BUNDLE_FAILED: Final[Metric] = (
    "bundle_validation_failed",
    "Request bundle failed schema or invariants validation.",
    "runner",
)
_POLICY_FLAGGED: Final[Metric] = (
    "action_job_requires_policy_token",
    "Action job flagged with requires_policy_token=true.",
    "job_request",
)
_POLICY_MISSING: Final[Metric] = (
    "policy_token_missing",
    "Action job cannot execute without policy token.",
    "runner",
)


@dataclass(frozen=True, slots=True)
class RunnerDefinition:
    runner_id: str
    job_type: str
    purpose: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]
    failure_modes: tuple[str, ...]
    success_metrics: tuple[Metric, ...]
    failure_metrics: tuple[Metric, ...]

    def to_dict(self) -> dict[str, Any]:
        cost_controls = ["max_cost_usd constraint", "require_approval=true"]
        if self.job_type in ACTION_JOB_TYPES:
            cost_controls.append("policy_token_required")
        return {
            "runner_id": self.runner_id,
            "job_type": self.job_type,
            "purpose": self.purpose,
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
            "failure_modes": list(self.failure_modes),
            "idempotency": dict(IDEMPOTENCY),
            "retry_guidance": dict(RETRY_GUIDANCE),
            "metrics": {
                "success": [_metric(item) for item in self.success_metrics],
                "failure": [_metric(item) for item in self.failure_metrics],
            },
            "finops": {
                "max_cost_usd": RUNNER_COST_CAPS_USD[self.job_type],
                "cost_controls": cost_controls,
            },
        }


def _metric(item: Metric) -> dict[str, str]:
    metric, description, source = item
    return {"metric": metric, "description": description, "source": source}


RUNNER_DEFINITIONS: Final[tuple[RunnerDefinition, ...]] = (
    RunnerDefinition(
        runner_id="growth.seo_scan",
        job_type=JOB_TYPE_SEO_SCAN,
        purpose="Scan a site export for SEO issues and emit a JobForge request bundle entry.",
        inputs=("source_path", "source_type", "tenant_id", "project_id"),
        outputs=("job_request", "report.findings", "request-bundle.json"),
        failure_modes=(
            "Invalid or missing source_path",
            "Schema validation failure",
            "Job type unavailable in JobForge",
        ),
        success_metrics=(
            (_ENQUEUED, "JobForge request for seo_scan created and validated.", "job_request"),
            ("seo_findings_count", "Number of SEO findings recorded in report.summary.", "report"),
        ),
        failure_metrics=(
            _BUNDLE_FAILED,
            ("job_type_unavailable", "job_type_status marked unavailable for seo_scan.", "job_request"),
        ),
    ),
    RunnerDefinition(
        runner_id="growth.experiment_propose",
        job_type=JOB_TYPE_EXPERIMENT_PROPOSE,
        purpose="Generate experiment proposals from funnel metrics and emit a JobForge request.",
        inputs=("funnel_metrics_id", "funnel_name", "tenant_id", "project_id"),
        outputs=("job_request", "report.findings", "report.recommendations"),
        failure_modes=(
            "Missing funnel metrics or invalid funnel metrics file",
            "Schema validation failure",
            "Job type unavailable in JobForge",
        ),
        success_metrics=(
            (_ENQUEUED, "Experiment proposal job request created and validated.", "job_request"),
            ("experiment_proposals_count", "Count of proposals captured in report.summary.", "report"),
        ),
        failure_metrics=(
            ("funnel_metrics_missing", "Input funnel metrics missing or invalid.", "runner"),
            _BUNDLE_FAILED,
        ),
    ),
    RunnerDefinition(
        runner_id="growth.content_draft",
        job_type=JOB_TYPE_CONTENT_DRAFT,
        purpose="Draft content using a profile and emit a JobForge request.",
        inputs=("profile_name", "content_type", "goal", "tenant_id", "project_id"),
        outputs=("job_request", "report.findings", "report.summary.content_drafts"),
        failure_modes=(
            "Missing profile or invalid content_type",
            "Schema validation failure",
            "LLM provider unavailable (if configured)",
        ),
        success_metrics=(
            (_ENQUEUED, "Content draft job request created and validated.", "job_request"),
            ("content_drafts_count", "Number of content drafts recorded in report.summary.", "report"),
        ),
        failure_metrics=(
            ("profile_missing", "Requested content profile not found.", "runner"),
            ("llm_provider_error", "LLM provider failed during draft preparation.", "runner"),
        ),
    ),
    RunnerDefinition(
        runner_id="growth.experiment_run",
        job_type=JOB_TYPE_EXPERIMENT_RUN,
        purpose="Run a proposed experiment and emit a JobForge request.",
        inputs=("proposal_id", "variants", "duration_days", "tenant_id", "project_id"),
        outputs=("job_request", "report.recommendations"),
        failure_modes=(
            "Missing experiment proposal",
            "Policy token required for action jobs",
            "Schema validation failure",
        ),
        success_metrics=(
            (_ENQUEUED, "Experiment run job request created and validated.", "job_request"),
            _POLICY_FLAGGED,
        ),
        failure_metrics=(_POLICY_MISSING, _BUNDLE_FAILED),
    ),
    RunnerDefinition(
        runner_id="growth.publish_content",
        job_type=JOB_TYPE_PUBLISH_CONTENT,
        purpose="Publish drafted content to a destination via JobForge.",
        inputs=("draft_id", "destination", "tenant_id", "project_id"),
        outputs=("job_request", "report.recommendations"),
        failure_modes=(
            "Missing draft content",
            "Invalid publish destination",
            "Policy token required for action jobs",
        ),
        success_metrics=(
            (_ENQUEUED, "Publish content job request created and validated.", "job_request"),
            _POLICY_FLAGGED,
        ),
        failure_metrics=(
            _POLICY_MISSING,
            ("destination_invalid", "Publish destination rejected by downstream systems.", "runner"),
        ),
    ),
)


def build_runner_maturity_report(
    *,
    tenant_id: str,
    project_id: str,
    trace_id: str,
    created_at: str,
    module_id: str = MODULE_ID,
) -> dict[str, Any]:
    return with_canonical_hash(
        {
            "schema_version": SCHEMA_VERSION,
            "module_id": module_id,
            "tenant_id": tenant_id,
            "project_id": project_id,
            "trace_id": trace_id,
            "created_at": created_at,
            "runners": [runner.to_dict() for runner in RUNNER_DEFINITIONS],
        }
    )


__all__ = ["IDEMPOTENCY", "RETRY_GUIDANCE", "RUNNER_DEFINITIONS", "RunnerDefinition", "build_runner_maturity_report"]

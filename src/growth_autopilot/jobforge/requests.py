"""
growth-autopilot: JobForge job request builders

File: src/growth_autopilot/jobforge/requests.py
Last updated: 2026-10-19

Purpose
- Turn producer artifacts into JobForge job request envelopes.

Functional requirements
- Every request is dry-run only: ``auto_execute`` is always False and
  ``require_approval`` always True. Callers cannot override either.
- Each job type carries its runner cost cap as ``max_cost_usd``.
- Optional fields that are unset are omitted, never emitted as ``null``, so
  payload hashes only depend on values that were actually provided.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import timedelta
from typing import Any

from growth_autopilot.constants import (
    JOB_TYPE_CONTENT_DRAFT,
    JOB_TYPE_EXPERIMENT_PROPOSE,
    JOB_TYPE_EXPERIMENT_RUN,
    JOB_TYPE_PUBLISH_CONTENT,
    JOB_TYPE_SEO_SCAN,
    RUNNER_COST_CAPS_USD,
    TRIGGERED_BY,
)
from growth_autopilot.domain.ids import BATCH_ID_PREFIX, JOB_ID_PREFIX, IdFactory, generate_prefixed_id
from growth_autopilot.domain.timestamps import Clock, to_iso8601z, utc_now

DEFAULT_MAX_PAGES = 1000
DEFAULT_DROP_OFF_THRESHOLD = 0.2
DEFAULT_EXPERIMENT_DURATION_DAYS = 14
DEFAULT_TRAFFIC_ALLOCATION = 0.5
DRAFT_COST_WITHOUT_LLM_USD = 0.01

JobRequest = dict[str, Any]


def build_job_request(
    tenant_context: Mapping[str, str],
    job_type: str,
    payload: Mapping[str, object],
    *,
    priority: str = "normal",
    triggered_by: str = TRIGGERED_BY,
    correlation_id: str | None = None,
    related_audit_id: str | None = None,
    related_funnel_id: str | None = None,
    notes: str | None = None,
    deadline: str | None = None,
    max_cost_usd: float | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> JobRequest:
    """Assemble a job request envelope with the approval-gated constraints."""

    now = (clock or utc_now)()
    context = _compact(
        {
            "triggered_by": triggered_by,
            "correlation_id": correlation_id,
            "related_audit_id": related_audit_id,
            "related_funnel_id": related_funnel_id,
            "notes": notes,
        }
    )
    constraints = _compact(
        {
            "auto_execute": False,
            "require_approval": True,
            "deadline": deadline,
            "max_cost_usd": max_cost_usd,
        }
    )
    return {
        "tenant_id": tenant_context["tenant_id"],
        "project_id": tenant_context["project_id"],
        "id": (id_factory or generate_prefixed_id)(JOB_ID_PREFIX),
        "created_at": to_iso8601z(now),
        "job_type": job_type,
        "payload": _compact(dict(payload)),
        "priority": priority,
        "context": context,
        "constraints": constraints,
    }


def create_seo_scan_job(
    tenant_context: Mapping[str, str],
    source_path: str,
    source_type: str,
    priority: str = "medium",
    *,
    related_audit_id: str | None = None,
    notes: str | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> JobRequest:
    return build_job_request(
        tenant_context,
        JOB_TYPE_SEO_SCAN,
        {
            "source_path": source_path,
            "source_type": source_type,
            "check_external_links": False,
            "max_pages": DEFAULT_MAX_PAGES,
        },
        priority=priority,
        related_audit_id=related_audit_id,
        notes=notes,
        max_cost_usd=RUNNER_COST_CAPS_USD[JOB_TYPE_SEO_SCAN],
        clock=clock,
        id_factory=id_factory,
    )


def create_experiment_proposal_job(
    tenant_context: Mapping[str, str],
    funnel_metrics: Mapping[str, Any],
    priority: str = "medium",
    *,
    max_proposals: int = 3,
    notes: str | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> JobRequest:
    return build_job_request(
        tenant_context,
        JOB_TYPE_EXPERIMENT_PROPOSE,
        {
            "funnel_metrics_id": funnel_metrics["id"],
            "funnel_name": funnel_metrics["funnel_name"],
            "max_proposals": max_proposals,
            "drop_off_threshold": DEFAULT_DROP_OFF_THRESHOLD,
        },
        priority=priority,
        related_funnel_id=funnel_metrics["id"],
        notes=notes,
        max_cost_usd=RUNNER_COST_CAPS_USD[JOB_TYPE_EXPERIMENT_PROPOSE],
        clock=clock,
        id_factory=id_factory,
    )


def create_content_draft_job(
    tenant_context: Mapping[str, str],
    profile_name: str,
    content_type: str,
    goal: str,
    priority: str = "medium",
    *,
    keywords: Sequence[str] | None = None,
    features: Sequence[str] | None = None,
    target_audience: str | None = None,
    use_llm: bool = False,
    llm_provider: str | None = None,
    variant_count: int = 1,
    notes: str | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> JobRequest:
    max_cost = RUNNER_COST_CAPS_USD[JOB_TYPE_CONTENT_DRAFT] if use_llm else DRAFT_COST_WITHOUT_LLM_USD
    return build_job_request(
        tenant_context,
        JOB_TYPE_CONTENT_DRAFT,
        {
            "profile_name": profile_name,
            "content_type": content_type,
            "goal": goal,
            "keywords": list(keywords or []),
            "features": list(features or []),
            "target_audience": target_audience,
            "use_llm": use_llm,
            "llm_provider": llm_provider,
            "variant_count": variant_count,
        },
        priority=priority,
        notes=notes,
        max_cost_usd=max_cost,
        clock=clock,
        id_factory=id_factory,
    )


def create_experiment_run_job(
    tenant_context: Mapping[str, str],
    proposal: Mapping[str, Any],
    priority: str = "medium",
    *,
    duration_days: int = DEFAULT_EXPERIMENT_DURATION_DAYS,
    traffic_allocation: float = DEFAULT_TRAFFIC_ALLOCATION,
    notes: str | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> JobRequest:
    """Action job: launching an experiment changes what real users see."""

    now = (clock or utc_now)()
    impact = proposal["expected_impact"]
    return build_job_request(
        tenant_context,
        JOB_TYPE_EXPERIMENT_RUN,
        {
            "proposal_id": proposal["id"],
            "experiment_title": proposal["title"],
            "hypothesis": proposal["hypothesis"],
            "target_step": proposal["target_step"],
            "variants": proposal["suggested_variants"],
            "duration_days": duration_days,
            "traffic_allocation": traffic_allocation,
            "success_metric": impact["metric"],
            "minimum_detectable_effect": impact["lift_percent"],
        },
        priority=priority,
        related_funnel_id=proposal["funnel_metrics_id"],
        notes=notes if notes is not None else f"Run experiment: {proposal['title']}",
        deadline=to_iso8601z(now + timedelta(days=duration_days)),
        max_cost_usd=RUNNER_COST_CAPS_USD[JOB_TYPE_EXPERIMENT_RUN],
        clock=lambda: now,
        id_factory=id_factory,
    )


def create_publish_content_job(
    tenant_context: Mapping[str, str],
    content_draft: Mapping[str, Any],
    destination: str,
    priority: str = "low",
    *,
    publish_at: str | None = None,
    notes: str | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> JobRequest:
    """Action job: publishing pushes drafted copy to a live destination."""

    content_type = content_draft["content_type"]
    return build_job_request(
        tenant_context,
        JOB_TYPE_PUBLISH_CONTENT,
        {
            "draft_id": content_draft["id"],
            "content_type": content_type,
            "destination": destination,
            "content": content_draft["draft"],
            "seo_metadata": content_draft.get("seo_metadata"),
        },
        priority=priority,
        notes=notes if notes is not None else f"Publish {content_type} to {destination}",
        deadline=publish_at,
        max_cost_usd=RUNNER_COST_CAPS_USD[JOB_TYPE_PUBLISH_CONTENT],
        clock=clock,
        id_factory=id_factory,
    )


def serialize_job_request(job: Mapping[str, Any]) -> str:
    return json.dumps(job, indent=2, ensure_ascii=False)


def create_job_batch(
    jobs: Sequence[JobRequest],
    tenant_context: Mapping[str, str],
    *,
    id_factory: IdFactory | None = None,
) -> dict[str, Any]:
    return {
        "batch_id": (id_factory or generate_prefixed_id)(BATCH_ID_PREFIX),
        "tenant_context": {
            "tenant_id": tenant_context["tenant_id"],
            "project_id": tenant_context["project_id"],
        },
        "jobs": list(jobs),
    }


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


__all__ = [
    "DEFAULT_MAX_PAGES",
    "JobRequest",
    "build_job_request",
    "create_content_draft_job",
    "create_experiment_proposal_job",
    "create_experiment_run_job",
    "create_job_batch",
    "create_publish_content_job",
    "create_seo_scan_job",
    "serialize_job_request",
]

"""
growth-autopilot: unit tests for JobForge job request builders

File: tests/unit/jobforge/test_requests.py
Last updated: 2026-10-19

Purpose
- Validate approval-gated constraints, cost caps and payload compaction for
  every job type.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from growth_autopilot.contracts.envelopes import parse_job_request
from growth_autopilot.jobforge.requests import (
    build_job_request,
    create_content_draft_job,
    create_experiment_proposal_job,
    create_experiment_run_job,
    create_job_batch,
    create_publish_content_job,
    create_seo_scan_job,
    serialize_job_request,
)

if TYPE_CHECKING:
    from growth_autopilot.domain.ids import IdFactory
    from growth_autopilot.domain.timestamps import Clock

PROPOSAL: dict[str, Any] = {
    "id": "exp-1",
    "title": "Signup Form Optimization",
    "hypothesis": "Fewer fields convert better",
    "funnel_metrics_id": "funnel-1",
    "target_step": "signup_start",
    "suggested_variants": [{"name": "Control", "description": "Current", "changes": ["No changes"]}],
    "expected_impact": {"metric": "conversion_rate", "lift_percent": 15, "confidence": "medium", "rationale": "r"},
}


@pytest.mark.unit
def test_build_job_request_is_approval_gated(
    tenant_context: dict[str, str], clock: Clock, id_factory: IdFactory
) -> None:
    job = build_job_request(tenant_context, "autopilot.growth.seo_scan", {"a": 1, "b": None}, clock=clock, id_factory=id_factory)

    assert job == {
        "tenant_id": "acme",
        "project_id": "web",
        "id": "job-1",
        "created_at": "2024-03-01T12:00:00.000Z",
        "job_type": "autopilot.growth.seo_scan",
        "payload": {"a": 1},
        "priority": "normal",
        "context": {"triggered_by": "growth-autopilot"},
        "constraints": {"auto_execute": False, "require_approval": True},
    }


@pytest.mark.unit
def test_seo_scan_job(tenant_context: dict[str, str]) -> None:
    job = create_seo_scan_job(tenant_context, "./site", "html_export", related_audit_id="audit-1", notes="n")

    assert parse_job_request(job)["job_type"] == "autopilot.growth.seo_scan"
    assert job["payload"] == {
        "source_path": "./site",
        "source_type": "html_export",
        "check_external_links": False,
        "max_pages": 1000,
    }
    assert job["priority"] == "medium"
    assert job["context"] == {"triggered_by": "growth-autopilot", "related_audit_id": "audit-1", "notes": "n"}
    assert job["constraints"]["max_cost_usd"] == 0.5


@pytest.mark.unit
def test_experiment_proposal_job(tenant_context: dict[str, str]) -> None:
    job = create_experiment_proposal_job(tenant_context, {"id": "funnel-1", "funnel_name": "signup"}, max_proposals=2)

    assert job["payload"] == {
        "funnel_metrics_id": "funnel-1",
        "funnel_name": "signup",
        "max_proposals": 2,
        "drop_off_threshold": 0.2,
    }
    assert job["context"]["related_funnel_id"] == "funnel-1"
    assert job["constraints"]["max_cost_usd"] == 0.2


@pytest.mark.unit
@pytest.mark.parametrize(("use_llm", "cost"), [(False, 0.01), (True, 1.0)])
def test_content_draft_job_cost_depends_on_llm(tenant_context: dict[str, str], use_llm: bool, cost: float) -> None:
    job = create_content_draft_job(tenant_context, "base", "landing_page", "Grow", use_llm=use_llm)

    assert job["constraints"]["max_cost_usd"] == cost
    assert job["payload"]["use_llm"] is use_llm
    assert "target_audience" not in job["payload"]
    assert "llm_provider" not in job["payload"]
    assert job["payload"]["keywords"] == []


@pytest.mark.unit
def test_experiment_run_job_sets_deadline(tenant_context: dict[str, str], clock: Clock) -> None:
    job = create_experiment_run_job(tenant_context, PROPOSAL, clock=clock)

    assert parse_job_request(job)
    assert job["constraints"] == {
        "auto_execute": False,
        "require_approval": True,
        "deadline": "2024-03-15T12:00:00.000Z",
        "max_cost_usd": 5.0,
    }
    assert job["payload"]["minimum_detectable_effect"] == 15
    assert job["payload"]["traffic_allocation"] == 0.5
    assert job["context"]["notes"] == "Run experiment: Signup Form Optimization"


@pytest.mark.unit
def test_publish_content_job(tenant_context: dict[str, str]) -> None:
    draft = {"id": "draft-1", "content_type": "blog_post", "draft": {"body": "Hello"}}

    job = create_publish_content_job(tenant_context, draft, "cms", publish_at="2024-04-01T00:00:00.000Z")

    assert job["priority"] == "low"
    assert job["payload"] == {
        "draft_id": "draft-1",
        "content_type": "blog_post",
        "destination": "cms",
        "content": {"body": "Hello"},
    }
    assert job["constraints"]["deadline"] == "2024-04-01T00:00:00.000Z"
    assert job["context"]["notes"] == "Publish blog_post to cms"


@pytest.mark.unit
def test_serialize_job_request_round_trips(tenant_context: dict[str, str]) -> None:
    job = create_seo_scan_job(tenant_context, "./site", "html_export")

    text = serialize_job_request(job)

    assert text.startswith('{\n  "tenant_id"')
    assert json.loads(text) == job


@pytest.mark.unit
def test_job_batch(tenant_context: dict[str, str], id_factory: IdFactory) -> None:
    jobs = [create_seo_scan_job(tenant_context, "./site", "html_export", id_factory=id_factory)]

    batch = create_job_batch(jobs, tenant_context, id_factory=id_factory)

    assert batch["batch_id"] == "batch-1"
    assert batch["tenant_context"] == {"tenant_id": "acme", "project_id": "web"}
    assert batch["jobs"][0]["id"] == "job-1"

"""
growth-autopilot: unit tests for envelope contracts

File: tests/unit/contracts/test_envelopes.py
Last updated: 2026-10-19

Purpose
- Validate defaults, issue accumulation and strict tenant identifiers.
"""

from __future__ import annotations

from typing import Any

import pytest

from growth_autopilot.constants import SCHEMA_VERSION
from growth_autopilot.contracts.envelopes import (
    parse_job_request,
    parse_tenant_context,
    validate_event_envelope,
    validate_evidence_link,
    validate_finding,
    validate_job_request,
    validate_run_manifest,
    validate_tenant_context,
)
from growth_autopilot.errors import ValidationError


def _event(**overrides: Any) -> dict[str, Any]:
    event: dict[str, Any] = {
        "event_id": "evt-1",
        "event_name": "page_view",
        "tenant_id": "acme",
        "project_id": "web",
        "occurred_at": "2024-01-01T10:00:00.000Z",
    }
    event.update(overrides)
    return event


def _job_request(**overrides: Any) -> dict[str, Any]:
    request: dict[str, Any] = {
        "tenant_id": "acme",
        "project_id": "web",
        "id": "job-1",
        "created_at": "2024-01-01T00:00:00.000Z",
        "job_type": "autopilot.growth.seo_scan",
        "payload": {"source_path": "./site"},
        "constraints": {"auto_execute": False, "require_approval": True},
    }
    request.update(overrides)
    return request


@pytest.mark.unit
def test_event_envelope_defaults_schema_version() -> None:
    result = validate_event_envelope(_event())

    assert result.success
    assert result.value is not None
    assert result.value["schema_version"] == SCHEMA_VERSION


@pytest.mark.unit
def test_event_envelope_drops_unknown_keys() -> None:
    result = validate_event_envelope(_event(extra="ignored"))

    assert result.value is not None
    assert "extra" not in result.value


@pytest.mark.unit
def test_event_envelope_collects_every_issue() -> None:
    result = validate_event_envelope({"event_id": "", "occurred_at": "yesterday"})

    paths = {issue.path for issue in result.issues}
    assert not result.success
    assert {"event_id", "event_name", "tenant_id", "project_id", "occurred_at"} <= paths


@pytest.mark.unit
def test_run_manifest_defaults_outputs() -> None:
    result = validate_run_manifest(
        {"manifest_id": "m-1", "tenant_id": "acme", "project_id": "web", "created_at": "2024-01-01T00:00:00Z"}
    )

    assert result.value is not None
    assert result.value["outputs"] == []


@pytest.mark.unit
def test_evidence_value_accepts_scalars_only() -> None:
    base = {"type": "calculation", "path": "steps", "description": "rate"}

    assert validate_evidence_link({**base, "value": 0.5}).success
    assert validate_evidence_link({**base, "value": "x"}).success
    assert not validate_evidence_link({**base, "value": [1]}).success


@pytest.mark.unit
def test_finding_severity_is_closed() -> None:
    result = validate_finding({"id": "f", "title": "t", "description": "d", "severity": "urgent"})

    assert not result.success
    assert result.issues[0].path == "severity"


@pytest.mark.unit
def test_job_request_context_defaults_to_triggered_by() -> None:
    parsed = parse_job_request(_job_request())

    assert parsed["context"] == {"triggered_by": "growth-autopilot"}


@pytest.mark.unit
def test_job_request_requires_constraints() -> None:
    request = _job_request()
    del request["constraints"]

    result = validate_job_request(request)

    assert [issue.path for issue in result.issues] == ["constraints"]


@pytest.mark.unit
def test_negative_cost_cap_is_rejected() -> None:
    request = _job_request(constraints={"auto_execute": False, "require_approval": True, "max_cost_usd": -1})

    assert not validate_job_request(request).success


@pytest.mark.unit
def test_tenant_context_strict_mode_restricts_characters() -> None:
    assert validate_tenant_context({"tenant_id": "Acme Corp", "project_id": "web"}).success
    assert not validate_tenant_context({"tenant_id": "Acme Corp", "project_id": "web"}, strict=True).success


@pytest.mark.unit
def test_parse_tenant_context_raises_with_issues() -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_tenant_context({"tenant_id": ""})

    assert {issue.path for issue in excinfo.value.issues} == {"tenant_id", "project_id"}

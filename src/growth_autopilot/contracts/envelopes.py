"""
growth-autopilot: runnerless envelope contracts

File: src/growth_autopilot/contracts/envelopes.py
Last updated: 2026-10-19

Purpose
- Schemas for the artifacts exchanged with JobForge and the surrounding
  control plane: tenant context, event and run-manifest envelopes, evidence,
  findings, recommendations, job requests, request bundles and reports.

Functional requirements
- ``schema_version`` defaults to the pinned version on inbound envelopes.
- Job request ``context`` defaults to ``{"triggered_by": "growth-autopilot"}``.
- Every ``validate_*`` returns a ``ParseResult``; every ``parse_*`` raises
  ``ValidationError`` listing all issues.
"""

from __future__ import annotations

import re
from typing import Any, Final

from growth_autopilot.constants import (
    CANONICALIZATION,
    HASH_ALGORITHM,
    PRIORITIES,
    SCHEMA_VERSION,
    TRIGGERED_BY,
)
from growth_autopilot.contracts.fields import (
    ParseResult,
    Parser,
    any_of,
    array,
    boolean,
    datetime_string,
    defaulted,
    enum,
    literal,
    non_empty_string,
    number,
    obj,
    optional,
    record,
    required,
    run,
    run_or_raise,
    string,
)

EVIDENCE_TYPES: Final[tuple[str, ...]] = (
    "html_element",
    "json_path",
    "url",
    "event_count",
    "calculation",
    "assumption",
)
SEVERITIES: Final[tuple[str, ...]] = ("critical", "warning", "info", "opportunity")
JOB_TYPE_STATUSES: Final[tuple[str, ...]] = ("available", "unavailable")

_STRICT_TENANT_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9_-]+$")


def _hash_fields() -> dict[str, Any]:
    return {
        "canonical_hash": required(non_empty_string()),
        "canonical_hash_algorithm": required(literal(HASH_ALGORITHM)),
        "canonicalization": required(literal(CANONICALIZATION)),
    }


TENANT_CONTEXT: Final[Parser] = obj(
    {
        "tenant_id": required(non_empty_string()),
        "project_id": required(non_empty_string()),
    }
)

STRICT_TENANT_CONTEXT: Final[Parser] = obj(
    {
        "tenant_id": required(string(min_length=1, pattern=_STRICT_TENANT_RE)),
        "project_id": required(string(min_length=1, pattern=_STRICT_TENANT_RE)),
    }
)

EVENT_ENVELOPE: Final[Parser] = obj(
    {
        "schema_version": defaulted(non_empty_string(), SCHEMA_VERSION),
        "event_id": required(non_empty_string()),
        "event_name": required(non_empty_string()),
        "tenant_id": required(non_empty_string()),
        "project_id": required(non_empty_string()),
        "occurred_at": required(datetime_string()),
        "trace_id": optional(non_empty_string()),
        "source": optional(string()),
        "payload": optional(record()),
        "metadata": optional(record()),
    }
)

RUN_OUTPUT: Final[Parser] = obj(
    {
        "id": required(non_empty_string()),
        "type": required(non_empty_string()),
        "uri": optional(string()),
        "checksum": optional(string()),
        "metadata": optional(record()),
    }
)

RUN_MANIFEST: Final[Parser] = obj(
    {
        "schema_version": defaulted(non_empty_string(), SCHEMA_VERSION),
        "manifest_id": required(non_empty_string()),
        "tenant_id": required(non_empty_string()),
        "project_id": required(non_empty_string()),
        "trace_id": optional(non_empty_string()),
        "created_at": required(datetime_string()),
        "outputs": defaulted(array(RUN_OUTPUT), []),
        "metadata": optional(record()),
    }
)

EVIDENCE_LINK: Final[Parser] = obj(
    {
        "type": required(enum(*EVIDENCE_TYPES)),
        "path": required(string()),
        "description": required(string()),
        "value": optional(any_of(string(), number(), boolean(), description="string, number or boolean")),
    }
)

FINDING: Final[Parser] = obj(
    {
        "id": required(non_empty_string()),
        "title": required(non_empty_string()),
        "description": required(non_empty_string()),
        "severity": required(enum(*SEVERITIES)),
        "evidence": optional(array(EVIDENCE_LINK)),
        "related_job_types": optional(array(non_empty_string())),
    }
)

RECOMMENDATION: Final[Parser] = obj(
    {
        "id": required(non_empty_string()),
        "title": required(non_empty_string()),
        "description": required(non_empty_string()),
        "job_type": optional(non_empty_string()),
        "requires_policy_token": optional(boolean()),
    }
)

REPORT_INPUTS: Final[Parser] = obj(
    {
        "event_count": required(number(integer=True, minimum=0)),
        "run_manifest_count": required(number(integer=True, minimum=0)),
        "notes": optional(array(string())),
    }
)

REPORT_ENVELOPE: Final[Parser] = obj(
    {
        "schema_version": required(non_empty_string()),
        "module_id": required(non_empty_string()),
        "report_id": required(non_empty_string()),
        "tenant_id": required(non_empty_string()),
        "project_id": required(non_empty_string()),
        "trace_id": required(non_empty_string()),
        "created_at": required(datetime_string()),
        "report_type": required(non_empty_string()),
        "summary": required(record()),
        "findings": required(array(FINDING)),
        "recommendations": required(array(RECOMMENDATION)),
        "inputs": optional(REPORT_INPUTS),
        **_hash_fields(),
    }
)

JOB_CONTEXT: Final[Parser] = obj(
    {
        "triggered_by": required(non_empty_string()),
        "correlation_id": optional(string()),
        "related_audit_id": optional(string()),
        "related_funnel_id": optional(string()),
        "notes": optional(string()),
        "trace_id": optional(string()),
    }
)

JOB_CONSTRAINTS: Final[Parser] = obj(
    {
        "auto_execute": required(boolean()),
        "require_approval": required(boolean()),
        "deadline": optional(datetime_string()),
        "max_cost_usd": optional(number(minimum=0)),
    }
)

JOB_REQUEST: Final[Parser] = obj(
    {
        "schema_version": optional(non_empty_string()),
        "tenant_id": required(non_empty_string()),
        "project_id": required(non_empty_string()),
        "id": required(non_empty_string()),
        "created_at": required(datetime_string()),
        "job_type": required(non_empty_string()),
        "payload": required(record()),
        "priority": optional(enum(*PRIORITIES)),
        "context": defaulted(JOB_CONTEXT, {"triggered_by": TRIGGERED_BY}),
        "constraints": required(JOB_CONSTRAINTS),
    }
)

BUNDLE_ENTRY: Final[Parser] = obj(
    {
        "idempotency_key": required(non_empty_string()),
        "request": required(JOB_REQUEST),
        "job_type_status": optional(enum(*JOB_TYPE_STATUSES)),
        "requires_policy_token": optional(boolean()),
    }
)

JOB_REQUEST_BUNDLE: Final[Parser] = obj(
    {
        "schema_version": defaulted(non_empty_string(), SCHEMA_VERSION),
        "module_id": required(non_empty_string()),
        "bundle_id": required(non_empty_string()),
        "tenant_id": required(non_empty_string()),
        "project_id": required(non_empty_string()),
        "trace_id": required(non_empty_string()),
        "created_at": required(datetime_string()),
        "requests": required(array(BUNDLE_ENTRY)),
        **_hash_fields(),
    }
)


def validate_tenant_context(value: object, *, strict: bool = False) -> ParseResult[dict[str, Any]]:
    return run(STRICT_TENANT_CONTEXT if strict else TENANT_CONTEXT, value)


def parse_tenant_context(value: object, *, strict: bool = False) -> dict[str, Any]:
    return run_or_raise(STRICT_TENANT_CONTEXT if strict else TENANT_CONTEXT, value, label="tenant context")


def validate_event_envelope(value: object) -> ParseResult[dict[str, Any]]:
    return run(EVENT_ENVELOPE, value)


def validate_run_manifest(value: object) -> ParseResult[dict[str, Any]]:
    return run(RUN_MANIFEST, value)


def validate_evidence_link(value: object) -> ParseResult[dict[str, Any]]:
    return run(EVIDENCE_LINK, value)


def validate_finding(value: object) -> ParseResult[dict[str, Any]]:
    return run(FINDING, value)


def validate_report(value: object) -> ParseResult[dict[str, Any]]:
    return run(REPORT_ENVELOPE, value)


def validate_job_request(value: object) -> ParseResult[dict[str, Any]]:
    return run(JOB_REQUEST, value)


def parse_job_request(value: object) -> dict[str, Any]:
    return run_or_raise(JOB_REQUEST, value, label="job request")


def validate_job_request_bundle(value: object) -> ParseResult[dict[str, Any]]:
    return run(JOB_REQUEST_BUNDLE, value)


__all__ = [
    "EVIDENCE_TYPES",
    "JOB_TYPE_STATUSES",
    "SEVERITIES",
    "parse_job_request",
    "parse_tenant_context",
    "validate_event_envelope",
    "validate_evidence_link",
    "validate_finding",
    "validate_job_request",
    "validate_job_request_bundle",
    "validate_report",
    "validate_run_manifest",
    "validate_tenant_context",
]

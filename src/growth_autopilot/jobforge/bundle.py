"""
growth-autopilot: JobForge request bundles

File: src/growth_autopilot/jobforge/bundle.py
Last updated: 2026-10-19

Purpose
- Derive idempotency keys, build sorted bundle entries and re-verify the
  cross-field invariants of a bundle produced anywhere.

Functional requirements
- Idempotency keys hash only tenant, project, job type and payload, so a
  retried submission under another trace id dedupes downstream.
- Entries are ordered by (job_type, idempotency_key).
- ``validate_bundle`` accumulates every violation and never raises for bad data.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from growth_autopilot.constants import ACTION_JOB_TYPES, KNOWN_JOB_TYPES, SCHEMA_VERSION
from growth_autopilot.contracts.envelopes import validate_job_request_bundle
from growth_autopilot.utils.canonical import stable_hash


@dataclass(frozen=True, slots=True)
class BundleValidationResult:
    success: bool
    errors: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"success": False, "errors": list(self.errors)}


def build_idempotency_key(job: Mapping[str, Any]) -> str:
    return stable_hash(
        {
            "tenant_id": job["tenant_id"],
            "project_id": job["project_id"],
            "job_type": job["job_type"],
            "payload": job["payload"],
        }
    )


def build_bundle_entry(job: Mapping[str, Any]) -> dict[str, Any]:
    job_type = job["job_type"]
    return {
        "idempotency_key": build_idempotency_key(job),
        "request": dict(job),
        "job_type_status": "available" if job_type in KNOWN_JOB_TYPES else "unavailable",
        "requires_policy_token": job_type in ACTION_JOB_TYPES,
    }


def sort_bundle_entries(entries: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return sorted(
        (dict(entry) for entry in entries),
        key=lambda entry: (entry["request"]["job_type"], entry["idempotency_key"]),
    )


def build_bundle_entries(jobs: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return sort_bundle_entries(build_bundle_entry(job) for job in jobs)


def validate_bundle(candidate: object) -> BundleValidationResult:
    """Check a bundle's structure, pinned version, tenancy and policy gates.

    Structural failures are reported as error strings (one per schema issue)
    and stop further checks; every later violation is collected.
    """

    parsed = validate_job_request_bundle(candidate)
    if not parsed.success or parsed.value is None:
        return BundleValidationResult(success=False, errors=tuple(parsed.messages))

    bundle = parsed.value
    errors: list[str] = []
    if bundle["schema_version"] != SCHEMA_VERSION:
        errors.append(f"Unsupported schema_version: {bundle['schema_version']}")

    for entry in bundle["requests"]:
        request = entry["request"]
        if request["tenant_id"] != bundle["tenant_id"] or request["project_id"] != bundle["project_id"]:
            errors.append("Request tenant_id/project_id must match bundle.")
        if not entry.get("idempotency_key"):
            errors.append("Request idempotency_key is required.")
        if request["job_type"] not in KNOWN_JOB_TYPES and entry.get("job_type_status") != "unavailable":
            errors.append("Unknown job_type must be marked as unavailable.")
        if request["job_type"] in ACTION_JOB_TYPES and entry.get("requires_policy_token") is not True:
            errors.append("Action job_type requires_policy_token=true.")

    if errors:
        return BundleValidationResult(success=False, errors=tuple(errors))
    return BundleValidationResult(success=True)


__all__ = [
    "BundleValidationResult",
    "build_bundle_entries",
    "build_bundle_entry",
    "build_idempotency_key",
    "sort_bundle_entries",
    "validate_bundle",
]

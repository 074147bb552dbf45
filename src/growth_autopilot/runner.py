"""
growth-autopilot: runner contract for control-plane integration

File: src/growth_autopilot/runner.py
Last updated: 2026-10-19

Purpose
- Put the analysis pipeline behind a runner contract: identity, version,
  capabilities and blast radius, plus ``execute`` returning the report,
  request bundle, runner maturity report and a hashed evidence packet.

Functional requirements
- ``execute`` validates its input and always analyzes in stable-output mode.
- Failures come back as a redacted error summary on the result, never raised.
- The evidence packet's canonical hash covers every other packet field.
- Running the contract never executes a job; bundles stay dry-run requests.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Final, Literal

import structlog

from growth_autopilot import __version__
from growth_autopilot.constants import (
    ACTION_JOB_TYPES,
    JOB_TYPE_CONTENT_DRAFT,
    JOB_TYPE_EXPERIMENT_PROPOSE,
    JOB_TYPE_EXPERIMENT_RUN,
    JOB_TYPE_PUBLISH_CONTENT,
    JOB_TYPE_SEO_SCAN,
    SCHEMA_VERSION,
)
from growth_autopilot.content.profiles import ProfileLoader
from growth_autopilot.contracts.fields import array, non_empty_string, obj, optional, record, required, run_or_raise
from growth_autopilot.domain.ids import PACKET_ID_PREFIX, IdFactory, generate_prefixed_id
from growth_autopilot.domain.timestamps import Clock, now_iso8601z
from growth_autopilot.errors import ExitCode, classify_error, to_error_envelope
from growth_autopilot.jobforge.analyze import AnalyzeOptions, AnalyzeResult, analyze
from growth_autopilot.utils.canonical import with_canonical_hash

RUNNER_ID: Final[str] = "growth-autopilot"
RUNNER_CAPABILITIES: Final[tuple[str, ...]] = (
    "seo_analysis",
    "funnel_analysis",
    "experiment_proposal",
    "content_drafting",
    "jobforge_integration",
)
RUNNER_JOB_TYPES: Final[tuple[str, ...]] = (
    JOB_TYPE_SEO_SCAN,
    JOB_TYPE_EXPERIMENT_PROPOSE,
    JOB_TYPE_CONTENT_DRAFT,
    JOB_TYPE_EXPERIMENT_RUN,
    JOB_TYPE_PUBLISH_CONTENT,
)

BlastRadius = Literal["low", "medium", "high"]
RunnerStatus = Literal["success", "degraded", "error"]

_RUNNER_INPUT = obj(
    {
        "tenant_id": required(non_empty_string()),
        "project_id": required(non_empty_string()),
        "trace_id": required(non_empty_string()),
        "inputs": required(record()),
        "capabilities": optional(array(non_empty_string())),
    }
)


def parse_runner_input(value: object) -> dict[str, Any]:
    """Validate a runner invocation, raising ``ValidationError`` with every issue."""
    parsed: dict[str, Any] = run_or_raise(_RUNNER_INPUT, value, label="runner input")
    return parsed


@dataclass(frozen=True, slots=True)
class RunnerResult:
    status: RunnerStatus
    evidence: tuple[dict[str, Any], ...]
    output: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
    exit_code: ExitCode = field(default=ExitCode.SUCCESS, compare=False)

    @property
    def success(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status, "evidence": list(self.evidence)}
        if self.output is not None:
            payload["output"] = self.output
        if self.error is not None:
            payload["error"] = self.error
        return payload


class GrowthAutopilotRunner:
    """Runs one stable analysis per ``execute`` call and packages its evidence."""

    runner_id: ClassVar[str] = RUNNER_ID
    version: ClassVar[str] = __version__
    capabilities: ClassVar[tuple[str, ...]] = RUNNER_CAPABILITIES
    blast_radius: ClassVar[BlastRadius] = "low"

    def __init__(
        self,
        *,
        profile_loader: ProfileLoader | None = None,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
        logger: Any | None = None,
    ) -> None:
        self._profile_loader = profile_loader
        self._clock = clock
        self._new_id = id_factory or generate_prefixed_id
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def execute(self, runner_input: object) -> RunnerResult:
        evidence: list[dict[str, Any]] = []
        decisions: dict[str, Any] = {}
        try:
            validated = parse_runner_input(runner_input)
            evidence.append(self._evidence("validation", "input", "Input validation successful"))
            decisions["analyze_inputs"] = validated["inputs"]
            result = analyze(
                validated["inputs"],
                AnalyzeOptions(
                    tenant_id=validated["tenant_id"],
                    project_id=validated["project_id"],
                    trace_id=validated["trace_id"],
                    stable_output=True,
                    profile_loader=self._profile_loader,
                    logger=self._logger,
                ),
            )
        except Exception as exc:  # noqa: BLE001 - runner boundary reports failures as data.
            envelope = to_error_envelope(exc)
            evidence.append(self._evidence("error", "execution", f"Execution failed: {envelope.code}"))
            self._logger.warning(
                "runner_execution_failed",
                runner_id=self.runner_id,
                code=envelope.code,
                retryable=envelope.retryable,
            )
            return RunnerResult(
                status="error",
                evidence=tuple(evidence),
                error={"code": envelope.code, "message": envelope.user_message, "retryable": envelope.retryable},
                exit_code=classify_error(exc),
            )

        decisions["analysis_result"] = {
            "report_generated": True,
            "bundle_generated": True,
            "maturity_report_generated": True,
        }
        evidence.append(
            self._evidence("execution", "analyze", "Executed growth analysis and generated reports and job bundles")
        )
        packet = self.build_evidence_packet(validated, decisions, result, evidence)
        self._logger.info(
            "runner_execution_completed",
            runner_id=self.runner_id,
            request_count=len(result.bundle["requests"]),
            packet_hash=packet["canonical_hash"],
        )
        return RunnerResult(
            status="success",
            evidence=tuple(evidence),
            output={
                "report": result.report,
                "bundle": result.bundle,
                "maturity_report": result.runner_maturity,
                "evidence_packet": packet,
            },
        )

    def build_evidence_packet(
        self,
        runner_input: Mapping[str, Any],
        decisions: Mapping[str, Any],
        result: AnalyzeResult,
        evidence: list[dict[str, Any]],
    ) -> dict[str, Any]:
        return with_canonical_hash(
            {
                "schema_version": SCHEMA_VERSION,
                "packet_id": self._new_id(PACKET_ID_PREFIX),
                "runner_id": self.runner_id,
                "runner_version": self.version,
                "tenant_id": runner_input["tenant_id"],
                "project_id": runner_input["project_id"],
                "trace_id": runner_input["trace_id"],
                "created_at": now_iso8601z(self._clock),
                "inputs": dict(runner_input),
                "decisions": dict(decisions),
                "outputs": {
                    "report": result.report,
                    "bundle": result.bundle,
                    "maturity_report": result.runner_maturity,
                },
                "evidence_links": [
                    {key: item[key] for key in ("type", "path", "description")}
                    for item in evidence
                ],
            }
        )

    def _evidence(self, kind: str, path: str, description: str) -> dict[str, Any]:
        return {"type": kind, "path": path, "description": description, "timestamp": now_iso8601z(self._clock)}


def capability_metadata() -> dict[str, Any]:
    """What the runner can request, and which of those requests need a policy token."""

    return {
        "runner_id": RUNNER_ID,
        "version": __version__,
        "capabilities": list(RUNNER_CAPABILITIES),
        "blast_radius": GrowthAutopilotRunner.blast_radius,
        "job_types": [
            {"job_type": job_type, "requires_policy_token": job_type in ACTION_JOB_TYPES}
            for job_type in RUNNER_JOB_TYPES
        ],
    }


def execute(runner_input: object, **options: Any) -> RunnerResult:
    """One-shot ``GrowthAutopilotRunner(**options).execute(runner_input)``."""
    return GrowthAutopilotRunner(**options).execute(runner_input)


__all__ = [
    "RUNNER_CAPABILITIES",
    "RUNNER_ID",
    "RUNNER_JOB_TYPES",
    "GrowthAutopilotRunner",
    "RunnerResult",
    "capability_metadata",
    "execute",
    "parse_runner_input",
]

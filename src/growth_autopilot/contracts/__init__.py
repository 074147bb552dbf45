"""Schema layer: every artifact is validated here at the boundary."""

from growth_autopilot.contracts.envelopes import (
    parse_job_request,
    parse_tenant_context,
    validate_job_request,
    validate_job_request_bundle,
    validate_report,
    validate_tenant_context,
)
from growth_autopilot.contracts.fields import ParseResult
from growth_autopilot.contracts.growth import (
    parse_funnel_metrics,
    parse_seo_audit,
    validate_content_draft,
    validate_experiment_proposal,
    validate_funnel_metrics,
    validate_growth_profile,
    validate_seo_audit,
)
from growth_autopilot.contracts.inputs import parse_analyze_inputs, validate_analyze_inputs

__all__ = [
    "ParseResult",
    "parse_analyze_inputs",
    "parse_funnel_metrics",
    "parse_job_request",
    "parse_seo_audit",
    "parse_tenant_context",
    "validate_analyze_inputs",
    "validate_content_draft",
    "validate_experiment_proposal",
    "validate_funnel_metrics",
    "validate_growth_profile",
    "validate_job_request",
    "validate_job_request_bundle",
    "validate_report",
    "validate_seo_audit",
    "validate_tenant_context",
]

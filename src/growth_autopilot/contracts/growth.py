"""Domain artifact schemas: SEO audits, funnel metrics, experiment proposals,
content drafts and growth profiles."""

from __future__ import annotations

from typing import Any, Final

from growth_autopilot.contracts.envelopes import EVIDENCE_LINK, SEVERITIES
from growth_autopilot.contracts.fields import (
    ParseResult,
    Parser,
    array,
    boolean,
    datetime_string,
    enum,
    nullable,
    number,
    obj,
    optional,
    required,
    run,
    run_or_raise,
    string,
)

SEO_CATEGORIES: Final[tuple[str, ...]] = (
    "title",
    "meta_description",
    "og_tags",
    "canonical",
    "broken_link",
    "sitemap",
    "robots",
    "performance_hint",
    "structure",
)
SEO_SOURCE_TYPES: Final[tuple[str, ...]] = ("nextjs_routes", "html_export", "sitemap_url")
EXPERIMENT_TYPES: Final[tuple[str, ...]] = (
    "ab_test",
    "multivariate",
    "feature_flag",
    "content_change",
    "flow_change",
)
EFFORT_LEVELS: Final[tuple[str, ...]] = ("small", "medium", "large")
CONFIDENCE_LEVELS: Final[tuple[str, ...]] = ("low", "medium", "high")
CONTENT_TYPES: Final[tuple[str, ...]] = (
    "landing_page",
    "onboarding_email",
    "changelog_note",
    "blog_post",
    "meta_description",
    "title_tag",
    "og_copy",
    "ad_copy",
)
VOICE_TONES: Final[tuple[str, ...]] = ("professional", "casual", "technical", "playful", "formal")

_EVIDENCE: Final[Parser] = array(EVIDENCE_LINK)
_STRINGS: Final[Parser] = array(string())

SEO_FINDING: Final[Parser] = obj(
    {
        "id": required(string()),
        "url": required(string()),
        "severity": required(enum(*SEVERITIES)),
        "category": required(enum(*SEO_CATEGORIES)),
        "message": required(string()),
        "current_value": optional(nullable(string())),
        "recommendation": required(string()),
        "evidence": required(_EVIDENCE),
        "line_number": optional(number()),
    }
)

SEO_AUDIT: Final[Parser] = obj(
    {
        "tenant_id": required(string()),
        "project_id": required(string()),
        "id": required(string()),
        "scanned_at": required(datetime_string()),
        "source_type": required(enum(*SEO_SOURCE_TYPES)),
        "source_path": required(string()),
        "urls_scanned": required(number()),
        "findings": required(array(SEO_FINDING)),
        "summary": required(
            obj(
                {
                    "critical": required(number()),
                    "warning": required(number()),
                    "info": required(number()),
                    "opportunity": required(number()),
                }
            )
        ),
    }
)

FUNNEL_STEP: Final[Parser] = obj(
    {
        "step_name": required(string()),
        "event_name": required(string()),
        "unique_users": required(number()),
        "total_events": required(number()),
        "drop_off_count": required(number()),
        "drop_off_rate": required(number()),
        "avg_time_to_next_seconds": optional(number()),
    }
)

FUNNEL_METRICS: Final[Parser] = obj(
    {
        "tenant_id": required(string()),
        "project_id": required(string()),
        "id": required(string()),
        "computed_at": required(datetime_string()),
        "source_file": required(string()),
        "funnel_name": required(string()),
        "date_range": required(
            obj({"start": required(datetime_string()), "end": required(datetime_string())})
        ),
        "total_entrances": required(number()),
        "total_conversions": required(number()),
        "overall_conversion_rate": required(number()),
        "steps": required(array(FUNNEL_STEP)),
        "biggest_drop_off_step": optional(string()),
        "evidence": required(_EVIDENCE),
    }
)

EXPERIMENT_PROPOSAL: Final[Parser] = obj(
    {
        "tenant_id": required(string()),
        "project_id": required(string()),
        "id": required(string()),
        "created_at": required(datetime_string()),
        "title": required(string()),
        "hypothesis": required(string()),
        "funnel_metrics_id": required(string()),
        "target_step": required(string()),
        "experiment_type": required(enum(*EXPERIMENT_TYPES)),
        "effort": required(
            obj(
                {
                    "level": required(enum(*EFFORT_LEVELS)),
                    "days_estimate": required(number()),
                    "resources_needed": required(_STRINGS),
                }
            )
        ),
        "expected_impact": required(
            obj(
                {
                    "metric": required(string()),
                    "lift_percent": required(number()),
                    "confidence": required(enum(*CONFIDENCE_LEVELS)),
                    "rationale": required(string()),
                }
            )
        ),
        "suggested_variants": required(
            array(
                obj(
                    {
                        "name": required(string()),
                        "description": required(string()),
                        "changes": required(_STRINGS),
                    }
                )
            )
        ),
        "evidence": required(_EVIDENCE),
        "job_request_id": optional(string()),
    }
)

CONTENT_DRAFT: Final[Parser] = obj(
    {
        "tenant_id": required(string()),
        "project_id": required(string()),
        "id": required(string()),
        "created_at": required(datetime_string()),
        "content_type": required(enum(*CONTENT_TYPES)),
        "profile_used": required(string()),
        "llm_used": required(boolean()),
        "llm_provider": optional(string()),
        "input_context": required(
            obj(
                {
                    "keywords": optional(_STRINGS),
                    "features": optional(_STRINGS),
                    "target_audience": optional(string()),
                    "goal": required(string()),
                }
            )
        ),
        "draft": required(
            obj(
                {
                    "headline": optional(string()),
                    "body": required(string()),
                    "cta": optional(string()),
                    "subject_line": optional(string()),
                }
            )
        ),
        "seo_metadata": optional(
            obj(
                {
                    "title": optional(string()),
                    "meta_description": optional(string()),
                    "keywords": optional(_STRINGS),
                }
            )
        ),
        "variant_count": required(number()),
        "evidence": required(_EVIDENCE),
        "job_request_id": optional(string()),
    }
)

GROWTH_PROFILE: Final[Parser] = obj(
    {
        "name": required(string()),
        "extends": optional(string()),
        "icp": required(
            obj(
                {
                    "description": required(string()),
                    "pain_points": required(_STRINGS),
                    "goals": required(_STRINGS),
                }
            )
        ),
        "voice": required(
            obj(
                {
                    "tone": required(enum(*VOICE_TONES)),
                    "style_guide": required(string()),
                    "vocabulary": required(_STRINGS),
                }
            )
        ),
        "keywords": required(
            obj(
                {
                    "primary": required(_STRINGS),
                    "secondary": required(_STRINGS),
                    "prohibited": required(_STRINGS),
                }
            )
        ),
        "features": required(
            array(
                obj(
                    {
                        "name": required(string()),
                        "description": required(string()),
                        "benefits": required(_STRINGS),
                    }
                )
            )
        ),
        "prohibited_claims": required(_STRINGS),
        "required_disclaimers": optional(_STRINGS),
    }
)


def validate_seo_audit(value: object) -> ParseResult[dict[str, Any]]:
    return run(SEO_AUDIT, value)


def parse_seo_audit(value: object) -> dict[str, Any]:
    return run_or_raise(SEO_AUDIT, value, label="SEO audit")


def validate_funnel_metrics(value: object) -> ParseResult[dict[str, Any]]:
    return run(FUNNEL_METRICS, value)


def parse_funnel_metrics(value: object) -> dict[str, Any]:
    return run_or_raise(FUNNEL_METRICS, value, label="funnel metrics")


def validate_experiment_proposal(value: object) -> ParseResult[dict[str, Any]]:
    return run(EXPERIMENT_PROPOSAL, value)


def validate_content_draft(value: object) -> ParseResult[dict[str, Any]]:
    return run(CONTENT_DRAFT, value)


def validate_growth_profile(value: object) -> ParseResult[dict[str, Any]]:
    return run(GROWTH_PROFILE, value)


__all__ = [
    "CONFIDENCE_LEVELS",
    "CONTENT_TYPES",
    "EFFORT_LEVELS",
    "EXPERIMENT_TYPES",
    "SEO_CATEGORIES",
    "SEO_SOURCE_TYPES",
    "VOICE_TONES",
    "parse_funnel_metrics",
    "parse_seo_audit",
    "validate_content_draft",
    "validate_experiment_proposal",
    "validate_funnel_metrics",
    "validate_growth_profile",
    "validate_seo_audit",
]

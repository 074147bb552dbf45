"""Schema for the ``analyze`` input document."""

from __future__ import annotations

from typing import Any, Final

from growth_autopilot.contracts.envelopes import EVENT_ENVELOPE, RUN_MANIFEST
from growth_autopilot.contracts.fields import (
    ParseResult,
    Parser,
    array,
    defaulted,
    enum,
    non_empty_string,
    number,
    obj,
    optional,
    required,
    run,
    run_or_raise,
)
from growth_autopilot.contracts.growth import CONTENT_TYPES, FUNNEL_METRICS, SEO_AUDIT

SEO_SCAN_SOURCE_TYPES: Final[tuple[str, ...]] = ("html_export", "nextjs_routes")

ANALYZE_INPUTS: Final[Parser] = obj(
    {
        "events": defaulted(array(EVENT_ENVELOPE), []),
        "run_manifests": defaulted(array(RUN_MANIFEST), []),
        "seo_audit": optional(SEO_AUDIT),
        "seo_scan": optional(
            obj(
                {
                    "source_path": required(non_empty_string()),
                    "source_type": required(enum(*SEO_SCAN_SOURCE_TYPES)),
                }
            )
        ),
        "funnel_metrics": optional(FUNNEL_METRICS),
        "funnel_analysis": optional(
            obj(
                {
                    "events_path": required(non_empty_string()),
                    "steps": required(array(non_empty_string(), min_length=1)),
                    "funnel_name": optional(non_empty_string()),
                }
            )
        ),
        "experiment_proposals": optional(
            obj(
                {
                    "funnel_metrics_path": optional(non_empty_string()),
                    "max_proposals": optional(number(integer=True, positive=True)),
                }
            )
        ),
        "content_draft": optional(
            obj(
                {
                    "profile": required(non_empty_string()),
                    "content_type": required(enum(*CONTENT_TYPES)),
                    "goal": required(non_empty_string()),
                    "keywords": optional(array(non_empty_string())),
                    "features": optional(array(non_empty_string())),
                    "audience": optional(non_empty_string()),
                    "llm_provider": optional(non_empty_string()),
                    "variants": optional(number(integer=True, positive=True)),
                }
            )
        ),
    }
)


def validate_analyze_inputs(value: object) -> ParseResult[dict[str, Any]]:
    return run(ANALYZE_INPUTS, value)


def parse_analyze_inputs(value: object) -> dict[str, Any]:
    return run_or_raise(ANALYZE_INPUTS, value, label="analyze inputs")


__all__ = ["SEO_SCAN_SOURCE_TYPES", "parse_analyze_inputs", "validate_analyze_inputs"]

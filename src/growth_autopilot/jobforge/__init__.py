"""JobForge integration: request builders, bundles, the analysis orchestrator and reports."""

from growth_autopilot.jobforge.analyze import AnalyzeOptions, AnalyzeResult, analyze, load_analyze_inputs
from growth_autopilot.jobforge.bundle import BundleValidationResult, build_idempotency_key, validate_bundle
from growth_autopilot.jobforge.maturity import build_runner_maturity_report
from growth_autopilot.jobforge.report import render_report

__all__ = [
    "AnalyzeOptions",
    "AnalyzeResult",
    "BundleValidationResult",
    "analyze",
    "build_idempotency_key",
    "build_runner_maturity_report",
    "load_analyze_inputs",
    "render_report",
    "validate_bundle",
]

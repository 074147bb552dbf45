"""Command-line interface router for growth-autopilot.

File: src/growth_autopilot/ui/cli.py
Last updated: 2026-10-19

Purpose
- Route ``growth`` subcommands to the analysis pipeline, the single-step
  collaborators, bundle validation and run diagnostics.

Functional requirements
- Every command resolves ``GrowthSettings`` once; nothing below this layer
  reads the environment.
- Tenant and project resolve from flags, then configuration (which includes
  ``GROWTH_TENANT_ID``/``GROWTH_PROJECT_ID``).
- ``plan``/``run`` write evidence, ``logs.jsonl`` and ``summary.json`` under
  ``<artifacts>/<run_id>``; a failed run still writes its summary.
- Failures map to exit codes 2 (validation), 3 (dependency) and 4 (unexpected)
  and are reported as one redacted line, or as a JSON envelope with ``--json``.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

import structlog

from growth_autopilot import __version__
from growth_autopilot.artifacts import ArtifactWriter, RunStatus, generate_run_id
from growth_autopilot.config import GrowthSettings, dump_effective_config, load_config, load_settings, redact_config
from growth_autopilot.constants import DEFAULT_FUNNEL_NAME, DEFAULT_MAX_PROPOSALS, STABLE_TIME
from growth_autopilot.content.drafter import draft_content, draft_content_with_llm
from growth_autopilot.content.profiles import BUILTIN_PROFILES_DIR, ProfileLoader
from growth_autopilot.contracts.envelopes import parse_tenant_context
from growth_autopilot.contracts.growth import CONTENT_TYPES, parse_funnel_metrics
from growth_autopilot.contracts.inputs import SEO_SCAN_SOURCE_TYPES
from growth_autopilot.domain.timestamps import now_iso8601z, parse_iso8601, utc_now
from growth_autopilot.errors import ValidationError, classify_error, to_error_envelope
from growth_autopilot.experiments.proposals import propose_experiments
from growth_autopilot.funnel.analysis import analyze_funnel
from growth_autopilot.jobforge.analyze import (
    AnalyzeOptions,
    AnalyzeResult,
    analyze,
    fixed_clock,
    load_analyze_inputs,
    sequence_id_factory,
)
from growth_autopilot.jobforge.bundle import validate_bundle
from growth_autopilot.jobforge.report import render_report
from growth_autopilot.jobforge.requests import (
    create_content_draft_job,
    create_experiment_proposal_job,
    create_seo_scan_job,
    serialize_job_request,
)
from growth_autopilot.observability import (
    LoggingConfig,
    configure_structlog,
    correlation_scope,
    setup_structured_logging,
    shutdown_logging,
)
from growth_autopilot.runner import GrowthAutopilotRunner
from growth_autopilot.seo.scanner import scan_site
from growth_autopilot.ui.render import CLIRenderer, create_renderer
from growth_autopilot.utils.canonical import serialize_deterministic
from growth_autopilot.utils.fs import atomic_write, read_json_file

TENANT_REQUIRED_MESSAGE: Final[str] = (
    "tenant_id and project_id are required. Provide via --tenant/--project flags "
    "or GROWTH_TENANT_ID/GROWTH_PROJECT_ID env vars."
)

SMOKE_INPUTS_PATH: Final[Path] = Path(__file__).resolve().parent.parent / "data" / "smoke_inputs.json"
SMOKE_TENANT: Final[dict[str, str]] = {"tenant_id": "smoke-test", "project_id": "smoke"}

DEMO_TENANT_ID: Final[str] = "demo-tenant"
DEMO_PROJECT_ID: Final[str] = "demo-project"
DEMO_TRACE_ID: Final[str] = "demo-trace-123"
DEMO_INPUTS: Final[dict[str, Any]] = {
    "content_draft": {
        "profile": "jobforge",
        "content_type": "onboarding_email",
        "goal": "Welcome new users to the platform",
        "keywords": ["automation", "workflows"],
        "features": ["Visual designer", "JobForge integration"],
        "audience": "Development teams",
    }
}

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 2

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="growth",
        description=(
            "growth-autopilot: runnerless SEO audits, funnel analysis, experiment\n"
            "proposals and content drafting. Emits dry-run JobForge requests only.\n\n"
            "Examples:\n"
            "  growth plan --smoke\n"
            "  growth run --inputs ./data.json --tenant acme --project web\n"
            "  growth analyze --inputs ./inputs.json --tenant acme --project app --trace trace-123\n"
            "  growth validate-bundle --bundle ./jobforge-output/request-bundle.json\n"
            "  growth replay --run-dir ./artifacts/<run_id>\n\n"
            "Exit codes:\n"
            "  0  success\n"
            "  2  validation error\n"
            "  3  external dependency failure\n"
            "  4  unexpected error\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to growth.toml (default: ./growth.toml if present).",
    )
    common.add_argument("--json", action="store_true", default=False, help="Emit machine-readable JSON.")
    common.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include stack traces in error output and log at DEBUG level.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    tenancy = argparse.ArgumentParser(add_help=False)
    tenancy.add_argument("--tenant", default=None, help="Tenant ID (or GROWTH_TENANT_ID).")
    tenancy.add_argument("--project", default=None, help="Project ID (or GROWTH_PROJECT_ID).")

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("plan", "Analyze inputs and write dry-run artifacts"),
        ("run", "Analyze inputs and write artifacts plus a Markdown report"),
    ):
        pipeline_parser = subparsers.add_parser(name, parents=[common, tenancy], help=help_text)
        pipeline_parser.add_argument("--inputs", default=None, help="Path to analysis input JSON.")
        pipeline_parser.add_argument("--smoke", action="store_true", default=False, help="Use built-in smoke inputs.")
        pipeline_parser.add_argument("--trace", default=None, help="Trace ID for correlation.")
        pipeline_parser.add_argument("--out", default=None, help="Artifacts base directory.")
        pipeline_parser.add_argument(
            "--stable-output", action="store_true", default=False, help="Remove nondeterministic fields."
        )
        if name == "run":
            pipeline_parser.add_argument(
                "--dry-run", action="store_true", default=False, help="Record the run as a dry run."
            )
        pipeline_parser.set_defaults(handler=_cmd_plan if name == "plan" else _cmd_run)

    analyze_parser = subparsers.add_parser(
        "analyze",
        parents=[common, tenancy],
        help="Write a JobForge request bundle, report and runner maturity report",
    )
    analyze_parser.add_argument("--inputs", required=True, help="Path to analysis input JSON.")
    analyze_parser.add_argument("--trace", required=True, help="Trace ID for JobForge correlation.")
    analyze_parser.add_argument("--out", default=None, help="Output directory (default: jobforge-output).")
    analyze_parser.add_argument(
        "--stable-output", action="store_true", default=False, help="Remove nondeterministic fields."
    )
    analyze_parser.add_argument(
        "--no-render-md", dest="render_md", action="store_false", default=True, help="Skip report.md."
    )
    analyze_parser.set_defaults(handler=_cmd_analyze)

    bundle_parser = subparsers.add_parser(
        "validate-bundle", parents=[common], help="Validate a JobForge request bundle"
    )
    bundle_parser.add_argument("--bundle", required=True, help="Path to request-bundle.json.")
    bundle_parser.set_defaults(handler=_cmd_validate_bundle)

    seo_parser = subparsers.add_parser("seo-scan", parents=[common, tenancy], help="Scan an HTML export for SEO issues")
    seo_parser.add_argument("--path", dest="source_path", required=True, help="HTML export or routes directory.")
    seo_parser.add_argument("--type", dest="source_type", default="html_export", choices=SEO_SCAN_SOURCE_TYPES)
    seo_parser.add_argument("--output", default="./seo-audit.json", help="Output file path.")
    seo_parser.add_argument("--jobforge", action="store_true", default=False, help="Also write a job request.")
    seo_parser.set_defaults(handler=_cmd_seo_scan)

    funnel_parser = subparsers.add_parser("funnel", parents=[common, tenancy], help="Analyze an event funnel")
    funnel_parser.add_argument("--events", required=True, help="Path to events JSON file.")
    funnel_parser.add_argument("--steps", required=True, help="Comma-separated funnel step event names.")
    funnel_parser.add_argument("--name", dest="funnel_name", default=DEFAULT_FUNNEL_NAME, help="Funnel name.")
    funnel_parser.add_argument("--output", default="./funnel-metrics.json", help="Output file path.")
    funnel_parser.set_defaults(handler=_cmd_funnel)

    propose_parser = subparsers.add_parser(
        "propose-experiments", parents=[common, tenancy], help="Propose experiments from funnel metrics"
    )
    propose_parser.add_argument("--funnel", required=True, help="Path to funnel metrics JSON file.")
    propose_parser.add_argument("--max", dest="max_proposals", type=int, default=DEFAULT_MAX_PROPOSALS)
    propose_parser.add_argument("--output", default="./experiment-proposals.json", help="Output file path.")
    propose_parser.add_argument("--jobforge", action="store_true", default=False, help="Also write a job request.")
    propose_parser.set_defaults(handler=_cmd_propose_experiments)

    draft_parser = subparsers.add_parser(
        "draft-content", parents=[common, tenancy], help="Draft content from a growth profile"
    )
    draft_parser.add_argument("--profile", dest="profile_name", required=True, help="Profile name (e.g. base).")
    draft_parser.add_argument("--type", dest="content_type", required=True, choices=CONTENT_TYPES)
    draft_parser.add_argument("--goal", required=True, help="Content goal.")
    draft_parser.add_argument("--keywords", default=None, help="Comma-separated keywords.")
    draft_parser.add_argument("--features", default=None, help="Comma-separated feature names.")
    draft_parser.add_argument("--audience", default=None, help="Target audience description.")
    draft_parser.add_argument("--llm", dest="llm_provider", default=None, help="Mark the draft for an LLM provider.")
    draft_parser.add_argument("--variants", type=int, default=1, help="Number of variants.")
    draft_parser.add_argument("--output", default="./content-draft.json", help="Output file path.")
    draft_parser.add_argument("--jobforge", action="store_true", default=False, help="Also write a job request.")
    draft_parser.set_defaults(handler=_cmd_draft_content)

    demo_parser = subparsers.add_parser("demo", parents=[common], help="Run a deterministic demo analysis")
    demo_parser.set_defaults(handler=_cmd_demo)

    replay_parser = subparsers.add_parser("replay", parents=[common], help="Replay a previous run's artifacts")
    replay_parser.add_argument("--run-dir", required=True, help="Path to an artifacts/<run_id> directory.")
    replay_parser.set_defaults(handler=_cmd_replay)

    config_parser = subparsers.add_parser("config", parents=[common, tenancy], help="Print effective configuration")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    configure_structlog()
    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    except Exception as exc:
        return _report_failure(namespace, exc)
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_plan(args: argparse.Namespace) -> int:
    return _run_pipeline(args, command="plan", dry_run=True, write_markdown=False)


def _cmd_run(args: argparse.Namespace) -> int:
    return _run_pipeline(args, command="run", dry_run=_flag(args, "dry_run"), write_markdown=True)


def _run_pipeline(args: argparse.Namespace, *, command: str, dry_run: bool, write_markdown: bool) -> int:
    settings = _load_settings(args)
    smoke = _flag(args, "smoke")
    tenant_context = dict(SMOKE_TENANT) if smoke else _tenant_context(settings)
    inputs_path = _optional_str(getattr(args, "inputs", None))
    if not smoke and inputs_path is None:
        raise CLIError(f"Either --inputs <path> or --smoke is required for {command}")
    trace_id = _optional_str(getattr(args, "trace", None)) or f"{command}-{int(utc_now().timestamp() * 1000)}"
    flags = {"inputs": inputs_path or "smoke", "smoke": smoke, "dryRun": dry_run}

    with _run_session(args, settings, command=command, tenant_context=tenant_context, trace_id=trace_id, flags=flags) as artifacts:
        logger.info("run_started", smoke=smoke, dry_run=dry_run)
        if smoke:
            logger.info("smoke_inputs_selected", path=str(SMOKE_INPUTS_PATH))
        result = analyze(
            load_analyze_inputs(SMOKE_INPUTS_PATH if smoke else inputs_path),
            AnalyzeOptions(
                tenant_id=tenant_context["tenant_id"],
                project_id=tenant_context["project_id"],
                trace_id=trace_id,
                stable_output=_flag(args, "stable_output"),
                profile_loader=_profile_loader(settings),
            ),
        )
        artifacts.write_evidence("request-bundle", result.bundle)
        artifacts.write_evidence("report", result.report)
        artifacts.write_evidence("runner-maturity", result.runner_maturity)
        if write_markdown:
            artifacts.write_text_evidence("report-md", render_report(result.report, "md"))
        logger.info(
            "run_completed",
            job_requests=len(result.bundle["requests"]),
            findings=len(result.report["findings"]),
        )

    payload = {
        "command": command,
        "status": "success",
        "run_id": artifacts.run_id,
        "artifacts_dir": str(artifacts.directory),
        "job_requests": len(result.bundle["requests"]),
        "findings": len(result.report["findings"]),
    }
    if _flag(args, "json"):
        _emit_json(payload)
        return 0

    renderer = _get_renderer(args)
    renderer.heading(f"{command.capitalize()} complete")
    renderer.kv("Run ID", artifacts.run_id)
    renderer.kv("Tenant", tenant_context["tenant_id"])
    renderer.kv("Project", tenant_context["project_id"])
    renderer.kv("Job requests", payload["job_requests"])
    renderer.kv("Findings", payload["findings"])
    renderer.kv("Artifacts", payload["artifacts_dir"])
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    tenant_context = _tenant_context(settings)
    trace_id = _require_str(getattr(args, "trace", None), "trace")
    result = analyze(
        load_analyze_inputs(_require_str(getattr(args, "inputs", None), "inputs")),
        AnalyzeOptions(
            tenant_id=tenant_context["tenant_id"],
            project_id=tenant_context["project_id"],
            trace_id=trace_id,
            stable_output=_flag(args, "stable_output"),
            profile_loader=_profile_loader(settings),
        ),
    )

    out_arg = _optional_str(getattr(args, "out", None))
    out_dir = Path(out_arg) if out_arg is not None else settings.output_dir
    written = _write_analysis(result, out_dir, render_md=bool(getattr(args, "render_md", True)))

    if _flag(args, "json"):
        _emit_json({"command": "analyze", "status": "success", "outputs": [str(path) for path in written]})
        return 0
    renderer = _get_renderer(args)
    renderer.heading("Analysis complete")
    renderer.kv("Job requests", len(result.bundle["requests"]))
    renderer.kv("Findings", len(result.report["findings"]))
    renderer.section("Outputs:")
    renderer.items([str(path) for path in written])
    return 0


def _write_analysis(result: AnalyzeResult, out_dir: Path, *, render_md: bool) -> list[Path]:
    written = [
        atomic_write(out_dir / "request-bundle.json", serialize_deterministic(result.bundle)),
        atomic_write(out_dir / "report.json", serialize_deterministic(result.report)),
        atomic_write(out_dir / "runner-maturity.json", serialize_deterministic(result.runner_maturity)),
    ]
    if render_md:
        written.append(atomic_write(out_dir / "report.md", render_report(result.report, "md")))
    return written


def _cmd_validate_bundle(args: argparse.Namespace) -> int:
    bundle_path = _require_str(getattr(args, "bundle", None), "bundle")
    result = validate_bundle(read_json_file(bundle_path, label="bundle file"))

    if _flag(args, "json"):
        _emit_json({"command": "validate-bundle", "bundle": bundle_path, **result.to_dict()})
        return 0 if result.success else 2

    renderer = _get_renderer(args)
    if result.success:
        renderer.text(f"Bundle is valid: {bundle_path}")
        return 0
    renderer.error(f"bundle validation failed: {bundle_path}")
    for message in result.errors:
        print(f"  - {message}", file=sys.stderr)
    return 2


def _cmd_seo_scan(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    tenant_context = _tenant_context(settings)
    source_path = _require_str(getattr(args, "source_path", None), "path")
    source_type = _require_str(getattr(args, "source_type", None), "type")
    output = Path(_require_str(getattr(args, "output", None), "output"))

    logger.info("seo_scan_started", source_type=source_type, source_path=source_path)
    audit = scan_site(tenant_context, source_type, source_path)
    atomic_write(output, _pretty_json(audit))
    outputs = [output]

    if _flag(args, "jobforge"):
        job = create_seo_scan_job(
            tenant_context,
            source_path,
            source_type,
            "medium",
            related_audit_id=audit["id"],
            notes=f"SEO scan completed with {len(audit['findings'])} findings",
        )
        outputs.append(atomic_write(_job_path(output), serialize_job_request(job)))

    summary = audit["summary"]
    if _flag(args, "json"):
        _emit_json({"command": "seo-scan", "urls_scanned": audit["urls_scanned"], "summary": summary, "outputs": [str(p) for p in outputs]})
        return 0
    renderer = _get_renderer(args)
    renderer.kv("SEO audit written to", output)
    renderer.text(
        f"Summary: {audit['urls_scanned']} URLs, {summary['critical']} critical, {summary['warning']} warnings, "
        f"{summary['info']} info, {summary['opportunity']} opportunities"
    )
    if len(outputs) > 1:
        renderer.kv("JobForge request written to", outputs[1])
    return 0


def _cmd_funnel(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    tenant_context = _tenant_context(settings)
    steps = list(_comma_list(getattr(args, "steps", None)))
    funnel_name = _require_str(getattr(args, "funnel_name", None), "name")
    output = Path(_require_str(getattr(args, "output", None), "output"))

    logger.info("funnel_analysis_started", funnel_name=funnel_name, steps=steps)
    metrics = analyze_funnel(tenant_context, _require_str(getattr(args, "events", None), "events"), funnel_name, steps)
    atomic_write(output, _pretty_json(metrics))

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "funnel",
                "total_entrances": metrics["total_entrances"],
                "total_conversions": metrics["total_conversions"],
                "overall_conversion_rate": metrics["overall_conversion_rate"],
                "biggest_drop_off_step": metrics.get("biggest_drop_off_step"),
                "outputs": [str(output)],
            }
        )
        return 0

    renderer = _get_renderer(args)
    renderer.kv("Funnel metrics written to", output)
    renderer.text(
        f"Results: {metrics['total_entrances']} entrances, {metrics['total_conversions']} conversions, "
        f"{metrics['overall_conversion_rate'] * 100:.1f}% conversion"
    )
    biggest = metrics.get("biggest_drop_off_step")
    if biggest is not None:
        rate = next(step["drop_off_rate"] for step in metrics["steps"] if step["step_name"] == biggest)
        renderer.text(f"Biggest drop-off: {biggest} ({rate * 100:.1f}%)")
    renderer.items(
        [
            f"{step['step_name']}: {step['unique_users']} users ({round(step['drop_off_rate'] * 100)}% drop-off)"
            for step in metrics["steps"]
        ]
    )
    return 0


def _cmd_propose_experiments(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    tenant_context = _tenant_context(settings)
    funnel_path = _require_str(getattr(args, "funnel", None), "funnel")
    max_proposals = getattr(args, "max_proposals", DEFAULT_MAX_PROPOSALS)
    if not isinstance(max_proposals, int) or max_proposals < 1:
        raise CLIError("invalid max: expected a positive integer")
    output = Path(_require_str(getattr(args, "output", None), "output"))

    funnel_metrics = parse_funnel_metrics(read_json_file(funnel_path, label="funnel metrics file"))
    proposals = propose_experiments(tenant_context, funnel_metrics, max_proposals)
    atomic_write(output, _pretty_json(proposals))
    outputs = [output]

    if _flag(args, "jobforge") and proposals:
        job = create_experiment_proposal_job(
            tenant_context,
            funnel_metrics,
            "medium",
            max_proposals=max_proposals,
            notes=f"{len(proposals)} experiment proposals generated",
        )
        outputs.append(atomic_write(_job_path(output), serialize_job_request(job)))

    if _flag(args, "json"):
        _emit_json({"command": "propose-experiments", "proposals": len(proposals), "outputs": [str(p) for p in outputs]})
        return 0
    renderer = _get_renderer(args)
    renderer.kv(f"{len(proposals)} experiment proposal(s) written to", output)
    for index, proposal in enumerate(proposals, start=1):
        renderer.text(
            f"{index}. {proposal['title']}: {proposal['hypothesis']} "
            f"(effort: {proposal['effort']['level']}, impact: +{proposal['expected_impact']['lift_percent']}%)"
        )
    if len(outputs) > 1:
        renderer.kv("JobForge request written to", outputs[1])
    return 0


def _cmd_draft_content(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    tenant_context = _tenant_context(settings)
    profile_name = _require_str(getattr(args, "profile_name", None), "profile")
    content_type = _require_str(getattr(args, "content_type", None), "type")
    goal = _require_str(getattr(args, "goal", None), "goal")
    keywords = list(_comma_list(getattr(args, "keywords", None)))
    features = list(_comma_list(getattr(args, "features", None)))
    audience = _optional_str(getattr(args, "audience", None))
    llm_provider = _optional_str(getattr(args, "llm_provider", None))
    variants = getattr(args, "variants", 1)
    if not isinstance(variants, int) or variants < 1:
        raise CLIError("invalid variants: expected a positive integer")
    output = Path(_require_str(getattr(args, "output", None), "output"))

    options: dict[str, Any] = {
        "profile_loader": _profile_loader(settings),
        "keywords": keywords,
        "features": features,
        "target_audience": audience,
        "variant_count": variants,
    }
    logger.info("content_draft_started", profile=profile_name, content_type=content_type)
    if llm_provider is not None:
        draft = draft_content_with_llm(tenant_context, profile_name, content_type, goal, llm_provider=llm_provider, **options)
    else:
        draft = draft_content(tenant_context, profile_name, content_type, goal, **options)
    atomic_write(output, _pretty_json(draft))
    outputs = [output]

    if _flag(args, "jobforge"):
        job = create_content_draft_job(
            tenant_context,
            profile_name,
            content_type,
            goal,
            "medium",
            keywords=keywords,
            features=features,
            target_audience=audience,
            use_llm=llm_provider is not None,
            llm_provider=llm_provider,
            variant_count=variants,
            notes=f"Content draft for {content_type}",
        )
        outputs.append(atomic_write(_job_path(output), serialize_job_request(job)))

    if _flag(args, "json"):
        _emit_json({"command": "draft-content", "draft_id": draft["id"], "outputs": [str(p) for p in outputs]})
        return 0
    renderer = _get_renderer(args)
    parts = draft["draft"]
    renderer.kv("Content draft written to", output)
    if "headline" in parts:
        renderer.kv("Headline", parts["headline"])
    if "subject_line" in parts:
        renderer.kv("Subject", parts["subject_line"])
    renderer.kv("Body length", f"{len(parts['body'])} characters")
    if "cta" in parts:
        renderer.kv("CTA", parts["cta"])
    if len(outputs) > 1:
        renderer.kv("JobForge request written to", outputs[1])
    return 0


def _cmd_demo(args: argparse.Namespace) -> int:
    logger.info("demo_started", tenant_id=DEMO_TENANT_ID, project_id=DEMO_PROJECT_ID)
    runner = GrowthAutopilotRunner(
        profile_loader=ProfileLoader(BUILTIN_PROFILES_DIR),
        clock=fixed_clock(parse_iso8601(STABLE_TIME)),
        id_factory=sequence_id_factory(),
    )
    outcome = runner.execute(
        {
            "tenant_id": DEMO_TENANT_ID,
            "project_id": DEMO_PROJECT_ID,
            "trace_id": DEMO_TRACE_ID,
            "inputs": DEMO_INPUTS,
        }
    )
    if outcome.output is None:
        error = outcome.error or {}
        if _flag(args, "json"):
            print(json.dumps(outcome.to_dict(), sort_keys=True, ensure_ascii=False), file=sys.stderr)
        else:
            _get_renderer(args).error(str(error.get("message", "demo failed")))
        return int(outcome.exit_code)

    report = outcome.output["report"]
    packet = outcome.output["evidence_packet"]
    summary = {
        "status": outcome.status,
        "demo_tenant_id": DEMO_TENANT_ID,
        "demo_project_id": DEMO_PROJECT_ID,
        "demo_trace_id": DEMO_TRACE_ID,
        "runner_id": runner.runner_id,
        "runner_version": runner.version,
        "job_requests_count": len(outcome.output["bundle"]["requests"]),
        "findings_count": len(report["findings"]),
        "recommendations_count": len(report["recommendations"]),
        "capabilities_demonstrated": ["content_drafting"],
        "blast_radius": runner.blast_radius,
        "evidence_packet_id": packet["packet_id"],
        "evidence_packet_hash": packet["canonical_hash"],
    }

    if _flag(args, "json"):
        _emit_json(summary)
        return 0
    renderer = _get_renderer(args)
    renderer.heading("Demo completed successfully!")
    renderer.items(
        [
            f"Tenant: {DEMO_TENANT_ID}",
            f"Project: {DEMO_PROJECT_ID}",
            f"Job Requests: {summary['job_requests_count']}",
            f"Findings: {summary['findings_count']}",
            f"Recommendations: {summary['recommendations_count']}",
            f"Evidence packet: {summary['evidence_packet_hash']}",
        ]
    )
    renderer.section("Capabilities demonstrated:")
    renderer.items(summary["capabilities_demonstrated"])
    return 0


def _cmd_replay(args: argparse.Namespace) -> int:
    run_dir = Path(_require_str(getattr(args, "run_dir", None), "run-dir"))
    summary = read_json_file(run_dir / "summary.json", label="run summary")
    if not isinstance(summary, Mapping):
        raise ValidationError(f"run summary must be a JSON object: {run_dir / 'summary.json'}")
    logs_path = run_dir / "logs.jsonl"
    log_lines = logs_path.read_text(encoding="utf-8").splitlines() if logs_path.is_file() else None

    if _flag(args, "json"):
        _emit_json({"summary": dict(summary), "log_lines": log_lines if log_lines is not None else []})
        return 0

    renderer = _get_renderer(args)
    renderer.heading(f"Replaying run {summary.get('runId')} ({summary.get('command')})")
    renderer.kv("Status", summary.get("status"))
    renderer.kv("Started", summary.get("startedAt"))
    renderer.kv("Completed", summary.get("completedAt"))
    outputs = summary.get("outputs")
    if isinstance(outputs, list):
        renderer.kv("Outputs", f"{len(outputs)} files")
        renderer.items([str(item) for item in outputs])
    errors = summary.get("errors")
    if isinstance(errors, list) and errors:
        renderer.warning(f"errors: {len(errors)}")
        for error in errors:
            if isinstance(error, Mapping):
                renderer.warning(f"[{error.get('code')}] {error.get('message')}")

    if log_lines is None:
        renderer.warning("No logs.jsonl found in run directory")
        return 0
    renderer.section(f"Replaying {len(log_lines)} log entries:")
    for line in log_lines:
        renderer.text(line)
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = load_config(_optional_str(getattr(args, "config_path", None)), cli_overrides=_tenant_overrides(args))

    if _flag(args, "json"):
        _emit_json({"command": "config", "config": redact_config(config)})
        return 0
    renderer = _get_renderer(args)
    renderer.text(dump_effective_config(config))
    return 0


# ---------------------------------------------------------------------------
# Helpers: settings, sessions, output
# ---------------------------------------------------------------------------


def _load_settings(args: argparse.Namespace) -> GrowthSettings:
    return load_settings(_optional_str(getattr(args, "config_path", None)), cli_overrides=_tenant_overrides(args))


def _tenant_overrides(args: argparse.Namespace) -> dict[str, object]:
    return {
        "tenant.id": _optional_str(getattr(args, "tenant", None)),
        "project.id": _optional_str(getattr(args, "project", None)),
    }


def _tenant_context(settings: GrowthSettings) -> dict[str, str]:
    if not settings.tenant_id or not settings.project_id:
        raise ValidationError(TENANT_REQUIRED_MESSAGE)
    return parse_tenant_context({"tenant_id": settings.tenant_id, "project_id": settings.project_id})


def _profile_loader(settings: GrowthSettings) -> ProfileLoader:
    profiles_dir = settings.profiles_dir if settings.profiles_dir.is_dir() else BUILTIN_PROFILES_DIR
    return ProfileLoader(profiles_dir, ttl_seconds=settings.profile_ttl_seconds)


@contextmanager
def _run_session(
    args: argparse.Namespace,
    settings: GrowthSettings,
    *,
    command: str,
    tenant_context: Mapping[str, str],
    trace_id: str,
    flags: Mapping[str, object],
) -> Iterator[ArtifactWriter]:
    """Own one run's artifact directory, JSON-lines log sink and summary."""

    started_at = now_iso8601z()
    run_id = generate_run_id(f"{command}-{tenant_context['tenant_id']}-{tenant_context['project_id']}-{trace_id}")
    out_arg = _optional_str(getattr(args, "out", None))
    base_dir = Path(out_arg) if out_arg is not None else settings.artifacts_dir
    artifacts = ArtifactWriter(run_id, base_dir)
    artifacts.init()
    handle = setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=base_dir,
            level="DEBUG" if _flag(args, "debug") else settings.log_level,
            log_to_stderr=settings.log_to_stderr,
            redact_secrets=settings.redact_secrets,
        )
    )

    status: RunStatus = "failure"
    try:
        with correlation_scope(
            run_id=run_id,
            trace_id=trace_id,
            tenant_id=tenant_context["tenant_id"],
            project_id=tenant_context["project_id"],
            command=command,
        ):
            try:
                yield artifacts
            except Exception as exc:
                envelope = to_error_envelope(exc)
                artifacts.add_error(envelope.code, envelope.message)
                logger.error("run_failed", code=envelope.code, retryable=envelope.retryable)
                raise
        status = "success"
    finally:
        shutdown_logging(handle)
        artifacts.write_summary(command, dict(flags), started_at, status)


def _report_failure(args: argparse.Namespace, exc: BaseException) -> int:
    debug = _flag(args, "debug")
    envelope = to_error_envelope(exc, {"command": getattr(args, "command", None)}, debug=debug)
    if _flag(args, "json"):
        print(json.dumps(envelope.to_dict(), sort_keys=True, ensure_ascii=False), file=sys.stderr)
    else:
        _get_renderer(args).error(envelope.user_message)
        if debug and envelope.cause is not None:
            print(envelope.cause.rstrip("\n"), file=sys.stderr)
    return int(classify_error(exc))


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _pretty_json(value: object) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _job_path(output: Path) -> Path:
    """``seo-audit.json`` -> ``seo-audit-job.json`` beside the output."""

    return output.with_name(f"{output.stem}-job.json")


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"))


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise CLIError(f"invalid {name}: expected string")
    cleaned = value.strip()
    if not cleaned:
        raise CLIError(f"invalid {name}: value cannot be empty")
    return cleaned


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CLIError("invalid optional string argument")
    cleaned = value.strip()
    return cleaned or None


def _comma_list(value: object) -> tuple[str, ...]:
    text = _optional_str(value)
    if text is None:
        return ()
    return tuple(part.strip() for part in text.split(",") if part.strip())


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "TENANT_REQUIRED_MESSAGE", "build_parser", "run_cli"]


if __name__ == "__main__":
    raise SystemExit(run_cli())

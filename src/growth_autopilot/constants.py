"""Stable constants shared across the analysis pipeline and job builders."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Pinned contract version carried by every emitted artifact.
SCHEMA_VERSION: Final[str] = "2024-09-01"
CONFIG_SCHEMA_VERSION: Final[int] = 1

MODULE_ID: Final[str] = "growth"
REPORT_TYPE: Final[str] = "growth.analysis"
TRIGGERED_BY: Final[str] = "growth-autopilot"

# Sentinel timestamp substituted for wall-clock values in stable-output mode.
STABLE_TIME: Final[str] = "2024-01-01T00:00:00.000Z"
STABLE_REPORT_ID: Final[str] = "report-stable"
STABLE_BUNDLE_ID: Final[str] = "bundle-stable"
STABLE_AUDIT_ID: Final[str] = "audit-stable"

CANONICALIZATION: Final[str] = "sorted_keys"
HASH_ALGORITHM: Final[str] = "sha256"

# JobForge job types.
JOB_TYPE_SEO_SCAN: Final[str] = "autopilot.growth.seo_scan"
JOB_TYPE_EXPERIMENT_PROPOSE: Final[str] = "autopilot.growth.experiment_propose"
JOB_TYPE_CONTENT_DRAFT: Final[str] = "autopilot.growth.content_draft"
JOB_TYPE_EXPERIMENT_RUN: Final[str] = "autopilot.growth.experiment_run"
JOB_TYPE_PUBLISH_CONTENT: Final[str] = "autopilot.growth.publish_content"

KNOWN_JOB_TYPES: Final[frozenset[str]] = frozenset(
    {
        JOB_TYPE_SEO_SCAN,
        JOB_TYPE_EXPERIMENT_PROPOSE,
        JOB_TYPE_CONTENT_DRAFT,
        JOB_TYPE_EXPERIMENT_RUN,
        JOB_TYPE_PUBLISH_CONTENT,
    }
)

# Job types with real-world side effects; these require a policy token.
ACTION_JOB_TYPES: Final[frozenset[str]] = frozenset(
    {JOB_TYPE_EXPERIMENT_RUN, JOB_TYPE_PUBLISH_CONTENT}
)

RUNNER_COST_CAPS_USD: Final[dict[str, float]] = {
    JOB_TYPE_SEO_SCAN: 0.5,
    JOB_TYPE_EXPERIMENT_PROPOSE: 0.2,
    JOB_TYPE_CONTENT_DRAFT: 1.0,
    JOB_TYPE_EXPERIMENT_RUN: 5.0,
    JOB_TYPE_PUBLISH_CONTENT: 0.5,
}

PRIORITIES: Final[tuple[str, ...]] = ("low", "medium", "high", "critical", "normal")

DEFAULT_FUNNEL_NAME: Final[str] = "main-funnel"
DEFAULT_MAX_PROPOSALS: Final[int] = 3
DEFAULT_PROFILE_CACHE_TTL_SECONDS: Final[int] = 300

# Default runtime paths (relative to the config file directory or cwd).
PROFILES_DIR: Final[PurePosixPath] = PurePosixPath("profiles")
ARTIFACTS_DIR: Final[PurePosixPath] = PurePosixPath("artifacts")
OUTPUT_DIR: Final[PurePosixPath] = PurePosixPath("jobforge-output")
CONFIG_FILENAME: Final[str] = "growth.toml"
ENV_PREFIX: Final[str] = "GROWTH"

__all__ = [
    "ACTION_JOB_TYPES",
    "ARTIFACTS_DIR",
    "CANONICALIZATION",
    "CONFIG_FILENAME",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_FUNNEL_NAME",
    "DEFAULT_MAX_PROPOSALS",
    "DEFAULT_PROFILE_CACHE_TTL_SECONDS",
    "ENV_PREFIX",
    "HASH_ALGORITHM",
    "JOB_TYPE_CONTENT_DRAFT",
    "JOB_TYPE_EXPERIMENT_PROPOSE",
    "JOB_TYPE_EXPERIMENT_RUN",
    "JOB_TYPE_PUBLISH_CONTENT",
    "JOB_TYPE_SEO_SCAN",
    "KNOWN_JOB_TYPES",
    "MODULE_ID",
    "OUTPUT_DIR",
    "PRIORITIES",
    "PROFILES_DIR",
    "REPORT_TYPE",
    "RUNNER_COST_CAPS_USD",
    "SCHEMA_VERSION",
    "STABLE_AUDIT_ID",
    "STABLE_BUNDLE_ID",
    "STABLE_REPORT_ID",
    "STABLE_TIME",
    "TRIGGERED_BY",
]

"""
growth-autopilot: configuration schema and validation

File: src/growth_autopilot/config/schema.py
Last updated: 2026-10-19

Purpose
- Define configuration defaults and strict validation rules for ``growth.toml``.

Functional requirements
- Validate config payloads and return structured issues (field path + message).
- Unknown keys are rejected; keys that look like embedded secrets get a
  dedicated message.
- Schema version mismatches carry migration guidance.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, NotRequired, TypedDict

from growth_autopilot.constants import (
    ARTIFACTS_DIR,
    CONFIG_SCHEMA_VERSION,
    DEFAULT_PROFILE_CACHE_TTL_SECONDS,
    OUTPUT_DIR,
    PROFILES_DIR,
)
from growth_autopilot.contracts.fields import (
    INVALID,
    Field,
    IssueCollector,
    Parser,
    boolean,
    enum,
    join,
    non_empty_string,
    number,
    obj,
    optional,
    required,
    string,
)
from growth_autopilot.errors import ValidationError, ValidationIssue
from growth_autopilot.security.redaction import is_sensitive_key, redact_structure

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

# Relative path fields, resolved against the config file directory by the loader.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("profiles", "dir"),
    ("artifacts", "dir"),
    ("output", "dir"),
)

ROOT_PATH: Final[str] = "<root>"


class MetaConfig(TypedDict):
    schema_version: int


class IdentityConfig(TypedDict):
    id: NotRequired[str]


class DirectoryConfig(TypedDict):
    dir: str


class ObservabilityConfig(TypedDict):
    log_level: str
    log_to_stderr: bool
    redact_secrets: bool


class CacheConfig(TypedDict):
    profile_ttl_seconds: int


class GrowthConfig(TypedDict):
    meta: MetaConfig
    tenant: IdentityConfig
    project: IdentityConfig
    profiles: DirectoryConfig
    artifacts: DirectoryConfig
    output: DirectoryConfig
    observability: ObservabilityConfig
    cache: CacheConfig


DEFAULT_CONFIG: Final[GrowthConfig] = {
    "meta": {"schema_version": CONFIG_SCHEMA_VERSION},
    "tenant": {},
    "project": {},
    "profiles": {"dir": str(PROFILES_DIR)},
    "artifacts": {"dir": str(ARTIFACTS_DIR)},
    "output": {"dir": str(OUTPUT_DIR)},
    "observability": {"log_level": "INFO", "log_to_stderr": False, "redact_secrets": True},
    "cache": {"profile_ttl_seconds": DEFAULT_PROFILE_CACHE_TTL_SECONDS},
}


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    config: dict[str, Any] | None
    issues: tuple[ValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValidationError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        lines = [f"- {issue.path}: {issue.message}" for issue in issues]
        super().__init__("invalid config:\n" + ("\n".join(lines) or "unknown validation failure"), issues)


def default_config() -> GrowthConfig:
    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    if found_version < CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is older than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade growth.toml to the current schema"
        )
    if found_version > CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is newer than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade growth-autopilot"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; nested mappings merge, scalars replace."""

    merged = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    issues = IssueCollector()
    normalized = _parse_root(config, issues)
    if issues.has_issues or normalized is INVALID:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def redact_config(config: Mapping[str, object]) -> dict[str, Any]:
    """Return a redacted copy suitable for logs, evidence and ``growth config``."""

    redacted = redact_structure(config)
    return redacted if isinstance(redacted, dict) else {}


def _schema_version(value: object, path: str, issues: IssueCollector) -> object:
    parsed = number(integer=True, minimum=1)(value, path, issues)
    if parsed is not INVALID and parsed != CONFIG_SCHEMA_VERSION:
        issues.add(path, migration_guidance(parsed))
        return INVALID
    return parsed


def _directory(value: object, path: str, issues: IssueCollector) -> object:
    parsed = non_empty_string()(value, path, issues)
    if isinstance(parsed, str) and "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return INVALID
    return parsed


def _strict(fields: Mapping[str, Field]) -> Parser:
    """``obj`` that reports unknown keys instead of dropping them."""

    parse_known = obj(fields)

    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if isinstance(value, Mapping):
            _report_unknown_keys(value, fields.keys(), path, issues)
        return parse_known(value, path, issues)

    return parse


def _report_unknown_keys(
    payload: Mapping[Any, object], allowed: Collection[str], path: str, issues: IssueCollector
) -> None:
    for key in sorted(str(key) for key in payload if key not in allowed):
        if is_sensitive_key(key):
            issues.add(join(path, key), "embedded secret values are forbidden in growth.toml")
        else:
            issues.add(join(path, key), "unknown field")


_IDENTITY = _strict({"id": optional(string(min_length=1, pattern=re.compile(r"[A-Za-z0-9_-]+")))})
_DIRECTORY = _strict({"dir": required(_directory)})

_SECTIONS: Final[dict[str, Parser]] = {
    "meta": _strict({"schema_version": required(_schema_version)}),
    "tenant": _IDENTITY,
    "project": _IDENTITY,
    "profiles": _DIRECTORY,
    "artifacts": _DIRECTORY,
    "output": _DIRECTORY,
    "observability": _strict(
        {
            "log_level": required(enum(*LOG_LEVELS)),
            "log_to_stderr": required(boolean()),
            "redact_secrets": required(boolean()),
        }
    ),
    "cache": _strict({"profile_ttl_seconds": required(number(integer=True, minimum=0))}),
}


def _parse_root(config: object, issues: IssueCollector) -> Any:
    if not isinstance(config, Mapping):
        issues.add(ROOT_PATH, f"expected object, got {type(config).__name__}")
        return INVALID
    _report_unknown_keys(config, _SECTIONS.keys(), "", issues)
    normalized: dict[str, Any] = {}
    for name, parse_section in _SECTIONS.items():
        raw = config.get(name)
        if raw is None:
            issues.add(name, "missing required section")
            continue
        parsed = parse_section(raw, name, issues)
        if parsed is not INVALID:
            normalized[name] = parsed
    return normalized


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "ConfigValidationError",
    "ConfigValidationResult",
    "GrowthConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "redact_config",
    "validate_config",
]

"""
growth-autopilot: runtime config loader

File: src/growth_autopilot/config/loader.py
Last updated: 2026-10-19

Purpose
- Load the effective configuration from defaults, ``growth.toml``, ``GROWTH_``
  environment variables and CLI overrides, then freeze it into
  ``GrowthSettings`` at the process boundary.

Functional requirements
- Precedence: CLI > env > file > defaults.
- Env names are ``GROWTH_`` + the upper-cased dotted path joined by ``_``
  (``tenant.id`` -> ``GROWTH_TENANT_ID``); values are coerced to the field type.
- Relative paths resolve against the config file directory.
- Nothing below the CLI reads ``os.environ``; it receives ``GrowthSettings``.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Callable, Iterator, Mapping
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Final

from growth_autopilot.config.schema import PATH_FIELDS, assert_valid_config, default_config, merge_config, redact_config
from growth_autopilot.constants import CONFIG_FILENAME, ENV_PREFIX
from growth_autopilot.errors import ValidationError

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


class ConfigLoadError(ValidationError):
    """Raised when config cannot be read or an override cannot be coerced."""


@dataclass(frozen=True, slots=True)
class GrowthSettings:
    """Resolved, immutable runtime settings handed to every command."""

    config_path: Path | None
    tenant_id: str | None
    project_id: str | None
    profiles_dir: Path
    artifacts_dir: Path
    output_dir: Path
    log_level: str
    log_to_stderr: bool
    redact_secrets: bool
    profile_ttl_seconds: int

    def to_dict(self) -> dict[str, Any]:
        return {key: str(value) if isinstance(value, Path) else value for key, value in asdict(self).items()}


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load the effective config with precedence CLI > env > file > defaults."""

    resolved_path = _resolve_config_path(config_path)
    env_map = dict(os.environ if environ is None else environ)

    file_payload = _load_toml_file(resolved_path, required=config_path is not None)
    merged = assert_valid_config(merge_config(default_config(), file_payload))
    merged = merge_config(merged, _collect_env_overrides(env_map))
    merged = merge_config(merged, _materialize_cli_overrides(cli_overrides or {}))
    merged = assert_valid_config(merged)
    return normalize_paths(merged, base_dir=resolved_path.parent)


def load_settings(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> GrowthSettings:
    config = load_config(config_path, cli_overrides=cli_overrides, environ=environ)
    resolved = _resolve_config_path(config_path)
    return settings_from_config(config, config_path=resolved if resolved.exists() else None)


def settings_from_config(config: Mapping[str, Any], *, config_path: Path | None = None) -> GrowthSettings:
    observability = config["observability"]
    return GrowthSettings(
        config_path=config_path,
        tenant_id=config["tenant"].get("id"),
        project_id=config["project"].get("id"),
        profiles_dir=Path(config["profiles"]["dir"]),
        artifacts_dir=Path(config["artifacts"]["dir"]),
        output_dir=Path(config["output"]["dir"]),
        log_level=observability["log_level"],
        log_to_stderr=observability["log_to_stderr"],
        redact_secrets=observability["redact_secrets"],
        profile_ttl_seconds=config["cache"]["profile_ttl_seconds"],
    )


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Resolve every relative directory field against ``base_dir``."""

    normalized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        raw = normalized.get(section, {}).get(key)
        if isinstance(raw, str):
            candidate = Path(os.path.expandvars(raw)).expanduser()
            if not candidate.is_absolute():
                candidate = base_dir / candidate
            normalized[section][key] = Path(os.path.normpath(candidate)).as_posix()
    return normalized


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Deterministic JSON dump of the redacted effective config."""

    return json.dumps(redact_config(config), sort_keys=True, indent=2, ensure_ascii=False)


def env_name_for_path(path: tuple[str, ...]) -> str:
    return "_".join((ENV_PREFIX, *(part.upper() for part in path)))


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / CONFIG_FILENAME).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.is_file():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _scalar_fields(payload: Mapping[str, object], prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], type]]:
    for key, value in payload.items():
        if isinstance(value, Mapping):
            yield from _scalar_fields(value, (*prefix, key))
        else:
            yield (*prefix, key), type(value)


def _parse_int(raw: str) -> int:
    return int(raw)


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(raw)


_PARSERS: Final[dict[type, tuple[Callable[[str], object], str]]] = {
    str: (str, "a string"),
    int: (_parse_int, "an integer"),
    bool: (_parse_bool, "a boolean (true/false/1/0/yes/no/on/off)"),
}

# Every scalar default plus the optional identity ids, keyed by env var name.
_ENV_FIELDS: Final[dict[str, tuple[tuple[str, ...], type]]] = {
    env_name_for_path(path): (path, kind)
    for path, kind in [*_scalar_fields(default_config()), (("tenant", "id"), str), (("project", "id"), str)]
}


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_name in sorted(_ENV_FIELDS.keys() & environ.keys()):
        path, kind = _ENV_FIELDS[env_name]
        parse, expected = _PARSERS[kind]
        try:
            value = parse(environ[env_name].strip())
        except ValueError as exc:
            raise ConfigLoadError(f"{env_name} -> {'.'.join(path)} must be {expected}") from exc
        overrides = merge_config(overrides, _nest(path, value))
    return overrides


def _materialize_cli_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    """Expand dotted override keys (``tenant.id``); ``None`` values are skipped."""

    payload: dict[str, Any] = {}
    for key, value in sorted(cli_overrides.items()):
        if value is None:
            continue
        path = tuple(part for part in key.split(".") if part)
        if not path:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        payload = merge_config(payload, _nest(path, value))
    return payload


def _nest(path: tuple[str, ...], value: object) -> dict[str, Any]:
    nested: Any = value
    for part in reversed(path):
        nested = {part: nested}
    return nested


__all__ = [
    "ConfigLoadError",
    "GrowthSettings",
    "dump_effective_config",
    "env_name_for_path",
    "load_config",
    "load_settings",
    "normalize_paths",
    "settings_from_config",
]

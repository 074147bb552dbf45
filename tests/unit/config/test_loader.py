"""
growth-autopilot: unit tests for the config loader

File: tests/unit/config/test_loader.py
Last updated: 2026-10-19

Purpose
- Validate config loading from defaults, ``growth.toml``, ``GROWTH_`` env
  overrides and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Env var naming and type coercion.
- Path normalization relative to the config file.
- Redacted effective config dumping.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from growth_autopilot.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    env_name_for_path,
    load_config,
    load_settings,
)
from growth_autopilot.config.schema import ConfigValidationError

if TYPE_CHECKING:
    from pathlib import Path


def _write_config(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    empty = _write_config(tmp_path / "empty.toml", "")
    config_path = _write_config(tmp_path / "growth.toml", "[tenant]\nid = \"from-file\"\n")

    assert load_config(empty, environ={})["tenant"] == {}
    assert load_config(config_path, environ={})["tenant"]["id"] == "from-file"
    env_loaded = load_config(config_path, environ={"GROWTH_TENANT_ID": "from-env"})
    assert env_loaded["tenant"]["id"] == "from-env"
    cli_loaded = load_config(
        config_path,
        environ={"GROWTH_TENANT_ID": "from-env"},
        cli_overrides={"tenant.id": "from-cli", "project.id": None},
    )
    assert cli_loaded["tenant"]["id"] == "from-cli"
    assert cli_loaded["project"] == {}


def test_env_values_are_coerced_to_field_types(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "growth.toml", "")

    loaded = load_config(
        config_path,
        environ={
            "GROWTH_OBSERVABILITY_LOG_TO_STDERR": "yes",
            "GROWTH_CACHE_PROFILE_TTL_SECONDS": " 30 ",
            "GROWTH_OBSERVABILITY_LOG_LEVEL": "DEBUG",
        },
    )

    assert loaded["observability"]["log_to_stderr"] is True
    assert loaded["cache"]["profile_ttl_seconds"] == 30
    assert loaded["observability"]["log_level"] == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("GROWTH_CACHE_PROFILE_TTL_SECONDS", "soon", "must be an integer"),
        ("GROWTH_OBSERVABILITY_REDACT_SECRETS", "maybe", "must be a boolean"),
    ],
)
def test_uncoercible_env_values_are_rejected(tmp_path: Path, name: str, value: str, message: str) -> None:
    config_path = _write_config(tmp_path / "growth.toml", "")

    with pytest.raises(ConfigLoadError, match=message):
        load_config(config_path, environ={name: value})


def test_env_name_for_path() -> None:
    assert env_name_for_path(("tenant", "id")) == "GROWTH_TENANT_ID"
    assert env_name_for_path(("cache", "profile_ttl_seconds")) == "GROWTH_CACHE_PROFILE_TTL_SECONDS"


def test_relative_paths_resolve_against_config_directory(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "conf" / "growth.toml",
        "[profiles]\ndir = \"my-profiles\"\n\n[artifacts]\ndir = \"/var/tmp/growth-artifacts\"\n",
    )

    loaded = load_config(config_path, environ={})

    assert loaded["profiles"]["dir"] == (tmp_path / "conf" / "my-profiles").resolve().as_posix()
    assert loaded["artifacts"]["dir"] == "/var/tmp/growth-artifacts"
    assert loaded["output"]["dir"] == (tmp_path / "conf" / "jobforge-output").resolve().as_posix()


def test_defaults_resolve_against_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    settings = load_settings(environ={})

    assert settings.config_path is None
    assert settings.tenant_id is None
    assert settings.profiles_dir.as_posix() == (tmp_path / "profiles").resolve().as_posix()
    assert settings.log_level == "INFO"
    assert settings.redact_secrets is True
    assert settings.profile_ttl_seconds == 300


def test_settings_record_existing_config_path(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "growth.toml", "[project]\nid = \"web\"\n")

    settings = load_settings(config_path, environ={})

    assert settings.config_path == config_path.resolve()
    assert settings.project_id == "web"
    assert settings.to_dict()["project_id"] == "web"


def test_missing_explicit_config_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml", environ={})


def test_invalid_toml_is_an_error(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "growth.toml", "[tenant\nid = 1")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


def test_file_values_are_validated(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "growth.toml", "[observability]\nlog_level = \"LOUD\"\n")

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    assert [issue.path for issue in excinfo.value.issues] == ["observability.log_level"]


def test_dump_effective_config_is_deterministic_and_redacted(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "growth.toml", "[tenant]\nid = \"acme\"\n")
    loaded = load_config(config_path, environ={})
    loaded["tenant"]["access_token"] = "tok-123"

    first = dump_effective_config(loaded)
    second = dump_effective_config(loaded)

    assert first == second
    assert "tok-123" not in first
    assert json.loads(first)["tenant"]["id"] == "acme"

"""
growth-autopilot: growth profile loading

File: src/growth_autopilot/content/profiles.py
Last updated: 2026-10-19

Purpose
- Load ``<profiles_dir>/<name>.yaml`` growth profiles (ICP, voice, keywords,
  features), resolve ``extends`` chains and validate the merged result.

Functional requirements
- Missing profile files are dependency failures; unparsable or invalid
  profiles are validation failures naming the profile.
- Profile names are plain ``[a-z0-9_-]+`` identifiers and never resolve
  outside the profiles directory.
- Parsed files are cached by path + mtime + size; a cache hit returns the
  same profile a fresh read would.
- ``extends`` merges child over parent (mappings deep-merge, lists replace);
  cycles are rejected.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Final

import structlog
import yaml

from growth_autopilot.constants import DEFAULT_PROFILE_CACHE_TTL_SECONDS
from growth_autopilot.contracts.growth import validate_growth_profile
from growth_autopilot.errors import DependencyError, ValidationError, ValidationIssue, format_issues
from growth_autopilot.utils.cache import DeterministicCache, file_cache_key
from growth_autopilot.utils.fs import invalid_utf8_error

Profile = dict[str, Any]

# Profiles shipped with the package (``base``, ``jobforge``).
BUILTIN_PROFILES_DIR = Path(__file__).resolve().parent.parent / "data" / "profiles"

# Names map straight to ``<dir>/<name>.yaml``, so no separators or dots.
PROFILE_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"[a-z0-9_-]+")


class ProfileLoader:
    """Resolves growth profiles by name from one directory."""

    def __init__(
        self,
        profiles_dir: str | Path,
        *,
        ttl_seconds: float = DEFAULT_PROFILE_CACHE_TTL_SECONDS,
        clock: Callable[[], float] | None = None,
        logger: Any | None = None,
    ) -> None:
        self._profiles_dir = Path(profiles_dir)
        self._cache: DeterministicCache[dict[str, Any]] = DeterministicCache(ttl_seconds, clock=clock)
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def profiles_dir(self) -> Path:
        return self._profiles_dir

    def load(self, name: str) -> Profile:
        """Return the validated, fully-resolved profile called ``name``."""

        merged = self._resolve(name, ())
        merged.pop("extends", None)
        result = validate_growth_profile(merged)
        if not result.success or result.value is None:
            raise ValidationError(
                f"Invalid profile {name}: {format_issues(result.issues)}",
                result.issues,
            )
        return result.value

    def clear_cache(self) -> None:
        self._cache.clear()

    def _resolve(self, name: str, chain: tuple[str, ...]) -> dict[str, Any]:
        if name in chain:
            cycle = " -> ".join((*chain, name))
            raise ValidationError(
                f"Invalid profile {chain[0]}: extends cycle {cycle}",
                [ValidationIssue("extends", f"cycle: {cycle}")],
            )
        raw = self._read(name)
        parent_name = raw.get("extends")
        if not parent_name:
            return raw
        if not isinstance(parent_name, str):
            raise ValidationError(
                f"Invalid profile {name}: extends must be a profile name",
                [ValidationIssue("extends", "expected string")],
            )
        parent = self._resolve(parent_name, (*chain, name))
        self._logger.debug("profile_extends_resolved", profile=name, parent=parent_name)
        return _merge(parent, raw)

    def _read(self, name: str) -> dict[str, Any]:
        if not PROFILE_NAME_PATTERN.fullmatch(name):
            raise ValidationError(
                f"Invalid profile name {name!r}: expected lowercase letters, digits, '_' or '-'",
                [ValidationIssue("profile", "must match ^[a-z0-9_-]+$")],
            )
        path = self._profiles_dir / f"{name}.yaml"
        try:
            stat = path.stat()
        except FileNotFoundError as exc:
            raise DependencyError(f"Profile not found: {name}.yaml") from exc
        except OSError as exc:
            raise DependencyError(f"failed to read profile {name}: {exc}") from exc

        key = file_cache_key(str(path.resolve()), stat.st_mtime, stat.st_size)
        return copy.deepcopy(self._cache.get_or_compute(key, lambda: self._parse(name, path)))

    def _parse(self, name: str, path: Path) -> dict[str, Any]:
        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValidationError(
                f"Invalid profile {name}: {exc}",
                [ValidationIssue("", f"invalid YAML: {exc}")],
            ) from exc
        except UnicodeDecodeError as exc:
            raise invalid_utf8_error(f"profile {name}", path, exc) from exc
        except OSError as exc:
            raise DependencyError(f"failed to read profile {name}: {exc}") from exc
        if not isinstance(parsed, Mapping):
            raise ValidationError(
                f"Invalid profile {name}: expected a mapping at the document root",
                [ValidationIssue("", "expected object")],
            )
        self._logger.debug("profile_loaded", profile=name, path=str(path))
        return {str(key): value for key, value in parsed.items()}


def _merge(parent: Mapping[str, Any], child: Mapping[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(dict(parent))
    for key, value in child.items():
        existing = merged.get(key)
        if isinstance(value, Mapping) and isinstance(existing, Mapping):
            merged[key] = _merge(existing, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


__all__ = ["BUILTIN_PROFILES_DIR", "PROFILE_NAME_PATTERN", "Profile", "ProfileLoader"]

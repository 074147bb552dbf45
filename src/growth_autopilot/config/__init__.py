"""
growth-autopilot config package public API.

File: src/growth_autopilot/config/__init__.py
Last updated: 2026-10-19

Purpose
- Export config loading/validation entrypoints and public error types.
"""

from growth_autopilot.config.loader import (
    ConfigLoadError,
    GrowthSettings,
    dump_effective_config,
    load_config,
    load_settings,
    settings_from_config,
)
from growth_autopilot.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    redact_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigLoadError",
    "ConfigValidationError",
    "GrowthSettings",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "load_settings",
    "merge_config",
    "redact_config",
    "settings_from_config",
    "validate_config",
]

"""
growth-autopilot: runnerless growth automation toolkit

File: src/growth_autopilot/__init__.py
Last updated: 2026-10-19

Purpose
- Package root. Scans static sites for SEO issues, computes funnel metrics,
  proposes experiments, drafts templated copy, and packages everything into a
  deterministic, schema-validated JobForge request bundle.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from __future__ import annotations

__version__ = "0.4.0"

__all__ = ["__version__"]

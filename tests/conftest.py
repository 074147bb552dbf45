"""
growth-autopilot: shared pytest fixtures

File: tests/conftest.py
Last updated: 2026-10-19

Purpose
- Provide tenant context, a fixed clock, sequenced ids and on-disk profile,
  event and HTML fixtures shared across unit and integration tests.

Functional requirements
- Offline operation; every fixture writes under ``tmp_path`` only.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from growth_autopilot.jobforge.analyze import fixed_clock, sequence_id_factory

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from growth_autopilot.domain.ids import IdFactory
    from growth_autopilot.domain.timestamps import Clock

FIXED_MOMENT = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)

TEST_PROFILE_YAML = """
name: test-profile
icp:
  description: "test users"
  pain_points:
    - "slow performance"
    - "high costs"
  goals:
    - "Deploy faster"
    - "Save money"
voice:
  tone: professional
  style_guide: "Clear and concise. Focus on benefits."
  vocabulary:
    - "optimize"
    - "scale"
keywords:
  primary:
    - "test"
    - "optimization"
  secondary:
    - "performance"
  prohibited:
    - "guaranteed"
features:
  - name: "Feature A"
    description: "Does A"
    benefits:
      - "Benefit 1"
prohibited_claims:
  - "guaranteed results"
required_disclaimers: []
""".strip()


def make_events(counts: dict[str, int], *, day: int = 1) -> list[dict[str, Any]]:
    """Events where the first ``counts[step]`` users reach each step, in order."""

    events: list[dict[str, Any]] = []
    for offset, (step, users) in enumerate(counts.items()):
        for user in range(users):
            events.append(
                {
                    "user_id": f"user-{user}",
                    "event_name": step,
                    "timestamp": f"2024-01-{day:02d}T10:{offset:02d}:{user % 60:02d}.000Z",
                }
            )
    return events


@pytest.fixture()
def tenant_context() -> dict[str, str]:
    return {"tenant_id": "acme", "project_id": "web"}


@pytest.fixture()
def clock() -> Clock:
    return fixed_clock(FIXED_MOMENT)


@pytest.fixture()
def id_factory() -> IdFactory:
    return sequence_id_factory()


@pytest.fixture()
def profiles_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "profiles"
    directory.mkdir()
    (directory / "test-profile.yaml").write_text(TEST_PROFILE_YAML, encoding="utf-8")
    return directory


@pytest.fixture()
def events_file(tmp_path: Path) -> Path:
    path = tmp_path / "events.json"
    events = make_events({"page_view": 10, "signup_start": 6, "signup_complete": 3})
    path.write_text(json.dumps(events), encoding="utf-8")
    return path


@pytest.fixture()
def site_dir(tmp_path: Path) -> Path:
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text(
        """<html><head>
<title>Acme Growth Platform for Teams</title>
<meta name="description" content="Acme helps product teams understand funnels and ship experiments faster.">
<meta property="og:title" content="Acme">
<meta property="og:description" content="Acme growth">
<meta property="og:url" content="https://acme.test/">
<meta property="og:type" content="website">
<link rel="canonical" href="https://acme.test/">
</head><body><a href="/pricing.html">Pricing</a><a href="/missing">Gone</a></body></html>""",
        encoding="utf-8",
    )
    (site / "pricing.html").write_text(
        "<html><head><title>Short</title></head><body><a href=\"/\">Home</a></body></html>",
        encoding="utf-8",
    )
    return site


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("GROWTH_TENANT_ID", "GROWTH_PROJECT_ID", "GROWTH_PROFILES_DIR", "NO_COLOR"):
        monkeypatch.delenv(name, raising=False)
    yield

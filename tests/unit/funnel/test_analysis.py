"""
growth-autopilot: unit tests for funnel analysis

File: tests/unit/funnel/test_analysis.py
Last updated: 2026-10-19

Purpose
- Validate step counts, drop-off math, time-to-next and event parsing.

What this test file should cover
- The first step never reports drop-off.
- The biggest drop-off is the strictly highest positive rate after step one.
- Bad event exports raise the right error class.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from conftest import make_events
from hypothesis import given, settings
from hypothesis import strategies as st

from growth_autopilot.contracts.growth import validate_funnel_metrics
from growth_autopilot.errors import DependencyError, ValidationError
from growth_autopilot.funnel.analysis import (
    analyze_funnel,
    compute_funnel,
    infer_funnel_steps,
    js_round,
    parse_events,
)

if TYPE_CHECKING:
    from pathlib import Path

    from growth_autopilot.domain.ids import IdFactory
    from growth_autopilot.domain.timestamps import Clock

STEPS = ["page_view", "signup_start", "signup_complete"]


@pytest.mark.unit
def test_analyze_funnel_metrics(
    events_file: Path, tenant_context: dict[str, str], clock: Clock, id_factory: IdFactory
) -> None:
    metrics = analyze_funnel(tenant_context, events_file, "signup", STEPS, clock=clock, id_factory=id_factory)

    assert validate_funnel_metrics(metrics).success
    assert metrics["id"] == "funnel-1"
    assert metrics["computed_at"] == "2024-03-01T12:00:00.000Z"
    assert metrics["total_entrances"] == 10
    assert metrics["total_conversions"] == 3
    assert metrics["overall_conversion_rate"] == pytest.approx(0.3)
    assert metrics["biggest_drop_off_step"] == "signup_complete"
    assert metrics["date_range"] == {"start": "2024-01-01T10:00:00.000Z", "end": "2024-01-01T10:02:02.000Z"}
    assert metrics["evidence"][0]["value"] == 19
    assert metrics["evidence"][-1]["value"] == 50


@pytest.mark.unit
def test_step_drop_offs(events_file: Path, tenant_context: dict[str, str]) -> None:
    steps = analyze_funnel(tenant_context, events_file, "signup", STEPS)["steps"]

    assert [(s["unique_users"], s["drop_off_count"]) for s in steps] == [(10, 0), (6, 4), (3, 3)]
    assert [s["drop_off_rate"] for s in steps] == [0, pytest.approx(0.4), pytest.approx(0.5)]


@pytest.mark.unit
def test_average_time_to_next_step(events_file: Path, tenant_context: dict[str, str]) -> None:
    steps = analyze_funnel(tenant_context, events_file, "signup", STEPS)["steps"]

    assert steps[0]["avg_time_to_next_seconds"] == pytest.approx(60.0)
    assert steps[1]["avg_time_to_next_seconds"] == pytest.approx(60.0)
    assert "avg_time_to_next_seconds" not in steps[2]


@pytest.mark.unit
def test_no_drop_off_leaves_biggest_absent(tmp_path: Path, tenant_context: dict[str, str]) -> None:
    path = tmp_path / "flat.json"
    path.write_text(json.dumps(make_events({"a": 4, "b": 4})), encoding="utf-8")

    metrics = analyze_funnel(tenant_context, path, "flat", ["a", "b"])

    assert "biggest_drop_off_step" not in metrics
    assert len(metrics["evidence"]) == 2


@pytest.mark.unit
def test_users_skipping_the_entry_step_do_not_advance() -> None:
    events = parse_events(
        [
            {"user_id": "u1", "event_name": "signup", "timestamp": "2024-01-01T10:00:00Z"},
            {"user_id": "u1", "event_name": "visit", "timestamp": "2024-01-01T10:05:00Z"},
        ]
    )

    computation = compute_funnel(events, ["visit", "signup"])

    assert [step["unique_users"] for step in computation.steps] == [1, 1]
    assert "avg_time_to_next_seconds" not in computation.steps[0]
    assert computation.biggest_drop_off_step is None


@pytest.mark.unit
@settings(max_examples=60, deadline=None)
@given(counts=st.lists(st.integers(min_value=0, max_value=12), min_size=1, max_size=5))
def test_rates_stay_within_bounds(counts: list[int]) -> None:
    names = [f"step_{index}" for index in range(len(counts))]
    raw = make_events(dict(zip(names, counts, strict=True)))
    if not raw:
        return

    computation = compute_funnel(parse_events(raw), names)

    assert computation.steps[0]["drop_off_rate"] == 0
    assert all(0 <= step["drop_off_rate"] <= 1 for step in computation.steps)
    assert all(step["drop_off_count"] >= 0 for step in computation.steps)
    if computation.biggest_drop_off_step is not None:
        assert computation.biggest_drop_off_step != names[0]


@pytest.mark.unit
def test_missing_event_file_is_dependency_error(tmp_path: Path, tenant_context: dict[str, str]) -> None:
    with pytest.raises(DependencyError):
        analyze_funnel(tenant_context, tmp_path / "absent.json", "f", STEPS)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("data", "message"),
    [
        ({"events": []}, "Event data must be an array"),
        ([], "No events found in file"),
        ([{"user_id": "u", "event_name": "x"}], "Events must have user_id, event_name, and timestamp fields"),
        ([{"user_id": "u", "event_name": "x", "timestamp": "soon"}], "Events must have"),
    ],
)
def test_invalid_event_data(data: object, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        parse_events(data)


@pytest.mark.unit
def test_infer_funnel_steps_ranks_by_frequency() -> None:
    events = parse_events(make_events({"view": 3, "click": 5, "buy": 1}))

    assert infer_funnel_steps(events, max_steps=2) == ["click", "view"]


@pytest.mark.unit
@pytest.mark.parametrize(("value", "expected"), [(54.5, 55), (54.4, 54), (-0.5, 0), (0.0, 0)])
def test_js_round_half_up(value: float, expected: int) -> None:
    assert js_round(value) == expected

"""
growth-autopilot: conversion funnel analysis over exported event logs

File: src/growth_autopilot/funnel/analysis.py
Last updated: 2026-10-19

Purpose
- Compute per-step unique users, drop-off and time-to-next-step from a JSON
  array of ``{user_id, event_name, timestamp}`` events.

Functional requirements
- Events are processed in timestamp order.
- A user enters the funnel only through an event for the first step; later
  steps count every user that fired them but only entered users advance.
- Drop-off counts and rates are clamped at zero.
- The biggest drop-off is the first step (after the first) with the strictly
  highest positive rate; it is absent when no step loses users.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from growth_autopilot.domain.ids import FUNNEL_ID_PREFIX, IdFactory, generate_prefixed_id
from growth_autopilot.domain.timestamps import Clock, now_iso8601z, parse_iso8601, to_iso8601z
from growth_autopilot.errors import ValidationError, ValidationIssue
from growth_autopilot.utils.fs import read_json_file

REQUIRED_EVENT_FIELDS = ("user_id", "event_name", "timestamp")


@dataclass(frozen=True, slots=True)
class RawEvent:
    user_id: str
    event_name: str
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class FunnelComputation:
    steps: list[dict[str, Any]]
    biggest_drop_off_step: str | None


def load_events(path: str | Path) -> list[RawEvent]:
    """Read an event export; missing files are dependency failures."""

    data = read_json_file(path, label="event file")
    return parse_events(data)


def parse_events(data: object) -> list[RawEvent]:
    if not isinstance(data, list):
        raise ValidationError("Event data must be an array", [ValidationIssue("", "expected array")])
    if not data:
        raise ValidationError("No events found in file", [ValidationIssue("", "must contain at least 1 item(s)")])

    events: list[RawEvent] = []
    issues: list[ValidationIssue] = []
    for index, raw in enumerate(data):
        if not isinstance(raw, Mapping) or any(not raw.get(key) for key in REQUIRED_EVENT_FIELDS):
            issues.append(ValidationIssue(str(index), "missing user_id, event_name or timestamp"))
            continue
        try:
            timestamp = parse_iso8601(str(raw["timestamp"]))
        except ValueError:
            issues.append(ValidationIssue(f"{index}.timestamp", f"invalid timestamp {raw['timestamp']!r}"))
            continue
        events.append(RawEvent(user_id=str(raw["user_id"]), event_name=str(raw["event_name"]), timestamp=timestamp))
    if issues:
        raise ValidationError("Events must have user_id, event_name, and timestamp fields", issues)
    return events


def compute_funnel(events: Sequence[RawEvent], step_names: Sequence[str]) -> FunnelComputation:
    ordered = sorted(events, key=lambda event: event.timestamp)
    users: dict[str, set[str]] = {name: set() for name in step_names}
    event_counts: Counter[str] = Counter()
    next_step_times: dict[str, list[float]] = {name: [] for name in step_names}
    # user_id -> (current step index, time of the event that reached it)
    progress: dict[str, tuple[int, datetime]] = {}

    for event in ordered:
        if event.event_name not in users:
            continue
        step_index = step_names.index(event.event_name)
        users[event.event_name].add(event.user_id)
        event_counts[event.event_name] += 1

        state = progress.get(event.user_id)
        if state is not None:
            current_index, reached_at = state
            if step_index > current_index:
                elapsed = (event.timestamp - reached_at).total_seconds()
                next_step_times[step_names[current_index]].append(elapsed)
                progress[event.user_id] = (step_index, event.timestamp)
        elif step_index == 0:
            progress[event.user_id] = (0, event.timestamp)

    steps: list[dict[str, Any]] = []
    previous_users = 0
    biggest: str | None = None
    max_rate = 0.0
    for index, name in enumerate(step_names):
        unique_users = len(users[name])
        drop_off_count = 0
        drop_off_rate: float = 0
        if index > 0:
            drop_off_count = previous_users - unique_users
            drop_off_rate = drop_off_count / previous_users if previous_users > 0 else 0

        step: dict[str, Any] = {
            "step_name": name,
            "event_name": name,
            "unique_users": unique_users,
            "total_events": event_counts[name],
            "drop_off_count": max(0, drop_off_count),
            "drop_off_rate": max(0, drop_off_rate),
        }
        times = next_step_times[name]
        if times:
            step["avg_time_to_next_seconds"] = math.fsum(times) / len(times)
        steps.append(step)

        if index > 0 and drop_off_rate > max_rate:
            max_rate = drop_off_rate
            biggest = name
        previous_users = unique_users

    return FunnelComputation(steps=steps, biggest_drop_off_step=biggest)


def analyze_funnel(
    tenant_context: Mapping[str, str],
    source_file: str | Path,
    funnel_name: str,
    steps: Sequence[str],
    *,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> dict[str, Any]:
    events = load_events(source_file)
    return build_funnel_metrics(
        tenant_context,
        events,
        source_file=str(source_file),
        funnel_name=funnel_name,
        steps=steps,
        clock=clock,
        id_factory=id_factory,
    )


def build_funnel_metrics(
    tenant_context: Mapping[str, str],
    events: Sequence[RawEvent],
    *,
    source_file: str,
    funnel_name: str,
    steps: Sequence[str],
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
) -> dict[str, Any]:
    if not steps:
        raise ValidationError("funnel requires at least one step", [ValidationIssue("steps", "must contain at least 1 item(s)")])

    computation = compute_funnel(events, list(steps))
    funnel_steps = computation.steps
    start = to_iso8601z(min(event.timestamp for event in events))
    end = to_iso8601z(max(event.timestamp for event in events))

    total_entrances = funnel_steps[0]["unique_users"]
    total_conversions = funnel_steps[-1]["unique_users"]
    overall_rate = total_conversions / total_entrances if total_entrances > 0 else 0

    evidence: list[dict[str, Any]] = [
        {"type": "json_path", "path": "$.length", "description": "Total events processed", "value": len(events)},
        {"type": "json_path", "path": "$[*].timestamp", "description": "Date range", "value": f"{start} to {end}"},
    ]
    biggest = computation.biggest_drop_off_step
    if biggest is not None:
        rate = next(step["drop_off_rate"] for step in funnel_steps if step["step_name"] == biggest)
        evidence.append(
            {
                "type": "calculation",
                "path": "drop_off_rate",
                "description": f"Biggest drop-off at {biggest}",
                "value": js_round(rate * 100),
            }
        )

    metrics: dict[str, Any] = {
        "tenant_id": tenant_context["tenant_id"],
        "project_id": tenant_context["project_id"],
        "id": (id_factory or generate_prefixed_id)(FUNNEL_ID_PREFIX),
        "computed_at": now_iso8601z(clock),
        "source_file": source_file,
        "funnel_name": funnel_name,
        "date_range": {"start": start, "end": end},
        "total_entrances": total_entrances,
        "total_conversions": total_conversions,
        "overall_conversion_rate": overall_rate,
        "steps": funnel_steps,
        "evidence": evidence,
    }
    if biggest is not None:
        metrics["biggest_drop_off_step"] = biggest
    return metrics


def infer_funnel_steps(events: Sequence[RawEvent], max_steps: int = 5) -> list[str]:
    """Most frequent event names, most frequent first; ties keep first-seen order."""

    counts: Counter[str] = Counter(event.event_name for event in events)
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [name for name, _ in ranked[:max_steps]]


def js_round(value: float) -> int:
    """Round half up, matching the rounding used for published percentages."""

    return int(math.floor(value + 0.5))


__all__ = [
    "FunnelComputation",
    "RawEvent",
    "analyze_funnel",
    "build_funnel_metrics",
    "compute_funnel",
    "infer_funnel_steps",
    "js_round",
    "load_events",
    "parse_events",
]

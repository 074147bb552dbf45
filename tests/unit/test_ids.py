"""Unit tests for prefixed identifier generation."""

from __future__ import annotations

import re
from datetime import UTC, datetime

import pytest

from growth_autopilot.domain.ids import JOB_ID_PREFIX, generate_prefixed_id

pytestmark = pytest.mark.unit


def test_prefixed_id_embeds_clock_milliseconds() -> None:
    moment = datetime(2024, 1, 1, tzinfo=UTC)

    job_id = generate_prefixed_id(JOB_ID_PREFIX, clock=lambda: moment)

    assert re.fullmatch(r"job-1704067200000-[0-9a-f]{10}", job_id)


def test_prefixed_ids_are_unique() -> None:
    assert len({generate_prefixed_id("draft") for _ in range(50)}) == 50


@pytest.mark.parametrize("prefix", ["", "two-part"])
def test_invalid_prefix_is_rejected(prefix: str) -> None:
    with pytest.raises(ValueError, match="prefix must be non-empty"):
        generate_prefixed_id(prefix)

"""Identifier generation for reports, bundles, job requests and producer artifacts."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from typing import Final

from growth_autopilot.domain.timestamps import Clock, utc_now

# Stable entity ID prefixes.
REPORT_ID_PREFIX: Final[str] = "report"
BUNDLE_ID_PREFIX: Final[str] = "bundle"
JOB_ID_PREFIX: Final[str] = "job"
BATCH_ID_PREFIX: Final[str] = "batch"
FINDING_ID_PREFIX: Final[str] = "finding"
RECOMMENDATION_ID_PREFIX: Final[str] = "recommendation"
AUDIT_ID_PREFIX: Final[str] = "audit"
SEO_FINDING_ID_PREFIX: Final[str] = "seo"
FUNNEL_ID_PREFIX: Final[str] = "funnel"
PROPOSAL_ID_PREFIX: Final[str] = "exp"
DRAFT_ID_PREFIX: Final[str] = "draft"
PACKET_ID_PREFIX: Final[str] = "packet"

IdFactory = Callable[[str], str]
"""Callable mapping an ID prefix to a fresh identifier."""


def generate_prefixed_id(prefix: str, *, clock: Clock | None = None) -> str:
    """Return ``<prefix>-<epoch ms>-<10 hex chars>``."""
    if not prefix or "-" in prefix:
        raise ValueError("prefix must be non-empty and must not contain '-'")
    epoch_ms = int((clock or utc_now)().timestamp() * 1000)
    return f"{prefix}-{epoch_ms}-{secrets.token_hex(5)}"


__all__ = [
    "AUDIT_ID_PREFIX",
    "BATCH_ID_PREFIX",
    "BUNDLE_ID_PREFIX",
    "DRAFT_ID_PREFIX",
    "FINDING_ID_PREFIX",
    "FUNNEL_ID_PREFIX",
    "IdFactory",
    "JOB_ID_PREFIX",
    "PACKET_ID_PREFIX",
    "PROPOSAL_ID_PREFIX",
    "RECOMMENDATION_ID_PREFIX",
    "REPORT_ID_PREFIX",
    "SEO_FINDING_ID_PREFIX",
    "generate_prefixed_id",
]

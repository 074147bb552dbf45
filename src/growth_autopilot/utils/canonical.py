"""
growth-autopilot: canonical JSON serialization and stable hashing

File: src/growth_autopilot/utils/canonical.py
Last updated: 2026-10-19

Purpose
- Produce a byte-stable serialization of JSON-like values regardless of key
  insertion order, and derive SHA-256 content hashes from it.

Functional requirements
- Keys are sorted ascending by code point at every depth; list order is kept.
- Shared sub-objects are processed once per call (identity memo).
- Cycles raise ``ValueError`` rather than recursing forever.
- Non-finite floats and non-string object keys are rejected.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Final

from growth_autopilot.constants import CANONICALIZATION, HASH_ALGORITHM
from growth_autopilot.utils.hashing import sha256_text

_IN_PROGRESS: Final = object()

__all__ = [
    "canonicalize",
    "serialize_deterministic",
    "sort_keys_deep",
    "stable_hash",
    "with_canonical_hash",
]


def sort_keys_deep(value: object) -> object:
    """Return a copy of ``value`` whose mappings have lexicographically sorted keys."""

    return _sort(value, {})


def _sort(value: object, memo: dict[int, object]) -> object:
    if not isinstance(value, (Mapping, list, tuple)):
        return value

    marker = id(value)
    cached = memo.get(marker)
    if cached is _IN_PROGRESS:
        raise ValueError("cannot canonicalize a cyclic structure")
    if cached is not None:
        return cached
    memo[marker] = _IN_PROGRESS

    result: object
    if isinstance(value, Mapping):
        for key in value:
            if not isinstance(key, str):
                raise ValueError(f"cannot canonicalize a non-string object key: {key!r}")
        result = {key: _sort(value[key], memo) for key in sorted(value)}
    else:
        result = [_sort(item, memo) for item in value]
    memo[marker] = result
    return result


def canonicalize(value: object) -> str:
    """Compact sorted-key JSON with no extraneous whitespace."""

    return json.dumps(
        sort_keys_deep(value),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def stable_hash(value: object) -> str:
    """SHA-256 (64 lowercase hex chars) over ``canonicalize(value)``."""

    return sha256_text(canonicalize(value))


def serialize_deterministic(value: object) -> str:
    """Sorted-key JSON pretty-printed with a 2-space indent, for on-disk artifacts."""

    return json.dumps(
        sort_keys_deep(value),
        indent=2,
        ensure_ascii=False,
        allow_nan=False,
    )


def with_canonical_hash(value: Mapping[str, object]) -> dict[str, object]:
    """Attach ``canonical_hash`` computed over ``value`` plus the canonicalization marker.

    Existing hash fields on ``value`` are discarded first so the hash never
    covers itself.
    """

    base = {
        key: item
        for key, item in value.items()
        if key not in {"canonical_hash", "canonical_hash_algorithm"}
    }
    base["canonicalization"] = CANONICALIZATION
    return {
        **base,
        "canonical_hash": stable_hash(base),
        "canonical_hash_algorithm": HASH_ALGORITHM,
    }

"""
growth-autopilot: unit tests for canonical JSON and stable hashing

File: tests/unit/utils/test_canonical.py
Last updated: 2026-10-19

Purpose
- Validate key-order independence, cycle rejection and the canonical hash
  envelope fields.
"""

from __future__ import annotations

import json
import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from growth_autopilot.utils.canonical import (
    canonicalize,
    serialize_deterministic,
    sort_keys_deep,
    stable_hash,
    with_canonical_hash,
)

_KEYS = st.text(min_size=1, max_size=8)
_SCALARS = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(10**9), max_value=10**9),
    st.floats(allow_nan=False, allow_infinity=False),
    st.text(max_size=12),
)
_JSON = st.recursive(
    _SCALARS,
    lambda children: st.one_of(
        st.lists(children, max_size=4),
        st.dictionaries(_KEYS, children, max_size=4),
    ),
    max_leaves=20,
)


def _reverse_keys(value: object) -> object:
    if isinstance(value, dict):
        return {key: _reverse_keys(value[key]) for key in reversed(list(value))}
    if isinstance(value, list):
        return [_reverse_keys(item) for item in value]
    return value


@pytest.mark.unit
@settings(max_examples=75, deadline=None)
@given(value=_JSON)
def test_canonicalize_ignores_key_insertion_order(value: object) -> None:
    assert canonicalize(value) == canonicalize(_reverse_keys(value))
    assert stable_hash(value) == stable_hash(_reverse_keys(value))


@pytest.mark.unit
@settings(max_examples=50, deadline=None)
@given(value=_JSON)
def test_canonical_form_parses_back_to_equal_value(value: object) -> None:
    assert json.loads(canonicalize(value)) == sort_keys_deep(value)


@pytest.mark.unit
def test_canonicalize_is_compact_and_sorted_at_every_depth() -> None:
    value = {"b": 1, "a": {"z": [3, {"y": 2, "x": 1}], "m": "é"}}

    assert canonicalize(value) == '{"a":{"m":"é","z":[3,{"x":1,"y":2}]},"b":1}'


@pytest.mark.unit
def test_list_order_is_preserved() -> None:
    assert canonicalize([3, 1, 2]) == "[3,1,2]"


@pytest.mark.unit
def test_stable_hash_is_lowercase_sha256_hex() -> None:
    digest = stable_hash({"a": 1})

    assert len(digest) == 64
    assert digest == digest.lower()
    int(digest, 16)


@pytest.mark.unit
def test_shared_subobjects_are_not_treated_as_cycles() -> None:
    shared = {"k": 1}

    assert canonicalize({"a": shared, "b": shared}) == '{"a":{"k":1},"b":{"k":1}}'


@pytest.mark.unit
def test_cyclic_structures_are_rejected() -> None:
    cyclic: dict[str, object] = {}
    cyclic["self"] = cyclic

    with pytest.raises(ValueError, match="cyclic"):
        canonicalize(cyclic)


@pytest.mark.unit
def test_non_finite_floats_are_rejected() -> None:
    with pytest.raises(ValueError):
        canonicalize({"value": math.inf})


@pytest.mark.unit
def test_non_string_keys_are_rejected_instead_of_merged() -> None:
    with pytest.raises(ValueError, match="non-string object key"):
        canonicalize({1: "int", "1": "str"})
    with pytest.raises(ValueError, match="non-string object key"):
        stable_hash({"nested": [{None: 1}]})


@pytest.mark.unit
def test_serialize_deterministic_uses_two_space_indent() -> None:
    assert serialize_deterministic({"b": 1, "a": 2}) == '{\n  "a": 2,\n  "b": 1\n}'


@pytest.mark.unit
def test_with_canonical_hash_covers_payload_and_marker() -> None:
    hashed = with_canonical_hash({"b": 2, "a": 1})

    assert hashed["canonicalization"] == "sorted_keys"
    assert hashed["canonical_hash_algorithm"] == "sha256"
    assert hashed["canonical_hash"] == stable_hash({"a": 1, "b": 2, "canonicalization": "sorted_keys"})


@pytest.mark.unit
def test_with_canonical_hash_is_idempotent() -> None:
    once = with_canonical_hash({"a": 1})

    assert with_canonical_hash(once) == once


@pytest.mark.unit
def test_with_canonical_hash_changes_with_content() -> None:
    assert with_canonical_hash({"a": 1})["canonical_hash"] != with_canonical_hash({"a": 2})["canonical_hash"]

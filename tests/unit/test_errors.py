"""
growth-autopilot: unit tests for the error taxonomy and envelope

File: tests/unit/test_errors.py
Last updated: 2026-10-19

Purpose
- Validate exit-code classification and the structured error envelope.
"""

from __future__ import annotations

import pytest

from growth_autopilot.errors import (
    DEPENDENCY_USER_MESSAGE,
    UNEXPECTED_USER_MESSAGE,
    DependencyError,
    ExitCode,
    InvariantViolationError,
    ValidationError,
    ValidationIssue,
    classify_error,
    to_error_envelope,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (ValidationError("bad"), ExitCode.VALIDATION_ERROR),
        (DependencyError("gone"), ExitCode.DEPENDENCY_ERROR),
        (FileNotFoundError("missing"), ExitCode.DEPENDENCY_ERROR),
        (InvariantViolationError("broken"), ExitCode.INTERNAL_ERROR),
        (KeyError("boom"), ExitCode.INTERNAL_ERROR),
    ],
)
def test_classify_error(exc: BaseException, expected: ExitCode) -> None:
    assert classify_error(exc) is expected


@pytest.mark.unit
def test_classification_follows_the_cause_chain() -> None:
    try:
        try:
            raise DependencyError("profile store down")
        except DependencyError as inner:
            raise RuntimeError("wrapped") from inner
    except RuntimeError as outer:
        assert classify_error(outer) is ExitCode.DEPENDENCY_ERROR


@pytest.mark.unit
def test_validation_envelope_lists_every_issue() -> None:
    exc = ValidationError(
        "invalid analyze inputs",
        [ValidationIssue("events.0.tenant_id", "Required"), ValidationIssue("", "expected object")],
    )

    envelope = to_error_envelope(exc).to_dict()

    assert envelope == {
        "code": "VALIDATION_ERROR",
        "message": "invalid analyze inputs",
        "userMessage": "Validation failed: events.0.tenant_id: Required; (root): expected object",
        "retryable": False,
    }


@pytest.mark.unit
def test_dependency_envelope_is_retryable() -> None:
    envelope = to_error_envelope(DependencyError("Profile not found: x.yaml"))

    assert envelope.code == "DEPENDENCY_FAILURE"
    assert envelope.retryable is True
    assert envelope.user_message == DEPENDENCY_USER_MESSAGE


@pytest.mark.unit
def test_unexpected_envelope_hides_details_from_users() -> None:
    envelope = to_error_envelope(KeyError("internal"))

    assert envelope.code == "UNEXPECTED_ERROR"
    assert envelope.retryable is False
    assert envelope.user_message == UNEXPECTED_USER_MESSAGE


@pytest.mark.unit
def test_cause_only_present_in_debug_mode() -> None:
    try:
        raise ValueError("kaboom")
    except ValueError as exc:
        plain = to_error_envelope(exc).to_dict()
        debug = to_error_envelope(exc, debug=True).to_dict()

    assert "cause" not in plain
    assert "kaboom" in str(debug["cause"])


@pytest.mark.unit
def test_envelope_redacts_message_and_context() -> None:
    envelope = to_error_envelope(
        DependencyError("request failed with password=supersecret"),
        {"api_key": "sk-live", "tenant": "acme"},
    )

    assert "supersecret" not in envelope.message
    assert envelope.context == {"api_key": "[REDACTED]", "tenant": "acme"}

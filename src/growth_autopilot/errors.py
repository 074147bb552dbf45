"""
growth-autopilot: error taxonomy, exit codes and the structured error envelope

File: src/growth_autopilot/errors.py
Last updated: 2026-10-19

Purpose
- Define the three failure classes surfaced to callers (validation, dependency,
  unexpected) and convert any raised exception into one envelope shape.

Functional requirements
- Validation failures list every violated field.
- Dependency failures are retryable; nothing else is.
- Envelope text and context never carry secrets.
- Stack traces appear only when the caller asks for debug output.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

from growth_autopilot.security.redaction import redact_structure, redact_text

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class ExitCode(IntEnum):
    """Deterministic process exit-code contract."""

    SUCCESS = 0
    VALIDATION_ERROR = 2
    DEPENDENCY_ERROR = 3
    INTERNAL_ERROR = 4


ERROR_CODE_VALIDATION = "VALIDATION_ERROR"
ERROR_CODE_DEPENDENCY = "DEPENDENCY_FAILURE"
ERROR_CODE_UNEXPECTED = "UNEXPECTED_ERROR"

DEPENDENCY_USER_MESSAGE = "An external dependency is unavailable. The operation can be retried."
UNEXPECTED_USER_MESSAGE = "An unexpected error occurred. Please report this issue."


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One violated field; ``path`` is dotted with numeric list indices."""

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


class ValidationError(ValueError):
    """Bad or missing input. Never retryable."""

    def __init__(self, message: str, issues: Iterable[ValidationIssue] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.issues: tuple[ValidationIssue, ...] = tuple(issues)


class DependencyError(RuntimeError):
    """File I/O failure or a missing external resource. Retryable."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvariantViolationError(RuntimeError):
    """A self-produced artifact failed its own schema; indicates a defect."""

    def __init__(self, message: str, issues: Iterable[ValidationIssue] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.issues: tuple[ValidationIssue, ...] = tuple(issues)


@dataclass(frozen=True, slots=True)
class ErrorEnvelope:
    code: str
    message: str
    user_message: str
    retryable: bool
    cause: str | None = None
    context: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": self.message,
            "userMessage": self.user_message,
            "retryable": self.retryable,
        }
        if self.cause is not None:
            payload["cause"] = self.cause
        if self.context is not None:
            payload["context"] = self.context
        return payload


def format_issues(issues: Iterable[ValidationIssue]) -> str:
    return "; ".join(f"{issue.path or '(root)'}: {issue.message}" for issue in issues)


def classify_error(exc: BaseException) -> ExitCode:
    """Map an exception (and its cause chain) to a process exit code."""

    for item in iter_exception_chain(exc):
        if isinstance(item, InvariantViolationError):
            return ExitCode.INTERNAL_ERROR
        if isinstance(item, ValidationError):
            return ExitCode.VALIDATION_ERROR
        if isinstance(item, (DependencyError, OSError)):
            return ExitCode.DEPENDENCY_ERROR
    return ExitCode.INTERNAL_ERROR


def to_error_envelope(
    exc: BaseException,
    context: Mapping[str, object] | None = None,
    *,
    debug: bool = False,
) -> ErrorEnvelope:
    """Convert ``exc`` into the structured envelope surfaced at every boundary."""

    exit_code = classify_error(exc)
    message = redact_text(str(exc).strip() or exc.__class__.__name__)
    cause = None
    if debug:
        cause = redact_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    redacted_context = None
    if context is not None:
        redacted = redact_structure(dict(context))
        redacted_context = redacted if isinstance(redacted, dict) else None

    if exit_code is ExitCode.VALIDATION_ERROR:
        issues = _find_issues(exc)
        user_message = f"Validation failed: {format_issues(issues)}" if issues else message
        return ErrorEnvelope(
            code=ERROR_CODE_VALIDATION,
            message=message,
            user_message=redact_text(user_message),
            retryable=False,
            cause=cause,
            context=redacted_context,
        )
    if exit_code is ExitCode.DEPENDENCY_ERROR:
        return ErrorEnvelope(
            code=ERROR_CODE_DEPENDENCY,
            message=message,
            user_message=DEPENDENCY_USER_MESSAGE,
            retryable=True,
            cause=cause,
            context=redacted_context,
        )
    return ErrorEnvelope(
        code=ERROR_CODE_UNEXPECTED,
        message=message,
        user_message=UNEXPECTED_USER_MESSAGE,
        retryable=False,
        cause=cause,
        context=redacted_context,
    )


def iter_exception_chain(exc: BaseException) -> list[BaseException]:
    seen: set[int] = set()
    items: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None:
        marker = id(current)
        if marker in seen:
            break
        seen.add(marker)
        items.append(current)
        if current.__cause__ is not None:
            current = current.__cause__
            continue
        if current.__context__ is not None and not current.__suppress_context__:
            current = current.__context__
            continue
        break
    return items


def _find_issues(exc: BaseException) -> tuple[ValidationIssue, ...]:
    for item in iter_exception_chain(exc):
        if isinstance(item, ValidationError):
            return item.issues
    return ()


__all__ = [
    "DEPENDENCY_USER_MESSAGE",
    "ERROR_CODE_DEPENDENCY",
    "ERROR_CODE_UNEXPECTED",
    "ERROR_CODE_VALIDATION",
    "UNEXPECTED_USER_MESSAGE",
    "DependencyError",
    "ErrorEnvelope",
    "ExitCode",
    "InvariantViolationError",
    "ValidationError",
    "ValidationIssue",
    "classify_error",
    "format_issues",
    "iter_exception_chain",
    "to_error_envelope",
]

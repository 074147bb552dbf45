"""
growth-autopilot: declarative field parsers for contract validation

File: src/growth_autopilot/contracts/fields.py
Last updated: 2026-10-19

Purpose
- Small combinators (strings, numbers, enums, arrays, objects) used to declare
  every contract schema. A parser takes ``(value, path, issues)`` and returns
  the normalized value, or ``INVALID`` after recording issues.

Functional requirements
- Validation accumulates every issue instead of stopping at the first one.
- Objects drop unknown keys and apply declared defaults.
- Enumerations are closed; nothing is silently coerced.
- Returned values are fresh copies; inputs are never mutated.
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Generic, TypeVar

from growth_autopilot.errors import ValidationError, ValidationIssue

T = TypeVar("T")

INVALID: Final = object()
_MISSING: Final = object()

_ISO_DATETIME_RE: Final[re.Pattern[str]] = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z$"
)


class IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ValidationIssue(path=path, message=message))

    def items(self) -> tuple[ValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


Parser = Callable[[object, str, IssueCollector], Any]


@dataclass(frozen=True, slots=True)
class ParseResult(Generic[T]):
    """Outcome of validating one value: either ``value`` or ``issues``."""

    value: T | None
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def success(self) -> bool:
        return not self.issues

    @property
    def messages(self) -> list[str]:
        return [f"{issue.path or '(root)'}: {issue.message}" for issue in self.issues]


@dataclass(frozen=True, slots=True)
class Field:
    parser: Parser
    required: bool = True
    default: object = _MISSING


def required(parser: Parser) -> Field:
    return Field(parser=parser)


def optional(parser: Parser) -> Field:
    return Field(parser=parser, required=False)


def defaulted(parser: Parser, default: object) -> Field:
    return Field(parser=parser, required=False, default=default)


def join(path: str, key: str | int) -> str:
    if not path:
        return str(key)
    return f"{path}.{key}"


def run(parser: Parser, value: object) -> ParseResult[Any]:
    issues = IssueCollector()
    parsed = parser(value, "", issues)
    if issues.has_issues or parsed is INVALID:
        return ParseResult(value=None, issues=issues.items())
    return ParseResult(value=parsed)


def run_or_raise(parser: Parser, value: object, *, label: str) -> Any:
    """Validate ``value`` and return it, raising ``ValidationError`` with all issues."""

    result = run(parser, value)
    if not result.success:
        raise ValidationError(f"invalid {label}", result.issues)
    return result.value


# ---------------------------------------------------------------------------
# Scalar parsers
# ---------------------------------------------------------------------------


def string(*, min_length: int = 0, pattern: re.Pattern[str] | None = None) -> Parser:
    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if not isinstance(value, str):
            issues.add(path, f"expected string, got {_type_name(value)}")
            return INVALID
        if len(value) < min_length:
            issues.add(path, "must not be empty" if min_length == 1 else f"must be at least {min_length} characters")
            return INVALID
        if pattern is not None and not pattern.fullmatch(value):
            issues.add(path, f"must match pattern {pattern.pattern}")
            return INVALID
        return value

    return parse


def non_empty_string() -> Parser:
    return string(min_length=1)


def datetime_string() -> Parser:
    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if not isinstance(value, str):
            issues.add(path, f"expected string, got {_type_name(value)}")
            return INVALID
        if not _ISO_DATETIME_RE.fullmatch(value):
            issues.add(path, "must be an ISO-8601 UTC datetime (YYYY-MM-DDTHH:MM:SS.sssZ)")
            return INVALID
        return value

    return parse


def boolean() -> Parser:
    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if isinstance(value, bool):
            return value
        issues.add(path, f"expected boolean, got {_type_name(value)}")
        return INVALID

    return parse


def number(*, minimum: float | None = None, integer: bool = False, positive: bool = False) -> Parser:
    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            issues.add(path, f"expected {'integer' if integer else 'number'}, got {_type_name(value)}")
            return INVALID
        if isinstance(value, float) and not math.isfinite(value):
            issues.add(path, "must be finite")
            return INVALID
        if integer and isinstance(value, float) and not value.is_integer():
            issues.add(path, "expected integer, got float")
            return INVALID
        if positive and value <= 0:
            issues.add(path, "must be greater than 0")
            return INVALID
        if minimum is not None and value < minimum:
            issues.add(path, f"must be >= {minimum}")
            return INVALID
        return int(value) if integer else value

    return parse


def enum(*allowed: str) -> Parser:
    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if not isinstance(value, str) or value not in allowed:
            issues.add(path, f"invalid value {value!r}; expected one of: {', '.join(allowed)}")
            return INVALID
        return value

    return parse


def literal(expected: object) -> Parser:
    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if value != expected or type(value) is not type(expected):
            issues.add(path, f"expected {expected!r}")
            return INVALID
        return value

    return parse


def nullable(parser: Parser) -> Parser:
    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if value is None:
            return None
        return parser(value, path, issues)

    return parse


def any_of(*parsers: Parser, description: str) -> Parser:
    """Accept the first alternative that parses cleanly."""

    def parse(value: object, path: str, issues: IssueCollector) -> object:
        for candidate in parsers:
            scratch = IssueCollector()
            parsed = candidate(value, path, scratch)
            if not scratch.has_issues and parsed is not INVALID:
                return parsed
        issues.add(path, f"expected {description}")
        return INVALID

    return parse


def record() -> Parser:
    """Free-form JSON object; keys must be strings, values are copied as-is."""

    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if not isinstance(value, Mapping):
            issues.add(path, f"expected object, got {_type_name(value)}")
            return INVALID
        out: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                issues.add(path, f"object key must be string, got {_type_name(key)}")
                continue
            out[key] = copy.deepcopy(item)
        return out

    return parse


# ---------------------------------------------------------------------------
# Composite parsers
# ---------------------------------------------------------------------------


def array(item: Parser, *, min_length: int = 0) -> Parser:
    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            issues.add(path, f"expected array, got {_type_name(value)}")
            return INVALID
        if len(value) < min_length:
            issues.add(path, f"must contain at least {min_length} item(s)")
            return INVALID
        out: list[Any] = []
        failed = False
        for index, element in enumerate(value):
            parsed = item(element, join(path, index), issues)
            if parsed is INVALID:
                failed = True
                continue
            out.append(parsed)
        return INVALID if failed else out

    return parse


def obj(fields: Mapping[str, Field]) -> Parser:
    """Object with declared fields; unknown keys are dropped.

    Optional fields that are absent (or ``None``) are omitted from the output
    rather than emitted as ``null``.
    """

    def parse(value: object, path: str, issues: IssueCollector) -> object:
        if not isinstance(value, Mapping):
            issues.add(path, f"expected object, got {_type_name(value)}")
            return INVALID
        out: dict[str, Any] = {}
        failed = False
        for key, field in fields.items():
            key_path = join(path, key)
            raw = value.get(key, _MISSING)
            if raw is _MISSING or (raw is None and not field.required):
                if field.default is not _MISSING:
                    out[key] = copy.deepcopy(field.default)
                elif field.required:
                    issues.add(key_path, "Required")
                    failed = True
                continue
            parsed = field.parser(raw, key_path, issues)
            if parsed is INVALID:
                failed = True
                continue
            out[key] = parsed
        return INVALID if failed else out

    return parse


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


__all__ = [
    "INVALID",
    "Field",
    "IssueCollector",
    "ParseResult",
    "Parser",
    "any_of",
    "array",
    "boolean",
    "datetime_string",
    "defaulted",
    "enum",
    "join",
    "literal",
    "non_empty_string",
    "nullable",
    "number",
    "obj",
    "optional",
    "record",
    "required",
    "run",
    "run_or_raise",
    "string",
]

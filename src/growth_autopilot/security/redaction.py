"""
growth-autopilot: secret redaction for logs, evidence and error envelopes

File: src/growth_autopilot/security/redaction.py
Last updated: 2026-10-19

Purpose
- Denylist-based redaction: values under sensitive keys are replaced, and
  secret-shaped strings (provider API keys, tokens, private key blocks) are
  masked wherever they appear.

Functional requirements
- Never mutate the input; return fresh structures.
- Key matching is case-insensitive and tolerant of camelCase / dashed keys.
- Cyclic structures must not recurse forever.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Final, NamedTuple

REDACTED_VALUE: Final[str] = "[REDACTED]"
CYCLE_MARKER: Final[str] = "<cycle>"

DEFAULT_SENSITIVE_KEY_DENYLIST: Final[frozenset[str]] = frozenset(
    {
        "access_token",
        "api_key",
        "apikey",
        "authorization",
        "client_secret",
        "cookie",
        "credential",
        "credentials",
        "credit_card",
        "passwd",
        "password",
        "private_key",
        "refresh_token",
        "secret",
        "secret_key",
        "session_id",
        "ssn",
        "token",
    }
)


class SecretFinding(NamedTuple):
    """A secret-shaped span of scanned text."""

    rule: str
    start: int
    end: int


class _Rule(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    # Capture group holding the secret; group 0 masks the whole match.
    group: int = 0


_RULES: Final[tuple[_Rule, ...]] = (
    _Rule(
        "private_key_block",
        re.compile(
            r"-----BEGIN (?:RSA |EC |OPENSSH )?PRIVATE KEY-----"
            r"(?:[\s\S]+?-----END (?:RSA |EC |OPENSSH )?PRIVATE KEY-----)?"
        ),
    ),
    _Rule("authorization_bearer", re.compile(r"(?i)\bauthorization\s*:\s*bearer\s+([A-Za-z0-9\-._~+/=]{8,})"), 1),
    _Rule(
        "explicit_secret_assignment",
        re.compile(
            r"(?i)\b(?:password|secret|api[_-]?key|access[_-]?token|refresh[_-]?token)\b"
            r"\s*[:=]\s*[\"']?([A-Za-z0-9._~+/=-]{6,})"
        ),
        1,
    ),
    _Rule("openai_api_key", re.compile(r"\bsk-[A-Za-z0-9]{48}")),
    _Rule("aws_access_key", re.compile(r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b")),
    _Rule("github_token", re.compile(r"\bghp_[A-Za-z0-9]{36}\b")),
    _Rule("slack_token", re.compile(r"\bxox[baprs]-[A-Za-z0-9-]{16,255}\b")),
    _Rule("jwt", re.compile(r"\beyJ[\w-]{8,}\.[\w-]{8,}\.[\w-]{8,}\b")),
)

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[^a-z0-9]+")


def is_sensitive_key(key: str) -> bool:
    """``apiKey``, ``API-KEY`` and ``openai_api_key`` are all sensitive."""
    normalized = _SEPARATORS.sub("_", _WORD_BOUNDARY.sub("_", key.strip()).lower()).strip("_")
    if not normalized:
        return False
    return normalized in DEFAULT_SENSITIVE_KEY_DENYLIST or any(
        normalized.endswith(f"_{denied}") for denied in DEFAULT_SENSITIVE_KEY_DENYLIST
    )


def scan_for_secrets(text: str) -> list[SecretFinding]:
    """Return every secret-shaped span in ``text``, ordered by position."""

    found = [
        SecretFinding(rule.name, match.start(rule.group), match.end(rule.group))
        for rule in _RULES
        for match in rule.pattern.finditer(text)
    ]
    return sorted(found, key=lambda finding: (finding.start, finding.end, finding.rule))


def contains_secret(text: str) -> bool:
    return any(rule.pattern.search(text) for rule in _RULES)


def redact_text(text: str, *, replacement: str = REDACTED_VALUE) -> str:
    """Replace each secret span (overlaps merged) with ``replacement``."""

    pieces: list[str] = []
    cursor = 0
    for finding in scan_for_secrets(text):
        if finding.end <= cursor:
            continue
        if finding.start >= cursor:
            pieces.append(text[cursor : finding.start])
            pieces.append(replacement)
        cursor = finding.end
    pieces.append(text[cursor:])
    return "".join(pieces)


def redact_structure(value: object, *, replacement: str = REDACTED_VALUE) -> object:
    """Deep-redact mappings and sequences; strings are pattern-scanned."""

    return _redact(value, replacement, frozenset())


def _redact(value: object, replacement: str, ancestors: frozenset[int]) -> object:
    if isinstance(value, str):
        return redact_text(value, replacement=replacement)
    if not isinstance(value, (Mapping, list, tuple)):
        return value
    if id(value) in ancestors:
        return CYCLE_MARKER
    inner = ancestors | {id(value)}
    if isinstance(value, Mapping):
        return {
            str(key): replacement if is_sensitive_key(str(key)) else _redact(item, replacement, inner)
            for key, item in value.items()
        }
    return [_redact(item, replacement, inner) for item in value]


__all__ = [
    "CYCLE_MARKER",
    "DEFAULT_SENSITIVE_KEY_DENYLIST",
    "REDACTED_VALUE",
    "SecretFinding",
    "contains_secret",
    "is_sensitive_key",
    "redact_structure",
    "redact_text",
    "scan_for_secrets",
]

"""
growth-autopilot: per-run artifact layout

File: src/growth_autopilot/artifacts.py
Last updated: 2026-10-19

Purpose
- Lay out one CLI run's artifacts:
    artifacts/<run_id>/logs.jsonl
    artifacts/<run_id>/evidence/<name>.json
    artifacts/<run_id>/summary.json

Functional requirements
- A seeded run id is deterministic so re-runs land in the same directory.
- Evidence names are sanitized to ``[A-Za-z0-9_-]``.
- Summary flags are redacted before they are written.
"""

from __future__ import annotations

import hashlib
import json
import re
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from growth_autopilot.constants import ARTIFACTS_DIR
from growth_autopilot.domain.timestamps import Clock, now_iso8601z, utc_now
from growth_autopilot.security.redaction import redact_structure
from growth_autopilot.utils.canonical import serialize_deterministic
from growth_autopilot.utils.fs import atomic_write

RunStatus = Literal["success", "failure", "partial"]

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


@dataclass(frozen=True, slots=True)
class RunError:
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ArtifactWriter:
    """Writes evidence files and the run summary under ``<base_dir>/<run_id>``."""

    def __init__(self, run_id: str, base_dir: str | Path = ARTIFACTS_DIR, *, clock: Clock | None = None) -> None:
        self._run_id = run_id
        self._dir = Path(base_dir) / run_id
        self._evidence_dir = self._dir / "evidence"
        self._clock = clock
        self._outputs: list[str] = []
        self._errors: list[RunError] = []

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def directory(self) -> Path:
        return self._dir

    @property
    def logs_path(self) -> Path:
        return self._dir / "logs.jsonl"

    @property
    def outputs(self) -> tuple[str, ...]:
        return tuple(self._outputs)

    def init(self) -> None:
        self._evidence_dir.mkdir(parents=True, exist_ok=True)

    def record_output(self, path: str | Path) -> None:
        self._outputs.append(str(path))

    def write_evidence(self, name: str, data: object) -> Path:
        path = self._evidence_dir / f"{_UNSAFE_NAME_CHARS.sub('_', name)}.json"
        atomic_write(path, serialize_deterministic(data))
        self.record_output(path)
        return path

    def write_text_evidence(self, name: str, text: str, *, suffix: str = ".md") -> Path:
        path = self._evidence_dir / f"{_UNSAFE_NAME_CHARS.sub('_', name)}{suffix}"
        atomic_write(path, text)
        self.record_output(path)
        return path

    def add_error(self, code: str, message: str) -> None:
        self._errors.append(RunError(code, message))

    def write_summary(
        self,
        command: str,
        flags: dict[str, Any],
        started_at: str,
        status: RunStatus,
    ) -> Path:
        if self.logs_path.exists() and str(self.logs_path) not in self._outputs:
            self._outputs.insert(0, str(self.logs_path))
        summary = {
            "runId": self._run_id,
            "startedAt": started_at,
            "completedAt": now_iso8601z(self._clock),
            "status": status,
            "command": command,
            "flags": redact_structure(flags),
            "outputs": list(self._outputs),
            "errors": [error.to_dict() for error in self._errors],
        }
        path = self._dir / "summary.json"
        atomic_write(path, json.dumps(summary, indent=2, ensure_ascii=False))
        return path


def generate_run_id(seed: str | None = None, *, clock: Clock | None = None) -> str:
    """Return ``sha256(seed)[:12]``, or ``YYYYMMDDHHMMSS-<6 hex>`` without a seed."""

    if seed:
        return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:12]
    now = (clock or utc_now)()
    return f"{now.strftime('%Y%m%d%H%M%S')}-{secrets.token_hex(3)}"


__all__ = ["ArtifactWriter", "RunError", "RunStatus", "generate_run_id"]

"""
growth-autopilot: filesystem utilities

File: src/growth_autopilot/utils/fs.py
Last updated: 2026-10-19

Purpose
- Atomic artifact writes and JSON file reads with consistent error classes.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Missing or unreadable files surface as ``DependencyError``; malformed JSON
  and invalid UTF-8 as ``ValidationError``.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path

from growth_autopilot.errors import DependencyError, ValidationError, ValidationIssue

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write",
    "invalid_utf8_error",
    "read_json_file",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> Path:
    """
    Atomically write ``data`` to ``path``, creating parent directories.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target_parent = target.parent.resolve(strict=True)

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)
    payload = data if isinstance(data, bytes) else data.encode(encoding)

    try:
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(payload)
            file_handle.flush()
            os.fsync(file_handle.fileno())
        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise
    return target


def read_json_file(path: PathLike, *, label: str = "file") -> object:
    """Read and decode a JSON document."""

    source = Path(path)
    try:
        raw = source.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DependencyError(f"{label} not found: {source}") from exc
    except UnicodeDecodeError as exc:
        raise invalid_utf8_error(label, source, exc) from exc
    except OSError as exc:
        raise DependencyError(f"failed to read {label} {source}: {exc}") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        message = f"invalid JSON in {label} {source}: {exc.msg} (line {exc.lineno})"
        raise ValidationError(message, [ValidationIssue(path="", message=message)]) from exc


def invalid_utf8_error(label: str, source: Path, exc: UnicodeDecodeError) -> ValidationError:
    """Undecodable input is bad user data, not an unreadable file."""
    return ValidationError(
        f"invalid UTF-8 in {label} {source} at byte {exc.start}",
        [ValidationIssue(path="", message=f"invalid UTF-8: {exc.reason} at byte {exc.start}")],
    )

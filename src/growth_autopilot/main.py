"""Executable CLI entrypoint for ``growth_autopilot``."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from growth_autopilot.errors import ExitCode, classify_error, to_error_envelope

if TYPE_CHECKING:
    from collections.abc import Sequence

_KNOWN_EXIT_CODES = frozenset(int(code) for code in ExitCode)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Entrypoint used by ``python -m growth_autopilot`` and the ``growth`` script."""

    try:
        from growth_autopilot.ui.cli import run_cli

        return _normalize_exit_code(run_cli(argv))
    except SystemExit as exc:
        # argparse exits with 0 for --help/--version and 2 for usage errors.
        return _normalize_exit_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - CLI boundary normalization.
        envelope = to_error_envelope(exc)
        _write_stderr(f"error: {envelope.user_message}")
        return int(classify_error(exc))


def _normalize_exit_code(raw_code: object) -> int:
    if isinstance(raw_code, int) and raw_code in _KNOWN_EXIT_CODES:
        return raw_code
    if raw_code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw_code, str) and raw_code.strip():
        _write_stderr(raw_code.strip())
    return int(ExitCode.INTERNAL_ERROR)


def _write_stderr(message: str) -> None:
    sys.stderr.write(message.rstrip("\n") + "\n")


__all__ = ["cli_entrypoint"]

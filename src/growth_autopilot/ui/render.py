"""Output rendering for the growth CLI.

File: src/growth_autopilot/ui/render.py
Last updated: 2026-10-19

Purpose
- Provide a thin rendering layer for human-readable CLI output.
- Respect the NO_COLOR environment variable and the --no-color CLI flag.

Functional requirements
- Plain-text rendering must always work; color only decorates headings and
  warnings when stdout is a terminal.
- Human output goes to stdout, warnings and errors to stderr.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

_BOLD = "\033[1m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"


def _color_allowed(no_color_flag: bool) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces deterministic plain-text output; ANSI styling is added only when
    color is allowed.
    """

    def __init__(self, *, no_color: bool = False) -> None:
        self._color = _color_allowed(no_color)

    @property
    def color(self) -> bool:
        return self._color

    def _style(self, text: str, code: str) -> str:
        return f"{code}{text}{_RESET}" if self._color else text

    def heading(self, text: str) -> None:
        print(self._style(text, _BOLD))

    def kv(self, key: str, value: object) -> None:
        print(f"{key}: {value}")

    def text(self, line: str) -> None:
        print(line)

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        print(f"\n{self._style(title, _BOLD)}")

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            print(f"  {prefix}{entry}")

    def summary(self, values: Mapping[str, object]) -> None:
        for key in sorted(values):
            print(f"  {key}: {values[key]}")

    def warning(self, text: str) -> None:
        print(self._style(f"warning: {text}", _YELLOW), file=sys.stderr)

    def error(self, text: str) -> None:
        print(self._style(f"error: {text}", _RED), file=sys.stderr)


def create_renderer(*, no_color: bool = False) -> CLIRenderer:
    return CLIRenderer(no_color=no_color)


__all__ = ["CLIRenderer", "create_renderer"]

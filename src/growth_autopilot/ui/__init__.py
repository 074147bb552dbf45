"""Command-line surface for growth-autopilot."""

from growth_autopilot.ui.cli import CLIError, build_parser, run_cli
from growth_autopilot.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIError", "CLIRenderer", "build_parser", "create_renderer", "run_cli"]

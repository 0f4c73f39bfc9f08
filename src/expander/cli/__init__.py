"""Command-line interface for Expander."""

from __future__ import annotations

from expander.cli.context import CLIContext, ExitCode, async_command

__all__ = ["CLIContext", "ExitCode", "async_command"]

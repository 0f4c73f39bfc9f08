"""Shared Rich consoles for CLI output.

Styled output in terminals, plain text when piped.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "err_console"]

console = Console()
err_console = Console(stderr=True)

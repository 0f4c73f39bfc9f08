"""CLI context, exit codes, and the async command bridge."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, TypeVar

from expander.config import ExpanderConfig

__all__ = [
    "ExitCode",
    "CLIContext",
    "async_command",
]


class ExitCode(IntEnum):
    """Exit codes for the Expander CLI.

    - 0 for success
    - 1 for failure
    - 2 for partial success (some files failed)
    - 130 for keyboard interrupt (128 + SIGINT=2)
    """

    SUCCESS = 0
    FAILURE = 1
    PARTIAL = 2
    INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global options and configuration shared by all commands.

    Attributes:
        config: Loaded configuration.
        config_path: Path to config file (if specified via --config).
        verbosity: Verbosity level (0=default, 1=INFO, 2+=DEBUG).
        quiet: Suppress non-essential output.
    """

    config: ExpanderConfig
    config_path: Path | None = None
    verbosity: int = 0
    quiet: bool = False


F = TypeVar("F", bound=Callable[..., Any])


def async_command(f: F) -> F:
    """Run an async Click command with asyncio.run().

    Example:
        >>> @cli.command()
        >>> @async_command
        >>> async def run(ctx: click.Context, path: str) -> None:
        >>>     await processor.process_tree()
    """

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(f(*args, **kwargs))

    return wrapper  # type: ignore[return-value]

"""CLI entry point for Expander.

This module defines the Click-based command-line interface.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from expander.logging import configure_logging

# Load .env before any configuration reads EXPANDER_* variables
load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

from expander import __version__  # noqa: E402
from expander.cli.commands.check_key import check_key  # noqa: E402
from expander.cli.commands.config import config  # noqa: E402
from expander.cli.commands.eval import eval_command  # noqa: E402
from expander.cli.commands.run import run  # noqa: E402
from expander.cli.commands.scan import scan  # noqa: E402
from expander.cli.context import CLIContext, ExitCode  # noqa: E402
from expander.config import load_config  # noqa: E402
from expander.exceptions import ConfigError  # noqa: E402

_VERBOSITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="expander")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides ./expander.yaml).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress non-essential output (ERROR level only).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """Expander - keep generated text inside document markers up to date."""
    ctx.ensure_object(dict)

    config_path = Path(config_file) if config_file else None
    try:
        config = load_config(config_path)
    except ConfigError as e:
        # Logging is not configured yet
        error_parts = [f"Error: {e.message}"]
        if e.field:
            error_parts.append(f"  Field: {e.field}")
        if e.value is not None:
            error_parts.append(f"  Value: {e.value}")
        click.echo("\n".join(error_parts), err=True)
        ctx.exit(ExitCode.FAILURE)

    ctx.obj["cli_ctx"] = CLIContext(
        config=config,
        config_path=config_path,
        verbosity=verbose,
        quiet=quiet,
    )

    # Priority: quiet > verbose > config
    if quiet:
        level = logging.ERROR
    elif verbose > 0:
        level = logging.INFO if verbose == 1 else logging.DEBUG
    else:
        level = _VERBOSITY_LEVELS.get(config.verbosity, logging.WARNING)

    configure_logging(level=level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(eval_command)
cli.add_command(scan)
cli.add_command(run)
cli.add_command(check_key)
cli.add_command(config)

if __name__ == "__main__":
    cli()

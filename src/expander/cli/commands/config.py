"""``expander config`` commands."""

from __future__ import annotations

import click
import yaml

from expander.cli.context import CLIContext
from expander.cli.output import format_json


@click.group()
def config() -> None:
    """Inspect Expander configuration."""


@config.command("show")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    help="Output format (yaml or json).",
)
@click.pass_context
def config_show(ctx: click.Context, fmt: str) -> None:
    """Display the merged configuration.

    Shows the result of combining defaults, user config, project config,
    and EXPANDER_* environment variables.

    Examples:
        expander config show
        expander config show --format json
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    config_dict = cli_ctx.config.model_dump(mode="json")

    if fmt == "json":
        click.echo(format_json(config_dict))
    else:
        click.echo(yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=False))


@config.command("keys")
@click.pass_context
def config_keys(ctx: click.Context) -> None:
    """List configured keys with a preview of their current values."""
    from rich.markup import escape
    from rich.table import Table

    from expander.cli.console import console
    from expander.services import ExpanderService

    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    service = ExpanderService(cli_ctx.config)

    table = Table(padding=(0, 1))
    table.add_column("Key", style="bold")
    table.add_column("Enabled")
    table.add_column("Preview")

    for replacement in service.get_all_replacements():
        preview = service.preview_value(replacement.value)
        shown = preview.result if preview.success else f"error: {preview.result}"
        table.add_row(
            escape(replacement.key),
            "yes" if replacement.enabled else "no",
            escape(shown),
        )

    console.print(table)

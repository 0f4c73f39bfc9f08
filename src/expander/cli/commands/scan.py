"""``expander scan`` command."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from expander.cli.console import console, err_console
from expander.cli.context import CLIContext, ExitCode
from expander.cli.output import format_error, format_json
from expander.markers import scan_complete, scan_incomplete
from expander.services import ExpanderService
from expander.utils.atomic import read_text

_PREVIEW_WIDTH = 40


def _preview(text: str) -> str:
    flat = text.replace("\n", "\\n")
    if len(flat) > _PREVIEW_WIDTH:
        return flat[: _PREVIEW_WIDTH - 3] + "..."
    return flat


@click.command()
@click.argument(
    "file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (table or json).",
)
@click.pass_context
def scan(ctx: click.Context, file_path: Path, fmt: str) -> None:
    """List the markers in FILE_PATH.

    Examples:
        expander scan notes/today.md
        expander scan notes/today.md --format json
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    service = ExpanderService(cli_ctx.config)

    try:
        text = read_text(file_path)
    except (OSError, UnicodeDecodeError) as e:
        err_console.print(format_error(f"Cannot read {file_path}: {e}"), markup=False)
        ctx.exit(ExitCode.FAILURE)

    rows: list[dict[str, object]] = [
        {
            "key": m.key,
            "mode": m.update_mode.value,
            "start": m.start_offset,
            "end": m.end_offset,
            "complete": True,
            "known": service.has_key(m.key),
            "value": m.current_inner_text,
        }
        for m in scan_complete(text)
    ]
    rows.extend(
        {
            "key": item.key,
            "mode": item.update_mode.value,
            "start": item.start_offset,
            "end": item.end_offset,
            "complete": False,
            "known": service.has_key(item.key),
            "value": "",
        }
        for item in scan_incomplete(text)
    )
    rows.sort(key=lambda row: row["start"])  # type: ignore[arg-type,return-value]

    if fmt == "json":
        click.echo(format_json(rows))
        return

    if not rows:
        console.print(f"No markers found in {file_path}", markup=False)
        return

    table = Table(show_lines=False, padding=(0, 1))
    table.add_column("Key", style="bold")
    table.add_column("Mode")
    table.add_column("Span")
    table.add_column("Status")
    table.add_column("Value")

    for row in rows:
        status = "closed" if row["complete"] else "open"
        if not row["known"]:
            status += ", unknown"
        table.add_row(
            escape(str(row["key"])),
            str(row["mode"]),
            f"{row['start']}-{row['end']}",
            status,
            escape(_preview(str(row["value"]))),
        )

    console.print(table)

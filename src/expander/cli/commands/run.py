"""``expander run`` command."""

from __future__ import annotations

from pathlib import Path

import click

from expander.cli.console import console, err_console
from expander.cli.context import CLIContext, ExitCode, async_command
from expander.cli.output import format_error, format_success, format_warning
from expander.constants import ProcessingScope
from expander.services import FileProcessor, ProcessingResult


def _report(results: list[ProcessingResult], quiet: bool) -> ExitCode:
    modified = [r for r in results if r.modified]
    failed = [r for r in results if not r.success]
    unknown = sorted({key for r in results for key in r.unknown_keys})

    for result in failed:
        for error in result.errors:
            err_console.print(format_error(error), markup=False)

    if unknown:
        err_console.print(
            format_warning(f"Unknown keys: {', '.join(unknown)}"), markup=False
        )

    if not quiet:
        replacements = sum(r.replacements_count for r in modified)
        properties = sum(r.property_updates for r in modified)
        console.print(
            format_success(
                f"Updated {len(modified)} of {len(results)} file(s) "
                f"({replacements} replacement(s), {properties} property update(s))"
            ),
            markup=False,
        )

    if failed:
        return ExitCode.PARTIAL if len(failed) < len(results) else ExitCode.FAILURE
    return ExitCode.SUCCESS


@click.command()
@click.argument(
    "target",
    type=click.Path(exists=True, path_type=Path),
    default=".",
    required=False,
)
@click.option(
    "--auto",
    "auto_only",
    is_flag=True,
    default=False,
    help="Only update 'expand' markers, as an automatic run would.",
)
@click.option(
    "-k",
    "--key",
    default=None,
    help="Refresh only the first marker for this key (TARGET must be a file).",
)
@click.pass_context
@async_command
async def run(
    ctx: click.Context, target: Path, auto_only: bool, key: str | None
) -> None:
    """Update the markers in TARGET (a file or a directory tree).

    Explicit runs update every marker mode. Use --auto to mimic an automatic
    run, which only touches 'expand' markers and honours
    disable_automatic_updates.

    Examples:
        expander run
        expander run notes/today.md
        expander run journal --auto
        expander run notes/today.md --key today
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    scope = ProcessingScope.AUTO if auto_only else ProcessingScope.ALL
    root = target if target.is_dir() else Path.cwd()
    processor = FileProcessor(cli_ctx.config, root=root)

    if key is not None:
        if target.is_dir():
            err_console.print(
                format_error("--key requires a file, not a directory"), markup=False
            )
            ctx.exit(ExitCode.FAILURE)
        if not await processor.process_expansion(target, key):
            err_console.print(
                format_error(f"No marker for known key '{key}' in {target}"),
                markup=False,
            )
            ctx.exit(ExitCode.FAILURE)
        if not cli_ctx.quiet:
            console.print(format_success(f"Refreshed '{key}' in {target}"), markup=False)
        return

    if target.is_dir():

        def show_progress(processed: int, total: int) -> None:
            if cli_ctx.verbosity > 0 and not cli_ctx.quiet:
                err_console.print(f"Processed {processed}/{total} file(s)")

        results = await processor.process_tree(
            target, scope, on_progress=show_progress
        )
    else:
        results = [await processor.process_file(target, scope)]

    exit_code = _report(results, cli_ctx.quiet)
    if exit_code != ExitCode.SUCCESS:
        ctx.exit(exit_code)

"""``expander eval`` command."""

from __future__ import annotations

from pathlib import Path

import click

from expander.cli.console import err_console
from expander.cli.context import ExitCode
from expander.cli.output import format_error
from expander.expressions import EvaluationContext, evaluate, preview_value


@click.command("eval")
@click.argument("expression")
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Document whose metadata backs file.* references.",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail instead of echoing the expression when evaluation errors.",
)
@click.pass_context
def eval_command(
    ctx: click.Context, expression: str, file_path: Path | None, strict: bool
) -> None:
    """Evaluate an EXPRESSION and print the result.

    Examples:
        expander eval 'today().format("YYYY-MM-DD")'
        expander eval 'file.name.upper()' --file notes/todo.md
    """
    context = (
        EvaluationContext.from_file(file_path, Path.cwd()) if file_path else None
    )

    if strict:
        result = preview_value(expression, context)
        if not result.success:
            err_console.print(format_error(result.result), markup=False)
            ctx.exit(ExitCode.FAILURE)
        click.echo(result.result)
        return

    click.echo(evaluate(expression, context))

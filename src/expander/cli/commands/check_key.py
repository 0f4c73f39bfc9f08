"""``expander check-key`` command."""

from __future__ import annotations

import click

from expander.cli.console import console, err_console
from expander.cli.context import ExitCode
from expander.cli.output import format_error, format_success
from expander.markers import (
    get_property_name,
    is_property_key,
    normalize_key,
    validate_key,
)


@click.command("check-key")
@click.argument("key")
@click.pass_context
def check_key(ctx: click.Context, key: str) -> None:
    """Validate a replacement KEY.

    Regular keys are kebab-case. Property keys are ``prop.`` followed by a
    frontmatter property name.

    Examples:
        expander check-key due-date
        expander check-key "prop.Last Reviewed"
    """
    error = validate_key(key)
    if error is not None:
        suggestion = None
        normalized = normalize_key(key)
        if normalized and validate_key(normalized) is None:
            suggestion = f"Use '{normalized}'"
        err_console.print(
            format_error(f"Invalid key '{key}'", details=[error], suggestion=suggestion),
            markup=False,
        )
        ctx.exit(ExitCode.FAILURE)

    normalized = normalize_key(key)
    if is_property_key(normalized):
        console.print(
            format_success(
                f"'{normalized}' updates frontmatter property "
                f"'{get_property_name(normalized)}'"
            ),
            markup=False,
        )
    else:
        console.print(format_success(f"'{normalized}' is a valid key"), markup=False)

"""Environment inspection command for the schemata CLI."""

import click

from ..formatters import format_env_vars_json, format_env_vars_table
from ..utils import emit, get_env_vars


@click.command()
@click.pass_context
def env(ctx: click.Context) -> None:
    """Show the environment variables the registry reads."""
    env_vars = get_env_vars()
    emit(ctx, format_env_vars_json(env_vars), lambda console: format_env_vars_table(env_vars, console))

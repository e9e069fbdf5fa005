"""Template commands for the schemata CLI."""

import asyncio

import click

from ...templates import TemplateRegistry
from ..formatters import (
    format_load_results_json,
    format_load_results_table,
    format_templates_json,
    format_templates_table,
)
from ..utils import ExitCode, emit, get_registry_context, handle_error


@click.group()
def templates() -> None:
    """Inspect and prefetch translation templates."""
    pass


@templates.command("list")
@click.pass_context
def list_templates(ctx: click.Context) -> None:
    """List the templates named in the template catalog."""
    try:
        registry = TemplateRegistry.from_config(get_registry_context(ctx))
        descriptors = asyncio.run(registry.get_available_templates())
    except Exception as e:
        handle_error(e)
        return

    emit(ctx, format_templates_json(descriptors), lambda console: format_templates_table(descriptors, console))


@templates.command()
@click.pass_context
def prefetch(ctx: click.Context) -> None:
    """Fetch every catalog template into the cache.

    Exits with status 4 when any template fails to load.
    """
    try:
        registry = TemplateRegistry.from_config(get_registry_context(ctx))
        results = asyncio.run(registry.load_templates())
    except Exception as e:
        handle_error(e)
        return

    emit(
        ctx,
        format_load_results_json(results),
        lambda console: format_load_results_table(results, "Template Prefetch", console),
    )
    if any(not result.success for result in results):
        ctx.exit(ExitCode.DATA_SOURCE_ERROR)


@templates.command()
@click.argument("input_model")
@click.argument("input_version")
@click.argument("output_model")
@click.argument("output_version")
@click.pass_context
def show(ctx: click.Context, input_model: str, input_version: str, output_model: str, output_version: str) -> None:
    """Print the template translating INPUT_MODEL INPUT_VERSION into OUTPUT_MODEL OUTPUT_VERSION."""
    try:
        registry = TemplateRegistry.from_config(get_registry_context(ctx))
        template = asyncio.run(registry.get_template(input_model, input_version, output_model, output_version))
    except Exception as e:
        handle_error(e)
        return

    click.echo(template)


@templates.command()
@click.argument("output_model")
@click.argument("output_version")
@click.pass_context
def hydration(ctx: click.Context, output_model: str, output_version: str) -> None:
    """Print the form hydration template for OUTPUT_MODEL at OUTPUT_VERSION."""
    try:
        registry = TemplateRegistry.from_config(get_registry_context(ctx))
        template = asyncio.run(registry.get_form_hydration_template(output_model, output_version))
    except Exception as e:
        handle_error(e)
        return

    click.echo(template)

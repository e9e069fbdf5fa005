"""Schema catalog and loading commands for the schemata CLI."""

import asyncio

import click

from ...schemas import SchemaRegistry
from ..formatters import format_catalog_json, format_catalog_table, format_load_results_json, format_load_results_table
from ..utils import ExitCode, emit, get_registry_context, handle_error, validate_format_support


@click.group()
def schemas() -> None:
    """Inspect and load schemas."""
    pass


@schemas.command("list")
@click.pass_context
def list_schemas(ctx: click.Context) -> None:
    """List the schemas named in the catalog."""
    try:
        registry = SchemaRegistry.from_config(get_registry_context(ctx))
        catalog = asyncio.run(registry.get_available_schemas())
    except Exception as e:
        handle_error(e)
        return

    emit(ctx, format_catalog_json(catalog), lambda console: format_catalog_table(catalog, console))


@schemas.command()
@click.argument("name")
@click.argument("version")
@click.option("--hydration", is_flag=True, help="Show the form hydration schema instead.")
@click.pass_context
def show(ctx: click.Context, name: str, version: str, hydration: bool = False) -> None:
    """Print the schema document for NAME at VERSION."""
    try:
        format_type = validate_format_support(ctx.obj["format"], ["json", "yaml"], "schemas show", ctx.obj)
        ctx.obj["format"] = format_type

        registry = SchemaRegistry.from_config(get_registry_context(ctx))
        if hydration:
            document = asyncio.run(registry.retrieve_hydration_schema(name, version))
        else:
            document = asyncio.run(registry.retrieve_schema(name, version))
    except Exception as e:
        handle_error(e)
        return

    emit(ctx, document)


@schemas.command()
@click.pass_context
def load(ctx: click.Context) -> None:
    """Fetch and compile every catalog schema.

    Exits with status 4 when any schema fails to load.
    """
    try:
        registry = SchemaRegistry.from_config(get_registry_context(ctx))
        results = asyncio.run(registry.load_schemas())
    except Exception as e:
        handle_error(e)
        return

    emit(
        ctx,
        format_load_results_json(results),
        lambda console: format_load_results_table(results, "Schema Load", console),
    )
    if any(not result.success for result in results):
        ctx.exit(ExitCode.DATA_SOURCE_ERROR)

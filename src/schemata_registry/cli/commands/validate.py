"""Metadata validation commands for the schemata CLI."""

import asyncio
from typing import Optional

import click

from ...context import RegistryContext
from ...schemas import SchemaRegistry
from ...validation import ValidationService
from ..formatters import format_errors_table, format_matches_json, format_matches_table, format_validation_json
from ..utils import ExitCode, emit, get_registry_context, handle_error, load_metadata_file


def _load_service(context: RegistryContext) -> ValidationService:
    schemas = SchemaRegistry.from_config(context)
    asyncio.run(schemas.load_schemas())
    return ValidationService(context, schemas)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("model")
@click.argument("version")
@click.option("--section", help="Validate only this top-level section of the document.")
@click.pass_context
def validate(ctx: click.Context, file: str, model: str, version: str, section: Optional[str] = None) -> None:
    """Validate the metadata in FILE against MODEL at VERSION.

    FILE may be JSON or YAML. Exits with status 5 when the document is invalid.
    """
    try:
        metadata = load_metadata_file(file)
        service = _load_service(get_registry_context(ctx))
        if section is None:
            errors = service.validate(metadata, model, version)
        else:
            errors = service.validate_section(metadata, model, version, section)
    except Exception as e:
        handle_error(e)
        return

    title = f"{model} {version}" + (f" [{section}]" if section else "")
    emit(
        ctx,
        format_validation_json(model, version, errors, section),
        lambda console: format_errors_table(errors, title, console),
    )
    if errors:
        ctx.exit(ExitCode.VALIDATION_FAILED)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--errors", "include_errors", is_flag=True, help="Include the errors reported by each schema.")
@click.option("--only-matching", is_flag=True, help="Only show schemas the document satisfies.")
@click.pass_context
def match(ctx: click.Context, file: str, include_errors: bool = False, only_matching: bool = False) -> None:
    """Find the catalog schemas the metadata in FILE satisfies."""
    try:
        metadata = load_metadata_file(file)
        service = _load_service(get_registry_context(ctx))
        matches = asyncio.run(service.find_matching_schemas(metadata, include_errors=include_errors))
    except Exception as e:
        handle_error(e)
        return

    if only_matching:
        matches = [result for result in matches if result.matches]

    emit(
        ctx,
        format_matches_json(matches, include_errors),
        lambda console: format_matches_table(matches, console),
    )

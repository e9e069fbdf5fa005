"""Metadata validation against installed schemas.

This module provides the ValidationService class, which validates metadata
documents (or one of their top-level sections) against a named schema
version, and discovers which catalog schemas a document satisfies.

The service only reads from the validation engine; schemas must be loaded
through :class:`~schemata_registry.schemas.SchemaRegistry` first.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .context import RegistryContext
from .engine import SchemaRef, schema_key
from .frozen import freeze
from .logging import LogEvent, log_debug, log_error
from .schemas import SchemaRegistry

ErrorList = List[Dict[str, Any]]


@dataclass
class MatchResult:
    """Whether a metadata document satisfies one catalog schema.

    Attributes:
        name: Schema name
        version: Schema version
        matches: True if the document validated without errors
        errors: Errors reported for this schema, if any were collected
    """

    name: str
    version: str
    matches: bool
    errors: Optional[ErrorList] = None

    def to_dict(self, include_errors: bool = False) -> Dict[str, Any]:
        """Return the result as a plain dictionary.

        Args:
            include_errors: Include the ``errors`` entry when it is set
        """
        result: Dict[str, Any] = {"name": self.name, "version": self.version, "matches": self.matches}
        if include_errors and self.errors is not None:
            result["errors"] = self.errors
        return result


class ValidationService:
    """Validates metadata against schemas installed in the shared engine."""

    def __init__(self, context: RegistryContext, schemas: SchemaRegistry):
        """Initialize the service.

        Args:
            context: Shared context holding the validation engine
            schemas: Registry whose catalog drives schema matching
        """
        self.context = context
        self.schemas = schemas

    def validate(self, metadata: Any, model: str, version: str) -> ErrorList:
        """Validate a metadata document against one schema version.

        The document is validated in place: values may be coerced to their
        declared types and missing properties filled from defaults.

        Args:
            metadata: Document to validate
            model: Schema name
            version: Schema version

        Returns:
            Validation errors; empty if the document is valid. An unknown
            schema is reported as a single error rather than raised.
        """
        validator = self.context.engine.lookup(schema_key(model, version))
        if validator is None:
            return [{"message": f"Schema for model={model} version={version} is not known!"}]

        if validator(metadata):
            return []
        log_debug(
            LogEvent.SCHEMA_VALIDATION,
            "Metadata failed validation",
            schema=schema_key(model, version),
            errors=len(validator.errors),
        )
        return list(validator.errors)

    def validate_section(self, metadata: Any, model: str, version: str, subsection: str) -> ErrorList:
        """Validate one top-level section of a metadata document.

        The section is checked against the schema found at
        ``/properties/<subsection>`` of the model's schema. Only an absent or
        ``None`` section counts as missing; falsy values such as ``0``, ``""``
        or ``False`` are validated like any other value.

        Returns:
            Validation errors; empty if the section is valid. A missing section
            or unknown section schema is reported as a single error.
        """
        validator = self.context.engine.lookup(SchemaRef.for_section(model, version, subsection))
        if validator is None:
            return [
                {"message": f"Schema for model={model} version={version} subsection={subsection} is not known!"}
            ]

        section = metadata.get(subsection) if isinstance(metadata, dict) else None
        if section is None:
            return [{"message": f"Subsection {subsection} not found in provided metadata."}]

        if validator(section):
            return []
        log_debug(
            LogEvent.SCHEMA_VALIDATION,
            "Metadata section failed validation",
            schema=schema_key(model, version),
            subsection=subsection,
            errors=len(validator.errors),
        )
        return list(validator.errors)

    async def find_matching_schemas(self, metadata: Any, include_errors: bool = False) -> List[MatchResult]:
        """Check a metadata document against every installed catalog schema.

        Each schema validates its own working copy of a read-only snapshot
        of ``metadata``. Coercion and default filling apply within that copy
        only, so one schema never sees another's changes and the caller's
        document is left untouched.

        Args:
            metadata: Document to match
            include_errors: Attach the errors of each schema to its result

        Returns:
            One result per installed catalog schema, in catalog order

        Raises:
            CatalogUnavailableError: If the catalog cannot be read
        """
        catalog = await self.schemas.get_available_schemas()
        snapshot = self.context.engine.snapshot()
        frozen = freeze(copy.deepcopy(metadata))

        results: List[MatchResult] = []
        for name, versions in catalog.items():
            for version in versions:
                validator = snapshot.lookup(schema_key(name, version))
                if validator is None:
                    continue
                try:
                    matches = validator(copy.deepcopy(frozen))
                    errors = list(validator.errors)
                except Exception as e:
                    log_error(
                        LogEvent.SCHEMA_MATCHING,
                        f"Error validating against {name}:{version}",
                        error=str(e),
                    )
                    matches = False
                    errors = [{"message": str(e)}]
                results.append(MatchResult(name, version, matches, errors if include_errors else None))

        log_debug(
            LogEvent.SCHEMA_MATCHING,
            "Matched metadata against schemas",
            checked=len(results),
            matched=sum(1 for result in results if result.matches),
        )
        return results

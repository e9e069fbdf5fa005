"""Schema registry.

This module provides the SchemaRegistry class, which reads the schema
catalog (``available.json``), retrieves schema documents through the shared
document cache, and installs compiled validators into the shared validation
engine.

Typical usage:

    context = RegistryContext(RegistryConfig.from_env())
    schemas = SchemaRegistry.from_config(context)
    await schemas.load_schemas()
"""

from typing import Any, Dict, List, Optional, Tuple

from .config import ENV_SCHEMA_LOCATION, RegistryConfig
from .context import RegistryContext
from .engine import CompiledSchema, CompiledValidator, schema_key
from .errors import CatalogUnavailableError, RetrievalError, SchemaCompilationError, SchemaNotFoundError
from .loading import LoadResult, gather_bounded, parse_document
from .location import Location, resolve_resource_location
from .logging import LogEvent, log_error, log_info, log_warning

AVAILABLE_SCHEMAS_KEY = "schemas:available"
HYDRATION_KEY_PREFIX = "hydration:"

SchemaCatalog = Dict[str, List[str]]


class SchemaRegistry:
    """Catalog, retrieval and loading of versioned JSON Schemas."""

    def __init__(self, context: RegistryContext, location: Location):
        """Initialize the schema registry.

        Args:
            context: Shared cache, retriever and validation engine
            location: Resolved location of the schema tree
        """
        self.context = context
        self.location = location

    @classmethod
    def from_config(cls, context: RegistryContext, config: Optional[RegistryConfig] = None) -> "SchemaRegistry":
        """Create a registry for the schema location named in the configuration.

        Raises:
            ConfigurationError: If no schema location is configured
        """
        config = config or context.config
        location = resolve_resource_location(config.schema_location, ENV_SCHEMA_LOCATION, config.schema_branch)
        return cls(context, location)

    @property
    def base_path(self) -> str:
        """Base path schema documents are fetched relative to."""
        return self.location.base_path

    def get_schema_path(self, name: str, version: str) -> str:
        """Path of a model's schema document."""
        return f"{self.base_path}/hdr_schemata/models/{name}/{version}/schema.json"

    def get_hydration_schema_path(self, model: str, version: str) -> str:
        """Path of a model's form hydration schema."""
        return f"{self.base_path}/docs/{model}/{version}.form.json"

    def get_catalog_path(self) -> str:
        """Path of the ``available.json`` catalog."""
        return f"{self.base_path}/available.json"

    async def _fetch(self, path: str) -> Any:
        # Only parsed documents go into the cache
        return await self.context.retriever.get_from_source(path, self.location.load_from_local_file)

    async def get_available_schemas(self) -> SchemaCatalog:
        """Return the schema catalog, fetching it on first use.

        Returns:
            Mapping of schema name to its versions, in catalog order

        Raises:
            CatalogUnavailableError: If the catalog cannot be fetched or parsed
        """
        retriever = self.context.retriever
        available = retriever.get_from_cache(AVAILABLE_SCHEMAS_KEY)
        if available is None:
            path = self.get_catalog_path()
            try:
                available = await self._fetch(path)
            except RetrievalError as e:
                raise CatalogUnavailableError(f"Failed to fetch available schemas: {e}", source=path) from e

            if not available:
                raise CatalogUnavailableError("Failed to fetch available schemas.", source=path)

            try:
                available = parse_document(available)
            except ValueError as e:
                raise CatalogUnavailableError(f"Invalid available schemas document: {e}", source=path) from e

            if not _is_catalog(available):
                raise CatalogUnavailableError(
                    "Available schemas must map schema names to lists of versions", source=path
                )

            log_info(LogEvent.SCHEMA_REGISTRY, "Fetched available schemas", count=len(available))
            retriever.save_to_cache(AVAILABLE_SCHEMAS_KEY, available)

        return available

    def refresh_catalog(self) -> None:
        """Forget the cached catalog so the next read fetches it again."""
        self.context.cache.delete(AVAILABLE_SCHEMAS_KEY)

    async def _retrieve(self, key: str, path: str, name: str, version: str, label: str) -> Any:
        retriever = self.context.retriever
        schema = retriever.get_from_cache(key)
        if schema is not None:
            return schema

        try:
            schema = await self._fetch(path)
        except RetrievalError as e:
            raise SchemaNotFoundError(f"{label} not found: {path}", name=name, version=version, source=path) from e

        if not schema:
            raise SchemaNotFoundError(f"{label} not found: {path}", name=name, version=version, source=path)

        try:
            schema = parse_document(schema)
        except ValueError as e:
            raise SchemaNotFoundError(
                f"{label} at {path} is not valid JSON: {e}", name=name, version=version, source=path
            ) from e

        retriever.save_to_cache(key, schema)
        return schema

    async def retrieve_schema(self, name: str, version: str) -> Any:
        """Return a schema document, fetching it on first use.

        Raises:
            SchemaNotFoundError: If the document cannot be retrieved
        """
        return await self._retrieve(
            schema_key(name, version), self.get_schema_path(name, version), name, version, "Schema"
        )

    async def retrieve_hydration_schema(self, model: str, version: str) -> Any:
        """Return a form hydration schema, fetching it on first use.

        Raises:
            SchemaNotFoundError: If the document cannot be retrieved
        """
        return await self._retrieve(
            f"{HYDRATION_KEY_PREFIX}{schema_key(model, version)}",
            self.get_hydration_schema_path(model, version),
            model,
            version,
            "Hydration schema",
        )

    def get_schema(self, name: str, version: str) -> Optional[CompiledValidator]:
        """Return the installed validator for a schema, without fetching."""
        return self.context.engine.lookup(schema_key(name, version))

    async def load_schemas(self) -> List[LoadResult]:
        """Retrieve and compile every catalog schema, then install them together.

        Pairs that fail keep whatever was installed for them before, and
        installed schemas missing from the catalog are left in place.

        Returns:
            One result per catalog entry, in catalog order

        Raises:
            CatalogUnavailableError: If the catalog itself cannot be read
        """
        catalog = await self.get_available_schemas()
        pairs = [(name, version) for name, versions in catalog.items() for version in versions]
        compiled: Dict[str, CompiledSchema] = {}
        engine = self.context.engine

        async def load(pair: Tuple[str, str]) -> LoadResult:
            name, version = pair
            key = schema_key(name, version)
            try:
                document = await self.retrieve_schema(name, version)
                compiled[key] = engine.compile(document, key)
            except (RetrievalError, SchemaCompilationError) as e:
                log_error(LogEvent.SCHEMA_REGISTRY, f"Failed to load schema {key}", error=str(e))
                return LoadResult(key=key, success=False, error=str(e))
            return LoadResult(key=key, success=True)

        results = await gather_bounded(pairs, load, self.context.config.max_concurrency)

        schemas = engine.snapshot().schemas
        schemas.update(compiled)
        version = engine.replace(schemas)

        failed = [result.key for result in results if not result.success]
        if failed:
            log_warning(
                LogEvent.SCHEMA_REGISTRY,
                "Some schemas failed to load",
                failed=", ".join(failed),
                loaded=len(compiled),
            )
        log_info(LogEvent.SCHEMA_REGISTRY, "Loaded schemas", loaded=len(compiled), snapshot=version)
        return results


def _is_catalog(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    for versions in value.values():
        if not isinstance(versions, list) or not all(isinstance(v, str) for v in versions):
            return False
    return True

"""Translation template registry.

Templates are JSONata documents that translate metadata from one model
version to another. They live in a tree parallel to the schemas, under
``maps/<output model>/<output version>/<input model>/<input version>/``,
and are listed by the template catalog (``available.json``).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import ENV_TEMPLATES_LOCATION, RegistryConfig
from .context import RegistryContext
from .errors import CatalogUnavailableError, RetrievalError, TemplateNotFoundError
from .loading import LoadResult, gather_bounded, parse_document
from .location import Location, resolve_resource_location
from .logging import LogEvent, log_error, log_info, log_warning

TEMPLATES_FILENAME = "translation.jsonata"
AVAILABLE_TEMPLATES_KEY = "templates:available"
HYDRATION_INPUT_MODEL = "Hydration"

_DESCRIPTOR_FIELDS = ("input_model", "input_version", "output_model", "output_version")


@dataclass(frozen=True)
class TemplateDescriptor:
    """One entry of the template catalog."""

    input_model: str
    input_version: str
    output_model: str
    output_version: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplateDescriptor":
        """Create a descriptor from a catalog entry.

        Raises:
            ValueError: If a field is missing or not a string
        """
        if not isinstance(data, dict):
            raise ValueError(f"Template catalog entry must be an object, got {type(data).__name__}")
        values = {}
        for field in _DESCRIPTOR_FIELDS:
            value = data.get(field)
            if not isinstance(value, str):
                raise ValueError(f"Template catalog entry needs a string '{field}'")
            values[field] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        """Return the descriptor as a catalog entry."""
        return {field: getattr(self, field) for field in _DESCRIPTOR_FIELDS}


class TemplateRegistry:
    """Catalog and retrieval of translation templates."""

    def __init__(self, context: RegistryContext, location: Location):
        """Initialize the template registry.

        Args:
            context: Shared cache and retriever
            location: Resolved location of the template tree
        """
        self.context = context
        self.location = location

    @classmethod
    def from_config(cls, context: RegistryContext, config: Optional[RegistryConfig] = None) -> "TemplateRegistry":
        """Create a registry for the template location named in the configuration.

        Raises:
            ConfigurationError: If no template location is configured
        """
        config = config or context.config
        location = resolve_resource_location(
            config.templates_location, ENV_TEMPLATES_LOCATION, config.templates_branch
        )
        return cls(context, location)

    @property
    def base_path(self) -> str:
        """Base path templates are fetched relative to."""
        return self.location.base_path

    def get_template_path(self, input_model: str, input_version: str, output_model: str, output_version: str) -> str:
        """Path of the template translating one model version into another."""
        return (
            f"{self.base_path}/maps/{output_model}/{output_version}/"
            f"{input_model}/{input_version}/{TEMPLATES_FILENAME}"
        )

    def get_form_hydration_template_path(self, output_model: str, output_version: str) -> str:
        """Path of the template that hydrates a form for a model version."""
        return f"{self.base_path}/maps/{HYDRATION_INPUT_MODEL}/{output_model}/{output_version}/{TEMPLATES_FILENAME}"

    def get_catalog_path(self) -> str:
        """Path of the ``available.json`` catalog."""
        return f"{self.base_path}/available.json"

    async def get_available_templates(self) -> List[TemplateDescriptor]:
        """Return the template catalog, fetching it on first use.

        Raises:
            CatalogUnavailableError: If the catalog cannot be fetched or parsed
        """
        retriever = self.context.retriever
        path = self.get_catalog_path()
        try:
            available = await retriever.get_from_cache_or_source(
                AVAILABLE_TEMPLATES_KEY, path, self.location.load_from_local_file
            )
        except RetrievalError as e:
            raise CatalogUnavailableError(f"Failed to fetch available templates: {e}", source=path) from e

        try:
            available = parse_document(available)
            if not isinstance(available, list):
                raise ValueError("Available templates must be a list")
            descriptors = [TemplateDescriptor.from_dict(entry) for entry in available]
        except ValueError as e:
            # Drop the bad document so a later call fetches it again
            retriever.cache.delete(AVAILABLE_TEMPLATES_KEY)
            raise CatalogUnavailableError(f"Invalid available templates document: {e}", source=path) from e

        retriever.save_to_cache(AVAILABLE_TEMPLATES_KEY, available)
        return descriptors

    async def _get(self, path: str) -> str:
        try:
            return await self.context.retriever.get_from_cache_or_source(
                path, path, self.location.load_from_local_file
            )
        except RetrievalError as e:
            raise TemplateNotFoundError(f"Template not found: {path}", source=path) from e

    async def get_template(
        self, input_model: str, input_version: str, output_model: str, output_version: str
    ) -> str:
        """Return a template's text, fetching it on first use.

        Raises:
            TemplateNotFoundError: If the template cannot be retrieved
        """
        return await self._get(self.get_template_path(input_model, input_version, output_model, output_version))

    async def retrieve_template(
        self, input_model: str, input_version: str, output_model: str, output_version: str
    ) -> str:
        """Fetch a template bypassing the cache and store the fresh copy.

        Raises:
            TemplateNotFoundError: If the template cannot be retrieved
        """
        path = self.get_template_path(input_model, input_version, output_model, output_version)
        try:
            template = await self.context.retriever.get_from_source(path, self.location.load_from_local_file)
        except RetrievalError as e:
            raise TemplateNotFoundError(f"Template not found: {path}", source=path) from e
        self.context.retriever.save_to_cache(path, template)
        return template

    async def get_form_hydration_template(self, output_model: str, output_version: str) -> str:
        """Return the form hydration template for a model version.

        Raises:
            TemplateNotFoundError: If the template cannot be retrieved
        """
        return await self._get(self.get_form_hydration_template_path(output_model, output_version))

    async def load_templates(self) -> List[LoadResult]:
        """Refresh every catalog template in the cache.

        Returns:
            One result per catalog entry, in catalog order

        Raises:
            CatalogUnavailableError: If the catalog itself cannot be read
        """
        descriptors = await self.get_available_templates()

        async def load(descriptor: TemplateDescriptor) -> LoadResult:
            key = self.get_template_path(
                descriptor.input_model,
                descriptor.input_version,
                descriptor.output_model,
                descriptor.output_version,
            )
            try:
                await self.retrieve_template(
                    descriptor.input_model,
                    descriptor.input_version,
                    descriptor.output_model,
                    descriptor.output_version,
                )
            except TemplateNotFoundError as e:
                log_error(LogEvent.TEMPLATE_REGISTRY, f"Failed to load template {key}", error=str(e))
                return LoadResult(key=key, success=False, error=str(e))
            return LoadResult(key=key, success=True)

        results = await gather_bounded(descriptors, load, self.context.config.max_concurrency)

        failed = sum(1 for result in results if not result.success)
        if failed:
            log_warning(LogEvent.TEMPLATE_REGISTRY, "Some templates failed to load", failed=failed)
        log_info(LogEvent.TEMPLATE_REGISTRY, "Loaded templates", loaded=len(results) - failed)
        return results

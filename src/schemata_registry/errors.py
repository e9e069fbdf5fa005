"""Error types for the schemata registry.

This module defines the error types raised by location resolution, document
retrieval and the schema/template registries. Validation failures are not
errors: they are returned as error lists by the validation service.
"""

from typing import Optional


class SchemaRegistryError(Exception):
    """Base class for all registry-related errors.

    This is the parent class for all registry-specific exceptions.
    """

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Error message
        """
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class ConfigurationError(SchemaRegistryError):
    """Raised when a resource location or config value is missing or invalid.

    Examples:
        >>> try:
        ...     resolve_resource_location("", "SCHEMA_LOCATION")
        ... except ConfigurationError as e:
        ...     print(f"Bad setting: {e.env_name}")
    """

    def __init__(self, message: str, env_name: Optional[str] = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            env_name: Optional name of the environment variable at fault
        """
        super().__init__(message)
        self.env_name = env_name


class RetrievalError(SchemaRegistryError):
    """Raised when a document cannot be fetched from disk or a remote URI.

    Examples:
        >>> try:
        ...     await retriever.get_from_uri("https://example.com/missing.json")
        ... except RetrievalError as e:
        ...     print(f"Fetch failed: {e.source}")
    """

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        """Initialize retrieval error.

        Args:
            message: Error message
            source: Optional URI or path that was being read
        """
        super().__init__(message)
        self.source = source


class CatalogUnavailableError(RetrievalError):
    """Raised when an ``available.json`` catalog cannot be fetched or parsed."""

    pass


class SchemaNotFoundError(RetrievalError):
    """Raised when a schema document cannot be retrieved.

    Examples:
        >>> try:
        ...     await schemas.retrieve_schema("Order", "9.9.9")
        ... except SchemaNotFoundError as e:
        ...     print(f"No schema {e.name}:{e.version}")
    """

    def __init__(
        self,
        message: str,
        name: str,
        version: str,
        source: Optional[str] = None,
    ) -> None:
        """Initialize schema not found error.

        Args:
            message: Error message
            name: Schema (model) name
            version: Schema version
            source: Optional path the schema was expected at
        """
        super().__init__(message, source)
        self.name = name
        self.version = version


class TemplateNotFoundError(RetrievalError):
    """Raised when a transformation template cannot be retrieved."""

    pass


class SchemaCompilationError(SchemaRegistryError):
    """Raised when a schema document is not a usable JSON Schema."""

    def __init__(self, message: str, key: str) -> None:
        """Initialize compilation error.

        Args:
            message: Error message
            key: Schema key of the document that failed to compile
        """
        super().__init__(message)
        self.key = key

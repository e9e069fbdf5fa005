"""Registry for versioned JSON Schemas and translation templates.

This package resolves schema and template locations (local directories,
GitHub repository URLs or raw-content URLs), caches fetched documents,
compiles schemas into validators and checks metadata documents against them.
"""

import logging as _logging

# Version of the package
try:
    from importlib.metadata import version as _version

    __version__ = _version("schemata-registry")
except ImportError:
    raise ImportError(
        "Failed to determine package version. This package requires Python 3.8+ "
        "where importlib.metadata is available, or must be installed as a package."
    )

# Import main components for easier access
from .config import RegistryConfig
from .context import RegistryContext, get_context
from .engine import CompiledValidator, SchemaRef, ValidationEngine, schema_key
from .errors import (
    CatalogUnavailableError,
    ConfigurationError,
    RetrievalError,
    SchemaCompilationError,
    SchemaNotFoundError,
    SchemaRegistryError,
    TemplateNotFoundError,
)
from .loading import LoadResult
from .location import Location, resolve_resource_location
from .retrieval import DocumentCache, DocumentRetriever
from .schemas import SchemaRegistry
from .templates import TemplateDescriptor, TemplateRegistry
from .validation import MatchResult, ValidationService

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

# Define public API
__all__ = [
    # Context and configuration
    "RegistryConfig",
    "RegistryContext",
    "get_context",
    # Locations and retrieval
    "Location",
    "resolve_resource_location",
    "DocumentCache",
    "DocumentRetriever",
    # Schemas and validation
    "SchemaRegistry",
    "ValidationService",
    "ValidationEngine",
    "CompiledValidator",
    "SchemaRef",
    "schema_key",
    "MatchResult",
    "LoadResult",
    # Templates
    "TemplateRegistry",
    "TemplateDescriptor",
    # Errors
    "SchemaRegistryError",
    "ConfigurationError",
    "RetrievalError",
    "CatalogUnavailableError",
    "SchemaNotFoundError",
    "TemplateNotFoundError",
    "SchemaCompilationError",
]

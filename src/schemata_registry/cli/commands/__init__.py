"""CLI commands package."""

# Import all command modules to make them available
from . import env, location, schemas, templates, validate

__all__ = ["env", "location", "schemas", "templates", "validate"]

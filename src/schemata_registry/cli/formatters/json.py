"""JSON output formatter for CLI."""

import json
import sys
from dataclasses import asdict, is_dataclass
from enum import Enum as _Enum
from typing import Any, Dict, List, Optional, TextIO

from ...loading import LoadResult
from ...location import Location
from ...templates import TemplateDescriptor
from ...validation import MatchResult


def _default_serializer(obj: Any) -> Any:
    """Serialize otherwise non-JSON-serializable objects.

    - dataclass -> dict of its fields
    - Enum -> value (fallback to name)
    - Fallback -> str(obj)
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, _Enum):
        return getattr(obj, "value", obj.name)
    return str(obj)


def format_json(data: Any, output: Optional[TextIO] = None, indent: int = 2) -> None:
    """Format data as JSON and write to output.

    Args:
        data: Data to format
        output: Output stream (defaults to stdout)
        indent: JSON indentation level
    """
    if output is None:
        output = sys.stdout

    json.dump(
        data,
        output,
        indent=indent,
        ensure_ascii=False,
        default=_default_serializer,
    )
    output.write("\n")


def format_location_json(value: str, location: Location) -> Dict[str, Any]:
    """Format a resolved location for JSON output."""
    return {
        "value": value,
        "base_path": location.base_path,
        "load_from_local_file": location.load_from_local_file,
    }


def format_catalog_json(catalog: Dict[str, List[str]]) -> Dict[str, Any]:
    """Format the schema catalog for JSON output.

    Catalog order is kept; it is the order schemas are matched in.
    """
    schemas = [{"name": name, "versions": list(versions)} for name, versions in catalog.items()]
    return {"schemas": schemas, "count": sum(len(versions) for versions in catalog.values())}


def format_load_results_json(results: List[LoadResult]) -> Dict[str, Any]:
    """Format bulk load results for JSON output."""
    failed = [result for result in results if not result.success]
    return {
        "results": [result.to_dict() for result in results],
        "loaded": len(results) - len(failed),
        "failed": len(failed),
    }


def format_validation_json(
    model: str, version: str, errors: List[Dict[str, Any]], section: Optional[str] = None
) -> Dict[str, Any]:
    """Format the outcome of validating one document for JSON output."""
    data: Dict[str, Any] = {"model": model, "version": version, "valid": not errors, "errors": errors}
    if section is not None:
        data["section"] = section
    return data


def format_matches_json(matches: List[MatchResult], include_errors: bool = False) -> Dict[str, Any]:
    """Format schema matching results for JSON output."""
    return {
        "matches": [match.to_dict(include_errors) for match in matches],
        "matched": sum(1 for match in matches if match.matches),
        "checked": len(matches),
    }


def format_templates_json(templates: List[TemplateDescriptor]) -> Dict[str, Any]:
    """Format the template catalog for JSON output."""
    return {"templates": [template.to_dict() for template in templates], "count": len(templates)}


def format_env_vars_json(env_vars: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """Format environment variables for JSON output.

    Args:
        env_vars: Environment variables

    Returns:
        Formatted data structure
    """
    return {
        "environment_variables": {key: {"value": value, "set": value is not None} for key, value in env_vars.items()},
        "set_count": sum(1 for v in env_vars.values() if v is not None),
        "total_count": len(env_vars),
    }

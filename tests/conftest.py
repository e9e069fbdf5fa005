"""Shared fixtures for the schemata registry tests."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import pytest
from rich.logging import RichHandler

from schemata_registry.config import ENVIRONMENT_VARIABLES, RegistryConfig
from schemata_registry.context import RegistryContext
from schemata_registry.logging import ROOT_LOGGER_NAME

ORDER_V1 = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "integer"},
        "status": {"type": "string", "default": "new"},
        "header": {
            "type": "object",
            "required": ["title"],
            "properties": {"title": {"type": "string"}, "pages": {"type": "integer"}},
        },
    },
}

ORDER_V2 = {
    "type": "object",
    "required": ["id", "lines"],
    "properties": {
        "id": {"type": "string"},
        "lines": {"type": "array", "items": {"type": "object"}},
    },
}

INVOICE_V1 = {
    "type": "object",
    "required": ["invoice_number"],
    "properties": {"invoice_number": {"type": "string"}},
}

ORDER_FORM_V1 = {"type": "object", "properties": {"id": {"type": "integer", "title": "Order number"}}}

TEMPLATE_CATALOG = [
    {"input_model": "Order", "input_version": "1.0.0", "output_model": "Invoice", "output_version": "1.0.0"},
    {"input_model": "Order", "input_version": "2.0.0", "output_model": "Invoice", "output_version": "1.0.0"},
]

ORDER_TO_INVOICE = '{ "invoice_number": $string(id) }'
ORDER_HYDRATION = '{ "id": id }'


def write_json(path: Path, data: Any) -> Path:
    """Write ``data`` as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def write_schema_tree(
    root: Path,
    catalog: Dict[str, List[str]],
    schemas: Dict[str, Any],
    hydration: Optional[Dict[str, Any]] = None,
) -> Path:
    """Lay out a schema tree the way the schema registry expects it.

    Args:
        root: Directory to write into
        catalog: Contents of ``available.json``
        schemas: Schema documents keyed by ``"<name>:<version>"``
        hydration: Form hydration schemas keyed by ``"<name>:<version>"``
    """
    write_json(root / "available.json", catalog)
    for key, document in schemas.items():
        name, version = key.split(":")
        write_json(root / "hdr_schemata" / "models" / name / version / "schema.json", document)
    for key, document in (hydration or {}).items():
        name, version = key.split(":")
        write_json(root / "docs" / name / f"{version}.form.json", document)
    return root


@pytest.fixture(autouse=True)
def clean_registry_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate every test from the environment, the default context and CLI logging."""
    for name in ENVIRONMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    RegistryContext.cleanup()
    yield
    RegistryContext.cleanup()

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def schema_dir(tmp_path: Path) -> Path:
    """Create a local schema tree with two Order versions and one Invoice version."""
    return write_schema_tree(
        tmp_path / "schemas",
        {"Order": ["1.0.0", "2.0.0"], "Invoice": ["1.0.0"]},
        {"Order:1.0.0": ORDER_V1, "Order:2.0.0": ORDER_V2, "Invoice:1.0.0": INVOICE_V1},
        hydration={"Order:1.0.0": ORDER_FORM_V1},
    )


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Create a local template tree; the Order 2.0.0 translation is missing on purpose."""
    root = tmp_path / "templates"
    write_json(root / "available.json", TEMPLATE_CATALOG)
    translation = root / "maps" / "Invoice" / "1.0.0" / "Order" / "1.0.0" / "translation.jsonata"
    translation.parent.mkdir(parents=True)
    translation.write_text(ORDER_TO_INVOICE, encoding="utf-8")
    hydration = root / "maps" / "Hydration" / "Order" / "1.0.0" / "translation.jsonata"
    hydration.parent.mkdir(parents=True)
    hydration.write_text(ORDER_HYDRATION, encoding="utf-8")
    return root


@pytest.fixture
def context(schema_dir: Path, template_dir: Path) -> RegistryContext:
    """Create a registry context pointing at the local schema and template trees."""
    config = RegistryConfig(schema_location=str(schema_dir), templates_location=str(template_dir))
    return RegistryContext(config)

"""Tests for the validation service."""

import asyncio
import copy
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import Mock, patch

import pytest

from schemata_registry.config import RegistryConfig
from schemata_registry.context import RegistryContext
from schemata_registry.schemas import SchemaRegistry
from schemata_registry.validation import MatchResult, ValidationService

from .conftest import write_schema_tree


def _service(schema_dir: Path, load: bool = True) -> ValidationService:
    context = RegistryContext(RegistryConfig(schema_location=str(schema_dir)))
    schemas = SchemaRegistry.from_config(context)
    if load:
        asyncio.run(schemas.load_schemas())
    return ValidationService(context, schemas)


@pytest.fixture
def service(schema_dir: Path) -> ValidationService:
    """Create a validation service with every fixture schema loaded."""
    return _service(schema_dir)


def _matches(results: List[MatchResult]) -> Dict[str, bool]:
    return {f"{result.name}:{result.version}": result.matches for result in results}


class TestValidate:
    """Tests for whole-document validation."""

    def test_valid_document(self, tmp_path: Path) -> None:
        """A document with the required id validates cleanly."""
        schema_dir = write_schema_tree(
            tmp_path / "orders",
            {"Order": ["1.0.0"]},
            {"Order:1.0.0": {"type": "object", "required": ["id"]}},
        )
        service = _service(schema_dir)

        assert service.validate({"id": 1}, "Order", "1.0.0") == []

        errors = service.validate({}, "Order", "1.0.0")
        assert len(errors) == 1
        assert "id" in errors[0]["message"]

    def test_unknown_schema(self, service: ValidationService) -> None:
        """An unknown schema is a single synthetic error, not an exception."""
        assert service.validate({"id": 1}, "Order", "9.9.9") == [
            {"message": "Schema for model=Order version=9.9.9 is not known!"}
        ]

    def test_validates_in_place(self, service: ValidationService) -> None:
        """Coercion and defaults are applied to the caller's document."""
        metadata = {"id": "42"}

        assert service.validate(metadata, "Order", "1.0.0") == []
        assert metadata == {"id": 42, "status": "new"}

    def test_errors_are_returned(self, service: ValidationService) -> None:
        """Invalid documents return their errors."""
        errors = service.validate({"invoice_number": ["INV-1"]}, "Invoice", "1.0.0")

        assert len(errors) == 1
        assert errors[0]["instance_path"] == "/invoice_number"
        assert errors[0]["keyword"] == "type"


class TestValidateSection:
    """Tests for validating one top-level section."""

    def test_valid_section(self, service: ValidationService) -> None:
        """A valid section returns no errors."""
        metadata = {"id": 1, "header": {"title": "Quarterly order"}}
        assert service.validate_section(metadata, "Order", "1.0.0", "header") == []

    def test_invalid_section(self, service: ValidationService) -> None:
        """Errors are reported relative to the section."""
        errors = service.validate_section({"header": {"pages": 2}}, "Order", "1.0.0", "header")

        assert len(errors) == 1
        assert errors[0]["keyword"] == "required"
        assert errors[0]["instance_path"] == ""

    def test_section_is_coerced_in_place(self, service: ValidationService) -> None:
        """Section validation mutates the section like whole-document validation."""
        metadata = {"header": {"title": "T", "pages": "12"}}

        assert service.validate_section(metadata, "Order", "1.0.0", "header") == []
        assert metadata["header"]["pages"] == 12

    @pytest.mark.parametrize("metadata", [{"id": 1}, {"id": 1, "header": None}])
    def test_missing_subsection(self, service: ValidationService, metadata: Dict[str, Any]) -> None:
        """A missing section is one error, not an exception."""
        assert service.validate_section(metadata, "Order", "1.0.0", "header") == [
            {"message": "Subsection header not found in provided metadata."}
        ]

    def test_falsy_section_is_validated(self, service: ValidationService) -> None:
        """An empty section is validated rather than reported missing."""
        errors = service.validate_section({"id": 1, "header": {}}, "Order", "1.0.0", "header")

        assert len(errors) == 1
        assert errors[0]["keyword"] == "required"

    def test_scalar_section_is_coerced(self, service: ValidationService) -> None:
        """A scalar section is checked as its declared type."""
        assert service.validate_section({"id": "42"}, "Order", "1.0.0", "id") == []
        assert service.validate_section({"id": "x"}, "Order", "1.0.0", "id")[0]["keyword"] == "type"

    def test_unknown_subsection_schema(self, service: ValidationService) -> None:
        """Sections the schema does not describe are reported as unknown."""
        assert service.validate_section({"footer": {}}, "Order", "1.0.0", "footer") == [
            {"message": "Schema for model=Order version=1.0.0 subsection=footer is not known!"}
        ]

    def test_unknown_model(self, service: ValidationService) -> None:
        """Unknown models are reported the same way as unknown sections."""
        assert service.validate_section({"header": {}}, "Quote", "1.0.0", "header") == [
            {"message": "Schema for model=Quote version=1.0.0 subsection=header is not known!"}
        ]


class TestFindMatchingSchemas:
    """Tests for schema discovery."""

    def test_single_match_in_catalog_order(self, service: ValidationService) -> None:
        """Exactly one satisfied schema yields one True and the rest False, in catalog order."""
        results = asyncio.run(service.find_matching_schemas({"invoice_number": "INV-7"}))

        assert [(result.name, result.version) for result in results] == [
            ("Order", "1.0.0"),
            ("Order", "2.0.0"),
            ("Invoice", "1.0.0"),
        ]
        assert [result.matches for result in results] == [False, False, True]
        assert all(result.errors is None for result in results)

    def test_include_errors(self, service: ValidationService) -> None:
        """Errors are attached per schema when requested."""
        results = asyncio.run(service.find_matching_schemas({"invoice_number": "INV-7"}, include_errors=True))

        assert results[2].errors == []
        assert "'id' is a required property" in results[0].errors[0]["message"]
        assert results[0].to_dict(include_errors=True)["errors"] == results[0].errors
        assert "errors" not in results[0].to_dict()

    def test_metadata_is_not_mutated(self, service: ValidationService) -> None:
        """Matching leaves the caller's document untouched."""
        metadata = {"id": "7", "lines": []}
        snapshot = copy.deepcopy(metadata)

        asyncio.run(service.find_matching_schemas(metadata))

        assert metadata == snapshot

    def test_coercion_does_not_leak_between_schemas(self, service: ValidationService) -> None:
        """A value coerced for one schema is seen unchanged by the next."""
        results = asyncio.run(service.find_matching_schemas({"id": "7", "lines": []}))

        # Order 1.0.0 coerces id to an integer; Order 2.0.0 needs the original string.
        assert _matches(results) == {"Order:1.0.0": True, "Order:2.0.0": True, "Invoice:1.0.0": False}

    def test_defaults_do_not_leak_between_schemas(self, tmp_path: Path) -> None:
        """A default filled for one schema is not visible to the next."""
        schema_dir = write_schema_tree(
            tmp_path / "defaults",
            {"Defaulting": ["1.0.0"], "Strict": ["1.0.0"]},
            {
                "Defaulting:1.0.0": {"type": "object", "properties": {"status": {"type": "string", "default": "new"}}},
                "Strict:1.0.0": {"type": "object", "not": {"required": ["status"]}},
            },
        )
        service = _service(schema_dir)

        results = asyncio.run(service.find_matching_schemas({"id": 1}))

        assert _matches(results) == {"Defaulting:1.0.0": True, "Strict:1.0.0": True}

    def test_default_satisfies_required_when_matching(self, tmp_path: Path) -> None:
        """A required property supplied only by a default still matches."""
        schema_dir = write_schema_tree(
            tmp_path / "required_default",
            {"Ticket": ["1.0.0"]},
            {
                "Ticket:1.0.0": {
                    "type": "object",
                    "required": ["status"],
                    "properties": {"status": {"type": "string", "default": "new"}},
                }
            },
        )
        service = _service(schema_dir)
        metadata: Dict[str, Any] = {}

        results = asyncio.run(service.find_matching_schemas(metadata, include_errors=True))

        assert [(result.matches, result.errors) for result in results] == [(True, [])]
        assert metadata == {}
        assert service.validate({}, "Ticket", "1.0.0") == []

    def test_array_items_are_coerced_when_matching(self, tmp_path: Path) -> None:
        """Item coercion applies during matching without touching the caller's document."""
        schema_dir = write_schema_tree(
            tmp_path / "batches",
            {"Batch": ["1.0.0"]},
            {"Batch:1.0.0": {"type": "object", "properties": {"ids": {"type": "array", "items": {"type": "integer"}}}}},
        )
        service = _service(schema_dir)
        metadata = {"ids": ["1", "2"]}

        results = asyncio.run(service.find_matching_schemas(metadata))

        assert results[0].matches is True
        assert metadata == {"ids": ["1", "2"]}

    def test_unloaded_schemas_are_skipped(self, schema_dir: Path) -> None:
        """Catalog entries without an installed validator are left out."""
        service = _service(schema_dir, load=False)
        service.context.engine.compile_and_register({"type": "object"}, "Order:2.0.0")

        results = asyncio.run(service.find_matching_schemas({}))

        assert [(result.name, result.version, result.matches) for result in results] == [("Order", "2.0.0", True)]

    def test_validator_exception_is_a_non_match(self, service: ValidationService) -> None:
        """A validator that raises counts as a non-match and the scan continues."""
        real_snapshot = service.context.engine.snapshot()
        failing = Mock(side_effect=RuntimeError("boom"))
        snapshot = Mock()
        snapshot.lookup.side_effect = lambda key: failing if key == "Order:1.0.0" else real_snapshot.lookup(key)

        with patch.object(service.context.engine, "snapshot", return_value=snapshot):
            results = asyncio.run(service.find_matching_schemas({"invoice_number": "INV-7"}, include_errors=True))

        assert results[0].matches is False
        assert results[0].errors == [{"message": "boom"}]
        assert results[2].matches is True

    def test_empty_catalog(self, tmp_path: Path) -> None:
        """An empty catalog matches nothing."""
        service = _service(write_schema_tree(tmp_path / "empty", {}, {}))
        assert asyncio.run(service.find_matching_schemas({"id": 1})) == []

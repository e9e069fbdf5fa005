"""JSON Schema validation engine.

The engine compiles schema documents with ``jsonschema`` and keeps the
compiled set as an immutable, versioned snapshot. Schemas are addressed by
their key (``"<name>:<version>"``) and sub-schemas by key plus a JSON pointer
(``"Order:1.0.0#/properties/header"``).

Validation mirrors the behaviour metadata producers rely on: scalar property
values are coerced to the declared ``type`` and missing properties receive
their ``default``. Both happen in place on the validated document unless it is
frozen (see :mod:`schemata_registry.frozen`).
"""

import copy
import functools
import math
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, Union
from urllib.parse import quote

from jsonschema import Draft7Validator, validators
from jsonschema.exceptions import SchemaError, ValidationError
from referencing import Registry, Resource
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT7, specification_with

from .errors import SchemaCompilationError
from .frozen import is_frozen
from .logging import LogEvent, log_debug

SCHEMA_URI_BASE = "https://schemata.local/"

# Marker for "no coercion applies"
_UNCHANGED = object()


def schema_key(name: str, version: str) -> str:
    """Build the key a schema is registered and cached under."""
    return f"{name}:{version}"


@dataclass(frozen=True)
class SchemaRef:
    """Reference to a registered schema or to a fragment inside one.

    Attributes:
        root_key: Key of the registered schema (``"<name>:<version>"``)
        pointer: Optional JSON pointer into that schema, starting with ``/``
    """

    root_key: str
    pointer: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.root_key:
            raise ValueError("SchemaRef requires a root key")
        if self.pointer is not None and self.pointer != "" and not self.pointer.startswith("/"):
            raise ValueError(f"JSON pointer must start with '/': {self.pointer!r}")

    @classmethod
    def parse(cls, ref: str) -> "SchemaRef":
        """Parse the compound ``key#/pointer`` form."""
        root_key, sep, pointer = ref.partition("#")
        return cls(root_key, pointer if sep and pointer else None)

    @classmethod
    def for_section(cls, name: str, version: str, subsection: str) -> "SchemaRef":
        """Reference the schema of a top-level property of a model."""
        return cls(schema_key(name, version), f"/properties/{_escape_pointer_token(subsection)}")

    @property
    def uri(self) -> str:
        """URI the referenced schema is resolvable under."""
        base = schema_uri(self.root_key)
        return f"{base}#{quote(self.pointer, safe='/~')}" if self.pointer else base

    def __str__(self) -> str:
        return f"{self.root_key}#{self.pointer}" if self.pointer else self.root_key


def schema_uri(key: str) -> str:
    """URI a registered schema is stored under in the reference registry."""
    return SCHEMA_URI_BASE + quote(key, safe=":")


def _escape_pointer_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _to_pointer(path: Iterable[Any]) -> str:
    return "".join(f"/{_escape_pointer_token(str(part))}" for part in path)


# Type coercion


def _is_type(value: Any, type_name: str) -> bool:
    if type_name == "null":
        return value is None
    if type_name == "boolean":
        return isinstance(value, bool)
    if type_name == "integer":
        if isinstance(value, bool):
            return False
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    if type_name == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if type_name == "string":
        return isinstance(value, str)
    if type_name == "array":
        return isinstance(value, list)
    if type_name == "object":
        return isinstance(value, dict)
    return False


def _parse_number(text: str) -> Any:
    stripped = text.strip()
    if not stripped:
        return _UNCHANGED
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        number = float(stripped)
    except ValueError:
        return _UNCHANGED
    if math.isnan(number) or math.isinf(number):
        return _UNCHANGED
    return number


def _coerce_to(value: Any, type_name: str) -> Any:
    """Coerce a scalar to ``type_name`` or return ``_UNCHANGED``."""
    if isinstance(value, (dict, list)):
        return _UNCHANGED

    if type_name == "string":
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        if value is None:
            return ""
    elif type_name in ("number", "integer"):
        if isinstance(value, bool):
            return 1 if value else 0
        if value is None:
            return 0
        if isinstance(value, str):
            number = _parse_number(value)
            if number is _UNCHANGED:
                return _UNCHANGED
            if type_name == "integer":
                if isinstance(number, float) and not number.is_integer():
                    return _UNCHANGED
                return int(number)
            return number
    elif type_name == "boolean":
        if value in ("true", "false"):
            return value == "true"
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value in (0, 1):
            return bool(value)
        if value is None:
            return False
    elif type_name == "null":
        if value == "" or (not isinstance(value, bool) and value == 0) or value is False:
            return None
    return _UNCHANGED


def coerce_value(value: Any, declared: Union[str, Sequence[str]]) -> Any:
    """Coerce ``value`` to the first declared type it can be converted to.

    Values that already satisfy one of the declared types are returned as is,
    as are values no declared type can absorb.
    """
    types = [declared] if isinstance(declared, str) else list(declared)
    if any(_is_type(value, type_name) for type_name in types):
        return value
    for type_name in types:
        coerced = _coerce_to(value, type_name)
        if coerced is not _UNCHANGED:
            return coerced
    return value


def _item_types(items: Any, schema: Any, length: int) -> List[Any]:
    """Declared ``type`` for each array index, or None where none applies."""
    if isinstance(items, list):
        declared = [subschema.get("type") if isinstance(subschema, dict) else None for subschema in items]
        return (declared + [None] * length)[:length]
    start = len(schema.get("prefixItems") or []) if isinstance(schema, dict) else 0
    declared_type = items.get("type") if isinstance(items, dict) else None
    return [None] * min(start, length) + [declared_type] * max(length - start, 0)


def _coerce_items(instance: List[Any], items: Any, schema: Any) -> List[Any]:
    """Coerce array elements to their declared types.

    Writable arrays are updated in place; frozen ones yield a coerced copy.
    """
    coerced = list(instance)
    changed = False
    for index, declared in enumerate(_item_types(items, schema, len(instance))):
        if declared is None:
            continue
        value = coerce_value(coerced[index], declared)
        if value is not coerced[index]:
            coerced[index] = value
            changed = True
    if not changed:
        return instance
    if is_frozen(instance):
        return coerced
    instance[:] = coerced
    return instance


def _apply_defaults(instance: Dict[str, Any], properties: Any) -> None:
    if not isinstance(properties, dict) or is_frozen(instance):
        return
    for name, subschema in properties.items():
        if name not in instance and isinstance(subschema, dict) and "default" in subschema:
            instance[name] = copy.deepcopy(subschema["default"])


@functools.lru_cache(maxsize=None)
def _mutating_validator_class(base: Type[Any], coerce_types: bool, use_defaults: bool) -> Type[Any]:
    """Extend a jsonschema validator class with coercion and default filling."""
    if not coerce_types and not use_defaults:
        return base

    base_required = base.VALIDATORS.get("required")
    base_items = base.VALIDATORS.get("items")

    def properties(validator: Any, properties: Any, instance: Any, schema: Any) -> Iterator[ValidationError]:
        if not validator.is_type(instance, "object"):
            return
        if use_defaults:
            _apply_defaults(instance, properties)
        writable = not is_frozen(instance)
        for name, subschema in properties.items():
            if name not in instance:
                continue
            value = instance[name]
            if coerce_types and isinstance(subschema, dict) and "type" in subschema:
                coerced = coerce_value(value, subschema["type"])
                if coerced is not value:
                    value = coerced
                    if writable:
                        instance[name] = coerced
            yield from validator.descend(value, subschema, path=name, schema_path=name)

    def required(validator: Any, required: Any, instance: Any, schema: Any) -> Iterator[ValidationError]:
        # Defaults count towards required properties regardless of keyword order.
        if use_defaults and validator.is_type(instance, "object"):
            _apply_defaults(instance, schema.get("properties"))
        if base_required is not None:
            yield from base_required(validator, required, instance, schema)

    def items(validator: Any, items: Any, instance: Any, schema: Any) -> Iterator[ValidationError]:
        if coerce_types and validator.is_type(instance, "array"):
            instance = _coerce_items(instance, items, schema)
        yield from base_items(validator, items, instance, schema)

    overrides = {"properties": properties}
    if base_required is not None:
        overrides["required"] = required
    if base_items is not None:
        overrides["items"] = items
    return validators.extend(base, overrides)


class CompiledValidator:
    """Callable validator for one schema or schema fragment.

    Calling it validates an instance and returns whether it is valid. The
    errors of the most recent call are kept in :attr:`errors`.
    """

    def __init__(
        self,
        ref: SchemaRef,
        validator: Any,
        all_errors: bool = False,
        wrapped: bool = False,
        root_type: Any = None,
    ) -> None:
        """Initialize the compiled validator.

        Args:
            ref: Reference this validator was built for
            validator: Configured jsonschema validator instance
            all_errors: Collect every error instead of stopping at the first
            wrapped: True when the schema is a ``$ref`` wrapper around a fragment
            root_type: Declared ``type`` the instance itself is coerced to, if any
        """
        self.ref = ref
        self.errors: List[Dict[str, Any]] = []
        self._validator = validator
        self._all_errors = all_errors
        self._wrapped = wrapped
        self._root_type = root_type

    @property
    def schema(self) -> Any:
        """The schema this validator evaluates."""
        return self._validator.schema

    def __call__(self, instance: Any) -> bool:
        # A coerced root value cannot be written back to the caller
        if self._root_type is not None:
            instance = coerce_value(instance, self._root_type)
        errors = []
        for error in self._validator.iter_errors(instance):
            errors.append(self._format_error(error))
            if not self._all_errors:
                break
        self.errors = errors
        return not errors

    def _format_error(self, error: ValidationError) -> Dict[str, Any]:
        schema_path = list(error.absolute_schema_path)
        if self._wrapped and schema_path and schema_path[0] == "$ref":
            schema_path = schema_path[1:]
        return {
            "message": error.message,
            "instance_path": _to_pointer(error.absolute_path),
            "schema_path": _to_pointer(schema_path),
            "keyword": error.validator,
        }

    def __repr__(self) -> str:
        return f"CompiledValidator({str(self.ref)!r})"


@dataclass(frozen=True)
class CompiledSchema:
    """A schema document that passed meta-validation and is ready to install."""

    key: str
    document: Any
    validator_class: Type[Any]
    resource: Resource

    def resources(self) -> List[Tuple[str, Resource]]:
        """URIs this schema is resolvable under."""
        entries = [(schema_uri(self.key), self.resource)]
        own_id = self.resource.id()
        if own_id:
            entries.append((own_id.rstrip("#"), self.resource))
        return entries


class EngineSnapshot:
    """Immutable view of the installed schemas at one point in time."""

    def __init__(
        self,
        version: int,
        schemas: Mapping[str, CompiledSchema],
        coerce_types: bool,
        use_defaults: bool,
        all_errors: bool,
    ) -> None:
        """Build validators for every schema against a shared reference registry."""
        self.version = version
        self._schemas = dict(schemas)
        self._coerce_types = coerce_types
        self._use_defaults = use_defaults
        self._all_errors = all_errors
        self._registry: Registry = Registry().with_resources(
            entry for compiled in self._schemas.values() for entry in compiled.resources()
        )
        self._validators: Dict[str, CompiledValidator] = {
            key: self._build(SchemaRef(key), compiled) for key, compiled in self._schemas.items()
        }
        self._fragments: Dict[SchemaRef, Optional[CompiledValidator]] = {}
        self._fragments_lock = threading.Lock()

    @property
    def schemas(self) -> Dict[str, CompiledSchema]:
        """Compiled schemas in this snapshot, by key."""
        return dict(self._schemas)

    def keys(self) -> List[str]:
        """Keys of the installed schemas."""
        return list(self._schemas)

    def __contains__(self, key: object) -> bool:
        return key in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def lookup(self, ref: Union[str, SchemaRef]) -> Optional[CompiledValidator]:
        """Return the validator for a key or ``key#/pointer`` reference."""
        if isinstance(ref, str):
            ref = SchemaRef.parse(ref)
        if ref.root_key not in self._schemas:
            return None
        if not ref.pointer:
            return self._validators[ref.root_key]

        with self._fragments_lock:
            if ref in self._fragments:
                return self._fragments[ref]
            fragment = self._build_fragment(ref)
            self._fragments[ref] = fragment
            return fragment

    def _validator_class(self, compiled: CompiledSchema) -> Type[Any]:
        return _mutating_validator_class(compiled.validator_class, self._coerce_types, self._use_defaults)

    def _root_type(self, schema: Any) -> Any:
        if self._coerce_types and isinstance(schema, dict):
            return schema.get("type")
        return None

    def _build(self, ref: SchemaRef, compiled: CompiledSchema) -> CompiledValidator:
        cls = self._validator_class(compiled)
        validator = cls(compiled.document, registry=self._registry, format_checker=cls.FORMAT_CHECKER)
        return CompiledValidator(
            ref, validator, all_errors=self._all_errors, root_type=self._root_type(compiled.document)
        )

    def _build_fragment(self, ref: SchemaRef) -> Optional[CompiledValidator]:
        try:
            resolved = self._registry.resolver().lookup(ref.uri)
        except Unresolvable:
            return None
        compiled = self._schemas[ref.root_key]
        cls = self._validator_class(compiled)
        validator = cls({"$ref": ref.uri}, registry=self._registry, format_checker=cls.FORMAT_CHECKER)
        return CompiledValidator(
            ref,
            validator,
            all_errors=self._all_errors,
            wrapped=True,
            root_type=self._root_type(resolved.contents),
        )


class ValidationEngine:
    """Shared registry of compiled validators.

    The installed set is replaced wholesale on every change, so readers that
    hold a :class:`EngineSnapshot` always see one consistent generation.
    """

    def __init__(
        self,
        coerce_types: bool = True,
        use_defaults: bool = True,
        all_errors: bool = False,
        default_validator: Type[Any] = Draft7Validator,
    ) -> None:
        """Initialize an empty engine.

        Args:
            coerce_types: Coerce scalar property values to their declared type
            use_defaults: Fill missing properties from schema defaults
            all_errors: Report every error instead of the first one
            default_validator: Validator class for documents without ``$schema``
        """
        self.coerce_types = coerce_types
        self.use_defaults = use_defaults
        self.all_errors = all_errors
        self.default_validator = default_validator
        self._lock = threading.Lock()
        self._snapshot = self._new_snapshot(0, {})

    def _new_snapshot(self, version: int, schemas: Mapping[str, CompiledSchema]) -> EngineSnapshot:
        return EngineSnapshot(version, schemas, self.coerce_types, self.use_defaults, self.all_errors)

    def compile(self, document: Any, key: str) -> CompiledSchema:
        """Check a schema document and prepare it for installation.

        Raises:
            SchemaCompilationError: If the document is not a valid JSON Schema
        """
        if not isinstance(document, (dict, bool)):
            raise SchemaCompilationError(
                f"Schema {key} must be an object or boolean, got {type(document).__name__}", key=key
            )
        dialect = document.get("$schema") if isinstance(document, dict) else None
        if dialect is not None and not isinstance(dialect, str):
            raise SchemaCompilationError(
                f"Invalid schema {key}: $schema must be a string, got {type(dialect).__name__}", key=key
            )
        validator_class = validators.validator_for(document, default=self.default_validator)
        try:
            validator_class.check_schema(document)
        except SchemaError as e:
            raise SchemaCompilationError(f"Invalid schema {key}: {e.message}", key=key) from e
        meta_schema = validator_class.META_SCHEMA
        dialect_id = meta_schema.get("$id") or meta_schema.get("id") or ""
        resource = specification_with(dialect_id, default=DRAFT7).create_resource(document)
        return CompiledSchema(key=key, document=document, validator_class=validator_class, resource=resource)

    def snapshot(self) -> EngineSnapshot:
        """Return the current generation of installed schemas."""
        return self._snapshot

    @property
    def version(self) -> int:
        """Generation counter, incremented on every change."""
        return self._snapshot.version

    def keys(self) -> List[str]:
        """Keys of the installed schemas."""
        return self._snapshot.keys()

    def __contains__(self, key: object) -> bool:
        return key in self._snapshot

    def replace(self, schemas: Mapping[str, CompiledSchema]) -> int:
        """Install ``schemas`` as the complete set in one step.

        Returns:
            The new generation number
        """
        with self._lock:
            snapshot = self._new_snapshot(self._snapshot.version + 1, schemas)
            self._snapshot = snapshot
        log_debug(LogEvent.SCHEMA_REGISTRY, "Installed schema snapshot", version=snapshot.version, count=len(snapshot))
        return snapshot.version

    def compile_and_register(self, document: Any, key: str) -> None:
        """Compile ``document`` and install it under ``key``, replacing any previous entry."""
        compiled = self.compile(document, key)
        with self._lock:
            schemas = self._snapshot.schemas
            schemas[key] = compiled
            self._snapshot = self._new_snapshot(self._snapshot.version + 1, schemas)

    def unregister(self, key: str) -> bool:
        """Remove the schema installed under ``key``.

        Returns:
            True if a schema was removed
        """
        with self._lock:
            schemas = self._snapshot.schemas
            if schemas.pop(key, None) is None:
                return False
            self._snapshot = self._new_snapshot(self._snapshot.version + 1, schemas)
            return True

    def lookup(self, ref: Union[str, SchemaRef]) -> Optional[CompiledValidator]:
        """Return the validator for a key or ``key#/pointer`` reference, if installed."""
        return self._snapshot.lookup(ref)

"""
Typed field schema for declarative resource blocks.

A :class:`ResourceSchema` describes every field a resource accepts: its value
type, whether it is required, computed by the device when unset, or forces a
replacement when changed. Schemas are kept as YAML documents under
``bigip_ltm.schemas`` so the user-facing descriptions can be maintained
without touching Python code; :func:`load_schema` turns them into typed
objects.

The schema layer owns declaration hygiene (type coercion, name validation,
force-new detection). Resource adapters never validate on their own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, MutableMapping, Optional

import yaml

SCHEMAS_PACKAGE = "bigip_ltm.schemas"

_F5_NAME = re.compile(r"^/[\w.\-]+/[\w.\-:%]+$")
_F5_NAME_WITH_DIRECTORY = re.compile(r"^/[\w.\-]+(/[\w.\-]+)?/[\w.\-:%]+$")


class SchemaError(ValueError):
    """Raised when a schema document or a declaration does not validate."""


class ReplacementRequiredError(SchemaError):
    """Raised when a force-new field changes and the object cannot be updated in place."""

    def __init__(self, fields: List[str]) -> None:
        super().__init__(f"Changing {', '.join(fields)} requires replacing the resource.")
        self.fields = fields


class FieldType(str, Enum):
    """Value kinds supported by declarations."""

    STRING = "string"
    INT = "int"
    SET = "set"
    LIST = "list"
    BLOCK = "block"


def validate_f5_name(value: str) -> Optional[str]:
    """Accept ``/Partition/name``."""

    if _F5_NAME.match(value):
        return None
    return f"'{value}' must match /Partition/Name"


def validate_f5_name_with_directory(value: str) -> Optional[str]:
    """Accept ``/Partition/name`` or ``/Partition/directory/name``."""

    if _F5_NAME_WITH_DIRECTORY.match(value):
        return None
    return f"'{value}' must match /Partition/Name or /Partition/Directory/Name"


VALIDATORS: Mapping[str, Callable[[str], Optional[str]]] = {
    "f5_name": validate_f5_name,
    "f5_name_with_directory": validate_f5_name_with_directory,
}


@dataclass(slots=True)
class FieldSpec:
    """
    Declaration of a single field.

    Parameters
    ----------
    name:
        Field key used in declarations and state.
    type:
        Value kind. ``set`` values are unordered string collections, ``list``
        values keep their order, ``block`` values are nested mappings.
    required:
        The field must be declared.
    computed:
        The device supplies a value when the field is left unset.
    force_new:
        Changing the value replaces the remote object.
    default:
        Value assumed by the engine when the field is not declared.
    description:
        User-facing documentation, kept verbatim.
    validator:
        Optional key into :data:`VALIDATORS`.
    fields:
        Sub-fields of a ``block``.
    """

    name: str
    type: FieldType
    required: bool = False
    computed: bool = False
    force_new: bool = False
    default: Any = None
    description: str = ""
    validator: Optional[str] = None
    fields: Mapping[str, "FieldSpec"] = field(default_factory=dict)

    def check(self) -> None:
        """Validate internal consistency of the declaration itself."""

        if self.validator and self.validator not in VALIDATORS:
            raise SchemaError(f"Field '{self.name}' references unknown validator '{self.validator}'.")
        if self.type is FieldType.BLOCK and not self.fields:
            raise SchemaError(f"Block field '{self.name}' declares no sub-fields.")
        if self.type is not FieldType.BLOCK and self.fields:
            raise SchemaError(f"Field '{self.name}' of type {self.type.value} cannot declare sub-fields.")
        if self.required and self.computed:
            raise SchemaError(f"Field '{self.name}' cannot be both required and computed.")

    def unset_value(self) -> Any:
        """Value the engine reports for an undeclared field."""

        if self.default is not None:
            return self.coerce(self.default)
        return self.zero_value()

    def zero_value(self) -> Any:
        if self.type is FieldType.STRING:
            return ""
        if self.type is FieldType.INT:
            return 0
        if self.type is FieldType.SET:
            return frozenset()
        if self.type is FieldType.LIST:
            return ()
        return None

    def coerce(self, value: Any) -> Any:
        """Normalise a declared value to the field's Python type; ``None`` stays ``None``."""

        if value is None:
            return None
        if self.type is FieldType.STRING:
            if isinstance(value, (Mapping, list, tuple, set, frozenset)):
                raise SchemaError(f"Field '{self.name}' expects a string, got {type(value).__name__}.")
            return str(value)
        if self.type is FieldType.INT:
            if isinstance(value, bool):
                raise SchemaError(f"Field '{self.name}' expects an integer, got a boolean.")
            try:
                return int(value)
            except (TypeError, ValueError):
                raise SchemaError(f"Field '{self.name}' expects an integer, got {value!r}.") from None
        if self.type is FieldType.SET:
            return frozenset(str(item) for item in _as_sequence(self.name, value))
        if self.type is FieldType.LIST:
            return tuple(str(item) for item in _as_sequence(self.name, value))
        return self._coerce_block(value)

    def _coerce_block(self, value: Any) -> Optional[Dict[str, Any]]:
        # Older declarations wrap the block in a single-element list.
        if isinstance(value, (list, tuple)):
            if not value:
                return None
            if len(value) > 1:
                raise SchemaError(f"Block '{self.name}' accepts at most one element, got {len(value)}.")
            value = value[0]
        if not isinstance(value, Mapping):
            raise SchemaError(f"Block '{self.name}' expects a mapping, got {type(value).__name__}.")
        unknown = sorted(set(value) - set(self.fields))
        if unknown:
            raise SchemaError(f"Block '{self.name}' has unknown field(s): {', '.join(unknown)}.")
        return {key: self.fields[key].coerce(item) for key, item in value.items() if item is not None}


def _as_sequence(name: str, value: Any) -> List[Any]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    raise SchemaError(f"Field '{name}' expects a collection of strings, got {type(value).__name__}.")


class ResourceSchema:
    """Ordered catalogue of :class:`FieldSpec` entries for one resource type."""

    def __init__(self, resource_type: str, fields: Optional[List[FieldSpec]] = None) -> None:
        self.resource_type = resource_type
        self._fields: MutableMapping[str, FieldSpec] = {}
        for spec in fields or []:
            self.add(spec)

    def add(self, spec: FieldSpec) -> None:
        spec.check()
        for sub in spec.fields.values():
            sub.check()
        self._fields[spec.name] = spec

    def get(self, name: str) -> Optional[FieldSpec]:
        return self._fields.get(name)

    def require(self, name: str) -> FieldSpec:
        spec = self._fields.get(name)
        if spec is None:
            raise SchemaError(f"'{name}' is not a field of {self.resource_type}.")
        return spec

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self._fields.values())

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def coerce(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Coerce every value of a declaration, rejecting unknown keys."""

        unknown = sorted(key for key in values if key not in self._fields)
        if unknown:
            raise SchemaError(f"Unknown field(s) for {self.resource_type}: {', '.join(unknown)}.")
        return {key: self._fields[key].coerce(value) for key, value in values.items()}

    def validate(self, values: Mapping[str, Any]) -> None:
        """
        Check a coerced declaration for missing required fields and validator failures.

        All problems are collected and raised together as one :class:`SchemaError`.
        """

        problems: List[str] = []
        for spec in self:
            value = values.get(spec.name)
            if value is None:
                if spec.required:
                    problems.append(f"'{spec.name}' is required")
                continue
            if spec.validator and isinstance(value, str):
                message = VALIDATORS[spec.validator](value)
                if message:
                    problems.append(f"{spec.name}: {message}")
        if problems:
            raise SchemaError(f"Invalid {self.resource_type} declaration: " + "; ".join(problems))

    def requires_replacement(self, prior: Mapping[str, Any], planned: Mapping[str, Any]) -> List[str]:
        """Return force-new fields whose declared value differs from the prior state."""

        changed = []
        for spec in self:
            if not spec.force_new:
                continue
            before, after = prior.get(spec.name), planned.get(spec.name)
            if after is None or before is None:
                continue
            if spec.coerce(before) != spec.coerce(after):
                changed.append(spec.name)
        return changed

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ResourceSchema":
        """Load a schema document."""

        location = Path(path)
        if not location.exists():
            raise SchemaError(f"Schema file '{location}' does not exist.")
        try:
            with location.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle)
        except yaml.YAMLError as exc:  # pragma: no cover - depends on PyYAML
            raise SchemaError(f"Failed to parse '{location}': {exc}") from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("fields"), dict):
            raise SchemaError(f"Schema file '{location}' must contain a 'resource' name and a 'fields' mapping.")
        resource_type = str(payload.get("resource") or location.stem)
        return cls(resource_type, [_field_from_payload(name, entry, origin=location) for name, entry in payload["fields"].items()])


def _field_from_payload(name: str, entry: object, *, origin: Path) -> FieldSpec:
    if not isinstance(entry, dict):
        raise SchemaError(f"Invalid entry '{name}' in '{origin}': expected mapping, got {type(entry)!r}")
    try:
        kind = FieldType(str(entry.get("type", FieldType.STRING.value)))
    except ValueError as exc:
        raise SchemaError(f"Invalid type for '{name}' in '{origin}': {exc}") from exc
    sub_fields = entry.get("fields") or {}
    if not isinstance(sub_fields, dict):
        raise SchemaError(f"Sub-fields of '{name}' in '{origin}' must be a mapping.")
    return FieldSpec(
        name=name,
        type=kind,
        required=bool(entry.get("required", False)),
        computed=bool(entry.get("computed", False)),
        force_new=bool(entry.get("force_new", False)),
        default=entry.get("default"),
        description=str(entry.get("description", "")).strip(),
        validator=entry.get("validator"),
        fields={key: _field_from_payload(key, value, origin=origin) for key, value in sub_fields.items()},
    )


def load_schema(resource_type: str) -> ResourceSchema:
    """Load the packaged schema document for ``resource_type``."""

    with resources.as_file(resources.files(SCHEMAS_PACKAGE) / f"{resource_type}.yaml") as resolved:
        return ResourceSchema.from_yaml(resolved)

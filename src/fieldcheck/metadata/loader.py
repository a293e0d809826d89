"""Load type schemas from YAML documents."""

from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from fieldcheck.errors import SchemaError
from fieldcheck.metadata.declarations import (
    Constraint,
    ConstraintSet,
    FieldRef,
    TypeSchema,
)
from fieldcheck.metadata.registry import SchemaRegistry
from fieldcheck.metadata.validator import schema_files, validate_document

# Scalar and container type names usable in a field's `type`.
# Any other name refers to another schema.
BUILTIN_TYPES: dict[str, Any] = {
    "string": str,
    "text": str,
    "bool": bool,
    "boolean": bool,
    "int": int,
    "integer": int,
    "long": int,
    "float": float,
    "double": float,
    "number": float,
    "decimal": Decimal,
    "list": list,
    "array": list,
    "map": dict,
    "object": dict,
    "any": None,
}


class SchemaLoader:
    """Loads type schema documents into a SchemaRegistry.

    Every field listed in a document is constrained: a field with no `rules`
    gets a single default rule, which lets the engine descend into nested
    schemas and collections through it.
    """

    def __init__(self, schema_path: Path, registry: SchemaRegistry | None = None):
        self.schema_path = schema_path
        self.registry = registry or SchemaRegistry()
        self._pending: list[TypeSchema] = []

    def load_all(self) -> SchemaRegistry:
        """Load every document under the schema path and check references."""
        if not self.schema_path.is_dir():
            raise SchemaError(f"Schema directory not found: {self.schema_path}")

        for yaml_file in schema_files(self.schema_path):
            with open(yaml_file) as f:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as exc:
                    raise SchemaError(f"{yaml_file}: {exc}") from exc
            if data:
                self.load_document(data, source=yaml_file)

        self._check_references()
        return self.registry

    def load_document(self, data: dict[str, Any], source: Path | None = None) -> TypeSchema:
        """Resolve and register one parsed schema document.

        References to other schemas are checked by load_all (or check_references)
        once every document is known.
        """
        issues = validate_document(data, source or Path("<document>"))
        if issues:
            raise SchemaError("; ".join(str(issue) for issue in issues))

        schema = self._resolve_schema(data)
        self.registry.register(schema)
        self._pending.append(schema)
        return schema

    def check_references(self) -> None:
        self._check_references()

    def _check_references(self) -> None:
        for schema in self._pending:
            for ref in schema.fields:
                for target in (ref.schema_name, ref.item_schema_name):
                    if target and not self.registry.is_registered(target):
                        raise SchemaError(
                            f"Field '{ref.name}' of '{schema.name}' "
                            f"references unknown schema '{target}'"
                        )
        self._pending.clear()

    def _resolve_schema(self, data: dict[str, Any]) -> TypeSchema:
        name = data["type"]
        seen: set[str] = set()
        fields = []
        for field_data in data.get("fields", []):
            ref = self._resolve_field(field_data)
            if ref.name in seen:
                raise SchemaError(f"Duplicate field '{ref.name}' in schema '{name}'")
            seen.add(ref.name)
            fields.append(ref)

        return TypeSchema(
            name=name,
            display_name=data.get("description", ""),
            fields=tuple(fields),
        )

    def _resolve_field(self, data: dict[str, Any]) -> FieldRef:
        """Convert field dict to FieldRef."""
        type_name = data.get("type", "any")
        rules = [Constraint.from_dict(r or {}) for r in data.get("rules", [])]
        if not rules:
            rules = [Constraint()]

        if type_name in BUILTIN_TYPES:
            declared_type = BUILTIN_TYPES[type_name]
            schema_name = None
        else:
            declared_type = None
            schema_name = type_name

        items = data.get("items")
        item_schema_name = None
        if items and items not in BUILTIN_TYPES:
            item_schema_name = items

        return FieldRef(
            name=data["name"],
            constraints=ConstraintSet.of(rules),
            declared_type=declared_type,
            schema_name=schema_name,
            item_schema_name=item_schema_name,
        )

    def get_schema(self, name: str) -> TypeSchema | None:
        """Get a loaded schema by name."""
        if self.registry.is_registered(name):
            return self.registry.get(name)
        return None

    def list_schemas(self) -> list[str]:
        """List all schema names."""
        return self.registry.names()

"""Field enumeration and value access.

The engine never inspects objects directly. It asks an Introspector for the
schema of a value, reads field values through it, and asks it how a field's
type should be treated.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from fieldcheck.core.types import classify_type
from fieldcheck.errors import AccessError
from fieldcheck.metadata.declarations import FieldRef, TypeSchema, TypeTag
from fieldcheck.metadata.records import Record
from fieldcheck.metadata.registry import SchemaRegistry, default_registry


class Introspector(Protocol):
    """Capability the engine needs from the metadata/reflection layer."""

    def schema_of(self, value: Any) -> TypeSchema | None:
        """Display name and constrained fields of a value's type, if any."""
        ...

    def get(self, instance: Any, field: FieldRef) -> Any:
        """Current value of a field.

        Raises:
            AccessError: If the value cannot be read
        """
        ...

    def type_of(self, field: FieldRef, value: Any) -> TypeTag:
        """How the field is checked; value is the field's current value."""
        ...


class RegistryIntrospector:
    """Introspector backed by a SchemaRegistry.

    Python objects resolve by class (including registered base classes);
    Records resolve by their schema name. Values are read as attributes, or
    as keys for Records.
    """

    def __init__(self, registry: SchemaRegistry | None = None):
        self.registry = registry or default_registry

    def schema_of(self, value: Any) -> TypeSchema | None:
        if isinstance(value, Record):
            if self.registry.is_registered(value.type_name):
                return self.registry.get(value.type_name)
            return None
        return self.registry.for_class(type(value))

    def get(self, instance: Any, field: FieldRef) -> Any:
        if isinstance(instance, Record):
            return instance.get(field.name)
        if isinstance(instance, Mapping):
            return instance.get(field.name)
        try:
            return getattr(instance, field.name)
        except AttributeError:
            # Declared but never assigned, e.g. an annotation without a default
            return None
        except Exception as e:
            raise AccessError(type(instance).__name__, field.name, e) from e

    def type_of(self, field: FieldRef, value: Any) -> TypeTag:
        if field.schema_name or field.item_schema_name:
            return TypeTag.OTHER
        if field.declared_type is not None:
            return classify_type(field.declared_type)
        return classify_type(type(value))

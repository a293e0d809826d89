"""Schema registry and class decorator.

Types get their constraint metadata in one of three ways:

- explicitly: ``registry.register(TypeSchema(...), cls)``
- with the ``@constrained`` class decorator, reading rules from
  ``Annotated[...]`` hints, ``dataclasses.field(metadata=rules(...))`` or a
  ``fields=`` mapping
- from YAML schema documents (see ``fieldcheck.metadata.loader``)

Example:
    @constrained(description="Contract")
    @dataclass
    class Contract:
        contract_no: Annotated[str, Constraint(description="contract number",
                                               allow_empty=False,
                                               size=SizeRule(min=1, max=20))] = ""
        amount: Decimal | None = field(default=None, metadata=rules(
            Constraint(size=SizeRule(numeric=True, integer_digits=16, fraction_digits=2))))
"""

import dataclasses
import inspect
import types
import typing
from typing import Any, Iterable, Mapping, Union

from fieldcheck.errors import SchemaError
from fieldcheck.metadata.declarations import Constraint, ConstraintSet, FieldRef, TypeSchema

# Key under which rules() stores constraints in dataclasses.field metadata.
METADATA_KEY = "fieldcheck"


def rules(*constraints: Constraint) -> dict[str, tuple[Constraint, ...]]:
    """Build ``dataclasses.field(metadata=...)`` content for a constrained field."""
    return {METADATA_KEY: tuple(constraints)}


class SchemaRegistry:
    """Maps type names and Python classes to their TypeSchema.

    A class that is not registered itself resolves to the schema of its
    nearest registered base class.
    """

    def __init__(self) -> None:
        self._by_name: dict[str, TypeSchema] = {}
        self._by_class: dict[type, TypeSchema] = {}

    def register(self, schema: TypeSchema, cls: type | None = None) -> None:
        """Register a schema by name, and by class when one is given.

        Re-registering a name replaces the previous schema.
        """
        self._by_name[schema.name] = schema
        if cls is not None:
            self._by_class[cls] = schema

    def get(self, name: str) -> TypeSchema:
        """Get a schema by type name.

        Raises:
            KeyError: If no schema is registered under that name
        """
        if name not in self._by_name:
            raise KeyError(f"Unknown schema: {name}")
        return self._by_name[name]

    def is_registered(self, name: str) -> bool:
        return name in self._by_name

    def for_class(self, cls: type) -> TypeSchema | None:
        """Get the schema of a class or of its nearest registered base."""
        for klass in cls.__mro__:
            schema = self._by_class.get(klass)
            if schema is not None:
                return schema
        return None

    def names(self) -> list[str]:
        return list(self._by_name)

    def clear(self) -> None:
        """Clear all registrations. Primarily for testing."""
        self._by_name.clear()
        self._by_class.clear()


default_registry = SchemaRegistry()


# -----------------------------------------------------------------------------
# Decorator
# -----------------------------------------------------------------------------


def constrained(
    cls: type | None = None,
    *,
    description: str = "",
    fields: Mapping[str, Constraint | Iterable[Constraint]] | None = None,
    registry: SchemaRegistry | None = None,
) -> Any:
    """Class decorator that collects field rules and registers the class.

    Usable bare (``@constrained``) or with options
    (``@constrained(description="Order")``).
    """

    def wrap(klass: type) -> type:
        target = registry or default_registry
        target.register(build_schema(klass, description, fields, target), klass)
        return klass

    if cls is not None:
        return wrap(cls)
    return wrap


def build_schema(
    cls: type,
    description: str = "",
    fields: Mapping[str, Constraint | Iterable[Constraint]] | None = None,
    registry: SchemaRegistry | None = None,
) -> TypeSchema:
    """Collect the constrained fields of a class into a TypeSchema.

    Fields of registered base classes come first, followed by the class's own
    fields in annotation order.
    """
    registry = registry or default_registry
    hints = _type_hints(cls)

    collected: dict[str, list[Constraint]] = {}
    declared: dict[str, Any] = {}

    for base in reversed(cls.__mro__[1:]):
        base_schema = registry.for_class(base)
        if base_schema is None:
            continue
        for ref in base_schema.fields:
            collected.setdefault(ref.name, []).extend(ref.constraints)
            declared[ref.name] = ref.declared_type

    own_annotations = inspect.get_annotations(cls)
    for name in own_annotations:
        found = list(_annotated_constraints(hints.get(name)))
        if found:
            collected.setdefault(name, []).extend(found)
            declared[name] = unwrap_type(hints.get(name))

    if dataclasses.is_dataclass(cls):
        for dc_field in dataclasses.fields(cls):
            found = dc_field.metadata.get(METADATA_KEY, ())
            if found and dc_field.name in own_annotations:
                collected.setdefault(dc_field.name, []).extend(found)
                declared[dc_field.name] = unwrap_type(hints.get(dc_field.name))

    for name, value in (fields or {}).items():
        found = [value] if isinstance(value, Constraint) else list(value)
        if not found:
            raise SchemaError(f"Field '{name}' of {cls.__name__} declares no constraints")
        collected.setdefault(name, []).extend(found)
        declared.setdefault(name, unwrap_type(hints.get(name)))

    refs = tuple(
        FieldRef(
            name=name,
            constraints=ConstraintSet.of(constraints),
            declared_type=declared.get(name),
        )
        for name, constraints in collected.items()
    )
    return TypeSchema(name=cls.__name__, display_name=description, fields=refs)


# -----------------------------------------------------------------------------
# Type hint helpers
# -----------------------------------------------------------------------------


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to runtime value types
        return {}


def _annotated_constraints(hint: Any) -> Iterable[Constraint]:
    if typing.get_origin(hint) is typing.Annotated:
        for extra in hint.__metadata__:
            if isinstance(extra, Constraint):
                yield extra
            elif isinstance(extra, ConstraintSet):
                yield from extra


def unwrap_type(hint: Any) -> Any:
    """Reduce a type hint to the class the engine classifies.

    ``Annotated[X, ...]`` becomes ``X``, ``X | None`` becomes ``X`` and
    ``list[X]`` becomes ``list``. Anything unresolvable becomes None.
    """
    if hint is None:
        return None
    origin = typing.get_origin(hint)
    if origin is typing.Annotated:
        return unwrap_type(typing.get_args(hint)[0])
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return unwrap_type(args[0])
        return None
    if origin is not None:
        return origin if isinstance(origin, type) else None
    if isinstance(hint, type):
        return hint
    return None



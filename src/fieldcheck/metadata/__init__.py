"""Constraint metadata: declarations, registry, YAML loader and record binding."""

from fieldcheck.metadata.declarations import (
    DEFAULT_PREDICATE,
    MAX_BOUND,
    UNSET_SIZE,
    Constraint,
    ConstraintSet,
    FieldRef,
    SizeRule,
    TypeSchema,
    TypeTag,
)
from fieldcheck.metadata.loader import SchemaLoader
from fieldcheck.metadata.records import Record, bind
from fieldcheck.metadata.registry import (
    SchemaRegistry,
    build_schema,
    constrained,
    default_registry,
    rules,
)

__all__ = [
    # Declarations
    "DEFAULT_PREDICATE",
    "MAX_BOUND",
    "UNSET_SIZE",
    "Constraint",
    "ConstraintSet",
    "FieldRef",
    "SizeRule",
    "TypeSchema",
    "TypeTag",
    # Registry
    "SchemaRegistry",
    "build_schema",
    "constrained",
    "default_registry",
    "rules",
    # Loading
    "SchemaLoader",
    "Record",
    "bind",
]

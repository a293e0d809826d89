"""Validation engine: object traversal and per-field rule evaluation.

ObjectValidator walks an object graph depth-first. Records have their
constrained fields checked by FieldValidator; collections are validated
element by element; values reached through a constrained field that are not
scalars are validated recursively. All outcomes fold into one Result.

Rule violations only ever show up in the Result. Tooling faults (a field that
cannot be read, a predicate that cannot be evaluated) are logged and the
affected field is treated as passing.
"""

import logging
from contextvars import ContextVar
from typing import Any

from fieldcheck.core.types import is_collection, is_empty, string_form
from fieldcheck.errors import FieldcheckError
from fieldcheck.metadata.declarations import Constraint, ConstraintSet, FieldRef, TypeSchema
from fieldcheck.metadata.registry import SchemaRegistry
from fieldcheck.validation.introspection import Introspector, RegistryIntrospector
from fieldcheck.validation.predicates import ExpressionPredicateEvaluator, PredicateEvaluator
from fieldcheck.validation.result import Result
from fieldcheck.validation.sizing import check_size, labelled

logger = logging.getLogger(__name__)

# ids of the records and collections on the current traversal path
_active_path: ContextVar[frozenset[int]] = ContextVar("fieldcheck_active_path", default=frozenset())


class FieldValidator:
    """Evaluates the rules of one field against the object that owns it."""

    def __init__(
        self,
        introspector: Introspector,
        predicates: PredicateEvaluator,
        objects: "ObjectValidator",
    ):
        self.introspector = introspector
        self.predicates = predicates
        self.objects = objects

    def evaluate(self, constraints: ConstraintSet, owner: Any, field: FieldRef) -> list[Result]:
        """One Result per rule, in declaration order.

        Every rule runs even when an earlier one failed.

        Raises:
            AccessError: If the field value cannot be read
            PredicateError: If a rule's predicate cannot be evaluated
        """
        label = constraints.label(field.name)
        return [self.execute(constraint, label, owner, field) for constraint in constraints]

    def execute(self, constraint: Constraint, label: str, owner: Any, field: FieldRef) -> Result:
        result = Result()
        if not constraint.predicate:
            return result

        gate = self.predicates.evaluate(constraint.predicate, owner)
        if not gate and constraint.message:
            # An explicit message turns a false predicate into the failure itself
            return result.with_error(labelled(label, constraint.message))

        value = self.introspector.get(owner, field)
        if is_empty(value):
            if gate and not constraint.allow_empty:
                return result.with_error(labelled(label, "must not be empty"))
            return result

        tag = self.introspector.type_of(field, value)
        if tag.is_scalar:
            rule = constraint.size.as_numeric() if tag.is_numeric else constraint.size
            return result.with_error(check_size(rule, string_form(value), label))

        return result.merge(self.objects.validate(value, label))


class ObjectValidator:
    """Validates an object graph against its registered constraints.

    Usage:
        validator = ObjectValidator()
        result = validator.validate(order)
        if not result.valid:
            print(result.error_message)
    """

    def __init__(
        self,
        introspector: Introspector | None = None,
        predicates: PredicateEvaluator | None = None,
        *,
        detect_cycles: bool = True,
    ):
        self.introspector = introspector or RegistryIntrospector()
        self.predicates = predicates or ExpressionPredicateEvaluator()
        self.detect_cycles = detect_cycles
        self.fields = FieldValidator(self.introspector, self.predicates, self)

    def validate(self, value: Any, description: str | None = None) -> Result:
        """Validate a record, a collection of records, or None.

        Args:
            value: The object to validate
            description: Label for this subtree; a schema display name overrides it

        Returns:
            A fresh Result; never raises for rule violations or tooling faults
        """
        if value is None:
            return Result()

        schema = self.introspector.schema_of(value)
        if schema is not None and schema.display_name:
            description = schema.display_name
        result = Result(description=description)

        collection = is_collection(value)
        if not collection and schema is None:
            return result

        path = _active_path.get()
        if self.detect_cycles and id(value) in path:
            logger.warning(
                "Skipping %s that is already being validated (cyclic reference)",
                type(value).__name__,
            )
            return result

        token = _active_path.set(path | {id(value)})
        try:
            if collection:
                return result.merge_list(self.validate(item, description) for item in value)
            return self._validate_fields(value, schema, result)
        finally:
            _active_path.reset(token)

    def _validate_fields(self, value: Any, schema: TypeSchema, result: Result) -> Result:
        for ref in schema.fields:
            try:
                outcomes = self.fields.evaluate(ref.constraints, value, ref)
            except FieldcheckError as e:
                logger.warning("Skipping field '%s' of %s: %s", ref.name, schema.name, e)
                continue
            for outcome in outcomes:
                result = result.merge(outcome)
        return result


def validate(
    value: Any,
    description: str | None = None,
    *,
    registry: SchemaRegistry | None = None,
) -> Result:
    """Validate value using the default (or given) schema registry."""
    return ObjectValidator(RegistryIntrospector(registry)).validate(value, description)

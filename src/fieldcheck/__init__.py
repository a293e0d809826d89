"""fieldcheck: declarative field constraint validation.

Usage:
    from dataclasses import dataclass, field
    from fieldcheck import Constraint, ObjectValidator, SizeRule, constrained, rules

    @constrained(description="Contract")
    @dataclass
    class Contract:
        contract_no: str = field(default="", metadata=rules(
            Constraint(description="contract number", allow_empty=False,
                       size=SizeRule(min=1, max=20))))

    result = ObjectValidator().validate(Contract())
    result.error_message  # "contract number must not be empty"
"""

from fieldcheck.errors import AccessError, FieldcheckError, PredicateError, SchemaError
from fieldcheck.metadata import (
    Constraint,
    ConstraintSet,
    FieldRef,
    Record,
    SchemaLoader,
    SchemaRegistry,
    SizeRule,
    TypeSchema,
    TypeTag,
    bind,
    constrained,
    default_registry,
    rules,
)
from fieldcheck.validation import ObjectValidator, Result, validate

__all__ = [
    "AccessError",
    "FieldcheckError",
    "PredicateError",
    "SchemaError",
    "Constraint",
    "ConstraintSet",
    "FieldRef",
    "Record",
    "SchemaLoader",
    "SchemaRegistry",
    "SizeRule",
    "TypeSchema",
    "TypeTag",
    "bind",
    "constrained",
    "default_registry",
    "rules",
    "ObjectValidator",
    "Result",
    "validate",
]

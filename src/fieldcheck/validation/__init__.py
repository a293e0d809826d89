"""Field constraint validation.

Usage:
    from fieldcheck.validation import ObjectValidator

    result = ObjectValidator().validate(contract)
    if not result.valid:
        print(result.error_message)
"""

from fieldcheck.validation.engine import FieldValidator, ObjectValidator, validate
from fieldcheck.validation.introspection import Introspector, RegistryIntrospector
from fieldcheck.validation.predicates import (
    ExpressionPredicateEvaluator,
    PredicateEvaluator,
    unwrap_template,
)
from fieldcheck.validation.result import MESSAGE_SEPARATOR, Result
from fieldcheck.validation.sizing import check_size, display_length, labelled

__all__ = [
    # Engine
    "FieldValidator",
    "ObjectValidator",
    "validate",
    # Collaborators
    "Introspector",
    "RegistryIntrospector",
    "ExpressionPredicateEvaluator",
    "PredicateEvaluator",
    "unwrap_template",
    # Results
    "MESSAGE_SEPARATOR",
    "Result",
    # Size checks
    "check_size",
    "display_length",
    "labelled",
]

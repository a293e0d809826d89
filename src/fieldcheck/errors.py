"""Exception hierarchy for fieldcheck.

Rule violations are never exceptions; they are reported through
``Result``. The classes here describe tooling faults (a field that could not
be read, a predicate that could not be evaluated) and schema definition
mistakes detected at registration or load time.
"""


class FieldcheckError(Exception):
    """Base class for all fieldcheck errors."""


class AccessError(FieldcheckError):
    """A field value could not be read from an instance."""

    def __init__(self, type_name: str, field_name: str, cause: Exception | None = None):
        self.type_name = type_name
        self.field_name = field_name
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Cannot read field '{field_name}' of {type_name}{detail}")


class PredicateError(FieldcheckError):
    """A predicate expression could not be parsed or evaluated."""

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Cannot evaluate predicate {expression!r}: {reason}")


class SchemaError(FieldcheckError, ValueError):
    """A schema definition is malformed."""

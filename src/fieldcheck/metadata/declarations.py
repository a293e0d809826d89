"""Constraint metadata types.

These are the immutable descriptions attached to a type at registration time:

- SizeRule: length or numeric-precision bound with explicit "unset" sentinels
- Constraint: one rule on a field (predicate, message, label, emptiness, size)
- ConstraintSet: the ordered, non-empty list of rules on one field
- FieldRef: a constrained field of a type
- TypeSchema: display name plus the constrained fields of a type
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable

from fieldcheck.errors import SchemaError

# Largest representable bound; also the "unset" value of max and integer_digits.
MAX_BOUND = 2147483647

DEFAULT_PREDICATE = "${true}"


class TypeTag(Enum):
    """How the engine treats a field's value."""

    NUMERIC = "numeric"   # int, float
    TEXT = "text"         # str, bool
    DECIMAL = "decimal"   # decimal.Decimal
    OTHER = "other"       # nested record, collection, anything else

    @property
    def is_scalar(self) -> bool:
        return self is not TypeTag.OTHER

    @property
    def is_numeric(self) -> bool:
        return self in (TypeTag.NUMERIC, TypeTag.DECIMAL)


@dataclass(frozen=True)
class SizeRule:
    """Length or precision bound.

    Attributes:
        min: Minimum display length (text mode); unset is 0
        max: Maximum display length (text mode); unset is MAX_BOUND
        integer_digits: Maximum integer-part digits (numeric mode); unset is MAX_BOUND
        fraction_digits: Maximum fraction-part digits (numeric mode); unset is 0
        numeric: Selects numeric mode instead of text mode
    """

    min: int = 0
    max: int = MAX_BOUND
    integer_digits: int = MAX_BOUND
    fraction_digits: int = 0
    numeric: bool = False

    def is_unset(self) -> bool:
        """True when all four bounds are at their sentinels, whatever the mode."""
        return (
            self.min == 0
            and self.max == MAX_BOUND
            and self.integer_digits == MAX_BOUND
            and self.fraction_digits == 0
        )

    def as_numeric(self) -> "SizeRule":
        if self.numeric:
            return self
        return replace(self, numeric=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SizeRule":
        """Create a SizeRule from YAML/JSON keys (min, max, integer, fraction, numeric)."""
        if not data:
            return cls()
        return cls(
            min=int(data.get("min", 0)),
            max=int(data.get("max", MAX_BOUND)),
            integer_digits=int(data.get("integer", MAX_BOUND)),
            fraction_digits=int(data.get("fraction", 0)),
            numeric=bool(data.get("numeric", False)),
        )


UNSET_SIZE = SizeRule()


@dataclass(frozen=True)
class Constraint:
    """One validation rule bound to a field.

    Attributes:
        predicate: Boolean expression gating the rule, evaluated against the owner
        message: Error text reported when the predicate is false
        description: Human label for the field; first non-empty one on a field wins
        allow_empty: Whether an empty value passes while the predicate holds
        size: Length/precision bound for scalar values
    """

    predicate: str = DEFAULT_PREDICATE
    message: str = ""
    description: str = ""
    allow_empty: bool = True
    size: SizeRule = UNSET_SIZE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Constraint":
        """Create a Constraint from a YAML/JSON rule mapping."""
        return cls(
            predicate=data.get("predicate", DEFAULT_PREDICATE),
            message=data.get("message", ""),
            description=data.get("description", ""),
            allow_empty=data.get("allowEmpty", True),
            size=SizeRule.from_dict(data.get("size")),
        )


@dataclass(frozen=True)
class ConstraintSet:
    """All rules declared on one field, in declaration order."""

    constraints: tuple[Constraint, ...]

    def __post_init__(self) -> None:
        if not self.constraints:
            raise SchemaError("A ConstraintSet needs at least one Constraint")

    @classmethod
    def of(cls, constraints: Iterable[Constraint]) -> "ConstraintSet":
        return cls(tuple(constraints))

    def __iter__(self):
        return iter(self.constraints)

    def __len__(self) -> int:
        return len(self.constraints)

    def label(self, field_name: str) -> str:
        """Display label shared by every rule on the field."""
        for constraint in self.constraints:
            if constraint.description:
                return constraint.description
        return field_name


@dataclass(frozen=True)
class FieldRef:
    """A constrained field of a type.

    Attributes:
        name: Attribute (or mapping key) name
        constraints: Rules declared on the field
        declared_type: Python type of the field, or None to use the value's runtime type
        schema_name: Schema of a nested record value (YAML-described records)
        item_schema_name: Schema of collection elements (YAML-described records)
    """

    name: str
    constraints: ConstraintSet
    declared_type: Any = None
    schema_name: str | None = None
    item_schema_name: str | None = None


@dataclass(frozen=True)
class TypeSchema:
    """Constraint metadata of one type.

    Attributes:
        name: Type name
        display_name: Type-level label; overrides the caller's description when set
        fields: Constrained fields in declaration order
    """

    name: str
    display_name: str = ""
    fields: tuple[FieldRef, ...] = field(default_factory=tuple)

    def get_field(self, name: str) -> FieldRef | None:
        for ref in self.fields:
            if ref.name == name:
                return ref
        return None

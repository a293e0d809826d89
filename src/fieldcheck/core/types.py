"""Value classification shared by the engine and the predicate functions.

- classify_type: which checking path a field's type takes (numeric, text, decimal, other)
- is_empty / is_collection: emptiness and collection detection
- string_form: the text a scalar is measured by
"""

import re
from collections.abc import Collection, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from fieldcheck.metadata.declarations import TypeTag

# Decimal literal as accepted for numeric checks: sign, digits, optional
# fraction, optional exponent. No whitespace, underscores, NaN or infinity.
NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def classify_type(tp: Any) -> TypeTag:
    """Classify a Python type.

    bool counts as text, not as a number, and enums are never scalars.
    """
    if not isinstance(tp, type) or issubclass(tp, Enum):
        return TypeTag.OTHER
    if issubclass(tp, bool):
        return TypeTag.TEXT
    if issubclass(tp, Decimal):
        return TypeTag.DECIMAL
    if issubclass(tp, (int, float)):
        return TypeTag.NUMERIC
    if issubclass(tp, str):
        return TypeTag.TEXT
    return TypeTag.OTHER


def is_collection(value: Any) -> bool:
    """Lists, tuples, sets and other sized containers; not text, bytes or mappings."""
    return isinstance(value, Collection) and not isinstance(
        value, (str, bytes, bytearray, Mapping)
    )


def is_empty(value: Any) -> bool:
    """None, the empty string, an empty collection or an empty mapping."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, Mapping) or is_collection(value):
        return len(value) == 0
    return False


def string_form(value: Any) -> str:
    """Text used for length and precision checks.

    Decimals keep their exponent notation; precision checks read the digits
    from the parsed number rather than from this text.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

"""Built-in functions for the predicate language.

Call ``register_all_builtins()`` at startup; ``ExpressionPredicateEvaluator``
does so on construction.

- Emptiness: isEmpty, isBlank
- String: len, trim, upper, lower, matches, startsWith, endsWith
- Collection: contains, size
- Logic: coalesce
- Math: abs, min, max
- Format checks: isNumber, isDate
"""

import re
from datetime import datetime
from typing import Any

from fieldcheck.core.types import NUMBER_PATTERN, is_empty
from fieldcheck.expressions.functions import FunctionDefinition, FunctionRegistry


def _is_blank(value: Any) -> bool:
    """Empty, or text made only of whitespace."""
    if isinstance(value, str):
        return value.strip() == ""
    return is_empty(value)


def _len(value: Any) -> int:
    if value is None:
        return 0
    try:
        return len(value)
    except TypeError:
        return len(str(value))


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _matches(value: Any, pattern: str) -> bool:
    """Full match of the value's text against a regular expression."""
    if value is None:
        return False
    return re.fullmatch(pattern, str(value)) is not None


def _contains(collection: Any, item: Any) -> bool:
    if collection is None:
        return False
    if isinstance(collection, str):
        return item is not None and str(item) in collection
    return item in collection


def _coalesce(*args: Any) -> Any:
    for arg in args:
        if arg is not None:
            return arg
    return None


def _is_number(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    return NUMBER_PATTERN.fullmatch(str(value)) is not None


def _is_date(value: Any, fmt: str = "%Y-%m-%d") -> bool:
    """True when the value's text parses with the given strptime format."""
    if value is None:
        return False
    try:
        datetime.strptime(str(value), fmt)
    except ValueError:
        return False
    return True


_BUILTINS = [
    FunctionDefinition("isEmpty", is_empty, "True for null, '', empty collections and mappings",
                       ("!isEmpty(code) || !isEmpty(payNo)",)),
    FunctionDefinition("isBlank", _is_blank, "Like isEmpty, and also whitespace-only text"),
    FunctionDefinition("len", _len, "Length of text or collection; 0 for null", ("len(code) == 7",)),
    FunctionDefinition("trim", lambda v: _text(v).strip(), "Text with surrounding whitespace removed"),
    FunctionDefinition("upper", lambda v: _text(v).upper(), "Upper-cased text"),
    FunctionDefinition("lower", lambda v: _text(v).lower(), "Lower-cased text"),
    FunctionDefinition("matches", _matches, "Full regular-expression match",
                       ("matches(dateEnd, '\\\\d{4}-\\\\d{2}-\\\\d{2}')",)),
    FunctionDefinition("startsWith", lambda v, p: v is not None and str(v).startswith(p),
                       "Text starts with prefix"),
    FunctionDefinition("endsWith", lambda v, s: v is not None and str(v).endswith(s),
                       "Text ends with suffix"),
    FunctionDefinition("contains", _contains, "Membership in text or collection"),
    FunctionDefinition("size", lambda c: 0 if c is None else len(c), "Number of elements"),
    FunctionDefinition("coalesce", _coalesce, "First non-null argument"),
    FunctionDefinition("abs", lambda v: None if v is None else abs(v), "Absolute value"),
    FunctionDefinition("min", lambda *a: min(x for x in a if x is not None), "Smallest argument"),
    FunctionDefinition("max", lambda *a: max(x for x in a if x is not None), "Largest argument"),
    FunctionDefinition("isNumber", _is_number, "Text is a decimal number literal",
                       ("isNumber(amount)",)),
    FunctionDefinition("isDate", _is_date, "Text parses as a date (default format %Y-%m-%d)",
                       ("isDate(dateEnd)", "isDate(stamp, '%Y%m%d')")),
]


def register_all_builtins() -> None:
    """Register all built-in functions with the FunctionRegistry."""
    for func_def in _BUILTINS:
        FunctionRegistry.register(func_def)

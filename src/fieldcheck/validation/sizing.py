"""Length and numeric-precision checks.

Text values are measured in display units: characters in U+0391..U+FFE5
(CJK, full-width forms, Greek, Cyrillic and neighbouring scripts) count 2,
characters beyond U+FFFF count 2 as well (one per UTF-16 code unit), and
everything else counts 1.

Numeric values are measured by the digits of their plain decimal text: the
integer part (sign included) and the fraction part. The lengths come from the
decimal's digit tuple, so huge exponents are never expanded into text.
"""

import re
from decimal import Decimal, InvalidOperation

from fieldcheck.core.types import NUMBER_PATTERN
from fieldcheck.metadata.declarations import MAX_BOUND, SizeRule

WIDE_CHAR_PATTERN = re.compile("[\u0391-\uFFE5]")
ASTRAL_CHAR_PATTERN = re.compile("[\U00010000-\U0010FFFF]")


def labelled(label: str, text: str) -> str:
    """Join a field label and a message; a blank label leaves the message alone."""
    return f"{label} {text}".strip()


def display_length(text: str) -> int:
    if not text:
        return 0
    return (
        len(text)
        + len(WIDE_CHAR_PATTERN.findall(text))
        + len(ASTRAL_CHAR_PATTERN.findall(text))
    )


def parse_decimal(text: str) -> Decimal | None:
    """Exact decimal for a number literal, or None if text is not one."""
    if not NUMBER_PATTERN.fullmatch(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def digit_lengths(number: Decimal) -> tuple[int, int]:
    """Integer and fraction lengths of the plain text of a finite decimal.

    The sign counts toward the integer part, and a number below one has a
    single leading zero: ``-0.05`` gives (2, 2), ``1E+3`` gives (4, 0).
    """
    sign, digits, exponent = number.as_tuple()
    if exponent >= 0:
        integer_len, fraction_len = len(digits) + exponent, 0
    else:
        fraction_len = -exponent
        integer_len = max(len(digits) - fraction_len, 1)
    return integer_len + sign, fraction_len


def check_size(rule: SizeRule, text: str, label: str) -> str | None:
    """Check text against a size rule.

    Returns:
        None when the value passes, otherwise the error message
    """
    if rule.is_unset():
        return None
    if rule.numeric:
        return _check_digits(rule, text, label)
    return _check_length(rule, text, label)


def _check_digits(rule: SizeRule, text: str, label: str) -> str | None:
    integer_digits = max(rule.integer_digits, 1)
    fraction_digits = max(rule.fraction_digits, 0)

    number = parse_decimal(text)
    if number is None:
        return labelled(label, "cannot be converted to a number")

    integer_len, fraction_len = digit_lengths(number)

    if fraction_digits == 0 and fraction_len > 0:
        return labelled(label, "must be an integer")

    integer_set = integer_digits != MAX_BOUND
    fraction_set = fraction_digits != 0

    if not integer_set and not fraction_set:
        return None
    if integer_set and fraction_set:
        if integer_len > integer_digits or fraction_len > fraction_digits:
            return labelled(
                label, f"length must not exceed <{integer_digits},{fraction_digits}>"
            )
        return None
    if integer_set:
        if integer_len > integer_digits:
            return labelled(label, f"integer part must not exceed {integer_digits} digits")
        return None
    if fraction_len > fraction_digits:
        return labelled(label, f"fraction part must not exceed {fraction_digits} digits")
    return None


def _check_length(rule: SizeRule, text: str, label: str) -> str | None:
    upper = min(max(rule.max, 0), MAX_BOUND)
    lower = min(max(rule.min, 0), MAX_BOUND)
    lower, upper = min(lower, upper), max(lower, upper)

    length = display_length(text)
    max_set = upper != MAX_BOUND
    min_set = lower != 0

    if not max_set and not min_set:
        return None
    if max_set and min_set:
        if lower <= length <= upper:
            return None
        if lower == upper:
            return labelled(label, f"length must equal {lower}")
        return labelled(label, f"length must be between {lower} and {upper}")
    if max_set:
        if length > upper:
            return labelled(label, f"length must not exceed {upper}")
        return None
    if length < lower:
        return labelled(label, f"length must not be less than {lower}")
    return None

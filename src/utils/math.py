"""
Numeric helpers for turning raw contract results into display values.

This module owns the one piece of arithmetic in the project: scaling an
on-chain integer (denominated in 18-decimal base units, "wei") down to a
human-readable decimal string with at most six fractional digits.

All functions are pure: no I/O, no logging side effects beyond debug traces,
and no exceptions escape the normalizer.
"""

import logging
import re
from decimal import Decimal, DecimalException, InvalidOperation, localcontext
from typing import Any

logger = logging.getLogger(__name__)

# Reward amounts are returned in 18-decimal base units
WEI_DECIMALS = 18

# Display precision for formatted values (truncated, never rounded)
DISPLAY_FRACTION_DIGITS = 6

# Sentinel written when a raw result cannot be interpreted as a number
NOT_AVAILABLE = "N/A"

# Enough precision to hold any uint256/int256 divided by 10**18 exactly
_SCALE_PRECISION = 160

# Plain decimal literal: optional sign, digits with an optional point, optional exponent
_NUMERIC_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def truncate_fraction(text: str, digits: int = DISPLAY_FRACTION_DIGITS) -> str:
    """
    Truncate the fractional part of a decimal string to at most `digits` digits.

    **Conceptual**: This is string truncation, not numeric rounding. The
    integer part (including any sign) is kept unchanged and the fractional
    digits beyond `digits` are dropped. Strings with no fractional part, or
    with a short enough fractional part, are returned as-is. No zero padding
    is ever added.

    **Sign handling**: Because truncation works on the digit string, negative
    values move toward zero ("-1.2345678" -> "-1.234567").

    Args:
        text: Decimal string such as "1.2345678" or "42".
        digits: Maximum number of fractional digits to keep.

    Returns:
        Truncated decimal string.

    Example:
        >>> truncate_fraction("1.2345678")
        '1.234567'
        >>> truncate_fraction("1.5")
        '1.5'
    """
    if "." not in text:
        return text

    integer_part, fraction_part = text.split(".", 1)
    if len(fraction_part) <= digits:
        return text

    return f"{integer_part}.{fraction_part[:digits]}"


def scale_base_units(raw: str, decimals: int = WEI_DECIMALS) -> Decimal:
    """
    Parse a raw integer string and divide it by 10**decimals exactly.

    Commas used as thousands separators are stripped before parsing. Only
    plain decimal literals are accepted: no underscores, no NaN/Infinity.

    Raises:
        ValueError: If `raw` is not a finite number, or is too large to scale.
    """
    cleaned = raw.replace(",", "").strip()

    if not _NUMERIC_PATTERN.fullmatch(cleaned):
        raise ValueError(f"Not a numeric value: {raw!r}")

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Not a numeric value: {raw!r}")

    if not value.is_finite():
        raise ValueError(f"Not a finite value: {raw!r}")

    try:
        with localcontext() as ctx:
            ctx.prec = _SCALE_PRECISION
            return value.scaleb(-decimals)
    except DecimalException as e:
        raise ValueError(f"Value out of range: {raw!r}") from e


def _plain_decimal_string(value: Decimal) -> str:
    # normalize() drops trailing zeros; the "f" format keeps exponents out
    with localcontext() as ctx:
        ctx.prec = _SCALE_PRECISION
        return format(value.normalize(), "f")


def _drop_negative_zero(text: str) -> str:
    # "-0" and "-0.000000" both mean zero
    if text.startswith("-") and not text.strip("-0."):
        return text[1:]
    return text


def normalize_reward_value(raw: Any) -> str:
    """
    Convert a raw contract result into a human-scaled decimal string.

    **Conceptual**: Reward amounts come back from the contract as integers in
    base units (1 token == 10**18 units). Users want to read "1.234567", not
    "1234567890123456789". This function is the single place that performs
    that conversion for the CLI, the web form, and the results CSV.

    **Algorithm**:
      1. Strip commas from the raw string.
      2. If what's left is not a finite number, return "N/A".
      3. Divide by 10**18 using arbitrary-precision decimals.
      4. Render as a plain decimal string (no exponent, no trailing zeros).
      5. Truncate the fractional part to 6 digits (no rounding, no padding).

    **Precision**: Decimal arithmetic is exact for every uint256/int256, so very
    large on-chain values do not pick up binary floating point error.

    **Error handling**: Never raises. Unparseable input maps to "N/A".

    Args:
        raw: Raw result (string form of the contract return value). Non-string
             values are converted with str() first.

    Returns:
        Formatted decimal string, or "N/A".

    Example:
        >>> normalize_reward_value("1000000000000000000")
        '1'
        >>> normalize_reward_value("1234567890123456789")
        '1.234567'
        >>> normalize_reward_value("abc")
        'N/A'
    """
    if raw is None:
        return NOT_AVAILABLE

    try:
        scaled = scale_base_units(str(raw))
        text = _plain_decimal_string(scaled)
    except (ValueError, ArithmeticError) as e:
        logger.debug("Could not format result as number divided by 1e18: %s", e)
        return NOT_AVAILABLE

    return _drop_negative_zero(truncate_fraction(text))


def call_result_to_string(value: Any) -> str:
    """
    Render a contract call return value as the raw result string.

    Multi-value returns (lists/tuples) are joined with ", ". Byte strings are
    rendered as 0x-prefixed hex. Everything else goes through str().

    Example:
        >>> call_result_to_string(1500000000000000000)
        '1500000000000000000'
        >>> call_result_to_string((1, 2))
        '1, 2'
    """
    if isinstance(value, (list, tuple)):
        return ", ".join(call_result_to_string(item) for item in value)

    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()

    return str(value)

"""Money and percent normalization for user-entered values.

Every value a user types into the dashboard arrives as text. These helpers
turn that text into Decimal amounts without ever raising: anything that
cannot be read as a finite number becomes zero, and percentages are
clamped into [0, 100].
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

RawNumber = Union[str, int, float, Decimal, None]

ZERO = Decimal("0")
HUNDRED = Decimal("100")

_NON_MONEY_CHARS = re.compile(r"[^0-9.]")
_NON_PERCENT_CHARS = re.compile(r"[^0-9.\-]")


def _to_decimal(value: RawNumber) -> Optional[Decimal]:
    """Convert a number-like value to a finite Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(repr(value))
        else:
            result = Decimal(value)
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def normalize_money_text(raw: RawNumber) -> Decimal:
    """Parse a user-entered money value.

    Text has thousands separators and every character other than digits and
    the decimal point removed before parsing. Numeric values pass through
    unchanged (sign included).

    Args:
        raw: Text such as "$12,500.50", a number, or None.

    Returns:
        The parsed amount, or 0 if nothing finite could be read.

    Example:
        >>> normalize_money_text("$12,500")
        Decimal('12500')
        >>> normalize_money_text("abc")
        Decimal('0')
    """
    if isinstance(raw, str):
        cleaned = _NON_MONEY_CHARS.sub("", raw.replace(",", ""))
        if not cleaned:
            return ZERO
        parsed = _to_decimal(cleaned)
    else:
        parsed = _to_decimal(raw)
    return parsed if parsed is not None else ZERO


def clamp_percent(raw: RawNumber) -> Decimal:
    """Parse a percentage and clamp it into [0, 100].

    Unparsable input is read as 0.

    Example:
        >>> clamp_percent("150")
        Decimal('100')
        >>> clamp_percent(-5)
        Decimal('0')
    """
    if isinstance(raw, str):
        cleaned = _NON_PERCENT_CHARS.sub("", raw.replace(",", ""))
        parsed = _to_decimal(cleaned) if cleaned else None
    else:
        parsed = _to_decimal(raw)

    if parsed is None or parsed < ZERO:
        return ZERO
    if parsed > HUNDRED:
        return HUNDRED
    return parsed


def money_or_zero(value: Optional[Decimal]) -> Decimal:
    """Unset amounts compute as zero."""
    return ZERO if value is None else value


def round_whole(value: Decimal) -> Decimal:
    """Round to the nearest whole currency unit, halves away from zero."""
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def format_currency(value: RawNumber) -> str:
    """Format an amount as whole-dollar USD text.

    Non-finite or absent input formats as $0.

    Example:
        >>> format_currency(Decimal("1234.6"))
        '$1,235'
        >>> format_currency(Decimal("-500"))
        '-$500'
    """
    amount = _to_decimal(value)
    if amount is None:
        amount = ZERO
    whole = round_whole(amount)
    if whole < ZERO:
        return f"-${-whole:,}"
    return f"${abs(whole):,}"


__all__ = [
    "normalize_money_text",
    "clamp_percent",
    "money_or_zero",
    "round_whole",
    "format_currency",
]

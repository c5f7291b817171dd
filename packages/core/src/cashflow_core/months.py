"""Month-token arithmetic.

Months are exchanged as ``YYYY-MM`` strings throughout the dashboard (the
viewed month, need due months, completion-state keys). ``MonthToken`` is the
parsed form; the module-level helpers accept and return strings.
"""

import re
from dataclasses import dataclass
from typing import Union

from .exceptions import ValidationError

_TOKEN_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

DEFAULT_OPTIONS_YEAR = 2026


@dataclass(frozen=True, order=True)
class MonthToken:
    """A calendar month (year, month 1..12)."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError(
                f"Month must be between 1 and 12, got {self.month}",
                field="month",
                value=self.month,
                constraint="1 <= month <= 12",
            )
        if not 0 <= self.year <= 9999:
            raise ValidationError(
                f"Year must have at most four digits, got {self.year}",
                field="year",
                value=self.year,
                constraint="0 <= year <= 9999",
            )

    @classmethod
    def parse(cls, value: Union[str, "MonthToken"]) -> "MonthToken":
        """Parse a ``YYYY-MM`` token.

        Raises:
            ValidationError: If the text is not a four-digit year and a
                two-digit month in 01..12.
        """
        if isinstance(value, MonthToken):
            return value
        match = _TOKEN_PATTERN.match(str(value).strip())
        if not match:
            raise ValidationError(
                f"Invalid month token: {value!r}",
                field="month",
                value=value,
                constraint="YYYY-MM",
            )
        return cls(int(match.group(1)), int(match.group(2)))

    @property
    def ordinal(self) -> int:
        """Months since year 0, used for arithmetic."""
        return self.year * 12 + (self.month - 1)

    @classmethod
    def from_ordinal(cls, ordinal: int) -> "MonthToken":
        year, month_index = divmod(ordinal, 12)
        return cls(year, month_index + 1)

    def add(self, months: int) -> "MonthToken":
        """Return the month ``months`` after this one (negative goes back)."""
        return MonthToken.from_ordinal(self.ordinal + months)

    def diff(self, other: Union[str, "MonthToken"]) -> int:
        """Signed months from this month to ``other`` (positive if later)."""
        return MonthToken.parse(other).ordinal - self.ordinal

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def month_add(token: Union[str, MonthToken], months: int) -> str:
    """Add ``months`` to a token, carrying across year boundaries.

    Example:
        >>> month_add("2026-12", 1)
        '2027-01'
        >>> month_add("2026-01", -1)
        '2025-12'
    """
    return str(MonthToken.parse(token).add(months))


def month_diff(a: Union[str, MonthToken], b: Union[str, MonthToken]) -> int:
    """Months from ``a`` to ``b``: ``(year(b)-year(a))*12 + (month(b)-month(a))``."""
    return MonthToken.parse(a).diff(b)


def month_options(start_year: int = DEFAULT_OPTIONS_YEAR) -> list[str]:
    """January through December of ``start_year``, in order.

    Only one calendar year is enumerated.
    """
    return [str(MonthToken(start_year, m)) for m in range(1, 13)]


def normalize_month(value: Union[str, MonthToken]) -> str:
    """Parse and re-serialize a token, rejecting malformed input."""
    return str(MonthToken.parse(value))


__all__ = [
    "MonthToken",
    "month_add",
    "month_diff",
    "month_options",
    "normalize_month",
]

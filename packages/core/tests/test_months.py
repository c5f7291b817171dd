"""Tests for month-token arithmetic."""

import pytest

from cashflow_core.exceptions import ValidationError
from cashflow_core.months import (
    MonthToken,
    month_add,
    month_diff,
    month_options,
    normalize_month,
)


class TestMonthToken:
    """Tests for MonthToken parsing and ordering."""

    def test_parse(self):
        token = MonthToken.parse("2026-03")
        assert token == MonthToken(2026, 3)
        assert str(token) == "2026-03"

    def test_parse_accepts_token(self):
        token = MonthToken(2026, 3)
        assert MonthToken.parse(token) is token

    @pytest.mark.parametrize("raw", ["2026-13", "2026-00", "2026-1", "26-01", "", "2026/01", "abcd-ef"])
    def test_parse_rejects_malformed(self, raw):
        """Malformed tokens raise rather than degrade."""
        with pytest.raises(ValidationError) as exc_info:
            MonthToken.parse(raw)
        assert exc_info.value.field == "month"

    def test_month_out_of_range(self):
        with pytest.raises(ValidationError):
            MonthToken(2026, 0)

    def test_ordering(self):
        assert MonthToken(2025, 12) < MonthToken(2026, 1) < MonthToken(2026, 2)
        assert sorted([MonthToken(2026, 6), MonthToken(2026, 4)]) == [
            MonthToken(2026, 4),
            MonthToken(2026, 6),
        ]


class TestMonthArithmetic:
    """Tests for month_add and month_diff."""

    @pytest.mark.parametrize(
        "token,delta,expected",
        [
            ("2026-01", 1, "2026-02"),
            ("2026-12", 1, "2027-01"),
            ("2026-01", -1, "2025-12"),
            ("2026-05", 24, "2028-05"),
            ("2026-05", 0, "2026-05"),
        ],
    )
    def test_month_add(self, token, delta, expected):
        assert month_add(token, delta) == expected

    def test_month_diff_is_signed(self):
        assert month_diff("2026-01", "2026-06") == 5
        assert month_diff("2026-06", "2026-01") == -5

    def test_month_diff_across_year(self):
        assert month_diff("2025-11", "2026-02") == 3

    def test_add_then_diff(self):
        assert month_diff("2026-04", month_add("2026-04", 17)) == 17


class TestMonthOptions:
    """Tests for month_options and normalize_month."""

    def test_one_calendar_year(self):
        options = month_options(2026)
        assert len(options) == 12
        assert options[0] == "2026-01"
        assert options[-1] == "2026-12"

    def test_default_year(self):
        assert month_options()[0] == "2026-01"

    def test_normalize_month_strips_whitespace(self):
        assert normalize_month(" 2026-02 ") == "2026-02"

    def test_normalize_month_rejects_garbage(self):
        with pytest.raises(ValidationError):
            normalize_month("next month")

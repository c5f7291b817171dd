"""Tests for the monthly cash-flow allocation and needs funding."""

from decimal import Decimal

import pytest

from cashflow_core import CashFlowCalculator, CashFlowInputs, GivingMode, Need, fund_needs
from cashflow_core.allocation import giving_amount, is_in_window
from cashflow_core.models import NeedStatus, default_state


@pytest.fixture
def household_inputs() -> CashFlowInputs:
    """The starting inputs of a first-time user."""
    return default_state().cashflow


@pytest.fixture
def funding_inputs() -> CashFlowInputs:
    """A 4000 needs pool against gaps of 3000 (due sooner) and 5000 (due later)."""
    return CashFlowInputs(
        business_inflow="4000",
        w2_or_other_inflow="0",
        giving_percent="0",
        lifestyle_monthly_amount="0",
        needs=[
            Need(id="later", name="Roof", target_amount="5000", due_month="2026-05"),
            Need(id="sooner", name="Property tax", target_amount="3000", due_month="2026-03"),
        ],
    )


class TestGiving:
    """Tests for the giving transfer."""

    def test_percent_of_inflow(self, household_inputs: CashFlowInputs):
        assert giving_amount(household_inputs, Decimal("100000")) == Decimal("10000")

    def test_fixed_dollar_is_capped_at_inflow(self):
        """A fixed gift never exceeds what came in."""
        inputs = CashFlowInputs(
            business_inflow="5000",
            giving_mode=GivingMode.FIXED_DOLLAR,
            giving_dollar_amount="8000",
        )
        result = CashFlowCalculator().calculate(inputs, "2026-01")

        assert result.giving_transfer_amount == Decimal("5000")

    def test_fixed_dollar_below_inflow(self):
        inputs = CashFlowInputs(
            business_inflow="5000",
            giving_mode=GivingMode.FIXED_DOLLAR,
            giving_dollar_amount="1,000",
        )
        assert giving_amount(inputs, Decimal("5000")) == Decimal("1000")

    def test_percent_is_clamped(self):
        inputs = CashFlowInputs(business_inflow="2000", giving_percent="150")
        result = CashFlowCalculator().calculate(inputs, "2026-01")

        assert result.giving_transfer_amount == Decimal("2000")


class TestCashFlowCalculator:
    """Test suite for CashFlowCalculator."""

    def test_default_household(self, household_inputs: CashFlowInputs):
        """Inflow is split into giving, lifestyle, needs, then excess."""
        result = CashFlowCalculator().calculate(household_inputs, "2026-01")

        assert result.month == "2026-01"
        assert result.total_inflow == Decimal("100000")
        assert result.giving_transfer_amount == Decimal("10000")
        assert result.lifestyle_transfer_amount == Decimal("20000")
        assert result.emergency_minimum_balance == Decimal("20000")
        assert result.lifestyle_target_balance == Decimal("40000")
        assert result.available_after_required == Decimal("70000")
        assert result.remaining_needs_in_window == Decimal("20000")
        assert result.allocated_to_needs_this_month == Decimal("20000")
        assert result.excess == Decimal("50000")
        assert result.in_window_need_ids == ["1", "2"]
        assert result.has_deficit is False

    def test_allocation_identity(self, household_inputs: CashFlowInputs):
        result = CashFlowCalculator().calculate(household_inputs, "2026-01")

        assert result.total_inflow == (
            result.giving_transfer_amount
            + result.lifestyle_transfer_amount
            + result.allocated_to_needs_this_month
            + result.excess
        )

    def test_needs_pool_limited_by_available(self, funding_inputs: CashFlowInputs):
        result = CashFlowCalculator().calculate(funding_inputs, "2026-01")

        assert result.remaining_needs_in_window == Decimal("8000")
        assert result.allocated_to_needs_this_month == Decimal("4000")
        assert result.excess == Decimal("0")

    def test_deficit(self):
        """Required outflows above inflow leave a negative excess and no needs pool."""
        inputs = CashFlowInputs(
            business_inflow="1000",
            lifestyle_monthly_amount="5000",
            needs=[Need(target_amount="3000", due_month="2026-02")],
        )
        result = CashFlowCalculator().calculate(inputs, "2026-01")

        assert result.available_after_required == Decimal("-4000")
        assert result.allocated_to_needs_this_month == Decimal("0")
        assert result.excess == Decimal("-4000")
        assert result.has_deficit is True
        assert any("deficit" in w for w in result.warnings)

    def test_zero_inflow_warning(self):
        result = CashFlowCalculator().calculate(CashFlowInputs(), "2026-01")

        assert result.total_inflow == Decimal("0")
        assert any("No inflow" in w for w in result.warnings)

    def test_calculation_does_not_mutate_inputs(self, household_inputs: CashFlowInputs):
        before = household_inputs.model_dump()
        CashFlowCalculator().calculate(household_inputs, "2026-01")

        assert household_inputs.model_dump() == before

    def test_later_month_narrows_window(self, household_inputs: CashFlowInputs):
        """Once the taxes fall due in the past they leave the window."""
        result = CashFlowCalculator().calculate(household_inputs, "2026-05")

        assert result.in_window_need_ids == ["2"]
        assert result.remaining_needs_in_window == Decimal("8000")


class TestNeedsWindow:
    """Tests for is_in_window."""

    @pytest.mark.parametrize(
        "due_month,expected",
        [
            ("2026-01", True),
            ("2026-06", True),
            ("2026-07", False),
            ("2025-12", False),
        ],
    )
    def test_window_bounds(self, due_month, expected):
        need = Need(target_amount="100", due_month=due_month)
        assert is_in_window(need, "2026-01") is expected

    def test_paid_need_is_outside(self):
        need = Need(target_amount="100", due_month="2026-02", status=NeedStatus.PAID)
        assert is_in_window(need, "2026-01") is False


class TestFundNeeds:
    """Tests for the greedy earliest-due-first funding action."""

    def test_earliest_due_first(self, funding_inputs: CashFlowInputs):
        """The sooner gap fills completely before the later one gets the rest."""
        result = fund_needs(funding_inputs, "2026-01")

        assert funding_inputs.get_need("sooner").funded_amount == Decimal("3000")
        assert funding_inputs.get_need("later").funded_amount == Decimal("1000")
        assert result.pool_start == Decimal("4000")
        assert result.pool_remaining == Decimal("0")
        assert result.total_allocated == Decimal("4000")
        assert [a.need_id for a in result.allocations] == ["sooner", "later"]

    def test_explicit_pool(self, funding_inputs: CashFlowInputs):
        result = fund_needs(funding_inputs, "2026-01", pool=Decimal("2000"))

        assert funding_inputs.get_need("sooner").funded_amount == Decimal("2000")
        assert funding_inputs.get_need("later").funded_amount == Decimal("0")
        assert result.pool_remaining == Decimal("0")

    def test_pool_larger_than_gaps(self, funding_inputs: CashFlowInputs):
        result = fund_needs(funding_inputs, "2026-01", pool=Decimal("10000"))

        assert result.total_allocated == Decimal("8000")
        assert result.pool_remaining == Decimal("2000")
        assert all(n.remaining == Decimal("0") for n in funding_inputs.needs)

    def test_out_of_window_needs_get_nothing(self):
        inputs = CashFlowInputs(
            needs=[
                Need(id="far", target_amount="5000", due_month="2026-08"),
                Need(id="past", target_amount="5000", due_month="2025-12"),
            ]
        )
        calc = CashFlowCalculator().calculate(inputs, "2026-01")
        result = fund_needs(inputs, "2026-01", pool=Decimal("10000"))

        assert calc.remaining_needs_in_window == Decimal("0")
        assert result.allocations == []
        assert result.pool_remaining == Decimal("10000")
        assert all(n.funded_amount == Decimal("0") for n in inputs.needs)

    def test_repeat_funding_only_fills_remaining_gap(self, funding_inputs: CashFlowInputs):
        fund_needs(funding_inputs, "2026-01")
        second = fund_needs(funding_inputs, "2026-01")

        assert second.pool_start == Decimal("4000")
        assert funding_inputs.get_need("later").funded_amount == Decimal("5000")
        assert second.total_allocated == Decimal("4000")

    def test_negative_pool_allocates_nothing(self, funding_inputs: CashFlowInputs):
        result = fund_needs(funding_inputs, "2026-01", pool=Decimal("-50"))

        assert result.pool_start == Decimal("0")
        assert result.allocations == []


class TestNeedLifecycle:
    """Paid and reopened needs in the allocation totals."""

    def test_paid_need_keeps_history(self, funding_inputs: CashFlowInputs):
        fund_needs(funding_inputs, "2026-01")
        funding_inputs.mark_paid("sooner", "2026-03")
        result = CashFlowCalculator().calculate(funding_inputs, "2026-01")

        assert [n.id for n in funding_inputs.active_needs] == ["later"]
        assert result.total_reserved_for_open_needs == Decimal("1000")
        assert result.total_paid_historical == Decimal("3000")
        assert "sooner" not in result.in_window_need_ids
        assert funding_inputs.get_need("sooner").paid_month == "2026-03"

    def test_reopen_restores_open_totals(self, funding_inputs: CashFlowInputs):
        fund_needs(funding_inputs, "2026-01")
        funding_inputs.mark_paid("sooner", "2026-03")
        funding_inputs.reopen_need("sooner")
        result = CashFlowCalculator().calculate(funding_inputs, "2026-01")

        need = funding_inputs.get_need("sooner")
        assert need.status == NeedStatus.OPEN
        assert need.paid_month is None
        assert need.funded_amount == Decimal("3000")
        assert result.total_reserved_for_open_needs == Decimal("4000")
        assert result.total_paid_historical == Decimal("0")

"""Tests for transfer completion tracking."""

import pytest

from cashflow_core.exceptions import ValidationError
from cashflow_core.models import (
    CashFlowStep,
    ToolName,
    TransferCompletionState,
    WorkingCapitalStep,
    steps_for,
)


@pytest.fixture
def completion() -> TransferCompletionState:
    return TransferCompletionState()


class TestStepKeys:
    """Each tool has a fixed set of step keys."""

    def test_working_capital_steps(self):
        assert steps_for(ToolName.WORKING_CAPITAL) == ("move_to_reserve", "move_to_family_office")

    def test_cashflow_steps(self):
        assert steps_for("cashflow") == ("giving", "lifestyle", "needs_reserve", "wealth")


class TestTransferCompletionState:
    """Test suite for TransferCompletionState."""

    def test_defaults_to_not_done(self, completion: TransferCompletionState):
        assert completion.is_done("2026-01", ToolName.CASHFLOW, CashFlowStep.GIVING) is False

    def test_set_done(self, completion: TransferCompletionState):
        completion.set_done("2026-01", ToolName.CASHFLOW, CashFlowStep.GIVING)

        assert completion.is_done("2026-01", ToolName.CASHFLOW, "giving") is True
        assert completion.count_done("2026-01", ToolName.CASHFLOW) == 1

    def test_months_are_independent(self, completion: TransferCompletionState):
        """Flags for one month never show up in another."""
        completion.set_done("2026-01", ToolName.CASHFLOW, CashFlowStep.WEALTH)

        assert completion.is_done("2026-02", ToolName.CASHFLOW, CashFlowStep.WEALTH) is False
        assert completion.count_done("2026-02", ToolName.CASHFLOW) == 0

    def test_tools_are_independent(self, completion: TransferCompletionState):
        completion.mark_all("2026-01", ToolName.CASHFLOW)

        assert completion.is_complete("2026-01", ToolName.CASHFLOW) is True
        assert completion.count_done("2026-01", ToolName.WORKING_CAPITAL) == 0

    def test_toggle(self, completion: TransferCompletionState):
        month, tool = "2026-01", ToolName.WORKING_CAPITAL

        assert completion.toggle(month, tool, WorkingCapitalStep.MOVE_TO_RESERVE) is True
        assert completion.toggle(month, tool, WorkingCapitalStep.MOVE_TO_RESERVE) is False
        assert completion.is_done(month, tool, WorkingCapitalStep.MOVE_TO_RESERVE) is False

    def test_mark_all_counts_every_step(self, completion: TransferCompletionState):
        completion.mark_all("2026-03", ToolName.CASHFLOW)

        assert completion.count_done("2026-03", ToolName.CASHFLOW) == 4
        assert all(completion.for_month("2026-03", ToolName.CASHFLOW).values())

    def test_clear(self, completion: TransferCompletionState):
        completion.mark_all("2026-03", ToolName.WORKING_CAPITAL)
        completion.clear("2026-03", ToolName.WORKING_CAPITAL)

        assert completion.count_done("2026-03", ToolName.WORKING_CAPITAL) == 0

    def test_for_month_lists_every_key_in_order(self, completion: TransferCompletionState):
        completion.set_done("2026-01", ToolName.CASHFLOW, CashFlowStep.NEEDS_RESERVE)

        assert completion.for_month("2026-01", ToolName.CASHFLOW) == {
            "giving": False,
            "lifestyle": False,
            "needs_reserve": True,
            "wealth": False,
        }

    def test_unknown_step_is_rejected(self, completion: TransferCompletionState):
        """A working-capital step cannot be recorded against the cash-flow tool."""
        with pytest.raises(ValidationError) as exc_info:
            completion.set_done("2026-01", ToolName.CASHFLOW, WorkingCapitalStep.MOVE_TO_RESERVE)
        assert exc_info.value.field == "step"

    def test_malformed_month_is_rejected(self, completion: TransferCompletionState):
        with pytest.raises(ValidationError):
            completion.set_done("January", ToolName.CASHFLOW, CashFlowStep.GIVING)


class TestCompletionLoading:
    """Stored flags are cleaned on load."""

    def test_unknown_keys_are_dropped(self):
        completion = TransferCompletionState.model_validate(
            {
                "2026-01": {
                    "cashflow": {"giving": True, "bogus": True},
                    "retired_tool": {"x": True},
                },
                "not-a-month": {"cashflow": {"giving": True}},
            }
        )

        assert completion.for_month("2026-01", ToolName.CASHFLOW)["giving"] is True
        assert completion.count_done("2026-01", ToolName.CASHFLOW) == 1
        assert completion.model_dump(mode="json") == {"2026-01": {"cashflow": {"giving": True}}}

    def test_json_shape(self):
        completion = TransferCompletionState()
        completion.set_done("2026-02", ToolName.WORKING_CAPITAL, WorkingCapitalStep.MOVE_TO_FAMILY_OFFICE)

        assert completion.model_dump(mode="json") == {
            "2026-02": {"working_capital": {"move_to_family_office": True}}
        }

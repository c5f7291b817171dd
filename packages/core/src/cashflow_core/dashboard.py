"""Whole-dashboard recompute.

Runs the working-capital waterfall, caches its suggested business inflow on
the root state, then runs the cash-flow allocation and assembles both
checklists for the viewed month. Data flows one way: waterfall into
cash flow, never back.
"""

from decimal import Decimal

import structlog
from pydantic import BaseModel, Field

from .allocation import CashFlowCalculator
from .instructions import (
    action_plan_steps,
    build_cashflow_transfers,
    build_checklist,
    build_working_capital_transfers,
)
from .models import (
    AllocationState,
    CashFlowInputs,
    CashFlowResult,
    ChecklistItem,
    ToolName,
    WorkingCapitalResult,
)
from .working_capital import WorkingCapitalCalculator

logger = structlog.get_logger()


class DashboardSnapshot(BaseModel):
    """Everything derived from one AllocationState for the viewed month."""

    month: str
    working_capital: WorkingCapitalResult
    cashflow: CashFlowResult
    business_inflow_used: Decimal
    business_inflow_is_suggested: bool
    working_capital_checklist: list[ChecklistItem] = Field(default_factory=list)
    cashflow_checklist: list[ChecklistItem] = Field(default_factory=list)
    action_plan: list[str] = Field(default_factory=list)
    needs_attention: list[str] = Field(default_factory=list)


def effective_cashflow_inputs(state: AllocationState) -> CashFlowInputs:
    """Cash-flow inputs with the suggested business inflow filled in.

    A business inflow typed by the user always wins; the cached suggestion
    only stands in while that field is unset.
    """
    if state.cashflow.business_inflow is not None:
        return state.cashflow
    return state.cashflow.model_copy(update={"business_inflow": state.suggested_business_inflow})


def build_dashboard(state: AllocationState) -> DashboardSnapshot:
    """Recompute both tools for ``state.current_month``.

    Side effect: ``state.suggested_business_inflow`` is refreshed from the
    waterfall so it can be persisted and handed to the cash-flow tool.
    """
    month = state.current_month

    wc_result = WorkingCapitalCalculator().calculate(state.working_capital)
    state.set_suggested_business_inflow(wc_result.suggested_business_inflow)

    cf_inputs = effective_cashflow_inputs(state)
    cf_result = CashFlowCalculator().calculate(cf_inputs, month)

    wc_checklist = build_checklist(
        build_working_capital_transfers(wc_result, state.accounts),
        state.transfer_done,
        month,
        ToolName.WORKING_CAPITAL,
    )
    cf_checklist = build_checklist(
        build_cashflow_transfers(cf_result, state.accounts),
        state.transfer_done,
        month,
        ToolName.CASHFLOW,
    )

    needs_attention = [f"working_capital.{name}" for name in state.working_capital.unset_fields()]
    needs_attention += [f"cashflow.{name}" for name in state.cashflow.unset_fields()]

    logger.debug(
        "dashboard_recomputed",
        month=month,
        suggested_business_inflow=str(wc_result.suggested_business_inflow),
        excess=str(cf_result.excess),
    )

    return DashboardSnapshot(
        month=month,
        working_capital=wc_result,
        cashflow=cf_result,
        business_inflow_used=cf_inputs.business_inflow,
        business_inflow_is_suggested=state.cashflow.business_inflow is None,
        working_capital_checklist=wc_checklist,
        cashflow_checklist=cf_checklist,
        action_plan=action_plan_steps(cf_result, state.accounts),
        needs_attention=needs_attention,
    )


__all__ = ["DashboardSnapshot", "effective_cashflow_inputs", "build_dashboard"]

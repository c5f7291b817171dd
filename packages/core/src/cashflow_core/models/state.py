"""The root allocation document owned by one user session."""

from decimal import Decimal

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..months import month_add
from ..normalization import ZERO
from .completion import ToolName, TransferCompletionState
from .inputs import (
    CamelModel,
    CashFlowInputs,
    LinkedAccounts,
    MonthText,
    Need,
    RequiredMoney,
    WorkingCapitalInputs,
)

DEFAULT_MONTH = "2026-01"


class AllocationState(CamelModel):
    """Everything the dashboard persists for one user.

    Unknown top-level keys are kept (``extra="allow"``) so documents written
    by a newer schema survive a load/save cycle.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="allow",
    )

    current_month: MonthText = Field(default=DEFAULT_MONTH, alias="month")
    active_tool: ToolName = ToolName.CASHFLOW
    suggested_business_inflow: RequiredMoney = Field(default=ZERO, alias="suggestedBusinessIn")
    transfer_done: TransferCompletionState = Field(default_factory=TransferCompletionState)
    working_capital: WorkingCapitalInputs = Field(default_factory=WorkingCapitalInputs)
    cashflow: CashFlowInputs = Field(default_factory=CashFlowInputs)
    accounts: LinkedAccounts = Field(default_factory=LinkedAccounts)

    def advance_month(self) -> str:
        """Roll the viewed month forward by one and return it."""
        self.current_month = month_add(self.current_month, 1)
        return self.current_month

    def set_suggested_business_inflow(self, amount: Decimal) -> None:
        """Cache the waterfall's Family Office transfer for the cash-flow tool."""
        self.suggested_business_inflow = amount

    def apply_suggested_business_inflow(self) -> Decimal:
        """Copy the cached suggestion into the cash-flow business inflow.

        The cash-flow tool otherwise keeps whatever business inflow the user
        typed; this is the only path from the waterfall into it.
        """
        self.cashflow.business_inflow = self.suggested_business_inflow
        return self.suggested_business_inflow

    def to_document(self) -> dict:
        """JSON-ready document in the persisted camelCase shape."""
        return self.model_dump(mode="json", by_alias=True)


def default_state() -> AllocationState:
    """Starting state for a first-time user."""
    return AllocationState(
        current_month=DEFAULT_MONTH,
        cashflow=CashFlowInputs(
            business_inflow="90000",
            w2_or_other_inflow="10000",
            giving_percent="10",
            giving_dollar_amount="1000",
            lifestyle_monthly_amount="20000",
            needs=[
                Need(id="1", name="Taxes", target_amount="12000", due_month="2026-04"),
                Need(id="2", name="Trip", target_amount="8000", due_month="2026-06"),
            ],
        ),
    )


__all__ = ["DEFAULT_MONTH", "AllocationState", "default_state"]

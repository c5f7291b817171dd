"""Cash Flow Foundation Core - monthly cash-waterfall allocation."""

__version__ = "0.1.0"

from .allocation import CashFlowCalculator, fund_needs, is_in_window
from .dashboard import DashboardSnapshot, build_dashboard
from .instructions import (
    build_cashflow_transfers,
    build_checklist,
    build_working_capital_transfers,
    render_instructions_text,
)
from .models import (
    AllocationState,
    CashFlowInputs,
    CashFlowResult,
    FundingResult,
    GivingMode,
    Need,
    NeedStatus,
    ToolName,
    TransferCompletionState,
    TransferInstruction,
    WorkingCapitalInputs,
    WorkingCapitalResult,
    default_state,
)
from .months import MonthToken, month_add, month_diff, month_options
from .normalization import clamp_percent, format_currency, normalize_money_text
from .working_capital import WorkingCapitalCalculator

__all__ = [
    # Calculators
    "WorkingCapitalCalculator",
    "CashFlowCalculator",
    "fund_needs",
    "is_in_window",
    "build_dashboard",
    "DashboardSnapshot",
    # Instructions
    "build_cashflow_transfers",
    "build_working_capital_transfers",
    "build_checklist",
    "render_instructions_text",
    # Models
    "AllocationState",
    "default_state",
    "WorkingCapitalInputs",
    "WorkingCapitalResult",
    "CashFlowInputs",
    "CashFlowResult",
    "FundingResult",
    "GivingMode",
    "Need",
    "NeedStatus",
    "ToolName",
    "TransferCompletionState",
    "TransferInstruction",
    # Helpers
    "MonthToken",
    "month_add",
    "month_diff",
    "month_options",
    "normalize_money_text",
    "clamp_percent",
    "format_currency",
]

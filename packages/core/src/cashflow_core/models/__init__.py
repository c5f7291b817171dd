"""Data models for cashflow-core.

This package provides:
- User inputs for both tools and the needs ledger (inputs.py)
- Transfer completion tracking per month/tool/step (completion.py)
- Calculation results and transfer instructions (results.py)
- The persisted root document (state.py)
"""

from cashflow_core.models.inputs import (
    # Field types
    MoneyAmount,
    RequiredMoney,
    PercentRate,
    DayCount,
    MonthText,
    # Enumerations
    GivingMode,
    NeedStatus,
    # Inputs
    WorkingCapitalInputs,
    Need,
    CashFlowInputs,
    # Accounts
    LinkedAccount,
    LinkedAccounts,
)

from cashflow_core.models.completion import (
    ToolName,
    WorkingCapitalStep,
    CashFlowStep,
    TOOL_STEPS,
    steps_for,
    TransferCompletionState,
)

from cashflow_core.models.results import (
    AuditEntry,
    WorkingCapitalResult,
    CashFlowResult,
    NeedFunding,
    FundingResult,
    Emphasis,
    TransferInstruction,
    ChecklistItem,
)

from cashflow_core.models.state import (
    DEFAULT_MONTH,
    AllocationState,
    default_state,
)

__all__ = [
    # Field types
    "MoneyAmount",
    "RequiredMoney",
    "PercentRate",
    "DayCount",
    "MonthText",
    # Enumerations
    "GivingMode",
    "NeedStatus",
    "ToolName",
    "WorkingCapitalStep",
    "CashFlowStep",
    "Emphasis",
    # Inputs
    "WorkingCapitalInputs",
    "Need",
    "CashFlowInputs",
    "LinkedAccount",
    "LinkedAccounts",
    # Completion
    "TOOL_STEPS",
    "steps_for",
    "TransferCompletionState",
    # Results
    "AuditEntry",
    "WorkingCapitalResult",
    "CashFlowResult",
    "NeedFunding",
    "FundingResult",
    "TransferInstruction",
    "ChecklistItem",
    # Root document
    "DEFAULT_MONTH",
    "AllocationState",
    "default_state",
]

"""Transfer instructions and the monthly checklist.

Turns calculation results into the ordered list of manual transfers the user
executes each month, pairs them with completion flags, and renders the plan
as plain text for copying or printing.
"""

from typing import Optional

from .models import (
    CashFlowResult,
    CashFlowStep,
    ChecklistItem,
    Emphasis,
    LinkedAccounts,
    ToolName,
    TransferCompletionState,
    TransferInstruction,
    WorkingCapitalResult,
    WorkingCapitalStep,
)
from .normalization import ZERO, format_currency

NEEDS_RESERVE_DESTINATION = "(Internal) Needs reserve"


def build_cashflow_transfers(
    result: CashFlowResult,
    accounts: Optional[LinkedAccounts] = None,
) -> list[TransferInstruction]:
    """Giving, lifestyle, needs reserve, wealth creation, always in that order.

    The needs reserve is an earmark that stays in the Family Office.
    """
    accounts = accounts or LinkedAccounts()
    source = accounts.family_office.label
    excess_emphasis = Emphasis.GOOD if result.excess >= 0 else Emphasis.BAD

    rows = [
        (
            CashFlowStep.GIVING,
            accounts.giving.display_name(),
            max(ZERO, result.giving_transfer_amount),
            "Charitable giving transfer",
            Emphasis.DEFAULT,
            False,
        ),
        (
            CashFlowStep.LIFESTYLE,
            accounts.lifestyle.display_name(),
            result.lifestyle_transfer_amount,
            "Lifestyle monthly funding",
            Emphasis.DEFAULT,
            False,
        ),
        (
            CashFlowStep.NEEDS_RESERVE,
            NEEDS_RESERVE_DESTINATION,
            result.allocated_to_needs_this_month,
            f"Earmark for upcoming needs (stays in {source})",
            Emphasis.DEFAULT,
            True,
        ),
        (
            CashFlowStep.WEALTH,
            accounts.wealth.display_name(masked_always=False),
            result.excess,
            "Excess cash to wealth creation",
            excess_emphasis,
            False,
        ),
    ]
    return [
        TransferInstruction(
            step=i,
            step_key=key.value,
            source=source,
            destination=destination,
            amount=amount,
            purpose=purpose,
            emphasis=emphasis,
            internal=internal,
        )
        for i, (key, destination, amount, purpose, emphasis, internal) in enumerate(rows, start=1)
    ]


def build_working_capital_transfers(
    result: WorkingCapitalResult,
    accounts: Optional[LinkedAccounts] = None,
) -> list[TransferInstruction]:
    """Reserve top-up first, then the surplus to the Family Office."""
    accounts = accounts or LinkedAccounts()
    source = accounts.business_checking.display_name(masked_always=False)

    if result.business_below_buffer:
        onward_emphasis = Emphasis.BAD
    elif result.move_to_family_office > 0:
        onward_emphasis = Emphasis.GOOD
    else:
        onward_emphasis = Emphasis.DEFAULT

    return [
        TransferInstruction(
            step=1,
            step_key=WorkingCapitalStep.MOVE_TO_RESERVE.value,
            source=source,
            destination=accounts.reserve.display_name(masked_always=False),
            amount=result.move_to_reserve,
            purpose="Top up personal reserve toward its goal",
        ),
        TransferInstruction(
            step=2,
            step_key=WorkingCapitalStep.MOVE_TO_FAMILY_OFFICE.value,
            source=source,
            destination=accounts.family_office.display_name(),
            amount=result.move_to_family_office,
            purpose="Surplus above business buffer and reserve",
            emphasis=onward_emphasis,
        ),
    ]


def build_checklist(
    instructions: list[TransferInstruction],
    completion: TransferCompletionState,
    month: str,
    tool: ToolName,
) -> list[ChecklistItem]:
    """Pair each instruction with its done flag for ``month``."""
    flags = completion.for_month(month, tool)
    return [
        ChecklistItem(instruction=instruction, done=flags.get(instruction.step_key, False))
        for instruction in instructions
    ]


def action_plan_steps(
    result: CashFlowResult,
    accounts: Optional[LinkedAccounts] = None,
) -> list[str]:
    """The human-readable monthly action plan."""
    accounts = accounts or LinkedAccounts()
    to_giving = accounts.giving.display_name()
    to_lifestyle = accounts.lifestyle.display_name()
    to_wealth = accounts.wealth.display_name(masked_always=False)

    return [
        f"Confirm this month’s inflow: {format_currency(result.total_inflow)} (Business + W-2/Other).",
        f"Transfer giving: {format_currency(max(ZERO, result.giving_transfer_amount))} → {to_giving}.",
        (
            f"Transfer lifestyle: {format_currency(result.lifestyle_transfer_amount)} → {to_lifestyle} "
            f"(target 2× spend buffer: {format_currency(result.lifestyle_target_balance)})."
        ),
        (
            f"Fund upcoming needs: allocate {format_currency(result.allocated_to_needs_this_month)} "
            "across next-6-month items."
        ),
        f"Transfer excess: {format_currency(result.excess)} → {to_wealth}.",
        "Proof of completion: keep screenshots of transfers + bank balances.",
    ]


def render_instructions_text(
    result: CashFlowResult,
    accounts: Optional[LinkedAccounts] = None,
    title: str = "CASH FLOW FOUNDATION",
) -> str:
    """Plain-text action plan and transfer table for copy or print."""
    accounts = accounts or LinkedAccounts()
    lines = [
        f"{title} — {result.month}",
        "",
        f"FROM: {accounts.family_office.display_name()}",
        "",
        "THIS MONTH ACTION PLAN",
    ]
    lines.extend(f"{i}. {step}" for i, step in enumerate(action_plan_steps(result, accounts), start=1))
    lines.extend(["", "MONTHLY TRANSFER INSTRUCTIONS"])
    for t in build_cashflow_transfers(result, accounts):
        lines.append(
            f"- From {t.source} → To {t.destination} | Amount {format_currency(t.amount)} | {t.purpose}"
        )
    return "\n".join(lines)


__all__ = [
    "NEEDS_RESERVE_DESTINATION",
    "build_cashflow_transfers",
    "build_working_capital_transfers",
    "build_checklist",
    "action_plan_steps",
    "render_instructions_text",
]

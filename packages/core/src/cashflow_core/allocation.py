"""Monthly cash-flow allocation.

All cash lands in the Family Office first. From there the month's inflow is
split in a fixed order: giving, lifestyle, upcoming needs (within a six-month
window), and finally the excess for wealth creation.

Needs funding is a separate, user-triggered action: it walks the needs in
due-date order and greedily fills each gap from this month's pool.
"""

from decimal import Decimal
from typing import Optional

import structlog

from .models import (
    AuditEntry,
    CashFlowInputs,
    CashFlowResult,
    FundingResult,
    GivingMode,
    Need,
    NeedFunding,
    NeedStatus,
)
from .months import MonthToken
from .normalization import HUNDRED, ZERO, money_or_zero

logger = structlog.get_logger()

NEEDS_WINDOW_MONTHS = 6
EMERGENCY_MINIMUM_MULTIPLIER = Decimal("1")
LIFESTYLE_TARGET_MULTIPLIER = Decimal("2")


def is_in_window(need: Need, current_month: str) -> bool:
    """Open and due this month through five months ahead.

    Past-due open needs fall outside the window.
    """
    if need.status != NeedStatus.OPEN:
        return False
    diff = MonthToken.parse(current_month).diff(need.due_month)
    return 0 <= diff <= NEEDS_WINDOW_MONTHS - 1


def giving_amount(inputs: CashFlowInputs, total_inflow: Decimal) -> Decimal:
    """Giving transfer for the month.

    Fixed-dollar giving is capped at total inflow; percent giving is already
    bounded by the [0, 100] clamp.
    """
    if inputs.giving_mode == GivingMode.FIXED_DOLLAR:
        return min(money_or_zero(inputs.giving_dollar_amount), total_inflow)
    return money_or_zero(inputs.giving_percent) / HUNDRED * total_inflow


class CashFlowCalculator:
    """
    Calculate the month's transfers and the needs funding pool.

    The calculation is pure: it reads the inputs and never changes them.
    Use ``fund_needs`` to apply the pool to the needs ledger.
    """

    def __init__(self):
        """Initialize the calculator."""
        self._audit_log: list[AuditEntry] = []

    def _log_step(
        self,
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        entry = AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        )
        self._audit_log.append(entry)
        logger.info(
            "cashflow_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def calculate(self, inputs: CashFlowInputs, current_month: str) -> CashFlowResult:
        """
        Allocate the month's inflow.

        Args:
            inputs: Inflows, giving and lifestyle rules, and the needs ledger
            current_month: The viewed month as ``YYYY-MM``

        Returns:
            CashFlowResult with transfer amounts, window totals, and excess
        """
        self._audit_log = []
        warnings: list[str] = []

        # Step 1: Total inflow
        business = money_or_zero(inputs.business_inflow)
        w2_other = money_or_zero(inputs.w2_or_other_inflow)
        total_inflow = business + w2_other
        self._log_step(
            step="total_inflow",
            input_value=f"business={business} + w2_other={w2_other}",
            output_value=str(total_inflow),
            source="User provided",
        )

        # Step 2: Giving
        giving = giving_amount(inputs, total_inflow)
        if inputs.giving_mode == GivingMode.FIXED_DOLLAR:
            giving_input = f"min(dollar={money_or_zero(inputs.giving_dollar_amount)}, inflow={total_inflow})"
        else:
            giving_input = f"{money_or_zero(inputs.giving_percent)}% of {total_inflow}"
        self._log_step(
            step="giving_transfer",
            input_value=giving_input,
            output_value=str(giving),
            source=f"Giving rule ({inputs.giving_mode.value})",
        )

        # Step 3: Lifestyle and balance targets
        lifestyle = money_or_zero(inputs.lifestyle_monthly_amount)
        emergency_minimum = EMERGENCY_MINIMUM_MULTIPLIER * lifestyle
        lifestyle_target = LIFESTYLE_TARGET_MULTIPLIER * lifestyle
        self._log_step(
            step="lifestyle_transfer",
            input_value=f"monthly={lifestyle}",
            output_value=f"transfer={lifestyle}, emergency_min={emergency_minimum}, target={lifestyle_target}",
            source="Lifestyle rule",
        )

        # Step 4-5: Needs window
        window = [n for n in inputs.needs if is_in_window(n, current_month)]
        remaining = sum((n.remaining for n in window), ZERO)
        reserved_open = sum((n.funded_amount for n in inputs.active_needs), ZERO)
        paid_historical = sum((n.funded_amount for n in inputs.paid_needs), ZERO)
        self._log_step(
            step="needs_in_window",
            input_value=f"{len(window)} of {len(inputs.needs)} needs due within {NEEDS_WINDOW_MONTHS} months of {current_month}",
            output_value=f"remaining={remaining}",
            source="Needs ledger",
        )

        # Step 6-8: Required outflows, needs pool, excess
        available = total_inflow - giving - lifestyle
        allocated = max(ZERO, min(available, remaining))
        excess = available - allocated
        self._log_step(
            step="available_after_required",
            input_value=f"{total_inflow} - {giving} - {lifestyle}",
            output_value=str(available),
            source="Calculated",
        )
        self._log_step(
            step="allocated_to_needs",
            input_value=f"max(0, min({available}, {remaining}))",
            output_value=str(allocated),
            source="Calculated",
        )
        self._log_step(
            step="excess",
            input_value=f"{available} - {allocated}",
            output_value=str(excess),
            source="Calculated",
            notes="Wealth creation transfer",
        )

        if total_inflow == 0:
            warnings.append("No inflow entered for this month.")
        if excess < 0:
            warnings.append(
                "Giving and lifestyle exceed this month's inflow; the excess is a deficit."
            )

        return CashFlowResult(
            month=str(MonthToken.parse(current_month)),
            total_inflow=total_inflow,
            giving_transfer_amount=giving,
            lifestyle_transfer_amount=lifestyle,
            emergency_minimum_balance=emergency_minimum,
            lifestyle_target_balance=lifestyle_target,
            total_reserved_for_open_needs=reserved_open,
            total_paid_historical=paid_historical,
            remaining_needs_in_window=remaining,
            available_after_required=available,
            allocated_to_needs_this_month=allocated,
            excess=excess,
            in_window_need_ids=[n.id for n in window],
            audit_log=self._audit_log,
            warnings=warnings,
        )


def fund_needs(
    inputs: CashFlowInputs,
    current_month: str,
    pool: Optional[Decimal] = None,
) -> FundingResult:
    """Apply this month's needs pool to the ledger, earliest due first.

    Needs are visited in ascending due month (stable for ties). Each
    in-window need takes ``min(gap, pool)`` until the pool is empty; needs
    outside the window are left untouched. Funded amounts are updated in
    place.

    Args:
        inputs: Cash-flow inputs whose needs will be funded
        current_month: The viewed month as ``YYYY-MM``
        pool: Amount to distribute. Defaults to the month's
            ``allocated_to_needs_this_month``.

    Returns:
        FundingResult listing what each need received
    """
    if pool is None:
        pool = CashFlowCalculator().calculate(inputs, current_month).allocated_to_needs_this_month
    pool_start = max(ZERO, pool)
    remaining_pool = pool_start
    allocations: list[NeedFunding] = []

    ordered = sorted(inputs.needs, key=lambda n: MonthToken.parse(n.due_month))
    for need in ordered:
        if remaining_pool <= 0:
            break
        if not is_in_window(need, current_month):
            continue
        add = min(need.remaining, remaining_pool)
        if add <= 0:
            continue
        need.funded_amount = need.funded_amount + add
        remaining_pool -= add
        allocations.append(
            NeedFunding(
                need_id=need.id,
                name=need.name,
                added=add,
                funded_after=need.funded_amount,
            )
        )
        logger.info(
            "need_funded",
            need_id=need.id,
            name=need.name,
            added=str(add),
            funded=str(need.funded_amount),
            pool_remaining=str(remaining_pool),
        )

    return FundingResult(
        month=str(MonthToken.parse(current_month)),
        pool_start=pool_start,
        pool_remaining=remaining_pool,
        allocations=allocations,
    )


__all__ = [
    "NEEDS_WINDOW_MONTHS",
    "EMERGENCY_MINIMUM_MULTIPLIER",
    "LIFESTYLE_TARGET_MULTIPLIER",
    "is_in_window",
    "giving_amount",
    "CashFlowCalculator",
    "fund_needs",
]

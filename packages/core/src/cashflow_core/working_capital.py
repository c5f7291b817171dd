"""Working-capital waterfall for the business side of the household.

Available business cash is applied in priority order:
1. The business keeps a buffer of ``buffer_days`` of spend.
2. Anything above that buffer tops up the personal reserve to
   ``reserve_days`` of spend.
3. Whatever is left moves on to the Family Office, where it becomes the
   suggested business inflow for the cash-flow allocation.
"""

from decimal import Decimal
from typing import Optional

import structlog

from .models import AuditEntry, WorkingCapitalInputs, WorkingCapitalResult
from .normalization import ZERO, money_or_zero, round_whole

logger = structlog.get_logger()


class WorkingCapitalCalculator:
    """
    Calculate the business buffer, reserve goal, and onward transfers.

    The business buffer is always funded first: while business checking is
    below its own goal nothing moves anywhere, whatever the reserve shortfall.

    All steps are recorded in an audit log on the result.
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
            "working_capital_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def calculate(self, inputs: WorkingCapitalInputs) -> WorkingCapitalResult:
        """
        Run the waterfall.

        Args:
            inputs: Business spend, balances, and day-count targets. Unset
                values compute as zero.

        Returns:
            WorkingCapitalResult with goals, deltas, transfers, and audit trail
        """
        self._audit_log = []
        warnings: list[str] = []

        operating = money_or_zero(inputs.operating_expenses_per_month)
        inventory = money_or_zero(inputs.inventory_cost_per_month)
        days_per_month = Decimal(inputs.days_per_month or 0)
        buffer_days = Decimal(inputs.buffer_days or 0)
        reserve_days = Decimal(inputs.reserve_days or 0)
        business_checking = money_or_zero(inputs.business_checking_balance)
        reserve_balance = money_or_zero(inputs.reserve_account_balance)

        # Step 1: Monthly spend
        monthly_spend = operating + inventory
        self._log_step(
            step="monthly_spend",
            input_value=f"operating={operating} + inventory={inventory}",
            output_value=str(monthly_spend),
            source="User provided",
        )

        # Step 2-4: Per-day spend and day-count goals
        # Goals multiply before dividing so whole-day inputs stay exact.
        if days_per_month > 0:
            per_day_spend = monthly_spend / days_per_month
            working_capital_goal = monthly_spend * buffer_days / days_per_month
            reserve_goal = monthly_spend * reserve_days / days_per_month
        else:
            per_day_spend = ZERO
            working_capital_goal = ZERO
            reserve_goal = ZERO
            if monthly_spend > 0:
                warnings.append(
                    "Days per month is not set; per-day spend and both goals computed as 0."
                )

        self._log_step(
            step="per_day_spend",
            input_value=f"{monthly_spend} / {days_per_month}",
            output_value=str(per_day_spend),
            source="Calculated",
            notes="Zero when days per month is not positive",
        )
        self._log_step(
            step="working_capital_goal",
            input_value=f"per_day={per_day_spend} x buffer_days={buffer_days}",
            output_value=str(working_capital_goal),
            source="Business buffer rule",
        )
        self._log_step(
            step="reserve_goal",
            input_value=f"per_day={per_day_spend} x reserve_days={reserve_days}",
            output_value=str(reserve_goal),
            source="Reserve rule",
        )

        # Step 5-7: Deltas and shortfall
        business_delta = business_checking - working_capital_goal
        available_from_business = max(ZERO, business_delta)
        reserve_shortfall = max(ZERO, reserve_goal - reserve_balance)
        reserve_delta = reserve_balance - reserve_goal

        self._log_step(
            step="business_delta",
            input_value=f"{business_checking} - {working_capital_goal}",
            output_value=str(business_delta),
            source="Calculated",
        )
        self._log_step(
            step="reserve_shortfall",
            input_value=f"max(0, {reserve_goal} - {reserve_balance})",
            output_value=str(reserve_shortfall),
            source="Calculated",
        )

        if business_delta < 0:
            warnings.append(
                "Business checking is below its working-capital buffer; no transfers suggested."
            )

        # Step 8-9: Waterfall the surplus, reserve first
        move_to_reserve = min(available_from_business, reserve_shortfall)
        move_to_family_office = max(ZERO, available_from_business - move_to_reserve)
        suggested = round_whole(move_to_family_office)

        self._log_step(
            step="move_to_reserve",
            input_value=f"min(available={available_from_business}, shortfall={reserve_shortfall})",
            output_value=str(move_to_reserve),
            source="Waterfall",
        )
        self._log_step(
            step="move_to_family_office",
            input_value=f"max(0, {available_from_business} - {move_to_reserve})",
            output_value=str(move_to_family_office),
            source="Waterfall",
            notes=f"Suggested business inflow {suggested}",
        )

        return WorkingCapitalResult(
            monthly_spend=monthly_spend,
            per_day_spend=per_day_spend,
            working_capital_goal=working_capital_goal,
            reserve_goal=reserve_goal,
            business_delta=business_delta,
            reserve_delta=reserve_delta,
            reserve_shortfall=reserve_shortfall,
            available_from_business=available_from_business,
            move_to_reserve=move_to_reserve,
            move_to_family_office=move_to_family_office,
            suggested_business_inflow=suggested,
            audit_log=self._audit_log,
            warnings=warnings,
        )


def suggested_business_inflow(inputs: WorkingCapitalInputs) -> Decimal:
    """The waterfall's Family Office transfer, rounded to whole units."""
    return WorkingCapitalCalculator().calculate(inputs).suggested_business_inflow


__all__ = ["WorkingCapitalCalculator", "suggested_business_inflow"]

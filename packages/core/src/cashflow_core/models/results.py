"""Calculation results and transfer instructions.

Results are plain snapshots: they are re-derived from the inputs on every
recompute and are never persisted.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


class AuditEntry(BaseModel):
    """One calculation step, kept so every figure can be traced to its inputs."""

    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class WorkingCapitalResult(BaseModel):
    """Output of the working-capital waterfall."""

    monthly_spend: Decimal = Field(description="Operating expenses plus inventory cost")
    per_day_spend: Decimal = Field(description="Monthly spend divided by days per month")
    working_capital_goal: Decimal = Field(description="Business buffer target")
    reserve_goal: Decimal = Field(description="Personal reserve target")
    business_delta: Decimal = Field(description="Business checking minus its goal (signed)")
    reserve_delta: Decimal = Field(description="Reserve balance minus its goal (signed)")
    reserve_shortfall: Decimal = Field(ge=0)
    available_from_business: Decimal = Field(ge=0)
    move_to_reserve: Decimal = Field(ge=0)
    move_to_family_office: Decimal = Field(ge=0)
    suggested_business_inflow: Decimal = Field(
        ge=0,
        description="Family Office transfer rounded to whole currency units",
    )
    audit_log: list[AuditEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def business_below_buffer(self) -> bool:
        """True when business checking has not reached its own buffer."""
        return self.business_delta < 0


class CashFlowResult(BaseModel):
    """Output of the monthly cash-flow allocation for the viewed month."""

    month: str
    total_inflow: Decimal
    giving_transfer_amount: Decimal
    lifestyle_transfer_amount: Decimal
    emergency_minimum_balance: Decimal
    lifestyle_target_balance: Decimal
    total_reserved_for_open_needs: Decimal
    total_paid_historical: Decimal
    remaining_needs_in_window: Decimal = Field(ge=0)
    available_after_required: Decimal = Field(description="May be negative")
    allocated_to_needs_this_month: Decimal = Field(ge=0)
    excess: Decimal = Field(description="Negative values signal a deficit")
    in_window_need_ids: list[str] = Field(default_factory=list)
    audit_log: list[AuditEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def has_deficit(self) -> bool:
        return self.excess < 0


class NeedFunding(BaseModel):
    """How much one need received from a funding run."""

    need_id: str
    name: str
    added: Decimal = Field(ge=0)
    funded_after: Decimal


class FundingResult(BaseModel):
    """Outcome of the explicit "fund needs this month" action."""

    month: str
    pool_start: Decimal = Field(ge=0)
    pool_remaining: Decimal = Field(ge=0)
    allocations: list[NeedFunding] = Field(default_factory=list)

    @computed_field
    @property
    def total_allocated(self) -> Decimal:
        return sum((a.added for a in self.allocations), Decimal("0"))


class Emphasis(str, Enum):
    """Display hint for a transfer amount."""

    GOOD = "good"
    BAD = "bad"
    DEFAULT = "default"


class TransferInstruction(BaseModel):
    """One advisory bank transfer for the user to execute by hand."""

    step: int = Field(ge=1, description="1-based position in the checklist")
    step_key: str
    source: str
    destination: str
    amount: Decimal
    purpose: str
    emphasis: Emphasis = Emphasis.DEFAULT
    internal: bool = Field(
        default=False,
        description="Earmark inside the source account rather than an outbound transfer",
    )


class ChecklistItem(BaseModel):
    """A transfer instruction paired with its completion flag."""

    instruction: TransferInstruction
    done: bool = False


__all__ = [
    "AuditEntry",
    "WorkingCapitalResult",
    "CashFlowResult",
    "NeedFunding",
    "FundingResult",
    "Emphasis",
    "TransferInstruction",
    "ChecklistItem",
]

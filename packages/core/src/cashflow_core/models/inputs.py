"""User-entered inputs for the allocation tools.

Amounts are stored as Decimal after normalization. A value of ``None``
means the user has not filled the field in yet: it is flagged for attention
but computes as zero. Nothing here raises on bad numeric text; malformed
month tokens are the only rejected input. In JSON output amounts are
numbers, never text.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from ..exceptions import NeedNotFoundError, ValidationError
from ..months import month_add, normalize_month
from ..normalization import ZERO, clamp_percent, normalize_money_text


def _coerce_money(value: Any) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return normalize_money_text(value)


def _coerce_percent(value: Any) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return clamp_percent(value)


def _coerce_days(value: Any) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    days = normalize_money_text(value)
    return int(days.to_integral_value(rounding=ROUND_HALF_UP))


def _amount_to_json(value: Decimal) -> Union[int, float]:
    # documents carry numbers; only typed text has its sign dropped
    if value == value.to_integral_value():
        return int(value)
    return float(value)


_AS_JSON_NUMBER = PlainSerializer(
    _amount_to_json, return_type=Union[int, float], when_used="json-unless-none"
)


def _check_month(value: str) -> str:
    # pydantic only wraps ValueError into its own validation error
    try:
        return normalize_month(value)
    except ValidationError as e:
        raise ValueError(e.message) from e


MoneyAmount = Annotated[Optional[Decimal], BeforeValidator(_coerce_money), _AS_JSON_NUMBER]
"""Optional amount; text is normalized, blank means unset."""

RequiredMoney = Annotated[Decimal, BeforeValidator(normalize_money_text), _AS_JSON_NUMBER]
"""Amount that is never unset; blank and junk become 0."""

PercentRate = Annotated[Optional[Decimal], BeforeValidator(_coerce_percent), _AS_JSON_NUMBER]
"""Optional percentage clamped to [0, 100]."""

DayCount = Annotated[Optional[int], BeforeValidator(_coerce_days)]
"""Optional whole number of days."""

MonthText = Annotated[str, AfterValidator(_check_month)]
"""A ``YYYY-MM`` month token."""


class CamelModel(BaseModel):
    """Base for persisted models: camelCase keys on the wire, checked assignment."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class GivingMode(str, Enum):
    """How the giving transfer is sized."""

    PERCENT_OF_INFLOW = "percent_of_inflow"
    FIXED_DOLLAR = "fixed_dollar"


class NeedStatus(str, Enum):
    """Lifecycle status of a need."""

    OPEN = "open"
    PAID = "paid"


class WorkingCapitalInputs(CamelModel):
    """Inputs to the business working-capital waterfall."""

    operating_expenses_per_month: MoneyAmount = None
    inventory_cost_per_month: MoneyAmount = None
    days_per_month: DayCount = None
    avg_collection_days: DayCount = Field(
        default=None,
        description="Collected for reference; not used by any goal formula",
    )
    business_checking_balance: MoneyAmount = None
    reserve_account_balance: MoneyAmount = None
    buffer_days: DayCount = None
    reserve_days: DayCount = None

    def unset_fields(self) -> list[str]:
        """Names of the fields still waiting for user input."""
        return [name for name in type(self).model_fields if getattr(self, name) is None]


class Need(CamelModel):
    """A discrete future expense tracked until it is paid."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str = ""
    target_amount: RequiredMoney = ZERO
    due_month: MonthText
    funded_amount: RequiredMoney = ZERO
    status: NeedStatus = NeedStatus.OPEN
    paid_month: Optional[MonthText] = None

    @property
    def is_open(self) -> bool:
        return self.status == NeedStatus.OPEN

    @property
    def remaining(self) -> Decimal:
        """Gap still to fund, never negative."""
        return max(ZERO, self.target_amount - self.funded_amount)


NEED_EDITABLE_FIELDS = frozenset({"name", "target_amount", "due_month", "funded_amount"})


class CashFlowInputs(CamelModel):
    """Inputs to the monthly cash-flow allocation, plus the needs ledger."""

    business_inflow: MoneyAmount = None
    w2_or_other_inflow: MoneyAmount = None
    giving_mode: GivingMode = GivingMode.PERCENT_OF_INFLOW
    giving_percent: PercentRate = None
    giving_dollar_amount: MoneyAmount = None
    lifestyle_monthly_amount: MoneyAmount = None
    needs: list[Need] = Field(default_factory=list)

    @property
    def active_needs(self) -> list[Need]:
        return [n for n in self.needs if n.status == NeedStatus.OPEN]

    @property
    def paid_needs(self) -> list[Need]:
        return [n for n in self.needs if n.status == NeedStatus.PAID]

    def unset_fields(self) -> list[str]:
        """Names of the amount fields still waiting for user input."""
        return [
            name
            for name in (
                "business_inflow",
                "w2_or_other_inflow",
                "giving_percent",
                "giving_dollar_amount",
                "lifestyle_monthly_amount",
            )
            if getattr(self, name) is None
        ]

    def get_need(self, need_id: str) -> Need:
        for need in self.needs:
            if need.id == need_id:
                return need
        raise NeedNotFoundError(need_id)

    def add_need(self, current_month: str) -> Need:
        """Append a blank open need due the month after ``current_month``."""
        need = Need(due_month=month_add(current_month, 1))
        self.needs.append(need)
        return need

    def update_need(self, need_id: str, **changes: Any) -> Need:
        """Edit name, target, due month or funded amount of a need.

        Raises:
            NeedNotFoundError: If no need has ``need_id``.
            ValidationError: If a field outside the editable set is given.
        """
        need = self.get_need(need_id)
        unknown = set(changes) - NEED_EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot edit need field(s): {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
                constraint=f"One of: {', '.join(sorted(NEED_EDITABLE_FIELDS))}",
            )
        for field_name, value in changes.items():
            setattr(need, field_name, value)
        return need

    def mark_paid(self, need_id: str, paid_month: str) -> Need:
        """Archive a need as paid in ``paid_month``; funded amount is kept."""
        need = self.get_need(need_id)
        need.status = NeedStatus.PAID
        need.paid_month = paid_month
        return need

    def reopen_need(self, need_id: str) -> Need:
        """Return a paid need to the open set and clear its paid month."""
        need = self.get_need(need_id)
        need.status = NeedStatus.OPEN
        need.paid_month = None
        return need

    def remove_need(self, need_id: str) -> Need:
        """Permanently delete a need."""
        need = self.get_need(need_id)
        self.needs = [n for n in self.needs if n.id != need_id]
        return need


class LinkedAccount(CamelModel):
    """A bank account named on transfer instructions."""

    label: str
    institution: str = ""
    last4: str = ""

    @field_validator("last4", mode="before")
    @classmethod
    def keep_last_four_digits(cls, v: Any) -> str:
        """Digits only, at most four."""
        return "".join(ch for ch in str(v or "") if ch.isdigit())[:4]

    def display_name(self, *, masked_always: bool = True) -> str:
        """Label with institution and masked number, e.g. ``Giving (BoA •••• 1289)``.

        With ``masked_always=False`` the mask is omitted when no digits are set.
        """
        institution = self.institution or "—"
        if self.last4 or masked_always:
            return f"{self.label} ({institution} •••• {self.last4 or '—'})"
        return f"{self.label} ({institution})"


class LinkedAccounts(CamelModel):
    """The account roles used as transfer sources and destinations."""

    family_office: LinkedAccount = Field(
        default_factory=lambda: LinkedAccount(label="Family Office", institution="BoA", last4="3446")
    )
    giving: LinkedAccount = Field(
        default_factory=lambda: LinkedAccount(label="Giving", institution="BoA", last4="1289")
    )
    lifestyle: LinkedAccount = Field(
        default_factory=lambda: LinkedAccount(label="Lifestyle", institution="Chase", last4="7721")
    )
    wealth: LinkedAccount = Field(
        default_factory=lambda: LinkedAccount(label="Wealth Creation", institution="Fidelity")
    )
    business_checking: LinkedAccount = Field(
        default_factory=lambda: LinkedAccount(label="Business Checking")
    )
    reserve: LinkedAccount = Field(
        default_factory=lambda: LinkedAccount(label="Reserve")
    )


__all__ = [
    "MoneyAmount",
    "RequiredMoney",
    "PercentRate",
    "DayCount",
    "MonthText",
    "CamelModel",
    "GivingMode",
    "NeedStatus",
    "WorkingCapitalInputs",
    "Need",
    "NEED_EDITABLE_FIELDS",
    "CashFlowInputs",
    "LinkedAccount",
    "LinkedAccounts",
]

"""Transfer completion tracking.

Completion flags record which transfers the user has executed for a given
month and tool. They are bookkeeping only and never feed back into the
allocation math. Each tool has a fixed, enumerable set of step keys.
"""

from enum import Enum
from typing import Any, Union

import structlog
from pydantic import Field, RootModel, model_validator

from ..exceptions import ValidationError
from ..months import normalize_month

logger = structlog.get_logger()


class ToolName(str, Enum):
    """The two allocation tools of the dashboard."""

    WORKING_CAPITAL = "working_capital"
    CASHFLOW = "cashflow"


class WorkingCapitalStep(str, Enum):
    """Transfer steps produced by the working-capital waterfall."""

    MOVE_TO_RESERVE = "move_to_reserve"
    MOVE_TO_FAMILY_OFFICE = "move_to_family_office"


class CashFlowStep(str, Enum):
    """Transfer steps produced by the cash-flow allocation, in order."""

    GIVING = "giving"
    LIFESTYLE = "lifestyle"
    NEEDS_RESERVE = "needs_reserve"
    WEALTH = "wealth"


TOOL_STEPS: dict[ToolName, tuple[str, ...]] = {
    ToolName.WORKING_CAPITAL: tuple(s.value for s in WorkingCapitalStep),
    ToolName.CASHFLOW: tuple(s.value for s in CashFlowStep),
}

StepKey = Union[WorkingCapitalStep, CashFlowStep, str]


def steps_for(tool: Union[ToolName, str]) -> tuple[str, ...]:
    """The step keys a tool can mark done, in checklist order."""
    return TOOL_STEPS[ToolName(tool)]


def _step_value(tool: ToolName, step: StepKey) -> str:
    value = step.value if isinstance(step, Enum) else str(step)
    if value not in TOOL_STEPS[tool]:
        raise ValidationError(
            f"Unknown step {value!r} for tool {tool.value!r}",
            field="step",
            value=value,
            constraint=f"One of: {', '.join(TOOL_STEPS[tool])}",
        )
    return value


class TransferCompletionState(RootModel[dict[str, dict[ToolName, dict[str, bool]]]]):
    """Done flags keyed by month, then tool, then step key.

    Flags for one month never affect another month, and nothing resets them
    when the viewed month changes.
    """

    root: dict[str, dict[ToolName, dict[str, bool]]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def drop_unknown_keys(cls, data: Any) -> Any:
        """Discard malformed months, unknown tools and unknown step keys on load."""
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, dict[str, dict[str, bool]]] = {}
        for month, tools in data.items():
            try:
                month_key = normalize_month(month)
            except ValidationError:
                logger.warning("completion_month_dropped", month=str(month))
                continue
            if not isinstance(tools, dict):
                continue
            for tool, steps in tools.items():
                try:
                    tool_name = ToolName(tool)
                except ValueError:
                    logger.warning("completion_tool_dropped", month=month_key, tool=str(tool))
                    continue
                if not isinstance(steps, dict):
                    continue
                known = {
                    str(k): bool(v) for k, v in steps.items() if str(k) in TOOL_STEPS[tool_name]
                }
                cleaned.setdefault(month_key, {})[tool_name.value] = known
        return cleaned

    def _steps(self, month: str, tool: ToolName) -> dict[str, bool]:
        return self.root.setdefault(normalize_month(month), {}).setdefault(tool, {})

    def is_done(self, month: str, tool: Union[ToolName, str], step: StepKey) -> bool:
        tool = ToolName(tool)
        key = _step_value(tool, step)
        return self.root.get(normalize_month(month), {}).get(tool, {}).get(key, False)

    def set_done(
        self,
        month: str,
        tool: Union[ToolName, str],
        step: StepKey,
        done: bool = True,
    ) -> None:
        tool = ToolName(tool)
        key = _step_value(tool, step)
        self._steps(month, tool)[key] = done

    def toggle(self, month: str, tool: Union[ToolName, str], step: StepKey) -> bool:
        """Flip one flag and return its new value."""
        new_value = not self.is_done(month, tool, step)
        self.set_done(month, tool, step, new_value)
        return new_value

    def mark_all(self, month: str, tool: Union[ToolName, str]) -> None:
        """Set every step of ``tool`` done for ``month`` in one batch."""
        tool = ToolName(tool)
        steps = self._steps(month, tool)
        for key in TOOL_STEPS[tool]:
            steps[key] = True

    def clear(self, month: str, tool: Union[ToolName, str]) -> None:
        tool = ToolName(tool)
        self._steps(month, tool).clear()

    def for_month(self, month: str, tool: Union[ToolName, str]) -> dict[str, bool]:
        """Every step key of ``tool`` with its flag, in checklist order."""
        tool = ToolName(tool)
        recorded = self.root.get(normalize_month(month), {}).get(tool, {})
        return {key: recorded.get(key, False) for key in TOOL_STEPS[tool]}

    def count_done(self, month: str, tool: Union[ToolName, str]) -> int:
        return sum(self.for_month(month, tool).values())

    def is_complete(self, month: str, tool: Union[ToolName, str]) -> bool:
        return all(self.for_month(month, tool).values())


__all__ = [
    "ToolName",
    "WorkingCapitalStep",
    "CashFlowStep",
    "TOOL_STEPS",
    "StepKey",
    "steps_for",
    "TransferCompletionState",
]

"""Conversion between AllocationState and the persisted JSON document.

Loading is a shallow, field-by-field merge of the stored document over the
defaults. Missing keys keep their default and unknown keys are carried along.
A stored value that no longer validates is repaired as locally as possible:
a bad field inside a section or a need falls back to that field's default, a
need with an unusable due month is moved to the month after the document's
month, and only a section that cannot be repaired reverts as a whole. The
rest of the document is never discarded.
"""

import copy
from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from cashflow_core.exceptions import ValidationError
from cashflow_core.models import AllocationState, default_state
from cashflow_core.months import month_add, normalize_month

logger = structlog.get_logger()

_NEEDS_KEY = "needs"
_DUE_MONTH_KEY = "dueMonth"


def dump_state(state: AllocationState) -> dict[str, Any]:
    """Serialize to the camelCase document shape."""
    return state.to_document()


def _fallback_due_month(merged: dict[str, Any], base: dict[str, Any]) -> str:
    try:
        return month_add(normalize_month(merged.get("month")), 1)
    except ValidationError:
        return month_add(base["month"], 1)


def _repair_need(
    need: Any,
    field: Optional[str],
    error_type: str,
    fallback_due: str,
) -> Optional[str]:
    """Fix one bad field of a stored need in place; None means the need is unusable."""
    if not isinstance(need, dict) or field is None:
        return None
    if field == _DUE_MONTH_KEY:
        need[_DUE_MONTH_KEY] = fallback_due
        return field
    if error_type == "missing" or field not in need:
        return None
    del need[field]
    return field


def _repair_nested(
    merged: dict[str, Any],
    errors: list[dict[str, Any]],
    fallback_due: str,
) -> list[str]:
    """Repair errors below the top level of ``merged`` in place.

    Returns a description of each repair; an empty list means nothing below
    the top level could be fixed.
    """
    repaired: list[str] = []
    unusable: dict[str, set[int]] = {}

    for err in errors:
        loc = err["loc"]
        if len(loc) < 2 or not isinstance(merged.get(loc[0]), dict):
            continue
        section, key = loc[0], loc[1]
        body = merged[section]

        needs = body.get(_NEEDS_KEY)
        if key == _NEEDS_KEY and len(loc) > 2 and isinstance(needs, list):
            index = loc[2]
            if not isinstance(index, int) or index >= len(needs):
                continue
            if index in unusable.get(section, set()):
                continue
            field = loc[3] if len(loc) > 3 and isinstance(loc[3], str) else None
            fixed = _repair_need(needs[index], field, err["type"], fallback_due)
            if fixed is None:
                unusable.setdefault(section, set()).add(index)
            else:
                logger.warning(
                    "document_need_field_reset",
                    section=section,
                    index=index,
                    field=fixed,
                    error=err["msg"],
                )
                repaired.append(f"{section}.{_NEEDS_KEY}[{index}].{fixed}")
        elif isinstance(key, str) and key in body:
            logger.warning(
                "document_field_reset", field=f"{section}.{key}", error=err["msg"]
            )
            del body[key]
            repaired.append(f"{section}.{key}")

    for section, indices in unusable.items():
        needs = merged[section][_NEEDS_KEY]
        for index in sorted(indices, reverse=True):
            need = needs.pop(index)
            logger.warning(
                "document_need_dropped",
                section=section,
                index=index,
                need_id=need.get("id") if isinstance(need, dict) else None,
            )
            repaired.append(f"{section}.{_NEEDS_KEY}[{index}]")

    return repaired


def load_state(
    document: Optional[dict[str, Any]],
    defaults: Optional[AllocationState] = None,
) -> AllocationState:
    """Build state from a stored document merged over ``defaults``.

    Args:
        document: The stored document, or None for a first-time user
        defaults: State supplying every missing field. Defaults to
            ``default_state()``.

    Returns:
        A fully populated AllocationState
    """
    base = dump_state(defaults if defaults is not None else default_state())
    if not document:
        return AllocationState.model_validate(base)

    merged = copy.deepcopy({**base, **document})
    fallback_due = _fallback_due_month(merged, base)
    repaired: list[str] = []
    reverted: set[str] = set()
    while True:
        try:
            state = AllocationState.model_validate(merged)
        except PydanticValidationError as e:
            errors = [
                err
                for err in e.errors()
                if err["loc"] and err["loc"][0] in base and err["loc"][0] not in reverted
            ]
            if not errors:
                raise

            fixes = _repair_nested(merged, errors, fallback_due)
            if fixes:
                repaired.extend(fixes)
                continue

            for key in sorted({err["loc"][0] for err in errors}):
                logger.warning("document_field_reset", field=key, error_count=e.error_count())
                merged[key] = base[key]
                reverted.add(key)
            continue
        if repaired or reverted:
            logger.info(
                "document_loaded_with_defaults",
                repaired=repaired,
                fields=sorted(reverted),
            )
        return state


__all__ = ["dump_state", "load_state"]

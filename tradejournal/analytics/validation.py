"""Field validation for trades entered by the user.

Errors block a trade from being stored; warnings flag values that are
legal but unusual enough to double-check.
"""

import math
from datetime import date
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

LARGE_MOVE_PERCENT = 50.0
LARGE_PNL = 100_000.0
LARGE_RR = 20.0

NUMERIC_FIELDS = (
    "entry_price", "exit_price", "quantity", "commission", "pnl", "rr",
    "stop_loss", "target",
)


class ValidationIssue(BaseModel):
    """A problem with one trade field."""

    field: str = Field(..., description="Field name")
    message: str = Field(..., description="Human readable message")

    model_config = {"frozen": True}


def validate_trade(
    fields: Mapping[str, Any], today: Optional[date] = None
) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
    """Validate raw trade fields before a Trade is built.

    Args:
        fields: Trade field values keyed by Trade attribute name.
        today: Reference day for the future-date check. Defaults to today.

    Returns:
        Tuple of (errors, warnings).
    """
    today = today or date.today()
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    trade_date = fields.get("date")
    if trade_date is None:
        errors.append(ValidationIssue(field="date", message="Date is required"))
    elif trade_date > today:
        errors.append(ValidationIssue(field="date", message="Cannot enter trades in the future"))

    exit_date = fields.get("exit_date")
    if trade_date is not None and exit_date is not None and exit_date < trade_date:
        errors.append(
            ValidationIssue(field="exit_date", message="Exit date cannot be before the entry date")
        )

    for name in NUMERIC_FIELDS:
        value = fields.get(name)
        if value is not None and not math.isfinite(value):
            errors.append(ValidationIssue(field=name, message="Must be a finite number"))

    symbol = fields.get("symbol") or ""
    if not symbol.strip():
        errors.append(ValidationIssue(field="symbol", message="Symbol is required"))

    entry_price = fields.get("entry_price")
    if not entry_price or entry_price <= 0:
        errors.append(
            ValidationIssue(field="entry_price", message="Entry price must be greater than 0")
        )

    exit_price = fields.get("exit_price")
    if fields.get("status") == "closed" and (exit_price is None or exit_price <= 0):
        errors.append(
            ValidationIssue(field="exit_price", message="Closed trades need an exit price above 0")
        )

    direction = fields.get("direction")
    if direction in ("long", "short") and entry_price and entry_price > 0 and exit_price:
        move = (exit_price - entry_price) / entry_price * 100
        adverse = -move if direction == "long" else move
        if adverse > LARGE_MOVE_PERCENT:
            warnings.append(
                ValidationIssue(
                    field="exit_price",
                    message=f"Unusually large loss ({adverse:.1f}%) for a {direction} trade. Please verify.",
                )
            )

    pnl = fields.get("pnl")
    if pnl is not None and abs(pnl) > LARGE_PNL:
        warnings.append(
            ValidationIssue(field="pnl", message=f"Unusually large P&L ({abs(pnl):,.0f}). Please verify.")
        )

    rr = fields.get("rr")
    if rr is not None and abs(rr) > LARGE_RR:
        warnings.append(
            ValidationIssue(field="rr", message=f"Unusually high R multiple ({rr:.1f}R). Please verify.")
        )

    return errors, warnings

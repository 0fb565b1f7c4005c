"""Trade data model."""

from datetime import date as date_type
from typing import Literal, Optional
from pydantic import BaseModel, Field


class Trade(BaseModel):
    """Represents a logged trade."""

    id: str = Field(..., min_length=1, description="Stable trade identifier")
    name: Optional[str] = Field(default=None, description="Optional trade title")
    date: date_type = Field(..., description="Entry date")
    entry_time: Optional[str] = Field(
        default=None, description="Entry time (HH:MM)"
    )
    symbol: str = Field(..., min_length=1, description="Trading symbol")
    direction: Literal["long", "short"] = Field(..., description="Trade direction")
    entry_price: float = Field(..., ge=0, description="Entry price")
    exit_price: Optional[float] = Field(
        default=None, ge=0, description="Exit price (None while open)"
    )
    quantity: float = Field(default=1.0, gt=0, description="Position size")
    commission: float = Field(default=0.0, ge=0, description="Fees paid")
    pnl: float = Field(default=0.0, description="Signed realized P&L")
    rr: Optional[float] = Field(
        default=None, description="Realized R multiple (None if not recorded)"
    )
    setup: Optional[str] = Field(default=None, description="Setup label")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    notes: str = Field(default="", description="Free-text notes")
    status: Optional[Literal["open", "closed"]] = Field(
        default=None, description="Explicit status; inferred from exit_price if None"
    )
    exit_date: Optional[date_type] = Field(
        default=None, description="Date the trade was closed"
    )
    stop_loss: Optional[float] = Field(default=None, ge=0, description="Stop price")
    target: Optional[float] = Field(default=None, ge=0, description="Target price")
    screenshot_before: Optional[str] = Field(
        default=None, description="Entry screenshot URL or data URI"
    )
    screenshot_after: Optional[str] = Field(
        default=None, description="Exit screenshot URL or data URI"
    )

    model_config = {"frozen": True, "allow_inf_nan": False}

    @property
    def is_closed(self) -> bool:
        """Whether the trade counts as closed.

        An explicit status wins. Legacy records without a status are
        closed once an exit price (including 0) has been recorded.
        """
        if self.status is not None:
            return self.status == "closed"
        return self.exit_price is not None

    @property
    def is_open(self) -> bool:
        return not self.is_closed

    @property
    def close_date(self) -> date_type:
        """Day the realized P&L is attributed to."""
        return self.exit_date or self.date

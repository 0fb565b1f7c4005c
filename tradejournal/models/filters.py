"""Trade filter criteria and saved presets."""

from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


class TradeFilters(BaseModel):
    """Independently optional trade predicates.

    Multi-select dimensions match if a trade has ANY of the selected
    values; different dimensions are combined with AND.
    """

    search_query: Optional[str] = Field(
        default=None, description="Case-insensitive substring search"
    )
    date_from: Optional[date] = Field(default=None, description="Inclusive start date")
    date_to: Optional[date] = Field(default=None, description="Inclusive end date")
    symbols: list[str] = Field(default_factory=list, description="Symbols to include")
    setups: list[str] = Field(default_factory=list, description="Setups to include")
    tags: list[str] = Field(default_factory=list, description="Tags to include")
    outcome: Optional[Literal["wins", "losses", "breakeven"]] = Field(
        default=None, description="Trade outcome"
    )
    status: Optional[Literal["open", "closed", "all"]] = Field(
        default=None, description="Trade status"
    )
    direction: Optional[Literal["long", "short", "all"]] = Field(
        default=None, description="Trade direction"
    )
    pnl_min: Optional[float] = Field(default=None, description="Minimum P&L")
    pnl_max: Optional[float] = Field(default=None, description="Maximum P&L")
    rr_min: Optional[float] = Field(default=None, description="Minimum R multiple")
    rr_max: Optional[float] = Field(default=None, description="Maximum R multiple")
    rule_breaking: bool = Field(
        default=False, description="Only trades on days the system was not followed"
    )
    has_notes: bool = Field(default=False, description="Only trades with notes")
    has_tags: bool = Field(default=False, description="Only trades with tags")
    has_screenshots: bool = Field(
        default=False, description="Only trades with a screenshot"
    )

    model_config = {"frozen": True}

    def is_empty(self) -> bool:
        """Whether no predicate is active."""
        return self == TradeFilters()


class FilterPreset(BaseModel):
    """A named, saved set of filter criteria."""

    id: str = Field(..., min_length=1, description="Preset identifier")
    name: str = Field(..., min_length=1, description="Preset name")
    filters: TradeFilters = Field(..., description="Saved filters")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Creation timestamp"
    )

    model_config = {"frozen": True}

"""JournalEntry data model."""

from datetime import date as date_type
from typing import Literal
from pydantic import BaseModel, Field


class JournalEntry(BaseModel):
    """Represents a daily trading journal entry."""

    date: date_type = Field(..., description="Journal entry date")
    followed_system: bool = Field(
        default=False, description="Whether the trading plan was followed"
    )
    notes: str = Field(default="", description="Free-text reflection")
    mood: Literal["excellent", "good", "neutral", "poor", "terrible"] = Field(
        default="neutral", description="Self-reported mood"
    )
    lessons_learned: str = Field(default="", description="Lessons learned")
    market_conditions: str = Field(default="", description="Market conditions")
    did_trade: bool = Field(default=True, description="Whether any trade was taken")
    is_news_day: bool = Field(default=False, description="High-impact news day flag")

    model_config = {"frozen": True}

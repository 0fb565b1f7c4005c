"""Data models for Trade Journal."""

from tradejournal.models.trade import Trade
from tradejournal.models.journal import JournalEntry
from tradejournal.models.tags import (
    Category,
    CustomSetup,
    CustomTag,
    TagRelationships,
)
from tradejournal.models.filters import FilterPreset, TradeFilters

__all__ = [
    "Category",
    "CustomSetup",
    "CustomTag",
    "FilterPreset",
    "JournalEntry",
    "TagRelationships",
    "Trade",
    "TradeFilters",
]

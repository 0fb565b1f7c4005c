"""Multi-predicate trade filtering.

All active predicates are evaluated in a single pass over the trades.
Lookups derived from the filters (lower-cased query, selection sets, the
rule-breaking day set) are built once before the scan.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from tradejournal.models import JournalEntry, Trade, TradeFilters

logger = logging.getLogger(__name__)


def _matches_search(trade: Trade, query: str) -> bool:
    return (
        query in trade.symbol.lower()
        or (trade.setup is not None and query in trade.setup.lower())
        or query in trade.notes.lower()
        or any(query in tag.lower() for tag in trade.tags)
    )


def _rule_breaking_dates(journal_entries: Iterable[JournalEntry]) -> set[date]:
    return {entry.date for entry in journal_entries if not entry.followed_system}


def filter_trades(
    trades: Iterable[Trade],
    journal_entries: Iterable[JournalEntry],
    filters: Optional[TradeFilters] = None,
) -> list[Trade]:
    """Return the trades matching every active predicate, in input order.

    Args:
        trades: Trades to filter.
        journal_entries: Journal entries, used only by the rule-breaking
            predicate.
        filters: Filter criteria. None or an empty filter
            returns every trade.

    Returns:
        Matching trades.
    """
    trades = list(trades)
    if filters is None or filters.is_empty():
        return trades

    query = filters.search_query.lower() if filters.search_query else None
    symbols = set(filters.symbols)
    setups = set(filters.setups)
    tags = set(filters.tags)
    rule_breaking_dates = (
        _rule_breaking_dates(journal_entries) if filters.rule_breaking else None
    )
    status = filters.status if filters.status != "all" else None
    direction = filters.direction if filters.direction != "all" else None
    logger.debug(
        "Filtering %d trades with %s",
        len(trades),
        filters.model_dump(exclude_defaults=True),
    )

    def keep(trade: Trade) -> bool:
        if query and not _matches_search(trade, query):
            return False

        if filters.date_from and trade.date < filters.date_from:
            return False
        if filters.date_to and trade.date > filters.date_to:
            return False

        if symbols and trade.symbol not in symbols:
            return False
        if setups and trade.setup not in setups:
            return False
        if tags and tags.isdisjoint(trade.tags):
            return False

        if filters.outcome == "wins" and trade.pnl <= 0:
            return False
        if filters.outcome == "losses" and trade.pnl >= 0:
            return False
        if filters.outcome == "breakeven" and trade.pnl != 0:
            return False

        if status == "open" and not trade.is_open:
            return False
        if status == "closed" and not trade.is_closed:
            return False
        if direction and trade.direction != direction:
            return False

        if filters.pnl_min is not None and trade.pnl < filters.pnl_min:
            return False
        if filters.pnl_max is not None and trade.pnl > filters.pnl_max:
            return False

        # Trades without an rr never match an rr range.
        if filters.rr_min is not None and (trade.rr is None or trade.rr < filters.rr_min):
            return False
        if filters.rr_max is not None and (trade.rr is None or trade.rr > filters.rr_max):
            return False

        if rule_breaking_dates is not None and trade.date not in rule_breaking_dates:
            return False

        if filters.has_notes and not trade.notes.strip():
            return False
        if filters.has_tags and not trade.tags:
            return False
        if filters.has_screenshots and not (trade.screenshot_before or trade.screenshot_after):
            return False

        return True

    return [trade for trade in trades if keep(trade)]


def unique_symbols(trades: Iterable[Trade]) -> list[str]:
    return sorted({t.symbol for t in trades})


def unique_setups(trades: Iterable[Trade]) -> list[str]:
    return sorted({t.setup for t in trades if t.setup})


def unique_tags(trades: Iterable[Trade]) -> list[str]:
    return sorted({tag for t in trades for tag in t.tags})

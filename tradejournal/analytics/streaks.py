"""Day-level streak tracking.

Four independent streak families are tracked, each defined by a predicate
over a calendar day:

- winning days: the day's summed P&L (or R) is positive
- trading days: at least one trade was entered that day
- journal days: a journal entry exists
- system adherence: the journal entry says the system was followed

A day extends a streak only if it qualifies and is adjacent to the
previously counted day. Adjacency depends on the continuity policy.
"""

import logging
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from tradejournal.analytics.statistics import DisplayMode, closed_trades, daily_pnl
from tradejournal.models import JournalEntry, Trade

logger = logging.getLogger(__name__)


class StreakContinuity(str, Enum):
    """How gaps between recorded days are judged."""

    # Every calendar day counts; a weekend without trades breaks a streak.
    CALENDAR = "calendar"
    # Saturdays and Sundays are skipped when checking adjacency.
    BUSINESS = "business"


class StreakData(BaseModel):
    """Current and best streaks for every family."""

    current_winning_streak: int = Field(default=0, ge=0)
    best_winning_streak: int = Field(default=0, ge=0)
    current_losing_streak: int = Field(default=0, ge=0)
    longest_losing_streak: int = Field(default=0, ge=0)
    trading_days_streak: int = Field(default=0, ge=0)
    best_trading_days_streak: int = Field(default=0, ge=0)
    journal_streak: int = Field(default=0, ge=0)
    best_journal_streak: int = Field(default=0, ge=0)
    system_adherence_streak: int = Field(default=0, ge=0)
    best_system_adherence_streak: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


def is_adjacent(
    later: date,
    earlier: date,
    continuity: StreakContinuity = StreakContinuity.CALENDAR,
) -> bool:
    """Whether ``earlier`` immediately precedes ``later``.

    Under business continuity only weekend days may lie between the two,
    so Friday is adjacent to the following Saturday, Sunday and Monday.
    """
    if later <= earlier:
        return False
    gap = (later - earlier).days
    if continuity == StreakContinuity.CALENDAR:
        return gap == 1
    return all(
        (earlier + timedelta(days=offset)).weekday() >= 5 for offset in range(1, gap)
    )


def _family_streaks(
    days: dict[date, bool],
    continuity: StreakContinuity,
    as_of: Optional[date],
) -> tuple[int, int]:
    """Current and best run over recorded days mapped to whether they qualify."""
    if as_of is not None:
        days = {day: ok for day, ok in days.items() if day <= as_of}
    ordered = sorted(days.items())

    run = best = 0
    previous: Optional[date] = None
    for day, qualifies in ordered:
        if not qualifies:
            run = 0
        elif run and previous is not None and is_adjacent(day, previous, continuity):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day

    # The run still open after the last recorded day is the current streak.
    current = run
    if as_of is not None and previous is not None:
        if previous != as_of and not is_adjacent(as_of, previous, continuity):
            current = 0
    return current, best


def calculate_streaks(
    trades: Iterable[Trade],
    journal_entries: Iterable[JournalEntry],
    *,
    mode: DisplayMode = DisplayMode.PNL,
    continuity: StreakContinuity = StreakContinuity.CALENDAR,
    as_of: Optional[date] = None,
) -> StreakData:
    """Compute current and best streaks for all four families.

    Args:
        trades: Trades to scan. Winning and losing days use closed trades
            grouped by close day; trading days use entry dates of all trades.
        journal_entries: Journal entries to scan.
        mode: Judge winning days on summed P&L or summed R.
        continuity: Adjacency policy for consecutive days.
        as_of: Reference day. Records after it are ignored, and a current
            streak must reach ``as_of`` or the day adjacent before it.
            When None, current streaks end at the latest recorded day.

    Returns:
        StreakData with every family.
    """
    trades = list(trades)
    journal_entries = list(journal_entries)
    logger.debug(
        "Calculating streaks over %d trades and %d journal entries (%s, %s)",
        len(trades),
        len(journal_entries),
        mode.value,
        continuity.value,
    )

    day_totals = daily_pnl(closed_trades(trades), mode)
    winning, best_winning = _family_streaks(
        {day: total > 0 for day, total in day_totals.items()}, continuity, as_of
    )
    losing, longest_losing = _family_streaks(
        {day: total < 0 for day, total in day_totals.items()}, continuity, as_of
    )
    trading, best_trading = _family_streaks(
        {trade.date: True for trade in trades}, continuity, as_of
    )
    journal, best_journal = _family_streaks(
        {entry.date: True for entry in journal_entries}, continuity, as_of
    )
    adherence, best_adherence = _family_streaks(
        {entry.date: entry.followed_system for entry in journal_entries},
        continuity,
        as_of,
    )

    return StreakData(
        current_winning_streak=winning,
        best_winning_streak=best_winning,
        current_losing_streak=losing,
        longest_losing_streak=longest_losing,
        trading_days_streak=trading,
        best_trading_days_streak=best_trading,
        journal_streak=journal,
        best_journal_streak=best_journal,
        system_adherence_streak=adherence,
        best_system_adherence_streak=best_adherence,
    )


def distress_warning(streaks: StreakData, threshold: int = 3) -> bool:
    """Whether the current losing-day streak has reached ``threshold``."""
    return threshold > 0 and streaks.current_losing_streak >= threshold

"""Trade statistics engine.

Aggregates a trade collection into win rate, profit factor, expectancy,
drawdown and per-weekday / per-setup / per-symbol breakdowns. Every ratio
has an explicit fallback for an empty denominator, so no function in this
module raises or returns NaN for well-formed input.
"""

import logging
import math
from collections import defaultdict
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from tradejournal.models import Trade

logger = logging.getLogger(__name__)


class DisplayMode(str, Enum):
    """Whether results are measured in money or in R multiples."""

    PNL = "pnl"
    RR = "rr"


class Weekday(str, Enum):
    """Day-of-week key for performance breakdowns."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


class PerformanceBucket(BaseModel):
    """Aggregate performance for one breakdown key."""

    trades: int = Field(default=0, ge=0, description="Closed trades")
    wins: int = Field(default=0, ge=0, description="Winning trades")
    losses: int = Field(default=0, ge=0, description="Losing trades")
    pnl: float = Field(default=0.0, description="Summed P&L")
    rr: float = Field(default=0.0, description="Summed R multiple")
    win_rate: float = Field(default=0.0, ge=0, le=100, description="Win rate percentage")

    model_config = {"frozen": True}


class Statistics(BaseModel):
    """Derived performance statistics for a set of closed trades."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    open_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    total_rr: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    avg_win_rr: float = 0.0
    avg_loss_rr: float = 0.0
    avg_rr: float = 0.0
    best_rr: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    profit_factor: float = 0.0
    profit_factor_rr: float = 0.0
    expectancy: float = 0.0
    expectancy_rr: float = 0.0
    avg_daily_pnl: float = 0.0
    avg_daily_rr: float = 0.0
    best_day: float = 0.0
    worst_day: float = 0.0
    best_day_rr: float = 0.0
    worst_day_rr: float = 0.0
    current_streak: int = 0
    longest_win_streak: int = 0
    longest_lose_streak: int = 0
    max_drawdown: float = 0.0
    max_drawdown_rr: float = 0.0
    max_drawdown_duration: int = 0
    recovery_time: float = 0.0
    performance_by_day: dict[Weekday, PerformanceBucket] = Field(default_factory=dict)
    performance_by_setup: dict[str, PerformanceBucket] = Field(default_factory=dict)
    performance_by_symbol: dict[str, PerformanceBucket] = Field(default_factory=dict)

    model_config = {"frozen": True}


def is_win(trade: Trade) -> bool:
    return trade.pnl > 0


def is_loss(trade: Trade) -> bool:
    return trade.pnl < 0


def is_breakeven(trade: Trade) -> bool:
    return trade.pnl == 0


def trade_value(trade: Trade, mode: DisplayMode = DisplayMode.PNL) -> float:
    """Value of a trade in the given mode; a missing rr counts as 0."""
    if mode == DisplayMode.RR:
        return trade.rr or 0.0
    return trade.pnl


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, falling back to 0 for a zero denominator."""
    return numerator / denominator if denominator else 0.0


def profit_factor(gross_profit: float, gross_loss: float) -> float:
    """Gross profit over absolute gross loss.

    Returns ``math.inf`` when there is profit but no loss and 0 when there
    is neither.
    """
    gross_loss = abs(gross_loss)
    if gross_loss > 0:
        return gross_profit / gross_loss
    return math.inf if gross_profit > 0 else 0.0


def closed_trades(trades: Iterable[Trade]) -> list[Trade]:
    return [t for t in trades if t.is_closed]


def sort_trades(trades: Iterable[Trade]) -> list[Trade]:
    """Chronological order by close day, then entry time, then input order."""
    return sorted(trades, key=lambda t: (t.close_date, t.entry_time or ""))


def daily_pnl(
    trades: Iterable[Trade], mode: DisplayMode = DisplayMode.PNL
) -> dict[date, float]:
    """Sum trade values per close day, ascending by date."""
    totals: dict[date, float] = defaultdict(float)
    for trade in trades:
        totals[trade.close_date] += trade_value(trade, mode)
    return dict(sorted(totals.items()))


def cumulative_pnl(
    trades: Iterable[Trade], mode: DisplayMode = DisplayMode.PNL
) -> list[tuple[date, float]]:
    """Running total of daily values for closed trades."""
    curve = []
    running = 0.0
    for day, value in daily_pnl(closed_trades(trades), mode).items():
        running += value
        curve.append((day, running))
    return curve


def _max_drawdown(curve: list[tuple[date, float]]) -> tuple[float, int]:
    """Largest peak-to-trough decline and its length in days.

    The peak starts at 0 so an equity curve that opens with losses still
    registers a drawdown.
    """
    peak = 0.0
    peak_day: Optional[date] = curve[0][0] if curve else None
    max_drawdown = 0.0
    duration = 0
    for day, value in curve:
        if value > peak:
            peak = value
            peak_day = day
        drawdown = peak - value
        if drawdown > max_drawdown:
            max_drawdown = drawdown
            duration = (day - peak_day).days
    return max_drawdown, duration


def _recovery_time(ordered: list[Trade]) -> float:
    """Average days from a losing trade to the first later trade that covers it."""
    total_days = 0
    recovered = 0
    for index, trade in enumerate(ordered):
        if not is_loss(trade):
            continue
        for later in ordered[index + 1:]:
            if later.pnl >= abs(trade.pnl):
                total_days += (later.close_date - trade.close_date).days
                recovered += 1
                break
    return safe_ratio(total_days, recovered)


def _trade_streaks(ordered: list[Trade]) -> tuple[int, int, int]:
    """Signed current run plus longest winning and losing runs.

    Breakeven trades neither extend nor break a run.
    """
    current = 0
    win_run = lose_run = 0
    longest_win = longest_lose = 0
    for trade in ordered:
        if is_win(trade):
            win_run += 1
            lose_run = 0
            current = win_run
            longest_win = max(longest_win, win_run)
        elif is_loss(trade):
            lose_run += 1
            win_run = 0
            current = -lose_run
            longest_lose = max(longest_lose, lose_run)
    return current, longest_win, longest_lose


def _bucket(trades: list[Trade]) -> PerformanceBucket:
    wins = sum(1 for t in trades if is_win(t))
    losses = sum(1 for t in trades if is_loss(t))
    return PerformanceBucket(
        trades=len(trades),
        wins=wins,
        losses=losses,
        pnl=sum(t.pnl for t in trades),
        rr=sum(t.rr or 0.0 for t in trades),
        win_rate=safe_ratio(wins, wins + losses) * 100,
    )


def _mean(values: list[float]) -> float:
    return safe_ratio(sum(values), len(values))


def calculate_statistics(trades: Iterable[Trade]) -> Statistics:
    """Aggregate trades into a Statistics value.

    Open trades are counted in ``open_trades`` and excluded from every
    other figure. Trades without an rr contribute 0 to rr sums but are
    left out of rr averages.

    Args:
        trades: Any collection of trades.

    Returns:
        Statistics for the closed trades.
    """
    trades = list(trades)
    closed = sort_trades(closed_trades(trades))
    logger.debug("Calculating statistics for %d closed of %d trades", len(closed), len(trades))

    wins = [t for t in closed if is_win(t)]
    losses = [t for t in closed if is_loss(t)]
    with_rr = [t for t in closed if t.rr is not None]

    gross_profit = sum(t.pnl for t in wins)
    gross_loss = sum(t.pnl for t in losses)
    total_pnl = sum(t.pnl for t in closed)
    total_rr = sum(t.rr for t in with_rr)

    days = daily_pnl(closed)
    days_rr = daily_pnl(closed, DisplayMode.RR)

    current_streak, longest_win, longest_lose = _trade_streaks(closed)
    max_drawdown, drawdown_duration = _max_drawdown(cumulative_pnl(closed))
    max_drawdown_rr, _ = _max_drawdown(cumulative_pnl(closed, DisplayMode.RR))

    by_day: dict[Weekday, list[Trade]] = {weekday: [] for weekday in Weekday}
    by_setup: dict[str, list[Trade]] = defaultdict(list)
    by_symbol: dict[str, list[Trade]] = defaultdict(list)
    for trade in closed:
        by_day[Weekday.of(trade.close_date)].append(trade)
        if trade.setup:
            by_setup[trade.setup].append(trade)
        by_symbol[trade.symbol].append(trade)

    return Statistics(
        total_trades=len(closed),
        winning_trades=len(wins),
        losing_trades=len(losses),
        breakeven_trades=sum(1 for t in closed if is_breakeven(t)),
        open_trades=len(trades) - len(closed),
        win_rate=safe_ratio(len(wins), len(wins) + len(losses)) * 100,
        total_pnl=total_pnl,
        total_rr=total_rr,
        avg_win=safe_ratio(gross_profit, len(wins)),
        avg_loss=safe_ratio(gross_loss, len(losses)),
        avg_win_rr=_mean([t.rr for t in wins if t.rr is not None]),
        avg_loss_rr=_mean([t.rr for t in losses if t.rr is not None]),
        avg_rr=safe_ratio(total_rr, len(with_rr)),
        best_rr=max((t.rr for t in with_rr), default=0.0),
        largest_win=max((t.pnl for t in wins), default=0.0),
        largest_loss=min((t.pnl for t in losses), default=0.0),
        profit_factor=profit_factor(gross_profit, gross_loss),
        profit_factor_rr=profit_factor(
            sum(t.rr for t in with_rr if t.rr > 0),
            sum(t.rr for t in with_rr if t.rr < 0),
        ),
        expectancy=safe_ratio(total_pnl, len(closed)),
        expectancy_rr=safe_ratio(total_rr, len(with_rr)),
        avg_daily_pnl=safe_ratio(total_pnl, len(days)),
        avg_daily_rr=safe_ratio(total_rr, len(days_rr)),
        best_day=max(days.values(), default=0.0),
        worst_day=min(days.values(), default=0.0),
        best_day_rr=max(days_rr.values(), default=0.0),
        worst_day_rr=min(days_rr.values(), default=0.0),
        current_streak=current_streak,
        longest_win_streak=longest_win,
        longest_lose_streak=longest_lose,
        max_drawdown=max_drawdown,
        max_drawdown_rr=max_drawdown_rr,
        max_drawdown_duration=drawdown_duration,
        recovery_time=_recovery_time(closed),
        performance_by_day={key: _bucket(group) for key, group in by_day.items()},
        performance_by_setup={key: _bucket(group) for key, group in sorted(by_setup.items())},
        performance_by_symbol={key: _bucket(group) for key, group in sorted(by_symbol.items())},
    )

"""Personal records extracted from trade history.

Records come back in fixed catalog priority order, never ranked by
magnitude. Records without qualifying data are skipped before the list is
truncated.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from datetime import date as date_type
from typing import Callable, Iterable, Literal, Optional

from pydantic import BaseModel, Field

from tradejournal.analytics.statistics import (
    closed_trades,
    is_loss,
    is_win,
    safe_ratio,
    sort_trades,
)
from tradejournal.models import Trade

DEFAULT_RECENT_DAYS = 7
DEFAULT_LIMIT = 6
WIN_RATE_WINDOW = 10
MIN_WIN_STREAK = 3

Category = Literal["performance", "consistency", "volume", "streak"]


class PersonalBest(BaseModel):
    """A superlative record and where it came from."""

    id: str = Field(..., description="Catalog id")
    title: str = Field(..., description="Title")
    description: str = Field(..., description="Context line")
    value: float = Field(..., description="Record value")
    formatted_value: str = Field(..., description="Display value")
    date: date_type = Field(..., description="Day responsible for the record")
    is_recent: bool = Field(..., description="Set within the trailing window")
    category: Category = Field(..., description="Grouping")
    trade_ids: list[str] = Field(default_factory=list, description="Contributing trades")

    model_config = {"frozen": True}


@dataclass(frozen=True)
class _History:
    trades: list[Trade]
    days: dict[date, list[Trade]]


@dataclass(frozen=True)
class _Candidate:
    value: float
    formatted: str
    day: date
    description: str
    trades: list[Trade]


def _money(value: float) -> str:
    return f"{value:,.2f}"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def _largest_win(history: _History) -> Optional[_Candidate]:
    best = None
    for trade in history.trades:
        if is_win(trade) and (best is None or trade.pnl > best.pnl):
            best = trade
    if best is None:
        return None
    return _Candidate(
        best.pnl, _money(best.pnl), best.close_date,
        f"{best.symbol} {best.direction}", [best],
    )


def _best_day(history: _History) -> Optional[_Candidate]:
    best_day, best_pnl = None, 0.0
    for day, trades in history.days.items():
        pnl = sum(t.pnl for t in trades)
        if pnl > best_pnl:
            best_day, best_pnl = day, pnl
    if best_day is None:
        return None
    trades = history.days[best_day]
    return _Candidate(
        best_pnl, _money(best_pnl), best_day, _plural(len(trades), "trade"), trades
    )


def _best_rr(history: _History) -> Optional[_Candidate]:
    best = None
    for trade in history.trades:
        if trade.rr is not None and trade.rr > 0 and (best is None or trade.rr > best.rr):
            best = trade
    if best is None:
        return None
    return _Candidate(
        best.rr, f"{best.rr:.2f}R", best.close_date,
        f"{best.symbol} {best.direction}", [best],
    )


def _most_trades_day(history: _History) -> Optional[_Candidate]:
    best_day, best_count = None, 0
    for day, trades in history.days.items():
        if len(trades) > best_count:
            best_day, best_count = day, len(trades)
    if best_day is None:
        return None
    trades = history.days[best_day]
    return _Candidate(
        best_count, _plural(best_count, "trade"), best_day,
        f"{_money(sum(t.pnl for t in trades))} P&L", trades,
    )


def _best_win_rate(history: _History) -> Optional[_Candidate]:
    best_rate, best_window = 0.0, None
    for start in range(len(history.trades) - WIN_RATE_WINDOW + 1):
        window = history.trades[start:start + WIN_RATE_WINDOW]
        wins = sum(1 for t in window if is_win(t))
        losses = sum(1 for t in window if is_loss(t))
        rate = safe_ratio(wins, wins + losses) * 100
        if rate > best_rate:
            best_rate, best_window = rate, window
    if best_window is None:
        return None
    return _Candidate(
        best_rate, f"{best_rate:.0f}%", best_window[-1].close_date,
        f"{WIN_RATE_WINDOW}-trade period", best_window,
    )


def _longest_win_streak(history: _History) -> Optional[_Candidate]:
    best: list[Trade] = []
    run: list[Trade] = []
    for trade in history.trades:
        if is_win(trade):
            run.append(trade)
            if len(run) > len(best):
                best = list(run)
        else:
            run = []
    if len(best) < MIN_WIN_STREAK:
        return None
    return _Candidate(
        len(best), f"{len(best)} wins", best[-1].close_date,
        f"{len(best)} consecutive wins", best,
    )


def _best_average_trade(history: _History) -> Optional[_Candidate]:
    best_day, best_avg = None, 0.0
    for day, trades in history.days.items():
        if len(trades) < 2:
            continue
        avg = sum(t.pnl for t in trades) / len(trades)
        if avg > best_avg:
            best_day, best_avg = day, avg
    if best_day is None:
        return None
    trades = history.days[best_day]
    return _Candidate(
        best_avg, _money(best_avg), best_day, _plural(len(trades), "trade"), trades
    )


def _best_recovery(history: _History) -> Optional[_Candidate]:
    best_day, best_amount, prior_loss = None, 0.0, 0.0
    previous_pnl: Optional[float] = None
    for day, trades in history.days.items():
        pnl = sum(t.pnl for t in trades)
        if previous_pnl is not None and previous_pnl < 0 < pnl and pnl > best_amount:
            best_day, best_amount, prior_loss = day, pnl, abs(previous_pnl)
        previous_pnl = pnl
    if best_day is None:
        return None
    return _Candidate(
        best_amount, _money(best_amount), best_day,
        f"After {prior_loss:,.0f} loss", history.days[best_day],
    )


def _best_period(
    history: _History, key: Callable[[date], object]
) -> Optional[tuple[float, list[Trade]]]:
    periods: dict[object, list[Trade]] = defaultdict(list)
    for trade in history.trades:
        periods[key(trade.close_date)].append(trade)
    best_pnl, best_trades = 0.0, None
    for trades in periods.values():
        pnl = sum(t.pnl for t in trades)
        if pnl > best_pnl:
            best_pnl, best_trades = pnl, trades
    if best_trades is None:
        return None
    return best_pnl, best_trades


def _best_week(history: _History) -> Optional[_Candidate]:
    best = _best_period(history, lambda day: day - timedelta(days=day.weekday()))
    if best is None:
        return None
    pnl, trades = best
    return _Candidate(
        pnl, _money(pnl), trades[-1].close_date, _plural(len(trades), "trade"), trades
    )


def _best_month(history: _History) -> Optional[_Candidate]:
    best = _best_period(history, lambda day: (day.year, day.month))
    if best is None:
        return None
    pnl, trades = best
    return _Candidate(
        pnl, _money(pnl), trades[-1].close_date,
        trades[-1].close_date.strftime("%B %Y"), trades,
    )


# Priority order of the records.
PERSONAL_BEST_CATALOG: tuple[tuple[str, str, Category, Callable[[_History], Optional[_Candidate]]], ...] = (
    ("largest-win", "Largest Win", "performance", _largest_win),
    ("best-trading-day", "Best Day", "performance", _best_day),
    ("best-rr-trade", "Best R:R", "performance", _best_rr),
    ("most-trades-day", "Most Trades in a Day", "volume", _most_trades_day),
    ("best-win-rate", "Best Win Rate", "consistency", _best_win_rate),
    ("longest-win-streak", "Longest Win Streak", "streak", _longest_win_streak),
    ("best-avg-trade", "Best Avg/Trade", "consistency", _best_average_trade),
    ("best-recovery", "Best Comeback", "performance", _best_recovery),
    ("best-week", "Best Week", "volume", _best_week),
    ("best-month", "Best Month", "volume", _best_month),
)


def is_recent(day: date, today: date, recent_days: int = DEFAULT_RECENT_DAYS) -> bool:
    """Whether ``day`` is today or within the ``recent_days - 1`` days before."""
    return 0 <= (today - day).days < recent_days


def calculate_personal_bests(
    trades: Iterable[Trade],
    *,
    today: Optional[date] = None,
    recent_days: int = DEFAULT_RECENT_DAYS,
    limit: int = DEFAULT_LIMIT,
) -> list[PersonalBest]:
    """Extract personal records from closed trades.

    Args:
        trades: Trade history, optionally pre-filtered by the caller.
        today: Reference day for ``is_recent``. Defaults to today.
        recent_days: Length of the trailing recency window.
        limit: Maximum number of records returned.

    Returns:
        Up to ``limit`` records in catalog priority order.
    """
    today = today or date.today()
    ordered = sort_trades(closed_trades(trades))
    days: dict[date, list[Trade]] = defaultdict(list)
    for trade in ordered:
        days[trade.close_date].append(trade)
    history = _History(trades=ordered, days=dict(days))

    bests = []
    for best_id, title, category, extract in PERSONAL_BEST_CATALOG:
        if len(bests) >= limit:
            break
        candidate = extract(history)
        if candidate is None:
            continue
        bests.append(
            PersonalBest(
                id=best_id,
                title=title,
                description=candidate.description,
                value=candidate.value,
                formatted_value=candidate.formatted,
                date=candidate.day,
                is_recent=is_recent(candidate.day, today, recent_days),
                category=category,
                trade_ids=[t.id for t in candidate.trades],
            )
        )
    return bests

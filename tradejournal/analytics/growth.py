"""Period-over-period growth comparison.

Whether a move is good news depends on the metric: more losing trades or a
deeper drawdown is bad even though the number went up. The polarity of
each metric is therefore looked up in ``METRIC_POLARITY`` rather than
derived from the sign of the change.
"""

import math
from datetime import date, timedelta
from typing import Iterable, Literal, Optional

from pydantic import BaseModel, Field

from tradejournal.analytics.statistics import DisplayMode, Statistics, calculate_statistics
from tradejournal.models import Trade

RECENT_WINDOW_DAYS = 30

Trend = Literal["up", "down", "neutral"]

# metric -> (label, P&L-mode field, R-mode field)
COMPARISON_METRICS: tuple[tuple[str, str, str, str], ...] = (
    ("total_pnl", "Total P&L", "total_pnl", "total_rr"),
    ("win_rate", "Win Rate", "win_rate", "win_rate"),
    ("expectancy", "Avg Trade", "expectancy", "expectancy_rr"),
    ("total_trades", "Total Trades", "total_trades", "total_trades"),
    ("profit_factor", "Profit Factor", "profit_factor", "profit_factor_rr"),
    ("avg_win", "Avg Win", "avg_win", "avg_win_rr"),
    ("losing_trades", "Losing Trades", "losing_trades", "losing_trades"),
    ("max_drawdown", "Max Drawdown", "max_drawdown", "max_drawdown_rr"),
)

# True when an increase is an improvement.
METRIC_POLARITY: dict[str, bool] = {
    "total_pnl": True,
    "win_rate": True,
    "expectancy": True,
    "total_trades": True,
    "profit_factor": True,
    "avg_win": True,
    "losing_trades": False,
    "max_drawdown": False,
}


class PeriodComparison(BaseModel):
    """One metric compared across two periods."""

    metric: str = Field(..., description="Metric key")
    label: str = Field(..., description="Display label")
    current: float = Field(..., description="Value in the current period")
    previous: float = Field(..., description="Value in the previous period")
    change: float = Field(..., description="current - previous")
    change_percent: float = Field(..., description="Change relative to |previous|")
    trend: Trend = Field(..., description="Direction of the change")
    is_positive: bool = Field(..., description="Whether the change is an improvement")

    model_config = {"frozen": True}


class GrowthComparison(BaseModel):
    """Month, quarter and recent-vs-historical comparisons."""

    month_over_month: list[PeriodComparison] = Field(default_factory=list)
    quarter_over_quarter: list[PeriodComparison] = Field(default_factory=list)
    recent_vs_historical: list[PeriodComparison] = Field(default_factory=list)
    current_month: str = Field(..., description="Label of the current month")
    previous_month: str = Field(..., description="Label of the previous month")
    current_quarter: str = Field(..., description="Label of the current quarter")
    previous_quarter: str = Field(..., description="Label of the previous quarter")

    model_config = {"frozen": True}


def calculate_change(current: float, previous: float) -> tuple[float, float, Trend]:
    """Absolute change, percent change and trend between two values.

    Equal values (including two Infinity sentinels) are a neutral zero
    change. The percent change is 0 when ``previous`` is 0 or infinite.
    """
    if current == previous:
        return 0.0, 0.0, "neutral"
    change = current - previous
    if previous == 0 or not math.isfinite(previous) or not math.isfinite(change):
        change_percent = 0.0
    else:
        change_percent = change / abs(previous) * 100
    trend: Trend = "up" if change > 0 else "down"
    return change, change_percent, trend


def create_comparison(metric: str, label: str, current: float, previous: float) -> PeriodComparison:
    change, change_percent, trend = calculate_change(current, previous)
    higher_is_better = METRIC_POLARITY.get(metric, True)
    if trend == "neutral":
        is_positive = False
    else:
        is_positive = (trend == "up") == higher_is_better
    return PeriodComparison(
        metric=metric,
        label=label,
        current=current,
        previous=previous,
        change=change,
        change_percent=change_percent,
        trend=trend,
        is_positive=is_positive,
    )


def compare_statistics(
    current: Statistics,
    previous: Statistics,
    mode: DisplayMode = DisplayMode.PNL,
) -> list[PeriodComparison]:
    """Compare two Statistics values over the fixed metric list."""
    comparisons = []
    for metric, label, pnl_field, rr_field in COMPARISON_METRICS:
        field = rr_field if mode == DisplayMode.RR else pnl_field
        comparisons.append(
            create_comparison(
                metric, label, getattr(current, field), getattr(previous, field)
            )
        )
    return comparisons


def compare_periods(
    current_trades: Iterable[Trade],
    previous_trades: Iterable[Trade],
    *,
    mode: DisplayMode = DisplayMode.PNL,
) -> list[PeriodComparison]:
    """Compare the statistics of two trade sets."""
    return compare_statistics(
        calculate_statistics(current_trades),
        calculate_statistics(previous_trades),
        mode,
    )


def month_start(day: date) -> date:
    return day.replace(day=1)


def previous_month_start(day: date) -> date:
    return month_start(month_start(day) - timedelta(days=1))


def quarter_start(day: date) -> date:
    return date(day.year, 3 * ((day.month - 1) // 3) + 1, 1)


def previous_quarter_start(day: date) -> date:
    return quarter_start(quarter_start(day) - timedelta(days=1))


def quarter_label(day: date) -> str:
    return f"{day.year} Q{(day.month - 1) // 3 + 1}"


def _between(trades: list[Trade], start: date, end: Optional[date]) -> list[Trade]:
    """Trades dated on or after ``start`` and before ``end``."""
    return [t for t in trades if t.date >= start and (end is None or t.date < end)]


def calculate_growth_comparison(
    trades: Iterable[Trade],
    *,
    today: Optional[date] = None,
    mode: DisplayMode = DisplayMode.PNL,
) -> GrowthComparison:
    """Compare the current month, quarter and last 30 days to the prior period.

    Trades are assigned to periods by entry date. Trades dated after
    ``today`` are ignored.
    """
    today = today or date.today()
    trades = [t for t in trades if t.date <= today]
    tomorrow = today + timedelta(days=1)

    this_month = month_start(today)
    last_month = previous_month_start(today)
    this_quarter = quarter_start(today)
    last_quarter = previous_quarter_start(today)
    recent_start = today - timedelta(days=RECENT_WINDOW_DAYS)

    return GrowthComparison(
        month_over_month=compare_periods(
            _between(trades, this_month, tomorrow),
            _between(trades, last_month, this_month),
            mode=mode,
        ),
        quarter_over_quarter=compare_periods(
            _between(trades, this_quarter, tomorrow),
            _between(trades, last_quarter, this_quarter),
            mode=mode,
        ),
        recent_vs_historical=compare_periods(
            _between(trades, recent_start, tomorrow),
            _between(trades, date.min, recent_start),
            mode=mode,
        ),
        current_month=this_month.strftime("%B %Y"),
        previous_month=last_month.strftime("%B %Y"),
        current_quarter=quarter_label(this_quarter),
        previous_quarter=quarter_label(last_quarter),
    )

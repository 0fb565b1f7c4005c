"""Achievement evaluation.

Achievements are recomputed from scratch on every call; there is no
record of when an achievement was first unlocked.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field

from tradejournal.analytics.statistics import Statistics, closed_trades
from tradejournal.models import JournalEntry, Trade


@dataclass(frozen=True)
class AchievementContext:
    """Inputs every metric accessor can read from."""

    trades: list[Trade]
    stats: Statistics
    journal_entries: list[JournalEntry]


Metric = Callable[[AchievementContext], float]


@dataclass(frozen=True)
class AchievementDefinition:
    """Catalog entry.

    A ``gate`` is a (metric, target) pair that must be reached before the
    real metric is measured. Until then the gate is reported as the
    achievement's current value and target.
    """

    id: str
    title: str
    description: str
    icon: str
    metric: Metric
    target: float
    formatter: Optional[Callable[[float], str]] = None
    gate: Optional[tuple[Metric, float]] = None


class Achievement(BaseModel):
    """Evaluated achievement."""

    id: str = Field(..., description="Catalog id")
    title: str = Field(..., description="Title")
    description: str = Field(..., description="Description")
    icon: str = Field(..., description="Icon name")
    current: float = Field(..., description="Current metric value")
    target: float = Field(..., gt=0, description="Target value")
    progress: float = Field(..., ge=0, le=100, description="Progress percentage")
    is_unlocked: bool = Field(..., description="Whether current reached target")
    formatted_current: str = Field(..., description="Display value of current")

    model_config = {"frozen": True}


def _trade_count(ctx: AchievementContext) -> float:
    return ctx.stats.total_trades


def _journal_count(ctx: AchievementContext) -> float:
    return len(ctx.journal_entries)


def _profitable_months(ctx: AchievementContext) -> float:
    monthly: dict[tuple[int, int], float] = defaultdict(float)
    for trade in closed_trades(ctx.trades):
        monthly[(trade.close_date.year, trade.close_date.month)] += trade.pnl
    return 1.0 if any(pnl > 0 for pnl in monthly.values()) else 0.0


def _system_days(ctx: AchievementContext) -> float:
    """Most recent run of trading-day journal entries that followed the system."""
    entries = sorted(
        (e for e in ctx.journal_entries if e.did_trade),
        key=lambda e: e.date,
        reverse=True,
    )
    streak = 0
    for entry in entries:
        if not entry.followed_system:
            break
        streak += 1
    return streak


def _win_rate(ctx: AchievementContext) -> float:
    return ctx.stats.win_rate


def _profit_factor(ctx: AchievementContext) -> float:
    return ctx.stats.profit_factor


def _format_percent(value: float) -> str:
    return f"{value:.1f}%"


def _format_ratio(value: float) -> str:
    return "∞" if value == float("inf") else f"{value:.2f}"


ACHIEVEMENT_CATALOG: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(
        "trades-10", "First 10 Trades", "Start your trading journey",
        "Activity", _trade_count, 10,
    ),
    AchievementDefinition(
        "trades-50", "50 Trades Logged", "Building experience and data",
        "Activity", _trade_count, 50,
    ),
    AchievementDefinition(
        "trades-100", "100 Trades Club", "Significant trading experience",
        "Trophy", _trade_count, 100,
    ),
    AchievementDefinition(
        "profitable-month", "Profitable Month", "First month in the green",
        "TrendingUp", _profitable_months, 1,
    ),
    AchievementDefinition(
        "journal-30", "Consistent Journaler", "Log 30 daily journal entries",
        "Calendar", _journal_count, 30,
    ),
    AchievementDefinition(
        "system-10", "System Discipline",
        "10 consecutive trading days following your system",
        "Target", _system_days, 10,
    ),
    AchievementDefinition(
        "winrate-60", "Consistent Winner", "60%+ win rate with 20+ trades",
        "Award", _win_rate, 60, _format_percent, gate=(_trade_count, 20),
    ),
    AchievementDefinition(
        "pf-2", "Strong Edge", "2.0+ profit factor with 30+ trades",
        "Zap", _profit_factor, 2, _format_ratio, gate=(_trade_count, 30),
    ),
)


def progress_percent(current: float, target: float) -> float:
    """Progress towards ``target``, clamped to 0..100."""
    if target <= 0:
        return 100.0
    return max(0.0, min(100.0, current / target * 100))


def evaluate_achievement(
    definition: AchievementDefinition, ctx: AchievementContext
) -> Achievement:
    metric, target, formatter = definition.metric, definition.target, definition.formatter
    if definition.gate is not None:
        gate_metric, gate_target = definition.gate
        if gate_metric(ctx) < gate_target:
            metric, target, formatter = gate_metric, gate_target, None

    current = metric(ctx)
    return Achievement(
        id=definition.id,
        title=definition.title,
        description=definition.description,
        icon=definition.icon,
        current=current,
        target=target,
        progress=progress_percent(current, target),
        is_unlocked=current >= target,
        formatted_current=formatter(current) if formatter else f"{current:g}",
    )


def calculate_achievements(
    trades: Iterable[Trade],
    stats: Statistics,
    journal_entries: Optional[Iterable[JournalEntry]] = None,
    catalog: Iterable[AchievementDefinition] = ACHIEVEMENT_CATALOG,
) -> list[Achievement]:
    """Evaluate every catalog entry, in catalog order."""
    ctx = AchievementContext(
        trades=list(trades),
        stats=stats,
        journal_entries=list(journal_entries or []),
    )
    return [evaluate_achievement(definition, ctx) for definition in catalog]


def sort_achievements(achievements: Iterable[Achievement]) -> list[Achievement]:
    """Unlocked first, then locked by descending progress."""
    return sorted(achievements, key=lambda a: (not a.is_unlocked, -a.progress))

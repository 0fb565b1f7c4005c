"""Pure analytics core: statistics, streaks, achievements, records,
growth comparison, tag constraints and trade filtering."""

from tradejournal.analytics.statistics import (
    DisplayMode,
    PerformanceBucket,
    Statistics,
    Weekday,
    calculate_statistics,
    cumulative_pnl,
    daily_pnl,
)
from tradejournal.analytics.streaks import (
    StreakContinuity,
    StreakData,
    calculate_streaks,
    distress_warning,
)
from tradejournal.analytics.achievements import (
    ACHIEVEMENT_CATALOG,
    Achievement,
    calculate_achievements,
    sort_achievements,
)
from tradejournal.analytics.personal_bests import PersonalBest, calculate_personal_bests
from tradejournal.analytics.growth import (
    GrowthComparison,
    PeriodComparison,
    calculate_growth_comparison,
    compare_periods,
)
from tradejournal.analytics.tags import (
    TagValidationResult,
    get_suggested_tags,
    symmetrize_exclusions,
    validate_tag_selection,
)
from tradejournal.analytics.filters import filter_trades

__all__ = [
    "ACHIEVEMENT_CATALOG",
    "Achievement",
    "DisplayMode",
    "GrowthComparison",
    "PerformanceBucket",
    "PeriodComparison",
    "PersonalBest",
    "Statistics",
    "StreakContinuity",
    "StreakData",
    "TagValidationResult",
    "Weekday",
    "calculate_achievements",
    "calculate_growth_comparison",
    "calculate_personal_bests",
    "calculate_statistics",
    "calculate_streaks",
    "compare_periods",
    "cumulative_pnl",
    "daily_pnl",
    "distress_warning",
    "filter_trades",
    "get_suggested_tags",
    "sort_achievements",
    "symmetrize_exclusions",
    "validate_tag_selection",
]

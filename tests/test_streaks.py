"""Property-based tests for day-level streak tracking.

**Feature: trade-journal**
"""

from datetime import date, timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.analytics.statistics import DisplayMode
from tradejournal.analytics.streaks import (
    StreakContinuity,
    calculate_streaks,
    distress_warning,
    is_adjacent,
)
from tradejournal.models import JournalEntry, Trade

# 2024-01-05 is a Friday.
FRIDAY = date(2024, 1, 5)
MONDAY = date(2024, 1, 8)


def make_trade(day: date, pnl: float, rr=None, closed: bool = True) -> Trade:
    return Trade(
        id=f"{day.isoformat()}-{pnl}",
        date=day,
        symbol="ES",
        direction="long",
        entry_price=5000.0,
        exit_price=5001.0 if closed else None,
        pnl=pnl,
        rr=rr,
    )


class TestConsecutiveWinningDays:
    """
    **Feature: trade-journal, Property 10: Consecutive Winning Days**

    *For any* run of consecutive winning calendar days, the current
    winning streak equals the length of the run.
    """

    @given(
        start=st.dates(min_value=date(2020, 1, 1), max_value=date(2025, 1, 1)),
        length=st.integers(min_value=1, max_value=30),
    )
    @settings(max_examples=100)
    def test_current_equals_run_length(self, start: date, length: int):
        trades = [make_trade(start + timedelta(days=i), 10.0) for i in range(length)]
        last = start + timedelta(days=length - 1)

        result = calculate_streaks(trades, [], as_of=last)

        assert result.current_winning_streak == length
        assert result.best_winning_streak == length
        assert result.current_losing_streak == 0

    def test_losing_day_breaks_streak(self):
        start = date(2024, 1, 1)
        trades = [
            make_trade(start, 10),
            make_trade(start + timedelta(days=1), -10),
            make_trade(start + timedelta(days=2), 10),
        ]

        result = calculate_streaks(trades, [])

        assert result.current_winning_streak == 1
        assert result.best_winning_streak == 1
        assert result.current_losing_streak == 0
        assert result.longest_losing_streak == 1

    def test_day_total_decides(self):
        day = date(2024, 1, 2)
        trades = [make_trade(day, 100), make_trade(day, -150)]

        result = calculate_streaks(trades, [])

        assert result.current_winning_streak == 0
        assert result.current_losing_streak == 1

    def test_open_trades_ignored_for_outcome(self):
        day = date(2024, 1, 2)

        result = calculate_streaks([make_trade(day, 0, closed=False)], [])

        assert result.current_winning_streak == 0
        assert result.trading_days_streak == 1

    def test_rr_mode(self):
        day = date(2024, 1, 2)
        trades = [make_trade(day, 50, rr=-0.5)]

        assert calculate_streaks(trades, []).current_winning_streak == 1
        assert calculate_streaks(trades, [], mode=DisplayMode.RR).current_losing_streak == 1


class TestAsOfAnchoring:
    """
    **Feature: trade-journal, Property 11: Current Streak Reaches Reference Day**
    """

    def setup_method(self):
        start = date(2024, 1, 1)
        self.trades = [make_trade(start + timedelta(days=i), 10) for i in range(3)]

    def test_same_day(self):
        assert calculate_streaks(self.trades, [], as_of=date(2024, 1, 3)).current_winning_streak == 3

    def test_next_day_keeps_streak(self):
        assert calculate_streaks(self.trades, [], as_of=date(2024, 1, 4)).current_winning_streak == 3

    def test_gap_ends_streak(self):
        result = calculate_streaks(self.trades, [], as_of=date(2024, 1, 5))

        assert result.current_winning_streak == 0
        assert result.best_winning_streak == 3

    def test_later_records_ignored(self):
        result = calculate_streaks(self.trades, [], as_of=date(2024, 1, 2))

        assert result.current_winning_streak == 2
        assert result.best_winning_streak == 2


class TestContinuityBoundaries:
    """
    **Feature: trade-journal, Property 12: Weekend Continuity**

    Calendar continuity breaks a streak over a weekend without trades;
    business continuity bridges Saturday and Sunday but nothing else.
    """

    def test_adjacency(self):
        assert is_adjacent(FRIDAY + timedelta(days=1), FRIDAY)
        assert not is_adjacent(MONDAY, FRIDAY)
        assert is_adjacent(MONDAY, FRIDAY, StreakContinuity.BUSINESS)
        assert is_adjacent(FRIDAY + timedelta(days=2), FRIDAY, StreakContinuity.BUSINESS)
        assert not is_adjacent(FRIDAY, FRIDAY, StreakContinuity.BUSINESS)
        assert not is_adjacent(FRIDAY, FRIDAY - timedelta(days=2), StreakContinuity.BUSINESS)
        assert not is_adjacent(MONDAY + timedelta(days=1), FRIDAY, StreakContinuity.BUSINESS)

    def test_calendar_breaks_over_weekend(self):
        trades = [make_trade(FRIDAY, 10), make_trade(MONDAY, 10)]

        result = calculate_streaks(trades, [], continuity=StreakContinuity.CALENDAR)

        assert result.current_winning_streak == 1
        assert result.best_winning_streak == 1
        assert result.trading_days_streak == 1

    def test_business_bridges_weekend(self):
        trades = [make_trade(FRIDAY, 10), make_trade(MONDAY, 10)]

        result = calculate_streaks(trades, [], continuity=StreakContinuity.BUSINESS)

        assert result.current_winning_streak == 2
        assert result.trading_days_streak == 2

    def test_business_counts_weekend_trades(self):
        trades = [
            make_trade(FRIDAY, 10),
            make_trade(FRIDAY + timedelta(days=1), 10),
            make_trade(MONDAY, 10),
        ]

        result = calculate_streaks(trades, [], continuity=StreakContinuity.BUSINESS)

        assert result.current_winning_streak == 3

    def test_business_breaks_on_missing_weekday(self):
        wednesday = FRIDAY - timedelta(days=2)
        trades = [make_trade(wednesday, 10), make_trade(FRIDAY, 10)]

        result = calculate_streaks(trades, [], continuity=StreakContinuity.BUSINESS)

        assert result.current_winning_streak == 1

    def test_business_as_of_monday(self):
        trades = [make_trade(FRIDAY, 10)]

        calendar = calculate_streaks(trades, [], as_of=MONDAY)
        business = calculate_streaks(
            trades, [], continuity=StreakContinuity.BUSINESS, as_of=MONDAY
        )

        assert calendar.current_winning_streak == 0
        assert business.current_winning_streak == 1


class TestJournalStreaks:
    """
    **Feature: trade-journal, Property 13: Journal and Adherence Streaks**
    """

    def test_journal_and_adherence(self):
        start = date(2024, 1, 1)
        entries = [
            JournalEntry(date=start, followed_system=True),
            JournalEntry(date=start + timedelta(days=1), followed_system=True),
            JournalEntry(date=start + timedelta(days=2), followed_system=False),
        ]

        result = calculate_streaks([], entries)

        assert result.journal_streak == 3
        assert result.best_journal_streak == 3
        assert result.system_adherence_streak == 0
        assert result.best_system_adherence_streak == 2

    def test_empty(self):
        result = calculate_streaks([], [])

        assert result.journal_streak == 0
        assert result.trading_days_streak == 0
        assert result.best_winning_streak == 0


class TestDistressWarning:
    """
    **Feature: trade-journal, Property 14: Distress Warning**
    """

    def test_threshold(self):
        start = date(2024, 1, 1)
        trades = [make_trade(start + timedelta(days=i), -10) for i in range(3)]
        result = calculate_streaks(trades, [])

        assert result.current_losing_streak == 3
        assert distress_warning(result)
        assert not distress_warning(result, threshold=4)
        assert not distress_warning(result, threshold=0)

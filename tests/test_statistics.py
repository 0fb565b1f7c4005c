"""Property-based tests for the statistics engine.

**Feature: trade-journal**
"""

import math
from datetime import date, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.analytics.statistics import (
    DisplayMode,
    Weekday,
    calculate_statistics,
    cumulative_pnl,
    daily_pnl,
    profit_factor,
)
from tradejournal.models import Trade


def make_trade(day: date, pnl: float, rr=None, **kwargs) -> Trade:
    fields = {
        "id": f"{day.isoformat()}-{pnl}-{kwargs.get('entry_time', '')}",
        "date": day,
        "symbol": "AAPL",
        "direction": "long",
        "entry_price": 100.0,
        "exit_price": 101.0,
        "pnl": pnl,
        "rr": rr,
    }
    fields.update(kwargs)
    return Trade(**fields)


def trade_strategy():
    """Generate valid Trade objects for testing."""
    return st.builds(
        Trade,
        id=st.uuids().map(str),
        date=st.dates(min_value=date(2020, 1, 1), max_value=date(2025, 12, 31)),
        symbol=st.sampled_from(["AAPL", "MSFT", "ES", "NQ"]),
        direction=st.sampled_from(["long", "short"]),
        entry_price=st.floats(min_value=0.01, max_value=10000.0, allow_nan=False),
        exit_price=st.one_of(
            st.none(), st.floats(min_value=0.01, max_value=10000.0, allow_nan=False)
        ),
        pnl=st.one_of(
            st.just(0.0),
            st.floats(min_value=-10000.0, max_value=10000.0, allow_nan=False, allow_infinity=False),
        ),
        rr=st.one_of(st.none(), st.floats(min_value=-5.0, max_value=10.0, allow_nan=False)),
        setup=st.one_of(st.none(), st.sampled_from(["Breakout", "Pullback"])),
    )


class TestOutcomeCountsSumToTotal:
    """
    **Feature: trade-journal, Property 1: Outcome Counts Sum to Total**

    *For any* set of trades, winning + losing + breakeven trades equals
    the number of closed trades, and open trades are counted apart.
    """

    @given(trades=st.lists(trade_strategy(), min_size=0, max_size=50))
    @settings(max_examples=100)
    def test_outcome_counts_sum(self, trades: list[Trade]):
        stats = calculate_statistics(trades)

        assert (
            stats.winning_trades + stats.losing_trades + stats.breakeven_trades
            == stats.total_trades
        )
        assert stats.total_trades + stats.open_trades == len(trades)

    @given(trades=st.lists(trade_strategy(), min_size=0, max_size=50))
    @settings(max_examples=100)
    def test_total_pnl_matches_closed_trades(self, trades: list[Trade]):
        stats = calculate_statistics(trades)
        expected = sum(t.pnl for t in trades if t.is_closed)

        assert stats.total_pnl == pytest.approx(expected, abs=1e-6)


class TestProfitFactorNeverNaN:
    """
    **Feature: trade-journal, Property 2: Profit Factor Never NaN**

    *For any* set of trades, profit factor is a non-negative number or
    the infinity sentinel.
    """

    @given(trades=st.lists(trade_strategy(), min_size=0, max_size=50))
    @settings(max_examples=100)
    def test_profit_factor_not_nan(self, trades: list[Trade]):
        stats = calculate_statistics(trades)

        for value in (stats.profit_factor, stats.profit_factor_rr):
            assert not math.isnan(value)
            assert value >= 0

    def test_infinity_when_only_wins(self):
        trades = [make_trade(date(2024, 1, 1), 100), make_trade(date(2024, 1, 2), 50)]

        assert calculate_statistics(trades).profit_factor == math.inf

    def test_zero_when_only_breakeven(self):
        trades = [make_trade(date(2024, 1, 1), 0)]

        assert calculate_statistics(trades).profit_factor == 0

    def test_profit_factor_helper(self):
        assert profit_factor(100, -50) == 2
        assert profit_factor(0, -50) == 0
        assert profit_factor(0, 0) == 0
        assert profit_factor(10, 0) == math.inf


class TestEmptyTradeSet:
    """
    **Feature: trade-journal, Property 3: Empty Trade Set**

    An empty trade set yields zeroed statistics without raising.
    """

    def test_empty(self):
        stats = calculate_statistics([])

        assert stats.total_trades == 0
        assert stats.win_rate == 0
        assert stats.profit_factor == 0
        assert stats.total_pnl == 0
        assert stats.expectancy == 0
        assert stats.max_drawdown == 0
        assert set(stats.performance_by_day) == set(Weekday)

    def test_only_open_trades(self):
        trade = make_trade(date(2024, 1, 1), 0, exit_price=None)
        stats = calculate_statistics([trade])

        assert stats.total_trades == 0
        assert stats.open_trades == 1


class TestWorkedExample:
    """
    **Feature: trade-journal, Property 4: Three Trade Example**
    """

    def test_example(self):
        trades = [
            make_trade(date(2024, 1, 1), 100),
            make_trade(date(2024, 1, 2), -50),
            make_trade(date(2024, 1, 3), 75),
        ]
        stats = calculate_statistics(trades)

        assert stats.total_trades == 3
        assert stats.winning_trades == 2
        assert stats.losing_trades == 1
        assert stats.win_rate == pytest.approx(66.666, rel=1e-3)
        assert stats.total_pnl == 125
        assert stats.avg_win == 87.5
        assert stats.avg_loss == -50
        assert stats.profit_factor == 3.5
        assert stats.expectancy == pytest.approx(125 / 3)
        assert stats.current_streak == 1
        assert stats.longest_win_streak == 1
        assert stats.longest_lose_streak == 1

    def test_input_order_does_not_matter(self):
        trades = [
            make_trade(date(2024, 1, 3), 75),
            make_trade(date(2024, 1, 1), 100),
            make_trade(date(2024, 1, 2), -50),
        ]

        assert calculate_statistics(trades) == calculate_statistics(list(reversed(trades)))


class TestDailyExtremes:
    """
    **Feature: trade-journal, Property 5: Daily Extremes Use Day Totals**

    Best and worst day collapse trades on the same day before taking
    the extremum.
    """

    def test_same_day_trades_collapse(self):
        day = date(2024, 1, 2)
        trades = [
            make_trade(day, 300, entry_time="09:30"),
            make_trade(day, -250, entry_time="10:00"),
            make_trade(date(2024, 1, 3), 100),
        ]
        stats = calculate_statistics(trades)

        assert stats.best_day == 100
        assert stats.worst_day == 50
        assert stats.largest_win == 300
        assert stats.largest_loss == -250

    def test_exit_date_attributes_day(self):
        trade = make_trade(date(2024, 1, 1), 100, exit_date=date(2024, 1, 4))

        assert list(daily_pnl([trade])) == [date(2024, 1, 4)]


class TestTradeStreaks:
    """
    **Feature: trade-journal, Property 6: Trade Streaks**
    """

    def test_losing_run_is_negative(self):
        start = date(2024, 1, 1)
        pnls = [50, 60, -10, -20, -30]
        trades = [make_trade(start + timedelta(days=i), p) for i, p in enumerate(pnls)]
        stats = calculate_statistics(trades)

        assert stats.current_streak == -3
        assert stats.longest_win_streak == 2
        assert stats.longest_lose_streak == 3

    def test_breakeven_does_not_break_run(self):
        start = date(2024, 1, 1)
        pnls = [50, 0, 60]
        trades = [make_trade(start + timedelta(days=i), p) for i, p in enumerate(pnls)]

        assert calculate_statistics(trades).longest_win_streak == 2


class TestRMultiples:
    """
    **Feature: trade-journal, Property 7: Missing R Is Not Zero**

    Trades without rr count as 0 in sums and are left out of rr averages.
    """

    def test_missing_rr_excluded_from_average(self):
        trades = [
            make_trade(date(2024, 1, 1), 100, rr=2.0),
            make_trade(date(2024, 1, 2), 50, rr=None),
            make_trade(date(2024, 1, 3), -50, rr=-1.0),
        ]
        stats = calculate_statistics(trades)

        assert stats.total_rr == 1.0
        assert stats.expectancy_rr == 0.5
        assert stats.avg_win_rr == 2.0
        assert stats.avg_loss_rr == -1.0
        assert stats.best_rr == 2.0
        assert stats.profit_factor_rr == 2.0


class TestDrawdown:
    """
    **Feature: trade-journal, Property 8: Drawdown**
    """

    def test_peak_to_trough(self):
        trades = [
            make_trade(date(2024, 1, 1), 100),
            make_trade(date(2024, 1, 2), -30),
            make_trade(date(2024, 1, 5), -50),
            make_trade(date(2024, 1, 6), 200),
        ]
        stats = calculate_statistics(trades)

        assert stats.max_drawdown == 80
        assert stats.max_drawdown_duration == 4

    def test_drawdown_from_zero(self):
        stats = calculate_statistics([make_trade(date(2024, 1, 1), -40)])

        assert stats.max_drawdown == 40

    def test_recovery_time(self):
        trades = [
            make_trade(date(2024, 1, 1), -40),
            make_trade(date(2024, 1, 2), 10),
            make_trade(date(2024, 1, 4), 50),
        ]

        assert calculate_statistics(trades).recovery_time == 3

    def test_cumulative_curve(self):
        trades = [make_trade(date(2024, 1, 1), 10), make_trade(date(2024, 1, 2), -5)]

        assert cumulative_pnl(trades) == [(date(2024, 1, 1), 10), (date(2024, 1, 2), 5)]
        assert cumulative_pnl(trades, DisplayMode.RR) == [
            (date(2024, 1, 1), 0),
            (date(2024, 1, 2), 0),
        ]


class TestPerformanceBreakdowns:
    """
    **Feature: trade-journal, Property 9: Performance Breakdowns**
    """

    def test_groupings(self):
        monday = date(2024, 1, 1)
        trades = [
            make_trade(monday, 100, setup="Breakout", symbol="AAPL"),
            make_trade(monday, -50, setup="Breakout", symbol="MSFT", entry_time="11:00"),
            make_trade(monday + timedelta(days=1), 20, symbol="AAPL"),
        ]
        stats = calculate_statistics(trades)

        assert stats.performance_by_day[Weekday.MONDAY].trades == 2
        assert stats.performance_by_day[Weekday.MONDAY].win_rate == 50
        assert stats.performance_by_day[Weekday.TUESDAY].pnl == 20
        assert stats.performance_by_day[Weekday.SUNDAY].trades == 0
        assert list(stats.performance_by_setup) == ["Breakout"]
        assert stats.performance_by_setup["Breakout"].pnl == 50
        assert stats.performance_by_symbol["AAPL"].wins == 2

"""Property-based tests for the database store.

**Feature: trade-journal**
"""

import sqlite3
import tempfile
from datetime import date
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from tradejournal.db.store import DataStore
from tradejournal.models import (
    Category,
    CustomSetup,
    CustomTag,
    FilterPreset,
    JournalEntry,
    TagRelationships,
    Trade,
    TradeFilters,
)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield DataStore(db_path)


def trade_strategy():
    """Generate valid Trade objects for testing."""
    return st.builds(
        Trade,
        id=st.uuids().map(str),
        date=st.dates(min_value=date(2020, 1, 1), max_value=date(2025, 12, 31)),
        entry_time=st.one_of(st.none(), st.sampled_from(["09:30", "10:15", "14:00"])),
        symbol=st.text(
            alphabet=st.characters(whitelist_categories=("Lu",)),
            min_size=1,
            max_size=10,
        ),
        direction=st.sampled_from(["long", "short"]),
        entry_price=st.floats(min_value=0.01, max_value=100000.0, allow_nan=False, allow_infinity=False),
        exit_price=st.one_of(
            st.none(),
            st.floats(min_value=0.01, max_value=100000.0, allow_nan=False, allow_infinity=False),
        ),
        pnl=st.floats(min_value=-100000.0, max_value=100000.0, allow_nan=False, allow_infinity=False),
        rr=st.one_of(st.none(), st.floats(min_value=-5, max_value=10, allow_nan=False)),
        setup=st.one_of(st.none(), st.sampled_from(["Breakout", "Pullback"])),
        tags=st.lists(st.sampled_from(["FOMO", "Patient", "Late"]), unique=True, max_size=3),
        notes=st.text(alphabet=st.characters(blacklist_categories=("Cs", "Cc")), max_size=50),
        status=st.sampled_from([None, "open", "closed"]),
        exit_date=st.one_of(st.none(), st.dates(min_value=date(2020, 1, 1), max_value=date(2025, 12, 31))),
    )


def make_trade(trade_id: str, day: date, pnl: float = 10.0, **kwargs) -> Trade:
    return Trade(
        id=trade_id,
        date=day,
        symbol="AAPL",
        direction="long",
        entry_price=100.0,
        exit_price=101.0,
        pnl=pnl,
        **kwargs,
    )


class TestDatabaseSchemaCompleteness:
    """
    **Feature: trade-journal, Property 39: Database Schema Completeness**

    *For any* fresh database, all required tables (trades, journal, tags,
    setups, categories, filter_presets) should exist.
    """

    def test_schema_completeness(self, temp_db: DataStore):
        tables = temp_db.get_tables()

        for table in DataStore.REQUIRED_TABLES:
            assert table in tables, f"Required table '{table}' is missing"

    def test_reopen_keeps_data(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "nested" / "journal.db"
            DataStore(db_path).save_trade(make_trade("t1", date(2024, 1, 2)))

            assert [t.id for t in DataStore(db_path).load_trades()] == ["t1"]


class TestTradePersistence:
    """
    **Feature: trade-journal, Property 40: Trade Persistence Round Trip**

    *For any* trade collection, saving then loading returns the same
    trades.
    """

    @given(trades=st.lists(trade_strategy(), max_size=10, unique_by=lambda t: t.id))
    @settings(max_examples=30, deadline=None)
    def test_save_and_load(self, trades: list[Trade]):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "test.db")
            store.save_trades(trades)

            loaded = store.load_trades()

        assert sorted(loaded, key=lambda t: t.id) == sorted(trades, key=lambda t: t.id)

    def test_save_trades_replaces(self, temp_db: DataStore):
        temp_db.save_trades([make_trade("a", date(2024, 1, 1)), make_trade("b", date(2024, 1, 2))])
        temp_db.save_trades([make_trade("c", date(2024, 1, 3))])

        assert [t.id for t in temp_db.load_trades()] == ["c"]

    def test_upsert_and_order(self, temp_db: DataStore):
        temp_db.save_trade(make_trade("late", date(2024, 1, 2), entry_time="15:00"))
        temp_db.save_trade(make_trade("early", date(2024, 1, 2), entry_time="09:30"))
        temp_db.save_trade(make_trade("first", date(2024, 1, 1)))
        temp_db.save_trade(make_trade("late", date(2024, 1, 2), pnl=-5.0, entry_time="15:00"))

        trades = temp_db.load_trades()

        assert [t.id for t in trades] == ["first", "early", "late"]
        assert trades[-1].pnl == -5.0
        assert [t.id for t in temp_db.load_trades(trade_date=date(2024, 1, 1))] == ["first"]

    def test_resave_keeps_position(self, temp_db: DataStore):
        day = date(2024, 1, 2)
        temp_db.save_trades([make_trade("a", day), make_trade("b", day), make_trade("c", day)])

        temp_db.save_trade(make_trade("a", day, pnl=-3.0))
        temp_db.save_trade(make_trade("d", day))

        trades = temp_db.load_trades()

        assert [t.id for t in trades] == ["a", "b", "c", "d"]
        assert trades[0].pnl == -3.0

    @pytest.mark.parametrize("field", ["pnl", "rr", "entry_price", "exit_price"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_values_rejected(self, field: str, value: float):
        data = make_trade("t1", date(2024, 1, 2), rr=1.0).model_dump()
        data[field] = value

        with pytest.raises(ValidationError):
            Trade.model_validate(data)

    def test_get_and_delete(self, temp_db: DataStore):
        temp_db.save_trade(make_trade("t1", date(2024, 1, 2), tags=["FOMO"]))

        assert temp_db.get_trade("t1").tags == ["FOMO"]
        assert temp_db.get_trade("missing") is None

        temp_db.delete_trade("t1")
        assert temp_db.load_trades() == []

        with pytest.raises(ValueError):
            temp_db.delete_trade("t1")

    def test_malformed_row_rejected(self, temp_db: DataStore):
        conn = sqlite3.connect(temp_db.db_path)
        try:
            conn.execute(
                "INSERT INTO trades (id, position, date, symbol, direction, entry_price, quantity, pnl) "
                "VALUES ('bad', 0, '2024-01-02', 'AAPL', 'sideways', 100, 1, 0)"
            )
            conn.commit()
        finally:
            conn.close()

        with pytest.raises(ValidationError):
            temp_db.load_trades()


class TestJournalPersistence:
    """
    **Feature: trade-journal, Property 41: One Journal Entry Per Day**
    """

    def test_entry_replaced_by_date(self, temp_db: DataStore):
        day = date(2024, 1, 2)
        temp_db.save_journal_entry(JournalEntry(date=day, notes="first"))
        temp_db.save_journal_entry(
            JournalEntry(date=day, notes="second", followed_system=True, mood="good")
        )

        entries = temp_db.load_journal_entries()

        assert len(entries) == 1
        assert entries[0].notes == "second"
        assert entries[0].followed_system is True
        assert entries[0].mood == "good"

    def test_newest_first_and_from_date(self, temp_db: DataStore):
        temp_db.save_journal_entries([
            JournalEntry(date=date(2024, 1, d), is_news_day=d == 2) for d in (1, 2, 3)
        ])

        entries = temp_db.load_journal_entries()

        assert [e.date.day for e in entries] == [3, 2, 1]
        assert [e.is_news_day for e in entries] == [False, True, False]
        assert [e.date.day for e in temp_db.load_journal_entries(from_date=date(2024, 1, 2))] == [3, 2]


class TestCatalogPersistence:
    """
    **Feature: trade-journal, Property 42: Catalog CRUD**
    """

    def test_tags_keep_catalog_order(self, temp_db: DataStore):
        temp_db.save_tag(CustomTag(id="b", name="B"))
        temp_db.save_tag(CustomTag(id="a", name="A"))
        temp_db.save_tag(CustomTag(id="b", name="B2"))

        tags = temp_db.load_tags()

        assert [t.id for t in tags] == ["b", "a"]
        assert tags[0].name == "B2"

    def test_save_tags_normalizes(self, temp_db: DataStore):
        catalog = [
            CustomTag(id="a", name="A", relationships=TagRelationships(mutually_exclusive_with=["b"])),
            CustomTag(id="b", name="B"),
        ]

        temp_db.save_tags(catalog, normalize=True)

        by_id = {t.id: t for t in temp_db.load_tags()}
        assert by_id["b"].relationships.mutually_exclusive_with == ["a"]

    def test_delete_tag_drops_references(self, temp_db: DataStore):
        temp_db.save_tags([
            CustomTag(id="a", name="A", relationships=TagRelationships(
                mutually_exclusive_with=["b"], suggested_with=["b"],
            )),
            CustomTag(id="b", name="B"),
        ])

        temp_db.delete_tag("b")

        tags = temp_db.load_tags()
        assert [t.id for t in tags] == ["a"]
        assert tags[0].relationships.mutually_exclusive_with == []
        assert tags[0].relationships.suggested_with == []

        with pytest.raises(ValueError):
            temp_db.delete_tag("b")

    def test_setups_and_categories(self, temp_db: DataStore):
        temp_db.save_setup(CustomSetup(id="bo", name="Breakout"))
        temp_db.save_category(Category(id="psych", name="Psychology", kind="tag"))
        temp_db.save_category(Category(id="pat", name="Patterns", kind="setup"))

        assert [s.name for s in temp_db.load_setups()] == ["Breakout"]
        assert [c.id for c in temp_db.load_categories()] == ["psych", "pat"]
        assert [c.id for c in temp_db.load_categories(kind="setup")] == ["pat"]

        temp_db.delete_setup("bo")
        temp_db.delete_category("pat")
        assert temp_db.load_setups() == []
        assert [c.id for c in temp_db.load_categories()] == ["psych"]

        with pytest.raises(ValueError):
            temp_db.delete_setup("bo")

    def test_filter_presets(self, temp_db: DataStore):
        preset = FilterPreset(
            id="p1",
            name="Big losers",
            filters=TradeFilters(outcome="losses", pnl_max=-100, symbols=["ES"]),
        )
        temp_db.save_filter_preset(preset)

        loaded = temp_db.load_filter_presets()

        assert loaded == [preset]

        temp_db.delete_filter_preset("p1")
        assert temp_db.load_filter_presets() == []

    def test_stats(self, temp_db: DataStore):
        temp_db.save_trade(make_trade("t1", date(2024, 1, 2)))
        temp_db.save_journal_entry(JournalEntry(date=date(2024, 1, 2)))

        stats = temp_db.get_stats()

        assert stats["trades"] == 1
        assert stats["journal"] == 1
        assert stats["tags"] == 0

"""SQLite data store for Trade Journal."""

import json
import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Optional, Type, TypeVar

from pydantic import BaseModel

from tradejournal.analytics.tags import symmetrize_exclusions
from tradejournal.models import (
    Category,
    CustomSetup,
    CustomTag,
    FilterPreset,
    JournalEntry,
    Trade,
)

logger = logging.getLogger(__name__)

Document = TypeVar("Document", bound=BaseModel)

TRADE_COLUMNS = (
    "id", "name", "date", "entry_time", "symbol", "direction", "entry_price",
    "exit_price", "quantity", "commission", "pnl", "rr", "setup", "tags",
    "notes", "status", "exit_date", "stop_loss", "target",
    "screenshot_before", "screenshot_after",
)

JOURNAL_COLUMNS = (
    "date", "followed_system", "notes", "mood", "lessons_learned",
    "market_conditions", "did_trade", "is_news_day",
)


class DataStore:
    """SQLite-based data store for trades, journal entries and catalogs.

    Trades and journal entries are stored column by column. Tags, setups,
    categories and filter presets are stored as JSON documents keyed by id.
    Rows are validated into models on the way out, so a malformed row raises
    ``pydantic.ValidationError``.
    """

    REQUIRED_TABLES = [
        "trades",
        "journal",
        "tags",
        "setups",
        "categories",
        "filter_presets",
    ]

    DOCUMENT_TABLES = {
        "tags": CustomTag,
        "setups": CustomSetup,
        "categories": Category,
        "filter_presets": FilterPreset,
    }

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id TEXT PRIMARY KEY,
                    position INTEGER NOT NULL,
                    name TEXT,
                    date TEXT NOT NULL,
                    entry_time TEXT,
                    symbol TEXT NOT NULL,
                    direction TEXT NOT NULL,
                    entry_price REAL NOT NULL,
                    exit_price REAL,
                    quantity REAL NOT NULL,
                    commission REAL NOT NULL DEFAULT 0,
                    pnl REAL NOT NULL,
                    rr REAL,
                    setup TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    notes TEXT NOT NULL DEFAULT '',
                    status TEXT,
                    exit_date TEXT,
                    stop_loss REAL,
                    target REAL,
                    screenshot_before TEXT,
                    screenshot_after TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS journal (
                    date TEXT PRIMARY KEY,
                    followed_system INTEGER NOT NULL DEFAULT 0,
                    notes TEXT NOT NULL DEFAULT '',
                    mood TEXT NOT NULL DEFAULT 'neutral',
                    lessons_learned TEXT NOT NULL DEFAULT '',
                    market_conditions TEXT NOT NULL DEFAULT '',
                    did_trade INTEGER NOT NULL DEFAULT 1,
                    is_news_day INTEGER NOT NULL DEFAULT 0
                )
            """)

            for table in self.DOCUMENT_TABLES:
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id TEXT PRIMARY KEY,
                        position INTEGER NOT NULL,
                        data TEXT NOT NULL
                    )
                """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Trades ====================

    @staticmethod
    def _trade_row(trade: Trade) -> tuple:
        data = trade.model_dump(mode="json")
        data["tags"] = json.dumps(data["tags"])
        return tuple(data[column] for column in TRADE_COLUMNS)

    @staticmethod
    def _row_to_trade(row: sqlite3.Row) -> Trade:
        data = {column: row[column] for column in TRADE_COLUMNS}
        data["tags"] = json.loads(data["tags"])
        return Trade.model_validate(data)

    def _insert_trades(self, cursor: sqlite3.Cursor, trades: list[Trade]) -> None:
        """Upsert trades. An updated trade keeps its original position."""
        cursor.execute("SELECT COALESCE(MAX(position), -1) + 1 AS next FROM trades")
        start = cursor.fetchone()["next"]
        placeholders = ", ".join("?" for _ in TRADE_COLUMNS)
        updates = ", ".join(f"{column} = excluded.{column}" for column in TRADE_COLUMNS[1:])
        cursor.executemany(
            f"""
            INSERT INTO trades (position, {', '.join(TRADE_COLUMNS)}) VALUES (?, {placeholders})
            ON CONFLICT(id) DO UPDATE SET {updates}
            """,
            [(start + offset, *self._trade_row(trade)) for offset, trade in enumerate(trades)],
        )

    def save_trade(self, trade: Trade) -> None:
        """Insert or update a single trade.

        Args:
            trade: Trade to save.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._insert_trades(cursor, [trade])
            conn.commit()
            logger.info("Saved trade %s (%s)", trade.id, trade.symbol)
        finally:
            conn.close()

    def save_trades(self, trades: list[Trade]) -> None:
        """Replace every stored trade with ``trades``.

        Args:
            trades: Complete trade collection.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM trades")
            self._insert_trades(cursor, trades)
            conn.commit()
            logger.info("Saved %d trades", len(trades))
        finally:
            conn.close()

    def load_trades(self, trade_date: Optional[date] = None) -> list[Trade]:
        """Load trades ordered by date and entry time.

        Args:
            trade_date: Optional entry date filter. If None, returns all trades.

        Returns:
            List of trades.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            columns = ", ".join(TRADE_COLUMNS)
            if trade_date:
                cursor.execute(
                    f"""
                    SELECT {columns} FROM trades
                    WHERE date = ?
                    ORDER BY date, COALESCE(entry_time, ''), position
                    """,
                    (trade_date.isoformat(),),
                )
            else:
                cursor.execute(
                    f"""
                    SELECT {columns} FROM trades
                    ORDER BY date, COALESCE(entry_time, ''), position
                    """
                )
            trades = [self._row_to_trade(row) for row in cursor.fetchall()]
            logger.debug("Loaded %d trades", len(trades))
            return trades
        finally:
            conn.close()

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        """Get a trade by ID.

        Args:
            trade_id: Trade ID.

        Returns:
            Trade if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {', '.join(TRADE_COLUMNS)} FROM trades WHERE id = ?",
                (trade_id,),
            )
            row = cursor.fetchone()
            return self._row_to_trade(row) if row else None
        finally:
            conn.close()

    def delete_trade(self, trade_id: str) -> None:
        """Delete a trade.

        Args:
            trade_id: ID of the trade to delete.

        Raises:
            ValueError: If no trade has this ID.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
            if cursor.rowcount == 0:
                raise ValueError(f"Unknown trade id: {trade_id}")
            conn.commit()
            logger.info("Deleted trade %s", trade_id)
        finally:
            conn.close()

    # ==================== Journal ====================

    @staticmethod
    def _journal_row(entry: JournalEntry) -> tuple:
        data = entry.model_dump(mode="json")
        for flag in ("followed_system", "did_trade", "is_news_day"):
            data[flag] = 1 if data[flag] else 0
        return tuple(data[column] for column in JOURNAL_COLUMNS)

    def _insert_journal(self, cursor: sqlite3.Cursor, entries: list[JournalEntry]) -> None:
        placeholders = ", ".join("?" for _ in JOURNAL_COLUMNS)
        cursor.executemany(
            f"INSERT OR REPLACE INTO journal ({', '.join(JOURNAL_COLUMNS)}) VALUES ({placeholders})",
            [self._journal_row(entry) for entry in entries],
        )

    def save_journal_entry(self, entry: JournalEntry) -> None:
        """Save a journal entry, replacing any entry for the same date.

        Args:
            entry: Journal entry to save.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            self._insert_journal(cursor, [entry])
            conn.commit()
            logger.info("Saved journal entry for %s", entry.date)
        finally:
            conn.close()

    def save_journal_entries(self, entries: list[JournalEntry]) -> None:
        """Replace every stored journal entry with ``entries``.

        Args:
            entries: Complete journal.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM journal")
            self._insert_journal(cursor, entries)
            conn.commit()
            logger.info("Saved %d journal entries", len(entries))
        finally:
            conn.close()

    def load_journal_entries(self, from_date: Optional[date] = None) -> list[JournalEntry]:
        """Load journal entries, newest first.

        Args:
            from_date: Optional start date filter.

        Returns:
            List of journal entries.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            columns = ", ".join(JOURNAL_COLUMNS)
            if from_date:
                cursor.execute(
                    f"SELECT {columns} FROM journal WHERE date >= ? ORDER BY date DESC",
                    (from_date.isoformat(),),
                )
            else:
                cursor.execute(f"SELECT {columns} FROM journal ORDER BY date DESC")
            entries = [
                JournalEntry.model_validate({column: row[column] for column in JOURNAL_COLUMNS})
                for row in cursor.fetchall()
            ]
            logger.debug("Loaded %d journal entries", len(entries))
            return entries
        finally:
            conn.close()

    # ==================== Documents ====================

    def _save_documents(self, table: str, documents: list[BaseModel], replace: bool) -> None:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if replace:
                cursor.execute(f"DELETE FROM {table}")
                start = 0
            else:
                cursor.execute(f"SELECT COALESCE(MAX(position), -1) + 1 AS next FROM {table}")
                start = cursor.fetchone()["next"]
            for offset, document in enumerate(documents):
                cursor.execute(
                    f"""
                    INSERT INTO {table} (id, position, data) VALUES (?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET data = excluded.data
                    """,
                    (document.id, start + offset, document.model_dump_json()),
                )
            conn.commit()
            logger.info("Saved %d %s", len(documents), table)
        finally:
            conn.close()

    def _load_documents(self, table: str, model: Type[Document]) -> list[Document]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"SELECT data FROM {table} ORDER BY position")
            return [model.model_validate_json(row["data"]) for row in cursor.fetchall()]
        finally:
            conn.close()

    def _delete_document(self, table: str, document_id: str) -> None:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(f"DELETE FROM {table} WHERE id = ?", (document_id,))
            if cursor.rowcount == 0:
                raise ValueError(f"Unknown id in {table}: {document_id}")
            conn.commit()
            logger.info("Deleted %s from %s", document_id, table)
        finally:
            conn.close()

    # ==================== Tags ====================

    def save_tag(self, tag: CustomTag) -> None:
        """Insert or update a tag, keeping its catalog position."""
        self._save_documents("tags", [tag], replace=False)

    def save_tags(self, tags: list[CustomTag], normalize: bool = False) -> None:
        """Replace the tag catalog.

        Args:
            tags: Complete tag catalog.
            normalize: Make mutual exclusions symmetric before writing.
        """
        if normalize:
            tags = symmetrize_exclusions(tags)
        self._save_documents("tags", tags, replace=True)

    def load_tags(self) -> list[CustomTag]:
        """Load the tag catalog in catalog order."""
        return self._load_documents("tags", CustomTag)

    def delete_tag(self, tag_id: str) -> None:
        """Delete a tag and drop references to it from other tags.

        Raises:
            ValueError: If no tag has this ID.
        """
        self._delete_document("tags", tag_id)
        cleaned = []
        for tag in self.load_tags():
            rel = tag.relationships
            cleaned.append(tag.model_copy(update={"relationships": rel.model_copy(update={
                "mutually_exclusive_with": [i for i in rel.mutually_exclusive_with if i != tag_id],
                "suggested_with": [i for i in rel.suggested_with if i != tag_id],
                "required_with": [i for i in rel.required_with if i != tag_id],
            })}))
        self._save_documents("tags", cleaned, replace=True)

    # ==================== Setups ====================

    def save_setup(self, setup: CustomSetup) -> None:
        """Insert or update a setup."""
        self._save_documents("setups", [setup], replace=False)

    def save_setups(self, setups: list[CustomSetup]) -> None:
        """Replace the setup catalog."""
        self._save_documents("setups", setups, replace=True)

    def load_setups(self) -> list[CustomSetup]:
        """Load the setup catalog in catalog order."""
        return self._load_documents("setups", CustomSetup)

    def delete_setup(self, setup_id: str) -> None:
        """Delete a setup.

        Raises:
            ValueError: If no setup has this ID.
        """
        self._delete_document("setups", setup_id)

    # ==================== Categories ====================

    def save_category(self, category: Category) -> None:
        """Insert or update a category."""
        self._save_documents("categories", [category], replace=False)

    def load_categories(self, kind: Optional[str] = None) -> list[Category]:
        """Load categories, optionally only those of one kind ('tag' or 'setup')."""
        categories = self._load_documents("categories", Category)
        if kind is not None:
            categories = [c for c in categories if c.kind == kind]
        return categories

    def delete_category(self, category_id: str) -> None:
        """Delete a category.

        Raises:
            ValueError: If no category has this ID.
        """
        self._delete_document("categories", category_id)

    # ==================== Filter Presets ====================

    def save_filter_preset(self, preset: FilterPreset) -> None:
        """Insert or update a filter preset."""
        self._save_documents("filter_presets", [preset], replace=False)

    def load_filter_presets(self) -> list[FilterPreset]:
        """Load filter presets in creation order."""
        return self._load_documents("filter_presets", FilterPreset)

    def delete_filter_preset(self, preset_id: str) -> None:
        """Delete a filter preset.

        Raises:
            ValueError: If no preset has this ID.
        """
        self._delete_document("filter_presets", preset_id)

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()

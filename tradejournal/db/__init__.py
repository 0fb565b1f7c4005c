"""Persistence for trades, journal entries and tag catalogs."""

from tradejournal.db.store import DataStore

__all__ = ["DataStore"]

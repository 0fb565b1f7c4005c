"""CLI commands for Trade Journal.

This package provides the command-line interface for reviewing
performance, logging trades and journal entries, and managing tags.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]

"""Helpers shared by the CLI command modules."""

from datetime import date, datetime
from typing import NoReturn, Optional

import click
from rich.panel import Panel

from tradejournal.cli.main import console
from tradejournal.config import get_db_path, load_config
from tradejournal.db.store import DataStore

DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


def get_config(ctx: click.Context) -> dict:
    """Load configuration for the running command."""
    obj = ctx.find_root().obj or {}
    return load_config(obj.get("config_path"))


def get_data_store(config: dict) -> DataStore:
    """Get the data store configured for this run."""
    return DataStore(get_db_path(config))


def to_date(value: Optional[datetime]) -> Optional[date]:
    """Convert a click DateTime value to a date."""
    return value.date() if value is not None else None


def fail(message: str, title: str = "Error") -> NoReturn:
    """Print an error panel and exit with status 1."""
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def signed(value: float, fmt: str = ",.2f", suffix: str = "") -> str:
    """Format a value with a sign and green/red markup."""
    if value == float("inf"):
        return "[green]∞[/green]"
    color = "green" if value >= 0 else "red"
    sign = "+" if value > 0 else ""
    return f"[{color}]{sign}{value:{fmt}}{suffix}[/{color}]"

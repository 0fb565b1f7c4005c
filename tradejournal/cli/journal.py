"""Journal commands for Trade Journal CLI.

Handles listing and filtering trades, logging trades and writing
daily journal entries.
"""

import uuid
from datetime import date, datetime
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.analytics.filters import filter_trades
from tradejournal.analytics.validation import validate_trade
from tradejournal.cli.common import DATE_TYPE, fail, get_config, get_data_store, signed, to_date
from tradejournal.cli.main import console
from tradejournal.models import FilterPreset, JournalEntry, Trade, TradeFilters


@click.command()
@click.option("--search", "search_query", default=None, help="Search symbol, setup, notes and tags.")
@click.option("--from", "date_from", type=DATE_TYPE, default=None, help="Start date (YYYY-MM-DD).")
@click.option("--to", "date_to", type=DATE_TYPE, default=None, help="End date (YYYY-MM-DD).")
@click.option("--symbol", "symbols", multiple=True, help="Symbol to include (repeatable).")
@click.option("--setup", "setups", multiple=True, help="Setup to include (repeatable).")
@click.option("--tag", "tags", multiple=True, help="Tag to include (repeatable).")
@click.option("--outcome", type=click.Choice(["wins", "losses", "breakeven"]), default=None)
@click.option("--status", type=click.Choice(["open", "closed", "all"]), default=None)
@click.option("--direction", type=click.Choice(["long", "short", "all"]), default=None)
@click.option("--pnl-min", type=float, default=None, help="Minimum P&L.")
@click.option("--pnl-max", type=float, default=None, help="Maximum P&L.")
@click.option("--rr-min", type=float, default=None, help="Minimum R multiple.")
@click.option("--rr-max", type=float, default=None, help="Maximum R multiple.")
@click.option("--rule-breaking", is_flag=True, default=False, help="Only days the system was broken.")
@click.option("--has-notes", is_flag=True, default=False, help="Only trades with notes.")
@click.option("--has-tags", is_flag=True, default=False, help="Only trades with tags.")
@click.option("--has-screenshots", is_flag=True, default=False, help="Only trades with screenshots.")
@click.option("--preset", default=None, help="Apply a saved filter preset by name.")
@click.option("--save-preset", default=None, help="Save these filters as a named preset.")
@click.pass_context
def trades(
    ctx: click.Context,
    search_query: Optional[str],
    date_from: Optional[datetime],
    date_to: Optional[datetime],
    symbols: tuple[str, ...],
    setups: tuple[str, ...],
    tags: tuple[str, ...],
    outcome: Optional[str],
    status: Optional[str],
    direction: Optional[str],
    pnl_min: Optional[float],
    pnl_max: Optional[float],
    rr_min: Optional[float],
    rr_max: Optional[float],
    rule_breaking: bool,
    has_notes: bool,
    has_tags: bool,
    has_screenshots: bool,
    preset: Optional[str],
    save_preset: Optional[str],
) -> None:
    """List trades matching the given filters.

    Multiple values of one option match any of them; different options
    must all match.

    \b
    Examples:
      tradejournal trades
      tradejournal trades --outcome losses --setup Breakout
      tradejournal trades --tag FOMO --tag Revenge --rule-breaking
      tradejournal trades --rr-min 2 --save-preset "big winners"
    """
    try:
        config = get_config(ctx)
        store = get_data_store(config)

        if preset:
            matches = [p for p in store.load_filter_presets() if p.name == preset]
            if not matches:
                raise ValueError(f"Unknown filter preset: {preset}")
            filters = matches[0].filters
        else:
            filters = TradeFilters(
                search_query=search_query,
                date_from=to_date(date_from),
                date_to=to_date(date_to),
                symbols=list(symbols),
                setups=list(setups),
                tags=list(tags),
                outcome=outcome,
                status=status,
                direction=direction,
                pnl_min=pnl_min,
                pnl_max=pnl_max,
                rr_min=rr_min,
                rr_max=rr_max,
                rule_breaking=rule_breaking,
                has_notes=has_notes,
                has_tags=has_tags,
                has_screenshots=has_screenshots,
            )

        if save_preset:
            store.save_filter_preset(
                FilterPreset(id=uuid.uuid4().hex, name=save_preset, filters=filters)
            )
            console.print(f"[green]Saved filter preset[/green] [bold]{save_preset}[/bold]")

        all_trades = store.load_trades()
        entries = store.load_journal_entries() if filters.rule_breaking else []
    except ValueError as e:
        fail(str(e))

    matched = filter_trades(all_trades, entries, filters)

    if not matched:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title="[bold]Trade Journal[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title="Trade Journal",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Date", style="dim")
    table.add_column("Symbol", style="bold")
    table.add_column("Side", justify="center")
    table.add_column("Entry", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("R", justify="right")
    table.add_column("Setup")
    table.add_column("Tags", max_width=20)

    total_pnl = 0.0
    for trade in matched:
        side_color = "green" if trade.direction == "long" else "red"
        if trade.is_closed:
            pnl_str = signed(trade.pnl)
            total_pnl += trade.pnl
        else:
            pnl_str = "[yellow]open[/yellow]"
        table.add_row(
            trade.date.strftime("%Y-%m-%d"),
            trade.symbol,
            f"[{side_color}]{trade.direction.upper()}[/{side_color}]",
            f"{trade.entry_price:,.2f}",
            f"{trade.exit_price:,.2f}" if trade.exit_price is not None else "-",
            pnl_str,
            f"{trade.rr:.2f}" if trade.rr is not None else "-",
            trade.setup or "-",
            ", ".join(trade.tags) or "-",
        )

    console.print(table)

    console.print(f"\n[bold]Matched:[/bold] {len(matched)} of {len(all_trades)}")
    console.print(f"[bold]Total P&L:[/bold] {signed(total_pnl)}")


@click.command(name="add-trade")
@click.argument("symbol")
@click.argument("direction", type=click.Choice(["long", "short"]))
@click.option("--entry", "entry_price", type=float, required=True, help="Entry price.")
@click.option("--exit", "exit_price", type=float, default=None, help="Exit price (omit while open).")
@click.option("--qty", "quantity", type=float, default=1.0, show_default=True, help="Position size.")
@click.option("--commission", type=float, default=0.0, help="Fees paid.")
@click.option("--pnl", type=float, default=None, help="Realized P&L (computed from prices if omitted).")
@click.option("--rr", type=float, default=None, help="Realized R multiple.")
@click.option("--setup", default=None, help="Setup label.")
@click.option("--tag", "tags", multiple=True, help="Tag name (repeatable).")
@click.option("--notes", default="", help="Trade notes.")
@click.option("--date", "trade_date", type=DATE_TYPE, default=None, help="Entry date (default today).")
@click.option("--time", "entry_time", default=None, help="Entry time (HH:MM).")
@click.option("--exit-date", type=DATE_TYPE, default=None, help="Exit date if different from entry.")
@click.option("--stop", "stop_loss", type=float, default=None, help="Stop loss price.")
@click.option("--target", type=float, default=None, help="Target price.")
@click.option("--status", type=click.Choice(["open", "closed"]), default=None)
@click.option("--force", is_flag=True, default=False, help="Save even if there are warnings.")
@click.pass_context
def add_trade(
    ctx: click.Context,
    symbol: str,
    direction: str,
    entry_price: float,
    exit_price: Optional[float],
    quantity: float,
    commission: float,
    pnl: Optional[float],
    rr: Optional[float],
    setup: Optional[str],
    tags: tuple[str, ...],
    notes: str,
    trade_date: Optional[datetime],
    entry_time: Optional[str],
    exit_date: Optional[datetime],
    stop_loss: Optional[float],
    target: Optional[float],
    status: Optional[str],
    force: bool,
) -> None:
    """Log a trade.

    \b
    Examples:
      tradejournal add-trade AAPL long --entry 180 --exit 185 --qty 100
      tradejournal add-trade ES short --entry 5020 --pnl -250 --rr -1 --tag FOMO
    """
    if pnl is None and exit_price is not None:
        sign = 1 if direction == "long" else -1
        pnl = sign * (exit_price - entry_price) * quantity - commission

    fields = {
        "id": uuid.uuid4().hex,
        "date": to_date(trade_date) or date.today(),
        "entry_time": entry_time,
        "symbol": symbol.upper(),
        "direction": direction,
        "entry_price": entry_price,
        "exit_price": exit_price,
        "quantity": quantity,
        "commission": commission,
        "pnl": pnl or 0.0,
        "rr": rr,
        "setup": setup,
        "tags": list(dict.fromkeys(tags)),
        "notes": notes,
        "status": status,
        "exit_date": to_date(exit_date),
        "stop_loss": stop_loss,
        "target": target,
    }

    errors, warnings = validate_trade(fields)
    if errors:
        fail("\n".join(f"{e.field}: {e.message}" for e in errors), title="Invalid Trade")

    for warning in warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning.message}")
    if warnings and not force:
        fail("Trade not saved. Re-run with --force to save anyway.", title="Check Trade")

    try:
        trade = Trade.model_validate(fields)
        get_data_store(get_config(ctx)).save_trade(trade)
    except ValueError as e:
        fail(f"Failed to save trade:\n\n{e}")

    state = "[green]closed[/green]" if trade.is_closed else "[yellow]open[/yellow]"
    console.print(Panel(
        f"[bold]{trade.symbol}[/bold] {trade.direction.upper()} @ {trade.entry_price:,.2f} ({state})\n"
        f"P&L: {signed(trade.pnl)}\n"
        f"[dim]ID: {trade.id}[/dim]",
        title="[bold green]Trade Logged[/bold green]",
        border_style="green",
    ))


@click.command(name="add-entry")
@click.option("--date", "entry_date", type=DATE_TYPE, default=None, help="Entry date (default today).")
@click.option(
    "--followed/--not-followed",
    "followed_system",
    default=False,
    help="Whether you followed your trading system.",
)
@click.option("--notes", default="", help="Reflection for the day.")
@click.option(
    "--mood",
    type=click.Choice(["excellent", "good", "neutral", "poor", "terrible"]),
    default="neutral",
    show_default=True,
)
@click.option("--lessons", "lessons_learned", default="", help="Lessons learned.")
@click.option("--conditions", "market_conditions", default="", help="Market conditions.")
@click.option("--no-trade", is_flag=True, default=False, help="No trades were taken today.")
@click.option("--news-day", is_flag=True, default=False, help="High-impact news day.")
@click.pass_context
def add_entry(
    ctx: click.Context,
    entry_date: Optional[datetime],
    followed_system: bool,
    notes: str,
    mood: str,
    lessons_learned: str,
    market_conditions: str,
    no_trade: bool,
    news_day: bool,
) -> None:
    """Write the daily journal entry.

    An existing entry for the same date is replaced.

    \b
    Examples:
      tradejournal add-entry --followed --mood good --notes "Patient entries"
      tradejournal add-entry --date 2024-03-01 --not-followed --lessons "Stop chasing"
    """
    try:
        entry = JournalEntry(
            date=to_date(entry_date) or date.today(),
            followed_system=followed_system,
            notes=notes,
            mood=mood,
            lessons_learned=lessons_learned,
            market_conditions=market_conditions,
            did_trade=not no_trade,
            is_news_day=news_day,
        )
        get_data_store(get_config(ctx)).save_journal_entry(entry)
    except ValueError as e:
        fail(f"Failed to save journal entry:\n\n{e}")

    followed = "[green]yes[/green]" if entry.followed_system else "[red]no[/red]"
    console.print(Panel(
        f"[bold]{entry.date.strftime('%Y-%m-%d')}[/bold]\n"
        f"Followed system: {followed}\n"
        f"Mood: {entry.mood}",
        title="[bold green]Journal Saved[/bold green]",
        border_style="green",
    ))

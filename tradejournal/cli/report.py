"""Report commands for Trade Journal CLI.

Handles statistics, streaks, achievements, personal bests and
growth comparison.
"""

from datetime import date, datetime
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.analytics.achievements import calculate_achievements, sort_achievements
from tradejournal.analytics.growth import PeriodComparison, calculate_growth_comparison
from tradejournal.analytics.personal_bests import calculate_personal_bests
from tradejournal.analytics.statistics import DisplayMode, calculate_statistics
from tradejournal.analytics.streaks import StreakContinuity, calculate_streaks, distress_warning
from tradejournal.cli.common import DATE_TYPE, fail, get_config, get_data_store, signed, to_date
from tradejournal.cli.main import console
from tradejournal.config import get_setting

MODE_OPTION = click.option(
    "--mode",
    type=click.Choice(["pnl", "rr"]),
    default=None,
    help="Show values as P&L or R multiples (default from config).",
)


def _display_mode(config: dict, mode: Optional[str]) -> DisplayMode:
    return DisplayMode(mode or get_setting(config, "display", "mode"))


@click.command()
@MODE_OPTION
@click.option("--from", "date_from", type=DATE_TYPE, default=None, help="Start date (YYYY-MM-DD).")
@click.option("--to", "date_to", type=DATE_TYPE, default=None, help="End date (YYYY-MM-DD).")
@click.pass_context
def stats(
    ctx: click.Context,
    mode: Optional[str],
    date_from: Optional[datetime],
    date_to: Optional[datetime],
) -> None:
    """Display performance statistics.

    \b
    Examples:
      tradejournal stats
      tradejournal stats --mode rr
      tradejournal stats --from 2024-01-01 --to 2024-03-31
    """
    try:
        config = get_config(ctx)
        display = _display_mode(config, mode)
        trades = get_data_store(config).load_trades()
    except ValueError as e:
        fail(f"Failed to load trades:\n\n{e}")

    start, end = to_date(date_from), to_date(date_to)
    trades = [
        t for t in trades
        if (start is None or t.date >= start) and (end is None or t.date <= end)
    ]
    result = calculate_statistics(trades)

    if result.total_trades == 0:
        console.print(Panel(
            f"[dim]No closed trades found[/dim]\n\nOpen trades: {result.open_trades}",
            title="[bold]Statistics[/bold]",
            border_style="dim",
        ))
        return

    rr = display == DisplayMode.RR
    unit = "R" if rr else ""
    fmt = ".2f" if rr else ",.2f"

    summary = (
        f"Trades: {result.total_trades} "
        f"([green]{result.winning_trades}W[/green] / [red]{result.losing_trades}L[/red] / "
        f"{result.breakeven_trades}BE)   Open: {result.open_trades}\n"
        f"Win Rate: {result.win_rate:.1f}%\n\n"
        f"Total:         {signed(result.total_rr if rr else result.total_pnl, fmt, unit)}\n"
        f"Expectancy:    {signed(result.expectancy_rr if rr else result.expectancy, fmt, unit)}\n"
        f"Profit Factor: {signed(result.profit_factor_rr if rr else result.profit_factor, '.2f')}\n"
        f"Avg Win:       {signed(result.avg_win_rr if rr else result.avg_win, fmt, unit)}\n"
        f"Avg Loss:      {signed(result.avg_loss_rr if rr else result.avg_loss, fmt, unit)}\n"
        f"Best Day:      {signed(result.best_day_rr if rr else result.best_day, fmt, unit)}\n"
        f"Worst Day:     {signed(result.worst_day_rr if rr else result.worst_day, fmt, unit)}\n"
        f"Max Drawdown:  {(result.max_drawdown_rr if rr else result.max_drawdown):{fmt}}{unit}"
        f" over {result.max_drawdown_duration} days\n"
        f"Trade Streak:  {result.current_streak:+d} "
        f"(best {result.longest_win_streak}W / worst {result.longest_lose_streak}L)\n"
        f"Recovery Time: {result.recovery_time:.1f} days"
    )
    console.print(Panel(summary, title="[bold cyan]Statistics[/bold cyan]", border_style="cyan"))

    table = Table(title="By Weekday", show_header=True, header_style="bold cyan")
    table.add_column("Day", style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("P&L" if not rr else "R", justify="right")
    for weekday, bucket in result.performance_by_day.items():
        if bucket.trades == 0:
            continue
        table.add_row(
            weekday.value,
            str(bucket.trades),
            f"{bucket.win_rate:.1f}%",
            signed(bucket.rr if rr else bucket.pnl, fmt, unit),
        )
    console.print(table)

    if result.performance_by_setup:
        table = Table(title="By Setup", show_header=True, header_style="bold cyan")
        table.add_column("Setup", style="bold")
        table.add_column("Trades", justify="right")
        table.add_column("Win Rate", justify="right")
        table.add_column("P&L" if not rr else "R", justify="right")
        for setup, bucket in result.performance_by_setup.items():
            table.add_row(
                setup,
                str(bucket.trades),
                f"{bucket.win_rate:.1f}%",
                signed(bucket.rr if rr else bucket.pnl, fmt, unit),
            )
        console.print(table)


@click.command()
@MODE_OPTION
@click.option(
    "--continuity",
    type=click.Choice([c.value for c in StreakContinuity]),
    default=None,
    help="Whether weekends break streaks (default from config).",
)
@click.option("--as-of", "as_of", type=DATE_TYPE, default=None, help="Reference date (default today).")
@click.pass_context
def streaks(
    ctx: click.Context,
    mode: Optional[str],
    continuity: Optional[str],
    as_of: Optional[datetime],
) -> None:
    """Display current and best streaks.

    \b
    Examples:
      tradejournal streaks
      tradejournal streaks --continuity business
    """
    try:
        config = get_config(ctx)
        store = get_data_store(config)
        trades = store.load_trades()
        entries = store.load_journal_entries()
        policy = StreakContinuity(continuity or get_setting(config, "streaks", "continuity"))
        threshold = int(get_setting(config, "streaks", "distress_threshold"))
        display = _display_mode(config, mode)
    except ValueError as e:
        fail(f"Failed to load journal:\n\n{e}")

    result = calculate_streaks(
        trades,
        entries,
        mode=display,
        continuity=policy,
        as_of=to_date(as_of) or date.today(),
    )

    table = Table(title="Streaks", show_header=True, header_style="bold cyan")
    table.add_column("Streak", style="bold")
    table.add_column("Current", justify="right")
    table.add_column("Best", justify="right")
    table.add_row(
        "Winning days",
        f"[green]{result.current_winning_streak}[/green]",
        str(result.best_winning_streak),
    )
    table.add_row(
        "Losing days",
        f"[red]{result.current_losing_streak}[/red]",
        str(result.longest_losing_streak),
    )
    table.add_row("Trading days", str(result.trading_days_streak), str(result.best_trading_days_streak))
    table.add_row("Journal days", str(result.journal_streak), str(result.best_journal_streak))
    table.add_row(
        "System followed",
        str(result.system_adherence_streak),
        str(result.best_system_adherence_streak),
    )
    console.print(table)

    if distress_warning(result, threshold):
        console.print(Panel(
            f"[yellow]{result.current_losing_streak} losing days in a row.[/yellow]\n\n"
            "Consider reducing size or taking a break to review your process.",
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
        ))


@click.command()
@click.option("--all", "show_all", is_flag=True, default=False, help="Include locked achievements.")
@click.pass_context
def achievements(ctx: click.Context, show_all: bool) -> None:
    """Display achievement progress.

    \b
    Examples:
      tradejournal achievements
      tradejournal achievements --all
    """
    try:
        config = get_config(ctx)
        store = get_data_store(config)
        trades = store.load_trades()
        entries = store.load_journal_entries()
    except ValueError as e:
        fail(f"Failed to load journal:\n\n{e}")

    results = sort_achievements(
        calculate_achievements(trades, calculate_statistics(trades), entries)
    )

    table = Table(title="Achievements", show_header=True, header_style="bold cyan")
    table.add_column("", justify="center")
    table.add_column("Achievement", style="bold")
    table.add_column("Progress", justify="right")
    table.add_column("Current", justify="right")
    for achievement in results:
        if not achievement.is_unlocked and not show_all and achievement.progress == 0:
            continue
        table.add_row(
            "[green]✓[/green]" if achievement.is_unlocked else "[dim]·[/dim]",
            f"{achievement.title}\n[dim]{achievement.description}[/dim]",
            f"{achievement.progress:.0f}%",
            achievement.formatted_current,
        )
    console.print(table)

    unlocked = sum(1 for a in results if a.is_unlocked)
    console.print(f"\n[bold]Unlocked:[/bold] {unlocked}/{len(results)}")


@click.command()
@click.option("--limit", type=int, default=None, help="Maximum records to show (default from config).")
@click.option("--recent-days", type=int, default=None, help="Days a record counts as new.")
@click.pass_context
def bests(ctx: click.Context, limit: Optional[int], recent_days: Optional[int]) -> None:
    """Display personal records.

    \b
    Examples:
      tradejournal bests
      tradejournal bests --limit 10
    """
    try:
        config = get_config(ctx)
        trades = get_data_store(config).load_trades()
    except ValueError as e:
        fail(f"Failed to load trades:\n\n{e}")

    records = calculate_personal_bests(
        trades,
        recent_days=recent_days or int(get_setting(config, "bests", "recent_days")),
        limit=limit or int(get_setting(config, "bests", "limit")),
    )

    if not records:
        console.print(Panel(
            "[dim]No personal records yet[/dim]",
            title="[bold]Personal Bests[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Personal Bests", show_header=True, header_style="bold cyan")
    table.add_column("Record", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Date", style="dim")
    table.add_column("Details")
    for record in records:
        title = f"{record.title} [yellow]NEW[/yellow]" if record.is_recent else record.title
        table.add_row(
            title,
            record.formatted_value,
            record.date.strftime("%Y-%m-%d"),
            record.description,
        )
    console.print(table)


def _comparison_table(title: str, comparisons: list[PeriodComparison]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Current", justify="right")
    table.add_column("Previous", justify="right")
    table.add_column("Change", justify="right")
    for row in comparisons:
        if row.trend == "neutral":
            change = "[dim]-[/dim]"
        else:
            color = "green" if row.is_positive else "red"
            arrow = "▲" if row.trend == "up" else "▼"
            change = f"[{color}]{arrow} {row.change_percent:+.1f}%[/{color}]"
        table.add_row(row.label, f"{row.current:,.2f}", f"{row.previous:,.2f}", change)
    return table


@click.command()
@MODE_OPTION
@click.option("--as-of", "as_of", type=DATE_TYPE, default=None, help="Reference date (default today).")
@click.pass_context
def growth(ctx: click.Context, mode: Optional[str], as_of: Optional[datetime]) -> None:
    """Compare this month, quarter and last 30 days to the prior period.

    \b
    Examples:
      tradejournal growth
      tradejournal growth --mode rr
    """
    try:
        config = get_config(ctx)
        display = _display_mode(config, mode)
        trades = get_data_store(config).load_trades()
    except ValueError as e:
        fail(f"Failed to load trades:\n\n{e}")

    result = calculate_growth_comparison(trades, today=to_date(as_of), mode=display)

    console.print(_comparison_table(
        f"{result.current_month} vs {result.previous_month}", result.month_over_month
    ))
    console.print(_comparison_table(
        f"{result.current_quarter} vs {result.previous_quarter}", result.quarter_over_quarter
    ))
    console.print(_comparison_table("Last 30 days vs before", result.recent_vs_historical))

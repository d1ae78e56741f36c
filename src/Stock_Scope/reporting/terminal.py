"""Rich-based terminal output for series reports, quotes, insider trades, and health checks.

Uses ``rich.console.Console`` for all output. Color scheme:
green = up, red = down, yellow = flat or caution.
"""

from __future__ import annotations

import logging
import math

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from Stock_Scope.models.enums import TransactionType, TrendDirection
from Stock_Scope.models.health import HealthStatus
from Stock_Scope.models.insider import InsiderTrade
from Stock_Scope.models.market_data import Bar
from Stock_Scope.models.report import AnalysisRun, SeriesReport
from Stock_Scope.models.series import Series
from Stock_Scope.reporting.formatters import (
    DEFAULT_SEARCH_LIMIT,
    format_bar_line,
    format_percent,
    format_price,
    format_trend,
    format_volume,
)

logger = logging.getLogger(__name__)

# Shared console instance for terminal output
console = Console()

# --- Color scheme ---
COLOR_UP: str = "green"
COLOR_DOWN: str = "red"
COLOR_NEUTRAL: str = "yellow"
COLOR_HEADER: str = "bold cyan"
COLOR_MUTED: str = "dim"

TIMESTAMP_FORMAT: str = "%Y-%m-%dT%H:%M:%SZ"


def _trend_color(direction: TrendDirection) -> str:
    """Map a trend direction to its terminal color."""
    if direction == TrendDirection.UP:
        return COLOR_UP
    if direction == TrendDirection.DOWN:
        return COLOR_DOWN
    return COLOR_NEUTRAL


def _return_color(value: float | None) -> str:
    if value is None or math.isnan(value) or value == 0:
        return COLOR_NEUTRAL
    return COLOR_UP if value > 0 else COLOR_DOWN


def render_series_report(report: SeriesReport, title: str | None = None) -> None:
    """Render a single series summary.

    An empty series prints a distinct "no data" line and nothing else.

    Args:
        report: Summary produced by :func:`build_series_report`.
        title: Optional heading; defaults to the symbol.
    """
    heading = escape(title or f"{report.symbol} Price History")
    console.print(f"\n[bold]{heading}[/bold]", style=COLOR_HEADER)

    if not report.has_data:
        console.print(
            f"  [{COLOR_MUTED}]No OHLC data available for {escape(report.symbol)}[/{COLOR_MUTED}]"
        )
        return

    if report.first is not None:
        console.print(f"  First: {format_bar_line(report.first.date, report.first.bar)}")
    if report.last is not None:
        console.print(f"  Last:  {format_bar_line(report.last.date, report.last.bar)}")

    if report.stats is not None:
        scope = (
            "full series"
            if report.stats_window is None
            else f"last {report.stats.data_points} bars"
        )
        stats_table = Table(title=f"Statistics ({scope})", show_header=False, box=None)
        stats_table.add_column("Metric", style="bold")
        stats_table.add_column("Value", justify="right")
        stats_table.add_row("Min Price", format_price(report.stats.min_price))
        stats_table.add_row("Max Price", format_price(report.stats.max_price))
        stats_table.add_row("Avg Price", format_price(report.stats.avg_price))
        stats_table.add_row("Total Volume", format_volume(report.stats.total_volume))
        stats_table.add_row("Avg Volume", format_volume(report.stats.avg_volume))
        stats_table.add_row("Data Points", str(report.stats.data_points))
        console.print(stats_table)

    color = _return_color(report.total_return)
    console.print(f"  Total Return: [{color}]{format_percent(report.total_return)}[/{color}]")

    if report.daily_change is not None:
        change = report.daily_change
        trend_color = _trend_color(change.direction)
        console.print(
            f"  Last Change: [{trend_color}]{format_trend(change.direction)} "
            f"{format_percent(change.change_percent)}[/{trend_color}] "
            f"({format_price(change.previous_close)} -> {format_price(change.latest_close)})"
        )


def render_latest_quote(symbol: str, bar: Bar) -> None:
    """Render the most recent bar for *symbol* as a small panel."""
    body = format_bar_line(Series.formatted_date(bar), bar)
    console.print(Panel(body, title=escape(f"{symbol} Latest Quote"), style=COLOR_HEADER))


def render_search_results(
    query: str, symbols: list[str], limit: int = DEFAULT_SEARCH_LIMIT
) -> None:
    """Render the first *limit* ticker search hits, then a count of the rest."""
    query_text = escape(query)
    if not symbols:
        console.print(f"[{COLOR_MUTED}]No symbols found for '{query_text}'.[/{COLOR_MUTED}]")
        return

    console.print(f"\n[bold]Search results for '{query_text}'[/bold]")
    for i, symbol in enumerate(symbols[:limit], start=1):
        console.print(f"  {i}. {escape(symbol)}")

    remaining = len(symbols) - limit
    if remaining > 0:
        console.print(f"  [{COLOR_MUTED}]... and {remaining} others[/{COLOR_MUTED}]")


def render_insider_trades(symbol: str, trades: list[InsiderTrade]) -> None:
    """Render insider trades as a table; buys in green, sells in red."""
    if not trades:
        console.print(
            f"[{COLOR_MUTED}]No insider trades found for {escape(symbol)}.[/{COLOR_MUTED}]"
        )
        return

    table = Table(title=escape(f"{symbol} Insider Trades"), show_lines=False)
    table.add_column("Date")
    table.add_column("Name", style="bold")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right")

    for trade in trades:
        color = COLOR_UP if trade.transaction_type == TransactionType.BUY else COLOR_DOWN
        table.add_row(
            escape(trade.trade_date),
            escape(trade.name),
            escape(trade.title),
            f"[{color}]{trade.transaction_type.value}[/{color}]",
            escape(trade.price),
            escape(trade.qty),
        )

    console.print(table)


def render_analysis(run: AnalysisRun) -> None:
    """Render a full analysis run.

    Sections that failed to fetch print their error in yellow and the rest
    of the report still renders.
    """
    generated = run.generated_at.strftime(TIMESTAMP_FORMAT)
    console.print()
    console.print(
        Panel(
            f"[bold]{escape(run.symbol)}[/bold] | Interval: {escape(run.interval)}"
            f" | Range: {escape(run.range)}"
            f"\nGenerated: {generated}",
            title="Stock Analysis Report",
            style=COLOR_HEADER,
        )
    )

    if run.latest is not None:
        render_latest_quote(run.symbol, run.latest)
    elif run.latest_error is not None:
        console.print(
            f"[{COLOR_NEUTRAL}]Latest quote unavailable: "
            f"{escape(run.latest_error)}[/{COLOR_NEUTRAL}]"
        )

    render_series_report(run.history, title=f"{run.symbol} Price History ({run.range})")
    render_series_report(run.recent, title=f"{run.symbol} Last {run.window} Bars")

    if run.range_report is not None:
        start = run.range_start.date().isoformat() if run.range_start else "?"
        end = run.range_end.date().isoformat() if run.range_end else "?"
        render_series_report(run.range_report, title=f"{run.symbol} {start} to {end}")
    elif run.range_error is not None:
        console.print(
            f"[{COLOR_NEUTRAL}]Custom range unavailable: "
            f"{escape(run.range_error)}[/{COLOR_NEUTRAL}]"
        )

    if run.search_error is not None:
        console.print(
            f"[{COLOR_NEUTRAL}]Ticker search unavailable: "
            f"{escape(run.search_error)}[/{COLOR_NEUTRAL}]"
        )
    else:
        render_search_results(run.symbol, run.search_results)

    if run.insider_trades is not None:
        render_insider_trades(run.symbol, run.insider_trades)
    elif run.insider_error is not None:
        console.print(
            f"[{COLOR_NEUTRAL}]Insider trades unavailable: "
            f"{escape(run.insider_error)}[/{COLOR_NEUTRAL}]"
        )


def render_health(status: HealthStatus) -> None:
    """Render data source health check status to the terminal.

    Args:
        status: Health status from the health check service.
    """
    console.print("\n[bold]Data Source Health Check[/bold]\n")

    checks: list[tuple[str, bool]] = [
        ("Yahoo Finance", status.yfinance_available),
        ("OpenInsider", status.insider_source_available),
    ]

    for name, available in checks:
        if available:
            console.print(f"  [green][OK][/green]  {name}")
        else:
            console.print(f"  [red][FAIL][/red] {name}")

    last_check_str = status.last_check.strftime(TIMESTAMP_FORMAT)
    console.print(f"\n  Last check: {last_check_str}")

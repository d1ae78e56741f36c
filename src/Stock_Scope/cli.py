"""CLI entry point for Stock Scope - price history analytics and insider trades.

Provides the ``stock-scope`` command with subcommands for analyzing a symbol,
summarizing its price history, fetching the latest quote, searching tickers,
listing insider trades, and checking data source health.

This is the ONLY module besides ``reporting.terminal`` that writes to the
console. All other modules use ``logging``. Async internals are bridged to
typer's synchronous interface via ``asyncio.run()``.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from Stock_Scope.config import Settings, load_settings
from Stock_Scope.logging_config import configure_logging
from Stock_Scope.pipeline import run_analysis
from Stock_Scope.reporting.assembler import build_series_report
from Stock_Scope.reporting.formatters import DEFAULT_SEARCH_LIMIT
from Stock_Scope.reporting.markdown import DEFAULT_REPORTS_DIR, save_report
from Stock_Scope.reporting.terminal import (
    render_analysis,
    render_health,
    render_insider_trades,
    render_latest_quote,
    render_search_results,
    render_series_report,
)
from Stock_Scope.services import (
    HealthService,
    InsiderTradeService,
    MarketDataService,
    RateLimiter,
)
from Stock_Scope.utils.exceptions import DataFetchError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Typer app
# ---------------------------------------------------------------------------

app = typer.Typer(name="stock-scope", help="Price history analytics and insider trades")

# Rich console for formatted output
console = Console()

# ---------------------------------------------------------------------------
# Default constants
# ---------------------------------------------------------------------------

DEFAULT_INSIDER_LIMIT: int = 20

# Last second of an inclusive --end date
END_OF_DAY: datetime.time = datetime.time(23, 59, 59)


class OutputFormat(StrEnum):
    """Rendering target for ``analyze`` and ``history``."""

    TERMINAL = "terminal"
    MARKDOWN = "markdown"
    JSON = "json"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _parse_date(
    value: str | None, option: str, *, end_of_day: bool = False
) -> datetime.datetime | None:
    """Parse ``YYYY-MM-DD`` into a UTC datetime at the start or end of that day.

    yfinance treats ``end`` as exclusive, so an end date maps to 23:59:59 to
    keep its own bar in the range.
    """
    if value is None:
        return None
    try:
        day = datetime.date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got '{value}'", param_hint=option) from exc
    clock = END_OF_DAY if end_of_day else datetime.time.min
    return datetime.datetime.combine(day, clock, tzinfo=datetime.UTC)


def _market_data(settings: Settings, rate_limiter: RateLimiter) -> MarketDataService:
    return MarketDataService(
        rate_limiter=rate_limiter,
        timeout=settings.fetch_timeout,
        strict_scopes=settings.strict_scopes,
    )


def _fail(message: str, exc: Exception) -> typer.Exit:
    """Print *message* in red and build the exit to raise."""
    if isinstance(exc, DataFetchError):
        logger.debug("%s (%s)", message, exc.context)
    console.print(f"[red]{escape(message)}: {escape(str(exc))}[/red]")
    return typer.Exit(code=1)


# ---------------------------------------------------------------------------
# analyze command
# ---------------------------------------------------------------------------


@app.command()
def analyze(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol to analyze")],
    interval: Annotated[str | None, typer.Option(help="Bar size, e.g. 1d, 1h, 1wk")] = None,
    range_: Annotated[
        str | None, typer.Option("--range", help="Lookback, e.g. 1mo, 6mo, 1y")
    ] = None,
    window: Annotated[
        int | None, typer.Option(min=0, help="Trailing bars for recent stats")
    ] = None,
    start: Annotated[str | None, typer.Option(help="Custom range start (YYYY-MM-DD)")] = None,
    end: Annotated[str | None, typer.Option(help="Custom range end (YYYY-MM-DD)")] = None,
    insiders: Annotated[bool, typer.Option("--insiders", help="Include insider trades")] = False,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="terminal, markdown or json")
    ] = OutputFormat.TERMINAL,
    output_dir: Annotated[
        Path, typer.Option(help="Directory for markdown reports")
    ] = Path(DEFAULT_REPORTS_DIR),
    strict: Annotated[
        bool, typer.Option("--strict", help="Reject unknown interval/range tokens")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress info logging")] = False,
) -> None:
    """Analyze price history, latest quote, related tickers and insider trades."""
    configure_logging(verbose=verbose, quiet=quiet)

    range_start = _parse_date(start, "--start")
    range_end = _parse_date(end, "--end", end_of_day=True)
    if (range_start is None) != (range_end is None):
        raise typer.BadParameter("--start and --end must be given together")

    settings = load_settings()
    if strict:
        settings = settings.model_copy(update={"strict_scopes": True})

    asyncio.run(
        _analyze_async(
            symbol=symbol.upper().strip(),
            settings=settings,
            interval=interval or settings.interval,
            range_=range_ or settings.range,
            window=settings.window if window is None else window,
            range_start=range_start,
            range_end=range_end,
            insiders=insiders,
            output_format=output_format,
            output_dir=output_dir,
        )
    )


async def _analyze_async(
    *,
    symbol: str,
    settings: Settings,
    interval: str,
    range_: str,
    window: int,
    range_start: datetime.datetime | None,
    range_end: datetime.datetime | None,
    insiders: bool,
    output_format: OutputFormat,
    output_dir: Path,
) -> None:
    """Run the analysis pipeline and render the result."""
    rate_limiter = RateLimiter()
    market_data = _market_data(settings, rate_limiter)
    insider_service = (
        InsiderTradeService(
            rate_limiter=rate_limiter,
            base_url=settings.insider_url,
            timeout=settings.fetch_timeout,
        )
        if insiders
        else None
    )

    try:
        run = await run_analysis(
            symbol,
            market_data=market_data,
            interval=interval,
            range=range_,
            window=window,
            range_start=range_start,
            range_end=range_end,
            insider_service=insider_service,
        )
    except DataFetchError as exc:
        raise _fail(f"Failed to fetch price history for {symbol}", exc) from exc
    except ValueError as exc:
        raise _fail("Invalid request", exc) from exc
    finally:
        if insider_service is not None:
            await insider_service.aclose()

    if output_format == OutputFormat.JSON:
        typer.echo(run.model_dump_json(indent=2))
    elif output_format == OutputFormat.MARKDOWN:
        filepath = save_report(run, output_dir)
        console.print(f"[green]Report saved to {filepath}[/green]")
    else:
        render_analysis(run)


# ---------------------------------------------------------------------------
# history command
# ---------------------------------------------------------------------------


@app.command()
def history(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol")],
    interval: Annotated[str | None, typer.Option(help="Bar size, e.g. 1d, 1h, 1wk")] = None,
    range_: Annotated[
        str | None, typer.Option("--range", help="Lookback, e.g. 1mo, 6mo, 1y")
    ] = None,
    window: Annotated[
        int | None, typer.Option(min=0, help="Compute stats over the last N bars only")
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="terminal or json")
    ] = OutputFormat.TERMINAL,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress info logging")] = False,
) -> None:
    """Summarize the price history of a symbol."""
    configure_logging(verbose=verbose, quiet=quiet)
    settings = load_settings()

    asyncio.run(
        _history_async(
            symbol=symbol.upper().strip(),
            settings=settings,
            interval=interval or settings.interval,
            range_=range_ or settings.range,
            window=window,
            output_format=output_format,
        )
    )


async def _history_async(
    *,
    symbol: str,
    settings: Settings,
    interval: str,
    range_: str,
    window: int | None,
    output_format: OutputFormat,
) -> None:
    """Fetch one series and render its summary."""
    market_data = _market_data(settings, RateLimiter())
    try:
        series = await market_data.fetch_series(symbol, interval, range_)
    except DataFetchError as exc:
        raise _fail(f"Failed to fetch price history for {symbol}", exc) from exc
    except ValueError as exc:
        raise _fail("Invalid request", exc) from exc

    report = build_series_report(series, window=window)
    if output_format == OutputFormat.JSON:
        typer.echo(report.model_dump_json(indent=2))
    else:
        render_series_report(report)


# ---------------------------------------------------------------------------
# quote command
# ---------------------------------------------------------------------------


@app.command()
def quote(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Show the most recent bar for a symbol."""
    configure_logging(verbose=verbose)
    asyncio.run(_quote_async(symbol=symbol.upper().strip(), settings=load_settings()))


async def _quote_async(*, symbol: str, settings: Settings) -> None:
    market_data = _market_data(settings, RateLimiter())
    try:
        bar = await market_data.fetch_latest(symbol)
    except DataFetchError as exc:
        raise _fail(f"Failed to fetch quote for {symbol}", exc) from exc
    render_latest_quote(symbol, bar)


# ---------------------------------------------------------------------------
# search command
# ---------------------------------------------------------------------------


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Company name or partial symbol")],
    limit: Annotated[
        int, typer.Option(min=1, help="Maximum number of symbols to show")
    ] = DEFAULT_SEARCH_LIMIT,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Search for ticker symbols."""
    configure_logging(verbose=verbose)
    asyncio.run(_search_async(query=query, limit=limit, settings=load_settings()))


async def _search_async(*, query: str, limit: int, settings: Settings) -> None:
    market_data = _market_data(settings, RateLimiter())
    try:
        symbols = await market_data.search(query)
    except DataFetchError as exc:
        raise _fail(f"Ticker search for '{query}' failed", exc) from exc
    render_search_results(query, symbols, limit=limit)


# ---------------------------------------------------------------------------
# insiders command
# ---------------------------------------------------------------------------


@app.command()
def insiders(
    symbol: Annotated[str, typer.Argument(help="Ticker symbol")],
    limit: Annotated[
        int, typer.Option(min=1, help="Maximum number of trades to show")
    ] = DEFAULT_INSIDER_LIMIT,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """List recent insider trades for a symbol."""
    configure_logging(verbose=verbose)
    asyncio.run(
        _insiders_async(symbol=symbol.upper().strip(), limit=limit, settings=load_settings())
    )


async def _insiders_async(*, symbol: str, limit: int, settings: Settings) -> None:
    service = InsiderTradeService(
        rate_limiter=RateLimiter(),
        base_url=settings.insider_url,
        timeout=settings.fetch_timeout,
    )
    try:
        trades = await service.fetch_trades(symbol)
    except DataFetchError as exc:
        raise _fail(f"Failed to fetch insider trades for {symbol}", exc) from exc
    finally:
        await service.aclose()
    render_insider_trades(symbol, trades[:limit])


# ---------------------------------------------------------------------------
# health command
# ---------------------------------------------------------------------------


@app.command()
def health(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Check the health of the external data sources."""
    configure_logging(verbose=verbose)
    asyncio.run(_health_async(settings=load_settings()))


async def _health_async(*, settings: Settings) -> None:
    """Run all health checks and display results."""
    health_service = HealthService(insider_url=settings.insider_url)
    console.print("\n[bold]Running health checks...[/bold]")
    status = await health_service.check_all()
    render_health(status)

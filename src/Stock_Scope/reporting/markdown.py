"""Markdown report generator producing GitHub-Flavored Markdown.

Generates a complete analysis report for an :class:`AnalysisRun`. Tables use
GFM pipe syntax. Sections whose data failed to fetch carry the error message
in an italic note instead of a table.
"""

from __future__ import annotations

import logging
from pathlib import Path

from Stock_Scope.models.insider import InsiderTrade
from Stock_Scope.models.report import AnalysisRun, SeriesReport
from Stock_Scope.models.series import Series
from Stock_Scope.reporting.formatters import (
    DEFAULT_SEARCH_LIMIT,
    build_report_filename,
    format_percent,
    format_price,
    format_trend,
    format_volume,
)

logger = logging.getLogger(__name__)

# Default output directory (relative to the working directory)
DEFAULT_REPORTS_DIR: str = "reports"


def _section_header(run: AnalysisRun) -> str:
    """Section 1: Report header with symbol, scope, and timestamp."""
    lines: list[str] = []
    lines.append(f"# Stock Analysis: **{run.symbol}**")
    lines.append("")
    timestamp_str = run.generated_at.strftime("%Y-%m-%dT%H:%M:%SZ")
    lines.append(f"*Generated: {timestamp_str}*")
    lines.append("")
    lines.append(f"Interval: `{run.interval}` | Range: `{run.range}` | Window: {run.window}")
    lines.append("")
    return "\n".join(lines)


def _section_latest(run: AnalysisRun) -> str:
    """Section 2: Latest quote."""
    lines: list[str] = ["## Latest Quote", ""]

    if run.latest is None:
        lines.append(f"*Unavailable: {run.latest_error or 'no data'}*")
        lines.append("")
        return "\n".join(lines)

    bar = run.latest
    lines.append("| Date | Open | High | Low | Close | Volume |")
    lines.append("|------|------|------|-----|-------|--------|")
    lines.append(
        f"| {Series.formatted_date(bar)} | {format_price(bar.open)} | {format_price(bar.high)} "
        f"| {format_price(bar.low)} | {format_price(bar.close)} | {format_volume(bar.volume)} |"
    )
    lines.append("")
    return "\n".join(lines)


def _series_block(heading: str, report: SeriesReport) -> str:
    """Render one ``SeriesReport`` under a level-2 heading."""
    lines: list[str] = [f"## {heading}", ""]

    if not report.has_data:
        lines.append(f"*No OHLC data available for {report.symbol}*")
        lines.append("")
        return "\n".join(lines)

    lines.append("| Metric | Value |")
    lines.append("|--------|-------|")
    if report.first is not None:
        lines.append(
            f"| First | {report.first.date} close {format_price(report.first.bar.close)} |"
        )
    if report.last is not None:
        lines.append(f"| Last | {report.last.date} close {format_price(report.last.bar.close)} |")
    if report.stats is not None:
        stats = report.stats
        lines.append(f"| Min Price | {format_price(stats.min_price)} |")
        lines.append(f"| Max Price | {format_price(stats.max_price)} |")
        lines.append(f"| Avg Price | {format_price(stats.avg_price)} |")
        lines.append(f"| Total Volume | {format_volume(stats.total_volume)} |")
        lines.append(f"| Avg Volume | {format_volume(stats.avg_volume)} |")
        lines.append(f"| Data Points | {stats.data_points} |")
    lines.append(f"| Total Return | {format_percent(report.total_return)} |")
    if report.daily_change is not None:
        change = report.daily_change
        lines.append(
            f"| Last Change | {format_trend(change.direction)} "
            f"{format_percent(change.change_percent)} |"
        )
    lines.append("")
    return "\n".join(lines)


def _section_range(run: AnalysisRun) -> str:
    """Section 5: Custom date range, only when one was requested."""
    if run.range_report is None and run.range_error is None:
        return ""

    start = run.range_start.date().isoformat() if run.range_start else "?"
    end = run.range_end.date().isoformat() if run.range_end else "?"
    heading = f"Custom Range {start} to {end}"

    if run.range_report is None:
        return f"## {heading}\n\n*Unavailable: {run.range_error}*\n"
    return _series_block(heading, run.range_report)


def _section_search(run: AnalysisRun) -> str:
    """Section 6: Related tickers from the search endpoint."""
    lines: list[str] = ["## Related Tickers", ""]
    if run.search_error is not None:
        lines.append(f"*Unavailable: {run.search_error}*")
    elif not run.search_results:
        lines.append("*No related tickers found.*")
    else:
        lines.extend(f"- {symbol}" for symbol in run.search_results[:DEFAULT_SEARCH_LIMIT])
        remaining = len(run.search_results) - DEFAULT_SEARCH_LIMIT
        if remaining > 0:
            lines.append(f"- ... and {remaining} others")
    lines.append("")
    return "\n".join(lines)


def _insider_rows(trades: list[InsiderTrade]) -> list[str]:
    rows = [
        "| Date | Name | Title | Type | Price | Qty |",
        "|------|------|-------|------|-------|-----|",
    ]
    for trade in trades:
        rows.append(
            f"| {trade.trade_date} | {trade.name} | {trade.title} "
            f"| {trade.transaction_type.value} | {trade.price} | {trade.qty} |"
        )
    return rows


def _section_insiders(run: AnalysisRun) -> str:
    """Section 7: Insider trades, only when they were requested."""
    if run.insider_trades is None and run.insider_error is None:
        return ""

    lines: list[str] = ["## Insider Trades", ""]
    if run.insider_trades is None:
        lines.append(f"*Unavailable: {run.insider_error}*")
    elif not run.insider_trades:
        lines.append("*No insider trades found.*")
    else:
        lines.extend(_insider_rows(run.insider_trades))
    lines.append("")
    return "\n".join(lines)


def generate_markdown_report(run: AnalysisRun) -> str:
    """Generate a complete GitHub-Flavored Markdown analysis report.

    Sections in order: header, latest quote, price history, recent window,
    optional custom range, related tickers, optional insider trades.

    Args:
        run: Result of :func:`Stock_Scope.pipeline.run_analysis`.

    Returns:
        Complete markdown string ready for file output.
    """
    sections: list[str] = [
        _section_header(run),
        _section_latest(run),
        _series_block(f"Price History ({run.range})", run.history),
        _series_block(f"Last {run.window} Bars", run.recent),
        _section_range(run),
        _section_search(run),
        _section_insiders(run),
    ]

    return "\n".join(section for section in sections if section)


def save_report(run: AnalysisRun, directory: Path | str = DEFAULT_REPORTS_DIR) -> Path:
    """Render *run* to Markdown and save it under *directory*.

    Creates the directory if it does not exist. Uses
    :func:`build_report_filename` to generate the filename.

    Returns:
        Path to the written report file.
    """
    content = generate_markdown_report(run)
    filename = build_report_filename(run.symbol, run.generated_at, ext="md")
    reports_dir = Path(directory)
    reports_dir.mkdir(parents=True, exist_ok=True)

    filepath = reports_dir / filename
    filepath.write_text(content, encoding="utf-8")

    logger.info("Report saved to %s", filepath)
    return filepath

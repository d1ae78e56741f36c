"""Reporting module: report assembly, terminal output, and markdown generation.

Re-exports all public functions so consumers can import directly:
    from Stock_Scope.reporting import build_series_report, render_series_report
"""

from Stock_Scope.reporting.assembler import build_series_report
from Stock_Scope.reporting.formatters import (
    build_report_filename,
    format_percent,
    format_price,
    format_volume,
)
from Stock_Scope.reporting.markdown import generate_markdown_report, save_report
from Stock_Scope.reporting.terminal import (
    render_analysis,
    render_health,
    render_insider_trades,
    render_latest_quote,
    render_search_results,
    render_series_report,
)

__all__ = [
    # Assembly
    "build_series_report",
    # Formatters
    "build_report_filename",
    "format_percent",
    "format_price",
    "format_volume",
    # Markdown
    "generate_markdown_report",
    "save_report",
    # Terminal
    "render_analysis",
    "render_health",
    "render_insider_trades",
    "render_latest_quote",
    "render_search_results",
    "render_series_report",
]

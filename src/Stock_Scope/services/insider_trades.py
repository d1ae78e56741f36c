"""Insider-trade disclosures scraped from the openinsider.com screener.

Fetches the screener page for a ticker with a shared ``httpx.AsyncClient``
and extracts the rows of its ``table.tinytable`` results table. Rows that do
not have the expected number of cells are dropped silently; only transport
and HTTP failures are raised.

The page is parsed with the standard-library ``html.parser``: the results
table is flat, so a small event-driven parser covers it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Final

import httpx

from Stock_Scope.models.enums import TransactionType
from Stock_Scope.models.insider import InsiderTrade
from Stock_Scope.services._helpers import (
    EXTERNAL_CALL_TIMEOUT_SECONDS,
    OPENINSIDER_SOURCE,
    fetch_once,
)
from Stock_Scope.services.rate_limiter import RateLimiter
from Stock_Scope.utils.exceptions import DataSourceUnavailableError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

OPENINSIDER_SCREENER_URL: Final[str] = "http://openinsider.com/screener"

# Screener filters: last 730 days of filings, purchases and sales, 100 rows
SCREENER_PARAMS: Final[dict[str, str]] = {
    "fd": "730",
    "td": "0",
    "xp": "1",
    "xs": "1",
    "sic1": "-1",
    "sicl": "100",
    "sich": "9999",
    "grp": "0",
    "sortcol": "0",
    "cnt": "100",
    "page": "1",
}

RESULTS_TABLE_CLASS: Final[str] = "tinytable"

# Minimum number of <td> cells for a row to be a trade
MIN_CELLS_PER_ROW: Final[int] = 10

# Cell positions within a results row
NAME_CELL: Final[int] = 1
TITLE_CELL: Final[int] = 2
TRADE_DATE_CELL: Final[int] = 4
TRANSACTION_CELL: Final[int] = 6
PRICE_CELL: Final[int] = 7
QTY_CELL: Final[int] = 8

SALE_MARKER: Final[str] = "sale"


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_name(raw: str) -> str:
    """Reorder a two-part "Last First" name to "First Last".

    Names with any other number of parts are returned unchanged.
    """
    parts = raw.split()
    if len(parts) == 2:  # noqa: PLR2004
        return f"{parts[1]} {parts[0]}"
    return raw


def clean_number(raw: str, *, is_qty: bool = False) -> str:
    """Strip thousands separators and ``$`` from a scraped number.

    Quantities also lose their sign, since sales are listed as negative.
    """
    cleaned = raw.replace(",", "").replace("$", "").strip()
    if is_qty:
        cleaned = cleaned.replace("-", "").strip()
    return cleaned


# ---------------------------------------------------------------------------
# HTML parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Cell:
    """Text content of one ``<td>``, plus the text of its first link if any."""

    text: str
    link_text: str | None = None


class _ResultsTableParser(HTMLParser):
    """Collect the ``<td>`` cells of every row inside ``table.tinytable``."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.rows: list[list[_Cell]] = []
        self._table_depth = 0
        self._row: list[_Cell] | None = None
        self._cell_text: list[str] | None = None
        self._link_text: list[str] | None = None
        self._in_link = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "table":
            if self._table_depth:
                self._table_depth += 1
            elif RESULTS_TABLE_CLASS in (dict(attrs).get("class") or "").split():
                self._table_depth = 1
            return
        if not self._table_depth:
            return

        if tag == "tr":
            self._close_row()
            self._row = []
        elif tag == "td" and self._row is not None:
            self._close_cell()
            self._cell_text = []
        elif tag == "a" and self._cell_text is not None and self._link_text is None:
            self._link_text = []
            self._in_link = True

    def handle_endtag(self, tag: str) -> None:
        if not self._table_depth:
            return

        if tag == "a":
            self._in_link = False
        elif tag == "td":
            self._close_cell()
        elif tag == "tr":
            self._close_row()
        elif tag == "table":
            self._table_depth -= 1
            if not self._table_depth:
                self._close_row()

    def handle_data(self, data: str) -> None:
        if self._cell_text is not None:
            self._cell_text.append(data)
        if self._in_link and self._link_text is not None:
            self._link_text.append(data)

    def _close_cell(self) -> None:
        if self._row is not None and self._cell_text is not None:
            link = "".join(self._link_text) if self._link_text is not None else None
            self._row.append(_Cell(text="".join(self._cell_text), link_text=link))
        self._cell_text = None
        self._link_text = None
        self._in_link = False

    def _close_row(self) -> None:
        self._close_cell()
        if self._row is not None:
            self.rows.append(self._row)
        self._row = None


def _row_to_trade(cells: list[_Cell]) -> InsiderTrade:
    name_cell = cells[NAME_CELL]
    raw_name = (name_cell.link_text if name_cell.link_text is not None else name_cell.text).strip()

    transaction_raw = cells[TRANSACTION_CELL].text.lower()
    transaction_type = (
        TransactionType.SELL if SALE_MARKER in transaction_raw else TransactionType.BUY
    )

    return InsiderTrade(
        name=normalize_name(raw_name),
        title=cells[TITLE_CELL].text.strip(),
        trade_date=cells[TRADE_DATE_CELL].text.strip(),
        transaction_type=transaction_type,
        price=clean_number(cells[PRICE_CELL].text.strip()),
        qty=clean_number(cells[QTY_CELL].text.strip(), is_qty=True),
    )


def parse_insider_table(html: str) -> list[InsiderTrade]:
    """Extract insider trades from an openinsider screener page.

    The first row of the results table is the header and is skipped. Rows
    with fewer than ``MIN_CELLS_PER_ROW`` cells are dropped.
    """
    parser = _ResultsTableParser()
    parser.feed(html)
    parser.close()

    trades: list[InsiderTrade] = []
    skipped = 0
    for index, cells in enumerate(parser.rows):
        if index == 0:
            continue
        if len(cells) < MIN_CELLS_PER_ROW:
            skipped += 1
            continue
        trades.append(_row_to_trade(cells))

    if skipped:
        logger.debug("Dropped %d short rows from insider table", skipped)
    return trades


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class InsiderTradeService:
    """Fetch and normalize insider trades for a ticker.

    Usage::

        service = InsiderTradeService(rate_limiter=RateLimiter())
        try:
            trades = await service.fetch_trades("AAPL")
        finally:
            await service.aclose()
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        *,
        base_url: str = OPENINSIDER_SCREENER_URL,
        timeout: float = EXTERNAL_CALL_TIMEOUT_SECONDS,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._base_url = base_url
        self._timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=5.0, read=timeout, write=10.0, pool=5.0),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        """Close the shared httpx client."""
        await self._client.aclose()

    async def fetch_trades(self, symbol: str) -> list[InsiderTrade]:
        """Fetch the insider trades listed for *symbol*.

        Raises:
            DataSourceUnavailableError: On timeouts, transport errors, or a
                non-200 response.
        """
        symbol = symbol.upper().strip()

        html = await fetch_once(
            lambda: self._fetch_page(symbol),
            rate_limiter=self._rate_limiter,
            ticker=symbol,
            source=OPENINSIDER_SOURCE,
            label=f"InsiderTrades({symbol})",
            timeout=self._timeout,
        )

        trades = parse_insider_table(html)
        logger.info("Parsed %d insider trades for %s", len(trades), symbol)
        return trades

    async def _fetch_page(self, symbol: str) -> str:
        params = {"s": symbol, **SCREENER_PARAMS}
        response = await self._client.get(self._base_url, params=params)
        if response.status_code != 200:  # noqa: PLR2004
            raise DataSourceUnavailableError(
                f"openinsider returned HTTP {response.status_code} for {symbol}",
                ticker=symbol,
                source=OPENINSIDER_SOURCE,
                http_status=response.status_code,
            )
        return response.text

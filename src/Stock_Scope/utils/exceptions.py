"""Errors raised when a provider cannot deliver data.

Only fetch failures are exceptions here. An empty series, a window with no
bars or a return over fewer than two closes is a normal result and comes
back as ``None`` or an empty container instead.
"""


class DataFetchError(Exception):
    """A request to yfinance or openinsider failed.

    Attributes:
        ticker: Symbol the request was for.
        source: Provider name, ``"yfinance"`` or ``"openinsider"``.
        http_status: Response status for HTTP failures, otherwise None.
    """

    def __init__(
        self,
        message: str,
        *,
        ticker: str,
        source: str,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.ticker = ticker
        self.source = source
        self.http_status = http_status

    @property
    def context(self) -> str:
        """Compact ``source=... ticker=...`` string for log lines."""
        parts = [f"source={self.source}", f"ticker={self.ticker}"]
        if self.http_status is not None:
            parts.append(f"status={self.http_status}")
        return " ".join(parts)


class TickerNotFoundError(DataFetchError):
    """The provider answered but knows nothing about the symbol."""


class DataSourceUnavailableError(DataFetchError):
    """The provider timed out, refused the connection or returned an error status."""

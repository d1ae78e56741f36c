"""StrEnum types for the market data domain.

Values are lowercase strings. Use enum members in business logic, never raw
strings.
"""

from enum import StrEnum


class TemporalScope(StrEnum):
    """Interval and range tokens understood by the quote provider."""

    ONE_HOUR = "1h"
    FOUR_HOURS = "4h"
    SIX_HOURS = "6h"
    TWELVE_HOURS = "12h"
    ONE_DAY = "1d"
    ONE_WEEK = "1wk"
    ONE_MONTH = "1mo"
    THREE_MONTHS = "3mo"
    SIX_MONTHS = "6mo"
    ONE_YEAR = "1y"
    YEAR_TO_DATE = "ytd"
    TEN_YEARS = "10y"


class TransactionType(StrEnum):
    """Direction of an insider transaction."""

    BUY = "buy"
    SELL = "sell"


class TrendDirection(StrEnum):
    """Direction of a close-to-close price move."""

    UP = "up"
    DOWN = "down"
    FLAT = "flat"


def resolve_scope(token: str, *, strict: bool = False) -> str:
    """Return the provider token for *token*.

    Known tokens (case-insensitive, surrounding whitespace ignored) resolve to
    their ``TemporalScope`` value. Unknown tokens are forwarded unchanged
    unless *strict* is set, in which case they are rejected.

    Raises:
        ValueError: If *strict* is True and *token* is not a ``TemporalScope``.
    """
    if isinstance(token, TemporalScope):
        return token.value
    normalized = token.strip().lower()
    try:
        return TemporalScope(normalized).value
    except ValueError:
        if strict:
            valid = ", ".join(scope.value for scope in TemporalScope)
            msg = f"Unknown interval/range token '{token}' (expected one of: {valid})"
            raise ValueError(msg) from None
        return token

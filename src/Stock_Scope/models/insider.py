"""Insider trade disclosure model scraped from the openinsider screener."""

from pydantic import BaseModel, ConfigDict

from Stock_Scope.models.enums import TransactionType


class InsiderTrade(BaseModel):
    """A single normalized insider-trading disclosure.

    Frozen because a disclosure is a historical record. ``price`` and ``qty``
    stay strings as scraped, with currency symbols, thousands separators and
    (for quantities) the sign removed.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    title: str
    trade_date: str
    transaction_type: TransactionType
    price: str
    qty: str

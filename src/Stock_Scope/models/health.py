"""Health check model: external data source availability status."""

import datetime

from pydantic import BaseModel, ConfigDict


class HealthStatus(BaseModel):
    """Status of the external data sources the application relies on.

    Used by the CLI to display system readiness before running an analysis.
    """

    model_config = ConfigDict(frozen=True)

    yfinance_available: bool
    insider_source_available: bool
    last_check: datetime.datetime

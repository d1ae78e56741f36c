"""Optional data quality checks for bars.

The core never applies these on its own; callers and tests use them to
confirm that provider data meets the usual market-data invariants.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from Stock_Scope.models.market_data import Bar

logger = logging.getLogger(__name__)


class ValidationCheck(BaseModel):
    """Single validation check result."""

    model_config = ConfigDict(frozen=True)

    name: str
    passed: bool
    message: str = ""


class ValidationResult(BaseModel):
    """Aggregate validation result."""

    checks: list[ValidationCheck] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        return [check for check in self.checks if not check.passed]


def _check(name: str, failures: int, message: str) -> ValidationCheck:
    if failures:
        return ValidationCheck(name=name, passed=False, message=f"{failures} {message}")
    return ValidationCheck(name=name, passed=True)


def validate_bars(bars: Sequence[Bar]) -> ValidationResult:
    """Run the bar sanity checks.

    Checks:
        1. price_positive: every OHLC price is strictly positive
        2. ohlc_consistency: high >= low
        3. volume_sanity: volume is non-negative
        4. timestamp_order: timestamps never decrease

    An empty sequence passes every check.
    """
    non_positive = sum(
        1 for bar in bars if min(bar.open, bar.high, bar.low, bar.close) <= 0
    )
    inverted = sum(1 for bar in bars if bar.high < bar.low)
    negative_volume = sum(1 for bar in bars if bar.volume < 0)
    out_of_order = sum(
        1 for i in range(1, len(bars)) if bars[i].timestamp < bars[i - 1].timestamp
    )

    result = ValidationResult(
        checks=[
            _check("price_positive", non_positive, "bars with non-positive prices"),
            _check("ohlc_consistency", inverted, "bars with high < low"),
            _check("volume_sanity", negative_volume, "bars with negative volume"),
            _check("timestamp_order", out_of_order, "bars out of order"),
        ]
    )

    if not result.passed:
        logger.warning(
            "Bar validation failed: %s",
            "; ".join(check.message for check in result.failed_checks),
        )
    return result

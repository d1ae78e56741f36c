"""Root logger setup for the ``stock-scope`` command.

Library modules only ever call ``logging.getLogger(__name__)``; the CLI calls
``configure_logging()`` once per command to pick the level and format.
"""

from __future__ import annotations

import logging
import os

LOG_FORMAT: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# LOG_LEVEL_<AREA> environment variable suffix -> logger it tunes
_AREA_LOGGERS: dict[str, str] = {
    "SERVICES": "Stock_Scope.services",
    "ANALYSIS": "Stock_Scope.analysis",
    "REPORTING": "Stock_Scope.reporting",
    "PIPELINE": "Stock_Scope.pipeline",
}

# Third-party loggers that flood INFO with per-request lines
_NOISY_LOGGERS: tuple[str, ...] = ("yfinance", "httpx", "httpcore")


def _level_from_name(name: str | None) -> int | None:
    """Map ``"debug"``/``"INFO"``/... to a logging level, or None if unknown."""
    if not name:
        return None
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def configure_logging(
    *,
    level: str = "",
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Set the root level and format, then apply per-area overrides.

    The root level comes from the first of: ``verbose`` (DEBUG), ``quiet``
    (WARNING), *level*, the ``LOG_LEVEL`` variable, and finally INFO. Unknown
    level names fall through to the next source. ``force=True`` replaces any
    handlers left by an earlier call in the same process.
    """
    if verbose:
        root_level = logging.DEBUG
    elif quiet:
        root_level = logging.WARNING
    else:
        root_level = (
            _level_from_name(level)
            or _level_from_name(os.environ.get("LOG_LEVEL"))
            or logging.INFO
        )

    logging.basicConfig(level=root_level, format=LOG_FORMAT, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for area, logger_name in _AREA_LOGGERS.items():
        area_level = _level_from_name(os.environ.get(f"LOG_LEVEL_{area}"))
        if area_level is not None:
            logging.getLogger(logger_name).setLevel(area_level)

"""Runtime settings resolved from environment variables.

Defaults live in module-level constants; ``load_settings()`` overlays any
``STOCK_SCOPE_*`` environment variables and validates the result through a
frozen Pydantic model.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_INTERVAL: Final[str] = "1d"
DEFAULT_RANGE: Final[str] = "6mo"
DEFAULT_WINDOW: Final[int] = 30
DEFAULT_FETCH_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_INSIDER_URL: Final[str] = "http://openinsider.com/screener"

ENV_PREFIX: Final[str] = "STOCK_SCOPE_"

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


class Settings(BaseModel):
    """Resolved application settings.

    Frozen because settings are read once per command invocation.
    """

    model_config = ConfigDict(frozen=True)

    interval: str = DEFAULT_INTERVAL
    range: str = DEFAULT_RANGE
    window: int = Field(default=DEFAULT_WINDOW, ge=0)
    fetch_timeout: float = Field(default=DEFAULT_FETCH_TIMEOUT_SECONDS, gt=0)
    strict_scopes: bool = False
    insider_url: str = DEFAULT_INSIDER_URL


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build ``Settings`` from ``STOCK_SCOPE_*`` environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        A validated ``Settings`` instance.

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value.
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, object] = {}

    for field_name in ("interval", "range", "window", "fetch_timeout", "insider_url"):
        raw = env.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is not None and raw.strip():
            overrides[field_name] = raw.strip()

    strict_raw = env.get(f"{ENV_PREFIX}STRICT_SCOPES")
    if strict_raw is not None:
        overrides["strict_scopes"] = strict_raw.strip().lower() in _TRUE_VALUES

    settings = Settings.model_validate(overrides)
    logger.debug("Loaded settings: %s", settings)
    return settings

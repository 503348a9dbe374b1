"""Process-wide logging setup driven by ObservabilityConfig."""

from __future__ import annotations

import logging
from typing import Optional

from .config import ObservabilityConfig, get_config
from .domain.errors import ConfigurationError

_configured = False


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Apply the configured level and format to the root logger once.

    Library code only ever calls ``logging.getLogger``; front-ends call
    this at startup.
    """
    global _configured
    if _configured:
        return

    config = config or get_config().observability
    try:
        logging.basicConfig(level=config.level.upper(), format=config.format)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid log level {config.level!r}",
            setting_name="ITM_LOG_LEVEL",
            expected_type="DEBUG, INFO, WARNING, ERROR or CRITICAL",
            cause=e,
        )
    # geopy logs every sleep of its rate limiter at DEBUG
    logging.getLogger("geopy").setLevel(logging.WARNING)
    _configured = True

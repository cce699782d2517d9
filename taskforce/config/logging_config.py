"""Logging setup for processes that embed the engine."""

import logging
from typing import Optional

from taskforce.config.settings import Settings, get_settings

# Low-level transport loggers that drown out engine messages at DEBUG.
NOISY_LOGGERS = ("httpcore", "httpx")


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply the configured level and format to the root logger."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(level=level, format=settings.log_format)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).debug(
        f"Logging configured at {logging.getLevelName(level)}",
        extra={"environment": settings.environment},
    )

"""
Logging Configuration - Ngage Judging Engine
ngage_judging/logging_config.py

Routes structlog events and stdlib log records to one handler.

    configure_logging(get_settings())
    structlog.get_logger(__name__).info("leaderboard_built", event_id="evt_1")
"""

import logging
import sys
from typing import Optional

import structlog

from ngage_judging.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Set the log level and pick the JSON or console renderer."""
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    if settings.LOG_FORMAT == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

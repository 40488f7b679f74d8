"""Structured logging setup.

The app factory calls ``configure_logging()`` once at startup. Modules only
ask for a logger with ``get_logger(__name__)`` and emit event names with
key/value context; they never attach handlers themselves.
"""

import logging
import sys
from typing import Optional

import structlog

from ..config import settings


_CONFIGURED = False


def configure_logging(level: Optional[str] = None, json: Optional[bool] = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    use_json = settings.log_json if json is None else json

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    logging.getLogger("fintrack").setLevel(log_level)

    renderer = structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)

"""
Structured logging setup.

All modules log through structlog with event names and key/value
context (period_key, log_id, ...). configure_logging() wires structlog
to the standard library so the level filter and handlers are shared
with everything else in the process.
"""

import logging
import sys
from typing import Optional

import structlog

from paytrack.config import LoggingSettings, get_settings


_configured = False


def configure_logging(settings: Optional[LoggingSettings] = None, force: bool = False) -> None:
    """
    Configure structlog and the root stdlib logger.

    Safe to call more than once; later calls are ignored unless force=True.
    """
    global _configured
    if _configured and not force:
        return

    settings = settings or get_settings().logging
    level = getattr(logging, settings.level)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=force,
    )
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

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
    _configured = True

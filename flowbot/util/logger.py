"""
Application Logging

structlog, one JSON line per event:
    {"event": ..., "level": ..., "timestamp": ..., <keyword context>}

Modules log through ``structlog.get_logger(__name__)`` and pass context as
keywords: ``logger.info("Bot created", bot_id = 7)``.
"""

# Python Packages
import logging

import structlog

# Constants
from ..base import constants





def configure_logging(level: str = None):
    """
    Configure structlog for this process. Safe to call more than once.
    """

    log_level = logging.getLevelName((level or constants.LOG_LEVEL).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    structlog.configure(
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt = "iso", utc = True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default = str),
        ],
        wrapper_class = structlog.make_filtering_bound_logger(log_level),
        logger_factory = structlog.PrintLoggerFactory(),
        cache_logger_on_first_use = False,
    )

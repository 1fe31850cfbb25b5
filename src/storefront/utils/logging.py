"""Logging configuration for the storefront domain.

Console output while developing and testing, one JSON object per line in
production (``PROTEAN_ENV=production``).
"""

import logging
import os

import structlog


def configure_logging(level=logging.INFO):
    if os.environ.get("PROTEAN_ENV") == "production":
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            *renderers,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    # Suppress noisy library loggers
    logging.getLogger("protean").setLevel(logging.WARNING)


def get_logger(name):
    return structlog.get_logger(name)

"""
Structured logging configuration for the rules engine.
"""
import logging
import os
import sys
from typing import Optional

import structlog


def _level_for(environment: str) -> int:
    if environment == "production":
        return logging.INFO
    if environment == "testing":
        return logging.WARNING
    return logging.DEBUG


def configure_logging(environment: str = "development"):
    """Configure structured logging based on environment.

    "production" renders JSON at INFO, "testing" keeps only warnings, and
    anything else renders to the console at DEBUG.
    """
    level = _level_for(environment)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if environment == "production" else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def get_logger(name: Optional[str] = None):
    """Get a logger instance, bound to `name` when given.

    If the application has not configured structlog yet, logging is set up
    from the ENVIRONMENT variable, defaulting to "production".
    """
    if not structlog.is_configured():
        configure_logging(os.getenv("ENVIRONMENT", "production"))
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()

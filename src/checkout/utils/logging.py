"""Logging configuration for the Checkout domain."""

import logging
import os
import sys

import structlog


def configure_logging(level: str | None = None) -> None:
    """Configure stdlib logging and structlog with a shared processor chain.

    JSON output in production, console rendering everywhere else.
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    # Suppress noisy library loggers
    logging.getLogger("protean").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if os.environ.get("PROTEAN_ENV") == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=os.environ.get("PROTEAN_ENV") == "production",
    )


def get_logger(name: str):
    return structlog.get_logger(name)

"""Logging configuration for the Storefront domain."""

import logging

import structlog

logger = structlog.get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog for the web process.

    Console rendering in development, JSON lines when ``json_output`` is set.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

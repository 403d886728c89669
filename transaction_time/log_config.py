"""Structured logging setup for hosts embedding the filter"""
import logging

import structlog


def configure_logging(log_level: str = "info", log_format: str = "json") -> None:
    """
    Configure structlog for the transaction time filter

    Args:
        log_level: Minimum level to emit (debug, info, warning, error)
        log_format: "json" for JSON lines, "text" for the console renderer
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

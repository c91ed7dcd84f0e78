"""Structured logging utilities for eksboot."""

import logging
import sys
from typing import Any

import structlog


def setup_logging(level: str = "INFO", format: str = "json", output: str = "stdout") -> None:
    """Configure structured logging for eksboot.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json or console)
        output: Output destination (stdout or stderr)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    stream = sys.stdout if output == "stdout" else sys.stderr

    # basicConfig is a no-op once a root handler exists (always the case on Lambda)
    logging.basicConfig(format="%(message)s", stream=stream, level=log_level)
    logging.getLogger().setLevel(log_level)
    logging.getLogger("botocore").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("urllib3").setLevel(max(log_level, logging.WARNING))

    if format == "json":
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)


def bind_invocation_context(**kwargs: Any) -> None:
    """Replace the per-invocation logging context.

    Clears whatever a previous invocation in the same process bound first.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**kwargs)


def log_error(
    logger: structlog.BoundLogger,
    error: Exception,
    operation: str | None = None,
    **kwargs: Any,
) -> None:
    """Log an error with structured context.

    Args:
        logger: Logger instance
        error: Exception instance
        operation: Operation name (optional)
        **kwargs: Additional context fields
    """
    context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **kwargs,
    }

    if operation:
        context["operation"] = operation

    logger.error("error_occurred", **context, exc_info=True)

"""
Logging Setup - Form Builder API
formbuilder/core/logging.py

Configures structlog on top of the stdlib logging handlers so that
module loggers (logging.getLogger) and structlog loggers share one
output stream and one format.
"""

import logging
import sys

import structlog

from formbuilder.config import settings


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure stdout logging in JSON or console format.

    Args:
        level: Log level name, defaults to settings.LOG_LEVEL.
        fmt: "json" or "console", defaults to settings.LOG_FORMAT.
    """
    level = level or settings.LOG_LEVEL
    fmt = fmt or settings.LOG_FORMAT

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=shared_processors + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=[handler], force=True)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to `name`."""
    return structlog.get_logger(name)

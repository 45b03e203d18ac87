"""
Logger configuration.

Provides configured logger with ISO timestamps and correlation ID injection.

Dependencies: logging (stdlib), training_erp.configs
System role: Centralized logging configuration
"""

import logging
import sys

from training_erp.observability.correlation import get_correlation_id


class CorrelationIdFilter(logging.Filter):
    """Attach the current request correlation ID to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure Python logging with ISO timestamp and structured format.

    Args:
        level: Root log level (defaults to LOG_LEVEL setting)
        fmt: Record format (defaults to LOG_FORMAT setting)
    """
    from training_erp.configs import get_settings

    observability = get_settings().observability
    level = level or observability.level
    fmt = fmt or observability.format

    # Remove any existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S")
    )

    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    # Reduce noise from verbose third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get configured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)

"""
Observability: logging setup, correlation IDs and HTTP middleware.
"""

from training_erp.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from training_erp.observability.logger import configure_logging, get_logger
from training_erp.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

__all__ = [
    "clear_correlation_id",
    "configure_logging",
    "CorrelationMiddleware",
    "get_correlation_id",
    "get_logger",
    "RequestLoggingMiddleware",
    "set_correlation_id",
]

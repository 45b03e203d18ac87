"""
Request correlation IDs.

The ID travels with the request through contextvars so every log record
emitted while handling it can be tied together. Incoming IDs from the
X-Correlation-ID header are reused only when they look sane; anything
else is replaced with a fresh UUID.

Dependencies: contextvars (stdlib)
System role: Request tracing across service boundaries
"""

import re
import uuid
from contextvars import ContextVar

MAX_CORRELATION_ID_LENGTH = 128
_ALLOWED = re.compile(r"^[A-Za-z0-9._:\-]+$")

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")


def sanitize_correlation_id(candidate: str | None) -> str | None:
    """Return the candidate when usable as a log token, else None."""
    if not candidate:
        return None
    candidate = candidate.strip()
    if not candidate or len(candidate) > MAX_CORRELATION_ID_LENGTH:
        return None
    return candidate if _ALLOWED.match(candidate) else None


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Bind a correlation ID to the current context.

    Args:
        correlation_id: Incoming ID; invalid or missing values get a new UUID

    Returns:
        str: The ID now bound
    """
    value = sanitize_correlation_id(correlation_id) or str(uuid.uuid4())
    correlation_id_ctx.set(value)
    return value


def get_correlation_id() -> str:
    """Current correlation ID, or "-" outside a request."""
    return correlation_id_ctx.get() or "-"


def clear_correlation_id() -> None:
    correlation_id_ctx.set("")

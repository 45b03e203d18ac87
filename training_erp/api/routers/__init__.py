"""API routers."""

from .deal_sessions import router as deal_sessions_router
from .health import router as health_router
from .resource_conflicts import router as resource_conflicts_router

__all__ = [
    "deal_sessions_router",
    "health_router",
    "resource_conflicts_router",
]

"""API-specific dependencies."""

from .dependencies import (
    get_resource_conflict_finder,
    get_session_mutation_service,
    get_session_query_service,
    get_session_reconciler,
    get_settings_dependency,
)

__all__ = [
    "get_resource_conflict_finder",
    "get_session_mutation_service",
    "get_session_query_service",
    "get_session_reconciler",
    "get_settings_dependency",
]

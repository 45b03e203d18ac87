"""Service orchestrators."""

from .session_mutation_service import SessionMutationService
from .session_query_service import SessionQueryService
from .session_reconciler import SessionReconciler

__all__ = [
    "SessionMutationService",
    "SessionQueryService",
    "SessionReconciler",
]

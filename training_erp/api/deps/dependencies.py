"""
Dependency injection container.

Factory functions for FastAPI dependencies. Every service receives the
request-scoped AsyncSession, which owns the request's transaction.

Dependencies: training_erp.configs, training_erp.application, training_erp.boundary
System role: DI container for service injection
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from training_erp.application.services import (
    SessionMutationService,
    SessionQueryService,
    SessionReconciler,
)
from training_erp.boundary.db import ResourceConflictFinder, get_async_db
from training_erp.configs import Settings, get_settings


def get_settings_dependency() -> Settings:
    """
    Get application settings.

    Returns:
        Settings: Cached application settings
    """
    return get_settings()


def get_session_reconciler(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> SessionReconciler:
    """
    Get SessionReconciler with injected database session.

    Args:
        db: Async database session from dependency
        settings: Application settings

    Returns:
        SessionReconciler: Reconciler bound to the request transaction
    """
    return SessionReconciler(db, settings.planning)


def get_session_mutation_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> SessionMutationService:
    """
    Get SessionMutationService with injected database session.

    Args:
        db: Async database session from dependency
        settings: Application settings

    Returns:
        SessionMutationService: Mutation service bound to the request transaction
    """
    return SessionMutationService(db, settings.planning)


def get_session_query_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> SessionQueryService:
    """Get SessionQueryService with injected database session."""
    return SessionQueryService(db, settings.planning)


def get_resource_conflict_finder(
    db: AsyncSession = Depends(get_async_db),
) -> ResourceConflictFinder:
    """Get ResourceConflictFinder with injected database session."""
    return ResourceConflictFinder(db)

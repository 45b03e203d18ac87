"""
Exception hierarchy for the training ERP.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging, plus
the machine-readable error code and HTTP status used by the API layer.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class TrainingErpException(Exception):
    """Base exception for all training ERP errors."""

    error_code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(TrainingErpException):
    """Raised when input validation fails."""

    error_code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        self.field = field
        super().__init__(message, details)


class NotFoundError(TrainingErpException):
    """Raised when a deal, session or other referenced entity does not exist."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        message: str,
        entity: str | None = None,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if entity:
            details["entity"] = entity
        if entity_id:
            details["entity_id"] = entity_id
        super().__init__(message, details)


class DealNotFoundError(NotFoundError):
    """Raised when a deal cannot be found."""

    def __init__(self, deal_id: str) -> None:
        super().__init__("Deal no encontrado", entity="deal", entity_id=deal_id)


class SessionNotFoundError(NotFoundError):
    """Raised when a deal session cannot be found."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Sesión no encontrada", entity="session", entity_id=session_id)


class ResourceConflictError(TrainingErpException):
    """
    Raised when a requested time range overlaps an active session that
    already holds one of the requested resources.

    Attributes:
        conflicts: Serialized ResourceConflictSummary entries, in check order
    """

    error_code = "RESOURCE_CONFLICT"
    status_code = 409

    def __init__(self, message: str, conflicts: list[dict[str, Any]]) -> None:
        self.conflicts = conflicts
        super().__init__(message, {"conflicts": len(conflicts)})

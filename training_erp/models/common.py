"""
Common response models.

Every response carries "ok"; failures add a machine-readable error code
and a human-readable message.

Dependencies: pydantic
System role: Common API response structures
"""

from typing import Any

from pydantic import BaseModel, Field


class OkResponse(BaseModel):
    """Success envelope without payload."""

    ok: bool = True


class ErrorResponse(BaseModel):
    """Error envelope."""

    ok: bool = False
    error_code: str = Field(description="VALIDATION_ERROR, NOT_FOUND, RESOURCE_CONFLICT or INTERNAL_ERROR")
    message: str = Field(description="Human-readable error message")


class ConflictErrorResponse(ErrorResponse):
    """Error envelope for resource conflicts."""

    conflicts: list[dict[str, Any]] = Field(default_factory=list)

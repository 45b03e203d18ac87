"""Pydantic request/response schemas."""

from training_erp.models.common import ConflictErrorResponse, ErrorResponse, OkResponse
from training_erp.models.deal_session import (
    CreateDealSessionRequest,
    DealSessionEnvelope,
    DealSessionListEnvelope,
    DealSessionResponse,
    SyncDealSessionsRequest,
    SyncResultEnvelope,
    UpdateDealSessionRequest,
)
from training_erp.models.resource_conflict import (
    ResourceConflictEnvelope,
    ResourceConflictSummaryResponse,
)

__all__ = [
    "ConflictErrorResponse",
    "CreateDealSessionRequest",
    "DealSessionEnvelope",
    "DealSessionListEnvelope",
    "DealSessionResponse",
    "ErrorResponse",
    "OkResponse",
    "ResourceConflictEnvelope",
    "ResourceConflictSummaryResponse",
    "SyncDealSessionsRequest",
    "SyncResultEnvelope",
    "UpdateDealSessionRequest",
]

"""
Deal session API endpoints.

Routes:
- GET /deal-sessions?dealId=...&expand=...&estado=... - List a deal's sessions
- GET /deal-sessions/{id} - Fetch one session
- POST /deal-sessions/sync - Reconcile a deal's sessions with its products
- POST /deal-sessions - Create a session (or sync when no session field is given)
- PATCH /deal-sessions/{id} - Update a session
- DELETE /deal-sessions/{id} - Delete a session

Dependencies: training_erp.application.services, training_erp.models
System role: Deal session HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query

from training_erp.api.deps import (
    get_session_mutation_service,
    get_session_query_service,
    get_session_reconciler,
)
from training_erp.api.routers.error_handling import handle_api_errors
from training_erp.application.services import (
    SessionMutationService,
    SessionQueryService,
    SessionReconciler,
)
from training_erp.application.session_presenter import ExpandOptions
from training_erp.core.exceptions import ValidationError
from training_erp.core.planning.rules import to_nullable_string
from training_erp.models.common import ConflictErrorResponse, ErrorResponse, OkResponse
from training_erp.models.deal_session import (
    CreateDealSessionRequest,
    DealSessionEnvelope,
    DealSessionListEnvelope,
    SyncDealSessionsRequest,
    SyncResultEnvelope,
    UpdateDealSessionRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/deal-sessions",
    tags=["deal-sessions"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ConflictErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def _require_deal_id(value: str | None) -> str:
    deal_id = to_nullable_string(value)
    if deal_id is None:
        raise ValidationError("Falta dealId", field="dealId")
    return deal_id


@router.get("", response_model=DealSessionListEnvelope)
@handle_api_errors
async def list_deal_sessions(
    deal_id: str | None = Query(default=None, alias="dealId"),
    deal_id_snake: str | None = Query(default=None, alias="deal_id"),
    expand: str | None = Query(default=None),
    estado: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    query_service: SessionQueryService = Depends(get_session_query_service),
) -> DealSessionListEnvelope:
    """
    List a deal's sessions with reconciliation flags.

    Args:
        deal_id: Deal to list (dealId or deal_id)
        expand: Comma-separated relations (deal_product, sala, formadores,
            unidades_moviles, resources)
        estado: Optional status filter (alias: status)
        query_service: Injected SessionQueryService

    Returns:
        DealSessionListEnvelope: {"ok": true, "sessions": [...]}
    """
    sessions = await query_service.list_sessions(
        _require_deal_id(deal_id or deal_id_snake),
        status=estado if estado is not None else status_filter,
        expand=ExpandOptions.parse(expand),
    )
    return DealSessionListEnvelope(sessions=sessions)


@router.get("/{session_id}", response_model=DealSessionEnvelope)
@handle_api_errors
async def get_deal_session(
    session_id: str,
    expand: str | None = Query(default=None),
    query_service: SessionQueryService = Depends(get_session_query_service),
) -> DealSessionEnvelope:
    """Fetch one session by id."""
    session = await query_service.get_session(session_id, ExpandOptions.parse(expand))
    return DealSessionEnvelope(session=session)


@router.post("/sync", response_model=SyncResultEnvelope)
@handle_api_errors
async def sync_deal_sessions(
    request: SyncDealSessionsRequest,
    reconciler: SessionReconciler = Depends(get_session_reconciler),
) -> SyncResultEnvelope:
    """
    Reconcile a deal's sessions with its plannable products.

    Returns:
        SyncResultEnvelope: created/deleted counts, flagged ids and total
    """
    result = await reconciler.sync(_require_deal_id(request.deal_id))
    return SyncResultEnvelope(**result)


@router.post("", response_model=DealSessionEnvelope | SyncResultEnvelope)
@handle_api_errors
async def create_deal_session(
    request: CreateDealSessionRequest,
    expand: str | None = Query(default=None),
    mutation_service: SessionMutationService = Depends(get_session_mutation_service),
    reconciler: SessionReconciler = Depends(get_session_reconciler),
) -> DealSessionEnvelope | SyncResultEnvelope:
    """
    Create a session, or sync the deal when the body has no session field.

    Args:
        request: dealId plus any of the session fields
        expand: Relations to render (the body "expand" takes precedence)

    Returns:
        DealSessionEnvelope for a creation, SyncResultEnvelope for a sync
    """
    deal_id = _require_deal_id(request.deal_id)

    if not request.has_session_fields:
        result = await reconciler.sync(deal_id)
        return SyncResultEnvelope(**result)

    session = await mutation_service.create_session(
        deal_id,
        request.supplied_fields(),
        ExpandOptions.parse(request.expand if request.expand is not None else expand),
    )
    return DealSessionEnvelope(session=session)


@router.patch("/{session_id}", response_model=DealSessionEnvelope)
@handle_api_errors
async def update_deal_session(
    session_id: str,
    request: UpdateDealSessionRequest,
    expand: str | None = Query(default=None),
    mutation_service: SessionMutationService = Depends(get_session_mutation_service),
) -> DealSessionEnvelope:
    """Patch a session; only supplied keys change."""
    session = await mutation_service.update_session(
        session_id,
        request.supplied_fields(),
        ExpandOptions.parse(request.expand if request.expand is not None else expand),
    )
    return DealSessionEnvelope(session=session)


@router.delete("/{session_id}", response_model=OkResponse)
@handle_api_errors
async def delete_deal_session(
    session_id: str,
    mutation_service: SessionMutationService = Depends(get_session_mutation_service),
) -> OkResponse:
    """Hard-delete a session and its trainer/mobile unit links."""
    await mutation_service.delete_session(session_id)
    return OkResponse()

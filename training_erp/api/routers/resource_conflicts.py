"""
Resource conflict API endpoints.

Routes:
- GET /resource-conflicts?inicio=...&fin=...&sala_id=...&formadores=...&unidades_moviles=...

Lets calendar views check resource availability before saving.

Dependencies: training_erp.boundary.db.CRUD, training_erp.models
System role: Resource availability HTTP API
"""

from fastapi import APIRouter, Depends, Query

from training_erp.api.deps import get_resource_conflict_finder
from training_erp.api.routers.error_handling import handle_api_errors
from training_erp.application.services.session_mutation_service import (
    parse_datetime,
    parse_id_list,
)
from training_erp.boundary.db.CRUD.resource_conflict_crud import ResourceConflictFinder
from training_erp.core.exceptions import ValidationError
from training_erp.core.planning.conflicts import TimeRange
from training_erp.core.planning.rules import is_valid_range, to_nullable_string
from training_erp.models.common import ErrorResponse
from training_erp.models.resource_conflict import ResourceConflictEnvelope

router = APIRouter(
    prefix="/resource-conflicts",
    tags=["resource-conflicts"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


def _split_ids(values: list[str] | None) -> list[str]:
    ids: list[str] = []
    for value in values or []:
        ids.extend(part for part in value.split(","))
    return parse_id_list(ids, "ids")


@router.get("", response_model=ResourceConflictEnvelope)
@handle_api_errors
async def find_resource_conflicts(
    inicio: str | None = Query(default=None),
    fin: str | None = Query(default=None),
    sala_id: str | None = Query(default=None),
    formadores: list[str] | None = Query(default=None),
    unidades_moviles: list[str] | None = Query(default=None),
    exclude_session_id: str | None = Query(default=None, alias="excludeSessionId"),
    finder: ResourceConflictFinder = Depends(get_resource_conflict_finder),
) -> ResourceConflictEnvelope:
    """
    List active sessions that already hold the given resources.

    Trainer and mobile unit ids may be repeated or comma-separated.

    Returns:
        ResourceConflictEnvelope: conflicts ordered room, trainers, mobile units
    """
    start_at = parse_datetime(inicio, "inicio")
    end_at = parse_datetime(fin, "fin")
    if not is_valid_range(start_at, end_at):
        raise ValidationError(
            "Se requieren inicio y fin válidos, con fin posterior a inicio",
            field="fin",
        )

    summaries = await finder.find_all(
        to_nullable_string(sala_id),
        _split_ids(formadores),
        _split_ids(unidades_moviles),
        TimeRange(start_at, end_at),
        to_nullable_string(exclude_session_id),
    )
    return ResourceConflictEnvelope(conflicts=[summary.to_dict() for summary in summaries])

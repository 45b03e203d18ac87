"""
Session mutation service.

Creates, updates and deletes deal sessions. Every write follows the same
sequence inside one transaction:

1. Validate input and resolve the values the session will end up with.
2. Lock the rows of every resource being assigned (room, then trainers,
   then mobile units, each in id order) so concurrent writers contending
   for the same resource are serialized.
3. Look for overlapping active sessions on those resources.
4. Compute the status, write the session row and replace join rows.
5. Commit, then re-read the session with the requested expansions.

Any error rolls the transaction back, so a rejected write leaves the
stored session untouched.

Dependencies: training_erp.boundary.db.CRUD, training_erp.core.planning
System role: Session scheduling use case
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from training_erp.application.services.session_reconciler import SessionReconciler
from training_erp.application.session_presenter import (
    ExpandOptions,
    map_session,
    snapshot_from_model,
)
from training_erp.boundary.db.base import new_id, utcnow
from training_erp.boundary.db.CRUD.deal_crud import deal_product_crud
from training_erp.boundary.db.CRUD.deal_session_crud import (
    deal_session_crud,
    session_load_options,
)
from training_erp.boundary.db.CRUD.resource_conflict_crud import ResourceConflictFinder
from training_erp.boundary.db.CRUD.resource_crud import (
    mobile_unit_crud,
    room_crud,
    trainer_crud,
)
from training_erp.configs import get_settings
from training_erp.configs.planning import PlanningSettings
from training_erp.core.exceptions import (
    ResourceConflictError,
    SessionNotFoundError,
    ValidationError,
)
from training_erp.core.planning.conflicts import TimeRange, build_conflict_message
from training_erp.core.planning.reconciliation import ProductLine, plan_reconciliation
from training_erp.core.planning.rules import (
    derive_end,
    is_session_complete,
    is_valid_range,
    normalize_status,
    resolve_status,
    to_nullable_string,
)
from training_erp.core.timezone import as_utc, parse_iso

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("direccion", "sede", "comentarios")


@dataclass
class ResourceSelection:
    """Validated resource ids; None means "not supplied"."""

    sala_id: str | None = None
    sala_supplied: bool = False
    trainer_ids: list[str] | None = None
    mobile_unit_ids: list[str] | None = None


def parse_datetime(value: Any, field: str) -> datetime | None:
    """
    Parse an ISO-8601 input into an aware UTC datetime.

    Naive values are business-local time. Blank means None.

    Raises:
        ValidationError: If the value is not a valid timestamp
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str):
        try:
            return as_utc(parse_iso(value))
        except ValueError:
            pass
    raise ValidationError(
        f"El campo {field} debe ser una fecha válida ISO-8601", field=field
    )


def parse_id_list(value: Any, field: str) -> list[str]:
    """
    Normalize a list of resource ids: trimmed, blanks dropped, de-duplicated.

    None clears the assignment and yields an empty list.

    Raises:
        ValidationError: If the value is not a list
    """
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError(
            f"El campo {field} debe ser una lista de identificadores", field=field
        )
    ids = (to_nullable_string(item) for item in value)
    return list(dict.fromkeys(item for item in ids if item))


class SessionMutationService:
    """Session write orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        planning: PlanningSettings | None = None,
        conflict_finder: ResourceConflictFinder | None = None,
    ) -> None:
        """
        Initialize mutation service with async database session.

        Args:
            db: Async SQLAlchemy session (transaction owner)
            planning: Planning settings (defaults to application settings)
            conflict_finder: Overlap lookups bound to the same session
        """
        self.db = db
        self.planning = planning or get_settings().planning
        self.conflict_finder = conflict_finder or ResourceConflictFinder(db)
        self.reconciler = SessionReconciler(db, self.planning)

    async def _resolve_product(
        self,
        deal_id: str,
        plannable: list[ProductLine],
        requested_id: str | None,
    ) -> ProductLine:
        if requested_id:
            for product in plannable:
                if product.id == requested_id:
                    return product
            product = await deal_product_crud.get_by_id(self.db, requested_id)
            if product is None or product.deal_id != deal_id:
                raise ValidationError(
                    "El producto asociado a la sesión no es válido para este presupuesto",
                    field="deal_product_id",
                )
            return ProductLine(
                id=product.id,
                code=product.code,
                quantity=None,
                hours=product.hours,
                name=product.name,
            )

        if len(plannable) == 1:
            return plannable[0]

        raise ValidationError(
            "Es necesario indicar el producto asociado a la sesión",
            field="deal_product_id",
        )

    async def _validate_resources(self, fields: Mapping[str, Any]) -> ResourceSelection:
        """
        Validate supplied resource ids.

        Nothing is written here; any failure aborts the whole request.
        """
        selection = ResourceSelection()

        if "sala_id" in fields:
            selection.sala_supplied = True
            selection.sala_id = to_nullable_string(fields["sala_id"])
            if selection.sala_id:
                rooms = await room_crud.get_many(self.db, [selection.sala_id])
                if not rooms:
                    raise ValidationError(
                        "La sala especificada no existe", field="sala_id"
                    )

        if "formadores" in fields:
            trainer_ids = parse_id_list(fields["formadores"], "formadores")
            if trainer_ids:
                trainers = await trainer_crud.get_active(self.db, trainer_ids)
                if len(trainers) != len(trainer_ids):
                    raise ValidationError(
                        "Alguno de los formadores especificados no existe o no está activo",
                        field="formadores",
                    )
            selection.trainer_ids = trainer_ids

        if "unidades_moviles" in fields:
            unit_ids = parse_id_list(fields["unidades_moviles"], "unidades_moviles")
            if unit_ids:
                units = await mobile_unit_crud.get_many(self.db, unit_ids)
                if len(units) != len(unit_ids):
                    raise ValidationError(
                        "Alguna de las unidades móviles especificadas no existe",
                        field="unidades_moviles",
                    )
            selection.mobile_unit_ids = unit_ids

        return selection

    async def _lock_resources(
        self,
        sala_id: str | None,
        trainer_ids: list[str],
        unit_ids: list[str],
    ) -> None:
        """
        Lock resource rows until commit.

        Always room, then trainers, then mobile units, each in id order, so
        two writers never wait on each other in opposite orders.
        """
        if not self.planning.lock_resources:
            return
        if sala_id:
            await room_crud.get_many(self.db, [sala_id], lock=True)
        if trainer_ids:
            await trainer_crud.get_many(self.db, trainer_ids, lock=True)
        if unit_ids:
            await mobile_unit_crud.get_many(self.db, unit_ids, lock=True)

    async def _check_conflicts(
        self,
        start_at: datetime | None,
        end_at: datetime | None,
        sala_id: str | None,
        trainer_ids: list[str],
        unit_ids: list[str],
        exclude_session_id: str | None = None,
    ) -> None:
        if not is_valid_range(start_at, end_at):
            return
        summaries = await self.conflict_finder.find_all(
            sala_id,
            trainer_ids,
            unit_ids,
            TimeRange(start_at, end_at),
            exclude_session_id,
        )
        if summaries:
            message = build_conflict_message(summaries)
            logger.warning(
                "Session write rejected by resource conflict",
                extra={
                    "exclude_session_id": exclude_session_id,
                    "resources": [summary.resource_id for summary in summaries],
                },
            )
            raise ResourceConflictError(
                message, [summary.to_dict() for summary in summaries]
            )

    @staticmethod
    def _check_range(start_at: datetime | None, end_at: datetime | None) -> None:
        if start_at is not None and end_at is not None and end_at <= start_at:
            raise ValidationError(
                "La fecha de fin debe ser posterior a la fecha de inicio", field="fin"
            )

    async def create_session(
        self,
        deal_id: str,
        fields: Mapping[str, Any],
        expand: ExpandOptions | None = None,
    ) -> dict:
        """
        Create a session on a deal.

        Args:
            deal_id: Owning deal
            fields: Supplied session fields (inicio, fin, sala_id, formadores,
                unidades_moviles, direccion, sede, comentarios, estado,
                deal_product_id); absent keys take their defaults
            expand: Relations to render in the result

        Returns:
            dict: Mapped session including reconciliation metadata

        Raises:
            DealNotFoundError: If the deal does not exist
            ValidationError: If any input is invalid
            ResourceConflictError: If an assigned resource is busy
        """
        expand = expand or ExpandOptions()
        try:
            context = await self.reconciler.load_context(deal_id)
            product = await self._resolve_product(
                deal_id,
                context.plannable,
                to_nullable_string(fields.get("deal_product_id")),
            )

            start_at = parse_datetime(fields.get("inicio"), "inicio")
            end_at = parse_datetime(fields.get("fin"), "fin")
            if start_at is not None and "fin" not in fields:
                end_at = derive_end(start_at, product.hours)
            self._check_range(start_at, end_at)

            explicit_status = normalize_status(fields.get("estado"))
            text = {name: to_nullable_string(fields.get(name)) for name in TEXT_FIELDS}

            resources = await self._validate_resources(fields)
            trainer_ids = resources.trainer_ids or []
            unit_ids = resources.mobile_unit_ids or []

            await self._lock_resources(resources.sala_id, trainer_ids, unit_ids)
            await self._check_conflicts(
                start_at, end_at, resources.sala_id, trainer_ids, unit_ids
            )

            complete = is_session_complete(
                start_at,
                end_at,
                resources.sala_id,
                len(trainer_ids),
                text["direccion"],
                text["sede"],
            )
            status = resolve_status(None, explicit_status, complete)

            created = await deal_session_crud.create(
                self.db,
                session_id=new_id(),
                deal_id=deal_id,
                deal_product_id=product.id,
                status=status,
                start_at=start_at,
                end_at=end_at,
                sala_id=resources.sala_id,
                origen=product.code,
                **text,
            )
            session_id = created.session_id
            await deal_session_crud.replace_trainers(self.db, session_id, trainer_ids)
            await deal_session_crud.replace_mobile_units(self.db, session_id, unit_ids)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Session created",
            extra={"session_id": session_id, "deal_id": deal_id, "status": status.value},
        )

        rows = await deal_session_crud.list_for_deal(
            self.db, deal_id, options=expand.load_options()
        )
        plan = plan_reconciliation(
            context.plannable, [snapshot_from_model(row) for row in rows]
        )
        new_row = next(row for row in rows if row.session_id == session_id)
        return map_session(new_row, expand, plan.empty, plan.to_flag)

    async def update_session(
        self,
        session_id: str,
        fields: Mapping[str, Any],
        expand: ExpandOptions | None = None,
    ) -> dict:
        """
        Patch a session; only keys present in fields change.

        Trainer and mobile unit lists replace the current assignment; None
        clears it. Conflict checks combine stored and supplied values and
        ignore the session itself.

        Returns:
            dict: Mapped session

        Raises:
            SessionNotFoundError: If the session does not exist
            ValidationError: If any input is invalid
            ResourceConflictError: If an assigned resource is busy
        """
        expand = expand or ExpandOptions()
        try:
            session = await deal_session_crud.get_with_relations(
                self.db,
                session_id,
                options=session_load_options(deal_product=True),
                lock=True,
            )
            if session is None:
                raise SessionNotFoundError(session_id)

            changes: dict[str, Any] = {}
            if "inicio" in fields:
                changes["start_at"] = parse_datetime(fields["inicio"], "inicio")
            if "fin" in fields:
                changes["end_at"] = parse_datetime(fields["fin"], "fin")
            for name in TEXT_FIELDS:
                if name in fields:
                    changes[name] = to_nullable_string(fields[name])
            explicit_status = normalize_status(fields["estado"]) if "estado" in fields else None

            if (
                changes.get("start_at") is not None
                and "fin" not in fields
                and session.deal_product is not None
            ):
                derived = derive_end(changes["start_at"], session.deal_product.hours)
                if derived is not None:
                    changes["end_at"] = derived

            resources = await self._validate_resources(fields)
            if resources.sala_supplied:
                changes["sala_id"] = resources.sala_id

            next_start = changes.get("start_at", as_utc(session.start_at, naive_is_utc=True))
            next_end = changes.get("end_at", as_utc(session.end_at, naive_is_utc=True))
            next_sala = changes.get("sala_id", session.sala_id)
            next_direccion = changes.get("direccion", session.direccion)
            next_sede = changes.get("sede", session.sede)
            next_trainers = (
                resources.trainer_ids
                if resources.trainer_ids is not None
                else list(session.trainer_ids)
            )
            next_units = (
                resources.mobile_unit_ids
                if resources.mobile_unit_ids is not None
                else list(session.mobile_unit_ids)
            )
            self._check_range(next_start, next_end)

            await self._lock_resources(next_sala, next_trainers, next_units)
            await self._check_conflicts(
                next_start,
                next_end,
                next_sala,
                next_trainers,
                next_units,
                exclude_session_id=session_id,
            )

            complete = is_session_complete(
                next_start,
                next_end,
                next_sala,
                len(next_trainers),
                next_direccion,
                next_sede,
            )
            changes["status"] = resolve_status(session.status, explicit_status, complete)

            for name, value in changes.items():
                setattr(session, name, value)
            session.updated_at = utcnow()
            await self.db.flush()

            if resources.trainer_ids is not None:
                await deal_session_crud.replace_trainers(
                    self.db, session_id, resources.trainer_ids
                )
            if resources.mobile_unit_ids is not None:
                await deal_session_crud.replace_mobile_units(
                    self.db, session_id, resources.mobile_unit_ids
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Session updated",
            extra={"session_id": session_id, "fields": sorted(fields)},
        )

        updated = await deal_session_crud.get_with_relations(
            self.db, session_id, options=expand.load_options()
        )
        if updated is None:
            raise SessionNotFoundError(session_id)
        return map_session(updated, expand)

    async def delete_session(self, session_id: str) -> None:
        """
        Hard-delete a session and its trainer/mobile unit links.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        try:
            # join rows go with the session through ON DELETE CASCADE
            if not await deal_session_crud.delete_by_id(self.db, session_id):
                raise SessionNotFoundError(session_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Session deleted", extra={"session_id": session_id})

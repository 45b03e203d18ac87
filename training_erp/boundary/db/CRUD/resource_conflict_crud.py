"""
Resource conflict lookups.

Finds active sessions that occupy a room, trainer or mobile unit during a
time range. A session occupies a resource when its status is active, both
endpoints are set, and start < range.end AND end > range.start (touching
endpoints do not overlap).

Dependencies: sqlalchemy, training_erp.boundary.db.models, training_erp.core
System role: Read-only conflict detection for session mutations and calendars
"""

import logging
from collections.abc import Iterable

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from training_erp.boundary.db.CRUD.resource_crud import (
    mobile_unit_crud,
    room_crud,
    trainer_crud,
)
from training_erp.boundary.db.models.deal_model import (
    DealModel,
    DealProductModel,
    OrganizationModel,
)
from training_erp.boundary.db.models.deal_session_model import (
    DealSessionMobileUnitModel,
    DealSessionModel,
    DealSessionTrainerModel,
)
from training_erp.core.planning.conflicts import (
    ConflictDetail,
    ResourceConflictSummary,
    ResourceType,
    TimeRange,
)
from training_erp.core.planning.rules import ACTIVE_STATUSES
from training_erp.core.timezone import as_utc, to_local_iso

logger = logging.getLogger(__name__)


class ResourceConflictFinder:
    """
    Overlap queries against the session store.

    Bound to the caller's AsyncSession so lookups made during a mutation
    run inside the same transaction as the write that follows.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _base_query(self, resource_column, range_: TimeRange, link_model=None) -> Select:
        start = as_utc(range_.start)
        end = as_utc(range_.end)
        stmt = select(
            resource_column.label("resource_id"),
            DealSessionModel.session_id,
            DealSessionModel.deal_id,
            DealSessionModel.start_at,
            DealSessionModel.end_at,
            DealModel.title.label("deal_title"),
            OrganizationModel.name.label("organization_name"),
            DealProductModel.code.label("product_code"),
            DealProductModel.name.label("product_name"),
        )
        if link_model is None:
            stmt = stmt.select_from(DealSessionModel)
        else:
            stmt = stmt.select_from(link_model).join(
                DealSessionModel, DealSessionModel.session_id == link_model.session_id
            )
        return (
            stmt.join(DealModel, DealModel.deal_id == DealSessionModel.deal_id)
            .outerjoin(OrganizationModel, OrganizationModel.org_id == DealModel.org_id)
            .outerjoin(DealProductModel, DealProductModel.id == DealSessionModel.deal_product_id)
            .where(
                DealSessionModel.status.in_(list(ACTIVE_STATUSES)),
                DealSessionModel.start_at.is_not(None),
                DealSessionModel.end_at.is_not(None),
                DealSessionModel.start_at < end,
                DealSessionModel.end_at > start,
            )
            .order_by(DealSessionModel.start_at, DealSessionModel.session_id)
        )

    async def find_conflicts(
        self,
        resource_type: ResourceType | str,
        resource_ids: Iterable[str],
        range_: TimeRange,
        exclude_session_id: str | None = None,
    ) -> dict[str, list[ConflictDetail]]:
        """
        Find overlapping active sessions for each resource id.

        Args:
            resource_type: Kind of resource to check
            resource_ids: Resources to check; empty means no query is issued
            range_: Requested interval (start < end is the caller's job)
            exclude_session_id: Session to ignore, usually the one being edited

        Returns:
            Mapping of resource id to its conflicts; ids without conflicts are absent

        Raises:
            ValueError: If resource_type is not a known resource kind
        """
        resource_type = ResourceType(resource_type)
        ids = sorted({resource_id for resource_id in resource_ids if resource_id})
        if not ids:
            return {}

        if resource_type is ResourceType.ROOM:
            stmt = self._base_query(DealSessionModel.sala_id, range_).where(
                DealSessionModel.sala_id.in_(ids)
            )
        elif resource_type is ResourceType.TRAINER:
            stmt = (
                self._base_query(
                    DealSessionTrainerModel.trainer_id, range_, DealSessionTrainerModel
                )
                .where(DealSessionTrainerModel.trainer_id.in_(ids))
            )
        elif resource_type is ResourceType.MOBILE_UNIT:
            stmt = (
                self._base_query(
                    DealSessionMobileUnitModel.unidad_id, range_, DealSessionMobileUnitModel
                )
                .where(DealSessionMobileUnitModel.unidad_id.in_(ids))
            )

        if exclude_session_id:
            stmt = stmt.where(DealSessionModel.session_id != exclude_session_id)

        result = await self.session.execute(stmt)

        conflicts: dict[str, list[ConflictDetail]] = {}
        for row in result:
            conflicts.setdefault(row.resource_id, []).append(
                ConflictDetail(
                    session_id=row.session_id,
                    deal_id=row.deal_id,
                    deal_title=row.deal_title,
                    organization_name=row.organization_name,
                    product_code=row.product_code,
                    product_name=row.product_name,
                    inicio=to_local_iso(row.start_at),
                    fin=to_local_iso(row.end_at),
                )
            )

        if conflicts:
            logger.debug(
                "Resource conflicts found",
                extra={
                    "resource_type": resource_type.value,
                    "resource_ids": list(conflicts),
                },
            )
        return conflicts

    async def find_all(
        self,
        room_id: str | None,
        trainer_ids: Iterable[str],
        unit_ids: Iterable[str],
        range_: TimeRange,
        exclude_session_id: str | None = None,
    ) -> list[ResourceConflictSummary]:
        """
        Check a room, trainers and mobile units in one call.

        The three lookups share this finder's AsyncSession, which cannot
        multiplex statements, so they run one after another.

        Returns:
            Summaries ordered room, trainers, mobile units; empty when free
        """
        trainer_ids = list(dict.fromkeys(trainer_ids))
        unit_ids = list(dict.fromkeys(unit_ids))

        room_conflicts = await self.find_conflicts(
            ResourceType.ROOM, [room_id] if room_id else [], range_, exclude_session_id
        )
        trainer_conflicts = await self.find_conflicts(
            ResourceType.TRAINER, trainer_ids, range_, exclude_session_id
        )
        unit_conflicts = await self.find_conflicts(
            ResourceType.MOBILE_UNIT, unit_ids, range_, exclude_session_id
        )

        summaries: list[ResourceConflictSummary] = []
        if room_conflicts:
            labels = await room_crud.get_labels(self.session, list(room_conflicts))
            summaries.extend(
                ResourceConflictSummary(ResourceType.ROOM, rid, labels.get(rid), details)
                for rid, details in room_conflicts.items()
            )
        if trainer_conflicts:
            labels = await trainer_crud.get_labels(self.session, list(trainer_conflicts))
            summaries.extend(
                ResourceConflictSummary(
                    ResourceType.TRAINER, tid, labels.get(tid), trainer_conflicts[tid]
                )
                for tid in trainer_ids
                if tid in trainer_conflicts
            )
        if unit_conflicts:
            labels = await mobile_unit_crud.get_labels(self.session, list(unit_conflicts))
            summaries.extend(
                ResourceConflictSummary(
                    ResourceType.MOBILE_UNIT, uid, labels.get(uid), unit_conflicts[uid]
                )
                for uid in unit_ids
                if uid in unit_conflicts
            )
        return summaries

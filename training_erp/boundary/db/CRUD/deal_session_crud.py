"""
Deal session CRUD operations.

Handles session rows and their trainer/mobile unit join rows. Join rows
are written with bulk statements, so callers that re-read a session after
a write use populate_existing to refresh already-loaded collections.

Dependencies: sqlalchemy, training_erp.boundary.db.models
System role: Session persistence for the reconciler, mutation and query services
"""

from typing import Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.interfaces import ORMOption

from training_erp.boundary.db.base import utcnow
from training_erp.boundary.db.CRUD.base_crud import BaseCRUD
from training_erp.boundary.db.models.deal_session_model import (
    DealSessionMobileUnitModel,
    DealSessionModel,
    DealSessionTrainerModel,
)


def session_load_options(
    deal_product: bool = False,
    sala: bool = False,
    formadores: bool = False,
    unidades_moviles: bool = False,
) -> list[ORMOption]:
    """
    Build eager-loading options for a session query.

    Join rows are always loaded because emptiness and completeness depend
    on them; the related resource rows are loaded only when requested.
    """
    trainers = selectinload(DealSessionModel.trainers)
    if formadores:
        trainers = trainers.selectinload(DealSessionTrainerModel.trainer)
    mobile_units = selectinload(DealSessionModel.mobile_units)
    if unidades_moviles:
        mobile_units = mobile_units.selectinload(DealSessionMobileUnitModel.unidad)

    options: list[ORMOption] = [trainers, mobile_units]
    if deal_product:
        options.append(selectinload(DealSessionModel.deal_product))
    if sala:
        options.append(selectinload(DealSessionModel.sala))
    return options


class DealSessionCRUD(BaseCRUD[DealSessionModel]):
    """CRUD operations for DealSessionModel and its join rows."""

    def __init__(self) -> None:
        """Initialize DealSessionCRUD with DealSessionModel."""
        super().__init__(DealSessionModel, "session_id")

    async def list_for_deal(
        self,
        session: AsyncSession,
        deal_id: str,
        options: Sequence[ORMOption] | None = None,
    ) -> Sequence[DealSessionModel]:
        """
        List a deal's sessions ordered by creation time, then id.

        Args:
            session: Async database session
            deal_id: Owning deal
            options: Loader options (defaults to join rows only)

        Returns:
            Sessions of the deal, oldest first
        """
        stmt = (
            select(DealSessionModel)
            .where(DealSessionModel.deal_id == deal_id)
            .order_by(DealSessionModel.created_at, DealSessionModel.session_id)
            .options(*(options if options is not None else session_load_options()))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_with_relations(
        self,
        session: AsyncSession,
        session_id: str,
        options: Sequence[ORMOption] | None = None,
        lock: bool = False,
    ) -> DealSessionModel | None:
        """
        Retrieve one session with join rows and requested relations.

        Args:
            session: Async database session
            session_id: Session identifier
            options: Loader options (defaults to join rows only)
            lock: Lock the session row until the transaction ends

        Returns:
            DealSessionModel if found, None otherwise
        """
        stmt = (
            select(DealSessionModel)
            .where(DealSessionModel.session_id == session_id)
            .options(*(options if options is not None else session_load_options()))
            .execution_options(populate_existing=True)
        )
        if lock:
            stmt = stmt.with_for_update(of=DealSessionModel)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_for_deal(self, session: AsyncSession, deal_id: str) -> int:
        """Count all sessions of a deal."""
        return await self.count(session, DealSessionModel.deal_id == deal_id)

    async def delete_many(self, session: AsyncSession, session_ids: Sequence[str]) -> int:
        """
        Hard-delete sessions and their join rows.

        Args:
            session: Async database session
            session_ids: Sessions to delete

        Returns:
            Number of session rows deleted
        """
        if not session_ids:
            return 0
        ids = list(session_ids)
        await session.execute(
            delete(DealSessionTrainerModel).where(DealSessionTrainerModel.session_id.in_(ids))
        )
        await session.execute(
            delete(DealSessionMobileUnitModel).where(
                DealSessionMobileUnitModel.session_id.in_(ids)
            )
        )
        result = await session.execute(
            delete(DealSessionModel).where(DealSessionModel.session_id.in_(ids))
        )
        return result.rowcount

    async def replace_trainers(
        self,
        session: AsyncSession,
        session_id: str,
        trainer_ids: Sequence[str],
    ) -> None:
        """Replace every trainer link of a session with trainer_ids."""
        await session.execute(
            delete(DealSessionTrainerModel).where(
                DealSessionTrainerModel.session_id == session_id
            )
        )
        if trainer_ids:
            now = utcnow()
            await session.execute(
                insert(DealSessionTrainerModel),
                [
                    {"session_id": session_id, "trainer_id": trainer_id, "created_at": now}
                    for trainer_id in trainer_ids
                ],
            )

    async def replace_mobile_units(
        self,
        session: AsyncSession,
        session_id: str,
        unit_ids: Sequence[str],
    ) -> None:
        """Replace every mobile unit link of a session with unit_ids."""
        await session.execute(
            delete(DealSessionMobileUnitModel).where(
                DealSessionMobileUnitModel.session_id == session_id
            )
        )
        if unit_ids:
            now = utcnow()
            await session.execute(
                insert(DealSessionMobileUnitModel),
                [
                    {"session_id": session_id, "unidad_id": unit_id, "created_at": now}
                    for unit_id in unit_ids
                ],
            )


deal_session_crud = DealSessionCRUD()

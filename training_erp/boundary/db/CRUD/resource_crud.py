"""
Room, trainer and mobile unit CRUD operations.

Besides plain lookups these classes produce the human-readable labels
used in conflict reports and support row locking so a conflict check and
the following commit see a stable view of a contested resource.

Dependencies: sqlalchemy, training_erp.boundary.db.models
System role: Resource validation and locking for session mutations
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from training_erp.boundary.db.CRUD.base_crud import BaseCRUD
from training_erp.boundary.db.models.resource_model import (
    MobileUnitModel,
    RoomModel,
    TrainerModel,
)


class RoomCRUD(BaseCRUD[RoomModel]):
    """CRUD operations for RoomModel."""

    def __init__(self) -> None:
        super().__init__(RoomModel, "sala_id")

    async def get_labels(self, session: AsyncSession, ids: Sequence[str]) -> dict[str, str | None]:
        """Map room id to its name."""
        return {room.sala_id: room.name for room in await self.get_many(session, ids)}


class TrainerCRUD(BaseCRUD[TrainerModel]):
    """CRUD operations for TrainerModel."""

    def __init__(self) -> None:
        super().__init__(TrainerModel, "trainer_id")

    async def get_active(
        self,
        session: AsyncSession,
        ids: Sequence[str],
    ) -> Sequence[TrainerModel]:
        """
        Retrieve active trainers among ids.

        Args:
            session: Async database session
            ids: Trainer identifiers

        Returns:
            Active trainers found; inactive or unknown ids are omitted
        """
        if not ids:
            return []
        stmt = (
            select(TrainerModel)
            .where(TrainerModel.trainer_id.in_(list(ids)), TrainerModel.activo.is_(True))
            .order_by(TrainerModel.trainer_id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_labels(self, session: AsyncSession, ids: Sequence[str]) -> dict[str, str | None]:
        """Map trainer id to its name."""
        return {
            trainer.trainer_id: trainer.name
            for trainer in await self.get_many(session, ids)
        }


class MobileUnitCRUD(BaseCRUD[MobileUnitModel]):
    """CRUD operations for MobileUnitModel."""

    def __init__(self) -> None:
        super().__init__(MobileUnitModel, "unidad_id")

    async def get_labels(self, session: AsyncSession, ids: Sequence[str]) -> dict[str, str | None]:
        """Map unit id to "name - plate" (either part may be missing)."""
        labels: dict[str, str | None] = {}
        for unit in await self.get_many(session, ids):
            parts = [
                value.strip()
                for value in (unit.name, unit.matricula)
                if isinstance(value, str) and value.strip()
            ]
            labels[unit.unidad_id] = " - ".join(parts) if parts else None
        return labels


room_crud = RoomCRUD()
trainer_crud = TrainerCRUD()
mobile_unit_crud = MobileUnitCRUD()

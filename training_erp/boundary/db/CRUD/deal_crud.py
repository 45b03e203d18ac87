"""
Deal and deal product CRUD operations.

Dependencies: sqlalchemy, training_erp.boundary.db.models
System role: Read access to deals and their product lines
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from training_erp.boundary.db.CRUD.base_crud import BaseCRUD
from training_erp.boundary.db.models.deal_model import DealModel, DealProductModel


class DealCRUD(BaseCRUD[DealModel]):
    """CRUD operations for DealModel."""

    def __init__(self) -> None:
        """Initialize DealCRUD with DealModel."""
        super().__init__(DealModel, "deal_id")

    async def get_with_products(
        self,
        session: AsyncSession,
        deal_id: str,
        lock: bool = False,
    ) -> DealModel | None:
        """
        Retrieve a deal with eagerly loaded product lines.

        Args:
            session: Async database session
            deal_id: Deal identifier
            lock: Take a row lock on the deal (serializes concurrent syncs)

        Returns:
            DealModel with products loaded, None if not found
        """
        stmt = (
            select(DealModel)
            .where(DealModel.deal_id == deal_id)
            .options(selectinload(DealModel.products))
        )
        if lock:
            stmt = stmt.with_for_update(of=DealModel)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


class DealProductCRUD(BaseCRUD[DealProductModel]):
    """CRUD operations for DealProductModel."""

    def __init__(self) -> None:
        """Initialize DealProductCRUD with DealProductModel."""
        super().__init__(DealProductModel, "id")


deal_crud = DealCRUD()
deal_product_crud = DealProductCRUD()

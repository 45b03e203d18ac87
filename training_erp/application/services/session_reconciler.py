"""
Session reconciler.

Keeps a deal's sessions in line with the quantities purchased on its
plannable product lines: creates missing empty Draft sessions, deletes
surplus empty ones and reports surplus sessions that already hold data.

Dependencies: training_erp.boundary.db.CRUD, training_erp.core.planning
System role: Session provisioning use case
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from training_erp.application.session_presenter import snapshot_from_model
from training_erp.boundary.db.base import new_id
from training_erp.boundary.db.CRUD.deal_crud import deal_crud
from training_erp.boundary.db.CRUD.deal_session_crud import deal_session_crud
from training_erp.boundary.db.models.deal_model import DealModel
from training_erp.boundary.db.models.deal_session_model import DealSessionModel
from training_erp.configs import get_settings
from training_erp.configs.planning import PlanningSettings
from training_erp.core.exceptions import DealNotFoundError
from training_erp.core.planning.reconciliation import (
    ProductLine,
    ReconciliationPlan,
    SessionSnapshot,
    plan_reconciliation,
)
from training_erp.core.planning.rules import SessionStatus, is_plannable_product

logger = logging.getLogger(__name__)


@dataclass
class PlanningContext:
    """A deal's plannable product lines and default session values."""

    deal: DealModel
    plannable: list[ProductLine] = field(default_factory=list)

    @property
    def default_direccion(self) -> str | None:
        return self.deal.training_address

    @property
    def default_sede(self) -> str | None:
        return self.deal.sede_label


class SessionReconciler:
    """Session provisioning orchestrator."""

    def __init__(self, db: AsyncSession, planning: PlanningSettings | None = None) -> None:
        """
        Initialize reconciler with async database session.

        Args:
            db: Async SQLAlchemy session (transaction owner)
            planning: Planning settings (defaults to application settings)
        """
        self.db = db
        self.planning = planning or get_settings().planning

    async def load_context(self, deal_id: str, lock: bool = False) -> PlanningContext:
        """
        Load a deal and its plannable product lines.

        With lock set the deal row stays locked until the transaction ends.

        Raises:
            DealNotFoundError: If the deal does not exist
        """
        deal = await deal_crud.get_with_products(self.db, deal_id, lock=lock)
        if deal is None:
            raise DealNotFoundError(deal_id)

        plannable = [
            ProductLine(
                id=product.id,
                code=product.code,
                quantity=product.quantity,
                hours=product.hours,
                name=product.name,
            )
            for product in deal.products
            if is_plannable_product(
                product.code,
                self.planning.plannable_prefixes,
                self.planning.excluded_prefix,
            )
        ]
        return PlanningContext(deal=deal, plannable=plannable)

    async def load_snapshots(self, deal_id: str) -> list[SessionSnapshot]:
        """Load every session of a deal as reconciliation input."""
        rows = await deal_session_crud.list_for_deal(self.db, deal_id)
        return [snapshot_from_model(row) for row in rows]

    async def reconcile(self, deal_id: str) -> ReconciliationPlan:
        """
        Compute the reconciliation plan for a deal without applying it.

        Raises:
            DealNotFoundError: If the deal does not exist
        """
        context = await self.load_context(deal_id)
        if not context.plannable:
            return ReconciliationPlan()
        return plan_reconciliation(context.plannable, await self.load_snapshots(deal_id))

    async def sync(self, deal_id: str) -> dict:
        """
        Apply the reconciliation plan for a deal in one transaction.

        Deletions run before creations. New sessions are empty Drafts
        pre-filled with the deal's default address and site, tagged with
        the product code as origin.

        Args:
            deal_id: Deal to reconcile

        Returns:
            dict: created and deleted counts, flagged session ids, total sessions

        Raises:
            DealNotFoundError: If the deal does not exist
        """
        try:
            context = await self.load_context(deal_id, lock=self.planning.lock_resources)

            if not context.plannable:
                total = await deal_session_crud.count_for_deal(self.db, deal_id)
                return {"created": 0, "deleted": 0, "flagged": [], "total": total}

            plan = plan_reconciliation(
                context.plannable, await self.load_snapshots(deal_id)
            )

            deleted = await deal_session_crud.delete_many(self.db, sorted(plan.to_delete))

            creations = [
                DealSessionModel(
                    session_id=new_id(),
                    deal_id=deal_id,
                    deal_product_id=product.id,
                    status=SessionStatus.DRAFT,
                    direccion=context.default_direccion,
                    sede=context.default_sede,
                    origen=product.code,
                )
                for product, count in plan.to_create
                for _ in range(count)
            ]
            self.db.add_all(creations)
            await self.db.flush()

            total = await deal_session_crud.count_for_deal(self.db, deal_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Deal sessions synchronized",
            extra={
                "deal_id": deal_id,
                "created": len(creations),
                "deleted": deleted,
                "flagged": len(plan.to_flag),
                "total": total,
            },
        )
        return {
            "created": len(creations),
            "deleted": deleted,
            "flagged": sorted(plan.to_flag),
            "total": total,
        }

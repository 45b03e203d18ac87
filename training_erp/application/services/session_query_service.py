"""
Session query service.

Read-only access to deal sessions. Listing annotates each session with
is_empty / is_exceeding_quantity by running the pure reconciliation
computation against the deal's current sessions; nothing is written.

Dependencies: training_erp.boundary.db.CRUD, training_erp.core.planning
System role: Session read use case
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from training_erp.application.services.session_reconciler import SessionReconciler
from training_erp.application.session_presenter import (
    ExpandOptions,
    map_session,
    snapshot_from_model,
)
from training_erp.boundary.db.CRUD.deal_crud import deal_crud
from training_erp.boundary.db.CRUD.deal_session_crud import deal_session_crud
from training_erp.configs.planning import PlanningSettings
from training_erp.core.exceptions import SessionNotFoundError, ValidationError
from training_erp.core.planning.reconciliation import plan_reconciliation
from training_erp.core.planning.rules import normalize_status, to_nullable_string

logger = logging.getLogger(__name__)


class SessionQueryService:
    """Session read orchestrator."""

    def __init__(self, db: AsyncSession, planning: PlanningSettings | None = None) -> None:
        self.db = db
        self.reconciler = SessionReconciler(db, planning)

    async def list_sessions(
        self,
        deal_id: str | None,
        status: Any = None,
        expand: ExpandOptions | None = None,
    ) -> list[dict]:
        """
        List a deal's sessions, oldest first.

        Reconciliation metadata is computed over all of the deal's
        sessions, then the optional status filter is applied. An unknown
        deal has no sessions.

        Args:
            deal_id: Deal to list (required)
            status: Optional status label filter
            expand: Relations to render

        Returns:
            list[dict]: Mapped sessions

        Raises:
            ValidationError: If deal_id is missing or status is invalid
        """
        deal_id = to_nullable_string(deal_id)
        if deal_id is None:
            raise ValidationError("Falta dealId", field="dealId")
        status_filter = normalize_status(status)
        expand = expand or ExpandOptions()

        rows = await deal_session_crud.list_for_deal(
            self.db, deal_id, options=expand.load_options()
        )
        if not rows:
            return []

        plannable = []
        if await deal_crud.exists(self.db, deal_id):
            plannable = (await self.reconciler.load_context(deal_id)).plannable
        plan = plan_reconciliation(plannable, [snapshot_from_model(row) for row in rows])

        return [
            map_session(row, expand, plan.empty, plan.to_flag)
            for row in rows
            if status_filter is None or row.status == status_filter
        ]

    async def get_session(
        self,
        session_id: str,
        expand: ExpandOptions | None = None,
    ) -> dict:
        """
        Fetch one session; emptiness is recomputed, exceeding is False.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        expand = expand or ExpandOptions()
        row = await deal_session_crud.get_with_relations(
            self.db, session_id, options=expand.load_options()
        )
        if row is None:
            raise SessionNotFoundError(session_id)
        return map_session(row, expand)

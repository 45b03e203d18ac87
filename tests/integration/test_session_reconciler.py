"""
Integration tests for SessionReconciler.

Exercises the provisioning scenarios end to end on an in-memory database:
filling a quantity gap, pruning surplus empty sessions, flagging surplus
sessions that hold data, and idempotence.

System role: Verification of session provisioning
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from training_erp.application.services.session_reconciler import SessionReconciler
from training_erp.boundary.db.models import DealModel, DealProductModel, DealSessionModel
from training_erp.core.exceptions import DealNotFoundError
from training_erp.core.planning.rules import SessionStatus

CREATED = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def reconciler(test_async_db, planning_settings) -> SessionReconciler:
    return SessionReconciler(test_async_db, planning_settings)


async def seed_sessions(make_session, empty_flags: list[bool]) -> list[str]:
    """Create deal-1 sessions one minute apart; non-empty ones carry a comment."""
    ids = []
    for index, empty in enumerate(empty_flags, start=1):
        ids.append(
            await make_session(
                f"s-{index}",
                status=SessionStatus.DRAFT,
                comentarios=None if empty else "Confirmado con el cliente",
                created_at=CREATED + timedelta(minutes=index),
            )
        )
    return ids


async def session_ids(db, deal_id: str) -> set[str]:
    result = await db.execute(
        select(DealSessionModel.session_id).where(DealSessionModel.deal_id == deal_id)
    )
    return set(result.scalars().all())


class TestSync:
    """Test suite for SessionReconciler.sync."""

    async def test_missing_sessions_should_be_created_as_drafts(
        self, catalog, reconciler, test_async_db
    ) -> None:
        # Act
        result = await reconciler.sync("deal-1")

        # Assert
        assert result == {"created": 3, "deleted": 0, "flagged": [], "total": 3}
        rows = (
            await test_async_db.execute(
                select(DealSessionModel).where(DealSessionModel.deal_id == "deal-1")
            )
        ).scalars().all()
        assert {row.deal_product_id for row in rows} == {"prod-form"}
        assert {row.status for row in rows} == {SessionStatus.DRAFT}
        assert {row.direccion for row in rows} == {"Calle Mayor 1"}
        assert {row.sede for row in rows} == {"Madrid"}
        assert {row.origen for row in rows} == {"form-basico"}

    async def test_deal_without_defaults_should_create_empty_sessions(
        self, catalog, reconciler
    ) -> None:
        # deal-3: ces-incendios x1, prev-riesgos x2
        result = await reconciler.sync("deal-3")

        assert result["created"] == 3
        plan = await reconciler.reconcile("deal-3")
        assert len(plan.empty) == 3
        assert plan.is_noop

    async def test_second_sync_should_change_nothing(self, catalog, reconciler) -> None:
        await reconciler.sync("deal-1")

        result = await reconciler.sync("deal-1")

        assert result == {"created": 0, "deleted": 0, "flagged": [], "total": 3}

    async def test_surplus_empty_sessions_should_be_deleted(
        self, catalog, make_session, reconciler, test_async_db
    ) -> None:
        # Arrange: 5 sessions for 3 purchased, s-2 and s-4 empty
        await seed_sessions(make_session, [False, True, False, True, False])

        # Act
        result = await reconciler.sync("deal-1")

        # Assert
        assert result == {"created": 0, "deleted": 2, "flagged": [], "total": 3}
        assert await session_ids(test_async_db, "deal-1") == {"s-1", "s-3", "s-5"}

    async def test_surplus_sessions_with_data_should_be_flagged(
        self, catalog, make_session, reconciler, test_async_db
    ) -> None:
        # Arrange
        await seed_sessions(make_session, [False] * 5)

        # Act
        result = await reconciler.sync("deal-1")

        # Assert
        assert result == {"created": 0, "deleted": 0, "flagged": ["s-4", "s-5"], "total": 5}
        assert len(await session_ids(test_async_db, "deal-1")) == 5

    async def test_trainer_link_should_keep_surplus_session_from_deletion(
        self, catalog, make_session, reconciler, test_async_db
    ) -> None:
        # Arrange: the surplus session has data only through a trainer link
        await seed_sessions(make_session, [False, False, False])
        await make_session(
            "s-linked",
            trainer_ids=["trainer-1"],
            created_at=CREATED + timedelta(minutes=10),
        )

        # Act
        result = await reconciler.sync("deal-1")

        # Assert
        assert result["flagged"] == ["s-linked"]
        assert result["deleted"] == 0

    async def test_sessions_on_non_plannable_lines_should_be_kept(
        self, catalog, make_session, reconciler, test_async_db
    ) -> None:
        await make_session("s-ext", deal_product_id="prod-ext", status=SessionStatus.DRAFT)

        result = await reconciler.sync("deal-1")

        assert result["created"] == 3
        assert "s-ext" in await session_ids(test_async_db, "deal-1")

    async def test_deal_without_plannable_lines_should_be_noop(
        self, catalog, make_session, reconciler, test_async_db
    ) -> None:
        # Arrange
        test_async_db.add(DealModel(deal_id="deal-ext", title="Solo material"))
        await test_async_db.flush()
        test_async_db.add(
            DealProductModel(
                id="prod-only-ext", deal_id="deal-ext", code="ext-kit", quantity=Decimal("2")
            )
        )
        await test_async_db.commit()
        await make_session("s-keep", deal_id="deal-ext", deal_product_id="prod-only-ext")

        # Act
        result = await reconciler.sync("deal-ext")

        # Assert
        assert result == {"created": 0, "deleted": 0, "flagged": [], "total": 1}

    async def test_unknown_deal_should_raise_not_found(self, catalog, reconciler) -> None:
        with pytest.raises(DealNotFoundError):
            await reconciler.sync("deal-missing")


class TestReconcile:
    """Test suite for the read-only plan."""

    async def test_plan_should_not_write(self, catalog, reconciler, test_async_db) -> None:
        plan = await reconciler.reconcile("deal-1")

        assert plan.create_count == 3
        assert await session_ids(test_async_db, "deal-1") == set()

    async def test_uppercase_code_should_still_be_plannable(self, catalog, reconciler) -> None:
        context = await reconciler.load_context("deal-2")

        assert [line.id for line in context.plannable] == ["prod-pci"]
        assert context.default_direccion is None

"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory async database, seeded deal/resource catalog, session
factory helper, planning settings.
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Foreign keys are enforced so ON DELETE CASCADE behaves like PostgreSQL.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy import event
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from training_erp.boundary.db import models  # noqa: F401
    from training_erp.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def planning_settings():
    """Default planning rules (form-/pci-/ces-/prev- plannable, ext- excluded)."""
    from training_erp.configs.planning import PlanningSettings

    return PlanningSettings(
        plannable_prefixes=["form-", "pci-", "ces-", "prev-"],
        excluded_prefix="ext-",
        time_zone="Europe/Madrid",
        lock_resources=True,
    )


@pytest.fixture
async def catalog(test_async_db):
    """
    Seed organizations, deals, product lines and resources.

    deal-1 (Acme Training): form-basico x3 (2h), ext-material x5
    deal-2 (no title, org Beta Corp): pci-avanzado x1 (4h)
    deal-3 (Gamma, two plannable lines): ces-incendios x1, prev-riesgos x2
    """
    from training_erp.boundary.db.models import (
        DealModel,
        DealProductModel,
        MobileUnitModel,
        OrganizationModel,
        RoomModel,
        TrainerModel,
    )

    test_async_db.add_all(
        [
            OrganizationModel(org_id="org-1", name="Acme Formación"),
            OrganizationModel(org_id="org-2", name="Beta Corp"),
            RoomModel(sala_id="sala-1", name="Aula 1", sede="Madrid"),
            RoomModel(sala_id="sala-2", name="Aula 2", sede="Sevilla"),
            TrainerModel(trainer_id="trainer-1", name="Ana", activo=True),
            TrainerModel(trainer_id="trainer-2", name="Luis", activo=True),
            TrainerModel(trainer_id="trainer-off", name="Baja", activo=False),
            MobileUnitModel(
                unidad_id="unit-1",
                name="Camión",
                matricula="1234ABC",
                tipo=["Formación"],
                sede=["Madrid"],
            ),
            MobileUnitModel(unidad_id="unit-2", name="Furgoneta", matricula="5678DEF"),
        ]
    )
    await test_async_db.flush()

    test_async_db.add_all(
        [
            DealModel(
                deal_id="deal-1",
                title="Acme Training",
                org_id="org-1",
                training_address="Calle Mayor 1",
                sede_label="Madrid",
            ),
            DealModel(deal_id="deal-2", title=None, org_id="org-2"),
            DealModel(deal_id="deal-3", title="Gamma"),
        ]
    )
    await test_async_db.flush()

    test_async_db.add_all(
        [
            DealProductModel(
                id="prod-form",
                deal_id="deal-1",
                code="form-basico",
                name="Formación básica",
                quantity=Decimal("3"),
                hours=Decimal("2"),
            ),
            DealProductModel(
                id="prod-ext",
                deal_id="deal-1",
                code="ext-material",
                name="Material",
                quantity=Decimal("5"),
                hours=None,
            ),
            DealProductModel(
                id="prod-pci",
                deal_id="deal-2",
                code="PCI-avanzado",
                name="PCI avanzado",
                quantity=Decimal("1"),
                hours=Decimal("4"),
            ),
            DealProductModel(
                id="prod-ces",
                deal_id="deal-3",
                code="ces-incendios",
                quantity=Decimal("1"),
                hours=Decimal("3"),
            ),
            DealProductModel(
                id="prod-prev",
                deal_id="deal-3",
                code="prev-riesgos",
                quantity=Decimal("2"),
                hours=Decimal("1"),
            ),
        ]
    )
    await test_async_db.commit()

    return SimpleNamespace(
        deal_id="deal-1",
        product_id="prod-form",
        room_id="sala-1",
        trainer_id="trainer-1",
        unit_id="unit-1",
    )


@pytest.fixture
def make_session(test_async_db):
    """
    Factory inserting a deal session with optional resource links.

    Usage:
        await make_session("s-1", start=start, end=end, sala_id="sala-1", trainer_ids=["trainer-1"])
    """
    from training_erp.boundary.db.models import (
        DealSessionMobileUnitModel,
        DealSessionModel,
        DealSessionTrainerModel,
    )
    from training_erp.core.planning import SessionStatus

    async def _make(
        session_id: str,
        deal_id: str = "deal-1",
        deal_product_id: str | None = "prod-form",
        status: SessionStatus = SessionStatus.SCHEDULED,
        start: datetime | None = None,
        end: datetime | None = None,
        sala_id: str | None = None,
        trainer_ids: tuple[str, ...] | list[str] = (),
        unit_ids: tuple[str, ...] | list[str] = (),
        direccion: str | None = None,
        sede: str | None = None,
        comentarios: str | None = None,
        created_at: datetime | None = None,
    ) -> str:
        extra = {"created_at": created_at} if created_at is not None else {}
        test_async_db.add(
            DealSessionModel(
                session_id=session_id,
                deal_id=deal_id,
                deal_product_id=deal_product_id,
                status=status,
                start_at=start,
                end_at=end,
                sala_id=sala_id,
                direccion=direccion,
                sede=sede,
                comentarios=comentarios,
                **extra,
            )
        )
        await test_async_db.flush()
        test_async_db.add_all(
            [DealSessionTrainerModel(session_id=session_id, trainer_id=tid) for tid in trainer_ids]
            + [DealSessionMobileUnitModel(session_id=session_id, unidad_id=uid) for uid in unit_ids]
        )
        await test_async_db.commit()
        return session_id

    return _make

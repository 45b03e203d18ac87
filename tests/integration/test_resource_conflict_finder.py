"""
Integration tests for ResourceConflictFinder against an in-memory database.

Covers half-open overlap, symmetry, cancelled and unscheduled sessions,
self-exclusion, join-table resources and summary ordering.

System role: Verification of resource conflict detection
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from training_erp.boundary.db.CRUD.resource_conflict_crud import ResourceConflictFinder
from training_erp.core.planning.conflicts import ResourceType, TimeRange
from training_erp.core.planning.rules import SessionStatus

# 10:00-12:00 Europe/Madrid on a winter day
X_START = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
X_END = datetime(2025, 3, 10, 11, 0, tzinfo=timezone.utc)


def hours_after(start: datetime, begin: float, end: float) -> TimeRange:
    return TimeRange(start + timedelta(hours=begin), start + timedelta(hours=end))


@pytest.fixture
def finder(test_async_db: AsyncSession) -> ResourceConflictFinder:
    return ResourceConflictFinder(test_async_db)


class TestRoomConflicts:
    """Test suite for room overlap lookups."""

    async def test_overlapping_active_session_should_conflict(
        self, catalog, make_session, finder
    ) -> None:
        # Arrange
        await make_session("s-x", start=X_START, end=X_END, sala_id="sala-1")

        # Act
        conflicts = await finder.find_conflicts(
            ResourceType.ROOM, ["sala-1"], hours_after(X_START, 1, 3)
        )

        # Assert
        assert list(conflicts) == ["sala-1"]
        detail = conflicts["sala-1"][0]
        assert detail.session_id == "s-x"
        assert detail.deal_id == "deal-1"
        assert detail.deal_title == "Acme Training"
        assert detail.organization_name == "Acme Formación"
        assert detail.product_code == "form-basico"
        assert detail.inicio == "2025-03-10T10:00:00.000+01:00"
        assert detail.fin == "2025-03-10T12:00:00.000+01:00"

    @pytest.mark.parametrize("begin, end", [(2, 3), (-1, 0)])
    async def test_touching_endpoints_should_not_conflict(
        self, catalog, make_session, finder, begin, end
    ) -> None:
        await make_session("s-x", start=X_START, end=X_END, sala_id="sala-1")

        conflicts = await finder.find_conflicts(
            ResourceType.ROOM, ["sala-1"], hours_after(X_START, begin, end)
        )

        assert conflicts == {}

    async def test_cancelled_session_should_never_conflict(
        self, catalog, make_session, finder
    ) -> None:
        await make_session(
            "s-x", status=SessionStatus.CANCELLED, start=X_START, end=X_END, sala_id="sala-1"
        )

        conflicts = await finder.find_conflicts(
            ResourceType.ROOM, ["sala-1"], TimeRange(X_START, X_END)
        )

        assert conflicts == {}

    @pytest.mark.parametrize("status", [SessionStatus.DRAFT, SessionStatus.SUSPENDED])
    async def test_draft_and_suspended_sessions_should_conflict(
        self, catalog, make_session, finder, status
    ) -> None:
        await make_session("s-x", status=status, start=X_START, end=X_END, sala_id="sala-1")

        conflicts = await finder.find_conflicts(
            ResourceType.ROOM, ["sala-1"], TimeRange(X_START, X_END)
        )

        assert [detail.session_id for detail in conflicts["sala-1"]] == ["s-x"]

    async def test_unscheduled_session_should_not_conflict(
        self, catalog, make_session, finder
    ) -> None:
        await make_session("s-x", start=X_START, end=None, sala_id="sala-1")

        conflicts = await finder.find_conflicts(
            ResourceType.ROOM, ["sala-1"], TimeRange(X_START, X_END)
        )

        assert conflicts == {}

    async def test_excluded_session_should_be_ignored(
        self, catalog, make_session, finder
    ) -> None:
        await make_session("s-x", start=X_START, end=X_END, sala_id="sala-1")

        conflicts = await finder.find_conflicts(
            ResourceType.ROOM, ["sala-1"], TimeRange(X_START, X_END), exclude_session_id="s-x"
        )

        assert conflicts == {}

    @pytest.mark.parametrize(
        "a, b",
        [
            ((0, 2), (1, 3)),
            ((0, 2), (2, 4)),
            ((0, 4), (1, 2)),
            ((0, 1), (3, 4)),
            ((0, 2), (0, 2)),
        ],
    )
    async def test_overlap_should_be_symmetric(
        self, catalog, make_session, finder, a, b
    ) -> None:
        # Arrange: a in sala-1, b in sala-2
        range_a = hours_after(X_START, *a)
        range_b = hours_after(X_START, *b)
        await make_session("s-a", start=range_a.start, end=range_a.end, sala_id="sala-1")
        await make_session("s-b", start=range_b.start, end=range_b.end, sala_id="sala-2")

        # Act
        a_hits_b = await finder.find_conflicts(ResourceType.ROOM, ["sala-2"], range_a)
        b_hits_a = await finder.find_conflicts(ResourceType.ROOM, ["sala-1"], range_b)

        # Assert
        assert bool(a_hits_b) == bool(b_hits_a)

    async def test_empty_ids_should_not_query(self) -> None:
        # Arrange
        session = AsyncMock(spec=AsyncSession)
        finder = ResourceConflictFinder(session)

        # Act
        conflicts = await finder.find_conflicts(
            ResourceType.TRAINER, ["", None], TimeRange(X_START, X_END)
        )

        # Assert
        assert conflicts == {}
        session.execute.assert_not_awaited()


class TestJoinedResourceConflicts:
    """Test suite for trainer and mobile unit lookups."""

    async def test_trainer_conflicts_should_be_grouped_by_trainer(
        self, catalog, make_session, finder
    ) -> None:
        # Arrange
        await make_session("s-1", start=X_START, end=X_END, trainer_ids=["trainer-1"])
        await make_session(
            "s-2",
            deal_id="deal-2",
            deal_product_id="prod-pci",
            start=X_START + timedelta(hours=1),
            end=X_END + timedelta(hours=1),
            trainer_ids=["trainer-1", "trainer-2"],
        )

        # Act
        conflicts = await finder.find_conflicts(
            ResourceType.TRAINER, ["trainer-1", "trainer-2"], hours_after(X_START, 1, 2)
        )

        # Assert
        assert [detail.session_id for detail in conflicts["trainer-1"]] == ["s-1", "s-2"]
        assert [detail.session_id for detail in conflicts["trainer-2"]] == ["s-2"]
        untitled = conflicts["trainer-2"][0]
        assert untitled.deal_title is None
        assert untitled.organization_name == "Beta Corp"

    async def test_mobile_unit_conflict_should_be_found(
        self, catalog, make_session, finder
    ) -> None:
        await make_session("s-1", start=X_START, end=X_END, unit_ids=["unit-1"])

        conflicts = await finder.find_conflicts(
            ResourceType.MOBILE_UNIT, ["unit-1", "unit-2"], TimeRange(X_START, X_END)
        )

        assert list(conflicts) == ["unit-1"]

    @pytest.mark.parametrize(
        "resource_type, resource_id",
        [("sala", "sala-1"), ("formador", "trainer-1"), ("unidad_movil", "unit-1")],
    )
    async def test_plain_type_names_should_select_matching_lookup(
        self, catalog, make_session, finder, resource_type, resource_id
    ) -> None:
        # Arrange
        await make_session(
            "s-1",
            start=X_START,
            end=X_END,
            sala_id="sala-1",
            trainer_ids=["trainer-1"],
            unit_ids=["unit-1"],
        )

        # Act
        conflicts = await finder.find_conflicts(
            resource_type, [resource_id], TimeRange(X_START, X_END)
        )

        # Assert
        assert list(conflicts) == [resource_id]

    async def test_unknown_type_name_should_raise(self, catalog, finder) -> None:
        with pytest.raises(ValueError):
            await finder.find_conflicts("vehiculo", ["unit-1"], TimeRange(X_START, X_END))


class TestFindAll:
    """Test suite for the combined room/trainer/unit check."""

    async def test_summaries_should_be_ordered_room_trainers_units(
        self, catalog, make_session, finder
    ) -> None:
        # Arrange
        await make_session(
            "s-1",
            start=X_START,
            end=X_END,
            sala_id="sala-1",
            trainer_ids=["trainer-2", "trainer-1"],
            unit_ids=["unit-1"],
        )

        # Act
        summaries = await finder.find_all(
            "sala-1",
            ["trainer-2", "trainer-1", "trainer-2"],
            ["unit-1"],
            TimeRange(X_START, X_END),
        )

        # Assert
        assert [(s.resource_type, s.resource_id) for s in summaries] == [
            (ResourceType.ROOM, "sala-1"),
            (ResourceType.TRAINER, "trainer-2"),
            (ResourceType.TRAINER, "trainer-1"),
            (ResourceType.MOBILE_UNIT, "unit-1"),
        ]
        labels = {s.resource_id: s.resource_label for s in summaries}
        assert labels["sala-1"] == "Aula 1"
        assert labels["trainer-1"] == "Ana"
        assert labels["unit-1"] == "Camión - 1234ABC"

    async def test_free_resources_should_return_empty_list(
        self, catalog, make_session, finder
    ) -> None:
        await make_session("s-1", start=X_START, end=X_END, sala_id="sala-1")

        summaries = await finder.find_all(
            "sala-2", ["trainer-1"], [], TimeRange(X_START, X_END)
        )

        assert summaries == []

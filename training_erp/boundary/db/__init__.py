"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, CreatedAtMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - Deal, product, resource and session models
  - CRUD singletons and the ResourceConflictFinder

Dependencies: sqlalchemy, training_erp.configs
System role: Database adapter for deals, schedulable resources and deal sessions
"""

from training_erp.boundary.db.base import Base, CreatedAtMixin, TimestampMixin
from training_erp.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from training_erp.boundary.db.models import (
    DealModel,
    DealProductModel,
    DealSessionMobileUnitModel,
    DealSessionModel,
    DealSessionTrainerModel,
    MobileUnitModel,
    OrganizationModel,
    RoomModel,
    TrainerModel,
)
from training_erp.boundary.db.CRUD import (
    BaseCRUD,
    ResourceConflictFinder,
    deal_crud,
    deal_product_crud,
    deal_session_crud,
    mobile_unit_crud,
    room_crud,
    session_load_options,
    trainer_crud,
)

__all__ = [
    # Base classes
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DealModel",
    "DealProductModel",
    "DealSessionMobileUnitModel",
    "DealSessionModel",
    "DealSessionTrainerModel",
    "MobileUnitModel",
    "OrganizationModel",
    "RoomModel",
    "TrainerModel",
    # CRUD
    "BaseCRUD",
    "ResourceConflictFinder",
    "deal_crud",
    "deal_product_crud",
    "deal_session_crud",
    "mobile_unit_crud",
    "room_crud",
    "session_load_options",
    "trainer_crud",
]

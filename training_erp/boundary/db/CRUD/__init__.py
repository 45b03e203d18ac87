"""CRUD and query classes for the session store."""

from training_erp.boundary.db.CRUD.base_crud import BaseCRUD
from training_erp.boundary.db.CRUD.deal_crud import (
    DealCRUD,
    DealProductCRUD,
    deal_crud,
    deal_product_crud,
)
from training_erp.boundary.db.CRUD.deal_session_crud import (
    DealSessionCRUD,
    deal_session_crud,
    session_load_options,
)
from training_erp.boundary.db.CRUD.resource_conflict_crud import ResourceConflictFinder
from training_erp.boundary.db.CRUD.resource_crud import (
    MobileUnitCRUD,
    RoomCRUD,
    TrainerCRUD,
    mobile_unit_crud,
    room_crud,
    trainer_crud,
)

__all__ = [
    "BaseCRUD",
    "DealCRUD",
    "DealProductCRUD",
    "DealSessionCRUD",
    "MobileUnitCRUD",
    "ResourceConflictFinder",
    "RoomCRUD",
    "TrainerCRUD",
    "deal_crud",
    "deal_product_crud",
    "deal_session_crud",
    "mobile_unit_crud",
    "room_crud",
    "session_load_options",
    "trainer_crud",
]

"""ORM models registered with Base.metadata."""

from training_erp.boundary.db.models.deal_model import (
    DealModel,
    DealProductModel,
    OrganizationModel,
)
from training_erp.boundary.db.models.deal_session_model import (
    DealSessionMobileUnitModel,
    DealSessionModel,
    DealSessionTrainerModel,
)
from training_erp.boundary.db.models.resource_model import (
    MobileUnitModel,
    RoomModel,
    TrainerModel,
)

__all__ = [
    "DealModel",
    "DealProductModel",
    "DealSessionMobileUnitModel",
    "DealSessionModel",
    "DealSessionTrainerModel",
    "MobileUnitModel",
    "OrganizationModel",
    "RoomModel",
    "TrainerModel",
]

"""
Schedulable resource ORM models: rooms, trainers and mobile units.

Resources are shared reference data managed elsewhere; sessions point at
them by id.

Dependencies: sqlalchemy, training_erp.boundary.db.base
System role: Resource persistence for assignment validation and conflicts
"""

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from training_erp.boundary.db.base import Base, new_id


class RoomModel(Base):
    """Training room (sala)."""

    __tablename__ = "salas"

    sala_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sede: Mapped[str | None] = mapped_column(String(255), nullable=True)


class TrainerModel(Base):
    """
    Trainer (formador).

    Attributes:
        activo: Inactive trainers cannot be newly assigned to sessions
    """

    __tablename__ = "trainers"

    trainer_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class MobileUnitModel(Base):
    """Mobile training unit (unidad móvil)."""

    __tablename__ = "unidades_moviles"

    unidad_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    matricula: Mapped[str] = mapped_column(String(32), nullable=False)
    tipo: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    sede: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

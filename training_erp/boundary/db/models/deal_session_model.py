"""
Deal session ORM models.

A deal session is one planned or delivered training occurrence tied to a
deal and (usually) one purchased product line. Trainers and mobile units
are attached through join tables keyed by (session, resource).

Dependencies: sqlalchemy, training_erp.boundary.db.base, training_erp.core.planning
System role: Session persistence for provisioning and scheduling
"""

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from training_erp.boundary.db.base import Base, CreatedAtMixin, TimestampMixin, new_id
from training_erp.core.planning.rules import SessionStatus


class DealSessionModel(Base, TimestampMixin):
    """
    Deal session ORM model.

    Attributes:
        session_id: Opaque text primary key (UUID v4)
        deal_id: Owning deal (cascade delete)
        deal_product_id: Product line this session fulfils (nullable)
        status: SessionStatus label, stored as text
        start_at / end_at: Scheduled interval (UTC, nullable until scheduled)
        sala_id: Assigned room (nullable)
        direccion / sede: Address and site label
        comentarios: Free text
        origen: Product code that originated the session
        created_at / updated_at: Row timestamps (UTC)

    Relationships:
        trainers: Join rows to TrainerModel (cascade delete)
        mobile_units: Join rows to MobileUnitModel (cascade delete)
    """

    __tablename__ = "deal_sessions"
    __table_args__ = (
        Index("idx_deal_sessions_deal_id", "deal_id"),
        Index("idx_deal_sessions_deal_product_id", "deal_product_id"),
        Index("idx_deal_sessions_sala_id", "sala_id"),
    )

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    deal_id: Mapped[str] = mapped_column(
        ForeignKey("deals.deal_id", ondelete="CASCADE"),
        nullable=False,
    )
    deal_product_id: Mapped[str | None] = mapped_column(
        ForeignKey("deal_products.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[SessionStatus] = mapped_column(
        Enum(
            SessionStatus,
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            length=20,
        ),
        nullable=False,
        default=SessionStatus.DRAFT,
    )
    start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sala_id: Mapped[str | None] = mapped_column(
        ForeignKey("salas.sala_id", ondelete="SET NULL"),
        nullable=True,
    )
    direccion: Mapped[str | None] = mapped_column(Text, nullable=True)
    sede: Mapped[str | None] = mapped_column(String(255), nullable=True)
    comentarios: Mapped[str | None] = mapped_column(Text, nullable=True)
    origen: Mapped[str | None] = mapped_column(String(100), nullable=True)

    deal = relationship("DealModel", back_populates="sessions")
    deal_product = relationship("DealProductModel")
    sala = relationship("RoomModel")
    trainers = relationship(
        "DealSessionTrainerModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DealSessionTrainerModel.created_at",
    )
    mobile_units = relationship(
        "DealSessionMobileUnitModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DealSessionMobileUnitModel.created_at",
    )

    @property
    def trainer_ids(self) -> tuple[str, ...]:
        return tuple(link.trainer_id for link in self.trainers)

    @property
    def mobile_unit_ids(self) -> tuple[str, ...]:
        return tuple(link.unidad_id for link in self.mobile_units)


class DealSessionTrainerModel(Base, CreatedAtMixin):
    """Trainer assigned to a session."""

    __tablename__ = "deal_session_trainers"
    __table_args__ = (
        Index("idx_deal_session_trainers_trainer_id", "trainer_id"),
    )

    session_id: Mapped[str] = mapped_column(
        ForeignKey("deal_sessions.session_id", ondelete="CASCADE"),
        primary_key=True,
    )
    trainer_id: Mapped[str] = mapped_column(
        ForeignKey("trainers.trainer_id", ondelete="CASCADE"),
        primary_key=True,
    )

    session = relationship("DealSessionModel", back_populates="trainers")
    trainer = relationship("TrainerModel")


class DealSessionMobileUnitModel(Base, CreatedAtMixin):
    """Mobile unit assigned to a session."""

    __tablename__ = "deal_session_mobile_units"
    __table_args__ = (
        Index("idx_deal_session_mobile_units_unidad_id", "unidad_id"),
    )

    session_id: Mapped[str] = mapped_column(
        ForeignKey("deal_sessions.session_id", ondelete="CASCADE"),
        primary_key=True,
    )
    unidad_id: Mapped[str] = mapped_column(
        ForeignKey("unidades_moviles.unidad_id", ondelete="CASCADE"),
        primary_key=True,
    )

    session = relationship("DealSessionModel", back_populates="mobile_units")
    unidad = relationship("MobileUnitModel")

"""
Deal ORM models.

Represents commercial deals, their client organization and purchased
product lines. Read-only from the session planning perspective.

Dependencies: sqlalchemy, training_erp.boundary.db.base
System role: Deal/product persistence consumed by session provisioning
"""

from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from training_erp.boundary.db.base import Base, TimestampMixin, new_id


class OrganizationModel(Base):
    """Client organization owning deals."""

    __tablename__ = "organizations"

    org_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    deals = relationship("DealModel", back_populates="organization")


class DealModel(Base, TimestampMixin):
    """
    Commercial deal ORM model.

    Attributes:
        deal_id: CRM deal identifier (primary key)
        title: Deal title shown in conflict messages
        org_id: Owning organization (nullable)
        training_address: Default address copied into generated sessions
        sede_label: Default site label copied into generated sessions

    Relationships:
        products: One-to-many with DealProductModel (cascade delete)
        sessions: One-to-many with DealSessionModel (cascade delete)
    """

    __tablename__ = "deals"

    deal_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    org_id: Mapped[str | None] = mapped_column(
        ForeignKey("organizations.org_id", ondelete="SET NULL"),
        nullable=True,
    )
    training_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    sede_label: Mapped[str | None] = mapped_column(String(255), nullable=True)

    organization = relationship("OrganizationModel", back_populates="deals")
    products = relationship(
        "DealProductModel",
        back_populates="deal",
        cascade="all, delete-orphan",
    )
    sessions = relationship(
        "DealSessionModel",
        back_populates="deal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class DealProductModel(Base, TimestampMixin):
    """
    Purchased product line on a deal.

    Attributes:
        id: Line identifier
        deal_id: Owning deal
        code: Product code; its prefix decides whether it is plannable
        name: Product display name
        quantity: Number of sessions purchased
        hours: Duration of each session, used to derive end times
    """

    __tablename__ = "deal_products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    deal_id: Mapped[str] = mapped_column(
        ForeignKey("deals.deal_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    hours: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    deal = relationship("DealModel", back_populates="products")

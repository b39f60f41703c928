"""Donor and donation ledger models."""

from __future__ import annotations

import uuid  # noqa: TC003
from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorhub.db.models.base import Base, TimestampTZ, UUIDPrimaryKey


class Donor(Base):
    """Individual donor."""

    __tablename__ = "donors"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]
    updated_at: Mapped[TimestampTZ]

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    donations: Mapped[list[Donation]] = relationship(
        "Donation",
        back_populates="donor",
        cascade="all, delete-orphan",
        order_by="Donation.donation_date.desc()",
    )

    __table_args__ = (Index("ix_donors_last_name", "last_name"),)


class Donation(Base):
    """A single donation made by a donor."""

    __tablename__ = "donations"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]

    donor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("donors.id", ondelete="CASCADE"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TRY")
    donation_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    donor: Mapped[Donor] = relationship("Donor", back_populates="donations")

    __table_args__ = (Index("ix_donations_donor_id_date", "donor_id", "donation_date"),)

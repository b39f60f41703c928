"""Gamification models: periods, points and experience transactions."""

from __future__ import annotations

import uuid  # noqa: TC003
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorhub.db.models.base import (
    Base,
    OptionalTimestampTZ,
    PeriodStatus,
    TimestampTZ,
    TransactionType,
    UUIDPrimaryKey,
)

if TYPE_CHECKING:
    from tutorhub.db.models.users import User


class Period(Base):
    """Academic term that scopes transactions, events and reports."""

    __tablename__ = "periods"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[OptionalTimestampTZ]
    status: Mapped[PeriodStatus] = mapped_column(
        Enum(PeriodStatus, name="period_status", create_constraint=True),
        nullable=False,
        default=PeriodStatus.INACTIVE,
    )

    __table_args__ = (Index("ix_periods_status", "status"),)


class PointsTransaction(Base):
    """Points awarded to or redeemed by a student."""

    __tablename__ = "points_transactions"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    tutor_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    period_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("periods.id", ondelete="SET NULL"),
        nullable=True,
    )

    points: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="transaction_type", create_constraint=True),
        nullable=False,
    )
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rolled_back: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    student: Mapped[User] = relationship(
        "User", foreign_keys=[student_id], back_populates="points_received"
    )

    __table_args__ = (
        Index("ix_points_transactions_student_period", "student_id", "period_id"),
        Index("ix_points_transactions_created_at", "created_at"),
    )


class ExperienceTransaction(Base):
    """Experience granted to a student."""

    __tablename__ = "experience_transactions"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    tutor_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    period_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("periods.id", ondelete="SET NULL"),
        nullable=True,
    )

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    is_rolled_back: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    student: Mapped[User] = relationship(
        "User", foreign_keys=[student_id], back_populates="experience_received"
    )

    __table_args__ = (
        Index("ix_experience_transactions_student_period", "student_id", "period_id"),
    )

"""Board meeting models: meetings, attendees and decisions."""

from __future__ import annotations

import uuid  # noqa: TC003
from datetime import datetime  # noqa: TC003

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, String, Table, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorhub.db.models.base import (
    Base,
    DecisionStatus,
    MeetingStatus,
    TimestampTZ,
    UUIDPrimaryKey,
)
from tutorhub.db.models.users import User

# Many-to-many: users responsible for carrying out a decision
decision_responsible_users = Table(
    "decision_responsible_users",
    Base.metadata,
    Column(
        "decision_id",
        UUID(as_uuid=True),
        ForeignKey("meeting_decisions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Meeting(Base):
    """Board (manager) meeting."""

    __tablename__ = "meetings"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]
    updated_at: Mapped[TimestampTZ]

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    meeting_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[MeetingStatus] = mapped_column(
        Enum(MeetingStatus, name="meeting_status", create_constraint=True),
        nullable=False,
        default=MeetingStatus.PLANNED,
    )

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_by: Mapped[User] = relationship("User", foreign_keys=[created_by_id])
    attendees: Mapped[list[MeetingAttendee]] = relationship(
        "MeetingAttendee",
        back_populates="meeting",
        cascade="all, delete-orphan",
    )
    decisions: Mapped[list[MeetingDecision]] = relationship(
        "MeetingDecision",
        back_populates="meeting",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("ix_meetings_meeting_date", "meeting_date"),)


class MeetingAttendee(Base):
    """A user's attendance at a meeting."""

    __tablename__ = "meeting_attendees"

    id: Mapped[UUIDPrimaryKey]
    checked_in_at: Mapped[TimestampTZ]

    meeting_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    meeting: Mapped[Meeting] = relationship("Meeting", back_populates="attendees")
    user: Mapped[User] = relationship("User")


class MeetingDecision(Base):
    """Action item decided in a meeting, tracked on a three-column kanban."""

    __tablename__ = "meeting_decisions"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]
    updated_at: Mapped[TimestampTZ]

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[DecisionStatus] = mapped_column(
        Enum(DecisionStatus, name="decision_status", create_constraint=True),
        nullable=False,
        default=DecisionStatus.TODO,
    )

    meeting_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("meetings.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    meeting: Mapped[Meeting] = relationship("Meeting", back_populates="decisions")
    created_by: Mapped[User] = relationship("User", foreign_keys=[created_by_id])
    responsible_users: Mapped[list[User]] = relationship(
        "User",
        secondary=decision_responsible_users,
    )

    __table_args__ = (
        Index("ix_meeting_decisions_meeting_id", "meeting_id"),
        Index("ix_meeting_decisions_status", "status"),
    )

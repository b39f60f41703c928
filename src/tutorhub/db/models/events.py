"""Event, workshop and attendance models.

Three kinds of activity feed the reports:
- Event: calendar event students register for
- Part2Event: classroom workshop (participation marked by the tutor)
- AttendanceSession: check-in session for a tutor's students
"""

from __future__ import annotations

import uuid  # noqa: TC003
from datetime import datetime  # noqa: TC003

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorhub.db.models.base import (
    Base,
    EventStatus,
    OptionalTimestampTZ,
    ParticipantStatus,
    SessionStatus,
    TimestampTZ,
    UUIDPrimaryKey,
)
from tutorhub.db.models.users import Classroom, User


class EventType(Base):
    """Category of events and workshops (e.g. sports, culture)."""

    __tablename__ = "event_types"

    id: Mapped[UUIDPrimaryKey]
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class Event(Base):
    """Calendar event created by or for a tutor."""

    __tablename__ = "events"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]
    updated_at: Mapped[TimestampTZ]

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date_time: Mapped[OptionalTimestampTZ]
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[EventStatus] = mapped_column(
        Enum(EventStatus, name="event_status", create_constraint=True),
        nullable=False,
        default=EventStatus.YAKINDA,
    )

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_for_tutor_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    event_type_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("event_types.id", ondelete="SET NULL"),
        nullable=True,
    )
    period_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("periods.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_by: Mapped[User] = relationship("User", foreign_keys=[created_by_id])
    created_for_tutor: Mapped[User | None] = relationship(
        "User", foreign_keys=[created_for_tutor_id]
    )
    event_type: Mapped[EventType | None] = relationship("EventType")
    participants: Mapped[list[EventParticipant]] = relationship(
        "EventParticipant",
        back_populates="event",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_events_start_date_time", "start_date_time"),
        Index("ix_events_created_by_id", "created_by_id"),
        Index("ix_events_created_for_tutor_id", "created_for_tutor_id"),
    )


class EventParticipant(Base):
    """A user's registration in an event."""

    __tablename__ = "event_participants"

    id: Mapped[UUIDPrimaryKey]
    registered_at: Mapped[TimestampTZ]

    event_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[ParticipantStatus] = mapped_column(
        Enum(ParticipantStatus, name="participant_status", create_constraint=True),
        nullable=False,
        default=ParticipantStatus.REGISTERED,
    )

    event: Mapped[Event] = relationship("Event", back_populates="participants")
    user: Mapped[User] = relationship("User", back_populates="event_participations")

    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_participants_event_user"),)


class Part2Event(Base):
    """Classroom workshop."""

    __tablename__ = "part2_events"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[EventStatus] = mapped_column(
        Enum(EventStatus, name="event_status", create_constraint=True),
        nullable=False,
        default=EventStatus.YAKINDA,
    )

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    classroom_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("classrooms.id", ondelete="SET NULL"),
        nullable=True,
    )
    event_type_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("event_types.id", ondelete="SET NULL"),
        nullable=True,
    )
    period_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("periods.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_by: Mapped[User] = relationship("User", foreign_keys=[created_by_id])
    classroom: Mapped[Classroom | None] = relationship("Classroom")
    event_type: Mapped[EventType | None] = relationship("EventType")
    participants: Mapped[list[Part2EventParticipant]] = relationship(
        "Part2EventParticipant",
        back_populates="event",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_part2_events_event_date", "event_date"),
        Index("ix_part2_events_classroom_id", "classroom_id"),
    )


class Part2EventParticipant(Base):
    """Workshop participation record."""

    __tablename__ = "part2_event_participants"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]

    event_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("part2_events.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[ParticipantStatus] = mapped_column(
        Enum(ParticipantStatus, name="participant_status", create_constraint=True),
        nullable=False,
        default=ParticipantStatus.ATTENDED,
    )

    event: Mapped[Part2Event] = relationship("Part2Event", back_populates="participants")
    user: Mapped[User] = relationship("User")

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_part2_event_participants_event_user"),
    )


class AttendanceSession(Base):
    """Check-in session opened by a tutor."""

    __tablename__ = "attendance_sessions"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    session_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, name="session_status", create_constraint=True),
        nullable=False,
        default=SessionStatus.ACTIVE,
    )

    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    period_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("periods.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_by: Mapped[User] = relationship("User", foreign_keys=[created_by_id])
    attendances: Mapped[list[Attendance]] = relationship(
        "Attendance",
        back_populates="session",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("ix_attendance_sessions_session_date", "session_date"),)


class Attendance(Base):
    """A student's check-in for an attendance session."""

    __tablename__ = "attendances"

    id: Mapped[UUIDPrimaryKey]
    checked_in_at: Mapped[TimestampTZ]

    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("attendance_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    session: Mapped[AttendanceSession] = relationship(
        "AttendanceSession", back_populates="attendances"
    )
    student: Mapped[User] = relationship("User", back_populates="attendances")

    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendances_session_student"),
    )

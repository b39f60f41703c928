"""User and classroom models.

Tutors own a classroom and a roster of students; students point back to
their tutor and classroom.
"""

from __future__ import annotations

import uuid  # noqa: TC003
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tutorhub.db.models.base import Base, TimestampTZ, UserRole, UUIDPrimaryKey

if TYPE_CHECKING:
    from tutorhub.db.models.events import Attendance, EventParticipant
    from tutorhub.db.models.gamification import ExperienceTransaction, PointsTransaction


class User(Base):
    """Platform user (admin, tutor, student or assistant)."""

    __tablename__ = "users"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]
    updated_at: Mapped[TimestampTZ]

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", create_constraint=True),
        nullable=False,
        default=UserRole.STUDENT,
    )

    # Cached gamification balances; transactions are the source of truth
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tutor_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    classroom_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("classrooms.id", ondelete="SET NULL", use_alter=True),
        nullable=True,
    )

    tutor: Mapped[User | None] = relationship(
        "User",
        remote_side="User.id",
        back_populates="students",
        foreign_keys=[tutor_id],
    )
    students: Mapped[list[User]] = relationship(
        "User",
        back_populates="tutor",
        foreign_keys=[tutor_id],
    )
    classroom: Mapped[Classroom | None] = relationship(
        "Classroom",
        back_populates="students",
        foreign_keys=[classroom_id],
    )
    points_received: Mapped[list[PointsTransaction]] = relationship(
        "PointsTransaction",
        foreign_keys="PointsTransaction.student_id",
        back_populates="student",
    )
    experience_received: Mapped[list[ExperienceTransaction]] = relationship(
        "ExperienceTransaction",
        foreign_keys="ExperienceTransaction.student_id",
        back_populates="student",
    )
    event_participations: Mapped[list[EventParticipant]] = relationship(
        "EventParticipant",
        back_populates="user",
    )
    attendances: Mapped[list[Attendance]] = relationship(
        "Attendance",
        back_populates="student",
    )

    __table_args__ = (
        Index("ix_users_role", "role"),
        Index("ix_users_tutor_id", "tutor_id"),
    )


class Classroom(Base):
    """A tutor's classroom."""

    __tablename__ = "classrooms"

    id: Mapped[UUIDPrimaryKey]
    created_at: Mapped[TimestampTZ]

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    tutor_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    tutor: Mapped[User | None] = relationship("User", foreign_keys=[tutor_id])
    students: Mapped[list[User]] = relationship(
        "User",
        back_populates="classroom",
        foreign_keys="User.classroom_id",
    )

"""Tutor roster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tutorhub.db.models.base import UserRole
from tutorhub.services.levels import LevelInfo, calculate_level_info

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True, slots=True)
class RosterEntry:
    id: UUID
    username: str
    first_name: str | None
    last_name: str | None
    points: int
    experience: int
    level_info: LevelInfo


class StudentService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_tutor_students(self, tutor_id: UUID) -> list[RosterEntry]:
        """The tutor's students, alphabetical by username."""
        from sqlalchemy import select

        from tutorhub.db.models import User

        result = await self._session.execute(
            select(User)
            .where(User.role == UserRole.STUDENT, User.tutor_id == tutor_id)
            .order_by(User.username)
        )
        return [
            RosterEntry(
                id=s.id,
                username=s.username,
                first_name=s.first_name,
                last_name=s.last_name,
                points=s.points or 0,
                experience=s.experience or 0,
                level_info=calculate_level_info(s.experience or 0),
            )
            for s in result.scalars().all()
        ]

"""Board meetings and attendee check-in."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from tutorhub.core.errors import Conflict, InvalidInput
from tutorhub.db.models.base import MeetingStatus
from tutorhub.services.decisions import MeetingNotFoundError

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

LOCATION_MAX_LENGTH = 200


class InvalidMeetingStatusError(InvalidInput):
    code = "invalid_meeting_status"
    default_message = "Durum PLANNED, ONGOING, COMPLETED veya CANCELLED olmalıdır"


class AlreadyCheckedInError(Conflict):
    code = "already_checked_in"
    default_message = "Bu toplantıya zaten giriş yaptınız"


@dataclass(frozen=True, slots=True)
class MeetingView:
    id: UUID
    title: str
    description: str | None
    meeting_date: datetime
    location: str
    status: MeetingStatus
    created_by_id: UUID
    created_at: datetime
    updated_at: datetime
    attendee_count: int
    decision_count: int

    @classmethod
    def from_model(cls, meeting: Any) -> MeetingView:
        return cls(
            id=meeting.id,
            title=meeting.title,
            description=meeting.description,
            meeting_date=meeting.meeting_date,
            location=meeting.location,
            status=meeting.status,
            created_by_id=meeting.created_by_id,
            created_at=meeting.created_at,
            updated_at=meeting.updated_at,
            attendee_count=len(meeting.attendees),
            decision_count=len(meeting.decisions),
        )


def parse_meeting_status(value: str | MeetingStatus) -> MeetingStatus:
    if isinstance(value, MeetingStatus):
        return value
    try:
        return MeetingStatus(value)
    except ValueError:
        raise InvalidMeetingStatusError() from None


def validate_meeting_fields(
    *,
    title: str | None,
    description: str | None,
    meeting_date: datetime | None,
    location: str | None,
    partial: bool = False,
) -> None:
    from tutorhub.services.decisions import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH

    if title is not None or not partial:
        if not title or not title.strip():
            raise InvalidInput("Başlık gereklidir")
        if len(title) > TITLE_MAX_LENGTH:
            raise InvalidInput("Başlık çok uzun")
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise InvalidInput("Açıklama çok uzun")
    if meeting_date is None and not partial:
        raise InvalidInput("Tarih gereklidir")
    if location is not None or not partial:
        if not location or not location.strip():
            raise InvalidInput("Konum gereklidir")
        if len(location) > LOCATION_MAX_LENGTH:
            raise InvalidInput("Konum çok uzun")


class MeetingService:
    """CRUD for board meetings."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _base_query(self) -> Any:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import Meeting

        return select(Meeting).options(
            selectinload(Meeting.attendees), selectinload(Meeting.decisions)
        )

    async def _get_model(self, meeting_id: UUID) -> Any:
        from tutorhub.db.models import Meeting

        result = await self._session.execute(self._base_query().where(Meeting.id == meeting_id))
        meeting = result.scalar_one_or_none()
        if meeting is None:
            raise MeetingNotFoundError()
        return meeting

    async def list_meetings(self) -> list[MeetingView]:
        """All meetings, newest first."""
        from tutorhub.db.models import Meeting

        result = await self._session.execute(
            self._base_query().order_by(Meeting.meeting_date.desc())
        )
        return [MeetingView.from_model(m) for m in result.scalars().all()]

    async def get(self, meeting_id: UUID) -> MeetingView:
        return MeetingView.from_model(await self._get_model(meeting_id))

    async def create(
        self,
        *,
        title: str,
        meeting_date: datetime,
        location: str,
        created_by_id: UUID,
        description: str | None = None,
    ) -> MeetingView:
        from tutorhub.db.models import Meeting

        validate_meeting_fields(
            title=title, description=description, meeting_date=meeting_date, location=location
        )
        meeting = Meeting(
            title=title.strip(),
            description=description or None,
            meeting_date=meeting_date,
            location=location.strip(),
            status=MeetingStatus.PLANNED,
            created_by_id=created_by_id,
        )
        self._session.add(meeting)
        await self._session.flush()
        logger.info("Meeting created", extra={"meeting_id": str(meeting.id)})
        return await self.get(meeting.id)

    async def update(
        self,
        meeting_id: UUID,
        *,
        title: str | None = None,
        description: str | None = None,
        meeting_date: datetime | None = None,
        location: str | None = None,
        status: str | MeetingStatus | None = None,
    ) -> MeetingView:
        validate_meeting_fields(
            title=title,
            description=description,
            meeting_date=meeting_date,
            location=location,
            partial=True,
        )
        new_status = parse_meeting_status(status) if status is not None else None

        meeting = await self._get_model(meeting_id)
        if title is not None:
            meeting.title = title.strip()
        if description is not None:
            meeting.description = description or None
        if meeting_date is not None:
            meeting.meeting_date = meeting_date
        if location is not None:
            meeting.location = location.strip()
        if new_status is not None:
            meeting.status = new_status
        meeting.updated_at = datetime.now(UTC)

        await self._session.flush()
        logger.info("Meeting updated", extra={"meeting_id": str(meeting_id)})
        return MeetingView.from_model(meeting)

    async def delete(self, meeting_id: UUID) -> None:
        """Delete a meeting with its attendees and decisions."""
        meeting = await self._get_model(meeting_id)
        await self._session.delete(meeting)
        await self._session.flush()
        logger.info("Meeting deleted", extra={"meeting_id": str(meeting_id)})

    async def check_in(self, meeting_id: UUID, user_id: UUID) -> MeetingView:
        """Record the user as present at the meeting, once."""
        from tutorhub.db.models import MeetingAttendee

        meeting = await self._get_model(meeting_id)
        if any(a.user_id == user_id for a in meeting.attendees):
            raise AlreadyCheckedInError()

        meeting.attendees.append(MeetingAttendee(meeting_id=meeting_id, user_id=user_id))
        await self._session.flush()
        logger.info(
            "Meeting check-in recorded",
            extra={"meeting_id": str(meeting_id), "user_id": str(user_id)},
        )
        return MeetingView.from_model(meeting)

"""Events and attendance sessions.

Admins create events, optionally for a specific tutor. Students register,
and tutors mark participation. Tutors and admins run attendance sessions
that students check into while ACTIVE; completing a session closes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from tutorhub.core.errors import Conflict, Forbidden, InvalidInput, NotFound
from tutorhub.db.models.base import EventStatus, ParticipantStatus, SessionStatus, UserRole

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

JOINABLE_STATUSES = frozenset({EventStatus.YAKINDA, EventStatus.DEVAM_EDIYOR})
MARKABLE_STATUSES = frozenset({ParticipantStatus.ATTENDED, ParticipantStatus.ABSENT})


class EventNotFoundError(NotFound):
    code = "event_not_found"
    default_message = "Etkinlik bulunamadı"


class EventNotJoinableError(InvalidInput):
    code = "event_not_joinable"
    default_message = "Yalnızca yaklaşan veya devam eden etkinliklere katılabilirsiniz"


class AlreadyJoinedError(Conflict):
    code = "already_joined"
    default_message = "Bu etkinliğe zaten katıldınız"


class EventFullError(InvalidInput):
    code = "event_full"
    default_message = "Etkinlik maksimum kapasiteye ulaştı"


class ParticipantNotFoundError(NotFound):
    code = "participant_not_found"
    default_message = "Katılımcı bulunamadı"


class EventAccessError(Forbidden):
    code = "event_forbidden"
    default_message = "Bu etkinliğin katılımcılarını görüntüleme yetkiniz yok"


class SessionNotFoundError(NotFound):
    code = "session_not_found"
    default_message = "Yoklama oturumu bulunamadı"


class SessionClosedError(InvalidInput):
    code = "session_closed"
    default_message = "Bu yoklama oturumu aktif değil"


class AlreadyCheckedInError(Conflict):
    code = "already_checked_in"
    default_message = "Bu oturuma zaten katıldınız"


class TutorNotFoundError(NotFound):
    code = "tutor_not_found"
    default_message = "Öğretmen bulunamadı"


class SessionAccessError(Forbidden):
    code = "session_forbidden"
    default_message = "Bu yoklama oturumunu değiştirme yetkiniz yok"


@dataclass(frozen=True, slots=True)
class JoinResult:
    participant_id: UUID
    status: ParticipantStatus
    registered_at: datetime
    enrolled_students: int


@dataclass(frozen=True, slots=True)
class ParticipantView:
    id: UUID
    username: str
    first_name: str | None
    last_name: str | None
    status: ParticipantStatus
    registered_at: datetime


@dataclass(frozen=True, slots=True)
class EventView:
    id: UUID
    title: str
    description: str | None
    start_date_time: datetime
    end_date_time: datetime | None
    location: str | None
    capacity: int
    points: int
    experience: int
    status: EventStatus
    created_by_id: UUID
    created_for_tutor_id: UUID | None

    @classmethod
    def from_model(cls, event: Any) -> EventView:
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            start_date_time=event.start_date_time,
            end_date_time=event.end_date_time,
            location=event.location,
            capacity=event.capacity,
            points=event.points,
            experience=event.experience,
            status=event.status,
            created_by_id=event.created_by_id,
            created_for_tutor_id=event.created_for_tutor_id,
        )


@dataclass(frozen=True, slots=True)
class SessionView:
    id: UUID
    title: str
    session_date: datetime
    status: SessionStatus
    created_by_id: UUID
    attendance_count: int

    @classmethod
    def from_model(cls, session: Any, attendance_count: int = 0) -> SessionView:
        return cls(
            id=session.id,
            title=session.title,
            session_date=session.session_date,
            status=session.status,
            created_by_id=session.created_by_id,
            attendance_count=attendance_count,
        )


@dataclass(frozen=True, slots=True)
class CheckInResult:
    attendance_id: UUID
    session_id: UUID
    student_id: UUID
    checked_in_at: datetime


def has_capacity(capacity: int, registered: int) -> bool:
    """Whether one more registration fits; a capacity of 0 means unlimited."""
    return capacity <= 0 or registered < capacity


def parse_participant_status(value: str | ParticipantStatus) -> ParticipantStatus:
    try:
        status = ParticipantStatus(value)
    except ValueError:
        raise InvalidInput("Durum ATTENDED veya ABSENT olmalıdır") from None
    if status not in MARKABLE_STATUSES:
        raise InvalidInput("Durum ATTENDED veya ABSENT olmalıdır")
    return status


class EventService:
    """Registration and participation for events and attendance sessions."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_event(self, event_id: UUID) -> Any:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import Event, EventParticipant

        result = await self._session.execute(
            select(Event)
            .where(Event.id == event_id)
            .options(selectinload(Event.participants).selectinload(EventParticipant.user))
        )
        event = result.scalar_one_or_none()
        if event is None:
            raise EventNotFoundError()
        return event

    async def create_event(
        self,
        *,
        title: str,
        description: str,
        start_date_time: datetime,
        created_by_id: UUID,
        end_date_time: datetime | None = None,
        location: str | None = None,
        capacity: int = 0,
        points: int = 0,
        experience: int = 0,
        created_for_tutor_id: UUID | None = None,
    ) -> EventView:
        """Create an upcoming event in the active period.

        ``created_for_tutor_id`` attaches the event to a tutor's group; it
        must name a TUTOR.

        Raises:
            InvalidInput: Missing title or description, negative numbers,
                an end before the start, or a non-tutor target.
            TutorNotFoundError: ``created_for_tutor_id`` is unknown.
        """
        from sqlalchemy import select

        from tutorhub.db.models import Event, User
        from tutorhub.services.periods import get_active_period

        title = title.strip()
        if not title or not description.strip():
            raise InvalidInput("Başlık, açıklama ve başlangıç tarihi gereklidir")
        if min(capacity, points, experience) < 0:
            raise InvalidInput("Kapasite, puan ve deneyim negatif olamaz")
        if end_date_time is not None and end_date_time < start_date_time:
            raise InvalidInput("Bitiş tarihi başlangıç tarihinden önce olamaz")

        if created_for_tutor_id is not None:
            tutor = (
                await self._session.execute(select(User).where(User.id == created_for_tutor_id))
            ).scalar_one_or_none()
            if tutor is None:
                raise TutorNotFoundError()
            if tutor.role != UserRole.TUTOR:
                raise InvalidInput("Seçilen kullanıcı öğretmen değil")

        period = await get_active_period(self._session)
        event = Event(
            title=title,
            description=description,
            start_date_time=start_date_time,
            end_date_time=end_date_time or start_date_time,
            location=location or None,
            capacity=capacity,
            points=points,
            experience=experience,
            status=EventStatus.YAKINDA,
            created_by_id=created_by_id,
            created_for_tutor_id=created_for_tutor_id,
            period_id=period.id if period is not None else None,
        )
        self._session.add(event)
        await self._session.flush()

        logger.info(
            "Event created",
            extra={"event_id": str(event.id), "created_by_id": str(created_by_id)},
        )
        return EventView.from_model(event)

    async def join_event(self, event_id: UUID, user_id: UUID) -> JoinResult:
        """Register the user for an upcoming or ongoing event.

        Raises:
            EventNotFoundError: Unknown event.
            EventNotJoinableError: Event is finished or cancelled.
            AlreadyJoinedError: User is already registered.
            EventFullError: Capacity reached.
        """
        from tutorhub.db.models import EventParticipant

        event = await self._get_event(event_id)
        if event.status not in JOINABLE_STATUSES:
            raise EventNotJoinableError()
        if any(p.user_id == user_id for p in event.participants):
            raise AlreadyJoinedError()

        registered = sum(1 for p in event.participants if p.status == ParticipantStatus.REGISTERED)
        if not has_capacity(event.capacity, registered):
            raise EventFullError()

        participant = EventParticipant(
            event_id=event_id,
            user_id=user_id,
            status=ParticipantStatus.REGISTERED,
            registered_at=datetime.now(UTC),
        )
        event.participants.append(participant)
        await self._session.flush()

        logger.info(
            "User joined event",
            extra={"event_id": str(event_id), "user_id": str(user_id)},
        )
        return JoinResult(
            participant_id=participant.id,
            status=participant.status,
            registered_at=participant.registered_at,
            enrolled_students=registered + 1,
        )

    async def list_participants(
        self, event_id: UUID, *, user_id: UUID, role: UserRole
    ) -> list[ParticipantView]:
        """Participants, most recent registration first.

        Visible to tutors, admins, the event's creator and its participants.
        """
        event = await self._get_event(event_id)
        allowed = (
            role in (UserRole.TUTOR, UserRole.ADMIN)
            or event.created_by_id == user_id
            or any(p.user_id == user_id for p in event.participants)
        )
        if not allowed:
            raise EventAccessError()

        participants = sorted(event.participants, key=lambda p: p.registered_at, reverse=True)
        return [
            ParticipantView(
                id=p.user_id,
                username=p.user.username,
                first_name=p.user.first_name,
                last_name=p.user.last_name,
                status=p.status,
                registered_at=p.registered_at,
            )
            for p in participants
        ]

    async def update_participation(
        self,
        event_id: UUID,
        participant_user_id: UUID,
        status: str | ParticipantStatus,
        *,
        actor_id: UUID,
        actor_role: UserRole,
    ) -> ParticipantView:
        """Mark a participant ATTENDED or ABSENT.

        Admins may mark any event; tutors only events they created or that
        were created for them.
        """
        new_status = parse_participant_status(status)
        event = await self._get_event(event_id)

        if actor_role != UserRole.ADMIN:
            owns = actor_id in (event.created_by_id, event.created_for_tutor_id)
            if actor_role != UserRole.TUTOR or not owns:
                raise Forbidden("Bu etkinliğin katılımını güncelleme yetkiniz yok")

        participant = next((p for p in event.participants if p.user_id == participant_user_id), None)
        if participant is None:
            raise ParticipantNotFoundError()

        previous = participant.status
        participant.status = new_status
        await self._session.flush()

        logger.info(
            "Participation updated",
            extra={
                "event_id": str(event_id),
                "user_id": str(participant_user_id),
                "from_status": previous.value,
                "to_status": new_status.value,
                "actor_id": str(actor_id),
            },
        )
        return ParticipantView(
            id=participant.user_id,
            username=participant.user.username,
            first_name=participant.user.first_name,
            last_name=participant.user.last_name,
            status=participant.status,
            registered_at=participant.registered_at,
        )

    # ------------------------------------------------------------------
    # Attendance sessions
    # ------------------------------------------------------------------

    async def _get_session(self, session_id: UUID) -> Any:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import AttendanceSession

        result = await self._session.execute(
            select(AttendanceSession)
            .where(AttendanceSession.id == session_id)
            .options(selectinload(AttendanceSession.attendances))
        )
        attendance_session = result.scalar_one_or_none()
        if attendance_session is None:
            raise SessionNotFoundError()
        return attendance_session

    async def _get_owned_session(
        self, session_id: UUID, actor_id: UUID, actor_role: UserRole
    ) -> Any:
        attendance_session = await self._get_session(session_id)
        if actor_role != UserRole.ADMIN and attendance_session.created_by_id != actor_id:
            logger.warning(
                "Session change denied",
                extra={"session_id": str(session_id), "user_id": str(actor_id)},
            )
            raise SessionAccessError()
        return attendance_session

    async def create_session(
        self, *, title: str, session_date: datetime, created_by_id: UUID
    ) -> SessionView:
        """Open an ACTIVE attendance session in the active period."""
        from tutorhub.db.models import AttendanceSession
        from tutorhub.services.periods import get_active_period

        title = title.strip()
        if not title:
            raise InvalidInput("Oturum başlığı gereklidir")

        period = await get_active_period(self._session)
        attendance_session = AttendanceSession(
            title=title,
            session_date=session_date,
            status=SessionStatus.ACTIVE,
            created_by_id=created_by_id,
            period_id=period.id if period is not None else None,
        )
        self._session.add(attendance_session)
        await self._session.flush()

        logger.info(
            "Attendance session created",
            extra={"session_id": str(attendance_session.id), "created_by_id": str(created_by_id)},
        )
        return SessionView.from_model(attendance_session)

    async def update_session(
        self,
        session_id: UUID,
        *,
        actor_id: UUID,
        actor_role: UserRole,
        title: str | None = None,
        session_date: datetime | None = None,
    ) -> SessionView:
        """Rename or reschedule a session; its creator or an admin only."""
        if title is not None and not title.strip():
            raise InvalidInput("Oturum başlığı gereklidir")

        attendance_session = await self._get_owned_session(session_id, actor_id, actor_role)
        if title is not None:
            attendance_session.title = title.strip()
        if session_date is not None:
            attendance_session.session_date = session_date
        await self._session.flush()

        logger.info("Attendance session updated", extra={"session_id": str(session_id)})
        return SessionView.from_model(attendance_session, len(attendance_session.attendances))

    async def complete_session(
        self, session_id: UUID, *, actor_id: UUID, actor_role: UserRole
    ) -> SessionView:
        """Close an ACTIVE session; no further check-ins are accepted.

        Raises:
            SessionNotFoundError: Unknown session.
            SessionAccessError: Neither the creator nor an admin.
            SessionClosedError: The session is already completed.
        """
        attendance_session = await self._get_owned_session(session_id, actor_id, actor_role)
        if attendance_session.status != SessionStatus.ACTIVE:
            raise SessionClosedError()

        attendance_session.status = SessionStatus.COMPLETED
        await self._session.flush()

        logger.info(
            "Attendance session completed",
            extra={
                "session_id": str(session_id),
                "attendance_count": len(attendance_session.attendances),
            },
        )
        return SessionView.from_model(attendance_session, len(attendance_session.attendances))

    async def check_in(self, session_id: UUID, student_id: UUID) -> CheckInResult:
        """Record a student's attendance at an ACTIVE session, once."""
        from tutorhub.db.models import Attendance

        attendance_session = await self._get_session(session_id)
        if attendance_session.status != SessionStatus.ACTIVE:
            raise SessionClosedError()
        if any(a.student_id == student_id for a in attendance_session.attendances):
            raise AlreadyCheckedInError()

        attendance = Attendance(
            session_id=session_id, student_id=student_id, checked_in_at=datetime.now(UTC)
        )
        attendance_session.attendances.append(attendance)
        await self._session.flush()

        logger.info(
            "Session check-in recorded",
            extra={"session_id": str(session_id), "student_id": str(student_id)},
        )
        return CheckInResult(
            attendance_id=attendance.id,
            session_id=session_id,
            student_id=student_id,
            checked_in_at=attendance.checked_in_at,
        )

"""Tests for event registration, participation and session check-in.

Tests cover:
- Capacity rule (0 means unlimited)
- Join errors: not joinable, already joined, full
- Participant visibility
- Participation marking permissions
- Session check-in errors
- Event creation: validation, tutor target, active period
- Attendance sessions: create, update, complete, ownership
"""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from tests.factories import (
    create_event,
    create_participant,
    create_session,
    create_user,
    result_returning,
)
from tutorhub.core.errors import Forbidden, InvalidInput
from tutorhub.db.models.base import EventStatus, ParticipantStatus, SessionStatus, UserRole
from tutorhub.services.events import (
    AlreadyCheckedInError,
    AlreadyJoinedError,
    EventAccessError,
    EventFullError,
    EventNotFoundError,
    EventNotJoinableError,
    EventService,
    ParticipantNotFoundError,
    SessionAccessError,
    SessionClosedError,
    SessionNotFoundError,
    TutorNotFoundError,
    has_capacity,
    parse_participant_status,
)


def create_mock_session(record) -> AsyncMock:
    """Session whose query returns ``record``."""
    session = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = record
    session.execute.return_value = result
    return session


class TestHasCapacity:
    @pytest.mark.parametrize(
        ("capacity", "registered", "expected"),
        [(0, 500, True), (-1, 3, True), (10, 9, True), (10, 10, False), (1, 0, True)],
    )
    def test_capacity(self, capacity: int, registered: int, expected: bool) -> None:
        assert has_capacity(capacity, registered) is expected


class TestParseParticipantStatus:
    def test_markable(self) -> None:
        assert parse_participant_status("ATTENDED") is ParticipantStatus.ATTENDED
        assert parse_participant_status(ParticipantStatus.ABSENT) is ParticipantStatus.ABSENT

    @pytest.mark.parametrize("value", ["REGISTERED", "PRESENT", ""])
    def test_rejected(self, value: str) -> None:
        with pytest.raises(InvalidInput) as exc_info:
            parse_participant_status(value)
        assert exc_info.value.message == "Durum ATTENDED veya ABSENT olmalıdır"


class TestJoinEvent:
    """Tests for EventService.join_event."""

    async def test_unknown_event(self) -> None:
        with pytest.raises(EventNotFoundError):
            await EventService(create_mock_session(None)).join_event(uuid4(), uuid4())

    @pytest.mark.parametrize("status", [EventStatus.TAMAMLANDI, EventStatus.IPTAL_EDILDI])
    async def test_closed_event(self, status: EventStatus) -> None:
        event = create_event(status=status)
        with pytest.raises(EventNotJoinableError):
            await EventService(create_mock_session(event)).join_event(event.id, uuid4())

    async def test_already_joined(self) -> None:
        user = create_user()
        event = create_event(participants=[create_participant(user)])
        with pytest.raises(AlreadyJoinedError) as exc_info:
            await EventService(create_mock_session(event)).join_event(event.id, user.id)
        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Bu etkinliğe zaten katıldınız"

    async def test_full(self) -> None:
        event = create_event(
            capacity=2, participants=[create_participant(create_user()) for _ in range(2)]
        )
        session = create_mock_session(event)
        with pytest.raises(EventFullError) as exc_info:
            await EventService(session).join_event(event.id, uuid4())
        assert exc_info.value.message == "Etkinlik maksimum kapasiteye ulaştı"
        session.flush.assert_not_awaited()

    async def test_joins_unlimited_event(self) -> None:
        others = [create_participant(create_user()) for _ in range(3)]
        event = create_event(status=EventStatus.DEVAM_EDIYOR, capacity=0, participants=others)
        session = create_mock_session(event)
        user_id = uuid4()

        result = await EventService(session).join_event(event.id, user_id)

        assert result.status is ParticipantStatus.REGISTERED
        assert result.enrolled_students == 4
        assert event.participants[-1].user_id == user_id
        session.flush.assert_awaited_once()


class TestListParticipants:
    async def test_participant_can_view(self) -> None:
        user = create_user()
        event = create_event(participants=[create_participant(user)])
        views = await EventService(create_mock_session(event)).list_participants(
            event.id, user_id=user.id, role=UserRole.STUDENT
        )
        assert [v.username for v in views] == [user.username]

    async def test_outsider_student_denied(self) -> None:
        event = create_event(participants=[create_participant(create_user())])
        with pytest.raises(EventAccessError):
            await EventService(create_mock_session(event)).list_participants(
                event.id, user_id=uuid4(), role=UserRole.STUDENT
            )


class TestUpdateParticipation:
    """Tests for EventService.update_participation."""

    async def test_tutor_marks_own_event(self) -> None:
        tutor_id = uuid4()
        student = create_user()
        event = create_event(created_for_tutor_id=tutor_id, participants=[create_participant(student)])
        session = create_mock_session(event)

        view = await EventService(session).update_participation(
            event.id, student.id, "ATTENDED", actor_id=tutor_id, actor_role=UserRole.TUTOR
        )

        assert view.status is ParticipantStatus.ATTENDED
        assert event.participants[0].status is ParticipantStatus.ATTENDED

    async def test_tutor_cannot_mark_other_event(self) -> None:
        student = create_user()
        event = create_event(participants=[create_participant(student)])
        with pytest.raises(Forbidden):
            await EventService(create_mock_session(event)).update_participation(
                event.id, student.id, "ABSENT", actor_id=uuid4(), actor_role=UserRole.TUTOR
            )

    async def test_admin_marks_any_event(self) -> None:
        student = create_user()
        event = create_event(participants=[create_participant(student)])
        view = await EventService(create_mock_session(event)).update_participation(
            event.id, student.id, "ABSENT", actor_id=uuid4(), actor_role=UserRole.ADMIN
        )
        assert view.status is ParticipantStatus.ABSENT

    async def test_unknown_participant(self) -> None:
        event = create_event()
        with pytest.raises(ParticipantNotFoundError):
            await EventService(create_mock_session(event)).update_participation(
                event.id, uuid4(), "ATTENDED", actor_id=uuid4(), actor_role=UserRole.ADMIN
            )


class TestCheckIn:
    """Tests for EventService.check_in."""

    async def test_unknown_session(self) -> None:
        with pytest.raises(SessionNotFoundError):
            await EventService(create_mock_session(None)).check_in(uuid4(), uuid4())

    async def test_completed_session(self) -> None:
        session_record = create_session(status=SessionStatus.COMPLETED)
        with pytest.raises(SessionClosedError):
            await EventService(create_mock_session(session_record)).check_in(
                session_record.id, uuid4()
            )

    async def test_second_check_in(self) -> None:
        student = create_user()
        session_record = create_session(status=SessionStatus.ACTIVE, attendees=[student])
        with pytest.raises(AlreadyCheckedInError):
            await EventService(create_mock_session(session_record)).check_in(
                session_record.id, student.id
            )


START = datetime(2024, 4, 10, 14, 0, tzinfo=UTC)


class TestCreateEvent:
    """Tests for EventService.create_event."""

    async def test_group_event(self, mock_db_session) -> None:
        tutor = create_user(username="hoca", role=UserRole.TUTOR)
        period = SimpleNamespace(id=uuid4())
        admin_id = uuid4()
        mock_db_session.execute.side_effect = [result_returning(tutor), result_returning(period)]

        view = await EventService(mock_db_session).create_event(
            title=" Bahar Şenliği ",
            description="Okul bahçesinde",
            start_date_time=START,
            created_by_id=admin_id,
            capacity=30,
            points=10,
            created_for_tutor_id=tutor.id,
        )

        event = mock_db_session.add.call_args.args[0]
        assert event.period_id == period.id
        assert event.status is EventStatus.YAKINDA
        # No end given: the event ends when it starts
        assert event.end_date_time == START
        assert view.title == "Bahar Şenliği"
        assert view.created_for_tutor_id == tutor.id
        assert view.created_by_id == admin_id
        mock_db_session.flush.assert_awaited_once()

    async def test_target_must_be_tutor(self, mock_db_session) -> None:
        student = create_user()
        mock_db_session.execute.return_value = result_returning(student)

        with pytest.raises(InvalidInput) as exc_info:
            await EventService(mock_db_session).create_event(
                title="x",
                description="y",
                start_date_time=START,
                created_by_id=uuid4(),
                created_for_tutor_id=student.id,
            )
        assert exc_info.value.message == "Seçilen kullanıcı öğretmen değil"
        mock_db_session.add.assert_not_called()

    async def test_unknown_tutor(self, mock_db_session) -> None:
        mock_db_session.execute.return_value = result_returning(None)

        with pytest.raises(TutorNotFoundError):
            await EventService(mock_db_session).create_event(
                title="x",
                description="y",
                start_date_time=START,
                created_by_id=uuid4(),
                created_for_tutor_id=uuid4(),
            )

    @pytest.mark.parametrize(
        "fields",
        [
            {"title": " "},
            {"description": ""},
            {"capacity": -1},
            {"end_date_time": datetime(2024, 4, 10, 13, 0, tzinfo=UTC)},
        ],
    )
    async def test_invalid(self, mock_db_session, fields: dict) -> None:
        values = {"title": "x", "description": "y", "start_date_time": START} | fields

        with pytest.raises(InvalidInput):
            await EventService(mock_db_session).create_event(created_by_id=uuid4(), **values)
        mock_db_session.execute.assert_not_awaited()


class TestAttendanceSessions:
    """Tests for creating, updating and completing attendance sessions."""

    async def test_create(self, mock_db_session) -> None:
        tutor_id = uuid4()
        mock_db_session.execute.return_value = result_returning(None)

        view = await EventService(mock_db_session).create_session(
            title="Haftalık Yoklama", session_date=START, created_by_id=tutor_id
        )

        record = mock_db_session.add.call_args.args[0]
        assert record.status is SessionStatus.ACTIVE
        assert record.period_id is None
        assert view.created_by_id == tutor_id
        assert view.attendance_count == 0

    async def test_create_requires_title(self, mock_db_session) -> None:
        with pytest.raises(InvalidInput):
            await EventService(mock_db_session).create_session(
                title="", session_date=START, created_by_id=uuid4()
            )

    async def test_owner_updates(self) -> None:
        tutor_id = uuid4()
        record = create_session(status=SessionStatus.ACTIVE, created_by_id=tutor_id)
        session = create_mock_session(record)

        view = await EventService(session).update_session(
            record.id,
            actor_id=tutor_id,
            actor_role=UserRole.TUTOR,
            title=" Cuma Yoklaması ",
            session_date=START,
        )

        assert (view.title, view.session_date) == ("Cuma Yoklaması", START)
        session.flush.assert_awaited_once()

    async def test_update_rejects_blank_title(self) -> None:
        record = create_session(status=SessionStatus.ACTIVE)
        with pytest.raises(InvalidInput):
            await EventService(create_mock_session(record)).update_session(
                record.id, actor_id=uuid4(), actor_role=UserRole.ADMIN, title="  "
            )
        assert record.title == "Haftalık Yoklama"

    async def test_complete(self) -> None:
        tutor_id = uuid4()
        students = [create_user(username="a"), create_user(username="b")]
        record = create_session(
            status=SessionStatus.ACTIVE, created_by_id=tutor_id, attendees=students
        )
        session = create_mock_session(record)

        view = await EventService(session).complete_session(
            record.id, actor_id=tutor_id, actor_role=UserRole.TUTOR
        )

        assert record.status is SessionStatus.COMPLETED
        assert view.attendance_count == 2

    async def test_complete_twice(self) -> None:
        record = create_session(status=SessionStatus.COMPLETED)
        with pytest.raises(SessionClosedError):
            await EventService(create_mock_session(record)).complete_session(
                record.id, actor_id=uuid4(), actor_role=UserRole.ADMIN
            )

    async def test_other_tutor_cannot_complete(self) -> None:
        record = create_session(status=SessionStatus.ACTIVE)
        session = create_mock_session(record)

        with pytest.raises(SessionAccessError) as exc_info:
            await EventService(session).complete_session(
                record.id, actor_id=uuid4(), actor_role=UserRole.TUTOR
            )

        assert exc_info.value.status_code == 403
        assert record.status is SessionStatus.ACTIVE
        session.flush.assert_not_awaited()

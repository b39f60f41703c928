"""Tests for board meetings, check-in and the tutor roster."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from tests.factories import create_user
from tutorhub.core.errors import InvalidInput
from tutorhub.db.models.base import MeetingStatus
from tutorhub.services.decisions import MeetingNotFoundError
from tutorhub.services.meetings import (
    AlreadyCheckedInError,
    InvalidMeetingStatusError,
    MeetingService,
    MeetingView,
    parse_meeting_status,
    validate_meeting_fields,
)
from tutorhub.services.students import StudentService

NOW = datetime(2024, 4, 10, 18, 0, tzinfo=UTC)


def create_meeting(attendees=None, decisions=None) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        title="Nisan toplantısı",
        description=None,
        meeting_date=NOW,
        location="Merkez ofis",
        status=MeetingStatus.PLANNED,
        created_by_id=uuid4(),
        created_at=NOW,
        updated_at=NOW,
        attendees=list(attendees or []),
        decisions=list(decisions or []),
    )


def session_returning(value) -> AsyncMock:
    session = AsyncMock()
    session.add = MagicMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.all.return_value = value if isinstance(value, list) else [value]
    session.execute.return_value = result
    return session


class TestValidateMeetingFields:
    def test_valid(self) -> None:
        validate_meeting_fields(
            title="Toplantı", description=None, meeting_date=NOW, location="Ofis"
        )

    @pytest.mark.parametrize(
        ("fields", "message"),
        [
            ({"title": " ", "meeting_date": NOW, "location": "Ofis"}, "Başlık gereklidir"),
            ({"title": "x" * 201, "meeting_date": NOW, "location": "Ofis"}, "Başlık çok uzun"),
            ({"title": "T", "meeting_date": None, "location": "Ofis"}, "Tarih gereklidir"),
            ({"title": "T", "meeting_date": NOW, "location": ""}, "Konum gereklidir"),
            ({"title": "T", "meeting_date": NOW, "location": "x" * 201}, "Konum çok uzun"),
        ],
    )
    def test_invalid(self, fields: dict, message: str) -> None:
        with pytest.raises(InvalidInput, match=message):
            validate_meeting_fields(description=None, **fields)

    def test_partial_skips_missing(self) -> None:
        validate_meeting_fields(
            title=None, description=None, meeting_date=None, location=None, partial=True
        )

    def test_partial_checks_present(self) -> None:
        with pytest.raises(InvalidInput, match="Konum gereklidir"):
            validate_meeting_fields(
                title=None, description=None, meeting_date=None, location="  ", partial=True
            )


class TestParseMeetingStatus:
    def test_parse(self) -> None:
        assert parse_meeting_status("COMPLETED") is MeetingStatus.COMPLETED
        assert parse_meeting_status(MeetingStatus.ONGOING) is MeetingStatus.ONGOING

    def test_unknown(self) -> None:
        with pytest.raises(InvalidMeetingStatusError):
            parse_meeting_status("POSTPONED")


class TestMeetingView:
    def test_counts(self) -> None:
        meeting = create_meeting(attendees=[object(), object()], decisions=[object()])
        view = MeetingView.from_model(meeting)
        assert view.attendee_count == 2
        assert view.decision_count == 1


class TestMeetingService:
    """Tests for MeetingService against a mocked session."""

    async def test_get_missing(self) -> None:
        with pytest.raises(MeetingNotFoundError):
            await MeetingService(session_returning(None)).get(uuid4())

    async def test_check_in(self) -> None:
        meeting = create_meeting()
        session = session_returning(meeting)
        user_id = uuid4()

        view = await MeetingService(session).check_in(meeting.id, user_id)

        assert view.attendee_count == 1
        assert meeting.attendees[0].user_id == user_id
        session.flush.assert_awaited_once()
        session.commit.assert_not_awaited()

    async def test_check_in_twice(self) -> None:
        user_id = uuid4()
        meeting = create_meeting(attendees=[SimpleNamespace(user_id=user_id)])

        with pytest.raises(AlreadyCheckedInError) as exc_info:
            await MeetingService(session_returning(meeting)).check_in(meeting.id, user_id)
        assert exc_info.value.status_code == 409

    async def test_update_status(self) -> None:
        meeting = create_meeting()
        session = session_returning(meeting)

        view = await MeetingService(session).update(meeting.id, status="COMPLETED", title=" Yeni ")

        assert view.status is MeetingStatus.COMPLETED
        assert view.title == "Yeni"
        assert meeting.updated_at > NOW

    async def test_update_rejects_bad_status_before_loading(self) -> None:
        session = session_returning(create_meeting())
        with pytest.raises(InvalidMeetingStatusError):
            await MeetingService(session).update(uuid4(), status="LATER")
        session.execute.assert_not_awaited()

    async def test_delete(self) -> None:
        meeting = create_meeting()
        session = session_returning(meeting)
        await MeetingService(session).delete(meeting.id)
        session.delete.assert_awaited_once_with(meeting)


class TestStudentService:
    async def test_roster(self) -> None:
        students = [
            create_user(username="ali", experience=95, points=12),
            create_user(username="zeynep", experience=None, points=None),
        ]
        session = session_returning(students)

        roster = await StudentService(session).list_tutor_students(uuid4())

        assert [s.username for s in roster] == ["ali", "zeynep"]
        assert roster[0].level_info.level == 2
        assert roster[1].experience == 0
        assert roster[1].points == 0
        assert roster[1].level_info.level == 1

    async def test_roster_query_filters_students(self) -> None:
        session = session_returning([])
        tutor_id = uuid4()
        await StudentService(session).list_tutor_students(tutor_id)
        statement = session.execute.await_args.args[0]
        compiled = str(statement)
        assert "users.role" in compiled
        assert "users.tutor_id" in compiled
        assert "ORDER BY users.username" in compiled

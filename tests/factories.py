"""Test data factories for TutorHub.

Services read ORM records only through attributes, so tests build them as
``SimpleNamespace`` objects with the same attribute names as the models.
"""

from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

from tutorhub.db.models.base import (
    DecisionStatus,
    EventStatus,
    ParticipantStatus,
    SessionStatus,
    UserRole,
)


def create_user(
    username: str = "ogrenci",
    first_name: str | None = "Ali",
    last_name: str | None = "Yılmaz",
    role: UserRole = UserRole.STUDENT,
    experience: int = 0,
    points: int = 0,
    tutor=None,
    classroom=None,
    **kwargs,
) -> SimpleNamespace:
    """Create a user record.

    Args:
        username: Login name.
        role: Platform role.
        experience: Lifetime experience.
        tutor: Tutor record; its id becomes ``tutor_id``.
        classroom: Classroom record; its id becomes ``classroom_id``.
    """
    defaults = {
        "id": uuid4(),
        "email": f"{username}@example.com",
        "created_at": datetime.now(UTC),
        "event_participations": [],
        "attendances": [],
    }
    defaults.update(kwargs)
    return SimpleNamespace(
        username=username,
        first_name=first_name,
        last_name=last_name,
        role=role,
        experience=experience,
        points=points,
        tutor=tutor,
        tutor_id=tutor.id if tutor is not None else None,
        classroom=classroom,
        classroom_id=classroom.id if classroom is not None else None,
        **defaults,
    )


def create_classroom(name: str = "5-A", tutor=None, students=None) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        name=name,
        tutor=tutor,
        tutor_id=tutor.id if tutor is not None else None,
        students=list(students or []),
    )


def create_participant(
    user, status: ParticipantStatus = ParticipantStatus.REGISTERED, **kwargs
) -> SimpleNamespace:
    return SimpleNamespace(
        id=kwargs.get("id", uuid4()),
        user_id=user.id,
        user=user,
        status=status,
        registered_at=kwargs.get("registered_at", datetime.now(UTC)),
    )


def create_event(
    title: str = "Bilim Şenliği",
    start: datetime | None = None,
    status: EventStatus = EventStatus.YAKINDA,
    capacity: int = 0,
    participants=None,
    created_by_id=None,
    created_for_tutor_id=None,
) -> SimpleNamespace:
    """Create an event record with its participants."""
    return SimpleNamespace(
        id=uuid4(),
        title=title,
        start_date_time=start or datetime(2024, 3, 4, 10, 0, tzinfo=UTC),
        status=status,
        capacity=capacity,
        participants=list(participants or []),
        created_by_id=created_by_id or uuid4(),
        created_for_tutor_id=created_for_tutor_id,
    )


def create_workshop(
    title: str = "Robotik Atölyesi",
    event_date: datetime | None = None,
    participants=None,
    event_type: str | None = "Bilim",
) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        title=title,
        event_date=event_date or datetime(2024, 3, 4, 14, 0, tzinfo=UTC),
        status=EventStatus.TAMAMLANDI,
        participants=list(participants or []),
        event_type=SimpleNamespace(name=event_type) if event_type else None,
    )


def create_session(
    title: str = "Haftalık Yoklama",
    session_date: datetime | None = None,
    attendees=(),
    status: SessionStatus = SessionStatus.COMPLETED,
    created_by_id=None,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        title=title,
        session_date=session_date or datetime(2024, 3, 5, 9, 0, tzinfo=UTC),
        status=status,
        created_by_id=created_by_id or uuid4(),
        attendances=[SimpleNamespace(student_id=s.id) for s in attendees],
    )


def create_decision(
    title: str = "Bahar şenliği bütçesi",
    status: DecisionStatus = DecisionStatus.TODO,
    responsible_users=None,
    meeting=None,
) -> SimpleNamespace:
    now = datetime.now(UTC)
    meeting = meeting or SimpleNamespace(id=uuid4(), title="Yönetim Kurulu", meeting_date=now)
    return SimpleNamespace(
        id=uuid4(),
        title=title,
        description=None,
        target_date=now,
        status=status,
        meeting=meeting,
        meeting_id=meeting.id,
        created_at=now,
        updated_at=now,
        responsible_users=list(responsible_users or []),
    )


def create_donation(amount: str = "100.00", donation_date: datetime | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        donor_id=uuid4(),
        amount=Decimal(amount),
        currency="TRY",
        donation_date=donation_date or datetime.now(UTC),
        notes=None,
        created_at=datetime.now(UTC),
    )


def create_donor(donations=None, **kwargs) -> SimpleNamespace:
    now = datetime.now(UTC)
    return SimpleNamespace(
        id=kwargs.get("id", uuid4()),
        first_name=kwargs.get("first_name", "Ayşe"),
        last_name=kwargs.get("last_name", "Demir"),
        email=kwargs.get("email"),
        phone=None,
        address=None,
        notes=None,
        created_at=now,
        updated_at=now,
        donations=list(donations or []),
    )


def result_returning(value) -> MagicMock:
    """Mock ``execute`` result whose ``scalar_one_or_none`` returns ``value``."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.all.return_value = value if isinstance(value, list) else [value]
    return result

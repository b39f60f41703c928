"""Sociometric analysis of a classroom.

Looks at which students attend workshops together to surface group
leaders, isolated students and friend pairs.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from itertools import combinations
from typing import TYPE_CHECKING, Any

from tutorhub.core.errors import Forbidden, NotFound
from tutorhub.db.models.base import EventStatus, ParticipantStatus, SessionStatus, UserRole

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession

    from tutorhub.core.config import ReportSettings

logger = logging.getLogger(__name__)

UNNAMED = "İsimsiz"

TURKISH_MONTHS = (
    "Oca",
    "Şub",
    "Mar",
    "Nis",
    "May",
    "Haz",
    "Tem",
    "Ağu",
    "Eyl",
    "Eki",
    "Kas",
    "Ara",
)

ANALYSED_EVENT_STATUSES = (EventStatus.TAMAMLANDI, EventStatus.DEVAM_EDIYOR)


class ClassroomAccessError(Forbidden):
    """A tutor asked for a classroom they do not own."""

    code = "classroom_access_denied"
    default_message = "Bu sınıfa erişim yetkiniz yok"


class ClassroomNotFoundError(NotFound):
    code = "classroom_not_found"
    default_message = "Sınıf bulunamadı"


@dataclass(frozen=True, slots=True)
class StudentMetrics:
    id: UUID
    name: str
    participation_count: int
    attendance_count: int
    participation_rate: float


@dataclass(frozen=True, slots=True)
class FriendStudent:
    id: UUID
    name: str


@dataclass(frozen=True, slots=True)
class FriendGroup:
    students: tuple[FriendStudent, FriendStudent]
    common_activities: int
    activity_names: list[str]


@dataclass(frozen=True, slots=True)
class TopActivity:
    name: str
    participation_count: int


@dataclass(frozen=True, slots=True)
class WeeklyTrendPoint:
    week: str
    count: int


@dataclass(slots=True)
class ActivityStats:
    total_activities: int
    total_participations: int
    average_participation_rate: float
    most_popular_activity: str | None
    least_popular_activity: str | None
    top_activities: list[TopActivity] = field(default_factory=list)
    weekly_trend: list[WeeklyTrendPoint] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ClassroomInfo:
    name: str
    total_students: int
    tutor_name: str


@dataclass(slots=True)
class SociometricAnalysis:
    group_leaders: list[StudentMetrics]
    isolated_students: list[StudentMetrics]
    friend_groups: list[FriendGroup]
    activity_stats: ActivityStats
    students: list[StudentMetrics]
    classroom_info: ClassroomInfo


def student_name(student: Any, fallback: str = UNNAMED) -> str:
    name = f"{student.first_name or ''} {student.last_name or ''}".strip()
    return name or fallback


def format_trend_label(when: Any, tz: ZoneInfo | None = None) -> str:
    """``"5 Oca"`` style day + Turkish month abbreviation."""
    if tz is not None:
        when = when.astimezone(tz)
    return f"{when.day} {TURKISH_MONTHS[when.month - 1]}"


def _attending_ids(event: Any, student_ids: set[UUID]) -> list[UUID]:
    return [
        p.user_id
        for p in event.participants
        if p.status == ParticipantStatus.ATTENDED and p.user_id in student_ids
    ]


def analyze_classroom(
    classroom: Any,
    students: Sequence[Any],
    events: Sequence[Any],
    sessions: Sequence[Any],
    *,
    tz: ZoneInfo | None = None,
    friend_pair_min_events: int = 3,
    friend_group_limit: int = 10,
    isolated_min_attendance: int = 3,
    isolated_max_participation: int = 1,
    group_leader_count: int = 5,
    weekly_trend_events: int = 8,
) -> SociometricAnalysis:
    """Build the sociometric analysis from loaded records.

    Args:
        classroom: Classroom record (``name`` and ``tutor`` are used).
        students: Students of the classroom.
        events: Workshops, newest first. Only ATTENDED participants who are
            in ``students`` are counted.
        sessions: Completed attendance sessions.
    """
    student_ids = {s.id for s in students}
    by_id = {s.id: s for s in students}
    attendees = [(event, _attending_ids(event, student_ids)) for event in events]
    total_events = len(attendees)

    metrics: list[StudentMetrics] = []
    for student in students:
        participations = sum(1 for _, ids in attendees if student.id in ids)
        attendance = sum(
            1 for s in sessions if any(a.student_id == student.id for a in s.attendances)
        )
        metrics.append(
            StudentMetrics(
                id=student.id,
                name=student_name(student),
                participation_count=participations,
                attendance_count=attendance,
                participation_rate=participations / total_events * 100 if total_events else 0,
            )
        )

    group_leaders = sorted(
        (m for m in metrics if m.participation_count > 0),
        key=lambda m: m.participation_count,
        reverse=True,
    )[:group_leader_count]

    isolated = [
        m
        for m in metrics
        if m.attendance_count >= isolated_min_attendance
        and m.participation_count <= isolated_max_participation
    ]

    # Pair keys are ordered so (a, b) and (b, a) count together
    pair_counts: Counter[tuple[str, str]] = Counter()
    pair_titles: dict[tuple[str, str], list[str]] = {}
    for event, ids in attendees:
        if len(ids) < 2:
            continue
        for first, second in combinations(ids, 2):
            key = tuple(sorted((str(first), str(second))))
            pair_counts[key] += 1
            titles = pair_titles.setdefault(key, [])
            if event.title not in titles:
                titles.append(event.title)

    by_str = {str(k): v for k, v in by_id.items()}
    strong_pairs = sorted(
        ((key, count) for key, count in pair_counts.items() if count >= friend_pair_min_events),
        key=lambda item: item[1],
        reverse=True,
    )[:friend_group_limit]
    friend_groups = [
        FriendGroup(
            students=(
                FriendStudent(id=by_str[a].id, name=student_name(by_str[a], "")),
                FriendStudent(id=by_str[b].id, name=student_name(by_str[b], "")),
            ),
            common_activities=count,
            activity_names=pair_titles[(a, b)],
        )
        for (a, b), count in strong_pairs
    ]

    total_participations = sum(len(ids) for _, ids in attendees)
    type_totals: Counter[str] = Counter()
    for event, ids in attendees:
        if event.event_type is not None:
            type_totals[event.event_type.name] += len(ids)
    ranked_types = sorted(type_totals.items(), key=lambda item: item[1], reverse=True)

    top_activities = [
        TopActivity(name=event.title, participation_count=len(ids))
        for event, ids in sorted(attendees, key=lambda pair: len(pair[1]), reverse=True)[:5]
    ]
    weekly_trend = [
        WeeklyTrendPoint(week=format_trend_label(event.event_date, tz), count=len(ids))
        for event, ids in attendees[:weekly_trend_events]
    ]
    weekly_trend.reverse()

    stats = ActivityStats(
        total_activities=total_events,
        total_participations=total_participations,
        average_participation_rate=(
            total_participations / (total_events * len(students)) * 100
            if total_events and students
            else 0
        ),
        most_popular_activity=ranked_types[0][0] if ranked_types else None,
        least_popular_activity=ranked_types[-1][0] if ranked_types else None,
        top_activities=top_activities,
        weekly_trend=weekly_trend,
    )

    tutor = classroom.tutor
    return SociometricAnalysis(
        group_leaders=group_leaders,
        isolated_students=isolated,
        friend_groups=friend_groups,
        activity_stats=stats,
        students=metrics,
        classroom_info=ClassroomInfo(
            name=classroom.name,
            total_students=len(students),
            tutor_name=student_name(tutor, "") if tutor is not None else "",
        ),
    )


class SociometricService:
    """Loads classroom activity and runs the sociometric analysis."""

    def __init__(
        self,
        session: AsyncSession,
        report_settings: ReportSettings,
        tz: ZoneInfo | None = None,
    ) -> None:
        self._session = session
        self._settings = report_settings
        self._tz = tz

    async def _resolve_classroom(
        self, classroom_id: UUID | None, user_id: UUID, role: UserRole
    ) -> Any:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import Classroom

        if role not in (UserRole.TUTOR, UserRole.ADMIN):
            raise ClassroomAccessError()

        query = select(Classroom).options(
            selectinload(Classroom.tutor), selectinload(Classroom.students)
        )
        if classroom_id is None:
            if role != UserRole.TUTOR:
                raise ClassroomNotFoundError()
            query = query.where(Classroom.tutor_id == user_id)
        else:
            query = query.where(Classroom.id == classroom_id)

        classroom = (await self._session.execute(query)).scalar_one_or_none()
        if classroom is None:
            raise ClassroomNotFoundError()

        if role == UserRole.TUTOR and classroom.tutor_id != user_id:
            logger.warning(
                "Tutor denied access to classroom",
                extra={"user_id": str(user_id), "classroom_id": str(classroom.id)},
            )
            raise ClassroomAccessError()
        return classroom

    async def get_sociometric_analysis(
        self, classroom_id: UUID | None, user_id: UUID, role: UserRole
    ) -> SociometricAnalysis:
        """Analyse a classroom.

        Raises:
            ClassroomAccessError: A tutor asked for another tutor's classroom.
            ClassroomNotFoundError: The classroom does not exist.
        """
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import (
            Attendance,
            AttendanceSession,
            Part2Event,
            Part2EventParticipant,
        )

        classroom = await self._resolve_classroom(classroom_id, user_id, role)
        students = [s for s in classroom.students if s.role == UserRole.STUDENT]
        student_ids = [s.id for s in students]

        events = (
            (
                await self._session.execute(
                    select(Part2Event)
                    .where(
                        Part2Event.status.in_(ANALYSED_EVENT_STATUSES),
                        Part2Event.participants.any(
                            (Part2EventParticipant.user_id.in_(student_ids))
                            & (Part2EventParticipant.status == ParticipantStatus.ATTENDED)
                        ),
                    )
                    .options(
                        selectinload(Part2Event.participants),
                        selectinload(Part2Event.event_type),
                    )
                    .order_by(Part2Event.event_date.desc())
                )
            )
            .scalars()
            .all()
        )
        sessions = (
            (
                await self._session.execute(
                    select(AttendanceSession)
                    .where(
                        AttendanceSession.status == SessionStatus.COMPLETED,
                        AttendanceSession.attendances.any(Attendance.student_id.in_(student_ids)),
                    )
                    .options(selectinload(AttendanceSession.attendances))
                    .order_by(AttendanceSession.session_date.desc())
                )
            )
            .scalars()
            .all()
        )

        s = self._settings
        analysis = analyze_classroom(
            classroom,
            students,
            list(events),
            list(sessions),
            tz=self._tz,
            friend_pair_min_events=s.friend_pair_min_events,
            friend_group_limit=s.friend_group_limit,
            isolated_min_attendance=s.isolated_min_attendance,
            isolated_max_participation=s.isolated_max_participation,
            group_leader_count=s.group_leader_count,
            weekly_trend_events=s.weekly_trend_events,
        )
        logger.info(
            "Sociometric analysis built",
            extra={
                "classroom_id": str(classroom.id),
                "students": len(students),
                "events": analysis.activity_stats.total_activities,
            },
        )
        return analysis

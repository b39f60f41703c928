"""Report aggregation over events, workshops and attendance sessions.

Three admin reports are built here:
- weekly participation: per-tutor activity and participation rates for the
  active period
- attendance alerts: students whose attendance is below the threshold
- events overview: per-tutor activity counts this week / this month

Fetching and aggregation are separated. The ``build_*`` functions are pure
and operate on already-loaded records (ORM instances or any object with the
same attributes), so they can be exercised without a database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from tutorhub.core.errors import TutorHubError
from tutorhub.db.models.base import ParticipantStatus, UserRole

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession

    from tutorhub.core.config import ReportSettings

logger = logging.getLogger(__name__)

KIND_EVENT = "ETKİNLİK"
KIND_WORKSHOP = "ATÖLYE"
KIND_SESSION = "OTURUM"

MISSED_ABSENT = "GELMEDİ"
MISSED_NOT_ATTENDED = "KAYITLI / KATILMADI"
MISSED_NOT_REGISTERED = "KAYITSIZ"

NO_CLASSROOM = "Sınıf Atanmamış"


class ReportError(TutorHubError):
    """A report could not be produced."""

    code = "report_error"
    status_code = 500


# =============================================================================
# Result records
# =============================================================================


@dataclass(frozen=True, slots=True)
class ActivityRecord:
    """One event, workshop or session as counted by the reports."""

    id: UUID
    title: str
    type: str
    date: datetime
    registered: int
    attended: int
    participation_rate: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "participation_rate", percentage(self.attended, self.registered))


@dataclass(slots=True)
class TutorParticipation:
    id: UUID
    name: str
    username: str
    student_count: int
    events_created: int
    total_attendance: int
    total_registered: int
    participation_rate: int
    sessions: list[ActivityRecord] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ParticipationSummary:
    total_events: int
    total_attendance: int
    total_registered: int
    avg_participation: int
    active_tutors: int
    total_tutors: int


@dataclass(slots=True)
class WeeklyParticipationReport:
    window_start: datetime
    window_end: datetime
    summary: ParticipationSummary
    tutor_stats: list[TutorParticipation]


@dataclass(frozen=True, slots=True)
class MissedActivity:
    id: UUID
    type: str
    title: str
    date: datetime
    status: str


@dataclass(slots=True)
class StudentAlert:
    id: UUID
    name: str
    username: str
    email: str | None
    classroom_id: UUID | None
    classroom_name: str
    attended_count: int
    total_potential: int
    attendance_percentage: int
    missed_activities: list[MissedActivity] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class AlertSummary:
    threshold: int
    total_students: int
    students_needing_attention: int
    average_attendance: int


@dataclass(slots=True)
class AttendanceAlertsReport:
    summary: AlertSummary
    alerts: list[StudentAlert]


@dataclass(slots=True)
class TutorOverview:
    id: UUID
    name: str
    username: str
    total_events: int
    events_this_week: int
    events_this_month: int
    total_registered: int
    total_attended: int
    participation_rate: int
    recent_events: list[ActivityRecord] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class OverviewSummary:
    total_tutors: int
    total_events: int
    avg_participation: int
    total_attended: int
    total_registered: int


@dataclass(slots=True)
class EventsOverviewReport:
    summary: OverviewSummary
    tutors: list[TutorOverview]


# =============================================================================
# Pure helpers
# =============================================================================


def percentage(part: int, whole: int, *, empty: int = 0) -> int:
    """Rounded percentage, ``empty`` when the whole is zero.

    Halves round up to match spreadsheet-style rounding of the dashboards.
    """
    if whole <= 0:
        return empty
    return int(part * 100 / whole + 0.5)


def display_name(user: Any) -> str:
    """``"First Last"`` for a user record."""
    return f"{user.first_name or ''} {user.last_name or ''}".strip()


def _attended(participants: Iterable[Any]) -> int:
    return sum(1 for p in participants if p.status == ParticipantStatus.ATTENDED)


def build_tutor_activities(
    events: Iterable[Any],
    workshops: Iterable[Any],
    sessions: Iterable[Any],
    student_ids: set[UUID],
) -> list[ActivityRecord]:
    """Merge a tutor's events, workshops and sessions, newest first.

    Sessions count the tutor's whole roster as registered and only the
    roster's check-ins as attended.
    """
    records = [
        ActivityRecord(
            id=e.id,
            title=e.title,
            type=KIND_EVENT,
            date=e.start_date_time,
            registered=len(e.participants),
            attended=_attended(e.participants),
        )
        for e in events
    ]
    records.extend(
        ActivityRecord(
            id=w.id,
            title=w.title,
            type=KIND_WORKSHOP,
            date=w.event_date,
            registered=len(w.participants),
            attended=_attended(w.participants),
        )
        for w in workshops
    )
    records.extend(
        ActivityRecord(
            id=s.id,
            title=s.title,
            type=KIND_SESSION,
            date=s.session_date,
            registered=len(student_ids),
            attended=sum(1 for a in s.attendances if a.student_id in student_ids),
        )
        for s in sessions
    )
    records.sort(key=lambda r: r.date, reverse=True)
    return records


def summarize_tutor(tutor: Any, activities: list[ActivityRecord], student_count: int) -> TutorParticipation:
    total_registered = sum(a.registered for a in activities)
    total_attended = sum(a.attended for a in activities)
    return TutorParticipation(
        id=tutor.id,
        name=display_name(tutor),
        username=tutor.username,
        student_count=student_count,
        events_created=len(activities),
        total_attendance=total_attended,
        total_registered=total_registered,
        participation_rate=percentage(total_attended, total_registered),
        sessions=activities,
    )


def build_weekly_participation(
    tutor_stats: list[TutorParticipation],
    window_start: datetime,
    window_end: datetime,
) -> WeeklyParticipationReport:
    """Assemble the weekly participation report from per-tutor summaries.

    Tutors are ordered by activity count, most active first; equal counts
    keep their input order.
    """
    total_tutors = len(tutor_stats)
    summary = ParticipationSummary(
        total_events=sum(t.events_created for t in tutor_stats),
        total_attendance=sum(t.total_attendance for t in tutor_stats),
        total_registered=sum(t.total_registered for t in tutor_stats),
        avg_participation=(
            percentage(sum(t.participation_rate for t in tutor_stats), total_tutors * 100)
            if total_tutors
            else 0
        ),
        active_tutors=sum(1 for t in tutor_stats if t.events_created > 0),
        total_tutors=total_tutors,
    )
    return WeeklyParticipationReport(
        window_start=window_start,
        window_end=window_end,
        summary=summary,
        tutor_stats=sorted(tutor_stats, key=lambda t: t.events_created, reverse=True),
    )


def build_attendance_alerts(
    students: Sequence[Any],
    past_events: Sequence[Any],
    past_sessions: Sequence[Any],
    threshold: int,
) -> AttendanceAlertsReport:
    """Find students whose attendance percentage is below ``threshold``.

    Every past event and session counts towards the potential total. Missed
    sessions are only listed for sessions run by the student's own tutor.

    Each student record needs ``event_participations`` (event_id, status) and
    ``attendances`` (session_id) loaded.
    """
    potential = len(past_events) + len(past_sessions)
    alerts: list[StudentAlert] = []
    percentages: list[float] = []

    for student in students:
        participations = {p.event_id: p.status for p in student.event_participations}
        attended_sessions = {a.session_id for a in student.attendances}

        attended = sum(1 for s in participations.values() if s == ParticipantStatus.ATTENDED)
        attended += len(attended_sessions)
        percentages.append(attended / potential * 100 if potential else 100.0)
        rate = percentage(attended, potential, empty=100)

        if rate >= threshold:
            continue

        missed: list[MissedActivity] = []
        for event in past_events:
            status = participations.get(event.id)
            if status == ParticipantStatus.ATTENDED:
                continue
            if status is None:
                label = MISSED_NOT_REGISTERED
            elif status == ParticipantStatus.ABSENT:
                label = MISSED_ABSENT
            else:
                label = MISSED_NOT_ATTENDED
            missed.append(
                MissedActivity(
                    id=event.id,
                    type="EVENT",
                    title=event.title,
                    date=event.start_date_time,
                    status=label,
                )
            )
        for session in past_sessions:
            if session.created_by_id != student.tutor_id or session.id in attended_sessions:
                continue
            missed.append(
                MissedActivity(
                    id=session.id,
                    type="SESSION",
                    title=session.title,
                    date=session.session_date,
                    status=MISSED_ABSENT,
                )
            )
        missed.sort(key=lambda m: m.date, reverse=True)

        classroom = getattr(student, "classroom", None)
        alerts.append(
            StudentAlert(
                id=student.id,
                name=display_name(student),
                username=student.username,
                email=student.email,
                classroom_id=student.classroom_id,
                classroom_name=classroom.name if classroom is not None else NO_CLASSROOM,
                attended_count=attended,
                total_potential=potential,
                attendance_percentage=rate,
                missed_activities=missed,
            )
        )

    alerts.sort(key=lambda a: a.attendance_percentage)
    summary = AlertSummary(
        threshold=threshold,
        total_students=len(students),
        students_needing_attention=len(alerts),
        average_attendance=int(sum(percentages) / len(percentages) + 0.5) if percentages else 0,
    )
    return AttendanceAlertsReport(summary=summary, alerts=alerts)


def week_and_month_start(now: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Monday 00:00 of the current week and the 1st of the month, in ``tz``."""
    local = now.astimezone(tz)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = midnight - timedelta(days=midnight.weekday())
    month_start = midnight.replace(day=1)
    return week_start, month_start


def build_events_overview(
    tutors: Sequence[tuple[Any, list[ActivityRecord]]],
    now: datetime,
    tz: ZoneInfo,
    *,
    recent_limit: int = 15,
    global_events: int = 0,
) -> EventsOverviewReport:
    """Per-tutor activity counts for the current week and month.

    Args:
        tutors: (tutor, activities) pairs, activities newest first.
        now: Reference time.
        tz: Timezone for week/month boundaries (weeks start Monday).
        recent_limit: Number of recent activities kept per tutor.
        global_events: Admin-created activities not attached to a tutor,
            added to the summary total.
    """
    week_start, month_start = week_and_month_start(now, tz)
    rows: list[TutorOverview] = []

    for tutor, activities in tutors:
        registered = sum(a.registered for a in activities)
        attended = sum(a.attended for a in activities)
        rows.append(
            TutorOverview(
                id=tutor.id,
                name=display_name(tutor),
                username=tutor.username,
                total_events=len(activities),
                events_this_week=sum(1 for a in activities if a.date >= week_start),
                events_this_month=sum(1 for a in activities if a.date >= month_start),
                total_registered=registered,
                total_attended=attended,
                participation_rate=percentage(attended, registered),
                recent_events=activities[:recent_limit],
            )
        )

    rows.sort(key=lambda r: r.total_events, reverse=True)
    summary = OverviewSummary(
        total_tutors=len(rows),
        total_events=sum(r.total_events for r in rows) + global_events,
        avg_participation=(
            percentage(sum(r.participation_rate for r in rows), len(rows) * 100) if rows else 0
        ),
        total_attended=sum(r.total_attended for r in rows),
        total_registered=sum(r.total_registered for r in rows),
    )
    return EventsOverviewReport(summary=summary, tutors=rows)


# =============================================================================
# Service
# =============================================================================


class ReportService:
    """Loads activity records and builds the admin reports.

    Example:
        service = ReportService(session, settings.reports)
        report = await service.get_weekly_participation_report()
    """

    def __init__(
        self,
        session: AsyncSession,
        report_settings: ReportSettings,
        tz: ZoneInfo,
    ) -> None:
        self._session = session
        self._settings = report_settings
        self._tz = tz

    async def _load_tutors(self) -> list[Any]:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import User

        result = await self._session.execute(
            select(User)
            .where(User.role == UserRole.TUTOR)
            .options(selectinload(User.students))
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    async def _load_activities(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> tuple[list[Any], list[Any], list[Any]]:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import AttendanceSession, Event, Part2Event

        events_q = select(Event).options(selectinload(Event.participants))
        workshops_q = select(Part2Event).options(selectinload(Part2Event.participants))
        sessions_q = select(AttendanceSession).options(selectinload(AttendanceSession.attendances))

        if start is not None and end is not None:
            events_q = events_q.where(Event.start_date_time.between(start, end))
            workshops_q = workshops_q.where(Part2Event.event_date.between(start, end))
            sessions_q = sessions_q.where(AttendanceSession.session_date.between(start, end))

        events = (await self._session.execute(events_q)).scalars().all()
        workshops = (await self._session.execute(workshops_q)).scalars().all()
        sessions = (await self._session.execute(sessions_q)).scalars().all()
        return list(events), list(workshops), list(sessions)

    @staticmethod
    def _activities_for(
        tutor: Any, events: list[Any], workshops: list[Any], sessions: list[Any]
    ) -> list[ActivityRecord]:
        student_ids = {s.id for s in tutor.students if s.role == UserRole.STUDENT}
        tutor_events = [
            e for e in events if tutor.id in (e.created_by_id, e.created_for_tutor_id)
        ]
        tutor_workshops = [w for w in workshops if w.created_by_id == tutor.id]
        tutor_sessions = [
            s
            for s in sessions
            if s.created_by_id == tutor.id
            or any(a.student_id in student_ids for a in s.attendances)
        ]
        return build_tutor_activities(tutor_events, tutor_workshops, tutor_sessions, student_ids)

    async def get_weekly_participation_report(
        self, now: datetime | None = None
    ) -> WeeklyParticipationReport:
        """Participation per tutor within the active period."""
        from tutorhub.services.periods import get_active_period, period_window

        now = now or datetime.now(UTC)
        try:
            period = await get_active_period(self._session)
            start, end = period_window(period, now)
            tutors = await self._load_tutors()
            events, workshops, sessions = await self._load_activities(start, end)

            stats = []
            for tutor in tutors:
                activities = self._activities_for(tutor, events, workshops, sessions)
                student_count = sum(1 for s in tutor.students if s.role == UserRole.STUDENT)
                stats.append(summarize_tutor(tutor, activities, student_count))
        except TutorHubError:
            raise
        except Exception as e:
            logger.exception("Error building weekly participation report")
            raise ReportError("Haftalık katılım raporu yüklenirken bir hata oluştu") from e

        report = build_weekly_participation(stats, start, end)
        logger.info(
            "Weekly participation report built",
            extra={
                "tutors": report.summary.total_tutors,
                "events": report.summary.total_events,
            },
        )
        return report

    async def get_attendance_alerts(self, now: datetime | None = None) -> AttendanceAlertsReport:
        """Students whose attendance is below the configured threshold."""
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import AttendanceSession, Event, User

        now = now or datetime.now(UTC)
        try:
            past_events = (
                (await self._session.execute(select(Event).where(Event.start_date_time <= now)))
                .scalars()
                .all()
            )
            past_sessions = (
                (
                    await self._session.execute(
                        select(AttendanceSession).where(AttendanceSession.session_date <= now)
                    )
                )
                .scalars()
                .all()
            )
            students = (
                (
                    await self._session.execute(
                        select(User)
                        .where(User.role == UserRole.STUDENT)
                        .options(
                            selectinload(User.classroom),
                            selectinload(User.event_participations),
                            selectinload(User.attendances),
                        )
                    )
                )
                .scalars()
                .all()
            )
        except Exception as e:
            logger.exception("Error loading attendance alert data")
            raise ReportError("Devamsızlık uyarıları raporu yüklenirken bir hata oluştu") from e

        return build_attendance_alerts(
            list(students),
            list(past_events),
            list(past_sessions),
            self._settings.attendance_alert_threshold,
        )

    async def get_events_overview(self, now: datetime | None = None) -> EventsOverviewReport:
        """Activity counts per tutor for this week and this month."""
        from sqlalchemy import func, select

        from tutorhub.db.models import Event, User

        now = now or datetime.now(UTC)
        try:
            tutors = await self._load_tutors()
            events, workshops, sessions = await self._load_activities()
            pairs = [
                (tutor, self._activities_for(tutor, events, workshops, sessions))
                for tutor in tutors
            ]
            global_events = (
                await self._session.execute(
                    select(func.count(Event.id))
                    .join(User, User.id == Event.created_by_id)
                    .where(Event.created_for_tutor_id.is_(None), User.role == UserRole.ADMIN)
                )
            ).scalar_one()
        except Exception as e:
            logger.exception("Error building events overview report")
            raise ReportError("Etkinlik özeti raporu yüklenirken bir hata oluştu") from e

        return build_events_overview(
            pairs,
            now,
            self._tz,
            recent_limit=self._settings.recent_events_limit,
            global_events=global_events,
        )

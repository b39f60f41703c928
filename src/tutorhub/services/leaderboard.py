"""Student leaderboards.

Ranking is a stable sort by experience, descending: students with equal
experience keep the order they were fetched in (user creation order), so
ranks are strictly increasing along the list.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from tutorhub.db.models.base import TransactionType, UserRole
from tutorhub.services.levels import LevelInfo, calculate_level_info

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 25


@dataclass(frozen=True, slots=True)
class TutorRef:
    id: UUID
    username: str
    first_name: str | None
    last_name: str | None

    @property
    def name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    """One student on a leaderboard.

    ``rank`` is 0 until the entry passes through :func:`rank_entries`.
    """

    id: UUID
    username: str
    first_name: str | None
    last_name: str | None
    experience: int
    points: int = 0
    tutor: TutorRef | None = None
    rank: int = 0
    level_info: LevelInfo | None = None


@dataclass(frozen=True, slots=True)
class Podium:
    top3: list[LeaderboardEntry]
    top5: list[LeaderboardEntry]
    rest: list[LeaderboardEntry]


@dataclass(slots=True)
class Leaderboard:
    leaderboard: list[LeaderboardEntry]
    user_rank: LeaderboardEntry | None
    total: int


@dataclass(frozen=True, slots=True)
class WeeklyEarner:
    id: UUID
    username: str
    first_name: str | None
    last_name: str | None
    weekly_points: int
    weekly_experience: int
    total_experience: int
    tutor: TutorRef | None
    rank: int


@dataclass(slots=True)
class WeeklyTopEarners:
    week_start: datetime
    week_end: datetime
    weekly_leaderboard: list[WeeklyEarner] = field(default_factory=list)
    total: int = 0


# =============================================================================
# Pure ranking
# =============================================================================


def rank_entries(entries: Iterable[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """Sort by experience (desc) and assign 1-based ranks.

    ``sorted`` is stable, so equal experience keeps input order.
    """
    ordered = sorted(entries, key=lambda e: e.experience, reverse=True)
    return [
        replace(entry, rank=index + 1, level_info=calculate_level_info(entry.experience))
        for index, entry in enumerate(ordered)
    ]


def split_podium(ranked: Sequence[LeaderboardEntry]) -> Podium:
    """Split a ranked list into the podium (1-3), runners-up (4-5) and the rest."""
    return Podium(top3=list(ranked[:3]), top5=list(ranked[3:5]), rest=list(ranked[5:]))


def _matches(entry: LeaderboardEntry, needle: str) -> bool:
    fields = (entry.username, entry.first_name or "", entry.last_name or "")
    return any(needle in value.casefold() for value in fields)


def filter_and_rerank(
    entries: Iterable[LeaderboardEntry],
    search: str | None = None,
    tutor_id: UUID | None = None,
) -> list[LeaderboardEntry]:
    """Filter by name and tutor, then rank the remaining entries from 1."""
    needle = (search or "").strip().casefold()
    selected = [
        e
        for e in entries
        if (not needle or _matches(e, needle))
        and (tutor_id is None or (e.tutor is not None and e.tutor.id == tutor_id))
    ]
    return rank_entries(selected)


def current_week_bounds(now: datetime, tz: ZoneInfo | None = None) -> tuple[datetime, datetime]:
    """Monday 00:00:00 to Sunday 23:59:59.999999 of the week containing ``now``."""
    local = now.astimezone(tz) if tz is not None else now
    start = (local - timedelta(days=local.weekday())).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    end = start + timedelta(days=7) - timedelta(microseconds=1)
    return start, end


def _tutor_ref(user: Any) -> TutorRef | None:
    tutor = getattr(user, "tutor", None)
    if tutor is None:
        return None
    return TutorRef(
        id=tutor.id,
        username=tutor.username,
        first_name=tutor.first_name,
        last_name=tutor.last_name,
    )


def entry_from_user(user: Any, experience: int | None = None) -> LeaderboardEntry:
    return LeaderboardEntry(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        experience=(user.experience or 0) if experience is None else experience,
        points=user.points or 0,
        tutor=_tutor_ref(user),
    )


# =============================================================================
# Service
# =============================================================================


class LeaderboardService:
    """Builds leaderboards from users and their transactions."""

    def __init__(self, session: AsyncSession, tz: ZoneInfo | None = None) -> None:
        self._session = session
        self._tz = tz

    async def _load_students(self, tutor_id: UUID | None = None) -> list[Any]:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import User

        query = (
            select(User)
            .where(User.role == UserRole.STUDENT)
            .options(selectinload(User.tutor))
            .order_by(User.created_at)
        )
        if tutor_id is not None:
            query = query.where(User.tutor_id == tutor_id)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def get_all_entries(self) -> list[LeaderboardEntry]:
        """Every student, ranked by lifetime experience."""
        students = await self._load_students()
        return rank_entries(entry_from_user(s) for s in students)

    async def get_leaderboard(
        self,
        user_id: UUID,
        role: UserRole,
        *,
        size: int = DEFAULT_LEADERBOARD_SIZE,
    ) -> Leaderboard:
        """Top ``size`` students plus the caller's own entry when they are a student."""
        ranked = await self.get_all_entries()
        user_rank = None
        if role == UserRole.STUDENT:
            user_rank = next((e for e in ranked if e.id == user_id), None)
        return Leaderboard(leaderboard=ranked[:size], user_rank=user_rank, total=len(ranked))

    async def get_admin_leaderboard(
        self, search: str | None = None, tutor_id: UUID | None = None
    ) -> list[LeaderboardEntry]:
        students = await self._load_students()
        return filter_and_rerank((entry_from_user(s) for s in students), search, tutor_id)

    async def get_tutor_leaderboard(self, tutor_id: UUID) -> list[LeaderboardEntry]:
        """The tutor's students ranked by experience earned in the active period.

        Raises:
            NoActivePeriodError: If no period is active.
        """
        from sqlalchemy import func, select

        from tutorhub.db.models import ExperienceTransaction, PointsTransaction
        from tutorhub.services.periods import require_active_period

        period = await require_active_period(self._session)
        students = await self._load_students(tutor_id)
        if not students:
            return []
        ids = [s.id for s in students]

        xp_rows = await self._session.execute(
            select(ExperienceTransaction.student_id, func.sum(ExperienceTransaction.amount))
            .where(
                ExperienceTransaction.student_id.in_(ids),
                ExperienceTransaction.period_id == period.id,
                ExperienceTransaction.is_rolled_back.is_(False),
            )
            .group_by(ExperienceTransaction.student_id)
        )
        points_rows = await self._session.execute(
            select(
                PointsTransaction.student_id,
                PointsTransaction.type,
                func.sum(PointsTransaction.points),
            )
            .where(
                PointsTransaction.student_id.in_(ids),
                PointsTransaction.period_id == period.id,
                PointsTransaction.rolled_back.is_(False),
            )
            .group_by(PointsTransaction.student_id, PointsTransaction.type)
        )

        experience: dict[UUID, int] = defaultdict(int)
        awarded: dict[UUID, int] = defaultdict(int)
        redeemed: dict[UUID, int] = defaultdict(int)
        for student_id, total in xp_rows.all():
            experience[student_id] += int(total or 0)
        for student_id, tx_type, total in points_rows.all():
            if tx_type == TransactionType.AWARD:
                awarded[student_id] += int(total or 0)
                experience[student_id] += int(total or 0)
            else:
                redeemed[student_id] += int(total or 0)

        entries = [
            replace(
                entry_from_user(s, experience[s.id]),
                points=max(0, awarded[s.id] - redeemed[s.id]),
            )
            for s in students
        ]
        logger.debug(
            "Tutor leaderboard computed",
            extra={"tutor_id": str(tutor_id), "period_id": str(period.id), "students": len(ids)},
        )
        return rank_entries(entries)

    async def get_weekly_top_earners(
        self, limit: int = 10, now: datetime | None = None
    ) -> WeeklyTopEarners:
        """Students ranked by experience earned in the current week.

        Awarded points count towards both weekly points and weekly
        experience. Students who earned nothing are left out.
        """
        from sqlalchemy import func, select

        from tutorhub.db.models import ExperienceTransaction, PointsTransaction

        start, end = current_week_bounds(now or datetime.now(UTC), self._tz)
        students = await self._load_students()

        points_rows = await self._session.execute(
            select(PointsTransaction.student_id, func.sum(PointsTransaction.points))
            .where(
                PointsTransaction.type == TransactionType.AWARD,
                PointsTransaction.rolled_back.is_(False),
                PointsTransaction.created_at.between(start, end),
            )
            .group_by(PointsTransaction.student_id)
        )
        xp_rows = await self._session.execute(
            select(ExperienceTransaction.student_id, func.sum(ExperienceTransaction.amount))
            .where(
                ExperienceTransaction.is_rolled_back.is_(False),
                ExperienceTransaction.created_at.between(start, end),
            )
            .group_by(ExperienceTransaction.student_id)
        )
        weekly_points = {sid: int(total or 0) for sid, total in points_rows.all()}
        weekly_xp = {sid: int(total or 0) for sid, total in xp_rows.all()}

        earners = []
        for student in students:
            points = weekly_points.get(student.id, 0)
            xp = points + weekly_xp.get(student.id, 0)
            if points > 0 or xp > 0:
                earners.append((student, points, xp))
        earners.sort(key=lambda item: item[2], reverse=True)

        board = [
            WeeklyEarner(
                id=student.id,
                username=student.username,
                first_name=student.first_name,
                last_name=student.last_name,
                weekly_points=points,
                weekly_experience=xp,
                total_experience=student.experience or 0,
                tutor=_tutor_ref(student),
                rank=index + 1,
            )
            for index, (student, points, xp) in enumerate(earners[:limit])
        ]
        return WeeklyTopEarners(
            week_start=start, week_end=end, weekly_leaderboard=board, total=len(earners)
        )

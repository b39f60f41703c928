"""Tests for leaderboard ranking.

Tests cover:
- Stable ranking by experience
- Podium split
- Admin search and tutor filter with re-ranking
- Week boundaries
- Weekly top earners aggregation against a mocked session
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from tests.factories import create_user
from tutorhub.db.models.base import TransactionType, UserRole
from tutorhub.services.leaderboard import (
    LeaderboardService,
    current_week_bounds,
    entry_from_user,
    filter_and_rerank,
    rank_entries,
    split_podium,
)
from tutorhub.services.periods import NoActivePeriodError


def _entries(*experience: int):
    return [entry_from_user(create_user(username=f"u{i}", experience=xp)) for i, xp in enumerate(experience)]


class TestRankEntries:
    """Tests for rank_entries."""

    def test_sorted_by_experience_descending(self) -> None:
        ranked = rank_entries(_entries(10, 50, 30))
        assert [e.experience for e in ranked] == [50, 30, 10]
        assert [e.rank for e in ranked] == [1, 2, 3]

    def test_ties_keep_input_order(self) -> None:
        ranked = rank_entries(_entries(20, 20, 20))
        assert [e.username for e in ranked] == ["u0", "u1", "u2"]
        assert [e.rank for e in ranked] == [1, 2, 3]

    def test_level_info_attached(self) -> None:
        ranked = rank_entries(_entries(90))
        assert ranked[0].level_info is not None
        assert ranked[0].level_info.level == 2

    def test_empty(self) -> None:
        assert rank_entries([]) == []


class TestSplitPodium:
    """Tests for split_podium."""

    def test_split_seven(self) -> None:
        podium = split_podium(rank_entries(_entries(7, 6, 5, 4, 3, 2, 1)))
        assert [e.rank for e in podium.top3] == [1, 2, 3]
        assert [e.rank for e in podium.top5] == [4, 5]
        assert [e.rank for e in podium.rest] == [6, 7]

    def test_fewer_than_three(self) -> None:
        podium = split_podium(rank_entries(_entries(5, 1)))
        assert len(podium.top3) == 2
        assert podium.top5 == []
        assert podium.rest == []


class TestFilterAndRerank:
    """Tests for filter_and_rerank."""

    def test_search_is_case_insensitive_on_names(self) -> None:
        users = [
            create_user(username="zeynep", first_name="Zeynep", last_name="Kaya", experience=5),
            create_user(username="mehmet", first_name="Mehmet", last_name="Öz", experience=9),
        ]
        result = filter_and_rerank((entry_from_user(u) for u in users), search="KAYA")
        assert [e.username for e in result] == ["zeynep"]
        assert result[0].rank == 1

    def test_tutor_filter_reranks_from_one(self) -> None:
        tutor = create_user(username="hoca", role=UserRole.TUTOR)
        users = [
            create_user(username="a", experience=100),
            create_user(username="b", experience=50, tutor=tutor),
            create_user(username="c", experience=10, tutor=tutor),
        ]
        result = filter_and_rerank((entry_from_user(u) for u in users), tutor_id=tutor.id)
        assert [(e.username, e.rank) for e in result] == [("b", 1), ("c", 2)]

    def test_blank_search_keeps_everyone(self) -> None:
        assert len(filter_and_rerank(_entries(1, 2, 3), search="   ")) == 3


class TestEntryFromUser:
    def test_explicit_experience_overrides_lifetime(self) -> None:
        user = create_user(experience=500)
        assert entry_from_user(user, 0).experience == 0
        assert entry_from_user(user).experience == 500

    def test_tutor_reference(self) -> None:
        tutor = create_user(username="hoca", first_name="Elif", last_name="Ak", role=UserRole.TUTOR)
        entry = entry_from_user(create_user(tutor=tutor))
        assert entry.tutor is not None
        assert entry.tutor.name == "Elif Ak"


class TestCurrentWeekBounds:
    """Tests for current_week_bounds."""

    def test_wednesday(self) -> None:
        start, end = current_week_bounds(datetime(2024, 3, 6, 15, 30, tzinfo=UTC))
        assert start == datetime(2024, 3, 4, tzinfo=UTC)
        assert end == datetime(2024, 3, 10, 23, 59, 59, 999999, tzinfo=UTC)

    def test_sunday_belongs_to_previous_monday(self) -> None:
        start, _ = current_week_bounds(datetime(2024, 3, 10, 12, 0, tzinfo=UTC))
        assert start.day == 4

    def test_timezone_shifts_the_day(self) -> None:
        # Sunday 22:00 UTC is already Monday in Istanbul
        start, _ = current_week_bounds(
            datetime(2024, 3, 10, 22, 0, tzinfo=UTC), ZoneInfo("Europe/Istanbul")
        )
        assert (start.year, start.month, start.day) == (2024, 3, 11)


def _rows(*rows):
    result = MagicMock()
    result.all.return_value = list(rows)
    return result


def _students(*users):
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(users)
    return result


class TestWeeklyTopEarners:
    """Tests for LeaderboardService.get_weekly_top_earners."""

    async def test_points_count_towards_experience(self) -> None:
        a = create_user(username="a", experience=1000)
        b = create_user(username="b", experience=10)
        idle = create_user(username="idle")
        session = AsyncMock()
        session.execute.side_effect = [
            _students(a, b, idle),
            _rows((a.id, 10)),
            _rows((a.id, 5), (b.id, 40)),
        ]

        result = await LeaderboardService(session).get_weekly_top_earners(
            now=datetime(2024, 3, 6, tzinfo=UTC)
        )

        assert [(e.username, e.weekly_experience) for e in result.weekly_leaderboard] == [
            ("b", 40),
            ("a", 15),
        ]
        assert result.weekly_leaderboard[1].weekly_points == 10
        assert result.weekly_leaderboard[1].total_experience == 1000
        assert result.total == 2

    async def test_limit(self) -> None:
        users = [create_user(username=f"u{i}") for i in range(5)]
        session = AsyncMock()
        session.execute.side_effect = [
            _students(*users),
            _rows(),
            _rows(*((u.id, 10 + i) for i, u in enumerate(users))),
        ]
        result = await LeaderboardService(session).get_weekly_top_earners(limit=2)
        assert [e.rank for e in result.weekly_leaderboard] == [1, 2]
        assert result.weekly_leaderboard[0].username == "u4"
        # Everyone who earned this week, not just the returned slice
        assert result.total == 5


class TestTutorLeaderboard:
    """Tests for LeaderboardService.get_tutor_leaderboard."""

    async def test_period_aggregation(self) -> None:
        a = create_user(username="a", experience=900)
        b = create_user(username="b", experience=5)
        period = MagicMock()
        period_result = MagicMock()
        period_result.scalar_one_or_none.return_value = period
        session = AsyncMock()
        session.execute.side_effect = [
            period_result,
            _students(a, b),
            _rows((a.id, 10), (b.id, 3)),
            _rows(
                (a.id, TransactionType.AWARD, 5),
                (b.id, TransactionType.AWARD, 2),
                (b.id, TransactionType.REDEEM, 7),
            ),
        ]

        entries = await LeaderboardService(session).get_tutor_leaderboard(uuid4())

        # Experience is period XP plus awarded points; the balance never goes negative
        assert [(e.username, e.experience, e.points) for e in entries] == [
            ("a", 15, 5),
            ("b", 5, 0),
        ]
        assert [e.rank for e in entries] == [1, 2]

    async def test_no_active_period(self) -> None:
        missing = MagicMock()
        missing.scalar_one_or_none.return_value = None
        session = AsyncMock()
        session.execute.return_value = missing

        with pytest.raises(NoActivePeriodError):
            await LeaderboardService(session).get_tutor_leaderboard(uuid4())

    async def test_tutor_without_students(self) -> None:
        period_result = MagicMock()
        period_result.scalar_one_or_none.return_value = MagicMock()
        session = AsyncMock()
        session.execute.side_effect = [period_result, _students()]

        assert await LeaderboardService(session).get_tutor_leaderboard(uuid4()) == []
        assert session.execute.await_count == 2


class TestGetLeaderboard:
    async def test_student_sees_own_rank(self) -> None:
        users = [create_user(username=f"u{i}", experience=i) for i in range(30)]
        session = AsyncMock()
        session.execute.return_value = _students(*users)

        board = await LeaderboardService(session).get_leaderboard(
            users[0].id, UserRole.STUDENT, size=25
        )
        assert len(board.leaderboard) == 25
        assert board.total == 30
        assert board.user_rank is not None
        assert board.user_rank.rank == 30

    async def test_admin_has_no_rank(self) -> None:
        session = AsyncMock()
        session.execute.return_value = _students(create_user())
        board = await LeaderboardService(session).get_leaderboard(uuid4(), UserRole.ADMIN)
        assert board.user_rank is None

"""Tests for meeting decision tracking.

Tests cover:
- Status parsing and list filters
- Field validation with Turkish messages
- Kanban transitions and the same-column no-op
- Statistics
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from tests.factories import create_decision, create_user
from tutorhub.core.errors import InvalidInput
from tutorhub.db.models.base import DecisionStatus
from tutorhub.services.decisions import (
    DecisionNotFoundError,
    DecisionService,
    InvalidDecisionStatusError,
    decision_statistics,
    parse_decision_status,
    parse_status_filter,
    validate_decision_fields,
)


def create_mock_session(decision=None) -> AsyncMock:
    """Session whose first query returns ``decision``."""
    session = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = decision
    session.execute.return_value = result
    return session


class TestParsing:
    def test_parse_status(self) -> None:
        assert parse_decision_status("IN_PROGRESS") is DecisionStatus.IN_PROGRESS
        assert parse_decision_status(DecisionStatus.DONE) is DecisionStatus.DONE

    def test_parse_invalid_status(self) -> None:
        with pytest.raises(InvalidDecisionStatusError) as exc_info:
            parse_decision_status("ARCHIVED")
        assert exc_info.value.message == "Durum TODO, IN_PROGRESS veya DONE olmalıdır"
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("completed", (DecisionStatus.DONE,)),
            ("todo", (DecisionStatus.TODO,)),
            ("in-progress", (DecisionStatus.IN_PROGRESS,)),
            ("pending", (DecisionStatus.TODO, DecisionStatus.IN_PROGRESS)),
        ],
    )
    def test_status_filters(self, name: str, expected: tuple) -> None:
        assert parse_status_filter(name) == expected

    def test_unknown_filter_means_all(self) -> None:
        assert set(parse_status_filter("whatever")) == set(DecisionStatus)
        assert set(parse_status_filter(None)) == set(DecisionStatus)


class TestValidateDecisionFields:
    """Tests for validate_decision_fields."""

    def _valid(self, **overrides):
        fields = {
            "title": "Kermes",
            "description": None,
            "target_date": datetime.now(UTC),
            "responsible_user_ids": [uuid4()],
        }
        fields.update(overrides)
        return fields

    def test_valid(self) -> None:
        validate_decision_fields(**self._valid())

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"title": "  "}, "Başlık gereklidir"),
            ({"title": "x" * 201}, "Başlık çok uzun"),
            ({"description": "x" * 2001}, "Açıklama çok uzun"),
            ({"target_date": None}, "Hedef tarih gereklidir"),
            ({"responsible_user_ids": []}, "En az bir sorumlu kişi seçilmelidir"),
        ],
    )
    def test_invalid(self, overrides: dict, message: str) -> None:
        with pytest.raises(InvalidInput) as exc_info:
            validate_decision_fields(**self._valid(**overrides))
        assert exc_info.value.message == message

    def test_partial_skips_missing_fields(self) -> None:
        validate_decision_fields(
            title=None, description=None, target_date=None, responsible_user_ids=None, partial=True
        )

    def test_partial_still_rejects_empty_responsibles(self) -> None:
        with pytest.raises(InvalidInput):
            validate_decision_fields(
                title=None, description=None, target_date=None, responsible_user_ids=[], partial=True
            )


class TestTransitions:
    """Tests for the kanban move rules."""

    @pytest.mark.parametrize("from_status", list(DecisionStatus))
    @pytest.mark.parametrize("to_status", list(DecisionStatus))
    def test_every_distinct_move_allowed(
        self, from_status: DecisionStatus, to_status: DecisionStatus
    ) -> None:
        service = DecisionService(AsyncMock())
        assert service.is_valid_transition(from_status, to_status) is (from_status != to_status)

    async def test_move_changes_status(self) -> None:
        decision = create_decision(status=DecisionStatus.TODO, responsible_users=[create_user()])
        session = create_mock_session(decision)

        change = await DecisionService(session).update_status(decision.id, "DONE")

        assert change.changed is True
        assert change.previous_status is DecisionStatus.TODO
        assert decision.status is DecisionStatus.DONE
        assert change.decision.status is DecisionStatus.DONE
        assert change.decision.meeting is not None
        session.flush.assert_awaited_once()

    async def test_same_column_is_noop(self) -> None:
        decision = create_decision(status=DecisionStatus.IN_PROGRESS)
        session = create_mock_session(decision)

        change = await DecisionService(session).update_status(decision.id, "IN_PROGRESS")

        assert change.changed is False
        session.flush.assert_not_awaited()

    async def test_invalid_status_checked_before_lookup(self) -> None:
        session = create_mock_session(None)
        with pytest.raises(InvalidDecisionStatusError):
            await DecisionService(session).update_status(uuid4(), "LATER")
        session.execute.assert_not_awaited()

    async def test_missing_decision(self) -> None:
        with pytest.raises(DecisionNotFoundError):
            await DecisionService(create_mock_session(None)).update_status(uuid4(), "DONE")


class TestStatistics:
    def test_counts(self) -> None:
        stats = decision_statistics(
            [
                DecisionStatus.TODO,
                DecisionStatus.TODO,
                DecisionStatus.IN_PROGRESS,
                DecisionStatus.DONE,
            ]
        )
        assert (stats.total, stats.completed, stats.todo, stats.in_progress, stats.pending) == (
            4,
            1,
            2,
            1,
            3,
        )

    def test_empty(self) -> None:
        assert decision_statistics([]).total == 0

"""Tests for the points and experience ledger.

Tests cover:
- Awarding and taking back points, balance and experience updates
- Tutor roster restriction
- Experience grants
- Rollbacks: reverting totals, double rollback, unknown kinds
"""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from tests.factories import create_user, result_returning
from tutorhub.core.errors import InvalidInput
from tutorhub.db.models.base import TransactionType, UserRole
from tutorhub.services.gamification import (
    DEFAULT_AWARD_REASON,
    DEFAULT_REDEEM_REASON,
    AlreadyRolledBackError,
    GamificationService,
    InsufficientPointsError,
    StudentNotAssignedError,
    StudentNotFoundError,
    TransactionKind,
    TransactionNotFoundError,
    parse_transaction_kind,
)


@pytest.fixture
def tutor():
    return create_user(username="hoca", role=UserRole.TUTOR)


@pytest.fixture
def student(tutor):
    return create_user(username="ayse", tutor=tutor, points=20, experience=100)


def _lookups(session, student, period=None) -> None:
    """Student lookup, then active period lookup."""
    session.execute.side_effect = [result_returning(student), result_returning(period)]


class TestAwardPoints:
    """Tests for GamificationService.award_points."""

    async def test_award(self, mock_db_session, tutor, student) -> None:
        period = SimpleNamespace(id=uuid4())
        _lookups(mock_db_session, student, period)

        result = await GamificationService(mock_db_session).award_points(
            student.id, 15, actor_id=tutor.id, actor_role=UserRole.TUTOR
        )

        transaction = mock_db_session.add.call_args.args[0]
        assert transaction.type is TransactionType.AWARD
        assert transaction.points == 15
        assert transaction.period_id == period.id
        assert transaction.reason == DEFAULT_AWARD_REASON
        assert (result.new_balance, result.experience) == (35, 115)
        mock_db_session.flush.assert_awaited_once()

    async def test_take_back(self, mock_db_session, tutor, student) -> None:
        _lookups(mock_db_session, student)

        result = await GamificationService(mock_db_session).award_points(
            student.id, -5, actor_id=tutor.id, actor_role=UserRole.TUTOR, reason="  "
        )

        transaction = mock_db_session.add.call_args.args[0]
        assert transaction.type is TransactionType.REDEEM
        assert transaction.points == 5
        assert transaction.period_id is None
        assert transaction.reason == DEFAULT_REDEEM_REASON
        # Experience only grows on awards
        assert (result.new_balance, result.experience) == (15, 100)

    async def test_cannot_take_more_than_balance(self, mock_db_session, tutor, student) -> None:
        _lookups(mock_db_session, student)

        with pytest.raises(InsufficientPointsError):
            await GamificationService(mock_db_session).award_points(
                student.id, -21, actor_id=tutor.id, actor_role=UserRole.TUTOR
            )

        assert student.points == 20
        mock_db_session.add.assert_not_called()

    async def test_zero_rejected(self, mock_db_session, tutor, student) -> None:
        with pytest.raises(InvalidInput):
            await GamificationService(mock_db_session).award_points(
                student.id, 0, actor_id=tutor.id, actor_role=UserRole.TUTOR
            )
        mock_db_session.execute.assert_not_awaited()

    async def test_other_tutors_student(self, mock_db_session, student) -> None:
        _lookups(mock_db_session, student)

        with pytest.raises(StudentNotAssignedError) as exc_info:
            await GamificationService(mock_db_session).award_points(
                student.id, 5, actor_id=uuid4(), actor_role=UserRole.TUTOR
            )
        assert exc_info.value.status_code == 403

    async def test_admin_awards_any_student(self, mock_db_session, student) -> None:
        _lookups(mock_db_session, student)

        result = await GamificationService(mock_db_session).award_points(
            student.id, 5, actor_id=uuid4(), actor_role=UserRole.ADMIN, reason="Proje"
        )
        assert result.reason == "Proje"

    async def test_unknown_student(self, mock_db_session) -> None:
        mock_db_session.execute.return_value = result_returning(None)

        with pytest.raises(StudentNotFoundError):
            await GamificationService(mock_db_session).award_points(
                uuid4(), 5, actor_id=uuid4(), actor_role=UserRole.ADMIN
            )


class TestAwardExperience:
    async def test_grant(self, mock_db_session, tutor, student) -> None:
        _lookups(mock_db_session, student)

        result = await GamificationService(mock_db_session).award_experience(
            student.id, 30, actor_id=tutor.id, actor_role=UserRole.TUTOR
        )

        transaction = mock_db_session.add.call_args.args[0]
        assert transaction.amount == 30
        assert transaction.is_rolled_back is False
        assert result.experience == 130
        assert student.points == 20

    @pytest.mark.parametrize("amount", [0, -10])
    async def test_positive_only(self, mock_db_session, tutor, student, amount: int) -> None:
        with pytest.raises(InvalidInput):
            await GamificationService(mock_db_session).award_experience(
                student.id, amount, actor_id=tutor.id, actor_role=UserRole.TUTOR
            )


class TestRollback:
    """Tests for GamificationService.rollback_transaction."""

    @staticmethod
    def _points(student, type: TransactionType, points: int, rolled_back: bool = False):
        return SimpleNamespace(
            id=uuid4(), student_id=student.id, type=type, points=points, rolled_back=rolled_back
        )

    async def test_award_reverted(self, mock_db_session, student) -> None:
        transaction = self._points(student, TransactionType.AWARD, 15)
        mock_db_session.execute.side_effect = [
            result_returning(transaction),
            result_returning(student),
        ]

        result = await GamificationService(mock_db_session).rollback_transaction(
            transaction.id, "POINTS", admin_id=uuid4(), reason="Yanlış öğrenci"
        )

        assert transaction.rolled_back is True
        assert (result.points, result.experience) == (5, 85)
        assert result.kind is TransactionKind.POINTS
        mock_db_session.flush.assert_awaited_once()

    async def test_redeem_reverted(self, mock_db_session, student) -> None:
        transaction = self._points(student, TransactionType.REDEEM, 8)
        mock_db_session.execute.side_effect = [
            result_returning(transaction),
            result_returning(student),
        ]

        result = await GamificationService(mock_db_session).rollback_transaction(
            transaction.id, TransactionKind.POINTS, admin_id=uuid4(), reason="İade"
        )

        assert (result.points, result.experience) == (28, 100)

    async def test_totals_never_negative(self, mock_db_session, student) -> None:
        # The student already spent most of the awarded points
        transaction = self._points(student, TransactionType.AWARD, 50)
        mock_db_session.execute.side_effect = [
            result_returning(transaction),
            result_returning(student),
        ]

        result = await GamificationService(mock_db_session).rollback_transaction(
            transaction.id, "POINTS", admin_id=uuid4(), reason="Hata"
        )

        assert (result.points, result.experience) == (0, 50)

    async def test_experience_reverted(self, mock_db_session, student) -> None:
        transaction = SimpleNamespace(
            id=uuid4(), student_id=student.id, amount=40, is_rolled_back=False
        )
        mock_db_session.execute.side_effect = [
            result_returning(transaction),
            result_returning(student),
        ]

        result = await GamificationService(mock_db_session).rollback_transaction(
            transaction.id, "EXPERIENCE", admin_id=uuid4(), reason="Hata"
        )

        assert transaction.is_rolled_back is True
        assert (result.points, result.experience) == (20, 60)

    async def test_second_rollback(self, mock_db_session, student) -> None:
        transaction = self._points(student, TransactionType.AWARD, 15, rolled_back=True)
        mock_db_session.execute.side_effect = [
            result_returning(transaction),
            result_returning(student),
        ]

        with pytest.raises(AlreadyRolledBackError) as exc_info:
            await GamificationService(mock_db_session).rollback_transaction(
                transaction.id, "POINTS", admin_id=uuid4(), reason="Hata"
            )

        assert exc_info.value.status_code == 409
        assert student.points == 20
        mock_db_session.flush.assert_not_awaited()

    async def test_unknown_transaction(self, mock_db_session) -> None:
        mock_db_session.execute.return_value = result_returning(None)

        with pytest.raises(TransactionNotFoundError):
            await GamificationService(mock_db_session).rollback_transaction(
                uuid4(), "EXPERIENCE", admin_id=uuid4(), reason="Hata"
            )

    async def test_reason_required(self, mock_db_session) -> None:
        with pytest.raises(InvalidInput):
            await GamificationService(mock_db_session).rollback_transaction(
                uuid4(), "POINTS", admin_id=uuid4(), reason=" "
            )
        mock_db_session.execute.assert_not_awaited()


class TestParseTransactionKind:
    def test_known(self) -> None:
        assert parse_transaction_kind("EXPERIENCE") is TransactionKind.EXPERIENCE

    def test_unknown(self) -> None:
        with pytest.raises(InvalidInput) as exc_info:
            parse_transaction_kind("BADGES")
        assert "POINTS veya EXPERIENCE" in exc_info.value.message
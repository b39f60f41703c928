"""Points and experience ledger.

Staff award (or take back) points and grant experience to students. Every
change is a transaction row tagged with the active period, and the running
totals on the student record move with it. Admins can roll a transaction
back once; the row stays, flagged, so period aggregates skip it.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tutorhub.core.errors import Conflict, Forbidden, InvalidInput, NotFound
from tutorhub.db.models.base import TransactionType, UserRole

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

DEFAULT_AWARD_REASON = "Puan eklendi"
DEFAULT_REDEEM_REASON = "Puan azaltıldı"


class TransactionKind(enum.Enum):
    POINTS = "POINTS"
    EXPERIENCE = "EXPERIENCE"


class StudentNotFoundError(NotFound):
    code = "student_not_found"
    default_message = "Öğrenci bulunamadı"


class StudentNotAssignedError(Forbidden):
    code = "student_not_assigned"
    default_message = "Bu öğrenci size atanmamış"


class InsufficientPointsError(InvalidInput):
    code = "insufficient_points"
    default_message = "Öğrencinin puanından fazlası düşülemez"


class TransactionNotFoundError(NotFound):
    code = "transaction_not_found"
    default_message = "İşlem bulunamadı"


class AlreadyRolledBackError(Conflict):
    code = "already_rolled_back"
    default_message = "Bu işlem zaten geri alınmış"


@dataclass(frozen=True, slots=True)
class PointsResult:
    transaction_id: UUID
    student_id: UUID
    type: TransactionType
    points: int
    reason: str
    new_balance: int
    experience: int


@dataclass(frozen=True, slots=True)
class ExperienceResult:
    transaction_id: UUID
    student_id: UUID
    amount: int
    experience: int


@dataclass(frozen=True, slots=True)
class RollbackResult:
    transaction_id: UUID
    kind: TransactionKind
    student_id: UUID
    points: int
    experience: int


def parse_transaction_kind(value: str | TransactionKind) -> TransactionKind:
    try:
        return TransactionKind(value)
    except ValueError:
        raise InvalidInput("İşlem türü POINTS veya EXPERIENCE olmalıdır") from None


class GamificationService:
    """Awards, redemptions, experience grants and rollbacks.

    Example:
        service = GamificationService(session)
        result = await service.award_points(
            student_id, 10, actor_id=user.principal_id, actor_role=user.role
        )
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_student(self, student_id: UUID) -> Any:
        from sqlalchemy import select

        from tutorhub.db.models import User

        result = await self._session.execute(
            select(User).where(User.id == student_id, User.role == UserRole.STUDENT)
        )
        student = result.scalar_one_or_none()
        if student is None:
            raise StudentNotFoundError()
        return student

    async def _get_assigned_student(
        self, student_id: UUID, actor_id: UUID, actor_role: UserRole
    ) -> Any:
        student = await self._get_student(student_id)
        if actor_role == UserRole.TUTOR and student.tutor_id != actor_id:
            logger.warning(
                "Tutor acted on a student outside their roster",
                extra={"student_id": str(student_id), "tutor_id": str(actor_id)},
            )
            raise StudentNotAssignedError()
        return student

    async def _active_period_id(self) -> UUID | None:
        from tutorhub.services.periods import get_active_period

        period = await get_active_period(self._session)
        return period.id if period is not None else None

    async def award_points(
        self,
        student_id: UUID,
        points: int,
        *,
        actor_id: UUID,
        actor_role: UserRole,
        reason: str | None = None,
    ) -> PointsResult:
        """Award ``points`` to a student, or take them back when negative.

        Awards also add the same amount to the student's experience.

        Raises:
            InvalidInput: ``points`` is zero.
            StudentNotFoundError: No student with that id.
            StudentNotAssignedError: A tutor acting outside their roster.
            InsufficientPointsError: Taking more than the student has.
        """
        from tutorhub.db.models import PointsTransaction

        if points == 0:
            raise InvalidInput("Eklenmek istenen puan 0'dan farklı olmalıdır")

        student = await self._get_assigned_student(student_id, actor_id, actor_role)
        if points < 0 and -points > student.points:
            raise InsufficientPointsError()

        is_award = points > 0
        reason = (reason or "").strip() or (
            DEFAULT_AWARD_REASON if is_award else DEFAULT_REDEEM_REASON
        )
        transaction = PointsTransaction(
            student_id=student_id,
            tutor_id=actor_id,
            period_id=await self._active_period_id(),
            points=abs(points),
            type=TransactionType.AWARD if is_award else TransactionType.REDEEM,
            reason=reason,
            rolled_back=False,
        )
        self._session.add(transaction)

        student.points += points
        if is_award:
            student.experience += points
        await self._session.flush()

        logger.info(
            "Points transaction recorded",
            extra={
                "student_id": str(student_id),
                "actor_id": str(actor_id),
                "type": transaction.type.value,
                "points": transaction.points,
            },
        )
        return PointsResult(
            transaction_id=transaction.id,
            student_id=student_id,
            type=transaction.type,
            points=transaction.points,
            reason=transaction.reason,
            new_balance=student.points,
            experience=student.experience,
        )

    async def award_experience(
        self, student_id: UUID, amount: int, *, actor_id: UUID, actor_role: UserRole
    ) -> ExperienceResult:
        """Grant experience to a student."""
        from tutorhub.db.models import ExperienceTransaction

        if amount <= 0:
            raise InvalidInput("Deneyim miktarı 0'dan büyük olmalıdır")

        student = await self._get_assigned_student(student_id, actor_id, actor_role)
        transaction = ExperienceTransaction(
            student_id=student_id,
            tutor_id=actor_id,
            period_id=await self._active_period_id(),
            amount=amount,
            is_rolled_back=False,
        )
        self._session.add(transaction)
        student.experience += amount
        await self._session.flush()

        logger.info(
            "Experience granted",
            extra={"student_id": str(student_id), "actor_id": str(actor_id), "amount": amount},
        )
        return ExperienceResult(
            transaction_id=transaction.id,
            student_id=student_id,
            amount=amount,
            experience=student.experience,
        )

    async def rollback_transaction(
        self,
        transaction_id: UUID,
        kind: str | TransactionKind,
        *,
        admin_id: UUID,
        reason: str,
    ) -> RollbackResult:
        """Undo a points or experience transaction.

        The student's totals are reverted and the transaction is flagged as
        rolled back. Totals never drop below zero.

        Raises:
            InvalidInput: Unknown kind or empty reason.
            TransactionNotFoundError: No such transaction.
            AlreadyRolledBackError: The transaction was already rolled back.
        """
        from sqlalchemy import select

        from tutorhub.db.models import ExperienceTransaction, PointsTransaction, User

        kind = parse_transaction_kind(kind)
        if not reason or not reason.strip():
            raise InvalidInput("Geri alma nedeni gereklidir")

        model = PointsTransaction if kind is TransactionKind.POINTS else ExperienceTransaction
        transaction = (
            await self._session.execute(select(model).where(model.id == transaction_id))
        ).scalar_one_or_none()
        if transaction is None:
            raise TransactionNotFoundError()

        student = (
            await self._session.execute(select(User).where(User.id == transaction.student_id))
        ).scalar_one_or_none()
        if student is None:
            raise StudentNotFoundError()

        if kind is TransactionKind.POINTS:
            if transaction.rolled_back:
                raise AlreadyRolledBackError()
            if transaction.type == TransactionType.AWARD:
                student.points = max(0, student.points - transaction.points)
                student.experience = max(0, student.experience - transaction.points)
            else:
                student.points += transaction.points
            transaction.rolled_back = True
        else:
            if transaction.is_rolled_back:
                raise AlreadyRolledBackError()
            student.experience = max(0, student.experience - transaction.amount)
            transaction.is_rolled_back = True
        await self._session.flush()

        logger.info(
            "Transaction rolled back",
            extra={
                "transaction_id": str(transaction_id),
                "kind": kind.value,
                "student_id": str(student.id),
                "admin_id": str(admin_id),
                "reason": reason.strip(),
            },
        )
        return RollbackResult(
            transaction_id=transaction_id,
            kind=kind,
            student_id=student.id,
            points=student.points,
            experience=student.experience,
        )

"""Academic periods.

Reports, the tutor leaderboard and new transactions are scoped to the ACTIVE
period. At most one period is ACTIVE; activating one deactivates the rest
and, by default, starts every student and staff member from zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from tutorhub.core.errors import Conflict, InvalidInput, NotFound
from tutorhub.db.models.base import PeriodStatus, UserRole

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from tutorhub.db.models import Period

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class NoActivePeriodError(NotFound):
    """Raised when an operation needs an active period and none exists."""

    code = "no_active_period"
    default_message = "Aktif dönem bulunamadı. Lütfen önce bir dönem başlatın."


class PeriodNotFoundError(NotFound):
    code = "period_not_found"
    default_message = "Dönem bulunamadı"


class DuplicatePeriodNameError(Conflict):
    code = "duplicate_period_name"
    default_message = "Bu isimde bir dönem zaten var"


class PeriodAlreadyActiveError(InvalidInput):
    code = "period_already_active"
    default_message = "Dönem zaten aktif"


# Roles whose points and experience restart with a new period
RESET_ROLES = (UserRole.STUDENT, UserRole.TUTOR, UserRole.ASISTAN)


@dataclass(frozen=True, slots=True)
class PeriodView:
    id: UUID
    name: str
    start_date: datetime
    end_date: datetime | None
    status: PeriodStatus
    created_at: datetime | None

    @classmethod
    def from_model(cls, period: Any) -> PeriodView:
        return cls(
            id=period.id,
            name=period.name,
            start_date=period.start_date,
            end_date=period.end_date,
            status=period.status,
            created_at=period.created_at,
        )


async def get_active_period(session: AsyncSession) -> Period | None:
    """Return the ACTIVE period, or None."""
    from sqlalchemy import select

    from tutorhub.db.models import Period

    result = await session.execute(
        select(Period)
        .where(Period.status == PeriodStatus.ACTIVE)
        .order_by(Period.start_date.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def require_active_period(session: AsyncSession) -> Period:
    """Return the ACTIVE period.

    Raises:
        NoActivePeriodError: If no period is active.
    """
    period = await get_active_period(session)
    if period is None:
        logger.warning("Operation requires an active period but none is active")
        raise NoActivePeriodError()
    return period


def period_window(period: Period | None, now: datetime) -> tuple[datetime, datetime]:
    """Reporting window for a period.

    Falls back to epoch..now when there is no active period. An open-ended
    period ends now.
    """
    if period is None:
        return EPOCH, now
    return period.start_date, period.end_date or now


class PeriodService:
    """Period administration."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_periods(self, status: PeriodStatus | None = None) -> list[PeriodView]:
        """Periods, newest first."""
        from sqlalchemy import select

        from tutorhub.db.models import Period

        query = select(Period).order_by(Period.created_at.desc())
        if status is not None:
            query = query.where(Period.status == status)
        result = await self._session.execute(query)
        return [PeriodView.from_model(p) for p in result.scalars().all()]

    async def create_period(
        self, *, name: str, start_date: datetime, end_date: datetime | None = None
    ) -> PeriodView:
        """Create an INACTIVE period.

        Raises:
            InvalidInput: Blank name, or an end date not after the start.
            DuplicatePeriodNameError: The name is taken.
        """
        from sqlalchemy import select

        from tutorhub.db.models import Period

        name = name.strip()
        if not name:
            raise InvalidInput("Dönem adı ve başlangıç tarihi gereklidir")
        if end_date is not None and end_date <= start_date:
            raise InvalidInput("Bitiş tarihi başlangıç tarihinden sonra olmalıdır")

        existing = await self._session.execute(select(Period.id).where(Period.name == name))
        if existing.scalar_one_or_none() is not None:
            raise DuplicatePeriodNameError()

        period = Period(
            name=name, start_date=start_date, end_date=end_date, status=PeriodStatus.INACTIVE
        )
        self._session.add(period)
        await self._session.flush()
        logger.info("Period created", extra={"period_id": str(period.id), "period_name": name})
        return PeriodView.from_model(period)

    async def activate_period(self, period_id: UUID, *, reset_data: bool = True) -> PeriodView:
        """Make ``period_id`` the only ACTIVE period.

        With ``reset_data`` the points and experience of students, tutors
        and assistants are set back to zero.

        Raises:
            PeriodNotFoundError: Unknown period.
            PeriodAlreadyActiveError: The period is already active.
        """
        from sqlalchemy import select, update

        from tutorhub.db.models import Period, User

        period = (
            await self._session.execute(select(Period).where(Period.id == period_id))
        ).scalar_one_or_none()
        if period is None:
            raise PeriodNotFoundError()
        if period.status == PeriodStatus.ACTIVE:
            raise PeriodAlreadyActiveError()

        await self._session.execute(
            update(Period)
            .where(Period.status == PeriodStatus.ACTIVE)
            .values(status=PeriodStatus.INACTIVE)
        )
        period.status = PeriodStatus.ACTIVE

        if reset_data:
            result = await self._session.execute(
                update(User).where(User.role.in_(RESET_ROLES)).values(points=0, experience=0)
            )
            logger.info("User totals reset for new period", extra={"users": result.rowcount})

        await self._session.flush()
        logger.info(
            "Period activated",
            extra={"period_id": str(period_id), "period_name": period.name, "reset": reset_data},
        )
        return PeriodView.from_model(period)

"""Meeting decision tracking.

Decisions move across a three-column kanban (TODO, IN_PROGRESS, DONE).
Drag-and-drop allows a card to be dropped on any other column, so every
move between distinct statuses is valid; dropping a card on its own column
is accepted and changes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, ClassVar

from tutorhub.core.errors import InvalidInput, NotFound
from tutorhub.db.models.base import DecisionStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from tutorhub.db.models import MeetingDecision

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000

# Filter name -> statuses included
STATUS_FILTERS: dict[str, tuple[DecisionStatus, ...]] = {
    "all": tuple(DecisionStatus),
    "completed": (DecisionStatus.DONE,),
    "todo": (DecisionStatus.TODO,),
    "in-progress": (DecisionStatus.IN_PROGRESS,),
    "pending": (DecisionStatus.TODO, DecisionStatus.IN_PROGRESS),
}


class InvalidDecisionStatusError(InvalidInput):
    code = "invalid_decision_status"
    default_message = "Durum TODO, IN_PROGRESS veya DONE olmalıdır"


class DecisionNotFoundError(NotFound):
    code = "decision_not_found"
    default_message = "Karar bulunamadı"


class MeetingNotFoundError(NotFound):
    code = "meeting_not_found"
    default_message = "Toplantı bulunamadı"


class InvalidTransitionError(InvalidInput):
    """Raised when a status move is not allowed."""

    code = "invalid_transition"

    def __init__(self, from_status: DecisionStatus, to_status: DecisionStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"{from_status.value} durumundan {to_status.value} durumuna geçilemez")


def parse_decision_status(value: str | DecisionStatus) -> DecisionStatus:
    """Parse a status value, rejecting anything outside the three columns."""
    if isinstance(value, DecisionStatus):
        return value
    try:
        return DecisionStatus(value)
    except ValueError:
        raise InvalidDecisionStatusError() from None


def parse_status_filter(value: str | None) -> tuple[DecisionStatus, ...]:
    """Statuses matching a list filter; unknown or empty filters mean ``all``."""
    return STATUS_FILTERS.get(value or "all", STATUS_FILTERS["all"])


def validate_decision_fields(
    *,
    title: str | None,
    description: str | None,
    target_date: datetime | None,
    responsible_user_ids: Sequence[UUID] | None,
    partial: bool = False,
) -> None:
    """Check decision fields, raising InvalidInput with a Turkish message.

    With ``partial`` set, None means "unchanged" and is not checked.
    """
    if title is not None or not partial:
        if not title or not title.strip():
            raise InvalidInput("Başlık gereklidir")
        if len(title) > TITLE_MAX_LENGTH:
            raise InvalidInput("Başlık çok uzun")
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise InvalidInput("Açıklama çok uzun")
    if target_date is None and not partial:
        raise InvalidInput("Hedef tarih gereklidir")
    if responsible_user_ids is not None or not partial:
        if not responsible_user_ids:
            raise InvalidInput("En az bir sorumlu kişi seçilmelidir")


@dataclass(frozen=True, slots=True)
class UserSummary:
    id: UUID
    username: str
    first_name: str | None
    last_name: str | None


@dataclass(frozen=True, slots=True)
class MeetingSummary:
    id: UUID
    title: str
    meeting_date: datetime


@dataclass(frozen=True, slots=True)
class DecisionView:
    id: UUID
    title: str
    description: str | None
    target_date: datetime
    status: DecisionStatus
    meeting_id: UUID
    created_at: datetime
    updated_at: datetime
    responsible_users: list[UserSummary] = field(default_factory=list)
    meeting: MeetingSummary | None = None

    @classmethod
    def from_model(cls, decision: Any, *, include_meeting: bool = False) -> DecisionView:
        meeting = None
        if include_meeting and decision.meeting is not None:
            meeting = MeetingSummary(
                id=decision.meeting.id,
                title=decision.meeting.title,
                meeting_date=decision.meeting.meeting_date,
            )
        return cls(
            id=decision.id,
            title=decision.title,
            description=decision.description,
            target_date=decision.target_date,
            status=decision.status,
            meeting_id=decision.meeting_id,
            created_at=decision.created_at,
            updated_at=decision.updated_at,
            responsible_users=[
                UserSummary(
                    id=u.id, username=u.username, first_name=u.first_name, last_name=u.last_name
                )
                for u in decision.responsible_users
            ],
            meeting=meeting,
        )


@dataclass(frozen=True, slots=True)
class DecisionStatistics:
    total: int
    completed: int
    todo: int
    in_progress: int
    pending: int


@dataclass(frozen=True, slots=True)
class StatusChange:
    """Outcome of a kanban move."""

    decision: DecisionView
    previous_status: DecisionStatus
    changed: bool


def decision_statistics(statuses: Sequence[DecisionStatus]) -> DecisionStatistics:
    todo = sum(1 for s in statuses if s == DecisionStatus.TODO)
    in_progress = sum(1 for s in statuses if s == DecisionStatus.IN_PROGRESS)
    return DecisionStatistics(
        total=len(statuses),
        completed=sum(1 for s in statuses if s == DecisionStatus.DONE),
        todo=todo,
        in_progress=in_progress,
        pending=todo + in_progress,
    )


class DecisionService:
    """CRUD and kanban moves for meeting decisions.

    Example:
        service = DecisionService(session)
        change = await service.update_status(decision_id, "IN_PROGRESS")
    """

    VALID_TRANSITIONS: ClassVar[dict[DecisionStatus, set[DecisionStatus]]] = {
        DecisionStatus.TODO: {DecisionStatus.IN_PROGRESS, DecisionStatus.DONE},
        DecisionStatus.IN_PROGRESS: {DecisionStatus.TODO, DecisionStatus.DONE},
        DecisionStatus.DONE: {DecisionStatus.TODO, DecisionStatus.IN_PROGRESS},
    }

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def is_valid_transition(self, from_status: DecisionStatus, to_status: DecisionStatus) -> bool:
        return to_status in self.VALID_TRANSITIONS.get(from_status, set())

    def _base_query(self) -> Any:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import MeetingDecision

        return select(MeetingDecision).options(
            selectinload(MeetingDecision.responsible_users),
            selectinload(MeetingDecision.meeting),
        )

    async def _get_model(self, decision_id: UUID) -> MeetingDecision:
        from tutorhub.db.models import MeetingDecision

        result = await self._session.execute(
            self._base_query().where(MeetingDecision.id == decision_id)
        )
        decision = result.scalar_one_or_none()
        if decision is None:
            raise DecisionNotFoundError()
        return decision

    async def _load_users(self, user_ids: Sequence[UUID]) -> list[Any]:
        from sqlalchemy import select

        from tutorhub.db.models import User

        unique_ids = list(dict.fromkeys(user_ids))
        result = await self._session.execute(select(User).where(User.id.in_(unique_ids)))
        users = list(result.scalars().all())
        if len(users) != len(unique_ids):
            raise InvalidInput("Sorumlu kullanıcılardan biri bulunamadı")
        return users

    async def list_for_meeting(self, meeting_id: UUID) -> list[DecisionView]:
        from tutorhub.db.models import MeetingDecision

        result = await self._session.execute(
            self._base_query()
            .where(MeetingDecision.meeting_id == meeting_id)
            .order_by(MeetingDecision.created_at.desc())
        )
        return [DecisionView.from_model(d) for d in result.scalars().all()]

    async def list_all(self, status_filter: str | None = None) -> list[DecisionView]:
        """All decisions, newest first, with their meeting."""
        from tutorhub.db.models import MeetingDecision

        statuses = parse_status_filter(status_filter)
        result = await self._session.execute(
            self._base_query()
            .where(MeetingDecision.status.in_(statuses))
            .order_by(MeetingDecision.created_at.desc())
        )
        return [DecisionView.from_model(d, include_meeting=True) for d in result.scalars().all()]

    async def get(self, decision_id: UUID) -> DecisionView:
        return DecisionView.from_model(await self._get_model(decision_id), include_meeting=True)

    async def create(
        self,
        meeting_id: UUID,
        *,
        title: str,
        target_date: datetime,
        responsible_user_ids: Sequence[UUID],
        created_by_id: UUID,
        description: str | None = None,
    ) -> DecisionView:
        from tutorhub.db.models import Meeting, MeetingDecision

        validate_decision_fields(
            title=title,
            description=description,
            target_date=target_date,
            responsible_user_ids=responsible_user_ids,
        )
        if await self._session.get(Meeting, meeting_id) is None:
            raise MeetingNotFoundError()
        users = await self._load_users(responsible_user_ids)

        decision = MeetingDecision(
            meeting_id=meeting_id,
            title=title.strip(),
            description=description or None,
            target_date=target_date,
            status=DecisionStatus.TODO,
            created_by_id=created_by_id,
            responsible_users=users,
        )
        self._session.add(decision)
        await self._session.flush()

        logger.info(
            "Decision created",
            extra={"decision_id": str(decision.id), "meeting_id": str(meeting_id)},
        )
        return await self.get(decision.id)

    async def update(
        self,
        decision_id: UUID,
        *,
        title: str | None = None,
        description: str | None = None,
        target_date: datetime | None = None,
        status: str | DecisionStatus | None = None,
        responsible_user_ids: Sequence[UUID] | None = None,
    ) -> DecisionView:
        validate_decision_fields(
            title=title,
            description=description,
            target_date=target_date,
            responsible_user_ids=responsible_user_ids,
            partial=True,
        )
        new_status = parse_decision_status(status) if status is not None else None

        decision = await self._get_model(decision_id)
        if title is not None:
            decision.title = title.strip()
        if description is not None:
            decision.description = description or None
        if target_date is not None:
            decision.target_date = target_date
        if new_status is not None:
            decision.status = new_status
        if responsible_user_ids is not None:
            decision.responsible_users = await self._load_users(responsible_user_ids)
        decision.updated_at = datetime.now(UTC)

        await self._session.flush()
        logger.info("Decision updated", extra={"decision_id": str(decision_id)})
        return DecisionView.from_model(decision, include_meeting=True)

    async def update_status(self, decision_id: UUID, status: str | DecisionStatus) -> StatusChange:
        """Move a decision to another kanban column.

        Raises:
            InvalidDecisionStatusError: If ``status`` is not a kanban column.
            DecisionNotFoundError: If the decision does not exist.
        """
        to_status = parse_decision_status(status)
        decision = await self._get_model(decision_id)
        from_status = decision.status

        if from_status == to_status:
            return StatusChange(
                decision=DecisionView.from_model(decision, include_meeting=True),
                previous_status=from_status,
                changed=False,
            )

        if not self.is_valid_transition(from_status, to_status):
            logger.warning(
                "Invalid decision transition attempted",
                extra={
                    "decision_id": str(decision_id),
                    "from_status": from_status.value,
                    "to_status": to_status.value,
                },
            )
            raise InvalidTransitionError(from_status, to_status)

        decision.status = to_status
        decision.updated_at = datetime.now(UTC)
        await self._session.flush()

        logger.info(
            "Decision status changed",
            extra={
                "decision_id": str(decision_id),
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )
        return StatusChange(
            decision=DecisionView.from_model(decision, include_meeting=True),
            previous_status=from_status,
            changed=True,
        )

    async def delete(self, decision_id: UUID) -> None:
        decision = await self._get_model(decision_id)
        await self._session.delete(decision)
        await self._session.flush()
        logger.info("Decision deleted", extra={"decision_id": str(decision_id)})

    async def statistics(self) -> DecisionStatistics:
        from sqlalchemy import select

        from tutorhub.db.models import MeetingDecision

        result = await self._session.execute(select(MeetingDecision.status))
        return decision_statistics(list(result.scalars().all()))

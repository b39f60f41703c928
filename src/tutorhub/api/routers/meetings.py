"""Board meetings and decision tracking API router.

Reads are open to any signed-in user; creating, editing, moving and
deleting meetings or decisions requires ADMIN.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from tutorhub.api.dependencies import AdminUser, CurrentUser, DbSession
from tutorhub.api.i18n import get_message
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.api.schemas.meetings import (
    DecisionCreateRequest,
    DecisionStatusRequest,
    DecisionUpdateRequest,
    MeetingCreateRequest,
    MeetingUpdateRequest,
)
from tutorhub.services.decisions import DecisionService
from tutorhub.services.meetings import MeetingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["meetings"], responses=ERROR_RESPONSES)


@router.get("/meetings/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="meetings")


# -----------------------------------------------------------------------------
# Meetings
# -----------------------------------------------------------------------------


@router.get("/meetings", response_model=ActionResult)
async def list_meetings(_user: CurrentUser, db: DbSession) -> ActionResult:
    return ok(await MeetingService(db).list_meetings())


@router.post("/meetings", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def create_meeting(
    body: MeetingCreateRequest, user: AdminUser, db: DbSession
) -> ActionResult:
    meeting = await MeetingService(db).create(
        title=body.title,
        meeting_date=body.meeting_date,
        location=body.location,
        description=body.description,
        created_by_id=user.principal_id,
    )
    await db.commit()
    return ok(meeting, get_message("meeting_created"))


@router.get("/meetings/{meeting_id}", response_model=ActionResult)
async def get_meeting(meeting_id: UUID, _user: CurrentUser, db: DbSession) -> ActionResult:
    return ok(await MeetingService(db).get(meeting_id))


@router.put("/meetings/{meeting_id}", response_model=ActionResult)
async def update_meeting(
    meeting_id: UUID, body: MeetingUpdateRequest, _user: AdminUser, db: DbSession
) -> ActionResult:
    meeting = await MeetingService(db).update(meeting_id, **body.model_dump(exclude_unset=True))
    await db.commit()
    return ok(meeting, get_message("meeting_updated"))


@router.delete("/meetings/{meeting_id}", response_model=ActionResult)
async def delete_meeting(meeting_id: UUID, user: AdminUser, db: DbSession) -> ActionResult:
    await MeetingService(db).delete(meeting_id)
    await db.commit()
    logger.info(
        "Meeting deleted via API",
        extra={"meeting_id": str(meeting_id), "user_id": str(user.principal_id)},
    )
    return ok(None, get_message("meeting_deleted"))


@router.post("/meetings/{meeting_id}/check-in", response_model=ActionResult)
async def check_in_meeting(meeting_id: UUID, user: CurrentUser, db: DbSession) -> ActionResult:
    meeting = await MeetingService(db).check_in(meeting_id, user.principal_id)
    await db.commit()
    return ok(meeting, get_message("meeting_checked_in"))


@router.get("/meetings/{meeting_id}/decisions", response_model=ActionResult)
async def list_meeting_decisions(
    meeting_id: UUID, _user: CurrentUser, db: DbSession
) -> ActionResult:
    return ok(await DecisionService(db).list_for_meeting(meeting_id))


@router.post(
    "/meetings/{meeting_id}/decisions",
    response_model=ActionResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_decision(
    meeting_id: UUID, body: DecisionCreateRequest, user: AdminUser, db: DbSession
) -> ActionResult:
    decision = await DecisionService(db).create(
        meeting_id,
        title=body.title,
        description=body.description,
        target_date=body.target_date,
        responsible_user_ids=body.responsible_user_ids,
        created_by_id=user.principal_id,
    )
    await db.commit()
    return ok(decision, get_message("decision_created"))


# -----------------------------------------------------------------------------
# Decisions
# -----------------------------------------------------------------------------


@router.get("/decisions", response_model=ActionResult)
async def list_decisions(
    _user: CurrentUser,
    db: DbSession,
    status_filter: Annotated[
        str | None,
        Query(alias="status", description="all, completed, todo, in-progress or pending"),
    ] = None,
) -> ActionResult:
    return ok(await DecisionService(db).list_all(status_filter))


@router.get("/decisions/statistics", response_model=ActionResult)
async def decision_statistics(_user: CurrentUser, db: DbSession) -> ActionResult:
    return ok(await DecisionService(db).statistics())


@router.get("/decisions/{decision_id}", response_model=ActionResult)
async def get_decision(decision_id: UUID, _user: CurrentUser, db: DbSession) -> ActionResult:
    return ok(await DecisionService(db).get(decision_id))


@router.put("/decisions/{decision_id}", response_model=ActionResult)
async def update_decision(
    decision_id: UUID, body: DecisionUpdateRequest, _user: AdminUser, db: DbSession
) -> ActionResult:
    decision = await DecisionService(db).update(decision_id, **body.model_dump(exclude_unset=True))
    await db.commit()
    return ok(decision, get_message("decision_updated"))


@router.patch("/decisions/{decision_id}/status", response_model=ActionResult)
async def update_decision_status(
    decision_id: UUID, body: DecisionStatusRequest, user: AdminUser, db: DbSession
) -> ActionResult:
    """Kanban move; moving to the current column succeeds without a change."""
    change = await DecisionService(db).update_status(decision_id, body.status)
    if change.changed:
        await db.commit()
        logger.info(
            "Decision moved via API",
            extra={"decision_id": str(decision_id), "user_id": str(user.principal_id)},
        )
    return ok(change.decision, get_message("decision_status_updated"))


@router.delete("/decisions/{decision_id}", response_model=ActionResult)
async def delete_decision(decision_id: UUID, _user: AdminUser, db: DbSession) -> ActionResult:
    await DecisionService(db).delete(decision_id)
    await db.commit()
    return ok(None, get_message("decision_deleted"))

"""Events, participation, attendance sessions and check-in API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, status

from tutorhub.api.dependencies import (
    AdminUser,
    CurrentUser,
    DbSession,
    StaffUser,
    StudentUser,
    TutorUser,
)
from tutorhub.api.i18n import get_message
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.api.schemas.events import (
    EventCreateRequest,
    ParticipationUpdateRequest,
    SessionCreateRequest,
    SessionUpdateRequest,
)
from tutorhub.services.events import EventService
from tutorhub.services.students import StudentService

router = APIRouter(tags=["events"], responses=ERROR_RESPONSES)


@router.get("/events/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="events")


@router.post("/events", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def create_event(body: EventCreateRequest, user: AdminUser, db: DbSession) -> ActionResult:
    event = await EventService(db).create_event(
        title=body.title,
        description=body.description,
        start_date_time=body.start_date_time,
        end_date_time=body.end_date_time,
        location=body.location,
        capacity=body.capacity,
        points=body.points,
        experience=body.experience,
        created_by_id=user.principal_id,
        created_for_tutor_id=body.created_for_tutor_id,
    )
    await db.commit()
    return ok(event, get_message("event_created"))


@router.post(
    "/events/{event_id}/join",
    response_model=ActionResult,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Already joined"}},
)
async def join_event(event_id: UUID, user: CurrentUser, db: DbSession) -> ActionResult:
    result = await EventService(db).join_event(event_id, user.principal_id)
    await db.commit()
    return ok(result, get_message("event_joined"))


@router.get("/events/{event_id}/participants", response_model=ActionResult)
async def list_participants(event_id: UUID, user: CurrentUser, db: DbSession) -> ActionResult:
    participants = await EventService(db).list_participants(
        event_id, user_id=user.principal_id, role=user.role
    )
    return ok(participants)


@router.put("/events/{event_id}/participation", response_model=ActionResult)
async def update_participation(
    event_id: UUID, body: ParticipationUpdateRequest, user: StaffUser, db: DbSession
) -> ActionResult:
    participant = await EventService(db).update_participation(
        event_id,
        body.user_id,
        body.status,
        actor_id=user.principal_id,
        actor_role=user.role,
    )
    await db.commit()
    return ok(participant, get_message("participation_updated"))


@router.post(
    "/attendance-sessions", response_model=ActionResult, status_code=status.HTTP_201_CREATED
)
async def create_session(
    body: SessionCreateRequest, user: StaffUser, db: DbSession
) -> ActionResult:
    result = await EventService(db).create_session(
        title=body.title, session_date=body.session_date, created_by_id=user.principal_id
    )
    await db.commit()
    return ok(result, get_message("session_created"))


@router.patch("/attendance-sessions/{session_id}", response_model=ActionResult)
async def update_session(
    session_id: UUID, body: SessionUpdateRequest, user: StaffUser, db: DbSession
) -> ActionResult:
    result = await EventService(db).update_session(
        session_id,
        actor_id=user.principal_id,
        actor_role=user.role,
        title=body.title,
        session_date=body.session_date,
    )
    await db.commit()
    return ok(result, get_message("session_updated"))


@router.post("/attendance-sessions/{session_id}/complete", response_model=ActionResult)
async def complete_session(session_id: UUID, user: StaffUser, db: DbSession) -> ActionResult:
    result = await EventService(db).complete_session(
        session_id, actor_id=user.principal_id, actor_role=user.role
    )
    await db.commit()
    return ok(result, get_message("session_completed"))


@router.post(
    "/attendance/{session_id}/check-in",
    response_model=ActionResult,
    status_code=status.HTTP_201_CREATED,
)
async def check_in(session_id: UUID, user: StudentUser, db: DbSession) -> ActionResult:
    result = await EventService(db).check_in(session_id, user.principal_id)
    await db.commit()
    return ok(result, get_message("checked_in"))


@router.get("/tutor/students", response_model=ActionResult, tags=["students"])
async def list_tutor_students(user: TutorUser, db: DbSession) -> ActionResult:
    return ok(await StudentService(db).list_tutor_students(user.principal_id))

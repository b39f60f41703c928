"""Academic period administration API router."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from tutorhub.api.dependencies import AdminUser, DbSession
from tutorhub.api.i18n import get_message
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.api.schemas.periods import PeriodActivateRequest, PeriodCreateRequest
from tutorhub.db.models.base import PeriodStatus
from tutorhub.services.periods import PeriodService

router = APIRouter(prefix="/admin/periods", tags=["periods"], responses=ERROR_RESPONSES)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="periods")


@router.get("", response_model=ActionResult)
async def list_periods(
    _user: AdminUser,
    db: DbSession,
    period_status: Annotated[PeriodStatus | None, Query(alias="status")] = None,
) -> ActionResult:
    return ok(await PeriodService(db).list_periods(period_status))


@router.post("", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def create_period(body: PeriodCreateRequest, _user: AdminUser, db: DbSession) -> ActionResult:
    period = await PeriodService(db).create_period(
        name=body.name, start_date=body.start_date, end_date=body.end_date
    )
    await db.commit()
    return ok(period, get_message("period_created"))


@router.post("/{period_id}/activate", response_model=ActionResult)
async def activate_period(
    period_id: UUID,
    _user: AdminUser,
    db: DbSession,
    body: PeriodActivateRequest | None = None,
) -> ActionResult:
    """Activate a period; by default user points and experience start from zero."""
    reset_data = body.reset_data if body is not None else True
    period = await PeriodService(db).activate_period(period_id, reset_data=reset_data)
    await db.commit()
    return ok(period, get_message("period_activated", name=period.name))

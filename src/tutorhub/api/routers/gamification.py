"""Points, experience and transaction rollback API router."""

from __future__ import annotations

from fastapi import APIRouter, status

from tutorhub.api.dependencies import AdminUser, DbSession, StaffUser
from tutorhub.api.i18n import get_message
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.api.schemas.gamification import (
    ExperienceAwardRequest,
    PointsAwardRequest,
    RollbackRequest,
)
from tutorhub.db.models.base import TransactionType
from tutorhub.services.gamification import GamificationService

router = APIRouter(tags=["gamification"], responses=ERROR_RESPONSES)


@router.get("/points/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="points")


@router.post("/points", response_model=ActionResult)
async def award_points(body: PointsAwardRequest, user: StaffUser, db: DbSession) -> ActionResult:
    """Award points (positive) or take them back (negative)."""
    result = await GamificationService(db).award_points(
        body.student_id,
        body.points,
        actor_id=user.principal_id,
        actor_role=user.role,
        reason=body.reason,
    )
    await db.commit()
    key = "points_awarded" if result.type == TransactionType.AWARD else "points_redeemed"
    return ok(result, get_message(key))


@router.post("/experience", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def award_experience(
    body: ExperienceAwardRequest, user: StaffUser, db: DbSession
) -> ActionResult:
    result = await GamificationService(db).award_experience(
        body.student_id, body.amount, actor_id=user.principal_id, actor_role=user.role
    )
    await db.commit()
    return ok(result, get_message("experience_awarded"))


@router.post(
    "/admin/transactions/rollback",
    response_model=ActionResult,
    responses={409: {"description": "Already rolled back"}},
)
async def rollback_transaction(body: RollbackRequest, user: AdminUser, db: DbSession) -> ActionResult:
    result = await GamificationService(db).rollback_transaction(
        body.transaction_id,
        body.transaction_type,
        admin_id=user.principal_id,
        reason=body.reason,
    )
    await db.commit()
    return ok(result, get_message("transaction_rolled_back"))

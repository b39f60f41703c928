"""Donor ledger API router (ADMIN and ASISTAN)."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, status

from tutorhub.api.dependencies import DbSession, LedgerUser, Reports
from tutorhub.api.i18n import get_message
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.api.schemas.donations import (
    DonationCreateRequest,
    DonorCreateRequest,
    DonorUpdateRequest,
)
from tutorhub.services.donations import DonationService

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from tutorhub.core.config import ReportSettings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["donations"], responses=ERROR_RESPONSES)


def _service(db: AsyncSession, reports: ReportSettings) -> DonationService:
    return DonationService(db, inactive_after=timedelta(days=reports.donor_inactive_days))


@router.get("/donors/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="donors")


@router.get("/donors", response_model=ActionResult)
async def list_donors(
    _user: LedgerUser, db: DbSession, reports: Reports, search: str | None = None
) -> ActionResult:
    return ok(await _service(db, reports).list_donors(search))


@router.get("/donors/summary", response_model=ActionResult)
async def donation_summary(_user: LedgerUser, db: DbSession, reports: Reports) -> ActionResult:
    return ok(await _service(db, reports).get_donation_summary())


@router.post("/donors", response_model=ActionResult, status_code=status.HTTP_201_CREATED)
async def create_donor(
    body: DonorCreateRequest, user: LedgerUser, db: DbSession, reports: Reports
) -> ActionResult:
    donor = await _service(db, reports).create_donor(**body.model_dump())
    await db.commit()
    logger.info(
        "Donor created via API",
        extra={"donor_id": str(donor.id), "user_id": str(user.principal_id)},
    )
    return ok(donor, get_message("donor_created"))


@router.get("/donors/{donor_id}", response_model=ActionResult)
async def get_donor(
    donor_id: UUID, _user: LedgerUser, db: DbSession, reports: Reports
) -> ActionResult:
    return ok(await _service(db, reports).get_donor(donor_id))


@router.put("/donors/{donor_id}", response_model=ActionResult)
async def update_donor(
    donor_id: UUID, body: DonorUpdateRequest, _user: LedgerUser, db: DbSession, reports: Reports
) -> ActionResult:
    changes = body.model_dump(exclude_unset=True)
    donor = await _service(db, reports).update_donor(donor_id, **changes)
    await db.commit()
    return ok(donor, get_message("donor_updated"))


@router.delete("/donors/{donor_id}", response_model=ActionResult)
async def delete_donor(donor_id: UUID, _user: LedgerUser, db: DbSession) -> ActionResult:
    await DonationService(db).delete_donor(donor_id)
    await db.commit()
    return ok(None, get_message("donor_deleted"))


@router.post(
    "/donors/{donor_id}/donations",
    response_model=ActionResult,
    status_code=status.HTTP_201_CREATED,
)
async def add_donation(
    donor_id: UUID, body: DonationCreateRequest, _user: LedgerUser, db: DbSession
) -> ActionResult:
    donation = await DonationService(db).add_donation(
        donor_id,
        amount=body.amount,
        donation_date=body.donation_date or datetime.now(UTC),
        currency=body.currency,
        notes=body.notes,
    )
    await db.commit()
    return ok(donation, get_message("donation_created"))


@router.delete("/donations/{donation_id}", response_model=ActionResult)
async def delete_donation(donation_id: UUID, _user: LedgerUser, db: DbSession) -> ActionResult:
    await DonationService(db).delete_donation(donation_id)
    await db.commit()
    return ok(None, get_message("donation_deleted"))

"""Classroom sociometric analysis API router.

Tutors see their own classroom (no ``classroomId`` needed); admins pass the
classroom explicitly.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import Response

from tutorhub.api.dependencies import CurrentUser, DbSession, PDFGenerator, Reports, Timezone
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.services.sociometric import SociometricService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sociometric"], responses=ERROR_RESPONSES)

ClassroomQuery = Annotated[UUID | None, Query(alias="classroomId")]


@router.get("/sociometric/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="sociometric")


@router.get("/sociometric", response_model=ActionResult)
async def get_sociometric(
    user: CurrentUser,
    db: DbSession,
    reports: Reports,
    tz: Timezone,
    classroom_id: ClassroomQuery = None,
) -> ActionResult:
    service = SociometricService(db, reports, tz)
    analysis = await service.get_sociometric_analysis(classroom_id, user.principal_id, user.role)
    return ok(analysis)


@router.get(
    "/sociometric.pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def get_sociometric_pdf(
    user: CurrentUser,
    db: DbSession,
    reports: Reports,
    tz: Timezone,
    generator: PDFGenerator,
    classroom_id: ClassroomQuery = None,
) -> Response:
    service = SociometricService(db, reports, tz)
    analysis = await service.get_sociometric_analysis(classroom_id, user.principal_id, user.role)
    pdf = generator.generate_sociometric_pdf(analysis)

    logger.info(
        "Sociometric PDF generated",
        extra={"user_id": str(user.principal_id), "pages": pdf.page_count},
    )
    return Response(
        content=pdf.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf.filename}"'},
    )

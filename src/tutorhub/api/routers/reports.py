"""Admin reports API router."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from tutorhub.api.dependencies import AdminUser, DbSession, PDFGenerator, Reports, Timezone
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.services.reports import ReportService

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

router = APIRouter(prefix="/reports", tags=["reports"], responses=ERROR_RESPONSES)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="reports")


@router.get("/weekly-participation", response_model=ActionResult)
async def weekly_participation(
    _user: AdminUser, db: DbSession, reports: Reports, tz: Timezone
) -> ActionResult:
    """Per-tutor participation in the active period."""
    report = await ReportService(db, reports, tz).get_weekly_participation_report()
    return ok(report)


@router.get("/attendance-alerts", response_model=ActionResult)
async def attendance_alerts(
    _user: AdminUser, db: DbSession, reports: Reports, tz: Timezone
) -> ActionResult:
    """Students whose attendance is below the configured threshold."""
    report = await ReportService(db, reports, tz).get_attendance_alerts()
    return ok(report)


@router.get("/events-overview", response_model=ActionResult)
async def events_overview(
    _user: AdminUser, db: DbSession, reports: Reports, tz: Timezone
) -> ActionResult:
    report = await ReportService(db, reports, tz).get_events_overview()
    return ok(report)


@router.get(
    "/weekly-participation.pdf",
    response_class=Response,
    responses={200: {"content": {PDF_MEDIA_TYPE: {}}}},
)
async def weekly_participation_pdf(
    user: AdminUser,
    db: DbSession,
    reports: Reports,
    tz: Timezone,
    generator: PDFGenerator,
) -> Response:
    report = await ReportService(db, reports, tz).get_weekly_participation_report()
    pdf = generator.generate_weekly_participation_pdf(report)

    logger.info(
        "Weekly participation PDF generated",
        extra={"user_id": str(user.principal_id), "pages": pdf.page_count},
    )
    return Response(
        content=pdf.content,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{pdf.filename}"'},
    )

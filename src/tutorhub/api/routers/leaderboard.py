"""Leaderboard API router.

- /leaderboard: public ranking of all students (any signed-in user)
- /leaderboard/weekly-top-earners: this week's earners
- /leaderboard/export.csv: admin CSV download
- /tutor/leaderboard: a tutor's students in the active period
- /admin/leaderboard: full ranking with search and tutor filter
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import Response

from tutorhub.api.dependencies import AdminUser, AppSettings, CurrentUser, DbSession, Timezone, TutorUser
from tutorhub.api.schemas.common import ERROR_RESPONSES, ActionResult, HealthResponse, ok
from tutorhub.db import with_database_connection
from tutorhub.services.export import export_leaderboard_csv
from tutorhub.services.leaderboard import LeaderboardService, split_podium

logger = logging.getLogger(__name__)

router = APIRouter(tags=["leaderboard"], responses=ERROR_RESPONSES)


@router.get("/leaderboard/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(namespace="leaderboard")


@router.get("/leaderboard", response_model=ActionResult, summary="Student leaderboard")
async def get_leaderboard(
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
    tz: Timezone,
) -> ActionResult:
    """Top students by experience plus the caller's own rank when a student."""
    board = await with_database_connection(
        db,
        lambda session: LeaderboardService(session, tz).get_leaderboard(
            user.principal_id, user.role, size=settings.reports.leaderboard_size
        ),
    )
    return ok(board)


@router.get(
    "/leaderboard/weekly-top-earners",
    response_model=ActionResult,
    summary="This week's top earners",
)
async def get_weekly_top_earners(
    _user: CurrentUser,
    db: DbSession,
    tz: Timezone,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> ActionResult:
    earners = await with_database_connection(
        db, lambda session: LeaderboardService(session, tz).get_weekly_top_earners(limit=limit)
    )
    return ok(earners)


@router.get(
    "/leaderboard/export.csv",
    response_class=Response,
    summary="Download the leaderboard as CSV",
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_leaderboard(
    user: AdminUser,
    db: DbSession,
    tz: Timezone,
    search: str | None = None,
    tutor_id: Annotated[UUID | None, Query(alias="tutorId")] = None,
) -> Response:
    """Semicolon separated, BOM-prefixed UTF-8 so spreadsheet apps keep Turkish letters."""
    service = LeaderboardService(db, tz)
    entries = await service.get_admin_leaderboard(search, tutor_id)
    export = export_leaderboard_csv(entries, datetime.now(UTC).astimezone(tz))

    logger.info(
        "Leaderboard exported",
        extra={"user_id": str(user.principal_id), "rows": len(entries)},
    )
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": export.content_disposition},
    )


@router.get("/tutor/leaderboard", response_model=ActionResult, summary="Tutor's period leaderboard")
async def get_tutor_leaderboard(user: TutorUser, db: DbSession, tz: Timezone) -> ActionResult:
    service = LeaderboardService(db, tz)
    entries = await service.get_tutor_leaderboard(user.principal_id)
    return ok({"leaderboard": entries, "podium": split_podium(entries), "total": len(entries)})


@router.get("/admin/leaderboard", response_model=ActionResult, summary="Admin leaderboard")
async def get_admin_leaderboard(
    _user: AdminUser,
    db: DbSession,
    tz: Timezone,
    search: str | None = None,
    tutor_id: Annotated[UUID | None, Query(alias="tutorId")] = None,
) -> ActionResult:
    service = LeaderboardService(db, tz)
    entries = await service.get_admin_leaderboard(search, tutor_id)
    return ok({"leaderboard": entries, "podium": split_podium(entries), "total": len(entries)})

"""Dependencies shared by the API routers."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Any
from zoneinfo import ZoneInfo

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tutorhub.api.middleware.auth import AuthenticatedUser, require_authenticated_user, require_role
from tutorhub.core.config import ReportSettings, Settings
from tutorhub.db.models.base import UserRole

if TYPE_CHECKING:
    from tutorhub.services.pdf import ReportPDFGenerator


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session from the application's async session factory."""
    from tutorhub.db import get_async_session

    async with get_async_session() as session:
        yield session


def get_app_settings(request: Request) -> Settings:
    """Settings stored on the app by create_app, or the process-wide ones."""
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        from tutorhub.core.settings import get_settings

        settings = get_settings()
    return settings


def get_report_settings(settings: Annotated[Settings, Depends(get_app_settings)]) -> ReportSettings:
    return settings.reports


def get_tz(settings: Annotated[Settings, Depends(get_app_settings)]) -> ZoneInfo:
    return ZoneInfo(settings.timezone)


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Reports = Annotated[ReportSettings, Depends(get_report_settings)]
Timezone = Annotated[ZoneInfo, Depends(get_tz)]

CurrentUser = Annotated[AuthenticatedUser, Depends(require_authenticated_user)]
AdminUser = Annotated[AuthenticatedUser, Depends(require_role(UserRole.ADMIN))]
TutorUser = Annotated[AuthenticatedUser, Depends(require_role(UserRole.TUTOR))]
StaffUser = Annotated[AuthenticatedUser, Depends(require_role(UserRole.ADMIN, UserRole.TUTOR))]
LedgerUser = Annotated[AuthenticatedUser, Depends(require_role(UserRole.ADMIN, UserRole.ASISTAN))]
StudentUser = Annotated[AuthenticatedUser, Depends(require_role(UserRole.STUDENT))]


@lru_cache(maxsize=4)
def _pdf_generator(timezone: str, app_name: str) -> ReportPDFGenerator:
    from tutorhub.services.pdf import ReportPDFGenerator

    return ReportPDFGenerator(tz=ZoneInfo(timezone), app_name=app_name)


def get_pdf_generator(settings: Annotated[Settings, Depends(get_app_settings)]) -> ReportPDFGenerator:
    """Shared generator; templates and stylesheet load once per process."""
    return _pdf_generator(settings.timezone, settings.app_name)


# WeasyPrint is imported on first use
PDFGenerator = Annotated[Any, Depends(get_pdf_generator)]

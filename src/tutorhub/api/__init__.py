"""TutorHub API service.

FastAPI application providing:
- Leaderboards and weekly earners
- Admin reports and classroom sociometric analysis (JSON, CSV, PDF)
- Board meetings and decision tracking
- Donor ledger and social content planning
- Event registration and attendance check-in

This module provides the app factory used by the ASGI entry point and by
tests.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tutorhub.api.middleware import (
    ErrorHandlerMiddleware,
    ProxyAuthMiddleware,
    RequestIDMiddleware,
    register_exception_handlers,
)
from tutorhub.api.routers import (
    donations_router,
    events_router,
    gamification_router,
    leaderboard_router,
    meetings_router,
    periods_router,
    reports_router,
    social_router,
    sociometric_router,
)
from tutorhub.api.schemas.common import HealthResponse
from tutorhub.core.config import AuthSettings

if TYPE_CHECKING:
    from tutorhub.core.config import Settings

logger = logging.getLogger(__name__)

API_TITLE = "TutorHub API"
API_DESCRIPTION = """
Educational administration backend.

## Namespaces

- **/api/leaderboard**, **/api/tutor/leaderboard**, **/api/admin/leaderboard**
- **/api/reports/** - admin reports
- **/api/sociometric** - classroom analysis
- **/api/meetings/**, **/api/decisions/** - board decisions
- **/api/donors/**, **/api/donations/** - donor ledger
- **/api/social/** - content planning
- **/api/events/**, **/api/attendance/**, **/api/tutor/students**

Identity is forwarded by the upstream auth proxy.
"""


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a configured FastAPI application.

    Args:
        settings: Optional Settings instance. Without it, routes fall back
            to the process-wide settings and proxy headers are not trusted.

    Returns:
        Configured FastAPI application.

    Example:
        app = create_app()

        # For tests
        app = create_app(Settings(environment="dev", auth={"trust_proxy_headers": True}))
    """
    version = settings.app_version if settings else "0.1.0"

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=version,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = settings

    register_exception_handlers(app)
    _add_middleware(app, settings)
    _include_routers(app)

    @app.get(
        "/health",
        tags=["health"],
        response_model=HealthResponse,
        response_model_exclude_none=True,
    )
    async def health_check() -> HealthResponse:
        return HealthResponse()

    logger.info("TutorHub API application created (version=%s)", version)
    return app


def _add_middleware(app: FastAPI, settings: Settings | None) -> None:
    """Add middleware; the last one added runs first."""
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(
        ProxyAuthMiddleware,
        auth_settings=settings.auth if settings else AuthSettings(),
    )
    app.add_middleware(RequestIDMiddleware)

    allowed_origins = settings.cors_origins if settings else ["http://localhost:3000"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )


def _include_routers(app: FastAPI) -> None:
    for router in (
        leaderboard_router,
        reports_router,
        sociometric_router,
        meetings_router,
        donations_router,
        social_router,
        events_router,
        gamification_router,
        periods_router,
    ):
        app.include_router(router, prefix="/api")

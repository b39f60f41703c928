"""Pytest configuration and shared fixtures.

The suite runs without a database: services are exercised through their
pure functions or against an ``AsyncMock`` session, and routers are mounted
on a bare FastAPI app with the auth and session dependencies overridden.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tutorhub.api.dependencies import get_db_session
from tutorhub.api.i18n import reload_translations
from tutorhub.api.middleware import ErrorHandlerMiddleware, register_exception_handlers
from tutorhub.api.middleware.auth import AuthenticatedUser, require_authenticated_user
from tutorhub.core.settings import clear_settings_cache
from tutorhub.db.models.base import UserRole

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from fastapi import APIRouter


@pytest.fixture(autouse=True)
def clean_caches() -> Generator[None, None, None]:
    """Start every test with fresh settings and translations."""
    clear_settings_cache()
    reload_translations()
    yield
    clear_settings_cache()
    reload_translations()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def make_user(*roles: UserRole, **kwargs) -> AuthenticatedUser:
    return AuthenticatedUser(
        principal_id=kwargs.pop("principal_id", None) or uuid.uuid4(),
        roles=frozenset(roles),
        **kwargs,
    )


@pytest.fixture
def admin_user() -> AuthenticatedUser:
    return make_user(UserRole.ADMIN)


@pytest.fixture
def tutor_user() -> AuthenticatedUser:
    return make_user(UserRole.TUTOR)


@pytest.fixture
def student_user() -> AuthenticatedUser:
    return make_user(UserRole.STUDENT)


@pytest.fixture
def assistant_user() -> AuthenticatedUser:
    return make_user(UserRole.ASISTAN)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
@pytest.fixture
def mock_db_session() -> AsyncMock:
    """AsyncSession stand-in; ``add`` and ``delete`` behave like the real ones."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------
@pytest.fixture
def make_client(
    mock_db_session: AsyncMock,
) -> Callable[..., TestClient]:
    """Build a TestClient for routers with the given user.

    Usage:
        client = make_client(leaderboard_router, user=admin_user)
    """

    def _make(*routers: APIRouter, user: AuthenticatedUser | None = None) -> TestClient:
        app = FastAPI()
        register_exception_handlers(app)
        app.add_middleware(ErrorHandlerMiddleware)
        for router in routers:
            app.include_router(router, prefix="/api")

        if user is not None:
            app.dependency_overrides[require_authenticated_user] = lambda: user

        async def _session():
            yield mock_db_session

        app.dependency_overrides[get_db_session] = _session
        return TestClient(app)

    return _make

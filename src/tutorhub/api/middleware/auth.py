"""Delegated authentication.

TutorHub does not log users in itself. An upstream proxy authenticates the
user and forwards the principal in two headers:

- ``X-Auth-User-Id``: the user's UUID
- ``X-Auth-Roles``: comma-separated role names (ADMIN, TUTOR, STUDENT, ASISTAN)

ProxyAuthMiddleware trusts those headers only when
``TUTORHUB_AUTH__TRUST_PROXY_HEADERS`` is enabled. It never rejects a
request; route dependencies decide whether a user is required.
"""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from starlette.middleware.base import BaseHTTPMiddleware

from tutorhub.api.i18n import get_error_message
from tutorhub.db.models.base import UserRole

if TYPE_CHECKING:
    from collections.abc import Callable

    from starlette.responses import Response

    from tutorhub.core.config import AuthSettings

logger = logging.getLogger(__name__)

current_user_ctx: ContextVar[AuthenticatedUser | None] = ContextVar("current_user", default=None)

# Highest privilege first; decides the role services act with
ROLE_PRECEDENCE = (UserRole.ADMIN, UserRole.TUTOR, UserRole.ASISTAN, UserRole.STUDENT)


@dataclass
class AuthenticatedUser:
    """The principal forwarded by the auth proxy.

    Attributes:
        principal_id: User id.
        roles: Roles granted to the user.
        tutor_id: Optional tutor of a student, when the proxy forwards it.
        classroom_id: Optional classroom of the user.
        is_active: Whether the account is active.
        auth_method: How the identity was established.
        metadata: Extra data forwarded by the proxy.
    """

    principal_id: uuid.UUID
    roles: frozenset[UserRole] = field(default_factory=frozenset)
    tutor_id: uuid.UUID | None = None
    classroom_id: uuid.UUID | None = None
    is_active: bool = True
    auth_method: str = "proxy"
    metadata: dict[str, Any] = field(default_factory=dict)

    def has_role(self, role: UserRole) -> bool:
        return role in self.roles

    @property
    def role(self) -> UserRole:
        """Most privileged role; STUDENT when none is set."""
        for role in ROLE_PRECEDENCE:
            if role in self.roles:
                return role
        return UserRole.STUDENT

    @property
    def is_admin(self) -> bool:
        return UserRole.ADMIN in self.roles


def get_current_user() -> AuthenticatedUser | None:
    return current_user_ctx.get()


def set_current_user(user: AuthenticatedUser | None) -> None:
    current_user_ctx.set(user)


def parse_roles(raw: str | None) -> frozenset[UserRole]:
    """Parse a comma-separated role header, skipping unknown names."""
    roles = set()
    for name in (raw or "").split(","):
        name = name.strip().upper()
        if not name:
            continue
        try:
            roles.add(UserRole(name))
        except ValueError:
            logger.warning("Ignoring unknown role in proxy header: %s", name)
    return frozenset(roles)


def _optional_uuid(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class ProxyAuthMiddleware(BaseHTTPMiddleware):
    """Build the AuthenticatedUser from trusted proxy headers."""

    TUTOR_HEADER = "X-Auth-Tutor-Id"
    CLASSROOM_HEADER = "X-Auth-Classroom-Id"

    def __init__(self, app: Any, *, auth_settings: AuthSettings) -> None:
        super().__init__(app)
        self._settings = auth_settings

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        set_current_user(None)

        if self._settings.trust_proxy_headers:
            user = self._user_from_headers(request)
            if user is not None:
                set_current_user(user)
                request.state.user = user

        return await call_next(request)

    def _user_from_headers(self, request: Request) -> AuthenticatedUser | None:
        raw_id = request.headers.get(self._settings.user_id_header)
        if not raw_id:
            return None

        try:
            principal_id = uuid.UUID(raw_id)
        except ValueError:
            logger.warning(
                "Rejected malformed proxy user id",
                extra={"path": request.url.path},
            )
            return None

        return AuthenticatedUser(
            principal_id=principal_id,
            roles=parse_roles(request.headers.get(self._settings.roles_header)),
            tutor_id=_optional_uuid(request.headers.get(self.TUTOR_HEADER)),
            classroom_id=_optional_uuid(request.headers.get(self.CLASSROOM_HEADER)),
        )


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


async def require_authenticated_user(request: Request) -> AuthenticatedUser:
    """Dependency that requires an authenticated user.

    Raises:
        HTTPException: 401 when no identity was forwarded, 403 when the
            account is inactive.
    """
    user = get_current_user()
    if not user and hasattr(request.state, "user"):
        user = request.state.user

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=get_error_message("unauthorized"),
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=get_error_message("inactive_account"),
        )
    return user


def require_role(*roles: UserRole) -> Callable:
    """Factory for dependencies that require one of ``roles``.

    Usage:
        @router.get("/reports/attendance-alerts")
        async def alerts(user: Annotated[AuthenticatedUser, Depends(require_role(UserRole.ADMIN))]):
            ...
    """
    allowed = frozenset(roles)

    async def _check_role(
        user: Annotated[AuthenticatedUser, Depends(require_authenticated_user)],
    ) -> AuthenticatedUser:
        if not (user.roles & allowed):
            logger.warning(
                "Role check failed",
                extra={
                    "user_id": str(user.principal_id),
                    "required": sorted(r.value for r in allowed),
                },
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=get_error_message("forbidden"),
            )
        return user

    return _check_role


"""TutorHub API middleware.

- Request ID tracking
- Error envelope formatting
- Delegated (proxy header) authentication
"""

from tutorhub.api.middleware.auth import (
    AuthenticatedUser,
    ProxyAuthMiddleware,
    get_current_user,
    require_authenticated_user,
    require_role,
    set_current_user,
)
from tutorhub.api.middleware.errors import ErrorHandlerMiddleware, register_exception_handlers
from tutorhub.api.middleware.request_id import RequestIDMiddleware

__all__ = [
    "AuthenticatedUser",
    "ErrorHandlerMiddleware",
    "ProxyAuthMiddleware",
    "RequestIDMiddleware",
    "get_current_user",
    "register_exception_handlers",
    "require_authenticated_user",
    "require_role",
    "set_current_user",
]

"""Error handling for the JSON API.

Every failure reaches the client in the same envelope as a successful
action, with ``data`` null and a Turkish ``error`` message:

    {"data": null, "error": "Karar bulunamadı", "code": "decision_not_found",
     "request_id": "..."}

Service-layer ``TutorHubError`` subclasses carry their own message and
status. HTTP and request-validation errors raised by FastAPI are translated
through ``locales/tr.json``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from tutorhub.api.i18n import get_error_message
from tutorhub.api.middleware.request_id import get_request_id
from tutorhub.core.errors import TutorHubError

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "validation_error",
}


class APIError(Exception):
    """Error raised directly by a router, outside any service."""

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int = 400,
        detail: dict[str, Any] | None = None,
    ) -> None:
        self.error = error
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ConflictError(APIError):
    """State conflict (409)."""

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(error="conflict", message=message, status_code=409, detail=detail)


def build_error_response(
    error: str,
    message: str,
    status_code: int,
    detail: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the error envelope.

    Args:
        error: Machine-readable error code.
        message: Turkish message shown to the user.
        status_code: HTTP status code.
        detail: Optional structured details.
        headers: Extra response headers.
    """
    body: dict[str, Any] = {"data": None, "error": message, "code": error}

    request_id = get_request_id()
    if request_id:
        body["request_id"] = request_id
    if detail:
        body["detail"] = detail

    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _reason_phrase(status_code: int) -> str | None:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return None


def _http_error_response(status_code: int, detail: Any, headers: dict[str, str] | None) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(status_code, "http_error")
    # Starlette's own details are the English reason phrase
    if isinstance(detail, str) and detail and detail != _reason_phrase(status_code):
        message = detail
    else:
        message = get_error_message(code)
    return build_error_response(code, message, status_code, headers=headers)


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP exceptions (including auth dependency failures) as the envelope."""
    return _http_error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))


async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/query validation failures as the envelope."""
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return build_error_response(
        "validation_error",
        get_error_message("validation_error"),
        422,
        detail={"errors": errors},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers for errors FastAPI handles itself."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert exceptions escaping the routers into the error envelope.

    Handles:
    - TutorHubError: expected service failures with a Turkish message
    - APIError: router-level failures
    - HTTPException: FastAPI HTTP errors not caught by a handler
    - ValidationError: pydantic failures outside request parsing
    - anything else: logged, generic 500
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        try:
            return await call_next(request)
        except TutorHubError as exc:
            log = logger.exception if exc.status_code >= 500 else logger.warning
            log(
                "Request failed: %s %s -> %s",
                request.method,
                request.url.path,
                exc.code,
                extra={"error_code": exc.code, "status_code": exc.status_code},
            )
            return build_error_response(exc.code, exc.message, exc.status_code, exc.detail)
        except APIError as exc:
            logger.warning(
                "Request rejected: %s %s -> %s", request.method, request.url.path, exc.error
            )
            return build_error_response(exc.error, exc.message, exc.status_code, exc.detail)
        except HTTPException as exc:
            return _http_error_response(exc.status_code, exc.detail, exc.headers)
        except ValidationError as exc:
            logger.warning("Validation failed: %s %s", request.method, request.url.path)
            return build_error_response(
                "validation_error",
                get_error_message("validation_error"),
                422,
                detail={"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]},
            )
        except Exception:
            logger.exception(
                "Unexpected error processing request: %s %s",
                request.method,
                request.url.path,
            )
            return build_error_response(
                "internal_error",
                get_error_message("internal_error"),
                500,
            )

"""Response envelope shared by every JSON endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """Result envelope.

    Success: ``data`` holds the payload and ``error`` is null. Failure:
    ``data`` is null and ``error`` holds a Turkish message (see the error
    middleware, which also adds ``code`` and ``request_id``).
    """

    data: Any = Field(None, description="Payload of a successful action")
    error: str | None = Field(None, description="Turkish error message, null on success")
    message: str | None = Field(None, description="Optional Turkish success message")


class ErrorResponse(BaseModel):
    """Documentation model for the error envelope."""

    data: None = None
    error: str = Field(..., description="Turkish error message")
    code: str = Field(..., description="Machine-readable error code")
    request_id: str | None = Field(None, description="X-Request-ID of the failed request")
    detail: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    namespace: str | None = None


def ok(data: Any = None, message: str | None = None) -> ActionResult:
    return ActionResult(data=data, message=message)


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Authentication required", "model": ErrorResponse},
    403: {"description": "Insufficient role", "model": ErrorResponse},
    404: {"description": "Not found", "model": ErrorResponse},
}

"""Tests for the API middleware stack.

Tests cover:
- Error envelope for service errors, HTTP errors, validation and crashes
- Request ID propagation
- Proxy header authentication and role checks
"""

from __future__ import annotations

import logging
import uuid
from typing import Annotated
from unittest.mock import MagicMock

import pytest
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.testclient import TestClient
from pydantic import BaseModel

from tutorhub.api.middleware import (
    AuthenticatedUser,
    ErrorHandlerMiddleware,
    ProxyAuthMiddleware,
    RequestIDMiddleware,
    register_exception_handlers,
    require_authenticated_user,
    require_role,
    set_current_user,
)
from tutorhub.api.middleware.auth import parse_roles
from tutorhub.api.middleware.errors import ConflictError
from tutorhub.api.middleware.request_id import (
    RequestIDLogFilter,
    request_id_ctx,
    resolve_request_id,
)
from tutorhub.core.config import AuthSettings
from tutorhub.db.models.base import UserRole
from tutorhub.services.decisions import DecisionNotFoundError


class Payload(BaseModel):
    title: str


def build_app(trust_proxy_headers: bool = True) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(
        ProxyAuthMiddleware, auth_settings=AuthSettings(trust_proxy_headers=trust_proxy_headers)
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/service-error")
    async def service_error():
        raise DecisionNotFoundError()

    @app.get("/api-error")
    async def api_error():
        raise ConflictError("Çakışma var")

    @app.get("/crash")
    async def crash():
        raise RuntimeError("secret internals")

    @app.post("/validate")
    async def validate(body: Payload):
        return {"title": body.title}

    @app.get("/me")
    async def me(user: Annotated[AuthenticatedUser, Depends(require_authenticated_user)]):
        return {"id": str(user.principal_id), "role": user.role.value}

    @app.get("/admin-only")
    async def admin_only(user: Annotated[AuthenticatedUser, Depends(require_role(UserRole.ADMIN))]):
        return {"ok": True}

    return app


@pytest.fixture
def client() -> TestClient:
    return TestClient(build_app(), raise_server_exceptions=False)


class TestErrorEnvelope:
    """Every failure uses the {data, error, code} envelope."""

    def test_service_error(self, client: TestClient) -> None:
        response = client.get("/service-error")
        assert response.status_code == 404
        body = response.json()
        assert body["data"] is None
        assert body["error"] == "Karar bulunamadı"
        assert body["code"] == "decision_not_found"
        assert body["request_id"] == response.headers["X-Request-ID"]

    def test_api_error(self, client: TestClient) -> None:
        response = client.get("/api-error")
        assert response.status_code == 409
        assert response.json()["error"] == "Çakışma var"

    def test_unexpected_error_hides_details(self, client: TestClient) -> None:
        response = client.get("/crash")
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Beklenmeyen bir hata oluştu"
        assert "secret" not in response.text

    def test_request_validation(self, client: TestClient) -> None:
        response = client.post("/validate", json={})
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "validation_error"
        assert body["error"] == "Gönderilen veriler geçersiz"
        assert body["detail"]["errors"][0]["loc"] == ["body", "title"]

    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "Kayıt bulunamadı"


class TestRequestID:
    def test_generated(self, client: TestClient) -> None:
        response = client.post("/validate", json={"title": "x"})
        uuid.UUID(response.headers["X-Request-ID"])

    def test_propagated(self, client: TestClient) -> None:
        response = client.post("/validate", json={"title": "x"}, headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.parametrize("incoming", [None, "", "has space", "x" * 129, "evil\u00e7"])
    def test_malformed_replaced(self, incoming: str | None) -> None:
        uuid.UUID(resolve_request_id(incoming))

    def test_log_filter(self) -> None:
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
        assert RequestIDLogFilter().filter(record) is True
        assert record.request_id == "-"

        token = request_id_ctx.set("req-1")
        try:
            RequestIDLogFilter().filter(record)
        finally:
            request_id_ctx.reset(token)
        assert record.request_id == "req-1"


class TestParseRoles:
    def test_parse(self) -> None:
        assert parse_roles("admin, TUTOR") == frozenset({UserRole.ADMIN, UserRole.TUTOR})

    def test_unknown_and_empty_skipped(self) -> None:
        assert parse_roles("STUDENT,,wizard") == frozenset({UserRole.STUDENT})
        assert parse_roles(None) == frozenset()


class TestAuthenticatedUser:
    def test_role_precedence(self) -> None:
        user = AuthenticatedUser(
            principal_id=uuid.uuid4(), roles=frozenset({UserRole.STUDENT, UserRole.TUTOR})
        )
        assert user.role is UserRole.TUTOR
        assert user.is_admin is False

    def test_no_roles_defaults_to_student(self) -> None:
        assert AuthenticatedUser(principal_id=uuid.uuid4()).role is UserRole.STUDENT


class TestProxyAuth:
    """Tests for ProxyAuthMiddleware and the auth dependencies."""

    def test_missing_identity_is_401(self, client: TestClient) -> None:
        response = client.get("/me")
        assert response.status_code == 401
        assert response.json()["error"] == "Oturum açmanız gerekiyor"
        assert response.json()["code"] == "unauthorized"

    def test_identity_from_headers(self, client: TestClient) -> None:
        user_id = uuid.uuid4()
        response = client.get(
            "/me", headers={"X-Auth-User-Id": str(user_id), "X-Auth-Roles": "ADMIN,TUTOR"}
        )
        assert response.status_code == 200
        assert response.json() == {"id": str(user_id), "role": "ADMIN"}

    def test_malformed_user_id_ignored(self, client: TestClient) -> None:
        response = client.get("/me", headers={"X-Auth-User-Id": "not-a-uuid"})
        assert response.status_code == 401

    def test_untrusted_headers_ignored(self) -> None:
        client = TestClient(build_app(trust_proxy_headers=False))
        response = client.get("/me", headers={"X-Auth-User-Id": str(uuid.uuid4())})
        assert response.status_code == 401

    def test_role_check(self, client: TestClient) -> None:
        headers = {"X-Auth-User-Id": str(uuid.uuid4()), "X-Auth-Roles": "TUTOR"}
        response = client.get("/admin-only", headers=headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Bu işlem için yetkiniz yok"

        headers["X-Auth-Roles"] = "ADMIN"
        assert client.get("/admin-only", headers=headers).status_code == 200

    async def test_inactive_user_is_403(self) -> None:
        set_current_user(AuthenticatedUser(principal_id=uuid.uuid4(), is_active=False))
        try:
            with pytest.raises(HTTPException) as exc_info:
                await require_authenticated_user(MagicMock(spec=Request))
        finally:
            set_current_user(None)
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Hesabınız aktif değil"

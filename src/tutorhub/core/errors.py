"""Base exception for service-layer failures.

Services raise subclasses of TutorHubError with a Turkish, user-facing
message. The API error middleware maps them onto the result envelope
using ``code`` and ``status_code``.
"""

from __future__ import annotations

from typing import Any, ClassVar


class TutorHubError(Exception):
    """Base class for expected, user-visible service errors.

    Attributes:
        message: Turkish message shown to the user.
        code: Machine-readable error code.
        status_code: HTTP status the API layer should use.
        detail: Optional structured details.
    """

    code: ClassVar[str] = "error"
    status_code: ClassVar[int] = 400
    default_message: ClassVar[str] = "İşlem gerçekleştirilemedi"

    def __init__(self, message: str | None = None, *, detail: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class NotFound(TutorHubError):
    code = "not_found"
    status_code = 404
    default_message = "Kayıt bulunamadı"


class Forbidden(TutorHubError):
    code = "forbidden"
    status_code = 403
    default_message = "Yetkisiz erişim"


class Conflict(TutorHubError):
    code = "conflict"
    status_code = 409
    default_message = "Kayıt zaten mevcut"


class InvalidInput(TutorHubError):
    code = "validation_error"
    status_code = 400
    default_message = "Geçersiz veri"

"""Tests for the Turkish message catalogue.

These tests verify:
- The locale file exists and is valid JSON
- Dot-notation lookup and missing-key fallback
- Interpolation
- Every HTTP error code used by the middleware has a message
"""

from __future__ import annotations

import json

import pytest

from tutorhub.api.i18n import (
    DEFAULT_LANGUAGE,
    LOCALES_DIR,
    get_error_message,
    get_message,
    reload_translations,
    translate,
)
from tutorhub.api.middleware.errors import HTTP_ERROR_CODES


class TestLocaleFile:
    def test_turkish_locale_is_valid_json(self) -> None:
        path = LOCALES_DIR / f"{DEFAULT_LANGUAGE}.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["_meta"]["language"] == "tr"
        assert "errors" in data
        assert "messages" in data

    @pytest.mark.parametrize("code", sorted(set(HTTP_ERROR_CODES.values())))
    def test_http_error_codes_translated(self, code: str) -> None:
        assert get_error_message(code) != f"errors.{code}"


class TestTranslate:
    """Tests for translate and its helpers."""

    def test_nested_lookup(self) -> None:
        assert translate("errors.not_found") == "Kayıt bulunamadı"

    def test_missing_key_returns_key(self) -> None:
        assert translate("errors.does_not_exist") == "errors.does_not_exist"

    def test_section_is_not_a_message(self) -> None:
        assert translate("errors") == "errors"

    def test_unknown_language_falls_back_to_turkish(self) -> None:
        assert translate("errors.forbidden", lang="de") == "Bu işlem için yetkiniz yok"

    def test_success_message(self) -> None:
        assert get_message("event_joined") == "Etkinliğe başarıyla katıldınız"

    def test_interpolation_without_placeholders(self) -> None:
        assert translate("errors.not_found", name="x") == "Kayıt bulunamadı"

    def test_reload_clears_cache(self) -> None:
        translate("errors.not_found")
        reload_translations()
        assert translate("errors.not_found") == "Kayıt bulunamadı"

"""Singleton settings accessor for TutorHub configuration.

Usage:
    from tutorhub.core.settings import get_settings

    settings = get_settings()
    threshold = settings.reports.attendance_alert_threshold

The settings are loaded once and cached. To reload settings (e.g., in tests),
use clear_settings_cache().
"""

from __future__ import annotations

import logging
from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from tutorhub.core.config import (
    ConfigValidationError,
    Settings,
    validate_settings,
)

logger = logging.getLogger(__name__)


def _describe(error: ValidationError) -> str:
    return "\n".join(
        f"  - {'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load, check and cache the settings; exit the process when they are invalid."""
    try:
        settings = Settings()  # type: ignore[call-arg]
        validate_settings(settings)
    except ValidationError as e:
        logger.critical("Invalid TUTORHUB_* environment:\n%s", _describe(e))
        raise SystemExit(1) from e
    except ConfigValidationError as e:
        logger.critical("Invalid configuration for %s: %s", e.field or "settings", e.message)
        raise SystemExit(1) from e

    logger.info(
        "Settings loaded (environment=%s, timezone=%s)",
        settings.environment.value,
        settings.timezone,
    )
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Example:
        def test_something(monkeypatch):
            monkeypatch.setenv("TUTORHUB_ENVIRONMENT", "staging")
            clear_settings_cache()
            settings = get_settings()
    """
    get_settings.cache_clear()
    logger.debug("Settings cache cleared")


def get_settings_safe() -> Settings | None:
    """Get settings, returning None instead of exiting when they cannot load."""
    try:
        return get_settings()
    except SystemExit:
        return None


def get_timezone() -> ZoneInfo:
    """Timezone used for calendar boundaries (week start, month start)."""
    settings = get_settings_safe()
    return ZoneInfo(settings.timezone if settings else "Europe/Istanbul")

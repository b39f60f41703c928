"""TutorHub core module.

Shared components used across all services:
- Configuration management
- Settings accessor
- Base error type for service failures
"""

from tutorhub.core.config import (
    AuthSettings,
    ConfigValidationError,
    DatabaseSettings,
    Environment,
    ReportSettings,
    Settings,
)
from tutorhub.core.errors import TutorHubError
from tutorhub.core.settings import (
    clear_settings_cache,
    get_settings,
    get_settings_safe,
    get_timezone,
)

__all__ = [
    "AuthSettings",
    "ConfigValidationError",
    "DatabaseSettings",
    "Environment",
    "ReportSettings",
    "Settings",
    "TutorHubError",
    "clear_settings_cache",
    "get_settings",
    "get_settings_safe",
    "get_timezone",
]

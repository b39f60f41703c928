"""Turkish message catalogue.

Messages live in ``locales/tr.json`` and are addressed with dot notation
(``errors.not_found``). A missing key falls back to the key itself, so a
typo shows up in the UI instead of raising.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "tr"
SUPPORTED_LANGUAGES = (DEFAULT_LANGUAGE,)

LOCALES_DIR = Path(__file__).parent.parent / "locales"


def _flatten(section: dict[str, Any], prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for name, value in section.items():
        key = f"{prefix}{name}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{key}."))
        elif isinstance(value, str):
            flat[key] = value
    return flat


@lru_cache(maxsize=len(SUPPORTED_LANGUAGES))
def _catalogue(lang: str) -> dict[str, str]:
    """Dotted key -> message for ``lang``; empty when the file is unusable."""
    locale_file = LOCALES_DIR / f"{lang}.json"
    try:
        raw = json.loads(locale_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Locale file not found: %s", locale_file)
        return {}
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Failed to load locale file %s: %s", locale_file, e)
        return {}

    raw.pop("_meta", None)
    return _flatten(raw)


def reload_translations() -> None:
    """Forget loaded catalogues; the next lookup reads the files again."""
    _catalogue.cache_clear()


def translate(key: str, lang: str = DEFAULT_LANGUAGE, **kwargs: Any) -> str:
    """Look up ``key`` and interpolate ``kwargs``.

    Unsupported languages use the Turkish catalogue.

    Example:
        >>> translate("errors.not_found")
        'Kayıt bulunamadı'
    """
    if lang not in SUPPORTED_LANGUAGES:
        lang = DEFAULT_LANGUAGE

    value = _catalogue(lang).get(key)
    if value is None:
        logger.debug("Missing translation for key '%s' in language '%s'", key, lang)
        return key

    if not kwargs:
        return value
    try:
        return value.format(**kwargs)
    except KeyError as e:
        logger.warning("Missing interpolation variable %s for key '%s'", e, key)
        return value


def get_error_message(error_code: str, lang: str = DEFAULT_LANGUAGE) -> str:
    return translate(f"errors.{error_code}", lang)


def get_message(key: str, **kwargs: Any) -> str:
    """Success message from the ``messages`` section."""
    return translate(f"messages.{key}", **kwargs)

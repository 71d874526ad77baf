"""
OS language auto-detection for msgcatalog.

Detects the system language from environment variables:
- LANGUAGE
- LC_ALL
- LC_MESSAGES
- LANG
"""

from __future__ import annotations

import os

from msgcatalog.catalog.plural import LANGUAGE_PLURALS, language_candidates, normalize_language

DEFAULT_LANGUAGE = "en"

# Environment variables to check, in priority order
LOCALE_ENV_VARS = ["LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG"]


def _parse_locale(locale_string: str) -> str | None:
    """
    Parse a locale string and extract a known language tag.

    Handles formats like:
    - en_US.UTF-8
    - pt-BR
    - fr.UTF-8
    - sr_RS@latin (modifier is dropped)

    Args:
        locale_string: Raw locale string from environment

    Returns:
        ``ll_CC`` when that regional variant has its own plural rule,
        ``ll`` when only the base language is known, None otherwise
    """
    if not locale_string or not locale_string.strip():
        return None

    # C/POSIX locales mean untranslated messages
    if locale_string.strip().lower() in ("c", "posix") or locale_string.lower().startswith("c."):
        return DEFAULT_LANGUAGE

    for candidate in language_candidates(locale_string):
        if candidate in LANGUAGE_PLURALS:
            return candidate
    return None


def detect_os_language() -> str:
    """
    Detect the OS language from environment variables.

    The first value that maps to a known language wins. LANGUAGE may
    list several languages separated by ':'.

    Returns:
        Detected language tag, or 'en' as fallback

    Examples:
        With LANG=es_ES.UTF-8: returns 'es'
        With LC_ALL=pt_BR.UTF-8: returns 'pt_BR'
        With LANGUAGE=de:fr: returns 'de'
    """
    for var in LOCALE_ENV_VARS:
        value = os.environ.get(var, "")
        if not value:
            continue

        parts = value.split(":") if var == "LANGUAGE" else [value]
        for part in parts:
            parsed = _parse_locale(part)
            if parsed:
                return parsed

    return DEFAULT_LANGUAGE


def get_os_locale_info() -> dict[str, str | None]:
    """
    Get detailed OS locale information for debugging.

    Returns:
        Dictionary with all relevant locale environment variables
    """
    info: dict[str, str | None] = {var: os.environ.get(var) for var in LOCALE_ENV_VARS}
    info["normalized"] = normalize_language(os.environ.get("LANG", "")) or None
    info["detected_language"] = detect_os_language()
    return info

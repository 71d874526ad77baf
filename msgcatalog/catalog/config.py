"""
Catalog configuration persistence for msgcatalog.

Handles:
- Reading/writing preferences to ~/.msgcatalog/preferences.yaml
- Language validation against the known plural rules
- Locale directory and text domain defaults
- Thread-safe and process-safe file access

Concurrency Safety:
- Thread locks (threading.Lock) protect against races within a single process
- File locks (fcntl.flock) protect against races between processes
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from pathlib import Path
from typing import Any

import yaml

from msgcatalog.catalog.detector import DEFAULT_LANGUAGE, detect_os_language
from msgcatalog.catalog.plural import LANGUAGE_PLURALS, PluralRule, normalize_language

logger = logging.getLogger(__name__)

LANGUAGE_ENV = "MSGCATALOG_LANGUAGE"
LOCALEDIR_ENV = "MSGCATALOG_LOCALEDIR"

DEFAULT_LOCALEDIR = "locale"
DEFAULT_DOMAIN = "messages"


def is_known_language(language: str) -> bool:
    """Check whether a language tag (or its base language) has a plural rule."""
    normalized = normalize_language(language)
    return bool(normalized) and (
        normalized in LANGUAGE_PLURALS or normalized.partition("_")[0] in LANGUAGE_PLURALS
    )


class CatalogConfig:
    """
    Manages catalog preference persistence.

    Preferences are stored in ~/.msgcatalog/preferences.yaml.

    Language resolution order:
    1. MSGCATALOG_LANGUAGE environment variable
    2. User preference in ~/.msgcatalog/preferences.yaml
    3. OS-detected language
    4. Default (English)

    Locale directory resolution order:
    1. MSGCATALOG_LOCALEDIR environment variable
    2. User preference
    3. ./locale
    """

    def __init__(self) -> None:
        """Initialize the configuration manager."""
        self.config_dir = Path.home() / ".msgcatalog"
        self.preferences_file = self.config_dir / "preferences.yaml"
        self._thread_lock = threading.Lock()

        self.config_dir.mkdir(mode=0o700, exist_ok=True)

    def _acquire_file_lock(self, file_obj: Any, exclusive: bool = False) -> None:
        """
        Acquire a file lock for concurrent access.

        Uses fcntl.flock on Unix systems. On Windows only the thread lock applies.

        Args:
            file_obj: Open file object to lock
            exclusive: Exclusive lock for writing, shared lock for reading
        """
        if sys.platform != "win32":
            import fcntl

            lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
            try:
                fcntl.flock(file_obj.fileno(), lock_type)
            except OSError as e:
                logger.debug(f"Could not acquire file lock: {e}")

    def _release_file_lock(self, file_obj: Any) -> None:
        if sys.platform != "win32":
            import fcntl

            try:
                fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)
            except OSError as e:
                logger.debug(f"Could not release file lock: {e}")

    def _load_preferences(self) -> dict[str, Any]:
        """
        Load preferences from file with proper locking.

        Returns:
            Dictionary of preferences, or empty dict when the file is
            missing, empty, malformed or not a mapping
        """
        try:
            with self._thread_lock:
                if not self.preferences_file.exists():
                    return {}

                with open(self.preferences_file, encoding="utf-8") as f:
                    self._acquire_file_lock(f, exclusive=False)
                    try:
                        content = f.read()
                        if not content.strip():
                            return {}

                        data = yaml.safe_load(content)
                        if data is None:
                            return {}
                        if not isinstance(data, dict):
                            logger.warning(
                                f"Preferences file contains invalid type: {type(data).__name__}, "
                                "expected dict. Using defaults."
                            )
                            return {}

                        return data
                    finally:
                        self._release_file_lock(f)

        except yaml.YAMLError as e:
            logger.warning(f"Malformed YAML in preferences file: {e}. Using defaults.")
            return {}
        except OSError as e:
            logger.debug(f"Could not read preferences file: {e}")
            return {}

    def _save_preferences(self, preferences: dict[str, Any]) -> None:
        """
        Save preferences atomically (temp file + rename) with an exclusive lock.

        Raises:
            RuntimeError: If preferences cannot be saved
        """
        try:
            with self._thread_lock:
                temp_file = self.preferences_file.with_suffix(".yaml.tmp")

                with open(temp_file, "w", encoding="utf-8") as f:
                    self._acquire_file_lock(f, exclusive=True)
                    try:
                        yaml.safe_dump(preferences, f, default_flow_style=False, allow_unicode=True)
                    finally:
                        self._release_file_lock(f)

                temp_file.replace(self.preferences_file)

        except OSError as e:
            raise RuntimeError(f"Failed to save preferences: {e}") from e

    def _saved_string(self, preferences: dict[str, Any], key: str) -> str:
        value = preferences.get(key, "")
        return value.strip() if isinstance(value, str) else ""

    def get_language(self) -> str:
        """
        Get the effective language.

        Returns:
            Normalized language tag
        """
        env_lang = os.environ.get(LANGUAGE_ENV, "")
        if is_known_language(env_lang):
            return normalize_language(env_lang)

        saved_lang = self._saved_string(self._load_preferences(), "language")
        if is_known_language(saved_lang):
            return normalize_language(saved_lang)

        return detect_os_language()

    def set_language(self, language: str) -> None:
        """
        Save the language preference.

        Raises:
            ValueError: If the language has no known plural rule
        """
        if not is_known_language(language):
            raise ValueError(
                f"Unsupported language: {language}. "
                f"Supported: {', '.join(sorted(LANGUAGE_PLURALS))}"
            )

        old_language = self.get_language()
        preferences = self._load_preferences()
        preferences["language"] = normalize_language(language)
        self._save_preferences(preferences)
        logger.debug(f"Language preference changed: {old_language} -> {preferences['language']}")

    def clear_language(self) -> None:
        """Clear the saved language preference (use auto-detection instead)."""
        preferences = self._load_preferences()
        if "language" in preferences:
            del preferences["language"]
            self._save_preferences(preferences)
            logger.debug("Language preference cleared")

    def get_localedir(self) -> Path:
        """Get the directory searched for catalog files."""
        env_dir = os.environ.get(LOCALEDIR_ENV, "").strip()
        if env_dir:
            return Path(env_dir).expanduser()

        saved_dir = self._saved_string(self._load_preferences(), "localedir")
        if saved_dir:
            return Path(saved_dir).expanduser()

        return Path(DEFAULT_LOCALEDIR)

    def set_localedir(self, localedir: str | Path) -> None:
        preferences = self._load_preferences()
        preferences["localedir"] = str(localedir)
        self._save_preferences(preferences)

    def get_domain(self) -> str:
        """Get the default text domain."""
        return self._saved_string(self._load_preferences(), "domain") or DEFAULT_DOMAIN

    def get_language_info(self) -> dict[str, Any]:
        """
        Get detailed language configuration info.

        Returns:
            Dictionary with the effective language, where it came from and
            the plural rule it implies
        """
        env_lang = os.environ.get(LANGUAGE_ENV, "")
        saved_lang = self._saved_string(self._load_preferences(), "language")
        detected_lang = detect_os_language()

        if is_known_language(env_lang):
            effective_lang = normalize_language(env_lang)
            source = "environment"
        elif is_known_language(saved_lang):
            effective_lang = normalize_language(saved_lang)
            source = "config"
        elif detected_lang != DEFAULT_LANGUAGE:
            effective_lang = detected_lang
            source = "auto-detected"
        else:
            effective_lang = DEFAULT_LANGUAGE
            source = "default"

        return {
            "language": effective_lang,
            "source": source,
            "plural_forms": PluralRule.for_language(effective_lang).header,
            "env_override": env_lang or None,
            "saved_preference": saved_lang or None,
            "detected_language": detected_lang,
        }

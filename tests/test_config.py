"""
Tests for configuration persistence and OS language detection.

Tests cover:
- Preference file handling (missing, malformed, wrong types)
- Language resolution order
- Locale directory and domain settings
- Auto-detection from locale environment variables
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch


class TestCatalogConfig(unittest.TestCase):
    """Tests for preference persistence."""

    def setUp(self):
        """Set up test fixtures with temp directory."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_home = Path(self.temp_dir.name)
        self.prefs_file = self.temp_home / ".msgcatalog" / "preferences.yaml"

    def tearDown(self):
        """Clean up temp directory."""
        self.temp_dir.cleanup()

    def _write_prefs(self, content):
        self.prefs_file.parent.mkdir(parents=True, exist_ok=True)
        self.prefs_file.write_text(content)

    def test_malformed_yaml_uses_default(self):
        """Test that malformed YAML doesn't crash and falls back to English."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                config = CatalogConfig()
                self._write_prefs("invalid: yaml: content: [broken")

                self.assertEqual(config.get_language(), "en")

    def test_empty_and_whitespace_files(self):
        """Test that empty preference files are treated as no preferences."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                config = CatalogConfig()
                for content in ("", "   \n\t\n  "):
                    self._write_prefs(content)
                    self.assertEqual(config.get_language(), "en")

    def test_invalid_root_type(self):
        """Test that a YAML list or string root is ignored."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                config = CatalogConfig()
                for content in ("- item1\n- item2", "just a plain string"):
                    self._write_prefs(content)
                    self.assertEqual(config.get_language(), "en")

    def test_invalid_language_value(self):
        """Test that non-string or null language values are ignored."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                config = CatalogConfig()
                for content in ("language: 123", "language: null", "language: klingon"):
                    self._write_prefs(content)
                    self.assertEqual(config.get_language(), "en")

    def test_set_and_get_language(self):
        """Test that a saved language persists across instances."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                CatalogConfig().set_language("pt-br")

                self.assertEqual(CatalogConfig().get_language(), "pt_BR")

    def test_set_invalid_language_raises(self):
        """Test that languages without a plural rule are rejected."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            from msgcatalog.catalog.config import CatalogConfig

            config = CatalogConfig()

            with self.assertRaises(ValueError) as context:
                config.set_language("invalid")

            self.assertIn("Unsupported language", str(context.exception))

    def test_env_variable_override(self):
        """Test MSGCATALOG_LANGUAGE takes precedence over the saved preference."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {"MSGCATALOG_LANGUAGE": "fr"}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                config = CatalogConfig()
                config.set_language("de")

                self.assertEqual(config.get_language(), "fr")

    def test_os_detection_used_without_preference(self):
        """Test the OS locale is used when nothing is saved."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {"LANG": "ru_RU.UTF-8"}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                self.assertEqual(CatalogConfig().get_language(), "ru")

    def test_clear_language(self):
        """Test clearing the saved preference."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                config = CatalogConfig()
                config.set_language("de")
                self.assertEqual(config.get_language(), "de")

                config.clear_language()
                self.assertEqual(config.get_language(), "en")

    def test_language_info(self):
        """Test language info reports the source and plural rule."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                config = CatalogConfig()
                config.set_language("es")
                info = config.get_language_info()

                self.assertEqual(info["language"], "es")
                self.assertEqual(info["source"], "config")
                self.assertEqual(info["plural_forms"], "nplurals=2; plural=n != 1;")
                self.assertIsNone(info["env_override"])

    def test_language_info_default(self):
        """Test language info without any preference."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                info = CatalogConfig().get_language_info()

                self.assertEqual(info["language"], "en")
                self.assertEqual(info["source"], "default")

    def test_localedir_resolution(self):
        """Test locale directory comes from env, then preferences, then default."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            with patch.dict(os.environ, {}, clear=True):
                from msgcatalog.catalog.config import CatalogConfig

                config = CatalogConfig()
                self.assertEqual(config.get_localedir(), Path("locale"))

                config.set_localedir("/srv/app/locale")
                self.assertEqual(config.get_localedir(), Path("/srv/app/locale"))

            with patch.dict(os.environ, {"MSGCATALOG_LOCALEDIR": "/opt/locale"}, clear=True):
                self.assertEqual(config.get_localedir(), Path("/opt/locale"))

    def test_domain(self):
        """Test the default and saved text domain."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            from msgcatalog.catalog.config import CatalogConfig

            config = CatalogConfig()
            self.assertEqual(config.get_domain(), "messages")

            self._write_prefs("domain: myapp\n")
            self.assertEqual(config.get_domain(), "myapp")

    def test_save_failure_raises_runtime_error(self):
        """Test write failures surface as RuntimeError."""
        with patch("pathlib.Path.home", return_value=self.temp_home):
            from msgcatalog.catalog.config import CatalogConfig

            config = CatalogConfig()

            with patch("builtins.open", side_effect=PermissionError("denied")):
                with self.assertRaises(RuntimeError):
                    config._save_preferences({"language": "es"})


class TestLanguageDetector(unittest.TestCase):
    """Tests for OS language auto-detection."""

    def test_detect_from_lang(self):
        """Test detection from the LANG variable."""
        from msgcatalog.catalog.detector import detect_os_language

        for value, expected in (
            ("en_US.UTF-8", "en"),
            ("es_ES.UTF-8", "es"),
            ("ja_JP.UTF-8", "ja"),
            ("pt_BR.UTF-8", "pt_BR"),
            ("sr_RS@latin", "sr"),
        ):
            with patch.dict(os.environ, {"LANG": value}, clear=True):
                self.assertEqual(detect_os_language(), expected, value)

    def test_lc_all_takes_precedence(self):
        """Test that LC_ALL takes precedence over LANG."""
        from msgcatalog.catalog.detector import detect_os_language

        with patch.dict(os.environ, {"LANG": "en_US.UTF-8", "LC_ALL": "fr_FR.UTF-8"}, clear=True):
            self.assertEqual(detect_os_language(), "fr")

    def test_language_list(self):
        """Test the first known entry of LANGUAGE wins."""
        from msgcatalog.catalog.detector import detect_os_language

        with patch.dict(
            os.environ, {"LANGUAGE": "xx:de:fr", "LANG": "en_US.UTF-8"}, clear=True
        ):
            self.assertEqual(detect_os_language(), "de")

    def test_unknown_language_falls_back(self):
        """Test unknown locales fall back to English."""
        from msgcatalog.catalog.detector import detect_os_language

        with patch.dict(os.environ, {"LANG": "xx_XX.UTF-8"}, clear=True):
            self.assertEqual(detect_os_language(), "en")

    def test_c_locale_returns_english(self):
        """Test that C and POSIX locales return English."""
        from msgcatalog.catalog.detector import detect_os_language

        for value in ("C", "POSIX", "C.UTF-8"):
            with patch.dict(os.environ, {"LANG": value}, clear=True):
                self.assertEqual(detect_os_language(), "en", value)

    def test_os_locale_info(self):
        """Test the debugging summary of locale variables."""
        from msgcatalog.catalog.detector import get_os_locale_info

        with patch.dict(os.environ, {"LANG": "de_DE.UTF-8"}, clear=True):
            info = get_os_locale_info()

        self.assertEqual(info["LANG"], "de_DE.UTF-8")
        self.assertIsNone(info["LC_ALL"])
        self.assertEqual(info["normalized"], "de_DE")
        self.assertEqual(info["detected_language"], "de")


if __name__ == "__main__":
    unittest.main()

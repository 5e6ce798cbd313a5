"""Tests for settings loading."""

import pytest

from task_importer.config.loader import (
    ConfigLoader,
    Settings,
    load_settings,
    substitute_env_vars,
)
from task_importer.core.models import DedupeStrategy


class TestSubstituteEnvVars:
    """Tests for substitute_env_vars function."""

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("TI_TEST_VAR", "value")
        assert substitute_env_vars("a: ${TI_TEST_VAR}") == "a: value"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("TI_TEST_MISSING", raising=False)
        assert substitute_env_vars("a: ${TI_TEST_MISSING:-fallback}") == "a: fallback"

    def test_missing_without_default(self, monkeypatch):
        monkeypatch.delenv("TI_TEST_MISSING", raising=False)
        assert substitute_env_vars("a: ${TI_TEST_MISSING}") == "a: "


class TestSettings:
    """Tests for Settings."""

    def test_from_dict_defaults(self):
        """Test default values when creating from empty dict."""
        settings = Settings.from_dict({})

        assert settings.sheets_host == "docs.google.com"
        assert settings.fetch_timeout == 30.0
        assert settings.max_retries == 3
        assert settings.dedupe is DedupeStrategy.ENABLED

    def test_from_dict_values(self):
        settings = Settings.from_dict(
            {"dedupe": "Disabled", "fetch_timeout": "12.5", "max_retries": 2, "log_level": "debug"}
        )

        assert settings.dedupe is DedupeStrategy.DISABLED
        assert settings.fetch_timeout == 12.5
        assert settings.max_retries == 2
        assert settings.log_level == "DEBUG"

    def test_invalid_dedupe(self):
        with pytest.raises(ValueError, match="dedupe"):
            Settings.from_dict({"dedupe": "sometimes"})

    def test_invalid_timeout(self):
        with pytest.raises(ValueError, match="fetch_timeout"):
            Settings.from_dict({"fetch_timeout": 0})

    def test_invalid_retries(self):
        with pytest.raises(ValueError, match="max_retries"):
            Settings.from_dict({"max_retries": 0})


class TestConfigLoader:
    """Tests for configuration loading."""

    def test_load_bundled_settings(self, monkeypatch):
        """Test loading the packaged settings.yml."""
        monkeypatch.delenv("TASK_IMPORTER_DEDUPE", raising=False)
        monkeypatch.delenv("TASK_IMPORTER_FETCH_TIMEOUT", raising=False)

        settings = ConfigLoader().load_settings()

        assert settings.dedupe is DedupeStrategy.ENABLED
        assert settings.fetch_timeout == 30.0
        assert "{sheet_id}" in settings.export_url_template

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TASK_IMPORTER_DEDUPE", "disabled")
        monkeypatch.setenv("TASK_IMPORTER_DB", "/tmp/other.sqlite3")

        settings = load_settings()

        assert settings.dedupe is DedupeStrategy.DISABLED
        assert settings.db_path == "/tmp/other.sqlite3"

    def test_custom_file(self, tmp_path):
        config = tmp_path / "custom.yml"
        config.write_text("dedupe: disabled\nmax_retries: 5\n", encoding="utf-8")

        settings = load_settings(str(config))

        assert settings.dedupe is DedupeStrategy.DISABLED
        assert settings.max_retries == 5
        assert settings.sheets_host == "docs.google.com"

    def test_empty_file(self, tmp_path):
        (tmp_path / "empty.yml").write_text("", encoding="utf-8")
        assert ConfigLoader(str(tmp_path)).load_settings("empty.yml") == Settings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(str(tmp_path)).load_settings("nope.yml")

"""Tests for service settings."""

from pathlib import Path

import pytest

from nexius.core.config import DEFAULT_CORS_ORIGINS, DEFAULT_DB_PATH, Settings


class TestSettingsFromEnv:
    """Test Settings.from_env."""

    def test_defaults(self):
        """Empty environment yields defaults."""
        settings = Settings.from_env({})

        assert settings.api_key == ""
        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.payment_code_ttl_minutes == 30
        assert settings.payment_code_length == 6
        assert settings.log_level == "INFO"
        assert settings.cors_origins == DEFAULT_CORS_ORIGINS

    def test_reads_variables(self):
        """Every variable is honored."""
        settings = Settings.from_env(
            {
                "NEXIUS_API_KEY": "k",
                "NEXIUS_DB_PATH": "/tmp/x.db",
                "NEXIUS_PAYMENT_CODE_TTL_MINUTES": "15",
                "NEXIUS_PAYMENT_CODE_LENGTH": "8",
                "NEXIUS_LOG_LEVEL": "debug",
                "NEXIUS_CORS_ORIGINS": "https://a.pe, https://b.pe,",
            }
        )

        assert settings.api_key == "k"
        assert settings.db_path == Path("/tmp/x.db")
        assert settings.payment_code_ttl_minutes == 15
        assert settings.payment_code_length == 8
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ("https://a.pe", "https://b.pe")

    def test_blank_integer_uses_default(self):
        """Blank numeric variables fall back to defaults."""
        settings = Settings.from_env({"NEXIUS_PAYMENT_CODE_LENGTH": " "})
        assert settings.payment_code_length == 6

    def test_invalid_integer_names_variable(self):
        """Non-integer values raise with the variable name."""
        with pytest.raises(ValueError, match="NEXIUS_PAYMENT_CODE_TTL_MINUTES"):
            Settings.from_env({"NEXIUS_PAYMENT_CODE_TTL_MINUTES": "soon"})

    def test_reads_process_environment(self, monkeypatch):
        """Without a mapping, os.environ is used."""
        monkeypatch.setenv("NEXIUS_API_KEY", "from-env")
        assert Settings.from_env().api_key == "from-env"

"""
Unit tests for Settings and configuration loading.

Usage:
    pytest tests/unit/config/test_settings.py
"""

import pytest
from pydantic import ValidationError

from troqueur.config.settings import (
    Settings,
    get_settings,
    load_config,
    override_settings,
    reset_settings,
)


class TestSettings:
    """Unit tests for Settings."""

    def test_defaults(self):
        """Test default program configuration."""
        settings = Settings()

        assert settings.STATE_SEED == "state"
        assert settings.AUTHORITY_SEED == "authority"
        assert settings.VAULT_SEED == "vault"
        assert settings.ALLOW_SEED_REUSE is False
        assert str(settings.program_id) == settings.ESCROW_PROGRAM_ID

    def test_log_level_normalized(self):
        """Test log level is upper-cased."""
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_level(self):
        """Test unknown log level is rejected."""
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="LOUD")

    def test_invalid_program_id(self):
        """Test program id must be a base58 public key."""
        with pytest.raises(ValidationError):
            Settings(ESCROW_PROGRAM_ID="not-a-key")

    def test_seed_label_length(self):
        """Test seed labels fit in one seed."""
        with pytest.raises(ValidationError):
            Settings(STATE_SEED="x" * 33)

    def test_load_test_environment(self, monkeypatch):
        """Test test.yaml overrides default.yaml."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = load_config(env="test")

        assert settings.ENV == "test"
        assert settings.LOG_LEVEL == "WARNING"

    def test_env_var_wins_over_yaml(self, monkeypatch):
        """Test environment variables take priority over YAML."""
        monkeypatch.setenv("ALLOW_SEED_REUSE", "true")

        settings = load_config(env="test")

        assert settings.ALLOW_SEED_REUSE is True

    def test_override_and_reset(self):
        """Test global settings helpers."""
        custom = Settings(APP_NAME="Custom")

        override_settings(custom)
        assert get_settings() is custom

        reset_settings()
        assert get_settings() is not custom
        reset_settings()

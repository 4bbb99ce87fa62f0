"""Tests for configuration module."""

import pytest
from pydantic import ValidationError


class TestSettings:
    """Tests for Settings class."""

    def test_settings_default_values(self, mock_env_vars):
        """Test default values are set correctly."""
        from flowtrace.config import Settings

        settings = Settings(_env_file=None)
        assert settings.max_tokens_per_batch == 800000
        assert settings.default_step_token_estimate == 1000
        assert settings.settle_delay_ms == 500
        assert settings.network_idle_timeout_ms == 30000
        assert settings.action_timeout_ms == 10000
        assert settings.capture_screenshots is True
        assert settings.wait_for_stability is True
        assert settings.focus_trap_enabled is True
        assert settings.focus_trap_max_tabs == 15
        assert settings.focus_trap_keyboard_max_tabs == 8
        assert settings.log_level == "INFO"
        assert settings.log_json is False

    def test_settings_loads_from_env(self, mock_env_vars, monkeypatch):
        """Test that settings loads from environment variables."""
        from flowtrace.config import Settings

        monkeypatch.setenv("FLOWTRACE_MAX_TOKENS_PER_BATCH", "200000")
        monkeypatch.setenv("FLOWTRACE_CAPTURE_SCREENSHOTS", "false")

        settings = Settings(_env_file=None)
        assert settings.max_tokens_per_batch == 200000
        assert settings.capture_screenshots is False

    def test_unprefixed_env_ignored(self, mock_env_vars, monkeypatch):
        """Test variables without the prefix are ignored."""
        from flowtrace.config import Settings

        monkeypatch.setenv("MAX_TOKENS_PER_BATCH", "5")

        assert Settings(_env_file=None).max_tokens_per_batch == 800000

    @pytest.mark.parametrize("field", [
        "max_tokens_per_batch",
        "focus_trap_max_tabs",
        "focus_trap_keyboard_max_tabs",
    ])
    def test_non_positive_limits_rejected(self, mock_env_vars, field):
        """Test limits must be positive."""
        from flowtrace.config import Settings

        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_reads_environment(self, mock_env_vars, monkeypatch):
        """Test each call reflects the current environment."""
        from flowtrace.config import get_settings

        monkeypatch.setenv("FLOWTRACE_SETTLE_DELAY_MS", "250")
        assert get_settings().settle_delay_ms == 250

        monkeypatch.setenv("FLOWTRACE_SETTLE_DELAY_MS", "0")
        assert get_settings().settle_delay_ms == 0

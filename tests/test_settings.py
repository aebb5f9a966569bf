"""
Tests for settings loading and validation.
"""

import pytest

from wext_interceptor.config.settings import FilterHeaderNames, Settings
from wext_interceptor.utils.exceptions import ConfigurationError


class TestSettings:
    """Environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for var in ("LOG_LEVEL", "LOG_FORMAT", "WEXT_TRIM_ACTIONS", "SERVER_PORT"):
            monkeypatch.delenv(var, raising=False)

        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert settings.trim_action_entries is True
        assert settings.server_port == 8080
        assert settings.filter_headers == FilterHeaderNames()

    def test_from_env_coerces_types(self, monkeypatch):
        monkeypatch.setenv("WEXT_TRIM_ACTIONS", "no")
        monkeypatch.setenv("SERVER_PORT", "9090")
        monkeypatch.setenv("LOG_FORMAT", "JSON")
        monkeypatch.setenv("WEXT_EVENT_HEADER", "X-Events")

        settings = Settings.from_env()

        assert settings.trim_action_entries is False
        assert settings.server_port == 9090
        assert settings.log_format == "json"
        assert settings.filter_headers.events == "X-Events"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("WEXT_TRIGGER_NAME", "from-env")
        assert Settings.from_env(trigger_name="explicit").trigger_name == "explicit"

    def test_invalid_port(self, monkeypatch):
        monkeypatch.setenv("SERVER_PORT", "eighty")
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env()
        assert exc_info.value.details["config_key"] == "server_port"

    @pytest.mark.parametrize("overrides", [
        {"log_level": "verbose"},
        {"log_format": "xml"},
        {"server_port": 70000},
        {"repository_header": "  "},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            Settings(**overrides)

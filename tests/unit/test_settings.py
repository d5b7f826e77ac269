"""Unit tests for gate settings.

This module tests GateSettings defaults, normalization validators, and
plugin-config/environment precedence.
"""

import math

import pytest
from pydantic import ValidationError

from agent_control_gate.platform.constants import USER_AGENT
from agent_control_gate.platform.settings import DEFAULT_AGENT_NAME, GateSettings


class TestGateSettingsDefaults:
    """Tests for default values."""

    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = GateSettings()
        assert settings.enabled is True
        assert settings.server_url is None
        assert settings.api_key is None
        assert settings.agent_name == DEFAULT_AGENT_NAME
        assert settings.agent_id is None
        assert settings.timeout_ms is None
        assert settings.user_agent == USER_AGENT
        assert settings.fail_closed is False
        assert settings.log_level == "INFO"

    def test_should_install_requires_server_url(self):
        """Gate is only installed when enabled with a server URL."""
        assert GateSettings().should_install is False
        assert GateSettings(server_url="http://cp").should_install is True
        assert GateSettings(server_url="http://cp", enabled=False).should_install is False


class TestGateSettingsValidators:
    """Tests for field normalization."""

    def test_strings_are_trimmed(self):
        """Surrounding whitespace is removed."""
        settings = GateSettings(server_url="  http://cp  ", agent_name="  my-agent ")
        assert settings.server_url == "http://cp"
        assert settings.agent_name == "my-agent"

    def test_blank_strings_become_unset(self):
        """Blank optional strings are treated as missing."""
        settings = GateSettings(server_url="   ", api_key="", agent_id=" ")
        assert settings.server_url is None
        assert settings.api_key is None
        assert settings.agent_id is None

    def test_blank_agent_name_uses_default(self):
        """A blank agent name falls back to the default."""
        assert GateSettings(agent_name="  ").agent_name == DEFAULT_AGENT_NAME

    def test_non_string_optional_values_are_ignored(self):
        """Non-string values for string options are treated as missing."""
        assert GateSettings(server_url=123).server_url is None

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (2500, 2500),
            (2500.9, 2500),
            ("5000", 5000),
            (0, None),
            (-10, None),
            (True, None),
            ("soon", None),
            (math.nan, None),
            (math.inf, None),
            ([1000], None),
        ],
    )
    def test_timeout_ms_accepts_only_positive_numbers(self, raw, expected):
        """Non-conforming timeouts are ignored instead of rejected."""
        assert GateSettings(timeout_ms=raw).timeout_ms == expected

    def test_timeout_seconds(self):
        """timeout_seconds converts milliseconds."""
        assert GateSettings(timeout_ms=1500).timeout_seconds == 1.5
        assert GateSettings().timeout_seconds is None

    def test_log_level_validation(self):
        """Log levels are upper-cased and validated."""
        assert GateSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            GateSettings(log_level="LOUD")


class TestFromPluginConfig:
    """Tests for building settings from a host plugin config."""

    def test_camel_case_keys(self):
        """camelCase plugin keys map onto settings fields."""
        settings = GateSettings.from_plugin_config(
            {
                "serverUrl": "http://cp",
                "apiKey": "secret",
                "agentName": "bot",
                "agentId": "abc",
                "agentVersion": "2.0",
                "timeoutMs": 3000,
                "userAgent": "custom/1.0",
                "failClosed": True,
            }
        )
        assert settings.server_url == "http://cp"
        assert settings.api_key == "secret"
        assert settings.agent_name == "bot"
        assert settings.agent_id == "abc"
        assert settings.agent_version == "2.0"
        assert settings.timeout_ms == 3000
        assert settings.user_agent == "custom/1.0"
        assert settings.fail_closed is True

    def test_unknown_keys_are_ignored(self):
        """Keys outside the configuration surface do not fail validation."""
        settings = GateSettings.from_plugin_config({"serverUrl": "http://cp", "somethingElse": 1})
        assert settings.server_url == "http://cp"

    def test_missing_config(self):
        """A missing or non-mapping config yields defaults."""
        assert GateSettings.from_plugin_config(None).server_url is None
        assert GateSettings.from_plugin_config("nope").enabled is True  # type: ignore[arg-type]

    def test_environment_fallback(self, monkeypatch):
        """AGENT_CONTROL_* variables fill values the plugin config leaves out."""
        monkeypatch.setenv("AGENT_CONTROL_SERVER_URL", "http://from-env")
        monkeypatch.setenv("AGENT_CONTROL_API_KEY", "env-key")
        settings = GateSettings.from_plugin_config({})
        assert settings.server_url == "http://from-env"
        assert settings.api_key == "env-key"

    def test_plugin_config_wins_over_environment(self, monkeypatch):
        """Explicit plugin values take precedence."""
        monkeypatch.setenv("AGENT_CONTROL_SERVER_URL", "http://from-env")
        settings = GateSettings.from_plugin_config({"serverUrl": "http://from-plugin"})
        assert settings.server_url == "http://from-plugin"

    def test_null_values_do_not_shadow_environment(self, monkeypatch):
        """A null plugin value still lets the environment apply."""
        monkeypatch.setenv("AGENT_CONTROL_SERVER_URL", "http://from-env")
        settings = GateSettings.from_plugin_config({"serverUrl": None})
        assert settings.server_url == "http://from-env"

"""Gate settings and configuration.

This module provides the Pydantic settings class for the gate, loaded from
the host's plugin configuration with environment variable fallbacks.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any

import pydantic_settings
from pydantic import Field, field_validator
from pydantic.alias_generators import to_snake

from agent_control_gate.platform.constants import USER_AGENT

DEFAULT_AGENT_NAME = "openclaw-agent"


class GateSettings(pydantic_settings.BaseSettings):
    """Configuration surface recognized by the gate.

    Values come from the host plugin config first and fall back to
    ``AGENT_CONTROL_*`` environment variables (e.g. AGENT_CONTROL_SERVER_URL).

    Attributes:
        enabled: When False the gate installs no behavior at all
        server_url: Base URL of the control plane; the gate is disabled without it
        api_key: Optional API key sent with every control-plane request
        agent_name: Base display name for registered agents
        agent_id: Optional pre-assigned canonical identifier (must be a UUID)
        agent_version: Optional version string sent on registration
        timeout_ms: Per-request timeout; non-positive or non-numeric values are ignored
        user_agent: User-Agent header for control-plane requests
        fail_closed: Block tool calls when the control plane is unreachable
        log_level: Logging level for configure_logging
        log_json: Override log format: True=JSON, False=console, None=auto
    """

    model_config = pydantic_settings.SettingsConfigDict(env_prefix="AGENT_CONTROL_", extra="ignore")

    enabled: bool = Field(True)
    server_url: str | None = Field(None)
    api_key: str | None = Field(None)
    agent_name: str = Field(DEFAULT_AGENT_NAME)
    agent_id: str | None = Field(None)
    agent_version: str | None = Field(None)
    timeout_ms: int | None = Field(None)
    user_agent: str = Field(USER_AGENT)
    fail_closed: bool = Field(False)
    log_level: str = Field("INFO")
    log_json: bool | None = Field(None)

    @field_validator("server_url", "api_key", "agent_id", "agent_version", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if not isinstance(v, str):
            return None
        v = v.strip()
        return v or None

    @field_validator("agent_name", "user_agent", mode="before")
    @classmethod
    def _blank_to_default(cls, v, info):
        if isinstance(v, str) and v.strip():
            return v.strip()
        return cls.model_fields[info.field_name].default

    @field_validator("timeout_ms", mode="before")
    @classmethod
    def _positive_int_or_none(cls, v):
        if isinstance(v, str):
            # Environment values arrive as strings
            try:
                v = float(v.strip())
            except ValueError:
                return None
        if isinstance(v, bool) or not isinstance(v, int | float):
            return None
        if not math.isfinite(v) or v <= 0:
            return None
        return math.floor(v)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v):
        v_upper = v.upper()
        if v_upper not in logging._nameToLevel:
            raise ValueError(f'invalid value "{v}"')
        return v_upper

    @classmethod
    def from_plugin_config(cls, raw: Mapping[str, Any] | None) -> "GateSettings":
        """Build settings from a host plugin config with camelCase keys."""
        if not isinstance(raw, Mapping):
            raw = {}
        values = {to_snake(str(key)): value for key, value in raw.items()}
        # Unset keys must not shadow environment fallbacks.
        return cls(**{key: value for key, value in values.items() if value is not None})

    @property
    def timeout_seconds(self) -> float | None:
        return self.timeout_ms / 1000 if self.timeout_ms is not None else None

    @property
    def should_install(self) -> bool:
        return bool(self.enabled and self.server_url)

"""Shared test fixtures.

This module provides:
- Isolation from AGENT_CONTROL_* environment variables
- A fake host plugin API that records registered hooks
- A mocked control-plane client
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from agent_control_gate.gate.identity import IdentityResolver
from agent_control_gate.gate.sync import SyncCoordinator
from agent_control_gate.platform.clients.control_plane.models import EvaluationResponse, InitAgentResponse

SERVER_URL = "http://control-plane.test"
CONFIGURED_AGENT_ID = "123e4567-e89b-42d3-a456-426614174000"


@pytest.fixture(autouse=True)
def clean_agent_control_env(monkeypatch):
    """Keep host environment variables out of settings under test."""
    for name in [
        "AGENT_CONTROL_ENABLED",
        "AGENT_CONTROL_SERVER_URL",
        "AGENT_CONTROL_API_KEY",
        "AGENT_CONTROL_AGENT_NAME",
        "AGENT_CONTROL_AGENT_ID",
        "AGENT_CONTROL_AGENT_VERSION",
        "AGENT_CONTROL_TIMEOUT_MS",
        "AGENT_CONTROL_USER_AGENT",
        "AGENT_CONTROL_FAIL_CLOSED",
        "AGENT_CONTROL_LOG_LEVEL",
        "AGENT_CONTROL_LOG_JSON",
    ]:
        monkeypatch.delenv(name, raising=False)


@dataclass
class HookRegistration:
    handler: Any
    priority: int | None = None


@dataclass
class FakePluginApi:
    """Records hooks the way the host runtime would."""

    plugin_config: Mapping[str, Any] | None = None
    id: str = "agent-control"
    hooks: dict[str, HookRegistration] = field(default_factory=dict)

    def on(self, event: str, handler, *, priority: int | None = None) -> None:
        self.hooks[event] = HookRegistration(handler=handler, priority=priority)


@pytest.fixture
def make_api():
    def _make(**plugin_config: Any) -> FakePluginApi:
        return FakePluginApi(plugin_config=plugin_config)

    return _make


@pytest.fixture
def mock_client():
    """Control-plane client whose calls succeed and report every call safe."""
    client = Mock()
    client.init_agent = AsyncMock(return_value=InitAgentResponse(created=True))
    client.evaluate = AsyncMock(return_value=EvaluationResponse(is_safe=True))
    return client


@pytest.fixture
def coordinator(mock_client) -> SyncCoordinator:
    return SyncCoordinator(
        mock_client,
        IdentityResolver("openclaw-agent"),
        agent_version="1.2.3",
        plugin_id="agent-control",
    )

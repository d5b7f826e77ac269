"""Host plugin registration.

Wires the gate into a host runtime that dispatches ``after_tools_resolved``
and ``before_tool_call`` lifecycle events. Event payloads are the host's
plain mappings with camelCase keys; the ``before_tool_call`` handler returns
None to allow a call or ``{"block": True, "blockReason": ...}`` to deny it.
"""

import json
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from agent_control_gate.gate.identity import IdentityResolver, resolve_source_agent_id
from agent_control_gate.gate.policy import PolicyGate, Verdict
from agent_control_gate.gate.sync import SyncCoordinator
from agent_control_gate.platform.clients.control_plane.client import ControlPlaneClient
from agent_control_gate.platform.clients.control_plane.config import (
    DEFAULT_TIMEOUT_SECONDS,
    ControlPlaneClientConfig,
)
from agent_control_gate.platform.constants import PLUGIN_ID
from agent_control_gate.platform.observability import get_logger, session_key_ctx
from agent_control_gate.platform.settings import GateSettings

logger = get_logger(__name__)

AFTER_TOOLS_RESOLVED = "after_tools_resolved"
BEFORE_TOOL_CALL = "before_tool_call"
BEFORE_TOOL_CALL_PRIORITY = 100
MAX_LOGGED_ARGS_LENGTH = 1000

HookHandler = Callable[[Mapping[str, Any], Mapping[str, Any]], Awaitable[Any]]


class PluginApi(Protocol):
    """The slice of the host plugin API the gate depends on."""

    id: str
    plugin_config: Mapping[str, Any] | None

    def on(self, event: str, handler: HookHandler, *, priority: int | None = None) -> None: ...


def format_tool_args_for_log(params: Any) -> str:
    try:
        encoded = json.dumps(params, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return "[unserializable]"
    return encoded[:MAX_LOGGED_ARGS_LENGTH]


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class AgentControlPlugin:
    """Gate instance bound to one host plugin registration."""

    def __init__(
        self,
        settings: GateSettings,
        *,
        plugin_id: str = PLUGIN_ID,
        httpx_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self.client = ControlPlaneClient(
            ControlPlaneClientConfig(
                base_url=settings.server_url or "",
                api_key=settings.api_key,
                timeout_seconds=settings.timeout_seconds or DEFAULT_TIMEOUT_SECONDS,
                user_agent=settings.user_agent,
            ),
            httpx_client=httpx_client,
        )
        self.resolver = IdentityResolver(settings.agent_name, settings.agent_id)
        self.coordinator = SyncCoordinator(
            self.client,
            self.resolver,
            agent_version=settings.agent_version,
            plugin_id=plugin_id,
        )
        self.gate = PolicyGate(self.client, self.coordinator, fail_closed=settings.fail_closed)

    def install(self, api: PluginApi) -> None:
        api.on(AFTER_TOOLS_RESOLVED, self.on_tools_resolved)
        api.on(BEFORE_TOOL_CALL, self.on_before_tool_call, priority=BEFORE_TOOL_CALL_PRIORITY)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def on_tools_resolved(self, event: Mapping[str, Any], ctx: Mapping[str, Any]) -> None:
        """Recompute the agent's inventory and push it on a best-effort basis."""
        source_agent_id = resolve_source_agent_id(ctx.get("agentId"))
        record = self.coordinator.record_for(source_agent_id)
        tools = event.get("tools")
        self.coordinator.update_inventory(record, tools if isinstance(tools, list | tuple) else ())

        try:
            await self.coordinator.ensure_synced(record)
        except Exception:
            logger.warning("agent-control: initAgent failed", agent=source_agent_id, exc_info=True)

    async def on_before_tool_call(
        self, event: Mapping[str, Any], ctx: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        source_agent_id = resolve_source_agent_id(ctx.get("agentId"))
        record = self.coordinator.record_for(source_agent_id)
        tool_name = str(event.get("toolName") or "")
        params = event.get("params")
        session_key = _optional_str(ctx.get("sessionKey"))

        token = session_key_ctx.set(session_key)
        try:
            logger.info(
                "agent-control: before_tool_call entered",
                agent=source_agent_id,
                tool=tool_name,
                args=format_tool_args_for_log(params),
            )
            verdict: Verdict = await self.gate.check(
                record, tool_name, params, session_key=session_key
            )
        finally:
            session_key_ctx.reset(token)
        return verdict.to_hook_result()


def register(api: PluginApi, *, httpx_client: httpx.AsyncClient | None = None) -> AgentControlPlugin | None:
    """Install the gate on a host plugin API.

    Returns:
        The installed plugin, or None when the gate is disabled or misconfigured
    """
    try:
        settings = GateSettings.from_plugin_config(getattr(api, "plugin_config", None))
    except ValidationError as e:
        logger.warning("agent-control: disabled because the plugin config is invalid", error=str(e))
        return None

    if not settings.enabled:
        return None
    if not settings.should_install:
        logger.warning(
            "agent-control: disabled because serverUrl is not configured "
            "(plugins.entries.agent-control.serverUrl)"
        )
        return None

    plugin = AgentControlPlugin(
        settings,
        plugin_id=getattr(api, "id", None) or PLUGIN_ID,
        httpx_client=httpx_client,
    )
    plugin.install(api)
    return plugin

"""Operator CLI for inspecting and exercising the gate."""

import asyncio
import json
import sys

import click

from .gate.identity import IdentityResolver, resolve_source_agent_id
from .gate.plugin import AgentControlPlugin
from .platform.observability import configure_logging
from .platform.settings import GateSettings


@click.group()
@click.pass_context
def main(ctx):
    """Agent control gate (settings are read from AGENT_CONTROL_* variables)."""
    settings = GateSettings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    ctx.obj = settings


@main.command()
@click.argument("source_agent_id", required=False)
@click.pass_obj
def identity(settings: GateSettings, source_agent_id=None):
    """Print the identifier and name registered for SOURCE_AGENT_ID."""
    resolver = IdentityResolver(settings.agent_name, settings.agent_id)
    resolved = resolver.resolve(resolve_source_agent_id(source_agent_id))
    click.echo(f"agent_uuid={resolved.agent_uuid}")
    click.echo(f"agent_name={resolved.agent_name}")


@main.command()
@click.argument("tool_name")
@click.argument("params_json", required=False, default="{}")
@click.option("--agent", "agent_id", default=None, help="Logical agent id (default: 'default').")
@click.option("--session", "session_key", default=None, help="Host session key.")
@click.option(
    "--tools",
    "tools_json",
    default=None,
    help="JSON list of tool descriptors to sync before evaluating.",
)
@click.pass_obj
def evaluate(settings: GateSettings, tool_name, params_json, agent_id, session_key, tools_json):
    """Sync the agent and evaluate one TOOL_NAME call. Exits 1 when blocked."""
    if not settings.server_url:
        raise click.UsageError("AGENT_CONTROL_SERVER_URL is not set")
    try:
        params = json.loads(params_json)
        tools = json.loads(tools_json) if tools_json else [{"name": tool_name}]
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}") from e

    result = asyncio.run(_evaluate(settings, tool_name, params, agent_id, session_key, tools))
    if result is None:
        click.echo("allowed")
        return
    click.echo(f"blocked: {result['blockReason']}")
    sys.exit(1)


async def _evaluate(settings, tool_name, params, agent_id, session_key, tools):
    plugin = AgentControlPlugin(settings)
    try:
        ctx = {"agentId": agent_id, "sessionKey": session_key}
        await plugin.on_tools_resolved({"tools": tools}, ctx)
        return await plugin.on_before_tool_call({"toolName": tool_name, "params": params}, ctx)
    finally:
        await plugin.aclose()


if __name__ == "__main__":
    sys.exit(main())

"""agent-control-gate - Admission-control gate that syncs agent tool inventories and evaluates tool calls."""

from .gate.plugin import AgentControlPlugin, register

__all__ = ["AgentControlPlugin", "register"]

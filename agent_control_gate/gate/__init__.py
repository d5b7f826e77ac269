"""Agent synchronization and policy gate."""

from agent_control_gate.gate.identity import AgentIdentity, IdentityResolver, derive_agent_uuid, is_agent_uuid
from agent_control_gate.gate.inventory import ToolInventory, build_tool_steps, fingerprint_steps
from agent_control_gate.gate.policy import PolicyGate, Verdict, build_block_reason
from agent_control_gate.gate.sync import AgentRecord, SyncCoordinator, SyncState

__all__ = [
    "AgentIdentity",
    "AgentRecord",
    "IdentityResolver",
    "PolicyGate",
    "SyncCoordinator",
    "SyncState",
    "ToolInventory",
    "Verdict",
    "build_block_reason",
    "build_tool_steps",
    "derive_agent_uuid",
    "fingerprint_steps",
    "is_agent_uuid",
]

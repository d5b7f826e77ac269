"""Per-agent synchronization of tool inventories with the control plane.

Each logical agent gets one ``AgentRecord`` for the life of the process.
``SyncCoordinator`` is the only writer of a record's inventory and sync
state. It keeps at most one registration push in flight per agent: callers
arriving while a push runs attach to it, and every caller keeps going until
the last pushed fingerprint matches the latest inventory.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from agent_control_gate.gate.identity import AgentIdentity, IdentityResolver
from agent_control_gate.gate.inventory import ToolInventory
from agent_control_gate.platform.clients.control_plane.client import ControlPlaneClient
from agent_control_gate.platform.clients.control_plane.models import AgentDescriptor, InitAgentRequest
from agent_control_gate.platform.constants import PLUGIN_ID
from agent_control_gate.platform.observability import SYNC_PUSHES, get_logger

logger = get_logger(__name__)

AGENT_SOURCE = "openclaw"


def _retrieve_push_exception(task: asyncio.Task) -> None:
    # Failures are counted in _push; a push whose callers were all cancelled
    # must not surface as "Task exception was never retrieved".
    if not task.cancelled():
        task.exception()


class SyncState(StrEnum):
    """Synchronization state of a single agent record."""

    IDLE = "idle"
    PUSHING = "pushing"
    FAILED = "failed"


@dataclass(eq=False)
class AgentRecord:
    """Mutable state for one logical agent.

    Attributes:
        identity: Resolved control-plane identity
        inventory: Latest tool inventory reported by the host
        last_pushed_fingerprint: Fingerprint of the last successful push, None if never pushed
        state: Current synchronization state
        push_target: Fingerprint targeted by the in-flight push, if any
    """

    identity: AgentIdentity
    inventory: ToolInventory = field(default_factory=ToolInventory.empty)
    last_pushed_fingerprint: str | None = None
    state: SyncState = SyncState.IDLE
    push_target: str | None = None
    _in_flight: asyncio.Task | None = field(default=None, repr=False)

    @property
    def source_agent_id(self) -> str:
        return self.identity.source_agent_id

    @property
    def agent_uuid(self) -> str:
        return self.identity.agent_uuid

    @property
    def agent_name(self) -> str:
        return self.identity.agent_name

    @property
    def fingerprint(self) -> str:
        return self.inventory.fingerprint

    @property
    def is_synced(self) -> bool:
        return self.last_pushed_fingerprint == self.inventory.fingerprint

    @property
    def is_pushing(self) -> bool:
        return self._in_flight is not None


class SyncCoordinator:
    """Owns agent records and pushes their inventories upstream."""

    def __init__(
        self,
        client: ControlPlaneClient,
        resolver: IdentityResolver,
        *,
        agent_version: str | None = None,
        plugin_id: str = PLUGIN_ID,
    ):
        self._client = client
        self._resolver = resolver
        self._agent_version = agent_version
        self._plugin_id = plugin_id
        # Never evicted: the agent population is bounded by the host's configuration.
        self._records: dict[str, AgentRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def get(self, source_agent_id: str) -> AgentRecord | None:
        return self._records.get(source_agent_id)

    def record_for(self, source_agent_id: str) -> AgentRecord:
        """Return the record for a logical agent, creating it on first use."""
        record = self._records.get(source_agent_id)
        if record is None:
            record = AgentRecord(identity=self._resolver.resolve(source_agent_id))
            self._records[source_agent_id] = record
        return record

    def update_inventory(self, record: AgentRecord, tools: Iterable[Any]) -> ToolInventory:
        """Replace the record's inventory with one built from raw tool descriptors."""
        record.inventory = ToolInventory.from_descriptors(tools)
        return record.inventory

    async def ensure_synced(self, record: AgentRecord) -> None:
        """Push the record's latest inventory unless the control plane already has it.

        Raises:
            Exception: Whatever the registration push raised; the record stays
                stale so the next call retries.
        """
        while True:
            in_flight = record._in_flight
            if in_flight is None:
                if record.is_synced:
                    return
                in_flight = asyncio.create_task(self._push(record, record.inventory))
                in_flight.add_done_callback(_retrieve_push_exception)
                record._in_flight = in_flight
                record.state = SyncState.PUSHING
                record.push_target = record.inventory.fingerprint
            # A cancelled caller must not cancel the push others are waiting on.
            await asyncio.shield(in_flight)

    async def _push(self, record: AgentRecord, target: ToolInventory) -> None:
        try:
            await self._client.init_agent(self._build_registration(record, target))
        except Exception:
            record.state = SyncState.FAILED
            SYNC_PUSHES.labels(outcome="failure").inc()
            raise
        else:
            record.last_pushed_fingerprint = target.fingerprint
            record.state = SyncState.IDLE
            SYNC_PUSHES.labels(outcome="success").inc()
            logger.info(
                "agent-control: agent synced",
                agent=record.source_agent_id,
                agent_uuid=record.agent_uuid,
                steps=len(target),
            )
        finally:
            record._in_flight = None
            record.push_target = None

    def _build_registration(self, record: AgentRecord, target: ToolInventory) -> InitAgentRequest:
        return InitAgentRequest(
            agent=AgentDescriptor(
                agent_id=record.agent_uuid,
                agent_name=record.agent_name,
                agent_version=self._agent_version,
                agent_metadata={
                    "source": AGENT_SOURCE,
                    "openclawAgentId": record.source_agent_id,
                    "pluginId": self._plugin_id,
                },
            ),
            steps=list(target.steps),
        )
